import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Set, Union

from forkbot.models.ledger_entry import LedgerEntry
from core.logging.logger import get_logger


class Ledger:
    """
    처리 완료된 repo 기록 (append-only JSON 파일)

    - 첫 접근 시 파일 전체를 메모리로 읽음
    - record() 마다 파일 전체를 다시 씀 (single process 가정, last writer wins)
    - 파일 없음 / 빈 파일 / 깨진 내용 → 빈 ledger로 취급
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = get_logger(__name__)
        self._entries: Optional[List[dict]] = None
        self._identifiers: Set[str] = set()

    def _load(self) -> List[dict]:
        if self._entries is not None:
            return self._entries

        self._entries = self._read_file()
        self._identifiers = {
            entry["full_name"]
            for entry in self._entries
            if isinstance(entry, dict) and isinstance(entry.get("full_name"), str) and entry["full_name"]
        }
        invalid = sum(
            1 for entry in self._entries
            if not (isinstance(entry, dict) and isinstance(entry.get("full_name"), str))
        )
        if invalid:
            self.logger.warning(f"Malformed ledger {self.path}: ignoring {invalid} entries without a full_name")
        self.logger.info(f"Ledger loaded: {len(self._identifiers)} processed repos ({self.path})")
        return self._entries

    def _read_file(self) -> List[dict]:
        if not self.path.exists():
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            self.logger.warning(f"Malformed ledger {self.path}: not UTF-8 ({e}). Starting with empty ledger")
            return []
        except OSError as e:
            self.logger.warning(f"Could not read ledger {self.path}: {e}. Starting with empty ledger")
            return []

        # 파일은 있지만 비어있음
        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.warning(f"Malformed ledger {self.path}: {e}. Starting with empty ledger")
            return []

        if not isinstance(data, list):
            self.logger.warning(
                f"Malformed ledger {self.path}: expected a list, got {type(data).__name__}. "
                f"Starting with empty ledger"
            )
            return []

        return data

    def has(self, identifier: str) -> bool:
        self._load()
        return identifier in self._identifiers

    def record(self, entry: LedgerEntry) -> None:
        entries = self._load()

        if entry.full_name in self._identifiers:
            self.logger.warning(f"[{entry.full_name}] already in ledger, appending duplicate entry")

        entries.append(entry.model_dump(mode="json"))
        self._identifiers.add(entry.full_name)
        self._write(entries)

    def entries(self) -> List[LedgerEntry]:
        result = []
        for raw in self._load():
            try:
                result.append(LedgerEntry.model_validate(raw))
            except ValueError:
                continue
        return result

    def _write(self, entries: List[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # temp 파일에 쓰고 rename → 중간에 죽어도 기존 파일은 온전함
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".ledger-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
