from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from forkbot.pipeline.context import PipelineContext, StageResult


class Stage(ABC):
    """
    Working directory를 변경하는 단위 작업.
    같은 디렉토리에 두 번 돌려도 추가 diff가 없어야 함 (idempotent)
    """

    name: str = "stage"

    @abstractmethod
    async def run(self, context: PipelineContext) -> StageResult:
        ...

    def ok(self, artifacts: Optional[List[str]] = None) -> StageResult:
        return StageResult(stage=self.name, success=True, artifacts=artifacts or [])

    def fail(self, error: str) -> StageResult:
        return StageResult(stage=self.name, success=False, error=error)


def write_if_missing(path: Path, content: str) -> bool:
    """
    없을 때만 생성. 생성했으면 True
    """
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return True
