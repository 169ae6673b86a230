from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from forkbot.models.candidate import CandidateRepository


@dataclass(frozen=True)
class StageResult:
    stage: str
    success: bool
    artifacts: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class PipelineContext:
    """
    candidate 하나 처리 동안만 살아있는 상태
    (acquisition에서 생성 → publication 후 폐기)
    """

    workspace_path: Path
    candidate: CandidateRepository
    fork_full_name: str
    flags: Dict[str, bool] = field(default_factory=dict)
    task_log: List[str] = field(default_factory=list)
    reports: Dict[str, str] = field(default_factory=dict)
    results: List[StageResult] = field(default_factory=list)

    @property
    def failures(self) -> List[StageResult]:
        return [r for r in self.results if not r.success]

    def log_task(self, message: str) -> None:
        self.task_log.append(message)
