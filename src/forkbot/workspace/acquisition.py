import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from github import GithubException

from forkbot.models.candidate import CandidateRepository
from forkbot.sources.github.client import GitHubClient
from forkbot.workspace.git_client import GitClient, GitCommandError
from core.logging.logger import get_logger


class AcquisitionError(Exception):
    """fork / clone 실패 (해당 candidate는 terminal)"""


@dataclass(frozen=True)
class Workspace:
    path: Path
    fork_full_name: str


class AcquisitionStage:
    """
    candidate → fork → 깨끗한 디렉토리에 clone
    """

    def __init__(self, github: GitHubClient, git: GitClient, workspace_root: Union[str, Path]):
        self.github = github
        self.git = git
        self.workspace_root = Path(workspace_root)
        self.logger = get_logger(__name__)

    async def acquire(self, candidate: CandidateRepository) -> Workspace:
        full_name = candidate.full_name

        # 1) Fork
        self.logger.info(f"[{full_name}] 🔁 Forking...")
        try:
            fork = await asyncio.to_thread(self.github.create_fork, full_name)
        except GithubException as e:
            message = e.data.get("message", str(e)) if isinstance(e.data, dict) else str(e)
            raise AcquisitionError(f"Fork failed ({e.status}): {message}") from e
        except Exception as e:
            raise AcquisitionError(f"Fork failed: {e}") from e
        self.logger.info(f"[{full_name}] ✅ Fork ready: {fork.full_name}")

        # 2) 이전 run의 찌꺼기 제거
        target_dir = self.workspace_root / candidate.name
        self._remove_stale(target_dir, full_name)
        self.workspace_root.mkdir(parents=True, exist_ok=True)

        # 3) Clone
        self.logger.info(f"[{full_name}] 📥 Cloning: {fork.clone_url}")
        try:
            await self.git.clone(fork.clone_url, target_dir)
        except GitCommandError as e:
            raise AcquisitionError(f"Clone failed: {e}") from e
        self.logger.info(f"[{full_name}] ✅ Clone completed: {target_dir}")

        return Workspace(path=target_dir, fork_full_name=fork.full_name)

    def _remove_stale(self, target_dir: Path, full_name: str):
        if not target_dir.exists():
            return
        try:
            shutil.rmtree(target_dir)
        except OSError as e:
            raise AcquisitionError(f"Could not remove stale directory {target_dir}: {e}") from e
        self.logger.info(f"[{full_name}] 🧹 Old folder removed: {target_dir}")
