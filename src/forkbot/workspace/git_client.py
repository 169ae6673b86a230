from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from core.logging.logger import get_logger
from core.process.command_runner import CommandResult, CommandRunner

PathLike = Union[str, Path]


class GitCommandError(Exception):
    def __init__(self, command: Sequence[str], result: CommandResult):
        self.command = list(command)
        self.result = result
        # remote URL에 token이 들어갈 수 있으므로 subcommand만 노출
        super().__init__(f"git {command[0]} failed ({result.exit_code}): {result.diagnostic()}")


class GitClient:
    """
    git CLI wrapper (CommandRunner 경유)
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner
        self.logger = get_logger(__name__)

    async def _git(self, args: Sequence[str], cwd: Optional[PathLike] = None, check: bool = True) -> CommandResult:
        result = await self.runner.run(["git", *args], cwd=cwd)
        if check and not result.ok:
            raise GitCommandError(args, result)
        return result

    async def clone(self, url: str, target: PathLike) -> None:
        await self._git(["clone", url, str(target)])

    async def configure_identity(self, cwd: PathLike, name: str, email: str) -> None:
        await self._git(["config", "user.name", name], cwd=cwd)
        await self._git(["config", "user.email", email], cwd=cwd)

    async def set_remote_url(self, cwd: PathLike, url: str, remote: str = "origin") -> None:
        await self._git(["remote", "set-url", remote, url], cwd=cwd)

    async def add_all(self, cwd: PathLike) -> None:
        await self._git(["add", "-A"], cwd=cwd)

    async def has_changes(self, cwd: PathLike) -> bool:
        result = await self._git(["status", "--porcelain"], cwd=cwd)
        return bool(result.stdout.strip())

    async def checkout_new_branch(self, cwd: PathLike, branch: str) -> None:
        await self._git(["checkout", "-b", branch], cwd=cwd)

    async def branch_exists(self, cwd: PathLike, branch: str, remote: str = "origin") -> bool:
        """local branch 또는 remote-tracking branch 존재 여부"""
        for ref in (f"refs/heads/{branch}", f"refs/remotes/{remote}/{branch}"):
            result = await self._git(["rev-parse", "--verify", "--quiet", ref], cwd=cwd, check=False)
            if result.ok:
                return True
        return False

    async def commit(self, cwd: PathLike, message: str) -> None:
        await self._git(["commit", "-m", message], cwd=cwd)

    async def push(self, cwd: PathLike, branch: str, remote: str = "origin") -> None:
        await self._git(["push", "-u", remote, branch], cwd=cwd)

    async def origin_head_branch(self, cwd: PathLike) -> Optional[str]:
        """
        refs/remotes/origin/HEAD → "main" / "master" / ...
        """
        result = await self._git(
            ["symbolic-ref", "--quiet", "--short", "refs/remotes/origin/HEAD"], cwd=cwd, check=False
        )
        head = result.stdout.strip()
        if result.ok and head.startswith("origin/"):
            return head[len("origin/"):]
        return None

    async def diff_name_status(self, cwd: PathLike, base: str = "HEAD~1", head: str = "HEAD") -> List[Tuple[str, str]]:
        """
        [("A", "Dockerfile"), ("M", "README.md"), ...]
        """
        result = await self._git(["diff", "--name-status", base, head], cwd=cwd)
        changes = []
        for line in result.stdout.splitlines():
            parts = line.strip().split("\t")
            if len(parts) < 2:
                continue
            # rename/copy: "R100\told\tnew" → 새 경로 사용
            changes.append((parts[0], parts[-1]))
        return changes

    async def diff_shortstat(self, cwd: PathLike, base: str = "HEAD~1", head: str = "HEAD") -> str:
        result = await self._git(["diff", "--shortstat", base, head], cwd=cwd, check=False)
        return result.stdout.strip() if result.ok else ""

