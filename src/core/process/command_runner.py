import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from core.logging.logger import get_logger

# shell 관례: command not found
MISSING_EXECUTABLE_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def diagnostic(self, limit: int = 500) -> str:
        text = (self.stderr or self.stdout).strip()
        return text[-limit:] if len(text) > limit else text


class CommandRunner:
    """
    Spawns external tools (git, npx, npm ...).
    Never raises for a non-zero exit; callers decide what a failure means.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self.env = dict(env) if env is not None else None
        self.logger = get_logger(__name__)

    async def run(
        self,
        command: Sequence[str],
        cwd: Optional[Union[str, Path]] = None,
    ) -> CommandResult:
        self.logger.debug(f"$ {command[0]} ... (cwd={cwd})")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(cwd) if cwd is not None else None,
                env=self.env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            self.logger.warning(f"Executable not found: {command[0]}")
            return CommandResult(MISSING_EXECUTABLE_EXIT_CODE, "", str(e))

        stdout, stderr = await process.communicate()
        return CommandResult(
            exit_code=process.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
