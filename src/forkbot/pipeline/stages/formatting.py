import re
from pathlib import Path
from typing import Optional, Sequence

from forkbot.pipeline.context import PipelineContext, StageResult
from forkbot.pipeline.stages.base import Stage
from forkbot.pipeline.stages.templates import README, README_DOCKER_SECTION
from core.process.command_runner import CommandRunner

README_PATTERN = re.compile(r"^readme(\.md)?$", re.IGNORECASE)


class FormatCodeStage(Stage):
    """Runs the configured formatter (prettier by default) over the working copy."""

    name = "format_code"

    def __init__(self, runner: CommandRunner, command: Sequence[str]):
        self.runner = runner
        self.command = list(command)

    async def run(self, context: PipelineContext) -> StageResult:
        result = await self.runner.run(self.command, cwd=context.workspace_path)
        if not result.ok:
            return self.fail(f"{self.command[0]} exited with {result.exit_code}: {result.diagnostic()}")

        context.log_task(f"Formatted source files with `{' '.join(self.command[:3])}`")
        return self.ok()


def find_readme(repo_path: Path) -> Optional[Path]:
    for entry in sorted(repo_path.iterdir()):
        if entry.is_file() and README_PATTERN.match(entry.name):
            return entry
    return None


def normalize_markdown(content: str) -> str:
    # "#   Title" → "# Title"
    content = re.sub(r"^(#+)[ \t]+", r"\1 ", content, flags=re.MULTILINE)
    content = re.sub(r"\n{3,}", "\n\n", content)
    return content


class ReadmeStage(Stage):
    name = "readme"

    async def run(self, context: PipelineContext) -> StageResult:
        repo_path = context.workspace_path
        readme_path = find_readme(repo_path)
        created = False

        if readme_path is None:
            readme_path = repo_path / "README.md"
            readme_path.write_text(self._render(context), encoding="utf-8")
            created = True

        original = readme_path.read_text(encoding="utf-8", errors="replace")
        normalized = normalize_markdown(original)
        if normalized != original:
            readme_path.write_text(normalized, encoding="utf-8")

        if created:
            context.log_task("Created README.md with installation and usage sections")
        elif normalized != original:
            context.log_task(f"Normalized heading spacing in {readme_path.name}")
        else:
            return self.ok()
        return self.ok([readme_path.name])

    def _render(self, context: PipelineContext) -> str:
        candidate = context.candidate
        docker_section = ""
        if (context.workspace_path / "Dockerfile").exists():
            docker_section = README_DOCKER_SECTION.format(name=candidate.name.lower())

        return README.format(
            name=candidate.name,
            description=candidate.description or "No description provided.",
            clone_url=candidate.clone_url,
            docker_section=docker_section,
            license_line="This project is licensed under the MIT License.",
        )
