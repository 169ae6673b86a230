import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from forkbot.pipeline.context import PipelineContext, StageResult
from forkbot.pipeline.stages.base import Stage
from forkbot.pipeline.stages.templates import DEAD_CODE_SECTION, QUALITY_FALLBACK_REPORT, TESTS_FALLBACK
from core.llm.openai_client import OpenAIClient
from core.process.command_runner import MISSING_EXECUTABLE_EXIT_CODE, CommandRunner
from core.logging.logger import get_logger

CODE_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx")
SKIPPED_DIRS = {"node_modules", "dist", "build", "vendor", "coverage", ".git", "__tests__"}

REPORT_FILENAME = "code-review-report.md"
MAX_FILE_CHARS = 30_000
CHUNK_CHARS = 4_000

REVIEWER_SYSTEM_PROMPT = "You are a senior software engineer specializing in code review and maintainability."


def iter_code_files(root: Path, extensions: Iterable[str] = CODE_EXTENSIONS) -> List[Path]:
    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
        for filename in sorted(filenames):
            if filename.endswith(tuple(extensions)):
                files.append(Path(dirpath) / filename)
    return files


def is_probably_generated(path: Path, content: str) -> bool:
    """minified / bundle / huge 파일은 분석 대상에서 제외"""
    name = path.name.lower()
    if ".min." in name or "bundle" in name or name.endswith(".d.ts"):
        return True
    if len(content) > MAX_FILE_CHARS:
        return True
    return len(content.splitlines()) <= 2


def split_chunks(content: str, size: int = CHUNK_CHARS) -> List[str]:
    return [content[i:i + size] for i in range(0, len(content), size)]


class QualityReportStage(Stage):
    """
    LLM 코드 리뷰 → code-review-report.md
    LLM이 없거나 분석 가능한 파일이 없으면 고정 fallback 리포트
    """

    name = "quality_report"

    def __init__(self, llm: Optional[OpenAIClient], max_files: int = 10):
        self.llm = llm
        self.max_files = max_files
        self.logger = get_logger(__name__)

    async def run(self, context: PipelineContext) -> StageResult:
        report_path = context.workspace_path / REPORT_FILENAME
        if report_path.exists():
            context.reports["quality"] = report_path.read_text(encoding="utf-8", errors="replace")
            return self.ok()

        if self.llm is None:
            self.logger.warning(f"[{context.candidate.full_name}] No LLM configured. Writing fallback report")
            report = QUALITY_FALLBACK_REPORT
        else:
            report = await self._review(context)

        report_path.write_text(report, encoding="utf-8")
        context.reports["quality"] = report
        context.log_task(f"Added code quality report ({REPORT_FILENAME})")
        return self.ok([REPORT_FILENAME])

    async def _review(self, context: PipelineContext) -> str:
        repo_path = context.workspace_path
        reviews: List[Tuple[str, str]] = []
        skipped: List[str] = []

        for file_path in iter_code_files(repo_path)[: self.max_files]:
            relative = file_path.relative_to(repo_path).as_posix()
            content = file_path.read_text(encoding="utf-8", errors="replace")
            if is_probably_generated(file_path, content):
                skipped.append(relative)
                continue

            chunks = split_chunks(content)
            for index, chunk in enumerate(chunks, start=1):
                prompt = (
                    f"Analyze the following chunk of {file_path.name} (part {index}/{len(chunks)}) "
                    "for code quality issues.\n"
                    "Provide insights on maintainability, readability, function complexity and "
                    "optional refactors. Even if no issues are found, explain briefly why the code is clean.\n"
                    "Respond with a short report in markdown.\n\n-----\n\n"
                    f"{chunk}"
                )
                try:
                    markdown = await self.llm.generate(prompt, system=REVIEWER_SYSTEM_PROMPT)
                except Exception as e:
                    self.logger.warning(f"[{context.candidate.full_name}] Failed to analyze {relative}: {e}")
                    skipped.append(relative)
                    break
                reviews.append((f"{relative} (part {index})", markdown))

        if not reviews:
            return QUALITY_FALLBACK_REPORT

        sections = ["# Code Quality Report", ""]
        for title, markdown in reviews:
            sections += [f"### {title}", "", markdown, "", "---", ""]
        if skipped:
            sections += ["## Skipped Files", ""]
            sections += [f"- `{name}`" for name in skipped]
        return "\n".join(sections).rstrip() + "\n"


def extract_code(markdown: str) -> str:
    match = re.search(r"```(?:js|javascript|ts|typescript|tsx|jsx)?\s*([\s\S]*?)```", markdown, re.IGNORECASE)
    if match and match.group(1):
        return match.group(1).strip()
    return markdown.strip()


JEST_CONFIG = "module.exports = { testEnvironment: 'node' };\n"
TEST_OR_CONFIG_SUFFIXES = (".test.js", ".spec.js", ".test.ts", ".spec.ts", ".config.js", ".config.ts")


class TestGenerationStage(Stage):
    """
    테스트가 없는 소스 파일마다 __tests__/<name>.test.js 생성
    """

    name = "test_generation"
    __test__ = False  # pytest collection 대상 아님

    def __init__(self, llm: Optional[OpenAIClient], max_files: int = 20):
        self.llm = llm
        self.max_files = max_files
        self.logger = get_logger(__name__)

    async def run(self, context: PipelineContext) -> StageResult:
        repo_path = context.workspace_path
        tests_dir = repo_path / "__tests__"

        sources = [
            f for f in iter_code_files(repo_path)
            if not f.name.lower().endswith(TEST_OR_CONFIG_SUFFIXES)
        ][: self.max_files]

        created = []
        generated = 0
        fallbacks = 0
        for source in sources:
            base = re.sub(r"\.[jt]sx?$", "", source.name)
            if (tests_dir / f"{base}.test.js").exists() or (tests_dir / f"{base}.spec.js").exists():
                continue

            relative = source.relative_to(repo_path).as_posix()
            code = await self._generate(context, source, relative)
            if code is None:
                code = TESTS_FALLBACK.format(source=relative)
                fallbacks += 1
            else:
                generated += 1

            tests_dir.mkdir(parents=True, exist_ok=True)
            (tests_dir / f"{base}.test.js").write_text(code + ("" if code.endswith("\n") else "\n"), encoding="utf-8")
            created.append(f"__tests__/{base}.test.js")

        if not created:
            return self.ok()

        if not (repo_path / "jest.config.js").exists():
            (repo_path / "jest.config.js").write_text(JEST_CONFIG, encoding="utf-8")
            created.append("jest.config.js")

        context.log_task(
            f"Added {generated + fallbacks} test files ({generated} generated, {fallbacks} placeholders)"
        )
        return self.ok(created)

    async def _generate(self, context: PipelineContext, source: Path, relative: str) -> Optional[str]:
        if self.llm is None:
            return None

        content = source.read_text(encoding="utf-8", errors="replace")
        if is_probably_generated(source, content):
            return None

        prompt = (
            "You are a senior test engineer. Generate a **Jest** test file for the following source.\n"
            "- Cover primary public functions.\n"
            "- Include both happy-path and edge cases.\n"
            "- Do not include explanations; output only test code.\n\n"
            f"FILE: {relative}\n\nSOURCE:\n{content}"
        )
        try:
            response = await self.llm.generate(prompt, temperature=0.2)
        except Exception as e:
            self.logger.warning(f"[{context.candidate.full_name}] Test generation failed for {relative}: {e}")
            return None

        code = extract_code(response)
        # 너무 짧으면 의미 없는 응답
        if len(code) < 50:
            return None
        return code


DEAD_CODE_REPORT_FILENAME = "deadcode-report.md"


class DeadCodeReportStage(Stage):
    """
    knip / depcheck / ts-prune 결과를 deadcode-report.md 로 모음
    tool exit code는 무시 (발견 사항이 있으면 non-zero), 전부 실행 불가일 때만 실패
    """

    name = "dead_code_report"

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def tools(self, repo_path: Path) -> List[Tuple[str, List[str]]]:
        tools = [
            ("knip", ["npx", "--yes", "knip", "--reporter", "json"]),
            ("depcheck", ["npx", "--yes", "depcheck"]),
        ]
        # ts-prune은 TypeScript 프로젝트만
        if (repo_path / "tsconfig.json").exists():
            tools.append(("ts-prune", ["npx", "--yes", "ts-prune"]))
        return tools

    async def run(self, context: PipelineContext) -> StageResult:
        repo_path = context.workspace_path
        if not (repo_path / "package.json").exists():
            return self.ok()

        report_path = repo_path / DEAD_CODE_REPORT_FILENAME
        if report_path.exists():
            context.reports["dead_code"] = report_path.read_text(encoding="utf-8", errors="replace")
            return self.ok()

        sections = []
        missing = []
        for tool, command in self.tools(repo_path):
            result = await self.runner.run(command, cwd=repo_path)
            if result.exit_code == MISSING_EXECUTABLE_EXIT_CODE:
                missing.append(tool)
            output = result.stdout.strip() or result.diagnostic() or "(no output)"
            sections.append(DEAD_CODE_SECTION.format(tool=tool, output=output))

        if len(missing) == len(sections):
            return self.fail(f"No dead code tool could be run ({', '.join(missing)})")

        report = "## Dead Code Report\n\n" + "\n".join(sections)
        report_path.write_text(report, encoding="utf-8")
        context.reports["dead_code"] = report
        context.log_task(f"Added dead code report ({DEAD_CODE_REPORT_FILENAME})")
        return self.ok([DEAD_CODE_REPORT_FILENAME])
