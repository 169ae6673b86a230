import json
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from forkbot.pipeline.context import PipelineContext, StageResult
from forkbot.pipeline.stages.base import Stage
from forkbot.pipeline.stages.formatting import find_readme
from forkbot.pipeline.stages.quality import TEST_OR_CONFIG_SUFFIXES, is_probably_generated, iter_code_files
from forkbot.pipeline.stages.templates import (
    API_DOCS_MARKER,
    README_API_DOCS_SECTION,
    SWAGGER_MARKER,
    SWAGGER_UI_BLOCK,
)
from core.logging.logger import get_logger
from core.process.command_runner import CommandRunner

FUNCTION_DECLARATION = re.compile(
    r"^([ \t]*)(?:export[ \t]+(?:default[ \t]+)?)?(?:async[ \t]+)?function[ \t]*\*?[ \t]*"
    r"([A-Za-z_$][\w$]*)[ \t]*\(([^)]*)\)[ \t]*\{",
    re.MULTILINE,
)
ARROW_FUNCTION = re.compile(
    r"^([ \t]*)(?:export[ \t]+)?(?:const|let|var)[ \t]+([A-Za-z_$][\w$]*)[ \t]*=[ \t]*"
    r"(?:async[ \t]*)?\(([^)]*)\)[ \t]*=>[ \t]*\{",
    re.MULTILINE,
)


def split_params(params: str) -> List[str]:
    """
    "a, {b, c} = {}, ...rest" → ["a", "options", "rest"]
    """
    names = []
    depth = 0
    current = ""
    for char in params + ",":
        if char in "{[(":
            depth += 1
        elif char in "}])":
            depth -= 1
        if char == "," and depth == 0:
            param = current.split("=", 1)[0].strip()
            current = ""
            if not param:
                continue
            if param[0] in "{[":
                names.append("options")
            else:
                names.append(param.lstrip(".").strip())
            continue
        current += char
    return names


def is_documented(content: str, position: int) -> bool:
    """바로 위 줄이 JSDoc(또는 block comment)로 끝나는지"""
    return content[:position].rstrip().endswith("*/")


def jsdoc_block(indent: str, name: str, params: Sequence[str]) -> str:
    lines = [f"{indent}/**", f"{indent} * {name}"]
    lines += [f"{indent} * @param {{*}} {param}" for param in params]
    lines += [f"{indent} * @returns {{*}}", f"{indent} */"]
    return "\n".join(lines) + "\n"


def add_jsdoc(content: str) -> Tuple[str, int]:
    """
    문서화 안 된 function 선언 / arrow function 위에 JSDoc 블록 추가
    Returns (new content, number of blocks added)
    """
    insertions = []
    for pattern in (FUNCTION_DECLARATION, ARROW_FUNCTION):
        for match in pattern.finditer(content):
            if is_documented(content, match.start()):
                continue
            indent, name, params = match.group(1), match.group(2), match.group(3)
            insertions.append((match.start(), jsdoc_block(indent, name, split_params(params))))

    # 뒤에서부터 삽입해야 앞쪽 offset이 유지됨
    for position, block in sorted(insertions, reverse=True):
        content = content[:position] + block + content[position:]
    return content, len(insertions)


class JsDocStage(Stage):
    """JSDoc이 없는 .js 함수에 기본 JSDoc 블록 추가"""

    name = "jsdoc"

    async def run(self, context: PipelineContext) -> StageResult:
        repo_path = context.workspace_path
        changed = []
        total = 0

        for file_path in iter_code_files(repo_path, extensions=(".js",)):
            if file_path.name.lower().endswith(TEST_OR_CONFIG_SUFFIXES):
                continue
            content = file_path.read_text(encoding="utf-8", errors="replace")
            if is_probably_generated(file_path, content):
                continue

            documented, added = add_jsdoc(content)
            if not added:
                continue
            file_path.write_text(documented, encoding="utf-8")
            changed.append(file_path.relative_to(repo_path).as_posix())
            total += added

        if changed:
            context.log_task(f"Added JSDoc comments to {total} functions in {len(changed)} files")
        return self.ok(changed)


# ===== OpenAPI =====

EXPRESS_ENTRY_CANDIDATES = ("app.js", "server.js", "src/app.js", "src/server.js", "index.js", "src/index.js")
EXPRESS_APP_PATTERN = re.compile(r"\bconst\s+app\s*=\s*express\(\)\s*;?")
OPENAPI_SOURCES = ("src/routes/**/*.js", "src/controllers/**/*.js", "routes/**/*.js", "controllers/**/*.js")
OPENAPI_OUTPUT = "docs/openapi.json"


def detect_express_entry(repo_path: Path) -> Optional[Path]:
    for candidate in EXPRESS_ENTRY_CANDIDATES:
        path = repo_path / candidate
        if path.is_file() and re.search(r"\bexpress\(", path.read_text(encoding="utf-8", errors="replace")):
            return path
    return None


def patch_swagger_ui(entry: Path, code: str, spec_path: Path) -> str:
    """
    `const app = express();` 바로 아래 (없으면 파일 끝)에 Swagger UI mount 추가
    marker가 있으면 그대로 반환
    """
    if SWAGGER_MARKER in code:
        return code

    relative = Path(os.path.relpath(spec_path, entry.parent)).as_posix()
    if not relative.startswith("."):
        relative = f"./{relative}"
    block = SWAGGER_UI_BLOCK.format(marker=SWAGGER_MARKER, spec_path=relative)

    match = EXPRESS_APP_PATTERN.search(code)
    if match:
        return code[:match.end()] + "\n" + block + code[match.end():]
    return code.rstrip("\n") + "\n" + block


def has_dependency(repo_path: Path, name: str) -> bool:
    pkg_path = repo_path / "package.json"
    if not pkg_path.exists():
        return False
    try:
        pkg = json.loads(pkg_path.read_text(encoding="utf-8"))
    except ValueError:
        return False
    return name in (pkg.get("dependencies") or {}) or name in (pkg.get("devDependencies") or {})


class OpenApiStage(Stage):
    """
    Express 프로젝트만 대상:
    swagger-jsdoc 주석 → docs/openapi.json, entry 파일에 /docs (swagger-ui) mount, README에 링크
    """

    name = "openapi"

    def __init__(self, runner: CommandRunner, command: Sequence[str]):
        self.runner = runner
        self.command = list(command)
        self.logger = get_logger(__name__)

    async def run(self, context: PipelineContext) -> StageResult:
        repo_path = context.workspace_path
        entry = detect_express_entry(repo_path)
        if entry is None:
            return self.ok()

        artifacts = []
        spec_path = repo_path / OPENAPI_OUTPUT

        # 1) openapi.json
        if not spec_path.exists():
            error = await self._generate(context, spec_path)
            if error:
                return self.fail(error)
            artifacts.append(OPENAPI_OUTPUT)
            context.log_task(f"Generated OpenAPI document ({OPENAPI_OUTPUT})")

        # 2) swagger-ui-express dependency
        if (repo_path / "package.json").exists() and not has_dependency(repo_path, "swagger-ui-express"):
            result = await self.runner.run(
                ["npm", "install", "swagger-ui-express", "--save", "--package-lock-only"], cwd=repo_path
            )
            if result.ok:
                artifacts.append("package.json")
            else:
                self.logger.warning(
                    f"[{context.candidate.full_name}] Failed to add swagger-ui-express: {result.diagnostic()}"
                )

        # 3) entry 파일 patch
        code = entry.read_text(encoding="utf-8", errors="replace")
        patched = patch_swagger_ui(entry, code, spec_path)
        if patched != code:
            entry.write_text(patched, encoding="utf-8")
            relative_entry = entry.relative_to(repo_path).as_posix()
            artifacts.append(relative_entry)
            context.log_task(f"Mounted Swagger UI at `/docs` in {relative_entry}")

        # 4) README
        readme = self._document(repo_path)
        if readme:
            artifacts.append(readme)

        return self.ok(artifacts)

    async def _generate(self, context: PipelineContext, spec_path: Path) -> Optional[str]:
        definition = {
            "openapi": "3.0.3",
            "info": {
                "title": context.candidate.name,
                "version": "1.0.0",
                "description": context.candidate.description or "Auto-generated OpenAPI spec",
            },
        }
        spec_path.parent.mkdir(parents=True, exist_ok=True)

        # definition 파일은 working copy 밖에 둠 (commit 대상 아님)
        with tempfile.TemporaryDirectory(prefix="forkbot-openapi-") as tmp_dir:
            definition_path = Path(tmp_dir) / "definition.json"
            definition_path.write_text(json.dumps(definition), encoding="utf-8")
            result = await self.runner.run(
                [*self.command, "-d", str(definition_path), "-o", OPENAPI_OUTPUT, *OPENAPI_SOURCES],
                cwd=context.workspace_path,
            )

        if not result.ok:
            return f"{self.command[0]} exited with {result.exit_code}: {result.diagnostic()}"
        if not spec_path.exists():
            return f"{OPENAPI_OUTPUT} was not produced"
        return None

    def _document(self, repo_path: Path) -> Optional[str]:
        section = README_API_DOCS_SECTION.format(marker=API_DOCS_MARKER)
        readme_path = find_readme(repo_path)
        if readme_path is None:
            (repo_path / "README.md").write_text(f"# Project\n{section}", encoding="utf-8")
            return "README.md"

        content = readme_path.read_text(encoding="utf-8", errors="replace")
        if API_DOCS_MARKER in content:
            return None
        readme_path.write_text(content.rstrip("\n") + "\n" + section, encoding="utf-8")
        return readme_path.name
