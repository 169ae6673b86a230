import json
import re
from pathlib import Path
from typing import Optional

from forkbot.pipeline.context import PipelineContext, StageResult
from forkbot.pipeline.stages.base import Stage
from forkbot.pipeline.stages.scaffolding import read_package_json
from core.logging.logger import get_logger
from core.process.command_runner import CommandRunner

DEFAULT_SCRIPTS = {
    "lint": "eslint .",
    "format:check": "prettier -c .",
    "format": "prettier -w .",
    "test": 'echo "No tests" && exit 0',
}


class PackageJsonStage(Stage):
    """package.json 기본 필드 / scripts 보강 (없는 것만 추가)"""

    name = "package_json"

    async def run(self, context: PipelineContext) -> StageResult:
        pkg_path = context.workspace_path / "package.json"
        if not pkg_path.exists():
            return self.ok()

        try:
            pkg = read_package_json(context.workspace_path)
        except ValueError as e:
            return self.fail(f"package.json is not valid JSON: {e}")

        added = []
        if not pkg.get("name"):
            pkg["name"] = re.sub(r"[^a-z0-9-_]", "-", context.candidate.name.lower())
            added.append("name")
        if not pkg.get("license"):
            pkg["license"] = "MIT"
            added.append("license")

        scripts = pkg.setdefault("scripts", {})
        for script, command in DEFAULT_SCRIPTS.items():
            if script not in scripts:
                scripts[script] = command
                added.append(f"scripts.{script}")

        if not pkg.get("repository") and context.candidate.html_url:
            pkg["repository"] = {"type": "git", "url": f"{context.candidate.html_url}.git"}
            added.append("repository")

        if not added:
            return self.ok()

        pkg_path.write_text(json.dumps(pkg, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        context.log_task(f"Completed package.json fields: {', '.join(added)}")
        return self.ok(["package.json"])


AUDIT_SNAPSHOT = "audit-before.json"


class SecurityAuditStage(Stage):
    """
    1) 변경 전 npm audit 결과를 audit-before.json 으로 보관
    2) npm-check-updates 로 minor 범위 version 갱신
    3) npm audit fix (호환 가능한 범위 내 취약 dependency 업데이트)
    """

    name = "security_audit"

    def __init__(self, runner: CommandRunner):
        self.runner = runner
        self.logger = get_logger(__name__)

    async def run(self, context: PipelineContext) -> StageResult:
        repo_path = context.workspace_path
        if not (repo_path / "package.json").exists():
            return self.ok()

        tracked = ["package.json", "package-lock.json"]
        before = {name: read_bytes(repo_path / name) for name in tracked}

        artifacts = []
        if await self._snapshot(repo_path):
            artifacts.append(AUDIT_SNAPSHOT)

        result = await self.runner.run(["npx", "--yes", "npm-check-updates", "-u", "--target", "minor"], cwd=repo_path)
        if not result.ok:
            self.logger.warning(
                f"[{context.candidate.full_name}] npm-check-updates failed ({result.exit_code}): {result.diagnostic()}"
            )

        # lockfile만 갱신, node_modules 설치 안 함
        result = await self.runner.run(["npm", "audit", "fix", "--package-lock-only"], cwd=repo_path)

        # npm audit은 취약점이 남아있으면 1을 반환 → 실행 자체가 안 된 경우만 실패
        if result.exit_code not in (0, 1):
            return self.fail(f"npm audit fix exited with {result.exit_code}: {result.diagnostic()}")

        updated = [name for name in tracked if read_bytes(repo_path / name) != before[name]]
        if updated:
            context.log_task("Applied compatible dependency and security updates (`npm-check-updates`, `npm audit fix`)")
        return self.ok(artifacts + updated)

    async def _snapshot(self, repo_path: Path) -> bool:
        snapshot_path = repo_path / AUDIT_SNAPSHOT
        if snapshot_path.exists():
            return False

        result = await self.runner.run(["npm", "audit", "--json", "--package-lock-only"], cwd=repo_path)
        # 취약점이 있으면 exit 1이지만 JSON은 정상 출력됨
        if not result.stdout.lstrip().startswith("{"):
            self.logger.warning(f"npm audit snapshot unavailable ({result.exit_code}): {result.diagnostic()}")
            return False

        snapshot_path.write_text(result.stdout, encoding="utf-8")
        return True


def read_bytes(path: Path) -> Optional[bytes]:
    return path.read_bytes() if path.exists() else None
