import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from forkbot.pipeline.context import PipelineContext, StageResult
from forkbot.pipeline.stages.base import Stage, write_if_missing
from forkbot.pipeline.stages.formatting import find_readme
from forkbot.pipeline.stages.templates import (
    CI_WORKFLOW,
    DOCKER_WORKFLOW,
    DOCKERFILE,
    FOLDER_README,
    MIT_LICENSE,
    README_DOCKER_SECTION,
)

SCAFFOLD_FOLDERS = ("src", "tests", "docs")


class LicenseStage(Stage):
    name = "license"

    async def run(self, context: PipelineContext) -> StageResult:
        repo_path = context.workspace_path
        if any(p.name.lower().startswith(("license", "licence")) for p in repo_path.iterdir()):
            return self.ok()

        content = MIT_LICENSE.format(
            year=datetime.now(timezone.utc).year,
            author=context.candidate.owner,
        )
        (repo_path / "LICENSE").write_text(content, encoding="utf-8")
        context.log_task("Added MIT LICENSE file")
        return self.ok(["LICENSE"])


class ScaffoldStage(Stage):
    """src/, tests/, docs/ 폴더가 없으면 placeholder README와 함께 생성"""

    name = "scaffold"

    async def run(self, context: PipelineContext) -> StageResult:
        created = []
        for folder in SCAFFOLD_FOLDERS:
            folder_path = context.workspace_path / folder
            if folder_path.exists():
                continue
            write_if_missing(folder_path / "README.md", FOLDER_README.format(folder=folder))
            created.append(f"{folder}/")

        if created:
            context.log_task(f"Added project structure: {', '.join(created)}")
        return self.ok(created)


class DockerfileStage(Stage):
    name = "dockerfile"

    async def run(self, context: PipelineContext) -> StageResult:
        if not write_if_missing(context.workspace_path / "Dockerfile", DOCKERFILE):
            return self.ok()
        context.flags["dockerfile_added"] = True
        context.log_task("Added Dockerfile")

        artifacts = ["Dockerfile"]
        readme = self._document(context)
        if readme:
            artifacts.append(readme)
        return self.ok(artifacts)

    def _document(self, context: PipelineContext) -> Optional[str]:
        """README에 Docker 사용법이 없으면 추가"""
        readme_path = find_readme(context.workspace_path)
        if readme_path is None:
            return None

        content = readme_path.read_text(encoding="utf-8", errors="replace")
        if re.search(r"^#+ .*docker", content, re.IGNORECASE | re.MULTILINE):
            return None

        section = README_DOCKER_SECTION.format(name=context.candidate.name.lower())
        readme_path.write_text(content.rstrip("\n") + "\n" + section, encoding="utf-8")
        return readme_path.name


class DockerWorkflowStage(Stage):
    name = "docker_workflow"

    async def run(self, context: PipelineContext) -> StageResult:
        path = context.workspace_path / ".github" / "workflows" / "docker.yml"
        if not write_if_missing(path, DOCKER_WORKFLOW):
            return self.ok()
        context.flags["workflow_added"] = True
        context.log_task("Added GitHub Actions Docker build workflow")
        return self.ok([".github/workflows/docker.yml"])


class CIWorkflowStage(Stage):
    name = "ci_workflow"

    async def run(self, context: PipelineContext) -> StageResult:
        path = context.workspace_path / ".github" / "workflows" / "ci.yml"
        if not write_if_missing(path, CI_WORKFLOW):
            return self.ok()
        context.log_task("Added GitHub Actions CI workflow (lint + test)")
        return self.ok([".github/workflows/ci.yml"])


def read_package_json(repo_path: Path) -> Dict:
    """
    package.json 없으면 {} / 깨진 JSON이면 ValueError
    """
    pkg_path = repo_path / "package.json"
    if not pkg_path.exists():
        return {}
    return json.loads(pkg_path.read_text(encoding="utf-8"))


def detect_services(pkg: Dict) -> Dict[str, bool]:
    deps = {**(pkg.get("dependencies") or {}), **(pkg.get("devDependencies") or {})}
    return {
        "mongo": any(d in deps for d in ("mongodb", "mongoose")),
        "redis": "redis" in deps or "ioredis" in deps,
    }


def compose_yaml(mongo: bool, redis: bool) -> str:
    depends = [name for name, used in (("mongo", mongo), ("redis", redis)) if used]

    lines = [
        "services:",
        "  app:",
        "    build: .",
        "    command: npm start",
        "    ports:",
        '      - "3000:3000"',
        "    environment:",
        "      - NODE_ENV=production",
    ]
    if depends:
        lines.append("    depends_on:")
        lines.extend(f"      - {name}" for name in depends)

    if mongo:
        lines += [
            "  mongo:",
            "    image: mongo:7",
            "    restart: unless-stopped",
            '    ports: ["27017:27017"]',
            "    volumes:",
            "      - mongo_data:/data/db",
        ]
    if redis:
        lines += [
            "  redis:",
            "    image: redis:7",
            "    restart: unless-stopped",
            '    ports: ["6379:6379"]',
        ]
    if mongo:
        lines += ["", "volumes:", "  mongo_data:"]

    return "\n".join(lines) + "\n"


class ComposeStage(Stage):
    name = "docker_compose"

    async def run(self, context: PipelineContext) -> StageResult:
        compose_path = context.workspace_path / "docker-compose.yml"
        if compose_path.exists() or (context.workspace_path / "compose.yml").exists():
            return self.ok()

        services = detect_services(read_package_json(context.workspace_path))
        compose_path.write_text(compose_yaml(**services), encoding="utf-8")

        extras = [name for name, used in services.items() if used]
        context.log_task(
            "Added docker-compose.yml" + (f" with {', '.join(extras)} services" if extras else "")
        )
        return self.ok(["docker-compose.yml"])
