from typing import List, Optional, Sequence

from forkbot.pipeline.stages.base import Stage
from forkbot.pipeline.stages.dependencies import PackageJsonStage, SecurityAuditStage
from forkbot.pipeline.stages.documentation import JsDocStage, OpenApiStage
from forkbot.pipeline.stages.formatting import FormatCodeStage, ReadmeStage
from forkbot.pipeline.stages.quality import DeadCodeReportStage, QualityReportStage, TestGenerationStage
from forkbot.pipeline.stages.scaffolding import (
    CIWorkflowStage,
    ComposeStage,
    DockerfileStage,
    DockerWorkflowStage,
    LicenseStage,
    ScaffoldStage,
)
from core.llm.openai_client import OpenAIClient
from core.process.command_runner import CommandRunner


def default_stages(
    runner: CommandRunner,
    llm: Optional[OpenAIClient],
    format_command: Sequence[str],
    openapi_command: Sequence[str],
) -> List[Stage]:
    """
    순서 중요:
    1) 구조 / 포맷 / 문서 (format, docs, scaffolding, openapi)
    2) 앞 단계 결과를 읽는 생성 stage (quality report, dead code, tests)
    3) package manager를 건드리는 dependency / security stage
    """
    return [
        FormatCodeStage(runner, format_command),
        ReadmeStage(),
        JsDocStage(),
        LicenseStage(),
        ScaffoldStage(),
        DockerfileStage(),
        DockerWorkflowStage(),
        CIWorkflowStage(),
        ComposeStage(),
        OpenApiStage(runner, openapi_command),
        QualityReportStage(llm),
        DeadCodeReportStage(runner),
        TestGenerationStage(llm),
        PackageJsonStage(),
        SecurityAuditStage(runner),
    ]
