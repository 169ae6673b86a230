from unittest.mock import AsyncMock

from forkbot.pipeline.registry import default_stages


def test_default_stage_order():
    stages = default_stages(AsyncMock(), None, ["prettier"], ["swagger-jsdoc"])

    assert [s.name for s in stages] == [
        "format_code",
        "readme",
        "jsdoc",
        "license",
        "scaffold",
        "dockerfile",
        "docker_workflow",
        "ci_workflow",
        "docker_compose",
        "openapi",
        "quality_report",
        "dead_code_report",
        "test_generation",
        "package_json",
        "security_audit",
    ]


def test_stage_names_are_unique():
    stages = default_stages(AsyncMock(), None, ["prettier"], ["swagger-jsdoc"])
    assert len({s.name for s in stages}) == len(stages)
