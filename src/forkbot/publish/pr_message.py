from typing import Dict, List, Optional, Sequence, Tuple

from forkbot.publish.templates import CHANGE_LABELS

TRUNCATION_MARKER = "\n... (truncated)"


def classify_change(status: str) -> str:
    """
    git name-status 코드 → Added / Modified / Deleted / Renamed ...
    (R100 처럼 similarity 숫자가 붙을 수 있음)
    """
    return CHANGE_LABELS.get(status[:1].upper(), "Changed")


def truncate_report(report: str, max_chars: int) -> str:
    if len(report) <= max_chars:
        return report
    return report[:max_chars] + TRUNCATION_MARKER


def build_pr_body(
    changes: Sequence[Tuple[str, str]],
    shortstat: str = "",
    task_log: Optional[List[str]] = None,
    flags: Optional[Dict[str, bool]] = None,
    report: Optional[str] = None,
    intro: Optional[str] = None,
    report_max_chars: int = 2000,
) -> str:
    """
    PR 본문 구성:
    summary(shortstat) → changed files → task log → docker notes → quality report
    """
    task_log = task_log or []
    flags = flags or {}

    sections = ["## Pull Request Summary", ""]
    if intro:
        sections += [intro, ""]

    sections += [
        "### Summary of Changes",
        f"> {shortstat}" if shortstat else "> No stats available.",
        "",
        "### Changed Files",
    ]
    if changes:
        sections += [f"- {classify_change(status)}: `{path}`" for status, path in changes]
    else:
        sections.append("- No file changes detected.")
    sections.append("")

    if task_log:
        sections += ["### Task Log", ""]
        sections += [f"- {entry}" for entry in task_log]
        sections.append("")

    docker_notes = []
    if flags.get("dockerfile_added"):
        docker_notes.append("Added `Dockerfile`.")
    if flags.get("workflow_added"):
        docker_notes.append("Added GitHub Actions Docker workflow.")
    if docker_notes:
        sections += ["### Docker Notes", ""]
        sections += [f"- {note}" for note in docker_notes]
        sections.append("")

    if report:
        sections += [
            "### Code Quality Analysis",
            "",
            "```markdown",
            truncate_report(report, report_max_chars),
            "```",
            "",
        ]

    sections.append("---")
    return "\n".join(sections)
