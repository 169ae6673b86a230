PR_TITLES = [
    "Refactor and enhance project structure and formatting",
    "Improve code consistency and documentation clarity",
    "Apply standardized formatting and update README content",
    "Enhance code readability with formatting improvements",
    "Update documentation and streamline structure",
    "Improve formatting across source and configuration files",
    "Modernize formatting and project tooling",
    "Add CI, container setup and documentation improvements",
]

PR_INTROS = [
    "This pull request introduces several improvements aimed at code quality and maintainability. "
    "No business logic was altered.",
    "This PR includes general housekeeping across the repository: formatting, documentation and "
    "project tooling.",
    "Non-functional improvements only: consistent formatting, refreshed documentation and "
    "ready-to-use CI and container configuration.",
]

CHANGE_LABELS = {
    "A": "Added",
    "M": "Modified",
    "D": "Deleted",
    "R": "Renamed",
    "C": "Copied",
}
