from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from forkbot.models.candidate import CandidateRepository
from forkbot.pipeline.context import PipelineContext


@pytest.fixture
def make_candidate():
    def _make(full_name="owner/repo", **overrides):
        owner, name = full_name.split("/", 1)
        base = {
            "full_name": full_name,
            "owner": owner,
            "clone_url": f"https://github.com/{full_name}.git",
            "html_url": f"https://github.com/{full_name}",
            "default_branch": "main",
            "language": "JavaScript",
            "description": f"{name} description",
            "stargazers_count": 5,
            "created_at": datetime(2020, 1, 1, tzinfo=timezone.utc),
            "pushed_at": datetime(2021, 1, 1, tzinfo=timezone.utc),
        }
        base.update(overrides)
        return CandidateRepository(**base)

    return _make


@pytest.fixture
def make_repo():
    """PyGithub Repository 대역"""

    def _make(full_name="owner/repo", stars=5, fork=False, archived=False):
        owner, _ = full_name.split("/", 1)
        repo = MagicMock()
        repo.full_name = full_name
        repo.owner.login = owner
        repo.clone_url = f"https://github.com/{full_name}.git"
        repo.html_url = f"https://github.com/{full_name}"
        repo.default_branch = "main"
        repo.language = "JavaScript"
        repo.description = None
        repo.stargazers_count = stars
        repo.created_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
        repo.pushed_at = datetime(2021, 1, 1, tzinfo=timezone.utc)
        repo.fork = fork
        repo.archived = archived
        return repo

    return _make


@pytest.fixture
def make_context(tmp_path, make_candidate):
    def _make(candidate=None, path=None):
        workspace = path or tmp_path / "workspace"
        workspace.mkdir(parents=True, exist_ok=True)
        candidate = candidate or make_candidate()
        return PipelineContext(
            workspace_path=workspace,
            candidate=candidate,
            fork_full_name=f"bot/{candidate.name}",
        )

    return _make
