from unittest.mock import AsyncMock, MagicMock

import pytest
from github import GithubException

from core.process.command_runner import CommandResult
from forkbot.workspace.acquisition import AcquisitionError, AcquisitionStage
from forkbot.workspace.git_client import GitCommandError


def make_fork(full_name="bot/repo"):
    return MagicMock(full_name=full_name, clone_url=f"https://github.com/{full_name}.git")


def make_stage(tmp_path, fork=None):
    github = MagicMock()
    github.create_fork.return_value = fork or make_fork()
    git = MagicMock()

    async def clone(url, target):
        target.mkdir(parents=True)
        (target / "README.md").write_text("fresh clone")

    git.clone = AsyncMock(side_effect=clone)
    stage = AcquisitionStage(github=github, git=git, workspace_root=tmp_path / "forks")
    return stage, github, git


class TestAcquire:
    @pytest.mark.asyncio
    async def test_forks_and_clones_fork(self, tmp_path, make_candidate):
        stage, github, git = make_stage(tmp_path)

        workspace = await stage.acquire(make_candidate("owner/repo"))

        github.create_fork.assert_called_once_with("owner/repo")
        git.clone.assert_awaited_once_with("https://github.com/bot/repo.git", tmp_path / "forks" / "repo")
        assert workspace.path == tmp_path / "forks" / "repo"
        assert workspace.fork_full_name == "bot/repo"
        assert (workspace.path / "README.md").read_text() == "fresh clone"

    @pytest.mark.asyncio
    async def test_stale_directory_is_replaced(self, tmp_path, make_candidate):
        stale = tmp_path / "forks" / "repo"
        stale.mkdir(parents=True)
        (stale / "leftover.txt").write_text("old run")
        stage, _, _ = make_stage(tmp_path)

        workspace = await stage.acquire(make_candidate("owner/repo"))

        assert not (workspace.path / "leftover.txt").exists()
        assert (workspace.path / "README.md").exists()


class TestAcquireFailures:
    @pytest.mark.asyncio
    async def test_fork_api_error(self, tmp_path, make_candidate):
        stage, github, git = make_stage(tmp_path)
        github.create_fork.side_effect = GithubException(403, {"message": "Forbidden"}, {})

        with pytest.raises(AcquisitionError, match="Fork failed"):
            await stage.acquire(make_candidate("a/b"))

        git.clone.assert_not_called()

    @pytest.mark.asyncio
    async def test_clone_failure(self, tmp_path, make_candidate):
        stage, _, git = make_stage(tmp_path)
        git.clone = AsyncMock(side_effect=GitCommandError(["clone"], CommandResult(128, "", "fatal: not found")))

        with pytest.raises(AcquisitionError, match="Clone failed"):
            await stage.acquire(make_candidate("a/b"))
