"""Tests for vpm.core.updater module."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from vpm.core.updater import PluginNotInstalledError, PluginUpdater
from vpm.vcs.git import GitError

OLD = "a" * 40
NEW = "b" * 40


@pytest.fixture
def git(mock_git: MagicMock) -> MagicMock:
    """Git double for a checkout on main that is behind its remote."""
    mock_git.current_branch.return_value = "main"
    mock_git.remote_head.return_value = NEW
    mock_git.rev_parse.return_value = OLD
    mock_git.count_commits.return_value = 3
    mock_git.log_oneline.return_value = ["b1 Fix", "b2 Add", "b3 Docs"]
    return mock_git


@pytest.fixture
def updater(plugins_root: Path, git: MagicMock) -> PluginUpdater:
    return PluginUpdater(plugins_root, git, jobs=2)


class TestPluginUpdaterSelect:
    """Tests for PluginUpdater.select()."""

    def test_selects_all_checkouts(
        self,
        updater: PluginUpdater,
        plugins_root: Path,
        local_plugin: Path,
        make_checkout: Callable[[str], Path],
    ):
        """Symlinks and plain directories are skipped."""
        make_checkout("alpha")
        make_checkout("beta")
        (plugins_root / "plain").mkdir()
        (plugins_root / "linked").symlink_to(local_plugin)

        assert [p.name for p in updater.select()] == ["alpha", "beta"]

    def test_selects_named_plugin(
        self, updater: PluginUpdater, make_checkout: Callable[[str], Path]
    ):
        """A name selects only that plugin."""
        make_checkout("alpha")
        make_checkout("beta")

        assert [p.name for p in updater.select("beta")] == ["beta"]

    def test_named_symlink_selects_nothing(
        self, updater: PluginUpdater, plugins_root: Path, local_plugin: Path
    ):
        """A linked plugin has nothing to update."""
        (plugins_root / "myplugin").symlink_to(local_plugin)

        assert updater.select("myplugin") == []

    def test_raises_for_unknown_name(self, updater: PluginUpdater):
        """Raises PluginNotInstalledError for names that are not installed."""
        with pytest.raises(PluginNotInstalledError, match="not installed: nope"):
            updater.select("nope")

    def test_rejects_path_like_names(self, updater: PluginUpdater):
        """Names are plain directory names."""
        with pytest.raises(PluginNotInstalledError):
            updater.select("..")


class TestPluginUpdaterUpdate:
    """Tests for PluginUpdater.update()."""

    def test_up_to_date_reports_nothing(
        self, updater: PluginUpdater, git: MagicMock, make_checkout: Callable[[str], Path]
    ):
        """Equal local and remote heads mean no pull and no change."""
        make_checkout("alpha")
        git.remote_head.return_value = OLD

        summary = updater.update()

        assert summary.all_successful
        assert summary.changed == []
        git.pull_ff_only.assert_not_called()
        git.reset_hard.assert_not_called()

    def test_fast_forward_reports_commit_count_and_log(
        self, updater: PluginUpdater, git: MagicMock, make_checkout: Callable[[str], Path]
    ):
        """A behind checkout is pulled and the new commits are reported."""
        path = make_checkout("alpha")

        summary = updater.update()

        git.remote_head.assert_called_once_with(path, "main")
        git.pull_ff_only.assert_called_once_with(path)
        git.fetch.assert_not_called()
        git.count_commits.assert_called_once_with(path, OLD)
        outcome = summary.outcomes[0]
        assert outcome.message == "Updated alpha (3 new commits)"
        assert outcome.details == ["b1 Fix", "b2 Add", "b3 Docs"]

    def test_singular_commit(
        self, updater: PluginUpdater, git: MagicMock, make_checkout: Callable[[str], Path]
    ):
        """One new commit is reported in the singular."""
        make_checkout("alpha")
        git.count_commits.return_value = 1

        summary = updater.update()

        assert summary.outcomes[0].message == "Updated alpha (1 new commit)"

    def test_quiet_skips_log(
        self,
        plugins_root: Path,
        git: MagicMock,
        make_checkout: Callable[[str], Path],
    ):
        """Quiet mode does not collect the commit log."""
        make_checkout("alpha")
        updater = PluginUpdater(plugins_root, git, quiet=True)

        summary = updater.update()

        git.log_oneline.assert_not_called()
        assert summary.outcomes[0].details == []
        assert summary.outcomes[0].message == "Updated alpha (3 new commits)"

    def test_falls_back_to_fetch_and_reset(
        self, updater: PluginUpdater, git: MagicMock, make_checkout: Callable[[str], Path]
    ):
        """A failed fast-forward resets the branch to the fetched head."""
        path = make_checkout("alpha")
        git.pull_ff_only.side_effect = GitError("Not possible to fast-forward")

        summary = updater.update()

        git.fetch.assert_called_once_with(path, "main")
        git.reset_hard.assert_called_once_with(path)
        assert summary.all_successful
        assert summary.outcomes[0].message == "Updated alpha (3 new commits)"

    def test_failure_does_not_stop_other_plugins(
        self, updater: PluginUpdater, git: MagicMock, make_checkout: Callable[[str], Path]
    ):
        """A network failure aborts only that plugin's update."""
        make_checkout("alpha")
        make_checkout("beta")

        def remote_head(path: Path, branch: str) -> str:
            if path.name == "alpha":
                raise GitError("unable to access", stderr="Could not resolve host")
            return NEW

        git.remote_head.side_effect = remote_head

        summary = updater.update()

        assert [o.name for o in summary.failed] == ["alpha"]
        assert "Could not resolve host" in summary.failed[0].message
        assert [o.name for o in summary.succeeded] == ["beta"]

    def test_symlink_update_does_nothing(
        self, updater: PluginUpdater, git: MagicMock, plugins_root: Path, local_plugin: Path
    ):
        """Updating a linked plugin runs no git commands."""
        (plugins_root / "myplugin").symlink_to(local_plugin)

        summary = updater.update("myplugin")

        assert summary.outcomes == []
        git.current_branch.assert_not_called()
