"""Plugin updates from their git remotes.

For each checkout the local and remote heads of the current branch are
compared. When they differ the branch is fast-forwarded; if that is not
possible (diverged history, local edits) it is reset to the remote head.
"""

import logging
from pathlib import Path

from vpm.core.plugins import InstalledPlugin, find_plugin, scan_plugins
from vpm.core.tasks import TaskOutcome, TaskSummary, run_tasks
from vpm.vcs.git import GitClient, GitError

logger = logging.getLogger(__name__)


class UpdateError(Exception):
    """Error during plugin update."""

    def __init__(self, message: str, plugin_name: str | None = None):
        self.plugin_name = plugin_name
        super().__init__(message)


class PluginNotInstalledError(UpdateError):
    """A plugin selected for update is not installed."""


class PluginUpdater:
    """Updates installed git checkouts."""

    def __init__(self, plugins_root: Path, git: GitClient, jobs: int = 8, quiet: bool = False):
        """Initialize the updater.

        Args:
            plugins_root: Directory holding one entry per plugin
            git: Git client
            jobs: Maximum number of concurrent updates
            quiet: Don't collect the one-line log of new commits
        """
        self.plugins_root = plugins_root
        self.git = git
        self.jobs = jobs
        self.quiet = quiet

    def select(self, name: str | None = None) -> list[InstalledPlugin]:
        """Pick the checkouts to update: one by name, or all of them.

        Symlinked and plain directories are left out.

        Raises:
            PluginNotInstalledError: If a named plugin is not installed
        """
        if name is not None:
            plugin = find_plugin(self.plugins_root, name, self.git)
            if plugin is None:
                raise PluginNotInstalledError(f"Plugin not installed: {name}", name)
            plugins = [plugin]
        else:
            plugins = scan_plugins(self.plugins_root, self.git)

        selected = []
        for plugin in plugins:
            if plugin.is_link:
                logger.debug("Skipping %s: symbolic link", plugin.name)
            elif not plugin.is_checkout:
                logger.info("Skipping %s: not a git checkout", plugin.name)
            else:
                selected.append(plugin)
        return selected

    def update(self, name: str | None = None) -> TaskSummary:
        """Update one or all plugins concurrently and wait for them.

        Args:
            name: Plugin to update, or None for every installed plugin

        Returns:
            TaskSummary with one outcome per checked plugin; plugins that were
            already current have changed=False
        """
        plugins = self.select(name)
        if not plugins:
            return TaskSummary()

        logger.info("Checking %d plugin(s) for updates", len(plugins))
        return run_tasks(plugins, self._update_single, lambda p: p.name, self.jobs)

    def _update_single(self, plugin: InstalledPlugin) -> TaskOutcome:
        path = plugin.path
        try:
            branch = self.git.current_branch(path)
            remote_head = self.git.remote_head(path, branch)
            old_head = self.git.rev_parse(path)

            if remote_head == old_head:
                logger.debug("%s is up to date at %s", plugin.name, old_head[:7])
                return TaskOutcome(name=plugin.name, success=True, changed=False)

            try:
                self.git.pull_ff_only(path)
            except GitError:
                logger.info(
                    "Fast-forward failed for %s, resetting to origin/%s", plugin.name, branch
                )
                self.git.fetch(path, branch)
                self.git.reset_hard(path)

            commits = self.git.count_commits(path, old_head)
            details = [] if self.quiet else self.git.log_oneline(path, old_head)
        except GitError as e:
            raise UpdateError(f"Cannot update {plugin.name}: {e.stderr or e}", plugin.name) from e

        noun = "commit" if commits == 1 else "commits"
        return TaskOutcome(
            name=plugin.name,
            success=True,
            message=f"Updated {plugin.name} ({commits} new {noun})",
            details=details,
        )
