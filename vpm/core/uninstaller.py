"""Removal of plugins that are no longer wanted.

A plugin directory is removed when:
- no manifest entry has its name, or
- it is a git checkout whose origin differs from the manifest remote.

Entries for local paths never trigger removal by themselves, so a symlinked
plugin stays even if its manifest path changes.
"""

import logging
from pathlib import Path

from vpm.core.manifest import ManifestEntry, index_by_name
from vpm.core.plugins import InstalledPlugin, scan_plugins
from vpm.core.tasks import TaskOutcome, TaskSummary
from vpm.utils.filesystem import remove_directory
from vpm.vcs.git import GitClient

logger = logging.getLogger(__name__)


def removal_reason(plugin: InstalledPlugin, entry: ManifestEntry | None) -> str | None:
    """Decide whether an installed plugin should be removed.

    Args:
        plugin: The installed plugin
        entry: The manifest entry with the same name, if any

    Returns:
        A short reason if the plugin should go, None to keep it
    """
    if entry is None:
        return "not in manifest"

    remote = entry.remote
    if remote is None:
        return None

    if plugin.is_checkout and plugin.origin != remote:
        return f"origin {plugin.origin or '(none)'} does not match {remote}"

    return None


class PluginUninstaller:
    """Removes installed plugins that do not match the manifest."""

    def __init__(self, plugins_root: Path, git: GitClient):
        self.plugins_root = plugins_root
        self.git = git

    def plan(self, entries: list[ManifestEntry]) -> list[tuple[InstalledPlugin, str]]:
        """List the plugins that would be removed, with the reason for each."""
        index = index_by_name(entries)
        to_remove = []
        for plugin in scan_plugins(self.plugins_root, self.git):
            reason = removal_reason(plugin, index.get(plugin.name))
            if reason is not None:
                to_remove.append((plugin, reason))
        return to_remove

    def uninstall(self, entries: list[ManifestEntry]) -> TaskSummary:
        """Remove every unwanted plugin, one after another.

        Args:
            entries: Manifest entries

        Returns:
            TaskSummary with one outcome per removal attempt
        """
        summary = TaskSummary()
        for plugin, reason in self.plan(entries):
            logger.info("Removing %s (%s)", plugin.name, reason)
            try:
                remove_directory(plugin.path)
            except OSError as e:
                logger.debug("Cannot remove %s", plugin.path, exc_info=True)
                summary.outcomes.append(
                    TaskOutcome(name=plugin.name, success=False, message=str(e), error=e)
                )
                continue
            summary.outcomes.append(
                TaskOutcome(name=plugin.name, success=True, message=f"Removed {plugin.name}")
            )
        return summary
