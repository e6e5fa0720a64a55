"""Plugin installation.

Installs every manifest entry that has no directory under the plugins root
yet: remote entries are shallow-cloned, local entries are symlinked.
Entries that already exist are never touched, whatever their contents.
"""

import logging
from pathlib import Path

from vpm.core.manifest import LocalPath, ManifestEntry
from vpm.core.tasks import TaskOutcome, TaskSummary, run_tasks
from vpm.utils.filesystem import ensure_directory, remove_directory, replace_symlink
from vpm.vcs.git import GitClient, GitError

logger = logging.getLogger(__name__)


class InstallError(Exception):
    """Error during plugin installation."""

    def __init__(self, message: str, plugin_name: str | None = None):
        self.plugin_name = plugin_name
        super().__init__(message)


class PluginInstaller:
    """Installs missing plugins into the plugins root."""

    def __init__(self, plugins_root: Path, git: GitClient, jobs: int = 8):
        """Initialize the installer.

        Args:
            plugins_root: Directory holding one entry per plugin
            git: Git client used for clones
            jobs: Maximum number of concurrent installs
        """
        self.plugins_root = plugins_root
        self.git = git
        self.jobs = jobs

    def is_installed(self, entry: ManifestEntry) -> bool:
        """Check if a directory (or live link) with the entry's name exists."""
        return (self.plugins_root / entry.name).is_dir()

    def missing(self, entries: list[ManifestEntry]) -> list[ManifestEntry]:
        """Entries that still need installing, one per plugin name."""
        seen: set[str] = set()
        pending = []
        for entry in entries:
            if entry.name in seen or self.is_installed(entry):
                continue
            seen.add(entry.name)
            pending.append(entry)
        return pending

    def install(self, entries: list[ManifestEntry]) -> TaskSummary:
        """Install all missing entries concurrently and wait for them.

        Args:
            entries: Manifest entries

        Returns:
            TaskSummary with one outcome per attempted install
        """
        pending = self.missing(entries)
        if not pending:
            logger.info("All plugins already installed")
            return TaskSummary()

        ensure_directory(self.plugins_root)
        logger.info("Installing %d plugin(s) into %s", len(pending), self.plugins_root)

        summary = run_tasks(pending, self._install_single, lambda e: e.name, self.jobs)

        logger.info(
            "Installation complete: %d succeeded, %d failed",
            len(summary.succeeded),
            len(summary.failed),
        )
        return summary

    def _install_single(self, entry: ManifestEntry) -> TaskOutcome:
        dest = self.plugins_root / entry.name

        if isinstance(entry.source, LocalPath):
            logger.debug("Linking %s -> %s", dest, entry.source.path)
            try:
                replace_symlink(dest, entry.source.path)
            except OSError as e:
                raise InstallError(
                    f"Cannot link {dest} to {entry.source.path}: {e}", entry.name
                ) from e
            return TaskOutcome(name=entry.name, success=True, message=f"Linked {entry.name}")

        remote = entry.remote
        if remote is None:
            raise InstallError(f"No remote for {entry.raw}", entry.name)

        logger.debug("Cloning %s into %s", remote, dest)
        occupied = dest.is_symlink() or dest.exists()
        try:
            self.git.clone(remote, dest, depth=1)
        except GitError as e:
            # A name with a directory counts as installed; leave none behind,
            # but never touch what was there before the clone.
            if not occupied:
                remove_directory(dest)
            raise InstallError(f"Cannot clone {remote}: {e.stderr or e}", entry.name) from e

        return TaskOutcome(name=entry.name, success=True, message=f"Installed {entry.name}")
