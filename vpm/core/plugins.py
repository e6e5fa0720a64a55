"""Model of the plugins installed under the plugins root."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from vpm.utils.filesystem import is_plugin_directory
from vpm.vcs.git import GitClient

PluginKind = Literal["git", "link", "dir"]


@dataclass
class InstalledPlugin:
    """A directory entry under the plugins root."""

    name: str
    path: Path
    kind: PluginKind
    origin: str | None = None
    target: Path | None = None

    @property
    def is_link(self) -> bool:
        return self.kind == "link"

    @property
    def is_checkout(self) -> bool:
        return self.kind == "git"

    @classmethod
    def from_path(cls, path: Path, git: GitClient) -> InstalledPlugin:
        """Inspect a plugins-root entry.

        The origin URL is read only for git checkouts.
        """
        if path.is_symlink():
            return cls(name=path.name, path=path, kind="link", target=Path(os.readlink(path)))
        if git.is_checkout(path):
            return cls(name=path.name, path=path, kind="git", origin=git.remote_url(path))
        return cls(name=path.name, path=path, kind="dir")


def scan_plugins(plugins_root: Path, git: GitClient) -> list[InstalledPlugin]:
    """List installed plugins, sorted by name.

    A missing plugins root means nothing is installed.
    """
    if not plugins_root.is_dir():
        return []
    return [
        InstalledPlugin.from_path(path, git)
        for path in sorted(plugins_root.iterdir())
        if is_plugin_directory(path)
    ]


def find_plugin(plugins_root: Path, name: str, git: GitClient) -> InstalledPlugin | None:
    """Look up one installed plugin by name."""
    if not name or "/" in name or name in (".", ".."):
        return None
    path = plugins_root / name
    if not is_plugin_directory(path):
        return None
    return InstalledPlugin.from_path(path, git)
