"""Filesystem utilities for vpm."""

import shutil
from pathlib import Path


def ensure_directory(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists

    Returns:
        The directory path
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def expand_home(path: str) -> Path:
    """Expand a leading ~ to the invoking user's home directory."""
    return Path(path).expanduser()


def remove_directory(path: Path) -> bool:
    """Remove a plugin directory and its contents.

    Symbolic links are unlinked, never followed.

    Args:
        path: Directory or symlink to remove

    Returns:
        True if something was removed, False if nothing was there
    """
    if path.is_symlink():
        path.unlink()
        return True
    if not path.exists():
        return False
    if path.is_dir():
        shutil.rmtree(path)
    else:
        path.unlink()
    return True


def replace_symlink(link: Path, target: Path) -> Path:
    """Create a symbolic link, replacing an existing link at the same path.

    Args:
        link: Path of the link to create
        target: Path the link points to

    Returns:
        The link path

    Raises:
        FileExistsError: If a real file or directory occupies the link path
    """
    if link.is_symlink():
        link.unlink()
    link.parent.mkdir(parents=True, exist_ok=True)
    link.symlink_to(target, target_is_directory=True)
    return link


def is_plugin_directory(path: Path) -> bool:
    """Check whether a plugins-root entry counts as an installed plugin.

    Directories and symlinks (even dangling ones) count; plain files and
    hidden entries do not.
    """
    if path.name.startswith("."):
        return False
    return path.is_symlink() or path.is_dir()
