"""Plugin manifest reading and source classification.

The manifest is a plain text file with one plugin per line:

    # comments start with '#'
    tpope/vim-fugitive                          (hosted shorthand)
    https://git.example.com/me/vim-thing.git    (remote URL, used verbatim)
    git@github.com:me/private.git               (remote URL, used verbatim)
    ~/src/my-local-plugin                       (local path, symlinked)
    ../src/other-plugin                         (relative to the manifest)

Blank lines and comment lines are skipped. Lines are never validated here;
they are only classified.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from vpm.config.parser import ConfigError
from vpm.config.schemas import DEFAULT_HOST
from vpm.utils.filesystem import expand_home

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"

# A colon before any slash: scheme://..., host:path, user@host:path
_REMOTE_PATTERN = re.compile(r"^[^/]+:")
# owner/repo with exactly one slash and no colon
_SHORTHAND_PATTERN = re.compile(r"^(?P<owner>[A-Za-z0-9][\w.-]*)/(?P<repo>[\w.-]+)$")


class ManifestNotFoundError(ConfigError):
    """The manifest file does not exist."""


@dataclass(frozen=True)
class RemoteURL:
    """A fully-qualified remote repository URL."""

    url: str

    @property
    def remote(self) -> str:
        return self.url


@dataclass(frozen=True)
class HostedShorthand:
    """An owner/repo reference expanded against the default host."""

    owner: str
    repo: str
    host: str = DEFAULT_HOST

    @property
    def remote(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.repo}.git"


@dataclass(frozen=True)
class LocalPath:
    """A local directory that is linked into the plugins root."""

    path: Path

    @property
    def remote(self) -> None:
        return None


PluginSource = RemoteURL | HostedShorthand | LocalPath


def _strip_git_suffix(name: str) -> str:
    return name[: -len(".git")] if name.endswith(".git") and len(name) > 4 else name


def classify_source(
    text: str, host: str = DEFAULT_HOST, base: Path | None = None
) -> PluginSource:
    """Classify a manifest line.

    Args:
        text: A trimmed, non-comment manifest line
        host: Host used to expand owner/repo shorthands
        base: Directory that relative local paths are resolved against
            (the current directory if omitted)

    Returns:
        RemoteURL, HostedShorthand or LocalPath
    """
    if _REMOTE_PATTERN.match(text):
        return RemoteURL(text)

    match = _SHORTHAND_PATTERN.match(text)
    if match:
        return HostedShorthand(
            owner=match.group("owner"),
            repo=_strip_git_suffix(match.group("repo")),
            host=host,
        )

    path = expand_home(text)
    if not path.is_absolute():
        path = (base or Path.cwd()) / path
    return LocalPath(path)


def plugin_name(text: str) -> str:
    """Derive a plugin directory name from a manifest line or a path.

    The name is the final path segment, without a trailing slash or .git.
    """
    stripped = text.rstrip("/")
    segment = re.split(r"[/:]", stripped)[-1] if stripped else stripped
    return _strip_git_suffix(segment)


@dataclass(frozen=True)
class ManifestEntry:
    """One plugin line of the manifest."""

    raw: str
    name: str
    source: PluginSource

    @classmethod
    def parse(
        cls, line: str, host: str = DEFAULT_HOST, base: Path | None = None
    ) -> ManifestEntry:
        """Build an entry from a trimmed manifest line."""
        return cls(raw=line, name=plugin_name(line), source=classify_source(line, host, base))

    @property
    def remote(self) -> str | None:
        """Remote URL to clone from, or None for local paths."""
        return self.source.remote


def iter_manifest(path: Path) -> Iterator[str]:
    """Lazily yield the plugin lines of a manifest.

    Lines are trimmed; blank lines and comment lines are skipped.
    """
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith(COMMENT_MARKER):
                continue
            yield line


def read_manifest(path: Path, host: str = DEFAULT_HOST) -> list[ManifestEntry]:
    """Read and classify every plugin line of a manifest.

    Relative local paths are resolved against the manifest's directory.

    Raises:
        ManifestNotFoundError: If the manifest does not exist
        ConfigError: If the manifest cannot be read or decoded
    """
    if not path.is_file():
        raise ManifestNotFoundError(f"Manifest not found: {path}", path)

    base = path.absolute().parent
    try:
        entries = [ManifestEntry.parse(line, host, base) for line in iter_manifest(path)]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}", path) from e
    logger.debug("Read %d plugin(s) from %s", len(entries), path)
    return entries


def index_by_name(entries: list[ManifestEntry]) -> dict[str, ManifestEntry]:
    """Map plugin names to entries; the first entry wins on duplicates."""
    index: dict[str, ManifestEntry] = {}
    for entry in entries:
        if entry.name in index:
            logger.warning("Duplicate manifest entry for '%s': %s", entry.name, entry.raw)
            continue
        index[entry.name] = entry
    return index
