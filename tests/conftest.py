"""Shared fixtures for vpm tests."""

import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from vpm.vcs.git import GitClient

_ENV_VARS = [
    "VPM_CONFIG",
    "VPM_EDITOR_ROOT",
    "VPM_PLUGINS_DIR",
    "VPM_BUNDLE_DIR",
    "VPM_MANIFEST",
    "VPM_HOST",
    "VPM_JOBS",
    "VPM_EDITOR",
    "VISUAL",
    "EDITOR",
]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory."""
    path = Path(tempfile.mkdtemp(prefix="vpm_test_"))
    yield path
    if path.exists():
        shutil.rmtree(path)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the user's vpm configuration out of tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VPM_CONFIG", str(tmp_path / "no-config.yaml"))


@pytest.fixture
def editor_root(temp_dir: Path) -> Path:
    """Editor settings directory (~/.vim)."""
    root = temp_dir / ".vim"
    root.mkdir()
    return root


@pytest.fixture
def plugins_root(editor_root: Path) -> Path:
    """Plugins directory (~/.vim/bundle)."""
    root = editor_root / "bundle"
    root.mkdir()
    return root


@pytest.fixture
def write_manifest(editor_root: Path) -> Callable[..., Path]:
    """Write a manifest with the given lines and return its path."""

    def _write(*lines: str) -> Path:
        path = editor_root / "plugins.txt"
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def configured_env(
    monkeypatch: pytest.MonkeyPatch, editor_root: Path, plugins_root: Path
) -> Path:
    """Point vpm at the temporary editor root through the environment."""
    monkeypatch.setenv("VPM_EDITOR_ROOT", str(editor_root))
    return editor_root


@pytest.fixture
def local_plugin(temp_dir: Path) -> Path:
    """A local plugin checkout to link into the plugins root."""
    path = temp_dir / "src" / "my-local-plugin"
    (path / "plugin").mkdir(parents=True)
    (path / "plugin" / "local.vim").write_text('" local plugin\n')
    return path


@pytest.fixture
def mock_git() -> MagicMock:
    """A GitClient double whose checkouts are directories containing .git."""
    git = MagicMock(spec=GitClient)
    git.is_checkout.side_effect = lambda path: (path / ".git").exists()
    git.remote_url.return_value = None
    return git


@pytest.fixture
def make_checkout(plugins_root: Path) -> Callable[[str], Path]:
    """Create fake git checkout directories under the plugins root."""

    def _make(name: str) -> Path:
        path = plugins_root / name
        (path / ".git").mkdir(parents=True)
        return path

    return _make
