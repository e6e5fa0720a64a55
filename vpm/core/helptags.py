"""Help tag regeneration through the editor's batch mode."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

NEOVIM_MARKER = "nvim"


def select_editor(editor_root: Path) -> str:
    """Pick the editor binary for an editor settings directory."""
    return "nvim" if NEOVIM_MARKER in str(editor_root) else "vim"


def helptags_command(plugins_root: Path) -> str:
    """Ex command that runs :helptags on every <plugin>/doc directory."""
    pattern = str(plugins_root / "*" / "doc").replace("'", "''")
    return (
        f"for d in glob('{pattern}', 0, 1) | "
        "silent! execute 'helptags' fnameescape(d) | endfor"
    )


class HelpTagBuilder:
    """Regenerates documentation tag files for installed plugins."""

    def __init__(self, editor_root: Path, editor: str | None = None):
        """Initialize the builder.

        Args:
            editor_root: Editor settings directory (used to pick vim or nvim)
            editor: Explicit editor binary, overriding the choice
        """
        self.editor = editor or select_editor(editor_root)

    def build_command(self, plugins_root: Path) -> list[str]:
        return [
            self.editor,
            "-Es",
            "-u",
            "NONE",
            "-c",
            helptags_command(plugins_root),
            "-c",
            "qa!",
        ]

    def rebuild(self, plugins_root: Path) -> None:
        """Run the editor in batch mode to rebuild help tags.

        Output of the editor is discarded; its exit status is not checked.
        """
        cmd = self.build_command(plugins_root)
        logger.debug("Rebuilding help tags: %s", " ".join(cmd))
        try:
            subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except FileNotFoundError:
            logger.warning(
                "Cannot rebuild help tags: %s is not installed or not in PATH", self.editor
            )
