"""Git client used to install and update plugins."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Error running a git command."""

    def __init__(self, message: str, cwd: Path | None = None, stderr: str = ""):
        self.cwd = cwd
        self.stderr = stderr
        super().__init__(message)


class GitClient:
    """Thin wrapper around the system `git` command.

    Every command takes an explicit working directory; the process working
    directory is never changed. Uses the system `git` binary (no gitpython
    dependency).
    """

    def __init__(self, executable: str = "git"):
        self._executable = executable

    def _run_git(
        self, args: list[str], cwd: Path | None = None, check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command.

        Args:
            args: Git command arguments (without 'git')
            cwd: Working directory
            check: Whether to raise on non-zero exit

        Returns:
            Completed process

        Raises:
            GitError: If command fails and check=True, or git is missing
        """
        cmd = [self._executable] + args
        logger.debug("Running git command: %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            return subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=check,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            logger.debug("Git command failed: %s - %s", " ".join(cmd), stderr)
            raise GitError(
                f"Git command failed: {' '.join(cmd)}\n{stderr}",
                cwd=cwd,
                stderr=stderr,
            ) from e
        except FileNotFoundError as e:
            logger.error("Git is not installed or not in PATH")
            raise GitError("Git is not installed or not in PATH", cwd=cwd) from e

    def clone(self, url: str, dest: Path, depth: int | None = 1) -> Path:
        """Clone a repository quietly into dest."""
        args = ["clone", "--quiet"]
        if depth is not None:
            args.extend(["--depth", str(depth)])
        args.extend([url, str(dest)])
        self._run_git(args)
        return dest

    def is_checkout(self, path: Path) -> bool:
        """Check if a path is the top of a git working tree."""
        return (path / ".git").exists()

    def remote_url(self, path: Path, remote: str = "origin") -> str | None:
        """Get the recorded URL of a remote, or None if it is not set."""
        result = self._run_git(["config", "--get", f"remote.{remote}.url"], cwd=path, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def current_branch(self, path: Path) -> str:
        """Get the name of the checked-out branch."""
        return self._run_git(["symbolic-ref", "--short", "HEAD"], cwd=path).stdout.strip()

    def remote_head(self, path: Path, branch: str, remote: str = "origin") -> str:
        """Get the commit a remote branch points to.

        Raises:
            GitError: If the remote has no such branch
        """
        result = self._run_git(["ls-remote", remote, f"refs/heads/{branch}"], cwd=path)
        for line in result.stdout.splitlines():
            # Format: <sha>\trefs/heads/<branch>
            parts = line.split("\t")
            if len(parts) == 2 and parts[1] == f"refs/heads/{branch}":
                return parts[0]
        raise GitError(f"Branch '{branch}' not found on remote '{remote}'", cwd=path)

    def rev_parse(self, path: Path, ref: str = "HEAD") -> str:
        """Resolve a ref to a commit id."""
        return self._run_git(["rev-parse", ref], cwd=path).stdout.strip()

    def pull_ff_only(self, path: Path) -> None:
        """Fast-forward the current branch from its upstream."""
        self._run_git(["pull", "--ff-only", "--quiet"], cwd=path)

    def fetch(self, path: Path, branch: str, remote: str = "origin") -> None:
        """Fetch a single branch from a remote into FETCH_HEAD."""
        self._run_git(["fetch", "--quiet", remote, branch], cwd=path)

    def reset_hard(self, path: Path, ref: str = "FETCH_HEAD") -> None:
        """Reset the working tree and current branch to ref, discarding changes."""
        self._run_git(["reset", "--hard", "--quiet", ref], cwd=path)

    def count_commits(self, path: Path, old: str, new: str = "HEAD") -> int:
        """Count commits reachable from new but not from old."""
        result = self._run_git(["rev-list", "--count", f"{old}..{new}"], cwd=path)
        return int(result.stdout.strip() or 0)

    def log_oneline(self, path: Path, old: str, new: str = "HEAD") -> list[str]:
        """One-line log of the commits between old and new."""
        result = self._run_git(["log", "--oneline", "--no-decorate", f"{old}..{new}"], cwd=path)
        return [line for line in result.stdout.splitlines() if line.strip()]
