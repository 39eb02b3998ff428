"""Git repository management for scaffolded projects."""
import subprocess
from pathlib import Path
from typing import List, Optional

from stencil.core.logger import get_logger

logger = get_logger(__name__)


class VcsError(RuntimeError):
    """Raised when a version-control step fails."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class GitManager:
    """Runs the git CLI against a local working tree."""

    def __init__(self, git_binary: str = "git"):
        self.git_binary = git_binary

    def _run(self, args: List[str], cwd: Path, check: bool = True) -> subprocess.CompletedProcess:
        """Run a git command in *cwd*.

        Raises:
            VcsError: If git is missing, or exits non-zero while check is set
        """
        cmd = [self.git_binary] + args
        logger.debug(f"Running: {' '.join(cmd)} (cwd={cwd})")
        try:
            return subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                check=check,
            )
        except FileNotFoundError as e:
            raise VcsError("Git not found. Please install git first.") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise VcsError(
                f"git {' '.join(args)} failed: {stderr or e}",
                stderr=stderr,
            ) from e

    def repo_exists(self, path: Path) -> bool:
        """Check if a git repository already exists at the given path."""
        return (Path(path) / ".git").exists()

    def init(self, path: Path) -> None:
        """Initialize an empty repository at *path*."""
        self._run(['init'], cwd=path)
        logger.info(f"Initialized git repository in {path}")

    def add_all(self, path: Path) -> None:
        """Stage every file in the working tree."""
        self._run(['add', '-A'], cwd=path)

    def has_staged_changes(self, path: Path) -> bool:
        """Return True when the index differs from HEAD (or from empty, before the first commit)."""
        result = self._run(['status', '--porcelain'], cwd=path)
        for line in result.stdout.splitlines():
            # First status column is the index state
            if line and line[0] not in (' ', '?', '!'):
                return True
        return False

    def commit(self, path: Path, message: str) -> str:
        """Commit staged changes and return the new commit SHA."""
        self._run(['commit', '-m', message], cwd=path)
        sha = self.head_sha(path)
        logger.info(f"Created commit {sha[:7]}: {message}")
        return sha

    def head_sha(self, path: Path) -> str:
        result = self._run(['rev-parse', 'HEAD'], cwd=path)
        return result.stdout.strip()

    def add_remote(self, path: Path, url: str, name: str = "origin") -> None:
        """Register a remote (does not push)."""
        self._run(['remote', 'add', name, url], cwd=path)
        logger.info(f"Added remote {name}: {url}")

    def commit_count(self, path: Path) -> int:
        result = self._run(['rev-list', '--count', 'HEAD'], cwd=path)
        return int(result.stdout.strip() or 0)

    def list_commit_files(self, path: Path, rev: str = "HEAD") -> List[str]:
        """List files touched by *rev*."""
        result = self._run(
            ['show', '--pretty=format:', '--name-only', '--no-renames', rev],
            cwd=path,
        )
        return [line for line in result.stdout.splitlines() if line.strip()]
