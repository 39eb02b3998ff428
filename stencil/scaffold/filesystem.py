"""Filesystem primitives for scaffolding: directories, atomic writes, path safety."""
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from stencil.core.logger import get_logger

logger = get_logger(__name__)


class FilesystemError(OSError):
    """Raised when a directory or file cannot be created safely."""

    def __init__(self, message: str, path: Optional[Path] = None,
                 entry: Optional[Tuple[int, str]] = None):
        super().__init__(message)
        self.path = path
        # (index, relative path) of the plan entry that failed, if any
        self.entry = entry

    def __str__(self) -> str:
        return self.args[0]


def resolve_inside(root: Path, relative: str) -> Path:
    """Join *relative* onto *root* and make sure the result stays inside it.

    Symlinks already present under root are resolved before the check.

    Raises:
        FilesystemError: If the resolved path escapes root or lands in
            root's ``.git`` directory
    """
    root_resolved = Path(root).resolve()
    target = (root_resolved / relative).resolve()
    if target == root_resolved or not target.is_relative_to(root_resolved):
        raise FilesystemError(
            f"Path traversal rejected: '{relative}' resolves outside {root_resolved}",
            path=target,
        )
    git_dir = root_resolved / ".git"
    if target.is_relative_to(git_dir):
        raise FilesystemError(
            f"Path rejected: '{relative}' resolves into {git_dir}",
            path=target,
        )
    return target


def ensure_directories(paths: Iterable[Path]) -> List[Path]:
    """Create each directory and any missing ancestors.

    Already existing directories are fine.

    Returns:
        Directories that did not exist before the call

    Raises:
        FilesystemError: On permission or I/O failure, or if a path exists
            and is not a directory
    """
    created = []
    for directory in paths:
        directory = Path(directory)
        if directory.is_dir():
            continue
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except FileExistsError as e:
            raise FilesystemError(
                f"Cannot create directory {directory}: a file is in the way",
                path=directory,
            ) from e
        except OSError as e:
            raise FilesystemError(
                f"Cannot create directory {directory}: {e.strerror or e}",
                path=directory,
            ) from e
        logger.debug(f"Created directory {directory}")
        created.append(directory)
    return created


def write_file(path: Path, content: str, mode: int = 0o644) -> None:
    """Create or replace *path* with exactly the UTF-8 bytes of *content*.

    The data goes to a temporary file in the same directory which is then
    renamed over the target, so readers never see a partial file.

    Raises:
        FilesystemError: If the parent directory is missing or unwritable,
            or the write itself fails
    """
    path = Path(path)
    parent = path.parent
    if not parent.is_dir():
        raise FilesystemError(f"Cannot write {path}: parent directory does not exist", path=path)
    if path.is_dir():
        raise FilesystemError(f"Cannot write {path}: a directory is in the way", path=path)

    data = content.encode("utf-8")
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(parent))
    except OSError as e:
        raise FilesystemError(f"Cannot write {path}: {e.strerror or e}", path=path) from e

    try:
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except OSError as e:
            raise FilesystemError(f"Cannot write {path}: {e.strerror or e}", path=path) from e
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.debug(f"Wrote {len(data)} bytes to {path}")


def read_bytes_if_file(path: Path) -> Optional[bytes]:
    """Return the current bytes of *path*, or None when it is not a regular file."""
    path = Path(path)
    if not path.is_file():
        return None
    try:
        return path.read_bytes()
    except OSError as e:
        raise FilesystemError(f"Cannot read {path}: {e.strerror or e}", path=path) from e
