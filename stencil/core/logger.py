"""Logging for Stencil runs.

Progress messages from the scaffolder and the git service go to the terminal
through Rich. ``stencil new --verbose`` or ``--log-file`` additionally records
every step, including the git commands that ran, in a plain-text log file so a
failed scaffold can be inspected afterwards.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()

LOG_FILE = Path.home() / ".stencil" / "stencil.log"
FALLBACK_LOG_FILE = Path("/tmp/stencil.log")
LOG_FILE_ENV = "STENCIL_LOG_FILE"

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_file_logging_configured = False


def resolve_log_file(log_file: Optional[str] = None) -> Path:
    """Pick the log file: explicit path, then $STENCIL_LOG_FILE, then ~/.stencil.

    The parent directory is created. When that is not permitted the log goes
    to /tmp/stencil.log instead.
    """
    target = Path(log_file or os.environ.get(LOG_FILE_ENV) or LOG_FILE)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        return FALLBACK_LOG_FILE
    return target


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Optional[Path]:
    """Attach a file handler to the ``stencil`` logger once per process.

    Args:
        log_file: Explicit log path (``--log-file``)
        verbose: Record debug messages such as each git command

    Returns:
        The log file in use, or None if file logging was already set up
    """
    global _file_logging_configured

    if _file_logging_configured:
        return None

    target = resolve_log_file(log_file)
    level = logging.DEBUG if verbose else logging.INFO

    file_handler = logging.FileHandler(target, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    stencil_logger = logging.getLogger("stencil")
    stencil_logger.addHandler(file_handler)
    stencil_logger.setLevel(level)

    _file_logging_configured = True
    stencil_logger.info(f"Stencil log started: {target}")
    return target


def get_logger(name: str) -> logging.Logger:
    """Module logger with a Rich console handler.

    The level is inherited from the ``stencil`` logger (INFO unless
    setup_file_logging() ran with verbose), and records propagate to it so
    the file handler sees them too.
    """
    package_logger = logging.getLogger("stencil")
    if package_logger.level == logging.NOTSET:
        package_logger.setLevel(logging.INFO)

    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger
