"""Project scaffolding system.

Materializes a plan of template files under a target root and records the
result as one git commit.
"""

from .core import ScaffoldManager, ScaffoldResult
from .filesystem import FilesystemError, ensure_directories, resolve_inside, write_file
from .templates import TemplateEngine

__all__ = [
    "FilesystemError",
    "ScaffoldManager",
    "ScaffoldResult",
    "TemplateEngine",
    "ensure_directories",
    "resolve_inside",
    "write_file",
]
