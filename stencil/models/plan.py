"""Scaffold plan models: what gets written where."""
from pathlib import PurePosixPath, PureWindowsPath
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_COMMIT_MESSAGE = "Initial commit"


class PlanError(ValueError):
    """Raised when a scaffold plan is malformed or unsafe."""
    pass


def require_utf8(value: str, what: str) -> str:
    """Reject text that cannot be written as UTF-8 (lone surrogates)."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"{what} is not valid UTF-8 text: {e.reason} at position {e.start}") from e
    return value


def normalize_relative_path(value: str) -> str:
    """Validate a plan path and return it in normalized POSIX form.

    Rejects empty paths, absolute or drive-qualified paths, any ``..``
    component, and anything under ``.git``.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Path must be a non-empty string")
    require_utf8(value, "Path")

    if PureWindowsPath(value).drive or value.startswith(("/", "\\")):
        raise ValueError(f"Path must be relative to the target root. Got: {value}")

    parts = [p for p in value.replace("\\", "/").split("/") if p not in ("", ".")]
    if not parts:
        raise ValueError(f"Path does not name anything below the target root. Got: {value}")
    if ".." in parts:
        raise ValueError(f"Path escapes the target root. Got: {value}")
    if parts[0] == ".git":
        raise ValueError(f"Path must not point into the .git directory. Got: {value}")

    return str(PurePosixPath(*parts))


class TemplateEntry(BaseModel):
    """A single file to materialize: relative path plus literal template text."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    path: str = Field(..., description="POSIX path relative to the target root")
    content: str = Field("", description="Template text written verbatim")
    executable: bool = Field(False, description="Write with mode 0755 instead of 0644")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        return normalize_relative_path(v)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return require_utf8(v, "Content")

    @property
    def mode(self) -> int:
        return 0o755 if self.executable else 0o644


class ScaffoldPlan(BaseModel):
    """Ordered set of template entries plus the commit that follows them."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    name: str = "custom"
    description: str = ""
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    directories: List[str] = Field(default_factory=list, description="Extra directories, possibly empty")
    variables: Dict[str, str] = Field(default_factory=dict, description="Values for {{name}} tokens")
    entries: List[TemplateEntry] = Field(default_factory=list)

    @field_validator('directories')
    @classmethod
    def validate_directories(cls, v):
        return [normalize_relative_path(d) for d in v]

    @field_validator('commit_message')
    @classmethod
    def validate_commit_message(cls, v):
        if not v.strip():
            raise ValueError("Commit message must not be empty")
        return require_utf8(v, "Commit message")

    @model_validator(mode='after')
    def validate_unique_paths(self) -> 'ScaffoldPlan':
        """Entry paths must be unique and must not collide with a directory.

        A file entry also cannot sit where another entry or a declared
        directory needs a parent directory.
        """
        seen = set()
        for entry in self.entries:
            if entry.path in seen:
                raise ValueError(f"Duplicate entry path: {entry.path}")
            seen.add(entry.path)

        for directory in self.directories:
            if directory in seen:
                raise ValueError(f"Path declared both as file and directory: {directory}")

        parents = set()
        for path in [entry.path for entry in self.entries] + list(self.directories):
            parents.update(str(p) for p in PurePosixPath(path).parents if str(p) != ".")
        for entry in self.entries:
            if entry.path in parents:
                raise ValueError(f"Entry path is also used as a parent directory: {entry.path}")
        return self

    @classmethod
    def from_pairs(cls, pairs, **kwargs) -> 'ScaffoldPlan':
        """Build a plan from ``(relative_path, content)`` tuples."""
        entries = [TemplateEntry(path=path, content=content) for path, content in pairs]
        return cls(entries=entries, **kwargs)

    def parent_directories(self) -> List[str]:
        """Directories that must exist, in first-use order, without duplicates."""
        ordered: List[str] = []
        for directory in self.directories:
            if directory not in ordered:
                ordered.append(directory)
        for entry in self.entries:
            parent = str(PurePosixPath(entry.path).parent)
            if parent != "." and parent not in ordered:
                ordered.append(parent)
        return ordered

    def get_entry(self, path: str) -> Optional[TemplateEntry]:
        normalized = normalize_relative_path(path)
        for entry in self.entries:
            if entry.path == normalized:
                return entry
        return None
