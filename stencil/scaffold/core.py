"""Core scaffolding functionality: materialize a plan, then commit it."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from stencil.core.logger import get_logger
from stencil.models.plan import DEFAULT_COMMIT_MESSAGE, ScaffoldPlan
from stencil.scaffold.filesystem import (
    FilesystemError,
    ensure_directories,
    read_bytes_if_file,
    resolve_inside,
    write_file,
)
from stencil.services.git_manager import GitManager, VcsError

logger = get_logger(__name__)


@dataclass
class ScaffoldResult:
    """Outcome of a successful ``run_plan``."""

    root: Path
    written: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)
    commit: Optional[str] = None

    @property
    def files(self) -> List[str]:
        return self.written + self.unchanged


class ScaffoldManager:
    """Manages project scaffolding from a plan."""

    def __init__(self, git: Optional[GitManager] = None):
        self.git = git or GitManager()

    def ensure_directories(self, paths) -> List[Path]:
        return ensure_directories(paths)

    def write_file(self, path: Path, content: str, mode: int = 0o644) -> None:
        write_file(path, content, mode=mode)

    def preview(self, plan: ScaffoldPlan, root: Path, overwrite: bool = False) -> List[Tuple[str, str]]:
        """Report what ``run_plan`` would do for each entry without writing.

        Returns:
            ``(path, action)`` pairs where action is ``create``, ``unchanged``,
            ``overwrite``, or ``conflict`` for entries that would stop the run
        """
        actions = []
        for entry in plan.entries:
            target = resolve_inside(root, entry.path)
            existing = read_bytes_if_file(target)
            if existing is None:
                action = "conflict" if target.exists() else "create"
            elif existing == entry.content.encode("utf-8"):
                action = "unchanged"
            else:
                action = "overwrite" if overwrite else "conflict"
            actions.append((entry.path, action))
        return actions

    def run_plan(self, plan: ScaffoldPlan, root: Path, overwrite: bool = False) -> ScaffoldResult:
        """Write every entry of *plan* under *root*, in order.

        Args:
            plan: Plan to materialize
            root: Target root directory (created if missing)
            overwrite: Replace existing files whose content differs

        Returns:
            ScaffoldResult listing written and unchanged files

        Raises:
            FilesystemError: On the first failing entry. Files written before
                the failure stay on disk.
        """
        root = Path(root)
        logger.info(f"✨ Scaffolding plan '{plan.name}' into {root}")

        # Reject traversal for the whole plan before anything touches disk
        directories = [resolve_inside(root, d) for d in plan.directories]
        targets = [resolve_inside(root, entry.path) for entry in plan.entries]

        result = ScaffoldResult(root=root.resolve())
        self.ensure_directories([result.root] + directories)
        result.directories = list(plan.directories)

        total = len(plan.entries)
        for index, (entry, target) in enumerate(zip(plan.entries, targets), start=1):
            try:
                self.ensure_directories([target.parent])
                existing = read_bytes_if_file(target)
                if existing is not None and existing == entry.content.encode("utf-8"):
                    if (target.stat().st_mode & 0o777) != entry.mode:
                        target.chmod(entry.mode)
                    result.unchanged.append(entry.path)
                    logger.debug(f"Unchanged: {entry.path}")
                    continue
                if existing is not None and not overwrite:
                    raise FilesystemError(
                        f"{target} already exists with different content (use --force to overwrite)",
                        path=target,
                    )
                self.write_file(target, entry.content, mode=entry.mode)
            except FilesystemError as e:
                raise FilesystemError(
                    f"Entry {index}/{total} '{entry.path}' failed: {e}",
                    path=e.path or target,
                    entry=(index, entry.path),
                ) from e
            except OSError as e:
                raise FilesystemError(
                    f"Entry {index}/{total} '{entry.path}' failed: {e}",
                    path=target,
                    entry=(index, entry.path),
                ) from e
            result.written.append(entry.path)

        logger.info(
            f"📁 Wrote {len(result.written)} files "
            f"({len(result.unchanged)} unchanged) under {result.root}"
        )
        return result

    def init_version_control(
        self,
        root: Path,
        reuse: bool = False,
        message: Optional[str] = None,
        remote: Optional[str] = None,
    ) -> str:
        """Initialize a repository at *root*, stage everything, and commit once.

        Args:
            root: Working tree root
            reuse: Commit into an existing repository instead of failing
            message: Commit message (defaults to DEFAULT_COMMIT_MESSAGE)
            remote: Optional URL registered as ``origin`` after the commit

        Returns:
            SHA of the created commit

        Raises:
            VcsError: If a repository exists and reuse is off, nothing is
                staged, or git fails
        """
        root = Path(root)
        if not root.is_dir():
            raise VcsError(f"Cannot initialize repository: {root} is not a directory")

        if self.git.repo_exists(root):
            if not reuse:
                raise VcsError(
                    f"A git repository already exists in {root} (use --reuse-repo to commit into it)"
                )
            logger.info(f"Reusing existing git repository in {root}")
        else:
            self.git.init(root)

        self.git.add_all(root)
        if not self.git.has_staged_changes(root):
            raise VcsError(f"Nothing to commit in {root}")

        sha = self.git.commit(root, message or DEFAULT_COMMIT_MESSAGE)
        if remote:
            self.git.add_remote(root, remote)
        return sha

    def scaffold(
        self,
        plan: ScaffoldPlan,
        root: Path,
        overwrite: bool = False,
        git: bool = True,
        reuse_repo: bool = False,
        remote: Optional[str] = None,
    ) -> ScaffoldResult:
        """Run the plan, then make the single initial commit."""
        root = Path(root)
        if git and self.git.repo_exists(root) and not reuse_repo:
            # Fail before writing anything when the commit step cannot succeed
            raise VcsError(
                f"A git repository already exists in {root} (use --reuse-repo to commit into it)"
            )

        result = self.run_plan(plan, root, overwrite=overwrite)
        if git:
            result.commit = self.init_version_control(
                result.root,
                reuse=reuse_repo,
                message=plan.commit_message,
                remote=remote,
            )
        return result
