"""Integration tests: real files, real git."""
import shutil
import subprocess

import pytest

from stencil.core.template_loader import TemplateLoader
from stencil.models.plan import DEFAULT_COMMIT_MESSAGE
from stencil.services.git_manager import GitManager, VcsError

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

pytestmark = [requires_git, pytest.mark.usefixtures("git_env")]


def git(root, *args):
    return subprocess.run(
        ["git", *args], cwd=root, capture_output=True, text=True, check=True
    ).stdout.strip()


class TestScaffoldIntegration:
    """Complete scaffold workflows end-to-end."""

    def test_single_file_single_commit(self, target, manager, simple_plan):
        manager.run_plan(simple_plan, target)
        sha = manager.init_version_control(target, message="Initial commit")

        assert (target / "a" / "b" / "file.txt").read_text() == "hello"
        assert git(target, "rev-list", "--count", "HEAD") == "1"
        assert git(target, "rev-parse", "HEAD") == sha
        assert manager.git.list_commit_files(target) == ["a/b/file.txt"]
        assert git(target, "log", "-1", "--format=%s") == "Initial commit"

    def test_init_version_control_with_root_only(self, target, manager, simple_plan):
        manager.run_plan(simple_plan, target)

        sha = manager.init_version_control(target)

        assert git(target, "rev-list", "--count", "HEAD") == "1"
        assert git(target, "rev-parse", "HEAD") == sha
        assert git(target, "log", "-1", "--format=%s") == DEFAULT_COMMIT_MESSAGE

    def test_wasm_demo_plan(self, target, manager):
        plan = TemplateLoader().load_plan("wasm-demo")

        result = manager.scaffold(plan, target)

        assert len(result.commit) == 40
        committed = sorted(manager.git.list_commit_files(target))
        assert committed == sorted(e.path for e in plan.entries)
        assert git(target, "log", "-1", "--format=%s") == plan.commit_message
        # executable bit is recorded by git
        ls = git(target, "ls-files", "-s", "backend/wasm-demo/build.sh")
        assert ls.startswith("100755")
        assert (target / ".github" / "workflows").is_dir()

    def test_existing_repo_not_duplicated(self, target, manager, simple_plan):
        manager.scaffold(simple_plan, target)

        with pytest.raises(VcsError, match="already exists"):
            manager.init_version_control(target, message="Second")

        assert git(target, "rev-list", "--count", "HEAD") == "1"

    def test_reuse_existing_repo(self, target, manager, simple_plan, multi_plan):
        manager.scaffold(simple_plan, target)

        result = manager.scaffold(multi_plan, target, reuse_repo=True)

        assert git(target, "rev-list", "--count", "HEAD") == "2"
        assert sorted(manager.git.list_commit_files(target)) == sorted(result.written)

    def test_reuse_with_nothing_new(self, target, manager, simple_plan):
        manager.scaffold(simple_plan, target)

        with pytest.raises(VcsError, match="Nothing to commit"):
            manager.scaffold(simple_plan, target, reuse_repo=True)

        assert git(target, "rev-list", "--count", "HEAD") == "1"

    def test_empty_tree_fails(self, target, manager):
        with pytest.raises(VcsError, match="Nothing to commit"):
            manager.init_version_control(target, message="Initial commit")

    def test_remote_registered(self, target, manager, simple_plan):
        manager.scaffold(simple_plan, target, remote="git@example.com:me/demo.git")
        assert git(target, "remote", "get-url", "origin") == "git@example.com:me/demo.git"

    def test_git_manager_commit_count(self, target, manager, simple_plan):
        manager.scaffold(simple_plan, target)
        assert GitManager().commit_count(target) == 1
