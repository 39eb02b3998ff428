"""Shared test fixtures for Stencil tests."""
import pytest

from stencil.models.plan import ScaffoldPlan, TemplateEntry
from stencil.scaffold.core import ScaffoldManager
from stencil.services.git_manager import GitManager


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's config and give it a committer identity."""
    global_config = tmp_path / "gitconfig"
    global_config.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Stencil Tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Stencil Tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@example.com")


@pytest.fixture
def target(tmp_path):
    """Empty target root for scaffolding."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def manager():
    """ScaffoldManager backed by the real git CLI."""
    return ScaffoldManager(git=GitManager())


@pytest.fixture
def simple_plan():
    """The one-file plan from the scaffolding contract."""
    return ScaffoldPlan.from_pairs([("a/b/file.txt", "hello")], name="simple")


@pytest.fixture
def multi_plan():
    """A plan with nested files, an executable script and an empty directory."""
    return ScaffoldPlan(
        name="multi",
        directories=[".github/workflows"],
        entries=[
            TemplateEntry(path="README.md", content="# Demo\n"),
            TemplateEntry(path="backend/main.py", content="print('hi')\n"),
            TemplateEntry(path="backend/build.sh", content="#!/bin/bash\necho build\n", executable=True),
            TemplateEntry(path="frontend/src/hooks/useThing.js", content="export const x = `${y}`;\n"),
        ],
    )
