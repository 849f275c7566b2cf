"""Shared fixtures: every test runs against a throwaway HOME and project dir."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("AIDEVOPS_FRAMEWORK_DIR", raising=False)
    monkeypatch.delenv("OPENCODE_CONFIG_DIR", raising=False)
    monkeypatch.chdir(project)
    return home


@pytest.fixture
def framework_dir(tmp_path):
    fw = tmp_path / "aidevops"
    fw.mkdir()
    (fw / "AGENTS.md").write_text("# AI DevOps Framework\n")
    return fw


@pytest.fixture
def agent_dir(tmp_path):
    return tmp_path / "opencode" / "agent"
