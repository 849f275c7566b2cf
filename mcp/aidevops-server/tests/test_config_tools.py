"""
Tests for the configuration cascade and path resolution.

Run with: pytest tests/test_config_tools.py -v
"""

import os
from pathlib import Path

import pytest

from aidevops_server.config_tools import (
    DEFAULT_CONFIG,
    _deep_merge,
    _drop_invalid,
    _get_global_config_path,
    _get_project_config_path,
    _load_yaml,
    _validate_config,
    config_get_credentials,
    config_get_effective,
    config_get_release_limit,
    resolve_paths,
)
from aidevops_server.setup_tools import agents_status


def _write_global(home: Path, text: str) -> Path:
    path = home / ".config" / "aidevops" / "aidevops-config.yaml"
    path.parent.mkdir(parents=True)
    path.write_text(text)
    return path


def _write_project(project: Path, text: str) -> Path:
    path = project / ".aidevops" / "config.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestConfigPaths:
    def test_global_path_under_home(self, isolated_home):
        assert _get_global_config_path() == isolated_home / ".config" / "aidevops" / "aidevops-config.yaml"

    def test_project_path_uses_cwd_when_no_dir(self):
        assert _get_project_config_path() == Path.cwd() / ".aidevops" / "config.yaml"

    def test_project_path_explicit(self, tmp_path):
        assert _get_project_config_path(str(tmp_path)) == tmp_path / ".aidevops" / "config.yaml"


class TestEffectiveConfig:
    def test_defaults_only(self):
        result = config_get_effective()
        assert result["config"] == DEFAULT_CONFIG
        assert result["sources"] == []
        assert result["warnings"] == []
        assert result["has_global"] is False

    def test_defaults_not_mutated(self, isolated_home):
        _write_global(isolated_home, "paths:\n  agent_subdir: agents\n")
        config_get_effective()
        assert DEFAULT_CONFIG["paths"]["agent_subdir"] == "agent"

    def test_global_overrides_defaults(self, isolated_home):
        path = _write_global(isolated_home, "paths:\n  framework_dir: /opt/aidevops\n")
        result = config_get_effective()
        assert result["has_global"] is True
        assert result["config"]["paths"]["framework_dir"] == "/opt/aidevops"
        assert result["config"]["paths"]["agent_subdir"] == "agent"
        assert result["sources"] == [str(path)]

    def test_project_overrides_global(self, isolated_home, tmp_path):
        _write_global(isolated_home, "release:\n  list_limit: 5\n")
        _write_project(tmp_path / "project", "release:\n  list_limit: 20\n")
        result = config_get_effective()
        assert result["config"]["release"]["list_limit"] == 20
        assert len(result["sources"]) == 2

    def test_env_overrides_files(self, tmp_path, monkeypatch):
        _write_project(tmp_path / "project", "paths:\n  opencode_config_dir: /from/yaml\n")
        monkeypatch.setenv("OPENCODE_CONFIG_DIR", "/from/env")
        result = config_get_effective()
        assert result["config"]["paths"]["opencode_config_dir"] == "/from/env"
        assert result["sources"][-1] == "environment"
        assert result["has_env"] is True

    def test_unknown_key_warns(self, isolated_home):
        _write_global(isolated_home, "paths:\n  bogus: 1\nextra: true\n")
        warnings = config_get_effective()["warnings"]
        assert "Unknown config key: 'paths.bogus'" in warnings
        assert "Unknown config key: 'extra'" in warnings

    def test_wrong_type_warns(self, isolated_home):
        _write_global(isolated_home, "release:\n  list_limit: lots\n")
        warnings = config_get_effective()["warnings"]
        assert warnings == ["Invalid type for 'release.list_limit': expected int, got str"]

    @pytest.mark.parametrize("text,warning", [
        ("paths:\n  agent_subdir: 5\n", "Invalid type for 'paths.agent_subdir': expected str, got int"),
        ("paths:\n  opencode_config_dir: 7\n", "Invalid type for 'paths.opencode_config_dir': expected str, got int"),
        ("paths: null\n", "Invalid type for 'paths': expected dict, got NoneType"),
        ("release: 5\n", "Invalid type for 'release': expected dict, got int"),
    ])
    def test_wrong_type_keeps_default(self, isolated_home, text, warning):
        _write_global(isolated_home, text)
        result = config_get_effective()
        assert result["warnings"] == [warning]
        assert result["config"] == DEFAULT_CONFIG

    def test_wrong_type_keeps_valid_siblings(self, tmp_path):
        _write_project(tmp_path / "project", "paths:\n  agent_subdir: 5\n  framework_dir: /opt/aidevops\n")
        paths = config_get_effective()["config"]["paths"]
        assert paths["agent_subdir"] == "agent"
        assert paths["framework_dir"] == "/opt/aidevops"

    def test_invalid_yaml_is_ignored(self, isolated_home):
        _write_global(isolated_home, "paths: [unclosed\n")
        result = config_get_effective()
        assert result["has_global"] is False
        assert result["config"] == DEFAULT_CONFIG


class TestHelpers:
    def test_deep_merge(self):
        merged = _deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": 4}

    def test_load_yaml_missing(self, tmp_path):
        assert _load_yaml(tmp_path / "missing.yaml") is None

    def test_load_yaml_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert _load_yaml(path) is None

    def test_bool_is_not_an_int(self):
        warnings = _validate_config({"release": {"list_limit": True}}, DEFAULT_CONFIG)
        assert len(warnings) == 1

    def test_drop_invalid(self):
        config = {"paths": {"agent_subdir": 5, "framework_dir": "/fw"}, "release": None, "extra": 1}
        assert _drop_invalid(config, DEFAULT_CONFIG) == {"paths": {"framework_dir": "/fw"}, "extra": 1}


class TestResolvePaths:
    def test_default_locations(self, isolated_home):
        paths = resolve_paths()
        config_dir = isolated_home / ".config" / "opencode"
        assert paths["config_dir"] == config_dir
        assert paths["agent_dir"] == config_dir / "agent"
        assert paths["opencode_json"] == config_dir / "opencode.json"
        assert paths["framework_dir"] == isolated_home / "git" / "aidevops"
        assert paths["credentials_file"] == isolated_home / ".config" / "aidevops" / "mcp-env.sh"

    def test_env_framework_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AIDEVOPS_FRAMEWORK_DIR", str(tmp_path / "fw"))
        assert resolve_paths()["framework_dir"] == tmp_path / "fw"

    @pytest.mark.parametrize("text", [
        "paths:\n  agent_subdir: 5\n",
        "paths:\n  opencode_config_dir: 7\n",
        "paths: null\n",
    ])
    def test_wrong_typed_paths_fall_back(self, isolated_home, text):
        _write_global(isolated_home, text)
        paths = resolve_paths()
        assert paths["agent_dir"] == isolated_home / ".config" / "opencode" / "agent"

    def test_wrong_typed_paths_do_not_break_status(self, isolated_home):
        _write_global(isolated_home, "paths:\n  agent_subdir: 5\n")
        result = agents_status()
        assert result["agent_dir"] == str(isolated_home / ".config" / "opencode" / "agent")
        assert result["exists"] is False


class TestReleaseLimit:
    def test_default(self):
        assert config_get_release_limit() == 10

    @pytest.mark.parametrize("value", ["0", "-3", "many", "true"])
    def test_invalid_falls_back(self, tmp_path, value):
        _write_project(tmp_path / "project", f"release:\n  list_limit: {value}\n")
        assert config_get_release_limit() == 10


class TestCredentials:
    def test_missing(self, isolated_home):
        result = config_get_credentials()
        assert result["exists"] is False
        assert result["mode"] is None

    def test_reports_mode_without_content(self, isolated_home):
        path = isolated_home / ".config" / "aidevops" / "mcp-env.sh"
        path.parent.mkdir(parents=True)
        path.write_text("export SECRET_TOKEN=abc123\n")
        os.chmod(path, 0o600)
        result = config_get_credentials()
        assert result == {"credentials_file": str(path), "exists": True, "mode": "0o600"}
        assert "abc123" not in repr(result)
