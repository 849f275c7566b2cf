"""
Configuration Tools for the AI DevOps MCP Server

Handles YAML configuration cascade merge:
  1. Built-in defaults
  2. Global config:    ~/.config/aidevops/aidevops-config.yaml
  3. Project config:   <project>/.aidevops/config.yaml
  4. Environment:      AIDEVOPS_FRAMEWORK_DIR, OPENCODE_CONFIG_DIR

Each level overrides the previous.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    "paths": {
        "opencode_config_dir": "~/.config/opencode",
        "agent_subdir": "agent",
        "framework_dir": "~/git/aidevops",
        "credentials_file": "~/.config/aidevops/mcp-env.sh",
    },
    "release": {
        "list_limit": 10,
    },
}

ENV_OVERRIDES = {
    "AIDEVOPS_FRAMEWORK_DIR": ("paths", "framework_dir"),
    "OPENCODE_CONFIG_DIR": ("paths", "opencode_config_dir"),
}

OPENCODE_JSON_NAME = "opencode.json"


def _type_matches(value: Any, default: Any) -> bool:
    if isinstance(default, int) and isinstance(value, bool):
        return False
    return isinstance(value, type(default))


def _validate_config(config: dict, defaults: dict, prefix: str = "") -> list[str]:
    """Validate config against defaults, returning warnings for unknown keys and wrong types."""
    warnings = []
    for key, value in config.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if key not in defaults:
            warnings.append(f"Unknown config key: '{full_key}'")
        elif isinstance(value, dict) and isinstance(defaults[key], dict):
            warnings.extend(_validate_config(value, defaults[key], full_key))
        elif not _type_matches(value, defaults[key]):
            warnings.append(
                f"Invalid type for '{full_key}': expected {type(defaults[key]).__name__}, got {type(value).__name__}"
            )
    return warnings


def _drop_invalid(config: dict, defaults: dict) -> dict:
    """Return config without known keys whose type does not match the default.

    Dropped keys keep their default value after the merge. Unknown keys pass
    through; they only produce a warning.
    """
    result = {}
    for key, value in config.items():
        if key not in defaults:
            result[key] = value
        elif isinstance(defaults[key], dict):
            if isinstance(value, dict):
                result[key] = _drop_invalid(value, defaults[key])
        elif _type_matches(value, defaults[key]):
            result[key] = value
    return result


def _deep_merge(base: dict, override: dict) -> dict:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml(path: Path) -> Optional[dict]:
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def _get_global_config_path() -> Path:
    return Path.home() / ".config" / "aidevops" / "aidevops-config.yaml"


def _get_project_config_path(project_dir: Optional[str] = None) -> Path:
    base = Path(project_dir) if project_dir else Path.cwd()
    return base / ".aidevops" / "config.yaml"


def _env_config() -> dict:
    config: dict = {}
    for var, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value:
            config.setdefault(section, {})[key] = value
    return config


def config_get_effective(project_dir: Optional[str] = None) -> dict[str, Any]:
    config = copy.deepcopy(DEFAULT_CONFIG)
    warnings = []
    sources = []

    global_path = _get_global_config_path()
    global_config = _load_yaml(global_path)
    if global_config:
        warnings.extend(_validate_config(global_config, DEFAULT_CONFIG))
        config = _deep_merge(config, _drop_invalid(global_config, DEFAULT_CONFIG))
        sources.append(str(global_path))

    project_path = _get_project_config_path(project_dir)
    project_config = _load_yaml(project_path)
    if project_config:
        warnings.extend(_validate_config(project_config, DEFAULT_CONFIG))
        config = _deep_merge(config, _drop_invalid(project_config, DEFAULT_CONFIG))
        sources.append(str(project_path))

    env_config = _env_config()
    if env_config:
        config = _deep_merge(config, env_config)
        sources.append("environment")

    for warning in warnings:
        logger.warning(warning)

    return {
        "config": config,
        "sources": sources,
        "warnings": warnings,
        "has_global": global_config is not None,
        "has_project": project_config is not None,
        "has_env": bool(env_config),
    }


def _expand(value: str) -> Path:
    return Path(os.path.expanduser(value))


def resolve_paths(project_dir: Optional[str] = None) -> dict[str, Path]:
    """Resolve the effective filesystem locations used by the setup tools."""
    paths = config_get_effective(project_dir)["config"]["paths"]
    config_dir = _expand(paths["opencode_config_dir"])
    return {
        "config_dir": config_dir,
        "agent_dir": config_dir / paths["agent_subdir"],
        "opencode_json": config_dir / OPENCODE_JSON_NAME,
        "framework_dir": _expand(paths["framework_dir"]),
        "credentials_file": _expand(paths["credentials_file"]),
    }


def config_get_release_limit(project_dir: Optional[str] = None) -> int:
    release = config_get_effective(project_dir)["config"].get("release")
    limit = release.get("list_limit") if isinstance(release, dict) else None
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        return 10
    return limit


def config_get_credentials(project_dir: Optional[str] = None) -> dict[str, Any]:
    """Report where API credentials are expected. The file is never read here."""
    path = resolve_paths(project_dir)["credentials_file"]
    exists = path.is_file()
    return {
        "credentials_file": str(path),
        "exists": exists,
        "mode": oct(path.stat().st_mode & 0o777) if exists else None,
    }
