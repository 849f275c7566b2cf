"""
Setup Tools for the AI DevOps MCP Server

Installs the agent catalog into the OpenCode agent directory, reports what is
installed and removes the framework's own agents.

Layout written by install:
  <config_dir>/agent/<name>.md     one file per catalog agent
  <config_dir>/opencode.json       created minimal if missing
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock

from .agent_catalog import (
    agent_config_reference,
    install_note,
    list_agents,
    render_agent,
)
from .config_tools import OPENCODE_JSON_NAME, resolve_paths

logger = logging.getLogger(__name__)

FRAMEWORK_MARKER = "AGENTS.md"

MINIMAL_OPENCODE_CONFIG = {
    "$schema": "https://opencode.ai/config.json",
    "mcp": {},
    "tools": {},
    "agent": {},
}


def _resolve_dirs(agent_dir: Optional[str]) -> tuple[Path, Path]:
    """Return (agent_dir, config_dir). An explicit agent dir implies its parent as config dir."""
    if agent_dir:
        agent_path = Path(agent_dir).expanduser()
        return agent_path, agent_path.parent
    paths = resolve_paths()
    return paths["agent_dir"], paths["config_dir"]


def read_frontmatter_field(path: Path, field: str) -> str:
    """Return the value of the first `field:` line, spaces removed, or 'unknown'."""
    prefix = f"{field}:"
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                if line.startswith(prefix):
                    return line[len(prefix):].strip().replace(" ", "")
    except OSError:
        return "unknown"
    return "unknown"


def check_prerequisites(framework_dir: Path, config_dir: Path) -> dict[str, Any]:
    errors = 0
    messages = []

    if not shutil.which("opencode"):
        # Not fatal: OpenCode may be installed after the agents.
        messages.append(("warning", "opencode CLI not found - install from https://opencode.ai"))

    if not (framework_dir / FRAMEWORK_MARKER).is_file():
        messages.append(("error", f"aidevops framework not found at {framework_dir}"))
        errors += 1

    if not config_dir.is_dir():
        messages.append(("info", "Creating OpenCode config directory..."))
        config_dir.mkdir(parents=True, exist_ok=True)

    return {"errors": errors, "messages": messages}


def write_agent_files(agent_dir: Path) -> list[dict[str, str]]:
    """Write every catalog agent to <agent_dir>/<name>.md."""
    agent_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name in list_agents():
        dest = agent_dir / f"{name}.md"
        dest.write_text(render_agent(name), encoding="utf-8")
        logger.debug("Wrote %s", dest)
        written.append({"name": name, "file": dest.name, "role": install_note(name)})
    return written


def ensure_opencode_json(config_dir: Path, merge_agents: bool = False) -> dict[str, Any]:
    """Create a minimal opencode.json if missing; optionally merge the agent section.

    An existing file is left untouched unless merge_agents is set. If it cannot
    be parsed as a JSON object the result carries an "error" and nothing is
    written.
    """
    config_dir.mkdir(parents=True, exist_ok=True)
    opencode_json = config_dir / OPENCODE_JSON_NAME
    lock_file = config_dir / f"{OPENCODE_JSON_NAME}.lock"
    created = False
    merged: list[str] = []

    with FileLock(str(lock_file), timeout=5):
        if opencode_json.exists():
            if not merge_agents:
                return {"path": str(opencode_json), "created": False, "merged": merged}
            try:
                with open(opencode_json, encoding="utf-8") as f:
                    config = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error("Could not parse %s: %s", opencode_json, e)
                return {
                    "path": str(opencode_json),
                    "created": False,
                    "merged": merged,
                    "error": f"Could not parse {opencode_json}: {e}",
                }
            if not isinstance(config, dict):
                logger.error("%s is not a JSON object", opencode_json)
                return {
                    "path": str(opencode_json),
                    "created": False,
                    "merged": merged,
                    "error": f"{opencode_json} is not a JSON object",
                }
        else:
            config = json.loads(json.dumps(MINIMAL_OPENCODE_CONFIG))
            created = True

        if merge_agents:
            agents = config.get("agent")
            if not isinstance(agents, dict):
                agents = {}
            reference = agent_config_reference()
            agents.update(reference)
            config["agent"] = agents
            merged = list(reference)

        opencode_json.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")

    logger.info("%s %s", "Created" if created else "Updated", opencode_json)
    return {"path": str(opencode_json), "created": created, "merged": merged}


def agents_install(
    agent_dir: Optional[str] = None,
    framework_dir: Optional[str] = None,
    merge_config: bool = False,
) -> dict[str, Any]:
    agent_path, config_dir = _resolve_dirs(agent_dir)
    framework_path = Path(framework_dir).expanduser() if framework_dir else resolve_paths()["framework_dir"]

    prereq = check_prerequisites(framework_path, config_dir)
    messages = list(prereq["messages"])
    if prereq["errors"]:
        logger.error("Prerequisites check failed (%d error(s))", prereq["errors"])
        return {
            "success": False,
            "error": "Prerequisites check failed",
            "failures": prereq["errors"],
            "messages": messages,
            "installed": [],
        }

    # opencode.json is checked before any agent file is written.
    config_result = ensure_opencode_json(config_dir, merge_agents=merge_config)
    if "error" in config_result:
        messages.append(("error", config_result["error"]))
        return {
            "success": False,
            "error": config_result["error"],
            "failures": 1,
            "messages": messages,
            "installed": [],
            "opencode_json": config_result,
        }

    if not agent_path.is_dir():
        messages.append(("info", f"Creating agent directory: {agent_path}"))

    installed = write_agent_files(agent_path)
    if config_result["created"]:
        messages.append(("warning", "opencode.json not found - created minimal config"))

    logger.info("Installed %d agents into %s", len(installed), agent_path)
    return {
        "success": True,
        "agent_dir": str(agent_path),
        "installed": installed,
        "count": len(installed),
        "opencode_json": config_result,
        "messages": messages,
    }


def _count_mcp_servers(opencode_json: Path) -> Optional[int]:
    try:
        with open(opencode_json, encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not parse %s: %s", opencode_json, e)
        return None
    mcp = config.get("mcp") if isinstance(config, dict) else None
    return len(mcp) if isinstance(mcp, dict) else 0


def agents_status(agent_dir: Optional[str] = None) -> dict[str, Any]:
    agent_path, config_dir = _resolve_dirs(agent_dir)
    opencode_json = config_dir / OPENCODE_JSON_NAME

    agents = []
    exists = agent_path.is_dir()
    if exists:
        for agent_file in sorted(agent_path.glob("*.md")):
            if agent_file.is_file():
                agents.append({
                    "name": agent_file.stem,
                    "mode": read_frontmatter_field(agent_file, "mode"),
                })

    json_exists = opencode_json.is_file()
    return {
        "agent_dir": str(agent_path),
        "exists": exists,
        "count": len(agents),
        "agents": agents,
        "opencode_json": str(opencode_json),
        "opencode_json_exists": json_exists,
        "mcp_servers": _count_mcp_servers(opencode_json) if json_exists else None,
    }


def agents_clean(agent_dir: Optional[str] = None) -> dict[str, Any]:
    """Remove the catalog's agent files; other files in the directory are kept."""
    agent_path, _ = _resolve_dirs(agent_dir)
    removed = []
    for name in list_agents():
        agent_file = agent_path / f"{name}.md"
        if agent_file.is_file():
            agent_file.unlink()
            logger.info("Removed %s", agent_file)
            removed.append(name)
    return {"agent_dir": str(agent_path), "removed": removed, "count": len(removed)}
