"""
MCP Resources for the AI DevOps Server

Provides URI-based access to the agent catalog, installed agents and
configuration data.

Resource URIs:
  - agents://catalog                    - Agent metadata (opencode.json agent section)
  - agents://status                     - Installed agents and opencode.json summary
  - agents://{name}                     - Rendered Markdown for one catalog agent
  - config://effective                  - Fully merged effective config
"""

import json
from typing import Any

from .agent_catalog import agent_config_reference, list_agents, render_agent
from .config_tools import config_get_effective
from .setup_tools import agents_status


def get_catalog() -> dict[str, Any]:
    return {
        "agents": agent_config_reference(),
        "count": len(list_agents()),
    }


def get_effective_config() -> dict[str, Any]:
    return config_get_effective()


def resolve_resource(uri: str) -> str:
    if uri == "agents://catalog":
        return json.dumps(get_catalog(), indent=2)

    if uri == "agents://status":
        return json.dumps(agents_status(), indent=2)

    if uri == "config://effective":
        return json.dumps(get_effective_config(), indent=2)

    if uri.startswith("agents://"):
        name = uri[len("agents://"):]
        if name in list_agents():
            return render_agent(name)

    return json.dumps({"error": f"Unknown resource URI: {uri}"})


RESOURCE_DESCRIPTIONS = {
    "agents://catalog": {
        "name": "Agent catalog",
        "description": "Metadata for every agent the framework installs, as an opencode.json agent section",
        "mimeType": "application/json"
    },
    "agents://status": {
        "name": "Installed agents",
        "description": "Agents present in the OpenCode agent directory and opencode.json summary",
        "mimeType": "application/json"
    },
    "config://effective": {
        "name": "Effective configuration",
        "description": "Fully merged configuration from defaults, YAML files and environment",
        "mimeType": "application/json"
    }
}


RESOURCE_TEMPLATES = {
    "agents://{name}": {
        "name": "Agent definition",
        "description": "Rendered Markdown (front matter + body) for a catalog agent",
        "mimeType": "text/markdown"
    }
}
