#!/usr/bin/env python3
"""
AI DevOps MCP Server

Exposes the OpenCode agent setup and the GitHub release wrapper as MCP tools,
plus read-only resources for the agent catalog and effective configuration.
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    Tool,
    TextContent,
    Resource,
    ResourceTemplate,
)

from .agent_catalog import list_agents, render_agent
from .config_tools import config_get_credentials, config_get_effective
from .release_tools import RELEASE_ACTIONS, github_release
from .resources import RESOURCE_DESCRIPTIONS, RESOURCE_TEMPLATES, resolve_resource
from .setup_tools import agents_clean, agents_install, agents_status

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

server = Server("aidevops-server")


_AGENT_DIR_PROPERTY = {
    "type": "string",
    "description": "Agent directory. Defaults to <opencode_config_dir>/agent from the effective config."
}

TOOLS = [
    Tool(
        name="github_release",
        description="Create and manage GitHub releases using gh CLI with automatic changelog generation",
        inputSchema={
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "description": "Action to perform",
                    "enum": RELEASE_ACTIONS
                },
                "version": {
                    "type": "string",
                    "description": "Version tag (e.g., v1.2.3 or 1.2.3)"
                },
                "notes": {
                    "type": "string",
                    "description": "Release notes (optional - auto-generates if not provided)"
                }
            },
            "required": ["action"]
        }
    ),
    Tool(
        name="agents_install",
        description="Install the aidevops agents into the OpenCode agent directory and make sure opencode.json exists.",
        inputSchema={
            "type": "object",
            "properties": {
                "agent_dir": _AGENT_DIR_PROPERTY,
                "framework_dir": {
                    "type": "string",
                    "description": "aidevops framework checkout (must contain AGENTS.md)"
                },
                "merge_config": {
                    "type": "boolean",
                    "description": "Also merge the agent section into opencode.json"
                }
            },
            "required": []
        }
    ),
    Tool(
        name="agents_status",
        description="List agents in the OpenCode agent directory with their mode, and summarize opencode.json.",
        inputSchema={
            "type": "object",
            "properties": {"agent_dir": _AGENT_DIR_PROPERTY},
            "required": []
        }
    ),
    Tool(
        name="agents_clean",
        description="Remove the aidevops agents from the OpenCode agent directory. Other agents are kept.",
        inputSchema={
            "type": "object",
            "properties": {"agent_dir": _AGENT_DIR_PROPERTY},
            "required": []
        }
    ),
    Tool(
        name="agents_render",
        description="Render the Markdown definition of one catalog agent without writing it.",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Agent name",
                    "enum": list_agents()
                }
            },
            "required": ["name"]
        }
    ),
    Tool(
        name="config_get_effective",
        description="Get the fully merged effective configuration. Merges defaults, global, project and environment settings.",
        inputSchema={
            "type": "object",
            "properties": {
                "project_dir": {
                    "type": "string",
                    "description": "Project directory for project-level config. Defaults to current directory."
                }
            },
            "required": []
        }
    ),
    Tool(
        name="config_get_credentials",
        description="Report where API credentials are expected (mcp-env.sh) and whether the file exists. Never returns its contents.",
        inputSchema={
            "type": "object",
            "properties": {
                "project_dir": {
                    "type": "string",
                    "description": "Project directory for project-level config. Defaults to current directory."
                }
            },
            "required": []
        }
    ),
]


def dispatch_tool(name: str, arguments: dict[str, Any]) -> Any:
    if name == "github_release":
        return github_release(
            action=arguments["action"],
            version=arguments.get("version"),
            notes=arguments.get("notes")
        )
    if name == "agents_install":
        return agents_install(
            agent_dir=arguments.get("agent_dir"),
            framework_dir=arguments.get("framework_dir"),
            merge_config=arguments.get("merge_config", False)
        )
    if name == "agents_status":
        return agents_status(agent_dir=arguments.get("agent_dir"))
    if name == "agents_clean":
        return agents_clean(agent_dir=arguments.get("agent_dir"))
    if name == "agents_render":
        return render_agent(arguments["name"])
    if name == "config_get_effective":
        return config_get_effective(project_dir=arguments.get("project_dir"))
    if name == "config_get_credentials":
        return config_get_credentials(project_dir=arguments.get("project_dir"))
    return {"error": f"Unknown tool: {name}"}


@server.list_tools()
async def list_tools() -> list[Tool]:
    return TOOLS


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    try:
        result = dispatch_tool(name, arguments or {})
        text = result if isinstance(result, str) else json.dumps(result, indent=2)
        return [TextContent(type="text", text=text)]

    except Exception as e:
        logger.exception(f"Error executing tool {name}")
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e), "tool": name}, indent=2)
        )]


@server.list_resources()
async def list_resources() -> list[Resource]:
    return [
        Resource(uri=uri, **info)
        for uri, info in RESOURCE_DESCRIPTIONS.items()
    ]


@server.list_resource_templates()
async def list_resource_templates() -> list[ResourceTemplate]:
    return [
        ResourceTemplate(uriTemplate=template, **info)
        for template, info in RESOURCE_TEMPLATES.items()
    ]


@server.read_resource()
async def read_resource(uri) -> str:
    return resolve_resource(str(uri))


async def async_main():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options()
        )


def main():
    """Entry point for the MCP server."""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
