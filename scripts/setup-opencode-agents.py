#!/usr/bin/env python3
"""
AI DevOps Framework - OpenCode Agent Setup

Creates the aidevops agents in ~/.config/opencode/agent/ and makes sure
opencode.json exists.

Usage:
    python3 scripts/setup-opencode-agents.py install               # Install agents
    python3 scripts/setup-opencode-agents.py install --merge-config
    python3 scripts/setup-opencode-agents.py status                # Show current agents
    python3 scripts/setup-opencode-agents.py clean [--yes]         # Remove aidevops agents
    python3 scripts/setup-opencode-agents.py help

Exit codes:
    0 = success
    1 = unknown command or failed prerequisite check
"""

import argparse
import sys
from pathlib import Path

# Add MCP server package to path so we can import directly
_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
_MCP_PKG = _REPO_ROOT / "mcp" / "aidevops-server"
if str(_MCP_PKG) not in sys.path:
    sys.path.insert(0, str(_MCP_PKG))

try:
    from aidevops_server.setup_tools import (
        FRAMEWORK_MARKER,
        agents_clean,
        agents_install,
        agents_status,
    )
except ImportError as e:
    print(
        f"Error: Could not import aidevops-server package.\n"
        f"  Looked in: {_MCP_PKG}\n"
        f"  Import error: {e}\n"
        f"  Fix: Run 'pip install -e {_REPO_ROOT}' or ensure the package is installed.",
        file=sys.stderr,
    )
    sys.exit(1)


RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
NC = "\033[0m"

MARKERS = {
    "success": (GREEN, "✓"),
    "warning": (YELLOW, "⚠"),
    "error": (RED, "✗"),
    "info": (BLUE, "ℹ"),
}

HELP_TEXT = """AI DevOps Framework - OpenCode Agent Setup

Usage: ./setup-opencode-agents.py [command] [options]

Commands:
  install   Install agents with full configurations
  status    Show current agent configuration
  clean     Remove aidevops agents (keeps other agents)
  help      Show this help message

Options:
  --agent-dir DIR      Agent directory (default: ~/.config/opencode/agent)
  --framework-dir DIR  aidevops checkout containing AGENTS.md
  --merge-config       install: merge the agent section into opencode.json
  -y, --yes            clean: do not ask for confirmation

The script creates specialized AI agents for:

  PRIMARY AGENT:
    aidevops        Full framework access with Context7 docs

  SERVICE SUBAGENTS:
    hostinger       Hostinger hosting operations
    hetzner         Hetzner Cloud infrastructure (multi-account)
    wordpress       WordPress orchestrator (routes to specialized agents)
      wp-dev        WordPress development, MCP Adapter, debugging
      wp-admin      WordPress content, plugins, WP-CLI
      localwp       LocalWP database access via MCP
      mainwp        MainWP fleet management
    seo             Google Search Console + Ahrefs
    browser-automation  Chrome DevTools + Playwright
    git-platforms   GitHub/GitLab/Gitea CLIs
    dns-providers   Cloudflare, Namecheap, Route 53
    crawl4ai-usage  Web crawling and extraction

  UTILITY SUBAGENTS:
    context-builder Token-efficient context generation (~80% reduction)

  META AGENTS:
    code-quality    Quality scanning + learning loop + PR creation
    agent-review    Session analysis + framework improvement + PR creation

FEATURES:
  - Context7 enabled for development-focused agents
  - Learning loops: code-quality and agent-review can submit PRs
  - Restricted bash permissions for PR-creating agents
  - Full MCP tool mappings per agent

Agents are installed to: ~/.config/opencode/agent/

For more information:
  https://github.com/marcusquinn/aidevops
  https://opencode.ai/docs/agents
"""


def emit(level: str, message: str) -> None:
    color, mark = MARKERS[level]
    if sys.stdout.isatty():
        print(f"{color}{mark}{NC} {message}")
    else:
        print(f"{mark} {message}")


def print_header() -> None:
    rule = "========================================"
    title = "  AI DevOps - OpenCode Agent Setup"
    if sys.stdout.isatty():
        rule, title = f"{BLUE}{rule}{NC}", f"{BLUE}{title}{NC}"
    print(rule)
    print(title)
    print(rule)
    print()


def _default_framework_dir() -> str | None:
    """Use this checkout when it is the framework; otherwise defer to config."""
    if (_REPO_ROOT / FRAMEWORK_MARKER).is_file():
        return str(_REPO_ROOT)
    return None


def cmd_install(args: argparse.Namespace) -> int:
    print_header()
    framework_dir = args.framework_dir or _default_framework_dir()
    result = agents_install(
        agent_dir=args.agent_dir,
        framework_dir=framework_dir,
        merge_config=args.merge_config,
    )
    for level, message in result["messages"]:
        emit(level, message)

    if not result["success"]:
        if "opencode_json" not in result:
            emit("error", f"Prerequisites check failed ({result['failures']} error(s))")
        return 1

    emit("info", "Generated agent files with full configurations")
    for agent in result["installed"]:
        emit("success", f"Created {agent['file']} ({agent['role']})")

    config = result["opencode_json"]
    if config["merged"]:
        emit("success", f"Merged {len(config['merged'])} agent(s) into {config['path']}")
    else:
        emit("info", "Agent configuration ready for opencode.json")
        print("Agents work from the markdown files; run with --merge-config to add")
        print("the 'agent' section to opencode.json as well.")

    print()
    emit("success", "OpenCode agents installed successfully!")
    print()
    emit("info", "Installed agents:")
    print("  - aidevops (primary) - Full framework access")
    print("  - hostinger, hetzner, seo (infrastructure subagents)")
    print("  - wordpress (orchestrator) → wp-dev, wp-admin, localwp, mainwp")
    print("  - code-quality (with learning loop for framework improvement)")
    print("  - browser-automation, git-platforms, dns-providers")
    print("  - context-builder (token-efficient context generation)")
    print("  - agent-review (meta-agent for continuous improvement)")
    print()
    emit("info", "Next steps:")
    print(f"  1. Configure MCP servers in {config['path']}")
    print("  2. Set API credentials in ~/.config/aidevops/mcp-env.sh")
    print("  3. Restart opencode to load new agents")
    print()
    emit("info", "Usage:")
    print("  - Use Tab to switch between primary agents")
    print("  - Use @agent-name to invoke subagents")
    print("  - Use @context-builder before complex coding tasks for optimized context")
    print("  - Use @agent-review at end of sessions to capture improvements")
    print("  - Use @code-quality to fix issues AND improve framework guidance")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    print_header()
    status = agents_status(agent_dir=args.agent_dir)

    print(f"Agent Directory: {status['agent_dir']}")
    print()
    if not status["exists"]:
        emit("warning", "Agent directory does not exist")
    elif status["count"]:
        emit("success", f"Found {status['count']} agent(s):")
        print()
        for agent in status["agents"]:
            print(f"  - {agent['name']} ({agent['mode']})")
    else:
        emit("warning", "No agents found")

    print()
    if status["opencode_json_exists"]:
        emit("success", "opencode.json exists")
        servers = status["mcp_servers"]
        print(f"  - MCP servers configured: {servers if servers is not None else 'unreadable'}")
    else:
        emit("warning", "opencode.json not found")
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    print_header()
    status = agents_status(agent_dir=args.agent_dir)
    emit("warning", f"This will remove aidevops agents from {status['agent_dir']}")
    print()

    if not args.yes:
        try:
            response = input("Continue? [y/N] ")
        except EOFError:
            response = ""
        if response.strip() not in ("y", "Y"):
            print("Cancelled.")
            return 0

    result = agents_clean(agent_dir=args.agent_dir)
    for name in result["removed"]:
        emit("success", f"Removed {name}.md")
    print()
    emit("info", f"Removed {result['count']} agent(s)")
    return 0


def cmd_help(args: argparse.Namespace) -> int:
    print(HELP_TEXT)
    return 0


COMMANDS = {
    "install": cmd_install,
    "status": cmd_status,
    "clean": cmd_clean,
    "help": cmd_help,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Set up OpenCode agents for the aidevops framework.",
        add_help=False,
    )
    parser.add_argument("command", nargs="?", default="help")
    parser.add_argument("-h", "--help", action="store_true", dest="show_help")
    parser.add_argument("--agent-dir", help="Agent directory override")
    parser.add_argument("--framework-dir", help="aidevops framework checkout")
    parser.add_argument("--merge-config", action="store_true",
                        help="Merge the agent section into opencode.json")
    parser.add_argument("-y", "--yes", action="store_true",
                        help="Skip the clean confirmation prompt")
    args = parser.parse_args(argv)

    if args.show_help:
        return cmd_help(args)

    handler = COMMANDS.get(args.command)
    if handler is None:
        emit("error", f"Unknown command: {args.command}")
        print(HELP_TEXT)
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
