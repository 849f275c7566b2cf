"""
Agent Catalog for the AI DevOps OpenCode setup

Holds the metadata for every agent the framework installs into OpenCode and
renders it as Markdown front matter or as the JSON `agent` section of
opencode.json. Agent bodies live in agents/*.md next to this module.

The catalog order is also the cleanup list: `clean` removes exactly these
names and nothing else.
"""

import json
from pathlib import Path
from typing import Any, Optional

AGENTS_DIR = Path(__file__).resolve().parent / "agents"

AGENT_NAMES = [
    "aidevops",
    "hostinger",
    "hetzner",
    "wordpress",
    "wp-dev",
    "wp-admin",
    "localwp",
    "mainwp",
    "seo",
    "code-quality",
    "browser-automation",
    "context7-mcp-setup",
    "google-search-console-examples",
    "git-platforms",
    "crawl4ai-usage",
    "dns-providers",
    "agent-review",
    "context-builder",
]

AGENT_DESCRIPTIONS = {
    "aidevops": "AI DevOps Framework - comprehensive infrastructure automation across 29+ services. Primary agent - use Tab to switch. Orchestrates subagents in order: research → infrastructure → development → quality",
    "hostinger": "[INFRA-3] Hostinger hosting - websites, WordPress, DNS. Run AFTER dns-providers, hetzner. Sequential with infrastructure agents",
    "hetzner": "[INFRA-2] Hetzner Cloud - servers, firewalls, volumes, Docker. Run AFTER dns-providers. Sequential with infrastructure agents",
    "wordpress": "[DEV-1] WordPress orchestrator - routes to @wp-dev (development) or @wp-admin (content/maintenance). Parallel with git-platforms, crawl4ai",
    "wp-dev": "[DEV-1a] WordPress development - MCP Adapter, themes, plugins, debugging, testing. Called from @wordpress",
    "wp-admin": "[DEV-1b] WordPress admin - content, plugins, backups, WP-CLI. Called from @wordpress",
    "localwp": "[DEV-1c] LocalWP database - MySQL queries via MCP. Called from @wp-dev",
    "mainwp": "[DEV-1d] MainWP fleet - bulk updates, backups, security scans. Called from @wp-admin",
    "seo": "[RESEARCH-1] SEO analysis - GSC, Ahrefs, PageSpeed. Parallel with context7, browser-automation. Run FIRST in workflow",
    "code-quality": "[QUALITY-1] Code quality - SonarCloud, Codacy, ShellCheck, Snyk. Run BEFORE agent-review. Sequential - always near END of session",
    "browser-automation": "[RESEARCH-2] Browser automation - Chrome DevTools, Playwright, scraping. Parallel with seo, context7. Run FIRST in workflow",
    "context7-mcp-setup": "[RESEARCH-3] Context7 docs - library documentation lookup. Parallel with seo, browser-automation. Run FIRST in workflow",
    "google-search-console-examples": "[RESEARCH-1b] Google Search Console - performance, indexing, sitemaps. Use with @seo agent. Run FIRST in workflow",
    "git-platforms": "[DEV-2] Git platforms - GitHub/GitLab/Gitea repos, issues, PRs. Parallel with wordpress, crawl4ai. Run AFTER infrastructure",
    "crawl4ai-usage": "[DEV-3] Web crawling - Crawl4AI scraping, data extraction, RAG. Parallel with wordpress, git-platforms. Run AFTER infrastructure",
    "dns-providers": "[INFRA-1] DNS management - Cloudflare, Namecheap, Route 53. Run FIRST in infrastructure sequence, BEFORE hetzner/hostinger",
    "agent-review": "[QUALITY-2] Session review - analyzes session, improves agents, composes PRs. Run LAST in every session, AFTER code-quality",
    "context-builder": "[UTILITY-1] Context Builder - token-efficient AI context generation (~80% reduction). Use BEFORE complex coding tasks",
}

PRIMARY_AGENTS = {"aidevops"}

AGENT_TEMPERATURES = {
    "aidevops": 0.2,
    "hostinger": 0.1,
    "hetzner": 0.1,
    "wordpress": 0.2,
    "wp-dev": 0.2,
    "wp-admin": 0.2,
    "localwp": 0.1,
    "mainwp": 0.1,
    "seo": 0.2,
    "code-quality": 0.1,
    "browser-automation": 0.2,
    "context7-mcp-setup": 0.2,
    "google-search-console-examples": 0.1,
    "git-platforms": 0.1,
    "crawl4ai-usage": 0.2,
    "dns-providers": 0.1,
    "agent-review": 0.3,
    "context-builder": 0.1,
}

# Tool maps are enable-lists; glob names cover every tool of one MCP server.
_EDIT_TOOLS = {"write": True, "edit": True, "bash": True, "read": True}
_SEARCH_TOOLS = {"glob": True, "grep": True}

AGENT_TOOLS: dict[str, dict[str, bool]] = {
    "aidevops": {**_EDIT_TOOLS, **_SEARCH_TOOLS, "webfetch": True, "task": True, "context7_*": True},
    "hostinger": {**_EDIT_TOOLS, "hostinger-api_*": True},
    "hetzner": {
        **_EDIT_TOOLS,
        "hetzner-awardsapp_*": True,
        "hetzner-brandlight_*": True,
        "hetzner-marcusquinn_*": True,
        "hetzner-storagebox_*": True,
    },
    "wordpress": {**_EDIT_TOOLS, "task": True, "context7_*": True},
    "wp-dev": {**_EDIT_TOOLS, **_SEARCH_TOOLS, "context7_*": True},
    "wp-admin": {**_EDIT_TOOLS},
    "localwp": {"read": True, "bash": True, "localwp_*": True},
    "mainwp": {"bash": True, "read": True},
    "seo": {**_EDIT_TOOLS, "webfetch": True, "gsc_*": True, "ahrefs_*": True},
    "code-quality": {**_EDIT_TOOLS, **_SEARCH_TOOLS, "context7_*": True},
    "browser-automation": {**_EDIT_TOOLS, "chrome-devtools_*": True, "context7_*": True},
    "context7-mcp-setup": {"read": True, "webfetch": True, "context7_*": True},
    "google-search-console-examples": {"read": True, "gsc_*": True},
    "git-platforms": {**_EDIT_TOOLS, **_SEARCH_TOOLS, "gh_grep_*": True, "context7_*": True},
    "crawl4ai-usage": {**_EDIT_TOOLS, "webfetch": True, "context7_*": True},
    "dns-providers": {**_EDIT_TOOLS, "hostinger-api_DNS_*": True},
    "agent-review": {"read": True, "write": True, "edit": True, "glob": True, "bash": True},
    "context-builder": {"bash": True, "read": True, "write": True, "glob": True, "repomix_*": True},
}

# Agents that may open PRs get confirmation gates on git and gh pr.
# Last matching rule wins in OpenCode, so the catch-all goes last.
_PR_BASH_ALLOW = {"git *": "ask", "gh pr *": "ask", "*": "allow"}
_PR_BASH_DENY = {"git *": "ask", "gh pr *": "ask", "*": "deny"}

AGENT_PERMISSIONS: dict[str, Optional[dict]] = {
    "code-quality": {"edit": "ask", "bash": _PR_BASH_ALLOW},
    "agent-review": {"edit": "ask", "bash": _PR_BASH_DENY},
}

INSTALL_NOTES = {
    "aidevops": "primary agent",
    "wordpress": "orchestrator subagent",
    "wp-dev": "development subagent",
    "wp-admin": "admin subagent",
    "localwp": "database subagent",
    "mainwp": "fleet management subagent",
    "code-quality": "subagent with learning loop",
    "agent-review": "meta-agent for improvement",
    "context-builder": "utility subagent",
}


def list_agents() -> list[str]:
    """Return catalog agent names in install order."""
    return list(AGENT_NAMES)


def _require(name: str) -> None:
    if name not in AGENT_DESCRIPTIONS:
        raise KeyError(f"Unknown agent: {name}")


def agent_mode(name: str) -> str:
    return "primary" if name in PRIMARY_AGENTS else "subagent"


def install_note(name: str) -> str:
    return INSTALL_NOTES.get(name, agent_mode(name))


def agent_body(name: str) -> str:
    """Return the Markdown body template for an agent."""
    _require(name)
    return (AGENTS_DIR / f"{name}.md").read_text(encoding="utf-8")


def render_frontmatter(name: str) -> str:
    """Generate YAML frontmatter for an OpenCode agent .md file.

    The description is always emitted as a JSON string, which is also a valid
    YAML double-quoted scalar: several contain ': ' which would otherwise
    break the YAML mapping, and quotes or backslashes come out escaped.
    """
    _require(name)
    lines = [
        "---",
        f"description: {json.dumps(AGENT_DESCRIPTIONS[name], ensure_ascii=False)}",
        f"mode: {agent_mode(name)}",
        f"temperature: {AGENT_TEMPERATURES[name]}",
    ]
    tools = AGENT_TOOLS.get(name, {})
    if tools:
        lines.append("tools:")
        for tool_name, enabled in tools.items():
            lines.append(f"  {tool_name}: {str(enabled).lower()}")
    permission = AGENT_PERMISSIONS.get(name)
    if permission:
        lines.append("permission:")
        for tool_name, rule in permission.items():
            if isinstance(rule, str):
                lines.append(f"  {tool_name}: {rule}")
            elif isinstance(rule, dict):
                lines.append(f"  {tool_name}:")
                for pattern, action in rule.items():
                    lines.append(f'    "{pattern}": {action}')
    lines.append("---")
    return "\n".join(lines) + "\n"


def render_agent(name: str) -> str:
    return render_frontmatter(name) + "\n" + agent_body(name)


def agent_config(name: str) -> dict[str, Any]:
    """Return the opencode.json `agent` entry for one agent."""
    _require(name)
    config: dict[str, Any] = {
        "description": AGENT_DESCRIPTIONS[name],
        "mode": agent_mode(name),
        "temperature": AGENT_TEMPERATURES[name],
        "tools": dict(AGENT_TOOLS.get(name, {})),
    }
    permission = AGENT_PERMISSIONS.get(name)
    if permission:
        config["permission"] = {
            key: dict(rule) if isinstance(rule, dict) else rule
            for key, rule in permission.items()
        }
    return config


def agent_config_reference() -> dict[str, dict[str, Any]]:
    """Return the full `agent` section for opencode.json, keyed by name."""
    return {name: agent_config(name) for name in AGENT_NAMES}
