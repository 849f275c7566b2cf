"""
Release Tools for the AI DevOps MCP Server

Creates and inspects GitHub releases through the gh CLI. Every action is a
single `gh release` call whose text output is returned as-is; failures are
reported as "Error: ..." strings rather than raised.
"""

import logging
import subprocess
from typing import Optional

from .config_tools import config_get_release_limit

logger = logging.getLogger(__name__)

RELEASE_ACTIONS = ["create", "draft", "list", "latest", "help"]

LATEST_FIELDS = "tagName,name,publishedAt,url"

HELP_TEXT = """GitHub Release Tool (uses gh CLI)

Actions:
  create <version>  Create a new release (auto-generates changelog)
  draft <version>   Create a draft release for review
  list              List recent releases
  latest            Show the latest release details
  help              Show this help message

Examples:
  github-release create v1.2.3
  github-release create v1.2.3 --notes "Custom release notes"
  github-release draft v2.0.0
  github-release list
  github-release latest

Requirements:
  - gh CLI installed and authenticated (gh auth login)
  - Repository must be a git repo with GitHub remote

Note: Uses --generate-notes for automatic changelog from commits/PRs."""


class GhCommandError(Exception):
    """A gh invocation exited non-zero."""

    def __init__(self, args: list[str], returncode: int, output: str):
        self.cmd = args
        self.returncode = returncode
        self.output = output
        super().__init__(output or f"{' '.join(args)} exited with status {returncode}")


def normalize_version(version: Optional[str]) -> str:
    """Add a 'v' prefix when absent: '1.2.3' and 'v1.2.3' both give 'v1.2.3'."""
    if not version:
        return ""
    return version if version.startswith("v") else f"v{version}"


def _run_gh(args: list[str], cwd: Optional[str] = None) -> str:
    cmd = ["gh"] + args
    logger.debug("Running: %s", " ".join(cmd))
    result = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)
    if result.returncode != 0:
        raise GhCommandError(cmd, result.returncode, (result.stderr or result.stdout).strip())
    return result.stdout


def _release_exists(tag: str, cwd: Optional[str]) -> bool:
    try:
        output = _run_gh(["release", "view", tag], cwd=cwd)
    except GhCommandError:
        return False
    return "not found" not in output


def _create(tag: str, notes: Optional[str], draft: bool, cwd: Optional[str]) -> str:
    args = ["release", "create", tag, "--title", tag]
    if notes:
        args += ["--notes", notes]
    else:
        args.append("--generate-notes")
    if draft:
        args.append("--draft")
    return _run_gh(args, cwd=cwd)


def _missing_version(action: str) -> str:
    return f"Error: Version required for {action} action. Usage: github-release {action} v1.2.3"


def _dispatch(action: str, tag: str, notes: Optional[str], cwd: Optional[str]) -> str:
    if action == "create":
        if not tag:
            return _missing_version(action)
        if _release_exists(tag, cwd):
            return f"Release {tag} already exists. Use 'gh release view {tag}' to see details."
        result = _create(tag, notes, draft=False, cwd=cwd)
        if notes:
            return f"Release {tag} created successfully.\n{result}"
        return f"Release {tag} created with auto-generated notes.\n{result}"

    if action == "draft":
        if not tag:
            return _missing_version(action)
        result = _create(tag, notes, draft=True, cwd=cwd)
        if notes:
            return f"Draft release {tag} created.\n{result}"
        return f"Draft release {tag} created with auto-generated notes.\n{result}"

    if action == "list":
        limit = config_get_release_limit(cwd)
        return _run_gh(["release", "list", "--limit", str(limit)], cwd=cwd) or "No releases found."

    if action == "latest":
        return _run_gh(["release", "view", "--json", LATEST_FIELDS], cwd=cwd) or "No releases found."

    return HELP_TEXT


def github_release(
    action: str,
    version: Optional[str] = None,
    notes: Optional[str] = None,
    cwd: Optional[str] = None,
) -> str:
    tag = normalize_version(version)
    try:
        return _dispatch(action, tag, notes, cwd)
    except FileNotFoundError:
        return "Error: gh CLI not installed. Install with: brew install gh"
    except GhCommandError as e:
        message = str(e)
        logger.warning("gh release %s failed: %s", action, message)
        if "gh: command not found" in message:
            return "Error: gh CLI not installed. Install with: brew install gh"
        if "not logged in" in message:
            return "Error: gh CLI not authenticated. Run: gh auth login"
        return f"Error: {message}"
