#!/usr/bin/env python3
"""
GitHub release helper (wraps `gh release`).

Usage:
    python3 scripts/github-release.py create v1.2.3
    python3 scripts/github-release.py create 1.2.3 --notes "Custom release notes"
    python3 scripts/github-release.py draft v2.0.0
    python3 scripts/github-release.py list
    python3 scripts/github-release.py latest
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
    from aidevops_server.release_tools import RELEASE_ACTIONS, github_release
except ImportError as e:
    print(
        f"Error: Could not import aidevops-server package.\n"
        f"  Looked in: {_MCP_PKG}\n"
        f"  Import error: {e}",
        file=sys.stderr,
    )
    sys.exit(1)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create and manage GitHub releases using gh CLI")
    parser.add_argument("action", nargs="?", default="help", choices=RELEASE_ACTIONS)
    parser.add_argument("version", nargs="?", help="Version tag (e.g., v1.2.3 or 1.2.3)")
    parser.add_argument("--notes", help="Release notes (auto-generated if omitted)")
    parser.add_argument("--cwd", help="Repository directory (default: current directory)")
    args = parser.parse_args(argv)

    output = github_release(args.action, version=args.version, notes=args.notes, cwd=args.cwd)
    print(output)
    return 1 if output.startswith("Error:") else 0


if __name__ == "__main__":
    sys.exit(main())
