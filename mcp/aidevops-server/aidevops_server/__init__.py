"""AI DevOps MCP server: OpenCode agent setup and GitHub release tools."""

__version__ = "2.0.8"
