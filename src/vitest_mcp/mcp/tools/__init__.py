"""MCP tool modules. Each exposes register_tools(mcp, app_ctx)."""

from vitest_mcp.mcp.tools import coverage, project, testing

TOOL_MODULES = (project, testing, coverage)

__all__ = ["TOOL_MODULES", "coverage", "project", "testing"]
