"""Project MCP tools - set_project_root."""

from typing import TYPE_CHECKING, Any

from fastmcp import Context
from pydantic import Field

from vitest_mcp.core.errors import VitestMCPError
from vitest_mcp.project.context import ProjectContext

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from vitest_mcp.config.models import VitestMCPConfig
    from vitest_mcp.mcp.context import AppContext


def set_project_root_response(
    project: ProjectContext, config: "VitestMCPConfig", path: str
) -> dict[str, Any]:
    """Set the root and render the tool response. Failures are data, not errors."""
    try:
        root = project.set_project_root(path)
    except VitestMCPError as e:
        return {
            "success": False,
            "message": f"Failed to set project root: {e.message}",
            "projectRoot": "",
            "projectName": "",
        }

    message = f"Project root set to {root.path}"
    if config.server.dev_mode:
        message += " Development mode enabled - self-targeting allowed."
    return {
        "success": True,
        "message": message,
        "projectRoot": str(root.path),
        "projectName": root.name,
    }


def register_tools(mcp: "FastMCP", app_ctx: "AppContext") -> None:
    """Register project tools with FastMCP server."""

    @mcp.tool
    async def set_project_root(
        ctx: Context,
        path: str = Field(
            ...,
            description="Absolute path to the project root directory (the one containing "
            "package.json and vitest.config.*).",
        ),
    ) -> dict[str, Any]:
        """Set the project root directory for all subsequent operations.

        This must be called before using other tools. Paths are resolved
        against the server's working directory when relative.
        """
        session = app_ctx.session_manager.get_or_create(ctx.session_id)
        return set_project_root_response(session.project, app_ctx.config, path)
