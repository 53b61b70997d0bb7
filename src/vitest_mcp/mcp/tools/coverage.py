"""Coverage MCP tools - analyze_coverage."""

from typing import TYPE_CHECKING, Any, Literal

from fastmcp import Context
from pydantic import Field

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from vitest_mcp.mcp.context import AppContext


def register_tools(mcp: "FastMCP", app_ctx: "AppContext") -> None:
    """Register coverage tools with FastMCP server."""

    @mcp.tool
    async def analyze_coverage(
        ctx: Context,
        target: str = Field(
            ...,
            description="Source file or directory to analyze, relative to the project "
            "root. Test files are rejected: point at the code under test.",
        ),
        format: Literal["summary", "detailed"] | None = Field(
            None,
            description="'detailed' adds per-file uncovered lines and functions "
            "plus recommendations.",
        ),
        exclude: list[str] | None = Field(
            None,
            description="Extra glob patterns excluded from coverage, on top of the "
            "configured defaults.",
        ),
    ) -> dict[str, Any]:
        """Perform test coverage analysis with line-by-line gap identification.

        Reports lines, functions, branches and statements percentages.
        Non-production files (stories, mocks, e2e tests) are excluded.
        Thresholds come from vitest.config.ts. Requires set_project_root.
        """
        session = app_ctx.session_manager.get_or_create(ctx.session_id)
        result = await app_ctx.coverage_ops.analyze_coverage(
            session.project,
            target,
            format=format,
            exclude=exclude,
        )
        return result.to_dict()
