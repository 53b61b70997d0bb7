"""Testing MCP tools - test discovery and execution.

- list_tests: catalog test files under the project root
- run_tests: run vitest against a file or directory
"""

from typing import TYPE_CHECKING, Any, Literal

from fastmcp import Context
from pydantic import Field

from vitest_mcp.core.errors import NotSetError, VitestMCPError
from vitest_mcp.mcp.errors import MCPError, MCPErrorCode

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from vitest_mcp.mcp.context import AppContext

_LIST_PREFIX = "Failed to list test files: "


def register_tools(mcp: "FastMCP", app_ctx: "AppContext") -> None:
    """Register testing tools with FastMCP server."""

    @mcp.tool
    async def list_tests(
        ctx: Context,
        path: str | None = Field(
            None,
            description="Directory to search, relative to the project root. "
            "Defaults to the project root.",
        ),
    ) -> dict[str, Any]:
        """List test files in the project to discover and catalog the test suite.

        Finds *.test.* and *.spec.* files (js, ts, jsx, tsx), skipping
        node_modules, dist and coverage, and classifies each as unit,
        integration or e2e by its directory.
        """
        session = app_ctx.session_manager.get_or_create(ctx.session_id)
        try:
            result = app_ctx.test_ops.list_tests(session.project, path)
        except NotSetError as e:
            raise MCPError(
                code=MCPErrorCode.PROJECT_ROOT_NOT_SET,
                message=f"{_LIST_PREFIX}Please call set_project_root first",
                detail=e.message,
            ) from e
        except VitestMCPError as e:
            raise MCPError.from_core(e, prefix=_LIST_PREFIX) from e
        except OSError as e:
            raise MCPError(
                code=MCPErrorCode.INTERNAL_ERROR,
                message=f"{_LIST_PREFIX}{e}",
                path=path,
            ) from e

        output = result.to_dict()
        output["summary"] = f"{output['totalCount']} test files"
        return output

    @mcp.tool
    async def run_tests(
        ctx: Context,
        target: str = Field(
            ...,
            description="Test file or directory to run, relative to the project root "
            "(e.g. 'src/utils' or 'src/app.test.ts'). The root itself is rejected.",
        ),
        format: Literal["summary", "detailed"] | None = Field(
            None,
            description="Output format. Defaults to detailed for directories or "
            "failures, otherwise the configured default.",
        ),
        project: str | None = Field(
            None,
            description="Vitest workspace project name (passed as --project).",
        ),
        showLogs: bool = Field(  # noqa: N803
            False,
            description="Capture console output from the tests into 'logs'.",
        ),
    ) -> dict[str, Any]:
        """Run Vitest tests with structured, agent-friendly output.

        Returns pass/fail counts and, in detailed format, each failing test
        grouped by file with its error type and message.
        """
        session = app_ctx.session_manager.get_or_create(ctx.session_id)
        result = await app_ctx.test_ops.run_tests(
            session.project,
            target,
            format=format,
            vitest_project=project,
            show_logs=showLogs,
        )
        return result.to_dict()
