"""FastMCP server creation and wiring."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from vitest_mcp import __version__

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from vitest_mcp.mcp.context import AppContext

log = structlog.get_logger(__name__)

SERVER_NAME = "vitest-mcp"
USAGE_URI = "vitest://usage"
USAGE_GUIDE_PATH = Path(__file__).parent / "resources" / "usage.md"

_INSTRUCTIONS = (
    "Vitest test runner for AI agents. Call set_project_root with the project's "
    "absolute path first, then list_tests, run_tests and analyze_coverage. "
    f"Read {USAGE_URI} for the full guide."
)


def read_usage_guide() -> str:
    return USAGE_GUIDE_PATH.read_text(encoding="utf-8")


def create_mcp_server(context: AppContext) -> FastMCP:
    """Create FastMCP server with all tools wired to context.

    Args:
        context: AppContext with all ops instances

    Returns:
        Configured FastMCP server ready to run
    """
    from fastmcp import FastMCP

    from vitest_mcp.mcp.middleware import ToolMiddleware
    from vitest_mcp.mcp.tools import TOOL_MODULES

    mcp = FastMCP(SERVER_NAME, instructions=_INSTRUCTIONS, version=__version__)
    mcp.add_middleware(ToolMiddleware())

    for module in TOOL_MODULES:
        module.register_tools(mcp, context)

    @mcp.resource(
        USAGE_URI,
        name="Vitest MCP Usage Guide",
        description="Complete guide for using the Vitest MCP server, including tool "
        "documentation and examples",
        mime_type="text/markdown",
    )
    def usage_guide() -> str:
        return read_usage_guide()

    log.info("mcp_server_created", tool_modules=len(TOOL_MODULES))
    return mcp


def run_server(argv: Sequence[str] = ()) -> None:
    """Resolve configuration, then serve MCP over stdio until the client hangs up."""
    from vitest_mcp.config.loader import ConfigResolver
    from vitest_mcp.core.logging import configure_logging
    from vitest_mcp.mcp.context import AppContext

    # Stderr logging first: config resolution itself logs
    configure_logging(level="INFO")

    config = ConfigResolver().resolve(argv)
    logging_config = config.logging
    if config.server.verbose or logging_config.level == "DEBUG":
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    log.info(
        "mcp_server_starting",
        version=__version__,
        working_directory=config.server.working_directory,
        cwd=os.getcwd(),
        dev_mode=config.server.dev_mode,
    )

    context = AppContext.create(config)
    mcp = create_mcp_server(context)

    log.info("mcp_server_running", transport="stdio")
    mcp.run(transport="stdio", show_banner=False)
