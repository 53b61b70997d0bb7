"""MCP server layer: FastMCP wiring, sessions, middleware and tools."""

from vitest_mcp.mcp.context import AppContext
from vitest_mcp.mcp.errors import MCPError, MCPErrorCode, get_error_hint
from vitest_mcp.mcp.session import SessionManager, SessionState

__all__ = [
    "AppContext",
    "MCPError",
    "MCPErrorCode",
    "SessionManager",
    "SessionState",
    "get_error_hint",
]
