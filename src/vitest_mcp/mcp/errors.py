"""Structured error system for MCP tools.

Provides typed exceptions with error codes and remediation hints.
Enables agents to understand failures and self-correct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from fastmcp.exceptions import ToolError

from vitest_mcp.core.errors import ErrorCode, VitestMCPError


class MCPErrorCode(StrEnum):
    """Machine-readable error codes for MCP tool failures."""

    # Validation errors - agent should fix input
    INVALID_PARAMS = "INVALID_PARAMS"
    PROJECT_ROOT_NOT_SET = "PROJECT_ROOT_NOT_SET"

    # Path errors
    PATH_NOT_FOUND = "PATH_NOT_FOUND"
    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # Runner errors
    RUNNER_FAILED = "RUNNER_FAILED"
    TIMEOUT = "TIMEOUT"

    # System errors
    CONFIG_ERROR = "CONFIG_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


_CORE_CODE_MAP: dict[ErrorCode, MCPErrorCode] = {
    ErrorCode.PROJECT_ROOT_NOT_SET: MCPErrorCode.PROJECT_ROOT_NOT_SET,
    ErrorCode.PATH_NOT_FOUND: MCPErrorCode.PATH_NOT_FOUND,
    ErrorCode.PATH_NOT_DIRECTORY: MCPErrorCode.NOT_A_DIRECTORY,
    ErrorCode.ACCESS_DENIED: MCPErrorCode.PERMISSION_DENIED,
    ErrorCode.SELF_TARGETING: MCPErrorCode.PERMISSION_DENIED,
    ErrorCode.CONFIG_PARSE_ERROR: MCPErrorCode.CONFIG_ERROR,
    ErrorCode.CONFIG_INVALID_VALUE: MCPErrorCode.CONFIG_ERROR,
    ErrorCode.ARGUMENT_REQUIRED: MCPErrorCode.INVALID_PARAMS,
    ErrorCode.ARGUMENT_INVALID: MCPErrorCode.INVALID_PARAMS,
    ErrorCode.RUNNER_TIMEOUT: MCPErrorCode.TIMEOUT,
    ErrorCode.INTERNAL_ERROR: MCPErrorCode.INTERNAL_ERROR,
}


def get_error_hint(message: str) -> str:
    """Remediation text for an error message, by what it mentions."""
    if "ENOENT" in message or "not exist" in message:
        return "File or directory not found. Check that the path exists and is correct."
    if "version compatibility" in message or "not compatible" in message:
        return (
            "Version compatibility issue. Ensure Vitest and Node.js versions meet "
            "the requirements."
        )
    if "timeout" in message or "timed out" in message:
        return (
            "Operation timed out. Try running with a more specific target or increase "
            "the timeout in configuration."
        )
    if "coverage provider" in message:
        return "Coverage provider not found. Run: npm install --save-dev @vitest/coverage-v8"
    if "test file" in message and "coverage" in message:
        return (
            "Coverage analysis should target source files, not test files. Specify the "
            "source file or directory being tested."
        )
    if "project root" in message or "set_project_root" in message:
        return (
            "Project root not set. Call set_project_root first with the absolute path "
            "to your project."
        )
    return (
        "An unexpected error occurred. Enable debug mode with VITEST_MCP_DEBUG=true "
        "for more details."
    )


@dataclass
class ErrorResponse:
    """Structured error response for MCP tools."""

    code: MCPErrorCode
    message: str
    remediation: str
    path: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "remediation": self.remediation,
            "path": self.path,
            "context": self.context,
        }


class MCPError(ToolError):
    """Base exception for MCP tool errors with structured response.

    Extends FastMCP's ToolError so that FastMCP passes it through unwrapped;
    ToolMiddleware then turns it into structured error content.
    """

    def __init__(
        self,
        code: MCPErrorCode,
        message: str,
        remediation: str | None = None,
        path: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.remediation = remediation or get_error_hint(message)
        self.path = path
        self.context = context

    @classmethod
    def from_core(cls, error: VitestMCPError, *, prefix: str = "") -> MCPError:
        """Wrap a core error, optionally prefixing its message."""
        message = f"{prefix}{error.message}"
        details = dict(error.details)
        path = details.pop("path", None)
        return cls(
            code=_CORE_CODE_MAP.get(error.code, MCPErrorCode.RUNNER_FAILED),
            message=message,
            path=str(path) if path is not None else None,
            retryable=error.retryable,
            **details,
        )

    def to_response(self) -> ErrorResponse:
        """Convert to ErrorResponse."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            remediation=self.remediation,
            path=self.path,
            context=self.context,
        )
