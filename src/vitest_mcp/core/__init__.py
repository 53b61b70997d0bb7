"""Core module exports."""

from vitest_mcp.core.errors import (
    AccessDeniedError,
    ConfigError,
    ErrorCode,
    InvalidArgumentError,
    NotDirectoryError,
    NotFoundError,
    NotSetError,
    RunnerInvocationError,
    VitestMCPError,
)
from vitest_mcp.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "AccessDeniedError",
    "ConfigError",
    "ErrorCode",
    "InvalidArgumentError",
    "NotDirectoryError",
    "NotFoundError",
    "NotSetError",
    "RunnerInvocationError",
    "VitestMCPError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
