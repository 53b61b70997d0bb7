"""vitest-mcp error types with typed error codes.

Error code ranges:
- 1xxx: Project root / paths
- 2xxx: Config
- 3xxx: Arguments
- 4xxx: Runner invocation
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Project root / paths (1xxx)
    PROJECT_ROOT_NOT_SET = 1001
    PATH_NOT_FOUND = 1002
    PATH_NOT_DIRECTORY = 1003
    ACCESS_DENIED = 1004
    SELF_TARGETING = 1005

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Arguments (3xxx)
    ARGUMENT_REQUIRED = 3001
    ARGUMENT_INVALID = 3002

    # Runner (4xxx)
    RUNNER_NOT_FOUND = 4001
    RUNNER_SPAWN_FAILED = 4002
    RUNNER_TIMEOUT = 4003
    RUNNER_INVALID_REPORT = 4004
    RUNNER_FAILED = 4005

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class VitestMCPError(Exception):
    """Base error with structured context for MCP responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PATH_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


class ConfigError(VitestMCPError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class NotSetError(VitestMCPError):
    """No project root has been set for the session."""

    @classmethod
    def project_root(cls) -> "NotSetError":
        return cls(
            code=ErrorCode.PROJECT_ROOT_NOT_SET,
            message="Project root has not been set. Please call set_project_root first.",
        )


class NotFoundError(VitestMCPError):
    """A path or target does not exist."""

    @classmethod
    def directory(cls, path: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.PATH_NOT_FOUND,
            message=f"Directory does not exist: {path}",
            details={"path": path},
        )

    @classmethod
    def target(cls, path: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.PATH_NOT_FOUND,
            message=f"Target does not exist: {path}",
            details={"path": path},
        )

    @classmethod
    def search_path(cls, path: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.PATH_NOT_FOUND,
            message=f"Search path does not exist: {path}",
            details={"path": path},
        )


class NotDirectoryError(VitestMCPError):
    """A path exists but is not a directory."""

    @classmethod
    def for_path(cls, path: str) -> "NotDirectoryError":
        return cls(
            code=ErrorCode.PATH_NOT_DIRECTORY,
            message=f"Path is not a directory: {path}",
            details={"path": path},
        )


class AccessDeniedError(VitestMCPError):
    """A path is outside the permitted area."""

    @classmethod
    def outside_allowed(cls, path: str, allowed: list[str]) -> "AccessDeniedError":
        return cls(
            code=ErrorCode.ACCESS_DENIED,
            message=f"Access denied: {path} is outside allowed directories",
            details={"path": path, "allowed_paths": allowed},
        )

    @classmethod
    def outside_root(cls, path: str, root: str) -> "AccessDeniedError":
        return cls(
            code=ErrorCode.ACCESS_DENIED,
            message=f"Access denied: {path} is outside the project root {root}",
            details={"path": path, "project_root": root},
        )

    @classmethod
    def self_targeting(cls, path: str) -> "AccessDeniedError":
        return cls(
            code=ErrorCode.SELF_TARGETING,
            message=(
                "Cannot set project root to the vitest-mcp package itself. "
                "This tool is meant to test other projects, not itself. "
                "Set VITEST_MCP_DEV_MODE=true to override."
            ),
            details={"path": path},
        )


class InvalidArgumentError(VitestMCPError):
    """A required parameter is missing or a value is unusable."""

    @classmethod
    def required(cls, name: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.ARGUMENT_REQUIRED,
            message=f"{name.capitalize()} parameter is required",
            details={"parameter": name},
        )

    @classmethod
    def invalid(cls, name: str, reason: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.ARGUMENT_INVALID,
            message=reason,
            details={"parameter": name},
        )


class RunnerInvocationError(VitestMCPError):
    """The external runner could not be run or produced no usable report."""

    @classmethod
    def command_not_found(cls, executable: str) -> "RunnerInvocationError":
        return cls(
            code=ErrorCode.RUNNER_NOT_FOUND,
            message=f"Command not found: {executable}. Is Node.js installed and on PATH?",
            details={"executable": executable},
        )

    @classmethod
    def spawn_failed(cls, executable: str, reason: str) -> "RunnerInvocationError":
        return cls(
            code=ErrorCode.RUNNER_SPAWN_FAILED,
            message=f"Failed to start {executable}: {reason}",
            details={"executable": executable, "reason": reason},
        )

    @classmethod
    def timeout(cls, timeout_ms: int) -> "RunnerInvocationError":
        return cls(
            code=ErrorCode.RUNNER_TIMEOUT,
            message=f"Test execution timed out after {timeout_ms}ms",
            retryable=True,
            details={"timeout_ms": timeout_ms},
        )

    @classmethod
    def invalid_report(cls, reason: str) -> "RunnerInvocationError":
        return cls(
            code=ErrorCode.RUNNER_INVALID_REPORT,
            message=f"Failed to parse test results: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def exit_code(cls, code: int | None) -> "RunnerInvocationError":
        return cls(
            code=ErrorCode.RUNNER_FAILED,
            message=f"vitest exited with code {code}",
            details={"exit_code": code},
        )
