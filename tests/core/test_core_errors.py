"""Tests for core/errors.py."""

from __future__ import annotations

import pytest

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


class TestErrorCode:
    """Tests for error code ranges."""

    def test_ranges(self) -> None:
        """Codes are grouped by thousand."""
        assert 1000 < ErrorCode.PROJECT_ROOT_NOT_SET < 2000
        assert 2000 < ErrorCode.CONFIG_PARSE_ERROR < 3000
        assert 3000 < ErrorCode.ARGUMENT_REQUIRED < 4000
        assert 4000 < ErrorCode.RUNNER_TIMEOUT < 5000
        assert ErrorCode.INTERNAL_ERROR > 9000


class TestFactories:
    """Tests for the classmethod factories and their messages."""

    def test_not_set(self) -> None:
        """Root-not-set message names the fix."""
        err = NotSetError.project_root()
        assert "has not been set" in err.message
        assert "set_project_root" in err.message

    def test_directory_missing(self) -> None:
        """Directory message includes the path."""
        err = NotFoundError.directory("/nope")
        assert err.message == "Directory does not exist: /nope"
        assert err.details == {"path": "/nope"}

    def test_search_path_missing(self) -> None:
        """Search path message."""
        assert NotFoundError.search_path("/x").message == "Search path does not exist: /x"

    def test_not_directory(self) -> None:
        """Not-a-directory message."""
        assert NotDirectoryError.for_path("/f").message == "Path is not a directory: /f"

    def test_outside_allowed(self) -> None:
        """Allow-list message carries the phrase agents look for."""
        err = AccessDeniedError.outside_allowed("/etc", ["/home"])
        assert "Access denied" in err.message
        assert "outside allowed directories" in err.message

    def test_self_targeting(self) -> None:
        """Self-targeting names the override."""
        err = AccessDeniedError.self_targeting("/x")
        assert err.code == ErrorCode.SELF_TARGETING
        assert "package itself" in err.message
        assert "not itself" in err.message
        assert "VITEST_MCP_DEV_MODE" in err.message

    def test_required(self) -> None:
        """Parameter name is capitalized."""
        assert InvalidArgumentError.required("target").message == "Target parameter is required"
        assert InvalidArgumentError.required("path").message == "Path parameter is required"

    def test_timeout_is_retryable(self) -> None:
        """Timeouts may succeed on retry."""
        err = RunnerInvocationError.timeout(30000)
        assert err.retryable is True
        assert err.message == "Test execution timed out after 30000ms"

    def test_config_parse_error(self) -> None:
        """Config parse errors mention the file."""
        err = ConfigError.parse_error("/c.json", "bad token")
        assert "/c.json" in err.message
        assert err.code == ErrorCode.CONFIG_PARSE_ERROR


class TestVitestMCPError:
    """Tests for the base error behavior."""

    def test_is_exception(self) -> None:
        """Factories produce raisable exceptions."""
        with pytest.raises(VitestMCPError, match="Target does not exist"):
            raise NotFoundError.target("/t")

    def test_str_is_message(self) -> None:
        """str() is the message alone."""
        assert str(NotFoundError.target("/t")) == "Target does not exist: /t"

    def test_to_dict(self) -> None:
        """Serialized form has code, name, message, retryable and details."""
        data = NotDirectoryError.for_path("/f").to_dict()
        assert data == {
            "code": ErrorCode.PATH_NOT_DIRECTORY.value,
            "error": "PATH_NOT_DIRECTORY",
            "message": "Path is not a directory: /f",
            "retryable": False,
            "details": {"path": "/f"},
        }

    def test_frozen(self) -> None:
        """Errors are immutable."""
        err = NotFoundError.target("/t")
        with pytest.raises(AttributeError):
            err.message = "changed"  # type: ignore[misc]
