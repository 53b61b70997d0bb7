"""Test operations module - run_tests and list_tests."""

from vitest_mcp.testing.models import (
    ExecutionContext,
    FailedTest,
    FileFailures,
    Invocation,
    InvocationOutcome,
    RunResult,
    TestSummary,
)
from vitest_mcp.testing.ops import ListTestsResult, TestOps
from vitest_mcp.testing.versions import VersionChecker, VersionCheckResult, VersionInfo

__all__ = [
    "ExecutionContext",
    "FailedTest",
    "FileFailures",
    "Invocation",
    "InvocationOutcome",
    "ListTestsResult",
    "RunResult",
    "TestOps",
    "TestSummary",
    "VersionCheckResult",
    "VersionChecker",
    "VersionInfo",
]
