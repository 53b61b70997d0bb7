"""Testing subsystem core models.

Data structures shared by planning, invocation and result processing.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from vitest_mcp.core.errors import RunnerInvocationError
    from vitest_mcp.testing.report import VitestReport

OutputFormat = Literal["summary", "detailed"]
TargetType = Literal["file", "directory"]


# =============================================================================
# Planning
# =============================================================================


@dataclass(frozen=True)
class ExecutionContext:
    """What kind of target a run covers."""

    is_multi_file: bool
    target_type: TargetType
    estimated_test_count: int | None = None


@dataclass(frozen=True)
class Invocation:
    """A fully built runner command. stdin is never connected."""

    argv: tuple[str, ...]
    cwd: str
    env: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def executable(self) -> str:
        return self.argv[0]

    @property
    def command(self) -> str:
        """Display form of argv."""
        return shlex.join(self.argv)


# =============================================================================
# Invocation Outcome
# =============================================================================


@dataclass
class InvocationOutcome:
    """Raw result of one runner process."""

    command: str
    exit_code: int | None
    stdout: str
    stderr: str
    report: VitestReport | None = None
    error: RunnerInvocationError | None = None
    timed_out: bool = False

    @property
    def success(self) -> bool:
        """Clean exit with a valid report."""
        return self.exit_code == 0 and self.report is not None and self.error is None


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class TestSummary:
    """Counts from the report. Zero-test runs are valid."""

    __test__ = False  # not a pytest class

    total_tests: int = 0
    passed: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"totalTests": self.total_tests, "passed": self.passed, "failed": self.failed}


@dataclass(frozen=True)
class FailedTest:
    """One failed assertion."""

    test_name: str
    error_type: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"testName": self.test_name, "errorType": self.error_type, "message": self.message}


@dataclass
class FileFailures:
    """Failed tests grouped under their file."""

    file: str
    tests: list[FailedTest] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "tests": [t.to_dict() for t in self.tests]}


@dataclass
class RunResult:
    """Normalized outcome of run_tests."""

    command: str
    success: bool
    test_summary: TestSummary
    format: OutputFormat
    execution_time_ms: int
    summary: str = ""
    failed_tests: list[FileFailures] | None = None
    logs: list[str] | None = None
    stderr: str | None = None
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the camelCase tool response shape."""
        data: dict[str, Any] = {
            "command": self.command,
            "success": self.success,
            "summary": self.summary,
            "testSummary": self.test_summary.to_dict(),
            "format": self.format,
            "executionTimeMs": self.execution_time_ms,
        }
        if self.failed_tests is not None:
            data["testResults"] = {"failedTests": [f.to_dict() for f in self.failed_tests]}
        if self.logs is not None:
            data["logs"] = self.logs
        if self.stderr:
            data["stderr"] = self.stderr
        if self.error:
            data["error"] = self.error
        if self.warnings:
            data["warnings"] = self.warnings
        return data
