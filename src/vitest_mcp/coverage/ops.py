"""Coverage operations - analyze_coverage.

Runs vitest with coverage written as Istanbul JSON into a temporary
directory, then reads totals, per-file gaps and thresholds back.
"""

from __future__ import annotations

import tempfile
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from vitest_mcp.config.models import OutputFormat, VitestMCPConfig
from vitest_mcp.core.errors import InvalidArgumentError, NotSetError, VitestMCPError
from vitest_mcp.coverage.istanbul import parse_final, parse_summary
from vitest_mcp.coverage.models import (
    CoverageMetrics,
    CoverageParseError,
    CoverageThresholds,
    FileCoverage,
)
from vitest_mcp.coverage.thresholds import (
    check_thresholds_met,
    get_threshold_violations,
    get_vitest_coverage_thresholds,
    uniform_thresholds,
)
from vitest_mcp.discovery.finder import is_test_file
from vitest_mcp.project.context import ProjectContext
from vitest_mcp.testing.invoker import invoke
from vitest_mcp.testing.models import TestSummary
from vitest_mcp.testing.planner import build_invocation, relative_target, validate_target
from vitest_mcp.testing.results import summarize_report
from vitest_mcp.testing.versions import VersionChecker

log = structlog.get_logger(__name__)

_MISSING_PROVIDER = (
    "No coverage provider installed. Install @vitest/coverage-v8 or "
    "@vitest/coverage-istanbul to collect coverage."
)
_MAX_RECOMMENDED_FILES = 5


@dataclass
class CoverageResult:
    """Normalized outcome of analyze_coverage."""

    success: bool
    command: str
    target: str
    format: OutputFormat
    coverage: CoverageMetrics = field(default_factory=CoverageMetrics)
    test_summary: TestSummary = field(default_factory=TestSummary)
    execution_time_ms: int = 0
    thresholds: CoverageThresholds | None = None
    thresholds_met: bool | None = None
    violations: list[str] = field(default_factory=list)
    files: list[FileCoverage] | None = None
    recommendations: list[str] | None = None
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "target": self.target,
            "format": self.format,
            "coverage": self.coverage.to_dict(),
            "testSummary": self.test_summary.to_dict(),
            "executionTimeMs": self.execution_time_ms,
        }
        if self.thresholds is not None:
            data["coverageThresholds"] = self.thresholds.to_dict()
        if self.thresholds_met is not None:
            data["thresholdsMet"] = self.thresholds_met
            data["violations"] = self.violations
        if self.files is not None:
            data["files"] = [f.to_dict() for f in self.files]
        if self.recommendations is not None:
            data["recommendations"] = self.recommendations
        if self.warnings:
            data["warnings"] = self.warnings
        if self.error:
            data["error"] = self.error
        return data


def coverage_include(project_root: Path, resolved_target: Path) -> str:
    """Include glob for the target: the file itself or everything below a directory."""
    rel = relative_target(project_root, resolved_target)
    if resolved_target.is_dir():
        return "**" if rel == "." else f"{rel}/**"
    return rel


def runner_filters(project_root: Path, resolved_target: Path) -> tuple[Path | None, list[str]]:
    """Which tests to run for a target.

    A directory runs the tests under it. A source file runs tests whose path
    contains its stem (``src/math.ts`` selects ``math.test.ts`` wherever it is).
    """
    if resolved_target.is_dir():
        return (None if resolved_target == project_root else resolved_target), []
    stem = resolved_target.name.split(".", 1)[0]
    return None, [stem] if stem else []


def merge_excludes(configured: Sequence[str], extra: Sequence[str] | None) -> list[str]:
    """Configured excludes then extra ones, duplicates dropped."""
    merged: list[str] = []
    for pattern in [*configured, *(extra or ())]:
        if pattern and pattern not in merged:
            merged.append(pattern)
    return merged


def build_recommendations(
    metrics: CoverageMetrics, files: Sequence[FileCoverage], violations: Sequence[str]
) -> list[str]:
    recommendations: list[str] = []

    worst = sorted(
        (f for f in files if f.uncovered_lines or f.uncovered_functions),
        key=lambda f: f.metrics.lines,
    )
    for file_cov in worst[:_MAX_RECOMMENDED_FILES]:
        if file_cov.uncovered_functions:
            names = ", ".join(file_cov.uncovered_functions)
            recommendations.append(f"Add tests for untested functions in {file_cov.path}: {names}")
        else:
            recommendations.append(
                f"Cover lines {', '.join(map(str, file_cov.uncovered_lines[:10]))}"
                f"{'...' if len(file_cov.uncovered_lines) > 10 else ''} in {file_cov.path}"
            )

    if metrics.branches < metrics.lines:
        recommendations.append(
            "Branch coverage trails line coverage. Add cases for the untaken side of "
            "conditionals and early returns."
        )
    if violations:
        recommendations.append("Raise coverage until the configured thresholds are met.")
    if not recommendations:
        recommendations.append("All code in the target is covered.")
    return recommendations


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class CoverageOps:
    """Coverage analysis against one session's project."""

    def __init__(
        self,
        config: VitestMCPConfig,
        version_checker: VersionChecker | None = None,
    ) -> None:
        self._config = config
        self._versions = version_checker or VersionChecker()

    def _resolve_target(self, project: ProjectContext, target: str) -> tuple[Path, Path]:
        root = project.get_project_root()
        resolved = validate_target(
            root,
            target,
            allow_root=self._config.server.allow_root_execution,
            validate_paths=self._config.server.validate_paths,
            allowed_paths=self._config.safety.allowed_paths,
        )
        if resolved.is_file() and is_test_file(resolved):
            raise InvalidArgumentError.invalid(
                "target",
                f"Cannot analyze coverage for a test file: {target}. Coverage analysis "
                "should target the source file or directory under test.",
            )
        return root, resolved

    def _thresholds(self, root: Path) -> CoverageThresholds | None:
        thresholds = get_vitest_coverage_thresholds(root)
        if thresholds is None and self._config.coverage_defaults.threshold is not None:
            thresholds = uniform_thresholds(self._config.coverage_defaults.threshold)
        return thresholds

    async def analyze_coverage(
        self,
        project: ProjectContext,
        target: str,
        *,
        format: OutputFormat | None = None,
        exclude: Sequence[str] | None = None,
    ) -> CoverageResult:
        """Run the target's tests with coverage and report gaps.

        Validation and runner problems come back as a failed CoverageResult.
        """
        start = time.perf_counter()
        output_format: OutputFormat = format or self._config.coverage_defaults.format

        def failure(message: str, command: str = "", **extra: Any) -> CoverageResult:
            log.info("coverage_failed", target=target, reason=message)
            return CoverageResult(
                success=False,
                command=command or f"vitest run --coverage {target}".rstrip(),
                target=target,
                format=output_format,
                execution_time_ms=_elapsed_ms(start),
                error=message,
                **extra,
            )

        try:
            root, resolved = self._resolve_target(project, target)
        except NotSetError as e:
            return failure(f"Invalid target path: {e.message}")
        except VitestMCPError as e:
            return failure(e.message)

        versions = await self._versions.check_all_versions(root)
        warnings = [*versions.errors, *versions.warnings]
        if versions.coverage_provider_name is None:
            return failure(_MISSING_PROVIDER, warnings=warnings)

        path_filter, filters = runner_filters(root, resolved)
        excludes = merge_excludes(self._config.coverage_defaults.exclude, exclude)

        with tempfile.TemporaryDirectory(prefix="vitest-mcp-coverage-") as reports:
            reports_dir = Path(reports)
            coverage_args = [
                "--coverage.enabled=true",
                "--coverage.reporter=json",
                "--coverage.reporter=json-summary",
                f"--coverage.reportsDirectory={reports_dir}",
                f"--coverage.include={coverage_include(root, resolved)}",
                *(f"--coverage.exclude={pattern}" for pattern in excludes),
            ]
            invocation = build_invocation(
                root, path_filter, filters=filters, extra_args=coverage_args
            )
            outcome = await invoke(invocation, self._config.test_defaults.timeout)
            test_summary = summarize_report(outcome.report)

            if outcome.error is not None:
                return failure(
                    outcome.error.message,
                    command=outcome.command,
                    test_summary=test_summary,
                    warnings=warnings,
                )
            if test_summary.failed:
                return failure(
                    f"{test_summary.failed} test(s) failed; fix them before analyzing coverage.",
                    command=outcome.command,
                    test_summary=test_summary,
                    warnings=warnings,
                )

            try:
                metrics = parse_summary(reports_dir)
            except CoverageParseError as e:
                detail = outcome.stderr.strip() or str(e)
                return failure(
                    f"Coverage report was not produced: {detail}",
                    command=outcome.command,
                    test_summary=test_summary,
                    warnings=warnings,
                )

            files: list[FileCoverage] | None = None
            if output_format == "detailed":
                try:
                    files = parse_final(reports_dir, base_path=root)
                except CoverageParseError as e:
                    warnings.append(f"Per-file coverage unavailable: {e}")
                    files = []

        thresholds = self._thresholds(root)
        violations = get_threshold_violations(metrics, thresholds)
        result = CoverageResult(
            success=True,
            command=outcome.command,
            target=target,
            format=output_format,
            coverage=metrics,
            test_summary=test_summary,
            execution_time_ms=_elapsed_ms(start),
            thresholds=thresholds,
            thresholds_met=check_thresholds_met(metrics, thresholds) if thresholds else None,
            violations=violations,
            files=files,
            recommendations=(
                build_recommendations(metrics, files or [], violations)
                if output_format == "detailed"
                else None
            ),
            warnings=warnings,
        )
        log.info(
            "coverage_analyzed",
            target=target,
            lines=metrics.lines,
            thresholds_met=result.thresholds_met,
            duration_ms=result.execution_time_ms,
        )
        return result
