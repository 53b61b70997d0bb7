"""Coverage analysis - Istanbul JSON parsing and threshold evaluation."""

from vitest_mcp.coverage.models import (
    CoverageMetrics,
    CoverageParseError,
    CoverageThresholds,
    FileCoverage,
    FunctionCoverage,
)
from vitest_mcp.coverage.ops import CoverageOps, CoverageResult
from vitest_mcp.coverage.thresholds import (
    check_thresholds_met,
    get_threshold_violations,
    get_vitest_coverage_thresholds,
)

__all__ = [
    "CoverageMetrics",
    "CoverageOps",
    "CoverageParseError",
    "CoverageResult",
    "CoverageThresholds",
    "FileCoverage",
    "FunctionCoverage",
    "check_thresholds_met",
    "get_threshold_violations",
    "get_vitest_coverage_thresholds",
]
