"""Coverage data model.

File-centric: agents reason about files and lines. Percentages are 0-100,
matching what Vitest reports and what thresholds are written in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class CoverageParseError(Exception):
    """Error parsing coverage data."""


METRIC_NAMES = ("lines", "functions", "branches", "statements")


@dataclass(frozen=True, slots=True)
class CoverageMetrics:
    """Percentages per metric."""

    lines: float = 0.0
    functions: float = 0.0
    branches: float = 0.0
    statements: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in METRIC_NAMES}


@dataclass(frozen=True, slots=True)
class CoverageThresholds(CoverageMetrics):
    """Minimum required percentages. Undeclared metrics are 0."""


@dataclass(frozen=True, slots=True)
class FunctionCoverage:
    """Function/method coverage."""

    name: str
    start_line: int
    hits: int


@dataclass(slots=True)
class FileCoverage:
    """Coverage data for a single file.

    Lines map 1-based line number to hit count.
    """

    path: str  # project-relative path
    lines: dict[int, int] = field(default_factory=dict)
    branches_found: int = 0
    branches_hit: int = 0
    statements_found: int = 0
    statements_hit: int = 0
    functions: list[FunctionCoverage] = field(default_factory=list)

    @property
    def lines_found(self) -> int:
        return len(self.lines)

    @property
    def lines_hit(self) -> int:
        return sum(1 for hits in self.lines.values() if hits > 0)

    @property
    def uncovered_lines(self) -> list[int]:
        """Sorted line numbers with zero hits."""
        return sorted(line for line, hits in self.lines.items() if hits == 0)

    @property
    def uncovered_functions(self) -> list[str]:
        return [f.name for f in sorted(self.functions, key=lambda f: f.start_line) if f.hits == 0]

    @property
    def metrics(self) -> CoverageMetrics:
        functions_hit = sum(1 for f in self.functions if f.hits > 0)
        return CoverageMetrics(
            lines=percentage(self.lines_hit, self.lines_found),
            functions=percentage(functions_hit, len(self.functions)),
            branches=percentage(self.branches_hit, self.branches_found),
            statements=percentage(self.statements_hit, self.statements_found),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.path,
            "coverage": self.metrics.to_dict(),
            "uncoveredLines": compress_line_ranges(self.uncovered_lines),
            "uncoveredFunctions": self.uncovered_functions,
        }


def percentage(covered: int, total: int) -> float:
    """Covered/total as a 0-100 percentage. Nothing to cover counts as 100."""
    if total <= 0:
        return 100.0
    return round(covered * 100 / total, 2)


def compress_line_ranges(lines: list[int]) -> str:
    """[1, 2, 3, 7, 9, 10] -> '1-3, 7, 9-10'."""
    if not lines:
        return ""
    ranges: list[str] = []
    start = prev = lines[0]
    for line in lines[1:]:
        if line == prev + 1:
            prev = line
            continue
        ranges.append(f"{start}-{prev}" if start != prev else str(start))
        start = prev = line
    ranges.append(f"{start}-{prev}" if start != prev else str(start))
    return ", ".join(ranges)

