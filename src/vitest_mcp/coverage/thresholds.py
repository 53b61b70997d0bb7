"""Coverage thresholds declared in a project's Vitest config.

The config is JavaScript/TypeScript, so it is scanned rather than evaluated:
the first ``thresholds: { ... }`` block is brace-matched and only its direct
numeric members are read. Nested per-glob thresholds are ignored.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from vitest_mcp.coverage.models import METRIC_NAMES, CoverageMetrics, CoverageThresholds
from vitest_mcp.testing.planner import find_vitest_config

log = structlog.get_logger(__name__)

_THRESHOLDS_START_RE = re.compile(r"\bthresholds\s*:\s*\{")
_MEMBER_RE = re.compile(r"""["']?(\w+)["']?\s*:\s*(true|false|-?\d+(?:\.\d+)?)""")

_LABELS = {
    "lines": "Line",
    "functions": "Function",
    "branches": "Branch",
    "statements": "Statement",
}


def _thresholds_block(source: str) -> str | None:
    """Body of the first thresholds object, nested objects removed."""
    match = _THRESHOLDS_START_RE.search(source)
    if match is None:
        return None

    depth = 1
    top_level: list[str] = []
    for ch in source[match.end() :]:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return "".join(top_level)
        elif depth == 1:
            top_level.append(ch)
    return None


def parse_thresholds(source: str) -> CoverageThresholds | None:
    """Thresholds from config source text. None if none are declared."""
    block = _thresholds_block(source)
    if block is None:
        return None

    values: dict[str, float] = {}
    all_hundred = False
    for key, raw in _MEMBER_RE.findall(block):
        if key == "100":
            all_hundred = raw == "true"
        elif key in METRIC_NAMES and raw not in ("true", "false"):
            values[key] = float(raw)

    if all_hundred:
        return CoverageThresholds(lines=100.0, functions=100.0, branches=100.0, statements=100.0)
    if not values:
        return None
    return CoverageThresholds(**values)


def get_vitest_coverage_thresholds(project_root: Path) -> CoverageThresholds | None:
    """Read thresholds from vitest.config.* (then vite.config.*) in project_root."""
    config_path = find_vitest_config(project_root)
    if config_path is None:
        return None
    try:
        source = config_path.read_text(encoding="utf-8")
    except OSError as e:
        log.warning("vitest_config_unreadable", path=str(config_path), error=str(e))
        return None

    thresholds = parse_thresholds(source)
    log.debug(
        "coverage_thresholds_read",
        path=str(config_path),
        thresholds=thresholds.to_dict() if thresholds else None,
    )
    return thresholds


def uniform_thresholds(value: float) -> CoverageThresholds:
    return CoverageThresholds(lines=value, functions=value, branches=value, statements=value)


def check_thresholds_met(
    measured: CoverageMetrics, thresholds: CoverageThresholds | None
) -> bool:
    if thresholds is None:
        return True
    return all(getattr(measured, name) >= getattr(thresholds, name) for name in METRIC_NAMES)


def _fmt(value: float) -> str:
    return f"{round(value, 2):g}"


def get_threshold_violations(
    measured: CoverageMetrics, thresholds: CoverageThresholds | None
) -> list[str]:
    """Messages like 'Line coverage (50%) is below threshold (80%)'."""
    if thresholds is None:
        return []
    violations: list[str] = []
    for name in METRIC_NAMES:
        actual = getattr(measured, name)
        required = getattr(thresholds, name)
        if actual < required:
            violations.append(
                f"{_LABELS[name]} coverage ({_fmt(actual)}%) is below threshold ({_fmt(required)}%)"
            )
    return violations
