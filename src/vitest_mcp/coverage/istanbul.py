"""Istanbul JSON coverage parsing.

Vitest's coverage providers (v8 and istanbul) both write Istanbul JSON:
- coverage-summary.json (``json-summary`` reporter): aggregate percentages
- coverage-final.json (``json`` reporter): per-file statement/branch/function maps

Structure of coverage-final.json:
{
  "/path/to/file.ts": {
    "statementMap": { "0": {"start": {"line": 1, "column": 0}, "end": ...}, ... },
    "s": { "0": 1, "1": 0, ... },  // statement hit counts
    "branchMap": { "0": {"type": "if", "locations": [...], "line": 5}, ... },
    "b": { "0": [1, 0], ... },  // branch hit counts per location
    "fnMap": { "0": {"name": "foo", "decl": {"start": {"line": 1}}, ...}, ... },
    "f": { "0": 1, ... }  // function hit counts
  }
}
"""

from __future__ import annotations

import contextlib
import json
from pathlib import Path
from typing import Any

from vitest_mcp.coverage.models import (
    METRIC_NAMES,
    CoverageMetrics,
    CoverageParseError,
    FileCoverage,
    FunctionCoverage,
)

SUMMARY_FILENAME = "coverage-summary.json"
FINAL_FILENAME = "coverage-final.json"


def _load_json(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise CoverageParseError(f"{path.name} not found in {path.parent}")
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CoverageParseError(f"Failed to parse {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise CoverageParseError(f"{path.name} is not a JSON object")
    return data


def _pct(entry: Any) -> float:
    """Istanbul writes "Unknown" for pct when a metric has nothing to count."""
    if not isinstance(entry, dict):
        return 100.0
    pct = entry.get("pct")
    if isinstance(pct, int | float):
        return float(pct)
    return 100.0


def parse_summary(reports_dir: Path) -> CoverageMetrics:
    """Total percentages from coverage-summary.json."""
    data = _load_json(reports_dir / SUMMARY_FILENAME)
    total = data.get("total")
    if not isinstance(total, dict):
        raise CoverageParseError(f"{SUMMARY_FILENAME} has no 'total' entry")
    return CoverageMetrics(**{name: _pct(total.get(name)) for name in METRIC_NAMES})


def parse_final(reports_dir: Path, *, base_path: Path | None = None) -> list[FileCoverage]:
    """Per-file coverage from coverage-final.json, sorted by path."""
    data = _load_json(reports_dir / FINAL_FILENAME)
    files: list[FileCoverage] = []

    for file_path, file_data in data.items():
        if not isinstance(file_data, dict):
            continue
        normalized_path = file_path
        if base_path:
            with contextlib.suppress(ValueError):
                normalized_path = Path(file_path).relative_to(base_path).as_posix()

        file_cov = FileCoverage(path=normalized_path)

        # Lines from statement ranges
        statement_map = file_data.get("statementMap", {})
        statement_hits = file_data.get("s", {})
        for stmt_id, stmt_info in statement_map.items():
            start_line = stmt_info.get("start", {}).get("line", 0)
            end_line = stmt_info.get("end", {}).get("line", start_line) or start_line
            hits = statement_hits.get(stmt_id, 0)
            file_cov.statements_found += 1
            if hits > 0:
                file_cov.statements_hit += 1
            for line_num in range(start_line, end_line + 1):
                file_cov.lines[line_num] = max(file_cov.lines.get(line_num, 0), hits)

        # Branch locations
        for hits_array in file_data.get("b", {}).values():
            file_cov.branches_found += len(hits_array)
            file_cov.branches_hit += sum(1 for hits in hits_array if hits > 0)

        # Functions
        fn_map = file_data.get("fnMap", {})
        fn_hits = file_data.get("f", {})
        for fn_id, fn_info in fn_map.items():
            file_cov.functions.append(
                FunctionCoverage(
                    name=fn_info.get("name") or f"anonymous_{fn_id}",
                    start_line=fn_info.get("decl", {}).get("start", {}).get("line", 0),
                    hits=fn_hits.get(fn_id, 0),
                )
            )

        files.append(file_cov)

    return sorted(files, key=lambda f: f.path)
