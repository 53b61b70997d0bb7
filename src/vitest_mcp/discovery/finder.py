"""Test file discovery.

Walks one directory at a time (no parallel fan-out) so results are
deterministic. Excluded directories are pruned before descending: nothing
beneath node_modules and friends is ever stat'ed.
"""

from __future__ import annotations

import fnmatch
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import structlog

from vitest_mcp.config.models import DiscoveryConfig

log = structlog.get_logger(__name__)

TestType = Literal["unit", "integration", "e2e"]

# Always skipped, whatever discovery.excludePatterns says.
ALWAYS_EXCLUDED_DIRS = frozenset({"node_modules", "dist", "build", ".git", "coverage"})

_TEST_FILE_RE = re.compile(r"\.(test|spec)\.(js|ts|jsx|tsx)$")

# Project manifest used to locate a project root.
PROJECT_MANIFEST = "package.json"


@dataclass(frozen=True, slots=True)
class TestFile:
    """A discovered test file."""

    __test__ = False  # not a pytest class

    path: str  # absolute
    relative_path: str  # posix, relative to the search root
    type: TestType

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "relativePath": self.relative_path, "type": self.type}


def is_test_file(name: str | Path) -> bool:
    """True if the basename looks like *.test.ts / *.spec.jsx etc."""
    return _TEST_FILE_RE.search(Path(name).name) is not None


def classify_test_type(relative_path: str) -> TestType:
    """Classify by directory segments; the first e2e/integration ancestor wins."""
    for segment in relative_path.split("/")[:-1]:
        if segment == "e2e":
            return "e2e"
        if segment == "integration":
            return "integration"
    return "unit"


def _is_excluded_dir(name: str, patterns: list[str]) -> bool:
    if name in ALWAYS_EXCLUDED_DIRS:
        return True
    return any(name == p or fnmatch.fnmatch(name, p) for p in patterns)


def _classify_prefix(root: Path, base: Path | None) -> str:
    if base is None:
        return ""
    rel = os.path.relpath(os.path.normpath(root), os.path.normpath(base)).replace(os.sep, "/")
    if rel == "." or rel == ".." or rel.startswith("../"):
        return ""
    return rel + "/"


def find_test_files(
    root: Path,
    config: DiscoveryConfig | None = None,
    *,
    classify_base: Path | None = None,
) -> list[TestFile]:
    """Collect test files under root, sorted by relative path.

    Types are classified on the path relative to ``classify_base`` (the
    project root) when given, so a file keeps its type wherever the search
    starts. ``relative_path`` stays relative to ``root``.

    A root that cannot be read yields []. Unreadable subdirectories are
    skipped silently.
    """
    config = config or DiscoveryConfig()
    found: list[TestFile] = []
    prefix = _classify_prefix(root, classify_base)

    try:
        root_entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError as e:
        log.debug("discovery_root_unreadable", root=str(root), error=str(e))
        return []

    def walk(entries: list[os.DirEntry[str]], rel_dir: str, depth: int) -> None:
        for entry in entries:
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                if entry.is_dir(follow_symlinks=False):
                    if depth >= config.max_depth or _is_excluded_dir(
                        entry.name, config.exclude_patterns
                    ):
                        continue
                    children = sorted(os.scandir(entry.path), key=lambda e: e.name)
                    walk(children, rel, depth + 1)
                elif entry.is_file() and is_test_file(entry.name):
                    found.append(
                        TestFile(path=entry.path, relative_path=rel, type=classify_test_type(prefix + rel))
                    )
            except OSError:
                continue

    walk(root_entries, "", 0)
    found.sort(key=lambda f: f.relative_path)
    log.debug("tests_discovered", root=str(root), count=len(found))
    return found


def find_project_root(start: Path | None = None) -> Path:
    """Walk upward from start looking for package.json.

    Returns the first directory that has one, else start unchanged.
    Never raises.
    """
    start = start or Path.cwd()
    try:
        current = start.absolute()
        for candidate in (current, *current.parents):
            if (candidate / PROJECT_MANIFEST).is_file():
                return candidate
    except OSError:
        pass
    return start


def file_exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


def is_directory(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False
