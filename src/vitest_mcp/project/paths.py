"""Path resolution and sandboxing for tool path arguments."""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Sequence
from pathlib import Path

from vitest_mcp.core.errors import AccessDeniedError

# Manifest names that identify this tool's own checkout.
SELF_PYPROJECT_NAME = "vitest-mcp"
SELF_PACKAGE_JSON_NAME = "@djankies/vitest-mcp"


def normalize(path: str | Path) -> Path:
    """Absolute, lexically normalized path. Expands ~, does not follow symlinks."""
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(path)))))


def resolve_path(base: Path, user_path: str) -> Path:
    """Resolve user_path (relative or absolute) against base.

    Backslash separators are treated as forward slashes.
    """
    cleaned = user_path.strip().replace("\\", "/")
    candidate = Path(os.path.expanduser(cleaned))
    if not candidate.is_absolute():
        candidate = base / candidate
    return normalize(candidate)


def is_within(path: Path, parent: Path) -> bool:
    """True if path equals parent or is nested under it (both normalized)."""
    return normalize(path).is_relative_to(normalize(parent))


def ensure_allowed(path: Path, allowed_paths: Sequence[str] | None) -> None:
    """Raise AccessDeniedError if an allow-list is set and path is outside it."""
    if not allowed_paths:
        return
    if any(is_within(path, Path(allowed)) for allowed in allowed_paths):
        return
    raise AccessDeniedError.outside_allowed(str(path), [str(normalize(p)) for p in allowed_paths])


def ensure_within_root(path: Path, root: Path) -> None:
    """Raise AccessDeniedError if path escapes the project root."""
    if not is_within(path, root):
        raise AccessDeniedError.outside_root(str(path), str(root))


def is_self_package(directory: Path) -> bool:
    """True if directory is the vitest-mcp checkout itself.

    Identified by the name declared in pyproject.toml or package.json.
    Unreadable or malformed manifests count as "not self".
    """
    pyproject = directory / "pyproject.toml"
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            data = {}
        if data.get("project", {}).get("name") == SELF_PYPROJECT_NAME:
            return True

    package_json = directory / "package.json"
    if package_json.is_file():
        try:
            manifest = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return False
        return isinstance(manifest, dict) and manifest.get("name") == SELF_PACKAGE_JSON_NAME

    return False
