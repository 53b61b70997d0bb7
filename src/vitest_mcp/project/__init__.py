"""Project root state and path sandboxing."""

from vitest_mcp.project.context import ProjectContext, ProjectRoot
from vitest_mcp.project.paths import (
    ensure_allowed,
    ensure_within_root,
    is_self_package,
    resolve_path,
)

__all__ = [
    "ProjectContext",
    "ProjectRoot",
    "ensure_allowed",
    "ensure_within_root",
    "is_self_package",
    "resolve_path",
]
