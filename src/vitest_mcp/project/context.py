"""Session-scoped project root.

Each MCP session owns one ProjectContext; tools receive it explicitly rather
than reading process-wide state.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from vitest_mcp.config.models import VitestMCPConfig
from vitest_mcp.core.errors import (
    AccessDeniedError,
    InvalidArgumentError,
    NotDirectoryError,
    NotFoundError,
    NotSetError,
)
from vitest_mcp.project.paths import ensure_allowed, is_self_package, normalize

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProjectRoot:
    """A validated project root."""

    path: Path
    name: str


class ProjectContext:
    """Holds the active project root for one session.

    The slot is replaced wholesale by set_project_root and cleared by reset.
    """

    def __init__(self, config: VitestMCPConfig) -> None:
        self._config = config
        self._root: ProjectRoot | None = None

    @property
    def config(self) -> VitestMCPConfig:
        return self._config

    def set_project_root(self, path: str) -> ProjectRoot:
        """Validate path and make it the active project root.

        Raises:
            InvalidArgumentError: path is empty
            AccessDeniedError: outside safety.allowedPaths, or the vitest-mcp
                package itself without dev mode
            NotFoundError: path does not exist
            NotDirectoryError: path is not a directory
        """
        if not path or not path.strip():
            raise InvalidArgumentError.required("path")

        resolved = normalize(path.strip())
        ensure_allowed(resolved, self._config.safety.allowed_paths)

        if not resolved.exists():
            raise NotFoundError.directory(str(resolved))
        if not resolved.is_dir():
            raise NotDirectoryError.for_path(str(resolved))

        if is_self_package(resolved):
            if not self._config.server.dev_mode:
                raise AccessDeniedError.self_targeting(str(resolved))
            log.warning("self_targeting_allowed", path=str(resolved))

        self._root = ProjectRoot(path=resolved, name=resolved.name)
        log.info("project_root_set", path=str(resolved), name=resolved.name)
        return self._root

    def get_project_root(self) -> Path:
        """Return the active root path. Raises NotSetError if unset."""
        if self._root is None:
            raise NotSetError.project_root()
        return self._root.path

    def get_project_info(self) -> ProjectRoot | None:
        return self._root

    def has_project_root(self) -> bool:
        return self._root is not None

    def reset(self) -> None:
        """Clear the active root."""
        self._root = None
