"""Application context for MCP handlers.

Single object passed to all tool handlers with access to ops classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vitest_mcp.config.models import VitestMCPConfig
    from vitest_mcp.coverage.ops import CoverageOps
    from vitest_mcp.mcp.session import SessionManager
    from vitest_mcp.testing.ops import TestOps
    from vitest_mcp.testing.versions import VersionChecker


@dataclass
class AppContext:
    """Context object passed to all MCP tool handlers.

    Ops classes are shared; per-client project state lives in the session.
    """

    config: VitestMCPConfig
    test_ops: TestOps
    coverage_ops: CoverageOps
    session_manager: SessionManager

    @classmethod
    def create(
        cls,
        config: VitestMCPConfig,
        version_checker: VersionChecker | None = None,
    ) -> AppContext:
        """Factory to create context with all ops wired together.

        Args:
            config: Resolved configuration
            version_checker: Optional shared checker (tests pass a stub)
        """
        from vitest_mcp.coverage.ops import CoverageOps
        from vitest_mcp.mcp.session import SessionManager
        from vitest_mcp.testing.ops import TestOps
        from vitest_mcp.testing.versions import VersionChecker as VC

        checker = version_checker or VC()
        return cls(
            config=config,
            test_ops=TestOps(config, checker),
            coverage_ops=CoverageOps(config, checker),
            session_manager=SessionManager(config),
        )
