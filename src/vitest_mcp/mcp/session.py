"""Session management for the vitest-mcp server.

Each MCP session owns its own ProjectContext, so one client's
set_project_root never redirects another client's runs.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass

import structlog

from vitest_mcp.config.models import VitestMCPConfig
from vitest_mcp.project.context import ProjectContext

log = structlog.get_logger(__name__)

# Sessions idle longer than this are dropped when a new session starts.
DEFAULT_SESSION_IDLE_SEC = 3600.0


@dataclass
class SessionState:
    """State for a single session."""

    session_id: str
    created_at: float
    last_active: float
    project: ProjectContext

    def touch(self) -> None:
        """Update last active timestamp."""
        self.last_active = time.time()


class SessionManager:
    """Manages active sessions."""

    def __init__(
        self,
        config: VitestMCPConfig,
        idle_sec: float = DEFAULT_SESSION_IDLE_SEC,
    ) -> None:
        self._sessions: dict[str, SessionState] = {}
        self._config = config
        self._idle_sec = idle_sec

    def get_or_create(self, session_id: str | None = None) -> SessionState:
        """Get existing session or create new one.

        Creating a session first drops sessions idle past the limit.

        Args:
            session_id: Optional session ID. If None, creates new session.
        """
        if session_id and session_id in self._sessions:
            session = self._sessions[session_id]
            session.touch()
            return session

        self.cleanup_stale()
        new_id = session_id or f"sess_{uuid.uuid4().hex[:12]}"
        now = time.time()
        session = SessionState(
            session_id=new_id,
            created_at=now,
            last_active=now,
            project=ProjectContext(self._config),
        )
        self._sessions[new_id] = session
        log.debug("session_created", session_id=new_id)
        return session

    def get(self, session_id: str) -> SessionState | None:
        """Get session if exists."""
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> None:
        """Close a session."""
        if session_id in self._sessions:
            del self._sessions[session_id]

    def cleanup_stale(self) -> int:
        """Remove stale sessions.

        Returns:
            Number of sessions removed
        """
        now = time.time()
        to_remove = [
            sid for sid, s in self._sessions.items() if now - s.last_active > self._idle_sec
        ]
        for sid in to_remove:
            del self._sessions[sid]
        if to_remove:
            log.debug("sessions_expired", count=len(to_remove))
        return len(to_remove)

    def __len__(self) -> int:
        return len(self._sessions)
