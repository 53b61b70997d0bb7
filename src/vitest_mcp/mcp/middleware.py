"""Tool call middleware.

Every tool call gets a request id, a start/finish log pair and a one-line
summary on the stderr console. Failures never escape as protocol errors:
they come back as ``{"error": {...}, "summary": "error: ..."}`` content so
the agent can read the code, message and remediation.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import TYPE_CHECKING, Any

import structlog
from fastmcp.server.middleware import Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from pydantic import ValidationError

from vitest_mcp.core.console import get_console
from vitest_mcp.core.logging import clear_request_id, set_request_id
from vitest_mcp.mcp.errors import MCPError, get_error_hint

if TYPE_CHECKING:
    from fastmcp.server.middleware import CallNext
    from mcp import types as mt

log = structlog.get_logger(__name__)

_MAX_LOGGED_STR = 80
_MAX_SUMMARY = 100


def _error_result(summary: str, **error: Any) -> ToolResult:
    return ToolResult(structured_content={"error": error, "summary": summary})


class _CallTimer:
    __slots__ = ("_start",)

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def ms(self) -> float:
        return round((time.perf_counter() - self._start) * 1000, 1)


class ToolMiddleware(Middleware):
    """Logs tool calls and turns exceptions into structured error content."""

    async def on_call_tool(  # type: ignore[override]
        self,
        context: MiddlewareContext[mt.CallToolRequest],
        call_next: CallNext[mt.CallToolRequest, Any],
    ) -> Any:
        set_request_id()
        try:
            return await self._call(context, call_next)
        finally:
            clear_request_id()

    async def _call(
        self,
        context: MiddlewareContext[mt.CallToolRequest],
        call_next: CallNext[mt.CallToolRequest, Any],
    ) -> Any:
        tool = getattr(context.message, "name", "unknown")
        arguments = getattr(context.message, "arguments", None) or {}
        fastmcp_ctx = context.fastmcp_context
        session = ((fastmcp_ctx.session_id if fastmcp_ctx else None) or "unknown")[:8]

        timer = _CallTimer()
        log.info("tool_start", tool=tool, session_id=session, **self._extract_log_params(arguments))
        try:
            result = await call_next(context)
        except asyncio.CancelledError:
            log.info("tool_cancelled", tool=tool, session_id=session, duration_ms=timer.ms)
            return _error_result(
                "error: cancelled",
                code="CANCELLED",
                message=f"Tool '{tool}' cancelled: server shutting down",
            )
        except ValidationError as e:
            details = [
                {
                    "field": ".".join(str(part) for part in err.get("loc", ())),
                    "message": err.get("msg", ""),
                    "type": err.get("type", ""),
                }
                for err in e.errors()
            ]
            log.warning("tool_validation_error", tool=tool, errors=details, duration_ms=timer.ms)
            return _error_result(
                f"error: validation failed for {tool}",
                code="VALIDATION_ERROR",
                message=f"Invalid parameters for '{tool}'",
                details=details,
            )
        except MCPError as e:
            log.warning(
                "tool_error",
                tool=tool,
                error_code=e.code.value,
                error=e.message,
                path=e.path,
                duration_ms=timer.ms,
            )
            return ToolResult(
                structured_content={
                    "error": e.to_response().to_dict(),
                    "summary": f"error: {e.code.value}",
                }
            )
        except Exception as e:
            log.error(
                "tool_internal_error",
                tool=tool,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=timer.ms,
            )
            log.debug("tool_internal_error_traceback", tool=tool, exc_info=True)
            get_console().print(
                f"[red]Error in {tool}:[/red] {type(e).__name__}: {e}", highlight=False
            )
            message = f"Error calling tool '{tool}': {e}"
            return _error_result(
                f"error: internal error in {tool}",
                code="INTERNAL_ERROR",
                message=message,
                error_type=type(e).__name__,
                remediation=get_error_hint(message),
            )

        summary = self._extract_summary(result)
        log.info(
            "tool_completed",
            tool=tool,
            session_id=session,
            duration_ms=timer.ms,
            summary=summary,
        )
        if summary:
            stamp = time.strftime("%H:%M:%S")
            get_console().print(
                f"[dim]\\[{stamp}][/dim] Session {session}: {tool} -> {summary}",
                style="green",
                highlight=False,
            )
        return result

    @staticmethod
    def _extract_log_params(arguments: dict[str, Any]) -> dict[str, Any]:
        """Tool arguments for tool_start, with long values shortened."""
        params: dict[str, Any] = {}
        for key, value in arguments.items():
            if value is None:
                continue
            if isinstance(value, str) and len(value) > _MAX_LOGGED_STR:
                value = value[:_MAX_LOGGED_STR] + "..."
            elif isinstance(value, list) and len(value) > 3:
                value = f"[{len(value)} items]"
            params[key] = value
        return params

    @staticmethod
    def _result_payload(result: Any) -> dict[str, Any] | None:
        if isinstance(result, dict):
            return result
        structured = getattr(result, "structured_content", None)
        if isinstance(structured, dict):
            return structured
        for item in getattr(result, "content", None) or ():
            text = getattr(item, "text", None)
            if not text:
                continue
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                return data
        return None

    def _extract_summary(self, result: Any) -> str:
        """One line for the console: tool summary, file count or ok/failed."""
        data = self._result_payload(result)
        if not data:
            return ""
        summary = data.get("summary")
        if isinstance(summary, str) and summary:
            return summary[:_MAX_SUMMARY]
        if "totalCount" in data:
            return f"{data['totalCount']} test files"
        if "success" not in data:
            return ""
        if data["success"]:
            return "ok"
        reason = str(data.get("message") or data.get("error") or "")
        return f"failed: {reason[:80]}"
