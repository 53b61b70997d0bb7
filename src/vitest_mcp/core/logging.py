"""Structured logging for the server and CLI.

Every event goes through structlog into stdlib handlers built from the
``logging`` config section. Each output picks its own renderer (console or
JSON lines) and level. Tool calls carry a request id that is stamped onto
every event logged while the call runs.

stdout carries the stdio MCP transport, so nothing here ever writes to it.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from vitest_mcp.config.models import LoggingConfig, LogOutputConfig

_request_id: ContextVar[str | None] = ContextVar("vitest_mcp_request_id", default=None)

# First file output of the active configuration
_active_log_file: Path | None = None

# MCP SDK loggers that emit one line per protocol message
_CHATTY_LOGGERS = ("mcp.server.lowlevel.server", "fastmcp.server.context.to_client")


def get_request_id() -> str | None:
    return _request_id.get()


def set_request_id(request_id: str | None = None) -> str:
    """Start a correlation scope for one tool call and return its id."""
    rid = request_id or uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def clear_request_id() -> None:
    _request_id.set(None)


def current_log_file() -> Path | None:
    """Path of the file logs are written to, if any output targets a file."""
    return _active_log_file


def _stamp_request_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    rid = _request_id.get()
    if rid is not None:
        event_dict.setdefault("request_id", rid)
    return event_dict


def _level_number(name: str | None, fallback: int = logging.INFO) -> int:
    if not name:
        return fallback
    return logging.getLevelNamesMapping().get(name.upper(), fallback)


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
        _stamp_request_id,  # type: ignore[list-item]
    ]


def _build_handler(
    output: LogOutputConfig,
    pre_chain: list[structlog.types.Processor],
    level: int,
) -> logging.Handler:
    handler: logging.Handler
    if output.destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
        colors = sys.stderr.isatty()
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        colors = False

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )
    handler.setLevel(level)
    return handler


def configure_logging(*, config: LoggingConfig | None = None, level: str = "INFO") -> None:
    """Route structlog through stdlib handlers described by ``config``.

    Without a config, a single console renderer on stderr at ``level`` is
    installed. Safe to call repeatedly: previous handlers are closed first.
    """
    global _active_log_file
    from vitest_mcp.config.models import LoggingConfig

    if config is None:
        config = LoggingConfig(level=level)  # type: ignore[arg-type]

    root_level = _level_number(config.level)
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must reach loggers created before it
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(root_level)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _active_log_file = None
    for output in config.outputs:
        if output.destination != "stderr" and _active_log_file is None:
            _active_log_file = Path(output.destination)
        root.addHandler(_build_handler(output, pre_chain, _level_number(output.level, root_level)))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]
