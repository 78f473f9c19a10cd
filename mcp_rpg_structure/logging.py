from __future__ import annotations
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

class _TzFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        # ISO-like timestamp in UTC for consistency
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime("%Y-%m-%d %H:%M:%S")

def configure_root_logging(level: str | None = None) -> None:
    """
    Central logging config used by settings.py and the server entry point.
    """
    lvl = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    # Install handlers only once for idempotency
    if getattr(root, "_rpg_logging_configured", False):
        root.setLevel(lvl)
        return

    # stdio transport speaks JSON-RPC on stdout, keep logs on stderr
    handler = logging.StreamHandler(stream=sys.stderr)
    fmt = "%(asctime)s | %(levelname)s | %(name)s: %(message)s"
    handler.setFormatter(_TzFormatter(fmt))
    root.handlers[:] = [handler]
    root.setLevel(lvl)
    setattr(root, "_rpg_logging_configured", True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # Make the SDK logs follow the same handler/level
    for n in ("mcp", "mcp.server"):
        logging.getLogger(n).setLevel(lvl)
        logging.getLogger(n).handlers[:] = [handler]

def get_logger(name: str, **context: Any) -> Any:
    """Get a structlog logger bound to ``name`` and optional context.

    Args:
        name: Logger name (``mcp.rpg.<component>``)
        **context: Key-value pairs bound to every event

    Returns:
        Bound structlog logger
    """
    configure_root_logging()
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger
