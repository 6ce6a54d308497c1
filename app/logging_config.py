"""
Structured logging for the agent service.

Every log line, including those emitted through stdlib ``logging`` by the
agent, tool and provider modules, is rendered by structlog: JSON lines in
production, a colored console in DEBUG.
"""

import logging
import sys
from typing import Iterable, Optional

import structlog

from .config import settings

NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx", "anthropic")


def _shared_processors(is_dev: bool) -> list:
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if not is_dev:
        processors.append(structlog.processors.format_exc_info)
    return processors


def setup_logging(
    log_level: Optional[str] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure structlog and route the root logger through it.

    Args:
        log_level: Override log level (default: settings.log_level)
        quiet: Third-party loggers capped at WARNING
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    is_dev = level == logging.DEBUG
    processors = _shared_processors(is_dev)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = structlog.dev.ConsoleRenderer() if is_dev else structlog.processors.JSONRenderer()
    formatter = structlog.stdlib.ProcessorFormatter(
        # stdlib records skip structlog's chain, so give them the same enrichment
        foreign_pre_chain=processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
