"""Logging setup for textchain processes.

Every module logs through ``structlog.get_logger(__name__)``. The pipeline
logs ids, lengths and error codes, never the text being transformed.
configure_logging() sends structlog events and plain stdlib records
(httpx, SQLAlchemy, google-genai) to one stdout handler that renders both
alike, as JSON lines or as console output.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

# Library loggers held at WARNING or above whatever level textchain runs at
_NOISY_LOGGERS: tuple[str, ...] = (
    "httpx",
    "httpcore",
    "google_genai",
    "google.auth",
    "urllib3",
    "opentelemetry",
    "sqlalchemy.engine",
)


def _drop_formatter_keys(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Strip the ``_record``/``_from_structlog`` keys ProcessorFormatter always adds."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_chain(json_output: bool) -> list[Any]:
    if json_output:
        return [_drop_formatter_keys, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [_drop_formatter_keys, structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(*, json_output: bool = False, level: str = "INFO") -> None:
    """Install the stdout handler and point structlog at it.

    Replaces any handlers already on the root logger, so calling it again
    (a second service, a test) reconfigures rather than duplicates output.

    Args:
        json_output: JSON lines when True, coloured console output otherwise
        level: Root level name, e.g. "DEBUG" or "WARNING"
    """
    root_level = logging.getLevelNamesMapping()[level.upper()]
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=_render_chain(json_output), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(root_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))
