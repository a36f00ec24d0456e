"""
Structured logging for the easycrypto library.

Events are built with structlog and handed to the standard ``logging``
module under the ``easycrypto`` logger namespace, with their fields passed
as ``extra``. Until the host opts in, the namespace only carries a
``NullHandler``, so nothing is printed and the host's own logging setup
decides what happens to library events. :func:`configure_logging` attaches
a console or JSON renderer to the ``easycrypto`` logger only; the root
logger and the global structlog configuration are left alone.
"""

import logging
import sys
from typing import IO, Literal, cast

import structlog
from structlog.types import Processor

from easycrypto.core.config import get_settings

LIBRARY_LOGGER = "easycrypto"

Renderer = Literal["console", "json"]

logging.getLogger(LIBRARY_LOGGER).addHandler(logging.NullHandler())

_handler: logging.Handler | None = None


def _event_processors() -> list[Processor]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.render_to_log_kwargs,
    ]


def _formatter(renderer: Renderer) -> structlog.stdlib.ProcessorFormatter:
    pre_chain: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if renderer == "console":
        final: list[Processor] = [structlog.dev.ConsoleRenderer(colors=False)]
    else:
        final = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
    )


def configure_logging(
    level: str | None = None,
    renderer: Renderer | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """
    Render easycrypto events to a stream.

    Parameters
    ----------
    level:
        Threshold for the ``easycrypto`` logger. Defaults to the configured
        ``log_level``.
    renderer:
        ``"console"`` for human-readable lines or ``"json"`` for one JSON
        object per line. Defaults to console in development, JSON elsewhere.
    stream:
        Destination, ``sys.stdout`` by default.

    Returns
    -------
    logging.Handler
        The installed handler. Calling this again replaces it.
    """
    global _handler

    settings = get_settings()
    level = level or settings.log_level
    if renderer is None:
        renderer = "console" if settings.environment == "development" else "json"

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    if _handler is not None:
        library_logger.removeHandler(_handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(_formatter(renderer))
    library_logger.addHandler(handler)
    library_logger.setLevel(level.upper())
    _handler = handler
    return handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger backed by the stdlib logger ``name``."""
    return cast(
        structlog.stdlib.BoundLogger,
        structlog.wrap_logger(
            logging.getLogger(name),
            processors=_event_processors(),
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
        ),
    )
