"""Structured logging for pagewise.

Every module logs snake_case events with keyword context, e.g.
``logger.info("pdf_extracted", pages=12, empty_pages=1)``.  Two renderers
share one processor chain:

- development: coloured ``ConsoleRenderer`` (colours only on a TTY)
- production (``APP_ENV=production`` or ``json_output=True``): one JSON
  object per line

Records emitted through the standard library (uvicorn, httpx, openai) go
through the same chain, so the process writes one consistent format.
"""

import logging
import os
import sys

import structlog

# Client libraries that log every HTTP round trip at INFO.  Page embedding
# fans out one request per page, which would drown the pipeline events.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _renderer(use_json: bool) -> structlog.types.Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON output regardless of ``APP_ENV``.

    Returns:
        A configured structlog BoundLogger.
    """
    level = log_level.upper()
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    processors = _shared_processors()
    renderer = _renderer(use_json)

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *processors,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    if level != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound with ``logger_name=name``.

    Falls back to default configuration when nothing has configured
    structlog yet (CLI runs, ad-hoc scripts).
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
