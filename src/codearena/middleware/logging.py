"""structlog setup shared by the API process and the storage layer."""

import logging

import structlog

from codearena.config import Settings

# Driver loggers that flood INFO with per-statement and per-connection lines.
_CHATTY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg")


def _add_service_context(environment: str) -> structlog.types.Processor:
    def processor(_logger: object, _method: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", "codearena")
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def setup_logging(settings: Settings) -> None:
    """Route storage and request events through structlog.

    ``log_format="json"`` renders one JSON object per event; anything else
    uses the coloured console renderer.
    """
    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service_context(settings.environment),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)
    driver_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, driver_level))
