"""structlog setup shared by every service module."""

import logging

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from playhub.config import Settings

SERVICE_NAME = "playhub-api"


def _service_context(environment: str) -> Processor:
    """Stamp every event with the service name and deployment environment."""

    def add(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("env", environment)
        return event_dict

    return add


def setup_logging(settings: Settings) -> None:
    """Configure structlog with a JSON renderer, or a console one for local runs."""
    renderer: Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _service_context(settings.environment),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
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
    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(max(level, logging.WARNING))
