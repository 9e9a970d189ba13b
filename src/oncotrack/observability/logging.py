"""
Structured Logging

Features:
- JSON or console-formatted logs
- Log level filtering
- Context propagation through structlog contextvars
"""

import logging

import structlog


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structlog for the process.
    
    Args:
        level: Minimum log level name (DEBUG, INFO, ...)
        json_output: Render JSON lines instead of console output
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings=None) -> None:
    """Configure logging from EngineSettings (log_level, log_json, debug)."""
    from oncotrack.config import get_settings
    
    settings = settings or get_settings()
    level = "DEBUG" if settings.engine.debug else settings.engine.log_level
    configure_logging(level, settings.engine.log_json)
