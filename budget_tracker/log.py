"""
Structured Logging Setup

Every module logs through structlog with snake_case event names
and keyword context, e.g.:

    logger.info("yearly_summary_computed", year=2024, months_with_data=3)

configure_logging() is called once by create_app_components().
Until then structlog's defaults apply, which is what the tests see.
"""

import logging
import sys

import structlog


_configured = False


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure stdlib logging and structlog.
    
    Args:
        level: Minimum log level name (e.g. "INFO").
        json_output: Render JSON lines; otherwise a console renderer
                     is used (handy with debug_mode).
    """
    global _configured
    
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def is_configured() -> bool:
    """Whether configure_logging() has run in this process."""
    return _configured
