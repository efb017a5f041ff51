"""structlog configuration for the API server and scripts."""

import logging

import structlog


def configure_logging(verbose: bool = False, json: bool = False) -> None:
    """Configure structlog for console or JSON output.

    Args:
        verbose: Emit debug events (quotes, venue reads) as well as info
        json: Render one JSON object per line instead of the colored console format
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    renderer = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
