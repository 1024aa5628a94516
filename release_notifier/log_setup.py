"""
Console logging configuration for the release notifier.
"""

import logging
import sys
from typing import Optional


def create_formatter(app_name: Optional[str] = None) -> logging.Formatter:
    """
    Create the console formatter, prefixed with the app name when given.

    Args:
        app_name: Application name shown in every line

    Returns:
        Configured logging formatter
    """
    context_prefix = f"[{app_name}] " if app_name else ""
    return logging.Formatter(
        f"%(asctime)s - {context_prefix}%(name)s - %(levelname)s - %(message)s"
    )


def setup_logging(
    level: int = logging.INFO,
    app_name: Optional[str] = "release-notifier",
    force_setup: bool = False,
) -> None:
    """
    Setup console logging on the root logger.

    Args:
        level: Logging level (default: INFO)
        app_name: Application name shown in every line
        force_setup: Whether to force reconfiguration even if already setup
    """
    root_logger = logging.getLogger()
    if root_logger.handlers and not force_setup:
        # Logging already configured, just ensure our level is set
        root_logger.setLevel(level)
        return

    if force_setup:
        root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(create_formatter(app_name))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Request lines from the HTTP stack would repeat every API call
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
