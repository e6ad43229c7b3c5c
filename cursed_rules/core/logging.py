"""
Logging configuration module for the rules engine.

Provides centralized logging setup with colored output using rich, and
helpers that append a context dictionary to the logged message.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "cursed_rules"


def setup_logging(level: int = logging.INFO, width: int = 120) -> logging.Logger:
    """
    Routes the engine's log records to a rich console handler.

    Only the package logger is configured, so a host application keeps
    control of the root logger. Calling it again replaces the handler.

    Args:
        level (int): Minimum level of engine records. Defaults to INFO.
        width (int): Console width used by rich.

    Returns:
        logging.Logger: The configured package logger.

    """
    handler = RichHandler(
        console=Console(width=width, force_terminal=True, force_jupyter=False),
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s", datefmt="[%X]"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package_logger.handlers):
        if isinstance(existing, RichHandler):
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Returns a logger below the package logger, e.g. 'cursed_rules.combat'."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


logger = get_logger(PACKAGE_LOGGER)


def _with_context(message: str, context: dict[str, Any] | None) -> str:
    if not context:
        return message
    context_str = " ".join(f"{k}={v}" for k, v in context.items())
    return f"{message} [{context_str}]"


def log_error(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs an error message with optional context."""
    logger.error(_with_context(message, context))


def log_warning(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs a warning message with optional context."""
    logger.warning(_with_context(message, context))


def log_info(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs an info message with optional context."""
    logger.info(_with_context(message, context))


def log_debug(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs a debug message with optional context."""
    logger.debug(_with_context(message, context))
