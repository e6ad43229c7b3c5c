"""
Error taxonomy and centralized handling for best-effort operations.

Resolver errors are raised before any state is mutated. Collaborators at the
boundary (roll logs, override storage, observers) go through the
ErrorHandler so that their failures are logged and never undo a computed
result.
"""

import logging
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, TypeVar

T = TypeVar("T")


class RulesError(Exception):
    """Base class for every error raised by the rules engine."""


class ParseError(RulesError, ValueError):
    """A dice expression or text field does not match the expected pattern."""

    def __init__(self, text: str, expected: str) -> None:
        super().__init__(f"Cannot parse '{text}': expected {expected}")
        self.text = text
        self.expected = expected


class InsufficientResource(RulesError):
    """The action (plus its buffs) costs more than the current pool holds."""

    def __init__(self, resource: str, required: int, available: int) -> None:
        super().__init__(
            f"{resource} insuficiente: necessário {required}, atual {available}"
        )
        self.resource = resource
        self.required = required
        self.available = available


class InvalidSelection(RulesError):
    """The configured action cannot be resolved as selected."""


class NoTechniqueSelected(InvalidSelection):
    """A technique action was requested without a valid technique."""


class OriginForbidden(InvalidSelection):
    """The character's origin does not allow this action."""


class ErrorSeverity(Enum):
    """Severity levels for handled errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class HandledError:
    """An error captured by the ErrorHandler, with its context."""

    message: str
    severity: ErrorSeverity
    context: dict[str, Any]
    exception: Optional[Exception] = None


class ErrorHandler:
    """Logs and records failures of operations that must not interrupt play."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("cursed_rules.errors")
        self.error_history: list[HandledError] = []

    def handle(
        self,
        message: str,
        severity: ErrorSeverity,
        context: Optional[dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> None:
        """Record an error and log it according to its severity."""
        error = HandledError(
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        self.error_history.append(error)

        # Prefix context keys to avoid clashing with LogRecord attributes.
        safe_context = {f"ctx_{key}": value for key, value in error.context.items()}

        if severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL: {message}", extra=safe_context)
            if exception:
                self.logger.critical(
                    "".join(traceback.format_exception(exception))
                )
        elif severity == ErrorSeverity.HIGH:
            self.logger.error(f"ERROR: {message}", extra=safe_context)
        elif severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"WARNING: {message}", extra=safe_context)
        else:
            self.logger.info(f"INFO: {message}", extra=safe_context)

    def safe_execute(
        self,
        operation: Callable[[], T],
        default: T,
        error_message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[dict[str, Any]] = None,
    ) -> T:
        """Run an operation, returning the default if it raises."""
        try:
            return operation()
        except Exception as e:
            self.handle(f"{error_message}: {e}", severity, context, e)
            return default


# Global error handler instance.
ERROR_HANDLER = ErrorHandler()
