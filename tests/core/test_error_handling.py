"""
Tests for the error taxonomy and the best-effort error handler.
"""

from cursed_rules.core.error_handling import (
    ErrorHandler,
    ErrorSeverity,
    InsufficientResource,
    InvalidSelection,
    NoTechniqueSelected,
    OriginForbidden,
    RulesError,
)


def test_insufficient_resource_message():
    error = InsufficientResource("CE", 6, 4)
    assert str(error) == "CE insuficiente: necessário 6, atual 4"
    assert (error.resource, error.required, error.available) == ("CE", 6, 4)


def test_selection_errors_share_a_base():
    """Test that callers can catch every selection problem at once."""
    assert issubclass(NoTechniqueSelected, InvalidSelection)
    assert issubclass(OriginForbidden, InvalidSelection)
    assert issubclass(InvalidSelection, RulesError)


def test_safe_execute_returns_result():
    handler = ErrorHandler()
    assert handler.safe_execute(lambda: 42, 0, "never fails") == 42
    assert handler.error_history == []


def test_safe_execute_returns_default_and_records():
    """Test that a failing operation is logged and replaced by the default."""
    handler = ErrorHandler()

    def explode():
        raise OSError("disk full")

    result = handler.safe_execute(
        explode,
        "fallback",
        "Could not save",
        ErrorSeverity.HIGH,
        {"path": "/tmp/x"},
    )
    assert result == "fallback"
    assert len(handler.error_history) == 1
    recorded = handler.error_history[0]
    assert recorded.severity == ErrorSeverity.HIGH
    assert recorded.context == {"path": "/tmp/x"}
    assert "disk full" in recorded.message
    assert isinstance(recorded.exception, OSError)
