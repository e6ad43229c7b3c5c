"""
Event system module for the rules engine.

Notifications the engine emits for interested observers (sheet widgets,
sound/haptic feedback, campaign logs). Delivery is fire-and-forget: an
observer that fails is logged and never affects the emitted result.
"""

from collections import defaultdict
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, Field

from cursed_rules.core.error_handling import ERROR_HANDLER, ErrorSeverity
from cursed_rules.effects.vow_bonus import BonusPercent


class EventType(Enum):
    """Enumeration of available event types."""

    BONUSES_UPDATED = "bonuses_updated"  # Vow bonus recomputed
    BUFFS_CONSUMED = "buffs_consumed"  # Buffs used by a resolved action
    WEAPON_BROKEN = "weapon_broken"  # Weapon overloaded past its durability
    ROLL_RESOLVED = "roll_resolved"  # Any combat action resolved


class EngineEvent(BaseModel):
    """Base class for all engine events."""

    event_type: EventType = Field(description="The type of the event.")


class BonusesUpdated(EngineEvent):
    """The effective vow bonus of a character was recomputed."""

    event_type: EventType = Field(default=EventType.BONUSES_UPDATED)
    character_id: str = Field(description="The character the bonus belongs to.")
    bonus: BonusPercent = Field(description="The new effective bonus.")


class BuffsConsumed(EngineEvent):
    """Buffs contributed to a resolved action."""

    event_type: EventType = Field(default=EventType.BUFFS_CONSUMED)
    character_id: str = Field(description="The acting character.")
    ability_ids: list[str] = Field(description="The consumed buff abilities.")


class WeaponBroken(EngineEvent):
    """A weapon broke after an overloaded attack."""

    event_type: EventType = Field(default=EventType.WEAPON_BROKEN)
    character_id: str = Field(description="The acting character.")
    item_id: str = Field(description="The broken weapon.")


class RollResolved(EngineEvent):
    """A combat action was resolved."""

    event_type: EventType = Field(default=EventType.ROLL_RESOLVED)
    character_id: str = Field(description="The acting character.")
    title: str = Field(description="Name of the action.")
    total: int = Field(description="Final total of the action.")
    rolls: list[int] = Field(default_factory=list, description="Per-die results.")


EventHandler = Callable[[EngineEvent], None]


class EventBus:
    """Dispatches engine events to subscribed handlers."""

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Registers a handler for one event type."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Removes a previously registered handler, if present."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def emit(self, event: EngineEvent) -> None:
        """
        Delivers an event to every handler of its type.

        Args:
            event (EngineEvent): The event to deliver.

        """
        for handler in list(self._handlers[event.event_type]):
            ERROR_HANDLER.safe_execute(
                lambda handler=handler: handler(event),
                None,
                f"Observer failed on {event.event_type.value}",
                ErrorSeverity.LOW,
                {"handler": getattr(handler, "__name__", repr(handler))},
            )
