"""
Turn action economy for the rules engine.

ActionState lives for one turn, next to (never inside) the character sheet:
one standard action, two movement points and a reaction penalty that grows
with every reaction taken during the turn.
"""

from pydantic import BaseModel, Field

from cursed_rules.core.logging import log_debug

MOVEMENT_PER_TURN = 2


class ActionState(BaseModel):
    """What the character can still do this turn."""

    standard_available: bool = Field(
        default=True,
        description="Whether the standard action is still available.",
    )
    movement_points: int = Field(
        default=MOVEMENT_PER_TURN,
        ge=0,
        le=MOVEMENT_PER_TURN,
        description="Movement actions left this turn.",
    )
    reaction_penalty: int = Field(
        default=0,
        ge=0,
        description="Cumulative penalty from reactions taken this turn.",
    )

    @property
    def can_full_action(self) -> bool:
        """A full action needs the standard action and at least one movement."""
        return self.standard_available and self.movement_points >= 1

    def spend_standard(self) -> bool:
        """
        Spends the standard action.

        Returns:
            bool: True if the action was available and is now spent.

        """
        if not self.standard_available:
            return False
        self.standard_available = False
        return True

    def spend_movement(self) -> bool:
        """
        Spends one movement point.

        Returns:
            bool: True if a point was available and is now spent.

        """
        if self.movement_points <= 0:
            return False
        self.movement_points -= 1
        return True

    def spend_full_action(self) -> bool:
        """
        Spends the standard action together with all remaining movement.

        Returns:
            bool: True if the full action was possible; the state is left
                untouched otherwise.

        """
        if not self.can_full_action:
            return False
        self.standard_available = False
        self.movement_points = 0
        return True

    def use_reaction(self) -> bool:
        """Takes a reaction; always allowed, each one adds 1 to the penalty."""
        self.reaction_penalty += 1
        log_debug("Reaction used", {"reaction_penalty": self.reaction_penalty})
        return True

    def reset_turn(self) -> None:
        """Restores the start-of-turn state."""
        self.standard_available = True
        self.movement_points = MOVEMENT_PER_TURN
        self.reaction_penalty = 0
