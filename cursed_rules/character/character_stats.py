"""
Character stats module for the rules engine.

Computes the derived stats of a character (LL, maximum PV/CE/PE and
movement) and the effective maxima once binding vow bonuses are applied.
"""

import math

from pydantic import BaseModel, Field

from cursed_rules.character.main import Character, CurrentStats
from cursed_rules.core.constants import LL_PER_LEVEL, PROJECTION_TECHNIQUE, Origin
from cursed_rules.effects.vow_bonus import BonusPercent, apply_to_stats


class DerivedStats(BaseModel):
    """Stats computed from the sheet, never stored."""

    LL: int = Field(description="Liberação, 2 × level")
    MaxPV: int = Field(description="Maximum life points")
    MaxCE: int = Field(description="Maximum cursed energy")
    MaxPE: int = Field(description="Maximum effort points")
    Movement: int = Field(description="Movement in meters")


def liberation(level: int) -> int:
    """
    Returns the LL of a level, also used as proficiency bonus.

    Args:
        level (int): The character level.

    Returns:
        int: 2 × level, zero for non-positive levels.

    """
    return max(0, level) * LL_PER_LEVEL


def calculate_derived_stats(character: Character) -> DerivedStats:
    """
    Computes the derived stats of a character.

    Args:
        character (Character): The character sheet.

    Returns:
        DerivedStats: LL, maximum pools and movement.

    """
    level = character.level
    attributes = character.attributes
    ll = liberation(level)

    max_pv = (15 + attributes.VIG * 5) + (13 + attributes.VIG * 2) * level
    max_ce = attributes.INT * ll + level * 20 + 30
    max_pe = math.floor(attributes.PRE * level * 1.5) + ll // 2

    if character.origin == Origin.CELESTIAL_RESTRICTION:
        movement = 12
    else:
        movement = 9 + level * 3

    # Each projection stack adds half the base movement.
    if character.projection_stacks and character.has_technique_named(PROJECTION_TECHNIQUE):
        movement = math.floor(movement * (1 + character.projection_stacks * 0.5))

    return DerivedStats(LL=ll, MaxPV=max_pv, MaxCE=max_ce, MaxPE=max_pe, Movement=movement)


def effective_maxima(derived: DerivedStats, bonus: BonusPercent) -> CurrentStats:
    """
    Applies a vow bonus to the maximum pools.

    Args:
        derived (DerivedStats): The derived stats of the character.
        bonus (BonusPercent): The effective vow bonus.

    Returns:
        CurrentStats: The maximum PV/CE/PE after the percentage bonus.

    """
    base = CurrentStats(pv=derived.MaxPV, ce=derived.MaxCE, pe=derived.MaxPE)
    return apply_to_stats(base, bonus)


def full_pools(character: Character, bonus: BonusPercent | None = None) -> CurrentStats:
    """Returns full PV/CE/PE pools for a fresh sheet or a long rest."""
    derived = calculate_derived_stats(character)
    return effective_maxima(derived, bonus or BonusPercent())
