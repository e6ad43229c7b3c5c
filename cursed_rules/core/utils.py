"""
Utilities module for the rules engine.

Small numeric helpers shared by the vow, stat and combat modules.
"""

from cursed_rules.core.constants import BONUS_PCT_MAX, BONUS_PCT_MIN


def clamp(value: int, minimum: int = BONUS_PCT_MIN, maximum: int = BONUS_PCT_MAX) -> int:
    """
    Clamps a value into a closed range.

    Args:
        value (int): The value to clamp.
        minimum (int): Lower bound. Defaults to the bonus percentage floor.
        maximum (int): Upper bound. Defaults to the bonus percentage ceiling.

    Returns:
        int: The clamped value.

    """
    return max(minimum, min(maximum, value))


def half_round_up(amount: int) -> int:
    """Returns ceil(amount / 2) for non-negative integers."""
    return (amount + 1) // 2
