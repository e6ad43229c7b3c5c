"""
Dice parser module for the rules engine.

Rolls single dice, batches of dice and simple dice expressions such as
"2d6+3". Every roll goes through a DiceRoller whose random source can be
replaced by a seeded one, so a sequence of rolls can be replayed exactly.
"""

import random
import re
from typing import Any, Protocol

from pydantic import BaseModel, Field

from cursed_rules.core.error_handling import ParseError
from cursed_rules.core.logging import log_debug

# <count>d<faces>[+<modifier>], count defaults to 1.
DICE_EXPRESSION = re.compile(
    r"^\s*(\d*)\s*d\s*(\d+)\s*(?:\+\s*(\d+))?\s*$",
    re.IGNORECASE,
)

# Reasonable limits.
MAX_DICE = 200
MAX_FACES = 1000


class RandomSource(Protocol):
    """Anything that can draw an integer in a closed range."""

    def randint(self, a: int, b: int) -> int: ...


class RollBreakdown(BaseModel):
    """Class to hold roll breakdown information."""

    value: int = Field(
        description="Total roll result",
    )
    description: str = Field(
        description="Description of the roll",
    )
    rolls: list[int] = Field(
        description="List of individual dice rolls",
        default_factory=list,
    )
    modifier: int = Field(
        default=0,
        description="Flat modifier added to the dice",
    )

    def get_roll(self) -> int:
        """
        Returns the total roll value.

        Returns:
            int: The total roll value.

        """
        return self.value


class DiceExpression(BaseModel):
    """A parsed `<count>d<faces>[+<modifier>]` expression."""

    count: int = Field(description="Number of dice")
    faces: int = Field(description="Faces of each die")
    modifier: int = Field(default=0, description="Flat modifier")

    def __str__(self) -> str:
        text = f"{self.count}d{self.faces}"
        if self.modifier:
            text += f"+{self.modifier}"
        return text


def parse_expression(expr: str) -> DiceExpression:
    """
    Parses a dice expression without rolling it.

    Args:
        expr (str): Expression like "2d6+3" or "d8".

    Returns:
        DiceExpression: The parsed expression.

    Raises:
        ParseError: If the expression does not match the dice pattern or
            exceeds the dice limits.

    """
    match = DICE_EXPRESSION.match(expr or "")
    if not match:
        raise ParseError(expr, "<count>d<faces>[+<modifier>]")
    count_str, faces_str, modifier_str = match.groups()
    count = int(count_str) if count_str else 1
    faces = int(faces_str)
    modifier = int(modifier_str) if modifier_str else 0
    if count <= 0 or count > MAX_DICE:
        raise ParseError(expr, f"between 1 and {MAX_DICE} dice")
    if faces <= 0 or faces > MAX_FACES:
        raise ParseError(expr, f"between 1 and {MAX_FACES} faces")
    return DiceExpression(count=count, faces=faces, modifier=modifier)


class DiceRoller:
    """
    Rolls dice against a replaceable random source.

    Attributes:
        rng (RandomSource):
            The random source; a seeded random.Random makes every roll
            sequence reproducible.

    """

    def __init__(self, rng: RandomSource | None = None) -> None:
        self.rng: RandomSource = rng if rng is not None else random.Random()

    @classmethod
    def seeded(cls, seed: Any) -> "DiceRoller":
        """Creates a roller over a fresh random.Random with the given seed."""
        return cls(random.Random(seed))

    def roll_die(self, faces: int) -> int:
        """
        Rolls a single die.

        Args:
            faces (int): Number of faces, must be positive.

        Returns:
            int: A value in [1, faces].

        """
        if faces <= 0:
            raise ValueError(f"A die needs at least one face, got {faces}")
        return self.rng.randint(1, faces)

    def roll_n(self, faces: int, count: int) -> list[int]:
        """
        Rolls `count` independent dice, keeping every result.

        Args:
            faces (int): Number of faces of each die.
            count (int): Number of dice, zero yields an empty list.

        Returns:
            list[int]: The individual results in rolling order.

        """
        if count < 0:
            raise ValueError(f"Cannot roll a negative number of dice: {count}")
        return [self.roll_die(faces) for _ in range(count)]

    def parse_and_roll(self, expr: str) -> RollBreakdown:
        """
        Parses a dice expression and rolls it.

        Args:
            expr (str): Expression like "2d6+3".

        Returns:
            RollBreakdown: The total, the per-die rolls and a description.

        Raises:
            ParseError: If the expression is not a valid dice expression.

        """
        parsed = parse_expression(expr)
        rolls = self.roll_n(parsed.faces, parsed.count)
        total = sum(rolls) + parsed.modifier
        description = f"{parsed}({'+'.join(map(str, rolls))})"
        if parsed.modifier:
            description += f"+{parsed.modifier}"
        log_debug("Rolled dice expression", {"expr": str(parsed), "rolls": rolls, "total": total})
        return RollBreakdown(
            value=total,
            description=description,
            rolls=rolls,
            modifier=parsed.modifier,
        )


def get_max_roll(expr: str) -> int:
    """
    Gets the maximum possible result of a dice expression.

    Args:
        expr (str): The dice expression to analyze.

    Returns:
        int: The maximum possible result.

    """
    parsed = parse_expression(expr)
    return parsed.count * parsed.faces + parsed.modifier


def get_min_roll(expr: str) -> int:
    """
    Gets the minimum possible result of a dice expression.

    Args:
        expr (str): The dice expression to analyze.

    Returns:
        int: The minimum possible result.

    """
    parsed = parse_expression(expr)
    return parsed.count + parsed.modifier


# ---- Public API ----

_default_roller = DiceRoller()


def get_default_roller() -> DiceRoller:
    """Returns the process-wide roller used by the module-level helpers."""
    return _default_roller


def set_default_roller(roller: DiceRoller) -> None:
    """Replaces the process-wide roller, e.g. with a seeded one."""
    global _default_roller
    _default_roller = roller


def roll_die(faces: int) -> int:
    """Rolls a single die with the default roller."""
    return _default_roller.roll_die(faces)


def roll_n(faces: int, count: int) -> list[int]:
    """Rolls several dice with the default roller."""
    return _default_roller.roll_n(faces, count)


def parse_and_roll(expr: str) -> RollBreakdown:
    """Parses and rolls a dice expression with the default roller."""
    return _default_roller.parse_and_roll(expr)
