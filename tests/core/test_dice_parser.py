"""
Tests for the dice engine.
"""

import pytest

from cursed_rules.core import dice_parser
from cursed_rules.core.dice_parser import (
    DiceRoller,
    get_max_roll,
    get_min_roll,
    parse_expression,
)
from cursed_rules.core.error_handling import ParseError


def test_parse_expression_full():
    """Test parsing count, faces and modifier."""
    parsed = parse_expression("2d6+3")
    assert (parsed.count, parsed.faces, parsed.modifier) == (2, 6, 3)
    assert str(parsed) == "2d6+3"


def test_parse_expression_defaults_count_to_one():
    """Test that a missing count means a single die."""
    parsed = parse_expression("d8")
    assert parsed.count == 1
    assert parsed.faces == 8
    assert parsed.modifier == 0


def test_parse_expression_tolerates_case_and_spaces():
    """Test that whitespace and an uppercase D are accepted."""
    parsed = parse_expression(" 3 D 4 + 1 ")
    assert (parsed.count, parsed.faces, parsed.modifier) == (3, 4, 1)


@pytest.mark.parametrize("expr", ["", "abc", "2d", "d", "2x6", "0d6", "1d0", "201d6"])
def test_parse_expression_rejects_invalid(expr):
    """Test that malformed or out-of-range expressions raise ParseError."""
    with pytest.raises(ParseError):
        parse_expression(expr)


def test_parse_error_is_a_value_error():
    """Test that callers catching ValueError also catch parse failures."""
    with pytest.raises(ValueError):
        parse_expression("garbage")


def test_roll_die_rejects_non_positive_faces():
    roller = DiceRoller()
    with pytest.raises(ValueError):
        roller.roll_die(0)


def test_roll_n_zero_dice(scripted_dice):
    """Test that rolling zero dice yields an empty list without drawing."""
    roller = scripted_dice()
    assert roller.roll_n(6, 0) == []
    assert roller.rng.calls == []


def test_roll_die_stays_in_range():
    roller = DiceRoller.seeded(7)
    for _ in range(200):
        assert 1 <= roller.roll_die(4) <= 4


def test_seeded_rollers_replay_the_same_sequence():
    """Test that two rollers with the same seed roll identically."""
    first = DiceRoller.seeded("campaign-1")
    second = DiceRoller.seeded("campaign-1")
    assert first.roll_n(20, 10) == second.roll_n(20, 10)


def test_parse_and_roll_breakdown(scripted_dice):
    """Test the total, rolls and description of a rolled expression."""
    roller = scripted_dice(3, 4)
    breakdown = roller.parse_and_roll("2d6+3")
    assert breakdown.value == 10
    assert breakdown.get_roll() == 10
    assert breakdown.rolls == [3, 4]
    assert breakdown.modifier == 3
    assert breakdown.description == "2d6(3+4)+3"


def test_parse_and_roll_without_modifier(scripted_dice):
    breakdown = scripted_dice(5).parse_and_roll("1d8")
    assert breakdown.value == 5
    assert breakdown.description == "1d8(5)"


def test_max_and_min_roll():
    assert get_max_roll("2d6+3") == 15
    assert get_min_roll("2d6+3") == 5
    assert get_max_roll("d20") == 20
    assert get_min_roll("d20") == 1


def test_module_helpers_use_default_roller(scripted_dice):
    """Test that the module-level helpers go through the default roller."""
    previous = dice_parser.get_default_roller()
    try:
        dice_parser.set_default_roller(scripted_dice(2, 6, 1))
        assert dice_parser.roll_die(4) == 2
        assert dice_parser.roll_n(6, 2) == [6, 1]
    finally:
        dice_parser.set_default_roller(previous)
