"""
Tests for the derived stat formulas.
"""

import pytest

from cursed_rules.character.character_stats import (
    calculate_derived_stats,
    effective_maxima,
    full_pools,
    liberation,
)
from cursed_rules.character.main import Attributes, Character, CurrentStats, Technique
from cursed_rules.core.constants import PROJECTION_TECHNIQUE, Attribute, Origin
from cursed_rules.effects.vow_bonus import BonusPercent


@pytest.mark.parametrize("level, ll", [(1, 2), (6, 12), (20, 40), (0, 0), (-2, 0)])
def test_liberation(level, ll):
    assert liberation(level) == ll


def test_derived_stats(fighter):
    derived = calculate_derived_stats(fighter)
    assert derived.LL == 12
    assert derived.MaxPV == 127
    assert derived.MaxCE == 174
    assert derived.MaxPE == 15
    assert derived.Movement == 27


def test_celestial_restriction_movement(celestial):
    assert calculate_derived_stats(celestial).Movement == 12


def test_projection_stacks_boost_movement(fighter):
    """Test that each stack adds half the base movement."""
    fighter.techniques.append(Technique(id="tec-2", name=PROJECTION_TECHNIQUE))
    fighter.projection_stacks = 1
    assert calculate_derived_stats(fighter).Movement == 40
    fighter.projection_stacks = 2
    assert calculate_derived_stats(fighter).Movement == 54


def test_projection_stacks_need_the_technique(fighter):
    fighter.projection_stacks = 3
    assert calculate_derived_stats(fighter).Movement == 27


def test_level_one_defaults():
    character = Character(id="c", name="Novato", attributes=Attributes())
    derived = calculate_derived_stats(character)
    assert derived.MaxPV == 20 + 15
    assert derived.MaxCE == 2 + 20 + 30
    assert derived.MaxPE == 1 + 1


def test_effective_maxima(fighter):
    derived = calculate_derived_stats(fighter)
    maxima = effective_maxima(derived, BonusPercent(pv_pct=10, ce_pct=-10))
    assert maxima == CurrentStats(pv=139, ce=156, pe=15)


def test_full_pools_without_bonus(fighter):
    assert full_pools(fighter) == CurrentStats(pv=127, ce=174, pe=15)


def test_character_rejects_blank_name():
    with pytest.raises(ValueError):
        Character(id="c", name="   ")


def test_character_origin_defaults_to_inherited():
    assert Character(id="c", name="Maki").origin == Origin.INHERITED


def test_attributes_by_name(fighter):
    assert fighter.attributes.get(Attribute.FOR) == 3
    assert fighter.attributes.get(Attribute.PRE) == 1
    assert fighter.attributes.points_spent == 5
    assert Attributes().points_spent == 0


def test_get_skill(fighter):
    assert fighter.get_skill("Luta").id == "s-luta"
    assert fighter.get_skill("Reflexos") is None
    assert fighter.get_skill_value("Reflexos") == 0
