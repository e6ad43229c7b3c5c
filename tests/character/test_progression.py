"""
Tests for the level progression tables and accumulated resources.
"""

import pytest

from cursed_rules.character.progression import (
    BASELINE_GAINS,
    MAX_LEVEL_REACHED,
    ORIGIN_RULES,
    STANDARD_TABLE,
    _check_rules_cover,
    level_rewards,
    next_level_rewards,
    proficiency_bonus,
    remaining_attribute_points,
    tally_gains,
    total_resources,
)
from cursed_rules.core.constants import Origin


def test_every_origin_has_rules():
    assert set(ORIGIN_RULES) == set(Origin)


def test_missing_origin_rules_raise_at_runtime():
    """Test that the coverage check survives python -O, unlike an assert."""
    partial = {origin: rules for origin, rules in ORIGIN_RULES.items() if origin != Origin.HYBRID}
    with pytest.raises(RuntimeError, match="Híbrido"):
        _check_rules_cover(partial)


def test_inherited_level_one():
    summary = total_resources(1, Origin.INHERITED)
    assert summary.total_attributes == 4
    assert summary.total_skills == 1
    assert summary.total_aptitude == 0
    assert summary.proficiency_bonus == 2
    assert summary.total_technique_variations == 1


def test_inherited_level_five():
    """Test that the origin bonus at level 5 is not granted to Inherited."""
    summary = total_resources(5, Origin.INHERITED)
    assert summary.total_attributes == 5
    assert summary.total_skills == 4
    assert summary.total_aptitude == 2
    assert summary.total_technique_variations == 2
    assert summary.training_grade == 3


def test_hybrid_matches_inherited():
    for level in (1, 5, 12, 20):
        assert total_resources(level, Origin.HYBRID) == total_resources(
            level, Origin.INHERITED
        )


@pytest.mark.parametrize("level, skills", [(1, 2), (4, 5), (5, 6), (20, 15)])
def test_inborn_skill_bonuses(level, skills):
    """Test the starting skill bonus and the level 5 origin bonus of Inborn."""
    assert total_resources(level, Origin.INBORN).total_skills == skills


def test_standard_level_twenty():
    summary = total_resources(20, Origin.INHERITED)
    assert summary.total_attributes == 9
    assert summary.total_skills == 13
    assert summary.total_aptitude == 7
    assert summary.proficiency_bonus == 40
    assert summary.total_technique_variations == 3
    assert summary.training_grade == 15


def test_celestial_restriction_level_one():
    summary = total_resources(1, Origin.CELESTIAL_RESTRICTION)
    assert summary.total_attributes == 7
    assert summary.total_skills == 2
    assert summary.total_aptitude == 0
    assert summary.total_technique_variations == 0


@pytest.mark.parametrize("level, attributes", [(3, 7), (4, 8), (8, 9), (19, 11), (20, 12)])
def test_celestial_restriction_attribute_levels(level, attributes):
    """Test the fixed attribute increase every 4 levels."""
    summary = total_resources(level, Origin.CELESTIAL_RESTRICTION)
    assert summary.total_attributes == attributes
    assert summary.total_skills == 2


def test_totals_never_decrease_with_level():
    for origin in Origin:
        previous = total_resources(1, origin)
        for level in range(2, 21):
            current = total_resources(level, origin)
            assert current.total_attributes >= previous.total_attributes
            assert current.total_skills >= previous.total_skills
            assert current.total_aptitude >= previous.total_aptitude
            assert current.proficiency_bonus == proficiency_bonus(level)
            previous = current


@pytest.mark.parametrize("level", [0, 21, -3])
def test_total_resources_rejects_invalid_levels(level):
    with pytest.raises(ValueError):
        total_resources(level, Origin.INHERITED)


def test_tally_gains_skips_origin_bonus():
    tally = tally_gains(
        ["+1 Ponto de Aptidão", "Bônus de Origem Inato (+1 Ponto de Habilidade)"]
    )
    assert tally.aptitude == 1
    assert tally.skills == 0


def test_level_rewards_level_one_includes_baseline():
    assert level_rewards(1, Origin.INHERITED) == BASELINE_GAINS + [
        "Habilidade Base de Classe"
    ]


def test_level_rewards_celestial_level_one_has_no_technique():
    rewards = level_rewards(1, Origin.CELESTIAL_RESTRICTION)
    assert "Variação de Técnica Inata" not in rewards
    assert "Mestre de Armas" in rewards


def test_level_rewards_empty_level():
    assert level_rewards(2, Origin.CELESTIAL_RESTRICTION) == [
        "Aumento de Status Base (PV + PE)"
    ]


def test_next_level_rewards():
    assert next_level_rewards(1, Origin.INHERITED) == STANDARD_TABLE[1].gains
    assert next_level_rewards(5, Origin.CELESTIAL_RESTRICTION) == [
        "Aumento de Status Base (PV + PE)"
    ]
    assert next_level_rewards(9, Origin.CELESTIAL_RESTRICTION) == [
        "Percepção da Alma",
        "Quebra de Postura",
    ]


def test_next_level_rewards_at_max_level():
    assert next_level_rewards(20, Origin.INBORN) == [MAX_LEVEL_REACHED]


def test_proficiency_bonus_for_every_origin():
    for origin in Origin:
        for level in range(1, 21):
            assert total_resources(level, origin).proficiency_bonus == 2 * level


def test_remaining_attribute_points(fighter):
    """Test the level 6 allowance of 5 points against the 5 spent above base."""
    assert fighter.attributes.points_spent == 5
    assert remaining_attribute_points(fighter) == 0

    fighter.attributes.FOR = 4
    assert remaining_attribute_points(fighter) == -1


def test_remaining_attribute_points_at_level_one(celestial):
    celestial.level = 1
    # 4 baseline + 3 celestial bonus, 7 spent above base.
    assert remaining_attribute_points(celestial) == 0
