"""
Shared fixtures for the rules engine tests.
"""

import pytest

from cursed_rules.character.main import (
    Ability,
    Attributes,
    Character,
    CurrentStats,
    Item,
    Skill,
    Technique,
)
from cursed_rules.core.constants import DieType, Origin
from cursed_rules.core.dice_parser import DiceRoller


class ScriptedRng:
    """A random source returning queued values, in order."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        assert self.values, f"Unexpected roll of 1d{b}"
        value = self.values.pop(0)
        assert a <= value <= b, f"Scripted {value} outside {a}..{b}"
        return value


@pytest.fixture
def scripted_dice():
    """Builds a DiceRoller that yields the given values."""

    def _make(*values):
        return DiceRoller(ScriptedRng(values))

    return _make


@pytest.fixture
def katana():
    return Item(
        id="w-katana",
        name="Katana Amaldiçoada",
        description="Dano: 1d10 | Crítico: 19-20 / x2 | Durabilidade: 5 CE",
    )


@pytest.fixture
def fighter(katana):
    """A level 6 inherited sorcerer, LL 12."""
    return Character(
        id="char-1",
        name="Yuji",
        level=6,
        origin=Origin.INHERITED,
        attributes=Attributes(FOR=3, AGI=2, VIG=2, INT=2, PRE=1),
        skills=[Skill(id="s-luta", name="Luta", value=4)],
        techniques=[
            Technique(id="tec-1", name="Chamas", damage_die=DieType.D8),
        ],
        inventory=[
            katana,
            Item(id="w-knife", name="Faca de Combate", is_broken=True),
            Item(id="i-watch", name="Relógio de Bolso"),
        ],
    )


@pytest.fixture
def celestial():
    """A level 3 celestial restriction character."""
    return Character(
        id="char-2",
        name="Toji",
        level=3,
        origin=Origin.CELESTIAL_RESTRICTION,
        attributes=Attributes(FOR=4, AGI=3, VIG=3, INT=1, PRE=1),
        skills=[Skill(id="s-luta", name="Luta", value=5)],
        inventory=[Item(id="w-bat", name="Bastão Tático / Taco")],
    )


@pytest.fixture
def pools():
    return CurrentStats(pv=100, ce=50, pe=20)


@pytest.fixture
def attack_buff():
    return Ability(
        id="buff-atk",
        name="Foco Assassino",
        cost="1 PE",
        description="Concentra a energia: +2 em ataque até o fim da cena.",
    )


@pytest.fixture
def defense_buff():
    return Ability(
        id="buff-def",
        name="Pele de Aço",
        cost="2 PE",
        description="Endurece o corpo, +3 na defesa.",
    )
