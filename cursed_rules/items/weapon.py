"""
Weapon module for the rules engine.

Holds the mundane weapon catalog and the cursed tool grades, and reads the
damage dice, durability and critical rules of an inventory item from its
name and free-text description.
"""

import re
from typing import Literal

from catchery import log_warning
from pydantic import BaseModel, Field

from cursed_rules.character.main import Item
from cursed_rules.core.constants import (
    DEFAULT_CRITICAL_MULTIPLIER,
    DEFAULT_CRITICAL_THRESHOLD,
    FALLBACK_WEAPON_DICE,
    MUNDANE_DURABILITY,
)

_DAMAGE = re.compile(r"Dano:\s*(\d+d\d+(?:\+\d+)?)", re.IGNORECASE)
_DAMAGE_MARKER = re.compile(r"Dano:\s*\d+d\d+", re.IGNORECASE)
_DURABILITY = re.compile(r"Durabilidade:\s*\+?(\d+)\s*CE", re.IGNORECASE)
_CRITICAL_RANGE = re.compile(r"(\d+)-20")
_CRITICAL_MULTIPLIER = re.compile(r"x\s*(\d+)", re.IGNORECASE)
_DESCRIPTION_CRITICAL = re.compile(r"cr[ií]tico[:\s]+([^|]+)", re.IGNORECASE)


class MundaneWeapon(BaseModel):
    """A catalog entry for an ordinary weapon."""

    name: str = Field(description="Catalog name of the weapon.")
    base_damage: str = Field(description="Damage dice, e.g. '1d6'.")
    critical: str = Field(description="Critical rule, e.g. '19-20 / x2'.")
    weapon_type: Literal["Corpo a Corpo", "Distância"] = Field(
        description="Melee or ranged.",
    )


class CursedToolGrade(BaseModel):
    """A grade of cursed tool and the CE it tolerates per attack."""

    grade: str = Field(description="Grade label as written in item text.")
    durability: int = Field(description="Maximum CE per attack before breaking.")


MUNDANE_WEAPONS: list[MundaneWeapon] = [
    MundaneWeapon(name="Soco Inglês", base_damage="1d4", critical="x2", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Faca de Combate", base_damage="1d6", critical="19-20 / x2", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Karambit", base_damage="1d6", critical="x2", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Bastão Tático / Taco", base_damage="1d8", critical="x2", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Katana / Espada Longa", base_damage="1d10", critical="19-20 / x2", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Machado de Incêndio", base_damage="1d10", critical="x3", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Marreta Industrial", base_damage="1d12", critical="x2", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Naginata / Lança", base_damage="1d10", critical="x3", weapon_type="Corpo a Corpo"),
    MundaneWeapon(name="Pistola (9mm)", base_damage="2d4", critical="x2", weapon_type="Distância"),
    MundaneWeapon(name="Revólver (.38)", base_damage="1d10", critical="x2", weapon_type="Distância"),
    MundaneWeapon(name="Rifle de Assalto", base_damage="2d6", critical="x2", weapon_type="Distância"),
    MundaneWeapon(name="Rifle de Precisão", base_damage="2d8", critical="19-20 / x3", weapon_type="Distância"),
]

# Checked in order, so "Grau Especial" is tested before the numbered grades
# could match a substring.
CURSED_TOOL_GRADES: list[CursedToolGrade] = [
    CursedToolGrade(grade="Grau Especial", durability=30),
    CursedToolGrade(grade="Grau 4", durability=5),
    CursedToolGrade(grade="Grau 3", durability=10),
    CursedToolGrade(grade="Grau 2", durability=15),
    CursedToolGrade(grade="Grau 1", durability=20),
]


def find_catalog_weapon(item: Item) -> MundaneWeapon | None:
    """
    Finds the catalog entry an item was created from.

    Args:
        item (Item): The inventory item.

    Returns:
        MundaneWeapon | None: The exact-name match, else the first catalog
            weapon whose name appears in the item name.

    """
    for weapon in MUNDANE_WEAPONS:
        if weapon.name == item.name:
            return weapon
    lowered = item.name.lower()
    for weapon in MUNDANE_WEAPONS:
        if weapon.name.lower() in lowered:
            return weapon
    return None


def is_weapon(item: Item) -> bool:
    """Whether an item is a catalog weapon or carries a 'Dano: XdY' tag."""
    if any(weapon.name == item.name for weapon in MUNDANE_WEAPONS):
        return True
    return bool(_DAMAGE_MARKER.search(item.description or ""))


def weapon_damage_expression(item: Item) -> str:
    """
    Returns the damage dice of a weapon item.

    Args:
        item (Item): The weapon item.

    Returns:
        str: The "Dano:" tag of the description, else the catalog dice,
            else the fallback "1d4".

    """
    match = _DAMAGE.search(item.description or "")
    if match:
        return match.group(1)
    catalog = find_catalog_weapon(item)
    if catalog:
        return catalog.base_damage
    log_warning(
        "Weapon has no damage dice, using fallback",
        {"item": item.name, "fallback": FALLBACK_WEAPON_DICE},
    )
    return FALLBACK_WEAPON_DICE


def weapon_durability(item: Item) -> int:
    """
    Returns the CE a weapon tolerates in one attack before breaking.

    Args:
        item (Item): The weapon item.

    Returns:
        int: The "Durabilidade: N CE" tag, else the durability of the cursed
            tool grade named in the item, else the mundane durability.

    """
    match = _DURABILITY.search(item.description or "")
    if match:
        return int(match.group(1))
    text = f"{item.name} {item.description}".lower()
    for grade in CURSED_TOOL_GRADES:
        if grade.grade.lower() in text:
            return grade.durability
    return MUNDANE_DURABILITY


def _critical_text(item: Item) -> str:
    catalog = find_catalog_weapon(item)
    if catalog:
        return catalog.critical
    match = _DESCRIPTION_CRITICAL.search(item.description or "")
    return match.group(1) if match else ""


def critical_threshold(item: Item | None) -> int:
    """
    Returns the natural d20 result from which an attack is critical.

    Args:
        item (Item | None): The weapon, None for unarmed attacks.

    Returns:
        int: 19 for "19-20" weapons, 20 otherwise.

    """
    if item is None:
        return DEFAULT_CRITICAL_THRESHOLD
    match = _CRITICAL_RANGE.search(_critical_text(item))
    return int(match.group(1)) if match else DEFAULT_CRITICAL_THRESHOLD


def critical_multiplier(item: Item | None) -> int:
    """Returns the base damage multiplier of a critical hit."""
    if item is None:
        return DEFAULT_CRITICAL_MULTIPLIER
    match = _CRITICAL_MULTIPLIER.search(_critical_text(item))
    return int(match.group(1)) if match else DEFAULT_CRITICAL_MULTIPLIER
