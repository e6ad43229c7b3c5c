"""
Text effect parser module for the rules engine.

Extracts numeric costs, attack/defense bonuses and tested skills from the
free-text fields written by content authors. Every function here is total:
malformed text yields zero values instead of raising.
"""

import re
import unicodedata

from catchery import log_warning
from pydantic import BaseModel, Field

from cursed_rules.core.constants import DEFAULT_SKILLS

# Costs that carry no fixed numeral.
_NON_NUMERIC_COSTS = re.compile(r"\b(passiv[oa]|vari[aá]vel|especial)\b", re.IGNORECASE)
_PE_COST = re.compile(r"\b(\d+)\s*pe\b", re.IGNORECASE)
_CE_COST = re.compile(r"\b(\d+)\s*ce\b", re.IGNORECASE)
_VARIABLE_COST = re.compile(r"\bx\s*(pe|ce)\b", re.IGNORECASE)

_ATTACK_WORDS = r"(?:ataques?|attacks?|acertos?)"
_DEFENSE_WORDS = r"(?:defesas?|defenses?)"
_LINK_WORDS = r"(?:\s*(?:em|no|na|nos|nas|de|to|on)\b)?"


def _keyword_bonus(keywords: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    # "+2 em ataque" and "Ataque: +2", the numeral must touch the keyword.
    # Penalties ("-1 na defesa") are never bonuses.
    before = re.compile(
        r"\+\s*(\d+)" + _LINK_WORDS + r"\s*" + keywords + r"\b",
        re.IGNORECASE,
    )
    after = re.compile(
        r"\b" + keywords + r"\s*:?\s*\+\s*(\d+)",
        re.IGNORECASE,
    )
    return before, after


_ATTACK_BONUS = _keyword_bonus(_ATTACK_WORDS)
_DEFENSE_BONUS = _keyword_bonus(_DEFENSE_WORDS)


class AbilityCost(BaseModel):
    """Resource cost extracted from an ability's cost text."""

    pe: int = Field(default=0, description="PE cost")
    ce: int = Field(default=0, description="CE cost")
    is_variable: bool = Field(
        default=False,
        description="Whether the text names a variable (X) cost",
    )

    def __add__(self, other: "AbilityCost") -> "AbilityCost":
        return AbilityCost(
            pe=self.pe + other.pe,
            ce=self.ce + other.ce,
            is_variable=self.is_variable or other.is_variable,
        )


class AbilityEffect(BaseModel):
    """Attack and defense bonuses extracted from an ability's description."""

    attack: int = Field(default=0, description="Bonus to attack actions")
    defense: int = Field(default=0, description="Bonus to defense actions")


def parse_cost(cost_text: str) -> AbilityCost:
    """
    Parses an ability cost such as "3 PE" or "1 PE + 2 CE".

    Args:
        cost_text (str): The free-text cost field.

    Returns:
        AbilityCost: The summed PE and CE costs, zero when absent.

    """
    if not cost_text or not isinstance(cost_text, str):
        return AbilityCost()

    pe = sum(int(value) for value in _PE_COST.findall(cost_text))
    ce = sum(int(value) for value in _CE_COST.findall(cost_text))
    is_variable = bool(_VARIABLE_COST.search(cost_text))

    if not pe and not ce and not is_variable and not _NON_NUMERIC_COSTS.search(cost_text):
        log_warning(
            "Unrecognized ability cost, assuming zero",
            {"cost": cost_text},
        )

    return AbilityCost(pe=pe, ce=ce, is_variable=is_variable)


def _find_bonus(
    text: str,
    patterns: tuple[re.Pattern[str], re.Pattern[str]],
) -> int:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return 0


def parse_effect(description: str) -> AbilityEffect:
    """
    Parses the attack/defense bonus of an ability description.

    Only "+N" numerals adjacent to an attack or defense keyword count, so
    a tier like "Nível 3" elsewhere in the text is never taken as a bonus.

    Args:
        description (str): The free-text description field.

    Returns:
        AbilityEffect: The attack and defense bonuses, zero when absent.

    """
    if not description or not isinstance(description, str):
        return AbilityEffect()
    return AbilityEffect(
        attack=_find_bonus(description, _ATTACK_BONUS),
        defense=_find_bonus(description, _DEFENSE_BONUS),
    )


def normalize_name(text: str) -> str:
    """Lowercases a name and strips its accents, for loose comparisons."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


_NORMALIZED_SKILLS = [(normalize_name(name), name) for name in DEFAULT_SKILLS]
_TEST_OF = re.compile(r"\bteste\s+de\s+(.+?)(?:\s+(?:vs|contra)\b|[.,;]|$)")
_BEFORE_VS = re.compile(r"\b([a-z\s]+?)\s+vs\b")


def _find_skill(fragment: str) -> str | None:
    for normalized, name in _NORMALIZED_SKILLS:
        if normalized in fragment:
            return name
    return None


def parse_skill_trigger(description: str) -> str | None:
    """
    Finds the skill an ability asks to test, e.g. "teste de Luta".

    Args:
        description (str): The free-text description field.

    Returns:
        str | None: The canonical skill name, or None when no skill is named.

    """
    if not description or not isinstance(description, str):
        return None
    normalized = normalize_name(description)

    match = _TEST_OF.search(normalized)
    if match:
        found = _find_skill(match.group(1))
        if found:
            return found

    match = _BEFORE_VS.search(normalized)
    if match:
        return _find_skill(match.group(1))
    return None
