"""
Progression module for the rules engine.

Holds the level tables of the ruleset and accumulates the attribute, skill
and aptitude points a character is entitled to at a given level. Each origin
has its own OriginRules entry, so all the rules of one origin sit together.
"""

import re

from pydantic import BaseModel, Field

from cursed_rules.character.main import Character
from cursed_rules.core.constants import LL_PER_LEVEL, MAX_LEVEL, MIN_LEVEL, Origin


class LevelEntry(BaseModel):
    """The named gains of one level of a progression table."""

    level: int = Field(description="Level at which the gains are received.")
    gains: list[str] = Field(description="Human-readable gains.")


class GainTally(BaseModel):
    """Countable resources found in a list of gains."""

    attributes: int = 0
    skills: int = 0
    aptitude: int = 0
    technique_variations: int = 0
    training_grade: int = 0

    def __add__(self, other: "GainTally") -> "GainTally":
        return GainTally(
            attributes=self.attributes + other.attributes,
            skills=self.skills + other.skills,
            aptitude=self.aptitude + other.aptitude,
            technique_variations=self.technique_variations + other.technique_variations,
            training_grade=self.training_grade + other.training_grade,
        )


class ResourceSummary(BaseModel):
    """Everything a character has accumulated up to a level."""

    total_attributes: int
    total_skills: int
    total_aptitude: int
    proficiency_bonus: int
    total_technique_variations: int = 0
    training_grade: int = 0


class OriginRules(BaseModel):
    """The progression rules of one origin."""

    table: list[LevelEntry]
    bonus_start_attributes: int = 0
    bonus_start_skills: int = 0
    start_technique_variations: int = 1
    # Levels granting +1 attribute regardless of the table.
    attribute_levels: tuple[int, ...] = ()
    # Level whose entry may carry an origin skill bonus.
    origin_bonus_level: int | None = None
    empty_level_reward: str = "Aumento de Status Base"

    def entry(self, level: int) -> LevelEntry | None:
        for entry in self.table:
            if entry.level == level:
                return entry
        return None


MAX_LEVEL_REACHED = "Nível Máximo Alcançado"

# Granted implicitly at level 1, on top of any table entry.
BASELINE_ATTRIBUTES = 4
BASELINE_SKILLS = 1
BASELINE_GAINS = [
    f"+{BASELINE_ATTRIBUTES} Pontos de Atributo",
    f"+{BASELINE_SKILLS} Ponto de Habilidade",
    "Variação de Técnica Inata",
]

ORIGIN_BONUS_MARKER = "Bônus de Origem"

STANDARD_TABLE: list[LevelEntry] = [
    LevelEntry(level=1, gains=["Habilidade Base de Classe"]),
    LevelEntry(level=2, gains=["+1 Ponto de Aptidão", "+1 Ponto de Habilidade"]),
    LevelEntry(level=3, gains=["Grau de Treinamento +3", "+1 Ponto de Habilidade"]),
    LevelEntry(level=4, gains=["Aumento de Atributo (+1)", "+1 Ponto de Habilidade"]),
    LevelEntry(
        level=5,
        gains=[
            "Nova Variação da Técnica Inata",
            "+1 Ponto de Aptidão",
            "Bônus de Origem Inato (+1 Ponto de Habilidade)",
        ],
    ),
    LevelEntry(level=6, gains=["+1 Ponto de Habilidade"]),
    LevelEntry(level=7, gains=["Grau de Treinamento +3"]),
    LevelEntry(
        level=8,
        gains=["Aumento de Atributo (+1)", "+1 Ponto de Aptidão", "+1 Ponto de Habilidade"],
    ),
    LevelEntry(level=9, gains=["+1 Ponto de Habilidade"]),
    LevelEntry(level=10, gains=["Acesso à Árvore de Energia Reversa"]),
    LevelEntry(level=11, gains=["+1 Ponto de Aptidão", "Grau de Treinamento +3"]),
    LevelEntry(level=12, gains=["Aumento de Atributo (+1)", "+1 Ponto de Habilidade"]),
    LevelEntry(level=13, gains=["+1 Ponto de Habilidade"]),
    LevelEntry(level=14, gains=["+1 Ponto de Aptidão", "+1 Ponto de Habilidade"]),
    LevelEntry(level=15, gains=["Nova Variação da Técnica Inata", "Grau de Treinamento +3"]),
    LevelEntry(level=16, gains=["Aumento de Atributo (+1)", "+1 Ponto de Habilidade"]),
    LevelEntry(level=17, gains=["+1 Ponto de Aptidão", "+1 Ponto de Habilidade"]),
    LevelEntry(level=18, gains=["+1 Ponto de Habilidade"]),
    LevelEntry(level=19, gains=["Grau de Treinamento +3"]),
    LevelEntry(
        level=20,
        gains=["Aumento de Atributo (+1)", "+1 Ponto de Aptidão", "Técnica Máxima"],
    ),
]

CELESTIAL_TABLE: list[LevelEntry] = [
    LevelEntry(
        level=1,
        gains=[
            "Instinto Predatório (Perícia Extra)",
            "Corpo Celestial (+3 Atributos Iniciais)",
            "Mestre de Armas",
        ],
    ),
    LevelEntry(level=5, gains=["Assassino de Xamãs (Reação contra Técnicas)"]),
    LevelEntry(level=10, gains=["Percepção da Alma", "Quebra de Postura"]),
    LevelEntry(level=15, gains=["Corpo Indestrutível (RD 5 Universal)"]),
    LevelEntry(level=20, gains=["O Tirano dos Céus (Rerrolar Falhas Físicas)", "Limite Rompido"]),
]

_standard = OriginRules(table=STANDARD_TABLE)

ORIGIN_RULES: dict[Origin, OriginRules] = {
    Origin.INBORN: OriginRules(
        table=STANDARD_TABLE,
        bonus_start_skills=1,
        origin_bonus_level=5,
    ),
    Origin.INHERITED: _standard,
    Origin.HYBRID: _standard,
    Origin.CELESTIAL_RESTRICTION: OriginRules(
        table=CELESTIAL_TABLE,
        bonus_start_attributes=3,
        start_technique_variations=0,
        attribute_levels=(4, 8, 12, 16, 20),
        empty_level_reward="Aumento de Status Base (PV + PE)",
    ),
}


def _check_rules_cover(rules: dict[Origin, OriginRules]) -> None:
    missing = sorted(origin.value for origin in set(Origin) - set(rules))
    if missing:
        raise RuntimeError(f"Origins without progression rules: {missing}")


_check_rules_cover(ORIGIN_RULES)

_SKILL_POINT = re.compile(r"Ponto de Habilidade|Perícia Extra", re.IGNORECASE)
_APTITUDE_POINT = re.compile(r"Ponto de Aptidão", re.IGNORECASE)
_ATTRIBUTE_INCREASE = re.compile(r"Aumento de Atributo", re.IGNORECASE)
_TECHNIQUE_VARIATION = re.compile(r"Varia[çc][ãa]o d[ae] T[ée]cnica Inata", re.IGNORECASE)
_TRAINING_GRADE = re.compile(r"Grau de Treinamento \+(\d+)", re.IGNORECASE)


def tally_gains(gains: list[str]) -> GainTally:
    """
    Counts the generic points named in a list of gains.

    Origin bonuses are left out: they only count for the origin they name,
    see `total_resources`.

    Args:
        gains (list[str]): The gains of a table entry.

    Returns:
        GainTally: The countable resources.

    """
    tally = GainTally()
    for gain in gains:
        if ORIGIN_BONUS_MARKER in gain:
            continue
        if _SKILL_POINT.search(gain):
            tally.skills += 1
        if _APTITUDE_POINT.search(gain):
            tally.aptitude += 1
        if _ATTRIBUTE_INCREASE.search(gain):
            tally.attributes += 1
        if _TECHNIQUE_VARIATION.search(gain):
            tally.technique_variations += 1
        grade = _TRAINING_GRADE.search(gain)
        if grade:
            tally.training_grade += int(grade.group(1))
    return tally


def proficiency_bonus(level: int) -> int:
    """Returns the proficiency bonus of a level, equal to its LL."""
    return LL_PER_LEVEL * level


def _check_level(level: int) -> None:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")


def total_resources(level: int, origin: Origin) -> ResourceSummary:
    """
    Accumulates every gain from level 1 up to `level` inclusive.

    Args:
        level (int): The character level, 1..20.
        origin (Origin): The character origin.

    Returns:
        ResourceSummary: Total attribute, skill and aptitude points, the
            proficiency bonus, technique variations and training grade.

    """
    _check_level(level)
    rules = ORIGIN_RULES[origin]

    total = GainTally(
        attributes=BASELINE_ATTRIBUTES + rules.bonus_start_attributes,
        skills=BASELINE_SKILLS + rules.bonus_start_skills,
        technique_variations=rules.start_technique_variations,
    )
    for current in range(MIN_LEVEL, level + 1):
        entry = rules.entry(current)
        if entry:
            total += tally_gains(entry.gains)
            # The origin bonus applies only when the entry literally names it.
            if current == rules.origin_bonus_level and any(
                ORIGIN_BONUS_MARKER in gain for gain in entry.gains
            ):
                total.skills += 1
        if current in rules.attribute_levels:
            total.attributes += 1

    return ResourceSummary(
        total_attributes=total.attributes,
        total_skills=total.skills,
        total_aptitude=total.aptitude,
        proficiency_bonus=proficiency_bonus(level),
        total_technique_variations=total.technique_variations,
        training_grade=total.training_grade,
    )


def level_rewards(level: int, origin: Origin) -> list[str]:
    """
    Returns the gains received at exactly one level.

    Args:
        level (int): The level, 1..20.
        origin (Origin): The character origin.

    Returns:
        list[str]: The table gains, preceded by the implicit baseline at
            level 1, or the generic base stat increase for empty levels.

    """
    _check_level(level)
    rules = ORIGIN_RULES[origin]
    entry = rules.entry(level)
    gains = list(entry.gains) if entry else [rules.empty_level_reward]
    if level == MIN_LEVEL:
        baseline = [
            gain
            for gain in BASELINE_GAINS
            if rules.start_technique_variations or "Técnica" not in gain
        ]
        gains = baseline + gains
    return gains


def next_level_rewards(current_level: int, origin: Origin) -> list[str]:
    """
    Returns what the next level-up grants.

    Args:
        current_level (int): The current level.
        origin (Origin): The character origin.

    Returns:
        list[str]: The gains of `current_level + 1`, the generic base stat
            increase when the table has no entry, or the max-level sentinel.

    """
    if current_level >= MAX_LEVEL:
        return [MAX_LEVEL_REACHED]
    rules = ORIGIN_RULES[origin]
    entry = rules.entry(current_level + 1)
    if entry is None:
        return [rules.empty_level_reward]
    return list(entry.gains)


def remaining_attribute_points(character: Character) -> int:
    """
    Returns the attribute points a character may still distribute.

    Negative when the sheet spends more than its level allows.
    """
    resources = total_resources(character.level, character.origin)
    return resources.total_attributes - character.attributes.points_spent
