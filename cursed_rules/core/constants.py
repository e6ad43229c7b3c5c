"""
Constants and enumerations for the rules engine.

Defines the character origins, combat tabs, die types, vow classifications
and the fixed numeric constants of the ruleset used throughout the engine.
"""

from enum import Enum

# Level bounds of the progression tables.
MIN_LEVEL = 1
MAX_LEVEL = 20

# Sum of the five attributes of a fresh sheet (one point each).
ATTRIBUTE_BASE = 5

# Liberação (LL) is a multiple of the level.
LL_PER_LEVEL = 2

# Vow bonus weights per classified bonus string.
VOW_ADVANTAGE_WEIGHTS = {"pv": 2, "ce": 3, "pe": 1}
VOW_DISADVANTAGE_WEIGHTS = {"pv": 1, "ce": 1, "pe": 1}
BONUS_PCT_MIN = -50
BONUS_PCT_MAX = 50

# Fallback damage dice.
FALLBACK_WEAPON_DICE = "1d4"
UNARMED_DICE = "1d4"

# Dice rolled by the reinforcement and celestial restriction passives.
REINFORCEMENT_DIE = 4
CELESTIAL_DIE = 3
ATTACK_ROLL_DIE = 20
SKILL_TEST_DIE = 20

# Default critical rules for weapons without catalog data.
DEFAULT_CRITICAL_THRESHOLD = 20
DEFAULT_CRITICAL_MULTIPLIER = 2

# Durability (in CE) of a weapon without grade or explicit value.
MUNDANE_DURABILITY = 2

# Domain expansion upkeep, in PE, from the second round onwards.
DOMAIN_UPKEEP_PE = 15

# Skill used for attacks when the weapon does not name one.
DEFAULT_ATTACK_SKILL = "Luta"

# Skills whose tests suffer the reaction penalty of the turn.
REACTION_SKILLS = ("Luta", "Reflexos")

# Skill tests add LL for physical skills and for this one.
SORCERY_SKILL = "Feitiçaria"

# Technique whose stacks boost movement.
PROJECTION_TECHNIQUE = "Projeção de Feitiçaria"


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()


class Origin(NiceEnum):
    """The power-source archetype of a character."""

    INBORN = "Inato"
    INHERITED = "Herdado"
    HYBRID = "Híbrido"
    CELESTIAL_RESTRICTION = "Restrição Celestial"

    @property
    def display_name(self) -> str:
        return self.value


class ActionTab(NiceEnum):
    """The kind of combat action being configured."""

    ATTACK = "ATTACK"
    TECHNIQUE = "TECHNIQUE"
    DEFENSE = "DEFENSE"


class DieType(int, Enum):
    """Die faces allowed for technique damage."""

    D4 = 4
    D6 = 6
    D8 = 8
    D10 = 10
    D12 = 12

    def __str__(self) -> str:
        return f"d{self.value}"


class VowKind(NiceEnum):
    """Classification of a binding vow bonus string."""

    ADVANTAGE = "ADVANTAGE"
    DISADVANTAGE = "DISADVANTAGE"


class Attribute(NiceEnum):
    """The five named attributes."""

    FOR = "FOR"
    AGI = "AGI"
    VIG = "VIG"
    INT = "INT"
    PRE = "PRE"


# Default skills of a sheet, with the attribute each one keys off.
DEFAULT_SKILLS: dict[str, Attribute] = {
    "Acrobacia": Attribute.AGI,
    "Crime": Attribute.AGI,
    "Furtividade": Attribute.AGI,
    "Iniciativa": Attribute.AGI,
    "Pilotagem": Attribute.AGI,
    "Pontaria": Attribute.AGI,
    "Reflexos": Attribute.AGI,
    "Atletismo": Attribute.FOR,
    "Luta": Attribute.FOR,
    "Fortitude": Attribute.VIG,
    "Atualidades": Attribute.INT,
    "Ciências": Attribute.INT,
    "Feitiçaria": Attribute.INT,
    "Investigação": Attribute.INT,
    "Medicina": Attribute.INT,
    "Profissão": Attribute.INT,
    "Sobrevivência": Attribute.INT,
    "Tática": Attribute.INT,
    "Tecnologia": Attribute.INT,
    "Adestramento": Attribute.PRE,
    "Artes": Attribute.PRE,
    "Diplomacia": Attribute.PRE,
    "Enganação": Attribute.PRE,
    "Intimidação": Attribute.PRE,
    "Intuição": Attribute.PRE,
    "Percepção": Attribute.PRE,
    "Religião": Attribute.PRE,
    "Vontade": Attribute.PRE,
}

# Attributes whose skills add LL to their tests.
LL_SKILL_ATTRIBUTES = frozenset({Attribute.FOR, Attribute.AGI, Attribute.VIG, Attribute.PRE})
