"""
Core module of the rules engine.

Contains the constants of the ruleset, the dice engine, the free-text effect
parser, error types and logging helpers.
"""

from .constants import (
    ActionTab,
    Attribute,
    DieType,
    Origin,
    VowKind,
)
from .dice_parser import (
    DiceRoller,
    RollBreakdown,
    parse_and_roll,
    roll_die,
    roll_n,
)
from .error_handling import (
    InsufficientResource,
    InvalidSelection,
    NoTechniqueSelected,
    OriginForbidden,
    ParseError,
    RulesError,
)
from .logging import get_logger, setup_logging
from .text_parser import (
    AbilityCost,
    AbilityEffect,
    normalize_name,
    parse_cost,
    parse_effect,
    parse_skill_trigger,
)
