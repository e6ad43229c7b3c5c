"""
Vow bonus module for the rules engine.

Classifies the free-text bonuses of binding vows as advantages or
disadvantages, turns the active vow set into clamped percentage modifiers on
PV/CE/PE and merges them with an optional manual override.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from cursed_rules.character.main import BindingVow, CurrentStats
from cursed_rules.core.constants import (
    VOW_ADVANTAGE_WEIGHTS,
    VOW_DISADVANTAGE_WEIGHTS,
    VowKind,
)
from cursed_rules.core.error_handling import ERROR_HANDLER
from cursed_rules.core.logging import log_debug
from cursed_rules.core.utils import clamp

if TYPE_CHECKING:
    from cursed_rules.effects.event_system import EventBus
    from cursed_rules.effects.override_store import VowOverrideStore

_MINUS_TOKEN = re.compile(r"(?:^|\s)-")
_PLUS_TOKEN = re.compile(r"(?:^|\s)\+")
_DISADVANTAGE_WORDS = re.compile(
    r"\b(desvantagem|penalidade|reduz|redução|diminui|malus)\b",
    re.IGNORECASE,
)
_ADVANTAGE_WORDS = re.compile(
    r"\b(vantagem|bônus|bonus|aumenta|melhora|incrementa)\b",
    re.IGNORECASE,
)


class BonusPercent(BaseModel):
    """Percentage modifiers on PV/CE/PE, always within [-50, 50]."""

    pv_pct: int = Field(default=0, description="Percentage applied to PV")
    ce_pct: int = Field(default=0, description="Percentage applied to CE")
    pe_pct: int = Field(default=0, description="Percentage applied to PE")

    def model_post_init(self, _: Any) -> None:
        """Clamps every field into the allowed range."""
        self.pv_pct = clamp(self.pv_pct)
        self.ce_pct = clamp(self.ce_pct)
        self.pe_pct = clamp(self.pe_pct)


def classify(bonus_text: str) -> VowKind:
    """
    Classifies a bonus string.

    Disadvantage signals are checked first: a "-" opening any token, or a
    disadvantage keyword. Then a "+" opening a token or an advantage keyword.
    Text with no signal counts as an advantage so that ambiguous wording
    never penalizes the player.

    Args:
        bonus_text (str): The free-text bonus.

    Returns:
        VowKind: ADVANTAGE or DISADVANTAGE.

    """
    text = bonus_text or ""
    if _MINUS_TOKEN.search(text) or _DISADVANTAGE_WORDS.search(text):
        return VowKind.DISADVANTAGE
    if _PLUS_TOKEN.search(text) or _ADVANTAGE_WORDS.search(text):
        return VowKind.ADVANTAGE
    return VowKind.ADVANTAGE


def compute_auto_bonus(vows: Iterable[BindingVow] | None) -> BonusPercent:
    """
    Aggregates the active vows into a bonus.

    Advantages and disadvantages are counted across the whole active set,
    then weighted per pool and clamped.

    Args:
        vows (Iterable[BindingVow] | None): The character's vows.

    Returns:
        BonusPercent: The automatic bonus.

    """
    advantages = 0
    disadvantages = 0
    for vow in vows or []:
        if not vow.is_active:
            continue
        for bonus in vow.bonuses:
            if classify(bonus) == VowKind.ADVANTAGE:
                advantages += 1
            else:
                disadvantages += 1

    bonus = BonusPercent(
        pv_pct=VOW_ADVANTAGE_WEIGHTS["pv"] * advantages
        - VOW_DISADVANTAGE_WEIGHTS["pv"] * disadvantages,
        ce_pct=VOW_ADVANTAGE_WEIGHTS["ce"] * advantages
        - VOW_DISADVANTAGE_WEIGHTS["ce"] * disadvantages,
        pe_pct=VOW_ADVANTAGE_WEIGHTS["pe"] * advantages
        - VOW_DISADVANTAGE_WEIGHTS["pe"] * disadvantages,
    )
    log_debug(
        "Computed automatic vow bonus",
        {"advantages": advantages, "disadvantages": disadvantages, "bonus": bonus},
    )
    return bonus


def combine(
    auto: BonusPercent,
    manual: BonusPercent | None,
    manual_active: bool,
) -> BonusPercent:
    """
    Chooses between the automatic bonus and a manual override.

    The override is substituted whole, never blended with the automatic one.

    Args:
        auto (BonusPercent): The automatic bonus.
        manual (BonusPercent | None): The manual override, if configured.
        manual_active (bool): Whether the override is switched on.

    Returns:
        BonusPercent: The effective bonus.

    """
    if not manual_active or manual is None:
        return auto
    return BonusPercent(
        pv_pct=manual.pv_pct,
        ce_pct=manual.ce_pct,
        pe_pct=manual.pe_pct,
    )


def apply_to_stats(base: CurrentStats, bonus: BonusPercent) -> CurrentStats:
    """
    Applies a bonus to PV/CE/PE values, rounding down.

    Args:
        base (CurrentStats): The non-negative base values.
        bonus (BonusPercent): The bonus to apply.

    Returns:
        CurrentStats: floor(base × (1 + pct / 100)) for each pool.

    """
    return CurrentStats(
        pv=base.pv * (100 + bonus.pv_pct) // 100,
        ce=base.ce * (100 + bonus.ce_pct) // 100,
        pe=base.pe * (100 + bonus.pe_pct) // 100,
    )


def is_active_bonus(bonus: BonusPercent) -> bool:
    """Whether any field of the bonus is non-zero."""
    return bool(bonus.pv_pct or bonus.ce_pct or bonus.pe_pct)


class VowBonusEngine:
    """
    Computes the effective vow bonus of a character.

    Attributes:
        store (VowOverrideStore | None):
            Where manual overrides are persisted, per character id.
        events (EventBus | None):
            Observers notified with BonusesUpdated on every recomputation.

    """

    def __init__(
        self,
        store: VowOverrideStore | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.store = store
        self.events = events

    def effective_bonus(
        self,
        character_id: str,
        vows: Iterable[BindingVow] | None,
    ) -> BonusPercent:
        """
        Recomputes the bonus of a character after a vow list change.

        Args:
            character_id (str): The id the override is stored under.
            vows (Iterable[BindingVow] | None): The character's vows.

        Returns:
            BonusPercent: The manual override when active, else the automatic
                bonus.

        """
        from cursed_rules.effects.event_system import BonusesUpdated

        auto = compute_auto_bonus(vows)
        override = None
        if self.store is not None:
            store = self.store
            override = ERROR_HANDLER.safe_execute(
                lambda: store.load(character_id),
                None,
                "Could not load the manual vow override",
                context={"character_id": character_id},
            )
        if override is None:
            effective = auto
        else:
            effective = combine(auto, override.values, override.active)
        if self.events:
            self.events.emit(
                BonusesUpdated(character_id=character_id, bonus=effective)
            )
        return effective

    def set_override(
        self,
        character_id: str,
        active: bool,
        values: BonusPercent,
    ) -> None:
        """Persists a manual override for a character."""
        if self.store is None:
            raise RuntimeError("No override store configured")
        self.store.save(character_id, active, values)

    def clear_override(self, character_id: str) -> None:
        """Removes the manual override of a character."""
        if self.store is None:
            raise RuntimeError("No override store configured")
        self.store.clear(character_id)
