"""
Character data model for the rules engine.

The host application owns the character sheet; the engine reads (and, for
inventory breakage and resource pools, mutates) the snapshot it is handed
but never stores it.
"""

from typing import Any

from pydantic import BaseModel, Field

from cursed_rules.core.constants import (
    ATTRIBUTE_BASE,
    MAX_LEVEL,
    MIN_LEVEL,
    Attribute,
    DieType,
    Origin,
)


class Attributes(BaseModel):
    """The five named attributes of a character."""

    FOR: int = Field(default=1, ge=0, description="Força")
    AGI: int = Field(default=1, ge=0, description="Agilidade")
    VIG: int = Field(default=1, ge=0, description="Vigor")
    INT: int = Field(default=1, ge=0, description="Inteligência")
    PRE: int = Field(default=1, ge=0, description="Presença")

    def get(self, attribute: Attribute) -> int:
        """Returns the value of the given attribute."""
        return getattr(self, attribute.value)

    @property
    def points_spent(self) -> int:
        """Attribute points distributed on top of the fixed base."""
        return self.FOR + self.AGI + self.VIG + self.INT + self.PRE - ATTRIBUTE_BASE


class Skill(BaseModel):
    """A trained skill and its bonus."""

    id: str = Field(description="Unique identifier of the skill")
    name: str = Field(description="Display name of the skill")
    value: int = Field(default=0, description="Bonus added to tests of the skill")
    attribute: Attribute | None = Field(
        default=None,
        description="Attribute the skill keys off",
    )


class Technique(BaseModel):
    """An innate technique and the die it rolls for damage."""

    id: str = Field(description="Unique identifier of the technique")
    name: str = Field(description="Name of the technique")
    description: str = Field(default="", description="What the technique does")
    damage_die: DieType = Field(
        default=DieType.D6,
        description="Die rolled per CE invested",
    )


class Ability(BaseModel):
    """An ability whose cost and effect are authored as free text."""

    id: str = Field(description="Unique identifier of the ability")
    name: str = Field(description="Name of the ability")
    category: str = Field(default="", description="Catalog category")
    cost: str = Field(default="", description="Free-text cost, e.g. '3 PE'")
    description: str = Field(
        default="",
        description="Free-text description carrying the effect tag",
    )


class BindingVow(BaseModel):
    """A self-imposed contract that grants percentage bonuses."""

    id: str = Field(description="Unique identifier of the vow")
    name: str = Field(description="Name of the vow")
    description: str = Field(default="", description="Narrative description")
    benefit: str = Field(default="", description="Guaranteed benefit")
    restriction: str = Field(default="", description="Imposed restriction")
    bonuses: list[str] = Field(
        default_factory=list,
        description="Free-text bonus strings",
    )
    is_active: bool = Field(default=True, description="Whether the vow is in force")


class Item(BaseModel):
    """An inventory item; weapons encode dice and durability in the description."""

    id: str = Field(description="Unique identifier of the item")
    name: str = Field(description="Name of the item")
    quantity: int = Field(default=1, ge=0, description="How many are carried")
    description: str = Field(
        default="",
        description="e.g. 'Dano: 1d8 | Crítico: 19-20 | Durabilidade: 5 CE'",
    )
    is_broken: bool = Field(default=False, description="Broken by overload")
    attack_skill: str | None = Field(
        default=None,
        description="Skill used to attack with this item",
    )


class CurrentStats(BaseModel):
    """The mutable PV/CE/PE pools consumed by actions."""

    pv: int = Field(default=0, ge=0, description="Current life points")
    ce: int = Field(default=0, ge=0, description="Current cursed energy")
    pe: int = Field(default=0, ge=0, description="Current effort points")


class Character(BaseModel):
    """
    A character sheet snapshot.

    Only the fields the rules read are modelled; presentation data stays in
    the host application.
    """

    id: str = Field(description="Unique identifier used for saving/loading")
    name: str = Field(description="Character name")
    level: int = Field(default=1, ge=MIN_LEVEL, le=MAX_LEVEL)
    origin: Origin = Field(default=Origin.INHERITED)
    attributes: Attributes = Field(default_factory=Attributes)
    skills: list[Skill] = Field(default_factory=list)
    techniques: list[Technique] = Field(default_factory=list)
    abilities: list[Ability] = Field(default_factory=list)
    binding_vows: list[BindingVow] = Field(default_factory=list)
    inventory: list[Item] = Field(default_factory=list)
    projection_stacks: int = Field(
        default=0,
        ge=0,
        le=3,
        description="Stacks of Projeção de Feitiçaria",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.name.strip():
            raise ValueError("name must be a non-empty string")

    def get_skill(self, name: str) -> Skill | None:
        """Returns the skill with the given name, if the sheet has it."""
        for skill in self.skills:
            if skill.name == name:
                return skill
        return None

    def get_skill_value(self, name: str) -> int:
        """Returns the bonus of the named skill, zero when untrained."""
        skill = self.get_skill(name)
        return skill.value if skill else 0

    def get_technique(self, technique_id: str | None) -> Technique | None:
        """Returns the technique with the given id, if still defined."""
        if not technique_id:
            return None
        for technique in self.techniques:
            if technique.id == technique_id:
                return technique
        return None

    def has_technique_named(self, name: str) -> bool:
        """Whether any technique carries the given name."""
        return any(technique.name == name for technique in self.techniques)
