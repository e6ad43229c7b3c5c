"""
Combat resolver module for the rules engine.

Resolves one attack, technique or defense action of a character: checks the
origin rules, the investment and the resources first, then rolls, applies
weapon breakage, consumes CE/PE and reports the buffs used. Nothing is
mutated when a check fails. Skill tests are resolved here too, since they
share the dice, the buffs and the roll log of combat actions.
"""

from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, Field

from cursed_rules.character.character_inventory import (
    CharacterInventory,
    InventoryCollaborator,
)
from cursed_rules.character.character_stats import liberation
from cursed_rules.character.main import Ability, Character, CurrentStats, Item
from cursed_rules.combat.action_state import ActionState
from cursed_rules.combat.roll_log import RollLogEntry, RollLogSink, dispatch_roll_log
from cursed_rules.core.constants import (
    ATTACK_ROLL_DIE,
    CELESTIAL_DIE,
    DEFAULT_ATTACK_SKILL,
    DEFAULT_SKILLS,
    DOMAIN_UPKEEP_PE,
    LL_SKILL_ATTRIBUTES,
    REACTION_SKILLS,
    REINFORCEMENT_DIE,
    SKILL_TEST_DIE,
    SORCERY_SKILL,
    UNARMED_DICE,
    ActionTab,
    Attribute,
    Origin,
)
from cursed_rules.core.dice_parser import DiceRoller
from cursed_rules.core.error_handling import (
    InsufficientResource,
    InvalidSelection,
    NoTechniqueSelected,
    OriginForbidden,
)
from cursed_rules.core.logging import log_debug, log_info
from cursed_rules.core.text_parser import (
    AbilityCost,
    normalize_name,
    parse_cost,
    parse_effect,
    parse_skill_trigger,
)
from cursed_rules.core.utils import half_round_up
from cursed_rules.effects.event_system import (
    BuffsConsumed,
    EventBus,
    RollResolved,
    WeaponBroken,
)
from cursed_rules.items.weapon import (
    critical_multiplier,
    critical_threshold,
    is_weapon,
    weapon_damage_expression,
    weapon_durability,
)

# ============================================================================
# REQUESTS AND RESULTS
# ============================================================================


class AttackRequest(BaseModel):
    """A physical attack, unarmed or with an inventory weapon."""

    weapon_id: str | None = Field(
        default=None,
        description="Inventory weapon to attack with, None for unarmed.",
    )
    manual_damage: int | None = Field(
        default=None,
        ge=0,
        description="Flat unarmed damage; None rolls the unarmed die.",
    )
    invested: int = Field(default=0, ge=0, description="Reinforcement dice.")

    @property
    def tab(self) -> ActionTab:
        return ActionTab.ATTACK


class TechniqueRequest(BaseModel):
    """An innate technique powered by CE."""

    technique_id: str | None = Field(default=None, description="Selected technique.")
    invested: int = Field(default=0, ge=0, description="CE invested, one die each.")

    @property
    def tab(self) -> ActionTab:
        return ActionTab.TECHNIQUE


class DefenseRequest(BaseModel):
    """A CE-reinforced defense against incoming damage."""

    incoming_damage: int = Field(default=0, ge=0, description="Damage before mitigation.")
    invested: int = Field(default=0, ge=0, description="Points of mitigation.")

    @property
    def tab(self) -> ActionTab:
        return ActionTab.DEFENSE


ActionRequest = AttackRequest | TechniqueRequest | DefenseRequest


class CombatResult(BaseModel):
    """The outcome of a resolved combat action."""

    tab: ActionTab = Field(description="Kind of action resolved.")
    title: str = Field(description="Name of the action, for display and logs.")
    total: int = Field(description="Damage dealt, or damage taken for defenses.")
    detail: str = Field(default="", description="How the total was built.")
    rolls: list[int] = Field(default_factory=list, description="Per-die results.")
    attack_roll: int | None = Field(default=None, description="d20 attack test.")
    attack_roll_detail: str = Field(default="", description="Attack test breakdown.")
    is_critical: bool = Field(default=False)
    is_damage_taken: bool = Field(default=False)
    cost: AbilityCost = Field(
        default_factory=AbilityCost,
        description="Total PE/CE consumed, action plus buffs.",
    )
    weapon_broken: bool = Field(default=False)
    broken_item_id: str | None = Field(default=None)
    consumed_buffs: list[str] = Field(
        default_factory=list,
        description="Ids of the buffs that contributed.",
    )
    reaction_penalty: int = Field(
        default=0,
        description="Standing reaction penalty, informational only.",
    )


class BuffSummary(BaseModel):
    """Buffs relevant to one action and what they add and cost."""

    abilities: list[Ability] = Field(default_factory=list)
    bonus: int = 0
    cost: AbilityCost = Field(default_factory=AbilityCost)

    @property
    def ids(self) -> list[str]:
        return [ability.id for ability in self.abilities]


class SkillTestResult(BaseModel):
    """The outcome of a skill test."""

    skill: str = Field(description="Name of the tested skill.")
    total: int = Field(description="Kept die plus every bonus, minus penalties.")
    rolls: list[int] = Field(description="The whole d20 pool.")
    natural: int = Field(description="The highest die of the pool, the one kept.")
    breakdown: str = Field(default="", description="How the total was built.")
    is_critical: bool = Field(default=False, description="Natural 20.")
    is_failure: bool = Field(default=False, description="Natural 1.")
    reaction_penalty: int = Field(
        default=0,
        description="Penalty subtracted, for reaction skills only.",
    )
    cost: AbilityCost = Field(
        default_factory=AbilityCost,
        description="PE/CE consumed by the triggered buffs.",
    )
    consumed_buffs: list[str] = Field(
        default_factory=list,
        description="Ids of the buffs the test triggered.",
    )


# ============================================================================
# RULE HELPERS
# ============================================================================


def max_investment(origin: Origin, tab: ActionTab, ll: int) -> int:
    """
    Returns how much a character may invest in one action.

    Args:
        origin (Origin): The character origin.
        tab (ActionTab): The kind of action.
        ll (int): The character's LL.

    Returns:
        int: LL, or zero for celestial restriction attacks whose bonus is a
            fixed passive.

    """
    if origin == Origin.CELESTIAL_RESTRICTION and tab == ActionTab.ATTACK:
        return 0
    return ll


def check_origin_allows(origin: Origin, tab: ActionTab) -> None:
    """Raises OriginForbidden when the origin cannot take this kind of action."""
    if origin == Origin.CELESTIAL_RESTRICTION and tab in (
        ActionTab.TECHNIQUE,
        ActionTab.DEFENSE,
    ):
        raise OriginForbidden(
            f"{origin.display_name} não pode usar {tab.display_name}"
        )


def summarize_buffs(active_buffs: Sequence[Ability], tab: ActionTab) -> BuffSummary:
    """
    Selects the buffs relevant to an action.

    Attack and technique actions read the attack bonus of a buff, defenses
    read its defense bonus; a buff is relevant when that value is positive.

    Args:
        active_buffs (Sequence[Ability]): Buffs currently switched on.
        tab (ActionTab): The kind of action.

    Returns:
        BuffSummary: The relevant buffs, their summed bonus and summed cost.

    """
    summary = BuffSummary()
    for buff in active_buffs:
        effect = parse_effect(buff.description)
        value = effect.defense if tab == ActionTab.DEFENSE else effect.attack
        if value <= 0:
            continue
        summary.abilities.append(buff)
        summary.bonus += value
        summary.cost = summary.cost + parse_cost(buff.cost)
    return summary


def check_resources(current: CurrentStats, cost: AbilityCost) -> None:
    """
    Raises InsufficientResource when a pool cannot pay the cost.

    Args:
        current (CurrentStats): The current pools.
        cost (AbilityCost): The total cost, action plus buffs.

    """
    if current.pe < cost.pe:
        raise InsufficientResource("PE", cost.pe, current.pe)
    if current.ce < cost.ce:
        raise InsufficientResource("CE", cost.ce, current.ce)


def domain_upkeep_cost(round_number: int) -> int:
    """PE needed to keep a domain expansion up; activation round is prepaid."""
    if round_number <= 1:
        return 0
    return DOMAIN_UPKEEP_PE


def skill_attribute(character: Character, skill_name: str) -> Attribute | None:
    """The attribute a skill keys off: the sheet's choice, else the default."""
    skill = character.get_skill(skill_name)
    if skill is not None and skill.attribute is not None:
        return skill.attribute
    return DEFAULT_SKILLS.get(skill_name)


def skill_liberation_bonus(skill_name: str, attribute: Attribute | None, ll: int) -> int:
    """
    Returns the LL added to a skill test.

    Physical skills (FOR, AGI, VIG and PRE) and Feitiçaria add the full LL;
    other skills add nothing.

    Args:
        skill_name (str): The tested skill.
        attribute (Attribute | None): The attribute it keys off.
        ll (int): The character's LL.

    Returns:
        int: LL or zero.

    """
    if attribute in LL_SKILL_ATTRIBUTES:
        return ll
    if normalize_name(skill_name) == normalize_name(SORCERY_SKILL):
        return ll
    return 0


def triggered_buffs(
    active_buffs: Sequence[Ability],
    skill_name: str,
    current: CurrentStats,
) -> BuffSummary:
    """
    Selects the buffs a skill test triggers.

    A buff is triggered when its description asks for a test of this skill.
    Buffs are taken in order while the pools can still pay for them, so an
    unaffordable buff is skipped rather than failing the test.

    Args:
        active_buffs (Sequence[Ability]): Buffs currently switched on.
        skill_name (str): The tested skill.
        current (CurrentStats): The pools the costs are checked against.

    Returns:
        BuffSummary: The triggered buffs and their summed cost.

    """
    summary = BuffSummary()
    tested = normalize_name(skill_name)
    for buff in active_buffs:
        trigger = parse_skill_trigger(buff.description)
        if trigger is None or normalize_name(trigger) != tested:
            continue
        cost = summary.cost + parse_cost(buff.cost)
        if cost.pe > current.pe or cost.ce > current.ce:
            continue
        summary.abilities.append(buff)
        summary.cost = cost
    return summary


# ============================================================================
# RESOLVER
# ============================================================================


class CombatResolver:
    """
    Resolves combat actions for one character at a time.

    Attributes:
        dice (DiceRoller):
            Source of every roll; seed it for reproducible combats.
        inventory (InventoryCollaborator | None):
            Where weapons are read and marked broken. When None, the
            inventory of the acting character is used.
        roll_log (RollLogSink | None):
            Optional best-effort sink for resolved rolls.
        events (EventBus | None):
            Optional observers of consumed buffs, broken weapons and rolls.
        session_id (str | None):
            Campaign the rolls are logged under; rolls are not logged
            without one.

    """

    def __init__(
        self,
        dice: DiceRoller | None = None,
        inventory: InventoryCollaborator | None = None,
        roll_log: RollLogSink | None = None,
        events: EventBus | None = None,
        session_id: str | None = None,
    ) -> None:
        self.dice = dice or DiceRoller()
        self.inventory = inventory
        self.roll_log = roll_log
        self.events = events
        self.session_id = session_id

    def _inventory_for(self, character: Character) -> InventoryCollaborator:
        return self.inventory or CharacterInventory(character)

    def _check_investment(self, character: Character, tab: ActionTab, invested: int) -> None:
        limit = max_investment(character.origin, tab, liberation(character.level))
        if not 0 <= invested <= limit:
            raise InvalidSelection(
                f"Investimento {invested} fora do limite 0..{limit}"
            )

    def resolve(
        self,
        character: Character,
        current: CurrentStats,
        request: ActionRequest,
        active_buffs: Sequence[Ability] = (),
        action_state: ActionState | None = None,
    ) -> CombatResult:
        """
        Resolves an action of any kind.

        Args:
            character (Character): The acting character.
            current (CurrentStats): Its pools, updated on success.
            request (ActionRequest): What the player configured.
            active_buffs (Sequence[Ability]): Buffs currently switched on.
            action_state (ActionState | None): Turn state, read for the
                reaction penalty of defenses.

        Returns:
            CombatResult: The outcome of the action.

        """
        if isinstance(request, AttackRequest):
            return self.resolve_attack(character, current, request, active_buffs)
        if isinstance(request, TechniqueRequest):
            return self.resolve_technique(character, current, request, active_buffs)
        return self.resolve_defense(character, current, request, active_buffs, action_state)

    # ---- Attack ----

    def _select_weapon(self, character: Character, weapon_id: str | None) -> Item | None:
        if weapon_id is None:
            return None
        item = self._inventory_for(character).get_item(weapon_id)
        if item is None:
            raise InvalidSelection(f"Arma '{weapon_id}' não está no inventário")
        if item.is_broken:
            raise InvalidSelection(f"{item.name} está quebrada")
        if not is_weapon(item):
            raise InvalidSelection(f"{item.name} não é uma arma")
        return item

    def resolve_attack(
        self,
        character: Character,
        current: CurrentStats,
        request: AttackRequest,
        active_buffs: Sequence[Ability] = (),
    ) -> CombatResult:
        """
        Resolves a physical attack.

        Rolls happen in this order: the d20 attack test, the base damage,
        then the reinforcement (or celestial restriction) dice.

        Args:
            character (Character): The attacker.
            current (CurrentStats): Its pools, updated on success.
            request (AttackRequest): Weapon, manual damage and investment.
            active_buffs (Sequence[Ability]): Buffs currently switched on.

        Returns:
            CombatResult: Damage dealt, attack test and breakage flag.

        Raises:
            InvalidSelection: If the weapon or the investment is invalid.
            InsufficientResource: If CE/PE cannot pay action plus buffs.

        """
        tab = ActionTab.ATTACK
        is_celestial = character.origin == Origin.CELESTIAL_RESTRICTION
        self._check_investment(character, tab, request.invested)
        weapon = self._select_weapon(character, request.weapon_id)
        buffs = summarize_buffs(active_buffs, tab)

        action_ce = 0 if is_celestial else half_round_up(request.invested)
        cost = AbilityCost(ce=action_ce) + buffs.cost
        check_resources(current, cost)

        # Attack test.
        skill_name = (weapon.attack_skill if weapon else None) or DEFAULT_ATTACK_SKILL
        skill_bonus = character.get_skill_value(skill_name)
        natural = self.dice.roll_die(ATTACK_ROLL_DIE)
        attack_roll = natural + skill_bonus + buffs.bonus
        attack_roll_detail = f"1d20({natural}) + {skill_bonus} ({skill_name})"
        if buffs.bonus:
            attack_roll_detail += f" + {buffs.bonus} (Buffs)"

        # Base damage.
        is_critical = False
        if weapon is not None:
            title = weapon.name
            base_roll = self.dice.parse_and_roll(weapon_damage_expression(weapon))
            base_damage = base_roll.value
            base_text = f"{base_damage}"
            # Critical range is checked against the full attack test.
            if attack_roll >= critical_threshold(weapon):
                is_critical = True
                multiplier = critical_multiplier(weapon)
                base_damage *= multiplier
                base_text = f"{base_text} × {multiplier} (Crítico!)"
        elif request.manual_damage is not None:
            title = "Ataque Desarmado"
            base_damage = request.manual_damage
            base_text = f"{base_damage}"
        else:
            title = "Ataque Desarmado"
            base_roll = self.dice.parse_and_roll(UNARMED_DICE)
            base_damage = base_roll.value
            base_text = f"{base_damage} ({UNARMED_DICE})"

        strength = character.attributes.FOR
        if is_celestial:
            rolls = self.dice.roll_n(CELESTIAL_DIE, character.level * 2)
            bonus_label = "HR"
        else:
            rolls = self.dice.roll_n(REINFORCEMENT_DIE, request.invested)
            bonus_label = "Reforço"
        dice_total = sum(rolls)
        total = base_damage + dice_total + strength + buffs.bonus
        detail = f"[DanoBase]{base_text} + [{bonus_label}]{dice_total} + [Força]{strength}"
        if buffs.bonus:
            detail += f" + {buffs.bonus} (Buffs)"

        # Overloading a weapon breaks it after the blow lands.
        weapon_broken = False
        if weapon is not None and weapon_durability(weapon) < action_ce:
            self._inventory_for(character).set_broken(weapon.id, True)
            weapon_broken = True
            log_info(
                "Weapon broke from CE overload",
                {"character": character.name, "weapon": weapon.name, "ce": action_ce},
            )

        result = CombatResult(
            tab=tab,
            title=title,
            total=total,
            detail=detail,
            rolls=rolls,
            attack_roll=attack_roll,
            attack_roll_detail=attack_roll_detail,
            is_critical=is_critical,
            cost=cost,
            weapon_broken=weapon_broken,
            broken_item_id=weapon.id if weapon_broken and weapon else None,
            consumed_buffs=buffs.ids,
        )
        return self._finish(character, current, result)

    # ---- Technique ----

    def resolve_technique(
        self,
        character: Character,
        current: CurrentStats,
        request: TechniqueRequest,
        active_buffs: Sequence[Ability] = (),
    ) -> CombatResult:
        """
        Resolves an innate technique: one technique die per CE invested.

        Args:
            character (Character): The user of the technique.
            current (CurrentStats): Its pools, updated on success.
            request (TechniqueRequest): Technique and investment.
            active_buffs (Sequence[Ability]): Buffs currently switched on.

        Returns:
            CombatResult: The technique damage.

        Raises:
            OriginForbidden: For celestial restriction characters.
            NoTechniqueSelected: If the technique is missing or stale.
            InvalidSelection: If the investment is out of range.
            InsufficientResource: If CE/PE cannot pay action plus buffs.

        """
        tab = ActionTab.TECHNIQUE
        check_origin_allows(character.origin, tab)
        technique = character.get_technique(request.technique_id)
        if technique is None:
            raise NoTechniqueSelected("Selecione uma técnica válida")
        self._check_investment(character, tab, request.invested)
        buffs = summarize_buffs(active_buffs, tab)

        cost = AbilityCost(ce=request.invested) + buffs.cost
        check_resources(current, cost)

        faces = int(technique.damage_die)
        rolls = self.dice.roll_n(faces, request.invested)
        intelligence = character.attributes.INT
        total = sum(rolls) + intelligence + buffs.bonus
        detail = f"[{request.invested}d{faces}]{sum(rolls)} + [INT]{intelligence}"
        if buffs.bonus:
            detail += f" + {buffs.bonus} (Buffs)"

        result = CombatResult(
            tab=tab,
            title=technique.name,
            total=total,
            detail=detail,
            rolls=rolls,
            cost=cost,
            consumed_buffs=buffs.ids,
        )
        return self._finish(character, current, result)

    # ---- Defense ----

    def resolve_defense(
        self,
        character: Character,
        current: CurrentStats,
        request: DefenseRequest,
        active_buffs: Sequence[Ability] = (),
        action_state: ActionState | None = None,
    ) -> CombatResult:
        """
        Resolves a CE-reinforced defense.

        The reaction penalty of the turn is reported but never reduces the
        mitigation; it only applies to other reaction tests.

        Args:
            character (Character): The defender.
            current (CurrentStats): Its pools, updated on success.
            request (DefenseRequest): Incoming damage and investment.
            active_buffs (Sequence[Ability]): Buffs currently switched on.
            action_state (ActionState | None): Turn state.

        Returns:
            CombatResult: The damage actually taken.

        Raises:
            OriginForbidden: For celestial restriction characters.
            InvalidSelection: If the investment is out of range.
            InsufficientResource: If CE/PE cannot pay action plus buffs.

        """
        tab = ActionTab.DEFENSE
        check_origin_allows(character.origin, tab)
        self._check_investment(character, tab, request.invested)
        buffs = summarize_buffs(active_buffs, tab)

        cost = AbilityCost(ce=half_round_up(request.invested)) + buffs.cost
        check_resources(current, cost)

        mitigation = request.invested + buffs.bonus
        total = max(0, request.incoming_damage - mitigation)
        detail = f"{request.incoming_damage} - {request.invested} (Mitigado)"
        if buffs.bonus:
            detail += f" - {buffs.bonus} (Buffs)"

        result = CombatResult(
            tab=tab,
            title="Dano Final Recebido",
            total=total,
            detail=detail,
            is_damage_taken=True,
            cost=cost,
            consumed_buffs=buffs.ids,
            reaction_penalty=action_state.reaction_penalty if action_state else 0,
        )
        return self._finish(character, current, result)

    # ---- Domain ----

    def maintain_domain(self, current: CurrentStats, round_number: int) -> int:
        """
        Pays the upkeep of a domain expansion for a round.

        Args:
            current (CurrentStats): The pools, updated on success.
            round_number (int): Round of the domain, 1 being activation.

        Returns:
            int: The PE paid.

        Raises:
            InsufficientResource: If the PE pool cannot pay the upkeep.

        """
        cost = domain_upkeep_cost(round_number)
        check_resources(current, AbilityCost(pe=cost))
        current.pe -= cost
        return cost

    # ---- Skill test ----

    def resolve_skill_test(
        self,
        character: Character,
        current: CurrentStats,
        skill_name: str,
        active_buffs: Sequence[Ability] = (),
        action_state: ActionState | None = None,
    ) -> SkillTestResult:
        """
        Resolves a skill test.

        Rolls one d20 per point of the skill's attribute (at least one) and
        keeps the highest, then adds the skill bonus and its LL bonus. Luta
        and Reflexos tests lose the reaction penalty of the turn. Buffs that
        ask for a test of this skill are charged and reported.

        Args:
            character (Character): The tested character.
            current (CurrentStats): Its pools, charged for triggered buffs.
            skill_name (str): The skill to test.
            active_buffs (Sequence[Ability]): Buffs currently switched on.
            action_state (ActionState | None): Turn state, read for the
                reaction penalty.

        Returns:
            SkillTestResult: The total, the pool and the natural result.

        Raises:
            InvalidSelection: If the skill is neither on the sheet nor a
                default skill.

        """
        if character.get_skill(skill_name) is None and skill_name not in DEFAULT_SKILLS:
            raise InvalidSelection(f"Perícia '{skill_name}' não existe")

        attribute = skill_attribute(character, skill_name)
        dice_count = max(1, character.attributes.get(attribute)) if attribute else 1
        ll_bonus = skill_liberation_bonus(skill_name, attribute, liberation(character.level))
        bonus = character.get_skill_value(skill_name) + ll_bonus
        penalty = 0
        if action_state is not None and skill_name in REACTION_SKILLS:
            penalty = action_state.reaction_penalty
        buffs = triggered_buffs(active_buffs, skill_name, current)

        rolls = self.dice.roll_n(SKILL_TEST_DIE, dice_count)
        natural = max(rolls)
        total = natural + bonus - penalty

        breakdown = f"[{', '.join(str(roll) for roll in rolls)}]"
        if dice_count > 1:
            breakdown += f" ➜ {natural}"
        breakdown += f"{'+' if bonus >= 0 else ''}{bonus}"
        if penalty:
            breakdown += f" - {penalty} (Reação)"

        current.ce -= buffs.cost.ce
        current.pe -= buffs.cost.pe
        result = SkillTestResult(
            skill=skill_name,
            total=total,
            rolls=rolls,
            natural=natural,
            breakdown=breakdown,
            is_critical=natural == SKILL_TEST_DIE,
            is_failure=natural == 1,
            reaction_penalty=penalty,
            cost=buffs.cost,
            consumed_buffs=buffs.ids,
        )
        log_debug(
            "Resolved skill test",
            {
                "character": character.name,
                "skill": skill_name,
                "rolls": rolls,
                "total": total,
                "buffs": result.consumed_buffs,
            },
        )
        self._publish(character, skill_name, total, rolls, breakdown, result.consumed_buffs)
        return result

    # ---- Shared ----

    def _finish(
        self,
        character: Character,
        current: CurrentStats,
        result: CombatResult,
    ) -> CombatResult:
        current.ce -= result.cost.ce
        current.pe -= result.cost.pe
        log_debug(
            f"Resolved {result.tab.display_name.lower()}",
            {
                "character": character.name,
                "title": result.title,
                "rolls": result.rolls,
                "total": result.total,
                "ce": result.cost.ce,
                "pe": result.cost.pe,
            },
        )

        self._publish(
            character,
            result.title,
            result.total,
            result.rolls,
            result.detail,
            result.consumed_buffs,
            result.broken_item_id if result.weapon_broken else None,
        )
        return result

    def _publish(
        self,
        character: Character,
        title: str,
        total: int,
        rolls: list[int],
        breakdown: str,
        consumed_buffs: list[str],
        broken_item_id: str | None = None,
    ) -> None:
        if self.events:
            if consumed_buffs:
                self.events.emit(
                    BuffsConsumed(character_id=character.id, ability_ids=consumed_buffs)
                )
            if broken_item_id:
                self.events.emit(
                    WeaponBroken(character_id=character.id, item_id=broken_item_id)
                )
            self.events.emit(
                RollResolved(
                    character_id=character.id,
                    title=title,
                    total=total,
                    rolls=rolls,
                )
            )

        if self.session_id:
            dispatch_roll_log(
                self.roll_log,
                RollLogEntry(
                    session_id=self.session_id,
                    actor_name=character.name,
                    action_name=title,
                    # Defenses roll no dice, their total stands in.
                    rolls=rolls or [total],
                    total=total,
                    breakdown=breakdown,
                ),
            )


# ============================================================================
# FLOW
# ============================================================================


class FlowState(Enum):
    """Where the combat panel stands."""

    IDLE = "idle"
    CONFIGURING = "configuring"
    RESOLVED = "resolved"


_DEFAULT_REQUESTS = {
    ActionTab.ATTACK: AttackRequest,
    ActionTab.TECHNIQUE: TechniqueRequest,
    ActionTab.DEFENSE: DefenseRequest,
}


class CombatFlow:
    """
    The Idle → Configuring → Resolved → Idle cycle of one combat action.

    Attributes:
        resolver (CombatResolver): Resolves the configured action.
        state (FlowState): The current state.
        tab (ActionTab | None): The tab being configured.
        request (ActionRequest | None): The action being configured.
        last_result (CombatResult | None): The outcome once resolved.

    """

    def __init__(self, resolver: CombatResolver) -> None:
        self.resolver = resolver
        self.state = FlowState.IDLE
        self.tab: ActionTab | None = None
        self.request: ActionRequest | None = None
        self.last_result: CombatResult | None = None

    def configure(self, tab: ActionTab, request: ActionRequest | None = None) -> None:
        """
        Starts (or changes) the configuration of an action.

        Args:
            tab (ActionTab): The kind of action.
            request (ActionRequest | None): The configured action; a blank
                request of the tab's kind when None.

        """
        if self.state == FlowState.RESOLVED:
            raise RuntimeError("Reset the resolved action before configuring another")
        if request is None:
            request = _DEFAULT_REQUESTS[tab]()
        if request.tab != tab:
            raise ValueError(f"A {type(request).__name__} cannot configure {tab}")
        self.tab = tab
        self.request = request
        self.state = FlowState.CONFIGURING

    def roll(
        self,
        character: Character,
        current: CurrentStats,
        active_buffs: Sequence[Ability] = (),
        action_state: ActionState | None = None,
    ) -> CombatResult:
        """
        Resolves the configured action.

        A failed check leaves the flow in Configuring so the player can
        adjust the action.

        Returns:
            CombatResult: The outcome, also kept as `last_result`.

        """
        if self.state != FlowState.CONFIGURING or self.request is None:
            raise RuntimeError("Configure an action before rolling")
        result = self.resolver.resolve(
            character, current, self.request, active_buffs, action_state
        )
        self.last_result = result
        self.state = FlowState.RESOLVED
        return result

    def reset(self) -> None:
        """Returns to Idle, discarding the configuration and the result."""
        self.state = FlowState.IDLE
        self.tab = None
        self.request = None
        self.last_result = None
