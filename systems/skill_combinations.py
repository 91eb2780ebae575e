# systems/skill_combinations.py
"""
Skill combinations and synergies.

A combination turns on when the skills on the bar carry enough of the
required tags (or all the required skill ids); its bonuses then multiply
the effect of every equipped skill. Synergies pair a trigger skill with a
target and are reported when both are on the bar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from systems.gems import SkillGem

# Targets that never need a specific skill on the bar.
ALL_SPELLS = "all_spells"
PLAYER_TARGET = "player"


@dataclass(frozen=True)
class CombinationBonus:
    """
    type is one of damage / area / speed / mana_cost / cooldown / special.
    Percentage values are whole percents (20 = +20%). applies_to lists
    skill ids; empty means every skill.
    """
    type: str
    value: float
    is_percentage: bool
    description: str
    applies_to: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SkillCombination:
    id: str
    name: str
    description: str
    bonuses: Tuple[CombinationBonus, ...]
    unlock_level: int = 1
    required_skills: Tuple[str, ...] = ()
    # Repeated tags need that many skills carrying it
    required_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SkillSynergy:
    id: str
    name: str
    description: str
    trigger_skill: str
    target_skill: str
    condition: str  # on_use / on_kill / on_crit / on_hit
    bonus: CombinationBonus
    duration_ms: Optional[int] = None
    cooldown_ms: Optional[int] = None


@dataclass(frozen=True)
class CombinationBonuses:
    """Folded multipliers of a set of active combinations."""
    damage: float = 1.0
    area: float = 1.0
    speed: float = 1.0
    mana_cost: float = 1.0
    cooldown: float = 1.0
    special_effects: Tuple[str, ...] = field(default_factory=tuple)


SKILL_COMBINATIONS: Tuple[SkillCombination, ...] = (
    SkillCombination(
        id="elemental_mastery",
        name="Elemental Mastery",
        description="Fire and Lightning skills together grant an elemental damage bonus",
        required_tags=("Fire", "Lightning"),
        bonuses=(
            CombinationBonus("damage", 20, True, "+20% elemental damage"),
            CombinationBonus("special", 10, False, "10% chance to trigger elemental explosion on kill"),
        ),
        unlock_level=5,
    ),
    SkillCombination(
        id="melee_caster",
        name="Spellsword",
        description="Melee attacks and spells on the same bar",
        required_tags=("Melee", "Spell"),
        bonuses=(
            CombinationBonus("mana_cost", -15, True, "-15% mana cost for spells"),
            CombinationBonus("speed", 10, True, "+10% attack and cast speed"),
        ),
        unlock_level=3,
    ),
    SkillCombination(
        id="aoe_specialist",
        name="Area Specialist",
        description="Two or more AoE skills",
        required_tags=("AoE", "AoE"),
        bonuses=(
            CombinationBonus("area", 30, True, "+30% area of effect"),
            CombinationBonus("damage", 15, True, "+15% area damage"),
        ),
        unlock_level=4,
    ),
    SkillCombination(
        id="channeling_master",
        name="Channeling Master",
        description="A channeling skill on the bar",
        required_tags=("Channeling",),
        bonuses=(
            CombinationBonus("damage", 5, True, "+5% damage while channeling"),
            CombinationBonus("special", 2, False, "+2% life and mana regeneration while channeling"),
        ),
        unlock_level=6,
    ),
)

SKILL_SYNERGIES: Tuple[SkillSynergy, ...] = (
    SkillSynergy(
        id="fire_lightning_chain",
        name="Elemental Chain",
        description="Lightning Bolt critical hits may cast Fireball",
        trigger_skill="lightning_bolt",
        target_skill="fireball",
        condition="on_crit",
        bonus=CombinationBonus("special", 25, False,
                               "25% chance to cast Fireball on Lightning Bolt critical hit"),
        cooldown_ms=2000,
    ),
    SkillSynergy(
        id="whirlwind_spell_synergy",
        name="Spell Weaving",
        description="Whirlwind hits reduce spell cooldowns",
        trigger_skill="whirlwind",
        target_skill=ALL_SPELLS,
        condition="on_hit",
        bonus=CombinationBonus("cooldown", -50, False, "Reduces spell cooldowns by 50ms per enemy hit"),
    ),
    SkillSynergy(
        id="spell_kill_heal",
        name="Arcane Recovery",
        description="Spell kills restore mana and health",
        trigger_skill=ALL_SPELLS,
        target_skill=PLAYER_TARGET,
        condition="on_kill",
        bonus=CombinationBonus("heal", 5, True, "Restore 5% health and mana on spell kill"),
    ),
    SkillSynergy(
        id="melee_spell_momentum",
        name="Combat Momentum",
        description="Alternating between melee and spells builds momentum",
        trigger_skill="whirlwind",
        target_skill=ALL_SPELLS,
        condition="on_use",
        bonus=CombinationBonus("damage", 10, True, "+10% spell damage for 3 seconds after using melee skill"),
        duration_ms=3000,
    ),
)


def _tag_counts(skills: Iterable[SkillGem]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for skill in skills:
        for tag in skill.tags:
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def is_combination_active(
    combination: SkillCombination,
    equipped: Sequence[SkillGem],
    player_level: Optional[int] = None,
) -> bool:
    """
    Required skill ids win over required tags. A combination with neither
    is never active; with player_level given, unlock_level must be reached.
    """
    if player_level is not None and player_level < combination.unlock_level:
        return False

    if combination.required_skills:
        ids = {skill.id for skill in equipped}
        return all(skill_id in ids for skill_id in combination.required_skills)

    if combination.required_tags:
        have = _tag_counts(equipped)
        need: Dict[str, int] = {}
        for tag in combination.required_tags:
            need[tag] = need.get(tag, 0) + 1
        return all(have.get(tag, 0) >= count for tag, count in need.items())

    return False


def active_combinations(
    equipped: Sequence[SkillGem],
    player_level: Optional[int] = None,
) -> List[SkillCombination]:
    return [c for c in SKILL_COMBINATIONS if is_combination_active(c, equipped, player_level)]


def active_synergies(equipped: Sequence[SkillGem]) -> List[SkillSynergy]:
    """Synergies whose trigger and target are both on the bar."""
    ids = {skill.id for skill in equipped}
    active: List[SkillSynergy] = []
    for synergy in SKILL_SYNERGIES:
        has_trigger = synergy.trigger_skill == ALL_SPELLS or synergy.trigger_skill in ids
        has_target = synergy.target_skill in (ALL_SPELLS, PLAYER_TARGET) or synergy.target_skill in ids
        if has_trigger and has_target:
            active.append(synergy)
    return active


def combination_bonuses(
    combinations: Iterable[SkillCombination],
    skill_id: Optional[str] = None,
) -> CombinationBonuses:
    """
    Fold the bonuses of `combinations` into multipliers.

    Percentages multiply by (1 + value/100); flat values are read as
    percents too. With skill_id given, bonuses restricted to other skills
    are skipped.
    """
    multipliers = {"damage": 1.0, "area": 1.0, "speed": 1.0, "mana_cost": 1.0, "cooldown": 1.0}
    specials: List[str] = []

    for combination in combinations:
        for bonus in combination.bonuses:
            if skill_id is not None and bonus.applies_to and skill_id not in bonus.applies_to:
                continue
            if bonus.type == "special":
                specials.append(bonus.description)
            elif bonus.type in multipliers:
                multipliers[bonus.type] *= 1 + bonus.value / 100

    return CombinationBonuses(special_effects=tuple(specials), **multipliers)
