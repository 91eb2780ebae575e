# systems/gems.py
"""
Skill and support gems: data types, templates and small helpers.

The numeric effect of a skill gem (after level scaling, rarity bonus and
attached supports) is computed by systems.gem_pipeline.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple


GEM_RARITY_ORDER: List[str] = ["Normal", "Magic", "Rare", "Unique"]

MAX_GEM_LEVEL = 20
MAX_GEM_QUALITY = 20

ELEMENTAL_TAGS = frozenset({"Fire", "Cold", "Lightning"})


# ============================================================================
# Data
# ============================================================================

@dataclass(frozen=True)
class GemRarityBonus:
    """All values are percentages. Missing bonuses are 0."""
    damage: float = 0.0
    area_of_effect: float = 0.0
    area_damage: float = 0.0
    projectile_damage: float = 0.0
    physical_damage: float = 0.0
    elemental_damage: float = 0.0
    attack_speed: float = 0.0
    cast_speed: float = 0.0
    critical_chance: float = 0.0
    duration: float = 0.0
    mana_cost_reduction: float = 0.0


GEM_RARITY_BONUSES: Dict[str, GemRarityBonus] = {
    "Normal": GemRarityBonus(),
    "Magic": GemRarityBonus(
        damage=10, area_of_effect=5, projectile_damage=8, mana_cost_reduction=5,
    ),
    "Rare": GemRarityBonus(
        damage=25, area_of_effect=12, area_damage=15, projectile_damage=20,
        physical_damage=18, elemental_damage=18, attack_speed=10, cast_speed=10,
        critical_chance=8, duration=15, mana_cost_reduction=10,
    ),
    "Unique": GemRarityBonus(
        damage=50, area_of_effect=25, area_damage=30, projectile_damage=40,
        physical_damage=35, elemental_damage=35, attack_speed=20, cast_speed=20,
        critical_chance=15, duration=25, mana_cost_reduction=20,
    ),
}


@dataclass(frozen=True)
class GemModifier:
    """
    One support effect.

    type: damage, mana_cost, cooldown, area, duration, projectile_count,
          added_damage or damage_multiplier
    is_percentage: percentage modifiers multiply, flat ones add
    tags: for damage_multiplier, the skill tags it applies to
    """
    type: str
    value: float
    is_percentage: bool = True
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SkillScaling:
    base_damage: float = 0.0
    damage_per_level: float = 0.0
    base_area: float = 0.0
    area_per_level: float = 0.0
    base_duration: float = 0.0        # seconds
    duration_per_level: float = 0.0
    mana_cost_per_level: float = 0.0
    cooldown_reduction_per_level: float = 0.0


@dataclass(frozen=True)
class SupportScaling:
    """Level scaling of one modifier (the one whose type matches)."""
    modifier_type: str
    base_value: float
    value_per_level: float


@dataclass(frozen=True)
class SupportGem:
    id: str
    name: str
    tags: Tuple[str, ...] = ()
    level: int = 1
    max_level: int = MAX_GEM_LEVEL
    rarity: str = "Normal"
    quality: int = 0
    modifiers: Tuple[GemModifier, ...] = ()
    scaling: Optional[SupportScaling] = None


@dataclass(frozen=True)
class SkillGem:
    id: str
    name: str
    tags: Tuple[str, ...] = ()
    level: int = 1
    max_level: int = MAX_GEM_LEVEL
    rarity: str = "Normal"
    quality: int = 0
    mana_cost: float = 0.0
    cooldown: float = 0.0
    scaling: SkillScaling = field(default_factory=SkillScaling)
    support_gems: Tuple[SupportGem, ...] = ()


# ============================================================================
# Templates
# ============================================================================

def _skill(gem_id: str, name: str, tags: Iterable[str], **scaling: float) -> SkillGem:
    return SkillGem(id=gem_id, name=name, tags=tuple(tags), scaling=SkillScaling(**scaling))


SKILL_GEM_TEMPLATES: Dict[str, SkillGem] = {g.id: g for g in (
    _skill("whirlwind", "Whirlwind", ("Attack", "AoE", "Channeling", "Melee", "Physical"),
           base_damage=12, damage_per_level=2.5, base_area=2.5, area_per_level=0.15),
    _skill("fireball", "Fireball", ("Spell", "Projectile", "AoE", "Fire"),
           base_damage=15, damage_per_level=3, base_area=1.5, area_per_level=0.1),
    _skill("lightning_bolt", "Lightning Bolt", ("Spell", "Lightning"),
           base_damage=20, damage_per_level=4),
    _skill("ice_shard", "Ice Shard", ("Spell", "Projectile", "Cold"),
           base_damage=8, damage_per_level=1.8),
    _skill("ground_slam", "Ground Slam", ("Attack", "AoE", "Slam", "Physical"),
           base_damage=18, damage_per_level=3.5, base_area=2.0, area_per_level=0.12),
    _skill("poison_arrow", "Poison Arrow", ("Attack", "Projectile", "AoE", "Chaos", "Duration", "Bow"),
           base_damage=10, damage_per_level=2.2, base_area=1.8, area_per_level=0.08,
           base_duration=3.0, duration_per_level=0.15),
    _skill("chain_lightning", "Chain Lightning", ("Spell", "Lightning", "AoE"),
           base_damage=14, damage_per_level=2.8),
    _skill("meteor", "Meteor", ("Spell", "AoE", "Fire"),
           base_damage=25, damage_per_level=5, base_area=3.0, area_per_level=0.2),
    _skill("blade_vortex", "Blade Vortex", ("Spell", "AoE", "Duration", "Physical"),
           base_damage=8, damage_per_level=1.6, base_area=2.2, area_per_level=0.1,
           base_duration=5.0, duration_per_level=0.2),
    _skill("frost_nova", "Frost Nova", ("Spell", "AoE", "Cold"),
           base_damage=16, damage_per_level=3.2, base_area=2.8, area_per_level=0.14),
    _skill("cleave", "Cleave", ("Attack", "AoE", "Melee", "Physical"),
           base_damage=14, damage_per_level=2.8, base_area=1.5, area_per_level=0.08),
    _skill("summon_skeletons", "Summon Skeletons", ("Spell", "Minion", "Duration"),
           base_damage=6, damage_per_level=1.2, base_duration=10.0, duration_per_level=0.5),
)}


def _support(
    gem_id: str,
    name: str,
    tags: Iterable[str],
    modifiers: Iterable[GemModifier],
    scaling: Optional[SupportScaling] = None,
) -> SupportGem:
    return SupportGem(id=gem_id, name=name, tags=tuple(tags), modifiers=tuple(modifiers), scaling=scaling)


SUPPORT_GEM_TEMPLATES: Dict[str, SupportGem] = {g.id: g for g in (
    _support("increased_damage", "Increased Damage", ("Attack", "Spell"),
             [GemModifier("damage", 15)],
             SupportScaling("damage", 15, 2)),
    _support("increased_area", "Increased Area of Effect", ("AoE",),
             [GemModifier("area", 25)],
             SupportScaling("area", 25, 3)),
    _support("multiple_projectiles", "Multiple Projectiles", ("Projectile",),
             [GemModifier("projectile_count", 2, is_percentage=False), GemModifier("damage", -20)],
             SupportScaling("projectile_count", 2, 0.2)),
    _support("faster_casting", "Faster Casting", ("Spell",),
             [GemModifier("cooldown", -25)],
             SupportScaling("cooldown", 25, 1.5)),
    _support("reduced_mana", "Reduced Mana", ("Attack", "Spell"),
             [GemModifier("mana_cost", -30)],
             SupportScaling("mana_cost", 30, 1)),
    _support("added_fire_damage", "Added Fire Damage", ("Support", "Fire"),
             [GemModifier("added_damage", 10, is_percentage=False, tags=("Fire",))],
             SupportScaling("added_damage", 10, 2)),
    _support("added_cold_damage", "Added Cold Damage", ("Support", "Cold"),
             [GemModifier("added_damage", 8, is_percentage=False, tags=("Cold",))],
             SupportScaling("added_damage", 8, 1.5)),
    _support("added_lightning_damage", "Added Lightning Damage", ("Support", "Lightning"),
             [GemModifier("added_damage", 12, is_percentage=False, tags=("Lightning",))],
             SupportScaling("added_damage", 12, 2)),
    _support("elemental_focus", "Elemental Focus", ("Support", "Elemental"),
             [GemModifier("damage_multiplier", 1.5, is_percentage=False, tags=("Fire", "Cold", "Lightning"))],
             SupportScaling("damage_multiplier", 1.5, 0.02)),
    _support("melee_physical_damage", "Melee Physical Damage", ("Support", "Melee", "Physical"),
             [GemModifier("damage_multiplier", 1.4, is_percentage=False, tags=("Physical", "Melee"))],
             SupportScaling("damage_multiplier", 1.4, 0.015)),
    _support("spell_echo", "Spell Echo", ("Support", "Spell"),
             [GemModifier("damage", -25)],
             SupportScaling("damage", 25, -0.5)),
    _support("concentrated_effect", "Concentrated Effect", ("Support", "AoE"),
             [GemModifier("area", -30), GemModifier("damage", 60)],
             SupportScaling("damage", 60, 2)),
    _support("pierce", "Pierce", ("Support", "Projectile"),
             [GemModifier("damage", 10)],
             SupportScaling("damage", 10, 1)),
    _support("minion_damage", "Minion Damage", ("Support", "Minion"),
             [GemModifier("damage", 50)],
             SupportScaling("damage", 50, 3)),
    _support("increased_duration", "Increased Duration", ("Support", "Duration"),
             [GemModifier("duration", 40)],
             SupportScaling("duration", 40, 2)),
)}

DEFAULT_SKILL_ID = "whirlwind"


def create_skill_gem(template_id: str, level: int = 1, rarity: str = "Normal") -> Optional[SkillGem]:
    template = SKILL_GEM_TEMPLATES.get(template_id)
    if template is None:
        return None
    return replace(template, level=_clamp_level(level, template.max_level), rarity=_valid_rarity(rarity))


def create_support_gem(template_id: str, level: int = 1, rarity: str = "Normal") -> Optional[SupportGem]:
    template = SUPPORT_GEM_TEMPLATES.get(template_id)
    if template is None:
        return None
    return replace(template, level=_clamp_level(level, template.max_level), rarity=_valid_rarity(rarity))


def default_skill_gems() -> List[SkillGem]:
    return [replace(g) for g in SKILL_GEM_TEMPLATES.values()]


def default_support_gems() -> List[SupportGem]:
    return [replace(g) for g in SUPPORT_GEM_TEMPLATES.values()]


def _clamp_level(level: int, max_level: int) -> int:
    return max(1, min(int(level), max_level))


def _valid_rarity(rarity: str) -> str:
    return rarity if rarity in GEM_RARITY_BONUSES else "Normal"


# ============================================================================
# Helpers
# ============================================================================

def has_any_tag(gem, tags: Iterable[str]) -> bool:
    gem_tags = set(gem.tags)
    return any(t in gem_tags for t in tags)


def is_compatible_support(skill: SkillGem, support: SupportGem) -> bool:
    """A support fits a skill when it has no tags or shares at least one."""
    if not support.tags:
        return True
    return has_any_tag(skill, support.tags)


def compatible_supports(skill: SkillGem, supports: Iterable[SupportGem]) -> List[SupportGem]:
    return [s for s in supports if is_compatible_support(skill, s)]


def scaled_support_value(support: SupportGem) -> float:
    """
    Magnitude of the level-scaled modifier.

    Percent / flat values are floored; damage multipliers keep two
    decimals (1.5 -> 1.52 at level 2).
    """
    scaling = support.scaling
    if scaling is None:
        return support.modifiers[0].value if support.modifiers else 0.0
    raw = scaling.base_value + scaling.value_per_level * (support.level - 1)
    if scaling.modifier_type == "damage_multiplier":
        return round(raw, 2)
    return float(math.floor(raw))


def scaled_support_modifiers(support: SupportGem) -> Tuple[GemModifier, ...]:
    """
    Support modifiers with level scaling applied. The scaled modifier keeps
    the sign of its template value.
    """
    scaling = support.scaling
    if scaling is None:
        return support.modifiers
    magnitude = scaled_support_value(support)
    out = []
    for modifier in support.modifiers:
        if modifier.type == scaling.modifier_type:
            value = -magnitude if modifier.value < 0 else magnitude
            modifier = replace(modifier, value=value)
        out.append(modifier)
    return tuple(out)


def gem_level_up_cost(level: int) -> int:
    """Skill points needed to go from `level` to `level + 1`."""
    return int(math.floor(level * 1.5)) + 1


def can_level_up_gem(gem, skill_points: int) -> bool:
    if gem.level >= gem.max_level:
        return False
    return skill_points >= gem_level_up_cost(gem.level)
