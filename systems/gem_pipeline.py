from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Sequence, Tuple

from systems.gems import (
    ELEMENTAL_TAGS,
    GEM_RARITY_BONUSES,
    GemModifier,
    GemRarityBonus,
    SkillGem,
    SupportGem,
    has_any_tag,
    scaled_support_modifiers,
)
from systems.skill_combinations import CombinationBonuses, active_combinations, combination_bonuses


@dataclass(frozen=True)
class SkillEffect:
    """Numeric effect of a skill gem. Finalized values are rounded."""
    damage: float = 0.0
    mana_cost: float = 0.0
    cooldown: float = 0.0
    area: float = 0.0
    duration: float = 0.0
    projectile_count: float = 1


Stage = Callable[[SkillGem, SkillEffect], SkillEffect]


# ----------------- Stage 1: base scaled values -----------------

def base_effect(gem: SkillGem) -> SkillEffect:
    """Level-scaled values before any bonus. Absent dimensions are 0."""
    s = gem.scaling
    lvl = max(1, gem.level) - 1
    damage = math.floor(s.base_damage + s.damage_per_level * lvl) if s.base_damage else 0
    area = s.base_area + s.area_per_level * lvl if s.base_area else 0.0
    duration = s.base_duration + s.duration_per_level * lvl if s.base_duration else 0.0
    mana_cost = gem.mana_cost + s.mana_cost_per_level * lvl
    cooldown = max(0.0, gem.cooldown - s.cooldown_reduction_per_level * lvl)
    return SkillEffect(
        damage=damage,
        mana_cost=mana_cost,
        cooldown=cooldown,
        area=area,
        duration=duration,
        projectile_count=1,
    )


# ----------------- Rarity bonus (shared by skill and supports) -----------------

def _apply_rarity_bonus(
    effect: SkillEffect,
    bonus: GemRarityBonus,
    tags: Iterable[str],
    scale: float,
) -> SkillEffect:
    """
    Tag-gated rarity bonus. `tags` are the tags of the gem carrying the
    rarity; `scale` is 1.0 for the skill itself and 0.5 for supports.
    """
    tags = set(tags)

    def pct(value: float) -> float:
        return 1 + value * scale / 100

    damage = effect.damage * pct(bonus.damage)
    area = effect.area
    duration = effect.duration

    if "AoE" in tags:
        area *= pct(bonus.area_of_effect)
        damage *= pct(bonus.area_damage)
    if "Projectile" in tags:
        damage *= pct(bonus.projectile_damage)
    if "Physical" in tags:
        damage *= pct(bonus.physical_damage)
    if tags & ELEMENTAL_TAGS:
        damage *= pct(bonus.elemental_damage)
    if "Critical" in tags:
        damage *= pct(bonus.critical_chance)
    if "Duration" in tags:
        duration *= pct(bonus.duration)

    mana_cost = effect.mana_cost * (1 - bonus.mana_cost_reduction * scale / 100)

    return replace(effect, damage=damage, area=area, duration=duration, mana_cost=mana_cost)


def apply_gem_rarity(gem: SkillGem, effect: SkillEffect) -> SkillEffect:
    bonus = GEM_RARITY_BONUSES.get(gem.rarity, GEM_RARITY_BONUSES["Normal"])
    return _apply_rarity_bonus(effect, bonus, gem.tags, 1.0)


# ----------------- Support gems -----------------

def _apply_modifier(gem: SkillGem, effect: SkillEffect, modifier: GemModifier) -> SkillEffect:
    kind = modifier.type
    value = modifier.value

    if kind == "added_damage":
        return replace(effect, damage=effect.damage + value)
    if kind == "damage_multiplier":
        if not modifier.tags or has_any_tag(gem, modifier.tags):
            return replace(effect, damage=effect.damage * value)
        return effect
    if kind == "projectile_count":
        return replace(effect, projectile_count=effect.projectile_count + value)
    if kind not in ("damage", "mana_cost", "cooldown", "area", "duration"):
        return effect

    current = getattr(effect, kind)
    if modifier.is_percentage:
        new_value = current * (1 + value / 100)
    else:
        new_value = current + value
    return replace(effect, **{kind: new_value})


def apply_support(gem: SkillGem, support: SupportGem, effect: SkillEffect) -> SkillEffect:
    """Half-strength rarity bonus gated by the support's tags, then its modifiers."""
    bonus = GEM_RARITY_BONUSES.get(support.rarity, GEM_RARITY_BONUSES["Normal"])
    effect = _apply_rarity_bonus(effect, bonus, support.tags, 0.5)
    for modifier in scaled_support_modifiers(support):
        effect = _apply_modifier(gem, effect, modifier)
    return effect


def apply_support_gems(gem: SkillGem, effect: SkillEffect) -> SkillEffect:
    # Attachment order matters: percentage and flat modifiers don't commute.
    for support in gem.support_gems:
        effect = apply_support(gem, support, effect)
    return effect


# ----------------- Finalize -----------------

def finalize(effect: SkillEffect) -> SkillEffect:
    return SkillEffect(
        damage=int(round(effect.damage)),
        mana_cost=max(0, int(round(effect.mana_cost))),
        cooldown=max(0, int(round(effect.cooldown))),
        area=round(effect.area, 2),
        duration=int(round(effect.duration)),
        projectile_count=max(1, int(round(effect.projectile_count))),
    )


# Applied in order between base_effect() and finalize().
PIPELINE_STAGES: Tuple[Stage, ...] = (
    apply_gem_rarity,
    apply_support_gems,
)


def resolve_gem_modifiers(gem: SkillGem) -> SkillEffect:
    """Final numeric effect of a skill gem with its attached supports."""
    effect = base_effect(gem)
    for stage in PIPELINE_STAGES:
        effect = stage(gem, effect)
    return finalize(effect)


def apply_combination_bonuses(effect: SkillEffect, bonuses: CombinationBonuses) -> SkillEffect:
    # speed is read by the combat driver, not the skill
    return replace(
        effect,
        damage=effect.damage * bonuses.damage,
        area=effect.area * bonuses.area,
        mana_cost=effect.mana_cost * bonuses.mana_cost,
        cooldown=effect.cooldown * bonuses.cooldown,
    )


def resolve_equipped_skill(
    gem: SkillGem,
    equipped: Sequence[SkillGem],
    player_level: Optional[int] = None,
) -> SkillEffect:
    """
    resolve_gem_modifiers() plus the combinations active on the skill bar,
    applied before finalize().
    """
    effect = base_effect(gem)
    for stage in PIPELINE_STAGES:
        effect = stage(gem, effect)
    bonuses = combination_bonuses(active_combinations(equipped, player_level), gem.id)
    return finalize(apply_combination_bonuses(effect, bonuses))
