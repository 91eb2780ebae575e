from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

# Attribute baselines: bonuses only count points above these.
ATTRIBUTE_BASELINE: Dict[str, int] = {
    "strength": 10,
    "dexterity": 10,
    "intelligence": 10,
    "vitality": 10,
    "luck": 5,
}

# Per-rank talent effects (legacy skill ranks).
TALENT_EFFECTS: Dict[str, Dict[str, float]] = {
    "endurance": {"max_hp": 10},
    "strength": {"damage": 1},
    "precision": {"crit_chance": 0.01},
    "agility": {"dodge_chance": 0.01},
    "resilience": {"armor": 1},
    "fortune": {"gold_find": 0.05},
    "vitality": {"health_regen": 0.1},
    # "quick" only speeds up the combat driver
}

# Gear stat key -> CalculatedStats field, when they differ.
_GEAR_FIELD: Dict[str, str] = {
    "health": "max_hp",
    "mana": "max_mana",
}


@dataclass
class CalculatedStats:
    """
    Effective combat stats. Always derived from the player's base values,
    attributes, talents, passive bonuses and gear; never edited by hand.
    """
    damage: float = 0.0
    max_hp: int = 1
    max_mana: int = 0
    armor: float = 0.0

    crit_chance: float = 0.0
    crit_multiplier: float = 0.0      # added on top of the base multiplier
    dodge_chance: float = 0.0
    block_chance: float = 0.0
    accuracy: float = 0.0
    life_steal: float = 0.0
    mana_steal: float = 0.0
    attack_speed: float = 1.0
    thorns: float = 0.0

    health_regen: float = 0.0
    mana_regen: float = 0.0

    gold_find: float = 0.0
    magic_find: float = 0.0
    experience_bonus: float = 0.0

    # Effective attributes (base + gear + passives)
    attributes: Dict[str, float] = field(default_factory=dict)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _apply_attribute_points(stats: CalculatedStats, attr: str, points: float) -> None:
    """Conversion of attribute points into combat stats."""
    if attr == "strength":
        stats.damage += max(0.0, points)
        stats.max_hp += points * 2
    elif attr == "dexterity":
        stats.crit_chance += points * 0.005
        stats.dodge_chance += points * 0.003
    elif attr == "intelligence":
        stats.max_mana += points
        stats.mana_regen += points * 0.2
    elif attr == "vitality":
        stats.max_hp += points * 3
        stats.health_regen += points * 0.1
    elif attr == "luck":
        stats.crit_chance += points * 0.005


def _add_stat_map(stats: CalculatedStats, values: Mapping[str, float]) -> Dict[str, float]:
    """
    Add a stat map onto the snapshot. Attribute keys are returned instead
    so the caller can run them through the attribute conversions.
    """
    attributes: Dict[str, float] = {}
    for key, value in values.items():
        if key in ATTRIBUTE_BASELINE:
            attributes[key] = attributes.get(key, 0.0) + value
            continue
        name = _GEAR_FIELD.get(key, key)
        if hasattr(stats, name) and name != "attributes":
            setattr(stats, name, getattr(stats, name) + value)
    return attributes


def calculate_player_stats(player) -> CalculatedStats:
    """
    Pure recompute of the player's CalculatedStats.

    Order: base values, attribute points above baseline, talent ranks,
    passive bonus bundle, equipment (base stats + affixes + sockets, with
    gear attributes converted like base attributes), then clamps.
    """
    stats = CalculatedStats(
        damage=float(player.base_damage),
        max_hp=player.base_max_hp,
        max_mana=player.base_max_mana,
    )

    effective_attrs: Dict[str, float] = {}
    for attr, baseline in ATTRIBUTE_BASELINE.items():
        value = float(player.attributes.get(attr, baseline))
        effective_attrs[attr] = value
        _apply_attribute_points(stats, attr, value - baseline)

    for talent, rank in player.talents.items():
        for key, per_rank in TALENT_EFFECTS.get(talent, {}).items():
            setattr(stats, key, getattr(stats, key) + per_rank * rank)

    extra_attrs = _add_stat_map(stats, player.passive_bonuses)

    gear_totals: Dict[str, float] = {}
    for item in player.equipment.values():
        if item is None:
            continue
        for stat, value in item.all_stats().items():
            gear_totals[stat] = gear_totals.get(stat, 0.0) + value
    for attr, value in _add_stat_map(stats, gear_totals).items():
        extra_attrs[attr] = extra_attrs.get(attr, 0.0) + value

    for attr, points in extra_attrs.items():
        effective_attrs[attr] = effective_attrs.get(attr, 0.0) + points
        _apply_attribute_points(stats, attr, points)

    stats.attributes = effective_attrs
    stats.max_hp = max(1, int(stats.max_hp))
    stats.max_mana = max(0, int(stats.max_mana))
    stats.armor = max(0.0, stats.armor)
    stats.crit_chance = _clamp(stats.crit_chance, 0.0, 1.0)
    stats.dodge_chance = _clamp(stats.dodge_chance, 0.0, 0.95)
    stats.block_chance = _clamp(stats.block_chance, 0.0, 0.75)
    stats.life_steal = _clamp(stats.life_steal, 0.0, 1.0)
    stats.mana_steal = _clamp(stats.mana_steal, 0.0, 1.0)
    return stats
