# systems/economy.py
"""
Economy: gold value of generated gear and stones, sell prices and kill
bounties.

Value formula (equipment):
    (sum(base_stat * weight) + sum(affix * weight)) * level * rarity multiplier
floored, minimum 1. Stones use their own weights and are worth half.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping


# ============================================================================
# Constants & Configuration
# ============================================================================

# Gold per stat point on equipment. Unlisted stats count 1:1.
STAT_VALUE_WEIGHTS: Dict[str, float] = {
    "damage": 5.0,
    "armor": 3.0,
    "health": 0.5,
    "mana": 0.3,
    "crit_chance": 100.0,
    "dodge_chance": 80.0,
    "attack_speed": 20.0,
    "strength": 2.0,
    "dexterity": 2.0,
    "intelligence": 2.0,
    "vitality": 2.0,
    "luck": 3.0,
}

# Stones are priced per point a bit higher, then halved overall.
STONE_STAT_VALUE_WEIGHTS: Dict[str, float] = {
    "damage": 8.0,
    "armor": 4.0,
    "health": 0.3,
    "mana": 0.2,
    "crit_chance": 150.0,
    "dodge_chance": 120.0,
    "attack_speed": 30.0,
    "strength": 3.0,
    "dexterity": 3.0,
    "intelligence": 3.0,
    "vitality": 3.0,
    "luck": 5.0,
    "gold_find": 50.0,
    "magic_find": 80.0,
    "experience_bonus": 60.0,
}

STONE_VALUE_MULTIPLIER = 0.5
MIN_ITEM_VALUE = 1

# Kill bounty
KILL_GOLD_PER_LEVEL = 2
BOSS_GOLD_MULTIPLIER = 5


# ============================================================================
# Core Value Calculation
# ============================================================================

def _weighted_stat_sum(
    base_stats: Mapping[str, float],
    affixes: Iterable,
    weights: Mapping[str, float],
) -> float:
    total = 0.0
    for stat, value in base_stats.items():
        total += float(value) * weights.get(stat, 1.0)
    for affix in affixes:
        total += float(affix.value) * weights.get(affix.stat, 1.0)
    return total


def calculate_equipment_value(
    base_stats: Mapping[str, float],
    affixes: Iterable,
    level: int,
    stat_multiplier: float,
) -> int:
    """
    Gold value of a piece of equipment.

    Args:
        base_stats: scaled base stats
        affixes: rolled affixes (anything with .stat / .value)
        level: item level
        stat_multiplier: rarity stat multiplier

    Returns:
        Gold value (minimum 1)
    """
    raw = _weighted_stat_sum(base_stats, affixes, STAT_VALUE_WEIGHTS)
    raw *= max(1, int(level)) * stat_multiplier
    return max(MIN_ITEM_VALUE, int(math.floor(raw)))


def calculate_stone_value(
    base_stats: Mapping[str, float],
    affixes: Iterable,
    level: int,
    stat_multiplier: float,
) -> int:
    raw = _weighted_stat_sum(base_stats, affixes, STONE_STAT_VALUE_WEIGHTS)
    raw *= max(1, int(level)) * stat_multiplier * STONE_VALUE_MULTIPLIER
    return max(MIN_ITEM_VALUE, int(math.floor(raw)))


def sell_price(item) -> int:
    """Gold credited when an item is sold or auto-sold on overflow."""
    try:
        value = int(getattr(item, "value", 0) or 0)
    except (TypeError, ValueError):
        value = 0
    return max(MIN_ITEM_VALUE, value)


def kill_gold(level: int, is_boss: bool = False, gold_find: float = 0.0) -> int:
    """Gold bounty for defeating an enemy."""
    gold = max(1, int(level)) * KILL_GOLD_PER_LEVEL
    if is_boss:
        gold *= BOSS_GOLD_MULTIPLIER
    return int(math.floor(gold * (1.0 + max(0.0, gold_find))))
