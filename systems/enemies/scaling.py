"""
Enemy stat scaling by level and type.
"""

import math

from .types import ARMOR_PER_LEVEL, HP_MULTIPLIERS

BASE_HP = 25
HP_PER_LEVEL = 12

BASE_BOSS_CHANCE = 0.02
BOSS_CHANCE_PER_DECADE = 0.01


def compute_max_hp(level: int, enemy_type: str) -> int:
    """25 + 12 per level, then the type multiplier (floored)."""
    hp = BASE_HP + level * HP_PER_LEVEL
    multiplier = HP_MULTIPLIERS.get(enemy_type)
    if multiplier is not None:
        hp = math.floor(hp * multiplier)
    return max(1, int(hp))


def compute_armor(level: int, enemy_type: str) -> int:
    return int(math.floor(level * ARMOR_PER_LEVEL.get(enemy_type, 0.0)))


def boss_chance(level: int) -> float:
    """2% plus 1% for every full 10 levels."""
    return BASE_BOSS_CHANCE + (level // 10) * BOSS_CHANCE_PER_DECADE
