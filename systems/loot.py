from __future__ import annotations

import random
from typing import List, Union

from engine.error_handler import get_logger
from systems.equipment import Equipment, generate_equipment
from systems.stones import Stone, generate_stone

log = get_logger("loot")

LootItem = Union[Equipment, Stone]


# ----------------- Drop counts -----------------

NORMAL_EQUIPMENT_DROPS = 1
NORMAL_STONE_CHANCE = 0.15

BOSS_EQUIPMENT_DROPS = 3
BOSS_STONE_DROPS = 1
BOSS_BONUS_DROP_CHANCE = 0.5

# Magic find turns into a chance for one extra piece of equipment.
MAX_MAGIC_FIND_DROP_CHANCE = 0.5


def _extra_drop_chance(magic_find: float) -> float:
    return max(0.0, min(MAX_MAGIC_FIND_DROP_CHANCE, magic_find))


# ----------------- Public API -----------------

def generate_loot(
    level: int,
    is_boss: bool = False,
    rng=None,
    magic_find: float = 0.0,
) -> List[LootItem]:
    """
    Roll the drops for one defeated enemy.

    Normal kills: 1 equipment, 15% chance of a stone.
    Boss kills: 3 equipment, 1 stone, 50% chance of a 4th equipment.
    Boss drops always outnumber normal drops at the same level.

    Args:
        level: drop level (the player's level)
        is_boss: whether the enemy was a boss
        rng: random source
        magic_find: player's magic find, chance of one extra equipment

    Returns:
        List of Equipment / Stone in drop order
    """
    rng = rng if rng is not None else random
    drops: List[LootItem] = []

    if is_boss:
        for _ in range(BOSS_EQUIPMENT_DROPS):
            drops.append(generate_equipment(level, is_boss=True, rng=rng))
        for _ in range(BOSS_STONE_DROPS):
            drops.append(generate_stone(level, is_boss=True, rng=rng))
        if rng.random() < BOSS_BONUS_DROP_CHANCE:
            drops.append(generate_equipment(level, is_boss=True, rng=rng))
    else:
        for _ in range(NORMAL_EQUIPMENT_DROPS):
            drops.append(generate_equipment(level, rng=rng))
        if rng.random() < NORMAL_STONE_CHANCE:
            drops.append(generate_stone(level, rng=rng))

    if rng.random() < _extra_drop_chance(magic_find):
        drops.append(generate_equipment(level, is_boss=is_boss, rng=rng))

    log.debug(f"Rolled {len(drops)} drops (level={level}, boss={is_boss})")
    return drops
