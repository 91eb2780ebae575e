"""
Enemy system module.

Enemy data, spawning, level scaling and special abilities. All public
APIs are exported from this module.
"""

from .types import (
    ENEMY_TYPES, SPECIAL_ABILITIES, ENEMY_NAMES, COUNTER_BASE, Enemy,
)
from .scaling import compute_max_hp, compute_armor, boss_chance
from .spawning import (
    spawn_enemy, next_enemy_id, reserve_enemy_ids,
    roll_enemy_type, roll_special_ability,
)
from .abilities import (
    modify_counter_damage, incoming_damage_multiplier,
    regenerate, split_on_death,
)

__all__ = [
    "ENEMY_TYPES", "SPECIAL_ABILITIES", "ENEMY_NAMES", "COUNTER_BASE", "Enemy",
    "compute_max_hp", "compute_armor", "boss_chance",
    "spawn_enemy", "next_enemy_id", "reserve_enemy_ids",
    "roll_enemy_type", "roll_special_ability",
    "modify_counter_damage", "incoming_damage_multiplier",
    "regenerate", "split_on_death",
]
