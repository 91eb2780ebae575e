"""
Enemy special abilities.

Each helper is pure: it takes an Enemy (and a random source where a roll is
involved) and returns new values, leaving the input untouched.
"""

import math
from dataclasses import replace
from typing import List, Optional, Tuple

from .types import Enemy

BERSERKER_HP_THRESHOLD = 0.3
BERSERKER_MULTIPLIER = 1.5
PRECISE_CHANCE = 0.15
PRECISE_MULTIPLIER = 1.3
LIGHTNING_CHANCE = 0.25
LIGHTNING_MULTIPLIER = 1.4
FREEZE_MULTIPLIER = 1.15
POISON_DAMAGE_PER_LEVEL = 0.3
SHIELD_DAMAGE_TAKEN = 0.75
REGENERATION_FRACTION = 0.03
MAX_SPLITS = 4
SPLIT_HP_FRACTION = 0.3
SPLIT_LEVEL_DROP = 2


def modify_counter_damage(enemy: Enemy, base_damage: float, rng) -> Tuple[float, Optional[str]]:
    """
    Apply the enemy's ability to its counter-attack.

    Returns:
        (damage, message tag or None)
    """
    ability = enemy.special_ability
    if ability == "berserker":
        if enemy.hp < enemy.max_hp * BERSERKER_HP_THRESHOLD:
            return math.floor(base_damage * BERSERKER_MULTIPLIER), "BERSERKER RAGE!"
    elif ability == "precise":
        if rng.random() < PRECISE_CHANCE:
            return math.floor(base_damage * PRECISE_MULTIPLIER), "PRECISE STRIKE!"
    elif ability == "lightning":
        if rng.random() < LIGHTNING_CHANCE:
            return math.floor(base_damage * LIGHTNING_MULTIPLIER), "LIGHTNING STRIKE!"
    elif ability == "freeze":
        return base_damage * FREEZE_MULTIPLIER, None
    elif ability == "poison":
        return base_damage + math.floor(enemy.level * POISON_DAMAGE_PER_LEVEL), None
    return base_damage, None


def incoming_damage_multiplier(enemy: Enemy) -> float:
    if enemy.special_ability == "shield":
        return SHIELD_DAMAGE_TAKEN
    return 1.0


def regenerate(enemy: Enemy) -> Enemy:
    """Heal 3% max HP (min 1) if the enemy has regeneration and is alive."""
    if enemy.special_ability != "regeneration" or enemy.hp <= 0:
        return enemy
    heal = max(1, math.floor(enemy.max_hp * REGENERATION_FRACTION))
    return enemy.with_hp(enemy.hp + heal)


def split_on_death(enemy: Enemy) -> List[Enemy]:
    """
    Smaller copies spawned when a splitting enemy dies: two levels lower,
    30% HP, no ability and no further splitting.
    """
    if enemy.special_ability != "split" or enemy.split_count <= 0 or enemy.hp > 0:
        return []

    hp = max(1, math.floor(enemy.max_hp * SPLIT_HP_FRACTION))
    pieces: List[Enemy] = []
    for i in range(min(enemy.split_count, MAX_SPLITS)):
        pieces.append(replace(
            enemy,
            id=f"{enemy.id}_split_{i}",
            name=f"Small {enemy.name}",
            level=max(1, enemy.level - SPLIT_LEVEL_DROP),
            hp=hp,
            max_hp=hp,
            special_ability=None,
            split_count=0,
            is_boss=False,
        ))
    return pieces
