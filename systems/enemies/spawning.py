"""
Enemy spawning.

spawn_enemy() rolls boss status, type, HP, armor and a special ability for
one new enemy. Ids come from a process-wide monotonic counter so they stay
unique for the lifetime of the game (loaded saves bump the counter past
their highest id via reserve_enemy_ids()).
"""

import itertools
import random
import re
from typing import Iterable, Optional

from .scaling import boss_chance, compute_armor, compute_max_hp
from .types import (
    ENEMY_NAMES,
    ENEMY_TYPES,
    RESISTANCES,
    SPECIAL_ABILITIES,
    TYPE_ABILITY_TABLE,
    Enemy,
)

NORMAL_ABILITY_CHANCE = 0.2
SPLIT_COUNT_RANGE = (2, 3)

# Bosses never roll "split"
BOSS_ABILITIES = tuple(a for a in SPECIAL_ABILITIES if a != "split")

_id_counter = itertools.count(1)
_ID_PATTERN = re.compile(r"^e(\d+)")


def next_enemy_id() -> str:
    return f"e{next(_id_counter)}"


def reserve_enemy_ids(existing_ids: Iterable[str]) -> None:
    """Move the id counter past every "e{n}" id already in play."""
    global _id_counter
    highest = 0
    for enemy_id in existing_ids:
        match = _ID_PATTERN.match(str(enemy_id))
        if match:
            highest = max(highest, int(match.group(1)))
    if highest:
        current = next(_id_counter)
        _id_counter = itertools.count(max(current, highest + 1))


def roll_enemy_type(rng) -> str:
    roll = rng.random()
    if roll > 0.92:
        return "assassin"
    if roll > 0.85:
        return "tank"
    if roll > 0.75:
        return "caster"
    if roll > 0.55:
        return "ranged"
    return "melee"


def roll_special_ability(enemy_type: str, is_boss: bool, rng) -> Optional[str]:
    """Bosses always get one; everything else has a 20% type-biased chance."""
    if is_boss:
        return rng.choice(BOSS_ABILITIES)
    if rng.random() >= NORMAL_ABILITY_CHANCE:
        return None
    table = TYPE_ABILITY_TABLE.get(enemy_type)
    if not table:
        return rng.choice(BOSS_ABILITIES)
    roll = rng.random()
    for threshold, ability in table:
        if roll < threshold:
            return ability
    return table[-1][1]


def spawn_enemy(
    level: int = 1,
    kind: Optional[str] = None,
    rng=None,
) -> Enemy:
    """
    Create a new enemy for a player level.

    Args:
        level: enemy level (normally the player's level)
        kind: force a type ("boss" forces a boss; a boss roll overrides the rest)
        rng: random source

    Returns:
        A fresh Enemy at full HP
    """
    rng = rng if rng is not None else random
    level = max(1, int(level))

    is_boss = kind == "boss" or rng.random() < boss_chance(level)
    if is_boss:
        enemy_type = "boss"
    elif kind in ENEMY_TYPES:
        enemy_type = kind
    else:
        enemy_type = roll_enemy_type(rng)

    max_hp = compute_max_hp(level, enemy_type)
    ability = roll_special_ability(enemy_type, is_boss, rng)
    split_count = rng.randint(*SPLIT_COUNT_RANGE) if ability == "split" else 0

    base_name = rng.choice(ENEMY_NAMES[enemy_type])
    name = f"{base_name} L{level}"
    if is_boss:
        name = f"[BOSS] {name}"

    return Enemy(
        id=next_enemy_id(),
        name=name,
        level=level,
        hp=max_hp,
        max_hp=max_hp,
        type=enemy_type,
        special_ability=ability,
        is_boss=is_boss,
        armor=compute_armor(level, enemy_type),
        resistances=dict(RESISTANCES.get(enemy_type, {})),
        split_count=split_count,
    )
