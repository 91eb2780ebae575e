from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from engine.error_handler import get_logger
from systems.affixes import Affix, roll_affixes
from systems.economy import calculate_stone_value
from systems.rarity import (
    STONE_BASE_VARIANCE,
    STONE_RARITIES,
    get_stone_rarity_info,
    roll_stone_rarity,
)

log = get_logger("stones")


@dataclass(frozen=True)
class StoneBase:
    name: str
    base_stats: Dict[str, float]
    socket_types: Tuple[str, ...]


@dataclass(frozen=True)
class Stone:
    """
    A socketable stone. Structurally parallel to Equipment: base stats plus
    rolled affixes, but with its own rarity ladder and a list of equipment
    slots it fits into.
    """
    id: str
    name: str
    base_type: str
    rarity: str
    level: int
    base_stats: Dict[str, float] = field(default_factory=dict)
    affixes: Tuple[Affix, ...] = ()
    socket_types: Tuple[str, ...] = ()
    value: int = 1

    kind = "stone"

    def all_stats(self) -> Dict[str, float]:
        """Base stats and affixes folded into one map."""
        totals: Dict[str, float] = dict(self.base_stats)
        for affix in self.affixes:
            totals[affix.stat] = totals.get(affix.stat, 0.0) + affix.value
        return totals


STONE_BASES: Dict[str, StoneBase] = {
    "ruby": StoneBase("Ruby", {"damage": 3, "strength": 2}, ("weapon", "ring", "amulet")),
    "sapphire": StoneBase("Sapphire", {"mana": 15, "intelligence": 2}, ("helm", "chest", "ring", "amulet")),
    "emerald": StoneBase("Emerald", {"dexterity": 3, "crit_chance": 0.02}, ("weapon", "gloves", "ring", "amulet")),
    "diamond": StoneBase("Diamond", {"armor": 5, "health": 20}, ("helm", "chest", "legs", "boots")),
    "topaz": StoneBase("Topaz", {"attack_speed": 0.1, "luck": 2}, ("weapon", "gloves", "ring")),
    "amethyst": StoneBase("Amethyst", {"vitality": 3, "health_regen": 0.5}, ("helm", "chest", "belt", "amulet")),
    "onyx": StoneBase("Onyx", {"dodge_chance": 0.02, "dexterity": 2}, ("boots", "gloves", "ring")),
    "opal": StoneBase("Opal", {"magic_find": 0.1, "luck": 3}, ("ring", "amulet", "belt")),
    "garnet": StoneBase("Garnet", {"life_steal": 0.03, "strength": 2}, ("weapon", "ring", "amulet")),
    "citrine": StoneBase("Citrine", {"gold_find": 0.15, "luck": 2}, ("ring", "amulet", "belt")),
    "peridot": StoneBase("Peridot", {"experience_bonus": 0.1, "intelligence": 2}, ("helm", "amulet", "ring")),
    "turquoise": StoneBase("Turquoise", {"mana_regen": 0.3, "intelligence": 2}, ("helm", "chest", "amulet")),
}

STONE_BASE_LEVEL_COEF = 0.05


def _new_stone_id() -> str:
    return f"st_{uuid.uuid4().hex[:10]}"


def _scale_stone_base_stats(
    base_stats: Dict[str, float],
    level: int,
    stat_multiplier: float,
    variance: float,
    rng,
) -> Dict[str, float]:
    level_factor = 1 + (max(1, int(level)) - 1) * STONE_BASE_LEVEL_COEF
    scaled: Dict[str, float] = {}
    for stat, value in base_stats.items():
        roll = 1 + rng.uniform(-variance, variance)
        scaled[stat] = max(0.01, round(value * level_factor * stat_multiplier * roll, 2))
    return scaled


def generate_stone(
    level: int,
    is_boss: bool = False,
    rng=None,
    rarity: Optional[str] = None,
    base_type: Optional[str] = None,
) -> Stone:
    """
    Roll a new stone.

    Args:
        level: stone level (the player's level at drop time)
        is_boss: boss kills roll better rarities
        rng: random source
        rarity / base_type: force a value instead of rolling it

    Returns:
        A new Stone
    """
    rng = rng if rng is not None else random
    level = max(1, int(level))

    if rarity is None:
        rarity = roll_stone_rarity(level, is_boss, rng=rng)
    if base_type is None:
        base_type = rng.choice(sorted(STONE_BASES))

    if rarity not in STONE_RARITIES or base_type not in STONE_BASES:
        log.warning(f"Unrecognized stone roll ({rarity!r}, {base_type!r}); regenerating as Common")
        return generate_stone(level, rng=rng, rarity="Common")

    info = get_stone_rarity_info(rarity)
    base = STONE_BASES[base_type]

    base_stats = _scale_stone_base_stats(
        base.base_stats, level, info.stat_multiplier, STONE_BASE_VARIANCE[rarity], rng,
    )
    affixes = tuple(roll_affixes("stone", rarity, level, rng=rng))

    return Stone(
        id=_new_stone_id(),
        name=f"{rarity} {base.name} (L{level})",
        base_type=base_type,
        rarity=rarity,
        level=level,
        base_stats=base_stats,
        affixes=affixes,
        socket_types=base.socket_types,
        value=calculate_stone_value(base_stats, affixes, level, info.stat_multiplier),
    )


def can_socket_stone(stone: Stone, slot: str) -> bool:
    return slot in stone.socket_types

