from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from engine.error_handler import get_logger
from systems.sampling import weighted_choice

log = get_logger("rarity")


# ===================================================================
# Equipment rarity
# ===================================================================

@dataclass(frozen=True)
class RarityInfo:
    """Per-tier roll parameters."""
    name: str
    stat_multiplier: float
    affix_count: Tuple[int, int]       # inclusive range
    variance: float                    # +/- fraction applied to rolled values
    max_sockets: int = 0
    elemental_chance: float = 0.0      # weapons only
    color: Tuple[int, int, int] = (200, 200, 200)


RARITY_ORDER: List[str] = [
    "Common", "Magic", "Rare", "Legendary", "Mythic", "Divine", "Unique",
]

RARITIES: Dict[str, RarityInfo] = {
    "Common": RarityInfo("Common", 1.0, (0, 1), 0.10, 0, 0.1, (200, 200, 200)),
    "Magic": RarityInfo("Magic", 1.3, (1, 2), 0.15, 1, 0.3, (110, 140, 255)),
    "Rare": RarityInfo("Rare", 1.6, (2, 4), 0.20, 1, 0.5, (250, 220, 90)),
    "Legendary": RarityInfo("Legendary", 2.2, (3, 5), 0.25, 2, 0.7, (255, 150, 40)),
    "Mythic": RarityInfo("Mythic", 2.6, (4, 5), 0.30, 2, 0.8, (220, 90, 220)),
    "Divine": RarityInfo("Divine", 3.0, (4, 6), 0.35, 3, 0.9, (255, 240, 180)),
    "Unique": RarityInfo("Unique", 3.0, (4, 6), 0.40, 2, 0.9, (175, 96, 37)),
}

BASE_RARITY_WEIGHTS: Dict[str, float] = {
    "Common": 60,
    "Magic": 25,
    "Rare": 10,
    "Legendary": 4,
    "Mythic": 2,
    "Divine": 1,
    "Unique": 1,
}

# Each non-Common tier gains +1 weight every N character levels.
LEVEL_BONUS_DIVISORS: Dict[str, int] = {
    "Magic": 10,
    "Rare": 15,
    "Legendary": 25,
    "Mythic": 40,
    "Divine": 60,
    "Unique": 80,
}

# Boss kills only boost Rare and better.
BOSS_RARITY_BONUS: Dict[str, float] = {
    "Rare": 10,
    "Legendary": 6,
    "Mythic": 4,
    "Divine": 2,
    "Unique": 2,
}

DEFAULT_RARITY = "Common"


def get_rarity_info(rarity: Optional[str]) -> RarityInfo:
    """Unknown rarity keys resolve to Common."""
    info = RARITIES.get(rarity or "")
    if info is None:
        log.warning(f"Unknown rarity {rarity!r}, using {DEFAULT_RARITY}")
        return RARITIES[DEFAULT_RARITY]
    return info


def rarity_rank(rarity: str) -> int:
    try:
        return RARITY_ORDER.index(rarity)
    except ValueError:
        return 0


def _adjusted_weights(
    base: Dict[str, float],
    divisors: Dict[str, int],
    boss_bonus: Dict[str, float],
    level: int,
    is_boss: bool,
) -> Tuple[Tuple[str, float], ...]:
    out = []
    lvl = max(1, int(level))
    for rarity, weight in base.items():
        w = float(weight)
        divisor = divisors.get(rarity)
        if divisor:
            w += lvl // divisor
        if is_boss:
            w += boss_bonus.get(rarity, 0)
        out.append((rarity, max(1.0, w)))
    return tuple(out)


@lru_cache(maxsize=256)
def rarity_weights(level: int, is_boss: bool = False) -> Tuple[Tuple[str, float], ...]:
    """
    Adjusted (rarity, weight) pairs for a character level / boss flag.

    Weights only go up with level and boss status, so the chance of
    anything >= Rare never drops as the player progresses.
    """
    return _adjusted_weights(
        BASE_RARITY_WEIGHTS, LEVEL_BONUS_DIVISORS, BOSS_RARITY_BONUS, level, is_boss,
    )


def roll_rarity(level: int, is_boss: bool = False, rng=None) -> str:
    entries = rarity_weights(max(1, int(level)), bool(is_boss))
    return weighted_choice(entries, cache_key=f"item-{max(1, int(level))}-{bool(is_boss)}", rng=rng)


# ===================================================================
# Stone rarity
# ===================================================================

STONE_RARITY_ORDER: List[str] = ["Common", "Rare", "Mythical", "Divine"]

STONE_RARITIES: Dict[str, RarityInfo] = {
    "Common": RarityInfo("Common", 1.0, (0, 1), 0.10, color=(156, 163, 175)),
    "Rare": RarityInfo("Rare", 1.5, (1, 2), 0.15, color=(59, 130, 246)),
    "Mythical": RarityInfo("Mythical", 2.0, (2, 3), 0.18, color=(139, 92, 246)),
    "Divine": RarityInfo("Divine", 2.5, (3, 4), 0.20, color=(245, 158, 11)),
}

# Base-stat variance is wider than affix variance on stones.
STONE_BASE_VARIANCE: Dict[str, float] = {
    "Common": 0.10,
    "Rare": 0.15,
    "Mythical": 0.22,
    "Divine": 0.25,
}

BASE_STONE_WEIGHTS: Dict[str, float] = {
    "Common": 60,
    "Rare": 25,
    "Mythical": 12,
    "Divine": 3,
}

STONE_LEVEL_BONUS_DIVISORS: Dict[str, int] = {
    "Rare": 10,
    "Mythical": 20,
    "Divine": 40,
}

STONE_BOSS_BONUS: Dict[str, float] = {
    "Rare": 10,
    "Mythical": 8,
    "Divine": 5,
}


def get_stone_rarity_info(rarity: Optional[str]) -> RarityInfo:
    info = STONE_RARITIES.get(rarity or "")
    if info is None:
        log.warning(f"Unknown stone rarity {rarity!r}, using {DEFAULT_RARITY}")
        return STONE_RARITIES[DEFAULT_RARITY]
    return info


@lru_cache(maxsize=256)
def stone_rarity_weights(level: int, is_boss: bool = False) -> Tuple[Tuple[str, float], ...]:
    return _adjusted_weights(
        BASE_STONE_WEIGHTS, STONE_LEVEL_BONUS_DIVISORS, STONE_BOSS_BONUS, level, is_boss,
    )


def roll_stone_rarity(level: int, is_boss: bool = False, rng=None) -> str:
    entries = stone_rarity_weights(max(1, int(level)), bool(is_boss))
    return weighted_choice(entries, cache_key=f"stone-{max(1, int(level))}-{bool(is_boss)}", rng=rng)
