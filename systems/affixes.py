# systems/affixes.py
"""
Affix pools and the affix roller.

Every equipment category (weapon / armor / accessory) and socketable stones
have their own tiered pool. Rolling picks a number of affixes from the pool
by weight, never two on the same stat, and scales each value by item level,
rarity multiplier and a random variance.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from systems.rarity import get_rarity_info, get_stone_rarity_info
from systems.sampling import weighted_choice


# ============================================================================
# Data
# ============================================================================

@dataclass(frozen=True)
class AffixDef:
    """Pool template. Weight only matters while rolling."""
    name: str
    stat: str
    value: float
    tier: int
    weight: float


@dataclass(frozen=True)
class Affix:
    """A rolled affix as it lives on an item."""
    name: str
    stat: str
    value: float
    tier: int

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "stat": self.stat, "value": self.value, "tier": self.tier}

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Affix":
        value = float(data.get("value", 0) or 0)
        if not math.isfinite(value):
            raise ValueError(f"affix value must be finite, got {value!r}")
        return cls(
            name=str(data.get("name", "")),
            stat=str(data.get("stat", "")),
            value=value,
            tier=int(data.get("tier", 1) or 1),
        )


# Stats expressed as fractions (0.05 = 5%). They are floored at 0.01 after
# rolling instead of 1.
FRACTIONAL_STATS = frozenset({
    "crit_chance",
    "crit_multiplier",
    "attack_speed",
    "life_steal",
    "mana_steal",
    "dodge_chance",
    "block_chance",
    "gold_find",
    "magic_find",
    "experience_bonus",
})


def _pool(*rows: Tuple[str, str, float, int, float]) -> List[AffixDef]:
    return [AffixDef(*row) for row in rows]


WEAPON_AFFIXES: List[AffixDef] = _pool(
    ("of Power", "damage", 3, 1, 100),
    ("of Might", "damage", 6, 2, 80),
    ("of Devastation", "damage", 10, 3, 40),
    ("of Destruction", "damage", 15, 4, 20),
    ("of Annihilation", "damage", 22, 5, 10),
    ("of Precision", "crit_chance", 0.03, 1, 80),
    ("of Lethality", "crit_chance", 0.06, 2, 60),
    ("of Execution", "crit_chance", 0.10, 3, 30),
    ("of the Assassin", "crit_chance", 0.15, 4, 15),
    ("of Perfect Strike", "crit_chance", 0.22, 5, 8),
    ("of Sharpness", "crit_multiplier", 0.2, 1, 70),
    ("of Brutality", "crit_multiplier", 0.4, 2, 50),
    ("of Savagery", "crit_multiplier", 0.7, 3, 25),
    ("of Massacre", "crit_multiplier", 1.0, 4, 12),
    ("of Swiftness", "attack_speed", 0.10, 1, 70),
    ("of Haste", "attack_speed", 0.20, 2, 50),
    ("of Lightning", "attack_speed", 0.35, 3, 25),
    ("of the Storm", "attack_speed", 0.50, 4, 12),
    ("of Time Warp", "attack_speed", 0.75, 5, 6),
    ("of Vampirism", "life_steal", 0.03, 1, 60),
    ("of Blood", "life_steal", 0.06, 2, 40),
    ("of the Vampire", "life_steal", 0.10, 3, 20),
    ("of Soul Drain", "life_steal", 0.15, 4, 10),
    ("of Mana Burn", "mana_steal", 0.05, 1, 50),
    ("of Energy Drain", "mana_steal", 0.10, 2, 30),
    ("of the Void", "mana_steal", 0.18, 3, 15),
    ("of the Warrior", "strength", 5, 1, 60),
    ("of the Berserker", "strength", 10, 2, 40),
    ("of the Champion", "strength", 18, 3, 20),
    ("of the Hunter", "dexterity", 5, 1, 60),
    ("of the Ranger", "dexterity", 10, 2, 40),
    ("of the Marksman", "dexterity", 18, 3, 20),
    ("of Thorns", "thorns", 3, 1, 40),
    ("of Spikes", "thorns", 7, 2, 25),
    ("of Retaliation", "thorns", 12, 3, 12),
)

ARMOR_AFFIXES: List[AffixDef] = _pool(
    ("of Protection", "armor", 2, 1, 100),
    ("of Defense", "armor", 4, 2, 80),
    ("of the Fortress", "armor", 7, 3, 40),
    ("of the Bastion", "armor", 12, 4, 20),
    ("of Invincibility", "armor", 18, 5, 10),
    ("of Vitality", "health", 15, 1, 90),
    ("of Life", "health", 30, 2, 70),
    ("of the Titan", "health", 50, 3, 35),
    ("of the Colossus", "health", 80, 4, 18),
    ("of Immortality", "health", 120, 5, 8),
    ("of Evasion", "dodge_chance", 0.02, 1, 70),
    ("of Agility", "dodge_chance", 0.04, 2, 50),
    ("of the Wind", "dodge_chance", 0.07, 3, 25),
    ("of the Phantom", "dodge_chance", 0.12, 4, 12),
    ("of Ethereal Form", "dodge_chance", 0.18, 5, 6),
    ("of Blocking", "block_chance", 0.05, 1, 60),
    ("of the Shield", "block_chance", 0.10, 2, 40),
    ("of the Guardian", "block_chance", 0.16, 3, 20),
    ("of Perfect Defense", "block_chance", 0.25, 4, 10),
    ("of Regeneration", "health_regen", 1, 1, 60),
    ("of Recovery", "health_regen", 2, 2, 40),
    ("of Renewal", "health_regen", 4, 3, 20),
    ("of Restoration", "health_regen", 7, 4, 10),
    ("of Eternal Life", "health_regen", 12, 5, 5),
    ("of Mana", "mana", 20, 1, 70),
    ("of the Mind", "mana", 40, 2, 50),
    ("of Arcane Power", "mana", 70, 3, 25),
    ("of the Archmage", "mana", 110, 4, 12),
    ("of Meditation", "mana_regen", 1, 1, 50),
    ("of Focus", "mana_regen", 2, 2, 30),
    ("of Enlightenment", "mana_regen", 4, 3, 15),
    ("of the Bear", "vitality", 5, 1, 70),
    ("of the Ox", "vitality", 10, 2, 50),
    ("of the Mountain", "vitality", 18, 3, 25),
    ("of the Sage", "intelligence", 5, 1, 60),
    ("of the Scholar", "intelligence", 10, 2, 40),
    ("of the Wizard", "intelligence", 18, 3, 20),
    ("of Spines", "thorns", 2, 1, 50),
    ("of Barbs", "thorns", 5, 2, 30),
    ("of the Hedgehog", "thorns", 9, 3, 15),
)

ACCESSORY_AFFIXES: List[AffixDef] = _pool(
    ("of Strength", "strength", 3, 1, 80),
    ("of Great Strength", "strength", 6, 2, 60),
    ("of Mighty Strength", "strength", 10, 3, 30),
    ("of Legendary Strength", "strength", 16, 4, 15),
    ("of Divine Strength", "strength", 25, 5, 8),
    ("of Dexterity", "dexterity", 3, 1, 80),
    ("of Great Dexterity", "dexterity", 6, 2, 60),
    ("of Swift Dexterity", "dexterity", 10, 3, 30),
    ("of Perfect Dexterity", "dexterity", 16, 4, 15),
    ("of Divine Grace", "dexterity", 25, 5, 8),
    ("of Intelligence", "intelligence", 3, 1, 80),
    ("of Great Intelligence", "intelligence", 6, 2, 60),
    ("of Brilliant Intelligence", "intelligence", 10, 3, 30),
    ("of Genius Intelligence", "intelligence", 16, 4, 15),
    ("of Omniscience", "intelligence", 25, 5, 8),
    ("of Vitality", "vitality", 3, 1, 80),
    ("of Great Vitality", "vitality", 6, 2, 60),
    ("of Robust Vitality", "vitality", 10, 3, 30),
    ("of Supreme Vitality", "vitality", 16, 4, 15),
    ("of Eternal Vitality", "vitality", 25, 5, 8),
    ("of Luck", "luck", 3, 1, 60),
    ("of Good Luck", "luck", 6, 2, 40),
    ("of Great Luck", "luck", 10, 3, 20),
    ("of Incredible Luck", "luck", 16, 4, 10),
    ("of Divine Fortune", "luck", 25, 5, 5),
    ("of Fortune", "gold_find", 0.15, 1, 70),
    ("of Wealth", "gold_find", 0.25, 2, 50),
    ("of Greed", "gold_find", 0.40, 3, 25),
    ("of Avarice", "gold_find", 0.60, 4, 12),
    ("of Midas", "gold_find", 0.85, 5, 6),
    ("of Discovery", "magic_find", 0.10, 1, 60),
    ("of Finding", "magic_find", 0.20, 2, 40),
    ("of the Seeker", "magic_find", 0.35, 3, 20),
    ("of the Treasure Hunter", "magic_find", 0.55, 4, 10),
    ("of the Artifact Finder", "magic_find", 0.80, 5, 5),
    ("of Learning", "experience_bonus", 0.10, 1, 50),
    ("of Wisdom", "experience_bonus", 0.20, 2, 30),
    ("of the Scholar", "experience_bonus", 0.35, 3, 15),
)

STONE_AFFIXES: List[AffixDef] = _pool(
    ("of Power", "damage", 2, 1, 80),
    ("of Might", "damage", 4, 2, 60),
    ("of Force", "damage", 7, 3, 40),
    ("of Devastation", "damage", 12, 4, 20),
    ("of Life", "health", 15, 1, 80),
    ("of Vitality", "health", 30, 2, 60),
    ("of the Titan", "health", 50, 3, 40),
    ("of Immortality", "health", 80, 4, 20),
    ("of Energy", "mana", 20, 1, 70),
    ("of the Mind", "mana", 40, 2, 50),
    ("of Wisdom", "mana", 65, 3, 30),
    ("of the Arcane", "mana", 100, 4, 15),
    ("of Strength", "strength", 2, 1, 70),
    ("of Great Strength", "strength", 4, 2, 50),
    ("of Superior Strength", "strength", 7, 3, 30),
    ("of Dexterity", "dexterity", 2, 1, 70),
    ("of Great Dexterity", "dexterity", 4, 2, 50),
    ("of Superior Dexterity", "dexterity", 7, 3, 30),
    ("of Intelligence", "intelligence", 2, 1, 70),
    ("of Great Intelligence", "intelligence", 4, 2, 50),
    ("of Superior Intelligence", "intelligence", 7, 3, 30),
    ("of Vitality", "vitality", 2, 1, 70),
    ("of Great Vitality", "vitality", 4, 2, 50),
    ("of Superior Vitality", "vitality", 7, 3, 30),
    ("of Luck", "luck", 2, 1, 60),
    ("of Fortune", "luck", 4, 2, 40),
    ("of Destiny", "luck", 7, 3, 20),
    ("of Precision", "crit_chance", 0.015, 1, 60),
    ("of Accuracy", "crit_chance", 0.03, 2, 40),
    ("of the Eagle", "crit_chance", 0.05, 3, 20),
    ("of Evasion", "dodge_chance", 0.015, 1, 50),
    ("of the Cat", "dodge_chance", 0.03, 2, 30),
    ("of the Shadow", "dodge_chance", 0.05, 3, 15),
    ("of Speed", "attack_speed", 0.05, 1, 50),
    ("of Swiftness", "attack_speed", 0.10, 2, 30),
    ("of Lightning", "attack_speed", 0.18, 3, 15),
    ("of Wealth", "gold_find", 0.10, 1, 40),
    ("of Greed", "gold_find", 0.20, 2, 25),
    ("of Avarice", "gold_find", 0.35, 3, 12),
    ("of Discovery", "magic_find", 0.08, 1, 35),
    ("of Finding", "magic_find", 0.15, 2, 20),
    ("of the Seeker", "magic_find", 0.25, 3, 10),
    ("of Learning", "experience_bonus", 0.08, 1, 30),
    ("of Wisdom", "experience_bonus", 0.15, 2, 18),
    ("of the Scholar", "experience_bonus", 0.25, 3, 8),
)

AFFIX_POOLS: Dict[str, List[AffixDef]] = {
    "weapon": WEAPON_AFFIXES,
    "armor": ARMOR_AFFIXES,
    "accessory": ACCESSORY_AFFIXES,
    "stone": STONE_AFFIXES,
}

MAX_TIER: Dict[str, int] = {
    "weapon": 5,
    "armor": 5,
    "accessory": 5,
    "stone": 4,
}

# Levels per unlocked tier. Stones unlock tiers more slowly than gear.
TIER_LEVEL_STEP: Dict[str, int] = {
    "weapon": 10,
    "armor": 10,
    "accessory": 10,
    "stone": 15,
}

# Per-level growth of affix values.
EQUIPMENT_AFFIX_LEVEL_COEF = 0.05
STONE_AFFIX_LEVEL_COEF = 0.03


# ============================================================================
# Rolling
# ============================================================================

def max_tier_for(category: str, level: int) -> int:
    """Highest tier available to a category at a level."""
    step = TIER_LEVEL_STEP.get(category, 10)
    return min(MAX_TIER.get(category, 5), max(1, int(level)) // step + 1)


def scale_affix_value(
    base_value: float,
    stat: str,
    level: int,
    stat_multiplier: float,
    variance: float,
    is_stone: bool = False,
    rng=None,
) -> float:
    """
    base * (1 + (level - 1) * coef) * rarity multiplier * (1 +/- variance),
    rounded to 2 decimals. Flat stats are floored at 1; fractional stats
    and all stone affixes at 0.01.
    """
    rng = rng if rng is not None else random
    coef = STONE_AFFIX_LEVEL_COEF if is_stone else EQUIPMENT_AFFIX_LEVEL_COEF
    level_factor = 1 + (max(1, int(level)) - 1) * coef
    roll = 1 + rng.uniform(-variance, variance)
    value = round(base_value * level_factor * stat_multiplier * roll, 2)

    floor = 0.01 if (is_stone or stat in FRACTIONAL_STATS) else 1
    return max(floor, value)


def roll_affixes(
    category: str,
    rarity: str,
    level: int,
    rng=None,
) -> List[Affix]:
    """
    Roll the affixes for a freshly generated item.

    Args:
        category: "weapon", "armor", "accessory" or "stone"
        rarity: item rarity (stone rarities for category "stone")
        level: item level
        rng: random source (random.Random or the random module)

    Returns:
        List of Affix with pairwise distinct stats. The list can be shorter
        than the rolled count when the pool runs out of unused stats.
    """
    rng = rng if rng is not None else random
    is_stone = category == "stone"
    info = get_stone_rarity_info(rarity) if is_stone else get_rarity_info(rarity)
    pool = AFFIX_POOLS.get(category, [])

    lo, hi = info.affix_count
    count = rng.randint(lo, hi)
    if count <= 0 or not pool:
        return []

    tier_cap = max_tier_for(category, level)
    available = [a for a in pool if a.tier <= tier_cap]

    rolled: List[Affix] = []
    used_stats = set()
    for _ in range(count):
        candidates = [a for a in available if a.stat not in used_stats]
        if not candidates:
            break
        picked: AffixDef = weighted_choice([(a, a.weight) for a in candidates], rng=rng)
        used_stats.add(picked.stat)
        rolled.append(Affix(
            name=picked.name,
            stat=picked.stat,
            value=scale_affix_value(
                picked.value, picked.stat, level,
                info.stat_multiplier, info.variance,
                is_stone=is_stone, rng=rng,
            ),
            tier=picked.tier,
        ))

    return rolled


def strongest_affix(affixes: List[Affix]) -> Optional[Affix]:
    """Highest-tier affix (first one wins ties)."""
    best: Optional[Affix] = None
    for affix in affixes:
        if best is None or affix.tier > best.tier:
            best = affix
    return best
