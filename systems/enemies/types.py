"""
Enemy type definitions.

Contains the Enemy dataclass and the per-type tables (names, HP
multipliers, ability pools) used by spawning.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple


ENEMY_TYPES: Tuple[str, ...] = ("melee", "ranged", "caster", "tank", "assassin", "boss")

SPECIAL_ABILITIES: Tuple[str, ...] = (
    "berserker", "precise", "regeneration", "shield", "poison", "freeze", "lightning", "split",
)


@dataclass(frozen=True)
class Enemy:
    """
    One enemy in the active encounter.

    - id:        unique, "e{n}" from a monotonic counter ("e{n}_split_{i}" for splits)
    - hp:        0 <= hp <= max_hp; 0 means dead pending removal
    - armor:     flat armor used by damage mitigation
    - resistances: damage type -> multiplier on incoming damage (1.0 = none)
    - split_count: pieces spawned on death by the "split" ability
    """
    id: str
    name: str
    level: int
    hp: int
    max_hp: int
    type: str = "melee"
    special_ability: Optional[str] = None
    is_boss: bool = False
    armor: int = 0
    resistances: Dict[str, float] = field(default_factory=dict)
    split_count: int = 0

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def accuracy(self) -> float:
        """Subtracted from the player's dodge chance."""
        bonus = 0.05 if self.type == "assassin" else 0.0
        return self.level * 0.002 + bonus

    def with_hp(self, hp: int) -> "Enemy":
        return replace(self, hp=max(0, min(self.max_hp, int(hp))))


ENEMY_NAMES: Dict[str, Tuple[str, ...]] = {
    "melee": ("Goblin", "Orc Warrior", "Skeleton Fighter", "Bandit", "Troll"),
    "ranged": ("Goblin Archer", "Orc Hunter", "Skeleton Archer", "Bandit Marksman", "Dark Elf"),
    "caster": ("Goblin Shaman", "Orc Mage", "Necromancer", "Dark Wizard", "Lich"),
    "tank": ("Orc Guardian", "Stone Golem", "Armored Knight", "Shield Bearer", "Iron Colossus"),
    "assassin": ("Shadow Rogue", "Dark Assassin", "Poison Blade", "Night Stalker", "Void Walker"),
    "boss": ("Goblin King", "Orc Chieftain", "Lich Lord", "Dragon", "Demon Lord"),
}

HP_MULTIPLIERS: Dict[str, float] = {
    "tank": 1.8,
    "boss": 3.5,
    "assassin": 0.7,
    "caster": 0.9,
}

ARMOR_PER_LEVEL: Dict[str, float] = {
    "tank": 0.3,
    "boss": 0.5,
}

RESISTANCES: Dict[str, Dict[str, float]] = {
    "tank": {"physical": 0.9},
    "caster": {"fire": 0.85, "ice": 0.85, "lightning": 0.85},
    "boss": {"physical": 0.9, "fire": 0.9, "ice": 0.9, "lightning": 0.9, "poison": 0.9},
}

# Counter-attack base damage factor by type (before +0.5 per level).
COUNTER_BASE: Dict[str, float] = {
    "melee": 0.9,
    "ranged": 0.75,
}

# Type-biased ability picks for non-boss enemies: (threshold, ability) walked
# in order against one roll; the last entry catches everything else.
TYPE_ABILITY_TABLE: Dict[str, Tuple[Tuple[float, str], ...]] = {
    "melee": ((0.5, "berserker"), (0.8, "precise"), (1.0, "split")),
    "ranged": ((0.7, "precise"), (1.0, "poison")),
    "caster": ((0.5, "lightning"), (1.0, "freeze")),
    "tank": ((0.8, "shield"), (1.0, "regeneration")),
    "assassin": ((0.6, "poison"), (1.0, "precise")),
}
