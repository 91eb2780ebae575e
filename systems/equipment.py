# systems/equipment.py
"""
Equipment model and generator.

Generation pipeline:
1. Roll rarity (level / boss conditioned)
2. Pick a category (weapon / armor / accessory) and a base type
3. Weapons pick a damage type; better rarities lean elemental
4. Scale each base stat by level, rarity and its own variance roll
5. Roll affixes
6. Build the display name
7. Compute the gold value and the socket count
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Tuple

from engine.error_handler import get_logger
from systems.affixes import Affix, roll_affixes, strongest_affix
from systems.economy import calculate_equipment_value
from systems.rarity import RARITIES, get_rarity_info, roll_rarity
from systems.stones import Stone, can_socket_stone

log = get_logger("equipment")


# ============================================================================
# Data
# ============================================================================

EQUIPMENT_SLOTS: Tuple[str, ...] = (
    "weapon", "offhand", "helm", "chest", "legs",
    "boots", "gloves", "ring", "amulet", "belt",
)

DAMAGE_TYPES: Tuple[str, ...] = ("physical", "fire", "ice", "lightning", "poison")


@dataclass(frozen=True)
class EquipmentBase:
    name: str
    slot: str
    category: str
    base_stats: Dict[str, float]
    damage_types: Tuple[str, ...] = ()
    requirements: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Equipment:
    """
    A generated piece of gear.

    Everything except socket contents is fixed at generation time.
    Socketing produces a new Equipment via socket_stone().
    """
    id: str
    name: str
    base_type: str
    slot: str
    category: str
    rarity: str
    level: int
    base_stats: Dict[str, float] = field(default_factory=dict)
    affixes: Tuple[Affix, ...] = ()
    damage_type: Optional[str] = None
    requirements: Dict[str, int] = field(default_factory=dict)
    value: int = 1
    max_sockets: int = 0
    sockets: Tuple[Stone, ...] = ()

    kind = "equipment"

    @property
    def free_sockets(self) -> int:
        return max(0, self.max_sockets - len(self.sockets))

    def all_stats(self) -> Dict[str, float]:
        """Base stats, affixes and socketed stones folded into one map."""
        totals: Dict[str, float] = dict(self.base_stats)
        for affix in self.affixes:
            totals[affix.stat] = totals.get(affix.stat, 0.0) + affix.value
        for stone in self.sockets:
            for stat, value in stone.all_stats().items():
                totals[stat] = totals.get(stat, 0.0) + value
        return totals


WEAPON_BASES: Dict[str, EquipmentBase] = {
    "sword": EquipmentBase("Sword", "weapon", "weapon", {"damage": 8}, ("physical", "fire", "ice", "lightning")),
    "axe": EquipmentBase("Axe", "weapon", "weapon", {"damage": 12, "crit_chance": 0.05}, ("physical", "fire")),
    "mace": EquipmentBase("Mace", "weapon", "weapon", {"damage": 10, "armor": 2}, ("physical", "lightning")),
    "dagger": EquipmentBase(
        "Dagger", "weapon", "weapon",
        {"damage": 6, "crit_chance": 0.1, "attack_speed": 0.3}, ("physical", "poison"),
    ),
    "bow": EquipmentBase("Bow", "weapon", "weapon", {"damage": 9, "crit_chance": 0.08}, ("physical", "fire", "ice", "poison")),
    "crossbow": EquipmentBase("Crossbow", "weapon", "weapon", {"damage": 14, "crit_chance": 0.06}, ("physical", "lightning")),
    "staff": EquipmentBase(
        "Staff", "weapon", "weapon",
        {"damage": 7, "mana": 20, "mana_regen": 2}, ("fire", "ice", "lightning"),
    ),
    "wand": EquipmentBase(
        "Wand", "weapon", "weapon",
        {"damage": 5, "mana": 15, "crit_chance": 0.07}, ("fire", "ice", "lightning", "poison"),
    ),
}

ARMOR_BASES: Dict[str, EquipmentBase] = {
    "helm": EquipmentBase("Helm", "helm", "armor", {"armor": 5, "health": 15}),
    "chest": EquipmentBase("Chest Armor", "chest", "armor", {"armor": 12, "health": 30}),
    "legs": EquipmentBase("Leg Armor", "legs", "armor", {"armor": 8, "health": 20}),
    "boots": EquipmentBase("Boots", "boots", "armor", {"armor": 4, "dodge_chance": 0.02}),
    "gloves": EquipmentBase("Gloves", "gloves", "armor", {"armor": 3, "attack_speed": 0.1}),
    "shield": EquipmentBase("Shield", "offhand", "armor", {"armor": 8, "block_chance": 0.15}),
}

ACCESSORY_BASES: Dict[str, EquipmentBase] = {
    "ring": EquipmentBase("Ring", "ring", "accessory", {}),
    "amulet": EquipmentBase("Amulet", "amulet", "accessory", {}),
    "belt": EquipmentBase("Belt", "belt", "accessory", {"health": 10}),
}

BASES_BY_CATEGORY: Dict[str, Dict[str, EquipmentBase]] = {
    "weapon": WEAPON_BASES,
    "armor": ARMOR_BASES,
    "accessory": ACCESSORY_BASES,
}

ALL_BASES: Dict[str, EquipmentBase] = {**WEAPON_BASES, **ARMOR_BASES, **ACCESSORY_BASES}

ELEMENT_PREFIXES: Dict[str, Tuple[str, ...]] = {
    "fire": ("Burning", "Flaming", "Infernal", "Phoenix"),
    "ice": ("Frozen", "Glacial", "Frost", "Winter"),
    "lightning": ("Shocking", "Storm", "Thunder", "Volt"),
    "poison": ("Venomous", "Toxic", "Plague", "Serpent"),
}

BASE_STAT_LEVEL_COEF = 0.1


# ============================================================================
# Generation steps
# ============================================================================

def category_chances(level: int) -> Tuple[float, float, float]:
    """(weapon, armor, accessory) probabilities. Early game leans weapons."""
    weapon = max(0.3, 0.6 - level * 0.01)
    armor = min(0.5, 0.3 + level * 0.008)
    return weapon, armor, max(0.0, 1.0 - weapon - armor)


def choose_base(level: int, rng) -> Tuple[str, str]:
    """Returns (category, base_type)."""
    weapon, armor, _ = category_chances(level)
    roll = rng.random()
    if roll < weapon:
        category = "weapon"
    elif roll < weapon + armor:
        category = "armor"
    else:
        category = "accessory"
    return category, rng.choice(list(BASES_BY_CATEGORY[category]))


def choose_damage_type(base: EquipmentBase, rarity: str, rng) -> Optional[str]:
    if base.category != "weapon":
        return None
    options = base.damage_types or ("physical",)
    elementals = [t for t in options if t != "physical"]
    if "physical" not in options:
        # Caster weapons are always elemental
        return rng.choice(elementals)
    if elementals and rng.random() < get_rarity_info(rarity).elemental_chance:
        return rng.choice(elementals)
    return "physical"


def scale_base_stats(
    base_stats: Mapping[str, float],
    level: int,
    stat_multiplier: float,
    variance: float,
    rng,
) -> Dict[str, float]:
    """Each stat gets its own variance roll."""
    level_factor = 1 + (max(1, int(level)) - 1) * BASE_STAT_LEVEL_COEF
    scaled: Dict[str, float] = {}
    for stat, value in base_stats.items():
        roll = 1 + rng.uniform(-variance, variance)
        scaled[stat] = round(value * level_factor * stat_multiplier * roll, 2)
    return scaled


def build_equipment_name(
    base: EquipmentBase,
    rarity: str,
    level: int,
    damage_type: Optional[str],
    affixes: List[Affix],
    rng,
) -> str:
    """
    "{Rarity} {ElementPrefix} {Base} {StrongestAffix} [ELEMENT] (L{level})"

    Element prefix / tag only for non-physical weapons, affix suffix only
    for non-Common items.
    """
    name = base.name
    elemental = damage_type is not None and damage_type != "physical"
    if elemental and damage_type in ELEMENT_PREFIXES:
        name = f"{rng.choice(ELEMENT_PREFIXES[damage_type])} {name}"

    if affixes and rarity != "Common":
        best = strongest_affix(affixes)
        if best is not None:
            name = f"{name} {best.name}"

    element_tag = f" [{damage_type.upper()}]" if elemental else ""
    return f"{rarity} {name}{element_tag} (L{level})"


def _new_equipment_id() -> str:
    return f"eq_{uuid.uuid4().hex[:10]}"


# ============================================================================
# Public API
# ============================================================================

def generate_equipment(
    level: int,
    is_boss: bool = False,
    rng=None,
    rarity: Optional[str] = None,
    base_type: Optional[str] = None,
) -> Equipment:
    """
    Roll a new piece of equipment.

    Args:
        level: item level (the player's level at drop time)
        is_boss: boss kills roll better rarities
        rng: random source (random.Random or the random module)
        rarity / base_type: force a value instead of rolling it

    Returns:
        A new Equipment. An unrecognized rarity or base type is logged and
        the item is regenerated as Common.
    """
    rng = rng if rng is not None else random
    level = max(1, int(level))

    if rarity is None:
        rarity = roll_rarity(level, is_boss, rng=rng)
    if base_type is None:
        _, base_type = choose_base(level, rng)

    if rarity not in RARITIES or base_type not in ALL_BASES:
        log.warning(f"Unrecognized equipment roll ({rarity!r}, {base_type!r}); regenerating as Common")
        return generate_equipment(level, rng=rng, rarity="Common")

    info = RARITIES[rarity]
    base = ALL_BASES[base_type]

    damage_type = choose_damage_type(base, rarity, rng)
    base_stats = scale_base_stats(base.base_stats, level, info.stat_multiplier, info.variance, rng)
    affixes = roll_affixes(base.category, rarity, level, rng=rng)
    name = build_equipment_name(base, rarity, level, damage_type, affixes, rng)

    return Equipment(
        id=_new_equipment_id(),
        name=name,
        base_type=base_type,
        slot=base.slot,
        category=base.category,
        rarity=rarity,
        level=level,
        base_stats=base_stats,
        affixes=tuple(affixes),
        damage_type=damage_type,
        requirements=dict(base.requirements),
        value=calculate_equipment_value(base_stats, affixes, level, info.stat_multiplier),
        max_sockets=info.max_sockets,
    )


def can_equip(item: Equipment, attributes: Mapping[str, int]) -> bool:
    """True if every attribute requirement is met."""
    return all(attributes.get(attr, 0) >= need for attr, need in item.requirements.items())


def socket_stone(item: Equipment, stone: Stone) -> Optional[Equipment]:
    """
    Return a copy of the item with the stone socketed, or None if the stone
    does not fit the slot or no socket is free.
    """
    if not can_socket_stone(stone, item.slot):
        return None
    if item.free_sockets <= 0:
        return None
    return replace(item, sockets=item.sockets + (stone,))

