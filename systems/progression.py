# systems/progression.py

import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from settings import (
    LEVEL_UP_HP_GAIN,
    NEXT_LEVEL_XP_GROWTH,
    SKILL_BAR_SLOTS,
)
from systems.economy import kill_gold, sell_price
from systems.equipment import Equipment
from systems.gems import (
    DEFAULT_SKILL_ID,
    SkillGem,
    SupportGem,
    default_skill_gems,
    default_support_gems,
)
from systems.inventory import Inventory, InventoryItem
from systems.loot import generate_loot
from systems.stats import ATTRIBUTE_BASELINE, CalculatedStats, calculate_player_stats

TALENT_IDS: Tuple[str, ...] = (
    "endurance", "quick", "agility", "strength",
    "precision", "resilience", "fortune", "vitality",
)

BOSS_XP_PER_LEVEL = 12
NORMAL_XP_PER_LEVEL = 4


def _default_skill_bar() -> List[Optional[str]]:
    bar: List[Optional[str]] = [None] * SKILL_BAR_SLOTS
    bar[0] = DEFAULT_SKILL_ID
    return bar


@dataclass
class Player:
    """
    The player record (aggregate root).

    - level, xp, next_level_xp: progression (next_level_xp only grows)
    - hp / mana:     current pools, clamped to the calculated maxima
    - base_*:        values before attributes, talents, passives and gear
    - gold:          never negative
    - equipment:     slot -> Equipment (one per slot)
    - skill_gems / support_gems: owned gems, unique by id
    - skill_bar:     fixed slots holding skill gem *ids* (references)
    - talents:       legacy talent ranks
    - passive_bonuses: additive stat bundle from the passive tree

    `stats` is recomputed from these fields on every access so it can never
    drift from them. Reducers work on copy() and replace the state.
    """
    level: int = 10
    xp: int = 0
    next_level_xp: int = 100
    hp: int = 120
    base_max_hp: int = 120
    mana: int = 50
    base_max_mana: int = 50
    base_damage: float = 2.0
    gold: int = 0
    skill_points: int = 20

    attributes: Dict[str, int] = field(default_factory=lambda: dict(ATTRIBUTE_BASELINE))
    equipment: Dict[str, Equipment] = field(default_factory=dict)
    skill_gems: List[SkillGem] = field(default_factory=default_skill_gems)
    support_gems: List[SupportGem] = field(default_factory=default_support_gems)
    skill_bar: List[Optional[str]] = field(default_factory=_default_skill_bar)
    talents: Dict[str, int] = field(default_factory=lambda: {t: 0 for t in TALENT_IDS})
    passive_bonuses: Dict[str, float] = field(default_factory=dict)

    def copy(self) -> "Player":
        return replace(
            self,
            attributes=dict(self.attributes),
            equipment=dict(self.equipment),
            skill_gems=list(self.skill_gems),
            support_gems=list(self.support_gems),
            skill_bar=list(self.skill_bar),
            talents=dict(self.talents),
            passive_bonuses=dict(self.passive_bonuses),
        )

    # ------------------------------------------------------------------
    # Derived stats
    # ------------------------------------------------------------------

    @property
    def stats(self) -> CalculatedStats:
        return calculate_player_stats(self)

    @property
    def max_hp(self) -> int:
        return self.stats.max_hp

    @property
    def max_mana(self) -> int:
        return self.stats.max_mana

    def clamp_pools(self) -> None:
        """Keep hp/mana within [0, max] after gear or level changes."""
        stats = self.stats
        self.hp = max(0, min(int(self.hp), stats.max_hp))
        self.mana = max(0, min(int(self.mana), stats.max_mana))

    # ------------------------------------------------------------------
    # XP / Level
    # ------------------------------------------------------------------

    def grant_xp(self, amount: int) -> List[str]:
        """
        Give XP, handle level ups, and return text messages describing what happened.

        One large grant can cross several thresholds; every threshold is
        processed here in one call.
        """
        messages: List[str] = []
        amount = int(amount)
        if amount <= 0:
            return messages

        self.xp += amount
        messages.append(f"Gained {amount} XP.")

        while self.xp >= self.next_level_xp:
            self.xp -= self.next_level_xp
            self.level += 1
            self.skill_points += 1
            self.base_max_hp += LEVEL_UP_HP_GAIN
            self.hp = self.max_hp
            self.next_level_xp = int(math.floor(self.next_level_xp * NEXT_LEVEL_XP_GROWTH))
            messages.append(f"Level up! You reached level {self.level}.")

        return messages

    # ------------------------------------------------------------------
    # Gold helpers
    # ------------------------------------------------------------------

    def add_gold(self, amount: int) -> int:
        """
        Add some gold and return how much was actually added.
        """
        amount = int(amount)
        if amount <= 0:
            return 0
        self.gold += amount
        return amount

    def lose_gold(self, amount: int) -> int:
        """Take up to `amount` gold (never below 0). Returns the amount taken."""
        taken = max(0, min(int(amount), self.gold))
        self.gold -= taken
        return taken

    # ------------------------------------------------------------------
    # Gem lookups
    # ------------------------------------------------------------------

    def get_skill_gem(self, gem_id: Optional[str]) -> Optional[SkillGem]:
        for gem in self.skill_gems:
            if gem.id == gem_id:
                return gem
        return None

    def get_support_gem(self, gem_id: Optional[str]) -> Optional[SupportGem]:
        for gem in self.support_gems:
            if gem.id == gem_id:
                return gem
        return None

    def active_skill(self) -> Optional[SkillGem]:
        """First equipped skill on the bar."""
        for gem_id in self.skill_bar:
            gem = self.get_skill_gem(gem_id)
            if gem is not None:
                return gem
        return None

    def equipped_skills(self) -> List[SkillGem]:
        """Skill gems on the bar, in slot order."""
        gems = (self.get_skill_gem(gem_id) for gem_id in self.skill_bar if gem_id is not None)
        return [gem for gem in gems if gem is not None]


# ----------------------------------------------------------------------
# Ledger operations
# ----------------------------------------------------------------------

def grant_xp(player: Player, amount: int) -> Tuple[Player, List[str]]:
    """Copying form of Player.grant_xp: returns (new player, messages)."""
    player = player.copy()
    messages = player.grant_xp(amount)
    return player, messages


def xp_for_kill(level: int, is_boss: bool, experience_bonus: float = 0.0) -> int:
    """Boss: floor(level * 12). Normal: max(1, floor(level * 4))."""
    if is_boss:
        base = math.floor(level * BOSS_XP_PER_LEVEL)
    else:
        base = max(1, math.floor(level * NORMAL_XP_PER_LEVEL))
    return int(math.floor(base * (1.0 + max(0.0, experience_bonus))))


def store_loot(
    player: Player,
    inventory: Inventory,
    items: Sequence[InventoryItem],
) -> Tuple[List[InventoryItem], List[InventoryItem], int]:
    """
    Put drops into the inventory; whatever does not fit is sold on the
    spot. Both happen in this one call so no item is ever lost without
    its gold.

    Returns:
        (stored items, sold items, gold credited)
    """
    stored: List[InventoryItem] = []
    sold: List[InventoryItem] = []
    gold = 0
    for item in items:
        if inventory.add_item(item):
            stored.append(item)
        else:
            sold.append(item)
            gold += player.add_gold(sell_price(item))
    return stored, sold, gold


@dataclass
class VictoryOutcome:
    player: Player
    inventory: Inventory
    loot: List[InventoryItem]
    sold: List[InventoryItem]
    gold: int
    xp: int
    levels_gained: int
    messages: List[str]


def apply_victory(
    player: Player,
    inventory: Inventory,
    enemy,
    rng=None,
) -> VictoryOutcome:
    """
    Apply a defeated enemy to copies of the player and inventory:
    loot -> inventory (overflow auto-sold) -> kill bounty -> XP / level ups.
    The inputs are left untouched.
    """
    player = player.copy()
    inventory = inventory.copy()
    stats = player.stats
    messages: List[str] = []

    loot = generate_loot(enemy.level, is_boss=enemy.is_boss, rng=rng, magic_find=stats.magic_find)
    stored, sold, sold_gold = store_loot(player, inventory, loot)

    if enemy.is_boss:
        messages.append(f"BOSS DEFEATED! {enemy.name} dropped {len(loot)} items.")
    else:
        messages.append(f"Enemy defeated! {enemy.name} dropped {len(loot)} item(s).")
    if sold:
        messages.append(f"Inventory full: auto-sold {len(sold)} item(s) for {sold_gold} gold.")

    bounty = player.add_gold(kill_gold(enemy.level, enemy.is_boss, stats.gold_find))

    xp = xp_for_kill(enemy.level, enemy.is_boss, stats.experience_bonus)
    start_level = player.level
    messages.extend(player.grant_xp(xp))

    return VictoryOutcome(
        player=player,
        inventory=inventory,
        loot=loot,
        sold=sold,
        gold=sold_gold + bounty,
        xp=xp,
        levels_gained=player.level - start_level,
        messages=messages,
    )
