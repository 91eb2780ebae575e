"""
Game state and its reducer.

GameState is an immutable snapshot (player, active enemies, inventory,
combat log). reduce() takes a state and one action and returns the next
state; it never mutates its input. The player and inventory are mutable
records, so every handler works on copies before building the new state.

Actions that reference something that no longer exists (an enemy id, an
inventory item, an empty slot) are no-ops: the same state object comes
back so callers can skip persistence.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from settings import (
    BASE_COMBAT_INTERVAL_MS,
    MAX_ENEMIES,
    MIN_COMBAT_INTERVAL_MS,
    QUICK_TALENT_SPEEDUP,
)
from engine.battle.combat import resolve_combat_tick
from engine.error_handler import get_logger
from engine.message_log import push_message
from systems import skills
from systems.economy import sell_price
from systems.enemies import Enemy, spawn_enemy, split_on_death
from systems.equipment import Equipment, can_equip, socket_stone
from systems.inventory import Inventory
from systems.progression import Player, apply_victory
from systems.skill_combinations import active_combinations, combination_bonuses
from systems.stones import Stone

log = get_logger("state")

# (event name, payload) pairs describing what the last action did
Event = Tuple[str, Dict[str, Any]]


@dataclass(frozen=True)
class GameState:
    player: Player = field(default_factory=Player)
    enemies: Tuple[Enemy, ...] = ()
    inventory: Inventory = field(default_factory=Inventory)
    log: Tuple[str, ...] = ()
    # Events produced by the most recent action (read by the driver)
    events: Tuple[Event, ...] = ()

    def get_enemy(self, enemy_id: str) -> Optional[Enemy]:
        for enemy in self.enemies:
            if enemy.id == enemy_id:
                return enemy
        return None


def new_game_state() -> GameState:
    return GameState()


# ============================================================================
# Actions
# ============================================================================

@dataclass(frozen=True)
class Spawn:
    enemy: Optional[Enemy] = None
    kind: Optional[str] = None
    limit: int = MAX_ENEMIES


@dataclass(frozen=True)
class CombatTick:
    enemy_id: str
    limit: int = MAX_ENEMIES


@dataclass(frozen=True)
class RemoveEnemy:
    enemy_id: str


@dataclass(frozen=True)
class EquipItem:
    item_id: str


@dataclass(frozen=True)
class UnequipItem:
    slot: str


@dataclass(frozen=True)
class DiscardItem:
    item_id: str


@dataclass(frozen=True)
class SellItem:
    item_id: str


@dataclass(frozen=True)
class SocketStone:
    stone_id: str
    slot: str


@dataclass(frozen=True)
class UpgradeTalent:
    talent: str


@dataclass(frozen=True)
class EquipSkill:
    slot_index: int
    gem_id: str


@dataclass(frozen=True)
class UnequipSkill:
    slot_index: int


@dataclass(frozen=True)
class AttachSupport:
    skill_id: str
    support_id: str


@dataclass(frozen=True)
class DetachSupport:
    skill_id: str
    support_id: str


@dataclass(frozen=True)
class LevelUpGem:
    gem_id: str


@dataclass(frozen=True)
class LogMessage:
    message: str


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Load:
    state: GameState


# ============================================================================
# Helpers
# ============================================================================

def _with_messages(state: GameState, messages: List[str], **changes) -> GameState:
    changes.setdefault("events", ())
    entries = state.log
    for message in messages:
        entries = push_message(entries, message)
    return replace(state, log=entries, **changes)


def combat_interval_ms(player: Player) -> int:
    """
    Delay between combat batches:
    max(300, round(1000 / (1 + quick * 0.05 + attack speed bonus))).
    Skill combinations with a speed bonus add to the attack speed bonus.
    """
    quick = player.talents.get("quick", 0)
    combos = combination_bonuses(active_combinations(player.equipped_skills(), player.level))
    speed_bonus = player.stats.attack_speed - 1.0 + (combos.speed - 1.0)
    divisor = max(0.01, 1.0 + quick * QUICK_TALENT_SPEEDUP + speed_bonus)
    return max(MIN_COMBAT_INTERVAL_MS, int(round(BASE_COMBAT_INTERVAL_MS / divisor)))


def _player_action(state: GameState, fn: Callable[..., str], *args) -> GameState:
    """Run a systems.skills helper on a player copy and log its message."""
    player = state.player.copy()
    message = fn(player, *args)
    if player == state.player:
        return _with_messages(state, [message]) if message else state
    return _with_messages(state, [message], player=player)


# ============================================================================
# Handlers
# ============================================================================

def _spawn(state: GameState, action: Spawn, rng) -> GameState:
    if len(state.enemies) >= action.limit:
        return state
    enemy = action.enemy
    if enemy is None:
        enemy = spawn_enemy(state.player.level, kind=action.kind, rng=rng)
    if state.get_enemy(enemy.id) is not None:
        log.warning(f"Ignoring spawn with duplicate id {enemy.id}")
        return state
    message = f"A {enemy.name} appears!" if not enemy.is_boss else f"{enemy.name} has arrived!"
    return _with_messages(state, [message], enemies=state.enemies + (enemy,))


def _combat_tick(state: GameState, action: CombatTick, rng) -> GameState:
    enemy = state.get_enemy(action.enemy_id)
    if enemy is None or not enemy.is_alive:
        return state

    result = resolve_combat_tick(state.player, enemy, rng=rng)
    messages = [result.message]
    events: List[Event] = []

    if not result.enemy_defeated:
        enemies = tuple(result.enemy if e.id == enemy.id else e for e in state.enemies)
        return _with_messages(state, messages, player=result.player, enemies=enemies, events=())

    outcome = apply_victory(result.player, state.inventory, result.enemy, rng=rng)
    messages.extend(outcome.messages)

    survivors = tuple(e for e in state.enemies if e.id != enemy.id)
    room = max(0, action.limit - len(survivors))
    pieces = tuple(split_on_death(result.enemy)[:room])
    if pieces:
        messages.append(f"{enemy.name} splits into {len(pieces)} pieces!")

    events.append(("enemy_defeated", {
        "enemy_id": enemy.id,
        "name": enemy.name,
        "level": enemy.level,
        "is_boss": enemy.is_boss,
        "xp": outcome.xp,
        "gold": outcome.gold,
    }))
    for item in outcome.loot:
        events.append(("loot_drop", {"item": item, "sold": item in outcome.sold}))
    if outcome.levels_gained:
        events.append(("level_up", {
            "level": outcome.player.level,
            "levels_gained": outcome.levels_gained,
        }))

    return _with_messages(
        state,
        messages,
        player=outcome.player,
        inventory=outcome.inventory,
        enemies=survivors + pieces,
        events=tuple(events),
    )


def _remove_enemy(state: GameState, action: RemoveEnemy, rng) -> GameState:
    if state.get_enemy(action.enemy_id) is None:
        return state
    return replace(
        state,
        enemies=tuple(e for e in state.enemies if e.id != action.enemy_id),
        events=(),
    )


def _equip_item(state: GameState, action: EquipItem, rng) -> GameState:
    item = state.inventory.get(action.item_id)
    if not isinstance(item, Equipment):
        return state
    player = state.player.copy()
    if not can_equip(item, player.stats.attributes):
        return _with_messages(state, [f"You do not meet the requirements for {item.name}."])

    inventory = state.inventory.copy()
    inventory.remove_item(item.id)
    previous = player.equipment.get(item.slot)
    if previous is not None:
        inventory.add_item(previous)
    player.equipment[item.slot] = item
    player.clamp_pools()
    return _with_messages(state, [f"Equipped {item.name}."], player=player, inventory=inventory)


def _unequip_item(state: GameState, action: UnequipItem, rng) -> GameState:
    item = state.player.equipment.get(action.slot)
    if item is None:
        return state
    if state.inventory.is_full():
        return _with_messages(state, ["Inventory is full."])
    player = state.player.copy()
    inventory = state.inventory.copy()
    del player.equipment[action.slot]
    inventory.add_item(item)
    player.clamp_pools()
    return _with_messages(state, [f"Unequipped {item.name}."], player=player, inventory=inventory)


def _discard_item(state: GameState, action: DiscardItem, rng) -> GameState:
    if state.inventory.get(action.item_id) is None:
        return state
    inventory = state.inventory.copy()
    item = inventory.remove_item(action.item_id)
    return _with_messages(state, [f"Discarded {item.name}."], inventory=inventory)


def _sell_item(state: GameState, action: SellItem, rng) -> GameState:
    if state.inventory.get(action.item_id) is None:
        return state
    inventory = state.inventory.copy()
    player = state.player.copy()
    item = inventory.remove_item(action.item_id)
    gold = player.add_gold(sell_price(item))
    return _with_messages(
        state, [f"Sold {item.name} for {gold} gold."], player=player, inventory=inventory,
    )


def _socket_stone(state: GameState, action: SocketStone, rng) -> GameState:
    stone = state.inventory.get(action.stone_id)
    item = state.player.equipment.get(action.slot)
    if not isinstance(stone, Stone) or item is None:
        return state
    socketed = socket_stone(item, stone)
    if socketed is None:
        return _with_messages(state, [f"{stone.name} does not fit {item.name}."])

    player = state.player.copy()
    inventory = state.inventory.copy()
    inventory.remove_item(stone.id)
    player.equipment[action.slot] = socketed
    player.clamp_pools()
    return _with_messages(
        state, [f"Socketed {stone.name} into {item.name}."], player=player, inventory=inventory,
    )


def _log_message(state: GameState, action: LogMessage, rng) -> GameState:
    return _with_messages(state, [action.message])


def _reset(state: GameState, action: Reset, rng) -> GameState:
    return new_game_state()


def _load(state: GameState, action: Load, rng) -> GameState:
    return replace(action.state, events=())


_HANDLERS: Dict[type, Callable[[GameState, Any, Any], GameState]] = {
    Spawn: _spawn,
    CombatTick: _combat_tick,
    RemoveEnemy: _remove_enemy,
    EquipItem: _equip_item,
    UnequipItem: _unequip_item,
    DiscardItem: _discard_item,
    SellItem: _sell_item,
    SocketStone: _socket_stone,
    UpgradeTalent: lambda s, a, r: _player_action(s, skills.upgrade_talent, a.talent),
    EquipSkill: lambda s, a, r: _player_action(s, skills.equip_skill, a.slot_index, a.gem_id),
    UnequipSkill: lambda s, a, r: _player_action(s, skills.unequip_skill, a.slot_index),
    AttachSupport: lambda s, a, r: _player_action(s, skills.attach_support, a.skill_id, a.support_id),
    DetachSupport: lambda s, a, r: _player_action(s, skills.detach_support, a.skill_id, a.support_id),
    LevelUpGem: lambda s, a, r: _player_action(s, skills.level_up_gem, a.gem_id),
    LogMessage: _log_message,
    Reset: _reset,
    Load: _load,
}


def reduce(state: GameState, action, rng=None) -> GameState:
    """
    Apply one action and return the next state.

    Args:
        state: current state (never mutated)
        action: one of the action dataclasses above
        rng: random source for spawning and combat (defaults to random)

    Returns:
        The next GameState, or `state` itself when the action was a no-op
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        log.warning(f"Unknown action {action!r}")
        return state
    rng = rng if rng is not None else random
    return handler(state, action, rng)
