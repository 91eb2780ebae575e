"""
Unit tests for the game state reducer.
"""

import random
from dataclasses import replace

import pytest

from engine.state import (
    AttachSupport,
    CombatTick,
    DiscardItem,
    EquipItem,
    EquipSkill,
    GameState,
    LevelUpGem,
    Load,
    LogMessage,
    RemoveEnemy,
    Reset,
    SellItem,
    SocketStone,
    Spawn,
    UnequipItem,
    UpgradeTalent,
    combat_interval_ms,
    new_game_state,
    reduce,
)
from systems.inventory import Inventory


@pytest.fixture
def state(sample_enemy):
    return replace(new_game_state(), enemies=(sample_enemy,))


@pytest.fixture
def accurate_state(sample_player, sample_enemy):
    """Player who never misses, facing a one-hit enemy."""
    sample_player.passive_bonuses = {"accuracy": 1.0}
    return GameState(player=sample_player, enemies=(sample_enemy.with_hp(1),))


class TestSpawn:
    """Tests for the Spawn action."""

    def test_spawn_random(self, rng):
        """A rolled enemy at the player's level joins the encounter."""
        new_state = reduce(new_game_state(), Spawn(), rng=rng)
        assert len(new_state.enemies) == 1
        assert new_state.enemies[0].level == 10
        assert new_state.log

    def test_spawn_given_enemy(self, sample_enemy):
        """A supplied enemy is used as-is."""
        new_state = reduce(new_game_state(), Spawn(enemy=sample_enemy))
        assert new_state.enemies == (sample_enemy,)

    def test_spawn_cap(self, state, rng):
        """Spawning at the cap is a no-op."""
        assert reduce(state, Spawn(limit=1), rng=rng) is state

    def test_duplicate_id_ignored(self, state, sample_enemy):
        """Ids stay unique."""
        assert reduce(state, Spawn(enemy=sample_enemy)) is state


class TestCombatTick:
    """Tests for the CombatTick action."""

    def test_unknown_enemy_is_noop(self, state, rng):
        """Ticks for enemies that are gone do nothing."""
        assert reduce(state, CombatTick("missing"), rng=rng) is state

    def test_exchange_updates_state(self, state, fixed_rng):
        """Both sides take damage and the log grows."""
        new_state = reduce(state, CombatTick("e1"), rng=fixed_rng(0.99))
        assert new_state.get_enemy("e1").hp == 120
        assert new_state.player.hp == 115
        assert new_state.log[0].startswith("Player hits")
        assert new_state.events == ()
        assert state.get_enemy("e1").hp == 145

    def test_victory(self, accurate_state):
        """A kill removes the enemy and pays out XP, gold and loot."""
        new_state = reduce(accurate_state, CombatTick("e1"), rng=random.Random(5))
        assert new_state.get_enemy("e1") is None
        assert new_state.player.xp == 40
        assert new_state.player.gold == 20
        assert len(new_state.inventory) >= 1
        names = [name for name, _ in new_state.events]
        assert names[0] == "enemy_defeated"
        assert names.count("loot_drop") == len(new_state.inventory)

    def test_level_up_event(self, accurate_state):
        """Crossing an XP threshold emits level_up."""
        accurate_state.player.xp = 90
        new_state = reduce(accurate_state, CombatTick("e1"), rng=random.Random(5))
        level_ups = [payload for name, payload in new_state.events if name == "level_up"]
        assert level_ups == [{"level": 11, "levels_gained": 1}]

    def test_split_on_kill(self, accurate_state):
        """Splitting enemies leave pieces behind."""
        splitter = replace(accurate_state.enemies[0], special_ability="split", split_count=2)
        state = replace(accurate_state, enemies=(splitter,))
        new_state = reduce(state, CombatTick("e1"), rng=random.Random(5))
        assert [e.id for e in new_state.enemies] == ["e1_split_0", "e1_split_1"]

    def test_split_respects_cap(self, accurate_state, sample_enemy):
        """Pieces only fill the room left under the enemy cap."""
        splitter = replace(accurate_state.enemies[0], special_ability="split", split_count=3)
        others = tuple(replace(sample_enemy, id=f"x{i}") for i in range(23))
        state = replace(accurate_state, enemies=(splitter,) + others)
        new_state = reduce(state, CombatTick("e1"), rng=random.Random(5))
        assert len(new_state.enemies) == 25

    def test_split_respects_tick_limit(self, accurate_state, sample_enemy):
        """A lower limit on the tick caps the pieces too."""
        splitter = replace(accurate_state.enemies[0], special_ability="split", split_count=4)
        state = replace(accurate_state, enemies=(splitter, replace(sample_enemy, id="x1")))
        new_state = reduce(state, CombatTick("e1", limit=2), rng=random.Random(5))
        assert [e.id for e in new_state.enemies] == ["x1", "e1_split_0"]

    def test_remove_enemy(self, state):
        """RemoveEnemy drops it; unknown ids are no-ops."""
        assert reduce(state, RemoveEnemy("e1")).enemies == ()
        assert reduce(state, RemoveEnemy("nope")) is state


class TestItems:
    """Tests for equipment and inventory actions."""

    def test_equip_and_swap(self, sample_weapon):
        """Equipping moves the item out of the bag; the old one goes back in."""
        inventory = Inventory(items=[sample_weapon])
        state = GameState(inventory=inventory)
        state = reduce(state, EquipItem("eq_test_sword"))
        assert state.player.equipment["weapon"] is sample_weapon
        assert len(state.inventory) == 0

        upgrade = replace(sample_weapon, id="eq_better")
        state = replace(state, inventory=Inventory(items=[upgrade]))
        state = reduce(state, EquipItem("eq_better"))
        assert state.player.equipment["weapon"] is upgrade
        assert state.inventory.get("eq_test_sword") is sample_weapon

    def test_equip_requirements(self, sample_weapon):
        """Unmet requirements leave the item in the bag."""
        strict = replace(sample_weapon, requirements={"strength": 99})
        state = GameState(inventory=Inventory(items=[strict]))
        new_state = reduce(state, EquipItem(strict.id))
        assert "weapon" not in new_state.player.equipment
        assert "requirements" in new_state.log[0]

    def test_equip_unknown_is_noop(self):
        """Unknown ids do nothing."""
        state = new_game_state()
        assert reduce(state, EquipItem("nope")) is state

    def test_unequip(self, sample_player, sample_weapon):
        """Unequipped items return to the bag."""
        sample_player.equipment["weapon"] = sample_weapon
        state = GameState(player=sample_player)
        new_state = reduce(state, UnequipItem("weapon"))
        assert "weapon" not in new_state.player.equipment
        assert new_state.inventory.items == [sample_weapon]
        assert reduce(new_state, UnequipItem("weapon")) is new_state

    def test_unequip_full_bag(self, sample_player, sample_weapon, sample_stone):
        """A full bag keeps the item equipped."""
        sample_player.equipment["weapon"] = sample_weapon
        state = GameState(player=sample_player, inventory=Inventory(items=[sample_stone], capacity=1))
        new_state = reduce(state, UnequipItem("weapon"))
        assert new_state.player.equipment["weapon"] is sample_weapon
        assert new_state.log[0] == "Inventory is full."

    def test_discard_and_sell(self, sample_weapon, sample_stone):
        """Discarding drops an item, selling credits its value."""
        state = GameState(inventory=Inventory(items=[sample_weapon, sample_stone]))
        discarded = reduce(state, DiscardItem(sample_stone.id))
        assert discarded.inventory.items == [sample_weapon]
        assert discarded.player.gold == 0
        sold = reduce(discarded, SellItem(sample_weapon.id))
        assert len(sold.inventory) == 0
        assert sold.player.gold == 20
        assert reduce(sold, SellItem(sample_weapon.id)) is sold

    def test_socket_stone(self, sample_player, sample_weapon, sample_stone):
        """A fitting stone moves from the bag into the item."""
        sample_player.equipment["weapon"] = sample_weapon
        state = GameState(player=sample_player, inventory=Inventory(items=[sample_stone]))
        new_state = reduce(state, SocketStone(sample_stone.id, "weapon"))
        assert new_state.player.equipment["weapon"].sockets == (sample_stone,)
        assert len(new_state.inventory) == 0

    def test_socket_misfit(self, sample_player, sample_weapon, sample_stone):
        """A stone that does not fit stays in the bag."""
        sample_player.equipment["weapon"] = replace(sample_weapon, max_sockets=0)
        state = GameState(player=sample_player, inventory=Inventory(items=[sample_stone]))
        new_state = reduce(state, SocketStone(sample_stone.id, "weapon"))
        assert new_state.inventory.items == [sample_stone]
        assert "does not fit" in new_state.log[0]


class TestPlayerActions:
    """Tests for talent and gem actions."""

    def test_upgrade_talent(self):
        """Talents cost a skill point."""
        state = reduce(new_game_state(), UpgradeTalent("quick"))
        assert state.player.talents["quick"] == 1
        assert state.player.skill_points == 19

    def test_gem_actions(self):
        """Skill bar, support and levelling actions reach the player."""
        state = new_game_state()
        state = reduce(state, EquipSkill(1, "fireball"))
        state = reduce(state, AttachSupport("fireball", "added_fire_damage"))
        state = reduce(state, LevelUpGem("fireball"))
        fireball = state.player.get_skill_gem("fireball")
        assert state.player.skill_bar[1] == "fireball"
        assert [s.id for s in fireball.support_gems] == ["added_fire_damage"]
        assert fireball.level == 2

    def test_rejected_action_logs_only(self):
        """A rejected request keeps the player and explains why."""
        state = new_game_state()
        new_state = reduce(state, UpgradeTalent("flying"))
        assert new_state.player is state.player
        assert "Unknown talent" in new_state.log[0]


class TestMisc:
    """Tests for log, reset, load and interval helpers."""

    def test_log_message(self):
        """Messages go to the front of the log."""
        state = reduce(new_game_state(), LogMessage("one"))
        state = reduce(state, LogMessage("two"))
        assert state.log[:2] == ("two", "one")

    def test_reset_and_load(self, state):
        """Reset gives a fresh state; Load swaps in the given one."""
        assert reduce(state, Reset()).enemies == ()
        other = new_game_state()
        assert reduce(state, Load(other)) == other

    def test_unknown_action(self, state):
        """Unknown actions are ignored."""
        assert reduce(state, object()) is state

    def test_combat_interval(self, sample_player):
        """Quick talent and attack speed shorten the interval, floor 300ms."""
        assert combat_interval_ms(sample_player) == 1000
        sample_player.talents["quick"] = 10
        assert combat_interval_ms(sample_player) == 667
        sample_player.passive_bonuses = {"attack_speed": 5.0}
        assert combat_interval_ms(sample_player) == 300

    def test_combat_interval_combination_speed(self, sample_player):
        """Spellsword's +10% speed adds to the attack speed bonus."""
        sample_player.skill_bar[1] = "fireball"
        assert combat_interval_ms(sample_player) == 909
