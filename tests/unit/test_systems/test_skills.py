"""
Unit tests for skill bar, support and talent actions.
"""

from dataclasses import replace

from settings import MAX_SUPPORTS_PER_SKILL
from systems.skills import (
    attach_support,
    detach_support,
    equip_skill,
    level_up_gem,
    unequip_skill,
    upgrade_talent,
)


class TestSkillBar:
    """Tests for equip_skill() / unequip_skill()."""

    def test_default_bar(self, sample_player):
        """A new player has whirlwind in the first slot."""
        assert sample_player.skill_bar[0] == "whirlwind"
        assert len(sample_player.skill_bar) == 6

    def test_equip_skill(self, sample_player):
        """An owned gem goes into the slot."""
        equip_skill(sample_player, 1, "fireball")
        assert sample_player.skill_bar[1] == "fireball"

    def test_equip_reports_new_combinations(self, sample_player):
        """Combinations switched on by the new gem are named in the message."""
        message = equip_skill(sample_player, 1, "fireball")
        assert message.endswith("Combination active: Spellsword, Area Specialist.")
        assert "Combination" not in equip_skill(sample_player, 2, "ice_shard")

    def test_gem_in_one_slot_only(self, sample_player):
        """Equipping a gem elsewhere clears its old slot."""
        equip_skill(sample_player, 3, "whirlwind")
        assert sample_player.skill_bar[0] is None
        assert sample_player.skill_bar[3] == "whirlwind"
        assert sample_player.skill_bar.count("whirlwind") == 1

    def test_equip_rejects_bad_input(self, sample_player):
        """Unknown gems and slots leave the bar unchanged."""
        before = list(sample_player.skill_bar)
        assert "not owned" in equip_skill(sample_player, 1, "nope")
        equip_skill(sample_player, 6, "fireball")
        equip_skill(sample_player, -1, "fireball")
        assert sample_player.skill_bar == before

    def test_unequip_skill(self, sample_player):
        """Unequipping clears the slot but keeps the gem."""
        unequip_skill(sample_player, 0)
        assert sample_player.skill_bar[0] is None
        assert sample_player.get_skill_gem("whirlwind") is not None
        assert "already empty" in unequip_skill(sample_player, 0)


class TestSupports:
    """Tests for attach_support() / detach_support()."""

    def test_attach_support(self, sample_player):
        """A compatible support is linked."""
        attach_support(sample_player, "fireball", "added_fire_damage")
        linked = sample_player.get_skill_gem("fireball").support_gems
        assert [s.id for s in linked] == ["added_fire_damage"]

    def test_attach_incompatible(self, sample_player):
        """Whirlwind shares no tag with Added Fire Damage."""
        message = attach_support(sample_player, "whirlwind", "added_fire_damage")
        assert "cannot support" in message
        assert sample_player.get_skill_gem("whirlwind").support_gems == ()

    def test_attach_duplicate(self, sample_player):
        """The same support cannot be linked twice."""
        attach_support(sample_player, "fireball", "pierce")
        message = attach_support(sample_player, "fireball", "pierce")
        assert "already linked" in message
        assert len(sample_player.get_skill_gem("fireball").support_gems) == 1

    def test_attach_limit(self, sample_player):
        """No more than six supports per skill."""
        for support_id in (
            "increased_damage", "increased_area", "multiple_projectiles",
            "faster_casting", "reduced_mana", "added_fire_damage",
        ):
            attach_support(sample_player, "fireball", support_id)
        message = attach_support(sample_player, "fireball", "pierce")
        assert "no free support sockets" in message
        assert len(sample_player.get_skill_gem("fireball").support_gems) == MAX_SUPPORTS_PER_SKILL

    def test_attach_unknown(self, sample_player):
        """Unknown ids are rejected."""
        assert "Unknown" in attach_support(sample_player, "nope", "pierce")
        assert "Unknown" in attach_support(sample_player, "fireball", "nope")

    def test_detach_support(self, sample_player):
        """Detaching removes only that support."""
        attach_support(sample_player, "fireball", "pierce")
        attach_support(sample_player, "fireball", "increased_damage")
        detach_support(sample_player, "fireball", "pierce")
        linked = sample_player.get_skill_gem("fireball").support_gems
        assert [s.id for s in linked] == ["increased_damage"]
        assert "not linked" in detach_support(sample_player, "fireball", "pierce")


class TestLevelUpGem:
    """Tests for level_up_gem()."""

    def test_level_up_skill_gem(self, sample_player):
        """Level 1 -> 2 costs 2 points."""
        sample_player.skill_points = 5
        level_up_gem(sample_player, "fireball")
        assert sample_player.get_skill_gem("fireball").level == 2
        assert sample_player.skill_points == 3

    def test_not_enough_points(self, sample_player):
        """Nothing changes without the points."""
        sample_player.skill_points = 1
        message = level_up_gem(sample_player, "fireball")
        assert "Not enough" in message
        assert sample_player.get_skill_gem("fireball").level == 1
        assert sample_player.skill_points == 1

    def test_max_level(self, sample_player):
        """A max-level gem stays put."""
        gem = replace(sample_player.get_skill_gem("fireball"), level=20)
        sample_player.skill_gems = [gem if g.id == "fireball" else g for g in sample_player.skill_gems]
        assert "max level" in level_up_gem(sample_player, "fireball")
        assert sample_player.skill_points == 20

    def test_level_up_support_syncs_links(self, sample_player):
        """Linked copies follow the owned support gem's level."""
        attach_support(sample_player, "whirlwind", "increased_damage")
        level_up_gem(sample_player, "increased_damage")
        assert sample_player.get_support_gem("increased_damage").level == 2
        linked = sample_player.get_skill_gem("whirlwind").support_gems[0]
        assert linked.level == 2

    def test_unknown_gem(self, sample_player):
        """Unknown ids are rejected."""
        assert level_up_gem(sample_player, "nope") == "Unknown gem."


class TestTalents:
    """Tests for upgrade_talent()."""

    def test_upgrade(self, sample_player):
        """One point per rank."""
        upgrade_talent(sample_player, "endurance")
        assert sample_player.talents["endurance"] == 1
        assert sample_player.skill_points == 19

    def test_max_rank(self, sample_player):
        """Rank 10 is the cap."""
        sample_player.talents["quick"] = 10
        assert "maxed" in upgrade_talent(sample_player, "quick")
        assert sample_player.skill_points == 20

    def test_no_points(self, sample_player):
        """Upgrades need a skill point."""
        sample_player.skill_points = 0
        upgrade_talent(sample_player, "agility")
        assert sample_player.talents["agility"] == 0

    def test_unknown_talent(self, sample_player):
        """Unknown talents are rejected."""
        assert "Unknown talent" in upgrade_talent(sample_player, "flying")
        assert sample_player.skill_points == 20
