"""
Unit tests for equipment and stone generation, socketing and item value.
"""

from dataclasses import replace

import pytest

from systems.equipment import (
    ALL_BASES,
    EQUIPMENT_SLOTS,
    category_chances,
    can_equip,
    generate_equipment,
    socket_stone,
)
from systems.economy import (
    calculate_equipment_value,
    calculate_stone_value,
    kill_gold,
    sell_price,
)
from systems.rarity import RARITY_ORDER, STONE_RARITY_ORDER
from systems.stones import STONE_BASES, can_socket_stone, generate_stone


class TestGenerateEquipment:
    """Tests for generate_equipment()."""

    def test_generated_item_is_consistent(self, rng):
        """Slot, category and rarity come from the tables."""
        for level in (1, 15, 60):
            for _ in range(40):
                item = generate_equipment(level, rng=rng)
                base = ALL_BASES[item.base_type]
                assert item.slot == base.slot
                assert item.slot in EQUIPMENT_SLOTS
                assert item.category == base.category
                assert item.rarity in RARITY_ORDER
                assert item.level == level
                assert item.value >= 1
                assert item.sockets == ()

    def test_only_weapons_have_damage_type(self, rng):
        """Armor and accessories carry no damage type."""
        for _ in range(100):
            item = generate_equipment(20, rng=rng)
            if item.category == "weapon":
                assert item.damage_type is not None
            else:
                assert item.damage_type is None

    def test_caster_weapons_are_elemental(self, rng):
        """Staves and wands never roll physical."""
        for _ in range(30):
            item = generate_equipment(10, rng=rng, base_type="staff")
            assert item.damage_type in ("fire", "ice", "lightning")
            assert "[" in item.name

    def test_common_name_has_no_affix_suffix(self, rng):
        """Common items are named '{Rarity} {Base} (L{level})'."""
        item = generate_equipment(5, rng=rng, rarity="Common", base_type="helm")
        assert item.name == "Common Helm (L5)"

    def test_unknown_rarity_regenerates_as_common(self, rng):
        """An unrecognized rarity falls back to Common."""
        item = generate_equipment(10, rng=rng, rarity="Ancient")
        assert item.rarity == "Common"

    def test_unknown_base_regenerates_as_common(self, rng):
        """An unrecognized base type falls back to a Common roll."""
        item = generate_equipment(10, rng=rng, rarity="Rare", base_type="spoon")
        assert item.rarity == "Common"
        assert item.base_type in ALL_BASES

    def test_sockets_follow_rarity(self, rng):
        """max_sockets comes from the rarity table."""
        assert generate_equipment(10, rng=rng, rarity="Common").max_sockets == 0
        assert generate_equipment(10, rng=rng, rarity="Divine").max_sockets == 3

    def test_category_chances(self):
        """Weapons dominate early, armor grows with level."""
        weapon, armor, accessory = category_chances(1)
        assert weapon == pytest.approx(0.59)
        assert armor == pytest.approx(0.308)
        assert weapon + armor + accessory == pytest.approx(1.0)
        weapon, armor, _ = category_chances(100)
        assert weapon == pytest.approx(0.3)
        assert armor == pytest.approx(0.5)

    def test_requirements_recorded_not_enforced(self, sample_weapon):
        """can_equip checks the recorded minimums."""
        assert can_equip(sample_weapon, {})
        strict = replace(sample_weapon, requirements={"strength": 30})
        assert not can_equip(strict, {"strength": 10})
        assert can_equip(strict, {"strength": 30})


class TestStones:
    """Tests for stone generation and socketing."""

    def test_generated_stone(self, rng):
        """Stones use their own rarity ladder and base table."""
        for _ in range(50):
            stone = generate_stone(30, rng=rng)
            assert stone.rarity in STONE_RARITY_ORDER
            assert stone.base_type in STONE_BASES
            assert stone.socket_types == STONE_BASES[stone.base_type].socket_types
            assert stone.value >= 1
            assert all(v > 0 for v in stone.base_stats.values())

    def test_unknown_stone_rarity_regenerates(self, rng):
        """Equipment rarities are not valid for stones."""
        assert generate_stone(10, rng=rng, rarity="Legendary").rarity == "Common"

    def test_socket_stone(self, sample_weapon, sample_stone):
        """A fitting stone fills a free socket and adds its stats."""
        socketed = socket_stone(sample_weapon, sample_stone)
        assert socketed is not None
        assert socketed.sockets == (sample_stone,)
        assert socketed.free_sockets == 0
        assert socketed.all_stats()["damage"] == pytest.approx(19.0)
        assert socketed.all_stats()["strength"] == pytest.approx(2.0)
        # Original untouched
        assert sample_weapon.sockets == ()

    def test_socket_requires_free_socket(self, sample_weapon, sample_stone):
        """No free socket, no socketing."""
        full = socket_stone(sample_weapon, sample_stone)
        assert socket_stone(full, replace(sample_stone, id="st_other")) is None

    def test_socket_requires_matching_slot(self, sample_weapon, sample_stone):
        """Stones only fit their socket types."""
        boots_only = replace(sample_stone, socket_types=("boots",))
        assert not can_socket_stone(boots_only, "weapon")
        assert socket_stone(sample_weapon, boots_only) is None


class TestEconomy:
    """Tests for item value and gold."""

    def test_equipment_value_formula(self):
        """(10 damage * 5) * level 2 * 1.5."""
        assert calculate_equipment_value({"damage": 10}, [], 2, 1.5) == 150

    def test_stone_value_is_halved(self):
        """(4 damage * 8) * level 10 * 1.0 * 0.5."""
        assert calculate_stone_value({"damage": 4}, [], 10, 1.0) == 160

    def test_value_minimum_one(self):
        """Items are always worth at least 1 gold."""
        assert calculate_equipment_value({}, [], 1, 1.0) == 1
        assert calculate_stone_value({"health": 0.01}, [], 1, 1.0) == 1

    def test_generated_values_positive(self, rng):
        """Every generated item has value >= 1."""
        for level in (1, 5, 50):
            for _ in range(30):
                assert generate_equipment(level, rng=rng).value >= 1
                assert generate_stone(level, rng=rng).value >= 1

    def test_sell_price(self, sample_weapon):
        """Sell price is the item value, never below 1."""
        assert sell_price(sample_weapon) == 20
        assert sell_price(replace(sample_weapon, value=0)) == 1

    def test_kill_gold(self):
        """level * 2, x5 for bosses, scaled by gold find."""
        assert kill_gold(10) == 20
        assert kill_gold(10, is_boss=True) == 100
        assert kill_gold(10, gold_find=0.5) == 30
