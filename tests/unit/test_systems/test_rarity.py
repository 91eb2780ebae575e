"""
Unit tests for the rarity tables.
"""

from systems.rarity import (
    RARITY_ORDER,
    get_rarity_info,
    get_stone_rarity_info,
    rarity_rank,
    rarity_weights,
    roll_rarity,
    roll_stone_rarity,
    stone_rarity_weights,
    STONE_RARITY_ORDER,
)


class TestRarityWeights:
    """Tests for level / boss adjusted weights."""

    def test_level_one_matches_base_table(self):
        """Level 1 has no level bonus."""
        weights = dict(rarity_weights(1, False))
        assert weights["Common"] == 60
        assert weights["Magic"] == 25
        assert weights["Unique"] == 1

    def test_level_bonus_uses_divisors(self):
        """Level 60: Magic +6, Rare +4, Legendary +2, Mythic +1, Divine +1."""
        weights = dict(rarity_weights(60, False))
        assert weights["Magic"] == 31
        assert weights["Rare"] == 14
        assert weights["Legendary"] == 6
        assert weights["Mythic"] == 3
        assert weights["Divine"] == 2
        assert weights["Unique"] == 1

    def test_boss_bonus_only_rare_and_up(self):
        """Bosses do not boost Common or Magic."""
        normal = dict(rarity_weights(10, False))
        boss = dict(rarity_weights(10, True))
        assert boss["Common"] == normal["Common"]
        assert boss["Magic"] == normal["Magic"]
        assert boss["Rare"] == normal["Rare"] + 10
        assert boss["Legendary"] == normal["Legendary"] + 6

    def test_weights_never_drop_with_level(self):
        """Every non-Common weight is non-decreasing in level."""
        for is_boss in (False, True):
            previous = dict(rarity_weights(1, is_boss))
            for level in range(2, 121):
                current = dict(rarity_weights(level, is_boss))
                for rarity in RARITY_ORDER[1:]:
                    assert current[rarity] >= previous[rarity]
                previous = current

    def test_boss_weights_at_least_normal(self):
        """Bosses are never worse than normal enemies at any level."""
        for level in (1, 10, 50, 100):
            normal = dict(rarity_weights(level, False))
            boss = dict(rarity_weights(level, True))
            for rarity in RARITY_ORDER[1:]:
                assert boss[rarity] >= normal[rarity]

    def test_roll_rarity_returns_known_rarity(self, rng):
        """Rolled rarities are always in the table."""
        for _ in range(200):
            assert roll_rarity(25, rng=rng) in RARITY_ORDER


class TestRarityInfo:
    """Tests for rarity lookups."""

    def test_unknown_rarity_is_common(self):
        """Unknown keys resolve to Common."""
        assert get_rarity_info("Bogus").name == "Common"
        assert get_rarity_info(None).name == "Common"

    def test_rank_follows_order(self):
        """Common < Magic < ... < Unique."""
        ranks = [rarity_rank(r) for r in RARITY_ORDER]
        assert ranks == sorted(ranks)
        assert rarity_rank("Unknown") == 0

    def test_sockets_by_rarity(self):
        """Socket counts per rarity."""
        assert get_rarity_info("Common").max_sockets == 0
        assert get_rarity_info("Legendary").max_sockets == 2
        assert get_rarity_info("Divine").max_sockets == 3


class TestStoneRarity:
    """Tests for the stone rarity ladder."""

    def test_stone_weights(self):
        """Level 40 boss: Rare +4+10, Mythical +2+8, Divine +1+5."""
        weights = dict(stone_rarity_weights(40, True))
        assert weights["Common"] == 60
        assert weights["Rare"] == 39
        assert weights["Mythical"] == 22
        assert weights["Divine"] == 9

    def test_stone_rolls_use_stone_ladder(self, rng):
        """Stones never roll equipment-only rarities."""
        for _ in range(200):
            assert roll_stone_rarity(30, rng=rng) in STONE_RARITY_ORDER

    def test_unknown_stone_rarity_is_common(self):
        """Equipment rarities are unknown to stones."""
        assert get_stone_rarity_info("Legendary").name == "Common"
