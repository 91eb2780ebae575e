"""
Unit tests for gems and the skill gem modifier pipeline.
"""

from dataclasses import replace

import pytest

from systems.gem_pipeline import base_effect, resolve_gem_modifiers
from systems.gems import (
    GemModifier,
    SupportGem,
    can_level_up_gem,
    compatible_supports,
    create_skill_gem,
    create_support_gem,
    default_support_gems,
    gem_level_up_cost,
    is_compatible_support,
    scaled_support_value,
)


def _with_supports(skill, *supports):
    return replace(skill, support_gems=tuple(supports))


class TestGemTemplates:
    """Tests for gem creation and helpers."""

    def test_create_skill_gem(self):
        """Templates are copied with the requested level and rarity."""
        gem = create_skill_gem("fireball", level=5, rarity="Rare")
        assert gem.id == "fireball"
        assert gem.level == 5
        assert gem.rarity == "Rare"

    def test_create_clamps_and_validates(self):
        """Levels clamp to 1..max, unknown rarity becomes Normal."""
        assert create_skill_gem("fireball", level=99).level == 20
        assert create_skill_gem("fireball", level=0).level == 1
        assert create_support_gem("pierce", rarity="Shiny").rarity == "Normal"

    def test_unknown_template(self):
        """Unknown template ids give None."""
        assert create_skill_gem("nope") is None
        assert create_support_gem("nope") is None

    def test_compatibility(self):
        """Supports need a shared tag unless they have none."""
        whirlwind = create_skill_gem("whirlwind")
        fireball = create_skill_gem("fireball")
        fire = create_support_gem("added_fire_damage")
        assert not is_compatible_support(whirlwind, fire)
        assert is_compatible_support(fireball, fire)
        untagged = SupportGem(id="plain", name="Plain")
        assert is_compatible_support(whirlwind, untagged)

    def test_compatible_supports_filter(self):
        """Only matching supports are returned."""
        whirlwind = create_skill_gem("whirlwind")
        ids = {s.id for s in compatible_supports(whirlwind, default_support_gems())}
        assert "increased_damage" in ids
        assert "melee_physical_damage" in ids
        assert "added_fire_damage" not in ids

    def test_scaled_support_value(self):
        """Flat/percent values floor, multipliers keep two decimals."""
        assert scaled_support_value(create_support_gem("elemental_focus", level=2)) == pytest.approx(1.52)
        assert scaled_support_value(create_support_gem("increased_damage", level=3)) == 19
        assert scaled_support_value(create_support_gem("added_cold_damage", level=2)) == 9

    def test_level_up_cost(self):
        """floor(level * 1.5) + 1."""
        assert gem_level_up_cost(1) == 2
        assert gem_level_up_cost(2) == 4
        assert gem_level_up_cost(3) == 5

    def test_can_level_up(self):
        """Needs the points and room below max level."""
        gem = create_skill_gem("fireball")
        assert can_level_up_gem(gem, 2)
        assert not can_level_up_gem(gem, 1)
        assert not can_level_up_gem(replace(gem, level=20), 100)


class TestPipeline:
    """Tests for resolve_gem_modifiers()."""

    def test_base_values(self):
        """Level 1 whirlwind: 12 damage, 2.5 area."""
        effect = resolve_gem_modifiers(create_skill_gem("whirlwind"))
        assert effect.damage == 12
        assert effect.area == pytest.approx(2.5)
        assert effect.projectile_count == 1
        assert effect.duration == 0

    def test_level_scaling(self):
        """Damage grows by damage_per_level and is floored."""
        assert resolve_gem_modifiers(create_skill_gem("whirlwind", level=5)).damage == 22
        # 8 + 1.8 * 2 = 11.6 -> 11
        assert base_effect(create_skill_gem("ice_shard", level=3)).damage == 11

    def test_absent_dimensions_stay_zero(self):
        """A skill without base area gets no area."""
        effect = resolve_gem_modifiers(create_skill_gem("lightning_bolt", level=10))
        assert effect.area == 0
        assert effect.duration == 0

    def test_rarity_bonus(self):
        """Rare fireball: generic, AoE, projectile and elemental damage bonuses stack."""
        effect = resolve_gem_modifiers(create_skill_gem("fireball", rarity="Rare"))
        assert effect.damage == 31
        assert effect.area == pytest.approx(1.68)

    def test_percentage_support(self):
        """Increased Damage adds 15% at level 1."""
        skill = _with_supports(create_skill_gem("whirlwind"), create_support_gem("increased_damage"))
        assert resolve_gem_modifiers(skill).damage == 14

    def test_support_rarity_half_strength(self):
        """A Rare support applies half the Rare damage bonus."""
        support = create_support_gem("increased_damage", rarity="Rare")
        skill = _with_supports(create_skill_gem("whirlwind"), support)
        assert resolve_gem_modifiers(skill).damage == 16

    def test_added_and_multiplier(self):
        """Flat added damage and tag-gated multipliers are applied."""
        fireball = create_skill_gem("fireball")
        added = _with_supports(fireball, create_support_gem("added_fire_damage"))
        assert resolve_gem_modifiers(added).damage == 25
        focused = _with_supports(fireball, create_support_gem("elemental_focus", level=2))
        # 15 * 1.52 = 22.8
        assert resolve_gem_modifiers(focused).damage == 23

    def test_multiplier_ignores_unmatched_tags(self):
        """A multiplier for elemental tags leaves a physical skill alone."""
        whirlwind = create_skill_gem("whirlwind")
        skill = _with_supports(whirlwind, create_support_gem("elemental_focus"))
        assert resolve_gem_modifiers(skill).damage == 12

    def test_support_order_matters(self):
        """Percentages before flat values give a different result."""
        fireball = create_skill_gem("fireball")
        added = create_support_gem("added_fire_damage")
        increased = create_support_gem("increased_damage")
        # (15 + 10) * 1.15 = 28.75
        assert resolve_gem_modifiers(_with_supports(fireball, added, increased)).damage == 29
        # 15 * 1.15 + 10 = 27.25
        assert resolve_gem_modifiers(_with_supports(fireball, increased, added)).damage == 27

    def test_multiple_projectiles(self):
        """+2 projectiles, -20% damage."""
        skill = _with_supports(create_skill_gem("fireball"), create_support_gem("multiple_projectiles"))
        effect = resolve_gem_modifiers(skill)
        assert effect.projectile_count == 3
        assert effect.damage == 12

    def test_projectile_count_floor(self):
        """Projectile count never drops below 1."""
        shrink = SupportGem(
            id="shrink", name="Shrink",
            modifiers=(GemModifier("projectile_count", -5, is_percentage=False),),
        )
        skill = _with_supports(create_skill_gem("fireball"), shrink)
        assert resolve_gem_modifiers(skill).projectile_count == 1

    def test_mana_and_cooldown_floor_at_zero(self):
        """Reductions never push cost or cooldown negative."""
        skill = replace(create_skill_gem("fireball"), mana_cost=10, cooldown=2)
        skill = _with_supports(
            skill,
            create_support_gem("reduced_mana", level=20),
            SupportGem(
                id="haste", name="Haste",
                modifiers=(GemModifier("cooldown", -10, is_percentage=False),),
            ),
        )
        effect = resolve_gem_modifiers(skill)
        # 10 * (1 - 0.49) = 5.1
        assert effect.mana_cost == 5
        assert effect.cooldown == 0

    def test_pure_function(self):
        """Resolving twice gives the same answer and leaves the gem alone."""
        skill = _with_supports(create_skill_gem("meteor", level=4), create_support_gem("increased_area"))
        first = resolve_gem_modifiers(skill)
        assert resolve_gem_modifiers(skill) == first
        assert skill.level == 4
