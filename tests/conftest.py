"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test files.
"""

import os
import random
from typing import Generator

import pytest
import pygame


class FixedRandom(random.Random):
    """random.Random whose random() always returns the same value."""

    def __init__(self, value: float, seed: int = 0) -> None:
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture(scope="session", autouse=True)
def pygame_init() -> Generator[None, None, None]:
    """
    Initialize pygame for the test session.
    This runs once before all tests and cleans up after.
    """
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def rng() -> random.Random:
    """A seeded random source so rolls are repeatable."""
    return random.Random(1234)


@pytest.fixture
def fixed_rng():
    """
    Factory for a random source with a constant random() value.
    """
    return FixedRandom


@pytest.fixture
def sample_player():
    """
    Create a sample Player for testing.
    """
    from systems.progression import Player
    return Player()


@pytest.fixture
def sample_inventory():
    """
    Create a sample inventory for testing.
    """
    from systems.inventory import Inventory
    return Inventory()


@pytest.fixture
def sample_enemy():
    """
    Create a plain level 10 melee enemy (no ability, no armor).
    """
    from systems.enemies import Enemy
    return Enemy(id="e1", name="Goblin L10", level=10, hp=145, max_hp=145, type="melee")


@pytest.fixture
def sample_boss():
    """
    Create a level 10 boss with no ability.
    """
    from systems.enemies import Enemy
    return Enemy(
        id="e2", name="[BOSS] Goblin King L10", level=10, hp=507, max_hp=507,
        type="boss", is_boss=True, armor=5,
    )


@pytest.fixture
def sample_weapon():
    """
    Create a simple physical sword.
    """
    from systems.equipment import Equipment
    return Equipment(
        id="eq_test_sword",
        name="Common Sword (L10)",
        base_type="sword",
        slot="weapon",
        category="weapon",
        rarity="Common",
        level=10,
        base_stats={"damage": 15.0},
        damage_type="physical",
        value=20,
        max_sockets=1,
    )


@pytest.fixture
def sample_stone():
    """
    Create a ruby that fits weapons.
    """
    from systems.stones import Stone
    return Stone(
        id="st_test_ruby",
        name="Common Ruby (L10)",
        base_type="ruby",
        rarity="Common",
        level=10,
        base_stats={"damage": 4.0, "strength": 2.0},
        socket_types=("weapon", "ring", "amulet"),
        value=5,
    )
