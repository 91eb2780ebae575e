"""
Battle combat calculations module.

Resolves one exchange between the player and a single enemy: the player's
attack (enemy dodge, crit, elemental effect, resistances, mitigation,
life steal) followed, if the enemy survives, by its counter-attack (player
dodge, block, enemy abilities, armor and vitality reduction, thorns,
knock-out revive).

resolve_combat_tick() is stateless: it never mutates its inputs and returns
the new player and enemy inside a CombatResult.
"""

import math
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from settings import (
    BASE_CRIT_MULTIPLIER,
    DAMAGE_VARIANCE,
    KNOCKOUT_GOLD_CAP,
    KNOCKOUT_GOLD_PER_LEVEL,
    REVIVE_HP_FRACTION,
)
from engine.error_handler import get_logger
from systems.enemies import (
    COUNTER_BASE,
    Enemy,
    incoming_damage_multiplier,
    modify_counter_damage,
    regenerate,
)
from systems.gem_pipeline import resolve_equipped_skill
from systems.stats import CalculatedStats

log = get_logger("combat")

BASE_CRIT_CHANCE = 0.05
LIGHTNING_CRIT_BONUS = 0.05

ENEMY_BASE_DODGE = 0.05
ENEMY_DODGE_PER_LEVEL = 0.005
ENEMY_MAX_LEVEL_DODGE = 0.15
ENEMY_DODGE_CAP = 0.75
PLAYER_DODGE_CAP = 0.95

MAX_ARMOR_REDUCTION = 0.8
ARMOR_REDUCTION_PER_POINT = 0.01
MAX_VITALITY_REDUCTION = 0.3
VITALITY_REDUCTION_PER_POINT = 0.005

# (damage multiplier, status chance, status name) per damage type
ELEMENTAL_EFFECTS = {
    "fire": (1.1, 0.15, "burning"),
    "ice": (1.0, 0.20, "slowed"),
    "lightning": (1.0, 0.10, "stunned"),
    "poison": (0.8, 0.25, "poisoned"),
}


@dataclass(frozen=True)
class CombatResult:
    """
    Outcome of one combat exchange.

    The caller merges `player` and `enemy` back into its state and appends
    `message` to the combat log.
    """
    player: object
    enemy: Enemy
    message: str
    enemy_defeated: bool
    did_player_hit: bool
    did_enemy_hit: bool
    player_dodged: bool
    enemy_dodged: bool
    blocked: bool
    crit: bool
    damage: int
    enemy_damage: int
    damage_type: str
    status_effect: Optional[str] = None
    life_stolen: int = 0
    knocked_out: bool = False


# ----------------- Chances -----------------

def enemy_dodge_chance(enemy: Enemy, accuracy: float = 0.0) -> float:
    """5% base + 0.5% per level (max +15%), minus player accuracy, in [0, 0.75]."""
    level_bonus = min(ENEMY_MAX_LEVEL_DODGE, enemy.level * ENEMY_DODGE_PER_LEVEL)
    chance = ENEMY_BASE_DODGE + level_bonus - accuracy
    return max(0.0, min(ENEMY_DODGE_CAP, chance))


def player_dodge_chance(stats: CalculatedStats, enemy: Enemy) -> float:
    return max(0.0, min(PLAYER_DODGE_CAP, stats.dodge_chance - enemy.accuracy))


def crit_chance(stats: CalculatedStats, damage_type: str) -> float:
    chance = BASE_CRIT_CHANCE + stats.crit_chance
    if damage_type == "lightning":
        chance += LIGHTNING_CRIT_BONUS
    return max(0.0, min(1.0, chance))


def crit_multiplier(stats: CalculatedStats) -> float:
    luck = stats.attributes.get("luck", 0.0)
    return BASE_CRIT_MULTIPLIER + luck * 0.01 + stats.crit_multiplier


# ----------------- Damage helpers -----------------

def apply_variance(value: float, rng) -> int:
    """+/- DAMAGE_VARIANCE, floored."""
    return int(math.floor(value * rng.uniform(1.0 - DAMAGE_VARIANCE, 1.0 + DAMAGE_VARIANCE)))


def player_damage_type(player) -> str:
    weapon = player.equipment.get("weapon")
    if weapon is not None and weapon.damage_type:
        return weapon.damage_type
    return "physical"


def attribute_damage_bonus(stats: CalculatedStats, damage_type: str) -> int:
    """Strength boosts physical hits, intelligence elemental ones, dexterity both."""
    attrs = stats.attributes
    bonus = math.floor(attrs.get("dexterity", 0.0) * 0.3)
    if damage_type == "physical":
        bonus += math.floor(attrs.get("strength", 0.0) * 0.5)
    else:
        bonus += math.floor(attrs.get("intelligence", 0.0) * 0.6)
    return int(bonus)


def skill_damage(player) -> int:
    """
    Resolved damage of the first equipped skill gem (0 if none), with the
    combinations active on the bar.
    """
    gem = player.active_skill()
    if gem is None:
        return 0
    effect = resolve_equipped_skill(gem, player.equipped_skills(), player.level)
    return max(0, int(effect.damage))


def apply_elemental_effect(damage: int, damage_type: str, rng) -> Tuple[int, Optional[str]]:
    effect = ELEMENTAL_EFFECTS.get(damage_type)
    if effect is None:
        return damage, None
    multiplier, chance, status = effect
    if multiplier != 1.0:
        damage = int(math.floor(damage * multiplier))
    if rng.random() < chance:
        return damage, status
    return damage, None


def mitigate(damage: float, enemy: Enemy, damage_type: str) -> int:
    """
    Resistance, then armor (damage * 100 / (100 + armor)), then shield.
    A landed hit always deals at least 1.
    """
    damage *= enemy.resistances.get(damage_type, 1.0)
    damage *= 100.0 / (100.0 + max(0, enemy.armor))
    damage *= incoming_damage_multiplier(enemy)
    return max(1, int(math.floor(damage)))


def counter_damage(player_stats: CalculatedStats, enemy: Enemy, rng) -> Tuple[int, Optional[str]]:
    """Enemy counter-attack after abilities, variance, armor and vitality."""
    base = max(0.5, COUNTER_BASE.get(enemy.type, 1.0) + enemy.level * 0.5)
    base, tag = modify_counter_damage(enemy, base, rng)
    damage = apply_variance(base, rng)

    armor_reduction = min(MAX_ARMOR_REDUCTION, player_stats.armor * ARMOR_REDUCTION_PER_POINT)
    damage = math.floor(damage * (1.0 - armor_reduction))

    vitality = player_stats.attributes.get("vitality", 0.0)
    vitality_reduction = min(MAX_VITALITY_REDUCTION, vitality * VITALITY_REDUCTION_PER_POINT)
    damage = math.floor(damage * (1.0 - vitality_reduction))

    return max(1, int(damage)), tag


# ----------------- Exchange -----------------

def resolve_combat_tick(player, enemy: Enemy, rng=None) -> CombatResult:
    """
    Resolve one player attack and the enemy's answer.

    Args:
        player: systems.progression.Player (not modified)
        enemy: target Enemy (not modified)
        rng: random source (defaults to the random module)

    Returns:
        CombatResult with the updated copies
    """
    rng = rng if rng is not None else random
    player = player.copy()
    stats = player.stats
    damage_type = player_damage_type(player)
    parts: List[str] = []

    did_player_hit = False
    did_enemy_hit = False
    player_dodged = False
    blocked = False
    crit = False
    damage = 0
    enemy_damage = 0
    status_effect: Optional[str] = None
    life_stolen = 0
    knocked_out = False

    # --- Player attack ---
    enemy_dodged = rng.random() < enemy_dodge_chance(enemy, stats.accuracy)
    if enemy_dodged:
        return CombatResult(
            player=player,
            enemy=enemy,
            message=f"{enemy.name} dodged the player's attack!",
            enemy_defeated=not enemy.is_alive,
            did_player_hit=False,
            did_enemy_hit=False,
            player_dodged=False,
            enemy_dodged=True,
            blocked=False,
            crit=False,
            damage=0,
            enemy_damage=0,
            damage_type=damage_type,
        )

    did_player_hit = True
    raw = max(1, math.floor(stats.damage)) + attribute_damage_bonus(stats, damage_type) + skill_damage(player)
    hit = apply_variance(raw, rng)

    crit = rng.random() < crit_chance(stats, damage_type)
    if crit:
        hit = int(math.floor(hit * crit_multiplier(stats)))

    hit, status_effect = apply_elemental_effect(hit, damage_type, rng)
    damage = mitigate(hit, enemy, damage_type)
    enemy = enemy.with_hp(enemy.hp - damage)

    if stats.life_steal > 0:
        healed = min(int(math.floor(damage * stats.life_steal)), stats.max_hp - player.hp)
        if healed > 0:
            player.hp += healed
            life_stolen = healed
    if stats.mana_steal > 0:
        player.mana = min(stats.max_mana, player.mana + int(math.floor(damage * stats.mana_steal)))

    element_text = f" [{damage_type.upper()}]" if damage_type != "physical" else ""
    crit_text = " (CRITICAL!)" if crit else ""
    status_text = f" ({status_effect})" if status_effect else ""

    if not enemy.is_alive:
        parts.append(f"Player dealt final blow to {enemy.name}!")
    else:
        parts.append(f"Player hits {enemy.name} for {damage}{element_text}{crit_text}{status_text}")

        # --- Enemy retaliation ---
        if rng.random() < player_dodge_chance(stats, enemy):
            player_dodged = True
            parts.append(f"Player dodged {enemy.name}'s attack!")
        elif rng.random() < stats.block_chance:
            blocked = True
            parts.append(f"Player blocked {enemy.name}'s attack!")
        else:
            did_enemy_hit = True
            enemy_damage, tag = counter_damage(stats, enemy, rng)
            player.hp = max(0, player.hp - enemy_damage)
            hit_text = f"{enemy.name} hits back for {enemy_damage}"
            if tag:
                hit_text += f" ({tag})"
            parts.append(hit_text)

            thorns = int(math.floor(stats.thorns))
            if thorns > 0:
                enemy = enemy.with_hp(enemy.hp - thorns)
                parts.append(f"Thorns deal {thorns} to {enemy.name}")

            if player.hp <= 0:
                knocked_out = True
                player.hp = max(1, int(math.floor(stats.max_hp * REVIVE_HP_FRACTION)))
                lost = player.lose_gold(min(KNOCKOUT_GOLD_CAP, player.level * KNOCKOUT_GOLD_PER_LEVEL))
                parts.append(f"Player was knocked out and revived (lost {lost} gold)!")
                log.info(f"Player knocked out by {enemy.name}, lost {lost} gold")

        enemy = regenerate(enemy)

    player.clamp_pools()
    return CombatResult(
        player=player,
        enemy=enemy,
        message=". ".join(parts),
        enemy_defeated=not enemy.is_alive,
        did_player_hit=did_player_hit,
        did_enemy_hit=did_enemy_hit,
        player_dodged=player_dodged,
        enemy_dodged=False,
        blocked=blocked,
        crit=crit,
        damage=damage,
        enemy_damage=enemy_damage,
        damage_type=damage_type,
        status_effect=status_effect,
        life_stolen=life_stolen,
        knocked_out=knocked_out,
    )
