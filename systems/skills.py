# systems/skills.py
"""
Skill bar, support gem and talent actions.

Every helper mutates the Player it is given (callers pass a copy) and
returns a short message for the combat log. A request that does not apply
(unknown id, wrong slot, not enough points) leaves the player unchanged and
returns an explanation instead.
"""

from dataclasses import replace
from typing import List

from engine.error_handler import get_logger
from settings import MAX_SUPPORTS_PER_SKILL, TALENT_MAX_RANK
from systems.gems import (
    SkillGem,
    SupportGem,
    can_level_up_gem,
    gem_level_up_cost,
    is_compatible_support,
)
from systems.skill_combinations import active_combinations

log = get_logger("skills")

TALENT_COST = 1


# ----------------- Skill bar -----------------

def _valid_slot(player, slot_index: int) -> bool:
    return 0 <= slot_index < len(player.skill_bar)


def equip_skill(player, slot_index: int, gem_id: str) -> str:
    """
    Put a skill gem (by id) into a skill bar slot.

    A gem sits in at most one slot: equipping it elsewhere clears its old
    slot.
    """
    if not _valid_slot(player, slot_index):
        return f"No skill slot {slot_index}."
    gem = player.get_skill_gem(gem_id)
    if gem is None:
        log.debug(f"equip_skill: unknown gem {gem_id!r}")
        return "That skill gem is not owned."

    before = {c.id for c in active_combinations(player.equipped_skills(), player.level)}
    bar = [None if slot == gem_id else slot for slot in player.skill_bar]
    bar[slot_index] = gem_id
    player.skill_bar = bar
    message = f"{gem.name} equipped to slot {slot_index + 1}."

    gained = [c.name for c in active_combinations(player.equipped_skills(), player.level) if c.id not in before]
    if gained:
        message += f" Combination active: {', '.join(gained)}."
    return message


def unequip_skill(player, slot_index: int) -> str:
    """Clear a skill bar slot. The gem itself stays owned."""
    if not _valid_slot(player, slot_index):
        return f"No skill slot {slot_index}."
    gem_id = player.skill_bar[slot_index]
    if gem_id is None:
        return "That slot is already empty."
    player.skill_bar[slot_index] = None
    gem = player.get_skill_gem(gem_id)
    name = gem.name if gem is not None else gem_id
    return f"{name} removed from slot {slot_index + 1}."


# ----------------- Support gems -----------------

def _replace_skill_gem(player, gem: SkillGem) -> None:
    player.skill_gems = [gem if g.id == gem.id else g for g in player.skill_gems]


def attach_support(player, skill_id: str, support_id: str) -> str:
    """
    Attach a copy of an owned support gem to a skill gem.

    Rules: tags must overlap (or the support has none), at most
    MAX_SUPPORTS_PER_SKILL per skill, and no support twice on one skill.
    """
    skill = player.get_skill_gem(skill_id)
    support = player.get_support_gem(support_id)
    if skill is None or support is None:
        return "Unknown skill or support gem."
    if any(s.id == support.id for s in skill.support_gems):
        return f"{support.name} is already linked to {skill.name}."
    if len(skill.support_gems) >= MAX_SUPPORTS_PER_SKILL:
        return f"{skill.name} has no free support sockets."
    if not is_compatible_support(skill, support):
        return f"{support.name} cannot support {skill.name}."

    _replace_skill_gem(player, replace(skill, support_gems=skill.support_gems + (support,)))
    return f"{support.name} linked to {skill.name}."


def detach_support(player, skill_id: str, support_id: str) -> str:
    skill = player.get_skill_gem(skill_id)
    if skill is None:
        return "Unknown skill gem."
    remaining = tuple(s for s in skill.support_gems if s.id != support_id)
    if len(remaining) == len(skill.support_gems):
        return "That support is not linked."
    _replace_skill_gem(player, replace(skill, support_gems=remaining))
    return f"Support removed from {skill.name}."


# ----------------- Gem levelling -----------------

def _find_gem(player, gem_id: str):
    gem = player.get_skill_gem(gem_id)
    if gem is not None:
        return gem
    return player.get_support_gem(gem_id)


def _sync_attached_support(player, support: SupportGem) -> None:
    """Attached supports are copies: refresh them after the owned gem changes."""
    skills: List[SkillGem] = []
    for skill in player.skill_gems:
        if any(s.id == support.id for s in skill.support_gems):
            linked = tuple(support if s.id == support.id else s for s in skill.support_gems)
            skill = replace(skill, support_gems=linked)
        skills.append(skill)
    player.skill_gems = skills


def level_up_gem(player, gem_id: str) -> str:
    """
    Spend floor(level * 1.5) + 1 skill points to raise a gem one level.
    """
    gem = _find_gem(player, gem_id)
    if gem is None:
        return "Unknown gem."
    if gem.level >= gem.max_level:
        return f"{gem.name} is already at max level."
    cost = gem_level_up_cost(gem.level)
    if not can_level_up_gem(gem, player.skill_points):
        return f"Not enough skill points ({cost} needed)."

    player.skill_points -= cost
    upgraded = replace(gem, level=gem.level + 1)
    if isinstance(upgraded, SkillGem):
        _replace_skill_gem(player, upgraded)
    else:
        player.support_gems = [upgraded if g.id == upgraded.id else g for g in player.support_gems]
        _sync_attached_support(player, upgraded)

    log.info(f"{upgraded.name} -> level {upgraded.level} (cost {cost})")
    return f"{upgraded.name} reached level {upgraded.level}."


# ----------------- Talents -----------------

def upgrade_talent(player, talent: str) -> str:
    """Raise a talent one rank for TALENT_COST skill point (max rank 10)."""
    if talent not in player.talents:
        return f"Unknown talent '{talent}'."
    rank = player.talents[talent]
    if rank >= TALENT_MAX_RANK:
        return f"{talent.capitalize()} is already maxed."
    if player.skill_points < TALENT_COST:
        return "No skill points left."

    player.skill_points -= TALENT_COST
    player.talents[talent] = rank + 1
    player.clamp_pools()
    return f"{talent.capitalize()} upgraded to rank {rank + 1}."
