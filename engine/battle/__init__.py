"""
Battle engine module.

- combat.py: one player/enemy exchange (hit, crit, dodge, block, mitigation,
  counter-attack, knock-out)
"""

from .combat import CombatResult, resolve_combat_tick

__all__ = ["CombatResult", "resolve_combat_tick"]
