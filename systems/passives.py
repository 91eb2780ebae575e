# systems/passives.py
"""
Passive bonus bundle.

The passive tree itself (graph, layout, allocation UI) lives outside the
core. The core only consumes the aggregated, additive stat bundle that
allocated nodes produce, stored on Player.passive_bonuses and folded into
CalculatedStats.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional


@dataclass(frozen=True)
class PassiveNode:
    id: str
    name: str
    stats: Dict[str, float] = field(default_factory=dict)


# --- Node registry ----------------------------------------------------------

_NODES: Dict[str, PassiveNode] = {}


def register(node: PassiveNode) -> None:
    _NODES[node.id] = node


def get_node(node_id: str) -> Optional[PassiveNode]:
    return _NODES.get(node_id)


def aggregate_passive_bonuses(
    allocated: Iterable[str],
    nodes: Optional[Mapping[str, PassiveNode]] = None,
) -> Dict[str, float]:
    """
    Sum the stats of every allocated node. Unknown ids are skipped.

    Args:
        allocated: ids of allocated nodes
        nodes: node table (defaults to the registry)
    """
    table = nodes if nodes is not None else _NODES
    bundle: Dict[str, float] = {}
    for node_id in allocated:
        node = table.get(node_id)
        if node is None:
            continue
        for stat, value in node.stats.items():
            bundle[stat] = bundle.get(stat, 0.0) + value
    return bundle


# --- Core nodes -------------------------------------------------------------

for _node in (
    PassiveNode("might", "Might", {"strength": 5}),
    PassiveNode("finesse", "Finesse", {"dexterity": 5}),
    PassiveNode("insight", "Insight", {"intelligence": 5}),
    PassiveNode("constitution", "Constitution", {"vitality": 5}),
    PassiveNode("sharpened_edge", "Sharpened Edge", {"damage": 3}),
    PassiveNode("thick_skin", "Thick Skin", {"armor": 5, "health": 20}),
    PassiveNode("keen_eye", "Keen Eye", {"crit_chance": 0.02, "accuracy": 0.02}),
    PassiveNode("fleet_foot", "Fleet Foot", {"dodge_chance": 0.02}),
    PassiveNode("bloodthirst", "Bloodthirst", {"life_steal": 0.02}),
    PassiveNode("prospector", "Prospector", {"gold_find": 0.1, "magic_find": 0.05}),
):
    register(_node)
