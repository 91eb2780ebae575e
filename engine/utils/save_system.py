"""
Save/Load system for the game.

Handles serialization and deserialization of game state to/from JSON files.

The bundle has four sections (player, enemies, inventory, skills) plus a
little metadata. Loading is tolerant: bad or missing fields fall back to
defaults with a logged warning, and items in the old single-weapon shape
are migrated to structured Equipment.
"""

import json
import math
import time
from dataclasses import fields, replace
from pathlib import Path
from typing import Optional, Dict, Any, List

from settings import SKILL_BAR_SLOTS
from engine.error_handler import SaveError, ValidationError, get_logger, handle_recoverable_error
from engine.state import GameState, new_game_state
from systems.affixes import Affix
from systems.enemies import SPECIAL_ABILITIES, Enemy, reserve_enemy_ids
from systems.equipment import DAMAGE_TYPES, EQUIPMENT_SLOTS, Equipment
from systems.gems import SkillGem, SupportGem, create_skill_gem, create_support_gem
from systems.inventory import Inventory
from systems.progression import TALENT_IDS, Player
from systems.stats import ATTRIBUTE_BASELINE
from systems.stones import Stone

log = get_logger("save")

SAVE_VERSION = 2

# Save directory (in project root / saves)
SAVE_DIR = Path(__file__).resolve().parent.parent.parent / "saves"


def get_save_path(slot: int = 1, save_dir: Optional[Path] = None) -> Path:
    """Get the file path for a save slot."""
    directory = Path(save_dir) if save_dir is not None else SAVE_DIR
    return directory / f"save_{slot}.json"


def save_game(state: GameState, slot: int = 1, save_dir: Optional[Path] = None) -> bool:
    """
    Save the game state to a slot file.

    Args:
        state: The GameState to save
        slot: Save slot number (1-9)
        save_dir: override for the saves directory

    Returns:
        True if save was successful, False otherwise
    """
    try:
        save_data = serialize_state(state)
        save_path = get_save_path(slot, save_dir)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        # Write to a temporary file first, then rename (atomic write)
        temp_path = save_path.with_suffix(".tmp")
        with temp_path.open("w", encoding="utf-8") as f:
            json.dump(save_data, f, indent=2, ensure_ascii=False)

        # Atomic rename
        temp_path.replace(save_path)
        return True
    except (OSError, TypeError, ValueError) as e:
        handle_recoverable_error(e, context=f"save_game(slot={slot})")
        return False


def _read_bundle(save_path: Path) -> Dict[str, Any]:
    try:
        with save_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SaveError(f"Could not read {save_path.name}: {e}") from e
    if not isinstance(data, dict):
        raise SaveError(f"{save_path.name} does not hold a save bundle")
    return data


def load_game(slot: int = 1, save_dir: Optional[Path] = None) -> GameState:
    """
    Load a game state from a save file.

    A missing or corrupt slot yields a fresh default state; the core never
    sees a load failure.
    """
    save_path = get_save_path(slot, save_dir)
    if not save_path.exists():
        return new_game_state()
    try:
        bundle = _read_bundle(save_path)
    except SaveError as e:
        handle_recoverable_error(e, context=f"load_game(slot={slot})")
        return new_game_state()
    return state_from_bundle(bundle)


def list_saves(save_dir: Optional[Path] = None) -> Dict[int, Dict[str, Any]]:
    """
    List all available save files with metadata.

    Returns:
        Dict mapping slot numbers to save metadata (level, gold, timestamp)
    """
    saves = {}

    for slot in range(1, 10):  # Slots 1-9
        save_path = get_save_path(slot, save_dir)
        if not save_path.exists():
            continue

        try:
            data = _read_bundle(save_path)
        except SaveError:
            # Corrupted save file, skip it
            log.debug(f"Skipping unreadable save slot {slot}")
            continue

        player = data.get("player") if isinstance(data.get("player"), dict) else {}
        saves[slot] = {
            "level": _as_int(player.get("level"), 1, "player.level"),
            "gold": _as_int(player.get("gold"), 0, "player.gold"),
            "timestamp": save_path.stat().st_mtime,
        }

    return saves


# -----------------------------------------------------------------------------
# Serialization helpers
# -----------------------------------------------------------------------------

def serialize_state(state: GameState) -> Dict[str, Any]:
    """Convert a GameState to a JSON-serializable bundle."""
    return {
        "version": SAVE_VERSION,
        "player": _serialize_player(state.player),
        "enemies": [_serialize_enemy(e) for e in state.enemies],
        "inventory": [_serialize_item(item) for item in state.inventory.items],
        "skills": dict(state.player.talents),
        "log": list(state.log),
        "__meta": {"last_saved": time.time()},
    }


def _serialize_player(player: Player) -> Dict[str, Any]:
    return {
        "level": player.level,
        "xp": player.xp,
        "next_level_xp": player.next_level_xp,
        "hp": player.hp,
        "base_max_hp": player.base_max_hp,
        "mana": player.mana,
        "base_max_mana": player.base_max_mana,
        "base_damage": player.base_damage,
        "gold": player.gold,
        "skill_points": player.skill_points,
        "attributes": dict(player.attributes),
        "equipment": {slot: _serialize_item(item) for slot, item in player.equipment.items()},
        "skill_gems": [_serialize_skill_gem(g) for g in player.skill_gems],
        "support_gems": [_serialize_gem(g) for g in player.support_gems],
        "skill_bar": list(player.skill_bar),
        "passive_bonuses": dict(player.passive_bonuses),
    }


def _serialize_stone(stone: Stone) -> Dict[str, Any]:
    return {
        "kind": "stone",
        "id": stone.id,
        "name": stone.name,
        "base_type": stone.base_type,
        "rarity": stone.rarity,
        "level": stone.level,
        "base_stats": dict(stone.base_stats),
        "affixes": [a.to_dict() for a in stone.affixes],
        "socket_types": list(stone.socket_types),
        "value": stone.value,
    }


def _serialize_item(item) -> Dict[str, Any]:
    if isinstance(item, Stone):
        return _serialize_stone(item)
    return {
        "kind": "equipment",
        "id": item.id,
        "name": item.name,
        "base_type": item.base_type,
        "slot": item.slot,
        "category": item.category,
        "rarity": item.rarity,
        "level": item.level,
        "base_stats": dict(item.base_stats),
        "affixes": [a.to_dict() for a in item.affixes],
        "damage_type": item.damage_type,
        "requirements": dict(item.requirements),
        "value": item.value,
        "max_sockets": item.max_sockets,
        "sockets": [_serialize_stone(s) for s in item.sockets],
    }


def _serialize_gem(gem) -> Dict[str, Any]:
    # Templates hold the static data; only progress is stored.
    return {"id": gem.id, "level": gem.level, "rarity": gem.rarity, "quality": gem.quality}


def _serialize_skill_gem(gem: SkillGem) -> Dict[str, Any]:
    data = _serialize_gem(gem)
    data["support_gems"] = [_serialize_gem(s) for s in gem.support_gems]
    return data


def _serialize_enemy(enemy: Enemy) -> Dict[str, Any]:
    return {f.name: getattr(enemy, f.name) for f in fields(Enemy)}


# -----------------------------------------------------------------------------
# Deserialization helpers
# -----------------------------------------------------------------------------

def _as_int(value: Any, default: int, label: str) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        if value is not None:
            log.warning(f"Invalid {label}={value!r}; using {default}")
        return default
    if math.isnan(number) or math.isinf(number):
        log.warning(f"Invalid {label}={value!r}; using {default}")
        return default
    return int(number)


def _as_float(value: Any, default: float, label: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        if value is not None:
            log.warning(f"Invalid {label}={value!r}; using {default}")
        return default
    if math.isnan(number) or math.isinf(number):
        log.warning(f"Invalid {label}={value!r}; using {default}")
        return default
    return number


def _stat_map(data: Any, label: str) -> Dict[str, float]:
    if not isinstance(data, dict):
        return {}
    out: Dict[str, float] = {}
    for key, value in data.items():
        number = _as_float(value, float("nan"), f"{label}.{key}")
        if not math.isnan(number):
            out[str(key)] = number
    return out


def state_from_bundle(bundle: Any) -> GameState:
    """
    Rebuild a GameState from a save bundle.

    Anything missing or malformed is replaced by its default; a bundle that
    is not a dict at all gives a fresh state.
    """
    if not isinstance(bundle, dict):
        log.warning("Save bundle is not an object; starting a new game")
        return new_game_state()

    player_data = bundle.get("player")
    if not isinstance(player_data, dict):
        if player_data is not None:
            log.warning("Save has an invalid player section; using defaults")
        player_data = {}
    player = _deserialize_player(player_data, bundle.get("skills"))

    inventory = Inventory()
    items = bundle.get("inventory")
    if isinstance(items, list):
        for raw in items:
            item = _deserialize_item(raw)
            if item is not None and not inventory.add_item(item):
                log.warning(f"Inventory over capacity in save; dropped {item.name}")

    enemies: List[Enemy] = []
    raw_enemies = bundle.get("enemies")
    if isinstance(raw_enemies, list):
        for raw in raw_enemies:
            enemy = _deserialize_enemy(raw)
            if enemy is not None:
                enemies.append(enemy)
    reserve_enemy_ids(e.id for e in enemies)

    raw_log = bundle.get("log")
    entries = tuple(str(m) for m in raw_log) if isinstance(raw_log, list) else ()

    return GameState(player=player, enemies=tuple(enemies), inventory=inventory, log=entries)


def _deserialize_player(data: Dict[str, Any], talents: Any) -> Player:
    defaults = Player()
    player = Player(
        level=max(1, _as_int(data.get("level"), defaults.level, "player.level")),
        xp=max(0, _as_int(data.get("xp"), defaults.xp, "player.xp")),
        next_level_xp=max(1, _as_int(data.get("next_level_xp"), defaults.next_level_xp, "player.next_level_xp")),
        hp=_as_int(data.get("hp"), defaults.hp, "player.hp"),
        base_max_hp=max(1, _as_int(data.get("base_max_hp", data.get("max_hp")), defaults.base_max_hp,
                                   "player.base_max_hp")),
        mana=_as_int(data.get("mana"), defaults.mana, "player.mana"),
        base_max_mana=max(0, _as_int(data.get("base_max_mana", data.get("max_mana")), defaults.base_max_mana,
                                     "player.base_max_mana")),
        base_damage=_as_float(data.get("base_damage"), defaults.base_damage, "player.base_damage"),
        gold=max(0, _as_int(data.get("gold"), 0, "player.gold")),
        skill_points=max(0, _as_int(data.get("skill_points"), defaults.skill_points, "player.skill_points")),
    )

    attributes = _stat_map(data.get("attributes"), "player.attributes")
    for attr, baseline in ATTRIBUTE_BASELINE.items():
        player.attributes[attr] = int(attributes.get(attr, baseline))

    player.equipment = _deserialize_equipment_map(data)
    player.passive_bonuses = _stat_map(data.get("passive_bonuses"), "player.passive_bonuses")

    skill_gems = _deserialize_skill_gems(data.get("skill_gems"))
    if skill_gems is not None:
        player.skill_gems = skill_gems
    support_gems = _deserialize_support_gems(data.get("support_gems"))
    if support_gems is not None:
        player.support_gems = support_gems
    player.skill_bar = _deserialize_skill_bar(data.get("skill_bar"), player, defaults.skill_bar)

    if isinstance(talents, dict):
        for talent in TALENT_IDS:
            player.talents[talent] = max(0, _as_int(talents.get(talent), 0, f"skills.{talent}"))

    player.clamp_pools()
    if player.hp <= 0:
        player.hp = player.max_hp
    return player


def _deserialize_equipment_map(data: Dict[str, Any]) -> Dict[str, Equipment]:
    equipment: Dict[str, Equipment] = {}
    raw = data.get("equipment")
    if isinstance(raw, dict):
        for slot, raw_item in raw.items():
            item = _deserialize_item(raw_item)
            if isinstance(item, Equipment):
                equipment[item.slot] = item
            elif raw_item is not None:
                log.warning(f"Dropping invalid equipment in slot {slot!r}")
    elif raw is not None:
        log.warning("Save has invalid equipment; starting with none equipped")

    # The old single-weapon field
    legacy = data.get("equipped")
    if isinstance(legacy, dict) and "weapon" not in equipment:
        item = migrate_legacy_item(legacy)
        if item is not None:
            equipment["weapon"] = item
    return equipment


def _deserialize_affixes(raw: Any) -> tuple:
    if not isinstance(raw, list):
        return ()
    affixes: List[Affix] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        value = _as_float(entry.get("value"), float("nan"), f"affix.{entry.get('stat')}")
        if math.isnan(value):
            log.warning(f"Dropping affix {entry.get('stat')!r} without a usable value")
            continue
        tier = max(1, _as_int(entry.get("tier"), 1, "affix.tier"))
        affixes.append(Affix.from_dict({**entry, "value": value, "tier": tier}))
    return tuple(affixes)


def _damage_type(value: Any, slot: str) -> Optional[str]:
    """Known damage types only; weapons fall back to physical."""
    if value in DAMAGE_TYPES:
        return value
    fallback = "physical" if slot == "weapon" else None
    if value is not None:
        log.warning(f"Invalid damage_type={value!r}; using {fallback}")
    return fallback


def _special_ability(value: Any) -> Optional[str]:
    if value is None or value in SPECIAL_ABILITIES:
        return value
    log.warning(f"Unknown enemy ability {value!r}; dropping it")
    return None


def _deserialize_stone(data: Dict[str, Any]) -> Stone:
    return Stone(
        id=str(data["id"]),
        name=str(data.get("name", "Stone")),
        base_type=str(data.get("base_type", "")),
        rarity=str(data.get("rarity", "Common")),
        level=max(1, _as_int(data.get("level"), 1, "stone.level")),
        base_stats=_stat_map(data.get("base_stats"), "stone.base_stats"),
        affixes=_deserialize_affixes(data.get("affixes")),
        socket_types=tuple(str(s) for s in data.get("socket_types") or ()),
        value=max(1, _as_int(data.get("value"), 1, "stone.value")),
    )


def _deserialize_equipment(data: Dict[str, Any]) -> Equipment:
    slot = str(data["slot"])
    if slot not in EQUIPMENT_SLOTS:
        raise ValidationError(f"unknown equipment slot {slot!r}")
    sockets = tuple(
        _deserialize_stone(s) for s in data.get("sockets") or () if isinstance(s, dict) and "id" in s
    )
    return Equipment(
        id=str(data["id"]),
        name=str(data.get("name", "Item")),
        base_type=str(data.get("base_type", "")),
        slot=slot,
        category=str(data.get("category", "weapon")),
        rarity=str(data.get("rarity", "Common")),
        level=max(1, _as_int(data.get("level"), 1, "item.level")),
        base_stats=_stat_map(data.get("base_stats"), "item.base_stats"),
        affixes=_deserialize_affixes(data.get("affixes")),
        damage_type=_damage_type(data.get("damage_type"), slot),
        requirements={k: int(v) for k, v in _stat_map(data.get("requirements"), "item.requirements").items()},
        value=max(1, _as_int(data.get("value"), 1, "item.value")),
        max_sockets=max(0, _as_int(data.get("max_sockets"), 0, "item.max_sockets")),
        sockets=sockets,
    )


def _is_legacy_item(data: Dict[str, Any]) -> bool:
    return "power" in data or "extras" in data


def _deserialize_item(data: Any):
    """Equipment, Stone, or None for anything unreadable."""
    if not isinstance(data, dict):
        return None
    try:
        if _is_legacy_item(data):
            return migrate_legacy_item(data)
        if data.get("kind") == "stone":
            return _deserialize_stone(data)
        return _deserialize_equipment(data)
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        log.warning(f"Dropping unreadable item {data.get('id')!r}: {e}")
        return None


# Old extras keys -> current stat keys (projectileSpeed has no counterpart)
LEGACY_EXTRA_KEYS: Dict[str, str] = {
    "hp": "health",
    "dps": "damage",
    "elementalDamage": "damage",
    "critChance": "crit_chance",
    "dodgeChance": "dodge_chance",
    "lifeSteal": "life_steal",
    "armor": "armor",
}

LEGACY_BASE_TYPES: Dict[str, str] = {"melee": "sword", "ranged": "bow"}


def migrate_legacy_item(data: Dict[str, Any]) -> Optional[Equipment]:
    """
    Convert an old single-weapon item ({power, type, element, extras}) into
    a weapon Equipment. Unknown extras are dropped.
    """
    if not isinstance(data, dict) or "id" not in data:
        log.warning("Legacy item without an id; dropping it")
        return None

    base_stats: Dict[str, float] = {"damage": float(max(1, _as_int(data.get("power"), 1, "legacy.power")))}
    extras = data.get("extras")
    for extra in extras if isinstance(extras, list) else ():
        if not isinstance(extra, dict):
            continue
        stat = LEGACY_EXTRA_KEYS.get(str(extra.get("key")))
        if stat is None:
            continue
        value = _as_float(extra.get("val"), 0.0, f"legacy.{extra.get('key')}")
        base_stats[stat] = base_stats.get(stat, 0.0) + value

    element = data.get("element")
    damage_type = element if element in ("fire", "ice", "lightning", "poison") else "physical"
    legacy_type = str(data.get("type", "melee"))

    return Equipment(
        id=str(data["id"]),
        name=str(data.get("name", "Old Weapon")),
        base_type=LEGACY_BASE_TYPES.get(legacy_type, "sword"),
        slot="weapon",
        category="weapon",
        rarity=str(data.get("rarity", "Common")),
        level=max(1, _as_int(data.get("level"), 1, "legacy.level")),
        base_stats=base_stats,
        damage_type=damage_type,
        value=max(1, _as_int(data.get("value"), 1, "legacy.value")),
    )


def _deserialize_gem_progress(raw: Dict[str, Any], factory):
    gem = factory(
        str(raw.get("id")),
        level=max(1, _as_int(raw.get("level"), 1, "gem.level")),
        rarity=str(raw.get("rarity", "Normal")),
    )
    if gem is None:
        log.warning(f"Unknown gem {raw.get('id')!r} in save; dropping it")
        return None
    quality = max(0, min(20, _as_int(raw.get("quality"), 0, "gem.quality")))
    return replace(gem, quality=quality)


def _deserialize_support_gems(raw: Any) -> Optional[List[SupportGem]]:
    if not isinstance(raw, list):
        return None
    gems: List[SupportGem] = []
    for entry in raw:
        if isinstance(entry, dict):
            gem = _deserialize_gem_progress(entry, create_support_gem)
            if gem is not None and all(g.id != gem.id for g in gems):
                gems.append(gem)
    return gems


def _deserialize_skill_gems(raw: Any) -> Optional[List[SkillGem]]:
    if not isinstance(raw, list):
        return None
    gems: List[SkillGem] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        gem = _deserialize_gem_progress(entry, create_skill_gem)
        if gem is None or any(g.id == gem.id for g in gems):
            continue
        supports = _deserialize_support_gems(entry.get("support_gems")) or []
        gems.append(replace(gem, support_gems=tuple(supports)))
    return gems


def _deserialize_skill_bar(raw: Any, player: Player, default: List[Optional[str]]) -> List[Optional[str]]:
    if not isinstance(raw, list):
        if raw is not None:
            log.warning("Save has an invalid skill bar; using the default")
        raw = default
    bar: List[Optional[str]] = []
    for gem_id in raw[:SKILL_BAR_SLOTS]:
        if gem_id is not None and player.get_skill_gem(gem_id) is not None and gem_id not in bar:
            bar.append(gem_id)
        else:
            bar.append(None)
    bar.extend([None] * (SKILL_BAR_SLOTS - len(bar)))
    return bar


def _deserialize_enemy(data: Any) -> Optional[Enemy]:
    if not isinstance(data, dict):
        return None
    try:
        max_hp = max(1, _as_int(data.get("max_hp"), 1, "enemy.max_hp"))
        resistances = _stat_map(data.get("resistances"), "enemy.resistances")
        return Enemy(
            id=str(data["id"]),
            name=str(data.get("name", "Enemy")),
            level=max(1, _as_int(data.get("level"), 1, "enemy.level")),
            hp=max(0, min(max_hp, _as_int(data.get("hp"), max_hp, "enemy.hp"))),
            max_hp=max_hp,
            type=str(data.get("type", "melee")),
            special_ability=_special_ability(data.get("special_ability")),
            is_boss=bool(data.get("is_boss", False)),
            armor=max(0, _as_int(data.get("armor"), 0, "enemy.armor")),
            resistances=resistances,
            split_count=max(0, _as_int(data.get("split_count"), 0, "enemy.split_count")),
        )
    except KeyError as e:
        log.warning(f"Dropping enemy without {e}")
        return None
