"""
Game configuration system for saving/loading user preferences.
"""

import json
from pathlib import Path
from typing import Optional, Dict, Any

from settings import MAX_ENEMIES, SPAWN_INTERVAL_MS
from engine.error_handler import get_logger

log = get_logger("config")

# Config file location
CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
CONFIG_FILE = CONFIG_DIR / "settings.json"


class GameConfig:
    """Manages game configuration/settings."""

    def __init__(self) -> None:
        self.save_slot: int = 1
        self.autosave: bool = True
        self.spawn_interval_ms: int = SPAWN_INTERVAL_MS
        self.max_enemies: int = MAX_ENEMIES
        self.session_seconds: float = 0.0  # 0 = run until interrupted
        self.seed: Optional[int] = None
        self.telemetry: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for saving."""
        return {
            "save_slot": self.save_slot,
            "autosave": self.autosave,
            "spawn_interval_ms": self.spawn_interval_ms,
            "max_enemies": self.max_enemies,
            "session_seconds": self.session_seconds,
            "seed": self.seed,
            "telemetry": self.telemetry,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Load config from dictionary. Bad values keep their defaults."""
        defaults = GameConfig()
        self.save_slot = _coerce(data, "save_slot", int, defaults.save_slot)
        self.autosave = bool(data.get("autosave", defaults.autosave))
        self.spawn_interval_ms = max(1, _coerce(data, "spawn_interval_ms", int, defaults.spawn_interval_ms))
        self.max_enemies = max(1, _coerce(data, "max_enemies", int, defaults.max_enemies))
        self.session_seconds = max(0.0, _coerce(data, "session_seconds", float, defaults.session_seconds))
        seed = data.get("seed")
        self.seed = _coerce(data, "seed", int, None) if seed is not None else None
        self.telemetry = bool(data.get("telemetry", defaults.telemetry))

    def save(self, path: Optional[Path] = None) -> bool:
        """Save config to file."""
        path = Path(path) if path is not None else CONFIG_FILE
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            log.error(f"Error saving config: {e}")
            return False

    def load(self, path: Optional[Path] = None) -> bool:
        """Load config from file."""
        path = Path(path) if path is not None else CONFIG_FILE
        if not path.exists():
            return False

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning(f"Error loading config: {e}")
            return False
        if not isinstance(data, dict):
            log.warning(f"Ignoring config {path}: expected an object")
            return False
        self.from_dict(data)
        return True


def _coerce(data: Dict[str, Any], key: str, kind, default):
    if key not in data:
        return default
    try:
        return kind(data[key])
    except (TypeError, ValueError):
        log.warning(f"Config field {key!r} has invalid value {data[key]!r}; using {default!r}")
        return default


# Global config instance
_config = GameConfig()


def get_config() -> GameConfig:
    """Get the global config instance."""
    return _config


def load_config(path: Optional[Path] = None) -> GameConfig:
    """Load and return the config."""
    _config.load(path)
    return _config


def save_config(path: Optional[Path] = None) -> bool:
    """Save the global config."""
    return _config.save(path)
