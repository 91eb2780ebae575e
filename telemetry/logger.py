from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


@dataclass
class TelemetryLogger:
    """
    Append-only JSONL event log for balancing (drop rates, levelling pace).

    Disabled until init() is given a path. Writing never raises.
    """
    path: Optional[Path] = None
    enabled: bool = True
    flush_each_write: bool = False
    counts: Dict[str, int] = field(default_factory=dict)
    _started_at: float = field(default_factory=time.time)

    def init(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Touch file (don't overwrite)
        self.path.touch(exist_ok=True)
        self.log("telemetry_init", file=str(self.path))

    def log(self, event: str, **fields: Any) -> None:
        if not self.enabled or self.path is None:
            return

        self.counts[event] = self.counts.get(event, 0) + 1
        row: Dict[str, Any] = {
            "t": round(time.time() - self._started_at, 3),
            "ts": _now_iso(),
            "event": event,
            **fields,
        }

        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(row, ensure_ascii=False, default=str) + "\n")
                if self.flush_each_write:
                    f.flush()
        except (OSError, TypeError, ValueError):
            # Telemetry must never break the game.
            return

    # --- Game events ---

    def loot_drop(self, item, sold: bool = False) -> None:
        self.log(
            "loot_drop",
            kind=item.kind,
            rarity=item.rarity,
            level=item.level,
            base_type=item.base_type,
            value=item.value,
            sold=sold,
        )

    def level_up(self, level: int, levels_gained: int = 1) -> None:
        self.log("level_up", level=level, levels_gained=levels_gained)

    def enemy_defeated(self, name: str, level: int, is_boss: bool, xp: int, gold: int) -> None:
        self.log("enemy_defeated", name=name, level=level, is_boss=is_boss, xp=xp, gold=gold)


# global singleton (easy import everywhere)
telemetry = TelemetryLogger()
