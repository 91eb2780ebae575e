# engine/game.py

import random
from typing import Callable, List, Optional

from settings import MAX_ENEMIES, SPAWN_INTERVAL_MS
from engine.config import GameConfig
from engine.error_handler import get_logger
from engine.message_log import MessageLog
from engine.state import (
    CombatTick,
    GameState,
    Spawn,
    combat_interval_ms,
    new_game_state,
    reduce,
)
from telemetry.logger import TelemetryLogger

log = get_logger("game")


class IntervalTimer:
    """
    Fixed-period timer driven by frame deltas.

    advance() returns how many periods elapsed, so a long frame (or a
    paused window) catches up instead of silently dropping ticks.
    """

    def __init__(self, interval_ms: float) -> None:
        self.interval_ms: float = max(1.0, float(interval_ms))
        self.elapsed_ms: float = 0.0

    def advance(self, dt_ms: float) -> int:
        self.elapsed_ms += max(0.0, dt_ms)
        fired = int(self.elapsed_ms // self.interval_ms)
        self.elapsed_ms -= fired * self.interval_ms
        return fired

    def set_interval(self, interval_ms: float) -> None:
        self.interval_ms = max(1.0, float(interval_ms))


class Game:
    """
    Core game object: owns the current GameState and the two periodic
    drivers.

    - spawn driver: one Spawn every spawn interval while under the cap
    - combat driver: every combat interval, snapshot the enemy ids and
      dispatch one CombatTick per id (ids that disappear mid-batch are
      no-ops; enemies spawned mid-batch wait for the next batch)

    Every state-changing dispatch calls `persist` (fire-and-forget) when
    autosave is on, and forwards the reducer's events to telemetry and the
    loot feed.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        config: Optional[GameConfig] = None,
        rng=None,
        persist: Optional[Callable[[GameState], object]] = None,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self.state: GameState = state if state is not None else new_game_state()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.persist = persist
        self.telemetry = telemetry

        self.loot_feed = MessageLog()

        self.spawn_timer = IntervalTimer(self.config.spawn_interval_ms or SPAWN_INTERVAL_MS)
        self.combat_timer = IntervalTimer(combat_interval_ms(self.state.player))
        self.max_enemies: int = min(MAX_ENEMIES, self.config.max_enemies)

        # Running totals for the session summary
        self.kills: int = 0
        self.elapsed_seconds: float = 0.0

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, action) -> bool:
        """Reduce one action. Returns True if the state changed."""
        new_state = reduce(self.state, action, rng=self.rng)
        if new_state is self.state:
            return False
        self.state = new_state
        self._handle_events(new_state)
        if self.persist is not None and self.config.autosave:
            self.persist(new_state)
        return True

    def _handle_events(self, state: GameState) -> None:
        for name, payload in state.events:
            if name == "enemy_defeated":
                self.kills += 1
                if self.telemetry is not None:
                    self.telemetry.enemy_defeated(
                        payload["name"], payload["level"], payload["is_boss"],
                        payload["xp"], payload["gold"],
                    )
            elif name == "loot_drop":
                item = payload["item"]
                self.loot_feed.add_item_drop(item)
                if self.telemetry is not None:
                    self.telemetry.loot_drop(item, sold=payload["sold"])
            elif name == "level_up":
                log.info(f"Player reached level {payload['level']}")
                if self.telemetry is not None:
                    self.telemetry.level_up(payload["level"], payload["levels_gained"])

    # ------------------------------------------------------------------
    # Periodic drivers
    # ------------------------------------------------------------------

    def spawn_tick(self) -> bool:
        if len(self.state.enemies) >= self.max_enemies:
            return False
        return self.dispatch(Spawn(limit=self.max_enemies))

    def combat_batch(self) -> int:
        """Run one CombatTick per enemy alive at the start of the batch."""
        ids: List[str] = [e.id for e in self.state.enemies]
        changed = 0
        for enemy_id in ids:
            if self.dispatch(CombatTick(enemy_id, limit=self.max_enemies)):
                changed += 1
        return changed

    def update(self, dt: float) -> None:
        """
        Advance the drivers by dt seconds.
        """
        self.elapsed_seconds += dt
        dt_ms = dt * 1000.0

        for _ in range(self.spawn_timer.advance(dt_ms)):
            self.spawn_tick()

        for _ in range(self.combat_timer.advance(dt_ms)):
            self.combat_batch()
            # Talents and gear change the pace
            self.combat_timer.set_interval(combat_interval_ms(self.state.player))

    def session_over(self) -> bool:
        limit = self.config.session_seconds
        return bool(limit) and self.elapsed_seconds >= limit

    def summary(self) -> str:
        player = self.state.player
        return (
            f"Level {player.level} ({player.xp}/{player.next_level_xp} XP), "
            f"{player.gold} gold, {self.kills} kills, "
            f"{len(self.state.inventory)} items in bag"
        )
