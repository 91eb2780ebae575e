from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from settings import COMBAT_LOG_MAX

# Type alias for RGB colors used by whatever renders the log
Color = Tuple[int, int, int]

# ---------------------------------------------------------------------------
# Rarity → color helpers (used to highlight loot drops)
# ---------------------------------------------------------------------------

_RARITY_COLORS: dict[str, Color] = {
    "common": (200, 200, 200),
    "magic": (120, 150, 255),
    "rare": (255, 230, 90),
    "legendary": (255, 150, 40),
    "mythic": (220, 90, 220),
    "divine": (120, 240, 240),
    "unique": (190, 140, 80),
    # stone tiers
    "mythical": (220, 90, 220),
}


def get_rarity_color(rarity: str) -> Optional[Color]:
    """
    Map an item rarity string to an RGB color.

    Returns None if the rarity is unknown, so callers can fall back
    to default text colors.
    """
    if not rarity:
        return None
    return _RARITY_COLORS.get(str(rarity).lower())


def _split_lines(value) -> List[str]:
    raw = "" if value is None else str(value)
    raw = raw.replace("\r\n", "\n").replace("\r", "\n")
    return [ln.strip() for ln in raw.split("\n") if ln.strip()]


def push_message(
    log: Sequence[str],
    value: str,
    max_size: int = COMBAT_LOG_MAX,
) -> Tuple[str, ...]:
    """
    Return a new newest-first log with `value` in front, capped at max_size.

    Multi-line values become one entry per non-empty line (the last line
    ends up newest). Empty values leave the log as it was.
    """
    lines = _split_lines(value)
    if not lines:
        return tuple(log)
    max_len = max(1, int(max_size))
    return (tuple(reversed(lines)) + tuple(log))[:max_len]


class MessageLog:
    """
    Colored, newest-first message feed.

    The game state keeps the plain combat log; this feed carries the
    per-line colors used to highlight loot by rarity.
    """

    def __init__(self, max_size: int = COMBAT_LOG_MAX) -> None:
        self.entries: List[str] = []
        # Parallel list: an optional color per entry (None = default color)
        self.colors: List[Optional[Color]] = []
        self.max_size: int = max_size

    def add_entry(self, value: str, color: Optional[Color] = None) -> None:
        """Add a message (multi-line allowed) with an optional color."""
        lines = _split_lines(value)
        if not lines:
            return
        for line in lines:
            self.entries.insert(0, line)
            self.colors.insert(0, color)

        max_len = max(1, int(self.max_size))
        del self.entries[max_len:]
        del self.colors[max_len:]

    def add_item_drop(self, item) -> None:
        self.add_entry(f"Loot: {item.name}", color=get_rarity_color(item.rarity))

    @property
    def last_message(self) -> str:
        return self.entries[0] if self.entries else ""

    @property
    def last_message_color(self) -> Optional[Color]:
        return self.colors[0] if self.colors else None

    def __len__(self) -> int:
        return len(self.entries)

    def clear(self) -> None:
        """Clear all messages."""
        self.entries = []
        self.colors = []
