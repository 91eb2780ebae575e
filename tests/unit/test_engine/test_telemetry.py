"""
Unit tests for the telemetry logger.
"""

import json

from telemetry.logger import TelemetryLogger


class TestTelemetryLogger:
    """Tests for TelemetryLogger."""

    def test_disabled_without_path(self):
        """Nothing is written or counted before init()."""
        telemetry = TelemetryLogger()
        telemetry.log("anything")
        assert telemetry.counts == {}

    def test_writes_jsonl(self, tmp_path, sample_weapon):
        """Each event is one JSON line."""
        path = tmp_path / "logs" / "telemetry.jsonl"
        telemetry = TelemetryLogger()
        telemetry.init(path)
        telemetry.loot_drop(sample_weapon, sold=True)
        telemetry.level_up(12, levels_gained=2)
        telemetry.enemy_defeated("Goblin L10", 10, False, 40, 20)

        rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
        assert [r["event"] for r in rows] == ["telemetry_init", "loot_drop", "level_up", "enemy_defeated"]
        assert rows[1]["rarity"] == "Common"
        assert rows[1]["sold"] is True
        assert rows[2]["levels_gained"] == 2
        assert telemetry.counts["loot_drop"] == 1

    def test_never_raises(self, tmp_path):
        """Write errors are swallowed."""
        telemetry = TelemetryLogger()
        telemetry.init(tmp_path / "t.jsonl")
        telemetry.path = tmp_path  # a directory cannot be opened for append
        telemetry.log("broken")
        assert telemetry.counts["broken"] == 1
