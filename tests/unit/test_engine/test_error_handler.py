"""
Unit tests for error handling helpers.
"""

from engine.error_handler import SaveError, get_logger, handle_recoverable_error


class TestErrorHandler:
    """Tests for the logger hierarchy and recovery helper."""

    def test_child_logger(self):
        """Area loggers hang off the game logger."""
        assert get_logger("loot").name == "idle_exile.loot"

    def test_recovery_runs(self):
        """A recovery action is called and reported."""
        calls = []
        assert handle_recoverable_error(SaveError("boom"), "test", lambda: calls.append(1))
        assert calls == [1]

    def test_no_recovery(self):
        """Without a recovery action the caller decides."""
        assert not handle_recoverable_error(ValueError("boom"), "test")

    def test_failing_recovery(self):
        """A recovery action that raises counts as not recovered."""
        def explode():
            raise RuntimeError("again")
        assert not handle_recoverable_error(ValueError("boom"), "test", explode)

    def test_user_message_defaults(self):
        """GameError keeps a user-facing message."""
        assert SaveError("disk full").user_message == "disk full"
        assert SaveError("disk full", "Could not save").user_message == "Could not save"
