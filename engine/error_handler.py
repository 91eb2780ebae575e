"""
Centralized error handling and logging.

This module provides:
- The "idle_exile" logger that every module hangs a child logger off
  (get_logger("loot") -> "idle_exile.loot"). Handlers are attached on
  first use: a daily DEBUG file under logs/ and a WARNING console stream.
- Exception types for the persistence / validation boundary
- Helpers to log a caught error and run a recovery action
"""
import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

ROOT_LOGGER_NAME = "idle_exile"

# Log files go next to the saves, in project root / logs
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

logger = logging.getLogger(ROOT_LOGGER_NAME)
logger.setLevel(logging.DEBUG)


def configure_logging(log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Attach the file and console handlers once.

    A log directory that cannot be created only costs the file handler;
    console output still works.
    """
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    directory = Path(log_dir) if log_dir is not None else LOG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
        log_file = directory / f"{ROOT_LOGGER_NAME}_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        logger.warning(f"File logging disabled: {e}")
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(area: str) -> logging.Logger:
    """Child logger under the game logger, e.g. get_logger("combat")."""
    configure_logging()
    return logger.getChild(area)


class GameError(Exception):
    """Base exception for game-specific errors."""
    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class SaveError(GameError):
    """A save slot could not be read or written."""
    pass


class ValidationError(GameError):
    """A persisted or incoming value failed validation."""
    pass


def log_error(error: Exception, context: str = "") -> None:
    """
    Log a caught error with where it happened.

    Args:
        error: The exception that occurred
        context: Where the error occurred (e.g., "load_game", "autosave")
    """
    configure_logging()
    trace = traceback.format_exc()
    logger.error(f"Error in {context}: {type(error).__name__}: {error}\n{trace}")


def handle_recoverable_error(
    error: Exception,
    context: str,
    recovery_action: Optional[Callable] = None,
) -> bool:
    """
    Log an error and try a recovery action.

    Returns:
        True if the recovery action ran, False if the caller should re-raise
    """
    log_error(error, context)
    if recovery_action is None:
        return False

    try:
        recovery_action()
    except Exception as recovery_error:
        log_error(recovery_error, f"{context}_recovery")
        return False
    logger.info(f"Recovery action executed for {context}")
    return True
