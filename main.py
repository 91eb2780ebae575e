import os
import sys
from functools import partial
from pathlib import Path

import pygame

from settings import TITLE, FPS
from engine.config import load_config
from engine.error_handler import get_logger
from engine.game import Game
from engine.utils.save_system import load_game, save_game
from telemetry.logger import telemetry

log = get_logger("main")

TELEMETRY_FILE = Path(__file__).resolve().parent / "logs" / "telemetry.jsonl"


def main() -> None:
    # No window: the dummy driver still gives us a clock and an event queue
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    pygame.init()
    config = load_config()

    state = load_game(config.save_slot)
    if config.telemetry:
        telemetry.init(TELEMETRY_FILE)

    game = Game(
        state=state,
        config=config,
        persist=partial(save_game, slot=config.save_slot),
        telemetry=telemetry if config.telemetry else None,
    )

    clock = pygame.time.Clock()
    log.info(f"{TITLE} started (slot {config.save_slot})")

    # --- Main loop (headless) ---
    running = True
    try:
        while running:
            dt = clock.tick(FPS) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False

            game.update(dt)
            if game.session_over():
                running = False
    except KeyboardInterrupt:
        log.info("Interrupted")

    save_game(game.state, slot=config.save_slot)
    print(game.summary())
    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
