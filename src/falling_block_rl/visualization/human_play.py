from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict

import pygame

from falling_block_rl.game import FallingBlockGame, GameConfig
from .renderer import Renderer


logger = logging.getLogger(__name__)


KEY_TO_COMMAND: Dict[int, Callable[[FallingBlockGame], object]] = {
    pygame.K_LEFT: lambda g: g.try_move(-1, 0),
    pygame.K_RIGHT: lambda g: g.try_move(1, 0),
    pygame.K_UP: FallingBlockGame.try_rotate,
    pygame.K_z: FallingBlockGame.try_rotate,
    pygame.K_DOWN: FallingBlockGame.soft_drop,
    pygame.K_SPACE: FallingBlockGame.hard_drop,
}

QUIT_KEYS = (pygame.K_ESCAPE, pygame.K_q)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the falling block game in a pygame window.")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--fps", type=int, default=60)
    p.add_argument("--log-level", default="WARNING")
    return p


def _wait_for_retry(clock: pygame.time.Clock) -> bool:
    """Block until R (retry, True) or quit (False)."""
    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                if event.key in QUIT_KEYS:
                    return False
                if event.key == pygame.K_r:
                    return True
        clock.tick(20)


def run(seed: int | None = None, cell_size: int = 28, fps: int = 60) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        game = FallingBlockGame(GameConfig(random_seed=seed))
        renderer = Renderer(cell_size=cell_size)

        screen = pygame.display.set_mode(renderer.window_size(game.grid.width, game.grid.height))
        pygame.display.set_caption("Falling Block - Human Play")

        running = True
        while running:
            renderer.draw(screen, game.snapshot())

            if game.game_over:
                if not _wait_for_retry(clock):
                    break
                logger.info("Retry after score %d", game.score)
                game.reset()
                clock.tick()
                continue

            # At most one command per frame; later events stay queued
            while True:
                event = pygame.event.poll()
                if event.type == pygame.NOEVENT:
                    break
                if event.type == pygame.QUIT:
                    running = False
                    break
                if event.type == pygame.KEYDOWN:
                    if event.key in QUIT_KEYS:
                        running = False
                        break
                    command = KEY_TO_COMMAND.get(event.key)
                    if command is not None:
                        command(game)
                        break

            game.tick(clock.tick(fps))
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s - %(message)s")
    run(seed=args.seed, cell_size=args.cell_size, fps=args.fps)


if __name__ == "__main__":  # pragma: no cover
    main()
