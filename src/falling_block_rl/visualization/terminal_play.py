from __future__ import annotations

import argparse
import curses
import logging
import time
from typing import Dict

from falling_block_rl.game import FallingBlockGame, GameConfig, GameSnapshot, TetrominoType


logger = logging.getLogger(__name__)

POLL_MS = 50
CELL = "[]"

CURSES_COLORS: Dict[TetrominoType, int] = {
    TetrominoType.I: curses.COLOR_CYAN,
    TetrominoType.O: curses.COLOR_YELLOW,
    TetrominoType.T: curses.COLOR_MAGENTA,
    TetrominoType.S: curses.COLOR_GREEN,
    TetrominoType.Z: curses.COLOR_RED,
    TetrominoType.J: curses.COLOR_BLUE,
    TetrominoType.L: curses.COLOR_YELLOW,
}
GHOST_PAIR = len(TetrominoType) + 1

HELP = "<- -> move  down soft  space hard  up/z rotate  q quit"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the falling block game in the terminal.")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-file", default=None, help="write logs here; the screen is never used for logs")
    p.add_argument("--log-level", default="INFO")
    return p


def _init_colors() -> None:
    if not curses.has_colors():
        return
    curses.start_color()
    for kind, fg in CURSES_COLORS.items():
        curses.init_pair(int(kind), fg, curses.COLOR_BLACK)
    curses.init_pair(GHOST_PAIR, curses.COLOR_WHITE, curses.COLOR_BLACK)


def _attr(kind: TetrominoType) -> int:
    attr = curses.color_pair(int(kind)) if curses.has_colors() else 0
    if kind == TetrominoType.L:
        attr |= curses.A_DIM
    return attr | curses.A_BOLD


def draw(stdscr: "curses.window", snap: GameSnapshot) -> None:
    stdscr.erase()
    h, w = snap.grid.shape
    piece = set(snap.piece_cells)
    ghost = set(snap.ghost_cells) - piece

    stdscr.addstr(0, 0, "+" + "-" * (w * 2) + "+")
    for y in range(h):
        stdscr.addstr(y + 1, 0, "|")
        for x in range(w):
            col = 1 + x * 2
            v = int(snap.grid[y, x])
            if (x, y) in piece and not snap.game_over:
                stdscr.addstr(y + 1, col, CELL, _attr(snap.piece_kind))
            elif v:
                stdscr.addstr(y + 1, col, CELL, _attr(TetrominoType(v)))
            elif (x, y) in ghost and not snap.game_over:
                stdscr.addstr(y + 1, col, "::", curses.color_pair(GHOST_PAIR) | curses.A_DIM)
            else:
                stdscr.addstr(y + 1, col, " .")
        stdscr.addstr(y + 1, w * 2 + 1, "|")
    stdscr.addstr(h + 1, 0, "+" + "-" * (w * 2) + "+")
    stdscr.addstr(h + 2, 0, HELP)

    px = w * 2 + 4
    stdscr.addstr(1, px, "NEXT")
    for cx, cy in snap.next_cells:
        stdscr.addstr(3 + cy, px + cx * 2, CELL, _attr(snap.next_kind))
    stdscr.addstr(8, px, f"Score: {snap.score}")
    stdscr.addstr(10, px, f"Lines: {snap.lines}")
    stdscr.addstr(12, px, f"Level: {snap.level}")

    if snap.game_over:
        msgs = ("  GAME OVER  ", f"  Score: {snap.score}  ", "  R Retry  Q Quit  ")
        left = max(w + 1 - max(len(m) for m in msgs) // 2, 0)
        for i, msg in enumerate(msgs):
            stdscr.addstr(h // 2 + i, left, msg, curses.A_REVERSE)
    stdscr.refresh()


def apply_key(game: FallingBlockGame, key: int) -> bool:
    """Apply one key press. Returns False when the player quits."""
    if key in (ord("q"), ord("Q"), 27):
        return False
    if key == curses.KEY_LEFT:
        game.try_move(-1, 0)
    elif key == curses.KEY_RIGHT:
        game.try_move(1, 0)
    elif key == curses.KEY_DOWN:
        game.soft_drop()
    elif key in (curses.KEY_UP, ord("z"), ord("Z")):
        game.try_rotate()
    elif key == ord(" "):
        game.hard_drop()
    return True


def _loop(stdscr: "curses.window", seed: int | None) -> None:
    curses.curs_set(0)
    _init_colors()
    stdscr.timeout(POLL_MS)
    game = FallingBlockGame(GameConfig(random_seed=seed))
    last = time.monotonic()

    while True:
        draw(stdscr, game.snapshot())

        if game.game_over:
            key = stdscr.getch()
            if key in (ord("r"), ord("R")):
                logger.info("Retry after score %d", game.score)
                game.reset()
                last = time.monotonic()
            elif key in (ord("q"), ord("Q"), 27):
                return
            continue

        key = stdscr.getch()
        if key != -1 and not apply_key(game, key):
            return

        elapsed_ms = int((time.monotonic() - last) * 1000)
        game.tick(elapsed_ms)
        # Carry the sub-millisecond remainder into the next frame
        last += elapsed_ms / 1000


def main() -> None:
    args = build_parser().parse_args()
    if args.log_file:
        logging.basicConfig(filename=args.log_file, level=args.log_level.upper(),
                            format="%(asctime)s %(name)s %(levelname)s - %(message)s")
    else:
        logging.disable(logging.CRITICAL)
    try:
        # wrapper restores the terminal on every exit path
        curses.wrapper(_loop, args.seed)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":  # pragma: no cover
    main()
