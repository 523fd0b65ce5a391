from __future__ import annotations

from typing import Tuple

import pygame

from falling_block_rl.game import GameSnapshot, TetrominoType, color


EMPTY = (20, 20, 26)
GHOST = (70, 70, 80)
TEXT = (230, 230, 230)


def _color_for_value(v: int) -> Tuple[int, int, int]:
    if v == 0:
        return EMPTY
    return color(TetrominoType(abs(v)))


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, panel_cells: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_cells = panel_cells
        self._font = None

    def window_size(self, width: int, height: int) -> Tuple[int, int]:
        board_w = width * self.cell_size
        panel_w = self.panel_cells * self.cell_size
        return board_w + panel_w + self.margin * 3, height * self.cell_size + self.margin * 2

    def _rect(self, x0: int, y0: int, x: int, y: int) -> pygame.Rect:
        return pygame.Rect(
            x0 + x * self.cell_size,
            y0 + y * self.cell_size,
            self.cell_size - 1,
            self.cell_size - 1,
        )

    def _grid_surface(self, snap: GameSnapshot) -> pygame.Surface:
        h, w = snap.grid.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                pygame.draw.rect(surf, _color_for_value(int(snap.grid[y, x])), self._rect(0, 0, x, y))
        if not snap.game_over:
            for x, y in snap.ghost_cells:
                if 0 <= y < h and snap.grid[y, x] == 0:
                    pygame.draw.rect(surf, GHOST, self._rect(0, 0, x, y), 2)
            for x, y in snap.piece_cells:
                if 0 <= y < h:
                    pygame.draw.rect(surf, snap.piece_color, self._rect(0, 0, x, y))
        return surf

    def _draw_panel(self, screen: pygame.Surface, snap: GameSnapshot, x0: int) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 28)
        y0 = self.margin
        screen.blit(self._font.render("NEXT", True, TEXT), (x0, y0))
        for px, py in snap.next_cells:
            pygame.draw.rect(screen, snap.next_color, self._rect(x0, y0 + 30, px, py))
        lines = (f"Score: {snap.score}", f"Lines: {snap.lines}", f"Level: {snap.level}")
        for i, text in enumerate(lines):
            y = y0 + 30 + 3 * self.cell_size + i * 30
            screen.blit(self._font.render(text, True, TEXT), (x0, y))

    def draw(self, screen: pygame.Surface, snap: GameSnapshot) -> None:
        grid_surf = self._grid_surface(snap)
        screen.fill((10, 10, 14))
        screen.blit(grid_surf, (self.margin, self.margin))
        self._draw_panel(screen, snap, self.margin * 2 + grid_surf.get_width())
        if snap.game_over:
            text = self._font.render("GAME OVER - R retry, ESC quit", True, (255, 255, 255))
            rect = text.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2))
            pygame.draw.rect(screen, (160, 20, 20), rect.inflate(20, 20))
            screen.blit(text, rect)
        pygame.display.flip()
