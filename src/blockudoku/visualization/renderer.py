from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

import pygame

from blockudoku.game import BlockudokuGame, ClearSet, Piece

from .layout import Layout

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class Theme:
    background: Color
    board: Color
    board_alt: Color
    grid_line: Color
    block: Color
    hand_block: Color
    ghost_valid: Color
    ghost_invalid: Color
    clear_hint: Color
    flash: Color
    text: Color
    accent: Color


DARK = Theme(
    background=(26, 26, 46),
    board=(40, 40, 62),
    board_alt=(48, 48, 74),
    grid_line=(22, 22, 36),
    block=(79, 172, 254),
    hand_block=(200, 180, 60),
    ghost_valid=(120, 220, 140),
    ghost_invalid=(220, 120, 120),
    clear_hint=(255, 235, 130),
    flash=(255, 255, 255),
    text=(230, 230, 230),
    accent=(255, 100, 100),
)

LIGHT = Theme(
    background=(227, 242, 253),
    board=(250, 250, 255),
    board_alt=(232, 236, 248),
    grid_line=(190, 200, 220),
    block=(33, 120, 220),
    hand_block=(230, 150, 40),
    ghost_valid=(60, 170, 90),
    ghost_invalid=(210, 80, 80),
    clear_hint=(250, 200, 60),
    flash=(255, 255, 200),
    text=(30, 30, 40),
    accent=(200, 40, 40),
)


class FloatingText:
    """'+points' label that drifts up and fades out over about 33 frames."""

    def __init__(self, x: float, y: float, text: str, speed: float = 2.0, decay: float = 0.03) -> None:
        self.x = x
        self.y = y
        self.text = text
        self.life = 1.0
        self.speed = speed
        self.decay = decay

    def update(self) -> bool:
        self.y -= self.speed
        self.life -= self.decay
        return self.life > 0


class Renderer:
    def __init__(self, layout: Layout, theme: Theme = DARK) -> None:
        self.layout = layout
        self.theme = theme
        self.floating_texts: List[FloatingText] = []
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    def set_theme(self, light: bool) -> None:
        self.theme = LIGHT if light else DARK

    @property
    def font(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 28)
        return self._font

    @property
    def big_font(self) -> pygame.font.Font:
        if self._big_font is None:
            self._big_font = pygame.font.SysFont(None, 44)
        return self._big_font

    def add_floating_score(self, piece: Piece, x: int, y: int, points: int) -> None:
        gx, gy = self.layout.grid_offset
        cx = gx + (x + piece.width / 2) * self.layout.cell_size
        cy = gy + (y + piece.height / 2) * self.layout.cell_size
        self.floating_texts.append(FloatingText(cx, cy, f"+{points}"))

    def update(self) -> None:
        self.floating_texts = [t for t in self.floating_texts if t.update()]

    def _draw_cell(self, screen: pygame.Surface, x: int, y: int, color: Color, width: int = 0) -> None:
        left, top, w, h = self.layout.cell_rect(x, y)
        pygame.draw.rect(screen, color, pygame.Rect(left + 1, top + 1, w - 2, h - 2), width, border_radius=4)

    def draw_grid(self, screen: pygame.Surface, game: BlockudokuGame) -> None:
        box = game.grid.box_size
        for y in range(game.grid.size):
            for x in range(game.grid.size):
                left, top, w, h = self.layout.cell_rect(x, y)
                alt = ((x // box) + (y // box)) % 2 == 1
                pygame.draw.rect(screen, self.theme.board_alt if alt else self.theme.board, pygame.Rect(left, top, w, h))
                pygame.draw.rect(screen, self.theme.grid_line, pygame.Rect(left, top, w, h), 1)
                if game.grid.cells[y, x]:
                    self._draw_cell(screen, x, y, self.theme.block)

    def draw_clear_flash(self, screen: pygame.Surface, game: BlockudokuGame) -> None:
        if not game.is_animating:
            return
        cells = game.pending_clears.cells(game.grid.size, game.grid.box_size)
        progress = game.animation_progress
        # white flash that shrinks towards the cell centre
        inset = int(self.layout.cell_size * 0.5 * progress)
        for x, y in cells:
            left, top, w, h = self.layout.cell_rect(x, y)
            rect = pygame.Rect(left + inset, top + inset, max(1, w - 2 * inset), max(1, h - 2 * inset))
            pygame.draw.rect(screen, self.theme.flash, rect, border_radius=4)

    def draw_hand(self, screen: pygame.Surface, hand: Iterable[Optional[Piece]], dragging: Optional[int] = None) -> None:
        size = self.layout.hand_cell_size
        for index, piece in enumerate(hand):
            if piece is None or index == dragging:
                continue
            sx, sy = self.layout.hand_slot_origin(index)
            for dx, dy in piece.cells():
                rect = pygame.Rect(sx + dx * size + 1, sy + dy * size + 1, size - 2, size - 2)
                pygame.draw.rect(screen, self.theme.hand_block, rect, border_radius=3)

    def draw_ghost(
        self,
        screen: pygame.Surface,
        game: BlockudokuGame,
        piece: Piece,
        x: int,
        y: int,
        clears: Optional[ClearSet],
    ) -> None:
        valid = clears is not None
        if clears:
            hint: Set[Tuple[int, int]] = clears.cells(game.grid.size, game.grid.box_size)
            for cx, cy in hint:
                self._draw_cell(screen, cx, cy, self.theme.clear_hint, 3)
        color = self.theme.ghost_valid if valid else self.theme.ghost_invalid
        for cx, cy in piece.cells_at(x, y):
            if game.grid.is_inside(cx, cy):
                self._draw_cell(screen, cx, cy, color, 0 if valid else 2)

    def draw_dragged_piece(self, screen: pygame.Surface, piece: Piece, px: float, py: float) -> None:
        size = self.layout.cell_size
        left = px - piece.width * size / 2
        top = py - piece.height * size / 2
        for dx, dy in piece.cells():
            rect = pygame.Rect(int(left + dx * size) + 2, int(top + dy * size) + 2, size - 4, size - 4)
            pygame.draw.rect(screen, self.theme.hand_block, rect, 2, border_radius=4)

    def draw_header(self, screen: pygame.Surface, game: BlockudokuGame) -> None:
        m = self.layout.margin
        text = f"Score {game.score:,}    Best {game.high_score:,}"
        if game.streak >= 2:
            text += f"    Streak x{game.streak}"
        screen.blit(self.font.render(text, True, self.theme.text), (m, m))

    def draw_floating_texts(self, screen: pygame.Surface) -> None:
        for item in self.floating_texts:
            img = self.font.render(item.text, True, self.theme.accent)
            img.set_alpha(int(255 * max(0.0, item.life)))
            screen.blit(img, img.get_rect(center=(int(item.x), int(item.y))))

    def draw_banner(self, screen: pygame.Surface, lines: List[str]) -> None:
        """Centered overlay used for game over and confirmation prompts."""
        overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 170))
        screen.blit(overlay, (0, 0))
        cx = screen.get_width() // 2
        y = screen.get_height() // 3
        for i, line in enumerate(lines):
            font = self.big_font if i == 0 else self.font
            img = font.render(line, True, (255, 255, 255))
            screen.blit(img, img.get_rect(center=(cx, y)))
            y += img.get_height() + 12

    def draw_leaderboard(self, screen: pygame.Surface, lines: List[str]) -> None:
        if not self.layout.panel_width:
            return
        x, y = self.layout.panel_origin
        title = self.big_font.render(lines[0], True, self.theme.text)
        screen.blit(title, (x, y))
        y += title.get_height() + 10
        for line in lines[1:]:
            img = self.font.render(line, True, self.theme.text)
            screen.blit(img, (x, y))
            y += img.get_height() + 6

    def draw(self, screen: pygame.Surface, game: BlockudokuGame, ghost=None, drag=None) -> None:
        screen.fill(self.theme.background)
        self.draw_header(screen, game)
        self.draw_grid(screen, game)
        self.draw_clear_flash(screen, game)
        dragging = drag[0] if drag else None
        self.draw_hand(screen, game.hand, dragging)
        if ghost is not None:
            self.draw_ghost(screen, game, *ghost)
        if drag is not None:
            _, piece, px, py = drag
            self.draw_dragged_piece(screen, piece, px, py)
        self.draw_floating_texts(screen)
