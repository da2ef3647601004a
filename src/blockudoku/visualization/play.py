from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

import pygame

from blockudoku.game import BlockudokuGame, GameConfig, GameEvent, JsonHighScoreStore, JsonSettingsFile, ThemePreference
from blockudoku.leaderboard import LeaderboardClient, LeaderboardWorker, ScoreBackupQueue
from blockudoku.leaderboard.config import MAX_USERNAME_LENGTH

from .input import PointerInput
from .layout import Layout
from .renderer import LIGHT, Renderer

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.expanduser("~"), ".blockudoku")
PANEL_WIDTH = 260


class PlaySession:
    """Glue between pygame events, the game, the leaderboard and the renderer."""

    def __init__(self, game: BlockudokuGame, layout: Layout, renderer: Renderer,
                 leaderboard: Optional[LeaderboardWorker] = None,
                 theme: Optional[ThemePreference] = None) -> None:
        self.game = game
        self.layout = layout
        self.renderer = renderer
        self.pointer = PointerInput(game, layout)
        self.leaderboard = leaderboard
        self.theme = theme or ThemePreference()
        self.confirm_restart = False
        self.restart_pending = False
        self.username = ""
        self.message = ""
        self.submitted = False
        self._animation_ms = 0.0
        self.renderer.set_theme(self.theme.load() == "light")
        game.add_listener(self._on_event)
        if self.leaderboard is not None:
            self.leaderboard.refresh()

    def _on_event(self, event: GameEvent, game: BlockudokuGame) -> None:
        if event is GameEvent.RESET:
            self.pointer.cancel()
            self.renderer.floating_texts.clear()
            self.username = ""
            self.message = ""
            self.submitted = False
        elif event is GameEvent.GAME_OVER:
            self.pointer.cancel()

    def restart(self) -> None:
        """Start over, once any clear animation in progress has finished."""
        self.confirm_restart = False
        if self.game.is_animating:
            self.restart_pending = True
            return
        self.restart_pending = False
        self.game.reset()

    def toggle_theme(self) -> None:
        light = self.renderer.theme is not LIGHT
        self.renderer.set_theme(light)
        self.theme.save("light" if light else "dark")

    def submit_score(self) -> None:
        if self.leaderboard is None or self.submitted or self.leaderboard.submitting:
            return
        name = self.username.strip() or "Anonymous"
        self.leaderboard.submit(name, self.game.score)
        self.message = "Submitting..."

    def _on_submit_outcome(self, outcome) -> None:
        if outcome.error is not None:
            self.message = f"Score rejected: {outcome.error}"
            return
        self.submitted = True
        if outcome.queued:
            self.message = "Offline - score saved, will sync later"
        else:
            self.message = f"Score submitted! Your rank: #{outcome.rank}"

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Returns False when the window should close."""
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.VIDEORESIZE:
            self.layout.fit(event.w, event.h)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if not self.confirm_restart:
                self.pointer.pointer_down(*event.pos)
        elif event.type == pygame.MOUSEMOTION:
            self.pointer.pointer_move(*event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            piece = self.pointer.selected_piece
            result = self.pointer.pointer_up(*event.pos)
            if result is not None and result.accepted and piece is not None:
                self.renderer.add_floating_score(piece, result.origin[0], result.origin[1], result.points)
        elif event.type == pygame.KEYDOWN:
            return self._handle_key(event)
        return True

    def _handle_key(self, event: pygame.event.Event) -> bool:
        if self.confirm_restart:
            if event.key in (pygame.K_y, pygame.K_RETURN):
                self.restart()
            elif event.key in (pygame.K_n, pygame.K_ESCAPE):
                self.confirm_restart = False
            return True
        if event.key == pygame.K_F5 and self.leaderboard is not None:
            self.leaderboard.refresh()
            return True
        if self.game.game_over:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_RETURN:
                if self.submitted or self.leaderboard is None:
                    self.restart()
                else:
                    self.submit_score()
            elif event.key == pygame.K_F2:
                self.restart()
            elif event.key == pygame.K_BACKSPACE:
                self.username = self.username[:-1]
            elif event.unicode and event.unicode.isprintable() and len(self.username) < MAX_USERNAME_LENGTH:
                self.username += event.unicode
            return True
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key == pygame.K_r:
            self.confirm_restart = True
        elif event.key == pygame.K_t:
            self.toggle_theme()
        return True

    def update(self, elapsed_ms: float) -> None:
        """Advance animations by wall-clock time; the game itself never reads the clock."""
        if self.game.is_animating:
            self._animation_ms += elapsed_ms
            step_ms = self.game.config.animation_step_ms
            while self.game.is_animating and self._animation_ms >= step_ms:
                self._animation_ms -= step_ms
                self.game.advance_animation()
        else:
            self._animation_ms = 0.0
        if self.restart_pending and not self.game.is_animating:
            self.restart()
        self.renderer.update()
        if self.leaderboard is not None:
            outcome = self.leaderboard.poll()
            if outcome is not None:
                self._on_submit_outcome(outcome)

    def leaderboard_lines(self) -> List[str]:
        lines = ["Leaderboard"]
        board = self.leaderboard
        if board is None:
            return lines
        if not board.loaded:
            lines.append("Loading...")
        elif not board.entries:
            lines.append("Failed to load" if board.load_failed else "No scores yet. Be the first!")
        else:
            for index, entry in enumerate(board.entries):
                lines.append(f"#{index + 1}  {entry.get('username', '?')}  {int(entry.get('score', 0)):,}")
            if board.load_failed:
                lines.append("(offline: local scores only)")
        lines.append("F5 to refresh")
        return lines

    def draw(self, screen: pygame.Surface) -> None:
        ghost = self.pointer.ghost()
        drag = None
        if self.pointer.is_dragging and self.pointer.selected_piece is not None:
            px, py = self.pointer.pointer
            drag = (self.pointer.selected_index, self.pointer.selected_piece, px, py)
        self.renderer.draw(screen, self.game, ghost=ghost, drag=drag)
        if self.leaderboard is not None:
            self.renderer.draw_leaderboard(screen, self.leaderboard_lines())
        if self.confirm_restart:
            self.renderer.draw_banner(screen, [
                "Restart?",
                "Your current progress will be lost.",
                "Y to restart, N to keep playing",
            ])
        elif self.game.game_over:
            lines = [
                "Game Over",
                f"Score {self.game.score:,}   Best {self.game.high_score:,}",
            ]
            if self.leaderboard is not None and not self.submitted:
                lines.append(f"Name: {self.username}_")
                lines.append("Enter to submit, F2 to play again")
            else:
                lines.append("Enter to play again")
            if self.message:
                lines.append(self.message)
            self.renderer.draw_banner(screen, lines)


def run(seed: Optional[int] = None, leaderboard_url: Optional[str] = None, data_dir: str = DATA_DIR) -> None:
    storage_path = os.path.join(data_dir, "storage.json")
    game = BlockudokuGame(GameConfig(random_seed=seed), store=JsonHighScoreStore(storage_path))
    theme = ThemePreference(JsonSettingsFile(storage_path))
    leaderboard = None
    if leaderboard_url:
        backup = ScoreBackupQueue(os.path.join(data_dir, "pending_scores.json"), LeaderboardClient(leaderboard_url))
        leaderboard = LeaderboardWorker(backup)

    pygame.init()
    try:
        layout = Layout(panel_width=PANEL_WIDTH if leaderboard else 0)
        screen = pygame.display.set_mode(layout.window_size, pygame.RESIZABLE)
        pygame.display.set_caption("Blockudoku")
        session = PlaySession(game, layout, Renderer(layout), leaderboard, theme)
        clock = pygame.time.Clock()

        running = True
        while running:
            for event in pygame.event.get():
                if not session.handle_event(event):
                    running = False
                    break
            session.update(clock.get_time())
            session.draw(screen)
            pygame.display.flip()
            clock.tick(60)
    finally:
        if leaderboard is not None:
            leaderboard.close()
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Blockudoku")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--leaderboard-url", type=str, default=os.getenv("BLOCKUDOKU_LEADERBOARD_URL"))
    p.add_argument("--data-dir", type=str, default=DATA_DIR)
    return p


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s: %(message)s", datefmt="%H:%M:%S")
    args = build_parser().parse_args()
    run(seed=args.seed, leaderboard_url=args.leaderboard_url, data_dir=args.data_dir)


if __name__ == "__main__":  # pragma: no cover
    main()
