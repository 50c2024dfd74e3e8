"""
Pygame renderer for the game.

Draws the board panel (visible rows only), the active piece, a side panel
with the next piece, score, level and controls, and the pause / new game /
game over banners plus the leaderboard and name-entry overlays.

The renderer only reads GameSnapshot values and leaderboard entries; it
never touches the engine.
"""

from __future__ import annotations

from typing import Sequence

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore[assignment]

from blockdrop.game.engine import GameSnapshot, GameStatus
from blockdrop.game.pieces import PieceType, color, dimension, occupied_cells
from blockdrop.leaderboard import PlayerScore


# ── Color constants ───────────────────────────────────────────────────────
BACKGROUND_COLOR = (30, 30, 30)
GRID_LINE_COLOR = (60, 60, 60)
BORDER_COLOR = (200, 200, 200)
TEXT_COLOR = (255, 255, 255)
DIM_TEXT_COLOR = (170, 170, 170)
SIDEBAR_BG_COLOR = (20, 20, 20)
EMPTY_CELL_COLOR = (40, 40, 40)
OVERLAY_ALPHA = 170

CONTROLS: list[tuple[str, str]] = [
    ("A / D", "move"),
    ("Q / E", "rotate"),
    ("S", "soft drop"),
    ("P", "pause"),
    ("Enter", "start"),
    ("L", "leaderboard"),
]


def _darker(rgb: tuple[int, int, int]) -> tuple[int, int, int]:
    return tuple(max(0, c - 40) for c in rgb)  # type: ignore[return-value]


class GameRenderer:
    """Pygame-based renderer.

    The window is divided into:
      - Left: board area (cell_size * columns) x (cell_size * visible rows)
      - Right: sidebar with next piece, score, level and controls

    Attributes:
        cell_size: Pixel size of each grid cell.
        board_pixel_width: Pixel width of the board area.
        board_pixel_height: Pixel height of the board area.
        sidebar_width: Pixel width of the sidebar.
        screen: Pygame display surface (created on first render).
    """

    SIDEBAR_WIDTH_CELLS: int = 7

    def __init__(self, columns: int, visible_rows: int, cell_size: int = 30, title: str = "BlockDrop") -> None:
        """Initialize the renderer.

        Does NOT create the Pygame window yet; that happens on the first
        call to render().

        Args:
            columns: Board width in cells.
            visible_rows: Number of rows drawn (hidden buffer excluded).
            cell_size: Size of each grid cell in pixels.
            title: Window caption.
        """
        if pygame is None:
            raise ImportError("pygame is required for rendering. Install it: pip install pygame")

        self.columns = columns
        self.visible_rows = visible_rows
        self.cell_size = cell_size
        self.title = title

        self.board_pixel_width = cell_size * columns
        self.board_pixel_height = cell_size * visible_rows
        self.sidebar_width = cell_size * self.SIDEBAR_WIDTH_CELLS
        self.window_width = self.board_pixel_width + self.sidebar_width
        self.window_height = self.board_pixel_height

        self.screen: pygame.Surface | None = None
        self._font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None
        self._large_font: pygame.font.Font | None = None
        self._initialized: bool = False

    def render(
        self,
        snapshot: GameSnapshot,
        leaderboard: Sequence[PlayerScore] | None = None,
        name_prompt: str | None = None,
    ) -> None:
        """Draw one frame.

        Args:
            snapshot: Game state to draw.
            leaderboard: Entries to show in an overlay, or None to hide it.
            name_prompt: Current name-entry text, or None when not asking.
        """
        if not self._initialized:
            self._init_pygame()

        self.screen.fill(BACKGROUND_COLOR)
        self._draw_board(snapshot)
        if snapshot.status in (GameStatus.RUNNING, GameStatus.PAUSED):
            self._draw_current_piece(snapshot)
        self._draw_sidebar(snapshot)

        pygame.draw.rect(
            self.screen,
            BORDER_COLOR,
            (0, 0, self.board_pixel_width, self.board_pixel_height),
            2,
        )

        if name_prompt is not None:
            self._draw_name_entry(snapshot.score, name_prompt)
        elif leaderboard is not None:
            self._draw_leaderboard(leaderboard)
        else:
            self._draw_status_banner(snapshot.status)

        pygame.display.flip()

    def _init_pygame(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption(self.title)
        self._font = pygame.font.SysFont("monospace", 20)
        self._small_font = pygame.font.SysFont("monospace", 14)
        self._large_font = pygame.font.SysFont("monospace", 30, bold=True)
        self._initialized = True

    def _draw_cell(self, x: int, y: int, size: int, rgb: tuple[int, int, int]) -> None:
        pygame.draw.rect(self.screen, rgb, (x, y, size, size))
        pygame.draw.rect(self.screen, _darker(rgb), (x, y, size, size), 1)

    def _draw_board(self, snapshot: GameSnapshot) -> None:
        """Draw locked cells and grid lines for the visible rows."""
        for row in range(self.visible_rows):
            for col in range(self.columns):
                value = int(snapshot.board[snapshot.hidden_rows + row, col])
                x = col * self.cell_size
                y = row * self.cell_size
                if value:
                    self._draw_cell(x, y, self.cell_size, color(PieceType(value)))
                else:
                    pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, (x, y, self.cell_size, self.cell_size))
                pygame.draw.rect(self.screen, GRID_LINE_COLOR, (x, y, self.cell_size, self.cell_size), 1)

    def _draw_current_piece(self, snapshot: GameSnapshot) -> None:
        if snapshot.current_type is None:
            return
        rgb = color(snapshot.current_type)
        for r, c in occupied_cells(snapshot.current_type, snapshot.current_rotation):
            screen_row = snapshot.current_row + r - snapshot.hidden_rows
            board_col = snapshot.current_col + c
            if 0 <= screen_row < self.visible_rows and 0 <= board_col < self.columns:
                self._draw_cell(board_col * self.cell_size, screen_row * self.cell_size, self.cell_size, rgb)

    def _draw_sidebar(self, snapshot: GameSnapshot) -> None:
        sidebar_x = self.board_pixel_width
        pygame.draw.rect(
            self.screen,
            SIDEBAR_BG_COLOR,
            (sidebar_x, 0, self.sidebar_width, self.window_height),
        )
        pygame.draw.line(
            self.screen,
            BORDER_COLOR,
            (sidebar_x, 0),
            (sidebar_x, self.window_height),
            2,
        )

        x = sidebar_x + 15
        self._draw_piece_preview(snapshot.next_type, x, 20, "NEXT")

        text_y = 170
        self._draw_text("SCORE", x, text_y)
        self._draw_text(str(snapshot.score), x, text_y + 25)
        text_y += 65
        self._draw_text("LEVEL", x, text_y)
        self._draw_text(str(snapshot.level), x, text_y + 25)

        text_y += 80
        self._draw_text("CONTROLS", x, text_y, font=self._small_font)
        for key, action in CONTROLS:
            text_y += 20
            self._draw_text(f"{key:<6}{action}", x, text_y, DIM_TEXT_COLOR, font=self._small_font)

    def _draw_piece_preview(self, piece_type: PieceType | None, x_offset: int, y_offset: int, label: str) -> None:
        """Draw a small spawn-rotation preview centered in a box."""
        preview_cell = self.cell_size * 2 // 3
        box_size = preview_cell * 5

        self._draw_text(label, x_offset, y_offset)
        box_y = y_offset + 25
        pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, (x_offset, box_y, box_size, box_size))
        pygame.draw.rect(self.screen, BORDER_COLOR, (x_offset, box_y, box_size, box_size), 1)

        if piece_type is None:
            return

        size = dimension(piece_type)
        offset_x = x_offset + (box_size - size * preview_cell) // 2
        offset_y = box_y + (box_size - size * preview_cell) // 2
        rgb = color(piece_type)
        for r, c in occupied_cells(piece_type, 0):
            self._draw_cell(offset_x + c * preview_cell, offset_y + r * preview_cell, preview_cell, rgb)

    def _draw_overlay(self) -> None:
        overlay = pygame.Surface((self.board_pixel_width, self.board_pixel_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, OVERLAY_ALPHA))
        self.screen.blit(overlay, (0, 0))

    def _draw_centered(self, text: str, y: int, font, rgb: tuple[int, int, int] = TEXT_COLOR) -> None:
        surface = font.render(text, True, rgb)
        self.screen.blit(surface, ((self.board_pixel_width - surface.get_width()) // 2, y))

    def _draw_status_banner(self, status: GameStatus) -> None:
        if status is GameStatus.RUNNING:
            return
        self._draw_overlay()
        cy = self.board_pixel_height // 2
        if status is GameStatus.NEW_GAME:
            self._draw_centered("BLOCKDROP", cy - 40, self._large_font)
            self._draw_centered("Press Enter to play", cy + 10, self._small_font)
        elif status is GameStatus.PAUSED:
            self._draw_centered("PAUSED", cy - 40, self._large_font)
            self._draw_centered("Press P to resume", cy + 10, self._small_font)
        else:
            self._draw_centered("GAME OVER", cy - 40, self._large_font, (255, 50, 50))
            self._draw_centered("Press Enter to restart", cy + 10, self._small_font)

    def _draw_leaderboard(self, entries: Sequence[PlayerScore]) -> None:
        self._draw_overlay()
        y = 30
        self._draw_centered("LEADERBOARD", y, self._large_font)
        y += 50
        if not entries:
            self._draw_centered("No scores yet", y, self._small_font, DIM_TEXT_COLOR)
        for rank, entry in enumerate(entries[:15], start=1):
            self._draw_centered(f"{rank:>2}. {entry.name[:10]:<10} {entry.score:>7}", y, self._small_font)
            y += 22
        self._draw_centered("Press L to close", self.board_pixel_height - 40, self._small_font, DIM_TEXT_COLOR)

    def _draw_name_entry(self, score: int, name: str) -> None:
        self._draw_overlay()
        cy = self.board_pixel_height // 2
        self._draw_centered("GAME OVER", cy - 80, self._large_font, (255, 50, 50))
        self._draw_centered(f"Score: {score}", cy - 35, self._font)
        self._draw_centered("Enter your name:", cy, self._small_font)
        self._draw_centered(name + "_", cy + 25, self._font)
        self._draw_centered("Enter to save, Esc to skip", cy + 65, self._small_font, DIM_TEXT_COLOR)

    def _draw_text(self, text: str, x: int, y: int, rgb: tuple[int, int, int] = TEXT_COLOR, font=None) -> None:
        surface = (font or self._font).render(text, True, rgb)
        self.screen.blit(surface, (x, y))

    def close(self) -> None:
        """Shut down Pygame and close the window."""
        if self._initialized:
            pygame.quit()
            self._initialized = False
