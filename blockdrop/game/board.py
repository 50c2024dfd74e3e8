"""
Board logic for a 10x22 grid (20 visible rows under a 2-row hidden buffer).

The board is a 2D numpy array (height x width) of int8 values:
  - 0 = empty cell
  - 1-7 = PieceType value of the piece that locked there (used for coloring)

Validity checks and placement are separate operations so the engine can
probe candidate poses before committing one.
"""

from __future__ import annotations

import numpy as np

from blockdrop.game.pieces import (
    COL_COUNT,
    HIDDEN_ROW_COUNT,
    ROW_COUNT,
    PieceType,
    occupied_cells,
)

EMPTY = 0


class Board:
    """Tetris board with collision detection and line clearing.

    Attributes:
        width: Number of columns (default 10).
        height: Number of rows including the hidden buffer (default 22).
        hidden_rows: Number of buffer rows above the visible area.
        grid: 2D numpy array of shape (height, width), dtype int8.
    """

    def __init__(
        self,
        width: int = COL_COUNT,
        height: int = ROW_COUNT,
        hidden_rows: int = HIDDEN_ROW_COUNT,
    ) -> None:
        """Initialize an empty board.

        Args:
            width: Number of columns.
            height: Total number of rows (including hidden buffer).
            hidden_rows: Rows at the top that are not drawn.

        Raises:
            ValueError: If the dimensions cannot hold a piece.
        """
        if width < 4 or height < 4:
            raise ValueError(f"Board too small: {width}x{height}")
        if not 0 <= hidden_rows < height:
            raise ValueError(f"hidden_rows must be in [0, {height}), got {hidden_rows}")
        self.width = width
        self.height = height
        self.hidden_rows = hidden_rows
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    @property
    def visible_height(self) -> int:
        """Number of rows drawn on screen."""
        return self.height - self.hidden_rows

    def is_valid_and_empty(self, piece_type: PieceType, col: int, row: int, rotation: int) -> bool:
        """Check whether a piece at (col, row) with given rotation fits.

        A position is valid if every filled cell of the piece:
          - Is within the column range (0 <= col < width).
          - Is above the floor (row < height). Rows above the top of the
            grid are allowed and count as empty.
          - Does not overlap a filled cell on the board grid.

        Args:
            piece_type: The tetromino to test.
            col: Column of the piece's bounding-box top-left corner.
            row: Row of the piece's bounding-box top-left corner.
            rotation: Rotation state index (0-3).

        Returns:
            True if the position is valid, False otherwise.
        """
        for r, c in occupied_cells(piece_type, rotation):
            board_row = row + r
            board_col = col + c
            if board_col < 0 or board_col >= self.width:
                return False
            if board_row >= self.height:
                return False
            if board_row >= 0 and self.grid[board_row, board_col] != EMPTY:
                return False
        return True

    def add_piece(self, piece_type: PieceType, col: int, row: int, rotation: int) -> None:
        """Lock a piece onto the board at the given position.

        Writes the piece's type value into the board grid at each filled
        cell. Does NOT check validity first; the caller must ensure the
        position is valid. Cells above the grid are dropped.

        Args:
            piece_type: The tetromino being locked.
            col: Column of the piece's bounding-box top-left corner.
            row: Row of the piece's bounding-box top-left corner.
            rotation: Rotation state index (0-3).
        """
        for r, c in occupied_cells(piece_type, rotation):
            if row + r >= 0:
                self.grid[row + r, col + c] = int(piece_type)

    def check_lines(self) -> int:
        """Remove all fully filled rows and shift everything above them down.

        All full rows are removed at once; the rows above keep their order
        and new empty rows appear at the top.

        Returns:
            The number of lines cleared (0-4).
        """
        full = np.all(self.grid != EMPTY, axis=1)
        lines_cleared = int(full.sum())
        if lines_cleared == 0:
            return 0

        remaining = self.grid[~full]
        empty_rows = np.zeros((lines_cleared, self.width), dtype=np.int8)
        self.grid = np.vstack([empty_rows, remaining])
        return lines_cleared

    def clear(self) -> None:
        """Clear the entire board, setting all cells to empty."""
        self.grid.fill(EMPTY)

    def is_occupied(self, col: int, row: int) -> bool:
        """Return True if a locked block fills (col, row)."""
        return self.grid[row, col] != EMPTY

    def get_tile(self, col: int, row: int) -> PieceType | None:
        """Return the piece type locked at (col, row), or None if empty."""
        value = int(self.grid[row, col])
        return PieceType(value) if value != EMPTY else None

    def occupied_count(self) -> int:
        """Return the number of filled cells."""
        return int(np.count_nonzero(self.grid))

    def get_grid(self) -> np.ndarray:
        """Return a copy of the board grid.

        Returns:
            A numpy array of shape (height, width), dtype int8.
        """
        return self.grid.copy()
