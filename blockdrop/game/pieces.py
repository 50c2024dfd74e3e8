"""
Tetromino definitions: rotation states, bounding-box insets and spawn poses.

Every piece lives in a square bounding box (4x4 for I, 2x2 for O, 3x3 for
the rest). The four rotation states follow the standard SRS shapes
(0=spawn, 1=CW, 2=180, 3=CCW).

Coordinate convention:
  - Occupied cells are (row, col) offsets relative to the top-left corner
    of the bounding box.
  - On the board, row 0 is the top and row increases downward.
  - Column 0 is the left edge and column increases rightward.
"""

from __future__ import annotations

import enum
from typing import NamedTuple

import numpy as np

# =============================================================================
# Board dimensions
# =============================================================================
# 20 visible rows with a 2-row hidden buffer above them, where pieces spawn.

COL_COUNT = 10
VISIBLE_ROW_COUNT = 20
HIDDEN_ROW_COUNT = 2
ROW_COUNT = VISIBLE_ROW_COUNT + HIDDEN_ROW_COUNT

ROTATION_COUNT = 4

# =============================================================================
# Piece Colors: standard Tetris guideline colors (RGB)
# =============================================================================

COLOR_CYAN   = (0, 255, 255)    # I
COLOR_YELLOW = (255, 255, 0)    # O
COLOR_PURPLE = (128, 0, 128)    # T
COLOR_GREEN  = (0, 255, 0)      # S
COLOR_RED    = (255, 0, 0)      # Z
COLOR_BLUE   = (0, 0, 255)      # J
COLOR_ORANGE = (255, 165, 0)    # L


class PieceType(enum.IntEnum):
    """The seven tetrominoes. The value doubles as the board cell marker."""
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


class Insets(NamedTuple):
    """Empty columns/rows on each side of a piece's bounding box."""
    left: int
    right: int
    top: int
    bottom: int


# =============================================================================
# Tetromino Definitions
# =============================================================================
# Each rotation state is a square 2D numpy array where 1 marks a filled cell.

PIECE_DATA: dict[PieceType, dict] = {
    PieceType.I: {
        "color": COLOR_CYAN,
        "rotations": [
            np.array([
                [0, 0, 0, 0],
                [1, 1, 1, 1],
                [0, 0, 0, 0],
                [0, 0, 0, 0],
            ], dtype=np.int8),
            np.array([
                [0, 0, 1, 0],
                [0, 0, 1, 0],
                [0, 0, 1, 0],
                [0, 0, 1, 0],
            ], dtype=np.int8),
            np.array([
                [0, 0, 0, 0],
                [0, 0, 0, 0],
                [1, 1, 1, 1],
                [0, 0, 0, 0],
            ], dtype=np.int8),
            np.array([
                [0, 1, 0, 0],
                [0, 1, 0, 0],
                [0, 1, 0, 0],
                [0, 1, 0, 0],
            ], dtype=np.int8),
        ],
    },
    PieceType.O: {
        "color": COLOR_YELLOW,
        # All 4 rotations are identical for the O piece
        "rotations": [np.ones((2, 2), dtype=np.int8) for _ in range(ROTATION_COUNT)],
    },
    PieceType.T: {
        "color": COLOR_PURPLE,
        "rotations": [
            np.array([[0, 1, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
            np.array([[0, 1, 0], [0, 1, 1], [0, 1, 0]], dtype=np.int8),
            np.array([[0, 0, 0], [1, 1, 1], [0, 1, 0]], dtype=np.int8),
            np.array([[0, 1, 0], [1, 1, 0], [0, 1, 0]], dtype=np.int8),
        ],
    },
    PieceType.S: {
        "color": COLOR_GREEN,
        "rotations": [
            np.array([[0, 1, 1], [1, 1, 0], [0, 0, 0]], dtype=np.int8),
            np.array([[0, 1, 0], [0, 1, 1], [0, 0, 1]], dtype=np.int8),
            np.array([[0, 0, 0], [0, 1, 1], [1, 1, 0]], dtype=np.int8),
            np.array([[1, 0, 0], [1, 1, 0], [0, 1, 0]], dtype=np.int8),
        ],
    },
    PieceType.Z: {
        "color": COLOR_RED,
        "rotations": [
            np.array([[1, 1, 0], [0, 1, 1], [0, 0, 0]], dtype=np.int8),
            np.array([[0, 0, 1], [0, 1, 1], [0, 1, 0]], dtype=np.int8),
            np.array([[0, 0, 0], [1, 1, 0], [0, 1, 1]], dtype=np.int8),
            np.array([[0, 1, 0], [1, 1, 0], [1, 0, 0]], dtype=np.int8),
        ],
    },
    PieceType.J: {
        "color": COLOR_BLUE,
        "rotations": [
            np.array([[1, 0, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
            np.array([[0, 1, 1], [0, 1, 0], [0, 1, 0]], dtype=np.int8),
            np.array([[0, 0, 0], [1, 1, 1], [0, 0, 1]], dtype=np.int8),
            np.array([[0, 1, 0], [0, 1, 0], [1, 1, 0]], dtype=np.int8),
        ],
    },
    PieceType.L: {
        "color": COLOR_ORANGE,
        "rotations": [
            np.array([[0, 0, 1], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
            np.array([[0, 1, 0], [0, 1, 0], [0, 1, 1]], dtype=np.int8),
            np.array([[0, 0, 0], [1, 1, 1], [1, 0, 0]], dtype=np.int8),
            np.array([[1, 1, 0], [0, 1, 0], [0, 1, 0]], dtype=np.int8),
        ],
    },
}


def _compute_insets(shape: np.ndarray) -> Insets:
    filled_cols = np.any(shape != 0, axis=0)
    filled_rows = np.any(shape != 0, axis=1)
    return Insets(
        left=int(np.argmax(filled_cols)),
        right=int(np.argmax(filled_cols[::-1])),
        top=int(np.argmax(filled_rows)),
        bottom=int(np.argmax(filled_rows[::-1])),
    )


# Lookup tables built once at import; the geometry never changes afterwards.
_CELLS: dict[tuple[PieceType, int], frozenset[tuple[int, int]]] = {}
_INSETS: dict[tuple[PieceType, int], Insets] = {}
_DIMENSIONS: dict[PieceType, int] = {}

for _piece_type, _data in PIECE_DATA.items():
    _DIMENSIONS[_piece_type] = _data["rotations"][0].shape[0]
    for _rotation, _shape in enumerate(_data["rotations"]):
        _rows, _cols = np.nonzero(_shape)
        _CELLS[(_piece_type, _rotation)] = frozenset(
            (int(r), int(c)) for r, c in zip(_rows, _cols)
        )
        _INSETS[(_piece_type, _rotation)] = _compute_insets(_shape)


def occupied_cells(piece_type: PieceType, rotation: int) -> frozenset[tuple[int, int]]:
    """Return the (row, col) offsets a piece occupies in a rotation state.

    Args:
        piece_type: The tetromino.
        rotation: Rotation state (0-3).

    Returns:
        Frozen set of (row, col) offsets within the bounding box.
    """
    return _CELLS[(piece_type, rotation)]


def dimension(piece_type: PieceType) -> int:
    """Return the side length of the piece's square bounding box."""
    return _DIMENSIONS[piece_type]


def insets(piece_type: PieceType, rotation: int) -> Insets:
    """Return the empty columns/rows on each side of the bounding box.

    Args:
        piece_type: The tetromino.
        rotation: Rotation state (0-3).

    Returns:
        Insets(left, right, top, bottom).
    """
    return _INSETS[(piece_type, rotation)]


def color(piece_type: PieceType) -> tuple[int, int, int]:
    """Return the RGB color used to draw the piece."""
    return PIECE_DATA[piece_type]["color"]


def spawn_position(piece_type: PieceType, cols: int = COL_COUNT) -> tuple[int, int]:
    """Return the (col, row) where a freshly spawned piece is placed.

    The piece is centered horizontally and lifted so that the first filled
    row of its spawn rotation sits on row 0, inside the hidden buffer.

    Args:
        piece_type: The tetromino.
        cols: Board width in columns.

    Returns:
        Tuple of (col, row) for the top-left corner of the bounding box.
    """
    col = cols // 2 - dimension(piece_type) // 2
    row = -insets(piece_type, 0).top
    return col, row


def rotation_adjustment(
    piece_type: PieceType,
    col: int,
    row: int,
    rotation: int,
    cols: int = COL_COUNT,
    rows: int = ROW_COUNT,
) -> tuple[int, int]:
    """Shift a pose so the rotated piece stays within the board edges.

    Uses the target rotation's insets: a piece hanging over the left or top
    edge is pushed right/down, one hanging over the right or bottom edge is
    pushed left/up, each by exactly the overlap. Occupancy is not checked
    here; the caller validates the returned pose against the board.

    Args:
        piece_type: The tetromino.
        col: Current column of the bounding box.
        row: Current row of the bounding box.
        rotation: Target rotation state (0-3).
        cols: Board width in columns.
        rows: Board height in rows.

    Returns:
        Tuple of (col, row) for the adjusted pose.
    """
    size = dimension(piece_type)
    left, right, top, bottom = insets(piece_type, rotation)

    if col + left < 0:
        col = -left
    elif col + size - right > cols:
        col -= (col + size - right) - cols

    if row + top < 0:
        row = -top
    elif row + size - bottom > rows:
        row -= (row + size - bottom) - rows

    return col, row
