"""Game rules: piece geometry, board, logic clock and engine."""

from blockdrop.game.pieces import PieceType, Insets
from blockdrop.game.board import Board
from blockdrop.game.clock import Clock
from blockdrop.game.engine import Command, GameEngine, GameSnapshot, GameStatus

__all__ = [
    "PieceType",
    "Insets",
    "Board",
    "Clock",
    "Command",
    "GameEngine",
    "GameSnapshot",
    "GameStatus",
]
