"""
Game engine: state machine, scoring, speed progression and soft drop.

This module ties the Board, the piece geometry and the fixed-cycle Clock
together. Input arrives as Command values, either dispatched directly on the
loop thread with handle() or queued from another thread with submit(); the
frame loop calls tick() once per rendered frame.
"""

from __future__ import annotations

import dataclasses
import enum
import queue
import random
import time
from typing import Callable

import numpy as np

from blockdrop.game.board import Board
from blockdrop.game.clock import Clock
from blockdrop.game.pieces import (
    ROTATION_COUNT,
    PieceType,
    rotation_adjustment,
    spawn_position,
)


class Command(enum.IntEnum):
    """Player inputs understood by the engine."""
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    SOFT_DROP_PRESS = 2
    SOFT_DROP_RELEASE = 3
    ROTATE_CW = 4
    ROTATE_CCW = 5
    PAUSE_TOGGLE = 6
    START = 7
    SHOW_LEADERBOARD = 8


class GameStatus(enum.Enum):
    NEW_GAME = "new_game"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


# Logic cycles per second at the start of a game.
INITIAL_SPEED: float = 1.0

# Added to the game speed every time a piece locks.
SPEED_INCREMENT: float = 0.035

# Logic rate while the soft-drop key is held.
SOFT_DROP_SPEED: float = 25.0

# Frames after a lock during which soft drop is ignored (~0.5s at 50 fps).
DROP_COOLDOWN_FRAMES: int = 25

# level = int(game_speed * LEVEL_FACTOR); display only.
LEVEL_FACTOR: float = 1.70

GAME_OVER_EVENT = "game_over"
LEADERBOARD_EVENT = "leaderboard"


def game_status(is_new_game: bool, is_game_over: bool, is_paused: bool) -> GameStatus:
    """Collapse the three state flags into one status, new game first."""
    if is_new_game:
        return GameStatus.NEW_GAME
    if is_game_over:
        return GameStatus.GAME_OVER
    if is_paused:
        return GameStatus.PAUSED
    return GameStatus.RUNNING


def line_clear_score(lines_cleared: int) -> int:
    """Points for clearing lines with one piece: 100, 200, 400, 800."""
    if lines_cleared <= 0:
        return 0
    return 50 << lines_cleared


@dataclasses.dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of everything the presentation layer draws."""
    board: np.ndarray
    hidden_rows: int
    current_type: PieceType | None
    current_col: int
    current_row: int
    current_rotation: int
    next_type: PieceType | None
    score: int
    level: int
    game_speed: float
    is_paused: bool
    is_new_game: bool
    is_game_over: bool

    @property
    def status(self) -> GameStatus:
        """Lifecycle status at the time of the snapshot."""
        return game_status(self.is_new_game, self.is_game_over, self.is_paused)


class GameEngine:
    """Falling-block game with fixed-cycle gravity and doubling line scores.

    Attributes:
        board: The game board (mutated only through its own operations).
        clock: Logic clock pacing gravity.
        score: Current score.
        level: Display level derived from the game speed.
        game_speed: Logic cycles per second; rises on every lock.
        drop_cooldown: Frames left before soft drop may engage again.
        current_type: Piece under player control.
        current_col: Column of the active piece's bounding box.
        current_row: Row of the active piece's bounding box.
        current_rotation: Rotation state of the active piece (0-3).
        next_type: Piece that will spawn after the current one locks.
        is_paused: Whether the player paused the game.
        is_new_game: True until the first game starts.
        is_game_over: Whether the stack has reached the top.
    """

    def __init__(
        self,
        board: Board | None = None,
        clock: Clock | None = None,
        seed: int | None = None,
        time_source: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Create an engine waiting for a START command.

        Args:
            board: Board to play on (a default 10x22 board if omitted).
            clock: Logic clock (created at INITIAL_SPEED if omitted).
            seed: Seed for the piece randomizer.
            time_source: Time source for the default clock.
        """
        self.board = board if board is not None else Board()
        self.clock = clock if clock is not None else Clock(INITIAL_SPEED, time_source)
        self.rng = random.Random(seed)

        self.score: int = 0
        self.level: int = 1
        self.game_speed: float = INITIAL_SPEED
        self.drop_cooldown: int = 0

        self.current_type: PieceType | None = None
        self.current_col: int = 0
        self.current_row: int = 0
        self.current_rotation: int = 0
        self.next_type: PieceType | None = None

        self.is_paused: bool = False
        self.is_new_game: bool = True
        self.is_game_over: bool = False

        # Internal state
        self._soft_drop_held: bool = False
        self._commands: queue.SimpleQueue[Command] = queue.SimpleQueue()
        self._listeners: dict[str, list[Callable[..., None]]] = {
            GAME_OVER_EVENT: [],
            LEADERBOARD_EVENT: [],
        }

        # Nothing falls until the player starts a game.
        self.clock.set_paused(True)

    @property
    def status(self) -> GameStatus:
        """Current lifecycle status."""
        return game_status(self.is_new_game, self.is_game_over, self.is_paused)

    # ── Events ──────────────────────────────────────────────────────────

    def add_listener(self, event: str, callback: Callable[..., None]) -> None:
        """Register a callback for an engine event.

        "game_over" callbacks receive the final score; "leaderboard"
        callbacks receive no arguments.

        Raises:
            ValueError: If the event name is unknown.
        """
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event!r}")
        self._listeners[event].append(callback)

    def _emit(self, event: str, *args) -> None:
        """Call every listener registered for an event."""
        for callback in list(self._listeners[event]):
            callback(*args)

    # ── Input ───────────────────────────────────────────────────────────

    def submit(self, command: Command) -> None:
        """Queue a command from any thread; it is applied on the next tick()."""
        self._commands.put(command)

    def handle(self, command: Command) -> None:
        """Apply a command immediately. Must be called from the loop thread."""
        if command == Command.START:
            if self.is_game_over or self.is_new_game:
                self.reset_game()
        elif command == Command.PAUSE_TOGGLE:
            if not self.is_game_over and not self.is_new_game:
                self.is_paused = not self.is_paused
                self.clock.set_paused(self.is_paused)
        elif command == Command.SHOW_LEADERBOARD:
            self._emit(LEADERBOARD_EVENT)
        elif command == Command.SOFT_DROP_PRESS:
            self._soft_drop_held = True
            self._apply_soft_drop()
        elif command == Command.SOFT_DROP_RELEASE:
            self._soft_drop_held = False
            self.clock.set_cycles_per_second(self.game_speed)
            self.clock.reset()
        elif self.status is GameStatus.RUNNING:
            if command == Command.MOVE_LEFT:
                self._move(-1)
            elif command == Command.MOVE_RIGHT:
                self._move(1)
            elif command == Command.ROTATE_CW:
                self._rotate((self.current_rotation + 1) % ROTATION_COUNT)
            elif command == Command.ROTATE_CCW:
                self._rotate((self.current_rotation - 1) % ROTATION_COUNT)

    def _drain_commands(self) -> None:
        """Apply every command queued by submit(), in arrival order."""
        while True:
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                return
            self.handle(command)

    # ── Frame / cycle processing ────────────────────────────────────────

    def tick(self) -> None:
        """Advance one render frame.

        Applies queued commands, updates the clock, runs at most one logic
        step, and counts the drop cooldown down.
        """
        self._drain_commands()
        self._apply_soft_drop()

        self.clock.update()
        if self.clock.has_elapsed_cycle():
            self.step()

        if self.drop_cooldown > 0:
            self.drop_cooldown -= 1

    def step(self) -> None:
        """Run one logic cycle: fall one row, or lock, score and spawn."""
        if self.status is not GameStatus.RUNNING:
            return

        if self.board.is_valid_and_empty(
            self.current_type, self.current_col, self.current_row + 1, self.current_rotation
        ):
            self.current_row += 1
            return

        # Landed on the floor or the stack: lock the piece in place.
        self.board.add_piece(
            self.current_type, self.current_col, self.current_row, self.current_rotation
        )
        cleared = self.board.check_lines()
        self.score += line_clear_score(cleared)

        self.game_speed += SPEED_INCREMENT
        self.clock.set_cycles_per_second(self.game_speed)
        self.clock.reset()

        self.drop_cooldown = DROP_COOLDOWN_FRAMES
        self.level = int(self.game_speed * LEVEL_FACTOR)

        self._spawn_piece()

    def reset_game(self) -> None:
        """Start a fresh game: empty board, zero score, first piece spawned."""
        self.level = 1
        self.score = 0
        self.game_speed = INITIAL_SPEED
        self.drop_cooldown = 0
        self.next_type = self._random_type()
        self.is_new_game = False
        self.is_game_over = False
        self.is_paused = False
        self.board.clear()
        self.clock.set_cycles_per_second(self.game_speed)
        self.clock.reset()
        self.clock.set_paused(False)
        self._spawn_piece()

    def snapshot(self) -> GameSnapshot:
        """Return a read-only copy of the state the renderer draws."""
        return GameSnapshot(
            board=self.board.get_grid(),
            hidden_rows=self.board.hidden_rows,
            current_type=self.current_type,
            current_col=self.current_col,
            current_row=self.current_row,
            current_rotation=self.current_rotation,
            next_type=self.next_type,
            score=self.score,
            level=self.level,
            game_speed=self.game_speed,
            is_paused=self.is_paused,
            is_new_game=self.is_new_game,
            is_game_over=self.is_game_over,
        )

    # ── Internals ───────────────────────────────────────────────────────

    def _random_type(self) -> PieceType:
        """Draw a piece type uniformly at random."""
        return self.rng.choice(list(PieceType))

    def _spawn_piece(self) -> bool:
        """Promote the next piece to current and draw a new next piece.

        Returns:
            True if the spawn pose is free, False if the stack reached the
            top (the game is then over).
        """
        self.current_type = self.next_type
        self.current_col, self.current_row = spawn_position(self.current_type, self.board.width)
        self.current_rotation = 0
        self.next_type = self._random_type()

        if not self.board.is_valid_and_empty(
            self.current_type, self.current_col, self.current_row, self.current_rotation
        ):
            self.is_game_over = True
            self.clock.set_paused(True)
            self._emit(GAME_OVER_EVENT, self.score)
            return False
        return True

    def _apply_soft_drop(self) -> None:
        """Switch the clock to soft-drop speed while the key is held and allowed."""
        if (
            self._soft_drop_held
            and not self.is_paused
            and self.drop_cooldown == 0
            and self.clock.cycles_per_second != SOFT_DROP_SPEED
        ):
            self.clock.set_cycles_per_second(SOFT_DROP_SPEED)

    def _move(self, dx: int) -> bool:
        """Shift the current piece sideways if the target cells are free."""
        new_col = self.current_col + dx
        if self.board.is_valid_and_empty(
            self.current_type, new_col, self.current_row, self.current_rotation
        ):
            self.current_col = new_col
            return True
        return False

    def _rotate(self, new_rotation: int) -> bool:
        """Try to rotate the current piece, nudging it off the walls.

        The pose is shifted using the target rotation's insets, then
        validated. Column, row and rotation change together or not at all.

        Args:
            new_rotation: Target rotation state (0-3).

        Returns:
            True if the rotation was applied, False if it was rejected.
        """
        new_col, new_row = rotation_adjustment(
            self.current_type,
            self.current_col,
            self.current_row,
            new_rotation,
            self.board.width,
            self.board.height,
        )
        if self.board.is_valid_and_empty(self.current_type, new_col, new_row, new_rotation):
            self.current_rotation = new_rotation
            self.current_col = new_col
            self.current_row = new_row
            return True
        return False
