"""
Frame-capped play loop.

Each frame: translate pygame key events into engine commands, let the
engine advance one frame (at most one logic step), draw, then sleep out the
rest of the frame budget.

Controls:
  - A / Left arrow:  move left
  - D / Right arrow: move right
  - S / Down arrow:  soft drop (hold)
  - Q / Z:           rotate counter-clockwise
  - E / Up arrow:    rotate clockwise
  - P:               pause / resume
  - Enter:           start / restart
  - L:               show / hide leaderboard
  - Escape:          close overlay, or quit
"""

from __future__ import annotations

import time
from typing import Any

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore[assignment]

from blockdrop.game.board import Board
from blockdrop.game.engine import Command, GameEngine
from blockdrop.leaderboard import Leaderboard
from blockdrop.net import ScoreSubmitter
from blockdrop.renderer import GameRenderer
from blockdrop.session import GameSession


# ── Keyboard mapping ─────────────────────────────────────────────────────
KEY_MAP: dict[int, Command] = {}
RELEASE_MAP: dict[int, Command] = {}
if pygame is not None:
    KEY_MAP = {
        pygame.K_a: Command.MOVE_LEFT,
        pygame.K_LEFT: Command.MOVE_LEFT,
        pygame.K_d: Command.MOVE_RIGHT,
        pygame.K_RIGHT: Command.MOVE_RIGHT,
        pygame.K_s: Command.SOFT_DROP_PRESS,
        pygame.K_DOWN: Command.SOFT_DROP_PRESS,
        pygame.K_q: Command.ROTATE_CCW,
        pygame.K_z: Command.ROTATE_CCW,
        pygame.K_e: Command.ROTATE_CW,
        pygame.K_UP: Command.ROTATE_CW,
        pygame.K_p: Command.PAUSE_TOGGLE,
        pygame.K_RETURN: Command.START,
        pygame.K_l: Command.SHOW_LEADERBOARD,
    }
    RELEASE_MAP = {
        pygame.K_s: Command.SOFT_DROP_RELEASE,
        pygame.K_DOWN: Command.SOFT_DROP_RELEASE,
    }


def _handle_name_entry(session: GameSession, event) -> None:
    if event.key == pygame.K_RETURN:
        session.confirm_name()
    elif event.key == pygame.K_ESCAPE:
        session.skip_name()
    elif event.key == pygame.K_BACKSPACE:
        session.backspace()
    else:
        session.type_character(event.unicode)


def play_manual(
    config: dict[str, Any],
    leaderboard: Leaderboard,
    submitter: ScoreSubmitter | None = None,
    seed: int | None = None,
) -> None:
    """Run the game until the window is closed.

    Args:
        config: Config dict loaded from settings.yaml.
        leaderboard: Local leaderboard updated at every game over.
        submitter: Optional background push to a remote score server.
        seed: Seed for the piece randomizer.
    """
    if pygame is None:
        raise ImportError("pygame is required for play mode. Install it: pip install pygame")

    board_width = config.get("board_width", 10)
    visible_height = config.get("visible_height", 20)
    hidden_rows = config.get("hidden_rows", 2)
    cell_size = config.get("cell_size", 30)
    frame_time = config.get("frame_time_ms", 20) / 1000.0

    board = Board(board_width, visible_height + hidden_rows, hidden_rows)
    engine = GameEngine(board=board, seed=seed)
    session = GameSession(
        engine,
        leaderboard,
        submitter,
        max_name_length=config.get("max_name_length", 12),
    )
    renderer = GameRenderer(board_width, visible_height, cell_size=cell_size)

    # Force renderer init before the event loop (pygame must be initialized for event.get())
    renderer.render(engine.snapshot())
    pygame.key.set_repeat(
        config.get("key_repeat_delay_ms", 170),
        config.get("key_repeat_interval_ms", 50),
    )

    running = True
    try:
        while running:
            start = time.perf_counter()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                    break
                elif event.type == pygame.KEYDOWN:
                    if session.pending_score is not None:
                        _handle_name_entry(session, event)
                        continue
                    if event.key == pygame.K_ESCAPE:
                        if session.show_leaderboard:
                            session.show_leaderboard = False
                            continue
                        running = False
                        break
                    command = KEY_MAP.get(event.key)
                    if command is not None:
                        if command == Command.START:
                            session.show_leaderboard = False
                        engine.handle(command)
                elif event.type == pygame.KEYUP:
                    command = RELEASE_MAP.get(event.key)
                    if command is not None:
                        engine.handle(command)

            if not running:
                break

            engine.tick()

            renderer.render(
                engine.snapshot(),
                leaderboard.entries() if session.show_leaderboard else None,
                session.name_prompt,
            )

            # Sleep to cap the frame rate.
            elapsed = time.perf_counter() - start
            if elapsed < frame_time:
                time.sleep(frame_time - elapsed)
    finally:
        renderer.close()
