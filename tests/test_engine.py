from __future__ import annotations

import threading

import pytest

from blockdrop.game.engine import (
    DROP_COOLDOWN_FRAMES,
    INITIAL_SPEED,
    SOFT_DROP_SPEED,
    SPEED_INCREMENT,
    Command,
    GameStatus,
    line_clear_score,
)
from blockdrop.game.pieces import PieceType, insets, spawn_position

from conftest import force_game_over


def _place(engine, piece_type, col, row, rotation):
    engine.current_type = piece_type
    engine.current_col = col
    engine.current_row = row
    engine.current_rotation = rotation


def _pose(engine):
    return engine.current_col, engine.current_row, engine.current_rotation


def test_new_engine_waits_for_start(engine):
    assert engine.status is GameStatus.NEW_GAME
    assert engine.clock.is_paused()
    assert engine.current_type is None


def test_commands_before_start_are_ignored(engine):
    for command in (Command.MOVE_LEFT, Command.ROTATE_CW, Command.PAUSE_TOGGLE):
        engine.handle(command)
    assert engine.status is GameStatus.NEW_GAME
    assert not engine.is_paused


def test_start_resets_and_spawns(running_engine):
    engine = running_engine
    assert engine.status is GameStatus.RUNNING
    assert (engine.score, engine.level, engine.game_speed) == (0, 1, INITIAL_SPEED)
    assert not engine.clock.is_paused()
    assert engine.clock.cycles_per_second == INITIAL_SPEED
    assert (engine.current_col, engine.current_row) == spawn_position(engine.current_type)
    assert engine.current_rotation == 0
    assert isinstance(engine.next_type, PieceType)


def test_start_is_ignored_while_running(running_engine):
    running_engine.score = 300
    running_engine.handle(Command.START)
    assert running_engine.score == 300


def test_pause_toggle(running_engine):
    engine = running_engine
    engine.handle(Command.PAUSE_TOGGLE)
    assert engine.status is GameStatus.PAUSED
    assert engine.clock.is_paused()

    pose = _pose(engine)
    engine.handle(Command.MOVE_LEFT)
    engine.handle(Command.ROTATE_CW)
    assert _pose(engine) == pose

    engine.handle(Command.PAUSE_TOGGLE)
    assert engine.status is GameStatus.RUNNING
    assert not engine.clock.is_paused()


def test_moves_stop_at_walls(running_engine):
    engine = running_engine
    _place(engine, PieceType.T, 4, 5, 0)
    for _ in range(10):
        engine.handle(Command.MOVE_LEFT)
    assert engine.current_col + insets(PieceType.T, 0).left == 0

    for _ in range(15):
        engine.handle(Command.MOVE_RIGHT)
    assert engine.current_col + 3 - insets(PieceType.T, 0).right == engine.board.width


def test_move_blocked_by_stack(running_engine):
    engine = running_engine
    _place(engine, PieceType.O, 4, 10, 0)
    engine.board.grid[10, 3] = PieceType.J
    engine.handle(Command.MOVE_LEFT)
    assert engine.current_col == 4


def test_rotation_cycles_through_states(running_engine):
    engine = running_engine
    _place(engine, PieceType.T, 4, 10, 0)
    engine.handle(Command.ROTATE_CW)
    assert engine.current_rotation == 1
    engine.handle(Command.ROTATE_CCW)
    engine.handle(Command.ROTATE_CCW)
    assert engine.current_rotation == 3


def test_rotation_kicks_off_the_wall(running_engine):
    engine = running_engine
    _place(engine, PieceType.I, -2, 5, 1)
    engine.handle(Command.ROTATE_CCW)
    assert _pose(engine) == (0, 5, 0)


def test_rejected_rotation_leaves_pose_unchanged(running_engine):
    engine = running_engine
    # Horizontal I on the floor; turning it vertical needs column 5 of row 18.
    _place(engine, PieceType.I, 3, 20, 0)
    engine.board.grid[18, 5] = PieceType.Z
    before = _pose(engine)

    engine.handle(Command.ROTATE_CW)
    assert _pose(engine) == before


def test_step_moves_piece_down(running_engine):
    engine = running_engine
    row = engine.current_row
    engine.step()
    assert engine.current_row == row + 1


@pytest.mark.parametrize("lines,expected", [(0, 0), (1, 100), (2, 200), (3, 400), (4, 800)])
def test_line_clear_score(lines, expected):
    assert line_clear_score(lines) == expected


@pytest.mark.parametrize("lines", [1, 2, 3, 4])
def test_locking_vertical_i_clears_lines(running_engine, lines):
    engine = running_engine
    height = engine.board.height
    engine.board.grid[height - lines :, :9] = PieceType.O
    _place(engine, PieceType.I, 7, height - 4, 1)  # fills column 9 of the bottom four rows

    engine.step()

    assert engine.score == line_clear_score(lines)
    assert engine.board.occupied_count() == 4 - lines


def test_tetris_awards_800_and_speeds_up(running_engine):
    engine = running_engine
    engine.board.grid[18:22, :9] = PieceType.O
    _place(engine, PieceType.I, 7, 18, 1)

    engine.step()

    assert engine.score == 800
    assert engine.board.occupied_count() == 0
    assert engine.game_speed == pytest.approx(INITIAL_SPEED + SPEED_INCREMENT)
    assert engine.clock.cycles_per_second == pytest.approx(engine.game_speed)
    assert engine.drop_cooldown == DROP_COOLDOWN_FRAMES
    assert engine.level == int(engine.game_speed * 1.70)
    assert (engine.current_col, engine.current_row) == spawn_position(engine.current_type)


def test_lock_spawns_the_next_piece(running_engine):
    engine = running_engine
    upcoming = engine.next_type
    _place(engine, PieceType.O, 0, 20, 0)
    engine.step()
    assert engine.current_type is upcoming
    assert engine.board.get_tile(0, 21) is PieceType.O


def test_game_over_when_stack_reaches_top(running_engine):
    engine = running_engine
    scores = []
    engine.add_listener("game_over", scores.append)

    for _ in range(10_000):
        if engine.is_game_over:
            break
        engine.step()

    assert engine.status is GameStatus.GAME_OVER
    assert engine.clock.is_paused()
    assert scores == [engine.score]

    final_score = engine.score
    grid = engine.board.get_grid()
    engine.step()
    engine.tick()
    engine.handle(Command.MOVE_LEFT)
    assert engine.score == final_score
    assert (engine.board.grid == grid).all()
    assert scores == [final_score]


def test_restart_after_game_over(running_engine):
    engine = running_engine
    engine.score = 1200
    force_game_over(engine)
    assert engine.is_game_over

    engine.handle(Command.PAUSE_TOGGLE)
    assert not engine.is_paused

    engine.handle(Command.START)
    assert engine.status is GameStatus.RUNNING
    assert engine.score == 0
    assert engine.game_speed == INITIAL_SPEED
    assert engine.board.occupied_count() == 0


def test_tick_runs_at_most_one_step(running_engine, fake_time):
    engine = running_engine
    row = engine.current_row
    fake_time.advance(10.0)
    engine.tick()
    assert engine.current_row == row + 1


def test_tick_without_elapsed_cycle_does_not_step(running_engine, fake_time):
    engine = running_engine
    row = engine.current_row
    fake_time.advance(0.5)
    engine.tick()
    assert engine.current_row == row


def test_tick_counts_cooldown_down(running_engine):
    engine = running_engine
    engine.drop_cooldown = 2
    engine.tick()
    engine.tick()
    engine.tick()
    assert engine.drop_cooldown == 0


def test_soft_drop_press_and_release(running_engine):
    engine = running_engine
    engine.handle(Command.SOFT_DROP_PRESS)
    assert engine.clock.cycles_per_second == SOFT_DROP_SPEED

    engine.handle(Command.SOFT_DROP_RELEASE)
    assert engine.clock.cycles_per_second == engine.game_speed


def test_soft_drop_waits_for_cooldown(running_engine):
    engine = running_engine
    engine.drop_cooldown = 3
    engine.handle(Command.SOFT_DROP_PRESS)
    assert engine.clock.cycles_per_second == INITIAL_SPEED

    for _ in range(3):
        engine.tick()
    assert engine.drop_cooldown == 0
    engine.tick()
    assert engine.clock.cycles_per_second == SOFT_DROP_SPEED


def test_soft_drop_ignored_while_paused(running_engine):
    engine = running_engine
    engine.handle(Command.PAUSE_TOGGLE)
    engine.handle(Command.SOFT_DROP_PRESS)
    assert engine.clock.cycles_per_second == INITIAL_SPEED


def test_show_leaderboard_notifies_listeners(engine):
    calls = []
    engine.add_listener("leaderboard", lambda: calls.append(True))
    engine.handle(Command.SHOW_LEADERBOARD)
    assert calls == [True]
    assert engine.status is GameStatus.NEW_GAME


def test_unknown_event_is_rejected(engine):
    with pytest.raises(ValueError):
        engine.add_listener("line_clear", lambda: None)


def test_commands_submitted_from_another_thread_apply_on_tick(running_engine):
    engine = running_engine
    _place(engine, PieceType.O, 4, 5, 0)

    worker = threading.Thread(target=lambda: [engine.submit(Command.MOVE_LEFT) for _ in range(2)])
    worker.start()
    worker.join()
    assert engine.current_col == 4

    engine.tick()
    assert engine.current_col == 2


def test_snapshot_is_a_copy(running_engine):
    engine = running_engine
    snap = engine.snapshot()
    snap.board[21, :] = PieceType.I
    assert engine.board.occupied_count() == 0
    assert snap.status is GameStatus.RUNNING
    assert snap.current_type is engine.current_type
    assert snap.hidden_rows == engine.board.hidden_rows
