from __future__ import annotations

import math

import pytest

from blockdrop.game.clock import Clock


def test_one_period_yields_exactly_one_cycle(fake_time):
    clock = Clock(1.0, fake_time)
    clock.set_cycles_per_second(2.0)
    clock.reset()

    fake_time.advance(0.5)
    clock.update()

    assert clock.has_elapsed_cycle() is True
    assert clock.has_elapsed_cycle() is False


def test_partial_periods_accumulate(fake_time):
    clock = Clock(2.0, fake_time)
    fake_time.advance(0.3)
    clock.update()
    assert not clock.has_elapsed_cycle()

    fake_time.advance(0.3)
    clock.update()
    assert clock.has_elapsed_cycle()
    assert not clock.has_elapsed_cycle()


def test_several_periods_are_counted(fake_time):
    clock = Clock(2.0, fake_time)
    fake_time.advance(1.5)
    clock.update()
    assert sum(clock.has_elapsed_cycle() for _ in range(5)) == 3


def test_peek_does_not_consume(fake_time):
    clock = Clock(1.0, fake_time)
    fake_time.advance(1.0)
    clock.update()
    assert clock.peek_elapsed_cycle()
    assert clock.peek_elapsed_cycle()
    assert clock.has_elapsed_cycle()
    assert not clock.peek_elapsed_cycle()


def test_paused_time_is_discarded(fake_time):
    clock = Clock(1.0, fake_time)
    clock.set_paused(True)
    fake_time.advance(60.0)
    clock.update()
    assert not clock.has_elapsed_cycle()

    clock.set_paused(False)
    clock.update()
    assert not clock.has_elapsed_cycle()

    fake_time.advance(1.0)
    clock.update()
    assert clock.has_elapsed_cycle()


def test_reset_drops_pending_and_partial_cycles(fake_time):
    clock = Clock(1.0, fake_time)
    fake_time.advance(2.7)
    clock.update()
    clock.reset()
    assert not clock.has_elapsed_cycle()

    fake_time.advance(0.5)
    clock.update()
    assert not clock.has_elapsed_cycle()


def test_reset_keeps_paused_flag(fake_time):
    clock = Clock(1.0, fake_time)
    clock.set_paused(True)
    clock.reset()
    assert clock.is_paused()


@pytest.mark.parametrize("rate", [0, -1.0, math.nan, math.inf])
def test_rejects_degenerate_rates(fake_time, rate):
    with pytest.raises(ValueError):
        Clock(rate, fake_time)
    clock = Clock(1.0, fake_time)
    with pytest.raises(ValueError):
        clock.set_cycles_per_second(rate)
    assert clock.cycles_per_second == 1.0
