import pytest

from core.session_timer import SessionTimer


def test_tick_decrements_remaining():
    timer = SessionTimer(10.0)
    timer.tick(2.5)

    assert timer.remaining == pytest.approx(7.5)
    assert not timer.is_expired()


def test_remaining_never_goes_below_zero():
    timer = SessionTimer(1.0)
    timer.tick(0.75)
    timer.tick(0.75)

    assert timer.remaining == 0.0
    assert timer.is_expired()

    timer.tick(5.0)
    assert timer.remaining == 0.0
    assert timer.is_expired()


def test_pause_gates_the_countdown():
    timer = SessionTimer(5.0)
    timer.pause()
    timer.tick(3.0)
    assert timer.remaining == 5.0

    timer.resume()
    timer.tick(3.0)
    assert timer.remaining == pytest.approx(2.0)


def test_reset_restores_limit_and_score():
    timer = SessionTimer(5.0)
    timer.record_success()
    timer.record_success()
    timer.tick(5.0)
    timer.pause()

    timer.reset()

    assert timer.remaining == 5.0
    assert timer.success_count == 0
    assert not timer.paused
    assert not timer.is_expired()


def test_reset_with_new_limit():
    timer = SessionTimer(5.0)
    timer.reset(30.0)

    assert timer.limit == 30.0
    assert timer.remaining == 30.0


def test_record_success_counts_up():
    timer = SessionTimer(5.0)
    assert timer.record_success() == 1
    assert timer.record_success() == 2
    assert timer.success_count == 2


def test_drifting_deltas_still_expire_on_the_last_tick():
    timer = SessionTimer(1.0)

    for _ in range(9):
        timer.tick(0.1)
    assert not timer.is_expired()

    timer.tick(0.1)
    assert timer.remaining == 0.0
    assert timer.is_expired()
