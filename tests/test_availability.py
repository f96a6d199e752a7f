from core.availability import AvailabilityTracker


def test_first_sample_only_records_state():
    tracker = AvailabilityTracker()

    assert tracker.sample("A", False) is None
    assert tracker.pool == []
    assert tracker.sample("A", False) is None


def test_release_appends_and_hold_removes():
    tracker = AvailabilityTracker()
    tracker.sample("A", True)

    assert tracker.sample("A", False) == "released"
    assert tracker.pool == ["A"]

    assert tracker.sample("A", True) == "returned"
    assert tracker.pool == []


def test_no_change_has_no_effect():
    tracker = AvailabilityTracker()
    tracker.sample("A", True)
    tracker.sample("A", False)

    assert tracker.sample("A", False) is None
    assert tracker.pool == ["A"]


def test_pool_is_fifo_in_release_order():
    tracker = AvailabilityTracker()
    for token in ("A", "B", "C"):
        tracker.sample(token, True)

    tracker.sample("C", False)
    tracker.sample("A", False)
    tracker.sample("B", False)

    assert tracker.take_oldest_available() == "C"
    assert tracker.take_oldest_available() == "A"
    assert tracker.take_oldest_available() == "B"
    assert tracker.take_oldest_available() is None


def test_returned_token_is_removed_from_the_middle():
    tracker = AvailabilityTracker()
    for token in ("A", "B", "C"):
        tracker.sample(token, True)
        tracker.sample(token, False)

    tracker.sample("B", True)

    assert tracker.pool == ["A", "C"]


def test_token_never_appears_twice():
    tracker = AvailabilityTracker()
    tracker.sample("A", True)
    tracker.sample("A", False)
    tracker.sample("B", True)
    tracker.sample("B", False)

    # picked up and released again: goes to the tail, still once
    tracker.sample("A", True)
    tracker.sample("A", False)

    assert tracker.pool == ["B", "A"]


def test_consumed_token_needs_a_new_release():
    tracker = AvailabilityTracker()
    tracker.sample("A", True)
    tracker.sample("A", False)

    assert tracker.take_oldest_available() == "A"
    tracker.sample("A", False)
    assert tracker.pool == []

    tracker.sample("A", True)
    tracker.sample("A", False)
    assert tracker.pool == ["A"]


def test_clear_keeps_held_state():
    tracker = AvailabilityTracker()
    tracker.sample("A", True)
    tracker.sample("A", False)

    tracker.clear()

    assert tracker.pool == []
    assert tracker.sample("A", False) is None
    assert tracker.pool == []
