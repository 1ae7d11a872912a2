import pytest

from nexusprover.difficulty import (
    DifficultyTracker,
    desired_difficulty,
    next_difficulty,
)
from nexusprover.task import TaskDifficulty as D


def _fetch(tracker: DifficultyTracker) -> D:
    """Simulate a fetch where the server assigns what was requested."""
    requested = tracker.desired()
    tracker.record_assigned(requested)
    return requested


def test_default_difficulty_is_small_medium():
    tracker = DifficultyTracker()
    _fetch(tracker)
    assert tracker.last_requested_difficulty == D.SMALL_MEDIUM


@pytest.mark.parametrize(
    "previous, expected",
    [
        (D.SMALL, D.SMALL_MEDIUM),
        (D.SMALL_MEDIUM, D.MEDIUM),
        (D.MEDIUM, D.LARGE),
        (D.LARGE, D.EXTRA_LARGE),
        (D.EXTRA_LARGE, D.EXTRA_LARGE_2),
        (D.EXTRA_LARGE_2, D.EXTRA_LARGE_3),
        (D.EXTRA_LARGE_5, D.EXTRA_LARGE_5),
    ],
)
def test_promotion_path(previous, expected):
    tracker = DifficultyTracker(
        last_success_difficulty=previous, last_success_duration_secs=300
    )
    _fetch(tracker)
    assert tracker.last_requested_difficulty == expected


def test_no_promotion_when_task_takes_too_long():
    tracker = DifficultyTracker(
        last_success_difficulty=D.MEDIUM, last_success_duration_secs=480
    )
    _fetch(tracker)
    assert tracker.last_requested_difficulty == D.MEDIUM


def test_promotion_threshold_edge_case():
    tracker = DifficultyTracker(
        last_success_difficulty=D.MEDIUM, last_success_duration_secs=420
    )
    _fetch(tracker)
    assert tracker.last_requested_difficulty == D.MEDIUM


def test_promotion_threshold_just_under():
    tracker = DifficultyTracker(
        last_success_difficulty=D.MEDIUM, last_success_duration_secs=419
    )
    _fetch(tracker)
    assert tracker.last_requested_difficulty == D.LARGE


def test_manual_override_works():
    tracker = DifficultyTracker(max_difficulty=D.EXTRA_LARGE)
    _fetch(tracker)
    assert tracker.last_requested_difficulty == D.EXTRA_LARGE


def test_manual_override_to_small():
    tracker = DifficultyTracker(max_difficulty=D.SMALL)
    _fetch(tracker)
    assert tracker.last_requested_difficulty == D.SMALL


def test_success_tracking_update():
    tracker = DifficultyTracker()
    assert tracker.last_success_difficulty is None
    assert tracker.last_success_duration_secs is None
    tracker.last_requested_difficulty = D.MEDIUM
    tracker.update_success_tracking(300)
    assert tracker.last_success_difficulty == D.MEDIUM
    assert tracker.last_success_duration_secs == 300


def test_success_tracking_without_requested_difficulty():
    tracker = DifficultyTracker()
    tracker.update_success_tracking(300)
    assert tracker.last_success_difficulty is None
    assert tracker.last_success_duration_secs is None


def test_next_difficulty_maximum_is_fixed():
    assert next_difficulty(D.EXTRA_LARGE_4) == D.EXTRA_LARGE_5
    assert next_difficulty(D.EXTRA_LARGE_5) == D.EXTRA_LARGE_5


def test_desired_promotes_without_recorded_duration():
    assert desired_difficulty(D.LARGE, None, None) == D.EXTRA_LARGE


def test_override_beats_history():
    assert desired_difficulty(D.EXTRA_LARGE_3, 10, D.SMALL) == D.SMALL


def test_full_cycle_promotes_after_success():
    tracker = DifficultyTracker()
    assert _fetch(tracker) == D.SMALL_MEDIUM
    tracker.update_success_tracking(100)
    assert _fetch(tracker) == D.MEDIUM
    tracker.update_success_tracking(500)
    assert _fetch(tracker) == D.MEDIUM