"""Adaptive task difficulty: which difficulty to request next."""

from __future__ import annotations

from dataclasses import dataclass

from nexusprover.task import TaskDifficulty

PROMOTION_THRESHOLD_SECS = 420
DEFAULT_DIFFICULTY = TaskDifficulty.SMALL_MEDIUM

_ORDER = list(TaskDifficulty)


def next_difficulty(current: TaskDifficulty) -> TaskDifficulty:
    """The difficulty one step above ``current``; the hardest stays where it is."""
    position = _ORDER.index(TaskDifficulty(current))
    return _ORDER[min(position + 1, len(_ORDER) - 1)]


def desired_difficulty(
    last_success_difficulty: TaskDifficulty | None,
    last_success_duration_secs: int | None,
    max_difficulty: TaskDifficulty | None,
) -> TaskDifficulty:
    """Pick the difficulty to request.

    A manual override always wins. Without one, start at SMALL_MEDIUM; after a
    success, promote one level unless that task took at least the promotion
    threshold.
    """
    if max_difficulty is not None:
        return max_difficulty
    if last_success_difficulty is None:
        return DEFAULT_DIFFICULTY
    too_slow = (
        last_success_duration_secs is not None
        and last_success_duration_secs >= PROMOTION_THRESHOLD_SECS
    )
    if too_slow:
        return last_success_difficulty
    return next_difficulty(last_success_difficulty)


@dataclass
class DifficultyTracker:
    """Tracks assigned and successful difficulties for one worker."""

    max_difficulty: TaskDifficulty | None = None
    last_success_duration_secs: int | None = None
    last_success_difficulty: TaskDifficulty | None = None
    last_requested_difficulty: TaskDifficulty | None = None

    def desired(self) -> TaskDifficulty:
        """The difficulty to ask for on the next fetch."""
        return desired_difficulty(
            self.last_success_difficulty,
            self.last_success_duration_secs,
            self.max_difficulty,
        )

    def record_assigned(self, difficulty: TaskDifficulty) -> None:
        """Remember the difficulty the server actually assigned."""
        self.last_requested_difficulty = difficulty

    def update_success_tracking(self, duration_secs: int) -> None:
        """Record a completed task; ignored if no difficulty was assigned yet."""
        if self.last_requested_difficulty is not None:
            self.last_success_difficulty = self.last_requested_difficulty
            self.last_success_duration_secs = duration_secs