# engine/scheduler.py

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum
from typing import NamedTuple, Optional, Tuple

from .errors import InvalidRatingError
from .models import VocabularyItem
from ..utils.clock import require_aware

# Review interval in days, indexed by mastery level. Levels past the end
# use the last entry.
INTERVAL_DAYS = (1, 3, 7, 14, 30, 90, 180, 365)

# Relearn step after a HARD judgment.
RELEARN_MINUTES = 5


class Rating(IntEnum):
    """3-button recall judgment shown after the answer is revealed."""
    HARD = 1    # Could not recall - demote and relearn shortly
    GOOD = 2    # Recalled - standard interval
    EASY = 3    # Effortless recall - skip a level

    # Timer ran out with no answer
    TIMEOUT = HARD

    @classmethod
    def from_response(cls, response: str) -> "Rating":
        """Parse a button response such as 'hard', 'good' or 'easy'."""
        if isinstance(response, str):
            try:
                return cls[response.strip().upper()]
            except KeyError:
                pass
        raise InvalidRatingError(f"Unknown recall judgment: {response!r}")


class ScheduleResult(NamedTuple):
    next_level: int
    next_review_at: datetime


@dataclass(frozen=True)
class SchedulerConfig:
    """Tunable scheduling parameters."""
    interval_days: Tuple[int, ...] = INTERVAL_DAYS
    relearn_minutes: int = RELEARN_MINUTES
    # Study the whole collection when nothing is due
    fallback_to_full: bool = True

    def __post_init__(self):
        object.__setattr__(self, "interval_days", tuple(self.interval_days))
        if not self.interval_days:
            raise ValueError("interval_days must not be empty")
        if any(days <= 0 for days in self.interval_days):
            raise ValueError(f"interval_days must be positive, got {self.interval_days}")
        if self.relearn_minutes <= 0:
            raise ValueError(f"relearn_minutes must be positive, got {self.relearn_minutes}")


DEFAULT_CONFIG = SchedulerConfig()


def _check_level(level: int) -> int:
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValueError(f"Mastery level must be an int, got {level!r}")
    if level < 0:
        raise ValueError(f"Mastery level must be >= 0, got {level}")
    return level


def _check_rating(rating: Rating) -> Rating:
    # Plain ints and strings are rejected even when they match a member value
    if not isinstance(rating, Rating):
        raise InvalidRatingError(f"Expected a Rating, got {rating!r}")
    return rating


def next_mastery_level(current_level: int, rating: Rating) -> int:
    """Mastery level after a judgment. HARD halves, never below 0."""
    if rating == Rating.HARD:
        return max(0, current_level // 2)
    if rating == Rating.GOOD:
        return current_level + 1
    return current_level + 2


def compute_next_schedule(current_level: int, rating: Rating, now: datetime,
                          config: Optional[SchedulerConfig] = None) -> ScheduleResult:
    """Compute the next mastery level and review time for one judgment.

    Args:
        current_level: Item's mastery level before the judgment (>= 0)
        rating: Rating.HARD/GOOD/EASY (Rating.TIMEOUT is HARD)
        now: Aware timestamp of the judgment
        config: Scheduling parameters (defaults to the standard table)

    Returns:
        ScheduleResult(next_level, next_review_at)
    """
    config = config or DEFAULT_CONFIG
    _check_level(current_level)
    _check_rating(rating)
    require_aware(now)

    next_level = next_mastery_level(current_level, rating)

    if rating == Rating.HARD:
        return ScheduleResult(next_level, now + timedelta(minutes=config.relearn_minutes))

    table = config.interval_days
    days = table[min(next_level, len(table) - 1)]
    return ScheduleResult(next_level, now + timedelta(days=days))


class Scheduler:
    """Applies review judgments to vocabulary items with a fixed config."""

    def __init__(self, config: Optional[SchedulerConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def next_schedule(self, current_level: int, rating: Rating, now: datetime) -> ScheduleResult:
        return compute_next_schedule(current_level, rating, now, self.config)

    def apply(self, item: VocabularyItem, rating: Rating, now: datetime) -> VocabularyItem:
        """Return a copy of ``item`` rescheduled for ``rating``."""
        result = self.next_schedule(item.mastery_level, rating, now)
        return item.rescheduled(result.next_level, result.next_review_at)
