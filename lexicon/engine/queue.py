"""Review queue: due selection and the reveal/judge study session.

Sessions are immutable. Every transition returns a new ``ReviewSession``
and never touches the caller's collection; the caller merges the final
items back with ``merge_into_collection``.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import SessionStateError
from .models import VocabularyItem
from .scheduler import Rating, Scheduler
from ..utils.clock import require_aware

logger = logging.getLogger(__name__)


class StudyMode(Enum):
    DUE = "due"
    FULL = "full"


class SessionState(Enum):
    AWAITING_REVEAL = "awaiting_reveal"
    AWAITING_JUDGMENT = "awaiting_judgment"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ReviewSession:
    items: Tuple[VocabularyItem, ...]
    current_index: int = 0
    revealed: bool = False

    @property
    def state(self) -> SessionState:
        if self.current_index >= len(self.items):
            return SessionState.COMPLETE
        if self.revealed:
            return SessionState.AWAITING_JUDGMENT
        return SessionState.AWAITING_REVEAL

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETE

    @property
    def current_item(self) -> Optional[VocabularyItem]:
        if self.is_complete:
            return None
        return self.items[self.current_index]

    @property
    def remaining(self) -> int:
        return len(self.items) - self.current_index

    @property
    def progress(self) -> float:
        """Fraction of the session already judged (1.0 when empty)."""
        if not self.items:
            return 1.0
        return self.current_index / len(self.items)


def sort_by_review(items: Iterable[VocabularyItem], now: datetime) -> List[VocabularyItem]:
    """All items, earliest review first. Ties keep input order."""
    require_aware(now)
    return sorted(items, key=lambda item: item.due_at(now))


def select_due(items: Iterable[VocabularyItem], now: datetime) -> List[VocabularyItem]:
    """Items due at ``now``, most overdue first. Ties keep input order."""
    return [item for item in sort_by_review(items, now) if item.is_due(now)]


def select_study_items(items: Sequence[VocabularyItem], now: datetime,
                       mode: StudyMode = StudyMode.DUE,
                       fallback_to_full: bool = True) -> List[VocabularyItem]:
    """Pick the items for a new study session.

    In DUE mode, an empty due set falls back to the whole collection when
    ``fallback_to_full`` is set, so a non-empty collection always yields
    something to study.
    """
    if mode is StudyMode.FULL:
        return sort_by_review(items, now)

    due = select_due(items, now)
    if not due and fallback_to_full:
        logger.debug("Nothing due out of %d items; studying full collection", len(items))
        return sort_by_review(items, now)
    return due


def start_session(items: Iterable[VocabularyItem]) -> ReviewSession:
    """Snapshot ``items`` in the given order into a fresh session."""
    return ReviewSession(items=tuple(items))


def reveal(session: ReviewSession) -> ReviewSession:
    """Show the current item's answer."""
    if session.state is not SessionState.AWAITING_REVEAL:
        raise SessionStateError(f"Cannot reveal in state {session.state.name}")
    return replace(session, revealed=True)


def submit_judgment(session: ReviewSession, rating: Rating, now: datetime,
                    scheduler: Optional[Scheduler] = None) -> ReviewSession:
    """Reschedule the current item and move to the next one."""
    if session.state is not SessionState.AWAITING_JUDGMENT:
        raise SessionStateError(f"Cannot submit a judgment in state {session.state.name}")

    scheduler = scheduler or Scheduler()
    index = session.current_index
    updated = scheduler.apply(session.items[index], rating, now)

    items = session.items[:index] + (updated,) + session.items[index + 1:]
    return ReviewSession(items=items, current_index=index + 1, revealed=False)


def cancel(session: ReviewSession) -> List[VocabularyItem]:
    """End a session early, keeping the judgments made so far."""
    if session.is_complete:
        raise SessionStateError("Cannot cancel a completed session")
    return list(session.items)


def merge_into_collection(collection: Sequence[VocabularyItem],
                          updated: Iterable[VocabularyItem]) -> List[VocabularyItem]:
    """Replace collection items by case-insensitive word, keeping collection order."""
    by_key = {item.key: item for item in updated}
    known = {item.key for item in collection}

    dropped = [key for key in by_key if key not in known]
    if dropped:
        logger.debug("Dropping %d session items no longer in the collection: %s",
                     len(dropped), dropped)

    return [by_key.get(item.key, item) for item in collection]
