# engine/vault.py

import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Callable, List, NamedTuple, Optional

from .db import Database
from .models import VocabularyItem
from .queue import (ReviewSession, StudyMode, cancel, merge_into_collection,
                    select_study_items, sort_by_review, start_session,
                    submit_judgment)
from .scheduler import Rating, Scheduler, SchedulerConfig
from ..utils.clock import utc_now

logger = logging.getLogger(__name__)

# Mastery level from which a word counts as mastered
MASTERED_LEVEL = 5


class SortMode(Enum):
    REVIEW = "review"   # Most overdue first
    ALPHA = "alpha"


class VaultStats(NamedTuple):
    total: int
    due: int
    mastered: int
    average_level: float


class Vault:
    """The learner's saved-word collection and its study sessions.

    The vault is the only durable owner of vocabulary items. Sessions work
    on snapshots and are merged back with ``finish_session``.
    """

    def __init__(self, db_path: str, config: Optional[SchedulerConfig] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.db_path = db_path
        self.db = Database(db_path)
        self.scheduler = Scheduler(config)
        self.clock = clock or utc_now

    def close(self) -> None:
        self.db.close()

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self.clock()

    def items(self) -> List[VocabularyItem]:
        return self.db.get_favorites()

    def is_favorite(self, word: str) -> bool:
        key = word.casefold()
        return any(item.key == key for item in self.items())

    def toggle_favorite(self, item: VocabularyItem, now: Optional[datetime] = None) -> bool:
        """Add ``item`` to the vault, or remove it if already saved.

        New favorites start at mastery level 0 and are due immediately.

        Returns:
            True if the word was added, False if it was removed
        """
        if self.db.remove_favorite(item.word):
            logger.info("Removed '%s' from vault", item.word)
            return False

        now = self._now(now)
        saved = replace(item, mastery_level=0, next_review_at=now, added_at=now)
        self.db.add_favorite(saved)
        logger.info("Added '%s' to vault", item.word)
        return True

    def due_count(self, now: Optional[datetime] = None) -> int:
        """Number of words due for review at ``now``."""
        now = self._now(now)
        return sum(1 for item in self.items() if item.is_due(now))

    def browse(self, sort: SortMode = SortMode.REVIEW, query: str = "",
               now: Optional[datetime] = None) -> List[VocabularyItem]:
        """Filter by substring and sort for the collection list."""
        items = self.items()
        query = query.strip().casefold()
        if query:
            items = [item for item in items if query in item.key]

        if sort is SortMode.ALPHA:
            return sorted(items, key=lambda item: item.key)
        return sort_by_review(items, self._now(now))

    def build_session(self, mode: StudyMode = StudyMode.DUE,
                      now: Optional[datetime] = None) -> ReviewSession:
        """Start a study session over due words (or the whole vault)."""
        now = self._now(now)
        study_items = select_study_items(
            self.items(), now, mode, fallback_to_full=self.scheduler.config.fallback_to_full
        )
        logger.info("Starting %s session with %d words", mode.value, len(study_items))
        return start_session(study_items)

    def judge(self, session: ReviewSession, rating: Rating,
              now: Optional[datetime] = None) -> ReviewSession:
        """Apply a judgment to the current word using the vault's scheduler and clock."""
        return submit_judgment(session, rating, self._now(now), self.scheduler)

    def finish_session(self, session: ReviewSession) -> List[VocabularyItem]:
        """Merge a finished or abandoned session back into the vault.

        Judgments already made are kept even if the session was not completed.

        Returns:
            The updated collection as stored
        """
        if session.is_complete:
            updated = list(session.items)
        else:
            updated = cancel(session)
            logger.info("Session cancelled after %d of %d words",
                        session.current_index, len(session.items))

        collection = merge_into_collection(self.items(), updated)
        self.db.replace_favorites(collection)
        return collection

    def stats(self, now: Optional[datetime] = None) -> VaultStats:
        items = self.items()
        if not items:
            return VaultStats(0, 0, 0, 0.0)
        mastered = sum(1 for item in items if item.mastery_level >= MASTERED_LEVEL)
        average = sum(item.mastery_level for item in items) / len(items)
        return VaultStats(len(items), self.due_count(now), mastered, round(average, 2))
