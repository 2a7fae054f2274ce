"""Vocabulary records shared by the scheduler, review queue and store."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..utils.clock import format_timestamp, parse_timestamp


@dataclass(frozen=True)
class VocabularyItem:
    """A saved word with its spaced-repetition state.

    The definition fields are an opaque payload from the definition
    backend; the engine only reads ``word``, ``mastery_level`` and
    ``next_review_at``.
    """

    word: str
    mastery_level: int = 0
    next_review_at: Optional[datetime] = None
    translation: str = ""
    phonetic: str = ""
    part_of_speech: str = ""
    definitions: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()
    etymology: str = ""
    added_at: Optional[datetime] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.word, str) or not self.word.strip():
            raise ValueError("VocabularyItem.word must be a non-empty string")
        if isinstance(self.mastery_level, bool) or not isinstance(self.mastery_level, int):
            raise ValueError(f"mastery_level must be an int, got {self.mastery_level!r}")
        if self.mastery_level < 0:
            raise ValueError(f"mastery_level must be >= 0, got {self.mastery_level}")
        if self.next_review_at is not None:
            object.__setattr__(self, "next_review_at", parse_timestamp(self.next_review_at))
        if self.added_at is not None:
            object.__setattr__(self, "added_at", parse_timestamp(self.added_at))
        object.__setattr__(self, "definitions", tuple(self.definitions))
        object.__setattr__(self, "examples", tuple(self.examples))

    @property
    def key(self) -> str:
        """Case-insensitive identity used for dedup and merging."""
        return self.word.casefold()

    def due_at(self, now: datetime) -> datetime:
        """When this item is due; never-reviewed items are due immediately."""
        return self.next_review_at if self.next_review_at is not None else now

    def is_due(self, now: datetime) -> bool:
        return self.due_at(now) <= now

    def rescheduled(self, mastery_level: int, next_review_at: datetime) -> "VocabularyItem":
        """Copy of this item carrying a new scheduling state."""
        return replace(self, mastery_level=mastery_level, next_review_at=next_review_at)

    def to_dict(self) -> Dict[str, Any]:
        """Storage form, using the app's camelCase keys."""
        data = {
            "word": self.word,
            "translation": self.translation,
            "phonetic": self.phonetic,
            "partOfSpeech": self.part_of_speech,
            "definitions": list(self.definitions),
            "examples": list(self.examples),
            "etymology": self.etymology,
            "srsLevel": self.mastery_level,
            "nextReviewDate": None,
        }
        if self.next_review_at is not None:
            data["nextReviewDate"] = format_timestamp(self.next_review_at)
        if self.added_at is not None:
            data["addedAt"] = format_timestamp(self.added_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VocabularyItem":
        """Build an item from its storage form.

        Raises:
            ValueError: If ``word`` is missing or ``srsLevel`` is invalid
        """
        word = data.get("word")
        if not word:
            raise ValueError(f"Vocabulary record has no word: {data!r}")

        level = data.get("srsLevel", 0)
        if level is None:
            level = 0

        next_review = data.get("nextReviewDate")
        added = data.get("addedAt")

        return cls(
            word=word,
            mastery_level=level,
            next_review_at=parse_timestamp(next_review) if next_review else None,
            translation=data.get("translation") or "",
            phonetic=data.get("phonetic") or "",
            part_of_speech=data.get("partOfSpeech") or "",
            definitions=tuple(data.get("definitions") or ()),
            examples=tuple(data.get("examples") or ()),
            etymology=data.get("etymology") or "",
            added_at=parse_timestamp(added) if added else None,
        )
