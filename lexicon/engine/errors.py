"""Exceptions raised by the Lexicon engine."""


class LexiconError(Exception):
    """Base class for all Lexicon errors."""


class SessionStateError(LexiconError):
    """A review session operation was called in the wrong state.

    Raised when judging before the answer is revealed, revealing twice,
    or acting on a session that is already complete.
    """


class InvalidRatingError(LexiconError, ValueError):
    """A recall judgment outside of Rating.HARD/GOOD/EASY."""


class DefinitionLookupError(LexiconError):
    """The definition backend failed or returned an unusable payload."""
