#!/usr/bin/env python3
"""
Tests for due selection and the reveal/judge study session.
Sessions are immutable values, so each step is checked on the returned copy.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from lexicon.engine.errors import SessionStateError
from lexicon.engine.models import VocabularyItem
from lexicon.engine.queue import (SessionState, StudyMode, cancel, merge_into_collection,
                                  reveal, select_due, select_study_items, sort_by_review,
                                  start_session, submit_judgment)
from lexicon.engine.scheduler import Rating, Scheduler, SchedulerConfig

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


def make_item(word, level=0, offset=None):
    """Item whose review is ``offset`` from NOW (None = never reviewed)."""
    next_review = NOW + offset if offset is not None else None
    return VocabularyItem(word=word, mastery_level=level, next_review_at=next_review)


# DUE SELECTION

def test_select_due_orders_overdue_first_and_keeps_ties():
    first_tie = make_item("alpha", offset=-2 * DAY)
    yesterday = make_item("beta", offset=-DAY)
    tomorrow = make_item("gamma", offset=DAY)
    second_tie = make_item("delta", offset=-2 * DAY)

    due = select_due([first_tie, yesterday, tomorrow, second_tie], NOW)

    assert [item.word for item in due] == ["alpha", "delta", "beta"]


def test_select_due_includes_exactly_now():
    assert select_due([make_item("now", offset=timedelta(0))], NOW)


def test_never_reviewed_items_are_due():
    fresh = make_item("fresh")
    later = make_item("later", offset=DAY)
    assert select_due([later, fresh], NOW) == [fresh]


def test_select_due_does_not_modify_input():
    items = [make_item("b", offset=-DAY), make_item("a", offset=-2 * DAY)]
    snapshot = list(items)
    select_due(items, NOW)
    assert items == snapshot


def test_fallback_to_full_collection_when_nothing_due():
    items = [make_item("late", offset=5 * DAY), make_item("soon", offset=DAY),
             make_item("mid", offset=3 * DAY)]

    assert select_due(items, NOW) == []
    chosen = select_study_items(items, NOW)

    assert [item.word for item in chosen] == ["soon", "mid", "late"]


def test_fallback_can_be_disabled():
    items = [make_item("soon", offset=DAY)]
    assert select_study_items(items, NOW, fallback_to_full=False) == []


def test_due_mode_prefers_due_items():
    due_item = make_item("due", offset=-DAY)
    items = [make_item("later", offset=DAY), due_item]
    assert select_study_items(items, NOW) == [due_item]


def test_full_mode_studies_everything():
    items = [make_item("later", offset=DAY), make_item("due", offset=-DAY)]
    chosen = select_study_items(items, NOW, mode=StudyMode.FULL)
    assert [item.word for item in chosen] == ["due", "later"]


def test_empty_collection_yields_empty_selection():
    assert select_study_items([], NOW) == []
    assert sort_by_review([], NOW) == []


def test_selection_requires_aware_now():
    with pytest.raises(ValueError):
        select_due([make_item("x")], datetime(2024, 5, 1))


# SESSION STATE MACHINE

def test_start_session_snapshot():
    items = [make_item("a"), make_item("b")]
    session = start_session(items)

    assert session.items == tuple(items)
    assert session.current_index == 0
    assert session.revealed is False
    assert session.state is SessionState.AWAITING_REVEAL
    assert session.current_item == items[0]
    assert session.remaining == 2


def test_empty_session_is_complete():
    session = start_session([])
    assert session.is_complete
    assert session.current_item is None
    assert session.progress == 1.0


def test_reveal_then_judge():
    session = reveal(start_session([make_item("a")]))
    assert session.state is SessionState.AWAITING_JUDGMENT


def test_two_item_session_completes():
    a = make_item("A", level=0)
    b = make_item("B", level=3)

    session = start_session([a, b])
    session = reveal(session)
    session = submit_judgment(session, Rating.GOOD, NOW)

    assert session.current_index == 1
    assert session.revealed is False
    assert session.items[0].mastery_level == 1
    assert session.items[0].next_review_at == NOW + timedelta(days=3)
    assert session.progress == 0.5

    session = reveal(session)
    session = submit_judgment(session, Rating.EASY, NOW)

    assert session.state is SessionState.COMPLETE
    assert session.current_index == len(session.items)
    assert session.items[1].mastery_level == 5
    assert session.items[1].next_review_at == NOW + timedelta(days=90)


def test_transitions_leave_previous_session_untouched():
    session = start_session([make_item("a")])
    revealed = reveal(session)
    judged = submit_judgment(revealed, Rating.GOOD, NOW)

    assert session.revealed is False
    assert revealed.current_index == 0
    assert revealed.items[0].mastery_level == 0
    assert judged.items[0].mastery_level == 1


def test_judge_before_reveal_fails():
    session = start_session([make_item("a")])
    with pytest.raises(SessionStateError):
        submit_judgment(session, Rating.GOOD, NOW)


def test_reveal_twice_fails():
    session = reveal(start_session([make_item("a")]))
    with pytest.raises(SessionStateError):
        reveal(session)


def test_no_actions_after_complete():
    session = submit_judgment(reveal(start_session([make_item("a")])), Rating.HARD, NOW)
    assert session.is_complete

    with pytest.raises(SessionStateError):
        reveal(session)
    with pytest.raises(SessionStateError):
        submit_judgment(session, Rating.GOOD, NOW)
    with pytest.raises(SessionStateError):
        cancel(session)


def test_session_uses_given_scheduler():
    scheduler = Scheduler(SchedulerConfig(relearn_minutes=15))
    session = reveal(start_session([make_item("a", level=4)]))
    session = submit_judgment(session, Rating.HARD, NOW, scheduler)

    assert session.items[0].mastery_level == 2
    assert session.items[0].next_review_at == NOW + timedelta(minutes=15)


# CANCEL AND MERGE

def test_cancel_keeps_partial_progress():
    items = [make_item("one", level=1), make_item("two", level=2), make_item("three", level=3)]

    session = submit_judgment(reveal(start_session(items)), Rating.GOOD, NOW)
    result = cancel(session)

    assert len(result) == 3
    assert result[0].mastery_level == 2
    assert result[0].next_review_at == NOW + timedelta(days=7)
    assert result[1:] == items[1:]


def test_cancel_while_revealed():
    items = [make_item("one")]
    assert cancel(reveal(start_session(items))) == items


def test_merge_replaces_by_case_insensitive_word():
    collection = [make_item("Zephyr"), make_item("Eloquent"), make_item("paradigm")]
    updated = [make_item("eloquent", level=4, offset=DAY)]

    merged = merge_into_collection(collection, updated)

    assert [item.word for item in merged] == ["Zephyr", "eloquent", "paradigm"]
    assert merged[1].mastery_level == 4


def test_merge_ignores_items_not_in_collection():
    collection = [make_item("kept")]
    merged = merge_into_collection(collection, [make_item("removed", level=3)])
    assert merged == collection


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
