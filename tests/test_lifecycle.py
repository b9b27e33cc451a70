"""Tests for exam lifecycle classification."""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import InvalidTimeWindowError
from app.schemas.exam import ExamInstanceRecord, ExamPhase
from app.services.lifecycle import as_utc, classify, count_by_phase

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
END = datetime(2026, 3, 2, 11, 0, tzinfo=timezone.utc)


def test_before_start_is_upcoming():
    result = classify(START - timedelta(seconds=1), START, END)
    assert result.phase == ExamPhase.UPCOMING
    assert result.remaining_seconds == 0
    assert result.remaining_minutes == 0


def test_start_boundary_is_active():
    result = classify(START, START, END)
    assert result.phase == ExamPhase.ACTIVE
    assert result.remaining_seconds == 7200
    assert result.remaining_minutes == 120


def test_end_boundary_is_active_with_nothing_remaining():
    result = classify(END, START, END)
    assert result.phase == ExamPhase.ACTIVE
    assert result.remaining_seconds == 0
    assert result.remaining_minutes == 0


def test_after_end_is_ended():
    result = classify(END + timedelta(microseconds=1), START, END)
    assert result.phase == ExamPhase.ENDED


def test_remaining_minutes_are_floored():
    now = END - timedelta(minutes=90, seconds=30)
    result = classify(now, START, END)
    assert result.remaining_seconds == 5430
    assert result.remaining_minutes == 90


@pytest.mark.parametrize("offset_minutes", range(-30, 160, 7))
def test_exactly_one_phase(offset_minutes):
    now = START + timedelta(minutes=offset_minutes)
    result = classify(now, START, END)
    expected = (
        ExamPhase.UPCOMING if now < START
        else ExamPhase.ENDED if now > END
        else ExamPhase.ACTIVE
    )
    assert result.phase == expected


def test_naive_datetimes_are_taken_as_utc():
    naive_start = START.replace(tzinfo=None)
    naive_end = END.replace(tzinfo=None)
    result = classify(START + timedelta(minutes=30), naive_start, naive_end)
    assert result.phase == ExamPhase.ACTIVE
    assert result.remaining_minutes == 90


def test_other_offsets_are_normalized():
    lagos = timezone(timedelta(hours=1))
    assert as_utc(datetime(2026, 3, 2, 10, 0, tzinfo=lagos)) == START


def test_inverted_window_after_end_is_ended():
    result = classify(START + timedelta(hours=1), END, START)
    assert result.phase == ExamPhase.ENDED


def test_inverted_window_strict_raises():
    with pytest.raises(InvalidTimeWindowError) as exc_info:
        classify(START, END, START, strict=True)
    assert exc_info.value.code == "INVALID_TIME_WINDOW"


def test_zero_length_window_strict_raises():
    with pytest.raises(InvalidTimeWindowError):
        classify(START, START, START, strict=True)


def test_count_by_phase():
    exams = [
        ExamInstanceRecord(id=1, start_time=START, end_time=END, total_marks=100),
        ExamInstanceRecord(
            id=2,
            start_time=START + timedelta(days=1),
            end_time=END + timedelta(days=1),
            total_marks=100,
        ),
        ExamInstanceRecord(
            id=3,
            start_time=START - timedelta(days=1),
            end_time=END - timedelta(days=1),
            total_marks=100,
        ),
        ExamInstanceRecord(
            id=4,
            start_time=START - timedelta(days=2),
            end_time=END - timedelta(days=2),
            total_marks=100,
        ),
    ]
    counts = count_by_phase(exams, START + timedelta(minutes=10))
    assert counts.active == 1
    assert counts.upcoming == 1
    assert counts.ended == 2
