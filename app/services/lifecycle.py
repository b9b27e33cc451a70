"""Exam lifecycle classification from scheduled time windows.

The current instant is always passed in by the caller so that classification
stays deterministic; nothing here reads the clock.
"""

import logging
import math
from collections.abc import Iterable
from datetime import datetime, timezone

from app.core.exceptions import InvalidTimeWindowError
from app.schemas.exam import ExamInstanceRecord, ExamLifecycle, ExamPhase, PhaseCounts

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Normalize an instant to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def classify(
    now: datetime,
    start_time: datetime,
    end_time: datetime,
    strict: bool = False,
) -> ExamLifecycle:
    """
    Derive the phase of an exam window at ``now``.

    Both window boundaries belong to the Active phase. A window whose start is
    not before its end is tolerated (``now`` past the end still yields Ended)
    unless ``strict`` is set, in which case it is rejected.
    """
    now = as_utc(now)
    start_time = as_utc(start_time)
    end_time = as_utc(end_time)

    if start_time >= end_time:
        if strict:
            raise InvalidTimeWindowError(start_time, end_time)
        logger.debug("Inverted exam window %s -> %s", start_time, end_time)

    if now > end_time:
        return ExamLifecycle(phase=ExamPhase.ENDED)
    if now < start_time:
        return ExamLifecycle(phase=ExamPhase.UPCOMING)

    remaining = max(0.0, (end_time - now).total_seconds())
    return ExamLifecycle(
        phase=ExamPhase.ACTIVE,
        remaining_seconds=remaining,
        remaining_minutes=math.floor(remaining / 60),
    )


def classify_exam(
    exam: ExamInstanceRecord,
    now: datetime,
    strict: bool = False,
) -> ExamLifecycle:
    """Classify an exam instance record at ``now``."""
    return classify(now, exam.start_time, exam.end_time, strict=strict)


def count_by_phase(exams: Iterable[ExamInstanceRecord], now: datetime) -> PhaseCounts:
    """Count exams per lifecycle phase at ``now``."""
    counts = PhaseCounts()
    for exam in exams:
        phase = classify_exam(exam, now).phase
        if phase == ExamPhase.UPCOMING:
            counts.upcoming += 1
        elif phase == ExamPhase.ACTIVE:
            counts.active += 1
        else:
            counts.ended += 1
    return counts
