"""
Exam status resolution - decides whether a student sees an exam as
upcoming, available, taken or missed.
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Iterable, Optional

from elmadrasa.models.exam import Exam
from elmadrasa.models.submission import Submission


class ExamStatus(str, Enum):
    UPCOMING = "upcoming"
    AVAILABLE = "available"
    TAKEN = "taken"
    MISSED = "missed"


def _as_utc(value: datetime) -> datetime:
    # Stored ISO strings may come back naive; they are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_status(exam: Exam, now: datetime, has_submission: bool) -> ExamStatus:
    """
    Classify an exam for one student.

    A submission always wins, even one accepted after the due date.
    Otherwise the time window decides; an exam without a window is
    available.
    """
    if has_submission:
        return ExamStatus.TAKEN

    now = _as_utc(now)
    if exam.available_from is not None and now < _as_utc(exam.available_from):
        return ExamStatus.UPCOMING
    if exam.due_date is not None and now > _as_utc(exam.due_date):
        return ExamStatus.MISSED
    return ExamStatus.AVAILABLE


def latest_submission(submissions: Iterable[Submission]) -> Optional[Submission]:
    """Most recent attempt; with retakes this is the one that counts."""
    latest = None
    for sub in submissions:
        if latest is None or _as_utc(sub.submitted_at) > _as_utc(latest.submitted_at):
            latest = sub
    return latest


def window_is_open(exam: Exam, now: datetime) -> bool:
    return resolve_status(exam, now, has_submission=False) == ExamStatus.AVAILABLE


def can_start(exam: Exam, status: ExamStatus, now: datetime) -> bool:
    """Whether a student may open the exam and submit answers."""
    if not exam.is_active:
        return False
    if status == ExamStatus.AVAILABLE:
        return True
    if status == ExamStatus.TAKEN:
        return exam.settings.allow_retake and window_is_open(exam, now)
    return False
