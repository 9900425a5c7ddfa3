"""
Automatic scoring of a student's answer sheet.

Multiple-choice questions are graded on submission by exact string
comparison with the answer key. Free-text questions score 0 until a
teacher grades them (see reconciliation).
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Mapping, Union, Optional

from elmadrasa.models.exam import Exam
from elmadrasa.models.submission import Answer, Submission


@dataclass
class ScoreResult:
    per_question: List[Answer] = field(default_factory=list)
    total: int = 0
    total_points: int = 0
    needs_manual_grading: bool = False


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(score: float, total_points: float) -> int:
    """Whole-number percentage; 0 when there is nothing to score."""
    if not total_points or total_points <= 0:
        return 0
    return round_half_up(100 * score / total_points)


def _answer_map(answers: Union[Mapping[str, str], Iterable[Answer]]) -> dict:
    if isinstance(answers, Mapping):
        return {qid: ("" if raw is None else str(raw)) for qid, raw in answers.items()}
    return {a.question_id: a.answer for a in answers}


def score(exam: Exam, answers: Union[Mapping[str, str], Iterable[Answer]]) -> ScoreResult:
    """
    Score raw answers against the exam's questions.

    `answers` is either the question id -> answer mapping posted by the
    student or a list of Answer objects. Answers to questions that are not
    part of the exam are dropped.
    """
    raw = _answer_map(answers)
    result = ScoreResult()

    for question in exam.questions:
        given = raw.get(question.id, "")
        if question.type == "mcq":
            # No trimming or case folding: "paris" does not match "Paris"
            is_correct = given == question.correct_answer
            points = question.points if is_correct else 0
        else:
            result.needs_manual_grading = True
            is_correct = False
            points = 0

        result.per_question.append(
            Answer(question_id=question.id, answer=given, is_correct=is_correct, points=points)
        )
        result.total_points += question.points
        result.total += points

    return result


def build_submission(
    submission_id: str,
    exam: Exam,
    student_id: str,
    student_name: str,
    result: ScoreResult,
    submitted_at: Optional[datetime] = None,
) -> Submission:
    """Freeze a ScoreResult into a new Submission."""
    sub = Submission(
        submission_id=submission_id,
        exam_id=exam.exam_id,
        student_id=student_id,
        student_name=student_name,
        answers=result.per_question,
        score=result.total,
        total_points=result.total_points,
        needs_manual_grading=result.needs_manual_grading,
        is_manually_graded=False,
    )
    if submitted_at is not None:
        sub.submitted_at = submitted_at
    return sub
