"""
Exam and submission lookups shared by the route modules.
"""

import random
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException

from elmadrasa.database import db
from elmadrasa.models.exam import Exam
from elmadrasa.models.submission import Submission
from elmadrasa.models.user import User
from elmadrasa.core.exam_status import ExamStatus, resolve_status, latest_submission, can_start
from elmadrasa.core.scoring import percentage
from elmadrasa.utils.serialization import serialize_doc


async def find_exam(exam_id: str) -> Optional[Exam]:
    doc = await db.exams.find_one({"exam_id": exam_id}, {"_id": 0})
    return Exam(**doc) if doc else None


async def get_teacher_exam(exam_id: str, user: User) -> Exam:
    """Exam owned by this teacher (admins may access any exam)"""
    exam = await find_exam(exam_id)
    if not exam or (user.role != "admin" and exam.teacher_id != user.user_id):
        raise HTTPException(status_code=404, detail="Exam not found")
    return exam


async def get_student_exam(exam_id: str, user: User) -> Exam:
    """Active exam assigned to the student's class"""
    exam = await find_exam(exam_id)
    if not exam or not exam.is_active or exam.class_name != user.class_name:
        raise HTTPException(status_code=404, detail="Exam not found")
    return exam


async def get_student_submissions(exam_id: str, student_id: str) -> List[Submission]:
    docs = await db.submissions.find(
        {"exam_id": exam_id, "student_id": student_id},
        {"_id": 0}
    ).to_list(100)
    return [Submission(**d) for d in docs]


async def student_exam_status(exam: Exam, student_id: str, now: datetime) -> Tuple[ExamStatus, Optional[Submission]]:
    latest = latest_submission(await get_student_submissions(exam.exam_id, student_id))
    return resolve_status(exam, now, has_submission=latest is not None), latest


def exam_summary(exam: Exam) -> dict:
    doc = serialize_doc(exam)
    doc.pop("questions", None)
    doc["question_count"] = len(exam.questions)
    doc["total_points"] = sum(q.points for q in exam.questions)
    return doc


def student_view(exam: Exam, student_id: str) -> dict:
    """
    Exam as a student may see it before grading: no answer keys or
    explanations. With random_order the questions are shuffled, stably
    per student so a reload shows the same order.
    """
    questions = [q.model_dump(exclude={"correct_answer", "explanation"}) for q in exam.questions]
    if exam.settings.random_order:
        random.Random(f"{exam.exam_id}:{student_id}").shuffle(questions)
    doc = exam_summary(exam)
    doc["questions"] = questions
    return doc


def student_exam_entry(exam: Exam, status: ExamStatus, latest: Optional[Submission], now: datetime) -> dict:
    entry = exam_summary(exam)
    entry["status"] = status.value
    entry["can_start"] = can_start(exam, status, now)
    entry["latest_submission_id"] = latest.submission_id if latest else None
    return entry


def submission_view(sub: Submission) -> dict:
    doc = serialize_doc(sub)
    doc["percentage"] = percentage(sub.score, sub.total_points)
    doc["grading_status"] = sub.grading_status.value
    return doc
