"""Submission routes - taking an exam, results, teacher submission lists."""

from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone
import uuid

from elmadrasa.database import db
from elmadrasa.deps import get_current_user, get_teacher_user, get_student_user
from elmadrasa.models.user import User
from elmadrasa.models.exam import Exam
from elmadrasa.models.submission import Submission, SubmissionCreate, GradingStatus
from elmadrasa.core.exam_status import can_start
from elmadrasa.core.scoring import score, build_submission
from elmadrasa.utils.serialization import to_document
from elmadrasa.services.exam_data import (
    find_exam,
    get_teacher_exam,
    get_student_exam,
    student_exam_status,
    submission_view,
)
from elmadrasa.config import logger

router = APIRouter(tags=["submissions"])


@router.post("/exams/{exam_id}/submit")
async def submit_exam(exam_id: str, sheet: SubmissionCreate, user: User = Depends(get_student_user)):
    """Score a student's answer sheet and store it as a new submission"""
    exam = await get_student_exam(exam_id, user)
    now = datetime.now(timezone.utc)

    status, _ = await student_exam_status(exam, user.user_id, now)
    if not can_start(exam, status, now):
        raise HTTPException(status_code=400, detail=f"Exam cannot be submitted ({status.value})")

    try:
        result = score(exam, sheet.answers)
        submission = build_submission(
            submission_id=f"sub_{uuid.uuid4().hex[:12]}",
            exam=exam,
            student_id=user.user_id,
            student_name=user.name,
            result=result,
            submitted_at=now,
        )
        await db.submissions.insert_one(to_document(submission))
    except Exception as e:
        logger.error(f"Error submitting exam {exam_id} for {user.user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to submit exam")

    logger.info(
        f"Submission {submission.submission_id} for exam {exam_id}: "
        f"{submission.score}/{submission.total_points}"
        f"{' (needs manual grading)' if submission.needs_manual_grading else ''}"
    )
    return submission_view(submission)


@router.get("/exams/{exam_id}/taken")
async def has_taken_exam(exam_id: str, user: User = Depends(get_student_user)):
    exam = await get_student_exam(exam_id, user)
    status, latest = await student_exam_status(exam, user.user_id, datetime.now(timezone.utc))
    return {
        "taken": latest is not None,
        "status": status.value,
        "submission_id": latest.submission_id if latest else None,
    }


@router.get("/exams/{exam_id}/submissions/latest")
async def get_latest_submission(exam_id: str, user: User = Depends(get_student_user)):
    """The attempt that counts for this student (the most recent one)"""
    exam = await get_student_exam(exam_id, user)
    _, latest = await student_exam_status(exam, user.user_id, datetime.now(timezone.utc))
    if not latest:
        raise HTTPException(status_code=404, detail="No submission found")
    return submission_view(latest)


@router.get("/exams/{exam_id}/submissions")
async def get_exam_submissions(exam_id: str, user: User = Depends(get_teacher_user)):
    """All submissions for an exam, newest first"""
    await get_teacher_exam(exam_id, user)

    docs = await db.submissions.find(
        {"exam_id": exam_id},
        {"_id": 0}
    ).sort("submitted_at", -1).to_list(1000)

    return [submission_view(Submission(**d)) for d in docs]


@router.get("/submissions/pending-grading")
async def get_pending_grading(user: User = Depends(get_teacher_user)):
    """Submissions with free-text answers still waiting for a teacher"""
    exam_query = {} if user.role == "admin" else {"teacher_id": user.user_id}
    exams = await db.exams.find(exam_query, {"_id": 0, "exam_id": 1, "title": 1}).to_list(500)
    titles = {e["exam_id"]: e.get("title", "Unknown Exam") for e in exams}
    if not titles:
        return []

    docs = await db.submissions.find(
        {
            "exam_id": {"$in": list(titles)},
            "needs_manual_grading": True,
            "is_manually_graded": False,
        },
        {"_id": 0}
    ).sort("submitted_at", 1).to_list(500)

    pending = []
    for d in docs:
        view = submission_view(Submission(**d))
        view["exam_title"] = titles.get(d["exam_id"], "Unknown Exam")
        pending.append(view)
    return pending


@router.get("/submissions/{submission_id}")
async def get_submission(submission_id: str, user: User = Depends(get_current_user)):
    """
    Submission detail with the exam's questions. The owning student sees
    answer keys and explanations only once nothing is waiting on grading.
    """
    doc = await db.submissions.find_one({"submission_id": submission_id}, {"_id": 0})
    if not doc:
        raise HTTPException(status_code=404, detail="Submission not found")
    submission = Submission(**doc)

    exam = await find_exam(submission.exam_id)
    if user.role == "student":
        if submission.student_id != user.user_id:
            raise HTTPException(status_code=403, detail="Access denied")
    elif user.role != "admin" and (not exam or exam.teacher_id != user.user_id):
        raise HTTPException(status_code=403, detail="Access denied")

    view = submission_view(submission)
    view["exam_title"] = exam.title if exam else "Unknown Exam"
    view["questions"] = _result_questions(exam, submission, user)
    return view


def _result_questions(exam: Exam, submission: Submission, user: User) -> list:
    if not exam:
        return []
    hide_keys = user.role == "student" and submission.grading_status == GradingStatus.NEEDS_GRADING
    exclude = {"correct_answer", "explanation"} if hide_keys else set()
    return [q.model_dump(exclude=exclude) for q in exam.questions]
