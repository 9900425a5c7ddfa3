"""Manual grading route - teachers score free-text answers and revise questions."""

from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone

from elmadrasa.database import db
from elmadrasa.deps import get_teacher_user
from elmadrasa.models.user import User
from elmadrasa.models.submission import Submission, ManualGradeRequest
from elmadrasa.core.reconciliation import reconcile, apply_question_updates
from elmadrasa.utils.serialization import serialize_doc
from elmadrasa.services.exam_data import get_teacher_exam, submission_view
from elmadrasa.services.notifications import queue_grading_notification
from elmadrasa.config import logger

router = APIRouter(tags=["grading"])


@router.post("/submissions/{submission_id}/grade")
async def grade_submission(submission_id: str, request: ManualGradeRequest,
                           user: User = Depends(get_teacher_user)):
    """
    Apply a grading pass to one submission.

    Revised answer keys and point values are saved on the exam and used to
    clamp the awarded points. Once every free-text answer is graded the
    student gets a notification (queued, best-effort).
    """
    doc = await db.submissions.find_one({"submission_id": submission_id}, {"_id": 0})
    if not doc:
        raise HTTPException(status_code=404, detail="Submission not found")
    submission = Submission(**doc)
    exam = await get_teacher_exam(submission.exam_id, user)

    try:
        questions = apply_question_updates(exam.questions, request.updated_questions)
        graded = reconcile(submission, request.grades, questions, feedback=request.feedback)
        graded.graded_at = datetime.now(timezone.utc)

        update_fields = {
            key: serialize_doc(getattr(graded, key))
            for key in ("answers", "score", "needs_manual_grading", "is_manually_graded", "feedback", "graded_at")
        }
        await db.submissions.update_one({"submission_id": submission_id}, {"$set": update_fields})

        if request.updated_questions:
            await db.exams.update_one(
                {"exam_id": exam.exam_id},
                {"$set": {
                    "questions": serialize_doc(questions),
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                }}
            )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error grading submission {submission_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save grades")

    logger.info(f"Graded {submission_id}: {graded.score}/{graded.total_points} ({graded.grading_status.value})")

    # Only the first completed pass or a changed score is news to the student
    newly_graded = not submission.is_manually_graded or graded.score != submission.score
    notification_queued = False
    if graded.is_manually_graded and newly_graded:
        notification_queued = queue_grading_notification(
            graded.student_id, submission_id, exam.title, graded.score, graded.total_points
        )

    return {
        "message": "Grades saved",
        "submission": submission_view(graded),
        "notification_queued": notification_queued,
    }
