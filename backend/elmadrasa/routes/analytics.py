"""Analytics routes - per-exam result statistics for the teacher."""

from typing import Dict

from fastapi import APIRouter, Depends

from elmadrasa.database import db
from elmadrasa.deps import get_teacher_user
from elmadrasa.models.user import User
from elmadrasa.models.submission import Submission
from elmadrasa.core.exam_status import latest_submission
from elmadrasa.core.statistics import aggregate, performance_insights
from elmadrasa.services.exam_data import get_teacher_exam

router = APIRouter(tags=["analytics"])


# ============== EXAM STATISTICS ==============

@router.get("/exams/{exam_id}/statistics")
async def get_exam_statistics(exam_id: str, limit: int = 3, user: User = Depends(get_teacher_user)):
    """Statistics over each student's latest attempt"""
    exam = await get_teacher_exam(exam_id, user)

    docs = await db.submissions.find({"exam_id": exam_id}, {"_id": 0}).to_list(1000)
    attempts: Dict[str, list] = {}
    for d in docs:
        sub = Submission(**d)
        attempts.setdefault(sub.student_id, []).append(sub)
    counted = [latest_submission(subs) for subs in attempts.values()]

    stats = aggregate(counted)
    pending_grading = len([s for s in counted if s.needs_manual_grading and not s.is_manually_graded])

    return {
        "exam_id": exam_id,
        "title": exam.title,
        "total_points": sum(q.points for q in exam.questions),
        "attempt_count": len(docs),
        "pending_grading": pending_grading,
        "statistics": stats.to_display(limit=max(1, limit)),
        "insights": performance_insights(stats),
    }
