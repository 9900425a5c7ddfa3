"""
Notification helpers.

Notifications are stored per user and carry a message template key plus
parameters; the mobile client localizes them. Delivery to devices happens
elsewhere.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from elmadrasa.database import db
from elmadrasa.config import logger
from elmadrasa.services.task_worker import task_queue

GRADING_COMPLETE_TITLE = "exams.gradingCompleteTitle"
GRADING_COMPLETE_BODY = "exams.gradingCompleteBody"


async def create_notification(
    user_id: str,
    template_key: str,
    params: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    title_key: Optional[str] = None,
) -> str:
    """Store a notification for one recipient and return its id"""
    notification_id = f"notif_{uuid.uuid4().hex[:12]}"
    notification = {
        "notification_id": notification_id,
        "user_id": user_id,
        "title_key": title_key,
        "template_key": template_key,
        "params": params or {},
        "data": data or {},  # deep link payload
        "is_read": False,
        "created_at": datetime.now(timezone.utc).isoformat()
    }
    await db.notifications.insert_one(notification)
    return notification_id


async def notify_grading_complete(student_id: str, submission_id: str, exam_title: str,
                                  score: int, total_points: int) -> str:
    notification_id = await create_notification(
        student_id,
        GRADING_COMPLETE_BODY,
        params={"examTitle": exam_title, "score": score, "totalPoints": total_points},
        data={"screen": "exam-results", "submissionId": submission_id, "type": "grading_complete"},
        title_key=GRADING_COMPLETE_TITLE,
    )
    logger.info(f"Grading notification {notification_id} sent to {student_id} for {submission_id}")
    return notification_id


def queue_grading_notification(student_id: str, submission_id: str, exam_title: str,
                               score: int, total_points: int) -> bool:
    """Best-effort: queue the notification, never raise into the caller."""
    try:
        return task_queue.enqueue(
            f"notify_grading_complete:{submission_id}",
            notify_grading_complete,
            student_id, submission_id, exam_title, score, total_points,
        )
    except Exception as e:
        logger.error(f"Failed to queue grading notification for {submission_id}: {e}")
        return False
