"""Exam routes - CRUD, activate/deactivate, student exam list, AI question extraction."""

from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone
import uuid

from elmadrasa.database import db
from elmadrasa.deps import get_current_user, get_teacher_user
from elmadrasa.models.user import User
from elmadrasa.models.exam import Exam, ExamCreate, ExamUpdate, ExtractionDocument
from elmadrasa.utils.serialization import serialize_doc, to_document
from elmadrasa.utils.validation import validate_exam_structure
from elmadrasa.services.exam_data import (
    get_teacher_exam,
    get_student_exam,
    student_exam_status,
    student_exam_entry,
    student_view,
    exam_summary,
)
from elmadrasa.services.extraction import extract_questions, ExtractionError
from elmadrasa.config import logger

router = APIRouter(tags=["exams"])

# A null clears these; any other field sent as null is rejected
NULLABLE_FIELDS = ("available_from", "due_date")


def _raise_if_invalid(exam):
    validation = validate_exam_structure(exam)
    if not validation["valid"]:
        raise HTTPException(status_code=400, detail={
            "message": "Exam is not valid",
            "errors": validation["errors"],
            "warnings": validation["warnings"],
        })
    return validation


@router.get("/exams")
async def get_exams(user: User = Depends(get_current_user)):
    """Teacher: own exams with submission counts. Student: class exams with status."""
    if user.role in ("teacher", "admin"):
        query = {} if user.role == "admin" else {"teacher_id": user.user_id}
        docs = await db.exams.find(query, {"_id": 0}).sort("created_at", -1).to_list(200)

        exams = []
        for doc in docs:
            exam = Exam(**doc)
            entry = exam_summary(exam)
            entry["submission_count"] = await db.submissions.count_documents({"exam_id": exam.exam_id})
            entry["pending_grading"] = await db.submissions.count_documents({
                "exam_id": exam.exam_id,
                "needs_manual_grading": True,
                "is_manually_graded": False,
            })
            exams.append(entry)
        return exams

    if not user.class_name:
        return []

    now = datetime.now(timezone.utc)
    docs = await db.exams.find(
        {"class_name": user.class_name, "is_active": True},
        {"_id": 0}
    ).sort("created_at", -1).to_list(200)

    exams = []
    for doc in docs:
        exam = Exam(**doc)
        status, latest = await student_exam_status(exam, user.user_id, now)
        exams.append(student_exam_entry(exam, status, latest, now))
    return exams


@router.post("/exams")
async def create_exam(exam_in: ExamCreate, user: User = Depends(get_teacher_user)):
    """Create a new exam"""
    exam = Exam(
        exam_id=f"exam_{uuid.uuid4().hex[:8]}",
        teacher_id=user.user_id,
        **exam_in.model_dump(),
    )
    validation = _raise_if_invalid(exam)

    await db.exams.insert_one(to_document(exam))
    logger.info(f"Created exam {exam.exam_id} - '{exam.title}' for class {exam.class_name}")
    return {
        "exam_id": exam.exam_id,
        "total_points": validation["total_points"],
        "warnings": validation["warnings"],
    }


@router.post("/exams/extract-questions")
async def extract_exam_questions(document: ExtractionDocument, user: User = Depends(get_teacher_user)):
    """Extract candidate questions from a document with AI; nothing is saved"""
    try:
        questions = await extract_questions(document)
    except ExtractionError as e:
        logger.error(f"Question extraction unavailable for {user.user_id}: {e}")
        raise HTTPException(status_code=502, detail="Question extraction service unavailable")
    return {"questions": serialize_doc(questions), "count": len(questions)}


@router.get("/exams/{exam_id}")
async def get_exam(exam_id: str, user: User = Depends(get_current_user)):
    """Teacher: full exam. Student: exam without answer keys, plus status."""
    if user.role in ("teacher", "admin"):
        exam = await get_teacher_exam(exam_id, user)
        return serialize_doc(exam)

    exam = await get_student_exam(exam_id, user)
    now = datetime.now(timezone.utc)
    status, latest = await student_exam_status(exam, user.user_id, now)
    view = student_view(exam, user.user_id)
    view.update(student_exam_entry(exam, status, latest, now))
    return view


@router.put("/exams/{exam_id}")
async def update_exam(exam_id: str, update: ExamUpdate, user: User = Depends(get_teacher_user)):
    """Update exam details, questions, window or settings"""
    exam = await get_teacher_exam(exam_id, user)

    changes = update.model_dump(exclude_unset=True)
    if not changes:
        return {"message": "Nothing to update", "updated_fields": []}

    null_fields = [key for key, value in changes.items() if value is None and key not in NULLABLE_FIELDS]
    if null_fields:
        raise HTTPException(status_code=400, detail=f"Fields cannot be null: {', '.join(null_fields)}")

    updated = Exam.model_validate({
        **exam.model_dump(),
        **changes,
        "updated_at": datetime.now(timezone.utc),
    })
    _raise_if_invalid(updated)

    doc = to_document(updated)
    update_fields = {key: doc[key] for key in list(changes) + ["updated_at"]}
    await db.exams.update_one({"exam_id": exam_id}, {"$set": update_fields})
    logger.info(f"Updated exam {exam_id}: {list(changes)}")

    return {"message": "Exam updated successfully", "updated_fields": list(changes)}


async def _set_active(exam_id: str, user: User, is_active: bool):
    await get_teacher_exam(exam_id, user)
    await db.exams.update_one(
        {"exam_id": exam_id},
        {"$set": {"is_active": is_active, "updated_at": datetime.now(timezone.utc).isoformat()}}
    )
    logger.info(f"Exam {exam_id} is_active={is_active}")
    return {"exam_id": exam_id, "is_active": is_active}


@router.post("/exams/{exam_id}/activate")
async def activate_exam(exam_id: str, user: User = Depends(get_teacher_user)):
    return await _set_active(exam_id, user, True)


@router.post("/exams/{exam_id}/deactivate")
async def deactivate_exam(exam_id: str, user: User = Depends(get_teacher_user)):
    return await _set_active(exam_id, user, False)


@router.delete("/exams/{exam_id}")
async def delete_exam(exam_id: str, user: User = Depends(get_teacher_user)):
    """Delete an exam and all its submissions"""
    await get_teacher_exam(exam_id, user)

    result = await db.submissions.delete_many({"exam_id": exam_id})
    await db.exams.delete_one({"exam_id": exam_id})
    logger.info(f"Deleted exam {exam_id} and {result.deleted_count} submissions")

    return {"message": "Exam deleted successfully", "deleted_submissions": result.deleted_count}
