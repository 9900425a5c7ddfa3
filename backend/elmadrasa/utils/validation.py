"""Validation utilities for exams and questions."""

from datetime import timezone
from typing import Any, Dict, List, Union

from elmadrasa.core.grade_levels import parse_class_name
from elmadrasa.models.exam import Exam, ExamCreate


def _utc(value):
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def validate_question_structure(questions: List) -> Dict[str, Any]:
    """
    Validate question structure for consistency.
    Returns validation result with warnings/errors.
    """
    warnings = []
    errors = []

    if not questions:
        warnings.append("Exam has no questions")
        return {"valid": True, "errors": errors, "warnings": warnings, "total_points": 0, "question_count": 0}

    total_points = 0
    question_ids = set()

    for idx, q in enumerate(questions, start=1):
        label = f"Q{idx}"

        if q.id in question_ids:
            errors.append(f"{label}: Duplicate question id {q.id}")
        question_ids.add(q.id)

        if not q.question.strip():
            errors.append(f"{label}: Question text is empty")

        if q.points <= 0:
            errors.append(f"{label}: Points must be a positive whole number")
        else:
            total_points += q.points

        if q.type == "mcq":
            if not q.options:
                errors.append(f"{label}: Multiple choice question has no options")
                continue
            if any(not opt.strip() for opt in q.options):
                errors.append(f"{label}: Please fill in all options")
            if len(q.options) == 1:
                warnings.append(f"{label}: Multiple choice question has a single option")
            if q.correct_answer not in q.options:
                errors.append(f"{label}: Correct answer must be one of the options")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "total_points": total_points,
        "question_count": len(questions)
    }


def validate_exam_structure(exam: Union[Exam, ExamCreate]) -> Dict[str, Any]:
    """Validate a whole exam: required fields, class, time window, settings and questions."""
    result = validate_question_structure(exam.questions or [])
    errors = result["errors"]

    for field_name in ("title", "subject", "class_name"):
        if not (getattr(exam, field_name, None) or "").strip():
            errors.insert(0, f"Missing required field: {field_name}")

    if exam.class_name and exam.class_name.strip() and parse_class_name(exam.class_name) is None:
        errors.append(f"Unknown class: {exam.class_name}")

    if exam.available_from is not None and exam.due_date is not None:
        if _utc(exam.available_from) >= _utc(exam.due_date):
            errors.append("Available-from date must be before the due date")

    if exam.settings is None:
        errors.append("Missing required field: settings")
    elif exam.settings.timed and exam.settings.duration <= 0:
        errors.append("Timed exams need a duration in minutes")

    result["valid"] = len(errors) == 0
    return result
