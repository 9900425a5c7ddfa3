"""
Manual grading reconciliation.

Merges teacher-assigned points into an auto-scored submission. Points are
clamped against the exam's current questions, which may have been edited
since the submission was made.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from elmadrasa.models.exam import Question, QuestionUpdate
from elmadrasa.models.submission import Submission


def clamp_points(value: int, max_points: int) -> int:
    return max(0, min(int(max_points), int(value)))


def apply_question_updates(questions: Iterable[Question], updates: Iterable[QuestionUpdate]) -> List[Question]:
    """
    Return the exam's questions with revised answer keys, explanations and
    point values merged in. Unknown ids are ignored.
    """
    by_id: Dict[str, QuestionUpdate] = {u.id: u for u in updates}
    merged = []
    for question in questions:
        update = by_id.get(question.id)
        if update is None:
            merged.append(question)
            continue
        changes = update.model_dump(exclude={"id"}, exclude_none=True)
        if "points" in changes and changes["points"] <= 0:
            changes.pop("points")
        merged.append(question.model_copy(update=changes))
    return merged


def reconcile(
    submission: Submission,
    grade_overrides: Mapping[str, Optional[int]],
    updated_questions: Iterable[Question],
    feedback: Optional[str] = None,
) -> Submission:
    """
    Apply a teacher's grading pass and return the updated submission.

    `grade_overrides` maps question id to awarded points. A value of None
    clears an earlier manual grade. Calling this twice with the same
    overrides gives the same result.
    """
    questions = {q.id: q for q in updated_questions}
    cleared_text_grade = False
    text_answers_graded = True
    answers = []

    for answer in submission.answers:
        question = questions.get(answer.question_id)
        answer = answer.model_copy()

        if question is not None and answer.question_id in grade_overrides:
            override = grade_overrides[answer.question_id]
            if override is None:
                answer.points = 0
                answer.is_correct = False
                if question.type == "text":
                    cleared_text_grade = True
            else:
                answer.points = clamp_points(override, question.points)
                answer.is_correct = answer.points > 0
            explicitly_graded = override is not None
        else:
            explicitly_graded = answer.points > 0

        if question is not None and question.type == "text" and not explicitly_graded:
            text_answers_graded = False
        answers.append(answer)

    total = sum(a.points for a in answers)
    total = max(0, min(total, submission.total_points))

    if cleared_text_grade:
        is_manually_graded = False
    else:
        is_manually_graded = submission.is_manually_graded or text_answers_graded

    changes = {
        "answers": answers,
        "score": total,
        "is_manually_graded": is_manually_graded,
        "needs_manual_grading": submission.needs_manual_grading or cleared_text_grade,
    }
    if feedback is not None:
        changes["feedback"] = feedback
    return submission.model_copy(update=changes)
