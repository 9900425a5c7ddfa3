"""Submission and scoring-related Pydantic models"""

from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict
from datetime import datetime, timezone

from .exam import QuestionUpdate


class GradingStatus(str, Enum):
    AUTO_GRADED = "auto_graded"
    NEEDS_GRADING = "needs_grading"
    MANUALLY_GRADED = "manually_graded"


class Answer(BaseModel):
    model_config = ConfigDict(extra="ignore")
    question_id: str
    answer: str = ""
    is_correct: bool = False
    points: int = 0


class Submission(BaseModel):
    """One attempt of one student at one exam"""
    model_config = ConfigDict(extra="ignore")
    submission_id: str
    exam_id: str
    student_id: str
    student_name: str = "Unknown Student"
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    answers: List[Answer] = []
    score: int = 0
    total_points: int = 0  # frozen at submission time
    needs_manual_grading: bool = False
    is_manually_graded: bool = False
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None

    @property
    def grading_status(self) -> GradingStatus:
        if self.is_manually_graded:
            return GradingStatus.MANUALLY_GRADED
        if self.needs_manual_grading:
            return GradingStatus.NEEDS_GRADING
        return GradingStatus.AUTO_GRADED


class SubmissionCreate(BaseModel):
    """Student answer sheet: question id -> raw answer"""
    answers: Dict[str, str] = {}


class ManualGradeRequest(BaseModel):
    """Teacher grading pass; a null grade clears an earlier manual grade"""
    grades: Dict[str, Optional[int]] = {}
    feedback: Optional[str] = None
    updated_questions: List[QuestionUpdate] = []
