"""Pydantic models for the Elmadrasa exam backend"""

from .user import User
from .exam import (
    Question,
    ExamSettings,
    Exam,
    ExamCreate,
    ExamUpdate,
    QuestionUpdate,
    ExtractionDocument,
)
from .submission import (
    GradingStatus,
    Answer,
    Submission,
    SubmissionCreate,
    ManualGradeRequest,
)
