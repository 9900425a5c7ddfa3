"""Exam-related Pydantic models"""

import uuid
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Literal
from datetime import datetime, timezone


def new_question_id() -> str:
    return f"q_{uuid.uuid4().hex[:8]}"


class Question(BaseModel):
    """A single exam question, multiple choice ("mcq") or free text ("text")"""
    model_config = ConfigDict(extra="ignore")
    id: str = Field(default_factory=new_question_id)
    question: str = ""  # prompt text
    type: Literal["mcq", "text"] = "mcq"
    options: List[str] = []
    correct_answer: str = ""
    points: int = 1
    explanation: Optional[str] = None  # shown to the student after grading


class ExamSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")
    timed: bool = False
    duration: int = 0  # minutes, only meaningful when timed
    allow_retake: bool = False
    random_order: bool = False


class Exam(BaseModel):
    model_config = ConfigDict(extra="ignore")
    exam_id: str
    title: str = "Unknown Exam"
    subject: str = "Unknown Subject"
    class_name: str = ""
    teacher_id: str = ""
    questions: List[Question] = []
    settings: ExamSettings = Field(default_factory=ExamSettings)
    available_from: Optional[datetime] = None
    due_date: Optional[datetime] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None


class ExamCreate(BaseModel):
    """Model for creating an exam"""
    title: str
    subject: str
    class_name: str
    questions: List[Question] = []
    settings: ExamSettings = Field(default_factory=ExamSettings)
    available_from: Optional[datetime] = None
    due_date: Optional[datetime] = None
    is_active: bool = True


class ExamUpdate(BaseModel):
    """Partial exam update; only fields that are set are applied"""
    title: Optional[str] = None
    subject: Optional[str] = None
    class_name: Optional[str] = None
    questions: Optional[List[Question]] = None
    settings: Optional[ExamSettings] = None
    available_from: Optional[datetime] = None
    due_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class QuestionUpdate(BaseModel):
    """Teacher revision of a question made while grading"""
    id: str
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    points: Optional[int] = None


class ExtractionDocument(BaseModel):
    """Document handed to the AI question extractor"""
    text: Optional[str] = None
    images: List[str] = []  # base64 page images
    expected_questions: Optional[int] = None
