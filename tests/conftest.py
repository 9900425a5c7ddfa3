"""
Shared fixtures: an in-memory Motor database (mongomock-motor) and a
TestClient wired to the API routes.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from elmadrasa.models.exam import Exam, ExamSettings, Question
from elmadrasa.services.task_worker import TaskQueue
from elmadrasa.utils.serialization import to_document

DB_MODULES = [
    "elmadrasa.deps",
    "elmadrasa.services.exam_data",
    "elmadrasa.services.notifications",
    "elmadrasa.services.metrics",
    "elmadrasa.routes.exams",
    "elmadrasa.routes.submissions",
    "elmadrasa.routes.grading",
    "elmadrasa.routes.analytics",
    "elmadrasa.routes.notifications",
]

USERS = [
    {"user_id": "teacher_1", "name": "Ms. Amal", "role": "teacher"},
    {"user_id": "teacher_2", "name": "Mr. Karim", "role": "teacher"},
    {"user_id": "student_1", "name": "Omar", "role": "student", "class_name": "Prep 1A", "grade": 7},
    {"user_id": "student_2", "name": "Laila", "role": "student", "class_name": "Prep 1A", "grade": 7},
    {"user_id": "student_3", "name": "Youssef", "role": "student", "class_name": "Prep 2B", "grade": 8},
    {"user_id": "pending_1", "name": "New", "role": "student", "is_approved": False},
]


def seed(collection, docs):
    """Insert one document or a list of them"""
    docs = [docs] if isinstance(docs, dict) else docs
    asyncio.run(collection.insert_many([dict(d) for d in docs]))


def stored(collection, query=None):
    """Documents currently in a collection, in insertion order, without _id"""
    return asyncio.run(collection.find(query or {}, {"_id": 0}).to_list(None))


# ============== FIXTURES ==============

@pytest.fixture
def fake_db(monkeypatch):
    db = AsyncMongoMockClient()["elmadrasa_test"]
    for module in DB_MODULES:
        monkeypatch.setattr(f"{module}.db", db)

    seed(db.users, USERS)
    return db


@pytest.fixture
def queue(monkeypatch):
    task_queue = TaskQueue(maxsize=10)
    monkeypatch.setattr("elmadrasa.services.notifications.task_queue", task_queue)
    return task_queue


@pytest.fixture
def client(fake_db, queue):
    from elmadrasa.routes import register_all_routes

    app = FastAPI()
    api_router = APIRouter(prefix="/api")
    register_all_routes(api_router)
    app.include_router(api_router)
    return TestClient(app)


def as_user(user_id):
    return {"X-User-Id": user_id}


def make_exam(exam_id="exam_1", questions=None, **kwargs):
    now = datetime.now(timezone.utc)
    if questions is None:
        questions = [
            Question(id="q1", question="Capital of Egypt?", options=["Alexandria", "Cairo"],
                     correct_answer="Cairo", points=5),
            Question(id="q2", question="Explain the water cycle.", type="text", points=10),
        ]
    fields = dict(
        exam_id=exam_id,
        title="Geography Quiz",
        subject="Social Studies",
        class_name="Prep 1A",
        teacher_id="teacher_1",
        questions=questions,
        available_from=now - timedelta(days=1),
        due_date=now + timedelta(days=1),
    )
    fields.update(kwargs)
    return Exam(**fields)


@pytest.fixture
def stored_exam(fake_db):
    exam = make_exam()
    seed(fake_db.exams, to_document(exam))
    return exam


def mcq_only_exam(exam_id="exam_mcq", **kwargs):
    return make_exam(
        exam_id=exam_id,
        questions=[
            Question(id="q1", question="2 + 2?", options=["3", "4"], correct_answer="4", points=5),
            Question(id="q2", question="Capital of France?", options=["Paris", "Lyon"],
                     correct_answer="Paris", points=5),
        ],
        settings=kwargs.pop("settings", ExamSettings()),
        **kwargs,
    )
