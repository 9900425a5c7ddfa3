"""Exam routes through the HTTP API"""

from datetime import datetime, timedelta, timezone

from elmadrasa.models.exam import ExamSettings, Question
from elmadrasa.services.extraction import ExtractionError
from elmadrasa.utils.serialization import to_document

from conftest import as_user, make_exam, seed, stored

TEACHER = as_user("teacher_1")
OTHER_TEACHER = as_user("teacher_2")
STUDENT = as_user("student_1")


def new_exam_payload(**kwargs):
    payload = {
        "title": "Fractions",
        "subject": "Math",
        "class_name": "Prep 1A",
        "questions": [
            {"id": "q1", "question": "1/2 + 1/2?", "type": "mcq", "options": ["1", "2"], "correct_answer": "1", "points": 4},
            {"id": "q2", "question": "Explain equivalent fractions.", "type": "text", "points": 6},
        ],
        "settings": {"timed": True, "duration": 30},
    }
    payload.update(kwargs)
    return payload


def test_requests_need_a_known_approved_user(client):
    assert client.get("/api/exams").status_code == 401
    assert client.get("/api/exams", headers=as_user("nobody")).status_code == 401
    assert client.get("/api/exams", headers=as_user("pending_1")).status_code == 403


def test_create_and_list_exam(client, fake_db):
    response = client.post("/api/exams", json=new_exam_payload(), headers=TEACHER)
    assert response.status_code == 200
    body = response.json()
    assert body["total_points"] == 10
    assert body["exam_id"].startswith("exam_")

    doc = stored(fake_db.exams)[0]
    assert doc["teacher_id"] == "teacher_1"
    assert doc["settings"]["duration"] == 30

    exams = client.get("/api/exams", headers=TEACHER).json()
    assert len(exams) == 1
    assert exams[0]["question_count"] == 2
    assert exams[0]["submission_count"] == 0
    assert "questions" not in exams[0]

    assert client.get("/api/exams", headers=OTHER_TEACHER).json() == []


def test_create_rejects_invalid_exam(client, fake_db):
    payload = new_exam_payload(
        available_from="2024-01-10T00:00:00Z",
        due_date="2024-01-01T00:00:00Z",
    )
    response = client.post("/api/exams", json=payload, headers=TEACHER)
    assert response.status_code == 400
    assert "Available-from date must be before the due date" in response.json()["detail"]["errors"]
    assert stored(fake_db.exams) == []


def test_students_cannot_create_exams(client):
    assert client.post("/api/exams", json=new_exam_payload(), headers=STUDENT).status_code == 403


def test_student_exam_list_has_status(client, fake_db):
    now = datetime.now(timezone.utc)
    for exam in (
        make_exam("exam_open"),
        make_exam("exam_later", available_from=now + timedelta(days=2), due_date=now + timedelta(days=3)),
        make_exam("exam_gone", available_from=now - timedelta(days=5), due_date=now - timedelta(days=1)),
        make_exam("exam_off", is_active=False),
        make_exam("exam_other_class", class_name="Prep 2B"),
    ):
        seed(fake_db.exams, to_document(exam))

    exams = {e["exam_id"]: e for e in client.get("/api/exams", headers=STUDENT).json()}
    assert set(exams) == {"exam_open", "exam_later", "exam_gone"}
    assert exams["exam_open"]["status"] == "available"
    assert exams["exam_open"]["can_start"] is True
    assert exams["exam_later"]["status"] == "upcoming"
    assert exams["exam_gone"]["status"] == "missed"
    assert exams["exam_gone"]["can_start"] is False


def test_student_view_hides_answer_keys(client, stored_exam):
    view = client.get("/api/exams/exam_1", headers=STUDENT).json()
    assert view["status"] == "available"
    assert view["total_points"] == 15
    for question in view["questions"]:
        assert "correct_answer" not in question
        assert "explanation" not in question

    full = client.get("/api/exams/exam_1", headers=TEACHER).json()
    assert full["questions"][0]["correct_answer"] == "Cairo"


def test_random_order_is_stable_per_student(client, fake_db):
    questions = [
        Question(id=f"q{i}", question=f"Question {i}", options=["a", "b"], correct_answer="a")
        for i in range(8)
    ]
    exam = make_exam("exam_shuffled", questions=questions, settings=ExamSettings(random_order=True))
    seed(fake_db.exams, to_document(exam))

    first = [q["id"] for q in client.get("/api/exams/exam_shuffled", headers=STUDENT).json()["questions"]]
    second = [q["id"] for q in client.get("/api/exams/exam_shuffled", headers=STUDENT).json()["questions"]]
    assert first == second
    assert sorted(first) == sorted(q.id for q in questions)


def test_exam_of_another_class_is_hidden(client, stored_exam):
    assert client.get("/api/exams/exam_1", headers=as_user("student_3")).status_code == 404
    assert client.get("/api/exams/exam_1", headers=OTHER_TEACHER).status_code == 404
    assert client.get("/api/exams/missing", headers=TEACHER).status_code == 404


def test_update_exam(client, fake_db, stored_exam):
    response = client.put("/api/exams/exam_1", json={"title": "Geography Final"}, headers=TEACHER)
    assert response.status_code == 200
    assert response.json()["updated_fields"] == ["title"]
    assert stored(fake_db.exams)[0]["title"] == "Geography Final"
    assert stored(fake_db.exams)[0]["updated_at"]

    bad = client.put("/api/exams/exam_1", json={"due_date": "2000-01-01T00:00:00Z"}, headers=TEACHER)
    assert bad.status_code == 400
    assert stored(fake_db.exams)[0]["due_date"] != "2000-01-01T00:00:00+00:00"

    assert client.put("/api/exams/exam_1", json={"title": "Mine"}, headers=OTHER_TEACHER).status_code == 404


def test_update_rejects_null_fields(client, fake_db, stored_exam):
    for field in ("questions", "title", "settings", "class_name", "is_active"):
        response = client.put("/api/exams/exam_1", json={field: None}, headers=TEACHER)
        assert response.status_code == 400
        assert field in response.json()["detail"]

    doc = stored(fake_db.exams)[0]
    assert [q["id"] for q in doc["questions"]] == ["q1", "q2"]
    assert doc["title"] == "Geography Quiz"
    assert doc["settings"]["timed"] is False
    assert "updated_at" not in doc or doc["updated_at"] is None

    assert client.get("/api/exams", headers=TEACHER).status_code == 200
    assert client.get("/api/exams", headers=STUDENT).status_code == 200
    assert client.get("/api/exams/exam_1", headers=STUDENT).status_code == 200


def test_update_with_null_window_clears_it(client, fake_db, stored_exam):
    response = client.put("/api/exams/exam_1", json={"due_date": None}, headers=TEACHER)
    assert response.status_code == 200
    assert stored(fake_db.exams)[0]["due_date"] is None
    assert client.get("/api/exams/exam_1", headers=STUDENT).json()["status"] == "available"


def test_update_replaces_settings(client, fake_db, stored_exam):
    response = client.put("/api/exams/exam_1", json={"settings": {"timed": True, "duration": 45}}, headers=TEACHER)
    assert response.status_code == 200
    assert stored(fake_db.exams)[0]["settings"] == {
        "timed": True, "duration": 45, "allow_retake": False, "random_order": False,
    }


def test_unknown_class_is_rejected(client, fake_db, stored_exam):
    response = client.post("/api/exams", json=new_exam_payload(class_name="Prep 7Z"), headers=TEACHER)
    assert response.status_code == 400
    assert "Unknown class: Prep 7Z" in response.json()["detail"]["errors"]

    response = client.put("/api/exams/exam_1", json={"class_name": "7A"}, headers=TEACHER)
    assert response.status_code == 400
    assert stored(fake_db.exams)[0]["class_name"] == "Prep 1A"

    assert client.post("/api/exams", json=new_exam_payload(class_name="11C"), headers=TEACHER).status_code == 200


def test_deactivate_hides_exam_from_students(client, fake_db, stored_exam):
    assert client.post("/api/exams/exam_1/deactivate", headers=TEACHER).json()["is_active"] is False
    assert client.get("/api/exams", headers=STUDENT).json() == []
    assert client.get("/api/exams/exam_1", headers=STUDENT).status_code == 404

    client.post("/api/exams/exam_1/activate", headers=TEACHER)
    assert stored(fake_db.exams)[0]["is_active"] is True
    assert len(client.get("/api/exams", headers=STUDENT).json()) == 1


def test_delete_exam_removes_submissions(client, fake_db, stored_exam):
    seed(fake_db.submissions, [
        {"submission_id": "sub_a", "exam_id": "exam_1", "student_id": "student_1"},
        {"submission_id": "sub_b", "exam_id": "exam_1", "student_id": "student_2"},
        {"submission_id": "sub_c", "exam_id": "exam_other", "student_id": "student_1"},
    ])

    response = client.delete("/api/exams/exam_1", headers=TEACHER)
    assert response.json()["deleted_submissions"] == 2
    assert stored(fake_db.exams) == []
    assert [d["submission_id"] for d in stored(fake_db.submissions)] == ["sub_c"]


def test_extract_questions_route(client, monkeypatch):
    async def fake_extract(document):
        return [Question(id="q_x", question=document.text, type="text", points=2)]

    monkeypatch.setattr("elmadrasa.routes.exams.extract_questions", fake_extract)
    response = client.post("/api/exams/extract-questions", json={"text": "Why is the sky blue?"}, headers=TEACHER)
    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert response.json()["questions"][0]["question"] == "Why is the sky blue?"


def test_extract_questions_service_down(client, monkeypatch):
    async def failing_extract(document):
        raise ExtractionError("timeout")

    monkeypatch.setattr("elmadrasa.routes.exams.extract_questions", failing_extract)
    response = client.post("/api/exams/extract-questions", json={"text": "..."}, headers=TEACHER)
    assert response.status_code == 502
