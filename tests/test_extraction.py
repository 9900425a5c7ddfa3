"""AI question extraction"""

import asyncio

import pytest

from elmadrasa.models.exam import ExtractionDocument
from elmadrasa.services import extraction
from elmadrasa.services.extraction import (
    ExtractionError,
    extract_questions,
    normalize_extracted_questions,
    parse_questions_json,
)

MODEL_OUTPUT = """Here are the questions:
```json
{"questions": [
  {"question": "Capital of Egypt?", "type": "mcq", "options": ["A) Alexandria", "B) Cairo"], "correct_answer": "B", "points": 2},
  {"question": "Describe the Nile.", "type": "text", "options": [], "points": "5", "explanation": "Longest river"}
]}
```"""


class FakeChat:
    response = MODEL_OUTPUT
    error = None
    sent = []

    def __init__(self, system_message="", **kwargs):
        self.system_message = system_message

    def with_params(self, **kwargs):
        return self

    async def send_message(self, message):
        FakeChat.sent.append(message)
        if FakeChat.error:
            raise FakeChat.error
        return FakeChat.response


@pytest.fixture
def fake_chat(monkeypatch):
    FakeChat.response = MODEL_OUTPUT
    FakeChat.error = None
    FakeChat.sent = []
    monkeypatch.setattr(extraction, "LlmChat", FakeChat)
    monkeypatch.setattr(extraction, "get_llm_api_key", lambda: "test-key")
    return FakeChat


def test_parse_questions_json_strategies():
    assert parse_questions_json('[{"question": "a"}]') == [{"question": "a"}]
    assert parse_questions_json('{"questions": [{"question": "a"}, "junk"]}') == [{"question": "a"}]
    assert parse_questions_json(MODEL_OUTPUT)[0]["question"] == "Capital of Egypt?"
    assert parse_questions_json('Sure! {"questions": []} Hope that helps.') == []
    assert parse_questions_json("no json here") is None
    assert parse_questions_json("") is None


def test_normalize_extracted_questions():
    questions = normalize_extracted_questions([
        {"question": "Capital of Egypt?", "options": ["A) Alexandria", "B) Cairo"], "correct_answer": "b"},
        {"question_text": "Pick one", "choices": [{"text": "Red"}, {"text": "Blue"}], "correct_answer": "Blue"},
        {"question": "Explain.", "type": "essay", "points": -3},
        {"question": "   "},
    ])

    assert len(questions) == 3
    assert questions[0].type == "mcq"
    assert questions[0].options == ["Alexandria", "Cairo"]
    assert questions[0].correct_answer == "Cairo"
    assert questions[1].options == ["Red", "Blue"]
    assert questions[1].correct_answer == "Blue"
    assert questions[2].type == "text"
    assert questions[2].points == 1
    assert len({q.id for q in questions}) == 3


def test_extract_questions(fake_chat):
    document = ExtractionDocument(text="1. Capital of Egypt? ...", images=["aGVsbG8="], expected_questions=2)
    questions = asyncio.run(extract_questions(document))

    assert [q.type for q in questions] == ["mcq", "text"]
    assert questions[0].correct_answer == "Cairo"
    assert questions[0].points == 2
    assert questions[1].points == 5
    assert questions[1].explanation == "Longest river"

    message = fake_chat.sent[0]
    assert "Expected number of questions: 2" in message.text
    assert len(message.file_contents) == 1


def test_unparseable_output_returns_empty_list(fake_chat):
    fake_chat.response = "I could not read this document."
    assert asyncio.run(extract_questions(ExtractionDocument(text="..."))) == []


def test_empty_document_skips_model(fake_chat):
    assert asyncio.run(extract_questions(ExtractionDocument(text="  "))) == []
    assert fake_chat.sent == []


def test_missing_api_key_returns_empty_list(fake_chat, monkeypatch):
    monkeypatch.setattr(extraction, "get_llm_api_key", lambda: None)
    assert asyncio.run(extract_questions(ExtractionDocument(text="1. What is 2 + 2?"))) == []
    assert fake_chat.sent == []


def test_transport_error_raises_extraction_error(fake_chat):
    fake_chat.error = ConnectionError("network unreachable")
    with pytest.raises(ExtractionError):
        asyncio.run(extract_questions(ExtractionDocument(text="1. What is 2 + 2?")))


def test_timeout_raises_extraction_error(fake_chat):
    fake_chat.error = asyncio.TimeoutError()
    with pytest.raises(ExtractionError):
        asyncio.run(extract_questions(ExtractionDocument(text="1. What is 2 + 2?")))
