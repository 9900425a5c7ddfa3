"""
AI question extraction: turns an uploaded worksheet or question paper into
candidate exam questions the teacher can review before saving.
"""

from typing import List, Dict, Any, Optional
import asyncio
import json
import re

from elmadrasa.config import logger, get_llm_api_key
from elmadrasa.models.exam import ExtractionDocument, Question
from elmadrasa.services.llm import LlmChat, UserMessage, ImageContent
from elmadrasa.utils.concurrency import extraction_semaphore

EXTRACTION_TIMEOUT_SECONDS = 90

SYSTEM_MESSAGE = """You are an expert at extracting exam questions from school worksheets and question papers.

Extract EVERY question from the provided document.

For each question decide its type:
- "mcq" when the question lists answer choices. Put each choice, without its letter, in "options".
  If the document marks the right choice, copy that choice's exact text into "correct_answer".
- "text" for open questions that need a written answer. "options" must be [].

Use the printed marks as "points" when shown, otherwise 1.
If the document gives a model answer or explanation, put it in "explanation".

Required JSON structure:
{
  "questions": [
    {
      "question": "full question text",
      "type": "mcq" | "text",
      "options": ["choice 1", "choice 2"],
      "correct_answer": "choice 1",
      "points": 1,
      "explanation": null
    }
  ]
}

Return ONLY the JSON, no other text."""


class ExtractionError(Exception):
    """The extraction service could not be reached or timed out."""


async def ai_call_with_timeout(chat_model, message, timeout_seconds=EXTRACTION_TIMEOUT_SECONDS,
                               operation_name="AI call"):
    """Wrapper for AI calls with timeout protection."""
    try:
        return await asyncio.wait_for(chat_model.send_message(message), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.error(f"TIMEOUT after {timeout_seconds}s: {operation_name}")
        raise ExtractionError(f"{operation_name} exceeded {timeout_seconds}s timeout")


def parse_questions_json(response_text: str) -> Optional[List[dict]]:
    """
    Pull the question list out of a model response. Accepts a bare JSON
    array, a {"questions": [...]} object, or either wrapped in a code block.
    Returns None when nothing parseable is found.
    """
    def unwrap(result):
        if isinstance(result, dict):
            result = result.get("questions")
        if isinstance(result, list):
            return [q for q in result if isinstance(q, dict)]
        return None

    text = (response_text or "").strip()

    # Strategy 1: Direct parse
    try:
        return unwrap(json.loads(text))
    except json.JSONDecodeError:
        pass

    # Strategy 2: Remove code blocks
    fence = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL)
    if fence:
        try:
            return unwrap(json.loads(fence.group(1).strip()))
        except json.JSONDecodeError:
            pass

    # Strategy 3: Outermost object or array in the text
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = text.find(opener), text.rfind(closer)
        if start != -1 and end > start:
            try:
                return unwrap(json.loads(text[start:end + 1]))
            except json.JSONDecodeError:
                continue

    return None


def _option_text(option: Any) -> str:
    if isinstance(option, dict):
        option = option.get("text") or option.get("value") or option.get("label") or ""
    return re.sub(r"^\s*\(?[A-Da-d][\).:]\s+", "", str(option)).strip()


def _resolve_correct_answer(raw: Any, options: List[str]) -> str:
    if raw is None or not options:
        return ""
    raw = str(raw).strip()
    if raw in options:
        return raw
    # "B" or "b)" style letter answers
    letter = re.fullmatch(r"\(?([A-Da-d])\)?[.)]?", raw)
    if letter:
        idx = ord(letter.group(1).upper()) - ord("A")
        if idx < len(options):
            return options[idx]
    stripped = _option_text(raw)
    return stripped if stripped in options else ""


def normalize_extracted_questions(raw_questions: List[Dict[str, Any]]) -> List[Question]:
    """Map loosely-shaped model output onto Question objects, dropping empty entries."""
    questions = []
    for raw in raw_questions:
        text = str(raw.get("question") or raw.get("question_text") or raw.get("text") or "").strip()
        if not text:
            continue

        options = [_option_text(o) for o in (raw.get("options") or raw.get("choices") or [])]
        options = [o for o in options if o]
        qtype = str(raw.get("type") or "").lower()
        if qtype not in ("mcq", "text"):
            qtype = "mcq" if options else "text"
        if qtype == "text":
            options = []

        try:
            points = int(float(raw.get("points") or raw.get("max_marks") or 1))
        except (TypeError, ValueError):
            points = 1

        explanation = raw.get("explanation")
        questions.append(Question(
            question=text,
            type=qtype,
            options=options,
            correct_answer=_resolve_correct_answer(raw.get("correct_answer"), options),
            points=points if points > 0 else 1,
            explanation=str(explanation) if explanation else None,
        ))
    return questions


async def extract_questions(document: ExtractionDocument) -> List[Question]:
    """
    Extract candidate questions from a document (text and/or page images).

    Returns [] when extraction is not configured or the model output cannot
    be parsed; raises ExtractionError when the model cannot be reached.
    """
    if not get_llm_api_key():
        logger.error("No API key for question extraction")
        return []

    if not (document.text or "").strip() and not document.images:
        return []

    prompt = "Extract the questions from this document."
    if document.expected_questions:
        prompt += f"\n\nExpected number of questions: {document.expected_questions}"
    if document.text:
        prompt += f"\n\nDOCUMENT:\n{document.text}"

    chat = LlmChat(system_message=SYSTEM_MESSAGE).with_params(temperature=0)
    message = UserMessage(
        text=prompt,
        file_contents=[ImageContent(image_base64=img) for img in document.images],
    )
    logger.info(f"Extracting questions ({len(document.images)} page images, "
                f"{len(document.text or '')} chars of text)")

    async with extraction_semaphore:
        try:
            response_text = await ai_call_with_timeout(chat, message, operation_name="Question extraction")
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Question extraction failed: {e}")
            raise ExtractionError(str(e)) from e

    raw_questions = parse_questions_json(response_text)
    if raw_questions is None:
        logger.warning(f"Failed to parse JSON from extraction response. Preview: {(response_text or '')[:200]}")
        return []

    questions = normalize_extracted_questions(raw_questions)
    logger.info(f"Successfully extracted {len(questions)} questions")
    return questions
