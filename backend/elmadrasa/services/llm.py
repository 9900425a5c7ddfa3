"""
Gemini client used by question extraction (google-generativeai SDK).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import google.generativeai as genai

from elmadrasa.config import GEMINI_MODEL


@dataclass
class ImageContent:
    """One page image, base64 encoded; a data: URI prefix is accepted."""
    image_base64: str
    mime_type: str = "image/png"

    def to_genai_part(self) -> dict:
        data, mime_type = self.image_base64, self.mime_type
        if data.startswith("data:"):
            header, data = data.split(",", 1)
            mime_type = header[5:].split(";", 1)[0] or mime_type
        return {"inline_data": {"mime_type": mime_type, "data": data}}


@dataclass
class UserMessage:
    text: str = ""
    file_contents: List[ImageContent] = field(default_factory=list)

    def to_genai_parts(self) -> list:
        # Images first so the instructions read as referring to them
        parts: List[Any] = [image.to_genai_part() for image in self.file_contents]
        if self.text:
            parts.append(self.text)
        return parts


class LlmChat:
    """
    Single-turn requests against a Gemini model.

        chat = LlmChat(system_message=...).with_params(temperature=0)
        text = await chat.send_message(UserMessage(text="..."))
    """

    def __init__(self, system_message: str = "", model_name: str = GEMINI_MODEL):
        self.system_message = system_message
        self.model_name = model_name
        self.generation_config: Dict[str, Any] = {}

    def with_params(self, **generation_config) -> "LlmChat":
        self.generation_config.update({k: v for k, v in generation_config.items() if v is not None})
        return self

    async def send_message(self, message: UserMessage) -> str:
        model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=self.system_message or None,
            generation_config=self.generation_config or None,
        )
        response = await model.generate_content_async(message.to_genai_parts())
        return response.text
