"""Shared fakes for Gemini clients and closet fixtures."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from google.genai import types

from logic.image_codec import encode
from models.closet_item import ClosetItem, TransportImage


class FakeModels:
    """Records ``generate_content`` calls and replays queued responses."""

    def __init__(self, responses: Sequence[Any]) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def generate_content(self, *, model: str, contents: Any, config: Any = None) -> Any:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if not self.responses:
            raise AssertionError("unexpected generate_content call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeClient:
    def __init__(self, *responses: Any) -> None:
        self.models = FakeModels(responses)


def selection_response(*item_ids: str, reasoning: str = "Looks good together.") -> types.GenerateContentResponse:
    payload = json.dumps({"selected_item_ids": list(item_ids), "reasoning": reasoning})
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part.from_text(text=payload)]))]
    )


def text_response(text: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part.from_text(text=text)]))]
    )


def image_response(image_bytes: bytes, leading_text: str | None = "Here is the outfit.") -> types.GenerateContentResponse:
    parts = []
    if leading_text:
        parts.append(types.Part.from_text(text=leading_text))
    parts.append(types.Part.from_bytes(data=image_bytes, mime_type="image/png"))
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def make_item(item_id: str, *tags: str, mime_type: str = "image/jpeg") -> ClosetItem:
    return ClosetItem(id=item_id, image=encode(f"{item_id}-pixels".encode(), mime_type), tags=tags)


def user_photo() -> TransportImage:
    return encode(b"user-photo-pixels", "image/jpeg")
