"""Offline stand-in for the Gemini client used when mock data is enabled."""

from __future__ import annotations

import json
import logging
import random
import re
from typing import Any, List, Optional

from google.genai import types

from stylist_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
_ITEM_META = re.compile(r"^ITEM_META id: (?P<item_id>.*?) \| tags:")


class _MockModels:
    def __init__(self, rng: random.Random, max_items: int) -> None:
        self._rng = rng
        self._max_items = max_items

    def generate_content(
        self, *, model: str, contents: types.Content, config: Optional[types.GenerateContentConfig] = None
    ) -> types.GenerateContentResponse:
        parts = list(contents.parts or [])
        if config is not None and config.response_mime_type == "application/json":
            return self._select(model, parts)
        return self._compose(model, parts)

    def _select(self, model: str, parts: List[types.Part]) -> types.GenerateContentResponse:
        item_ids = []
        for part in parts:
            match = _ITEM_META.match(part.text or "")
            if match:
                item_ids.append(match.group("item_id"))
        chosen = self._rng.sample(item_ids, k=min(self._max_items, len(item_ids)))
        log_event(
            LOGGER,
            logging.INFO,
            "mock_selection",
            model=model,
            chosen_ids=chosen,
            candidate_count=len(item_ids),
        )
        payload = {"selected_item_ids": chosen, "reasoning": "Random pick from the mock backend."}
        return _response([types.Part.from_text(text=json.dumps(payload))])

    def _compose(self, model: str, parts: List[types.Part]) -> types.GenerateContentResponse:
        # Echo the user photo, which is always the first part.
        photo = next((part for part in parts if part.inline_data is not None), None)
        if photo is None:
            log_event(LOGGER, logging.WARNING, "mock_composition_without_photo", model=model)
            return _response([types.Part.from_text(text="No person image supplied.")])
        log_event(LOGGER, logging.INFO, "mock_composition", model=model, part_count=len(parts))
        return _response([types.Part.from_bytes(data=photo.inline_data.data, mime_type="image/png")])


def _response(parts: List[types.Part]) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


class MockGenAIClient:
    """Mimics ``genai.Client().models.generate_content`` for local runs."""

    def __init__(self, seed: Any = None, max_items: int = 3) -> None:
        self.models = _MockModels(random.Random(seed), max_items)


__all__ = ["MockGenAIClient"]
