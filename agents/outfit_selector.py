"""Outfit selector agent: asks Gemini which closet items make a coherent outfit."""
from __future__ import annotations

import logging
from typing import List, Sequence

from google import genai
from google.genai import types
from pydantic import ValidationError

from stylist_app.logging_config import get_logger, log_event
from logic.errors import SelectionFailedError
from logic.image_codec import decode
from logic.prompts import item_meta_line, selection_instruction
from logic.validation import SelectionResponse, validation_failure
from models.closet_item import ClosetItem

logger = get_logger(__name__)


class OutfitSelectorAgent:
    """Stateless adapter around the text-and-vision selection call."""

    def __init__(self, client: genai.Client, model: str) -> None:
        self.client = client
        self.model = model

    def build_contents(self, candidate_items: Sequence[ClosetItem], purpose: str) -> types.Content:
        """Instruction block, then a metadata line and image per candidate in input order."""

        parts: List[types.Part] = [types.Part.from_text(text=selection_instruction(purpose))]
        for item in candidate_items:
            parts.append(types.Part.from_text(text=item_meta_line(item)))
            parts.append(types.Part.from_bytes(data=decode(item.image), mime_type=item.mime_type))
        return types.Content(role="user", parts=parts)

    def select_items(self, candidate_items: Sequence[ClosetItem], purpose: str) -> List[ClosetItem]:
        """Return the chosen subset of ``candidate_items`` in candidate order.

        An empty list is a valid answer here; deciding whether that is a
        failure is left to the orchestrator.

        Raises:
            ValueError: If no candidates are given.
            SelectionFailedError: If the model call fails or its JSON cannot be parsed.
        """

        if not candidate_items:
            raise ValueError("select_items needs at least one candidate item")

        contents = self.build_contents(candidate_items, purpose)
        log_event(
            logger,
            logging.INFO,
            "agent_call_started",
            agent="selector",
            method="select_items",
            model=self.model,
            candidate_count=len(candidate_items),
            purpose=purpose,
        )
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=SelectionResponse,
                ),
            )
        except Exception as exc:
            log_event(logger, logging.ERROR, "agent_call_failed", agent="selector", exc_info=True)
            raise SelectionFailedError() from exc

        parsed = self._parse(getattr(response, "text", None))
        selected_ids = set(parsed.selected_item_ids)
        selected = [item for item in candidate_items if item.id in selected_ids]

        log_event(
            logger,
            logging.INFO,
            "agent_call_completed",
            agent="selector",
            method="select_items",
            requested_ids=parsed.selected_item_ids,
            selected_ids=[item.id for item in selected],
            reasoning=parsed.reasoning,
        )
        return selected

    def _parse(self, raw_text: str | None) -> SelectionResponse:
        if not raw_text:
            raise SelectionFailedError("The AI stylist returned an empty response. Please try again.")
        try:
            return SelectionResponse.model_validate_json(raw_text)
        except ValidationError as exc:
            review = validation_failure("Selection response failed schema checks", exc)
            log_event(logger, logging.WARNING, "selection_response_invalid", details=review["details"])
            raise SelectionFailedError() from exc


__all__ = ["OutfitSelectorAgent"]
