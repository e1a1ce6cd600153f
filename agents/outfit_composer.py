"""Outfit composer agent: renders the user wearing the selected items."""
from __future__ import annotations

import logging
from typing import Any, Iterator, List, Sequence

from google import genai
from google.genai import types

from stylist_app.logging_config import get_logger, log_event
from logic.errors import CompositionFailedError, NoImageReturnedError
from logic.image_codec import decode
from logic.prompts import composition_instruction
from models.closet_item import ClosetItem, TransportImage

logger = get_logger(__name__)


def _iter_parts(response: Any) -> Iterator[Any]:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            yield part


def first_inline_image(response: Any) -> bytes | None:
    """Return the bytes of the first part carrying inline image data, if any."""

    for part in _iter_parts(response):
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            return inline.data
    return None


class OutfitComposerAgent:
    """Stateless adapter around the image editing call."""

    def __init__(self, client: genai.Client, model: str) -> None:
        self.client = client
        self.model = model

    def build_contents(self, user_photo: TransportImage, selected_items: Sequence[ClosetItem]) -> types.Content:
        """User photo first, then every item image in order, then the prompt."""

        parts: List[types.Part] = [types.Part.from_bytes(data=decode(user_photo), mime_type=user_photo.mime_type)]
        for item in selected_items:
            parts.append(types.Part.from_bytes(data=decode(item.image), mime_type=item.mime_type))
        parts.append(types.Part.from_text(text=composition_instruction(selected_items)))
        return types.Content(role="user", parts=parts)

    def compose_image(self, user_photo: TransportImage, selected_items: Sequence[ClosetItem]) -> bytes:
        """Return the raw bytes of the generated try-on image.

        Raises:
            ValueError: If no items are given.
            CompositionFailedError: If the model call itself fails.
            NoImageReturnedError: If the response carries no inline image.
        """

        if not selected_items:
            raise ValueError("compose_image needs at least one selected item")

        contents = self.build_contents(user_photo, selected_items)
        log_event(
            logger,
            logging.INFO,
            "agent_call_started",
            agent="composer",
            method="compose_image",
            model=self.model,
            user_photo_mime_type=user_photo.mime_type,
            item_mime_types=[item.mime_type for item in selected_items],
        )
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
        except Exception as exc:
            log_event(logger, logging.ERROR, "agent_call_failed", agent="composer", exc_info=True)
            raise CompositionFailedError() from exc

        image_bytes = first_inline_image(response)
        if image_bytes is None:
            feedback = getattr(response, "prompt_feedback", None)
            log_event(
                logger,
                logging.WARNING,
                "composer_no_image",
                candidate_count=len(getattr(response, "candidates", None) or []),
                block_reason=str(getattr(feedback, "block_reason", None)),
            )
            raise NoImageReturnedError()

        log_event(
            logger,
            logging.INFO,
            "agent_call_completed",
            agent="composer",
            method="compose_image",
            image_size=len(image_bytes),
        )
        return image_bytes


__all__ = ["OutfitComposerAgent", "first_inline_image"]
