"""Error taxonomy for outfit orchestration."""

from __future__ import annotations


class OutfitError(Exception):
    """Base class for failures surfaced to the caller of an outfit request.

    ``kind`` is a stable identifier for the failure and ``message`` is the
    single human readable sentence shown to the user. ``state`` records the
    orchestration state the failure happened in, when known.
    """

    kind = "outfit_error"
    default_message = "Could not generate an outfit."

    def __init__(self, message: str | None = None, *, state: str | None = None) -> None:
        self.message = message or self.default_message
        self.state = state
        super().__init__(self.message)


class MissingUserPhotoError(OutfitError):
    kind = "missing_user_photo"
    default_message = "Please upload a photo of yourself first."


class InsufficientItemsError(OutfitError):
    kind = "insufficient_items"
    default_message = "Please add at least 2 items to your closet to get a suggestion."


class SelectionFailedError(OutfitError):
    kind = "selection_failed"
    default_message = "The AI stylist could not pick items. Please try again."


class NoViableOutfitError(OutfitError):
    kind = "no_viable_outfit"
    default_message = "AI could not select an outfit. Try adding more items or changing the purpose."


class CompositionFailedError(OutfitError):
    kind = "composition_failed"
    default_message = "The outfit image could not be generated. Please try again."


class NoImageReturnedError(OutfitError):
    kind = "no_image_returned"
    default_message = "The AI did not return an image. Please try again."


class InvalidSelectionModeError(OutfitError, ValueError):
    kind = "invalid_selection_mode"
    default_message = "Choose one of the full, selective or exclusion modes."


class MalformedEncodingError(OutfitError, ValueError):
    kind = "malformed_encoding"
    default_message = "The image data could not be decoded."


__all__ = [
    "OutfitError",
    "MissingUserPhotoError",
    "InsufficientItemsError",
    "SelectionFailedError",
    "NoViableOutfitError",
    "CompositionFailedError",
    "NoImageReturnedError",
    "InvalidSelectionModeError",
    "MalformedEncodingError",
]
