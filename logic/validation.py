"""Pydantic schemas for model responses and API payloads."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from models.outfit import SelectionMode


class SelectionResponse(BaseModel):
    """Structured output expected from the item selection model."""

    selected_item_ids: List[str] = Field(description="An array of the string IDs of the selected items.")
    reasoning: Optional[str] = Field(default=None, description="A brief reason for your selection.")


class UserSessionPayload(BaseModel):
    """Identity forwarded by the sign-in provider when a session starts."""

    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None


class FaceImagePayload(BaseModel):
    image: str = Field(min_length=1, description="Data URL of the user's photo")


class ClosetUploadPayload(BaseModel):
    """One or more clothing photos sharing the same comma separated tags."""

    images: List[str] = Field(min_length=1, description="Data URLs of clothing photos")
    tags: str = ""


class OutfitRequestPayload(BaseModel):
    purpose: str = "A casual day out"
    mode: SelectionMode = SelectionMode.FULL

    @field_validator("purpose")
    @classmethod
    def _strip_purpose(cls, purpose: str) -> str:
        return purpose.strip()


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    return ValidationResult(message=message, details=exc.errors(include_url=False)).model_dump()


__all__ = [
    "SelectionResponse",
    "UserSessionPayload",
    "FaceImagePayload",
    "ClosetUploadPayload",
    "OutfitRequestPayload",
    "ValidationResult",
    "validation_failure",
]
