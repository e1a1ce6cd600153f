"""Closet item and image data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class TransportImage:
    """An image as base64 text plus its MIME type, ready for storage or a model request."""

    data: str
    mime_type: str


@dataclass(frozen=True)
class ClosetItem:
    """One clothing photo in a user's closet.

    Items are never edited after upload; removing one is the only change.
    """

    id: str
    image: TransportImage
    tags: Tuple[str, ...] = ()

    @property
    def mime_type(self) -> str:
        return self.image.mime_type

    def describe(self) -> str:
        """Comma separated tag text used in prompts and captions."""

        return ", ".join(self.tags)


@dataclass
class UserProfile:
    """Identity fields supplied by the sign-in provider."""

    user_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None

    def as_record(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "email": self.email,
            "photo_url": self.photo_url,
        }


__all__ = ["TransportImage", "ClosetItem", "UserProfile"]
