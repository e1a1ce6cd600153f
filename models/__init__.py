"""Model package exports."""

from models.closet_item import ClosetItem, TransportImage, UserProfile
from models.outfit import GeneratedOutfit, SelectionMode, SelectionState

__all__ = [
    "ClosetItem",
    "TransportImage",
    "UserProfile",
    "GeneratedOutfit",
    "SelectionMode",
    "SelectionState",
]
