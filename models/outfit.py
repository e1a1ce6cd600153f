"""Outfit request and result schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List

from models.closet_item import ClosetItem


class SelectionMode(str, Enum):
    """Which part of the closet the stylist may choose from."""

    FULL = "full"
    SELECTIVE = "selective"
    EXCLUSION = "exclusion"


@dataclass(frozen=True)
class SelectionState:
    """Item ids the user explicitly included or excluded."""

    selected_ids: FrozenSet[str] = frozenset()
    excluded_ids: FrozenSet[str] = frozenset()


@dataclass
class GeneratedOutfit:
    image: str
    items: List[ClosetItem] = field(default_factory=list)

    @property
    def item_ids(self) -> List[str]:
        return [item.id for item in self.items]


__all__ = ["SelectionMode", "SelectionState", "GeneratedOutfit"]
