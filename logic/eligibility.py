"""Mode based filtering of the closet before outfit selection."""

from __future__ import annotations

from typing import AbstractSet, List, Sequence

from logic.errors import InvalidSelectionModeError
from models.closet_item import ClosetItem
from models.outfit import SelectionMode

MIN_ELIGIBLE_ITEMS = 2


def parse_mode(mode: SelectionMode | str) -> SelectionMode:
    """Coerce a mode name, raising ``InvalidSelectionModeError`` for unknown names."""

    try:
        return SelectionMode(mode)
    except ValueError as exc:
        raise InvalidSelectionModeError(f"Unknown selection mode {mode!r}.") from exc


def eligible_items(
    all_items: Sequence[ClosetItem],
    mode: SelectionMode | str,
    selected_ids: AbstractSet[str] = frozenset(),
    excluded_ids: AbstractSet[str] = frozenset(),
) -> List[ClosetItem]:
    """Return the items the stylist may choose from, in closet order.

    ``full`` and ``exclusion`` both drop only the excluded ids. ``selective``
    keeps only the selected ids and ignores exclusions.
    """

    if parse_mode(mode) is SelectionMode.SELECTIVE:
        return [item for item in all_items if item.id in selected_ids]
    return [item for item in all_items if item.id not in excluded_ids]


__all__ = ["MIN_ELIGIBLE_ITEMS", "eligible_items", "parse_mode"]
