"""In-memory closet state per signed-in user, backed by a closet repository.

Every mutation updates the in-memory state first and then attempts the
repository write. The write result is returned as a ``PersistenceOutcome`` so
callers can report a failed save without losing the local change.
"""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from stylist_app.logging_config import get_logger, log_event
from logic.image_codec import decode, encode_many
from models.closet_item import ClosetItem, TransportImage, UserProfile
from models.outfit import SelectionState
from tools.closet_store import ClosetRepository, SQLiteClosetRepository
from tools.observability import instrument_call

LOGGER = get_logger(__name__)
_ID_ALPHABET = string.digits + string.ascii_lowercase


class UnknownUserError(KeyError):
    """Raised when an operation names a user with no loaded session."""


def new_item_id() -> str:
    """``item-<epoch ms>-<5 base36 chars>``, unique enough for one user's uploads."""

    suffix = "".join(random.choices(_ID_ALPHABET, k=5))
    return f"item-{int(time.time() * 1000)}-{suffix}"


def parse_tags(raw: str | Iterable[str] | None) -> List[str]:
    """Split comma separated tag text, dropping blanks and surrounding spaces."""

    if raw is None:
        return []
    pieces = raw.split(",") if isinstance(raw, str) else list(raw)
    return [str(tag).strip() for tag in pieces if str(tag).strip()]


@dataclass
class PersistenceOutcome:
    operation: str
    ok: bool = True
    error: Optional[str] = None


@dataclass
class ClosetUpdate:
    """Result of a closet mutation: the affected items plus the save outcome."""

    items: List[ClosetItem]
    persistence: PersistenceOutcome


@dataclass
class ClosetState:
    user_id: str
    user_image: Optional[TransportImage] = None
    items: List[ClosetItem] = field(default_factory=list)
    selected_ids: Set[str] = field(default_factory=set)
    excluded_ids: Set[str] = field(default_factory=set)

    def selection(self) -> SelectionState:
        return SelectionState(selected_ids=frozenset(self.selected_ids), excluded_ids=frozenset(self.excluded_ids))


class ClosetTools:
    """Closet operations keyed by an explicit user id."""

    def __init__(self, repository: Optional[ClosetRepository] = None, encode_workers: int = 4) -> None:
        self.repository = repository or SQLiteClosetRepository()
        self.encode_workers = encode_workers
        self._states: Dict[str, ClosetState] = {}

    def _persist(self, operation: str, func: Callable[..., object], *args: object) -> PersistenceOutcome:
        try:
            instrument_call(f"closet.{operation}")(func)(*args)
        except Exception as exc:  # noqa: BLE001
            log_event(LOGGER, logging.WARNING, "closet_persist_failed", operation=operation, error=str(exc))
            return PersistenceOutcome(operation=operation, ok=False, error=str(exc))
        return PersistenceOutcome(operation=operation)

    def state_for(self, user_id: str) -> ClosetState:
        try:
            return self._states[user_id]
        except KeyError:
            raise UnknownUserError(user_id) from None

    def load_user(self, profile: UserProfile) -> ClosetUpdate:
        """Start a session for ``profile`` and hydrate it from the repository.

        A failed load leaves an empty closet in memory and is reported in the
        returned outcome.
        """

        state = ClosetState(user_id=profile.user_id)
        self._states[profile.user_id] = state
        outcome = self._persist("upsert_user_profile", self.repository.upsert_user_profile, profile)
        if not outcome.ok:
            return ClosetUpdate(items=[], persistence=outcome)

        try:
            state.user_image = self.repository.get_face_image(profile.user_id)
            state.items = self.repository.list_items(profile.user_id)
        except Exception as exc:  # noqa: BLE001
            log_event(LOGGER, logging.WARNING, "closet_load_failed", error=str(exc))
            return ClosetUpdate(items=[], persistence=PersistenceOutcome("load_user", ok=False, error=str(exc)))

        log_event(
            LOGGER,
            logging.INFO,
            "closet_loaded",
            face_loaded=state.user_image is not None,
            closet_count=len(state.items),
        )
        return ClosetUpdate(items=list(state.items), persistence=PersistenceOutcome("load_user"))

    def sign_out(self, user_id: str) -> None:
        self._states.pop(user_id, None)

    def set_face_image(self, user_id: str, image: TransportImage) -> ClosetUpdate:
        """Replace the user photo.

        Raises:
            MalformedEncodingError: If the payload is not valid base64; nothing changes.
        """

        state = self.state_for(user_id)
        decode(image)
        state.user_image = image
        outcome = self._persist("set_face_image", self.repository.set_face_image, user_id, image)
        return ClosetUpdate(items=[], persistence=outcome)

    def add_items(self, user_id: str, files: Sequence[Tuple[bytes, str]], tags: str | Iterable[str] | None = None) -> ClosetUpdate:
        """Encode raw uploads concurrently and add them to the closet."""

        return self.add_encoded_items(user_id, encode_many(files, self.encode_workers), tags)

    def add_encoded_items(
        self, user_id: str, images: Sequence[TransportImage], tags: str | Iterable[str] | None = None
    ) -> ClosetUpdate:
        """Add already encoded images as new items sharing ``tags``.

        Every payload is decoded first, so one malformed image rejects the whole
        batch with ``MalformedEncodingError`` before the closet changes.
        """

        state = self.state_for(user_id)
        for image in images:
            decode(image)
        tag_list = tuple(parse_tags(tags))
        new_items = [ClosetItem(id=new_item_id(), image=image, tags=tag_list) for image in images]
        state.items.extend(new_items)

        failures = []
        for item in new_items:
            outcome = self._persist("add_item", self.repository.add_item, user_id, item)
            if not outcome.ok:
                failures.append(f"{item.id}: {outcome.error}")
        persistence = PersistenceOutcome("add_items", ok=not failures, error="; ".join(failures) or None)
        return ClosetUpdate(items=new_items, persistence=persistence)

    def delete_item(self, user_id: str, item_id: str) -> ClosetUpdate:
        state = self.state_for(user_id)
        removed = [item for item in state.items if item.id == item_id]
        state.items = [item for item in state.items if item.id != item_id]
        state.selected_ids.discard(item_id)
        state.excluded_ids.discard(item_id)
        outcome = self._persist("delete_item", self.repository.delete_item, user_id, item_id)
        return ClosetUpdate(items=removed, persistence=outcome)

    def toggle_selection(self, user_id: str, item_id: str) -> bool:
        """Flip ``item_id`` in the selected set; returns whether it is now selected."""

        return _toggle(self.state_for(user_id).selected_ids, item_id)

    def toggle_exclusion(self, user_id: str, item_id: str) -> bool:
        return _toggle(self.state_for(user_id).excluded_ids, item_id)


def _toggle(ids: Set[str], item_id: str) -> bool:
    if item_id in ids:
        ids.discard(item_id)
        return False
    ids.add(item_id)
    return True


__all__ = [
    "ClosetState",
    "ClosetTools",
    "ClosetUpdate",
    "PersistenceOutcome",
    "UnknownUserError",
    "new_item_id",
    "parse_tags",
]
