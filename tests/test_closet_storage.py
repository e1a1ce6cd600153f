"""Closet repository and in-memory closet tool tests."""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path

import pytest

from logic.errors import MalformedEncodingError
from logic.image_codec import decode, encode
from models.closet_item import ClosetItem, TransportImage, UserProfile
from tools.closet_store import SQLiteClosetRepository
from tools.closet_tools import ClosetTools, UnknownUserError, new_item_id, parse_tags

from fakes import make_item


@pytest.fixture()
def repository(tmp_path: Path) -> SQLiteClosetRepository:
    return SQLiteClosetRepository(tmp_path / "closet.db")


@pytest.fixture()
def tools(repository: SQLiteClosetRepository) -> ClosetTools:
    closet = ClosetTools(repository)
    closet.load_user(UserProfile(user_id="user-1", display_name="Sam"))
    return closet


class BrokenWritesRepository(SQLiteClosetRepository):
    """Reads work, every write fails."""

    def set_face_image(self, user_id, image):
        raise sqlite3.OperationalError("database is locked")

    def add_item(self, user_id, item):
        raise sqlite3.OperationalError("database is locked")

    def delete_item(self, user_id, item_id):
        raise sqlite3.OperationalError("database is locked")


def test_repository_roundtrip_keeps_insertion_order(repository: SQLiteClosetRepository) -> None:
    items = [make_item("z-last", "shoes"), make_item("a-first", "top", "linen"), make_item("m-mid")]
    for item in items:
        repository.add_item("user-1", item)
    repository.add_item("someone-else", make_item("other"))

    assert repository.list_items("user-1") == items
    assert repository.delete_item("user-1", "a-first") is True
    assert repository.delete_item("user-1", "a-first") is False
    assert [item.id for item in repository.list_items("user-1")] == ["z-last", "m-mid"]


def test_face_image_is_last_write_wins(repository: SQLiteClosetRepository) -> None:
    assert repository.get_face_image("user-1") is None

    repository.set_face_image("user-1", encode(b"old", "image/jpeg"))
    repository.set_face_image("user-1", encode(b"new", "image/png"))

    stored = repository.get_face_image("user-1")
    assert stored is not None
    assert stored.mime_type == "image/png"
    assert decode(stored) == b"new"


def test_profile_upsert_merges_fields(repository: SQLiteClosetRepository) -> None:
    repository.upsert_user_profile(UserProfile(user_id="user-1", display_name="Sam", email="sam@example.com"))
    repository.upsert_user_profile(UserProfile(user_id="user-1", display_name="Samantha"))

    profile = repository.get_user_profile("user-1")
    assert profile is not None
    assert profile.display_name == "Samantha"
    assert repository.get_user_profile("nobody") is None


def test_parse_tags_and_item_ids() -> None:
    assert parse_tags(" red , summer,, linen ") == ["red", "summer", "linen"]
    assert parse_tags(["a", " ", "b "]) == ["a", "b"]
    assert parse_tags(None) == []
    assert re.fullmatch(r"item-\d{13}-[0-9a-z]{5}", new_item_id())


def test_add_items_updates_state_and_repository(tools: ClosetTools, repository: SQLiteClosetRepository) -> None:
    update = tools.add_items("user-1", [(b"shirt", "image/jpeg"), (b"jeans", "image/png")], tags="casual, blue")

    assert update.persistence.ok
    assert [decode(item.image) for item in update.items] == [b"shirt", b"jeans"]
    assert all(item.tags == ("casual", "blue") for item in update.items)
    assert len({item.id for item in update.items}) == 2
    assert tools.state_for("user-1").items == update.items
    assert repository.list_items("user-1") == update.items


def test_load_user_hydrates_saved_assets(repository: SQLiteClosetRepository) -> None:
    repository.set_face_image("user-1", encode(b"face", "image/jpeg"))
    repository.add_item("user-1", make_item("saved-1", "top"))

    closet = ClosetTools(repository)
    update = closet.load_user(UserProfile(user_id="user-1"))

    state = closet.state_for("user-1")
    assert update.persistence.ok
    assert [item.id for item in update.items] == ["saved-1"]
    assert state.user_image is not None and decode(state.user_image) == b"face"


def test_delete_item_clears_selection_flags(tools: ClosetTools, repository: SQLiteClosetRepository) -> None:
    added = tools.add_items("user-1", [(b"a", "image/png"), (b"b", "image/png")]).items
    target = added[0].id
    assert tools.toggle_selection("user-1", target) is True
    assert tools.toggle_exclusion("user-1", target) is True

    update = tools.delete_item("user-1", target)

    state = tools.state_for("user-1")
    assert update.items == [added[0]]
    assert [item.id for item in state.items] == [added[1].id]
    assert target not in state.selected_ids and target not in state.excluded_ids
    assert [item.id for item in repository.list_items("user-1")] == [added[1].id]


def test_toggles_flip_membership(tools: ClosetTools) -> None:
    assert tools.toggle_selection("user-1", "x") is True
    assert tools.toggle_selection("user-1", "x") is False
    assert tools.toggle_exclusion("user-1", "y") is True
    selection = tools.state_for("user-1").selection()
    assert selection.selected_ids == frozenset()
    assert selection.excluded_ids == frozenset({"y"})


def test_failed_writes_keep_local_state_and_report(tmp_path: Path) -> None:
    closet = ClosetTools(BrokenWritesRepository(tmp_path / "closet.db"))
    closet.load_user(UserProfile(user_id="user-1"))

    face = closet.set_face_image("user-1", encode(b"me", "image/jpeg"))
    added = closet.add_items("user-1", [(b"coat", "image/jpeg")])
    removed = closet.delete_item("user-1", added.items[0].id)

    assert not face.persistence.ok and "locked" in (face.persistence.error or "")
    assert not added.persistence.ok and added.items[0].id in (added.persistence.error or "")
    assert not removed.persistence.ok
    state = closet.state_for("user-1")
    assert state.user_image is not None
    assert state.items == []


def test_unknown_and_signed_out_users(tools: ClosetTools) -> None:
    with pytest.raises(UnknownUserError):
        tools.state_for("stranger")

    tools.sign_out("user-1")
    with pytest.raises(UnknownUserError):
        tools.add_items("user-1", [(b"x", "image/png")])


def test_closet_items_are_immutable() -> None:
    item = ClosetItem(id="i1", image=encode(b"x", "image/png"), tags=("a",))
    with pytest.raises(AttributeError):
        item.id = "i2"  # type: ignore[misc]
    assert isinstance(item.tags, tuple)
    assert hash(item) == hash(ClosetItem(id="i1", image=encode(b"x", "image/png"), tags=("a",)))


def test_malformed_images_leave_closet_untouched(tools: ClosetTools, repository: SQLiteClosetRepository) -> None:
    good = encode(b"shirt", "image/png")
    bad = TransportImage(data="@@not base64@@", mime_type="image/png")
    tools.set_face_image("user-1", good)

    with pytest.raises(MalformedEncodingError):
        tools.add_encoded_items("user-1", [good, bad], "casual")
    with pytest.raises(MalformedEncodingError):
        tools.set_face_image("user-1", bad)

    state = tools.state_for("user-1")
    assert state.items == []
    assert state.user_image == good
    assert repository.list_items("user-1") == []
    assert repository.get_face_image("user-1") == good
