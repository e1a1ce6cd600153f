"""Closet repository abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
import time
from pathlib import Path
from typing import List, Optional

from logic.image_codec import from_data_url, to_data_url
from models.closet_item import ClosetItem, TransportImage, UserProfile


class ClosetRepository:
    """Per-user persistence interface for the face photo and closet items."""

    def upsert_user_profile(self, profile: UserProfile) -> None:
        raise NotImplementedError

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def get_face_image(self, user_id: str) -> Optional[TransportImage]:
        raise NotImplementedError

    def set_face_image(self, user_id: str, image: TransportImage) -> None:
        raise NotImplementedError

    def add_item(self, user_id: str, item: ClosetItem) -> ClosetItem:
        raise NotImplementedError

    def list_items(self, user_id: str) -> List[ClosetItem]:
        raise NotImplementedError

    def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError


class SQLiteClosetRepository(ClosetRepository):
    """Local SQLite-backed closet repository.

    Images are stored as data URLs so a row can be handed back to a browser
    without re-encoding.
    """

    def __init__(self, database_path: str | Path = "data/closet.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS user_profiles (
                    user_id TEXT PRIMARY KEY,
                    display_name TEXT,
                    email TEXT,
                    photo_url TEXT,
                    created_at REAL,
                    updated_at REAL
                );
                CREATE TABLE IF NOT EXISTS face_images (
                    user_id TEXT PRIMARY KEY,
                    mime_type TEXT NOT NULL,
                    image_data_url TEXT NOT NULL,
                    updated_at REAL
                );
                CREATE TABLE IF NOT EXISTS closet_items (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    mime_type TEXT NOT NULL,
                    image_data_url TEXT NOT NULL,
                    tags TEXT,
                    created_at REAL,
                    UNIQUE (user_id, item_id)
                );
                """
            )

    def upsert_user_profile(self, profile: UserProfile) -> None:
        now = time.time()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO user_profiles (user_id, display_name, email, photo_url, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    display_name = excluded.display_name,
                    email = excluded.email,
                    photo_url = excluded.photo_url,
                    updated_at = excluded.updated_at
                """,
                (profile.user_id, profile.display_name, profile.email, profile.photo_url, now, now),
            )

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM user_profiles WHERE user_id = ?", (user_id,)).fetchone()
        if not row:
            return None
        return UserProfile(
            user_id=row["user_id"],
            display_name=row["display_name"],
            email=row["email"],
            photo_url=row["photo_url"],
        )

    def get_face_image(self, user_id: str) -> Optional[TransportImage]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT image_data_url FROM face_images WHERE user_id = ?", (user_id,)
            ).fetchone()
        return from_data_url(row["image_data_url"]) if row else None

    def set_face_image(self, user_id: str, image: TransportImage) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO face_images (user_id, mime_type, image_data_url, updated_at) "
                "VALUES (?, ?, ?, ?)",
                (user_id, image.mime_type, to_data_url(image), time.time()),
            )

    def add_item(self, user_id: str, item: ClosetItem) -> ClosetItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO closet_items (user_id, item_id, mime_type, image_data_url, tags, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    item.id,
                    item.mime_type,
                    to_data_url(item.image),
                    json.dumps(list(item.tags)),
                    time.time(),
                ),
            )
        return item

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> ClosetItem:
        tags = json.loads(row["tags"]) if row["tags"] else []
        return ClosetItem(
            id=row["item_id"],
            image=from_data_url(row["image_data_url"]),
            tags=tuple(str(tag) for tag in tags) if isinstance(tags, list) else (),
        )

    def list_items(self, user_id: str) -> List[ClosetItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM closet_items WHERE user_id = ? ORDER BY seq",
                (user_id,),
            )
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def delete_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM closet_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0


__all__ = ["ClosetRepository", "SQLiteClosetRepository"]
