"""Generation logs and success/failure counters."""

import json
import os
import re
import tempfile
import threading
import time
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

COUNTER_FIELDS = ("total_generations", "total_success", "total_failures")
_UNSAFE_SEGMENT = re.compile(r"[^\w.\-]")


def _segment(value: str) -> str:
    cleaned = _UNSAFE_SEGMENT.sub("_", value)
    return cleaned if cleaned.strip(".") else "_"


class GenerationLogStore:
    """JSON-file store for per-request generation logs and usage counters.

    Counters are kept per user, globally and per calendar day. Read-modify-write
    updates hold the store lock and files are replaced atomically.
    """

    def __init__(self, base_dir: str | Path = "data/generation_logs") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _user_dir(self, user_id: str) -> Path:
        return self.base_dir / "users" / _segment(user_id)

    def _log_path(self, user_id: str, log_id: str) -> Path:
        return self._user_dir(user_id) / "logs" / f"{_segment(log_id)}.json"

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        return json.loads(path.read_text())

    @staticmethod
    def _write(path: Path, payload: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def create_log(self, user_id: str, payload: Dict[str, Any]) -> str:
        log_id = uuid4().hex
        record = {"status": "started", "created_at": time.time(), **payload, "log_id": log_id}
        self._write(self._log_path(user_id, log_id), record)
        return log_id

    def update_log(self, user_id: str, log_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        path = self._log_path(user_id, log_id)
        with self._lock:
            record = self._read(path)
            record.update(updates)
            record["updated_at"] = time.time()
            self._write(path, record)
        return record

    def get_log(self, user_id: str, log_id: str) -> Optional[Dict[str, Any]]:
        return self._read(self._log_path(user_id, log_id)) or None

    def counter_paths(self, user_id: str, day: Optional[date] = None) -> Dict[str, Path]:
        day_key = (day or date.today()).isoformat()
        return {
            "user": self._user_dir(user_id) / "counters.json",
            "global": self.base_dir / "analytics" / "counters.json",
            "daily": self.base_dir / "analytics" / "daily" / f"{day_key}.json",
        }

    def increment_counters(
        self,
        user_id: str,
        started: int = 0,
        success: int = 0,
        error: int = 0,
        day: Optional[date] = None,
    ) -> None:
        deltas = dict(zip(COUNTER_FIELDS, (started, success, error)))
        with self._lock:
            for scope, path in self.counter_paths(user_id, day).items():
                counters = self._read(path)
                for key, delta in deltas.items():
                    counters[key] = int(counters.get(key, 0)) + delta
                if scope == "daily":
                    counters["date"] = path.stem
                counters["updated_at"] = time.time()
                self._write(path, counters)

    def get_counters(self, user_id: str, scope: str = "user", day: Optional[date] = None) -> Dict[str, Any]:
        return self._read(self.counter_paths(user_id, day)[scope])
