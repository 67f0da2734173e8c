"""File-backed store for each user's most recently observed trip id."""

from __future__ import annotations

import json
import os
from pathlib import Path
import threading

from src.errors import StorageError


class JsonTripStore:
    """Keeps {user_id: last_trip_id} in a single JSON file.

    Writes are idempotent upserts; concurrent request threads share one lock.
    """

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    def get_last_trip_id(self, user_id: str) -> str | None:
        with self._lock:
            records = self._read()
        trip_id = records.get(user_id)
        return str(trip_id) if trip_id else None

    def set_last_trip_id(self, user_id: str, trip_id: str) -> None:
        with self._lock:
            records = self._read()
            if records.get(user_id) == trip_id:
                return
            records[user_id] = trip_id
            self._write(records)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read trip store {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Trip store {self._path} must contain a JSON object")
        return data

    def _write(self, records: dict[str, str]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(records, handle, ensure_ascii=False, sort_keys=True)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageError(f"Cannot write trip store {self._path}: {exc}") from exc


__all__ = ["JsonTripStore"]
