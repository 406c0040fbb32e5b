from __future__ import annotations

import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from guardias.core.constants import CACHE_VERSION
from guardias.core.models import ScheduleCollection
from guardias.core.serialization import collection_from_payload, collection_to_payload


class SqliteScheduleCache:
    def __init__(self, database_path: str, *, cache_version: int = CACHE_VERSION) -> None:
        self.database_path = database_path
        self.cache_version = cache_version
        self._lock = threading.Lock()
        self._ensure_parent_dir()

    def _ensure_parent_dir(self) -> None:
        path = Path(self.database_path)
        path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.database_path)
        connection.row_factory = sqlite3.Row
        return connection

    def init_db(self) -> None:
        with self._lock, self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS schedule_cache (
                    region_id TEXT PRIMARY KEY,
                    fingerprint TEXT NOT NULL,
                    cache_version INTEGER NOT NULL,
                    raw_json TEXT NOT NULL,
                    cached_at_utc TEXT NOT NULL
                );
                """
            )
            conn.commit()

    def ping(self) -> bool:
        with self._lock, self._connect() as conn:
            conn.execute("SELECT 1")
        return True

    def get(self, region_id: str, fingerprint: str) -> ScheduleCollection | None:
        payload = self.get_payload(region_id, fingerprint)
        if payload is None:
            return None
        return collection_from_payload(payload)

    def get_payload(self, region_id: str, fingerprint: str) -> dict[str, Any] | None:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                """
                SELECT raw_json
                FROM schedule_cache
                WHERE region_id = ? AND fingerprint = ? AND cache_version = ?
                """,
                (region_id, fingerprint, self.cache_version),
            ).fetchone()
        if row is None:
            return None
        return json.loads(str(row["raw_json"]))

    def put(self, region_id: str, fingerprint: str, collection: ScheduleCollection) -> None:
        payload = collection_to_payload(region_id, collection)
        cached_at = datetime.now(tz=timezone.utc).isoformat()

        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO schedule_cache(
                    region_id,
                    fingerprint,
                    cache_version,
                    raw_json,
                    cached_at_utc
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(region_id) DO UPDATE SET
                    fingerprint = excluded.fingerprint,
                    cache_version = excluded.cache_version,
                    raw_json = excluded.raw_json,
                    cached_at_utc = excluded.cached_at_utc
                """,
                (
                    region_id,
                    fingerprint,
                    self.cache_version,
                    json.dumps(payload, ensure_ascii=False),
                    cached_at,
                ),
            )
            conn.commit()

    def invalidate(self, region_id: str) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("DELETE FROM schedule_cache WHERE region_id = ?", (region_id,))
            conn.commit()

    def clear(self) -> int:
        with self._lock, self._connect() as conn:
            cursor = conn.execute("DELETE FROM schedule_cache")
            conn.commit()
            return int(cursor.rowcount)

    def list_entries(self) -> list[dict[str, Any]]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                """
                SELECT region_id, fingerprint, cache_version, cached_at_utc
                FROM schedule_cache
                ORDER BY region_id
                """
            ).fetchall()
        return [
            {
                "regionId": str(row["region_id"]),
                "fingerprint": str(row["fingerprint"]),
                "cacheVersion": int(row["cache_version"]),
                "cachedAt": str(row["cached_at_utc"]),
            }
            for row in rows
        ]
