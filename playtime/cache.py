from __future__ import annotations

import os
import sqlite3
import tempfile
from pathlib import Path
from threading import Lock
from typing import Optional, Protocol

from .models import MetadataError

RECORDING_NAMESPACE = "musicbrainz_recording"


class DurationCache(Protocol):
    def get(self, recording_id: str) -> Optional[bytes]: ...

    def put(self, recording_id: str, body: bytes) -> None: ...

    def close(self) -> None: ...


class MetadataCache:
    """SQLite-backed store of raw MusicBrainz recording responses.

    Entries are append-only: the first body written for an id is kept.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS cache (
                namespace TEXT NOT NULL,
                key TEXT NOT NULL,
                value BLOB NOT NULL,
                created_at TEXT NOT NULL,
                PRIMARY KEY(namespace, key)
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def get(self, recording_id: str) -> Optional[bytes]:
        with self._lock:
            cursor = self._conn.execute(
                "SELECT value FROM cache WHERE namespace = ? AND key = ?",
                (RECORDING_NAMESPACE, recording_id),
            )
            row = cursor.fetchone()
        return bytes(row[0]) if row else None

    def put(self, recording_id: str, body: bytes) -> None:
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO cache(namespace, key, value, created_at)
                VALUES(?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(namespace, key) DO NOTHING
                """,
                (RECORDING_NAMESPACE, recording_id, sqlite3.Binary(body)),
            )
            self._conn.commit()

    def count(self) -> int:
        with self._lock:
            cursor = self._conn.execute(
                "SELECT COUNT(*) FROM cache WHERE namespace = ?",
                (RECORDING_NAMESPACE,),
            )
            row = cursor.fetchone()
        return int(row[0])


class DirectoryCache:
    """One `<id>.json` file per recording, the layout of `musicbrainz_cache/`."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def close(self) -> None:
        return None

    def get(self, recording_id: str) -> Optional[bytes]:
        path = self._path_for(recording_id)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def put(self, recording_id: str, body: bytes) -> None:
        path = self._path_for(recording_id)
        if path.exists():
            return
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(body)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _path_for(self, recording_id: str) -> Path:
        if not recording_id or recording_id in {".", ".."} or "/" in recording_id or "\\" in recording_id:
            raise MetadataError(recording_id, "not usable as a cache file name")
        return self.root / f"{recording_id}.json"


def open_cache(backend: str, path: Path) -> DurationCache:
    if backend == "directory":
        return DirectoryCache(path)
    return MetadataCache(path)
