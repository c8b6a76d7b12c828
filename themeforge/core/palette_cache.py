"""SQLite-backed cache for extracted palettes."""

from __future__ import annotations

import hashlib
import logging
import sqlite3
from pathlib import Path

from themeforge.core.palette import Palette
from themeforge.errors import ThemeForgeError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS palette_cache (
    digest      TEXT    NOT NULL,
    mode        TEXT    NOT NULL,
    light_mode  INTEGER NOT NULL,
    path        TEXT    NOT NULL DEFAULT '',
    mtime_ns    INTEGER NOT NULL,
    size        INTEGER NOT NULL,
    colors      TEXT    NOT NULL,
    PRIMARY KEY (digest, mode, light_mode)
);
"""

_READ_CHUNK = 1 << 16


def file_digest(path: str | Path) -> str:
    """sha256 of a file's bytes."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(_READ_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


class PaletteCache:
    """Caches palettes per image content, extraction mode and light flag.

    Each entry also remembers the file's mtime and size when it was stored;
    a lookup with a different fingerprint counts as a miss and drops the entry.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    def open(self) -> None:
        """Open the cache DB and initialize schema."""
        if self._conn is not None:
            return
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute(SCHEMA_SQL)
        conn.commit()
        self._conn = conn

    def close(self) -> None:
        """Close the active DB connection."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    def __enter__(self) -> PaletteCache:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(
        self,
        digest: str,
        mode: str,
        light_mode: bool,
        mtime_ns: int,
        size: int,
    ) -> Palette | None:
        """Return the cached palette when the key and file fingerprint match."""
        conn = self._conn_or_raise()
        key = (digest, mode, int(light_mode))
        row = conn.execute(
            """
            SELECT mtime_ns, size, colors
            FROM palette_cache
            WHERE digest = ? AND mode = ? AND light_mode = ?
            """,
            key,
        ).fetchone()
        if row is None:
            return None
        if int(row[0]) != int(mtime_ns) or int(row[1]) != int(size):
            logger.debug("palette cache entry %s is stale, evicting", digest[:12])
            conn.execute(
                "DELETE FROM palette_cache WHERE digest = ? AND mode = ? AND light_mode = ?",
                key,
            )
            conn.commit()
            return None
        try:
            return Palette.from_colors(str(row[2]).split(","))
        except ThemeForgeError:
            logger.warning("dropping unreadable palette cache entry %s", digest[:12])
            conn.execute(
                "DELETE FROM palette_cache WHERE digest = ? AND mode = ? AND light_mode = ?",
                key,
            )
            conn.commit()
            return None

    def put(
        self,
        digest: str,
        mode: str,
        light_mode: bool,
        path: str | Path,
        mtime_ns: int,
        size: int,
        palette: Palette,
    ) -> None:
        """Upsert one cache record."""
        conn = self._conn_or_raise()
        conn.execute(
            """
            INSERT INTO palette_cache (digest, mode, light_mode, path, mtime_ns, size, colors)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(digest, mode, light_mode) DO UPDATE SET
                path = excluded.path,
                mtime_ns = excluded.mtime_ns,
                size = excluded.size,
                colors = excluded.colors
            """,
            (
                digest,
                mode,
                int(light_mode),
                self._normalize_path(path),
                int(mtime_ns),
                int(size),
                ",".join(palette),
            ),
        )
        conn.commit()

    def invalidate(self, path: str | Path) -> int:
        """Remove every entry stored for one image path. Returns the number removed."""
        conn = self._conn_or_raise()
        cursor = conn.execute(
            "DELETE FROM palette_cache WHERE path = ?",
            (self._normalize_path(path),),
        )
        conn.commit()
        return cursor.rowcount

    def clear(self) -> None:
        """Delete all cache entries."""
        conn = self._conn_or_raise()
        conn.execute("DELETE FROM palette_cache")
        conn.commit()

    def count(self) -> int:
        row = self._conn_or_raise().execute("SELECT COUNT(*) FROM palette_cache").fetchone()
        return int(row[0])

    def _conn_or_raise(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("PaletteCache is not open")
        return self._conn

    @staticmethod
    def _normalize_path(path: str | Path) -> str:
        try:
            return str(Path(path).resolve())
        except OSError:
            return str(Path(path))
