"""
Local snapshot cache.

Imported playlists are kept in SQLite so they can be compared again
without refetching. Only snapshots are stored; comparison results and
manual match decisions live for one session.
"""

import os
import sqlite3
import json
from pathlib import Path
from typing import Optional, List, Dict

from playlister.models import PlaylistSnapshot, Provider


def config_home() -> Path:
    """Return the Playlister config directory ($PLAYLISTER_HOME or ~/.playlister)."""
    home = os.environ.get('PLAYLISTER_HOME')
    return Path(home).expanduser() if home else Path.home() / '.playlister'


class SnapshotStore:
    """SQLite-backed cache of playlist snapshots."""

    def __init__(self, db_path: str = None):
        """Initialize snapshot store.

        Args:
            db_path: Path to SQLite database file. Defaults to playlister.db in the config directory
        """
        if db_path is None:
            db_path = str(config_home() / 'playlister.db')

        self.db_path = db_path
        self._ensure_directory()

    def _ensure_directory(self):
        """Create database directory if it doesn't exist."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self):
        """Initialize database schema."""
        conn = self._connect()
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS snapshots (
                provider TEXT NOT NULL,
                playlist_id TEXT NOT NULL,
                name TEXT NOT NULL,
                track_count INTEGER DEFAULT 0,
                fetched_at TEXT NOT NULL,
                payload TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (provider, playlist_id)
            )
        """)

        conn.commit()
        conn.close()

    def save_snapshot(self, snapshot: PlaylistSnapshot) -> None:
        """Insert or replace the cached copy of a playlist.

        Args:
            snapshot: PlaylistSnapshot to cache
        """
        conn = self._connect()
        cursor = conn.cursor()

        cursor.execute("""
            INSERT INTO snapshots (provider, playlist_id, name, track_count, fetched_at, payload)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(provider, playlist_id) DO UPDATE SET
                name = excluded.name,
                track_count = excluded.track_count,
                fetched_at = excluded.fetched_at,
                payload = excluded.payload,
                updated_at = CURRENT_TIMESTAMP
        """, (
            snapshot.provider.value,
            snapshot.playlist_id_or_url,
            snapshot.name,
            len(snapshot.tracks),
            snapshot.fetched_at.isoformat(),
            json.dumps(snapshot.to_dict()),
        ))

        conn.commit()
        conn.close()

    def get_snapshot(self, provider: Provider, playlist_id: str) -> Optional[PlaylistSnapshot]:
        """Get a cached snapshot.

        Args:
            provider: Provider the playlist belongs to
            playlist_id: Playlist ID or URL it was imported with

        Returns:
            PlaylistSnapshot or None if not cached
        """
        conn = self._connect()
        cursor = conn.cursor()

        result = cursor.execute(
            "SELECT payload FROM snapshots WHERE provider = ? AND playlist_id = ?",
            (provider.value, playlist_id)
        ).fetchone()

        conn.close()
        if not result:
            return None

        # from_dict turns the stored fetchedAt string back into a datetime
        return PlaylistSnapshot.from_dict(json.loads(result['payload']))

    def list_snapshots(self) -> List[Dict]:
        """List cached snapshots, most recently fetched first.

        Returns:
            List of dicts with provider, playlist_id, name, track_count, fetched_at
        """
        conn = self._connect()
        cursor = conn.cursor()

        results = cursor.execute("""
            SELECT provider, playlist_id, name, track_count, fetched_at
            FROM snapshots
            ORDER BY fetched_at DESC
        """).fetchall()

        conn.close()
        return [dict(row) for row in results]

    def delete_snapshot(self, provider: Provider, playlist_id: str) -> bool:
        """Remove one cached snapshot.

        Returns:
            True if a snapshot was removed
        """
        conn = self._connect()
        cursor = conn.cursor()

        cursor.execute(
            "DELETE FROM snapshots WHERE provider = ? AND playlist_id = ?",
            (provider.value, playlist_id)
        )
        deleted = cursor.rowcount > 0

        conn.commit()
        conn.close()
        return deleted

    def clear(self) -> int:
        """Remove every cached snapshot.

        Returns:
            Number of snapshots removed
        """
        conn = self._connect()
        cursor = conn.cursor()

        cursor.execute("DELETE FROM snapshots")
        removed = cursor.rowcount

        conn.commit()
        conn.close()
        return removed
