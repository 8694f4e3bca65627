import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from whenever import Instant

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

KEY_PREFIX = "audioTrackPreference_"


def preference_key(video_id: str) -> str:
    return f"{KEY_PREFIX}{video_id}"


class AudioTrackPreferences:
    """Per-video audio language preference, persisted in SQLite.

    Storage errors are logged and swallowed: a lost preference only means the
    default track is picked next time.
    """

    def __init__(
        self,
        db_path: str = "tubemeta.db",
        now_func: Callable[[], Instant] = Instant.now,
    ):
        self.db_path = db_path
        self._memory_conn = None
        self.now_func = now_func
        self.init_db()

    def init_db(self) -> None:
        """Initialize the database with schema."""
        try:
            with self.get_conn() as conn:
                # Only enable WAL mode for file-based databases, not in-memory
                if self.db_path != ":memory:":
                    conn.execute("PRAGMA journal_mode=WAL")
                conn.executescript(SCHEMA)
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize preference store {self.db_path}: {e}")

    @contextmanager
    def get_conn(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection with row factory."""
        if self.db_path == ":memory:":
            # For in-memory databases, maintain a persistent connection
            if self._memory_conn is None:
                self._memory_conn = sqlite3.connect(self.db_path)
                self._memory_conn.row_factory = sqlite3.Row
            yield self._memory_conn
        else:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            try:
                yield conn
            finally:
                conn.close()

    def save(self, video_id: str | None, language_code: str | None) -> bool:
        """Save the preferred language for a video. Returns False on failure."""
        if not video_id or not language_code:
            return False

        try:
            with self.get_conn() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO preferences (key, value, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    (
                        preference_key(video_id),
                        language_code,
                        self.now_func().format_iso(),
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to save audio preference for {video_id}: {e}")
            return False

        logger.debug(f"Saved audio preference for {video_id}: {language_code}")
        return True

    def load(self, video_id: str | None) -> str | None:
        """Load the preferred language for a video, or None."""
        if not video_id:
            return None

        try:
            with self.get_conn() as conn:
                cursor = conn.execute(
                    "SELECT value FROM preferences WHERE key = ?",
                    (preference_key(video_id),),
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to load audio preference for {video_id}: {e}")
            return None

        if row is None:
            return None

        logger.debug(f"Loaded audio preference for {video_id}: {row['value']}")
        return row["value"]
