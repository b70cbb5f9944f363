# catalog_store.py - sqlite backed catalog store (titles + interaction log)
import logging
import sqlite3
import time
from contextlib import closing
from pathlib import Path

import config
from errors import StoreUnavailable
from models import InteractionEvent, Title

logger = logging.getLogger(__name__)

TITLE_COLUMNS = "id, name, release_year, duration, genre, poster, video_path, views"


def _casefold(value):
    if value is None:
        return None
    return str(value).casefold()


class SqliteCatalogStore:
    """Catalog store contract over a sqlite file.

    Every call opens its own connection, so one store object can be shared by
    concurrent request threads. Any sqlite failure (missing file, locked
    database past the busy timeout, bad schema) is raised as StoreUnavailable.
    """

    def __init__(self, database=None, timeout=None):
        self.database = database or config.DATABASE
        self.timeout = config.DB_TIMEOUT if timeout is None else timeout

    def _connect(self, create=False):
        if not create and not Path(self.database).exists():
            logger.error("Catalog database file not found: %s", self.database)
            raise StoreUnavailable(f"catalog database file not found: {self.database}")
        db = sqlite3.connect(self.database, timeout=self.timeout)
        db.row_factory = sqlite3.Row
        # sqlite's LOWER() only folds ASCII
        db.create_function("casefold", 1, _casefold, deterministic=True)
        return db

    def _query(self, sql, params=()):
        try:
            with closing(self._connect()) as db:
                return db.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error("Catalog store query failed: %s", e)
            raise StoreUnavailable(f"catalog store unavailable: {e}") from e

    # -----------------------
    # Schema
    # -----------------------
    def init_schema(self):
        try:
            with closing(self._connect(create=True)) as db:
                db.execute(f'''
                    CREATE TABLE IF NOT EXISTS {config.TITLES_TABLE} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        release_year INTEGER,
                        duration INTEGER,
                        genre TEXT,
                        poster TEXT,
                        video_path TEXT,
                        views INTEGER DEFAULT 0
                    )
                ''')
                db.execute(f'''
                    CREATE TABLE IF NOT EXISTS {config.INTERACTIONS_TABLE} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        title_id INTEGER NOT NULL REFERENCES {config.TITLES_TABLE}(id),
                        viewer_id TEXT NOT NULL,
                        watched_at REAL NOT NULL,
                        progress REAL DEFAULT 0
                    )
                ''')
                db.execute(f'''
                    CREATE INDEX IF NOT EXISTS idx_interactions_title
                    ON {config.INTERACTIONS_TABLE} (title_id)
                ''')
                db.execute(f'''
                    CREATE TABLE IF NOT EXISTS {config.VIEWERS_TABLE} (
                        viewer_id TEXT PRIMARY KEY,
                        subscription_state TEXT NOT NULL DEFAULT 'none',
                        updated_at REAL
                    )
                ''')
                db.commit()
        except sqlite3.Error as e:
            logger.error("Failed to initialise catalog schema: %s", e)
            raise StoreUnavailable(f"catalog store unavailable: {e}") from e

    # -----------------------
    # Read contract
    # -----------------------
    def get_title_by_id(self, title_id):
        """Return the Title with this id, or None when it does not exist."""
        rows = self._query(
            f"SELECT {TITLE_COLUMNS} FROM {config.TITLES_TABLE} WHERE id = ? LIMIT 1",
            (title_id,),
        )
        return Title.from_row(rows[0]) if rows else None

    def list_titles_matching_text(self, text):
        """Case-insensitive substring match against the display name."""
        rows = self._query(
            f"SELECT {TITLE_COLUMNS} FROM {config.TITLES_TABLE} "
            "WHERE instr(casefold(name), ?) > 0 ORDER BY id",
            (text.casefold(),),
        )
        return [Title.from_row(r) for r in rows]

    def list_titles_where_genre_contains(self, token):
        """Case-insensitive substring match against the raw genre field."""
        rows = self._query(
            f"SELECT {TITLE_COLUMNS} FROM {config.TITLES_TABLE} "
            "WHERE genre IS NOT NULL AND instr(casefold(genre), ?) > 0 ORDER BY id",
            (token.casefold(),),
        )
        return [Title.from_row(r) for r in rows]

    def list_all_raw_genre_strings(self):
        """Raw genre strings in ascending title id order."""
        rows = self._query(
            f"SELECT genre FROM {config.TITLES_TABLE} WHERE genre IS NOT NULL ORDER BY id"
        )
        return [r["genre"] for r in rows]

    def count_interactions_grouped_by_title(self, limit):
        """(title_id, count) pairs, most watched first, ties by title id."""
        rows = self._query(
            f'''
            SELECT title_id, COUNT(*) AS plays
            FROM {config.INTERACTIONS_TABLE}
            GROUP BY title_id
            ORDER BY plays DESC, title_id ASC
            LIMIT ?
            ''',
            (limit,),
        )
        return [(r["title_id"], r["plays"]) for r in rows]

    def list_interactions_for_viewer(self, viewer_id):
        rows = self._query(
            f"SELECT id, title_id, viewer_id, watched_at, progress FROM {config.INTERACTIONS_TABLE} "
            "WHERE viewer_id = ? ORDER BY watched_at, id",
            (viewer_id,),
        )
        return [InteractionEvent.from_row(r) for r in rows]

    # -----------------------
    # Append-only writes
    # -----------------------
    def append_interaction(self, viewer_id, title_id, progress, watched_at=None):
        """Append one watch event and return it. Existing rows are never touched."""
        watched_at = time.time() if watched_at is None else watched_at
        try:
            with closing(self._connect()) as db:
                cur = db.execute(
                    f"INSERT INTO {config.INTERACTIONS_TABLE} (title_id, viewer_id, watched_at, progress) "
                    "VALUES (?, ?, ?, ?)",
                    (title_id, viewer_id, watched_at, progress),
                )
                db.commit()
                event_id = cur.lastrowid
        except sqlite3.Error as e:
            logger.error("Failed to append interaction for title %s: %s", title_id, e)
            raise StoreUnavailable(f"catalog store unavailable: {e}") from e
        return InteractionEvent(
            id=event_id,
            title_id=title_id,
            viewer_id=viewer_id,
            watched_at=watched_at,
            progress=progress,
        )
