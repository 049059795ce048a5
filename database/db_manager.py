import json
import logging
import os
import sqlite3
from contextlib import contextmanager

from services.errors import PersistenceError
from utils.constants import DB_FILE

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Key-value document storage on sqlite3.

    Each document is a full JSON replacement under one key; there are no
    partial or delta writes.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = sqlite3.connect(self.db_path)
                self._conn.row_factory = sqlite3.Row
                if self.db_path != ":memory:":
                    self._conn.execute("PRAGMA journal_mode = WAL")
            except sqlite3.Error as e:
                self._conn = None
                logger.error("Could not open database %s: %s", self.db_path, e)
                raise PersistenceError(f"Could not open database {self.db_path}: {e}") from e
        return self._conn

    def initialize(self):
        """Create schema and seed defaults."""
        conn = self.get_connection()
        try:
            self._create_schema(conn)
            self._seed_defaults(conn)
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"Could not initialize database: {e}") from e

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS documents (
                key        TEXT PRIMARY KEY,
                value      TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        conn.execute(
            "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
            ("schema_version", "1"),
        )

    # ── Documents ────────────────────────────────────────────────────────────

    def get_document(self, key: str, default=None):
        """Return the decoded JSON stored under key, or default if absent."""
        conn = self.get_connection()
        try:
            row = conn.execute(
                "SELECT value FROM documents WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.error("Failed to read document %s: %s", key, e)
            raise PersistenceError(f"Failed to read '{key}': {e}") from e
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except ValueError as e:
            raise PersistenceError(f"Stored document '{key}' is not valid JSON: {e}") from e

    def set_document(self, key: str, data):
        self.set_documents({key: data})

    def set_documents(self, documents: dict):
        """Replace several documents in a single transaction."""
        payload = [(key, json.dumps(data)) for key, data in documents.items()]
        try:
            with self.transaction() as tx:
                tx.executemany(
                    """INSERT INTO documents(key, value, updated_at)
                       VALUES (?, ?, datetime('now'))
                       ON CONFLICT(key)
                       DO UPDATE SET value = excluded.value,
                                     updated_at = excluded.updated_at""",
                    payload,
                )
        except sqlite3.Error as e:
            logger.error("Failed to save %s: %s", ", ".join(documents), e)
            raise PersistenceError(f"Failed to save {', '.join(documents)}: {e}") from e
        logger.debug("Saved %s", ", ".join(documents))

    @contextmanager
    def transaction(self):
        """Commit on success, roll back and re-raise on any error."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    # ── Settings ─────────────────────────────────────────────────────────────

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open_in_folder(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (creating if needed) the DB file.

        db_folder: if provided, the DB file is stored in that directory instead of CWD.
        """
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        db = DatabaseManager(path)
        db.initialize()
        logger.info("Opened database %s", path)
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
