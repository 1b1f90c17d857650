"""SQLiteStore — local file-based store backing every CodeZen command.

Why SQLite:
- Batteries included: ships with Python, no extra dependencies.
- Foreign keys with ON DELETE CASCADE give project deletion its cascade to
  guidelines, reviews and comments without application-side bookkeeping.
- Conditional UPDATE statements give per-review at-most-once completion
  without any locking beyond the single connection.

Schema:
  users             — one row per acting user, keyed by email.
  projects          — owned by exactly one user.
  custom_guidelines — per-project rules, ordered by id (insertion order).
  reviews           — pending while llm_response IS NULL.
  review_comments   — append-only, ordered by a per-review seq counter.
"""

from __future__ import annotations

import logging
import sqlite3
import threading

from codezen_store.base import BaseStore
from codezen_store.models import CommentRole, CustomGuideline, Project, Review, ReviewComment, User, utc_now

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    email   TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS projects (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL,
    language    TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    owner_id    INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE
);
CREATE TABLE IF NOT EXISTS custom_guidelines (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    rule_text   TEXT NOT NULL,
    project_id  INTEGER NOT NULL REFERENCES projects (id) ON DELETE CASCADE
);
CREATE TABLE IF NOT EXISTS reviews (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp           TEXT NOT NULL,
    code_snapshot       TEXT NOT NULL,
    llm_response        TEXT,
    effort_estimation   TEXT,
    project_id          INTEGER NOT NULL REFERENCES projects (id) ON DELETE CASCADE,
    user_id             INTEGER NOT NULL REFERENCES users (id)
);
CREATE TABLE IF NOT EXISTS review_comments (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    review_id   INTEGER NOT NULL REFERENCES reviews (id) ON DELETE CASCADE,
    seq         INTEGER NOT NULL,
    message     TEXT NOT NULL,
    role        TEXT NOT NULL CHECK (role IN ('USER', 'AI')),
    timestamp   TEXT NOT NULL,
    user_id     INTEGER NOT NULL REFERENCES users (id),
    UNIQUE (review_id, seq)
);
CREATE INDEX IF NOT EXISTS idx_projects_owner   ON projects (owner_id);
CREATE INDEX IF NOT EXISTS idx_guidelines_proj  ON custom_guidelines (project_id);
CREATE INDEX IF NOT EXISTS idx_reviews_project  ON reviews (project_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_reviews_user     ON reviews (user_id);
"""


class SQLiteStore(BaseStore):
    """Stores CodeZen data in a local SQLite database file.

    The database file path defaults to `.codezen.db` in the current working
    directory. Configure via .codezen.yml: `store_path: /path/to/codezen.db`.

    One connection is shared by all threads; every statement runs under a
    lock so concurrent reviews and questions can use the same store.
    """

    def __init__(self, db_path: str = ".codezen.db"):
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def _write(self, sql: str, params: tuple) -> sqlite3.Cursor:
        with self._lock:
            cursor = self._conn.execute(sql, params)
            self._conn.commit()
            return cursor

    def _fetch_one(self, sql: str, params: tuple) -> sqlite3.Row | None:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    def _fetch_all(self, sql: str, params: tuple) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    # ------------------------------------------------------------------ #
    # Users                                                                #
    # ------------------------------------------------------------------ #

    def ensure_user(self, email: str) -> User:
        self._write("INSERT OR IGNORE INTO users (email) VALUES (?)", (email,))
        row = self._fetch_one("SELECT * FROM users WHERE email=?", (email,))
        return User(id=row["id"], email=row["email"])

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def create_project(self, owner_id: int, name: str, language: str) -> Project:
        created_at = utc_now()
        cursor = self._write(
            "INSERT INTO projects (name, language, created_at, owner_id) VALUES (?, ?, ?, ?)",
            (name, language, created_at, owner_id),
        )
        logger.debug("Created project %d for user %d", cursor.lastrowid, owner_id)
        return Project(id=cursor.lastrowid, name=name, language=language, created_at=created_at, owner_id=owner_id)

    def list_projects(self, owner_id: int) -> list[Project]:
        rows = self._fetch_all(
            "SELECT * FROM projects WHERE owner_id=? ORDER BY created_at DESC, id DESC",
            (owner_id,),
        )
        return [self._row_to_project(r) for r in rows]

    def get_project(self, project_id: int, owner_id: int) -> Project | None:
        row = self._fetch_one("SELECT * FROM projects WHERE id=? AND owner_id=?", (project_id, owner_id))
        return self._row_to_project(row) if row else None

    def delete_project(self, project_id: int, owner_id: int) -> bool:
        cursor = self._write("DELETE FROM projects WHERE id=? AND owner_id=?", (project_id, owner_id))
        return cursor.rowcount > 0

    # ------------------------------------------------------------------ #
    # Guidelines                                                           #
    # ------------------------------------------------------------------ #

    def add_guideline(self, project_id: int, rule_text: str) -> CustomGuideline:
        cursor = self._write(
            "INSERT INTO custom_guidelines (rule_text, project_id) VALUES (?, ?)",
            (rule_text, project_id),
        )
        return CustomGuideline(id=cursor.lastrowid, rule_text=rule_text, project_id=project_id)

    def list_guidelines(self, project_id: int) -> list[CustomGuideline]:
        rows = self._fetch_all(
            "SELECT * FROM custom_guidelines WHERE project_id=? ORDER BY id",
            (project_id,),
        )
        return [CustomGuideline(id=r["id"], rule_text=r["rule_text"], project_id=r["project_id"]) for r in rows]

    def delete_guideline(self, guideline_id: int, project_id: int) -> bool:
        cursor = self._write(
            "DELETE FROM custom_guidelines WHERE id=? AND project_id=?",
            (guideline_id, project_id),
        )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------ #
    # Reviews                                                              #
    # ------------------------------------------------------------------ #

    def create_review(self, project_id: int, user_id: int, code_snapshot: str) -> Review:
        timestamp = utc_now()
        cursor = self._write(
            "INSERT INTO reviews (timestamp, code_snapshot, project_id, user_id) VALUES (?, ?, ?, ?)",
            (timestamp, code_snapshot, project_id, user_id),
        )
        return Review(
            id=cursor.lastrowid,
            timestamp=timestamp,
            code_snapshot=code_snapshot,
            project_id=project_id,
            user_id=user_id,
        )

    def complete_review(self, review_id: int, llm_response: str, effort_estimation: str | None) -> Review | None:
        cursor = self._write(
            """
            UPDATE reviews
               SET llm_response=?, effort_estimation=?
             WHERE id=? AND llm_response IS NULL
            """,
            (llm_response, effort_estimation, review_id),
        )
        if cursor.rowcount == 0:
            return None
        row = self._fetch_one("SELECT * FROM reviews WHERE id=?", (review_id,))
        return self._row_to_review(row)

    def list_reviews(self, project_id: int) -> list[Review]:
        rows = self._fetch_all(
            "SELECT * FROM reviews WHERE project_id=? ORDER BY timestamp DESC, id DESC",
            (project_id,),
        )
        return [self._row_to_review(r) for r in rows]

    def get_review(self, review_id: int, project_id: int) -> Review | None:
        row = self._fetch_one("SELECT * FROM reviews WHERE id=? AND project_id=?", (review_id, project_id))
        return self._row_to_review(row) if row else None

    def list_user_reviews(self, user_id: int) -> list[Review]:
        rows = self._fetch_all(
            "SELECT * FROM reviews WHERE user_id=? ORDER BY timestamp DESC, id DESC",
            (user_id,),
        )
        return [self._row_to_review(r) for r in rows]

    # ------------------------------------------------------------------ #
    # Comments                                                             #
    # ------------------------------------------------------------------ #

    def append_comment(
        self,
        review_id: int,
        user_id: int,
        role: CommentRole,
        message: str,
        not_before: str | None = None,
    ) -> ReviewComment:
        timestamp = utc_now()
        if not_before is not None and not_before > timestamp:
            timestamp = not_before
        # seq is computed in the same statement as the insert, under the lock,
        # so two appends to one review can never share a sequence number.
        cursor = self._write(
            """
            INSERT INTO review_comments (review_id, seq, message, role, timestamp, user_id)
            VALUES (?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM review_comments WHERE review_id=?), ?, ?, ?, ?)
            """,
            (review_id, review_id, message, role.value, timestamp, user_id),
        )
        return ReviewComment(
            id=cursor.lastrowid,
            message=message,
            role=role,
            timestamp=timestamp,
            review_id=review_id,
            user_id=user_id,
        )

    def list_comments(self, review_id: int) -> list[ReviewComment]:
        rows = self._fetch_all(
            "SELECT * FROM review_comments WHERE review_id=? ORDER BY seq",
            (review_id,),
        )
        return [
            ReviewComment(
                id=r["id"],
                message=r["message"],
                role=CommentRole(r["role"]),
                timestamp=r["timestamp"],
                review_id=r["review_id"],
                user_id=r["user_id"],
            )
            for r in rows
        ]

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            name=row["name"],
            language=row["language"],
            created_at=row["created_at"],
            owner_id=row["owner_id"],
        )

    @staticmethod
    def _row_to_review(row: sqlite3.Row) -> Review:
        return Review(
            id=row["id"],
            timestamp=row["timestamp"],
            code_snapshot=row["code_snapshot"],
            llm_response=row["llm_response"],
            effort_estimation=row["effort_estimation"],
            project_id=row["project_id"],
            user_id=row["user_id"],
        )
