"""
SQLite State Store for the quiz scheduler.

Provides portable persistence for:
- Mastery box per item identity
- Answer log for analytics, grouped by session stamp

Database location: ~/.kisokyu/state.db
"""

from __future__ import annotations

import json
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class LogEntry:
    """A single stored answer record."""

    id: int
    session_stamp: str
    question_id: str
    base_id: int
    user_answer: str | None
    correct: bool | None
    reason: str
    confidence: str
    tag: str
    reason_score: int
    created_at: datetime


@dataclass
class SessionRecord:
    """Per-session aggregate over the answer log."""

    session_stamp: str
    started_at: datetime
    answered: int
    correct: int
    incorrect: int
    skipped: int

    @property
    def accuracy(self) -> float:
        judged = self.correct + self.incorrect
        return self.correct / judged if judged else 0.0


# =============================================================================
# State Store
# =============================================================================


class StateStore:
    """
    SQLite-backed persistence collaborator.

    Handles:
    - Mastery boxes (idempotent upsert keyed by item id)
    - Append-only answer log tagged with the session stamp

    The connection is shared with the background writer thread, so every
    access goes through ``_lock``.
    """

    DEFAULT_DB_PATH = Path.home() / ".kisokyu" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.kisokyu/state.db)
        """
        self.db_path = Path(db_path or self.DEFAULT_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._init_schema()

        logger.info(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """
        Initialize database schema.

        An unusable database file is logged and left in place; reads then
        come back empty and writes fail where they are dispatched.
        """
        try:
            self._create_tables()
        except sqlite3.Error as e:
            logger.warning(f"State database {self.db_path} unusable, progress will not be saved: {e}")

    def _create_tables(self) -> None:
        with self._lock:
            cursor = self.conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS mastery_box (
                    item_id INTEGER PRIMARY KEY,
                    box INTEGER NOT NULL DEFAULT 1,
                    updated_at TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS session_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_stamp TEXT NOT NULL,
                    question_id TEXT NOT NULL,
                    base_id INTEGER NOT NULL,
                    user_answer TEXT,
                    correct BOOLEAN,
                    reason TEXT DEFAULT '',
                    confidence TEXT,
                    tag TEXT,
                    reason_score INTEGER DEFAULT 0,
                    created_at TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_session_log_stamp
                ON session_log(session_stamp)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_session_log_created
                ON session_log(created_at)
            """)

            self.conn.commit()

    # =========================================================================
    # Mastery Operations
    # =========================================================================

    def load_mastery_map(self) -> dict[int, int]:
        """
        Load every stored mastery box.

        Returns:
            Mapping of item id to box; empty on any database error
        """
        try:
            with self._lock:
                cursor = self.conn.cursor()
                cursor.execute("SELECT item_id, box FROM mastery_box")
                return {row["item_id"]: row["box"] for row in cursor.fetchall()}
        except sqlite3.Error as e:
            logger.warning(f"Could not load mastery map: {e}")
            return {}

    def save_mastery_map(self, mastery: dict[int, int]) -> None:
        """
        Upsert every entry of the map.

        Args:
            mastery: Mapping of item id to box
        """
        if not mastery:
            return
        with self._lock:
            self._write_mastery(mastery)
            self.conn.commit()

    def _write_mastery(self, mastery: dict[int, int]) -> None:
        now = datetime.now()
        rows = [(int(item_id), int(box), now) for item_id, box in mastery.items()]
        self.conn.executemany(
            """
            INSERT INTO mastery_box (item_id, box, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(item_id) DO UPDATE SET
                box = excluded.box,
                updated_at = excluded.updated_at
        """,
            rows,
        )

    def get_box_distribution(self) -> dict[int, int]:
        """Count of tracked items per box."""
        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute("SELECT box, COUNT(*) AS cnt FROM mastery_box GROUP BY box")
            return {row["box"]: row["cnt"] for row in cursor.fetchall()}

    # =========================================================================
    # Answer Log Operations
    # =========================================================================

    def append_log_entries(self, rows: list[dict]) -> None:
        """
        Append answer records to the log.

        Args:
            rows: Flat dicts as produced by ``AnswerRecord.to_log_row()``
        """
        if not rows:
            return
        with self._lock:
            self._write_log(rows)
            self.conn.commit()

    def _write_log(self, rows: list[dict]) -> None:
        self.conn.executemany(
            """
            INSERT INTO session_log (
                session_stamp, question_id, base_id, user_answer, correct,
                reason, confidence, tag, reason_score, created_at
            ) VALUES (
                :session_stamp, :question_id, :base_id, :user_answer, :correct,
                :reason, :confidence, :tag, :reason_score, :created_at
            )
        """,
            rows,
        )

    def get_log_entries(self, session_stamp: str | None = None, limit: int = 100) -> list[LogEntry]:
        """
        Get logged answers, most recent first.

        Args:
            session_stamp: Restrict to one session
            limit: Maximum records to return
        """
        query = "SELECT * FROM session_log"
        params: tuple = ()
        if session_stamp is not None:
            query += " WHERE session_stamp = ?"
            params = (session_stamp,)
        query += " ORDER BY created_at DESC, id DESC LIMIT ?"

        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute(query, (*params, limit))
            fetched = cursor.fetchall()

        return [
            LogEntry(
                id=row["id"],
                session_stamp=row["session_stamp"],
                question_id=row["question_id"],
                base_id=row["base_id"],
                user_answer=row["user_answer"],
                correct=None if row["correct"] is None else bool(row["correct"]),
                reason=row["reason"] or "",
                confidence=row["confidence"],
                tag=row["tag"],
                reason_score=row["reason_score"],
                created_at=row["created_at"],
            )
            for row in fetched
        ]

    def get_session_history(self, limit: int = 30) -> list[SessionRecord]:
        """Aggregate the log per session stamp, newest first."""
        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute(
                """
                SELECT
                    session_stamp,
                    MIN(created_at) AS "started_at [timestamp]",
                    COUNT(*) AS answered,
                    COUNT(CASE WHEN correct = 1 THEN 1 END) AS correct,
                    COUNT(CASE WHEN correct = 0 THEN 1 END) AS incorrect,
                    COUNT(CASE WHEN correct IS NULL THEN 1 END) AS skipped
                FROM session_log
                GROUP BY session_stamp
                ORDER BY MIN(created_at) DESC
                LIMIT ?
            """,
                (limit,),
            )
            fetched = cursor.fetchall()

        return [
            SessionRecord(
                session_stamp=row["session_stamp"],
                started_at=row["started_at"],
                answered=row["answered"],
                correct=row["correct"],
                incorrect=row["incorrect"],
                skipped=row["skipped"],
            )
            for row in fetched
        ]

    # =========================================================================
    # Stats & Analytics
    # =========================================================================

    def get_stats(self) -> dict:
        """
        Get overall learning statistics.

        Returns:
            Dictionary with aggregate stats
        """
        with self._lock:
            cursor = self.conn.cursor()

            cursor.execute("SELECT COUNT(*) AS cnt FROM mastery_box")
            tracked = cursor.fetchone()["cnt"]

            cursor.execute("SELECT COUNT(*) AS cnt FROM mastery_box WHERE box >= 4")
            strong = cursor.fetchone()["cnt"]

            cursor.execute("SELECT COUNT(*) AS cnt FROM session_log")
            total_answers = cursor.fetchone()["cnt"]

            cursor.execute("SELECT COUNT(DISTINCT session_stamp) AS cnt FROM session_log")
            sessions = cursor.fetchone()["cnt"]

            # Accuracy over the last 100 judged answers (skips excluded)
            cursor.execute("""
                SELECT
                    COUNT(CASE WHEN correct = 1 THEN 1 END) * 100.0 / COUNT(*) AS accuracy
                FROM (
                    SELECT correct FROM session_log
                    WHERE correct IS NOT NULL
                    ORDER BY created_at DESC, id DESC LIMIT 100
                )
            """)
            accuracy = cursor.fetchone()["accuracy"] or 0

            cursor.execute("""
                SELECT AVG(reason_score) AS avg_score FROM (
                    SELECT reason_score FROM session_log
                    WHERE correct IS NOT NULL
                    ORDER BY created_at DESC, id DESC LIMIT 100
                )
            """)
            avg_reason = cursor.fetchone()["avg_score"] or 0

        return {
            "items_tracked": tracked,
            "items_strong": strong,
            "total_answers": total_answers,
            "sessions": sessions,
            "accuracy_recent_percent": round(accuracy, 1),
            "avg_reason_score_recent": round(avg_reason, 2),
        }

    # =========================================================================
    # Backup / Reset
    # =========================================================================

    @property
    def backup_dir(self) -> Path:
        return self.db_path.parent / "backups"

    def backup(self) -> Path:
        """
        Export mastery boxes and the answer log to a JSON file.

        Returns:
            Path of the backup file
        """
        self.backup_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_file = self.backup_dir / f"progress_backup_{timestamp}.json"

        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute("SELECT * FROM mastery_box")
            mastery_data = [dict(row) for row in cursor.fetchall()]
            cursor.execute("SELECT * FROM session_log")
            log_data = [dict(row) for row in cursor.fetchall()]

        backup = {
            "timestamp": timestamp,
            "mastery_box": mastery_data,
            "session_log": log_data,
        }
        with open(backup_file, "w", encoding="utf-8") as f:
            json.dump(backup, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Backup saved: {backup_file}")
        return backup_file

    def reset(self) -> int:
        """
        Delete all progress. A backup is written first.

        Returns:
            Number of mastery entries removed
        """
        with self._lock:
            cursor = self.conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM mastery_box")
            count = cursor.fetchone()[0]
            cursor.execute("SELECT COUNT(*) FROM session_log")
            logged = cursor.fetchone()[0]

        if count == 0 and logged == 0:
            return 0

        self.backup()

        with self._lock:
            self.conn.execute("DELETE FROM mastery_box")
            self.conn.execute("DELETE FROM session_log")
            self.conn.commit()

        logger.info(f"Reset complete: {count} mastery entries deleted")
        return count

    def list_backups(self) -> list[Path]:
        """List available backup files, newest first."""
        if not self.backup_dir.exists():
            return []
        return sorted(self.backup_dir.glob("progress_backup_*.json"), reverse=True)

    def restore(self, backup_file: Path | str | None = None) -> int:
        """
        Restore progress from a backup file.

        Args:
            backup_file: Path to backup JSON file. If None, uses most recent backup.

        Returns:
            Number of mastery entries restored (0 if no backup was found)
        """
        if backup_file is None:
            backups = self.list_backups()
            if not backups:
                logger.warning("No backup files found")
                return 0
            backup_file = backups[0]
        backup_file = Path(backup_file)

        if not backup_file.exists():
            logger.warning(f"Backup file not found: {backup_file}")
            return 0

        with open(backup_file, encoding="utf-8") as f:
            backup = json.load(f)

        mastery = {int(r["item_id"]): int(r["box"]) for r in backup.get("mastery_box", [])}

        log_rows = [
            {
                "session_stamp": r["session_stamp"],
                "question_id": r["question_id"],
                "base_id": r["base_id"],
                "user_answer": r.get("user_answer"),
                "correct": r.get("correct"),
                "reason": r.get("reason") or "",
                "confidence": r.get("confidence"),
                "tag": r.get("tag"),
                "reason_score": r.get("reason_score", 0),
                "created_at": _parse_timestamp(r.get("created_at")),
            }
            for r in backup.get("session_log", [])
        ]
        # The backup replaces current progress wholesale
        with self._lock:
            try:
                self.conn.execute("DELETE FROM mastery_box")
                self.conn.execute("DELETE FROM session_log")
                if mastery:
                    self._write_mastery(mastery)
                if log_rows:
                    self._write_log(log_rows)
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise

        logger.info(f"Restored {len(mastery)} mastery entries from {backup_file.name}")
        return len(mastery)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
