"""
SQLite State Store for the RFI trainer.

Provides portable persistence for:
- Spaced repetition state per (position, hand)
- Append-only answer attempt log
- The singleton user settings record

Database location: ~/.rfi_trainer/state.db
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

# =============================================================================
# Data Classes
# =============================================================================


def record_key(position: str, hand: str) -> str:
    """Identity key of a repetition record ("RFI_UTG_AA")."""
    return f"{position}_{hand}"


@dataclass
class RepetitionRecord:
    """Spaced repetition state for a single (position, hand)."""

    position: str
    hand: str
    streak: int = 0  # Consecutive correct answers
    interval_ms: int = 0  # Time until next review
    next_review_at: int = 0  # Epoch milliseconds
    easiness_factor: float = 2.5  # Stored only; the update rule never reads it

    @property
    def key(self) -> str:
        return record_key(self.position, self.hand)


@dataclass
class AttemptRecord:
    """A single answered question."""

    timestamp: int
    position: str
    hand: str
    user_action: str
    is_correct: bool
    boundary_score: float
    id: int | None = None


@dataclass
class StoredSettings:
    """The persisted user settings singleton."""

    enabled_positions: list[str]
    mode: str = "boundary"
    question_count: int | None = None  # None = unlimited


# =============================================================================
# State Store
# =============================================================================


class StateStore:
    """
    SQLite-backed state persistence for the trainer.

    Handles:
    - Repetition records keyed by position_hand (upsert, last write wins)
    - Attempt log for accuracy statistics
    - Settings singleton (id = 1)
    """

    DEFAULT_DB_PATH = Path.home() / ".rfi_trainer" / "state.db"
    SETTINGS_ID = 1

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.rfi_trainer/state.db)
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.info(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS srs_queue (
                id TEXT PRIMARY KEY,
                position TEXT NOT NULL,
                hand TEXT NOT NULL,
                streak INTEGER NOT NULL DEFAULT 0,
                interval_ms INTEGER NOT NULL DEFAULT 0,
                next_review_at INTEGER NOT NULL DEFAULT 0,
                easiness_factor REAL NOT NULL DEFAULT 2.5
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS attempts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp INTEGER NOT NULL,
                position TEXT NOT NULL,
                hand TEXT NOT NULL,
                user_action TEXT NOT NULL,
                is_correct BOOLEAN NOT NULL,
                boundary_score REAL NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                id INTEGER PRIMARY KEY,
                enabled_positions TEXT NOT NULL,
                mode TEXT NOT NULL,
                question_count INTEGER
            )
        """)

        # Index for fast due-time queries
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_srs_next_review
            ON srs_queue(next_review_at)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_attempts_timestamp
            ON attempts(timestamp)
        """)

        self.conn.commit()

    # =========================================================================
    # Repetition Records
    # =========================================================================

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> RepetitionRecord:
        return RepetitionRecord(
            position=row["position"],
            hand=row["hand"],
            streak=row["streak"],
            interval_ms=row["interval_ms"],
            next_review_at=row["next_review_at"],
            easiness_factor=row["easiness_factor"],
        )

    def get_record(self, position: str, hand: str) -> RepetitionRecord | None:
        """Get the repetition record for a pair, or None if never answered."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM srs_queue WHERE id = ?", (record_key(position, hand),))
        row = cursor.fetchone()
        return self._row_to_record(row) if row else None

    def save_record(self, record: RepetitionRecord) -> None:
        """
        Insert or replace a repetition record.

        Args:
            record: RepetitionRecord to persist
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO srs_queue (
                id, position, hand, streak,
                interval_ms, next_review_at, easiness_factor
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                streak = excluded.streak,
                interval_ms = excluded.interval_ms,
                next_review_at = excluded.next_review_at,
                easiness_factor = excluded.easiness_factor
        """,
            (
                record.key,
                record.position,
                record.hand,
                record.streak,
                record.interval_ms,
                record.next_review_at,
                record.easiness_factor,
            ),
        )
        self.conn.commit()

    def get_due_records(self, now: int) -> list[RepetitionRecord]:
        """All records with next_review_at <= now."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT * FROM srs_queue
            WHERE next_review_at <= ?
            ORDER BY next_review_at ASC
        """,
            (now,),
        )
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def get_all_records(self) -> list[RepetitionRecord]:
        """Every record ever created."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM srs_queue")
        return [self._row_to_record(row) for row in cursor.fetchall()]

    # =========================================================================
    # Attempt Log
    # =========================================================================

    def log_attempt(self, attempt: AttemptRecord) -> int:
        """
        Append an attempt to the log.

        Returns:
            Attempt row ID
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO attempts (
                timestamp, position, hand, user_action, is_correct, boundary_score
            ) VALUES (?, ?, ?, ?, ?, ?)
        """,
            (
                attempt.timestamp,
                attempt.position,
                attempt.hand,
                attempt.user_action,
                attempt.is_correct,
                attempt.boundary_score,
            ),
        )
        self.conn.commit()
        return cursor.lastrowid

    def get_recent_attempts(self, limit: int = 100) -> list[AttemptRecord]:
        """Most recent attempts, newest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT * FROM attempts
            ORDER BY timestamp DESC, id DESC
            LIMIT ?
        """,
            (limit,),
        )

        return [
            AttemptRecord(
                id=row["id"],
                timestamp=row["timestamp"],
                position=row["position"],
                hand=row["hand"],
                user_action=row["user_action"],
                is_correct=bool(row["is_correct"]),
                boundary_score=row["boundary_score"],
            )
            for row in cursor.fetchall()
        ]

    # =========================================================================
    # Settings
    # =========================================================================

    def get_settings(self) -> StoredSettings | None:
        """Load the settings singleton, or None if never saved."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM settings WHERE id = ?", (self.SETTINGS_ID,))
        row = cursor.fetchone()
        if row is None:
            return None
        return StoredSettings(
            enabled_positions=json.loads(row["enabled_positions"]),
            mode=row["mode"],
            question_count=row["question_count"],
        )

    def save_settings(self, settings: StoredSettings) -> None:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO settings (id, enabled_positions, mode, question_count)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                enabled_positions = excluded.enabled_positions,
                mode = excluded.mode,
                question_count = excluded.question_count
        """,
            (
                self.SETTINGS_ID,
                json.dumps(settings.enabled_positions),
                settings.mode,
                settings.question_count,
            ),
        )
        self.conn.commit()

    # =========================================================================
    # Stats & Maintenance
    # =========================================================================

    def get_stats(self, now: int) -> dict:
        """
        Get overall training statistics.

        Args:
            now: Epoch milliseconds used for the due count

        Returns:
            Dictionary with aggregate stats
        """
        cursor = self.conn.cursor()

        cursor.execute("SELECT COUNT(*) as cnt FROM srs_queue")
        tracked = cursor.fetchone()["cnt"]

        cursor.execute("SELECT COUNT(*) as cnt FROM srs_queue WHERE next_review_at <= ?", (now,))
        due = cursor.fetchone()["cnt"]

        cursor.execute("""
            SELECT
                COUNT(*) as total,
                COUNT(CASE WHEN is_correct THEN 1 END) as correct
            FROM attempts
        """)
        row = cursor.fetchone()
        total, correct = row["total"], row["correct"]

        cursor.execute("""
            SELECT
                position,
                COUNT(*) as total,
                COUNT(CASE WHEN is_correct THEN 1 END) as correct
            FROM attempts
            GROUP BY position
            ORDER BY position
        """)
        by_position = {
            r["position"]: {
                "total": r["total"],
                "correct": r["correct"],
                "accuracy_percent": round(100.0 * r["correct"] / r["total"], 1),
            }
            for r in cursor.fetchall()
        }

        return {
            "items_tracked": tracked,
            "items_due": due,
            "total_attempts": total,
            "correct_attempts": correct,
            "accuracy_percent": round(100.0 * correct / total, 1) if total else 0.0,
            "by_position": by_position,
        }

    def reset(self) -> int:
        """
        Delete all attempts and repetition records. Settings are kept.

        Returns:
            Number of repetition records deleted
        """
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM attempts")
        cursor.execute("DELETE FROM srs_queue")
        deleted = cursor.rowcount
        self.conn.commit()

        logger.info(f"Reset complete: {deleted} repetition records deleted")
        return deleted

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
