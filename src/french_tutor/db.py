"""Database initialization, connection management and result storage."""
import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from french_tutor.models import SubmissionResult

DEFAULT_DB_PATH = str(Path.home() / ".french_tutor" / "tutor.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS submission_results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    question_id TEXT NOT NULL,
    variant TEXT NOT NULL,
    answer TEXT,
    is_correct INTEGER NOT NULL,
    unit_results TEXT NOT NULL,
    raw_match_ratio REAL NOT NULL,
    score INTEGER NOT NULL,
    elapsed_ms INTEGER NOT NULL,
    attempts_used INTEGER NOT NULL,
    hints_used INTEGER NOT NULL,
    timed_out INTEGER DEFAULT 0,
    answered_at TEXT
);

CREATE TABLE IF NOT EXISTS activity_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    activity_type TEXT NOT NULL,
    base_points INTEGER NOT NULL,
    question_id TEXT NOT NULL,
    metadata TEXT NOT NULL,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_submission_results_question
    ON submission_results (question_id);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def record_submission(db_path: str, result: SubmissionResult, variant: str) -> int:
    conn = get_connection(db_path)
    cursor = conn.execute(
        """INSERT INTO submission_results (question_id, variant, answer, is_correct, unit_results,
        raw_match_ratio, score, elapsed_ms, attempts_used, hints_used, timed_out, answered_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            result.question_id,
            str(getattr(variant, "value", variant)),
            json.dumps(result.answer, ensure_ascii=False),
            int(result.is_correct),
            json.dumps(list(result.unit_results)),
            result.raw_match_ratio,
            result.score,
            result.elapsed_ms,
            result.attempts_used,
            result.hints_used,
            int(result.timed_out),
            datetime.now().isoformat(),
        ),
    )
    conn.commit()
    row_id = cursor.lastrowid
    conn.close()
    return row_id


def record_activity(db_path: str, event) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO activity_events (activity_type, base_points, question_id, metadata, created_at) VALUES (?, ?, ?, ?, ?)",
        (
            event.activity_type,
            event.base_points,
            event.metadata["question_id"],
            json.dumps(event.metadata),
            datetime.now().isoformat(),
        ),
    )
    conn.commit()
    conn.close()


def get_submissions(db_path: str, question_id: Optional[str] = None) -> list[dict]:
    conn = get_connection(db_path)
    if question_id is None:
        rows = conn.execute("SELECT * FROM submission_results ORDER BY id").fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM submission_results WHERE question_id = ? ORDER BY id", (question_id,)
        ).fetchall()
    conn.close()
    results = []
    for row in rows:
        item = dict(row)
        item["answer"] = json.loads(item["answer"]) if item["answer"] is not None else None
        item["unit_results"] = json.loads(item["unit_results"])
        item["is_correct"] = bool(item["is_correct"])
        item["timed_out"] = bool(item["timed_out"])
        results.append(item)
    return results
