import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .policy import ThresholdConfig


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_db(db_path: str) -> None:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                threshold_gb REAL NOT NULL,
                auto_clean_enabled INTEGER NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS clean_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                trigger TEXT NOT NULL,
                files_deleted INTEGER NOT NULL DEFAULT 0,
                bytes_reclaimed INTEGER NOT NULL DEFAULT 0,
                cleaned_at TEXT NOT NULL
            )
            """
        )


def load_config(db_path: str) -> ThresholdConfig:
    with sqlite3.connect(db_path) as conn:
        row = conn.execute(
            "SELECT threshold_gb, auto_clean_enabled FROM settings WHERE id = 1"
        ).fetchone()

    if row is None:
        return ThresholdConfig()
    return ThresholdConfig(threshold_gb=float(row[0]), auto_clean_enabled=bool(row[1]))


def save_config(*, db_path: str, config: ThresholdConfig) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO settings (id, threshold_gb, auto_clean_enabled, updated_at)
            VALUES (1, ?, ?, ?)
            ON CONFLICT(id)
            DO UPDATE SET
                threshold_gb=excluded.threshold_gb,
                auto_clean_enabled=excluded.auto_clean_enabled,
                updated_at=excluded.updated_at
            """,
            (float(config.threshold_gb), int(bool(config.auto_clean_enabled)), _now_iso()),
        )


def record_clean_run(
    *,
    db_path: str,
    trigger: str,
    files_deleted: int,
    bytes_reclaimed: int,
) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO clean_runs (trigger, files_deleted, bytes_reclaimed, cleaned_at)
            VALUES (?, ?, ?, ?)
            """,
            (trigger, int(files_deleted), int(bytes_reclaimed), _now_iso()),
        )


def list_clean_runs(db_path: str, limit: int = 20) -> list[dict[str, Any]]:
    with sqlite3.connect(db_path) as conn:
        cursor = conn.execute(
            """
            SELECT trigger, files_deleted, bytes_reclaimed, cleaned_at
            FROM clean_runs
            ORDER BY id DESC
            LIMIT ?
            """,
            (int(limit),),
        )
        rows = cursor.fetchall()

    out: list[dict[str, Any]] = []
    for row in rows:
        out.append(
            {
                "trigger": str(row[0]),
                "files_deleted": int(row[1] or 0),
                "bytes_reclaimed": int(row[2] or 0),
                "cleaned_at": row[3],
            }
        )
    return out
