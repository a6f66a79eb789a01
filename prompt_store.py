"""SQLite-backed prompt history and launch log."""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from env import LOGGER, data_dir
from errors import PromptNotFoundError
from models import PromptRecord, RunRecord

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS prompts (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  created_at TEXT NOT NULL,
  text TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS runs (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  prompt_id INTEGER NOT NULL,
  command TEXT NOT NULL,
  window_name TEXT,
  created_at TEXT NOT NULL,
  FOREIGN KEY(prompt_id) REFERENCES prompts(id)
);
"""


def default_db_path() -> Path:
    return data_dir() / "prompts.db"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PromptStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_db_path()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.executescript(CREATE_TABLES_SQL)
        LOGGER.debug("prompt store opened at %s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        self._conn.close()

    def save_prompt(self, text: str) -> PromptRecord:
        created_at = _now()
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "INSERT INTO prompts (created_at, text) VALUES (?, ?)", (created_at, text)
            )
        return PromptRecord(id=int(cursor.lastrowid), created_at=created_at, text=text)

    def update_prompt(self, prompt_id: int, text: str) -> PromptRecord:
        with self._lock, self._conn:
            row = self._conn.execute(
                "SELECT created_at FROM prompts WHERE id = ?", (prompt_id,)
            ).fetchone()
            if row is None:
                raise PromptNotFoundError(prompt_id)
            self._conn.execute("UPDATE prompts SET text = ? WHERE id = ?", (text, prompt_id))
        return PromptRecord(id=prompt_id, created_at=row["created_at"], text=text)

    def get_prompt(self, prompt_id: int) -> Optional[PromptRecord]:
        row = self._query_one("SELECT id, created_at, text FROM prompts WHERE id = ?", (prompt_id,))
        return _prompt(row) if row else None

    def get_last_prompt(self) -> Optional[PromptRecord]:
        row = self._query_one("SELECT id, created_at, text FROM prompts ORDER BY id DESC LIMIT 1")
        return _prompt(row) if row else None

    def list_prompts(self, limit: int = 50) -> List[PromptRecord]:
        rows = self._query_all("SELECT id, created_at, text FROM prompts ORDER BY id DESC LIMIT ?", (limit,))
        return [_prompt(row) for row in rows]

    def log_run(self, prompt_id: int, command: str, window_name: Optional[str] = None) -> RunRecord:
        created_at = _now()
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "INSERT INTO runs (prompt_id, command, window_name, created_at) VALUES (?, ?, ?, ?)",
                (prompt_id, command, window_name, created_at),
            )
        return RunRecord(
            id=int(cursor.lastrowid),
            prompt_id=prompt_id,
            command=command,
            window_name=window_name,
            created_at=created_at,
        )

    def get_last_run_for_prompt(self, prompt_id: int) -> Optional[RunRecord]:
        row = self._query_one(
            "SELECT * FROM runs WHERE prompt_id = ? ORDER BY id DESC LIMIT 1", (prompt_id,)
        )
        return _run(row) if row else None

    def list_runs(self, limit: int = 50) -> List[RunRecord]:
        rows = self._query_all("SELECT * FROM runs ORDER BY id DESC LIMIT ?", (limit,))
        return [_run(row) for row in rows]

    def list_runs_for_prompt(self, prompt_id: int, limit: int = 20) -> List[RunRecord]:
        rows = self._query_all(
            "SELECT * FROM runs WHERE prompt_id = ? ORDER BY id DESC LIMIT ?", (prompt_id, limit)
        )
        return [_run(row) for row in rows]

    def _query_one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    def _query_all(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()


def _prompt(row: sqlite3.Row) -> PromptRecord:
    return PromptRecord(id=row["id"], created_at=row["created_at"], text=row["text"])


def _run(row: sqlite3.Row) -> RunRecord:
    return RunRecord(
        id=row["id"],
        prompt_id=row["prompt_id"],
        command=row["command"],
        window_name=row["window_name"],
        created_at=row["created_at"],
    )
