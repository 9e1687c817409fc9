# Rev 0.2.0

"""SQLite connection & migration runner (Rev 0.2.0)
- WAL mode, foreign_keys=ON
- Applies SQL files in burnz/data/migrations in lexical order
- Tracks applied files in schema_migrations(filename TEXT PRIMARY KEY, applied_at UTC)
"""
from __future__ import annotations
import sqlite3
from pathlib import Path
from datetime import datetime, timezone
from typing import List

from burnz.utils.logging_setup import get_logger
from burnz.utils.paths import DB_PATH, MIGRATIONS_DIR


class Database:
    def __init__(self, path: Path | str = DB_PATH) -> None:
        self._log = get_logger("Database")
        self.path = Path(path)
        if str(path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(path), isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations (filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
        )
        self._log.info("SQLite open %s", self.path)

    def close(self) -> None:
        self.conn.close()

    def applied(self) -> set[str]:
        rows = self.conn.execute("SELECT filename FROM schema_migrations").fetchall()
        return {r[0] for r in rows}

    def pending(self, migrations_dir: Path = MIGRATIONS_DIR) -> List[Path]:
        applied = self.applied()
        return [p for p in sorted(migrations_dir.glob("*.sql")) if p.name not in applied]

    def apply_sql(self, sql: str) -> None:
        self.conn.executescript(sql)

    def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
        to_apply = self.pending(migrations_dir)
        for p in to_apply:
            self.apply_sql(p.read_text(encoding="utf-8"))
            self.conn.execute(
                "INSERT INTO schema_migrations(filename, applied_at) VALUES(?, ?)",
                (p.name, datetime.now(timezone.utc).isoformat()),
            )
            self._log.info("Applied migration %s", p.name)
        return [p.name for p in to_apply]

    # Convenience cursor
    def cursor(self) -> sqlite3.Cursor:
        return self.conn.cursor()
