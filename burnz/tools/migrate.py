# File: burnz/tools/migrate.py
# Usage examples:
#   python -m burnz.tools.migrate up
#   python -m burnz.tools.migrate status
#   python -m burnz.tools.migrate verify --db /path/to/burnz.db
#
# Notes:
# - DB path defaults to env BURNZ_DB or the XDG data dir
# - Applies burnz/data/migrations/*.sql in lexicographic order

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path
from typing import Optional

from burnz.repositories.db import Database
from burnz.utils.config import load_settings
from burnz.utils.logging_setup import setup_logging
from burnz.utils.paths import DB_PATH, MIGRATIONS_DIR

REQUIRED_TABLES = ("projects", "users", "auth_tokens", "schema_migrations")


def cmd_status(db_path: Path, migrations_dir: Path) -> int:
    db = Database(db_path)
    try:
        applied = sorted(db.applied())
        pending = [p.name for p in db.pending(migrations_dir)]
        print(f"DB: {db_path}")
        print(f"Migrations dir: {migrations_dir}")
        print(f"Applied count: {len(applied)}")
        for name in applied:
            print(f"  ✔ {name}")
        print(f"Pending count: {len(pending)}")
        for name in pending:
            print(f"  ⧗ {name}")
        return 0
    finally:
        db.close()


def cmd_up(db_path: Path, migrations_dir: Path) -> int:
    db = Database(db_path)
    try:
        applied = db.run_migrations(migrations_dir)
        for name in applied:
            print(f"→ Applied migration: {name}")
        if applied:
            print("✓ Database is up to date.")
        else:
            print("✓ No changes. Database already up to date.")
        return 0
    finally:
        db.close()


def cmd_verify(db_path: Path) -> int:
    # Plain connection: Database() would switch the file to WAL itself
    if not db_path.exists():
        print(f"❌ Database not found: {db_path}")
        return 1
    conn = sqlite3.connect(str(db_path))
    try:
        cur = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%';")
        names = {r[0] for r in cur.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in names]
        if missing:
            print("❌ Missing tables:", ", ".join(missing))
            return 2

        (mode,) = conn.execute("PRAGMA journal_mode;").fetchone()
        if str(mode).lower() != "wal":
            print(f"❌ journal_mode is not WAL (got {mode})")
            return 4

        print("✓ Verification passed.")
        return 0
    finally:
        conn.close()


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="burnz-migrate", description="SQLite migration runner for burnZ")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser):
        sp.add_argument("--db", type=Path, default=DB_PATH, help=f"Path to SQLite DB (default: {DB_PATH})")
        sp.add_argument("--migrations-dir", type=Path, default=MIGRATIONS_DIR, help=f"Migrations directory (default: {MIGRATIONS_DIR})")

    s_up = sub.add_parser("up", help="Run pending migrations")
    add_common(s_up)

    s_status = sub.add_parser("status", help="Show applied and pending migrations")
    add_common(s_status)

    s_verify = sub.add_parser("verify", help="Lightweight structural verification")
    s_verify.add_argument("--db", type=Path, default=DB_PATH, help=f"Path to SQLite DB (default: {DB_PATH})")

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(argv if argv is not None else sys.argv[1:])
    setup_logging(level_name=load_settings()["log_level"])
    if ns.cmd == "status":
        return cmd_status(ns.db, ns.migrations_dir)
    if ns.cmd == "up":
        return cmd_up(ns.db, ns.migrations_dir)
    if ns.cmd == "verify":
        return cmd_verify(ns.db)
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
