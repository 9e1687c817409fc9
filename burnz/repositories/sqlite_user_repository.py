# Rev 0.3.0
# burnZ – SQLiteUserRepository (Rev 0.3.0, schema Rev 0.3.0)
from __future__ import annotations
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union


class SQLiteUserRepository:
    """Identity records for the local identity provider. Emails match case-insensitively."""

    def __init__(self, db_or_conn: Union[sqlite3.Connection, Any]):
        self._db_or_conn = db_or_conn

    def create_user(self, *, email: str, password_hash: str, display_name: Optional[str] = None) -> str:
        uid = uuid.uuid4().hex
        con = self._conn()
        con.execute(
            """
            INSERT INTO users(uid, email, display_name, password_hash, email_verified, created_at)
            VALUES (?, ?, ?, ?, 0, ?)
            """,
            (uid, email, display_name, password_hash, datetime.now(timezone.utc).isoformat(timespec="seconds")),
        )
        con.commit()
        return uid

    def get_by_uid(self, uid: str) -> Optional[Dict[str, Any]]:
        row = self._conn().execute("SELECT * FROM users WHERE uid = ?", (uid,)).fetchone()
        return self._row_to_dict(row)

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        row = self._conn().execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return self._row_to_dict(row)

    def set_display_name(self, uid: str, display_name: str) -> bool:
        return self._update(uid, "display_name", display_name)

    def set_password_hash(self, uid: str, password_hash: str) -> bool:
        return self._update(uid, "password_hash", password_hash)

    def set_email_verified(self, uid: str, verified: bool = True) -> bool:
        return self._update(uid, "email_verified", 1 if verified else 0)

    # ---------- one-time codes ----------

    def add_token(self, *, token_hash: str, uid: str, purpose: str, expires_at: str) -> None:
        con = self._conn()
        con.execute(
            "INSERT INTO auth_tokens(token_hash, uid, purpose, expires_at) VALUES (?, ?, ?, ?)",
            (token_hash, uid, purpose, expires_at),
        )
        con.commit()

    def get_token(self, token_hash: str, purpose: str) -> Optional[Dict[str, Any]]:
        row = self._conn().execute(
            "SELECT token_hash, uid, purpose, expires_at, used_at FROM auth_tokens WHERE token_hash = ? AND purpose = ?",
            (token_hash, purpose),
        ).fetchone()
        if row is None:
            return None
        return dict(zip(("token_hash", "uid", "purpose", "expires_at", "used_at"), tuple(row)))

    def consume_token(self, token_hash: str, used_at: str) -> bool:
        """Marks the code used; False when it was already used."""
        con = self._conn()
        cur = con.execute(
            "UPDATE auth_tokens SET used_at = ? WHERE token_hash = ? AND used_at IS NULL",
            (used_at, token_hash),
        )
        con.commit()
        return cur.rowcount == 1

    # ---------- internals ----------

    def _update(self, uid: str, column: str, value: Any) -> bool:
        con = self._conn()
        cur = con.execute(f"UPDATE users SET {column} = ? WHERE uid = ?", (value, uid))
        con.commit()
        return cur.rowcount > 0

    def _conn(self) -> sqlite3.Connection:
        if isinstance(self._db_or_conn, sqlite3.Connection):
            return self._db_or_conn
        if hasattr(self._db_or_conn, "conn") and isinstance(self._db_or_conn.conn, sqlite3.Connection):
            return self._db_or_conn.conn
        raise RuntimeError("SQLiteUserRepository: could not obtain sqlite3.Connection (.conn).")

    @staticmethod
    def _row_to_dict(row) -> Optional[Dict[str, Any]]:
        if row is None:
            return None
        if isinstance(row, sqlite3.Row):
            rec = dict(row)
        else:
            rec = dict(zip(("uid", "email", "display_name", "password_hash", "email_verified", "created_at"), row))
        rec["email_verified"] = bool(rec.get("email_verified"))
        return rec
