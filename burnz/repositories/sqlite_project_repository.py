# Rev 0.3.0
# burnZ – SQLiteProjectRepository (Rev 0.3.0, schema Rev 0.1.0)
from __future__ import annotations
import json
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union


UPDATABLE_COLUMNS = ("title", "description", "start_date", "end_date", "budget", "hourly_rate")


class OrderedQueryUnavailable(RuntimeError):
    """Raised when a filtered+ordered listing is asked of a store without the index for it."""


class SQLiteProjectRepository:
    """
    Project document store.
    One row per project; milestones live in a JSON array column and are only
    ever read and written as a whole list.
    """

    def __init__(self, db_or_conn: Union[sqlite3.Connection, Any], *, ordered_queries: bool = True):
        self._db_or_conn = db_or_conn
        self._ordered_queries = ordered_queries

    # ---------- public API ----------

    def list_projects(self, user_id: Optional[str] = None, *, ordered: bool = True) -> List[Dict[str, Any]]:
        """
        All projects, or only those owned by user_id.
        ordered=True sorts by start_date DESC, id ASC.
        """
        if ordered and not self._ordered_queries:
            raise OrderedQueryUnavailable("ordered project queries are not indexed on this store")

        sql = "SELECT * FROM projects"
        params: tuple = ()
        if user_id is not None:
            sql += " WHERE user_id = ?"
            params = (user_id,)
        if ordered:
            sql += " ORDER BY start_date DESC, id ASC"
        return self._fetch_all(sql, params)

    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all("SELECT * FROM projects WHERE id = ?", (project_id,))
        return rows[0] if rows else None

    def insert_project(self, data: Dict[str, Any]) -> str:
        """Store assigns the opaque id. `data` must carry user_id."""
        project_id = uuid.uuid4().hex
        created_at = data.get("created_at") or datetime.now(timezone.utc).isoformat(timespec="seconds")
        con = self._conn()
        con.execute(
            """
            INSERT INTO projects (id, user_id, title, description, start_date, end_date,
                                  budget, hourly_rate, milestones, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project_id,
                data["user_id"],
                data.get("title") or "",
                data.get("description") or "",
                data.get("start_date") or "",
                data.get("end_date") or "",
                float(data.get("budget") or 0),
                float(data.get("hourly_rate") or 0),
                json.dumps(data.get("milestones") or []),
                created_at,
            ),
        )
        con.commit()
        return project_id

    def update_fields(self, project_id: str, fields: Dict[str, Any]) -> bool:
        """Shallow overwrite of scalar columns. Never touches milestones."""
        sets, params = [], []
        for col in UPDATABLE_COLUMNS:
            if col in fields:
                sets.append(f"{col} = ?")
                params.append(float(fields[col]) if col in ("budget", "hourly_rate") else fields[col])
        if not sets:
            return self.get_project(project_id) is not None
        params.append(project_id)
        con = self._conn()
        cur = con.execute(f"UPDATE projects SET {', '.join(sets)} WHERE id = ?", params)
        con.commit()
        return cur.rowcount > 0

    def set_milestones(self, project_id: str, milestones: List[Dict[str, Any]]) -> bool:
        """Rewrite the whole embedded list; last writer wins."""
        con = self._conn()
        cur = con.execute(
            "UPDATE projects SET milestones = ? WHERE id = ?",
            (json.dumps(milestones), project_id),
        )
        con.commit()
        return cur.rowcount > 0

    def delete_project(self, project_id: str) -> bool:
        con = self._conn()
        cur = con.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        con.commit()
        return cur.rowcount > 0

    # ---------- internals ----------

    def _conn(self) -> sqlite3.Connection:
        # You can pass a raw sqlite3.Connection directly
        if isinstance(self._db_or_conn, sqlite3.Connection):
            return self._db_or_conn
        # Or the Database wrapper with .conn
        if hasattr(self._db_or_conn, "conn") and isinstance(self._db_or_conn.conn, sqlite3.Connection):
            return self._db_or_conn.conn
        raise RuntimeError(
            "SQLiteProjectRepository: could not obtain sqlite3.Connection "
            "from db wrapper (.conn)."
        )

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        cur = self._conn().execute(sql, params)
        cols = [d[0] for d in cur.description]
        out: List[Dict[str, Any]] = []
        for row in cur.fetchall():
            rec = {cols[i]: row[i] for i in range(len(cols))}
            rec["milestones"] = json.loads(rec.get("milestones") or "[]")
            out.append(rec)
        return out
