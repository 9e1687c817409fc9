# Rev 0.3.0

"""Project service (Rev 0.3.0)
Reads and writes projects and their embedded milestones, enforcing ownership.

Every call takes the acting Identity explicitly. Mutations re-fetch the record
each time and check, in order: signed in, record exists, caller owns it.
Milestone mutations rewrite the whole milestones list, so two writers racing
on the same project lose the earlier write (last write wins).
"""
from __future__ import annotations
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from burnz.models.entities import Identity, Milestone, Project
from burnz.repositories.sqlite_project_repository import OrderedQueryUnavailable, UPDATABLE_COLUMNS
from burnz.utils.logging_setup import get_logger
from .errors import (
    AuthRequiredError,
    AuthorizationError,
    FetchError,
    InvalidProjectFieldsError,
    NotFoundError,
    PersistError,
)

# Store-level failures wrapped into FetchError / PersistError
STORE_ERRORS = (sqlite3.Error, OSError)

# Accepted in create/update payloads but never written through them
IGNORED_UPDATE_FIELDS = frozenset({"id", "user_id", "milestones", "created_at", "is_owner"})
NUMERIC_FIELDS = ("budget", "hourly_rate")


class ProjectRepository(Protocol):
    def list_projects(self, user_id: Optional[str] = None, *, ordered: bool = True) -> List[Dict[str, Any]]: ...
    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]: ...
    def insert_project(self, data: Dict[str, Any]) -> str: ...
    def update_fields(self, project_id: str, fields: Dict[str, Any]) -> bool: ...
    def set_milestones(self, project_id: str, milestones: List[Dict[str, Any]]) -> bool: ...
    def delete_project(self, project_id: str) -> bool: ...


def _project_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Writable columns from a create/update payload, with numbers coerced to float."""
    unknown = set(data) - set(UPDATABLE_COLUMNS) - IGNORED_UPDATE_FIELDS
    if unknown:
        raise InvalidProjectFieldsError(f"Unknown project fields: {', '.join(sorted(unknown))}")
    fields = {k: v for k, v in data.items() if k in UPDATABLE_COLUMNS}
    for key in NUMERIC_FIELDS:
        if key not in fields:
            continue
        try:
            fields[key] = float(fields[key])
        except (TypeError, ValueError):
            raise InvalidProjectFieldsError(f"{key.replace('_', ' ').capitalize()} must be a number") from None
    return fields


def _start_date_desc(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Same key as the store's ORDER BY start_date DESC, id ASC
    by_id = sorted(rows, key=lambda r: r["id"])
    return sorted(by_id, key=lambda r: r.get("start_date") or "", reverse=True)


class ProjectService:
    def __init__(self, repo: ProjectRepository):
        self._repo = repo
        self._log = get_logger("ProjectService")

    # ---------- reads ----------

    def list_projects(self, identity: Optional[Identity], include_all_owners: bool = False) -> List[Project]:
        """Caller's projects (or everyone's), newest start date first. Empty when signed out."""
        if identity is None:
            return []
        owner = None if include_all_owners else identity.uid
        try:
            try:
                rows = self._repo.list_projects(owner, ordered=True)
            except OrderedQueryUnavailable:
                self._log.warning("Using fallback query without ordering due to missing index")
                rows = _start_date_desc(self._repo.list_projects(owner, ordered=False))
        except STORE_ERRORS as exc:
            self._log.error("Error fetching projects", exc_info=True)
            raise FetchError() from exc
        return [self._to_project(r, identity) for r in rows]

    def get_project(self, identity: Optional[Identity], project_id: str) -> Optional[Project]:
        """None (not an error) when no record exists."""
        try:
            rec = self._repo.get_project(project_id)
        except STORE_ERRORS as exc:
            self._log.error("Error fetching project %s", project_id, exc_info=True)
            raise FetchError("Failed to fetch project details.") from exc
        return self._to_project(rec, identity) if rec else None

    # ---------- project mutations ----------

    def create_project(self, identity: Optional[Identity], data: Dict[str, Any]) -> str:
        if identity is None:
            raise AuthRequiredError("User must be authenticated to create a project")
        record = _project_fields(data)
        record.update(
            user_id=identity.uid,
            milestones=[],
            created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )
        try:
            project_id = self._repo.insert_project(record)
        except STORE_ERRORS as exc:
            self._log.error("Error creating project", exc_info=True)
            raise PersistError("Failed to create project.") from exc
        self._log.info("Project %s created by %s", project_id, identity.uid)
        return project_id

    def update_project(self, identity: Optional[Identity], project_id: str, updates: Dict[str, Any]) -> None:
        """Shallow merge of scalar fields; milestones are never touched here."""
        self._owned_record(identity, project_id, "update")
        fields = _project_fields(updates)
        try:
            self._repo.update_fields(project_id, fields)
        except STORE_ERRORS as exc:
            self._log.error("Error updating project %s", project_id, exc_info=True)
            raise PersistError("Failed to update project.") from exc
        self._log.info("Project %s updated (%s)", project_id, ", ".join(sorted(fields)) or "no fields")

    def delete_project(self, identity: Optional[Identity], project_id: str) -> None:
        self._owned_record(identity, project_id, "delete")
        try:
            self._repo.delete_project(project_id)
        except STORE_ERRORS as exc:
            self._log.error("Error deleting project %s", project_id, exc_info=True)
            raise PersistError("Failed to delete project.") from exc
        self._log.info("Project %s deleted", project_id)

    # ---------- milestone mutations ----------

    def add_milestone(self, identity: Optional[Identity], project_id: str, milestone: Milestone) -> None:
        rec = self._owned_record(identity, project_id, "modify")
        milestones = list(rec["milestones"]) + [milestone.to_dict()]
        self._write_milestones(project_id, milestones, "Failed to add milestone.")
        self._log.info("Milestone %s added to project %s", milestone.id, project_id)

    def update_milestone(self, identity: Optional[Identity], project_id: str, milestone_id: str, milestone: Milestone) -> None:
        """Full replacement of the matching entry. No match rewrites the list unchanged."""
        rec = self._owned_record(identity, project_id, "modify")
        new = milestone.to_dict()
        milestones = [new if m.get("id") == milestone_id else m for m in rec["milestones"]]
        self._write_milestones(project_id, milestones, "Failed to update milestone.")
        self._log.info("Milestone %s updated in project %s", milestone_id, project_id)

    def delete_milestone(self, identity: Optional[Identity], project_id: str, milestone_id: str) -> None:
        rec = self._owned_record(identity, project_id, "modify")
        milestones = [m for m in rec["milestones"] if m.get("id") != milestone_id]
        self._write_milestones(project_id, milestones, "Failed to delete milestone.")
        self._log.info("Milestone %s removed from project %s", milestone_id, project_id)

    # ---------- internals ----------

    def _owned_record(self, identity: Optional[Identity], project_id: str, action: str) -> Dict[str, Any]:
        if identity is None:
            raise AuthRequiredError(f"User must be authenticated to {action} a project")
        try:
            rec = self._repo.get_project(project_id)
        except STORE_ERRORS as exc:
            self._log.error("Error loading project %s for %s", project_id, action, exc_info=True)
            raise PersistError() from exc
        if rec is None:
            raise NotFoundError()
        if rec["user_id"] != identity.uid:
            self._log.warning("Denied %s on project %s for %s", action, project_id, identity.uid)
            raise AuthorizationError(f"Unauthorized to {action} this project")
        return rec

    def _write_milestones(self, project_id: str, milestones: List[Dict[str, Any]], message: str) -> None:
        try:
            self._repo.set_milestones(project_id, milestones)
        except STORE_ERRORS as exc:
            self._log.error("Error writing milestones for project %s", project_id, exc_info=True)
            raise PersistError(message) from exc

    @staticmethod
    def _to_project(rec: Dict[str, Any], identity: Optional[Identity]) -> Project:
        return Project.from_record(rec, rec.get("milestones") or [], identity.uid if identity else None)
