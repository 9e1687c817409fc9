# Rev 0.3.0 (milestone cards and delete confirmation)
from __future__ import annotations
from typing import Any, Dict, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from burnz.models.entities import Milestone, Project, Resource, blank_resources, merge_resources, new_milestone_id
from burnz.models.types import FormMode
from burnz.services.calculations import (
    milestone_summary,
    project_summary,
    resource_cost_breakdown,
    sort_milestones_by_due_date,
)
from burnz.services.errors import ProjectError
from burnz.utils.formatters import format_currency


def milestone_from_form(form: Dict[str, Any], milestone_id: str) -> Milestone:
    resources = [
        r if isinstance(r, Resource) else Resource(type=r["type"], quantity=float(r.get("quantity") or 0))
        for r in form.get("resources", [])
    ]
    return Milestone(
        id=milestone_id,
        title=form.get("title", ""),
        due_date=form.get("due_date", ""),
        budget=float(form.get("budget") or 0),
        resources=resources,
        total_stories=int(form.get("total_stories") or 0),
        completed_stories=int(form.get("completed_stories") or 0),
        is_done=bool(form.get("is_done", False)),
    )


class ProjectDetailsViewModel(QObject):
    """
    One project with its milestones.
    Emits:
      loaded({
        "project": project_summary(),
        "milestones": [milestone_summary(), ...],   # due date ascending
        "chart": resource_cost_breakdown(),
        "can_edit": bool,
        "budget_display": str, "burn_display": str, "rate_display": str,
      })
      navigateHome()      # project missing or just deleted
      errorRaised(str)
    """
    loaded = Signal(dict)
    navigateHome = Signal()
    errorRaised = Signal(str)

    def __init__(self, project_service, auth_service):
        super().__init__()
        self._projects = project_service
        self._auth = auth_service
        self._project: Optional[Project] = None
        self.milestone_form_mode: Optional[FormMode] = None
        self.editing_milestone: Optional[Milestone] = None
        self.project_form_open = False
        self.pending_delete: Optional[Tuple[str, str]] = None    # ("project"|"milestone", id)

    @property
    def project(self) -> Optional[Project]:
        return self._project

    # ---- queries
    def load(self, project_id: str) -> None:
        try:
            project = self._projects.get_project(self._auth.current, project_id)
        except ProjectError as exc:
            self.errorRaised.emit(str(exc))
            return
        if project is None:
            self._project = None
            self.navigateHome.emit()
            return
        self._project = project
        self.loaded.emit(self._payload(project))

    # ---- milestone form
    def open_new_milestone_form(self) -> None:
        self.milestone_form_mode = "new"
        self.editing_milestone = None

    def open_edit_milestone_form(self, milestone_id: str) -> None:
        if self._project is None:
            return
        found = next((m for m in self._project.milestones if m.id == milestone_id), None)
        if found is None:
            return
        self.milestone_form_mode = "edit"
        self.editing_milestone = found

    def close_milestone_form(self) -> None:
        self.milestone_form_mode = None
        self.editing_milestone = None

    def milestone_form_defaults(self) -> Dict[str, Any]:
        """Initial form values: blank for new, the edited milestone on the full resource grid otherwise."""
        m = self.editing_milestone
        if m is None:
            return {
                "title": "", "due_date": "", "budget": 0.0,
                "resources": blank_resources(),
                "total_stories": 0, "completed_stories": 0, "is_done": False,
            }
        return {
            "title": m.title, "due_date": m.due_date, "budget": m.budget,
            "resources": merge_resources(m.resources),
            "total_stories": m.total_stories, "completed_stories": m.completed_stories,
            "is_done": m.is_done,
        }

    def submit_milestone(self, form: Dict[str, Any]) -> bool:
        if self._project is None or self.milestone_form_mode is None:
            return False
        identity = self._auth.current
        try:
            if self.milestone_form_mode == "new":
                milestone = milestone_from_form(form, new_milestone_id())
                self._projects.add_milestone(identity, self._project.id, milestone)
            else:
                mid = self.editing_milestone.id
                self._projects.update_milestone(identity, self._project.id, mid, milestone_from_form(form, mid))
        except ProjectError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.load(self._project.id)
        self.close_milestone_form()
        return True

    # ---- project form
    def open_project_form(self) -> None:
        self.project_form_open = True

    def close_project_form(self) -> None:
        self.project_form_open = False

    def update_project(self, data: Dict[str, Any]) -> bool:
        if self._project is None:
            return False
        try:
            self._projects.update_project(self._auth.current, self._project.id, data)
        except ProjectError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.load(self._project.id)
        self.project_form_open = False
        return True

    # ---- delete confirmation
    def request_delete(self, kind: str, target_id: str) -> None:
        if kind not in ("project", "milestone"):
            raise ValueError(f"cannot delete a {kind!r}")
        self.pending_delete = (kind, target_id)

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        if self.pending_delete is None:
            return False
        kind, target_id = self.pending_delete
        if kind == "project":
            return self.delete_project()
        return self.delete_milestone(target_id)

    def delete_milestone(self, milestone_id: str) -> bool:
        if self._project is None:
            return False
        try:
            self._projects.delete_milestone(self._auth.current, self._project.id, milestone_id)
        except ProjectError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self.load(self._project.id)
        self.pending_delete = None
        return True

    def delete_project(self) -> bool:
        if self._project is None:
            return False
        try:
            self._projects.delete_project(self._auth.current, self._project.id)
        except ProjectError as exc:
            self.errorRaised.emit(str(exc))
            return False
        self._project = None
        self.pending_delete = None
        self.navigateHome.emit()
        return True

    # ---- internals
    @staticmethod
    def _payload(project: Project) -> Dict[str, Any]:
        summary = project_summary(project)
        ordered = sort_milestones_by_due_date(project.milestones)
        return {
            "project": summary,
            "milestones": [milestone_summary(m, project.hourly_rate) for m in ordered],
            "chart": resource_cost_breakdown(ordered, project.hourly_rate),
            "can_edit": project.is_owner,
            "budget_display": format_currency(project.budget),
            "burn_display": format_currency(summary["burn"]),
            "rate_display": f"{format_currency(project.hourly_rate)}/hour",
        }
