# Rev 0.2.0
# burnz/viewmodels/dashboard_viewmodel.py
from __future__ import annotations
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from burnz.services.calculations import project_summary
from burnz.services.errors import ProjectError
from burnz.utils.logging_setup import get_logger


class DashboardViewModel(QObject):
    """
    Project cards for the signed-in user ("My Projects") or everyone ("All Projects").
    Emits:
      projectsReloaded(list[dict])   # project_summary() rows, oldest start date first
      projectCreated(str)            # new project id
      errorRaised(str)
      loadingChanged(bool)
    """
    projectsReloaded = Signal(list)
    projectCreated = Signal(str)
    errorRaised = Signal(str)
    loadingChanged = Signal(bool)

    def __init__(self, project_service, auth_service):
        super().__init__()
        self._projects = project_service
        self._auth = auth_service
        self._log = get_logger("DashboardViewModel")
        self._show_all = False
        self._rows: List[Dict[str, Any]] = []
        self.new_project_form_open = False

    # ---- filters
    @property
    def show_all(self) -> bool:
        return self._show_all

    def set_show_all(self, show_all: bool) -> None:
        if show_all != self._show_all:
            self._show_all = show_all
            self.reload()

    def toggle_show_all(self) -> None:
        self.set_show_all(not self._show_all)

    def empty_message(self) -> str:
        if self._show_all:
            return "There are no projects to display at the moment."
        return "Create your first project to get started!"

    # ---- queries
    def reload(self) -> None:
        self.loadingChanged.emit(True)
        try:
            projects = self._projects.list_projects(self._auth.current, include_all_owners=self._show_all)
        except ProjectError as exc:
            self.errorRaised.emit(str(exc))
            return
        finally:
            self.loadingChanged.emit(False)
        rows = [project_summary(p) for p in projects]
        # cards read oldest first
        self._rows = sorted(rows, key=lambda r: r["start_date"])
        self.projectsReloaded.emit(self._rows)

    def rows(self) -> List[Dict[str, Any]]:
        return list(self._rows)

    # ---- commands
    def open_new_project_form(self) -> None:
        self.new_project_form_open = True

    def close_new_project_form(self) -> None:
        self.new_project_form_open = False

    def create_project(self, data: Dict[str, Any]) -> Optional[str]:
        try:
            project_id = self._projects.create_project(self._auth.current, data)
        except ProjectError as exc:
            self.errorRaised.emit(str(exc))
            return None
        self.reload()
        self.new_project_form_open = False
        self.projectCreated.emit(project_id)
        return project_id
