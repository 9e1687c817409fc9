# burnZ application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .utils.logging_setup import get_logger
from .utils.config import load_settings
from .repositories.db import Database
from .repositories.sqlite_project_repository import SQLiteProjectRepository
from .repositories.sqlite_user_repository import SQLiteUserRepository
from .services.auth_service import AuthService, Mailer
from .services.project_service import ProjectService


@dataclass
class AppContext:
    """Central container for shared app resources."""
    settings: Dict[str, Any]
    db: Database
    projects: ProjectService
    auth: AuthService

    @classmethod
    def create(cls, db_path: Optional[Path | str] = None, *, settings: Optional[Dict[str, Any]] = None,
               mailer: Optional[Mailer] = None) -> "AppContext":
        """Open + migrate the DB, then wire repositories and services."""
        log = get_logger("AppContext")
        settings = dict(settings if settings is not None else load_settings())
        if db_path is not None:
            settings["db_path"] = str(db_path)

        db = Database(settings["db_path"])
        applied = db.run_migrations()
        if applied:
            log.info("Applied %d migration(s): %s", len(applied), ", ".join(applied))

        project_repo = SQLiteProjectRepository(db, ordered_queries=bool(settings.get("ordered_queries", True)))
        user_repo = SQLiteUserRepository(db)
        ctx = cls(
            settings=settings,
            db=db,
            projects=ProjectService(project_repo),
            auth=AuthService(user_repo, mailer),
        )
        log.info("AppContext initialized with DB=%s", settings["db_path"])
        return ctx

    def close(self) -> None:
        self.db.close()
