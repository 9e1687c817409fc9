# Rev 0.2.0
"""
Developer seed: a demo account and one project with two staffed milestones.
Prints the resulting burn figures.

Usage:
    python -m burnz.tools.dev_seed [--db PATH]
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from burnz.app_context import AppContext
from burnz.models.entities import Milestone, Resource
from burnz.services.calculations import is_over_budget, milestone_burn, project_burn
from burnz.services.errors import InvalidCredentialsError
from burnz.utils.formatters import format_currency
from burnz.utils.config import load_settings
from burnz.utils.logging_setup import setup_logging
from burnz.utils.paths import DB_PATH

DEMO_EMAIL = "demo@burnz.local"
DEMO_PASSWORD = "demo-password"


def run_seed(db_path: Path) -> str:
    ctx = AppContext.create(db_path)
    try:
        try:
            ctx.auth.sign_in(DEMO_EMAIL, DEMO_PASSWORD)
        except InvalidCredentialsError:
            ctx.auth.sign_up(DEMO_EMAIL, DEMO_PASSWORD, "Demo User")
        me = ctx.auth.current

        print("=== Creating demo project ===")
        pid = ctx.projects.create_project(me, {
            "title": "Website relaunch",
            "description": "Seeded by burnz.tools.dev_seed",
            "start_date": "2024-01-08",
            "end_date": "2024-06-28",
            "budget": 1000.0,
            "hourly_rate": 50.0,
        })
        ctx.projects.add_milestone(me, pid, Milestone.new(
            title="Discovery", due_date="2024-02-15", budget=800.0,
            resources=[Resource("Developer", 10), Resource("QA", 5)],
            total_stories=8, completed_stories=3,
        ))
        ctx.projects.add_milestone(me, pid, Milestone.new(
            title="Build", due_date="2024-05-01", budget=400.0,
            resources=[Resource("Developer", 10)],
            total_stories=20,
        ))

        project = ctx.projects.get_project(me, pid)
        for m in project.milestones:
            burn = milestone_burn(m.resources, project.hourly_rate)
            flag = " (over budget)" if is_over_budget(burn, m.budget) else ""
            print(f"  {m.title}: {format_currency(burn)} of {format_currency(m.budget)}{flag}")
        total = project_burn(project.milestones, project.hourly_rate)
        print(f"Project burn {format_currency(total)} of {format_currency(project.budget)}")
        return pid
    finally:
        ctx.close()


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Seed a demo project into the burnZ database.")
    p.add_argument("--db", type=Path, default=DB_PATH, help="Path to SQLite database (default: %(default)s or $BURNZ_DB)")
    ns = p.parse_args(argv)
    setup_logging(level_name=load_settings()["log_level"])
    run_seed(ns.db)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
