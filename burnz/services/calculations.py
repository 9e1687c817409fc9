# Rev 0.2.0
"""Burn and progress figures derived from a project's milestones.

Pure functions; nothing here is persisted. Negative inputs are not rejected and
flow straight through the arithmetic.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from burnz.models.entities import Milestone, Project, Resource
from burnz.models.types import RESOURCE_TYPES
from burnz.utils.formatters import round_half_up


def milestone_burn(resources: Iterable[Resource], hourly_rate: float) -> float:
    return sum((r.quantity * hourly_rate for r in resources), 0.0)


def project_burn(milestones: Iterable[Milestone], hourly_rate: float) -> float:
    """Single project-wide rate for every milestone."""
    return sum((milestone_burn(m.resources, hourly_rate) for m in milestones), 0.0)


def story_progress(completed: int, total: int) -> float:
    """Percent complete, 0 when total is 0, capped at 100 (overruns are masked, not fixed)."""
    pct = completed / total * 100 if total > 0 else 0.0
    return min(pct, 100.0)


def is_over_budget(burn: float, budget: float) -> bool:
    return burn > budget


def sort_milestones_by_due_date(milestones: Sequence[Milestone]) -> List[Milestone]:
    return sorted(milestones, key=lambda m: m.due_date)


def project_story_totals(milestones: Iterable[Milestone]) -> Tuple[int, int]:
    completed = total = 0
    for m in milestones:
        completed += m.completed_stories
        total += m.total_stories
    return completed, total


def resource_cost_breakdown(milestones: Sequence[Milestone], hourly_rate: float) -> Dict[str, Any]:
    """
    Stacked-chart data, milestones in due-date order:
      {"labels": [title, ...], "series": {type: [cost per milestone, ...]}}
    """
    ordered = sort_milestones_by_due_date(milestones)
    series: Dict[str, List[float]] = {}
    for rtype in RESOURCE_TYPES:
        row = []
        for m in ordered:
            found = next((r for r in m.resources if r.type == rtype), None)
            row.append(found.quantity * hourly_rate if found else 0.0)
        series[rtype] = row
    return {"labels": [m.title for m in ordered], "series": series}


def milestone_summary(milestone: Milestone, hourly_rate: float) -> Dict[str, Any]:
    burn = milestone_burn(milestone.resources, hourly_rate)
    progress = story_progress(milestone.completed_stories, milestone.total_stories)
    return {
        **milestone.to_dict(),
        "burn": burn,
        "is_over_budget": is_over_budget(burn, milestone.budget),
        "progress": progress,
        "progress_rounded": round_half_up(progress),
    }


def project_summary(project: Project) -> Dict[str, Any]:
    """Card-level figures. Project and milestone budget checks are independent."""
    burn = project_burn(project.milestones, project.hourly_rate)
    completed, total = project_story_totals(project.milestones)
    progress = story_progress(completed, total)
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "start_date": project.start_date,
        "end_date": project.end_date,
        "budget": project.budget,
        "hourly_rate": project.hourly_rate,
        "user_id": project.user_id,
        "is_owner": project.is_owner,
        "burn": burn,
        "is_over_budget": is_over_budget(burn, project.budget),
        "completed_stories": completed,
        "total_stories": total,
        "progress": progress,
        "progress_rounded": round_half_up(progress),
        "milestone_count": len(project.milestones),
    }
