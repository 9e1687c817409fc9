# tests/test_calculations.py
from __future__ import annotations

import pytest

from burnz.models.entities import Milestone, Project, Resource
from burnz.services.calculations import (
    is_over_budget,
    milestone_burn,
    milestone_summary,
    project_burn,
    project_story_totals,
    project_summary,
    resource_cost_breakdown,
    sort_milestones_by_due_date,
    story_progress,
)


def _ms(mid: str, due: str, resources, **kw) -> Milestone:
    return Milestone(id=mid, title=mid.upper(), due_date=due, resources=resources, **kw)


# --- burn ------------------------------------------------------------------

def test_milestone_burn_sums_quantity_times_rate():
    resources = [Resource("Developer", 10), Resource("QA", 5), Resource("PM", 2.5)]
    assert milestone_burn(resources, 40) == pytest.approx(10 * 40 + 5 * 40 + 2.5 * 40)


@pytest.mark.parametrize("rate", [0, 1, 50, 123.45])
def test_milestone_burn_empty_is_zero(rate):
    assert milestone_burn([], rate) == 0


def test_milestone_burn_passes_negative_inputs_through():
    assert milestone_burn([Resource("Developer", -2)], 10) == -20
    assert milestone_burn([Resource("Developer", 2)], -10) == -20


def test_project_burn_uses_single_rate_across_milestones():
    ms = [
        _ms("a", "2024-01-01", [Resource("Developer", 10), Resource("QA", 5)]),
        _ms("b", "2024-02-01", [Resource("Developer", 10)]),
    ]
    assert project_burn(ms, 50) == 1250
    assert project_burn(ms, 50) == sum(milestone_burn(m.resources, 50) for m in ms)


def test_project_burn_empty_is_zero():
    assert project_burn([], 80) == 0


# --- progress ----------------------------------------------------------------

@pytest.mark.parametrize(
    "completed,total,expected",
    [
        (0, 0, 0),
        (5, 10, 50),
        (12, 10, 100),   # overrun is clamped, not corrected
        (0, 5, 0),
        (1, 3, 100 / 3),
    ],
)
def test_story_progress(completed, total, expected):
    assert story_progress(completed, total) == pytest.approx(expected)


def test_project_story_totals():
    ms = [
        _ms("a", "2024-01-01", [], total_stories=4, completed_stories=1),
        _ms("b", "2024-01-02", [], total_stories=6, completed_stories=9),
    ]
    assert project_story_totals(ms) == (10, 10)


# --- budget ------------------------------------------------------------------

def test_over_budget_is_strict():
    assert is_over_budget(100, 100) is False
    assert is_over_budget(100.01, 100) is True
    assert is_over_budget(99.99, 100) is False


def test_project_and_milestone_budgets_are_checked_independently():
    # each milestone blows its own budget while the project total stays inside
    project = Project(
        id="p1", title="P", user_id="u", budget=10_000, hourly_rate=10,
        milestones=[
            _ms("a", "2024-01-01", [Resource("Developer", 20)], budget=100),
            _ms("b", "2024-01-02", [Resource("QA", 20)], budget=100),
        ],
    )
    summary = project_summary(project)
    assert summary["burn"] == 400
    assert summary["is_over_budget"] is False
    assert all(milestone_summary(m, project.hourly_rate)["is_over_budget"] for m in project.milestones)


# --- ordering & chart --------------------------------------------------------

def test_sort_milestones_by_due_date_is_stable():
    ms = [
        _ms("late", "2024-03-01", []),
        _ms("first", "2024-01-01", []),
        _ms("tie-a", "2024-02-01", []),
        _ms("tie-b", "2024-02-01", []),
    ]
    assert [m.id for m in sort_milestones_by_due_date(ms)] == ["first", "tie-a", "tie-b", "late"]


def test_resource_cost_breakdown():
    ms = [
        _ms("b", "2024-02-01", [Resource("QA", 2)]),
        _ms("a", "2024-01-01", [Resource("Developer", 10), Resource("Developer", 99)]),
    ]
    chart = resource_cost_breakdown(ms, 50)
    assert chart["labels"] == ["A", "B"]
    assert list(chart["series"]) == ["Developer", "PM", "QA", "Design", "Devops", "Content"]
    # first entry of a duplicated type is the one charted
    assert chart["series"]["Developer"] == [500, 0]
    assert chart["series"]["QA"] == [0, 100]
    assert chart["series"]["Content"] == [0, 0]


def test_milestone_summary_rounds_progress_half_up():
    m = _ms("a", "2024-01-01", [Resource("PM", 1)], budget=5, total_stories=8, completed_stories=1)
    s = milestone_summary(m, 10)
    assert s["burn"] == 10
    assert s["is_over_budget"] is True
    assert s["progress"] == pytest.approx(12.5)
    assert s["progress_rounded"] == 13
    assert s["id"] == "a"
