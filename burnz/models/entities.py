# Rev 0.2.0
"""Lightweight entities for projects, their embedded milestones and staffing resources.

Dates are ISO ``YYYY-MM-DD`` strings and are only ever compared as ordering keys.
Money is a plain float. None of the soft invariants (unique resource type per
milestone, completed <= total stories, milestone budgets within the project
budget, start <= end) are enforced here.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .types import RESOURCE_TYPES, ResourceType


@dataclass
class Resource:
    type: ResourceType
    quantity: float = 0.0      # hours

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Resource":
        return cls(type=data["type"], quantity=float(data.get("quantity") or 0))


@dataclass
class Milestone:
    id: str
    title: str
    due_date: str
    budget: float = 0.0
    resources: List[Resource] = field(default_factory=list)
    total_stories: int = 0
    completed_stories: int = 0
    is_done: bool = False      # set explicitly, never derived from stories

    @classmethod
    def new(cls, **fields: Any) -> "Milestone":
        """Create a milestone with a fresh client-side id."""
        return cls(id=new_milestone_id(), **fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "due_date": self.due_date,
            "budget": self.budget,
            "resources": [r.to_dict() for r in self.resources],
            "total_stories": self.total_stories,
            "completed_stories": self.completed_stories,
            "is_done": self.is_done,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Milestone":
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            due_date=data.get("due_date") or "",
            budget=float(data.get("budget") or 0),
            resources=[Resource.from_dict(r) for r in data.get("resources") or []],
            total_stories=int(data.get("total_stories") or 0),
            completed_stories=int(data.get("completed_stories") or 0),
            is_done=bool(data.get("is_done", False)),
        )


@dataclass
class Project:
    id: str | None
    title: str
    user_id: str
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    budget: float = 0.0
    hourly_rate: float = 0.0
    milestones: List[Milestone] = field(default_factory=list)
    created_at: Optional[str] = None
    is_owner: bool = False     # derived per fetch, never stored

    @classmethod
    def from_record(cls, rec: Dict[str, Any], milestones: List[Dict[str, Any]], viewer_uid: Optional[str]) -> "Project":
        return cls(
            id=rec["id"],
            title=rec.get("title") or "",
            user_id=rec["user_id"],
            description=rec.get("description") or "",
            start_date=rec.get("start_date") or "",
            end_date=rec.get("end_date") or "",
            budget=float(rec.get("budget") or 0),
            hourly_rate=float(rec.get("hourly_rate") or 0),
            milestones=[Milestone.from_dict(m) for m in milestones],
            created_at=rec.get("created_at"),
            is_owner=viewer_uid is not None and rec["user_id"] == viewer_uid,
        )


@dataclass(frozen=True)
class Identity:
    """Acting user, passed explicitly into every service call."""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "display_name": self.display_name,
            "email_verified": self.email_verified,
        }


def new_milestone_id() -> str:
    return str(uuid.uuid4())


# ---------- resource grid helpers ----------

def blank_resources() -> List[Resource]:
    """One zero-hour entry per resource type, in display order."""
    return [Resource(type=t, quantity=0.0) for t in RESOURCE_TYPES]


def merge_resources(resources: List[Resource]) -> List[Resource]:
    """Expand a stored list onto the full type grid; the first entry of a type wins."""
    out: List[Resource] = []
    for t in RESOURCE_TYPES:
        found = next((r for r in resources if r.type == t), None)
        out.append(Resource(type=t, quantity=found.quantity) if found else Resource(type=t, quantity=0.0))
    return out
