# burnZ type definitions
# Rev 0.1.0

from __future__ import annotations
from typing import Literal, Tuple

# Fixed staffing categories; order is the form/chart display order
ResourceType = Literal["Developer", "PM", "QA", "Design", "Devops", "Content"]

RESOURCE_TYPES: Tuple[ResourceType, ...] = ("Developer", "PM", "QA", "Design", "Devops", "Content")

# Milestone form modes
FormMode = Literal["new", "edit"]
