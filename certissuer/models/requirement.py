from __future__ import annotations

from dataclasses import dataclass

MAX_ACTIVITIES = 10


@dataclass(frozen=True, slots=True)
class RequirementRecord:
    """Per-type configuration: effort hours, activities, validity window."""

    certification_type: str
    required_hours: int
    required_activities: tuple[str, ...]
    validity_days: int
