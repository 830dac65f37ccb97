from dataclasses import dataclass, field
from typing import List, Set

MORNING_PREFERENCE = "Morning slots"
AFTERNOON_PREFERENCE = "Afternoon slots"


@dataclass()
class Faculty:
    """
    Represents a faculty member (instructor).

    Attributes:
        id: Unique identifier for the faculty member
        name: Full name (e.g., "Dr. Alice Smith")
        eligible_course_ids: Courses the faculty member is qualified to teach
        max_load: Maximum weekly teaching load in hours
        preferences: Free-form preference tags (e.g., "Morning slots")
    """
    id: str
    name: str
    eligible_course_ids: Set[str] = field(default_factory=set)
    max_load: int = 18
    preferences: List[str] = field(default_factory=list)

    def can_teach(self, course_id: str) -> bool:
        return course_id in self.eligible_course_ids

    @property
    def prefers_morning(self) -> bool:
        return MORNING_PREFERENCE in self.preferences

    @property
    def prefers_afternoon(self) -> bool:
        return AFTERNOON_PREFERENCE in self.preferences
