from dataclasses import dataclass
from typing import Optional


@dataclass()
class Course:
    """
    Represents a course taught in one semester of a regulation.

    Attributes:
        id: Unique identifier for the course
        code: Short code (e.g., "CSE101")
        name: Course name (e.g., "Programming Fundamentals")
        weekly_hours: Number of one-hour sessions required every week
        department_id: Owning department, when known
    """
    id: str
    code: str
    name: str
    weekly_hours: int
    department_id: Optional[str] = None
