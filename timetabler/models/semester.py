from dataclasses import dataclass, field
from typing import List
from timetabler.models.course import Course


@dataclass()
class Semester:
    """
    Represents one semester of a regulation's curriculum.

    Attributes:
        id: Unique identifier for the semester
        semester_number: Position in the programme (1..8)
        courses: Courses taught in this semester
    """
    id: str
    semester_number: int
    courses: List[Course] = field(default_factory=list)
