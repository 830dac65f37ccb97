from dataclasses import dataclass, field
from typing import List, Optional
from timetabler.models.semester import Semester


@dataclass()
class Regulation:
    """
    Represents an academic regulation (curriculum version) of a department.

    Batches admitted under the same regulation follow the same semesters
    and courses.

    Attributes:
        id: Unique identifier for the regulation
        name: Display name (e.g., "R2024")
        year: Year the regulation came into force
        semesters: Ordered semesters of the curriculum
    """
    id: str
    name: str
    year: int
    semesters: List[Semester] = field(default_factory=list)

    def semester(self, semester_number: int) -> Optional[Semester]:
        """Returns the semester with the given number, or None"""
        for semester in self.semesters:
            if semester.semester_number == semester_number:
                return semester
        return None
