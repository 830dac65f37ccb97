from dataclasses import dataclass, field
from typing import List, Optional
from timetabler.models.batch import Batch
from timetabler.models.faculty import Faculty
from timetabler.models.regulation import Regulation


@dataclass()
class Department:
    """
    Represents an academic department and everything it owns.

    Attributes:
        id: Unique identifier for the department
        name: Department name (e.g., "Computer Science")
        code: Short code (e.g., "CSE")
        regulations: Curriculum versions, each with semesters and courses
        batches: Student batches, each bound to one regulation
        faculty: Faculty members of the department
    """
    id: str
    name: str
    code: str = ""
    regulations: List[Regulation] = field(default_factory=list)
    batches: List[Batch] = field(default_factory=list)
    faculty: List[Faculty] = field(default_factory=list)

    def regulation(self, regulation_id: str) -> Optional[Regulation]:
        """Returns the regulation with the given id, or None"""
        for regulation in self.regulations:
            if regulation.id == regulation_id:
                return regulation
        return None
