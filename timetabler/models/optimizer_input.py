from dataclasses import dataclass, field
from typing import Dict, List
from timetabler.models.academic_period import AcademicPeriods
from timetabler.models.department import Department
from timetabler.models.faculty import Faculty
from timetabler.models.room import Room


@dataclass()
class OptimizerInput:
    """
    Snapshot of everything the optimizer needs, supplied by the
    data-management layer.

    The optimizer only reads this structure; it is shared by every
    candidate evaluation of a run.

    Attributes:
        departments: Departments with regulations, batches and faculty
        rooms: Every room that can host a class
        target_semester: Semester number to build the timetable for
        periods: Daily period grid and the lunch period to skip
    """
    departments: List[Department]
    rooms: List[Room]
    target_semester: int
    periods: AcademicPeriods = field(default_factory=AcademicPeriods)

    @property
    def faculty(self) -> List[Faculty]:
        """All faculty members across departments, in department order"""
        return [member for department in self.departments for member in department.faculty]

    @property
    def rooms_by_id(self) -> Dict[str, Room]:
        return {room.id: room for room in self.rooms}

    @property
    def faculty_by_id(self) -> Dict[str, Faculty]:
        return {member.id: member for member in self.faculty}
