from dataclasses import dataclass
from typing import List, Optional
from timetabler.models.session import Session


@dataclass(frozen=True)
class Assignment:
    """
    A session placed in the week (one gene of a genome).

    Assignments are immutable: operators build a new assignment with
    ``dataclasses.replace`` and put it back at the same genome index.

    Attributes:
        session: The session being placed
        day: Weekday name (Monday..Friday)
        slot: Index into the schedulable slot list
        faculty_id: Assigned faculty member, None when nobody is eligible
        room_id: Assigned room, None when unassigned
    """
    session: Session
    day: str
    slot: int
    faculty_id: Optional[str] = None
    room_id: Optional[str] = None

    @property
    def batch_id(self) -> str:
        return self.session.batch.id

    @property
    def course_id(self) -> str:
        return self.session.course.id


# A genome: position i always holds the assignment of session i
Genome = List[Assignment]
