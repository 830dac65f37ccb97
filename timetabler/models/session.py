from dataclasses import dataclass
from timetabler.models.batch import Batch
from timetabler.models.course import Course


@dataclass(frozen=True)
class Session:
    """
    One required weekly teaching hour of a course for a batch.

    A course with weekly_hours = 3 produces three sessions per batch.
    Sessions never change once materialized; ``index`` is the position of
    the session's gene in every genome of the run.

    Attributes:
        index: Genome position of this session
        course: Course being taught
        batch: Batch attending the session
        department_id: Department owning the batch
        hour: Which of the course's weekly hours this is (0-based)
    """
    index: int
    course: Course
    batch: Batch
    department_id: str
    hour: int = 0

    @property
    def id(self) -> str:
        return f"{self.batch.id}:{self.course.id}:{self.hour}"
