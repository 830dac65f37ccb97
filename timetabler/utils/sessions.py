import logging
from typing import List

from timetabler.models.optimizer_input import OptimizerInput
from timetabler.models.session import Session

logger = logging.getLogger(__name__)


def materialize_sessions(data: OptimizerInput) -> List[Session]:
    """
    Expands the curriculum of the target semester into weekly sessions.

    For every batch the regulation is resolved inside its department, then
    the semester matching ``data.target_semester``, then every course of
    that semester; each course contributes one session per weekly hour.
    Batches whose regulation or semester can not be resolved contribute
    nothing.

    The returned order (departments -> batches -> courses -> hours) fixes
    the genome indexing of the whole run.

    Args:
        data: Optimizer input snapshot

    Returns:
        Sessions, ``sessions[i].index == i``
    """
    sessions: List[Session] = []

    for department in data.departments:
        for batch in department.batches:
            regulation = department.regulation(batch.regulation_id)
            if regulation is None:
                logger.warning(
                    f"Batch {batch.id} references unknown regulation {batch.regulation_id}, skipping"
                )
                continue

            semester = regulation.semester(data.target_semester)
            if semester is None:
                logger.debug(
                    f"Regulation {regulation.id} has no semester {data.target_semester}, "
                    f"batch {batch.id} skipped"
                )
                continue

            for course in semester.courses:
                for hour in range(int(course.weekly_hours)):
                    sessions.append(
                        Session(
                            index=len(sessions),
                            course=course,
                            batch=batch,
                            department_id=department.id,
                            hour=hour,
                        )
                    )

    return sessions
