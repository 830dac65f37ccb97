import logging

from timetabler.models.optimization_result import OptimizationResult

logger = logging.getLogger(__name__)


def show_timetable(result: OptimizationResult, level: int = logging.DEBUG):
    """
    Logs the timetable of a result as a grid, one line per day.

    Args:
        result: Optimization result to display
        level: Logging level of the emitted lines
    """
    if not logger.isEnabledFor(level):
        return

    for day, slots in result.timetable.items():
        cells = []
        for slot, assignments in slots.items():
            names = ",".join(a.session.course.code or a.course_id for a in assignments) or "-"
            cells.append(f"{slot} {names}")
        logger.log(level, "{:10s} | {}".format(day, " | ".join(cells)))


def show_statistics(result: OptimizationResult, level: int = logging.INFO):
    """
    Logs the score, metrics and conflicts of a result.

    Args:
        result: Optimization result to display
        level: Logging level of the emitted lines
    """
    metrics = result.metrics
    if metrics.conflict_count == 0:
        logger.log(level, f"{result.name}: hard constraints satisfied, score {result.score:.2f}")
    else:
        logger.log(level, f"{result.name}: {metrics.conflict_count} conflicts, score {result.score:.2f}")

    logger.log(level, f"  Clustering score: {metrics.clustering_score:.2f}")
    logger.log(level, f"  Distribution score: {metrics.distribution_score:.2f}")
    logger.log(level, f"  Utilization: {metrics.utilization_rate:.2f}%")
    logger.log(level, f"  Faculty balance: {metrics.faculty_balance:.2f}")
    logger.log(level, f"  Student gaps: {metrics.student_gaps}")

    for conflict in result.conflicts:
        logger.log(level, f"  [{conflict.severity.value}] {conflict.kind.value}: {conflict.message}")
