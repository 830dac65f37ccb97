from collections import defaultdict
from typing import List

from timetabler.models.assignment import Genome
from timetabler.models.optimization_result import OptimizationResult, QualityMetrics, Timetable
from timetabler.utils.costs import FitnessBreakdown
from timetabler.utils.placement import PlacementContext

# Distribution penalty is scaled before being turned into a 0-100 score
DISTRIBUTION_SCALE = 10.0


def individual_to_timetable(genome: Genome, context: PlacementContext) -> Timetable:
    """Day -> slot label -> assignments, with every day and slot present"""
    timetable: Timetable = {day: {slot: [] for slot in context.slots} for day in context.days}
    for assignment in genome:
        timetable[assignment.day][context.slots[assignment.slot]].append(assignment)
    return timetable


def _variance(values: List[int]) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return sum((value - mean) ** 2 for value in values) / len(values)


def quality_metrics(genome: Genome, breakdown: FitnessBreakdown, context: PlacementContext) -> QualityMetrics:
    """
    Derives the reported quality figures of a genome.

    Clustering and distribution scores invert their penalties onto a 0-100
    scale; utilization is placed classes over day x slot x room capacity.
    """
    capacity = len(context.days) * context.slot_count * len(context.room_ids)
    utilization = 0.0
    if capacity:
        utilization = min(100.0, len(genome) / capacity * 100)

    load = defaultdict(int)
    for assignment in genome:
        if assignment.faculty_id is not None:
            load[assignment.faculty_id] += 1
    loads = [load[faculty_id] for faculty_id in context.faculty]

    return QualityMetrics(
        clustering_score=max(0.0, 100.0 - breakdown.clustering),
        distribution_score=max(0.0, 100.0 - breakdown.distribution * DISTRIBUTION_SCALE),
        conflict_count=breakdown.hard_conflicts,
        utilization_rate=utilization,
        faculty_balance=max(0.0, 100.0 - _variance(loads)),
        student_gaps=breakdown.gaps,
    )


def build_result(run_number: int, genome: Genome, breakdown: FitnessBreakdown,
                 context: PlacementContext) -> OptimizationResult:
    """Turns the best genome of a run into an OptimizationResult"""
    return OptimizationResult(
        id=run_number,
        name=f"Optimized Schedule {run_number}",
        timetable=individual_to_timetable(genome, context),
        score=breakdown.fitness,
        conflicts=list(breakdown.conflicts),
        metrics=quality_metrics(genome, breakdown, context),
    )


def rank_results(results: List[OptimizationResult], top: int) -> List[OptimizationResult]:
    """Best score first, at most ``top`` results; ties keep run order"""
    return sorted(results, key=lambda result: result.score, reverse=True)[:top]
