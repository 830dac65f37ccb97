from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from timetabler.models.assignment import Genome
from timetabler.models.conflict import ConflictDetail, ConflictKind, Severity
from timetabler.models.optimizer_config import OptimizerConfig
from timetabler.utils.placement import PlacementContext


def batch_day_slots(genome: Genome) -> Dict[str, Dict[str, List[int]]]:
    """
    Collects the slot indices every batch uses on every day.
    :param genome: list of assignments
    :return: dictionary batch id -> day -> sorted slot indices
    """
    slots = defaultdict(lambda: defaultdict(list))
    for assignment in genome:
        slots[assignment.batch_id][assignment.day].append(assignment.slot)

    for days in slots.values():
        for times in days.values():
            times.sort()
    return slots


def _internal_gaps(times: List[int]) -> int:
    gaps = 0
    for i in range(1, len(times)):
        diff = times[i] - times[i - 1]
        if diff > 1:
            gaps += diff - 1
    return gaps


def continuous_classes_penalty(slots: Dict[str, Dict[str, List[int]]], max_continuous: int) -> int:
    """
    Counts classes beyond the allowed number of back-to-back classes.
    A run is a sequence of slot indices that differ by at most one; every
    run longer than max_continuous adds its excess length.
    :param slots: batch id -> day -> sorted slot indices
    :param max_continuous: longest run that is not penalized
    :return: total excess
    """
    penalty = 0
    for days in slots.values():
        for times in days.values():
            if not times:
                continue
            run = 1
            for i in range(1, len(times)):
                if times[i] - times[i - 1] <= 1:
                    run += 1
                else:
                    if run > max_continuous:
                        penalty += run - max_continuous
                    run = 1
            # trailing run
            if run > max_continuous:
                penalty += run - max_continuous
    return penalty


def clustering_penalty(slots: Dict[str, Dict[str, List[int]]]) -> int:
    """
    Penalizes scattered classes: the free slots between a batch's classes on
    a day, multiplied by the number of classes that day.
    :param slots: batch id -> day -> sorted slot indices
    :return: total clustering penalty
    """
    penalty = 0
    for days in slots.values():
        for times in days.values():
            penalty += _internal_gaps(times) * len(times)
    return penalty


def gap_penalty(slots: Dict[str, Dict[str, List[int]]]) -> int:
    """
    Total number of free slots between classes for all batches and days.
    :param slots: batch id -> day -> sorted slot indices
    :return: total gaps
    """
    cost = 0
    for days in slots.values():
        for times in days.values():
            cost += _internal_gaps(times)
    return cost


def distribution_penalty(slots: Dict[str, Dict[str, List[int]]], days: List[str]) -> float:
    """
    Sum over batches of the variance of their daily class counts.
    :param slots: batch id -> day -> sorted slot indices
    :param days: ordered day names
    :return: summed population variance
    """
    if not days:
        return 0.0

    penalty = 0.0
    for per_day in slots.values():
        counts = [len(per_day.get(day, [])) for day in days]
        mean = sum(counts) / len(counts)
        penalty += sum((count - mean) ** 2 for count in counts) / len(counts)
    return penalty


def preference_penalty(genome: Genome, context: PlacementContext) -> int:
    """Assignments placed against their faculty member's morning/afternoon preference"""
    cost = 0
    for assignment in genome:
        if assignment.faculty_id is None:
            continue
        member = context.faculty.get(assignment.faculty_id)
        if member is None:
            continue
        morning = context.is_morning(assignment.slot)
        if (member.prefers_morning and not morning) or (member.prefers_afternoon and morning):
            cost += 1
    return cost


def detect_conflicts(genome: Genome, context: PlacementContext) -> List[ConflictDetail]:
    """
    Finds every hard-constraint violation of a genome:
    - Each faculty member teaches at most one class at a time
    - Each room holds at most one class at a time
    - Each batch attends at most one class at a time
    - Every class has a faculty member and a room
    - The room fits the batch
    - No faculty member exceeds their weekly load

    Args:
        genome: Assignments to check
        context: Placement vocabulary and reference data

    Returns:
        List of ConflictDetail, one entry per violation
    """
    conflicts: List[ConflictDetail] = []

    by_time = defaultdict(list)
    for assignment in genome:
        by_time[(assignment.day, assignment.slot)].append(assignment)

    # Double bookings, in day/slot order so reports are stable
    day_order = {day: i for i, day in enumerate(context.days)}
    for (day, slot) in sorted(by_time, key=lambda key: (day_order.get(key[0], len(day_order)), key[1])):
        group = by_time[(day, slot)]
        if len(group) < 2:
            continue
        label = _slot_label(context, slot)

        by_faculty = defaultdict(list)
        by_room = defaultdict(list)
        by_batch = defaultdict(list)
        for assignment in group:
            if assignment.faculty_id is not None:
                by_faculty[assignment.faculty_id].append(assignment)
            if assignment.room_id is not None:
                by_room[assignment.room_id].append(assignment)
            by_batch[assignment.batch_id].append(assignment)

        for faculty_id, members in by_faculty.items():
            if len(members) > 1:
                conflicts.append(ConflictDetail(
                    kind=ConflictKind.FACULTY_DOUBLE_BOOKED,
                    day=day,
                    slot=label,
                    message=f"Faculty {faculty_id} has {len(members)} classes on {day} at {label}",
                    entity_ids=[faculty_id] + [m.session.id for m in members],
                    severity=Severity.CRITICAL,
                ))
        for room_id, members in by_room.items():
            if len(members) > 1:
                conflicts.append(ConflictDetail(
                    kind=ConflictKind.ROOM_DOUBLE_BOOKED,
                    day=day,
                    slot=label,
                    message=f"Room {room_id} hosts {len(members)} classes on {day} at {label}",
                    entity_ids=[room_id] + [m.session.id for m in members],
                    severity=Severity.CRITICAL,
                ))
        for batch_id, members in by_batch.items():
            if len(members) > 1:
                conflicts.append(ConflictDetail(
                    kind=ConflictKind.BATCH_DOUBLE_BOOKED,
                    day=day,
                    slot=label,
                    message=f"Batch {batch_id} attends {len(members)} classes on {day} at {label}",
                    entity_ids=[batch_id] + [m.session.id for m in members],
                    severity=Severity.CRITICAL,
                ))

    # Per-assignment checks
    load = defaultdict(int)
    for assignment in genome:
        label = _slot_label(context, assignment.slot)
        batch = assignment.session.batch

        if assignment.faculty_id is None:
            conflicts.append(ConflictDetail(
                kind=ConflictKind.FACULTY_UNASSIGNED,
                day=assignment.day,
                slot=label,
                message=f"No faculty assigned to {assignment.session.course.code or assignment.course_id} "
                        f"for batch {batch.name}",
                entity_ids=[assignment.session.id],
                severity=Severity.HIGH,
            ))
        else:
            load[assignment.faculty_id] += 1

        if assignment.room_id is None:
            conflicts.append(ConflictDetail(
                kind=ConflictKind.ROOM_UNASSIGNED,
                day=assignment.day,
                slot=label,
                message=f"No room assigned to {assignment.session.course.code or assignment.course_id} "
                        f"for batch {batch.name}",
                entity_ids=[assignment.session.id],
                severity=Severity.HIGH,
            ))
            continue

        room = context.rooms.get(assignment.room_id)
        if room is not None and room.capacity < batch.student_count:
            conflicts.append(ConflictDetail(
                kind=ConflictKind.ROOM_CAPACITY,
                day=assignment.day,
                slot=label,
                message=f"Room {room.name} ({room.capacity} seats) is too small for "
                        f"batch {batch.name} ({batch.student_count} students)",
                entity_ids=[room.id, batch.id, assignment.session.id],
                severity=Severity.HIGH,
            ))

    # Weekly workload
    for faculty_id, hours in load.items():
        member = context.faculty.get(faculty_id)
        if member is not None and hours > member.max_load:
            conflicts.append(ConflictDetail(
                kind=ConflictKind.FACULTY_OVERLOAD,
                day=None,
                slot=None,
                message=f"Faculty {member.name} teaches {hours} hours, above the limit of {member.max_load}",
                entity_ids=[faculty_id],
                severity=Severity.MEDIUM,
            ))

    return conflicts


def _slot_label(context: PlacementContext, slot: int) -> str:
    if 0 <= slot < context.slot_count:
        return context.slots[slot]
    return str(slot)


@dataclass
class FitnessBreakdown:
    """Every penalty term of a genome, plus the resulting fitness"""
    conflicts: List[ConflictDetail] = field(default_factory=list)
    continuous: int = 0
    clustering: int = 0
    distribution: float = 0.0
    gaps: int = 0
    preference: int = 0
    fitness: float = 0.0

    @property
    def hard_conflicts(self) -> int:
        return len(self.conflicts)


def evaluate(genome: Genome, context: PlacementContext, config: OptimizerConfig) -> FitnessBreakdown:
    """
    Scores a genome: base score minus weighted penalties, floored at zero.
    Every hard conflict costs the same regardless of its severity.
    """
    slots = batch_day_slots(genome)
    breakdown = FitnessBreakdown(
        conflicts=detect_conflicts(genome, context),
        continuous=continuous_classes_penalty(slots, config.max_continuous),
        clustering=clustering_penalty(slots),
        distribution=distribution_penalty(slots, context.days),
        gaps=gap_penalty(slots),
        preference=preference_penalty(genome, context),
    )

    penalty = (
        config.hard_weight * breakdown.hard_conflicts
        + config.continuous_weight * breakdown.continuous
        + config.clustering_weight * breakdown.clustering
        + config.distribution_weight * breakdown.distribution
        + config.gap_weight * breakdown.gaps
        + config.preference_weight * breakdown.preference
    )
    breakdown.fitness = max(0.0, config.base_score - penalty)
    return breakdown


def fitness_score(genome: Genome, context: PlacementContext, config: Optional[OptimizerConfig] = None) -> float:
    """Fitness of a genome, higher is better, never negative"""
    return evaluate(genome, context, config or OptimizerConfig()).fitness
