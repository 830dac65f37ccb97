from dataclasses import replace

import pytest

from timetabler.models.academic_period import AcademicPeriods
from timetabler.models.optimizer_config import OptimizerConfig
from timetabler.services.results import build_result, individual_to_timetable, quality_metrics, rank_results
from timetabler.utils.costs import evaluate
from timetabler.utils.placement import DAYS, PlacementContext
from timetabler.utils.sessions import materialize_sessions


def _genome(sessions, place):
    # b1 on Monday, b2 on Tuesday, mb1 on Wednesday, consecutive from slot 0
    genome = []
    next_slot = {}
    faculty_for = {"c1": "f1", "c2": "f2", "m1": "f4"}
    day_for = {"b1": "Monday", "b2": "Tuesday", "mb1": "Wednesday"}
    for session in sessions:
        slot = next_slot.get(session.batch.id, 0)
        next_slot[session.batch.id] = slot + 1
        genome.append(place(session, day=day_for[session.batch.id], slot=slot,
                            faculty_id=faculty_for[session.course.id]))
    return genome


def test_timetable_has_every_day_and_slot(sessions, context, place):
    timetable = individual_to_timetable(_genome(sessions, place), context)

    assert list(timetable) == list(DAYS)
    for slots in timetable.values():
        assert list(slots) == context.slots
    assert [a.session.id for a in timetable["Monday"]["09:00-10:00"]] == [sessions[0].id]
    assert timetable["Friday"]["16:00-17:00"] == []


def test_timetable_holds_each_assignment_once(sessions, context, place):
    genome = _genome(sessions, place)
    timetable = individual_to_timetable(genome, context)

    placed = [a for slots in timetable.values() for cell in slots.values() for a in cell]
    assert sorted(a.session.id for a in placed) == sorted(a.session.id for a in genome)


def test_utilization_rate(sessions, context, place):
    genome = _genome(sessions, place)
    metrics = quality_metrics(genome, evaluate(genome, context, OptimizerConfig()), context)

    # 12 classes over 5 days x 6 slots x 3 rooms
    assert metrics.utilization_rate == pytest.approx(12 / 90 * 100)


def test_utilization_is_capped(make_input, place):
    one_slot = AcademicPeriods(periods=[("09:00", "10:00")], lunch_period=None)
    data = make_input(course_hours=(8,), periods=one_slot)
    context = PlacementContext(data)
    genome = [place(s, day="Monday", slot=0) for s in materialize_sessions(data)]

    metrics = quality_metrics(genome, evaluate(genome, context, OptimizerConfig()), context)
    assert metrics.utilization_rate == 100.0


def test_scores_invert_penalties(sessions, context, place):
    genome = _genome(sessions, place)
    breakdown = evaluate(genome, context, OptimizerConfig())
    metrics = quality_metrics(genome, breakdown, context)

    assert metrics.clustering_score == 100.0
    assert metrics.distribution_score == max(0.0, 100.0 - 10 * breakdown.distribution)
    assert metrics.conflict_count == 0
    assert metrics.student_gaps == 0

    heavy = replace(breakdown, clustering=250, distribution=50.0)
    floored = quality_metrics(genome, heavy, context)
    assert floored.clustering_score == 0.0
    assert floored.distribution_score == 0.0


def test_faculty_balance_uses_every_faculty_member(sessions, context, place):
    genome = _genome(sessions, place)
    metrics = quality_metrics(genome, evaluate(genome, context, OptimizerConfig()), context)

    # loads f1=6, f2=4, f3=0, f4=2: mean 3, variance (9 + 1 + 9 + 1) / 4
    assert metrics.faculty_balance == pytest.approx(95.0)


def test_build_result(sessions, context, place):
    genome = _genome(sessions, place)
    breakdown = evaluate(genome, context, OptimizerConfig())
    result = build_result(2, genome, breakdown, context)

    assert result.id == 2
    assert result.name == "Optimized Schedule 2"
    assert result.score == breakdown.fitness
    assert result.conflicts == []
    assert result.needs_review is False


def test_rank_results_orders_and_truncates(sessions, context, place):
    genome = _genome(sessions, place)
    breakdown = evaluate(genome, context, OptimizerConfig())
    results = [
        replace(build_result(run, genome, breakdown, context), score=score)
        for run, score in [(1, 10.0), (2, 30.0), (3, 30.0), (4, 20.0)]
    ]

    ranked = rank_results(results, 3)
    assert [r.id for r in ranked] == [2, 3, 4]
    assert rank_results(results, 10) == sorted(results, key=lambda r: r.score, reverse=True)
