import random
from collections import OrderedDict
from typing import Dict, List, Optional

from timetabler.models.assignment import Assignment, Genome
from timetabler.models.optimizer_config import OptimizerConfig
from timetabler.models.session import Session
from timetabler.utils.placement import PlacementContext


def sessions_by_batch(sessions: List[Session]) -> Dict[str, List[Session]]:
    """Groups sessions by batch id, keeping the order batches first appear in"""
    groups: Dict[str, List[Session]] = OrderedDict()
    for session in sessions:
        groups.setdefault(session.batch.id, []).append(session)
    return groups


def create_individual(groups: Dict[str, List[Session]], total: int, context: PlacementContext,
                      config: OptimizerConfig, rng: random.Random) -> Genome:
    """
    Builds one genome by placing each batch's sessions in small clusters.

    Each batch's sessions are shuffled and cut into clusters of at most
    ``config.cluster_size``. A cluster lands on one random day, on
    consecutive slots starting at a random index that leaves room for the
    cluster plus ``config.min_break`` free slots. Members that would run
    past the last slot are kept on the last slot.

    Args:
        groups: Sessions grouped by batch
        total: Number of sessions (genome length)
        context: Placement vocabulary
        config: Search settings
        rng: Random source

    Returns:
        Genome with one assignment per session, in session index order
    """
    genome: List[Optional[Assignment]] = [None] * total
    last_slot = context.slot_count - 1

    for batch_sessions in groups.values():
        shuffled = list(batch_sessions)
        rng.shuffle(shuffled)

        for start in range(0, len(shuffled), config.cluster_size):
            cluster = shuffled[start:start + config.cluster_size]
            day = context.random_day(rng)
            latest_start = context.slot_count - len(cluster) - config.min_break
            first_slot = rng.randint(0, max(0, latest_start))

            for offset, session in enumerate(cluster):
                genome[session.index] = Assignment(
                    session=session,
                    day=day,
                    slot=min(first_slot + offset, last_slot),
                    faculty_id=context.random_faculty(session.course.id, rng),
                    room_id=context.random_room(rng),
                )

    return genome


def initial_population(sessions: List[Session], context: PlacementContext,
                       config: OptimizerConfig, rng: random.Random) -> List[Genome]:
    """Creates ``config.population_size`` clustered random genomes"""
    groups = sessions_by_batch(sessions)
    return [
        create_individual(groups, len(sessions), context, config, rng)
        for _ in range(config.population_size)
    ]
