import random
from dataclasses import replace
from typing import List

from timetabler.models.assignment import Assignment, Genome
from timetabler.utils.placement import PlacementContext

# Chance of inheriting the first parent's gene outright
FIRST_PARENT_RATE = 0.5
# Bias towards the first parent when genes sit in different clusters
FIRST_PARENT_BIAS = 0.7
# Per-field chances once a gene mutates
DAY_CHANGE_RATE = 0.3
ROOM_CHANGE_RATE = 0.5


def tournament_selection(population: List[Genome], scores: List[float], rng: random.Random,
                         tournament_size: int) -> Genome:
    """
    Draws ``tournament_size`` genomes with replacement and returns the fittest.
    Ties go to the first genome drawn.
    """
    best_index = rng.randrange(len(population))
    for _ in range(tournament_size - 1):
        index = rng.randrange(len(population))
        if scores[index] > scores[best_index]:
            best_index = index
    return population[best_index]


def crossover(parent1: Genome, parent2: Genome, rng: random.Random) -> Genome:
    """
    Cluster-aware uniform crossover.

    Half of the genes come straight from the first parent. For the rest, a
    gene of the second parent that keeps the same batch on the same day is
    preferred, so day clusters survive; otherwise the first parent wins
    70% of the time.
    """
    child = []
    for gene1, gene2 in zip(parent1, parent2):
        if rng.random() < FIRST_PARENT_RATE:
            child.append(gene1)
        elif gene1.batch_id == gene2.batch_id and gene1.day == gene2.day:
            child.append(gene2)
        elif rng.random() < FIRST_PARENT_BIAS:
            child.append(gene1)
        else:
            child.append(gene2)
    return child


def mutate_assignment(assignment: Assignment, context: PlacementContext, rng: random.Random) -> Assignment:
    """
    Returns a mutated copy of a gene: new eligible faculty, sometimes a new
    day, a slot at most two positions away and sometimes a new room.
    """
    faculty_id = context.random_faculty(assignment.course_id, rng)
    day = context.random_day(rng) if rng.random() < DAY_CHANGE_RATE else assignment.day
    low, high = context.slot_window(assignment.slot)
    slot = rng.randint(low, high)
    room_id = context.random_room(rng) if rng.random() < ROOM_CHANGE_RATE else assignment.room_id
    return replace(assignment, day=day, slot=slot, faculty_id=faculty_id, room_id=room_id)


def mutate(genome: Genome, mutation_rate: float, context: PlacementContext, rng: random.Random) -> Genome:
    """Mutates each gene with probability ``mutation_rate``; the input genome is left untouched"""
    return [
        mutate_assignment(gene, context, rng) if rng.random() < mutation_rate else gene
        for gene in genome
    ]
