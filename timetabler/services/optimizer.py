import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Generator, Iterator, List, Optional, Tuple

from timetabler.exceptions import OptimizationCancelled, PreconditionError
from timetabler.models.assignment import Genome
from timetabler.models.optimization_result import OptimizationResult
from timetabler.models.optimizer_config import OptimizerConfig
from timetabler.models.optimizer_input import OptimizerInput
from timetabler.models.session import Session
from timetabler.services.operators import crossover, mutate, tournament_selection
from timetabler.services.population import initial_population
from timetabler.services.results import build_result, rank_results
from timetabler.utils.costs import FitnessBreakdown, evaluate
from timetabler.utils.placement import PlacementContext
from timetabler.utils.sessions import materialize_sessions
from timetabler.utils.utils import show_statistics, show_timetable

logger = logging.getLogger(__name__)

# Receives the progress percentage; returning False stops the search
ProgressCallback = Callable[[float], Optional[bool]]


@dataclass
class SearchState:
    """
    Mutable state of one independent run.

    Attributes:
        mutation_rate: Current per-gene mutation probability
        best_history: Best fitness of every generation so far
    """
    mutation_rate: float
    best_history: List[float] = field(default_factory=list)

    def record(self, best_fitness: float, config: OptimizerConfig):
        """
        Stores the generation's best fitness and adapts the mutation rate:
        it grows while the best fitness stagnates over the trailing window
        and decays while the search improves.
        """
        self.best_history.append(best_fitness)

        window = config.stagnation_window
        if len(self.best_history) <= window:
            return

        improvement = self.best_history[-1] - self.best_history[-1 - window]
        if improvement < config.stagnation_threshold:
            self.mutation_rate = min(config.max_mutation_rate, self.mutation_rate * config.mutation_growth)
        else:
            self.mutation_rate = max(config.min_mutation_rate, self.mutation_rate * config.mutation_decay)


def best_index(scores: List[float]) -> int:
    """Index of the highest score, the first one on ties"""
    best = 0
    for i in range(1, len(scores)):
        if scores[i] > scores[best]:
            best = i
    return best


class EvolutionController:
    """
    Runs the genetic search: independent restarts, each evolving a fresh
    population for a fixed number of generations.

    ``steps()`` is a generator that suspends once per generation with the
    overall progress percentage, and once more with 100 when every run is
    done; the ranked results are then available on ``results``.
    """

    def __init__(self, data: OptimizerInput, config: Optional[OptimizerConfig] = None,
                 rng: Optional[random.Random] = None):
        self.data = data
        self.config = (config or OptimizerConfig()).validate()
        self.rng = rng if rng is not None else random.Random(self.config.random_seed)
        self.context = PlacementContext(data)
        self.sessions: List[Session] = []
        self.results: List[OptimizationResult] = []

    def check_preconditions(self) -> List[Session]:
        """
        Materializes the sessions and verifies the search can start.

        Raises:
            PreconditionError: no sessions, no eligible faculty, no rooms or no slots
        """
        sessions = materialize_sessions(self.data)
        if not sessions:
            raise PreconditionError(
                f"No sessions to schedule for semester {self.data.target_semester}",
                {"target_semester": self.data.target_semester},
            )

        course_ids = {session.course.id for session in sessions}
        if not any(self.context.eligible_faculty(course_id) for course_id in course_ids):
            raise PreconditionError(
                "No faculty member is eligible for any course to schedule",
                {"courses": sorted(course_ids)},
            )

        if not self.context.room_ids:
            raise PreconditionError("No rooms available")

        if self.context.slot_count == 0:
            raise PreconditionError("No schedulable periods outside the lunch break")

        return sessions

    def fitness(self, genome: Genome) -> FitnessBreakdown:
        return evaluate(genome, self.context, self.config)

    def steps(self) -> Iterator[float]:
        """Executes every run, yielding the progress percentage at each suspension point"""
        self.sessions = self.check_preconditions()
        self.results = []

        logger.info(
            f"Optimizing {len(self.sessions)} sessions, {len(self.context.faculty)} faculty, "
            f"{len(self.context.room_ids)} rooms, {self.context.slot_count} slots per day"
        )

        run_results = []
        for run in range(self.config.runs):
            logger.info(f"Run {run + 1}/{self.config.runs} | mutation rate = {self.config.mutation_rate:.4f}")
            genome, breakdown = yield from self._evolve(run)

            result = build_result(run + 1, genome, breakdown, self.context)
            show_statistics(result)
            show_timetable(result)
            run_results.append(result)

        self.results = rank_results(run_results, self.config.top_results)
        yield 100.0

    def _progress(self, run: int, generation: int) -> float:
        total = self.config.runs * self.config.generations
        return 100.0 * (run * self.config.generations + generation) / total

    def _evolve(self, run: int) -> Generator[float, None, Tuple[Genome, FitnessBreakdown]]:
        """One independent run; returns the best genome of the final population"""
        state = SearchState(mutation_rate=self.config.mutation_rate)
        population = initial_population(self.sessions, self.context, self.config, self.rng)

        for generation in range(self.config.generations):
            scores = [self.fitness(genome).fitness for genome in population]
            best = scores[best_index(scores)]
            state.record(best, self.config)
            logger.debug(
                f"Run {run + 1} generation {generation:4d} | best fitness {best:.2f} | "
                f"mutation rate {state.mutation_rate:.4f}"
            )

            population = self._next_generation(population, scores, state)
            yield self._progress(run, generation)

        breakdowns = [self.fitness(genome) for genome in population]
        winner = best_index([breakdown.fitness for breakdown in breakdowns])
        logger.info(
            f"Run {run + 1} finished | fitness {breakdowns[winner].fitness:.2f} | "
            f"conflicts {breakdowns[winner].hard_conflicts}"
        )
        return population[winner], breakdowns[winner]

    def _next_generation(self, population: List[Genome], scores: List[float],
                         state: SearchState) -> List[Genome]:
        """Elitism, then tournament selection, crossover and mutation until the population is full"""
        ranked = sorted(range(len(population)), key=lambda i: scores[i], reverse=True)
        next_population = [population[i] for i in ranked[:self.config.elite_count]]

        while len(next_population) < self.config.population_size:
            parent1 = tournament_selection(population, scores, self.rng, self.config.tournament_size)
            parent2 = tournament_selection(population, scores, self.rng, self.config.tournament_size)
            child = crossover(parent1, parent2, self.rng)
            next_population.append(mutate(child, state.mutation_rate, self.context, self.rng))

        return next_population


def optimize_timetable(data: OptimizerInput, config: Optional[OptimizerConfig] = None,
                       progress_callback: Optional[ProgressCallback] = None,
                       rng: Optional[random.Random] = None) -> List[OptimizationResult]:
    """
    Main function to optimize the timetable using the genetic algorithm.

    Args:
        data: Optimizer input snapshot
        config: Search settings, defaults when omitted
        progress_callback: Called with the progress percentage once per
            generation and with 100 at the end; returning False cancels
        rng: Random source, seeded from ``config.random_seed`` when omitted

    Returns:
        Results ranked by score, best first

    Raises:
        PreconditionError: the input can not produce a schedule
        OptimizationCancelled: the callback asked to stop
    """
    controller = EvolutionController(data, config, rng)
    for progress in controller.steps():
        if progress_callback is not None and progress_callback(progress) is False:
            raise OptimizationCancelled(progress)
    return controller.results


async def optimize_timetable_async(data: OptimizerInput, config: Optional[OptimizerConfig] = None,
                                   progress_callback: Optional[ProgressCallback] = None,
                                   rng: Optional[random.Random] = None) -> List[OptimizationResult]:
    """
    Same as ``optimize_timetable`` but hands control back to the event loop
    after every generation so other tasks keep running.
    """
    controller = EvolutionController(data, config, rng)
    for progress in controller.steps():
        if progress_callback is not None and progress_callback(progress) is False:
            raise OptimizationCancelled(progress)
        await asyncio.sleep(0)
    return controller.results
