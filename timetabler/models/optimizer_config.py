from dataclasses import dataclass
from typing import Optional
from timetabler.exceptions import ConfigurationError


@dataclass()
class OptimizerConfig:
    """
    Tuning knobs of the genetic search.

    Attributes:
        population_size: Genomes evaluated together every generation
        generations: Generations per independent run
        runs: Independent restarts, each with a fresh population
        elite_count: Best genomes copied unchanged into the next generation
        tournament_size: Genomes drawn (with replacement) per selection
        mutation_rate: Per-gene mutation probability at the start of a run
        min_mutation_rate: Floor the rate decays towards while improving
        max_mutation_rate: Cap the rate grows towards while stagnating
        mutation_growth: Multiplier applied on stagnation
        mutation_decay: Multiplier applied on improvement
        stagnation_window: Generations compared to detect stagnation
        stagnation_threshold: Minimum best-fitness gain over the window
        cluster_size: Preferred number of back-to-back sessions at init
        min_break: Slots of headroom reserved after each initial cluster
        max_continuous: Longest run of back-to-back classes not penalized
        base_score: Fitness of a genome with no penalty at all
        hard_weight: Cost of one hard conflict
        continuous_weight: Cost of one class beyond max_continuous
        clustering_weight: Cost of one clustering penalty point
        distribution_weight: Cost of one unit of daily-load variance
        gap_weight: Cost of one free slot between classes
        preference_weight: Cost of one slot against faculty preference
        top_results: Results kept after ranking
        random_seed: Seed for the random source, None for OS entropy
    """
    population_size: int = 50
    generations: int = 100
    runs: int = 3
    elite_count: int = 5
    tournament_size: int = 7

    mutation_rate: float = 0.05
    min_mutation_rate: float = 0.02
    max_mutation_rate: float = 0.1
    mutation_growth: float = 1.2
    mutation_decay: float = 0.95
    stagnation_window: int = 10
    stagnation_threshold: float = 1.0

    cluster_size: int = 3
    min_break: int = 1
    max_continuous: int = 2

    base_score: float = 100000.0
    hard_weight: float = 1000.0
    continuous_weight: float = 50.0
    clustering_weight: float = 10.0
    distribution_weight: float = 20.0
    gap_weight: float = 30.0
    preference_weight: float = 5.0

    top_results: int = 3
    random_seed: Optional[int] = None

    def validate(self) -> "OptimizerConfig":
        """Raises ConfigurationError for settings the search can not run with"""
        if self.population_size <= 0:
            raise ConfigurationError("population_size must be positive")
        if self.generations < 0:
            raise ConfigurationError("generations can not be negative")
        if self.runs <= 0:
            raise ConfigurationError("runs must be positive")
        if not 0 <= self.elite_count <= self.population_size:
            raise ConfigurationError("elite_count must be between 0 and population_size")
        if self.tournament_size <= 0:
            raise ConfigurationError("tournament_size must be positive")
        if self.cluster_size <= 0:
            raise ConfigurationError("cluster_size must be positive")
        if self.min_mutation_rate > self.max_mutation_rate:
            raise ConfigurationError(
                "min_mutation_rate can not exceed max_mutation_rate",
                {"min": self.min_mutation_rate, "max": self.max_mutation_rate},
            )
        if self.top_results <= 0:
            raise ConfigurationError("top_results must be positive")
        return self
