import os
from typing import Dict, Any, Optional

from timetabler.models.optimizer_config import OptimizerConfig


def get_rabbitmq_config() -> Dict[str, Any]:
    """Get RabbitMQ configuration from environment variables"""
    return {
        "host": os.getenv("RABBITMQ_HOST", "localhost"),
        "port": int(os.getenv("RABBITMQ_PORT", 5672)),
        "vhost": os.getenv("RABBITMQ_VHOST", "/"),
        "username": os.getenv("RABBITMQ_USERNAME", "guest"),
        "password": os.getenv("RABBITMQ_PASSWORD", "guest"),
        "queue_name": os.getenv("RABBITMQ_QUEUE", "timetable_optimization"),
        "heartbeat": int(os.getenv("RABBITMQ_HEARTBEAT", 600)),
        "connection_attempts": int(os.getenv("RABBITMQ_CONNECTION_ATTEMPTS", 3)),
        "retry_delay": int(os.getenv("RABBITMQ_RETRY_DELAY", 5)),
    }


def get_app_config() -> Dict[str, Any]:
    """Get application configuration from environment variables"""
    return {
        "debug": os.getenv("DEBUG", "False").lower() == "true",
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


def get_optimizer_config() -> OptimizerConfig:
    """Get genetic search settings from OPTIMIZER_* environment variables"""
    defaults = OptimizerConfig()
    config = OptimizerConfig(
        population_size=int(os.getenv("OPTIMIZER_POPULATION_SIZE", defaults.population_size)),
        generations=int(os.getenv("OPTIMIZER_GENERATIONS", defaults.generations)),
        runs=int(os.getenv("OPTIMIZER_RUNS", defaults.runs)),
        elite_count=int(os.getenv("OPTIMIZER_ELITE_COUNT", defaults.elite_count)),
        tournament_size=int(os.getenv("OPTIMIZER_TOURNAMENT_SIZE", defaults.tournament_size)),
        mutation_rate=float(os.getenv("OPTIMIZER_MUTATION_RATE", defaults.mutation_rate)),
        min_mutation_rate=float(os.getenv("OPTIMIZER_MIN_MUTATION_RATE", defaults.min_mutation_rate)),
        max_mutation_rate=float(os.getenv("OPTIMIZER_MAX_MUTATION_RATE", defaults.max_mutation_rate)),
        mutation_growth=float(os.getenv("OPTIMIZER_MUTATION_GROWTH", defaults.mutation_growth)),
        mutation_decay=float(os.getenv("OPTIMIZER_MUTATION_DECAY", defaults.mutation_decay)),
        stagnation_window=int(os.getenv("OPTIMIZER_STAGNATION_WINDOW", defaults.stagnation_window)),
        stagnation_threshold=float(
            os.getenv("OPTIMIZER_STAGNATION_THRESHOLD", defaults.stagnation_threshold)
        ),
        cluster_size=int(os.getenv("OPTIMIZER_CLUSTER_SIZE", defaults.cluster_size)),
        min_break=int(os.getenv("OPTIMIZER_MIN_BREAK", defaults.min_break)),
        max_continuous=int(os.getenv("OPTIMIZER_MAX_CONTINUOUS", defaults.max_continuous)),
        base_score=float(os.getenv("OPTIMIZER_BASE_SCORE", defaults.base_score)),
        hard_weight=float(os.getenv("OPTIMIZER_HARD_WEIGHT", defaults.hard_weight)),
        continuous_weight=float(os.getenv("OPTIMIZER_CONTINUOUS_WEIGHT", defaults.continuous_weight)),
        clustering_weight=float(os.getenv("OPTIMIZER_CLUSTERING_WEIGHT", defaults.clustering_weight)),
        distribution_weight=float(
            os.getenv("OPTIMIZER_DISTRIBUTION_WEIGHT", defaults.distribution_weight)
        ),
        gap_weight=float(os.getenv("OPTIMIZER_GAP_WEIGHT", defaults.gap_weight)),
        preference_weight=float(os.getenv("OPTIMIZER_PREFERENCE_WEIGHT", defaults.preference_weight)),
        top_results=int(os.getenv("OPTIMIZER_TOP_RESULTS", defaults.top_results)),
        random_seed=_optional_int("OPTIMIZER_RANDOM_SEED"),
    )
    return config.validate()
