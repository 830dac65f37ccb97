from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List
from timetabler.models.assignment import Assignment
from timetabler.models.conflict import ConflictDetail

# day -> slot label -> assignments held in that slot
Timetable = Dict[str, Dict[str, List[Assignment]]]


@dataclass(frozen=True)
class QualityMetrics:
    clustering_score: float
    distribution_score: float
    conflict_count: int
    utilization_rate: float
    faculty_balance: float
    student_gaps: int


@dataclass(frozen=True)
class OptimizationResult:
    """
    The best schedule found by one independent run.

    Attributes:
        id: Run number (1-based)
        name: Display name
        timetable: Day -> slot -> assignments
        score: Fitness of the genome
        conflicts: Hard-constraint violations left in the genome
        metrics: Derived quality figures
        created_at: Creation time, ignored by equality
    """
    id: int
    name: str
    timetable: Timetable
    score: float
    conflicts: List[ConflictDetail]
    metrics: QualityMetrics
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    @property
    def needs_review(self) -> bool:
        return bool(self.conflicts)
