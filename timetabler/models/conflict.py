from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ConflictKind(str, Enum):
    FACULTY_DOUBLE_BOOKED = "FACULTY_DOUBLE_BOOKED"
    ROOM_DOUBLE_BOOKED = "ROOM_DOUBLE_BOOKED"
    BATCH_DOUBLE_BOOKED = "BATCH_DOUBLE_BOOKED"
    FACULTY_UNASSIGNED = "FACULTY_UNASSIGNED"
    ROOM_UNASSIGNED = "ROOM_UNASSIGNED"
    ROOM_CAPACITY = "ROOM_CAPACITY"
    FACULTY_OVERLOAD = "FACULTY_OVERLOAD"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ConflictDetail:
    """
    A hard-constraint violation found in a genome.

    Severity is reporting metadata: every conflict costs the same in the
    fitness function.

    Attributes:
        kind: What was violated
        day: Day of the violation, None for week-level violations
        slot: Slot label of the violation, None for week-level violations
        message: Human readable description
        entity_ids: Ids of the faculty, rooms, batches or sessions involved
        severity: critical / high / medium / low
    """
    kind: ConflictKind
    day: Optional[str]
    slot: Optional[str]
    message: str
    entity_ids: List[str] = field(default_factory=list)
    severity: Severity = Severity.HIGH
