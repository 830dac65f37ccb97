from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Period = Tuple[str, str]

DEFAULT_PERIODS: List[Period] = [
    ("09:00", "10:00"),
    ("10:00", "11:00"),
    ("11:00", "12:00"),
    ("12:00", "13:00"),
    ("14:00", "15:00"),
    ("15:00", "16:00"),
    ("16:00", "17:00"),
]
DEFAULT_LUNCH_PERIOD: Period = ("12:00", "13:00")

NOON_MINUTES = 12 * 60


def to_minutes(value: str) -> int:
    """Converts "H:MM" or "HH:MM" to minutes after midnight"""
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


def period_label(period: Period) -> str:
    return f"{period[0]}-{period[1]}"


@dataclass()
class AcademicPeriods:
    """
    The institution's daily period grid.

    Only the non-lunch periods can hold classes; their order defines the
    slot indices used by every assignment.

    Attributes:
        periods: Ordered (start, end) pairs covering the teaching day
        lunch_period: The (start, end) pair excluded from scheduling
    """
    periods: List[Period] = field(default_factory=lambda: list(DEFAULT_PERIODS))
    lunch_period: Optional[Period] = DEFAULT_LUNCH_PERIOD

    def _is_lunch(self, period: Period) -> bool:
        if self.lunch_period is None:
            return False
        return (to_minutes(period[0]), to_minutes(period[1])) == (
            to_minutes(self.lunch_period[0]),
            to_minutes(self.lunch_period[1]),
        )

    @property
    def schedulable_periods(self) -> List[Period]:
        return [p for p in self.periods if not self._is_lunch(p)]

    @property
    def slot_labels(self) -> List[str]:
        """Labels of the schedulable slots, e.g. ["09:00-10:00", ...]"""
        return [period_label(p) for p in self.schedulable_periods]

    @property
    def morning_flags(self) -> List[bool]:
        """For each schedulable slot, whether it falls before lunch"""
        if self.lunch_period is not None:
            boundary = to_minutes(self.lunch_period[0])
        else:
            boundary = NOON_MINUTES
        return [to_minutes(p[0]) < boundary for p in self.schedulable_periods]
