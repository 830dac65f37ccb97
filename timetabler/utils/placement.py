import random
from typing import Dict, List, Optional, Tuple

from timetabler.models.faculty import Faculty
from timetabler.models.optimizer_input import OptimizerInput
from timetabler.models.room import Room

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

# Maximum distance a mutation moves a gene along the slot list
SLOT_SHIFT = 2


class PlacementContext:
    """
    Day/slot vocabulary and eligibility lookups shared by the initializer,
    the mutation operator and the fitness evaluator.

    Built once per optimization from read-only reference data.
    """

    def __init__(self, data: OptimizerInput):
        self.days: List[str] = list(DAYS)
        self.slots: List[str] = data.periods.slot_labels
        self.morning: List[bool] = data.periods.morning_flags
        self.faculty: Dict[str, Faculty] = data.faculty_by_id
        self.rooms: Dict[str, Room] = data.rooms_by_id
        self.room_ids: List[str] = [room.id for room in data.rooms]
        self._eligible: Dict[str, List[str]] = {}
        self._faculty_order: List[Faculty] = data.faculty

    @property
    def slot_count(self) -> int:
        return len(self.slots)

    def eligible_faculty(self, course_id: str) -> List[str]:
        """Ids of faculty qualified for the course, in input order"""
        if course_id not in self._eligible:
            self._eligible[course_id] = [
                member.id for member in self._faculty_order if member.can_teach(course_id)
            ]
        return self._eligible[course_id]

    def random_faculty(self, course_id: str, rng: random.Random) -> Optional[str]:
        eligible = self.eligible_faculty(course_id)
        if not eligible:
            return None
        return rng.choice(eligible)

    def random_room(self, rng: random.Random) -> Optional[str]:
        if not self.room_ids:
            return None
        return rng.choice(self.room_ids)

    def random_day(self, rng: random.Random) -> str:
        return rng.choice(self.days)

    def slot_window(self, slot: int, radius: int = SLOT_SHIFT) -> Tuple[int, int]:
        """Inclusive range of slot indices within ``radius`` of ``slot``"""
        low = max(0, slot - radius)
        high = min(self.slot_count - 1, slot + radius)
        return low, high

    def is_morning(self, slot: int) -> bool:
        return self.morning[slot]
