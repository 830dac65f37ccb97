from dataclasses import dataclass
from typing import Optional


@dataclass
class Room:
    """
    Represents a physical classroom or lab.

    Attributes:
        id: Unique identifier for the room
        name: Display name (e.g., "LH-101")
        capacity: Maximum number of students that fit
        type: Kind of space (e.g., "Classroom", "Lab")
        building: Building the room is located in
    """
    id: str
    name: str
    capacity: int
    type: str = "Classroom"
    building: Optional[str] = None
