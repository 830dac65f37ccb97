from dataclasses import dataclass


@dataclass()
class Batch:
    """
    Represents a batch of students that attend classes together.

    Attributes:
        id: Unique identifier for the batch
        name: Display name (e.g., "CSE-2024-A")
        regulation_id: Regulation the batch was admitted under
        student_count: Number of students in the batch
    """
    id: str
    name: str
    regulation_id: str
    student_count: int
