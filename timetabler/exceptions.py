from typing import Any, Dict, Optional


class TimetablerError(Exception):
    """Base class for all optimizer exceptions."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class PreconditionError(TimetablerError):
    """Raised when the input snapshot can not produce a schedule at all."""


class ConfigurationError(TimetablerError):
    """Raised when the optimizer configuration is invalid."""


class OptimizationCancelled(TimetablerError):
    """Raised when the caller declines to resume the search."""

    def __init__(self, progress: float):
        super().__init__(f"Optimization cancelled at {progress:.1f}%", {"progress": progress})
        self.progress = progress
