from __future__ import annotations


class OffsetTreeError(Exception):
    """Base class for offset tree errors."""


class ConfigurationConflict(OffsetTreeError, ValueError):
    """Raised when an initialized tree is asked to rebuild with another leaf count."""

    def __init__(self, requested: int, current: int) -> None:
        self.requested = requested
        self.current = current
        super().__init__(
            f"Tree already initialized. New leaf node count ({requested}) "
            f"does not equal current value ({current})."
        )


class OutOfMemory(OffsetTreeError, MemoryError):
    """Raised when node storage for the tree cannot be allocated."""

    def __init__(self, leaf_count: int, reason: str = "") -> None:
        self.leaf_count = leaf_count
        message = f"Unable to allocate memory for offset tree. Label count: {leaf_count}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
