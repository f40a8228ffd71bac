"""Per-subject history storage."""

from recovery_intel.storage.history import BoundedHistoryStore

__all__ = ["BoundedHistoryStore"]
