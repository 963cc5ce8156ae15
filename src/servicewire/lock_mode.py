from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for container registration and first resolution.

    The container is designed for a single writer. Pick ``THREAD`` when one
    container is shared between threads and callers do not serialize ``add``
    and first-time ``get`` calls themselves.
    """

    THREAD = "thread"
    """Guard registration and uncached resolution with ``threading.RLock``."""

    NONE = "none"
    """Disable locking; callers serialize concurrent writers externally."""
