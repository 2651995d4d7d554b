"""
Error types for Grafana organization sync.

Transport failures are not wrapped: they surface as
``requests.exceptions.RequestException`` from the API layer.
"""

import threading
from typing import Optional


class SyncError(Exception):
    """Base class for reconciliation errors."""


class AuthenticationError(SyncError):
    """Raised when the identity backend does not hand out an access token."""


class ParallelFetchError(SyncError):
    """Raised when at least one item of a fanned-out fetch failed."""

    def __init__(self, failed: int, total: int, operation: str = "fetch"):
        self.failed = failed
        self.total = total
        self.operation = operation
        super().__init__(f"Could not {operation}: {failed} of {total} requests failed")


class DashboardValidationError(SyncError, ValueError):
    """Raised when a dashboard document does not have the expected shape."""


class ReconcileInterrupted(SyncError):
    """Raised when cancellation was requested during a pass."""

    def __init__(self, message: str = "interrupted"):
        super().__init__(message)


def check_interrupted(stop_event: Optional[threading.Event]) -> None:
    """
    Raise ReconcileInterrupted if the stop event is set.

    Args:
        stop_event: Cancellation signal shared with the poll loop (may be None)

    Raises:
        ReconcileInterrupted: If cancellation was requested
    """
    if stop_event is not None and stop_event.is_set():
        raise ReconcileInterrupted()
