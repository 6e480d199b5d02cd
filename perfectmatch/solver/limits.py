"""
Search limits for the Perfect Match solver.

The assignment space grows combinatorially with every matching night.
A SearchGuard is created per solve and aborts the search, with an
exception the engine turns into a reported status, when:
    - the number of live assignments passes a ceiling
    - a wall-clock timeout elapses
    - the caller's cancellation callable returns True
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_MAX_ASSIGNMENTS = 1_000_000

# Cancellation and timeout are polled once per this many search steps
CHECK_INTERVAL = 4096


# =============================================================================
# ERRORS
# =============================================================================

class SearchAborted(Exception):
    """Base class for a search stopped before completion."""

    def __init__(self, reason: str, event_id: Optional[str] = None):
        self.reason = reason
        self.event_id = event_id
        super().__init__(reason)


class SearchLimitExceeded(SearchAborted):
    """Raised when the assignment ceiling is passed."""
    pass


class SearchCancelled(SearchAborted):
    """Raised on timeout or caller cancellation."""
    pass


# =============================================================================
# LIMITS
# =============================================================================

@dataclass(frozen=True)
class SearchLimits:
    """
    Bounds applied to one solve.

    Attributes:
        max_assignments: Ceiling on live assignments (None disables it)
        timeout_seconds: Wall-clock budget (None disables it)
        cancel_requested: Polled during the search; True stops it
    """
    max_assignments: Optional[int] = DEFAULT_MAX_ASSIGNMENTS
    timeout_seconds: Optional[float] = None
    cancel_requested: Optional[Callable[[], bool]] = None

    def start(self) -> SearchGuard:
        """Begin timing a search under these limits."""
        return SearchGuard(self)


UNLIMITED = SearchLimits(max_assignments=None)


class SearchGuard:
    """Enforces SearchLimits for a single search run."""

    def __init__(self, limits: SearchLimits, clock: Callable[[], float] = time.monotonic):
        self.limits = limits
        self._clock = clock
        self._started = clock()
        self._steps = 0

    def check_size(self, size: int, event_id: Optional[str] = None) -> None:
        """
        Raises:
            SearchLimitExceeded: If `size` passes the ceiling
        """
        ceiling = self.limits.max_assignments
        if ceiling is not None and size > ceiling:
            raise SearchLimitExceeded(
                f"Too many possibilities: more than {ceiling} assignments",
                event_id,
            )

    def step(self, event_id: Optional[str] = None) -> None:
        """Count one unit of work and poll cancellation at intervals."""
        self._steps += 1
        if self._steps % CHECK_INTERVAL == 0:
            self.check_cancelled(event_id)

    def check_cancelled(self, event_id: Optional[str] = None) -> None:
        """
        Raises:
            SearchCancelled: If the timeout elapsed or the caller cancelled
        """
        cancel = self.limits.cancel_requested
        if cancel is not None and cancel():
            raise SearchCancelled("Search cancelled by caller", event_id)

        timeout = self.limits.timeout_seconds
        if timeout is not None:
            elapsed = self._clock() - self._started
            if elapsed > timeout:
                raise SearchCancelled(
                    f"Search timed out after {elapsed:.2f}s (limit {timeout}s)",
                    event_id,
                )
