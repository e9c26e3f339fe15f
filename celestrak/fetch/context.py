"""Cancellation and deadlines for fetch calls."""

import threading
import time

from celestrak.errors import ContextError


class FetchContext:
    """Caller-supplied cancellation signal with an optional deadline.

    A context is shared between the caller and one or more fetch calls.
    Any thread may call :meth:`cancel`; the fetch engine checks the context
    before every attempt, while streaming response bodies, and while
    waiting between retries.
    """

    def __init__(self, deadline: float | None = None) -> None:
        """Initialize the context.

        Args:
            deadline: Absolute ``time.monotonic()`` deadline, or None.
        """
        self._deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "FetchContext":
        """Context that is never done unless cancelled."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "FetchContext":
        """Context whose deadline expires after ``seconds``."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        """Absolute monotonic deadline, if any."""
        return self._deadline

    def cancel(self) -> None:
        """Cancel the context. Idempotent."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """True once :meth:`cancel` has been called."""
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        """True once the deadline has passed."""
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        """True if cancelled or expired."""
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left until the deadline.

        Returns:
            Non-negative seconds, or None without a deadline.
        """
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def err(self) -> ContextError | None:
        """Describe why the context is done.

        Returns:
            ContextError if done, None otherwise.
        """
        if self.cancelled:
            return ContextError("context canceled")
        if self.expired:
            return ContextError("context deadline exceeded", deadline_exceeded=True)
        return None

    def wait(self, seconds: float) -> bool:
        """Sleep for ``seconds`` unless the context finishes first.

        Args:
            seconds: Time to wait.

        Returns:
            True if the context is done, False if the full wait elapsed.
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._cancelled.wait(remaining)
            return True
        return self._cancelled.wait(seconds)
