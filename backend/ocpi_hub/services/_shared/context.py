"""
Per-call cancellation and deadline carrier forwarded to every directory call.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from ocpi_hub.services._shared.errors import OperationCanceled, OperationTimeout


@dataclass(slots=True)
class CallContext:
    """
    Carry an optional deadline and a cancellation flag for one operation.

    :param deadline: Absolute :func:`time.monotonic` instant after which
        directory calls fail with :class:`OperationTimeout`; ``None`` disables it.
    :type deadline: float | None
    :param cancel_event: Event set by the caller to abandon the operation.
    :type cancel_event: threading.Event
    """

    deadline: float | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def with_timeout(cls, seconds: float | None) -> CallContext:
        """Build a context expiring ``seconds`` from now (``None``/``<=0`` → no deadline)."""
        if not seconds or seconds <= 0:
            return cls()
        return cls(deadline=time.monotonic() + float(seconds))

    @classmethod
    def background(cls) -> CallContext:
        """Return a context that never expires and is never cancelled."""
        return cls()

    def cancel(self) -> None:
        """Signal cancellation to every call sharing this context."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, ``None`` when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_done(self) -> None:
        """
        Abort when the operation was cancelled or ran past its deadline.

        :raises OperationCanceled: If :meth:`cancel` was called.
        :raises OperationTimeout: If the deadline has elapsed.
        """
        if self.cancel_event.is_set():
            raise OperationCanceled()
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise OperationTimeout()


def ensure_context(ctx: CallContext | None) -> CallContext:
    """Return ``ctx`` or a background context when the caller passed none."""
    return ctx if ctx is not None else CallContext.background()
