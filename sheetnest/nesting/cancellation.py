"""Cooperative cancellation for long nesting runs."""

import threading

from sheetnest.errors import Cancelled


class CancellationToken:
    """
    Flag checked by the optimizer once per part and by the packer once per
    rectangle. Safe to set from another thread.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "nesting") -> None:
        """Raise Cancelled if cancellation was requested."""
        if self._event.is_set():
            raise Cancelled(f"{stage} cancelled")
