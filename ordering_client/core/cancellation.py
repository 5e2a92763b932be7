"""
Cooperative cancellation for catalog loads.

A new load supersedes the previous one: the session cancels the old token
and hands a fresh one to the new load. Loads check the token after every
suspension point and discard their results once it has been cancelled.
"""

import logging

logger = logging.getLogger(__name__)


class LoadCancelled(Exception):
    """Raised inside a load whose token was cancelled."""


class CancellationToken:
    """Flag shared between the party that starts a load and the load itself."""

    def __init__(self, label: str = "load"):
        self.label = label
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if not self._cancelled:
            logger.debug(f"Cancelling {self.label}")
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise LoadCancelled(self.label)

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"CancellationToken({self.label!r}, {state})"
