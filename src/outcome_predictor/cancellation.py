from __future__ import annotations

import threading
from typing import Optional

from outcome_predictor.errors import CancellationRequested


class CancellationToken:
    """
    Cooperative cancellation flag for one request.

    Work never stops mid-mutation: components call `check(stage)` only at
    safe points (before a cache commit, before a repository write, between
    pipeline stages).
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self, stage: str = "") -> None:
        """Raise CancellationRequested if cancel() has been called."""
        if self._event.is_set():
            raise CancellationRequested(stage)


def check_cancelled(token: Optional[CancellationToken], stage: str) -> None:
    """No-op when the caller passed no token."""
    if token is not None:
        token.check(stage)
