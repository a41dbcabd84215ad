from __future__ import annotations

import asyncio


class CancellationToken:
    """Cooperative cancellation flag checked at each await checkpoint."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError()
