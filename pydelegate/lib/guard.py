"""Reentrancy guard: at most one dispatch runs on a delegate at any time."""

from __future__ import annotations

import enum
from contextlib import contextmanager
from typing import Callable, Iterator

from pydelegate.lib.errors import DelegateError, DelegateErrorType


class DispatchState(enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"


class DispatchGuard:
    """Tracks whether a delegate is dispatching and rejects nested dispatches.

    Delegates run on a single thread (optionally inside one asyncio event loop),
    so the check-and-set in ``acquire`` needs no lock.
    """

    def __init__(self) -> None:
        self.state = DispatchState.IDLE

    @property
    def is_dispatching(self) -> bool:
        return self.state is DispatchState.DISPATCHING

    def acquire(self) -> None:
        """Enter the dispatching state.

        Raises:
            DelegateError: RECURSIVE_CALL if a dispatch is already in progress.
        """
        if self.is_dispatching:
            raise DelegateError(
                "Recursion on a Delegate is not allowed", DelegateErrorType.RECURSIVE_CALL
            )
        self.state = DispatchState.DISPATCHING

    def release(self) -> None:
        self.state = DispatchState.IDLE

    @contextmanager
    def hold(self, on_release: Callable[[], object] | None = None) -> Iterator[None]:
        """Acquire for the duration of the block, releasing on every exit path.

        ``on_release`` runs right after the state returns to idle, whether the
        block finished or raised. It does not run when the acquire itself fails.
        """
        self.acquire()
        try:
            yield
        finally:
            self.release()
            if on_release is not None:
                on_release()
