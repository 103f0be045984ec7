"""Fetch session and cancellation primitives."""

import asyncio
from dataclasses import dataclass


class FetchCancelledError(Exception):
    """Raised by a fetch function that observed its cancellation signal.

    The executor treats it as intentional abandonment, never as a
    failure, so it is not surfaced through QueryState.error.
    """

    pass


class CancellationSignal:
    """One-shot cancellation flag shared by a fetch and its sessions.

    Fetch functions can poll ``cancelled``, call ``raise_if_cancelled()``
    between steps, or ``await wait()`` to race it against their I/O.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """Whether the signal has been triggered."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Why the signal was triggered, if it was."""
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Trigger the signal. Calling it again keeps the first reason."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> None:
        """Block until the signal is triggered."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        """Raise FetchCancelledError if the signal has been triggered."""
        if self.cancelled:
            raise FetchCancelledError(self._reason)

    def __repr__(self) -> str:
        state = f"cancelled={self._reason!r}" if self.cancelled else "active"
        return f"<CancellationSignal {state}>"


@dataclass(frozen=True)
class FetchContext:
    """Argument passed to every fetch function."""

    key: str
    signal: CancellationSignal


@dataclass(frozen=True)
class FetchSession:
    """Token for one subscription's claim on an in-flight fetch.

    A session may only mutate its subscription's state while ``epoch``
    is still the subscription's current epoch.

    ``background`` marks a revalidation of data the subscription already
    shows; its failures are logged as warnings rather than errors.
    """

    key: str
    epoch: int
    signal: CancellationSignal
    background: bool = False
