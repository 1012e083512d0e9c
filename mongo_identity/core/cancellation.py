"""
Cooperative cancellation for store operations.

A CancellationToken is handed to every store call. A token cancelled before
the call starts aborts it before any I/O; a token cancelled while a driver
call is in flight cancels the task awaiting the driver.
"""
import asyncio
from typing import Any, Awaitable, Optional, TypeVar

from mongo_identity.core.exceptions import OperationCancelledError

T = TypeVar("T")


class CancellationToken:
    """Cancellation signal shared between a caller and store operations."""

    def __init__(self) -> None:
        self._cancelled = False
        self._event: Optional[asyncio.Event] = None

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Safe to call more than once."""
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancellation_requested(self) -> None:
        if self._cancelled:
            raise OperationCancelledError()

    def _get_event(self) -> asyncio.Event:
        # Created lazily so the token can be built outside a running loop
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await a driver call, abandoning it if the token is cancelled first.

        Args:
            awaitable: Coroutine or future performing the driver call

        Returns:
            The result of the awaitable

        Raises:
            OperationCancelledError: If the token was or becomes cancelled
        """
        if self._cancelled:
            # Never started, close it to avoid "never awaited" warnings
            close = getattr(awaitable, "close", None)
            if close is not None:
                close()
            raise OperationCancelledError()

        task: asyncio.Future[Any] = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._get_event().wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except BaseException:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        raise OperationCancelledError()


async def run_cancellable(
    awaitable: Awaitable[T],
    cancellation_token: Optional[CancellationToken] = None,
) -> T:
    """Await a driver call under an optional cancellation token."""
    if cancellation_token is None:
        return await awaitable
    return await cancellation_token.run(awaitable)
