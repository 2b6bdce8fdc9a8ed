"""Execution context passed to tool handlers.

A ToolContext carries cancellation and an optional deadline for a single tool
call. The registry never imposes timeouts itself; handlers that perform I/O
wrap their awaitables with ``context.run()`` so that a cancelled or expired
context makes them return promptly.

Example:
    ```python
    async def fetch_handler(args, context):
        async with aiohttp.ClientSession() as session:
            return await context.run(_fetch(session, args["url"]))
    ```
"""

import asyncio
import time
from typing import Any, Awaitable, Optional, TypeVar

from toolhub.core.errors import ToolCancelledError, ToolTimeoutError

T = TypeVar("T")


class ToolContext:
    """Cancellation and deadline for one tool call.

    Attributes:
        request_id: Optional identifier of the request that triggered the call
        timeout: Optional number of seconds the call may take
    """

    def __init__(self, request_id: Optional[str] = None, timeout: Optional[float] = None) -> None:
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be non-negative")
        self.request_id = request_id
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = asyncio.Event()

    def cancel(self) -> None:
        """Signal cancellation to the handler."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the context is cancelled or past its deadline.

        Raises:
            ToolCancelledError: If cancel() was called
            ToolTimeoutError: If the deadline passed
        """
        if self.cancelled:
            raise ToolCancelledError("Tool call was cancelled")
        if self.expired:
            raise ToolTimeoutError(f"Tool call timed out after {self.timeout} seconds")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the context is cancelled or expires first.

        The inner work is cancelled when the context loses the race.

        Raises:
            ToolCancelledError: If the context is cancelled first
            ToolTimeoutError: If the deadline passes first
        """
        self.check()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        self.check()
        raise ToolTimeoutError(f"Tool call timed out after {self.timeout} seconds")

    def __repr__(self) -> str:
        return (
            f"ToolContext(request_id={self.request_id!r}, timeout={self.timeout!r}, "
            f"cancelled={self.cancelled})"
        )
