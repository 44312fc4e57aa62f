"""Cooperative cancellation at the transport-call boundary."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, TypeVar

from .errors import ExtractionFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """A one-shot flag a caller sets to abandon in-flight requests."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ExtractionFailure.cancelled()


async def run_cancellable(call: Awaitable[T], cancel: CancelToken | None = None) -> T:
    """Await *call*, abandoning it as soon as *cancel* is set.

    Raises:
        ExtractionFailure: with kind ``CANCELLED`` if the token fired first.
    """
    if cancel is None:
        return await call
    if cancel.cancelled:
        if asyncio.iscoroutine(call):
            call.close()
        raise ExtractionFailure.cancelled()

    task = asyncio.ensure_future(call)
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {task, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()

    if task in done:
        return task.result()

    with contextlib.suppress(asyncio.CancelledError):
        await task
    logger.info("Request cancelled before the AI service replied")
    raise ExtractionFailure.cancelled()
