"""Fan-out/fan-in helper for running a batch of awaitables together."""

import asyncio
import logging
from typing import Awaitable, Generic, Optional, TypeVar

logger = logging.getLogger("lightweave.utils.future")

T = TypeVar("T")


class FutureBatch(Generic[T]):
    """
    A batch of awaitables that run concurrently and are joined together.

    Submissions are expected to absorb their own errors. If one raises
    anyway, the batch still waits for every other submission before
    re-raising the first exception.

    Usage:
        batch: FutureBatch[list[Light]] = FutureBatch()
        batch.push(fetch_a())
        batch.push(fetch_b())
        results = await batch.run()  # [result_a, result_b]
    """

    def __init__(self):
        self._pending: list[Awaitable[T]] = []

    def __len__(self) -> int:
        return len(self._pending)

    def push(self, awaitable: Awaitable[T]) -> None:
        self._pending.append(awaitable)

    async def run(self) -> list[T]:
        """
        Run all pending submissions and return their results in submission order.

        The batch is empty afterwards.
        """
        pending, self._pending = self._pending, []
        if not pending:
            return []

        outcomes = await asyncio.gather(*pending, return_exceptions=True)

        first_error: Optional[BaseException] = None
        results: list[T] = []
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Batch submission %d/%d raised %s: %s",
                    index + 1, len(outcomes), type(outcome).__name__, outcome,
                )
                if first_error is None:
                    first_error = outcome
                continue
            results.append(outcome)

        if first_error is not None:
            raise first_error
        return results
