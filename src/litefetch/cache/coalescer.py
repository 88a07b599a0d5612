"""In-flight request de-duplication."""

import asyncio
from collections.abc import Awaitable, Callable

from litefetch.errors import create_error


class RequestCoalescer:
    """Share one pending fetch between concurrent identical requests.

    Waiters await the shared task through ``asyncio.shield``: cancelling a
    waiter abandons only its own wait while the fetch continues for the
    others. The entry is removed as soon as the task settles.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[str]] = {}
        self._coalesced = 0

    def __len__(self) -> int:
        return len(self._in_flight)

    @property
    def coalesced(self) -> int:
        """Number of requests that joined an existing fetch."""
        return self._coalesced

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    async def run(
        self,
        key: str,
        factory: Callable[[], Awaitable[str]],
        url: str | None = None,
    ) -> str:
        """Return the body for ``key``, starting the fetch only if needed.

        Args:
            key: Request fingerprint
            factory: Starts the underlying fetch when nothing is in flight
            url: Request URL for error context

        Returns:
            The shared fetch's body

        Raises:
            asyncio.CancelledError: The calling task was cancelled
            FetchError(FETCH_CANCELLED): The shared fetch was cancelled
                by someone else
            FetchError: Whatever the shared fetch raised
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task
            task.add_done_callback(lambda t: self._settled(key, t))
        else:
            self._coalesced += 1

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            raise create_error("FETCH_CANCELLED", url=url or key) from None

    def _settled(self, key: str, task: "asyncio.Task[str]") -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark the exception retrieved; waiters may all have left
        if not task.cancelled():
            task.exception()

    def cancel_all(self) -> int:
        """Cancel every pending fetch (shutdown). Returns the count."""
        tasks = list(self._in_flight.values())
        for task in tasks:
            task.cancel()
        return len(tasks)

    async def aclose(self) -> None:
        """Cancel every pending fetch and wait for them to settle."""
        tasks = list(self._in_flight.values())
        self.cancel_all()
        await asyncio.gather(*tasks, return_exceptions=True)
