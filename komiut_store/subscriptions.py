"""Live query subscriptions.

A subscription pairs a query with the tables it reads. Every committed
write reports the tables it touched to the registry, which re-runs the
query of each subscription depending on one of them and queues the
fresh result. Nothing polls; results are pushed from the writer's task.
"""

import asyncio
import logging
from collections import defaultdict
from typing import AsyncIterator, Awaitable, Callable, Generic, Iterable, TypeVar

from komiut_store.common.exceptions import SubscriptionClosed

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class _Failure:
    __slots__ = ("error",)

    def __init__(self, error: BaseException):
        self.error = error


class Subscription(Generic[T]):
    """Stream of query results, starting with the value at creation time.

    Results are queued without limit so no update is dropped. Iterate with
    ``async for`` or call ``get()``; stop with ``cancel()`` or by leaving an
    ``async with`` block.
    """

    def __init__(
        self,
        registry: "SubscriptionRegistry",
        tables: frozenset[str],
        fetch: Callable[[], Awaitable[T]],
    ):
        self.tables = tables
        self._registry = registry
        self._fetch = fetch
        self._queue: asyncio.Queue = asyncio.Queue()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def refresh(self) -> None:
        """Re-run the query and queue the result (or the error it raised)."""
        if self._cancelled:
            return
        try:
            value = await self._fetch()
        except Exception as exc:
            # handed to the consumer on its next get()
            self._queue.put_nowait(_Failure(exc))
        else:
            if not self._cancelled:
                self._queue.put_nowait(value)

    async def get(self) -> T:
        if self._cancelled:
            raise SubscriptionClosed()
        item = await self._queue.get()
        if item is _CLOSED:
            raise SubscriptionClosed()
        if isinstance(item, _Failure):
            raise item.error
        return item

    def pending(self) -> int:
        """Number of results queued and not yet consumed."""
        return self._queue.qsize()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._registry.discard(self)
        # drop undelivered results and wake a consumer blocked in get()
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except SubscriptionClosed:
            raise StopAsyncIteration

    async def __aenter__(self) -> "Subscription[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.cancel()


class SubscriptionRegistry:
    """Live subscriptions keyed by the tables their queries read."""

    def __init__(self):
        self._by_table: dict[str, set[Subscription]] = defaultdict(set)

    def __len__(self) -> int:
        return len(self._active())

    def _active(self) -> set[Subscription]:
        active: set[Subscription] = set()
        for subscriptions in self._by_table.values():
            active.update(subscriptions)
        return active

    async def subscribe(
        self, tables: Iterable[str], fetch: Callable[[], Awaitable[T]]
    ) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(self, frozenset(tables), fetch)
        for table in subscription.tables:
            self._by_table[table].add(subscription)
        logger.debug("Subscribed to %s", sorted(subscription.tables))
        await subscription.refresh()
        return subscription

    def discard(self, subscription: Subscription) -> None:
        for table in subscription.tables:
            subscribers = self._by_table.get(table)
            if subscribers is None:
                continue
            subscribers.discard(subscription)
            if not subscribers:
                del self._by_table[table]
        logger.debug("Unsubscribed from %s", sorted(subscription.tables))

    async def notify(self, tables: Iterable[str]) -> None:
        affected: set[Subscription] = set()
        for table in tables:
            affected.update(self._by_table.get(table, ()))
        if not affected:
            return
        logger.debug("Refreshing %d subscriptions after write", len(affected))
        for subscription in affected:
            await subscription.refresh()

    def cancel_all(self) -> None:
        for subscription in self._active():
            subscription.cancel()
