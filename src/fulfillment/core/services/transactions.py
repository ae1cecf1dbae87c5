"""
Transaction runner.

Every composite mutation goes through ``TransactionRunner.run``: the work
function gets a fresh ``TransactionScope`` per attempt, the store commits
when the work returns, and write conflicts are retried with exponential
backoff. Events emitted into the scope are published only after commit and
are dropped with the scope when an attempt rolls back.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fulfillment.config import get_logger
from fulfillment.core.entities import DomainEvent
from fulfillment.core.exceptions import ContentionError, WriteConflictError
from fulfillment.core.interfaces import IEventSink, ITransactionalStore, IUnitOfWork

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class TransactionScope:
    """Unit of work plus the events waiting for its commit."""

    uow: IUnitOfWork
    events: list[DomainEvent] = field(default_factory=list)

    def emit(
        self, event_name: str, entity_id: str | None = None, /, **payload: Any
    ) -> None:
        self.events.append(DomainEvent(name=event_name, entity_id=entity_id, payload=payload))


class EventPublisher:
    """
    Fire-and-forget delivery to the activity feed.

    A failing sink is logged and otherwise ignored; it must never undo or
    fail an operation that already committed. Delivery of one batch is
    bounded by ``timeout`` seconds, after which the rest is dropped.
    """

    DEFAULT_TIMEOUT = 2.0

    def __init__(self, sink: IEventSink | None = None, timeout: float | None = None):
        self._sink = sink
        self._timeout = timeout or self.DEFAULT_TIMEOUT

    async def publish(self, events: Iterable[DomainEvent]) -> None:
        if self._sink is None:
            return
        batch = list(events)
        try:
            await asyncio.wait_for(self._deliver(self._sink, batch), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "event_publish_timed_out",
                events=[event.name for event in batch],
                timeout=self._timeout,
            )

    @staticmethod
    async def _deliver(sink: IEventSink, events: list[DomainEvent]) -> None:
        for event in events:
            try:
                await sink.publish(event)
            except Exception as e:
                logger.warning(
                    "event_publish_failed",
                    event_name=event.name,
                    entity_id=event.entity_id,
                    error=str(e),
                )


class TransactionRunner:
    """Runs work inside store transactions with bounded conflict retry."""

    DEFAULT_MAX_ATTEMPTS = 5

    def __init__(
        self,
        store: ITransactionalStore,
        publisher: EventPublisher | None = None,
        max_attempts: int | None = None,
        retry_delay: float = 0.01,
        retry_multiplier: float = 2.0,
    ):
        self._store = store
        self._publisher = publisher or EventPublisher()
        self._max_attempts = max_attempts or self.DEFAULT_MAX_ATTEMPTS
        self._retry_delay = retry_delay
        self._retry_multiplier = retry_multiplier

    @property
    def store(self) -> ITransactionalStore:
        return self._store

    def _retrying(self, operation: str) -> AsyncRetrying:
        def log_retry(retry_state: RetryCallState) -> None:
            logger.warning(
                "transaction_retry",
                operation=operation,
                attempt=retry_state.attempt_number,
                error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
            )

        return AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                min=self._retry_delay,
                max=self._retry_delay * (self._retry_multiplier**3),
            ),
            retry=retry_if_exception_type(WriteConflictError),
            before_sleep=log_retry,
            reraise=True,
        )

    async def run(
        self,
        operation: str,
        work: Callable[[TransactionScope], Awaitable[T]],
    ) -> T:
        """
        Execute ``work`` atomically and publish its events after commit.

        Args:
            operation: Name used in logs and in ContentionError
            work: Async callable receiving the scope of one attempt

        Raises:
            ContentionError: Every attempt hit a write conflict
            EngineError: Whatever ``work`` raised; nothing was committed
        """
        scope: TransactionScope | None = None
        try:
            async for attempt in self._retrying(operation):
                with attempt:
                    async with self._store.transaction() as uow:
                        scope = TransactionScope(uow=uow)
                        result = await work(scope)
        except WriteConflictError as e:
            logger.error(
                "transaction_contention",
                operation=operation,
                attempts=self._max_attempts,
                error=str(e),
            )
            raise ContentionError(operation, self._max_attempts) from e

        if scope is not None:
            await self._publisher.publish(scope.events)
        return result

    async def read(self, work: Callable[[IUnitOfWork], Awaitable[T]]) -> T:
        """Run a read-only query outside any transaction."""
        async with self._store.reader() as uow:
            return await work(uow)
