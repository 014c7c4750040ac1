"""Bounded-concurrency batch runner with sub-saga flattening."""

from __future__ import annotations

import asyncio
import contextvars
import itertools
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from comic_eater.application.results import ConversionContext, SagaResult
from comic_eater.errors import StructuralError, SubSagaError
from comic_eater.saga import history as ledger

logger = logging.getLogger(__name__)

Worker = Callable[[ConversionContext], Awaitable[ConversionContext]]
FailureHook = Callable[[ConversionContext, BaseException], Awaitable[ConversionContext]]

# Executors whose concurrency slot the current task occupies.
_held_slots: contextvars.ContextVar[frozenset[SagaExecutor]] = contextvars.ContextVar(
    "held_slots", default=frozenset()
)


async def _identity_on_fail(
    context: ConversionContext, error: BaseException
) -> ConversionContext:
    del error
    return context


def validate_resulting_context(
    original: ConversionContext, resulting: ConversionContext
) -> None:
    """Raise :class:`StructuralError` when a worker broke the context contract."""
    if not resulting.action:
        raise StructuralError('Saga broken! "action" was removed!')
    if resulting.record_change is None:
        raise StructuralError(f'"{resulting.action}" saga broken! "record_change" was removed!')
    if original.history and len(resulting.history) <= len(original.history):
        raise StructuralError(f'"{resulting.action}" saga broken! A history entry was removed!')


def _prepend_history(
    contexts: Sequence[ConversionContext], history: Sequence[ledger.HistoryEntry]
) -> list[ConversionContext]:
    if not history:
        return list(contexts)
    return [child.evolve(history=(*history, *child.history)) for child in contexts]


@dataclass
class _Collector:
    successful: list[ConversionContext] = field(default_factory=list)
    unsuccessful: list[ConversionContext] = field(default_factory=list)

    def merge(
        self, child: SagaResult, history: Sequence[ledger.HistoryEntry]
    ) -> None:
        self.successful.extend(_prepend_history(child.successful, history))
        self.unsuccessful.extend(child.unsuccessful)


class SagaExecutor:
    """Run a worker over a batch of contexts and classify the outcomes.

    Parameters
    ----------
    max_concurrency : int, default=1
        Number of workers allowed to run at once. The bound is shared by
        nested runs started from inside a worker; the parent's slot is lent
        to its children while it waits on them.
    on_fail : FailureHook | None, default=None
        Recovery hook returning a best-effort context for a failed item.
    """

    def __init__(
        self,
        max_concurrency: int = 1,
        on_fail: FailureHook | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency
        self._on_fail = on_fail or _identity_on_fail
        self._ids = itertools.count(1)
        self._slots: asyncio.Semaphore | None = None

    @property
    def slots(self) -> asyncio.Semaphore:
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.max_concurrency)
        return self._slots

    async def run(
        self,
        action: str,
        items: Sequence[ConversionContext],
        worker: Worker,
    ) -> SagaResult:
        """Run ``worker`` over ``items`` and return the flattened result.

        Parameters
        ----------
        action : str
            Step name recorded in each successful item's history.
        items : Sequence[ConversionContext]
            Contexts to process.
        worker : Worker
            Coroutine function mapping a context to its next version.

        Returns
        -------
        SagaResult
            Successful and unsuccessful contexts of this level and of every
            nested level below it.
        """
        if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
            raise TypeError(f'Failed to start saga: "{action}" - a sequence must be provided')

        run_id = next(self._ids)
        collector = _Collector()
        logger.debug('Starting saga %s: "%s" with %d items', run_id, action, len(items))

        lent_slot = self in _held_slots.get()
        if lent_slot:
            self.slots.release()
        try:
            await asyncio.gather(
                *(self._process(action, context, worker, collector) for context in items)
            )
        finally:
            if lent_slot:
                await self.slots.acquire()

        logger.debug('Finished saga %s: "%s"', run_id, action)
        return SagaResult(
            action=action,
            id=run_id,
            successful=tuple(collector.successful),
            unsuccessful=tuple(collector.unsuccessful),
        )

    async def _process(
        self,
        action: str,
        context: ConversionContext,
        worker: Worker,
        collector: _Collector,
    ) -> None:
        async with self.slots:
            token = _held_slots.set(_held_slots.get() | {self})
            try:
                resulting = await self._attempt(action, context, worker)
            finally:
                _held_slots.reset(token)

        if isinstance(resulting, BaseException):
            await self._record_failure(context, resulting, collector)
            return

        log_context(resulting)
        if resulting.sub_saga_results is not None:
            collector.merge(resulting.sub_saga_results, resulting.history)
        else:
            collector.successful.append(resulting)

    async def _attempt(
        self, action: str, context: ConversionContext, worker: Worker
    ) -> ConversionContext | Exception:
        try:
            resulting = await worker(context)
            # Entries snapshot the worker output, not the input context.
            resulting = resulting.evolve(
                history=ledger.append(
                    resulting.history,
                    action,
                    resulting.snapshot(),
                    bool(resulting.record_change),
                )
            )
            validate_resulting_context(context, resulting)
        except Exception as exc:
            return exc
        return resulting

    async def _record_failure(
        self,
        context: ConversionContext,
        error: Exception,
        collector: _Collector,
    ) -> None:
        if isinstance(error, SubSagaError):
            logger.debug(
                'Bubbling %d child results up from "%s"',
                error.sub_saga_results.total,
                context.archive_path,
            )
            collector.merge(error.sub_saga_results, context.history)
            return
        failed = await self._on_fail(context, error)
        failed = failed.evolve(error=error)
        log_context(failed)
        collector.unsuccessful.append(failed)


def log_context(context: ConversionContext) -> None:
    logger.debug(
        'Context at the point of "%s" for "%s": %s',
        context.action,
        context.archive_path,
        context.snapshot(),
    )
    if context.error is not None:
        logger.error(
            '"%s" failed: %s',
            context.archive_path,
            context.error,
            exc_info=context.error,
        )


def log_saga_results(result: SagaResult) -> None:
    """Log the totals of a saga and every failure in it."""
    logger.debug('Logging result for "%s" <id: %s>', result.action, result.id)
    logger.info('Successful "%s": %d', result.action, len(result.successful))
    if not result.unsuccessful:
        logger.info('Finished "%s" successfully. No failures.', result.action)
        return
    lines = [
        f'Failed converting {index}/{len(result.unsuccessful)} "{context.archive_path}" '
        f"because of: {context.error!r}"
        for index, context in enumerate(result.unsuccessful, start=1)
    ]
    logger.error("Failed: %d\n  %s", len(result.unsuccessful), "\n  ".join(lines))
