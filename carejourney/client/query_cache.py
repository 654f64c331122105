"""
carejourney/client/query_cache.py

Purpose: Client-side server-state cache and mutation runner

- QueryCache: keyed cache of server responses with staleness,
  invalidation by key prefix and cancellation of in-flight fetches
- Mutation: runs a write against the API with lifecycle callbacks
  (on_mutate -> mutation_fn -> on_success | on_error -> on_settled)
"""

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from carejourney.core.logging import get_logger

logger = get_logger(__name__)

QueryKey = Tuple[Hashable, ...]
V = TypeVar("V")


def _normalize(key) -> QueryKey:
    if isinstance(key, tuple):
        return key
    if isinstance(key, list):
        return tuple(key)
    return (key,)


def _matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[:len(prefix)] == prefix


@dataclass
class QueryState:
    data: Any = None
    updated_at: float = 0.0
    invalidated: bool = False


class QueryCache:
    """
    In-memory query cache.

    Keys are tuples such as ("posts", "breast") or ("schedules", "appointments");
    a bare string or list is accepted and converted.
    """

    def __init__(self, stale_time: float = 0.0):
        self.stale_time = stale_time
        self._queries: Dict[QueryKey, QueryState] = {}
        self._in_flight: Dict[QueryKey, asyncio.Task] = {}

    def get_query_data(self, key) -> Any:
        state = self._queries.get(_normalize(key))
        return state.data if state else None

    def set_query_data(self, key, value_or_updater) -> Any:
        """
        Replace the cached value.
        A callable receives the previous value (or None) and returns the new one.
        """
        key = _normalize(key)
        state = self._queries.setdefault(key, QueryState())
        value = value_or_updater(state.data) if callable(value_or_updater) else value_or_updater
        state.data = value
        state.updated_at = time.monotonic()
        state.invalidated = False
        return value

    def invalidate_queries(self, prefix) -> int:
        """Mark every query whose key starts with prefix as stale."""
        prefix = _normalize(prefix)
        count = 0
        for key, state in self._queries.items():
            if _matches(key, prefix):
                state.invalidated = True
                count += 1
        return count

    def is_stale(self, key) -> bool:
        state = self._queries.get(_normalize(key))
        if state is None or state.invalidated:
            return True
        return time.monotonic() - state.updated_at > self.stale_time if self.stale_time else False

    def remove_queries(self, prefix) -> None:
        prefix = _normalize(prefix)
        for key in [k for k in self._queries if _matches(k, prefix)]:
            del self._queries[key]

    async def cancel_queries(self, prefix) -> int:
        """Cancel in-flight fetches under prefix; their cached data is left as it was."""
        prefix = _normalize(prefix)
        tasks = [task for key, task in self._in_flight.items() if _matches(key, prefix) and not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)
        return len(tasks)

    async def fetch_query(self, key, fetcher: Callable[[], Awaitable[Any]], force: bool = False) -> Any:
        """
        Return cached data when fresh, otherwise run fetcher and cache its result.
        Concurrent callers for the same key share one fetch.
        """
        key = _normalize(key)
        if not force and not self.is_stale(key):
            return self.get_query_data(key)

        task = self._in_flight.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(fetcher())
            self._in_flight[key] = task

        try:
            await asyncio.wait({task})
        finally:
            if self._in_flight.get(key) is task and task.done():
                del self._in_flight[key]

        if task.cancelled():
            return self.get_query_data(key)
        return self.set_query_data(key, task.result())


async def _call(callback: Optional[Callable], *args) -> Any:
    if callback is None:
        return None
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass
class Mutation(Generic[V]):
    """
    A write against the API with cache side effects.

    on_mutate(variables) -> context
    on_success(data, variables, context)
    on_error(error, variables, context)
    on_settled(data, error, variables, context)

    Callbacks may be plain functions or coroutines.
    """

    mutation_fn: Callable[[V], Awaitable[Any]]
    on_mutate: Optional[Callable] = None
    on_success: Optional[Callable] = None
    on_error: Optional[Callable] = None
    on_settled: Optional[Callable] = None
    _in_flight: int = field(default=0, init=False, repr=False)

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    async def mutate_async(self, variables: V) -> Any:
        """Run the mutation and re-raise any failure after on_error / on_settled."""
        self._in_flight += 1
        context = None
        try:
            context = await _call(self.on_mutate, variables)
            data = await self.mutation_fn(variables)
        except Exception as error:
            await _call(self.on_error, error, variables, context)
            await _call(self.on_settled, None, error, variables, context)
            raise
        else:
            await _call(self.on_success, data, variables, context)
            await _call(self.on_settled, data, None, variables, context)
            return data
        finally:
            self._in_flight -= 1

    async def mutate(self, variables: V) -> Any:
        """Fire-and-forget flavour: failures are reported by on_error only."""
        try:
            return await self.mutate_async(variables)
        except Exception as error:
            logger.debug(f"Mutation failed: {error}")
            return None
