"""Multicast callback dispatcher."""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator

from pydelegate.config import Config, ProductionConfig, get_config
from pydelegate.lib.command_queue import CommandQueue, CommandType
from pydelegate.lib.errors import DelegateError, DelegateErrorType
from pydelegate.lib.guard import DispatchGuard
from pydelegate.lib.listener import GLOBAL_CONTEXT, ListenerEntry
from pydelegate.lib.registry import ListenerRegistry

logger = logging.getLogger(__name__)


def _default_config() -> type[Config]:
    try:
        return get_config()
    except ValueError as e:
        logger.warning(f"{e}, falling back to production config")
        return ProductionConfig


class Delegate:
    """A simple event emitter that executes subscribed listeners.

    Listeners are executed in the order they were added. Arguments are shared
    across all listeners, so mutable objects should be mutated with care.

    Invoking a delegate while it is already invoking raises a ``DelegateError``,
    avoiding recursion across listeners. Calls to ``async_seq`` and ``async_all``
    should be awaited before dispatching again, and no listener should invoke
    the delegate it is registered to.

    It is safe to call ``add_listener`` and ``remove_listener`` from inside a
    listener: the change is queued and applied once every listener has finished.

    A delegate is not thread-safe. Use it from one thread, or from one asyncio
    event loop.
    """

    # Bound methods of a delegate that would dispatch it again if registered to it
    _DISPATCH_METHODS = frozenset({"invoke", "__call__", "async_seq", "async_all"})

    def __init__(self, name: str | None = None, config: type[Config] | None = None) -> None:
        self.name = name
        self._config = config or _default_config()
        self._registry = ListenerRegistry()
        self._commands = CommandQueue()
        self._guard = DispatchGuard()
        # Strong references to awaitables scheduled by invoke() until they finish
        self._background_tasks: set[asyncio.Future[Any]] = set()

    @property
    def is_dispatching(self) -> bool:
        return self._guard.is_dispatching

    @property
    def listener_count(self) -> int:
        """Number of registered listeners, not counting queued additions."""
        return len(self._registry)

    @property
    def pending_commands(self) -> int:
        """Number of add/remove requests waiting for the current dispatch to finish."""
        return len(self._commands)

    def has_listener(self, func: Callable[..., Any], context: Any = GLOBAL_CONTEXT) -> bool:
        return self._registry.contains(func, context)

    def add_listener(self, func: Callable[..., Any], context: Any = GLOBAL_CONTEXT) -> Delegate:
        """Add a callback listener to the delegate.

        Args:
            func: Callback function.
            context: Optional object the callback is bound to; the callback then receives
                it as its first argument.

        Returns:
            Delegate: This delegate, for chaining.

        Raises:
            DelegateError: ADDED_SELF_AS_CALLBACK if ``func`` is this delegate.
        """
        if self._is_own_dispatcher(func):
            raise DelegateError(
                "Cannot add Delegate as its own callback",
                DelegateErrorType.ADDED_SELF_AS_CALLBACK,
            )

        entry = ListenerEntry(func, context)
        if self._guard.is_dispatching:
            self._commands.push(CommandType.ADD, entry)
            logger.debug(f"{self!r}: deferred adding {entry!r} until dispatch completes")
        else:
            self._registry.add_entry(entry)
            logger.debug(f"{self!r}: added {entry!r}")
        return self

    def remove_listener(
        self, func: Callable[..., Any], context: Any = GLOBAL_CONTEXT
    ) -> Delegate:
        """Remove a listener that was previously added with the same func and context.

        Removing a listener that is not registered does nothing.

        Returns:
            Delegate: This delegate, for chaining.
        """
        if self._guard.is_dispatching:
            self._commands.push(CommandType.REMOVE, ListenerEntry(func, context))
            logger.debug(f"{self!r}: deferred removing {func!r} until dispatch completes")
        elif self._registry.remove_entry(func, context):
            logger.debug(f"{self!r}: removed {func!r}")
        return self

    def invoke(self, *args: Any) -> None:
        """Execute every listener without awaiting asynchronous ones.

        Awaitables returned by listeners are scheduled on the running event loop
        and complete on their own; this call does not wait for them.

        Raises:
            DelegateError: RECURSIVE_CALL if the delegate is already dispatching.
        """
        with self._dispatch("invoke") as entries:
            for entry in entries:
                result = entry.call(args)
                if inspect.isawaitable(result):
                    self._detach(result, entry)

    def __call__(self, *args: Any) -> None:
        """Same as ``invoke``."""
        self.invoke(*args)

    async def async_seq(self, *args: Any) -> None:
        """Execute every listener, awaiting each one before starting the next.

        Raises:
            DelegateError: RECURSIVE_CALL if the delegate is already dispatching.
        """
        with self._dispatch("async_seq") as entries:
            for entry in entries:
                await self._run_listener(entry, args)

    async def async_all(self, *args: Any) -> None:
        """Start every listener in order, then wait until all of them have finished.

        Each listener runs as its own task, so listeners overlap and finish in
        whatever order their own latency dictates. If any listener fails, the
        first failure to happen is raised once every listener has settled; the
        others are not cancelled. A listener that ends cancelled counts as a
        failure and raises ``CancelledError``.

        Raises:
            DelegateError: RECURSIVE_CALL if the delegate is already dispatching.
        """
        with self._dispatch("async_all") as entries:
            loop = asyncio.get_running_loop()
            tasks = [loop.create_task(self._run_listener(entry, args)) for entry in entries]
            if not tasks:
                return

            # Done callbacks run in completion order
            finished: list[asyncio.Task[None]] = []
            for task in tasks:
                task.add_done_callback(finished.append)

            try:
                await asyncio.wait(tasks)
            except asyncio.CancelledError:
                for task in tasks:
                    if not task.done():
                        self._track_background(task)
                raise

            failures = [_task_failure(task) for task in finished]
            failures = [failure for failure in failures if failure is not None]
            for extra in failures[1:]:
                logger.error(f"{self!r}: additional listener failure in async_all: {extra!r}")
            if failures:
                raise failures[0]

    @staticmethod
    async def _run_listener(entry: ListenerEntry, args: tuple[Any, ...]) -> None:
        result = entry.call(args)
        if inspect.isawaitable(result):
            await result

    @contextmanager
    def _dispatch(self, strategy: str) -> Iterator[tuple[ListenerEntry, ...]]:
        """Hold the dispatch guard around one invocation and flush queued commands after."""
        with self._guard.hold(on_release=self._flush_commands):
            entries = self._registry.entries()
            logger.debug(f"{self!r}: {strategy} dispatching to {len(entries)} listener(s)")
            yield entries

    def _flush_commands(self) -> None:
        self._commands.flush(self._registry)

    def _detach(self, awaitable: Awaitable[Any], entry: ListenerEntry) -> None:
        """Let an awaitable returned to invoke() run on its own."""
        loop = None
        if self._config.SCHEDULE_DETACHED_AWAITABLES:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                pass

        if loop is None:
            logger.warning(
                f"{self!r}: {entry!r} returned an awaitable that invoke() cannot schedule, "
                "use async_seq() or async_all() to await it"
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        self._track_background(asyncio.ensure_future(awaitable))

    def _track_background(self, task: asyncio.Future[Any]) -> None:
        self._background_tasks.add(task)
        task.add_done_callback(self._on_detached_done)

    def _on_detached_done(self, task: asyncio.Future[Any]) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"{self!r}: detached listener failed: {error!r}", exc_info=error)

    def _is_own_dispatcher(self, func: Callable[..., Any]) -> bool:
        if func is self:
            return True
        return (
            inspect.ismethod(func)
            and func.__self__ is self
            and func.__func__.__name__ in self._DISPATCH_METHODS
        )

    def __repr__(self) -> str:
        label = self.name if self.name is not None else hex(id(self))
        return f"<Delegate {label} listeners={len(self._registry)}>"


def _task_failure(task: asyncio.Future[Any]) -> BaseException | None:
    if task.cancelled():
        return asyncio.CancelledError()
    return task.exception()
