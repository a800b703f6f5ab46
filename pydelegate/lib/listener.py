"""Listener entries: a callback paired with the receiver it is bound to."""

from __future__ import annotations

import inspect
from typing import Any, Callable


class _GlobalContext:
    """Receiver stored for listeners registered without an explicit context."""

    _instance: _GlobalContext | None = None

    def __new__(cls) -> _GlobalContext:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "GLOBAL_CONTEXT"


GLOBAL_CONTEXT: Any = _GlobalContext()


def callbacks_equal(func: Callable[..., Any], other: Callable[..., Any]) -> bool:
    """Check if two callbacks are the same object.

    Bound methods are created anew on every attribute access, so ``obj.method``
    matches another ``obj.method`` when both the instance and the underlying
    function are identical. Any other callable only matches itself.
    """
    if func is other:
        return True
    if inspect.ismethod(func) and inspect.ismethod(other):
        return func.__self__ is other.__self__ and func.__func__ is other.__func__
    return False


def positional_capacity(func: Callable[..., Any]) -> int | None:
    """Number of positional arguments ``func`` accepts, None if unbounded or unknown."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins carry no signature metadata; hand them everything
        return None

    count = 0
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count


class ListenerEntry:
    """A registered (callback, context) pair.

    When the context is anything other than ``GLOBAL_CONTEXT`` and the callback
    is a plain function, the context is passed as its first parameter the same
    way a method receives ``self``. Bound methods and other callables already
    carry their receiver, so for them the context only identifies the entry.
    Listeners accepting fewer positional parameters than the delegate is
    invoked with receive the leading subset of arguments.
    """

    __slots__ = ("func", "context", "_binds_context", "_capacity")

    def __init__(self, func: Callable[..., Any], context: Any = GLOBAL_CONTEXT) -> None:
        self.func = func
        self.context = context
        self._binds_context = context is not GLOBAL_CONTEXT and inspect.isfunction(func)
        # Counted on func itself, so a bound receiver takes one of these slots
        self._capacity = positional_capacity(func)

    def matches(self, func: Callable[..., Any], context: Any) -> bool:
        """Identity match against a (callback, context) pair."""
        return self.context is context and callbacks_equal(self.func, func)

    def call(self, args: tuple[Any, ...]) -> Any:
        """Call the callback with as many of ``args`` as it accepts and return its result."""
        if self._binds_context:
            args = (self.context, *args)
        if self._capacity is not None:
            args = args[: self._capacity]
        return self.func(*args)

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"ListenerEntry({name}, context={self.context!r})"
