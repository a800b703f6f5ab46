"""Ordered storage of the listeners registered to one delegate."""

from __future__ import annotations

from typing import Any, Callable

from pydelegate.lib.listener import ListenerEntry


class ListenerRegistry:
    """Ordered sequence of listener entries. Insertion order is invocation order.

    The registry does not deduplicate: registering the same (callback, context)
    pair twice makes it fire twice.
    """

    def __init__(self) -> None:
        self._entries: list[ListenerEntry] = []

    def add_entry(self, entry: ListenerEntry) -> None:
        """Append an entry to the end of the registry."""
        self._entries.append(entry)

    def remove_entry(self, func: Callable[..., Any], context: Any) -> bool:
        """Remove the first entry matching (func, context).

        Returns False, without raising, if no entry matched.
        """
        for index, entry in enumerate(self._entries):
            if entry.matches(func, context):
                del self._entries[index]
                return True
        return False

    def contains(self, func: Callable[..., Any], context: Any) -> bool:
        return any(entry.matches(func, context) for entry in self._entries)

    def entries(self) -> tuple[ListenerEntry, ...]:
        """Snapshot of the current entries, in registration order."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
