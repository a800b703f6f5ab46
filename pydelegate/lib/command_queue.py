"""Deferred registry mutations requested while a dispatch is running."""

from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass

from pydelegate.lib.listener import ListenerEntry
from pydelegate.lib.registry import ListenerRegistry

logger = logging.getLogger(__name__)


class CommandType(enum.Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class Command:
    """A queued add/remove request and the entry it carries."""

    type: CommandType
    entry: ListenerEntry


class CommandQueue:
    """FIFO buffer of add/remove commands, drained once per completed dispatch."""

    def __init__(self) -> None:
        self._commands: deque[Command] = deque()

    def push(self, command_type: CommandType, entry: ListenerEntry) -> None:
        self._commands.append(Command(command_type, entry))

    def flush(self, registry: ListenerRegistry) -> int:
        """Apply every queued command to ``registry`` in the order they were queued.

        Removing an entry that is not registered (never added, already removed,
        or added and removed within the same queue) is a silent no-op.

        Returns:
            int: The number of commands applied.
        """
        applied = 0
        while self._commands:
            command = self._commands.popleft()
            if command.type is CommandType.ADD:
                registry.add_entry(command.entry)
            else:
                registry.remove_entry(command.entry.func, command.entry.context)
            applied += 1

        if applied:
            logger.debug(f"Applied {applied} deferred listener command(s)")
        return applied

    def __len__(self) -> int:
        return len(self._commands)
