"""Errors raised by Delegate when its usage contract is broken."""

from __future__ import annotations

import enum


class DelegateErrorType(enum.IntEnum):
    """Specific error codes for Delegate errors."""

    # A listener invoked the delegate it is registered to
    RECURSIVE_CALL = 0
    # The delegate was registered as its own listener
    ADDED_SELF_AS_CALLBACK = 1


class DelegateError(Exception):
    """Raised by Delegate before any listener runs or any listener is registered."""

    def __init__(self, message: str, error_type: DelegateErrorType) -> None:
        super().__init__(message)
        self.error_type = error_type

    def __repr__(self) -> str:
        return f"DelegateError({str(self)!r}, {self.error_type.name})"
