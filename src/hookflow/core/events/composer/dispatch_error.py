"""Structured error delivered to error-boundary handlers.

Whatever a guarded middleware raises is wrapped in a :class:`DispatchError`
together with the context that was active at the time. Python only raises
exceptions, so middleware that need to signal a bare value raise
:class:`ThrownValue`; the wrapper unwraps it and reports the value itself.
"""

from __future__ import annotations

import enum
import numbers
from typing import Any

from hookflow.core.exceptions import HookflowError

from ..context import Context

MAX_STRING_PREVIEW = 50


class ThrownValue(Exception):
    """Carry a non-exception value out of a middleware."""

    def __init__(self, value: Any) -> None:
        super().__init__(value)
        self.value = value


def _value_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, enum.Enum):
        return "symbol"
    return "object"


def describe_error(error: Any) -> str:
    """Return a human-readable description of a raised value."""

    if isinstance(error, BaseException):
        return f"{type(error).__name__} in middleware: {error}"

    kind = _value_kind(error)
    message = f"Non-error value of type {kind} thrown in middleware"
    if kind in {"boolean", "number", "symbol"}:
        message += f": {error}"
    elif kind == "string":
        message += f": {error[:MAX_STRING_PREVIEW]}"
    else:
        message += "!"
    return message


class DispatchError(HookflowError):
    """Error raised inside a guarded subtree, paired with its context.

    Attributes:
        error: The value that was raised. For :class:`ThrownValue` this is the
            carried value rather than the carrier exception.
        ctx: Context that was being dispatched when the error occurred.
    """

    def __init__(self, error: Any, ctx: Context) -> None:
        if isinstance(error, ThrownValue):
            error = error.value
        super().__init__(
            describe_error(error),
            error_code="DISPATCH_FAILED",
            details={"event_name": ctx.event_name},
        )
        self.error = error
        self.ctx = ctx
        if isinstance(error, BaseException):
            self.__cause__ = error
            self.__traceback__ = error.__traceback__


__all__ = ["DispatchError", "MAX_STRING_PREVIEW", "ThrownValue", "describe_error"]
