"""Middleware composition primitives and the :class:`Composer` builder."""

from .composer import Composer
from .dispatch_error import DispatchError, ThrownValue, describe_error
from .middleware import (
    COMPLETED,
    FunctionMiddleware,
    Middleware,
    MiddlewareFn,
    MiddlewareObj,
    NextFunction,
    call,
    concat,
    flatten,
    leaf,
    once,
    pass_through,
    run,
)

__all__ = [
    "COMPLETED",
    "Composer",
    "DispatchError",
    "FunctionMiddleware",
    "Middleware",
    "MiddlewareFn",
    "MiddlewareObj",
    "NextFunction",
    "ThrownValue",
    "call",
    "concat",
    "describe_error",
    "flatten",
    "leaf",
    "once",
    "pass_through",
    "run",
]
