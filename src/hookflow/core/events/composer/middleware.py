"""Middleware contracts and the continuation plumbing that chains them.

A middleware is a callable ``(ctx, next)``. It may be a plain function
(synchronous or ``async``) or any object exposing a ``middleware()`` method
that returns such a function. ``next`` is a zero-argument callable returning
an awaitable; awaiting it runs everything registered after the middleware.
Synchronous middleware continue by returning ``next()``.

Calling ``next()`` hands back an awaitable for the rest of the chain, which
must still be awaited or returned. A synchronous middleware that calls
``next()`` and discards the result silently drops asynchronous middleware
after it, and Python reports the abandoned coroutine with a ``RuntimeWarning``.
"""

from __future__ import annotations

import abc
import inspect
from typing import Any, Awaitable, Callable, Generator, Union

from hookflow.core.exceptions import DoubleContinuationError

from ..context import Context

NextFunction = Callable[[], Awaitable[None]]
MiddlewareFn = Callable[[Context, NextFunction], Any]


class MiddlewareObj(abc.ABC):
    """Contract for objects that produce a middleware function on demand.

    Any object with a callable ``middleware`` attribute counts as an instance,
    so classes do not have to inherit from this base to be accepted.
    """

    @abc.abstractmethod
    def middleware(self) -> MiddlewareFn:
        """Return the middleware function this object stands for."""

    @classmethod
    def __subclasshook__(cls, subclass: type) -> Any:
        if cls is MiddlewareObj:
            candidate = getattr(subclass, "middleware", None)
            if candidate is not None and callable(candidate):
                return True
        return NotImplemented


Middleware = Union[MiddlewareFn, MiddlewareObj]


class FunctionMiddleware(MiddlewareObj):
    """Wrap a plain middleware function in the :class:`MiddlewareObj` interface."""

    def __init__(self, func: MiddlewareFn) -> None:
        if not callable(func):
            raise TypeError(f"Middleware function must be callable, got {type(func)}")
        self.func = func

    def middleware(self) -> MiddlewareFn:
        return self.func

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({getattr(self.func, '__name__', self.func)!r})"


class _Completion:
    """Awaitable that finishes immediately; safe to await any number of times."""

    __slots__ = ()

    def __await__(self) -> Generator[Any, None, None]:
        return iter(())

    def __repr__(self) -> str:
        return "COMPLETED"


COMPLETED = _Completion()


def leaf() -> Awaitable[None]:
    """Terminal continuation: there is nothing after the root."""

    return COMPLETED


def call(middleware: MiddlewareFn, ctx: Context, next_: NextFunction) -> Awaitable[Any]:
    """Call ``middleware`` and return an awaitable for its completion.

    Unlike :func:`invoke` this adds no coroutine of its own, so chaining
    through it does not deepen the stack.
    """

    result = middleware(ctx, next_)
    if inspect.isawaitable(result):
        return result
    return COMPLETED


async def invoke(middleware: MiddlewareFn, ctx: Context, next_: NextFunction) -> Any:
    """Call ``middleware`` and await its result when it is awaitable."""

    result = middleware(ctx, next_)
    if inspect.isawaitable(result):
        return await result
    return result


def flatten(middleware: Middleware) -> MiddlewareFn:
    """Return a plain middleware function for ``middleware``.

    Functions are returned unchanged, so flattening is idempotent. Objects are
    wrapped so their ``middleware()`` method is consulted on every call.

    Raises:
        TypeError: When ``middleware`` is neither callable nor a
            :class:`MiddlewareObj`.
    """

    if isinstance(middleware, MiddlewareObj):
        return lambda ctx, next_: middleware.middleware()(ctx, next_)
    if callable(middleware):
        return middleware
    raise TypeError(f"Middleware must be a function or MiddlewareObj, got {type(middleware)}")


def once(continuation: NextFunction) -> NextFunction:
    """Guard ``continuation`` so a second call raises :class:`DoubleContinuationError`."""

    next_called = False

    def guarded() -> Awaitable[Any]:
        nonlocal next_called
        if next_called:
            raise DoubleContinuationError()
        next_called = True
        return continuation()

    return guarded


def concat(first: MiddlewareFn, and_then: MiddlewareFn) -> MiddlewareFn:
    """Chain two middleware so ``first`` decides whether ``and_then`` runs.

    The continuation handed to ``first`` may be called at most once per
    activation; a second call raises :class:`DoubleContinuationError`.
    """

    async def chained(ctx: Context, next_: NextFunction) -> None:
        await call(first, ctx, once(lambda: call(and_then, ctx, next_)))

    return chained


def pass_through(ctx: Context, next_: NextFunction) -> Awaitable[None]:
    """Identity middleware: always continues."""

    return next_()


async def run(middleware: MiddlewareFn, ctx: Context) -> None:
    """Run ``middleware`` against ``ctx`` with the terminal continuation.

    Args:
        middleware: The middleware function to run.
        ctx: The context to use.
    """

    await invoke(middleware, ctx, once(leaf))


__all__ = [
    "COMPLETED",
    "FunctionMiddleware",
    "Middleware",
    "MiddlewareFn",
    "MiddlewareObj",
    "NextFunction",
    "call",
    "concat",
    "flatten",
    "invoke",
    "leaf",
    "once",
    "pass_through",
    "run",
]
