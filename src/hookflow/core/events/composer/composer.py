"""Composer: a builder that assembles middleware into a dispatch tree.

Every combinator is defined in terms of :meth:`Composer.use`: it creates a
child composer, concatenates the child's handler onto the parent's, and
returns the child so callers can keep building nested structure on it.
Middleware registered earlier always sees an event before middleware
registered later.

Example::

    bot = Composer()
    bot.on("issues.opened", greet_reporter)
    guarded = bot.error_boundary(report_failure)
    guarded.on(["push", "pull_request.synchronize"], run_checks)

    await bot.handle(Context("push", payload))
"""

from __future__ import annotations

import functools
import inspect
import logging
import operator
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Hashable, List, Optional, Sequence, Union

from hookflow.config.composer_config import ComposerConfig, get_default_composer_config
from hookflow.core.exceptions import DoubleContinuationError

from ..context import Context
from ..schema import EventSchema, load_schema, parse_query
from .dispatch_error import DispatchError
from .middleware import (
    COMPLETED,
    Middleware,
    MiddlewareFn,
    MiddlewareObj,
    NextFunction,
    call,
    concat,
    flatten,
    once,
    pass_through,
    run,
)

logger = logging.getLogger(__name__)

MaybeAwaitable = Union[Any, Awaitable[Any]]
MaybeSequence = Union[Middleware, Sequence[Middleware]]
Predicate = Callable[[Context], MaybeAwaitable]
MiddlewareFactory = Callable[[Context], MaybeAwaitable]
Router = Callable[[Context], MaybeAwaitable]
ErrorHandler = Callable[[DispatchError, NextFunction], MaybeAwaitable]


def _then(value: Any, callback: Callable[[Any], Any]) -> Any:
    """Apply ``callback`` to ``value``, deferring only when ``value`` is awaitable."""

    if inspect.isawaitable(value):
        return _then_async(value, callback)
    return callback(value)


async def _then_async(value: Awaitable[Any], callback: Callable[[Any], Any]) -> Any:
    result = callback(await value)
    if inspect.isawaitable(result):
        return await result
    return result


def _as_sequence(middleware: Any) -> Sequence[Middleware]:
    if isinstance(middleware, (list, tuple)):
        return middleware
    return (middleware,)


def _fold(middleware: Sequence[MiddlewareFn]) -> MiddlewareFn:
    # Right-nested so each registered middleware adds one frame to a dispatch.
    if not middleware:
        return pass_through
    return functools.reduce(lambda rest, first: concat(first, rest), reversed(middleware))


class Composer(MiddlewareObj):
    """Mutable builder whose handler is the fold of its middleware.

    Args:
        *middleware: Middleware functions or objects run in order.
        schema: Event schema consulted by :meth:`on`. Defaults to the schema
            named by ``config.schema_path`` or the packaged default.
        config: Composer configuration; children inherit it.
    """

    def __init__(
        self,
        *middleware: Middleware,
        schema: Optional[EventSchema] = None,
        config: Optional[ComposerConfig] = None,
    ) -> None:
        self._config = config or get_default_composer_config()
        self._schema_source = self._schema_loader(schema, self._config)
        self._middleware: List[MiddlewareFn] = [flatten(item) for item in middleware]
        self._handler: Optional[MiddlewareFn] = None

    @staticmethod
    def _schema_loader(schema: Optional[EventSchema], config: ComposerConfig) -> Callable[[], EventSchema]:
        if schema is not None:
            return lambda: schema

        @functools.lru_cache(maxsize=None)
        def load() -> EventSchema:
            return load_schema(config.schema_path)

        return load

    @property
    def config(self) -> ComposerConfig:
        return self._config

    @property
    def schema(self) -> EventSchema:
        """Schema used to validate queries, loaded on first access.

        A composer and all of its descendants share one load.
        """

        return self._schema_source()

    def middleware(self) -> MiddlewareFn:
        if self._handler is None:
            self._handler = _fold(self._middleware)
        return self._handler

    def _child(self, *middleware: Middleware) -> "Composer":
        composer = Composer(*middleware, config=self._config)
        composer._schema_source = self._schema_source
        return composer

    def use(self, *middleware: Middleware) -> "Composer":
        """Append middleware and return the composer holding them."""

        composer = self._child(*middleware)
        self._middleware.append(flatten(composer))
        self._handler = None
        return composer

    def on(self, query: Union[str, Sequence[str]], *middleware: Middleware) -> "Composer":
        """Run ``middleware`` only for events matching one of the queries.

        Queries take the form ``"<event>"`` or ``"<event>.<action>"``; the
        action form also requires the payload's ``action`` field to match.

        Raises:
            QueryValidationError: When query validation is enabled and a
                query names an event or action missing from the schema.
        """

        queries = [query] if isinstance(query, str) else list(query)
        if self._config.validate_queries:
            parsed = [self.schema.validate_query(item) for item in queries]
        else:
            parsed = [parse_query(item) for item in queries]

        def matches(ctx: Context) -> bool:
            for event, action in parsed:
                if event != ctx.event_name:
                    continue
                if action is None or action == ctx.action:
                    return True
            return False

        logger.debug("Registered event filter for queries %s", queries)
        return self.filter(matches, *middleware)

    def filter(self, predicate: Predicate, *middleware: Middleware) -> "Composer":
        """Run ``middleware`` only when ``predicate(ctx)`` holds."""

        composer = self._child(*middleware)
        self.branch(predicate, composer, pass_through)
        return composer

    def drop(self, predicate: Predicate, *middleware: Middleware) -> "Composer":
        """Run ``middleware`` only when ``predicate(ctx)`` does not hold."""

        def negated(ctx: Context) -> MaybeAwaitable:
            return _then(predicate(ctx), operator.not_)

        return self.filter(negated, *middleware)

    def lazy(self, middleware_factory: MiddlewareFactory) -> "Composer":
        """Compute the middleware to run from the context on every dispatch.

        The factory may return a single middleware or a sequence of them, and
        may be asynchronous. Its result is never cached across events.
        """

        def deferred(ctx: Context, next_: NextFunction) -> Awaitable[Any]:
            def dispatch(middleware: MaybeSequence) -> Awaitable[Any]:
                composer = self._child(*_as_sequence(middleware))
                return call(composer.middleware(), ctx, next_)

            return _then(middleware_factory(ctx), dispatch)

        return self.use(deferred)

    def route(
        self,
        router: Router,
        route_handlers: Mapping[Hashable, MaybeSequence],
        fallback: Optional[MaybeSequence] = pass_through,
    ) -> "Composer":
        """Dispatch to the middleware registered under ``router(ctx)``.

        A route key of ``None``, a key missing from ``route_handlers`` or an
        entry whose value is ``None`` selects ``fallback``. A ``fallback`` of
        ``None`` passes the event through.
        """

        otherwise = pass_through if fallback is None else fallback

        def pick(ctx: Context, key: Any) -> MaybeSequence:
            handler = route_handlers.get(key) if key is not None else None
            if handler is None:
                logger.debug("No route for key %r on event %s; using fallback", key, ctx.event_name)
                return otherwise
            return handler

        def select(ctx: Context) -> MaybeAwaitable:
            return _then(router(ctx), functools.partial(pick, ctx))

        return self.lazy(select)

    def branch(
        self,
        predicate: Predicate,
        true_middleware: MaybeSequence,
        false_middleware: MaybeSequence,
    ) -> "Composer":
        """Run exactly one of two middleware sets depending on ``predicate``."""

        def select(ctx: Context) -> MaybeAwaitable:
            return _then(predicate(ctx), lambda verdict: true_middleware if verdict else false_middleware)

        return self.lazy(select)

    def error_boundary(self, error_handler: ErrorHandler, *middleware: Middleware) -> "Composer":
        """Guard ``middleware`` so failures are handed to ``error_handler``.

        Any exception raised inside the guarded subtree is wrapped in a
        :class:`DispatchError` and passed to ``error_handler`` together with a
        continuation. Execution resumes after the boundary only if the guarded
        middleware, or the handler after a failure, called its continuation.
        :class:`DoubleContinuationError` is never intercepted.
        """

        composer = self._child(*middleware)
        bound = flatten(composer)

        async def guarded(ctx: Context, next_: NextFunction) -> None:
            next_called = False

            def cont() -> Awaitable[None]:
                nonlocal next_called
                next_called = True
                return COMPLETED

            try:
                await call(bound, ctx, once(cont))
            except DoubleContinuationError:
                raise
            except Exception as error:
                next_called = False
                dispatch_error = DispatchError(error, ctx)
                logger.debug(
                    "Error boundary caught failure for event %s: %s",
                    ctx.event_name,
                    dispatch_error.message,
                )
                await call(error_handler, dispatch_error, once(cont))
            if next_called:
                await next_()

        self.use(guarded)
        return composer

    async def handle(self, ctx: Context) -> None:
        """Run the composed handler tree against ``ctx``."""

        await run(self.middleware(), ctx)


__all__ = ["Composer"]
