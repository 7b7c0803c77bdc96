from __future__ import annotations

import pytest

from hookflow.core.events.composer.middleware import (
    COMPLETED,
    FunctionMiddleware,
    MiddlewareObj,
    call,
    concat,
    flatten,
    leaf,
    once,
    pass_through,
    run,
)
from hookflow.core.exceptions import DoubleContinuationError


class _Producer:
    """Duck-typed middleware object that does not inherit from MiddlewareObj."""

    def __init__(self, middleware_fn) -> None:
        self.produced = 0
        self._fn = middleware_fn

    def middleware(self):
        self.produced += 1
        return self._fn


def test_flatten_returns_functions_unchanged(record) -> None:
    middleware = record("a")
    assert flatten(middleware) is middleware
    assert flatten(flatten(middleware)) is middleware


def test_flatten_rejects_values_without_capability() -> None:
    with pytest.raises(TypeError):
        flatten(42)


def test_duck_typed_objects_count_as_middleware_objects(record) -> None:
    assert isinstance(_Producer(record("a")), MiddlewareObj)
    assert not isinstance(record("a"), MiddlewareObj)


@pytest.mark.asyncio
async def test_flatten_resolves_object_middleware_on_every_call(make_context, record, calls) -> None:
    producer = _Producer(record("obj"))
    flattened = flatten(producer)

    await run(flattened, make_context())
    await run(flattened, make_context())

    assert calls == ["obj", "obj"]
    assert producer.produced == 2


@pytest.mark.asyncio
async def test_function_middleware_wraps_plain_functions(make_context, record, calls) -> None:
    wrapped = FunctionMiddleware(record("wrapped"))

    assert wrapped.middleware().__name__ == "record_wrapped"
    await run(flatten(wrapped), make_context())

    assert calls == ["wrapped"]


def test_function_middleware_requires_callable() -> None:
    with pytest.raises(TypeError):
        FunctionMiddleware("not callable")


@pytest.mark.asyncio
async def test_concat_runs_second_only_when_first_continues(make_context, record, calls) -> None:
    await run(concat(record("a"), record("b")), make_context())
    assert calls == ["a", "b"]

    calls.clear()
    await run(concat(record("a", proceed=False), record("b")), make_context())
    assert calls == ["a"]


@pytest.mark.asyncio
async def test_concat_rejects_second_continuation_call(make_context, record) -> None:
    async def twice(ctx, next_):
        await next_()
        await next_()

    with pytest.raises(DoubleContinuationError):
        await run(concat(twice, record("b")), make_context())


@pytest.mark.asyncio
async def test_second_call_fails_before_anything_runs(make_context, calls, record) -> None:
    async def twice(ctx, next_):
        await next_()
        try:
            next_()
        except DoubleContinuationError:
            calls.append("rejected")
            raise

    with pytest.raises(DoubleContinuationError):
        await run(concat(twice, record("b")), make_context())

    assert calls == ["b", "rejected"]


@pytest.mark.asyncio
async def test_synchronous_middleware_continue_by_returning_next(make_context, record, calls) -> None:
    def sync_middleware(ctx, next_):
        calls.append("sync")
        return next_()

    await run(concat(sync_middleware, record("after")), make_context())

    assert calls == ["sync", "after"]


@pytest.mark.filterwarnings("ignore:coroutine .* was never awaited:RuntimeWarning")
@pytest.mark.asyncio
async def test_sync_middleware_discarding_next_drops_async_successors(make_context, record, calls) -> None:
    def forgetful(ctx, next_):
        calls.append("forgetful")
        next_()

    await run(concat(forgetful, record("after")), make_context())

    assert calls == ["forgetful"]

@pytest.mark.asyncio
async def test_pass_through_continues_exactly_once(make_context, record, calls) -> None:
    await run(concat(pass_through, record("after")), make_context())
    assert calls == ["after"]


@pytest.mark.asyncio
async def test_terminal_continuation_is_a_shared_reusable_completion() -> None:
    assert leaf() is COMPLETED
    assert leaf() is leaf()
    assert await COMPLETED is None
    assert await leaf() is None


@pytest.mark.asyncio
async def test_once_guards_any_continuation() -> None:
    guarded = once(leaf)
    await guarded()
    with pytest.raises(DoubleContinuationError):
        guarded()


@pytest.mark.asyncio
async def test_run_guards_the_terminal_continuation(make_context) -> None:
    async def twice(ctx, next_):
        await next_()
        await next_()

    with pytest.raises(DoubleContinuationError):
        await run(twice, make_context())


@pytest.mark.asyncio
async def test_call_normalises_sync_results_to_completion(make_context, record, calls) -> None:
    assert call(lambda ctx, next_: None, make_context(), leaf) is COMPLETED

    pending = call(record("async"), make_context(), leaf)
    assert calls == []
    await pending
    assert calls == ["async"]
