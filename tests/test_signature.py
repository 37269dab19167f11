from dataclasses import dataclass
from typing import Callable

import pytest

from flagrouter.context import Context
from flagrouter.exceptions import (
    InvalidHandlerSignatureError,
    InvalidMiddlewareSignatureError,
    TooManyMiddlewareArgsError,
    UnsupportedHandlerShapeError,
)
from flagrouter.signature import (
    ContinuationKind,
    HandlerShape,
    MiddlewareShape,
    classify_handler,
    classify_middleware,
    continuation_kind,
    resolve_handler,
    resolve_middleware,
)


@dataclass
class Opts:
    name: str = "bound"


@dataclass(frozen=True)
class FrozenOpts:
    name: str = "frozen"


class RequestContext(Context):
    pass


def fake_bind(record_type):
    return record_type()


# --- Handlers ---
def h0() -> None: ...
def h_ctx(ctx: Context) -> None: ...
def h_sub_ctx(ctx: RequestContext): ...
def h_opt(opts: Opts) -> None: ...
def h_ctx_opt(ctx: Context, opts: Opts) -> None: ...


@pytest.mark.parametrize(
    "func, shape, record_type",
    [
        (h0, HandlerShape.NO_ARGS, None),
        (h_ctx, HandlerShape.CONTEXT, None),
        (h_sub_ctx, HandlerShape.CONTEXT, None),
        (h_opt, HandlerShape.OPTIONS, Opts),
        (h_ctx_opt, HandlerShape.CONTEXT_OPTIONS, Opts),
        (lambda: None, HandlerShape.NO_ARGS, None),
    ],
)
def test_classify_handler(func, shape, record_type):
    assert classify_handler(func) == (shape, record_type)


def h_int(value: int) -> None: ...
def h_unannotated(value) -> None: ...
def h_opt_ctx(opts: Opts, ctx: Context) -> None: ...
def h_ctx_int(ctx: Context, value: int) -> None: ...
def h_three(ctx: Context, opts: Opts, extra: int) -> None: ...
def h_returns(ctx: Context) -> int:
    return 1
def h_varargs(*args) -> None: ...
def h_kwonly(ctx: Context, *, opts: Opts) -> None: ...


@pytest.mark.parametrize(
    "func, error",
    [
        (h_int, UnsupportedHandlerShapeError),
        (h_unannotated, UnsupportedHandlerShapeError),
        (h_ctx_int, UnsupportedHandlerShapeError),
        (h_opt_ctx, InvalidHandlerSignatureError),
        (h_three, InvalidHandlerSignatureError),
        (h_returns, InvalidHandlerSignatureError),
        (h_varargs, InvalidHandlerSignatureError),
        (h_kwonly, InvalidHandlerSignatureError),
        ("not callable", InvalidHandlerSignatureError),
    ],
)
def test_classify_handler_errors(func, error):
    with pytest.raises(error):
        classify_handler(func)


def test_handler_error_messages():
    with pytest.raises(InvalidHandlerSignatureError, match="0 or 1 or 2 args"):
        classify_handler(h_three)
    with pytest.raises(InvalidHandlerSignatureError, match="must return nothing"):
        classify_handler(h_returns)


def test_resolved_handler_passes_what_it_declares():
    received = []

    def handler(ctx: Context, opts: Opts) -> None:
        received.append((ctx, opts))

    resolved = resolve_handler(handler, fake_bind)
    ctx = Context.background()
    resolved(ctx)

    assert received == [(ctx, resolved.options)]
    assert resolved.options.name == "bound"


def test_resolve_handler_binds_once():
    bound = []

    def bind(record_type):
        bound.append(record_type)
        return record_type()

    resolved = resolve_handler(h_opt, bind)
    resolved(Context.background())
    resolved(Context.background())
    assert bound == [Opts]


def test_resolve_handler_without_record_does_not_bind():
    def bind(record_type):
        raise AssertionError("bind should not be called")

    resolved = resolve_handler(h_ctx, bind)
    assert resolved.options is None
    assert str(resolved) == "ResolvedHandler(h_ctx, shape=context)"


def test_resolve_handler_errors_before_binding():
    def bind(record_type):
        raise AssertionError("bind should not be called")

    with pytest.raises(InvalidHandlerSignatureError):
        resolve_handler(h_opt_ctx, bind)


# --- Continuations ---
@pytest.mark.parametrize(
    "annotation, kind",
    [
        (Callable[[], None], ContinuationKind.PLAIN),
        (Callable, ContinuationKind.PLAIN),
        (Callable[..., None], ContinuationKind.PLAIN),
        (Callable[[Context], None], ContinuationKind.CONTEXT),
        (Callable[[RequestContext], None], ContinuationKind.CONTEXT),
        (Callable[[int], None], ContinuationKind.NONE),
        (Callable[[Context, int], None], ContinuationKind.NONE),
        (Context, ContinuationKind.NONE),
        (int, ContinuationKind.NONE),
    ],
)
def test_continuation_kind(annotation, kind):
    assert continuation_kind(annotation) is kind


# --- Middlewares ---
def m0() -> None: ...
def m_ctx(ctx: Context) -> None: ...
def m_opt(opts: Opts) -> None: ...
def m_next(next_: Callable[[], None]) -> None: ...
def m_ctx_next(ctx: Context, next_: Callable[[], None]) -> None: ...
def m_ctx_ctx_next(ctx: Context, next_: Callable[[Context], None]) -> None: ...
def m_opt_next(opts: Opts, next_: Callable[[], None]) -> None: ...
def m_ctx_opt(ctx: Context, opts: Opts) -> None: ...
def m3(ctx: Context, opts: Opts, next_: Callable[[], None]) -> None: ...
def m3_ctx(ctx: Context, opts: Opts, next_: Callable[[Context], None]) -> None: ...


@pytest.mark.parametrize(
    "func, shape, record_type, kind",
    [
        (m0, MiddlewareShape.NO_ARGS, None, ContinuationKind.NONE),
        (m_ctx, MiddlewareShape.CONTEXT, None, ContinuationKind.NONE),
        (m_opt, MiddlewareShape.OPTIONS, Opts, ContinuationKind.NONE),
        (m_next, MiddlewareShape.NEXT, None, ContinuationKind.PLAIN),
        (m_ctx_next, MiddlewareShape.CONTEXT_NEXT, None, ContinuationKind.PLAIN),
        (m_ctx_ctx_next, MiddlewareShape.CONTEXT_NEXT, None, ContinuationKind.CONTEXT),
        (m_opt_next, MiddlewareShape.OPTIONS_NEXT, Opts, ContinuationKind.PLAIN),
        (m_ctx_opt, MiddlewareShape.CONTEXT_OPTIONS, Opts, ContinuationKind.NONE),
        (m3, MiddlewareShape.CONTEXT_OPTIONS_NEXT, Opts, ContinuationKind.PLAIN),
        (m3_ctx, MiddlewareShape.CONTEXT_OPTIONS_NEXT, Opts, ContinuationKind.CONTEXT),
    ],
)
def test_classify_middleware(func, shape, record_type, kind):
    assert classify_middleware(func) == (shape, record_type, kind)


def m_four(ctx: Context, opts: Opts, next_: Callable[[], None], extra: int) -> None: ...
def m_returns(ctx: Context) -> bool:
    return True
def m_int(value: int) -> None: ...
def m_ctx_cont_only(next_: Callable[[Context], None]) -> None: ...
def m_ctx_int(ctx: Context, value: int) -> None: ...
def m_opt_ctx_next(opts: Opts, next_: Callable[[Context], None]) -> None: ...
def m_int_next(value: int, next_: Callable[[], None]) -> None: ...
def m_opt_opt(opts: Opts, other: Opts) -> None: ...
def m3_no_ctx(opts: Opts, other: Opts, next_: Callable[[], None]) -> None: ...
def m3_bad_next(ctx: Context, opts: Opts, next_: Callable[[int], None]) -> None: ...
def m3_bad_opt(ctx: Context, value: int, next_: Callable[[], None]) -> None: ...
def m_kwargs(ctx: Context, **kwargs) -> None: ...


@pytest.mark.parametrize(
    "func, error",
    [
        (m_four, TooManyMiddlewareArgsError),
        (m_returns, InvalidMiddlewareSignatureError),
        (m_int, InvalidMiddlewareSignatureError),
        (m_ctx_cont_only, InvalidMiddlewareSignatureError),
        (m_ctx_int, InvalidMiddlewareSignatureError),
        (m_opt_ctx_next, InvalidMiddlewareSignatureError),
        (m_int_next, InvalidMiddlewareSignatureError),
        (m_opt_opt, InvalidMiddlewareSignatureError),
        (m3_no_ctx, InvalidMiddlewareSignatureError),
        (m3_bad_next, InvalidMiddlewareSignatureError),
        (m3_bad_opt, InvalidMiddlewareSignatureError),
        (m_kwargs, InvalidMiddlewareSignatureError),
        (42, InvalidMiddlewareSignatureError),
    ],
)
def test_classify_middleware_errors(func, error):
    with pytest.raises(error):
        classify_middleware(func)


def test_middleware_error_messages():
    with pytest.raises(TooManyMiddlewareArgsError, match="no more than 3 args"):
        classify_middleware(m_four)
    with pytest.raises(InvalidMiddlewareSignatureError, match="0 args and 0 returns"):
        classify_middleware(m_opt_ctx_next)
    with pytest.raises(InvalidMiddlewareSignatureError, match="options dataclass"):
        classify_middleware(m_int_next)


def test_frozen_record_is_still_classified():
    def handler(opts: FrozenOpts) -> None: ...

    assert classify_handler(handler) == (HandlerShape.OPTIONS, FrozenOpts)


# --- Normalized behavior ---
@pytest.fixture
def trace():
    calls = []

    def next_(ctx):
        calls.append(("next", ctx))

    return calls, next_


@pytest.mark.parametrize("func", [m0, m_ctx, m_opt, m_ctx_opt])
def test_middleware_without_continuation_always_continues(func, trace):
    calls, next_ = trace
    resolved = resolve_middleware(func, fake_bind)
    ctx = Context.background()
    resolved(ctx, next_)
    assert calls == [("next", ctx)]


def test_plain_continuation_passes_original_context(trace):
    calls, next_ = trace
    seen = []

    def middleware(ctx: Context, next_: Callable[[], None]) -> None:
        seen.append(ctx)
        next_()

    resolved = resolve_middleware(middleware, fake_bind)
    ctx = Context.background()
    resolved(ctx, next_)
    assert seen == [ctx]
    assert calls == [("next", ctx)]


def test_context_continuation_passes_given_context(trace):
    calls, next_ = trace

    def middleware(ctx: Context, next_: Callable[[Context], None]) -> None:
        next_(ctx.with_value("k", "v"))

    resolve_middleware(middleware, fake_bind)(Context.background(), next_)
    assert calls[0][1].value("k") == "v"


def test_continuation_can_be_skipped(trace):
    calls, next_ = trace

    def middleware(next_: Callable[[], None]) -> None:
        pass

    resolve_middleware(middleware, fake_bind)(Context.background(), next_)
    assert calls == []


def test_options_and_continuation(trace):
    calls, next_ = trace
    seen = []

    def middleware(ctx: Context, opts: Opts, next_: Callable[[], None]) -> None:
        seen.append(opts.name)
        next_()

    resolved = resolve_middleware(middleware, fake_bind)
    resolved(Context.background(), next_)
    assert seen == ["bound"]
    assert len(calls) == 1
    assert str(resolved).startswith("ResolvedMiddleware(")
    assert str(resolved).endswith("shape=context_options_next)")
