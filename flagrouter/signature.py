# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Classifies handler and middleware callables by their signature and wraps them in a
single calling convention.

Handlers are wrapped as `(ctx) -> None`, middlewares as `(ctx, next_) -> None`.
Parameters are recognized by their annotations:
- `Context` (or a subclass): the execution context
- a dataclass: an options record, bound to command-line options once at registration
- `Callable[[], None]` (also bare `Callable` or `Callable[..., None]`): a continuation
  taking no arguments; the original context flows on
- `Callable[[Context], None]`: a continuation taking the context to pass on

Supported handler shapes:
    def handler() / (ctx) / (options) / (ctx, options)

Supported middleware shapes:
    def middleware() / (ctx) / (options) / (next_)
    def middleware(ctx, next_) / (options, next_) / (ctx, options)
    def middleware(ctx, options, next_)

Middlewares without a continuation parameter always continue the chain after
returning. Middlewares with one decide if and when the chain continues.

Functions:
- classify_handler / classify_middleware: Pure shape classification.
- resolve_handler / resolve_middleware: Classify, bind the options record, and wrap.
"""
from __future__ import annotations

import collections.abc
import functools
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, get_args, get_origin

from flagrouter.chain import Handler
from flagrouter.context import Context
from flagrouter.exceptions import (
    InvalidHandlerSignatureError,
    InvalidMiddlewareSignatureError,
    SignatureError,
    TooManyMiddlewareArgsError,
    UnsupportedHandlerShapeError,
)
from flagrouter.logger import logger
from flagrouter.parser.binder import is_options_record

Binder = Callable[[type], Any]

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class HandlerShape(Enum):
    """The supported handler signatures."""

    NO_ARGS = "no_args"
    CONTEXT = "context"
    OPTIONS = "options"
    CONTEXT_OPTIONS = "context_options"

    def __str__(self) -> str:
        return self.value


class MiddlewareShape(Enum):
    """The supported middleware signatures."""

    NO_ARGS = "no_args"
    CONTEXT = "context"
    OPTIONS = "options"
    NEXT = "next"
    CONTEXT_NEXT = "context_next"
    OPTIONS_NEXT = "options_next"
    CONTEXT_OPTIONS = "context_options"
    CONTEXT_OPTIONS_NEXT = "context_options_next"

    def __str__(self) -> str:
        return self.value


class ContinuationKind(Enum):
    """How a middleware's continuation parameter wants to be called."""

    NONE = "none"
    PLAIN = "plain"
    CONTEXT = "context"


def is_context_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, Context)


def continuation_kind(annotation: Any) -> ContinuationKind:
    """Classify a parameter annotation as a continuation, if it is one."""
    if annotation is collections.abc.Callable:
        return ContinuationKind.PLAIN
    if get_origin(annotation) is not collections.abc.Callable:
        return ContinuationKind.NONE
    args = get_args(annotation)
    if not args or args[0] is Ellipsis or not args[0]:
        return ContinuationKind.PLAIN
    params = args[0]
    if len(params) == 1 and is_context_type(params[0]):
        return ContinuationKind.CONTEXT
    return ContinuationKind.NONE


def _callable_name(func: Any) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


def _parameter_annotations(
    func: Any, who: str, error_type: type[SignatureError]
) -> list[Any]:
    """Return the annotations of a callable's positional parameters."""
    if not callable(func):
        raise error_type(f"{who} must be a callable, got {type(func).__name__}")
    try:
        signature = inspect.signature(func, eval_str=True)
    except (TypeError, ValueError, NameError) as error:
        raise error_type(f"cannot inspect {who} {_callable_name(func)}: {error}") from error

    if signature.return_annotation not in (inspect.Signature.empty, None, type(None)):
        raise error_type(f"{who} func must return nothing")

    annotations = []
    for name, param in signature.parameters.items():
        if param.kind not in _POSITIONAL_KINDS:
            raise error_type(
                f"{who} func cannot take {param.kind.description} parameter '{name}'"
            )
        annotations.append(param.annotation)
    return annotations


def classify_handler(func: Any) -> tuple[HandlerShape, type | None]:
    """
    Classify a handler callable.

    Returns:
        tuple[HandlerShape, type | None]: The shape and the options dataclass, if any.

    Raises:
        InvalidHandlerSignatureError: If the callable returns a value, takes more than
                                      two parameters, or takes two without a leading
                                      context.
        UnsupportedHandlerShapeError: If a parameter is neither a context nor an
                                      options dataclass.
    """
    annotations = _parameter_annotations(func, "handler", InvalidHandlerSignatureError)
    if len(annotations) > 2:
        raise InvalidHandlerSignatureError(
            "handler func can only receive 0 or 1 or 2 args in"
        )

    if not annotations:
        return HandlerShape.NO_ARGS, None

    first = annotations[0]
    if len(annotations) == 1:
        if is_context_type(first):
            return HandlerShape.CONTEXT, None
        if is_options_record(first):
            return HandlerShape.OPTIONS, first
        raise UnsupportedHandlerShapeError(
            "handler func arg must be a context or an options dataclass"
        )

    if not is_context_type(first):
        raise InvalidHandlerSignatureError(
            "handler func with 2 args in, the first arg must be a Context"
        )
    second = annotations[1]
    if not is_options_record(second):
        raise UnsupportedHandlerShapeError(
            "handler func with 2 args in, the second arg must be an options dataclass"
        )
    return HandlerShape.CONTEXT_OPTIONS, second


def classify_middleware(
    func: Any,
) -> tuple[MiddlewareShape, type | None, ContinuationKind]:
    """
    Classify a middleware callable.

    At one parameter, a continuation is checked before a context or options record.
    At two, the first parameter being a context decides how the second is read.

    Returns:
        tuple: The shape, the options dataclass (or None), and the continuation kind.

    Raises:
        TooManyMiddlewareArgsError: If the callable takes more than three parameters.
        InvalidMiddlewareSignatureError: If the parameters match no supported shape.
    """
    annotations = _parameter_annotations(
        func, "middleware", InvalidMiddlewareSignatureError
    )
    if len(annotations) > 3:
        raise TooManyMiddlewareArgsError(
            "middleware func can only receive no more than 3 args in"
        )

    if not annotations:
        return MiddlewareShape.NO_ARGS, None, ContinuationKind.NONE

    first = annotations[0]
    if len(annotations) == 1:
        if continuation_kind(first) is ContinuationKind.PLAIN:
            return MiddlewareShape.NEXT, None, ContinuationKind.PLAIN
        if is_context_type(first):
            return MiddlewareShape.CONTEXT, None, ContinuationKind.NONE
        if is_options_record(first):
            return MiddlewareShape.OPTIONS, first, ContinuationKind.NONE
        raise InvalidMiddlewareSignatureError(
            "middleware func arg must be a continuation, a context or an options dataclass"
        )

    second = annotations[1]
    if len(annotations) == 2:
        if is_context_type(first):
            kind = continuation_kind(second)
            if kind is not ContinuationKind.NONE:
                return MiddlewareShape.CONTEXT_NEXT, None, kind
            if is_options_record(second):
                return MiddlewareShape.CONTEXT_OPTIONS, second, ContinuationKind.NONE
            raise InvalidMiddlewareSignatureError(
                "middleware func with a context, the second arg must be a "
                "continuation or an options dataclass"
            )
        if continuation_kind(second) is not ContinuationKind.PLAIN:
            raise InvalidMiddlewareSignatureError(
                "middleware func with option and handler, the handler must be a "
                "func with 0 args and 0 returns"
            )
        if not is_options_record(first):
            raise InvalidMiddlewareSignatureError(
                "middleware func with option and handler, the option must be an "
                "options dataclass"
            )
        return MiddlewareShape.OPTIONS_NEXT, first, ContinuationKind.PLAIN

    if not is_context_type(first):
        raise InvalidMiddlewareSignatureError(
            "middleware with context and option and handler, the first arg must be a context"
        )
    kind = continuation_kind(annotations[2])
    if kind is ContinuationKind.NONE:
        raise InvalidMiddlewareSignatureError(
            "middleware with context and option and handler, the third arg must be "
            "a func() or func(Context)"
        )
    if not is_options_record(second):
        raise InvalidMiddlewareSignatureError(
            "middleware with context and option and handler, the second arg must be "
            "an options dataclass"
        )
    return MiddlewareShape.CONTEXT_OPTIONS_NEXT, second, kind


@dataclass
class ResolvedHandler:
    """A handler callable wrapped as `(ctx) -> None`."""

    shape: HandlerShape
    func: Callable[..., Any]
    options: Any = None

    def __call__(self, ctx: Context) -> None:
        if self.shape is HandlerShape.NO_ARGS:
            self.func()
        elif self.shape is HandlerShape.CONTEXT:
            self.func(ctx)
        elif self.shape is HandlerShape.OPTIONS:
            self.func(self.options)
        else:
            self.func(ctx, self.options)

    def __str__(self) -> str:
        return f"ResolvedHandler({_callable_name(self.func)}, shape={self.shape})"


@dataclass
class ResolvedMiddleware:
    """A middleware callable wrapped as `(ctx, next_) -> None`."""

    shape: MiddlewareShape
    func: Callable[..., Any]
    options: Any = None
    continuation: ContinuationKind = ContinuationKind.NONE

    def _continuation(self, ctx: Context, next_: Handler) -> Callable[..., None]:
        if self.continuation is ContinuationKind.CONTEXT:
            return next_
        return functools.partial(next_, ctx)

    def __call__(self, ctx: Context, next_: Handler) -> None:
        shape = self.shape
        if shape is MiddlewareShape.NO_ARGS:
            self.func()
        elif shape is MiddlewareShape.CONTEXT:
            self.func(ctx)
        elif shape is MiddlewareShape.OPTIONS:
            self.func(self.options)
        elif shape is MiddlewareShape.CONTEXT_OPTIONS:
            self.func(ctx, self.options)
        elif shape is MiddlewareShape.NEXT:
            self.func(self._continuation(ctx, next_))
            return
        elif shape is MiddlewareShape.CONTEXT_NEXT:
            self.func(ctx, self._continuation(ctx, next_))
            return
        elif shape is MiddlewareShape.OPTIONS_NEXT:
            self.func(self.options, self._continuation(ctx, next_))
            return
        else:
            self.func(ctx, self.options, self._continuation(ctx, next_))
            return
        next_(ctx)

    def __str__(self) -> str:
        return f"ResolvedMiddleware({_callable_name(self.func)}, shape={self.shape})"


def resolve_handler(func: Any, bind: Binder) -> ResolvedHandler:
    """
    Classify a handler, bind its options record once, and wrap it.

    Args:
        func (Callable): The handler.
        bind (Callable[[type], Any]): Called with the options dataclass, returns the
                                      bound instance.

    Returns:
        ResolvedHandler: The wrapped handler.
    """
    shape, record_type = classify_handler(func)
    options = bind(record_type) if record_type is not None else None
    logger.debug("Resolved handler %s as '%s'", _callable_name(func), shape)
    return ResolvedHandler(shape=shape, func=func, options=options)


def resolve_middleware(func: Any, bind: Binder) -> ResolvedMiddleware:
    """
    Classify a middleware, bind its options record once, and wrap it.

    Args:
        func (Callable): The middleware.
        bind (Callable[[type], Any]): Called with the options dataclass, returns the
                                      bound instance.

    Returns:
        ResolvedMiddleware: The wrapped middleware.
    """
    shape, record_type, kind = classify_middleware(func)
    options = bind(record_type) if record_type is not None else None
    logger.debug("Resolved middleware %s as '%s'", _callable_name(func), shape)
    return ResolvedMiddleware(
        shape=shape, func=func, options=options, continuation=kind
    )
