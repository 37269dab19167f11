# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Composes middlewares and a terminal handler into one callable.

Every middleware receives the context and a `next_` handler that enters the rest of
the chain. Code before `next_` runs in registration order, code after it in reverse
order:

    m1 before -> m2 before -> handler -> m2 after -> m1 after

A middleware that never calls `next_` stops the chain there. Calling it twice runs
the remainder twice; nothing guards against that.
"""
from __future__ import annotations

from typing import Callable, Sequence

from flagrouter.context import Context

Handler = Callable[[Context], None]
Middleware = Callable[[Context, Handler], None]
Next = Callable[[], None]


class Chain:
    """One link of a composed chain: a middleware and whatever follows it."""

    def __init__(self, middleware: Middleware, next_: Handler) -> None:
        self.middleware = middleware
        self.next_ = next_

    def __call__(self, ctx: Context) -> None:
        self.middleware(ctx, self.next_)

    def __len__(self) -> int:
        if isinstance(self.next_, Chain):
            return len(self.next_) + 1
        return 1

    def __repr__(self) -> str:
        return f"Chain({self.middleware!r} -> {self.next_!r})"


def compose(middlewares: Sequence[Middleware], handler: Handler) -> Handler:
    """
    Build the entry point of a chain.

    Args:
        middlewares (Sequence[Middleware]): Middlewares in registration order.
        handler (Handler): The terminal handler.

    Returns:
        Handler: A callable taking the context that runs the whole chain.
    """
    chain: Handler = handler
    for middleware in reversed(middlewares):
        chain = Chain(middleware, chain)
    return chain
