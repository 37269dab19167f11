# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Execution context threaded through the middleware and handler chain.

`Context` is an immutable carrier of request-scoped values and cancellation state.
Every derivation (`with_value`, `with_cancel`, `with_timeout`) returns a new context
and leaves the original untouched, so a middleware that hands a derived context to
its continuation only affects what runs downstream of it.

Cancellation is cooperative: the chain never checks it on its own. Handlers call
`raise_if_cancelled()` or read `cancelled` when they care.

Example:
    ctx, cancel = Context.background().with_value("user", "alice").with_cancel()
    ctx.value("user")  # "alice"
    cancel()
    ctx.cancelled  # True
"""
from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from flagrouter.exceptions import ContextCancelledError, DeadlineExceededError


class Context(BaseModel):
    """
    Represents the request-scoped state of one run of a command chain.

    Attributes:
        values (dict): Values attached with `with_value`, looked up with `value`.
        parent (Context | None): The context this one was derived from by
                                 `with_cancel` or `with_timeout`.
        cancel_event (threading.Event): Set when this context is cancelled.
        deadline (datetime | None): Wall-clock time after which the context counts
                                    as cancelled.
    """

    values: dict[Any, Any] = Field(default_factory=dict)
    parent: Context | None = None
    cancel_event: threading.Event = Field(default_factory=threading.Event)
    deadline: datetime | None = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @classmethod
    def background(cls) -> Context:
        """Return an empty, never-cancelled root context."""
        return cls()

    def value(self, key: Any, default: Any = None) -> Any:
        return self.values.get(key, default)

    def with_value(self, key: Any, value: Any) -> Context:
        """Return a copy of this context carrying `key` → `value`."""
        return self.model_copy(update={"values": {**self.values, key: value}})

    def with_cancel(self) -> tuple[Context, Callable[[], None]]:
        """Return a child context and the function that cancels it."""
        child = Context(
            values=self.values,
            parent=self,
            cancel_event=threading.Event(),
            deadline=self.deadline,
        )
        return child, child.cancel_event.set

    def with_timeout(self, seconds: float) -> tuple[Context, Callable[[], None]]:
        """Return a cancellable child context that also expires after `seconds`."""
        child, cancel = self.with_cancel()
        deadline = datetime.now() + timedelta(seconds=seconds)
        if self.deadline is not None and self.deadline < deadline:
            deadline = self.deadline
        return child.model_copy(update={"deadline": deadline}), cancel

    @property
    def expired(self) -> bool:
        return self.deadline is not None and datetime.now() >= self.deadline

    @property
    def cancelled(self) -> bool:
        if self.cancel_event.is_set() or self.expired:
            return True
        return self.parent is not None and self.parent.cancelled

    def raise_if_cancelled(self) -> None:
        """
        Raise if this context or any of its ancestors is done.

        Raises:
            DeadlineExceededError: If the deadline has passed.
            ContextCancelledError: If the context was cancelled.
        """
        if self.expired:
            raise DeadlineExceededError("context deadline exceeded")
        if self.cancelled:
            raise ContextCancelledError("context cancelled")

    def __str__(self) -> str:
        return (
            f"Context(values={len(self.values)}, cancelled={self.cancelled}, "
            f"deadline={self.deadline})"
        )
