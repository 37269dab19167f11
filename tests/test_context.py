import time

import pytest
from pydantic import ValidationError

from flagrouter.context import Context
from flagrouter.exceptions import ContextCancelledError, DeadlineExceededError


def test_background_is_empty():
    ctx = Context.background()
    assert ctx.value("missing") is None
    assert ctx.value("missing", 1) == 1
    assert not ctx.cancelled
    ctx.raise_if_cancelled()


def test_with_value_returns_new_context():
    base = Context.background()
    child = base.with_value("user", "alice")
    assert child.value("user") == "alice"
    assert base.value("user") is None
    assert child.with_value("user", "bob").value("user") == "bob"


def test_context_is_frozen():
    ctx = Context.background()
    with pytest.raises(ValidationError):
        ctx.values = {"a": 1}


def test_cancel_propagates_down_not_up():
    parent, cancel_parent = Context.background().with_cancel()
    child, cancel_child = parent.with_value("k", "v").with_cancel()

    cancel_child()
    assert child.cancelled
    assert not parent.cancelled

    sibling, _ = parent.with_cancel()
    cancel_parent()
    assert sibling.cancelled
    with pytest.raises(ContextCancelledError):
        sibling.raise_if_cancelled()


def test_with_value_shares_cancellation():
    ctx, cancel = Context.background().with_cancel()
    derived = ctx.with_value("k", "v")
    cancel()
    assert derived.cancelled


def test_timeout():
    ctx, _ = Context.background().with_timeout(0.01)
    assert not ctx.cancelled
    time.sleep(0.02)
    assert ctx.cancelled
    with pytest.raises(DeadlineExceededError):
        ctx.raise_if_cancelled()


def test_timeout_keeps_earlier_parent_deadline():
    parent, _ = Context.background().with_timeout(10)
    child, _ = parent.with_timeout(3600)
    assert child.deadline == parent.deadline


def test_str():
    ctx = Context.background().with_value("a", 1)
    assert str(ctx) == "Context(values=1, cancelled=False, deadline=None)"
