from flagrouter.chain import Chain, compose
from flagrouter.context import Context


def recorder(calls, name):
    def middleware(ctx, next_):
        calls.append(f"{name} before")
        next_(ctx)
        calls.append(f"{name} after")

    return middleware


def test_compose_without_middlewares_returns_handler():
    def handler(ctx):
        pass

    assert compose([], handler) is handler


def test_compose_order():
    calls = []
    chain = compose(
        [recorder(calls, "m1"), recorder(calls, "m2")],
        lambda ctx: calls.append("handler"),
    )
    chain(Context.background())
    assert calls == ["m1 before", "m2 before", "handler", "m2 after", "m1 after"]


def test_short_circuit_skips_rest():
    calls = []

    def stop(ctx, next_):
        calls.append("stop")

    chain = compose([stop, recorder(calls, "m2")], lambda ctx: calls.append("handler"))
    chain(Context.background())
    assert calls == ["stop"]


def test_calling_next_twice_reenters_remainder():
    calls = []

    def twice(ctx, next_):
        next_(ctx)
        next_(ctx)

    chain = compose([twice], lambda ctx: calls.append("handler"))
    chain(Context.background())
    assert calls == ["handler", "handler"]


def test_context_flows_downstream():
    seen = []

    def tag(ctx, next_):
        next_(ctx.with_value("user", "alice"))

    chain = compose([tag], lambda ctx: seen.append(ctx.value("user")))
    chain(Context.background())
    assert seen == ["alice"]


def test_chain_len_and_repr():
    def handler(ctx):
        pass

    def m1(ctx, next_):
        next_(ctx)

    def m2(ctx, next_):
        next_(ctx)

    chain = compose([m1, m2], handler)
    assert isinstance(chain, Chain)
    assert len(chain) == 2
    assert "m1" in repr(chain)
    assert repr(chain).index("m1") < repr(chain).index("m2")
