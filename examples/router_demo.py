"""router_demo.py

    python examples/router_demo.py user add --name alice --groups dev,ops
    python examples/router_demo.py -v user delete --name bob --token secret
    python examples/router_demo.py user --help
"""
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

from flagrouter import Context, Router, option, parsed
from flagrouter.utils import setup_logging

setup_logging(log_filename=None)


@dataclass
class GlobalOptions:
    verbose: bool = option(short="v", long="verbose", desc="Print timings")
    timeout: timedelta = option(long="timeout", dft="30s", desc="Give up after this long")


@dataclass
class AuthOptions:
    token: str = option(long="token", desc="API token")


@dataclass
class AddOptions:
    name: str = option(short="n", long="name", desc="User name")
    groups: list[str] = option(short="g", long="groups", dft="users", desc="Groups")
    labels: dict[str, str] = option(long="labels", dft="", desc="key:value labels")


@dataclass
class DeleteOptions:
    name: str = option(short="n", long="name", desc="User name")


def timing(ctx: Context, opts: GlobalOptions, next_: Callable[[Context], None]) -> None:
    ctx, cancel = ctx.with_timeout(opts.timeout.total_seconds())
    start = time.perf_counter()
    try:
        next_(ctx)
    finally:
        cancel()
    if opts.verbose:
        print(f"took {time.perf_counter() - start:.3f}s")


def require_token(ctx: Context, opts: AuthOptions, next_: Callable[[], None]) -> None:
    if not opts.token:
        print("refusing to delete without --token")
        return
    next_()


def add_user(ctx: Context, opts: AddOptions) -> None:
    ctx.raise_if_cancelled()
    print(f"adding {opts.name} to {', '.join(opts.groups)}")
    if parsed(ctx, opts, "labels"):
        print(f"labels: {opts.labels}")


def delete_user(opts: DeleteOptions) -> None:
    print(f"deleting {opts.name}")


router = Router.cmdline("Manage users.")
router.use(timing)

with router.group("user", "Manage users."):
    router.handle_group("add", "Add a user.", add_user)
    with router.statement():
        router.use(require_token)
        router.handle_group("delete", "Delete a user.", delete_user)


if __name__ == "__main__":
    router.run_cmdline()
