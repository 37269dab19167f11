# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `Router`, the registration facade of flagrouter.

A `Router` accepts plain callables as handlers and middlewares, works out at
registration time how to call them, binds their options dataclasses to command-line
options and registers everything with a `FlagSet` engine.

Registration always happens in the router's *active* scope. `group()` and
`statement()` switch the active scope for the duration of a `with` block:

    router = Router.cmdline("Manage things.")
    router.use(log_requests)

    with router.group("user", "Manage users."):
        router.use(require_login)
        router.handle_group("add", "Add a user.", add_user)
        with router.statement():
            router.use(audit)
            router.handle_group("delete", "Delete a user.", delete_user)

    router.run_cmdline()

Registration errors (bad signatures, bad tags, duplicate flags) propagate to the
caller immediately. Command-line errors surface from `run()`.
"""
from __future__ import annotations

import sys
from contextlib import contextmanager
from functools import partial
from typing import Any, Callable, Iterator, Sequence

from rich.markup import escape

from flagrouter.config import RouterConfig
from flagrouter.console import console, error_console
from flagrouter.context import Context
from flagrouter.exceptions import (
    CommandArgumentError,
    FlagRouterError,
    NoExecFuncError,
    NoInputValueError,
)
from flagrouter.logger import logger
from flagrouter.parser.binder import bind_options
from flagrouter.parser.flagset import FlagSet
from flagrouter.signals import HelpSignal
from flagrouter.signature import resolve_handler, resolve_middleware
from flagrouter.utils import get_program_name

ROUTER_KEY = "flagrouter.router"

__all__ = [
    "ROUTER_KEY",
    "HelpSignal",
    "NoExecFuncError",
    "NoInputValueError",
    "Router",
    "parsed",
]


class Router:
    """
    Registers handlers and middlewares on a tree of commands and runs it.

    Attributes:
        name (str): Program name shown in usage text.
        description (str): Program description shown in help text.
        config (RouterConfig): Separators and help settings shared by every scope.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        config: RouterConfig | None = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self.name: str = self.config.program or name
        self.description: str = description
        self._root: FlagSet = FlagSet(self.name, description, config=self.config)
        self._current: FlagSet = self._root

    @classmethod
    def cmdline(cls, description: str = "", config: RouterConfig | None = None) -> Router:
        """Create a router named after the running program."""
        return cls(get_program_name(), description, config=config)

    @property
    def flagset(self) -> FlagSet:
        """The root scope of the command tree."""
        return self._root

    @property
    def scope(self) -> FlagSet:
        """The scope new registrations go into."""
        return self._current

    def _bind(self, flagset: FlagSet, persistent: bool, record_type: type) -> Any:
        return bind_options(
            record_type,
            flagset,
            persistent=persistent,
            separators=self.config.separators,
        )

    def use(self, *middlewares: Callable[..., Any]) -> None:
        """
        Register middlewares in the active scope.

        Each middleware's options become persistent flags, accepted by the scope and
        every command below it.

        Raises:
            SignatureError: If a middleware's signature is not supported.
            TagError: If its options dataclass cannot be bound.
            DuplicateOptionError: If one of its flags is already in scope.
        """
        for middleware in middlewares:
            resolved = resolve_middleware(
                middleware, partial(self._bind, self._current, True)
            )
            self._current.use(resolved)
            logger.debug("Registered %s in '%s'", resolved, self._current.command_path)

    def handle(self, handler: Callable[..., Any]) -> None:
        """
        Register the handler of the active scope.

        Raises:
            FlagRouterError: If the scope is a statement or already has a handler.
            SignatureError: If the handler's signature is not supported.
            TagError: If its options dataclass cannot be bound.
            DuplicateOptionError: If one of its flags is already in scope.
        """
        self._current.check_handler_slot()
        resolved = resolve_handler(handler, partial(self._bind, self._current, False))
        self._current.handle(resolved)
        logger.debug("Registered %s in '%s'", resolved, self._current.command_path)

    @contextmanager
    def group(self, name: str, description: str = "") -> Iterator[FlagSet]:
        """Open a subcommand and register into it inside the `with` block."""
        previous = self._current
        self._current = previous.cmd(name, description)
        try:
            yield self._current
        finally:
            self._current = previous

    @contextmanager
    def statement(self) -> Iterator[FlagSet]:
        """
        Open an anonymous statement inside the `with` block.

        Middlewares registered in a statement apply only to the subcommands registered
        in the same statement, while those subcommands stay reachable from the
        enclosing command.
        """
        previous = self._current
        self._current = previous.stmt()
        try:
            yield self._current
        finally:
            self._current = previous

    def handle_group(
        self, name: str, description: str, handler: Callable[..., Any]
    ) -> None:
        """Open a subcommand whose only registration is `handler`."""
        with self.group(name, description):
            self.handle(handler)

    def run(self, ctx: Context | None = None, args: Sequence[str] = ()) -> str:
        """
        Parse `args` and run the selected command's chain.

        The context handed to the chain carries this router under `ROUTER_KEY`, so
        handlers can call `parsed(ctx, ...)`.

        Returns:
            str: The usage text of the selected command.

        Raises:
            HelpSignal: If help was requested.
            CommandArgumentError: If the command line is invalid, no handler is
                                  registered for it, or a required option is missing.
        """
        ctx = (ctx or Context.background()).with_value(ROUTER_KEY, self)
        return self._root.run(ctx, args)

    def run_cmdline(self, ctx: Context | None = None) -> None:
        """
        Run with `sys.argv[1:]` and exit the process.

        Exit codes: 0 on success or help, 2 on a command-line error, 1 on any other
        flagrouter error and 130 on interrupt.
        """
        try:
            self.run(ctx, sys.argv[1:])
        except HelpSignal as signal:
            if signal.scope is not None:
                signal.scope.render_help()
            else:
                console.print(escape(signal.usage))
            sys.exit(0)
        except CommandArgumentError as error:
            error_console.print(f"[bold red]error:[/] {escape(str(error))}")
            if error.usage:
                error_console.print(escape(error.usage))
            sys.exit(2)
        except FlagRouterError as error:
            error_console.print(f"[bold red]error:[/] {escape(str(error))}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.info("Interrupted. <- Exiting run.")
            sys.exit(130)
        sys.exit(0)

    def parsed(self, target: Any, field_name: str) -> bool:
        """Return True if the field was supplied on the last run's command line."""
        return self._root.parsed(target, field_name)

    def __str__(self) -> str:
        return f"Router(name={self.name!r}, scope={self._current.command_path!r})"


def get_router(ctx: Context) -> Router | None:
    router = ctx.value(ROUTER_KEY)
    return router if isinstance(router, Router) else None


def parsed(ctx: Context, target: Any, field_name: str) -> bool:
    """
    Return True if the field was supplied on the command line of the running router.

    Returns False when `ctx` was not produced by `Router.run`.
    """
    router = get_router(ctx)
    if router is None:
        return False
    return router.parsed(target, field_name)
