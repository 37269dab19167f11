# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
This module implements `FlagSet`, the flag and command engine flagrouter registers
bound options, middlewares and handlers into. It owns the command tree, tokenizes the
command line, writes parsed values into bound dataclass fields and renders usage text.

A `FlagSet` is one scope of the command tree:
- `cmd(name)` opens a named subcommand scope.
- `stmt()` opens an anonymous statement scope. Its subcommands are reachable from the
  enclosing scope, but its middlewares and options only apply to them.

Parsing rules:
- `-x value`, `-x=value`, `--long value` and `--long=value` set an option.
- A boolean option given without `=value` is set to True.
- Any other token selects a subcommand of the current scope.
- Persistent (middleware) options of every scope on the path are accepted; local
  (handler) options only for the scope they were registered in.
- A repeated list option extends, a repeated map option merges, anything else is
  replaced by the last occurrence.
- Values are written to their fields only once the whole command line has parsed.

Example Usage:
    flagset = FlagSet("tool", "A tool.")
    child = flagset.cmd("sync", "Sync things.")
    bind_options(SyncOptions, child)
    child.handle(handler)
    usage = flagset.run(Context.background(), ["sync", "--dry-run"])
"""
from __future__ import annotations

from copy import deepcopy
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape

from flagrouter.chain import Handler, Middleware, compose
from flagrouter.config import RouterConfig
from flagrouter.console import console
from flagrouter.context import Context
from flagrouter.exceptions import (
    CommandAlreadyExistsError,
    CommandArgumentError,
    DuplicateOptionError,
    FlagRouterError,
    NoExecFuncError,
    NoInputValueError,
    TagError,
    UnknownCommandError,
    UnknownOptionError,
)
from flagrouter.logger import logger
from flagrouter.parser.coercion import coerce_default, is_dict_type, is_list_type
from flagrouter.parser.option import BoundOption
from flagrouter.signals import HelpSignal

HELP_FLAGS = ("-h", "--help")
HELP_TEXT = "Show this help message."


def _merge(option: BoundOption, previous: Any, value: Any) -> Any:
    if previous is None:
        return value
    if is_list_type(option.type):
        return previous + value
    if is_dict_type(option.type):
        merged = dict(previous)
        for key, item in value.items():
            if isinstance(item, list) and key in merged:
                merged[key] = merged[key] + item
            else:
                merged[key] = item
        return merged
    return value


class FlagSet:
    """
    One scope of the command tree.

    Holds the options, middlewares, handler and subcommands registered in it. The
    root scope also remembers which fields were supplied on the last run.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        parent: FlagSet | None = None,
        statement: bool = False,
        config: RouterConfig | None = None,
    ) -> None:
        self.console: Console = console
        self.name: str = name
        self.description: str = description
        self.parent: FlagSet | None = parent
        self.statement: bool = statement
        self.config: RouterConfig = config or (
            parent.config if parent else RouterConfig()
        )
        self._options: list[BoundOption] = []
        self._flag_map: dict[str, BoundOption] = {}
        self._commands: dict[str, FlagSet] = {}
        self._statements: list[FlagSet] = []
        self._middlewares: list[Middleware] = []
        self._handler: Handler | None = None
        self._parsed: set[tuple[int, str]] = set()

    @property
    def root(self) -> FlagSet:
        flagset = self
        while flagset.parent is not None:
            flagset = flagset.parent
        return flagset

    @property
    def ancestors(self) -> list[FlagSet]:
        """Scopes from the root down to and including this one."""
        chain = []
        flagset: FlagSet | None = self
        while flagset is not None:
            chain.append(flagset)
            flagset = flagset.parent
        return list(reversed(chain))

    @property
    def command_path(self) -> str:
        return " ".join(
            flagset.name for flagset in self.ancestors if not flagset.statement
        )

    @property
    def handler(self) -> Handler | None:
        return self._handler

    @property
    def middlewares(self) -> list[Middleware]:
        return list(self._middlewares)

    @property
    def options(self) -> list[BoundOption]:
        return list(self._options)

    def _command_host(self) -> FlagSet:
        flagset = self
        while flagset.statement and flagset.parent is not None:
            flagset = flagset.parent
        return flagset

    def _find_command(self, name: str) -> list[FlagSet] | None:
        """Return the scopes entered to reach subcommand `name`, or None."""
        if name in self._commands:
            return [self._commands[name]]
        for statement in self._statements:
            found = statement._find_command(name)
            if found:
                return [statement, *found]
        return None

    def _reachable_commands(self) -> list[FlagSet]:
        commands = list(self._commands.values())
        for statement in self._statements:
            commands.extend(statement._reachable_commands())
        return commands

    def _descendants(self) -> list[FlagSet]:
        """Every command and statement scope below this one."""
        scopes: list[FlagSet] = []
        for child in [*self._commands.values(), *self._statements]:
            scopes.append(child)
            scopes.extend(child._descendants())
        return scopes

    def cmd(self, name: str, description: str = "") -> FlagSet:
        """
        Open a named subcommand scope.

        Raises:
            CommandAlreadyExistsError: If the name is already reachable from the
                                       enclosing command.
        """
        if not name or name.startswith("-") or any(char.isspace() for char in name):
            raise CommandArgumentError(f"Invalid command name: {name!r}")
        if self._command_host()._find_command(name) is not None:
            raise CommandAlreadyExistsError(
                f"Command '{name}' already exists in '{self.command_path}'"
            )
        child = FlagSet(name, description, parent=self, config=self.config)
        self._commands[name] = child
        logger.debug("Registered command '%s'", child.command_path)
        return child

    def stmt(self) -> FlagSet:
        """Open an anonymous statement scope."""
        statement = FlagSet(self.name, parent=self, statement=True, config=self.config)
        self._statements.append(statement)
        return statement

    def use(self, middleware: Middleware) -> None:
        self._middlewares.append(middleware)

    def check_handler_slot(self) -> None:
        """
        Raise if this scope cannot take a handler.

        Raises:
            FlagRouterError: If the scope is a statement or already has a handler.
        """
        if self.statement:
            raise FlagRouterError("A statement scope cannot hold a handler")
        if self._handler is not None:
            raise FlagRouterError(
                f"Command '{self.command_path}' already has a handler registered"
            )

    def handle(self, handler: Handler) -> None:
        self.check_handler_slot()
        self._handler = handler

    def _visible_flags(self) -> dict[str, BoundOption]:
        flags: dict[str, BoundOption] = {}
        for flagset in self.ancestors[:-1]:
            for flag, option in flagset._flag_map.items():
                if option.persistent:
                    flags[flag] = option
        flags.update(self._flag_map)
        return flags

    def _validate_flags(self, option: BoundOption) -> None:
        if not option.flags:
            raise CommandArgumentError(f"Field '{option.name}' has no flags")
        if option.long and (
            option.long.startswith("-")
            or "=" in option.long
            or any(char.isspace() for char in option.long)
        ):
            raise CommandArgumentError(
                f"Flag '--{option.long}' of field '{option.name}' is not a valid long flag"
            )
        if option.short and (option.short in "-=" or option.short.isspace()):
            raise CommandArgumentError(
                f"Flag '-{option.short}' of field '{option.name}' is not a valid short flag"
            )

    def add_options(self, options: Sequence[BoundOption]) -> None:
        """
        Register bound options and write their defaults into their fields.

        All options are validated before any is registered.

        Raises:
            CommandArgumentError: If a flag is malformed.
            DuplicateOptionError: If a flag is already in scope, or a persistent
                                  flag is already used by a subcommand.
        """
        taken = self._visible_flags()
        below = [scope._flag_map for scope in self._descendants()]
        pending: dict[str, BoundOption] = {}
        for option in options:
            self._validate_flags(option)
            if option.persistent:
                for flag in option.flags:
                    clash = next((flags[flag] for flags in below if flag in flags), None)
                    if clash is not None:
                        raise DuplicateOptionError(
                            f"Flag '{flag}' of field '{option.name}' is already used by "
                            f"field '{clash.name}' of a subcommand"
                        )
            for flag in option.flags:
                if flag in HELP_FLAGS:
                    raise DuplicateOptionError(
                        f"Flag '{flag}' of field '{option.name}' is reserved for help"
                    )
                existing = taken.get(flag) or pending.get(flag)
                if existing is not None:
                    raise DuplicateOptionError(
                        f"Flag '{flag}' of field '{option.name}' is already used by "
                        f"field '{existing.name}'"
                    )
                pending[flag] = option

        for option in options:
            self._options.append(option)
            for flag in option.flags:
                self._flag_map[flag] = option
            if option.default is not None:
                setattr(option.target, option.name, deepcopy(option.default))

    def parsed(self, target: Any, name: str) -> bool:
        """Return True if field `name` of `target` was supplied on the last run."""
        return (id(target), name) in self.root._parsed

    def _active_flags(self, path: list[FlagSet], current: FlagSet) -> dict[str, BoundOption]:
        flags: dict[str, BoundOption] = {}
        for flagset in path:
            for flag, option in flagset._flag_map.items():
                if option.persistent:
                    flags[flag] = option
        for flag, option in current._flag_map.items():
            if not option.persistent:
                flags[flag] = option
        return flags

    def _read_value(
        self,
        tokens: list[str],
        index: int,
        path: list[FlagSet],
        current: FlagSet,
    ) -> tuple[BoundOption, Any, int]:
        token = tokens[index]
        flag, has_inline, inline = token.partition("=")
        option = self._active_flags(path, current).get(flag)
        if option is None:
            raise UnknownOptionError(
                f"Unrecognized option: {flag}", current.format_help()
            )
        if has_inline:
            text = inline
        elif option.is_flag:
            text = "true"
        else:
            index += 1
            if index >= len(tokens):
                raise CommandArgumentError(
                    f"Option '{flag}' requires a value", current.format_help()
                )
            text = tokens[index]
        try:
            value = coerce_default(option.type, text, option.separators)
        except TagError as error:
            raise CommandArgumentError(
                f"Invalid value for '{flag}': {error}", current.format_help()
            ) from error
        return option, value, index

    def run(self, ctx: Context, args: Sequence[str] = ()) -> str:
        """
        Parse `args`, write values into bound fields and run the selected chain.

        Args:
            ctx (Context): The context handed to the first middleware.
            args (Sequence[str]): The command-line tokens, without the program name.

        Returns:
            str: The usage text of the command that ran.

        Raises:
            HelpSignal: If `-h` or `--help` was supplied.
            UnknownOptionError: If a flag is not accepted by the selected command.
            UnknownCommandError: If a token names no subcommand.
            CommandArgumentError: If a value is missing or does not parse.
            NoExecFuncError: If the selected command has no handler.
            NoInputValueError: If a required option was not supplied.
        """
        parsed = self.root._parsed
        parsed.clear()
        tokens = list(args)
        path: list[FlagSet] = [self]
        current = self
        values: dict[BoundOption, Any] = {}

        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token in HELP_FLAGS:
                raise HelpSignal(usage=current.format_help(), scope=current)
            if token.startswith("-") and len(token) > 1:
                option, value, index = self._read_value(tokens, index, path, current)
                values[option] = _merge(option, values.get(option), value)
            else:
                found = current._find_command(token)
                if found is None:
                    raise UnknownCommandError(
                        f"Unknown command: {token}", current.format_help()
                    )
                path.extend(found)
                current = found[-1]
            index += 1

        usage = current.format_help()
        if current._handler is None:
            raise NoExecFuncError(
                f"No handler registered for '{current.command_path}'", usage
            )

        in_scope = [
            option
            for flagset in path
            for option in flagset._options
            if option.persistent
        ] + [option for option in current._options if not option.persistent]
        missing = [
            option for option in in_scope if option.required and option not in values
        ]
        if missing:
            names = ", ".join("/".join(option.flags) for option in missing)
            raise NoInputValueError(f"No input value for required option(s): {names}", usage)

        for option, value in values.items():
            setattr(option.target, option.name, value)
            parsed.add(option.key)

        middlewares = [
            middleware for flagset in path for middleware in flagset._middlewares
        ]
        logger.debug(
            "Running '%s' with %d middleware(s)", current.command_path, len(middlewares)
        )
        compose(middlewares, current._handler)(ctx)
        return usage

    def _help_options(self) -> list[BoundOption]:
        options = [
            option
            for flagset in self.ancestors[:-1]
            for option in flagset._options
            if option.persistent
        ]
        options.extend(self._options)
        return options

    def get_usage(self, plain_text: bool = True) -> str:
        """
        Render the usage line for this scope.

        Returns:
            str: A usage line showing the command path, options and subcommands.
        """
        parts = [self.command_path]
        for option in self._help_options():
            if not option.required:
                continue
            choice_text = option.get_choice_text()
            parts.append(f"{option.flags[0]} {choice_text}".rstrip())
        parts.append("[options]")
        if self._reachable_commands():
            parts.append("<command>")
        usage = " ".join(parts)
        return usage if plain_text else escape(usage)

    def _option_lines(self) -> list[tuple[str, str]]:
        lines = [(", ".join(HELP_FLAGS), HELP_TEXT)]
        for option in self._help_options():
            flags = ", ".join(option.flags)
            flags_choice = f"{flags} {option.get_choice_text()}".rstrip()
            help_text = option.description
            if option.required:
                help_text = f"{help_text} (required)".strip()
            elif self.config.show_defaults and option.get_default_text():
                help_text = f"{help_text} (default: {option.get_default_text()})".strip()
            lines.append((flags_choice, help_text))
        return lines

    def format_help(self) -> str:
        """Return the full help text of this scope as plain text."""
        lines = [f"usage: {self.get_usage()}", ""]
        if self.description:
            lines.extend([self.description, ""])
        lines.append("options:")
        for flags_choice, help_text in self._option_lines():
            line = f"  {flags_choice:<30} {help_text}".rstrip()
            if help_text and len(flags_choice) > 30:
                line = f"  {flags_choice}\n{'':<33}{help_text}"
            lines.append(line)
        commands = self._reachable_commands()
        if commands:
            lines.extend(["", "commands:"])
            for command in commands:
                lines.append(f"  {command.name:<30} {command.description}".rstrip())
        return "\n".join(lines)

    def render_help(self) -> None:
        """Print formatted help text for this scope using Rich output."""
        self.console.print(f"[bold]usage: {self.get_usage(plain_text=False)}[/bold]\n")

        if self.description:
            self.console.print(escape(self.description) + "\n")

        self.console.print("[bold]options:[/bold]")
        for flags_choice, help_text in self._option_lines():
            arg_line = f"  {escape(flags_choice):<30} "
            if help_text and len(flags_choice) > 30:
                help_text = f"\n{'':<33}{help_text}"
            self.console.print(f"{arg_line}{escape(help_text)}")

        commands = self._reachable_commands()
        if commands:
            self.console.print("\n[bold]commands:[/bold]")
            for command in commands:
                self.console.print(f"  {command.name:<30} {escape(command.description)}")

    def __str__(self) -> str:
        return (
            f"FlagSet(name={self.command_path!r}, options={len(self._options)}, "
            f"commands={len(self._reachable_commands())}, "
            f"middlewares={len(self._middlewares)}, "
            f"handler={self._handler is not None})"
        )

    def __repr__(self) -> str:
        return str(self)
