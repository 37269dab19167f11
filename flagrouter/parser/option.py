# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the `BoundOption` dataclass used by `FlagSet` to represent one command-line
option whose value lives in a field of an options dataclass instance.

Each `BoundOption` describes one flag pair, the field it writes to, the default
already coerced by the binder, and the separators used to split composite values.

Key Attributes:
- `target` / `name`: The live options instance and the field name to write.
- `short` / `long`: One-character and long flag names, without dashes.
- `type`: The field's declared type; values are coerced to it.
- `default`: The coerced default, or None when the field has none.
- `required`: Whether the engine refuses to run without a value for it.
- `persistent`: Whether descendant commands also accept the flag.
"""
from dataclasses import dataclass
from typing import Any

from flagrouter.parser.coercion import format_value, is_dict_type, is_list_type
from flagrouter.separators import DEFAULT_SEPARATORS, Separators


@dataclass(eq=False)
class BoundOption:
    """
    Represents a command-line option bound to a dataclass field.

    Attributes:
        target (Any): The options instance the value is written to.
        name (str): The field name on `target`.
        type (Any): The declared field type.
        short (str | None): Single-character flag name.
        long (str | None): Long flag name.
        default (Any): Coerced default value, or None.
        description (str): Help text.
        separators (Separators): Separators for composite values.
        zero_default (bool): True when the field declared a (possibly empty) default.
        required (bool): True if a value must be supplied on every run.
        persistent (bool): True if subcommands also accept this option.
    """

    target: Any
    name: str
    type: Any = str
    short: str | None = None
    long: str | None = None
    default: Any = None
    description: str = ""
    separators: Separators = DEFAULT_SEPARATORS
    zero_default: bool = False
    required: bool = False
    persistent: bool = False

    @property
    def flags(self) -> tuple[str, ...]:
        """Dashed flag strings, short first."""
        flags = []
        if self.short:
            flags.append(f"-{self.short}")
        if self.long:
            flags.append(f"--{self.long}")
        return tuple(flags)

    @property
    def is_flag(self) -> bool:
        """True for boolean options, which take no separate value token."""
        return self.type is bool

    @property
    def accumulates(self) -> bool:
        """True if repeated occurrences merge instead of replacing."""
        return is_list_type(self.type) or is_dict_type(self.type)

    @property
    def key(self) -> tuple[int, str]:
        return id(self.target), self.name

    def get_choice_text(self) -> str:
        """Get the value placeholder for usage text."""
        if self.is_flag:
            return ""
        return self.name.upper()

    def get_default_text(self) -> str:
        if self.default is None or self.required:
            return ""
        return format_value(self.default, self.separators)

    def __str__(self) -> str:
        return (
            f"BoundOption(flags={', '.join(self.flags)}, field={self.name}, "
            f"required={self.required}, persistent={self.persistent})"
        )
