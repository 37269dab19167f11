# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Converts textual defaults and command-line values into typed Python values.

`coerce_default()` is called once per bound field at registration time to turn a
`dft` tag into the field's default, and by the `FlagSet` engine for every value
supplied on the command line. The rules, in priority order:

1. Types implementing `TextParsable` parse themselves.
2. `timedelta` uses duration literals such as `1s`, `500ms` or `1h30m`.
3. `datetime` uses the `YYYY-MM-DDThh:mm:ss` layout in local time.
4. Structural dispatch on `int`, `float`, `bool`, `str`, `Enum`, `Literal`,
   optional types, `list[T]` and `dict[K, V]`.

Numbers are plain literals: `int` is base 10, and neither `int` nor `float` accepts
digit underscores or surrounding whitespace. Booleans accept `true/t/1/yes/on` and
`false/f/0/no/off` in any case, the set `coerce_bool` accepts.

Composite literals are split with the field's `Separators`:

    list[int]             "1,2,3"                   -> [1, 2, 3]
    dict[str, int]        "a:1,b:2"                 -> {"a": 1, "b": 2}
    dict[str, list[int]]  "a:1,a:2,b:3"             -> {"a": [1, 2], "b": [3]}
    list[dict[str, int]]  "a:1,b:2;x:7"             -> [{"a": 1, "b": 2}, {"x": 7}]

Functions:
- coerce_default: Convert a literal to the given type.
- coerce_bool: Convert a literal to a boolean.
- coerce_enum: Convert a literal to an Enum member.
- parse_duration / format_duration: Duration literal conversion.
- format_value: Render a typed value back to its canonical literal.
- zero_value: The empty value of a type.
"""
import re
import types
from datetime import datetime, timedelta
from enum import Enum, EnumMeta
from typing import Any, Literal, Union, get_args, get_origin

from dateutil import tz

from flagrouter.exceptions import (
    FlagRouterError,
    MalformedDefaultError,
    MalformedKeyValueError,
    UnsupportedTypeError,
)
from flagrouter.protocols import TextParsable
from flagrouter.separators import DEFAULT_SEPARATORS, Separators

DATETIME_LAYOUT = "%Y-%m-%dT%H:%M:%S"

TRUE_LITERALS = frozenset({"true", "t", "1", "yes", "on"})
FALSE_LITERALS = frozenset({"false", "f", "0", "no", "off"})

_DURATION_MICROSECONDS = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def is_list_type(target_type: Any) -> bool:
    return target_type is list or get_origin(target_type) is list


def is_dict_type(target_type: Any) -> bool:
    return target_type is dict or get_origin(target_type) is dict


def _is_text_parsable(target_type: Any) -> bool:
    return (
        isinstance(target_type, type)
        and get_origin(target_type) is None
        and issubclass(target_type, TextParsable)
    )


def _is_optional(target_type: Any) -> bool:
    return isinstance(target_type, types.UnionType) or get_origin(target_type) is Union


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration literal such as `300ms`, `-1.5h` or `2h45m`.

    Raises:
        ValueError: If the literal is not a sequence of number+unit parts.
    """
    literal = text.strip()
    sign = 1
    if literal[:1] in ("-", "+"):
        sign = -1 if literal[0] == "-" else 1
        literal = literal[1:]
    if literal == "0":
        return timedelta(0)
    if not literal:
        raise ValueError(f"invalid duration {text!r}")

    micros = 0.0
    position = 0
    for match in _DURATION_PART.finditer(literal):
        if match.start() != position:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        micros += float(number) * _DURATION_MICROSECONDS[unit]
        position = match.end()
    if position != len(literal):
        raise ValueError(f"invalid duration {text!r}")
    return timedelta(microseconds=sign * micros)


def format_duration(value: timedelta) -> str:
    """Render a timedelta as a duration literal (`1h2m3.5s`)."""
    if not value:
        return "0s"
    sign = "-" if value < timedelta(0) else ""
    micros = abs(value) // timedelta(microseconds=1)
    hours, micros = divmod(micros, 3_600_000_000)
    minutes, micros = divmod(micros, 60_000_000)
    text = ""
    if hours:
        text += f"{hours}h"
    if minutes:
        text += f"{minutes}m"
    if micros:
        seconds = f"{micros / 1_000_000:.6f}".rstrip("0").rstrip(".")
        text += f"{seconds}s"
    return sign + text


def coerce_bool(value: str) -> bool:
    """
    Convert a literal to a boolean.

    Raises:
        ValueError: If the literal is not one of the accepted true/false forms.
    """
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized in TRUE_LITERALS:
        return True
    if normalized in FALSE_LITERALS:
        return False
    raise ValueError(f"{value!r} is not a boolean literal")


def coerce_enum(value: Any, enum_type: EnumMeta) -> Any:
    """
    Convert a literal to an Enum member, by name first and then by value.

    Raises:
        ValueError: If the value matches no member.
    """
    if isinstance(value, enum_type):
        return value

    if isinstance(value, str):
        try:
            return enum_type[value]
        except KeyError:
            pass

    base_type = type(next(iter(enum_type)).value)
    try:
        coerced_value = base_type(value)
        return enum_type(coerced_value)
    except (ValueError, TypeError):
        values = [str(enum.value) for enum in enum_type]
        raise ValueError(f"'{value}' should be one of {{{', '.join(values)}}}") from None


def _coerce_list(
    target_type: Any, text: str, separators: Separators
) -> list[Any]:
    args = get_args(target_type)
    element_type = args[0] if args else str
    separator = separators.item
    if is_dict_type(element_type):
        separator = separators.outer
    return [
        coerce_default(element_type, element.strip(), separators)
        for element in text.split(separator)
    ]


def _coerce_dict(
    target_type: Any, text: str, separators: Separators
) -> dict[Any, Any]:
    args = get_args(target_type)
    key_type, value_type = args if len(args) == 2 else (str, str)
    accumulate = is_list_type(value_type)
    result: dict[Any, Any] = {}
    for entry in text.split(separators.item):
        parts = entry.split(separators.key_value)
        if len(parts) != 2:
            raise MalformedKeyValueError(f"cannot convert {entry!r} to key value pair")
        key = coerce_default(key_type, parts[0].strip(), separators)
        value = coerce_default(value_type, parts[1].strip(), separators)
        if accumulate and key in result:
            result[key].extend(value)
        else:
            result[key] = value
    return result


def coerce_default(
    target_type: Any,
    text: str,
    separators: Separators = DEFAULT_SEPARATORS,
) -> Any:
    """
    Convert a literal to the given type.

    Args:
        target_type (type): The declared field type.
        text (str): The literal to convert.
        separators (Separators): Separators for composite literals.

    Returns:
        Any: The typed value.

    Raises:
        MalformedDefaultError: If the literal does not parse as the type.
        MalformedKeyValueError: If a map entry is not a key/value pair.
        UnsupportedTypeError: If the type has no coercion rule.
    """
    if _is_text_parsable(target_type):
        try:
            return target_type.parse_text(text)
        except FlagRouterError:
            raise
        except (ValueError, TypeError) as error:
            raise MalformedDefaultError(
                f"cannot parse {text!r} as {target_type.__name__}: {error}"
            ) from error

    if target_type is timedelta:
        try:
            return parse_duration(text)
        except ValueError as error:
            raise MalformedDefaultError(str(error)) from error

    if target_type is datetime:
        try:
            return datetime.strptime(text, DATETIME_LAYOUT).replace(tzinfo=tz.tzlocal())
        except ValueError as error:
            raise MalformedDefaultError(
                f"cannot parse {text!r} as a datetime ({DATETIME_LAYOUT})"
            ) from error

    origin = get_origin(target_type)
    args = get_args(target_type)

    if origin is Literal:
        if text not in args:
            raise MalformedDefaultError(
                f"Value '{text}' is not a valid literal for type {target_type}"
            )
        return text

    if _is_optional(target_type):
        for arg in args:
            if arg is type(None):
                continue
            try:
                return coerce_default(arg, text, separators)
            except MalformedDefaultError:
                continue
        raise MalformedDefaultError(f"Value '{text}' could not be coerced to any of {args}")

    if isinstance(target_type, EnumMeta):
        try:
            return coerce_enum(text, target_type)
        except ValueError as error:
            raise MalformedDefaultError(str(error)) from error

    if target_type is bool:
        try:
            return coerce_bool(text)
        except ValueError as error:
            raise MalformedDefaultError(str(error)) from error

    if target_type in (int, float) and (
        "_" in text or text != text.strip()
    ):
        raise MalformedDefaultError(
            f"cannot parse {text!r} as {target_type.__name__}: "
            "underscores and surrounding whitespace are not allowed"
        )

    if target_type is int:
        try:
            return int(text, 10)
        except ValueError as error:
            raise MalformedDefaultError(f"cannot parse {text!r} as int") from error

    if target_type is float:
        try:
            return float(text)
        except ValueError as error:
            raise MalformedDefaultError(f"cannot parse {text!r} as float") from error

    if target_type is str:
        return text

    if is_list_type(target_type):
        return _coerce_list(target_type, text, separators)

    if is_dict_type(target_type):
        return _coerce_dict(target_type, text, separators)

    raise UnsupportedTypeError(f"unsupported type: {target_type!r}")


def format_value(value: Any, separators: Separators = DEFAULT_SEPARATORS) -> str:
    """
    Render a typed value as the literal `coerce_default` accepts for it.

    Used to display defaults in usage text.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, datetime):
        return value.strftime(DATETIME_LAYOUT)
    if isinstance(value, dict):
        entries = []
        for key, item in value.items():
            if isinstance(item, list):
                entries.extend(
                    f"{format_value(key, separators)}{separators.key_value}"
                    f"{format_value(element, separators)}"
                    for element in item
                )
            else:
                entries.append(
                    f"{format_value(key, separators)}{separators.key_value}"
                    f"{format_value(item, separators)}"
                )
        return separators.item.join(entries)
    if isinstance(value, list):
        separator = separators.item
        if value and isinstance(value[0], dict):
            separator = separators.outer
        return separator.join(format_value(element, separators) for element in value)
    return str(value)


def zero_value(target_type: Any) -> Any:
    """Return the empty value of a type, or None when it has none."""
    if is_list_type(target_type):
        return []
    if is_dict_type(target_type):
        return {}
    if target_type is bool:
        return False
    if target_type is int:
        return 0
    if target_type is float:
        return 0.0
    if target_type is str:
        return ""
    if target_type is timedelta:
        return timedelta(0)
    return None
