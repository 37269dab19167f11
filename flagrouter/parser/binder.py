# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Binds the fields of an options dataclass to command-line options.

`bind_options()` allocates one instance of the dataclass, turns every tagged field
into a `BoundOption` with its coerced default, and registers all of them with a
`FlagSet` in one call. The instance it returns is the one the engine writes parsed
values into, so a handler holding it sees every later run's values.

Fields whose name starts with an underscore, and fields without a `short` or `long`
tag, are left alone.
"""
from __future__ import annotations

import dataclasses
import typing
from typing import TYPE_CHECKING, Any

from flagrouter.exceptions import UnsupportedTypeError
from flagrouter.logger import logger
from flagrouter.parser.coercion import coerce_default, zero_value
from flagrouter.parser.option import BoundOption
from flagrouter.parser.tags import parse_tag
from flagrouter.separators import DEFAULT_SEPARATORS, Separators

if TYPE_CHECKING:
    from flagrouter.parser.flagset import FlagSet


def is_options_record(annotation: Any) -> bool:
    """Return True if `annotation` is a dataclass type."""
    return isinstance(annotation, type) and dataclasses.is_dataclass(annotation)


def _has_field_default(field: dataclasses.Field) -> bool:
    return (
        field.default is not dataclasses.MISSING
        or field.default_factory is not dataclasses.MISSING
    )


def allocate_record(record_type: type, hints: dict[str, Any] | None = None) -> Any:
    """
    Create an instance of a dataclass without calling its `__init__`.

    Each field gets its dataclass default, its default factory's result, or the
    zero value of its type.
    """
    hints = hints if hints is not None else typing.get_type_hints(record_type)
    instance = record_type.__new__(record_type)
    for field in dataclasses.fields(record_type):
        if field.default is not dataclasses.MISSING:
            value = field.default
        elif field.default_factory is not dataclasses.MISSING:
            value = field.default_factory()
        else:
            value = zero_value(hints.get(field.name))
        setattr(instance, field.name, value)
    return instance


def bind_options(
    record_type: type,
    flagset: FlagSet,
    *,
    persistent: bool = False,
    separators: Separators = DEFAULT_SEPARATORS,
) -> Any:
    """
    Allocate an options instance and register its tagged fields with `flagset`.

    Args:
        record_type (type): A non-frozen dataclass type.
        flagset (FlagSet): The scope to register the options in.
        persistent (bool): If True, subcommands of the scope accept the options too.
        separators (Separators): Base separators that per-field `sep` tags override.

    Returns:
        Any: The live instance the options are bound to.

    Raises:
        UnsupportedTypeError: If `record_type` is not a usable dataclass, or a field
                              type has no coercion rule.
        InvalidShortTagError: If a `short` tag is longer than one character.
        MalformedDefaultError: If a `dft` tag does not parse as its field type.
        MalformedKeyValueError: If a map `dft` tag has an entry without a key/value.
        DuplicateOptionError: If a flag collides with one already in scope.
    """
    if not is_options_record(record_type):
        raise UnsupportedTypeError(f"options type {record_type!r} must be a dataclass")
    if record_type.__dataclass_params__.frozen:
        raise UnsupportedTypeError(
            f"options dataclass {record_type.__name__} must not be frozen"
        )

    hints = typing.get_type_hints(record_type)
    instance = allocate_record(record_type, hints)
    options: list[BoundOption] = []
    for field in dataclasses.fields(record_type):
        if field.name.startswith("_"):
            continue
        tag = parse_tag(field, separators)
        if not tag.bound:
            continue

        field_type = hints[field.name]
        if tag.default:
            default = coerce_default(field_type, tag.default, tag.separators)
        elif tag.has_default:
            default = zero_value(field_type)
        elif _has_field_default(field):
            default = getattr(instance, field.name)
        else:
            default = None

        options.append(
            BoundOption(
                target=instance,
                name=field.name,
                type=field_type,
                short=tag.short,
                long=tag.long,
                default=default,
                description=tag.description,
                separators=tag.separators,
                zero_default=tag.zero_default,
                required=(
                    not tag.has_default
                    and not _has_field_default(field)
                    and field_type is not bool
                ),
                persistent=persistent,
            )
        )

    flagset.add_options(options)
    logger.debug(
        "Bound %d option(s) of %s in '%s'",
        len(options),
        record_type.__name__,
        flagset.name,
    )
    return instance
