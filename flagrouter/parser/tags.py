# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Field tag metadata for options dataclasses.

An options dataclass declares its command-line options through the `metadata`
mapping of each field. The `option()` helper builds such a field:

    @dataclass
    class Options:
        count: int = option(short="c", long="count", dft="3", desc="how many")
        pairs: dict[str, list[int]] = option(long="pairs", dft="a=1|a=2", sep="|=")

Recognized keys:
- `short`: one-character flag (`-c`)
- `long`: long flag name (`--count`)
- `dft`: textual default, coerced to the field type at registration
- `desc`: help text
- `sep`: up to three separator overrides, in order: list, key/value, outer list

A field with neither `short` nor `long` is ignored by the binder.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from flagrouter.exceptions import InvalidShortTagError
from flagrouter.separators import DEFAULT_SEPARATORS, Separators

SHORT_TAG = "short"
LONG_TAG = "long"
DEFAULT_TAG = "dft"
DESCRIPTION_TAG = "desc"
SEPARATOR_TAG = "sep"


@dataclass(frozen=True)
class FieldTag:
    """Parsed tag metadata of one dataclass field."""

    short: str | None
    long: str | None
    has_default: bool
    default: str
    description: str
    separators: Separators

    @property
    def bound(self) -> bool:
        return bool(self.short or self.long)

    @property
    def zero_default(self) -> bool:
        return self.has_default


def parse_tag(
    field: dataclasses.Field,
    separators: Separators = DEFAULT_SEPARATORS,
) -> FieldTag:
    """
    Extract the tag metadata of a dataclass field.

    Args:
        field (dataclasses.Field): The field to inspect.
        separators (Separators): Separators that `sep` overrides are applied on top of.

    Returns:
        FieldTag: The parsed metadata. `has_default` is True whenever the `dft` key is
                  present, even if its value is empty.

    Raises:
        InvalidShortTagError: If the `short` tag is longer than one character.
    """
    metadata: Mapping[str, Any] = field.metadata
    short = metadata.get(SHORT_TAG) or None
    if short is not None and len(short) != 1:
        raise InvalidShortTagError(
            f"invalid short tag {short!r} on field {field.name!r}: length must be 1"
        )

    separator_text = metadata.get(SEPARATOR_TAG) or ""
    if separator_text.strip():
        separators = separators.override(separator_text)

    return FieldTag(
        short=short,
        long=metadata.get(LONG_TAG) or None,
        has_default=DEFAULT_TAG in metadata,
        default=metadata.get(DEFAULT_TAG) or "",
        description=metadata.get(DESCRIPTION_TAG) or "",
        separators=separators,
    )


def option(
    *,
    short: str | None = None,
    long: str | None = None,
    dft: str | None = None,
    desc: str = "",
    sep: str | None = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """
    Declare a dataclass field bound to a command-line option.

    The field is keyword-only so bound and plain fields can be declared in any order.
    Pass `dft` for a textual default coerced to the field type, or `default` /
    `default_factory` for a ready Python value.
    """
    metadata: dict[str, str] = {DESCRIPTION_TAG: desc}
    if short is not None:
        metadata[SHORT_TAG] = short
    if long is not None:
        metadata[LONG_TAG] = long
    if dft is not None:
        metadata[DEFAULT_TAG] = dft
    if sep is not None:
        metadata[SEPARATOR_TAG] = sep
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        kw_only=True,
        metadata=metadata,
    )
