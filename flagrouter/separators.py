# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Separator characters for composite option literals.

The defaults split list elements and map entries on `,`, keys from values on `:`,
and the maps of a list-of-maps on `;`. A field's `sep` tag overrides them in that
order, e.g. `sep="|="` splits on `|` and `=` and keeps `;` as the outer separator.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from flagrouter.logger import logger

DEFAULT_LIST_SEPARATOR = ","
DEFAULT_KEY_VALUE_SEPARATOR = ":"
DEFAULT_OUTER_SEPARATOR = ";"


@dataclass(frozen=True)
class Separators:
    """
    Separator characters used to split composite literals.

    Attributes:
        item (str): Splits list elements and map entries.
        key_value (str): Splits a map entry into key and value.
        outer (str): Splits the maps of a list-of-maps literal.
    """

    item: str = DEFAULT_LIST_SEPARATOR
    key_value: str = DEFAULT_KEY_VALUE_SEPARATOR
    outer: str = DEFAULT_OUTER_SEPARATOR

    def override(self, text: str) -> Separators:
        """Return separators with the first three characters of `text` applied in order."""
        text = text.strip()
        if len(text) > 3:
            logger.warning(
                "Separator tag %r has more than 3 characters, ignoring %r",
                text,
                text[3:],
            )
        names = ("item", "key_value", "outer")
        return dataclasses.replace(self, **dict(zip(names, text)))


DEFAULT_SEPARATORS = Separators()
