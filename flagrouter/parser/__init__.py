"""
Flagrouter CLI Framework

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

from .binder import bind_options
from .coercion import coerce_default, format_value
from .flagset import FlagSet
from .option import BoundOption
from .tags import FieldTag, option, parse_tag

__all__ = [
    "BoundOption",
    "FieldTag",
    "FlagSet",
    "bind_options",
    "coerce_default",
    "format_value",
    "option",
    "parse_tag",
]
