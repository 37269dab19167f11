# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines structural protocols for extending flagrouter.

These runtime-checkable `Protocol` classes specify the expected interfaces for:
- User types that can parse themselves from a textual default or command-line value

Used to support type-safe extensibility without requiring explicit base classes.

Protocols:
- TextParsable: Type exposing a `parse_text(text)` classmethod returning an instance.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextParsable(Protocol):
    @classmethod
    def parse_text(cls, text: str) -> TextParsable: ...
