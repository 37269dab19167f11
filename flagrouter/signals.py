# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines flow control signals used by flagrouter.

Signals inherit from `FlowSignal`, which is a subclass of `BaseException` so they
bypass standard `except Exception` blocks in handler and middleware code.

Signals:
- HelpSignal: `-h` / `--help` was supplied; carries the usage text and the scope
  whose help was requested.
"""
from typing import Any


class FlowSignal(BaseException):
    """Base class for all flow control signals in flagrouter.

    These are not errors. They're used to stop a run early without invoking
    the middleware chain.
    """


class HelpSignal(FlowSignal):
    """Raised when help is requested on the command line."""

    def __init__(
        self,
        usage: str = "",
        message: str = "Help signal received.",
        scope: Any = None,
    ):
        super().__init__(message)
        self.usage = usage
        self.scope = scope
