# Flagrouter CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines all custom exception classes used by flagrouter.

Registration-time errors (signature and tag errors) are raised while a handler or
middleware is being resolved and bound. They describe programming mistakes in the
registration code and are never caught internally.

Run-time errors are raised by the `FlagSet` engine while parsing a command line and
carry the usage text of the command that was being parsed.

Exception Hierarchy:
- FlagRouterError
    ├── SignatureError
    │   ├── UnsupportedHandlerShapeError
    │   ├── InvalidHandlerSignatureError
    │   ├── InvalidMiddlewareSignatureError
    │   └── TooManyMiddlewareArgsError
    ├── TagError
    │   ├── InvalidShortTagError
    │   ├── MalformedDefaultError
    │   ├── MalformedKeyValueError
    │   └── UnsupportedTypeError
    ├── CommandAlreadyExistsError
    ├── DuplicateOptionError
    ├── CommandArgumentError
    │   ├── UnknownOptionError
    │   ├── UnknownCommandError
    │   ├── NoExecFuncError
    │   └── NoInputValueError
    └── ContextCancelledError
        └── DeadlineExceededError
"""


class FlagRouterError(Exception):
    """Base exception for flagrouter."""


class SignatureError(FlagRouterError):
    """Exception raised when a callable's shape cannot be classified."""


class UnsupportedHandlerShapeError(SignatureError):
    """Exception raised when a handler parameter is neither a context nor a dataclass."""


class InvalidHandlerSignatureError(SignatureError):
    """Exception raised when a handler has too many parameters or returns a value."""


class InvalidMiddlewareSignatureError(SignatureError):
    """Exception raised when a middleware's parameters match no supported shape."""


class TooManyMiddlewareArgsError(SignatureError):
    """Exception raised when a middleware takes more than three parameters."""


class TagError(FlagRouterError):
    """Exception raised while binding the fields of an options dataclass."""


class InvalidShortTagError(TagError):
    """Exception raised when a short tag is not exactly one character."""


class MalformedDefaultError(TagError):
    """Exception raised when a textual default cannot be parsed into its field type."""


class MalformedKeyValueError(TagError):
    """Exception raised when a map entry does not split into a key and a value."""


class UnsupportedTypeError(TagError):
    """Exception raised when a field type has no coercion rule."""


class CommandAlreadyExistsError(FlagRouterError):
    """Exception raised when a command with the same name already exists in a scope."""


class DuplicateOptionError(FlagRouterError):
    """Exception raised when a flag is already registered in the same scope."""


class CommandArgumentError(FlagRouterError):
    """Exception raised when there is an error parsing the command line."""

    def __init__(self, message: str, usage: str = "") -> None:
        super().__init__(message)
        self.usage = usage


class UnknownOptionError(CommandArgumentError):
    """Exception raised when a flag is not registered for the selected command."""


class UnknownCommandError(CommandArgumentError):
    """Exception raised when a token names no subcommand."""


class NoExecFuncError(CommandArgumentError):
    """Exception raised when the selected command has no handler registered."""


class NoInputValueError(CommandArgumentError):
    """Exception raised when a required option was not supplied."""


class ContextCancelledError(FlagRouterError):
    """Exception raised when a cancelled context is checked."""


class DeadlineExceededError(ContextCancelledError):
    """Exception raised when a context's deadline has passed."""
