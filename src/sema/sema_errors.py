"""
Error taxonomy for the SEMA front end.

Every lexical, syntactic and semantic fault is a `SemaError` ("invalid input").
Each concrete class also derives from the closest built-in exception, so
callers can catch `SyntaxError`, `NameError` or `TypeError` as well.

Classes:
    SemaError: Base class, carries an optional `context` dict.
    LexError: A character no lexical pattern accepts.
    ParseError: An expected token category was not found.
    NameResolutionError: Unbound name or duplicate declaration.
    TypeCheckError: Structural type mismatch.
    ArityError: Unknown or missing keyword argument.

Example:
    raise TypeCheckError("cannot assign float to int", types=("int", "float"))
"""

from typing import Any


class SemaError(Exception):
    """Base class for all faults raised while checking a program.

    Attributes:
        context (dict[str, Any]): Optional details such as the offending
            lexeme, the expected category or the mismatched types.
    """

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context

    def __str__(self) -> str:
        return self.message


class LexError(SemaError, SyntaxError):
    """Raised when an `Error` token reaches the parser."""


class ParseError(SemaError, SyntaxError):
    """Raised when the token stream does not follow the grammar."""


class NameResolutionError(SemaError, NameError):
    """Raised for unbound identifiers and same-scope redeclarations."""


class TypeCheckError(SemaError, TypeError):
    """Raised when two types that must be structurally equal are not."""


class ArityError(SemaError, TypeError):
    """Raised when keyword arguments do not cover a function's parameters."""
