"""Utility modules."""

from nota.utils.exceptions import (
    ConstraintError,
    NotaException,
    NotFoundError,
    ParseError,
    StorageError,
)

__all__ = [
    "ConstraintError",
    "NotaException",
    "NotFoundError",
    "ParseError",
    "StorageError",
]
