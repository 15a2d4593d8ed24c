"""Structured exception hierarchy for zet.

Every error carries the identifier(s) and operation involved in ``details`` so
the CLI layer can build a precise message without re-deriving context.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Machine-readable error identifiers."""

    NOT_FOUND = 1001
    ALREADY_EXISTS = 1002
    INVALID_IDENTIFIER_SHAPE = 2001
    CONSISTENCY_VIOLATION = 3001
    EXHAUSTED_SIBLINGS = 4001
    PARTIAL_RENAME = 5001
    COLLABORATOR_FAILED = 6001


class ZetError(Exception):
    """Base exception for all zet errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    code = ErrorCode.NOT_FOUND

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details,
        }


class NotFound(ZetError):
    """An identifier or prefix has no matching unit."""

    code = ErrorCode.NOT_FOUND


class AlreadyExists(ZetError):
    """Creation or rename target collides with an existing unit."""

    code = ErrorCode.ALREADY_EXISTS


class InvalidIdentifierShape(ZetError):
    """An identifier is empty or its leaf has the wrong class for the operation."""

    code = ErrorCode.INVALID_IDENTIFIER_SHAPE


class ConsistencyViolation(ZetError):
    """A corpus or identifier invariant was found broken."""

    code = ErrorCode.CONSISTENCY_VIOLATION


class ExhaustedSiblings(ZetError):
    """Navigation found no candidate in the requested direction."""

    code = ErrorCode.EXHAUSTED_SIBLINGS


class PartialRename(ZetError):
    """A rename failed after some units were already moved.

    ``completed`` lists the ``(old_id, new_id)`` pairs that were applied before
    the failure. Nothing is rolled back.
    """

    code = ErrorCode.PARTIAL_RENAME

    def __init__(
        self,
        message: str,
        completed: list[tuple[str, str]],
        details: dict[str, Any] | None = None,
    ):
        self.completed = list(completed)
        details = dict(details or {})
        details["completed"] = [f"{old} -> {new}" for old, new in self.completed]
        super().__init__(message, details)


class CollaboratorFailed(ZetError):
    """An external process (editor, clipboard) could not be run."""

    code = ErrorCode.COLLABORATOR_FAILED
