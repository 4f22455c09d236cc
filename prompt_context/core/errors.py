"""Error types raised by the prompt context engine."""

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Closed set of failure kinds.

    A query that matches no rule is not an error and has no kind here.
    """

    DOCUMENT_NOT_FOUND = "document_not_found"
    INVALID_INPUT = "invalid_input"


class PromptContextError(Exception):
    """Base exception for prompt context failures."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        details: dict | None = None,
    ):
        self.message = message
        self.kind = kind
        self.details = details or {}
        super().__init__(message)


class DocumentNotFoundError(PromptContextError):
    """A rule's backing document is missing or unreadable."""

    def __init__(
        self, document_ref: str, path: Path, cause: Exception | None = None
    ):
        self.document_ref = document_ref
        self.path = path
        self.cause = cause
        message = f"Failed to load prompt file {document_ref}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(
            message,
            ErrorKind.DOCUMENT_NOT_FOUND,
            details={"document": document_ref, "path": str(path)},
        )


class InvalidInputError(PromptContextError):
    """Caller supplied input the server cannot act on."""

    def __init__(self, message: str, **details):
        super().__init__(message, ErrorKind.INVALID_INPUT, details=details)


__all__ = [
    "ErrorKind",
    "PromptContextError",
    "DocumentNotFoundError",
    "InvalidInputError",
]
