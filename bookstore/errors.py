"""
Error taxonomy for book store operations.
Each failure surfaced by the store carries an ErrorKind so callers can tell
an absent record apart from a store that could not be reached.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of failure a store operation can report."""
    NOT_FOUND = "not_found"
    STORE_UNAVAILABLE = "store_unavailable"
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"
    VALIDATION = "validation"


class BookStoreError(Exception):
    """Base class for all book store failures."""

    # Set by each subclass
    kind: Optional[ErrorKind] = None

    def __init__(self, message: str, book_id: Optional[str] = None):
        self.message = message
        self.book_id = book_id
        super().__init__(message)


class BookNotFoundError(BookStoreError):
    """No document matches the requested id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, book_id: str):
        super().__init__(f"Book with ID '{book_id}' not found", book_id=book_id)


class StoreUnavailableError(BookStoreError):
    """The database could not be reached or did not answer in time."""

    kind = ErrorKind.STORE_UNAVAILABLE


class ReadFailedError(BookStoreError):
    kind = ErrorKind.READ_FAILED


class WriteFailedError(BookStoreError):
    kind = ErrorKind.WRITE_FAILED
