"""Error types for resource registration, lookup, and borrowing.

Every error here signals a caller contract violation, not a transient
condition. None of them are retried by the library.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from borrowkit.core.cell.models import BorrowState
    from borrowkit.core.identity import ResourceId


class ResourceError(Exception):
    """Base class for all borrowkit errors."""

    pass


class BorrowConflictError(ResourceError):
    """Raised when a borrow would alias a live exclusive borrow, or vice versa.

    Attributes:
        state: Borrow state of the cell at the moment of the failed attempt.
    """

    def __init__(self, message: str, state: BorrowState):
        super().__init__(message)
        self.state = state


class MissingResourceError(ResourceError, LookupError):
    """Raised when fetching an identity that was never registered.

    Attributes:
        res_id: The missing identity, or None when a type name did not resolve.
    """

    def __init__(self, message: str, res_id: ResourceId | None):
        super().__init__(message)
        self.res_id = res_id


class DuplicateResourceError(ResourceError):
    """Raised when registering an identity that already holds a value."""

    def __init__(self, message: str, res_id: ResourceId):
        super().__init__(message)
        self.res_id = res_id


class ReleasedBorrowError(ResourceError):
    """Raised when a guard is dereferenced after its borrow was released."""

    pass
