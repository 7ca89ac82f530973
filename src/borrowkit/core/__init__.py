"""Core functionalities: identities, the borrow-tracking cell, declarations.

Architecture Note:
    core/ contains the building blocks: the ResourceId key, the TrustCell
    borrow primitive, error types, and the SystemData declaration protocol.
    The stateful container lives in world/.
"""

from borrowkit.core.cell import BorrowState, Ref, RefMut, TrustCell
from borrowkit.core.errors import (
    BorrowConflictError,
    DuplicateResourceError,
    MissingResourceError,
    ReleasedBorrowError,
    ResourceError,
)
from borrowkit.core.identity import ResourceId, qualified_name
from borrowkit.core.system import (
    AccessSet,
    SystemData,
    access_of,
    fetch_all,
    reads_of,
    release_data,
    system_data,
    writes_of,
)

__all__ = [
    # Identity
    "ResourceId",
    "qualified_name",
    # Cell
    "TrustCell",
    "Ref",
    "RefMut",
    "BorrowState",
    # Errors
    "ResourceError",
    "BorrowConflictError",
    "MissingResourceError",
    "DuplicateResourceError",
    "ReleasedBorrowError",
    # System data
    "SystemData",
    "AccessSet",
    "system_data",
    "fetch_all",
    "reads_of",
    "writes_of",
    "access_of",
    "release_data",
]
