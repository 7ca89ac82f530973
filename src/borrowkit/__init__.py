"""borrowkit: typed resource storage with run-time borrow checking.

Usage:
    from dataclasses import dataclass
    from borrowkit import Fetch, FetchMut, Resources, system_data

    @dataclass
    class Clock:
        tick: int

    resources = Resources()
    resources.register(Clock(0))

    with resources.fetch_exclusive(Clock) as clock:
        clock.value = Clock(clock.value.tick + 1)

    @system_data
    @dataclass
    class ReadClock:
        clock: Fetch[Clock]

    ReadClock.reads(0)  # [ResourceId(Clock, 0)]
    with ReadClock.construct(resources) as data:
        print(data.clock.value.tick)
"""

__version__ = "0.1.0"

# Configuration
from borrowkit.config import ResourceSettings

# Core primitives
from borrowkit.core import (
    AccessSet,
    BorrowConflictError,
    BorrowState,
    DuplicateResourceError,
    MissingResourceError,
    ReleasedBorrowError,
    ResourceError,
    ResourceId,
    SystemData,
    TrustCell,
    access_of,
    fetch_all,
    reads_of,
    system_data,
    writes_of,
)

# Container and guards
from borrowkit.world import (
    Fetch,
    FetchId,
    FetchIdMut,
    FetchMut,
    Resources,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "ResourceId",
    "TrustCell",
    "BorrowState",
    "SystemData",
    "AccessSet",
    "system_data",
    "fetch_all",
    "reads_of",
    "writes_of",
    "access_of",
    # Errors
    "ResourceError",
    "BorrowConflictError",
    "MissingResourceError",
    "DuplicateResourceError",
    "ReleasedBorrowError",
    # World
    "Resources",
    "Fetch",
    "FetchMut",
    "FetchId",
    "FetchIdMut",
    # Config
    "ResourceSettings",
]
