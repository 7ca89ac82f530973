"""System data: the access-declaration protocol consumed by schedulers."""

from borrowkit.core.system.core import (
    access_of,
    fetch_all,
    reads_of,
    release_data,
    system_data,
    writes_of,
)
from borrowkit.core.system.models import AccessSet, SystemData

__all__ = [
    # Models
    "SystemData",
    "AccessSet",
    # Core
    "system_data",
    "fetch_all",
    "reads_of",
    "writes_of",
    "access_of",
    "release_data",
]
