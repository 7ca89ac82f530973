"""System data models: the access-declaration protocol and access sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

from borrowkit.core.identity import ResourceId

if TYPE_CHECKING:
    from borrowkit.world.resources import Resources


@runtime_checkable
class SystemData(Protocol):
    """Anything that can declare and fetch the resources it needs.

    A scheduler calls reads() and writes() on many consumers before running
    any of them, to decide which may run concurrently. construct() performs
    the actual fetches; conflicting access that slips past the scheduler is
    still caught by the resource's borrow tracking.

    Implemented by Fetch[T], FetchMut[T], and @system_data bundles.
    """

    @classmethod
    def construct(cls, resources: Resources, aux_id: int = 0) -> Self:
        """Build an instance by fetching from `resources`."""
        ...

    @classmethod
    def reads(cls, aux_id: int = 0) -> list[ResourceId]:
        """Identities this type borrows shared."""
        ...

    @classmethod
    def writes(cls, aux_id: int = 0) -> list[ResourceId]:
        """Identities this type borrows exclusively."""
        ...


@dataclass(frozen=True)
class AccessSet:
    """Declared read and write sets of one consumer.

    Pure data. Deciding what runs together is left to the scheduler.
    """

    reads: frozenset[ResourceId] = frozenset()
    writes: frozenset[ResourceId] = frozenset()

    def is_read_only(self) -> bool:
        """Check if nothing is written.

        Returns:
            True if the write set is empty.
        """
        return not self.writes

    def conflicts_with(self, other: AccessSet) -> bool:
        """Check if running alongside `other` could alias a written resource.

        Returns:
            True if either side writes something the other reads or writes.
        """
        if self.writes & (other.reads | other.writes):
            return True
        return bool(other.writes & self.reads)

    def union(self, other: AccessSet) -> AccessSet:
        """Combine two access sets."""
        return AccessSet(reads=self.reads | other.reads, writes=self.writes | other.writes)

    def __or__(self, other: Any) -> AccessSet:
        if not isinstance(other, AccessSet):
            return NotImplemented
        return self.union(other)
