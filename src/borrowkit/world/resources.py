"""Resource container: one value per (type, aux id), handed out through guards.

Usage:
    resources = Resources()
    resources.register(Clock(tick=0))
    resources.register(EntityBuffer(), 3)

    with resources.fetch_exclusive(Clock) as clock:
        clock.value = Clock(tick=clock.value.tick + 1)

    with resources.fetch_shared(EntityBuffer, 3) as buffer:
        ...

    # Type only known at run time
    with resources.fetch_shared_dynamic("myapp.state.Clock") as clock:
        ...

Architecture Note:
    Keys are written once at registration and only read afterwards, so lookups
    take no lock. All mutable state after setup lives in the per-resource
    TrustCell, which makes contention per resource, never global.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any, TypeVar

from borrowkit.config import ResourceSettings
from borrowkit.core.cell import TrustCell
from borrowkit.core.errors import DuplicateResourceError, MissingResourceError
from borrowkit.core.identity import ResourceId, qualified_name
from borrowkit.world.fetch import Fetch, FetchId, FetchIdMut, FetchMut

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Resources:
    """Container holding at most one resource per ResourceId.

    Pass the container explicitly to whatever needs it; there is no global
    instance.

    Args:
        settings: Container settings. Defaults to ResourceSettings() (reads
            BORROWKIT_* environment variables).
    """

    def __init__(self, settings: ResourceSettings | None = None):
        self._settings = settings if settings is not None else ResourceSettings()
        self._cells: dict[ResourceId, TrustCell[Any]] = {}
        self._types_by_name: dict[str, type] = {}
        self._lock = threading.Lock()

    @property
    def settings(self) -> ResourceSettings:
        return self._settings

    def register(
        self, value: Any, aux_id: int = 0, *, resource_type: type | None = None
    ) -> ResourceId:
        """Add a resource under (its type, aux_id).

        Args:
            value: Resource to store. The container owns it from now on.
            aux_id: Auxiliary id distinguishing resources of the same type.
            resource_type: Register under this type instead of type(value),
                e.g. a base class. `value` must be an instance of it.

        Returns:
            The ResourceId the value was stored under.

        Raises:
            DuplicateResourceError: If the identity is already registered.
            TypeError: If value is not an instance of resource_type.
        """
        if resource_type is None:
            resource_type = type(value)
        elif not isinstance(value, resource_type):
            raise TypeError(
                f"Cannot register {type(value).__qualname__} as {resource_type.__qualname__}"
            )
        res_id = ResourceId(resource_type, aux_id)

        with self._lock:
            if res_id in self._cells:
                raise DuplicateResourceError(
                    f"Tried to add a resource though it is already registered: {res_id}", res_id
                )
            self._cells[res_id] = TrustCell(value, track_sites=self._settings.track_borrow_sites)
            self._types_by_name.setdefault(res_id.type_name, resource_type)

        logger.debug("Registered resource %s", res_id)
        return res_id

    def contains(self, res_id: ResourceId) -> bool:
        """Check whether an identity is registered. Takes no borrow."""
        return res_id in self._cells

    def __contains__(self, item: ResourceId | type) -> bool:
        """Membership: `ResourceId(Clock, 2) in resources` or `Clock in resources`."""
        if isinstance(item, type):
            item = ResourceId(item)
        return self.contains(item)

    def __len__(self) -> int:
        return len(self._cells)

    def ids(self) -> Iterator[ResourceId]:
        """Iterate registered identities."""
        return iter(list(self._cells))

    def fetch_shared(self, resource_type: type[T], aux_id: int = 0) -> Fetch[T]:
        """Borrow a resource for reading.

        Raises:
            MissingResourceError: If no such resource is registered.
            BorrowConflictError: If the resource is exclusively borrowed.
        """
        res_id = ResourceId(resource_type, aux_id)
        ref = self._cell(res_id).borrow()
        return Fetch[resource_type](res_id, ref)  # type: ignore[valid-type]

    def fetch_exclusive(self, resource_type: type[T], aux_id: int = 0) -> FetchMut[T]:
        """Borrow a resource for reading and replacing.

        Raises:
            MissingResourceError: If no such resource is registered.
            BorrowConflictError: If the resource is borrowed in any way.
        """
        res_id = ResourceId(resource_type, aux_id)
        ref = self._cell(res_id).borrow_mut()
        return FetchMut[resource_type](res_id, ref)  # type: ignore[valid-type]

    def fetch_shared_dynamic(self, type_handle: type | str, aux_id: int = 0) -> FetchId:
        """Borrow a resource for reading by a run-time type handle.

        Args:
            type_handle: The resource type, or its fully qualified name.
            aux_id: Auxiliary id of the resource.

        Raises:
            MissingResourceError: If no such resource is registered.
            BorrowConflictError: If the resource is exclusively borrowed.
            TypeError: If verification is on and the stored value is not an
                instance of the handle's type.
        """
        res_id = self._dynamic_id(type_handle, aux_id)
        guard = FetchId(res_id, self._cell(res_id).borrow())
        self._verify(guard)
        return guard

    def fetch_exclusive_dynamic(self, type_handle: type | str, aux_id: int = 0) -> FetchIdMut:
        """Borrow a resource for reading and replacing by a run-time type handle.

        See fetch_shared_dynamic for arguments; raises on any live borrow.
        """
        res_id = self._dynamic_id(type_handle, aux_id)
        guard = FetchIdMut(res_id, self._cell(res_id).borrow_mut())
        self._verify(guard)
        return guard

    def _cell(self, res_id: ResourceId) -> TrustCell[Any]:
        try:
            return self._cells[res_id]
        except KeyError:
            raise MissingResourceError(f"No resource with the given id: {res_id}", res_id) from None

    def _dynamic_id(self, type_handle: type | str, aux_id: int) -> ResourceId:
        if isinstance(type_handle, str):
            resource_type = self._types_by_name.get(type_handle)
            if resource_type is None:
                raise MissingResourceError(
                    f"No resource with the given id: {type_handle}#{aux_id}",
                    None,
                )
            return ResourceId(resource_type, aux_id)
        return ResourceId(type_handle, aux_id)

    def _verify(self, guard: FetchId | FetchIdMut) -> None:
        if not self._settings.verify_dynamic_types:
            return
        value = guard.value
        if not isinstance(value, guard.id.type):
            guard.release()
            raise TypeError(
                f"Resource {guard.id} holds {type(value).__qualname__}, "
                f"not {qualified_name(guard.id.type)}"
            )

    def __repr__(self) -> str:
        return f"Resources({len(self._cells)} resources)"
