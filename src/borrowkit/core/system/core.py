"""System data decorator and declaration helpers.

Usage:
    # Bundle several fetches into one declared unit
    @system_data
    @dataclass
    class MovementData:
        clock: Fetch[Clock]
        positions: FetchMut[Positions]

    MovementData.reads(0)   # [ResourceId(Clock, 0)]
    MovementData.writes(0)  # [ResourceId(Positions, 0)]

    with MovementData.construct(resources) as data:
        data.positions.value = data.positions.value.advanced(data.clock.value.dt)

    # Ad-hoc tuples
    clock, positions = fetch_all(resources, Fetch[Clock], FetchMut[Positions])

    # Conflict analysis for a scheduler
    access_of(MovementData).conflicts_with(access_of(RenderData))
"""

from __future__ import annotations

import dataclasses
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar, get_type_hints

from borrowkit.core.identity import ResourceId
from borrowkit.core.system.models import AccessSet, SystemData

if TYPE_CHECKING:
    from borrowkit.world.resources import Resources

D = TypeVar("D")


def release_data(data: Any) -> None:
    """Release a fetched SystemData value if it holds borrows."""
    release = getattr(data, "release", None)
    if callable(release):
        release()


def fetch_all(
    resources: Resources,
    *data_types: type[SystemData],
    aux_id: int = 0,
) -> tuple[Any, ...]:
    """Construct each data type in order, all-or-nothing.

    If any construction fails, everything already fetched is released before
    the error propagates.

    Args:
        resources: Container to fetch from.
        data_types: SystemData types, e.g. Fetch[A], FetchMut[B], bundles.
        aux_id: Auxiliary id passed to every construct() call.

    Returns:
        Constructed values in the order of `data_types`.
    """
    fetched: list[Any] = []
    try:
        for data_type in data_types:
            fetched.append(data_type.construct(resources, aux_id))
    except BaseException:
        for data in reversed(fetched):
            release_data(data)
        raise
    return tuple(fetched)


def reads_of(*data_types: type[SystemData], aux_id: int = 0) -> list[ResourceId]:
    """Concatenate the read declarations of several data types."""
    return [res_id for data_type in data_types for res_id in data_type.reads(aux_id)]


def writes_of(*data_types: type[SystemData], aux_id: int = 0) -> list[ResourceId]:
    """Concatenate the write declarations of several data types."""
    return [res_id for data_type in data_types for res_id in data_type.writes(aux_id)]


def access_of(*data_types: type[SystemData], aux_id: int = 0) -> AccessSet:
    """Collect declarations of several data types into one AccessSet."""
    return AccessSet(
        reads=frozenset(reads_of(*data_types, aux_id=aux_id)),
        writes=frozenset(writes_of(*data_types, aux_id=aux_id)),
    )


def _data_fields(cls: type) -> list[tuple[str, type[SystemData]]]:
    hints = get_type_hints(cls)
    fields: list[tuple[str, type[SystemData]]] = []
    for f in dataclasses.fields(cls):
        field_type = hints[f.name]
        if not isinstance(field_type, type) or not isinstance(field_type, SystemData):
            raise TypeError(
                f"Field '{cls.__name__}.{f.name}' must be annotated with a SystemData type "
                f"(e.g. Fetch[T] or FetchMut[T]), got {field_type!r}"
            )
        fields.append((f.name, field_type))
    return fields


def system_data(cls: type[D]) -> type[D]:
    """Derive the SystemData protocol for a dataclass of fetch fields.

    Adds construct(), reads(), writes() classmethods, plus release() and
    context-manager support on instances. All fields share the aux id given to
    construct()/reads()/writes().

    Raises:
        TypeError: If cls is not a dataclass or a field is not SystemData.
    """
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"@system_data requires a dataclass, got {cls.__name__}")

    fields = _data_fields(cls)
    names = [name for name, _ in fields]
    types = [field_type for _, field_type in fields]

    def construct(klass: type[D], resources: Resources, aux_id: int = 0) -> D:
        values = fetch_all(resources, *types, aux_id=aux_id)
        return klass(**dict(zip(names, values, strict=True)))

    def reads(klass: type[D], aux_id: int = 0) -> list[ResourceId]:
        return reads_of(*types, aux_id=aux_id)

    def writes(klass: type[D], aux_id: int = 0) -> list[ResourceId]:
        return writes_of(*types, aux_id=aux_id)

    def release(self: D) -> None:
        for name in reversed(names):
            release_data(getattr(self, name))

    def __enter__(self: D) -> D:
        return self

    def __exit__(
        self: D,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        release(self)

    cls.construct = classmethod(construct)  # type: ignore[attr-defined]
    cls.reads = classmethod(reads)  # type: ignore[attr-defined]
    cls.writes = classmethod(writes)  # type: ignore[attr-defined]
    cls.release = release  # type: ignore[attr-defined]
    cls.__enter__ = __enter__  # type: ignore[attr-defined]
    cls.__exit__ = __exit__  # type: ignore[attr-defined]
    return cls
