"""Guards returned by Resources fetch operations.

Usage:
    with resources.fetch_shared(Position) as pos:
        print(pos.value.x)

    with resources.fetch_exclusive(Counter, 1) as counter:
        counter.value = Counter(counter.value.n + 1)

    # As access declarations
    Fetch[Position].reads(0)     # [ResourceId(Position, 0)]
    FetchMut[Position].writes(0)  # [ResourceId(Position, 0)]

A guard holds one borrow on one resource. Releasing it (explicitly, by leaving
the with block, or by dropping the last reference) ends the borrow exactly once.

Gotcha: a shared guard hands out the stored object itself. Mutating that
object's internals through a shared guard is not detected; replace or mutate
through an exclusive guard instead.
"""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

from borrowkit.core.cell import Ref, RefMut
from borrowkit.core.identity import ResourceId

if TYPE_CHECKING:
    from borrowkit.world.resources import Resources

T = TypeVar("T")

_specializations: dict[tuple[type, type], type] = {}


class _Guard:
    """Common guard behavior: identity, release, context management."""

    __slots__ = ("_id", "_ref")

    def __init__(self, res_id: ResourceId, ref: Ref[Any]) -> None:
        self._id = res_id
        self._ref = ref

    @property
    def id(self) -> ResourceId:
        """Identity of the borrowed resource."""
        return self._id

    @property
    def released(self) -> bool:
        return self._ref.released

    def release(self) -> None:
        """End the borrow now. Further calls are no-ops."""
        self._ref.release()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({self._id}, released={self.released})"


class _ExclusiveValue:
    """Read/replace access for guards over an exclusive borrow."""

    __slots__ = ()

    _id: ResourceId
    _ref: RefMut[Any]

    def _replace(self, new_value: Any) -> None:
        if not isinstance(new_value, self._id.type):
            raise TypeError(
                f"Cannot replace {self._id} with {type(new_value).__qualname__}: "
                f"expected an instance of {self._id.type.__qualname__}"
            )
        self._ref.value = new_value


class _TypedGuard(_Guard):
    """Guard parameterized by its resource type: `Guard[Position]`.

    Subscripting with a concrete class returns a cached subclass whose
    `resource_type` is that class, so the specialization is a real class that
    can be instantiated, checked with isinstance, and used as a declaration.
    """

    __slots__ = ()

    resource_type: ClassVar[type | None] = None

    def __class_getitem__(cls, item: Any) -> Any:
        if not isinstance(item, type):
            return super().__class_getitem__(item)  # type: ignore[misc]
        if cls.resource_type is not None:
            raise TypeError(f"{cls.__qualname__} is already specialized")
        key = (cls, item)
        specialized = _specializations.get(key)
        if specialized is None:
            specialized = type(
                f"{cls.__name__}[{item.__qualname__}]",
                (cls,),
                {"__slots__": (), "__module__": cls.__module__, "resource_type": item},
            )
            specialized = _specializations.setdefault(key, specialized)
        return specialized

    @classmethod
    def _resource_type(cls) -> type:
        if cls.resource_type is None:
            raise TypeError(
                f"{cls.__qualname__} needs a resource type, e.g. {cls.__qualname__}[MyResource]"
            )
        return cls.resource_type

    @classmethod
    def _resource_id(cls, aux_id: int) -> ResourceId:
        return ResourceId(cls._resource_type(), aux_id)


class Fetch(_TypedGuard, Generic[T]):
    """Shared guard over a resource of type T."""

    __slots__ = ()

    @property
    def value(self) -> T:
        return self._ref.value

    @classmethod
    def construct(cls, resources: Resources, aux_id: int = 0) -> Self:
        """Fetch the declared resource from `resources` with a shared borrow."""
        guard = resources.fetch_shared(cls._resource_type(), aux_id)
        return guard  # type: ignore[return-value]

    @classmethod
    def reads(cls, aux_id: int = 0) -> list[ResourceId]:
        return [cls._resource_id(aux_id)]

    @classmethod
    def writes(cls, aux_id: int = 0) -> list[ResourceId]:
        return []


class FetchMut(_ExclusiveValue, _TypedGuard, Generic[T]):
    """Exclusive guard over a resource of type T. Assigning `value` replaces it."""

    __slots__ = ()

    @property
    def value(self) -> T:
        return self._ref.value

    @value.setter
    def value(self, new_value: T) -> None:
        self._replace(new_value)

    @classmethod
    def construct(cls, resources: Resources, aux_id: int = 0) -> Self:
        """Fetch the declared resource from `resources` with an exclusive borrow."""
        guard = resources.fetch_exclusive(cls._resource_type(), aux_id)
        return guard  # type: ignore[return-value]

    @classmethod
    def reads(cls, aux_id: int = 0) -> list[ResourceId]:
        return []

    @classmethod
    def writes(cls, aux_id: int = 0) -> list[ResourceId]:
        return [cls._resource_id(aux_id)]


class FetchId(_Guard):
    """Untyped shared guard returned by dynamic fetches."""

    __slots__ = ()

    @property
    def value(self) -> Any:
        return self._ref.value


class FetchIdMut(_ExclusiveValue, _Guard):
    """Untyped exclusive guard returned by dynamic fetches."""

    __slots__ = ()

    @property
    def value(self) -> Any:
        return self._ref.value

    @value.setter
    def value(self, new_value: Any) -> None:
        self._replace(new_value)
