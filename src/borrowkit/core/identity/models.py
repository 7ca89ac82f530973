"""Resource identity models.

Usage:
    res_id = ResourceId(Position)          # aux id defaults to 0
    third = ResourceId.of(EntityBuffer, 3)  # third buffer of the same type
"""

from __future__ import annotations

from dataclasses import dataclass


def qualified_name(cls: type) -> str:
    """Return the fully qualified `module.QualName` of a type."""
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True, slots=True)
class ResourceId:
    """Key of one resource slot: a type plus an auxiliary id.

    The auxiliary id disambiguates several resources of the same type.
    Equality and hashing consider both fields.
    """

    type: type
    aux_id: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.type, type):
            raise TypeError(f"Resource type must be a class, got {self.type!r}")
        if isinstance(self.aux_id, bool) or not isinstance(self.aux_id, int):
            raise TypeError(f"Auxiliary id must be an int, got {self.aux_id!r}")
        if self.aux_id < 0:
            raise ValueError(f"Auxiliary id must be non-negative, got {self.aux_id}")

    def __hash__(self) -> int:
        return hash((self.type, self.aux_id))

    @classmethod
    def of(cls, resource_type: type, aux_id: int = 0) -> ResourceId:
        """Create the identity of `resource_type` under `aux_id`."""
        return cls(resource_type, aux_id)

    @property
    def type_name(self) -> str:
        """Fully qualified name of the resource type."""
        return qualified_name(self.type)

    def __str__(self) -> str:
        return f"{self.type.__qualname__}#{self.aux_id}"
