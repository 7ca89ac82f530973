"""Resource identity: (type, auxiliary id) keys."""

from borrowkit.core.identity.models import ResourceId, qualified_name

__all__ = [
    "ResourceId",
    "qualified_name",
]
