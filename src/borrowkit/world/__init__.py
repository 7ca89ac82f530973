"""Resource container and its guards.

Architecture Note:
    world/ is the stateful layer. Resources owns the registered values and
    hands out Fetch/FetchMut guards that hold borrows on per-resource cells.
"""

from borrowkit.world.fetch import Fetch, FetchId, FetchIdMut, FetchMut
from borrowkit.world.resources import Resources

__all__ = [
    "Resources",
    "Fetch",
    "FetchMut",
    "FetchId",
    "FetchIdMut",
]
