"""Borrow-tracking cell: one value, run-time checked shared/exclusive borrows."""

from borrowkit.core.cell.core import Ref, RefMut, TrustCell
from borrowkit.core.cell.models import BorrowState

__all__ = [
    "TrustCell",
    "Ref",
    "RefMut",
    "BorrowState",
]
