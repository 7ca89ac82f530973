"""Borrow state models."""

from enum import Enum, auto


class BorrowState(Enum):
    """Observable borrow state of a cell."""

    FREE = auto()  # No live borrows
    SHARED = auto()  # One or more live shared borrows
    EXCLUSIVE = auto()  # Exactly one live exclusive borrow


# Raw flag values: n > 0 counts shared borrows
FREE_FLAG = 0
EXCLUSIVE_FLAG = -1
