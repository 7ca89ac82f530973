"""Interior-mutability cell with run-time borrow tracking.

Usage:
    cell = TrustCell([1, 2, 3])

    ref = cell.borrow()          # shared, any number may coexist
    print(ref.value)
    ref.release()

    ref_mut = cell.borrow_mut()  # exclusive, only from FREE
    ref_mut.value = [4, 5]
    ref_mut.release()

A borrow attempt never waits: it succeeds or raises BorrowConflictError
immediately. The flag check and update happen under the cell's lock, so two
threads racing for an exclusive borrow can never both win.
"""

from __future__ import annotations

import logging
import os
import threading
import traceback
from typing import Any, Generic, TypeVar

from borrowkit.core.cell.models import EXCLUSIVE_FLAG, FREE_FLAG, BorrowState
from borrowkit.core.errors import BorrowConflictError, ReleasedBorrowError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _caller_site() -> str:
    """Describe the innermost stack frame outside this package."""
    for frame in reversed(traceback.extract_stack()):
        if not os.path.abspath(frame.filename).startswith(_PACKAGE_DIR + os.sep):
            return f"{frame.filename}:{frame.lineno} in {frame.name}"
    return "<unknown>"


class TrustCell(Generic[T]):
    """Owns one value and counts its live borrows.

    Flag encoding: 0 is free, n > 0 is n shared borrows, -1 is exclusive.

    Args:
        value: The value to own.
        track_sites: Record where each live borrow was taken and report the
            holders in conflict messages. Costs a stack walk per borrow.
    """

    __slots__ = ("_value", "_flag", "_lock", "_sites")

    def __init__(self, value: T, *, track_sites: bool = False) -> None:
        self._value = value
        self._flag = FREE_FLAG
        # Reentrant: a collected token may release from inside a borrow call
        self._lock = threading.RLock()
        self._sites: dict[int, str] | None = {} if track_sites else None

    @property
    def state(self) -> BorrowState:
        """Current borrow state (a snapshot, may change right after)."""
        flag = self._flag
        if flag == FREE_FLAG:
            return BorrowState.FREE
        if flag == EXCLUSIVE_FLAG:
            return BorrowState.EXCLUSIVE
        return BorrowState.SHARED

    @property
    def shared_count(self) -> int:
        """Number of live shared borrows."""
        return max(self._flag, 0)

    def borrow(self) -> Ref[T]:
        """Take a shared borrow.

        Raises:
            BorrowConflictError: If the cell is exclusively borrowed.
        """
        site = _caller_site() if self._sites is not None else None
        with self._lock:
            if self._flag == EXCLUSIVE_FLAG:
                raise self._conflict("Already borrowed mutably", BorrowState.EXCLUSIVE)
            self._flag += 1
            ref = Ref(self)
            self._remember(ref, site)
            return ref

    def borrow_mut(self) -> RefMut[T]:
        """Take an exclusive borrow.

        Raises:
            BorrowConflictError: "Already borrowed" if shared borrows are live,
                "Already borrowed mutably" if an exclusive borrow is live.
        """
        site = _caller_site() if self._sites is not None else None
        with self._lock:
            if self._flag == EXCLUSIVE_FLAG:
                raise self._conflict("Already borrowed mutably", BorrowState.EXCLUSIVE)
            if self._flag != FREE_FLAG:
                raise self._conflict("Already borrowed", BorrowState.SHARED)
            self._flag = EXCLUSIVE_FLAG
            ref = RefMut(self)
            self._remember(ref, site)
            return ref

    def _remember(self, ref: Any, site: str | None) -> None:
        if self._sites is not None and site is not None:
            self._sites[id(ref)] = site

    def _conflict(self, message: str, state: BorrowState) -> BorrowConflictError:
        if self._sites:
            message = f"{message} (held at: {'; '.join(self._sites.values())})"
        logger.debug("Borrow conflict on %s: %s", type(self._value).__qualname__, message)
        return BorrowConflictError(message, state)

    def _release(self, ref: Ref[T] | RefMut[T]) -> None:
        with self._lock:
            # Tokens detach under the lock so racing releases count once
            if ref._cell is None:
                return
            ref._cell = None
            if self._sites is not None:
                self._sites.pop(id(ref), None)
            if isinstance(ref, RefMut):
                self._flag = FREE_FLAG
            else:
                self._flag -= 1

    def __repr__(self) -> str:
        state = self.state
        if state == BorrowState.SHARED:
            return f"TrustCell(state={state.name}({self._flag}))"
        return f"TrustCell(state={state.name})"


class Ref(Generic[T]):
    """Shared borrow token. Created only by TrustCell.borrow()."""

    __slots__ = ("_cell",)

    def __init__(self, cell: TrustCell[T]) -> None:
        self._cell: TrustCell[T] | None = cell

    @property
    def released(self) -> bool:
        return self._cell is None

    @property
    def value(self) -> T:
        cell = self._cell
        if cell is None:
            raise ReleasedBorrowError("Borrow already released")
        return cell._value

    def release(self) -> None:
        """End the borrow. Safe to call more than once."""
        cell = self._cell
        if cell is not None:
            cell._release(self)

    def __del__(self) -> None:
        self.release()


class RefMut(Ref[T]):
    """Exclusive borrow token. Created only by TrustCell.borrow_mut()."""

    __slots__ = ()

    @property
    def value(self) -> T:
        cell = self._cell
        if cell is None:
            raise ReleasedBorrowError("Borrow already released")
        return cell._value

    @value.setter
    def value(self, new_value: T) -> None:
        cell = self._cell
        if cell is None:
            raise ReleasedBorrowError("Borrow already released")
        cell._value = new_value
