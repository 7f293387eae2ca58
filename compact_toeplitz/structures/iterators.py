"""Index cursors that traverse a structured matrix along rows or columns.

A cursor is a lightweight `(matrix, index1, index2)` triple. It never touches
the matrix storage itself; dereferencing goes through `matrix.get` and
`matrix.set`. Moving a cursor changes only its advancing index:

- `RowIterator` (axis 1) advances the row index `index1` and keeps the
  column index `index2` fixed.
- `ColumnIterator` (axis 2) advances `index2` and keeps `index1` fixed.

From any position, `begin()` and `end()` produce a cursor along the other
axis, so a row cursor yields the column cursors that walk through its row
and vice versa. `ReverseIterator` adapts either type to walk backwards.

Warning:
    Cursors are invalidated by any operation that changes the matrix shape or
    replaces its storage (`resize`, `swap`, `assign`). Using an invalidated
    cursor is undefined behavior and is not detected.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import total_ordering
from typing import Any, Iterator, Union

from torch import Tensor

from compact_toeplitz.structures.errors import CursorMismatchError


@total_ordering
class _IndexCursor(ABC):
    """Shared logic of row and column cursors.

    Attributes:
        AXIS: The axis along which the cursor advances (`1` or `2`).
    """

    AXIS: int

    def __init__(
        self, matrix: Any, index1: int, index2: int, readonly: bool = False
    ) -> None:
        """Place the cursor at position `(index1, index2)` of `matrix`.

        Args:
            matrix: The traversed matrix. Must provide `get`, `set` and
                `shape`.
            index1: Row index.
            index2: Column index.
            readonly: Whether writing through the cursor is forbidden.
                Default: `False`.
        """
        self._matrix = matrix
        self._index1 = index1
        self._index2 = index2
        self._readonly = readonly

    @property
    def matrix(self) -> Any:
        """The traversed matrix."""
        return self._matrix

    @property
    def index1(self) -> int:
        """Row index of the current position."""
        return self._index1

    @property
    def index2(self) -> int:
        """Column index of the current position."""
        return self._index2

    @property
    def readonly(self) -> bool:
        """Whether writing through the cursor is forbidden."""
        return self._readonly

    @property
    def value(self) -> Tensor:
        """Read the element at the current position.

        Returns:
            The element, as returned by `matrix.get`.
        """
        return self._matrix.get(self._index1, self._index2)

    @value.setter
    def value(self, value: Union[Tensor, float]) -> None:
        """Write the element at the current position.

        Note:
            Writing an element of a Toeplitz matrix changes its whole diagonal.

        Args:
            value: The new value.

        Raises:
            TypeError: If the cursor is read-only.
        """
        if self._readonly:
            raise TypeError(f"Cannot write through read-only {self!r}.")
        self._matrix.set(self._index1, self._index2, value)

    def as_readonly(self) -> _IndexCursor:
        """Return a read-only cursor at the same position.

        Returns:
            The read-only cursor.
        """
        return self.__class__(self._matrix, self._index1, self._index2, readonly=True)

    @abstractmethod
    def _get_advancing(self) -> int:
        """Return the index that moves along the axis."""
        raise NotImplementedError

    @abstractmethod
    def _get_fixed(self) -> int:
        """Return the index that stays fixed."""
        raise NotImplementedError

    @abstractmethod
    def __iadd__(self, n: int) -> _IndexCursor:
        """Advance by `n` positions in-place."""
        raise NotImplementedError

    def _moved(self, n: int) -> _IndexCursor:
        """Return a new cursor moved by `n` positions along the axis.

        Args:
            n: Number of positions, may be negative.

        Returns:
            The moved cursor.
        """
        new = self.__class__(self._matrix, self._index1, self._index2, self._readonly)
        new += n
        return new

    def increment(self) -> _IndexCursor:
        """Advance by one position in-place.

        Returns:
            A reference to the cursor.
        """
        self += 1
        return self

    def decrement(self) -> _IndexCursor:
        """Move back by one position in-place.

        Returns:
            A reference to the cursor.
        """
        self -= 1
        return self

    def __isub__(self, n: int) -> _IndexCursor:
        self += -n
        return self

    def __add__(self, n: int) -> _IndexCursor:
        return self._moved(n)

    __radd__ = __add__

    def __sub__(self, other: Union[int, _IndexCursor]) -> Union[int, _IndexCursor]:
        """Move back by an offset, or measure the distance to another cursor.

        Args:
            other: Either an offset, or a cursor on the same line.

        Returns:
            A moved cursor for integer `other`, else the index difference.
        """
        if isinstance(other, _IndexCursor):
            self._check_compatible(other)
            return self._get_advancing() - other._get_advancing()
        return self._moved(-other)

    def __getitem__(self, n: int) -> Tensor:
        return (self + n).value

    def _check_compatible(self, other: _IndexCursor) -> None:
        """Make sure that two cursors traverse the same line of the same matrix.

        Args:
            other: The other cursor.

        Raises:
            CursorMismatchError: If the cursors belong to different matrices, move
                along different axes, or are fixed to different lines.
        """
        if self.AXIS != other.AXIS:
            raise CursorMismatchError(
                f"Cursors advance along different axes ({self.AXIS}, {other.AXIS})."
            )
        if self._matrix is not other._matrix:
            raise CursorMismatchError("Cursors traverse different matrices.")
        if self._get_fixed() != other._get_fixed():
            raise CursorMismatchError(
                f"Cursors traverse different lines ({self._get_fixed()}, "
                + f"{other._get_fixed()})."
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _IndexCursor):
            return NotImplemented
        self._check_compatible(other)
        return self._get_advancing() == other._get_advancing()

    def __lt__(self, other: _IndexCursor) -> bool:
        if not isinstance(other, _IndexCursor):
            return NotImplemented
        self._check_compatible(other)
        return self._get_advancing() < other._get_advancing()

    __hash__ = None  # mutable

    @abstractmethod
    def begin(self) -> _IndexCursor:
        """Cursor at the start of the other axis through the current position."""
        raise NotImplementedError

    @abstractmethod
    def end(self) -> _IndexCursor:
        """Cursor past the end of the other axis through the current position."""
        raise NotImplementedError

    def rbegin(self) -> ReverseIterator:
        """Reverse cursor at the last element along the other axis.

        Returns:
            A reverse cursor wrapping `end()`.
        """
        return ReverseIterator(self.end())

    def rend(self) -> ReverseIterator:
        """Reverse cursor one before the first element along the other axis.

        Returns:
            A reverse cursor wrapping `begin()`.
        """
        return ReverseIterator(self.begin())

    def __repr__(self) -> str:
        readonly = ", readonly" if self._readonly else ""
        return (
            f"{self.__class__.__name__}(index1={self._index1}, "
            + f"index2={self._index2}{readonly})"
        )


class RowIterator(_IndexCursor):
    """Cursor that advances through the rows of a matrix (axis 1).

    The column index stays fixed. At every row, `begin()` and `end()` return
    `ColumnIterator`s spanning the columns of that row.
    """

    AXIS = 1

    def _get_advancing(self) -> int:
        return self._index1

    def _get_fixed(self) -> int:
        return self._index2

    def __iadd__(self, n: int) -> RowIterator:
        self._index1 += n
        return self

    def begin(self) -> ColumnIterator:
        """Cursor at the first column of the current row.

        Returns:
            A column cursor at `(index1, 0)`.
        """
        return ColumnIterator(self._matrix, self._index1, 0, self._readonly)

    def end(self) -> ColumnIterator:
        """Cursor one past the last column of the current row.

        Returns:
            A column cursor at `(index1, num_cols)`.
        """
        _, num_cols = self._matrix.shape
        return ColumnIterator(self._matrix, self._index1, num_cols, self._readonly)


class ColumnIterator(_IndexCursor):
    """Cursor that advances through the columns of a matrix (axis 2).

    The row index stays fixed. At every column, `begin()` and `end()` return
    `RowIterator`s spanning the rows of that column.
    """

    AXIS = 2

    def _get_advancing(self) -> int:
        return self._index2

    def _get_fixed(self) -> int:
        return self._index1

    def __iadd__(self, n: int) -> ColumnIterator:
        self._index2 += n
        return self

    def begin(self) -> RowIterator:
        """Cursor at the first row of the current column.

        Returns:
            A row cursor at `(0, index2)`.
        """
        return RowIterator(self._matrix, 0, self._index2, self._readonly)

    def end(self) -> RowIterator:
        """Cursor one past the last row of the current column.

        Returns:
            A row cursor at `(num_rows, index2)`.
        """
        num_rows, _ = self._matrix.shape
        return RowIterator(self._matrix, num_rows, self._index2, self._readonly)


@total_ordering
class ReverseIterator:
    """Adapter that walks a row or column cursor backwards.

    A reverse cursor holds a forward cursor `base` and refers to the element
    right before it, so wrapping `end()` yields the last element and wrapping
    `begin()` yields the position one before the first element.
    """

    def __init__(self, base: _IndexCursor) -> None:
        """Wrap a forward cursor.

        Args:
            base: The forward cursor. It is copied.
        """
        self._base = base + 0

    def base(self) -> _IndexCursor:
        """Return a copy of the wrapped forward cursor.

        Returns:
            The forward cursor one past the referred element.
        """
        return self._base + 0

    def _current(self) -> _IndexCursor:
        return self._base - 1

    @property
    def matrix(self) -> Any:
        """The traversed matrix."""
        return self._base.matrix

    @property
    def index1(self) -> int:
        """Row index of the referred element."""
        return self._current().index1

    @property
    def index2(self) -> int:
        """Column index of the referred element."""
        return self._current().index2

    @property
    def readonly(self) -> bool:
        """Whether writing through the cursor is forbidden."""
        return self._base.readonly

    @property
    def value(self) -> Tensor:
        """Read the referred element."""
        return self._current().value

    @value.setter
    def value(self, value: Union[Tensor, float]) -> None:
        """Write the referred element (and hence its whole diagonal)."""
        self._current().value = value

    def as_readonly(self) -> ReverseIterator:
        """Return a read-only reverse cursor at the same position.

        Returns:
            The read-only reverse cursor.
        """
        return ReverseIterator(self._base.as_readonly())

    def increment(self) -> ReverseIterator:
        self._base -= 1
        return self

    def decrement(self) -> ReverseIterator:
        self._base += 1
        return self

    def __iadd__(self, n: int) -> ReverseIterator:
        self._base -= n
        return self

    def __isub__(self, n: int) -> ReverseIterator:
        self._base += n
        return self

    def __add__(self, n: int) -> ReverseIterator:
        return ReverseIterator(self._base - n)

    __radd__ = __add__

    def __sub__(
        self, other: Union[int, ReverseIterator]
    ) -> Union[int, ReverseIterator]:
        if isinstance(other, ReverseIterator):
            return other._base - self._base
        return ReverseIterator(self._base + other)

    def __getitem__(self, n: int) -> Tensor:
        return (self + n).value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReverseIterator):
            return NotImplemented
        return self._base == other._base

    def __lt__(self, other: ReverseIterator) -> bool:
        if not isinstance(other, ReverseIterator):
            return NotImplemented
        return other._base < self._base

    __hash__ = None

    def begin(self) -> _IndexCursor:
        """Forward cursor at the start of the other axis through the referred element.

        Returns:
            The dual forward cursor.
        """
        return self._current().begin()

    def end(self) -> _IndexCursor:
        """Forward cursor past the end of the other axis through the referred element.

        Returns:
            The dual forward cursor.
        """
        return self._current().end()

    def rbegin(self) -> ReverseIterator:
        return ReverseIterator(self.end())

    def rend(self) -> ReverseIterator:
        return ReverseIterator(self.begin())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._base!r})"


Cursor = Union[RowIterator, ColumnIterator, ReverseIterator]


def iterate(first: Cursor, last: Cursor) -> Iterator[Cursor]:
    """Yield a cursor for every position in the half-open range `[first, last)`.

    This connects cursor pairs to Python's iterator protocol, e.g.

    ```python
    for row in iterate(mat.begin1(), mat.end1()):
        print([col.value for col in iterate(row.begin(), row.end())])
    ```

    Args:
        first: Cursor at the first position. It is not modified.
        last: Cursor one past the last position.

    Yields:
        Independent cursors, one per position.
    """
    current = first + 0
    while current != last:
        yield current + 0
        current.increment()
