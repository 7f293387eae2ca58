"""Toeplitz matrix implemented in the `StructuredMatrix` interface."""

from __future__ import annotations

from typing import Iterator, Sequence, Tuple, Union
from warnings import warn

import torch
from torch import Tensor, arange, as_tensor, cat, zeros

from compact_toeplitz.structures.base import StructuredMatrix
from compact_toeplitz.structures.errors import (
    ConstructionError,
    DimensionMismatchError,
    IndexOutOfRangeError,
)
from compact_toeplitz.structures.iterators import (
    ColumnIterator,
    ReverseIterator,
    RowIterator,
)
from compact_toeplitz.structures.utils import (
    all_traces,
    diagonal_lengths,
    is_toeplitz,
    num_diagonals,
)


class ToeplitzMatrix(StructuredMatrix):
    r"""Rectangular Toeplitz matrix that stores one value per diagonal.

    A Toeplitz matrix with \(N\) rows and \(M\) columns is defined by its first
    column \(\mathbf{c} \in \mathbb{R}^N\) and its first row
    \(\mathbf{r} \in \mathbb{R}^M\) with \(c_1 = r_1\):

    \(
    \begin{pmatrix}
        c_1 & r_2 & \cdots & r_M \\
        c_2 & c_1 & \ddots & \vdots \\
        \vdots & \ddots & \ddots & r_2 \\
        c_N & \cdots & c_2 & c_1 \\
    \end{pmatrix} \in \mathbb{R}^{N \times M}\,.
    \)

    Internally, the \(N + M - 1\) diagonal constants are held in a single vector
    \(\mathbf{d} = (c_N, \dots, c_2, c_1, r_2, \dots, r_M)\), ordered from the
    bottom left entry to the top right entry. Entry \((i, j)\) lives in slot
    `N - 1 - i + j` of that vector, see `offset`.

    Note:
        Every diagonal is a single stored value. Writing entry \((i, j)\) writes
        every entry \((i', j')\) with \(i' - j' = i - j\). The same holds for
        `erase`, which zeroes the entire diagonal.

    Attributes:
        CHECK_BOUNDS: Validate indices in `get`, `set`, `erase`, and `offset`.
            Disable it (on the class or an instance) to trade safety for speed; then
            out-of-range indices lead to undefined behavior. `get_unchecked` and
            `set_unchecked` never validate. Default: `True`.
        WARN_PROJECTION: Warn in `from_dense` if the dense matrix is not Toeplitz
            and information is lost in the conversion. Default: `True`.
    """

    CHECK_BOUNDS: bool = True
    WARN_PROJECTION: bool = True

    def __init__(
        self,
        num_rows: int = 0,
        num_cols: int = 0,
        diags: Union[Tensor, None] = None,
        dtype: Union[torch.dtype, None] = None,
        device: Union[torch.device, None] = None,
    ) -> None:
        """Store the Toeplitz matrix internally.

        Args:
            num_rows: Number of rows. Default: `0`.
            num_cols: Number of columns. Default: `0`.
            diags: Optional vector with the constants of all diagonals, ordered from
                the bottom left to the top right entry. Must have `num_rows +
                num_cols - 1` entries (none for an empty matrix). The matrix takes
                ownership of it. If not specified, the matrix is zero.
            dtype: Optional data type of the zero matrix if `diags` is not
                specified. If not specified, uses the default tensor type.
            device: Optional device of the zero matrix if `diags` is not specified.
                If not specified, uses the default tensor type.

        Raises:
            ConstructionError: If a dimension is negative or `diags` does not have
                the right shape.
        """
        if num_rows < 0 or num_cols < 0:
            raise ConstructionError(
                f"Dimensions must be non-negative. Got ({num_rows}, {num_cols})."
            )
        num_diags = num_diagonals(num_rows, num_cols)

        if diags is None:
            diags = zeros(num_diags, dtype=dtype, device=device)
        elif diags.shape != (num_diags,):
            raise ConstructionError(
                f"A ({num_rows}, {num_cols}) Toeplitz matrix needs {num_diags} "
                + f"diagonal values. Got shape {tuple(diags.shape)}."
            )

        super().__init__()
        self._num_rows = num_rows
        self._num_cols = num_cols
        self._diags: Tensor
        self.register_tensor(diags, "_diags")

    @classmethod
    def from_row_col(
        cls,
        row: Union[Tensor, Sequence[float]],
        col: Union[Tensor, Sequence[float]],
    ) -> ToeplitzMatrix:
        r"""Construct from the first row and the first column.

        Args:
            row: The first row \(\mathbf{r}\). Determines the number of columns.
            col: The first column \(\mathbf{c}\). Determines the number of rows.
                Converted to the device of `row`. Both vectors are promoted to a
                common data type before they are compared.

        Returns:
            The Toeplitz matrix with first row `row` and first column `col`.

        Raises:
            ConstructionError: If `row` or `col` is empty or not a vector, or if their
                first entries differ (both describe the top left entry).
        """
        row = as_tensor(row)
        col = as_tensor(col, device=row.device)
        dtype = torch.promote_types(row.dtype, col.dtype)
        row, col = row.to(dtype), col.to(dtype)

        for name, vec in [("row", row), ("col", col)]:
            if vec.ndim != 1:
                raise ConstructionError(
                    f"{name} must be a vector. Got shape {tuple(vec.shape)}."
                )
            if vec.numel() == 0:
                raise ConstructionError(f"{name} must not be empty.")

        if not bool(row[0] == col[0]):
            raise ConstructionError(
                f"First entries of row and col must match. Got {row[0].item()} "
                + f"and {col[0].item()}."
            )

        (num_rows,), (num_cols,) = col.shape, row.shape
        return cls(num_rows, num_cols, diags=cat([col.flip(0), row[1:]]))

    @classmethod
    def from_dense(cls, mat: Tensor) -> ToeplitzMatrix:
        """Construct from a PyTorch tensor.

        If `mat` is Toeplitz, its first row and column are copied. Otherwise, every
        diagonal of the result holds the average of the corresponding diagonal of
        `mat`, which discards information.

        Args:
            mat: A dense matrix which will be approximated by a `ToeplitzMatrix`.

        Returns:
            `ToeplitzMatrix` approximating the passed matrix.

        Raises:
            ValueError: If `mat` is not a matrix.
        """
        if mat.ndim != 2:
            raise ValueError(f"Expected a matrix, but got shape {tuple(mat.shape)}.")

        num_rows, num_cols = mat.shape
        if num_diagonals(num_rows, num_cols) == 0:
            return cls(num_rows, num_cols, dtype=mat.dtype, device=mat.device)

        if is_toeplitz(mat):
            return cls.from_row_col(mat[0].clone(), mat[:, 0].clone())

        if cls.WARN_PROJECTION:
            warn(
                f"Dense matrix of shape {tuple(mat.shape)} is not Toeplitz. "
                + "Diagonals are replaced by their average."
            )
        lengths = diagonal_lengths(num_rows, num_cols, device=mat.device)
        return cls(num_rows, num_cols, diags=all_traces(mat) / lengths)

    def to_dense(self) -> Tensor:
        """Convert into dense PyTorch tensor.

        Returns:
            The represented matrix as PyTorch tensor.
        """
        if self._diags.numel() == 0:
            return zeros(
                self.shape, dtype=self._diags.dtype, device=self._diags.device
            )

        i = arange(self._num_rows, device=self._diags.device).unsqueeze(-1)
        j = arange(self._num_cols, device=self._diags.device).unsqueeze(0)
        return self._diags[self._num_rows - 1 - i + j]

    ###############################################################################
    #                          Storage and index mapping                          #
    ###############################################################################

    @property
    def shape(self) -> Tuple[int, int]:
        """Return the number of rows and columns.

        Returns:
            Tuple `(num_rows, num_cols)`.
        """
        return self._num_rows, self._num_cols

    @property
    def num_rows(self) -> int:
        """Number of rows."""
        return self._num_rows

    @property
    def num_cols(self) -> int:
        """Number of columns."""
        return self._num_cols

    @property
    def data(self) -> Tensor:
        """Direct access to the vector of diagonal constants.

        The vector is ordered from the bottom left to the top right diagonal. It is
        not a copy: in-place modifications change the matrix.

        Returns:
            The storage vector.
        """
        return self._diags

    @data.setter
    def data(self, diags: Tensor) -> None:
        """Replace the storage vector.

        Args:
            diags: The new diagonal constants. Must have the current length.

        Raises:
            DimensionMismatchError: If `diags` has the wrong shape.
        """
        if diags.shape != self._diags.shape:
            raise DimensionMismatchError(
                f"Expected shape {tuple(self._diags.shape)} for the diagonal "
                + f"values, got {tuple(diags.shape)}."
            )
        self._diags = diags

    def _check_index(self, i: int, j: int) -> None:
        """Make sure that `(i, j)` addresses an entry of the matrix.

        Args:
            i: Row index.
            j: Column index.

        Raises:
            IndexOutOfRangeError: If the index is out of bounds.
        """
        if not (0 <= i < self._num_rows and 0 <= j < self._num_cols):
            raise IndexOutOfRangeError(
                f"Index ({i}, {j}) is out of range for shape {self.shape}."
            )

    def _offset(self, i: int, j: int) -> int:
        # lower (i >= j) and upper (i < j) triangle share the same formula
        return self._num_rows - 1 - i + j

    def offset(self, i: int, j: int) -> int:
        """Compute the storage slot of entry `(i, j)`.

        All entries on the same diagonal share the same slot. The slots of the
        `num_rows + num_cols - 1` diagonals are `0, 1, ...` from the bottom left
        to the top right entry.

        Args:
            i: Row index.
            j: Column index.

        Returns:
            Position of the entry's diagonal in `data`.
        """
        if self.CHECK_BOUNDS:
            self._check_index(i, j)
        return self._offset(i, j)

    def first_cell(self, k: int) -> Tuple[int, int]:
        """Map a storage slot back to the first entry of its diagonal.

        Args:
            k: Position in `data`.

        Returns:
            The top left-most entry `(i, j)` with `offset(i, j) == k`.

        Raises:
            IndexOutOfRangeError: If `k` is not a valid storage slot.
        """
        if not 0 <= k < self._diags.numel():
            raise IndexOutOfRangeError(
                f"Slot {k} is out of range for {self._diags.numel()} diagonals."
            )
        main = self._num_rows - 1
        return (main - k, 0) if k < main else (0, k - main)

    @staticmethod
    def diagonal_index(i: int, j: int) -> int:
        """Return the index of the diagonal through `(i, j)`.

        Uses PyTorch's convention (see `torch.diagonal`): `0` is the main diagonal,
        positive values are above and negative values below.

        Args:
            i: Row index.
            j: Column index.

        Returns:
            `j - i`.
        """
        return j - i

    ###############################################################################
    #                       Element access and modification                       #
    ###############################################################################

    def get(self, i: int, j: int) -> Tensor:
        """Read entry `(i, j)`.

        Args:
            i: Row index.
            j: Column index.

        Returns:
            A zero-dimensional view onto the diagonal constant. It is not a
            snapshot: writing any entry of the same diagonal later, e.g. with `set`,
            changes its value. Use `.item()` or `.clone()` to keep the current
            value.
        """
        return self._diags[self.offset(i, j)]

    def set(self, i: int, j: int, value: Union[Tensor, float]) -> None:
        """Write entry `(i, j)`, hence the entire diagonal through it.

        Args:
            i: Row index.
            j: Column index.
            value: The new value of all entries on the diagonal.
        """
        self._diags[self.offset(i, j)] = value

    def get_unchecked(self, i: int, j: int) -> Tensor:
        """Same as `get`, but never validates the index.

        Args:
            i: Row index.
            j: Column index.

        Returns:
            A zero-dimensional view onto the diagonal constant, see `get`.
        """
        return self._diags[self._offset(i, j)]

    def set_unchecked(self, i: int, j: int, value: Union[Tensor, float]) -> None:
        """Same as `set`, but never validates the index.

        Args:
            i: Row index.
            j: Column index.
            value: The new value of all entries on the diagonal.
        """
        self._diags[self._offset(i, j)] = value

    def __getitem__(self, index: Tuple[int, int]) -> Tensor:
        return self.get(*index)

    def __setitem__(self, index: Tuple[int, int], value: Union[Tensor, float]) -> None:
        self.set(*index, value)

    def erase(self, i: int, j: int) -> None:
        """Zero entry `(i, j)`.

        Note:
            Since a diagonal is a single stored value, this zeroes every entry on
            the diagonal through `(i, j)`.

        Args:
            i: Row index.
            j: Column index.
        """
        self.set(i, j, 0)

    def clear(self) -> ToeplitzMatrix:
        """In-place set all entries to zero.

        Returns:
            A reference to the updated matrix.
        """
        self._diags.zero_()
        return self

    def row(self, i: int) -> Tensor:
        """Return row `i` as a view onto the storage.

        Args:
            i: Row index.

        Returns:
            Vector of length `num_cols`.
        """
        start = self.offset(i, 0)
        return self._diags[start : start + self._num_cols]

    def column(self, j: int) -> Tensor:
        """Return column `j`.

        Args:
            j: Column index.

        Returns:
            Vector of length `num_rows`. Unlike `row`, this is a copy.
        """
        stop = self.offset(0, j) + 1
        return self._diags[stop - self._num_rows : stop].flip(0)

    ###############################################################################
    #                       Resizing, assignment, swapping                        #
    ###############################################################################

    def resize(self, num_rows: int, num_cols: int, preserve: bool = True) -> None:
        """Change the dimensions in-place.

        With `preserve=True`, the stored diagonal values are kept and reinterpreted
        under the new shape. This is only possible if the number of diagonals
        stays the same, i.e. `num_rows + num_cols` does not change. Note that this
        is a reshape of the diagonal vector, not a geometric crop or extension.

        With `preserve=False`, the storage is re-allocated and the matrix is zero.

        Warning:
            Both variants invalidate all cursors into the matrix.

        Args:
            num_rows: New number of rows.
            num_cols: New number of columns.
            preserve: Whether to keep the diagonal values. Default: `True`.

        Raises:
            DimensionMismatchError: If `preserve=True` and the number of diagonals
                would change, or if a dimension is negative. The matrix is not
                modified in that case.
        """
        if num_rows < 0 or num_cols < 0:
            raise DimensionMismatchError(
                f"Dimensions must be non-negative. Got ({num_rows}, {num_cols})."
            )

        num_diags = num_diagonals(num_rows, num_cols)
        if preserve:
            if (
                num_rows + num_cols != self._num_rows + self._num_cols
                or num_diags != self._diags.numel()
            ):
                raise DimensionMismatchError(
                    f"Cannot preserve {self._diags.numel()} diagonals of a "
                    + f"{self.shape} matrix when resizing to ({num_rows}, "
                    + f"{num_cols})."
                )
        else:
            self._diags = zeros(
                num_diags, dtype=self._diags.dtype, device=self._diags.device
            )

        self._num_rows, self._num_cols = num_rows, num_cols

    def assign(self, other: ToeplitzMatrix) -> ToeplitzMatrix:
        """In-place replace the state by a copy of another Toeplitz matrix.

        Args:
            other: The matrix whose shape and values will be copied.

        Returns:
            A reference to the updated matrix.
        """
        if other is not self:
            self._num_rows, self._num_cols = other.shape
            self._diags = other._diags.clone()
        return self

    def swap(self, other: ToeplitzMatrix) -> None:
        """Exchange shape and storage with another Toeplitz matrix.

        No entries are copied. Swapping a matrix with itself does nothing.

        Args:
            other: The matrix to swap with.
        """
        if other is self:
            return
        self._num_rows, other._num_rows = other._num_rows, self._num_rows
        self._num_cols, other._num_cols = other._num_cols, self._num_cols
        self._diags, other._diags = other._diags, self._diags

    ###############################################################################
    #                                  Iteration                                  #
    ###############################################################################

    def begin1(self, readonly: bool = False) -> RowIterator:
        """Row cursor at the first row.

        Args:
            readonly: Whether writing through the cursor is forbidden.
                Default: `False`.

        Returns:
            Cursor at `(0, 0)` that advances along rows.
        """
        return RowIterator(self, 0, 0, readonly)

    def end1(self, readonly: bool = False) -> RowIterator:
        """Row cursor one past the last row.

        Args:
            readonly: Whether writing through the cursor is forbidden.
                Default: `False`.

        Returns:
            Cursor at `(num_rows, 0)` that advances along rows.
        """
        return RowIterator(self, self._num_rows, 0, readonly)

    def rbegin1(self, readonly: bool = False) -> ReverseIterator:
        return ReverseIterator(self.end1(readonly))

    def rend1(self, readonly: bool = False) -> ReverseIterator:
        return ReverseIterator(self.begin1(readonly))

    def begin2(self, readonly: bool = False) -> ColumnIterator:
        """Column cursor at the first column.

        Args:
            readonly: Whether writing through the cursor is forbidden.
                Default: `False`.

        Returns:
            Cursor at `(0, 0)` that advances along columns.
        """
        return ColumnIterator(self, 0, 0, readonly)

    def end2(self, readonly: bool = False) -> ColumnIterator:
        """Column cursor one past the last column.

        Args:
            readonly: Whether writing through the cursor is forbidden.
                Default: `False`.

        Returns:
            Cursor at `(0, num_cols)` that advances along columns.
        """
        return ColumnIterator(self, 0, self._num_cols, readonly)

    def rbegin2(self, readonly: bool = False) -> ReverseIterator:
        return ReverseIterator(self.end2(readonly))

    def rend2(self, readonly: bool = False) -> ReverseIterator:
        return ReverseIterator(self.begin2(readonly))

    def __iter__(self) -> Iterator[RowIterator]:
        """Yield a row cursor for every row.

        Yields:
            Independent row cursors, whose `begin()` and `end()` span the row.
        """
        for i in range(self._num_rows):
            yield RowIterator(self, i, 0)

    ###############################################################################
    #                      Special initialization operations                      #
    ###############################################################################

    @classmethod
    def zeros(
        cls,
        num_rows: int,
        num_cols: Union[int, None] = None,
        dtype: Union[torch.dtype, None] = None,
        device: Union[torch.device, None] = None,
    ) -> ToeplitzMatrix:
        """Create a Toeplitz matrix representing the zero matrix.

        Args:
            num_rows: Number of rows.
            num_cols: Number of columns. If not specified, the matrix is square.
            dtype: Optional data type of the matrix. If not specified, uses the default
                tensor type.
            device: Optional device of the matrix. If not specified, uses the default
                tensor type.

        Returns:
            A Toeplitz matrix representing the zero matrix.
        """
        num_cols = num_rows if num_cols is None else num_cols
        return cls(num_rows, num_cols, dtype=dtype, device=device)

    @classmethod
    def eye(
        cls,
        num_rows: int,
        num_cols: Union[int, None] = None,
        dtype: Union[torch.dtype, None] = None,
        device: Union[torch.device, None] = None,
    ) -> ToeplitzMatrix:
        """Create a Toeplitz matrix with ones on the main diagonal.

        Args:
            num_rows: Number of rows.
            num_cols: Number of columns. If not specified, the matrix is square.
            dtype: Optional data type of the matrix. If not specified, uses the default
                tensor type.
            device: Optional device of the matrix. If not specified, uses the default
                tensor type.

        Returns:
            A Toeplitz matrix representing the identity matrix.
        """
        identity = cls.zeros(num_rows, num_cols, dtype=dtype, device=device)
        if identity._diags.numel() > 0:
            identity._diags[num_rows - 1] = 1
        return identity

    def transpose(self) -> ToeplitzMatrix:
        """Return the transpose, which is again a Toeplitz matrix.

        Returns:
            A new Toeplitz matrix with its own storage.
        """
        return ToeplitzMatrix(self._num_cols, self._num_rows, self._diags.flip(0))

    @property
    def T(self) -> ToeplitzMatrix:
        """Transpose (see `transpose`)."""
        return self.transpose()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(num_rows={self._num_rows}, "
            + f"num_cols={self._num_cols}, diags={self._diags})"
        )
