"""Utility functions for the structured matrices."""

from typing import Union

import torch
from torch import Tensor, arange, zeros


def num_diagonals(num_rows: int, num_cols: int) -> int:
    """Count the diagonals of a matrix.

    A matrix of shape `[N, M]` has `N + M - 1` diagonals. Matrices without
    entries have no diagonals.

    Args:
        num_rows: Number of rows `N`.
        num_cols: Number of columns `M`.

    Returns:
        The number of diagonals.
    """
    if num_rows == 0 or num_cols == 0:
        return 0
    return num_rows + num_cols - 1


def diagonal_lengths(
    num_rows: int, num_cols: int, device: Union[torch.device, None] = None
) -> Tensor:
    """Compute how many entries every diagonal of a matrix has.

    Diagonals are ordered like in `all_traces`, i.e. from the bottom left entry
    to the top right entry.

    Args:
        num_rows: Number of rows `N`.
        num_cols: Number of columns `M`.
        device: Optional device of the result.

    Returns:
        An integer tensor of shape `[N + M - 1]`.
    """
    if num_diagonals(num_rows, num_cols) == 0:
        return zeros(0, dtype=torch.long, device=device)

    # column minus row index of each diagonal
    offsets = arange(-(num_rows - 1), num_cols, device=device)
    last_row = (num_cols - 1 - offsets).clamp(max=num_rows - 1)
    first_row = (-offsets).clamp(min=0)
    return last_row - first_row + 1


def all_traces(mat: Tensor) -> Tensor:
    """Compute the traces of a matrix across all diagonals.

    A matrix of shape `[N, M]` has `N + M - 1` diagonals.

    Args:
        mat: A matrix of shape `[N, M]`.

    Returns:
        A tensor of shape `[N + M - 1]` containing the traces of the matrix. Element
        `[N - 1]` contains the main diagonal's trace. Elements to the left contain
        the traces of the negative off-diagonals, and elements to the right contain the
        traces of the positive off-diagonals.

    Raises:
        ValueError: If `mat` is not a matrix.
    """
    if mat.ndim != 2:
        raise ValueError(f"Expected a matrix, but got shape {tuple(mat.shape)}.")

    num_rows, num_cols = mat.shape
    num_diags = num_diagonals(num_rows, num_cols)
    if num_diags == 0:
        return zeros(0, dtype=mat.dtype, device=mat.device)

    row_idxs = arange(num_rows, device=mat.device).unsqueeze(-1).expand(-1, num_cols)
    col_idxs = arange(num_cols, device=mat.device).unsqueeze(0).expand(num_rows, -1)
    idxs = col_idxs - row_idxs
    shift = num_rows - 1  # bottom left entry of idxs
    idxs = idxs.add(shift).flatten()

    traces = zeros(num_diags, dtype=mat.dtype, device=mat.device)
    traces.scatter_add_(0, idxs, mat.flatten())

    return traces


def is_toeplitz(mat: Tensor) -> bool:
    """Check whether every diagonal of a matrix is constant.

    Args:
        mat: A matrix of shape `[N, M]`.

    Returns:
        Whether the matrix is Toeplitz. Matrices without entries are Toeplitz.

    Raises:
        ValueError: If `mat` is not a matrix.
    """
    if mat.ndim != 2:
        raise ValueError(f"Expected a matrix, but got shape {tuple(mat.shape)}.")
    return torch.equal(mat[1:, 1:], mat[:-1, :-1])
