"""Utility functions for the tests."""

from typing import List

import torch
from torch import Tensor, allclose, cuda, device, isclose, zeros

DEVICE_IDS = ["cpu", "cuda"] if cuda.is_available() else ["cpu"]
DEVICES = [device(name) for name in DEVICE_IDS]

DTYPES = [torch.float32, torch.float16, torch.bfloat16]
DTYPE_IDS = [str(dt).split(".")[-1] for dt in DTYPES]

# (num_rows, num_cols) of square, fat, and tall matrices
SHAPES = [(1, 1), (1, 4), (4, 1), (3, 3), (3, 5), (6, 2)]
SHAPE_IDS = [f"shape={r}x{c}" for r, c in SHAPES]


def report_nonclose(
    tensor1: Tensor,
    tensor2: Tensor,
    rtol: float = 1e-5,
    atol: float = 1e-8,
    equal_nan: bool = False,
    name: str = "array",
):
    """Compare two tensors, raise exception if nonclose values and print them.

    Args:
        tensor1: First tensor.
        tensor2: Second tensor.
        rtol: Relative tolerance (see ``torch.allclose``). Default: ``1e-5``.
        atol: Absolute tolerance (see ``torch.allclose``). Default: ``1e-8``.
        equal_nan: Whether comparing two NaNs should be considered as ``True``
            (see ``torch.allclose``). Default: ``False``.
        name: Optional name what the compared tensors mean. Default: ``'array'``.

    Raises:
        ValueError: If the two tensors don't match in shape or have nonclose values.
    """
    if tensor1.shape != tensor2.shape:
        raise ValueError(f"{name} shapes don't match.")

    if allclose(tensor1, tensor2, rtol=rtol, atol=atol, equal_nan=equal_nan):
        print(f"{name} values match.")
    else:
        mismatch = 0
        for a1, a2 in zip(tensor1.flatten(), tensor2.flatten()):
            if not isclose(a1, a2, atol=atol, rtol=rtol, equal_nan=equal_nan):
                mismatch += 1
                print(f"{a1} != {a2}")
        print(f"Min entries: {tensor1.min()}, {tensor2.min()}")
        print(f"Max entries: {tensor1.max()}, {tensor2.max()}")
        raise ValueError(f"{name} values don't match ({mismatch} / {tensor1.numel()}).")


def toeplitz_from_loops(row: Tensor, col: Tensor) -> Tensor:
    """Build a dense Toeplitz matrix entry by entry.

    Args:
        row: First row of the matrix.
        col: First column of the matrix. ``col[0]`` is ignored.

    Returns:
        Dense matrix of shape ``[len(col), len(row)]``.
    """
    num_rows, num_cols = col.shape[0], row.shape[0]
    mat = zeros((num_rows, num_cols), dtype=row.dtype, device=row.device)
    for i in range(num_rows):
        for j in range(num_cols):
            mat[i, j] = row[j - i] if j >= i else col[i - j]
    return mat


def all_indices(num_rows: int, num_cols: int) -> List:
    """List all valid ``(i, j)`` index pairs of a matrix.

    Args:
        num_rows: Number of rows.
        num_cols: Number of columns.

    Returns:
        Row-major list of index pairs.
    """
    return [(i, j) for i in range(num_rows) for j in range(num_cols)]
