"""Dimension validation helpers shared by states, controls and models."""

import numpy as np
from numpy.typing import NDArray


def check_vector(name: str, v: NDArray, n: int) -> NDArray:
    """
    Validate that v is a vector of length n.

    Args:
        name: Argument name used in the error message
        v: Vector to check
        n: Expected length

    Returns:
        v as a float array

    Raises:
        ValueError: If v does not have exactly n entries
    """
    v = np.asarray(v, dtype=float)
    if v.ndim != 1 or v.shape[0] != n:
        raise ValueError(
            f"Invalid argument: {name} has wrong dimension (it should be {n})"
        )
    return v


def check_rows(name: str, A: NDArray, n: int) -> NDArray:
    """Validate the leading dimension of a vector or matrix."""
    A = np.asarray(A, dtype=float)
    if A.ndim == 0 or A.shape[0] != n:
        raise ValueError(
            f"Invalid argument: {name} has wrong number of rows (it should be {n})"
        )
    return A


def check_cols(name: str, A: NDArray, n: int) -> NDArray:
    """Validate the trailing dimension of a vector or matrix."""
    A = np.asarray(A, dtype=float)
    if A.ndim == 0 or A.shape[-1] != n:
        raise ValueError(
            f"Invalid argument: {name} has wrong number of columns (it should be {n})"
        )
    return A
