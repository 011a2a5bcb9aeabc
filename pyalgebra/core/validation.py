"""
Input validation utilities for PyAlgebra.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent reshaping or broadcasting beyond scalar broadcast
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from pyalgebra.core.exceptions import (
    DimensionError,
    IndexOutOfRangeError,
    ValidationError,
)


def check_rectangular(rows: Sequence[Sequence[Any]], name: str) -> tuple[int, int]:
    """
    Verify a nested sequence has rows of identical length.
    
    Args:
        rows: Nested sequence, one inner sequence per row
        name: Parameter name for error messages
        
    Returns:
        (row_count, column_count)
        
    Raises:
        DimensionError: If rows have unequal lengths
    """
    if len(rows) == 0:
        return 0, 0
    
    lengths = [len(r) for r in rows]
    expected = lengths[0]
    for i, length in enumerate(lengths):
        if length != expected:
            raise DimensionError(
                f"{name}: row {i} has {length} elements, expected {expected} "
                f"(every row must match the first)"
            )
    return len(rows), expected


def check_flat_length(length: int, rows: int, columns: int, name: str) -> None:
    """
    Verify a flattened sequence fills a rows x columns grid exactly.
    
    Raises:
        ValidationError: If rows or columns is negative
        DimensionError: If length != rows * columns
    """
    if rows < 0 or columns < 0:
        raise ValidationError(
            f"{name}: dimensions must be non-negative, got {rows}x{columns}"
        )
    if length != rows * columns:
        raise DimensionError(
            f"{name}: {length} elements cannot fill a {rows}x{columns} matrix "
            f"(needs {rows * columns})"
        )


def check_ndim(array: NDArray[Any], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.
    
    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_same_shape(
    a: tuple[int, ...],
    b: tuple[int, ...],
    operation: str,
) -> None:
    """
    Verify two operands have identical shapes for an elementwise operation.
    
    Raises:
        DimensionError: If shapes differ
    """
    if a != b:
        raise DimensionError(
            f"{operation}: shape mismatch {a} vs {b}, elementwise operations "
            f"require identical shapes"
        )


def check_inner_dimensions(
    left: tuple[int, int],
    right: tuple[int, int],
) -> None:
    """
    Verify left @ right is defined.
    
    Raises:
        DimensionError: If columns of left != rows of right
    """
    if left[1] != right[0]:
        raise DimensionError(
            f"multiply: left has {left[1]} columns but right has {right[0]} rows "
            f"(shapes {left} and {right})"
        )


def check_square(shape: tuple[int, int], name: str) -> None:
    """
    Verify a matrix is square.
    
    Raises:
        DimensionError: If rows != columns
    """
    if shape[0] != shape[1]:
        raise DimensionError(
            f"{name}: requires a square matrix, got {shape[0]}x{shape[1]}"
        )


def check_index(index: int, size: int, axis: str) -> int:
    """
    Validate an index along one axis; negative indices count from the end.
    
    Returns:
        The non-negative index
        
    Raises:
        IndexOutOfRangeError: If index is outside [-size, size)
    """
    if isinstance(index, (bool, np.bool_)) or not isinstance(index, (int, np.integer)):
        raise ValidationError(f"{axis} index must be an integer, got {index!r}")
    index = int(index)
    if index < -size or index >= size:
        raise IndexOutOfRangeError(
            f"{axis} index {index} out of range for size {size}",
            index=index,
            size=size,
            axis=axis,
        )
    return index + size if index < 0 else index


def check_finite(array: NDArray[Any], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.
    
    Raises:
        ValidationError: If array contains non-finite values
    """
    if array.dtype == object:
        return
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_positive(value: float, name: str) -> None:
    """
    Verify a scalar setting is strictly positive.
    
    Raises:
        ValidationError: If value <= 0
    """
    if not value > 0:
        raise ValidationError(f"{name}: must be positive, got {value}")
