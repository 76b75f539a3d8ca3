"""Dimension checks run by every solver before iterating.

Violations indicate caller misuse: they raise immediately and never
return a degraded result. Messages report the mismatched dimensions.
"""
# pylint: disable=invalid-name

from __future__ import annotations

from torch import Tensor

from .exceptions import DimensionError, ValidationError
from .operators import Matrix, dtype_of, shape_of


def check_vector(v: Tensor, name: str) -> None:
    """Verify that ``v`` is a 1D floating point tensor."""
    if not isinstance(v, Tensor):
        raise ValidationError(f"{name} must be a Tensor, got {type(v)}")
    if v.ndim != 1:
        raise DimensionError(f"{name} must be a 1D vector, got ndim={v.ndim}")
    if not v.is_floating_point():
        raise ValidationError(f"{name} must be floating point, got {v.dtype}")


def check_system(A: Matrix, x: Tensor, b: Tensor, require_square: bool = True) -> None:
    """Validate the shapes of a linear system A x = b.

    Args:
        A (Matrix): system matrix.
        x (Tensor): (n,) initial guess.
        b (Tensor): (n,) right-hand side.
        require_square (bool): if False, A may be rectangular (m, n) with
            x of length n and b of length m.

    Raises:
        DimensionError: if any dimension is inconsistent.
        ValidationError: if x and b are not floating point or their dtype
            differs from A's.
    """
    check_vector(x, "x")
    check_vector(b, "b")
    ndim_x, ndim_b = x.shape[0], b.shape[0]
    nrows_a, ncols_a = shape_of(A)

    if require_square:
        if ndim_x != ndim_b:
            raise DimensionError(
                "x and b must have the same length. "
                f"The dimension of x is {ndim_x} and dimension of b is {ndim_b}"
            )
        if nrows_a != ncols_a:
            raise DimensionError(
                "A must have the same number of rows and columns. "
                f"The number of rows is {nrows_a} and number of columns is {ncols_a}"
            )
    elif ndim_x != ncols_a:
        raise DimensionError(
            "The number of columns of A must equal the length of x. "
            f"A has {ncols_a} columns and x has length {ndim_x}"
        )
    if ndim_b != nrows_a:
        raise DimensionError(
            "The number of rows of A must equal the length of b. "
            f"A has {nrows_a} rows and b has length {ndim_b}"
        )

    if x.dtype != b.dtype:
        raise ValidationError(f"x and b dtypes differ: {x.dtype} vs {b.dtype}")
    dtype_a = dtype_of(A)
    if dtype_a is not None and dtype_a != x.dtype:
        raise ValidationError(f"A has dtype {dtype_a} but x has dtype {x.dtype}")


def check_preconditioner(A: Matrix, P: Matrix) -> None:
    """Validate that the preconditioner matrix P is compatible with A.

    Raises:
        DimensionError: if P is not square or its shape differs from A's.
        ValidationError: if P and A have different dtypes.
    """
    nrows_a, ncols_a = shape_of(A)
    nrows_p, ncols_p = shape_of(P)
    if nrows_p != ncols_p:
        raise DimensionError(
            "The preconditioner matrix must have the same number of rows and columns. "
            f"The number of rows is {nrows_p} and number of columns is {ncols_p}"
        )
    if (nrows_p, ncols_p) != (nrows_a, ncols_a):
        raise DimensionError(
            "The preconditioner and A must have the same shape. "
            f"The preconditioner is {nrows_p}x{ncols_p} and A is {nrows_a}x{ncols_a}"
        )
    dtype_a, dtype_p = dtype_of(A), dtype_of(P)
    if dtype_a is not None and dtype_p is not None and dtype_a != dtype_p:
        raise ValidationError(
            f"The preconditioner has dtype {dtype_p} but A has dtype {dtype_a}"
        )
