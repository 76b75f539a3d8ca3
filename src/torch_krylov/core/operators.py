"""Matrix-vector primitives shared by the solvers.

A Matrix is either a dense rank-2 Tensor or a torch_sparse SparseTensor.
Solvers only ever touch it through shape_of, dtype_of, matvec and
rmatvec.
"""
# pylint: disable=invalid-name

from __future__ import annotations

from typing import Optional, Union

import torch
from torch import Tensor
from torch_sparse import SparseTensor

from .exceptions import DimensionError, ValidationError

Matrix = Union[Tensor, SparseTensor]


def shape_of(A: Matrix) -> tuple[int, int]:
    """Return (rows, cols) of a dense or sparse matrix."""
    if isinstance(A, SparseTensor):
        return int(A.size(0)), int(A.size(1))
    if not isinstance(A, Tensor):
        raise ValidationError(f"A must be a Tensor or SparseTensor, got {type(A)}")
    if A.ndim != 2:
        raise DimensionError(f"expected a 2D matrix, got ndim={A.ndim}")
    return int(A.shape[0]), int(A.shape[1])


def dtype_of(A: Matrix) -> Optional[torch.dtype]:
    """Return the scalar dtype of A, or None for a value-less SparseTensor."""
    if isinstance(A, SparseTensor):
        value = A.storage.value()
        return None if value is None else value.dtype
    return A.dtype


def matvec(A: Matrix, x: Tensor) -> Tensor:
    """Apply A to the 1D vector x."""
    if isinstance(A, SparseTensor):
        return (A @ x.unsqueeze(-1)).squeeze(-1)
    return A @ x


def rmatvec(A: Matrix, x: Tensor) -> Tensor:
    """Apply A^T to the 1D vector x."""
    if isinstance(A, SparseTensor):
        return (A.t() @ x.unsqueeze(-1)).squeeze(-1)
    return A.mT @ x
