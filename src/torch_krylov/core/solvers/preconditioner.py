"""Preconditioner abstractions for the preconditioned CG solver.

A preconditioner is tied to a matrix P that approximates A and is cheap
to invert. The solver calls setup(P) once before iterating and then
solve(r) at every step to obtain z with P z = r.
"""
# pylint: disable=invalid-name

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

import torch
from torch import Tensor
from torch_sparse import SparseTensor

from ..exceptions import DimensionError, NumericalError, ValidationError
from ..operators import Matrix, dtype_of, matvec, shape_of

# ------------------------------------------------------------------
# Type alias for linear operators
# ------------------------------------------------------------------

LinearOperator = Union[Tensor, SparseTensor, Callable[[Tensor], Tensor]]


def _apply(op: LinearOperator, x: Tensor) -> Tensor:
    """Apply a dense/sparse matrix or callable operator to x.

    Args:
        op (LinearOperator): matrix or callable.
        x (Tensor): (n,) input vector.

    Returns:
        op(x) as (n,) tensor.
    """
    if isinstance(op, (Tensor, SparseTensor)):
        return matvec(op, x)
    return op(x)


# ------------------------------------------------------------------
# Preconditioner abstraction
# ------------------------------------------------------------------


class Preconditioner(ABC):
    """Abstract base class for preconditioners.

    Implementations must provide:
    - solve(r): return z solving P z = r (exactly or approximately)

    Optionally may provide:
    - setup(P): one-time preparation from the preconditioner matrix,
      e.g. extracting a diagonal or factoring P.
    """

    def setup(self, P: Matrix) -> None:  # pylint: disable=unused-argument
        """Prepare the preconditioner for the matrix P.

        Args:
            P (Matrix): (n, n) preconditioner matrix.
        """
        return None

    @abstractmethod
    def solve(self, r: Tensor) -> Tensor:
        """Solve P z = r for z.

        Args:
            r (Tensor): (n,) residual.

        Returns:
            z as (n,) tensor.
        """


class DiagonalPreconditioner(Preconditioner):
    """Jacobi preconditioner using the diagonal of P.

    Computes z = r / diag(P). The diagonal is taken from P in setup()
    unless it is given explicitly.

    Args:
        diag (Tensor | None): (n,) diagonal entries. When None, the
            diagonal of P is used.
    """

    def __init__(self, diag: Optional[Tensor] = None):
        self._fixed = diag is not None
        self._diag = diag
        if diag is not None:
            self._check(diag)

    @staticmethod
    def _check(diag: Tensor) -> None:
        if diag.ndim != 1:
            raise ValidationError(f"diagonal must be 1D, got ndim={diag.ndim}")
        if bool((diag == 0).any()):
            raise ValidationError("diagonal preconditioner has zero entries")

    def setup(self, P: Matrix) -> None:
        """Take the diagonal of P, or check the explicit one against P.

        Args:
            P (Matrix): (n, n) preconditioner matrix.

        Raises:
            DimensionError: if an explicit diagonal does not have length n.
            ValidationError: if the diagonal has zero entries or its dtype
                differs from P's.
        """
        if self._fixed:
            n = shape_of(P)[0]
            if self._diag.shape[0] != n:
                raise DimensionError(
                    f"diagonal has length {self._diag.shape[0]} but P is {n}x{n}"
                )
            dtype_p = dtype_of(P)
            if dtype_p is not None and self._diag.dtype != dtype_p:
                raise ValidationError(
                    f"diagonal has dtype {self._diag.dtype} but P has dtype {dtype_p}"
                )
            return
        if isinstance(P, SparseTensor):
            diag = P.get_diag()
        else:
            diag = torch.diagonal(P)
        self._check(diag)
        self._diag = diag

    def solve(self, r: Tensor) -> Tensor:
        """Return r / diag."""
        if self._diag is None:
            raise ValidationError("DiagonalPreconditioner.setup(P) was not called")
        return r / self._diag


class CholeskyPreconditioner(Preconditioner):
    """Exact solve with P through a Cholesky factorization.

    P must be symmetric positive definite. The factor is computed once in
    setup(); sparse matrices are densified first.
    """

    def __init__(self):
        self._L: Optional[Tensor] = None

    def setup(self, P: Matrix) -> None:
        """Factor P = L L^T once.

        Args:
            P (Matrix): (n, n) symmetric positive definite matrix.

        Raises:
            NumericalError: if P is not positive definite.
        """
        dense = P.to_dense() if isinstance(P, SparseTensor) else P
        L, info = torch.linalg.cholesky_ex(dense)
        if int(info) != 0:
            raise NumericalError(
                "Cholesky factorization of the preconditioner failed "
                f"(leading minor {int(info)} is not positive definite)"
            )
        self._L = L

    def solve(self, r: Tensor) -> Tensor:
        """Solve L L^T z = r with the cached factor."""
        if self._L is None:
            raise ValidationError("CholeskyPreconditioner.setup(P) was not called")
        return torch.cholesky_solve(r.unsqueeze(-1), self._L).squeeze(-1)


class OperatorPreconditioner(Preconditioner):
    """Preconditioner wrapping an arbitrary linear operator.

    The operator is applied as-is, so it must approximate P^{-1}.

    Args:
        operator (LinearOperator): dense/sparse matrix or callable M such
            that M(r) approximates P^{-1} r.
    """

    def __init__(self, operator: LinearOperator):
        self._op = operator

    def solve(self, r: Tensor) -> Tensor:
        """Return M(r), the operator applied to the residual."""
        return _apply(self._op, r)
