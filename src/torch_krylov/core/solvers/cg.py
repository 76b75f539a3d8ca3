"""Conjugate Gradient solvers for square linear systems A x = b.

This module provides:
- cg_solve: classical CG for symmetric positive (semi)definite A.
- cgnr_solve: CG on the normal equations A^T A x = A^T b.
- cgne_solve: CG on A A^T y = b with x = A^T y.

All three mutate x in place and return the final residual norm. That
value is a diagnostic: callers compare it with their own tolerance.
The normal-equation variants only rely on A through A p and A^T r, so
lifting the square-matrix check would let them handle rectangular
systems.
"""
# pylint: disable=invalid-name

from __future__ import annotations

from typing import Optional, Union

import torch
from torch import Tensor

from ..operators import Matrix, rmatvec
from ..options import IterOptions
from ..validation import check_system
from .krylov import Recurrence, SolveInfo, krylov_iterate

SolveResult = Union[float, tuple[float, SolveInfo]]


def _identity(r: Tensor) -> Tensor:
    """Plain CG builds its directions from the residual itself."""
    return r


def _run(
    A: Matrix,
    x: Tensor,
    b: Tensor,
    options: Optional[IterOptions],
    recurrence: Recurrence,
    return_info: bool,
) -> SolveResult:
    check_system(A, x, b, require_square=True)
    if options is None:
        options = IterOptions.for_dtype(x.dtype)
    info = krylov_iterate(A, x, b, options, recurrence)
    if return_info:
        return info["residual_norm"], info
    return info["residual_norm"]


def cg_solve(
    A: Matrix,
    x: Tensor,
    b: Tensor,
    options: Optional[IterOptions] = None,
    return_info: bool = False,
) -> SolveResult:
    """Solve the symmetric system A x = b with Conjugate Gradient.

    Args:
        A (Matrix): (n, n) symmetric positive (semi)definite matrix.
        x (Tensor): (n,) initial guess, updated in place.
        b (Tensor): (n,) right-hand side.
        options (IterOptions | None): stopping criteria. Defaults to the
            preset matching x.dtype.
        return_info (bool): also return the SolveInfo dict.

    Returns:
        Final residual norm ||A x - b||, plus SolveInfo if requested.
    """
    recurrence = Recurrence(
        name="CG",
        transform=_identity,
        rho=lambda r, z: torch.dot(r, z),
        denominator=lambda p, w: (p, w),
    )
    return _run(A, x, b, options, recurrence, return_info)


def cgnr_solve(
    A: Matrix,
    x: Tensor,
    b: Tensor,
    options: Optional[IterOptions] = None,
    return_info: bool = False,
) -> SolveResult:
    """Solve a nonsymmetric system through A^T A x = A^T b (CGNR).

    Step length and direction coefficient use z = A^T r, but convergence
    is tested on the residual of the original system, which avoids early
    termination caused by the squared conditioning of A^T A.

    Args:
        A (Matrix): (n, n) matrix, not necessarily symmetric.
        x (Tensor): (n,) initial guess, updated in place.
        b (Tensor): (n,) right-hand side.
        options (IterOptions | None): stopping criteria.
        return_info (bool): also return the SolveInfo dict.

    Returns:
        Final residual norm ||A x - b||, plus SolveInfo if requested.
    """
    recurrence = Recurrence(
        name="CGNR",
        transform=lambda r: rmatvec(A, r),
        rho=lambda r, z: torch.dot(z, z),
        denominator=lambda p, w: (w, w),
    )
    return _run(A, x, b, options, recurrence, return_info)


def cgne_solve(
    A: Matrix,
    x: Tensor,
    b: Tensor,
    options: Optional[IterOptions] = None,
    return_info: bool = False,
) -> SolveResult:
    """Solve a nonsymmetric system through A A^T y = b, x = A^T y (CGNE).

    Minimizes the error norm ||x - x*|| over the Krylov space. The step
    length uses r.r / p.p and A^T r only feeds the next direction.

    Args:
        A (Matrix): (n, n) matrix, not necessarily symmetric.
        x (Tensor): (n,) initial guess, updated in place.
        b (Tensor): (n,) right-hand side.
        options (IterOptions | None): stopping criteria.
        return_info (bool): also return the SolveInfo dict.

    Returns:
        Final residual norm ||A x - b||, plus SolveInfo if requested.
    """
    recurrence = Recurrence(
        name="CGNE",
        transform=lambda r: rmatvec(A, r),
        rho=lambda r, z: torch.dot(r, r),
        denominator=lambda p, w: (p, p),
    )
    return _run(A, x, b, options, recurrence, return_info)
