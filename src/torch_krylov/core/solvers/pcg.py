"""Preconditioned Conjugate Gradient solver."""
# pylint: disable=invalid-name

from __future__ import annotations

from typing import Optional

import torch
from torch import Tensor

from ..exceptions import ValidationError
from ..operators import Matrix
from ..options import IterOptions
from ..validation import check_preconditioner, check_system
from .cg import SolveResult
from .krylov import Recurrence, krylov_iterate
from .preconditioner import Preconditioner


def pcg_solve(
    A: Matrix,
    P: Matrix,
    x: Tensor,
    b: Tensor,
    options: Optional[IterOptions] = None,
    *,
    preconditioner: Preconditioner,
    return_info: bool = False,
) -> SolveResult:
    """Solve the SPD system A x = b with Preconditioned Conjugate Gradient.

    Each step solves P z = r through ``preconditioner`` and uses z in the
    direction update, while r still drives the step and the error norm.
    The convergence check precedes the preconditioner solve.

    Args:
        A (Matrix): (n, n) symmetric positive definite matrix.
        P (Matrix): (n, n) preconditioner matrix approximating A.
        x (Tensor): (n,) initial guess, updated in place.
        b (Tensor): (n,) right-hand side.
        options (IterOptions | None): stopping criteria. Defaults to the
            preset matching x.dtype.
        preconditioner (Preconditioner): the "solve P z = r" operation.
        return_info (bool): also return the SolveInfo dict.

    Returns:
        Final residual norm ||A x - b||, plus SolveInfo if requested.
    """
    check_system(A, x, b, require_square=True)
    check_preconditioner(A, P)
    if not isinstance(preconditioner, Preconditioner):
        raise ValidationError(
            f"preconditioner must be a Preconditioner, got {type(preconditioner)}"
        )
    if options is None:
        options = IterOptions.for_dtype(x.dtype)

    preconditioner.setup(P)
    recurrence = Recurrence(
        name="PCG",
        transform=preconditioner.solve,
        rho=lambda r, z: torch.dot(r, z),
        denominator=lambda p, w: (p, w),
    )
    info = krylov_iterate(A, x, b, options, recurrence)
    if return_info:
        return info["residual_norm"], info
    return info["residual_norm"]
