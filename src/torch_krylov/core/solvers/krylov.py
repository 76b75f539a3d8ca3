"""Shared iteration skeleton for the conjugate gradient family.

CG, CGNR, CGNE and PCG all follow the same loop and differ only in three
operations, collected in a Recurrence:

  - transform(r): the vector the new search direction is built from
    (r itself, A^T r, or the preconditioned residual).
  - rho(r, z): the inner product feeding the step length numerator and
    the direction update coefficient.
  - denominator(p, w): the pair of vectors (u, v) whose inner product u.v
    is the step length denominator, with w = A p.

The residual is kept as r = b - A x so that x += mu p and r -= mu w are
consistent; its norm equals ||A x - b||.
"""
# pylint: disable=invalid-name

from __future__ import annotations

import logging
import math
from typing import Callable, NamedTuple, TypedDict

import torch
from torch import Tensor

from ..exceptions import BreakdownError
from ..operators import Matrix, matvec
from ..options import IterOptions

logger = logging.getLogger(__name__)


class Recurrence(NamedTuple):
    """The three operations distinguishing one CG variant from another."""

    name: str
    transform: Callable[[Tensor], Tensor]
    rho: Callable[[Tensor, Tensor], Tensor]
    denominator: Callable[[Tensor, Tensor], tuple[Tensor, Tensor]]


class SolveInfo(TypedDict):
    """Diagnostics of a single solve."""

    converged: bool
    iterations: int
    residual_norm: float
    breakdown: bool


def _norm(r: Tensor) -> float:
    """Euclidean norm of r as a Python float."""
    return float(torch.linalg.vector_norm(r))


def breakdown_threshold(dtype: torch.dtype) -> float:
    """Cosine below which a step length denominator counts as vanished.

    Equals sqrt(eps) of ``dtype``. For symmetric positive definite A the
    cosine between p and A p is at least about 2 / sqrt(cond(A)), so the
    threshold is only reached once cond(A) exceeds 4 / eps.
    """
    return math.sqrt(torch.finfo(dtype).eps)


def krylov_iterate(
    A: Matrix,
    x: Tensor,
    b: Tensor,
    options: IterOptions,
    recurrence: Recurrence,
) -> SolveInfo:
    """Run a CG-type iteration, updating x in place.

    Inputs must already be validated. The convergence test happens right
    after the residual update and before the direction update, so a
    converged iterate never computes an unnecessary new direction.

    A step breaks down when its denominator u.v is near zero relative to
    the operands, ``|u.v| <= sqrt(eps(dtype)) * ||u|| * ||v||``, or when
    the step length mu is not finite. The step is then abandoned before x
    is touched. A breakdown with an exactly zero residual is reported as
    convergence.

    Args:
        A (Matrix): system matrix.
        x (Tensor): (n,) initial guess, overwritten with the approximation.
        b (Tensor): (n,) right-hand side.
        options (IterOptions): tolerance and iteration cap.
        recurrence (Recurrence): variant-specific operations.

    Returns:
        SolveInfo with keys "converged", "iterations", "residual_norm"
        and "breakdown".

    Raises:
        BreakdownError: on a vanishing denominator when
            ``options.raise_on_breakdown`` is set.
    """
    tol = options.sol_tol
    cos_min = breakdown_threshold(x.dtype)

    r = b - matvec(A, x)
    err = _norm(r)

    info: SolveInfo = {
        "converged": err < tol,
        "iterations": 0,
        "residual_norm": err,
        "breakdown": False,
    }
    if info["converged"] or options.iter_limit == 0:
        return info

    z = recurrence.transform(r)
    p = z.clone()
    rho = recurrence.rho(r, z)

    for step in range(options.iter_limit):
        w = matvec(A, p)
        u, v = recurrence.denominator(p, w)
        denom = torch.dot(u, v)
        mu = rho / denom

        scale = _norm(u) * _norm(v)
        if abs(float(denom)) <= cos_min * scale or not torch.isfinite(mu):
            if err == 0:
                # exact solution reached, nothing left to do
                info["converged"] = True
                break
            info["breakdown"] = True
            logger.warning(
                "%s breakdown at iteration %d: denominator=%g, residual norm=%g",
                recurrence.name, step, float(denom), err,
            )
            if options.raise_on_breakdown:
                raise BreakdownError(
                    f"{recurrence.name} broke down at iteration {step}: "
                    f"step length denominator is {float(denom)}",
                    iteration=step,
                    denominator=float(denom),
                    residual_norm=err,
                )
            break

        x.add_(mu * p)
        r.sub_(mu * w)
        err = _norm(r)
        info["iterations"] = step + 1

        if abs(err) < tol:
            info["converged"] = True
            break

        z = recurrence.transform(r)
        rho_new = recurrence.rho(r, z)
        tau = rho_new / rho
        rho = rho_new
        p = z + tau * p

    info["residual_norm"] = err
    if not math.isfinite(err):
        logger.warning("%s produced a non-finite residual norm", recurrence.name)
    logger.debug(
        "%s finished: iterations=%d residual_norm=%g converged=%s breakdown=%s",
        recurrence.name, info["iterations"], err, info["converged"], info["breakdown"],
    )
    return info
