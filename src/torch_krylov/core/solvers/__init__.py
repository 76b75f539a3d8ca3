"""Krylov-subspace solvers for linear systems A x = b.

This module provides:
- cg_solve: Conjugate Gradient for symmetric A.
- cgnr_solve / cgne_solve: normal-equation variants for nonsymmetric A.
- pcg_solve: Preconditioned Conjugate Gradient.
- Preconditioner: abstract base class for preconditioners.
- DiagonalPreconditioner: Jacobi (diagonal) preconditioner.
- CholeskyPreconditioner: exact solve with a factored P.
- OperatorPreconditioner: wraps an arbitrary linear operator.
"""

from .cg import cg_solve, cgne_solve, cgnr_solve
from .krylov import Recurrence, SolveInfo, krylov_iterate
from .pcg import pcg_solve
from .preconditioner import (
    CholeskyPreconditioner,
    DiagonalPreconditioner,
    OperatorPreconditioner,
    Preconditioner,
)

__all__ = [
    "CholeskyPreconditioner",
    "DiagonalPreconditioner",
    "OperatorPreconditioner",
    "Preconditioner",
    "Recurrence",
    "SolveInfo",
    "cg_solve",
    "cgne_solve",
    "cgnr_solve",
    "krylov_iterate",
    "pcg_solve",
]
