""" Core modules """

import logging

from .exceptions import (
    BreakdownError,
    DimensionError,
    KrylovError,
    NumericalError,
    ValidationError,
)
from .operators import Matrix, dtype_of, matvec, rmatvec, shape_of
from .options import IterOptions
from .solvers import (
    CholeskyPreconditioner,
    DiagonalPreconditioner,
    OperatorPreconditioner,
    Preconditioner,
    SolveInfo,
    cg_solve,
    cgne_solve,
    cgnr_solve,
    pcg_solve,
)
from .validation import check_preconditioner, check_system

logging.getLogger("torch_krylov").addHandler(logging.NullHandler())

__all__ = [
    "BreakdownError",
    "CholeskyPreconditioner",
    "DiagonalPreconditioner",
    "DimensionError",
    "IterOptions",
    "KrylovError",
    "Matrix",
    "NumericalError",
    "OperatorPreconditioner",
    "Preconditioner",
    "SolveInfo",
    "ValidationError",
    "cg_solve",
    "cgne_solve",
    "cgnr_solve",
    "check_preconditioner",
    "check_system",
    "dtype_of",
    "matvec",
    "pcg_solve",
    "rmatvec",
    "shape_of",
]
