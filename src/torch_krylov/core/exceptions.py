"""Exception hierarchy for the Krylov solvers.

All exceptions inherit from KrylovError so callers can catch any
library-specific failure in one place. Validation errors additionally
inherit from ValueError.
"""

from __future__ import annotations

from typing import Optional


class KrylovError(Exception):
    """Base exception for all torch_krylov errors."""


class ValidationError(KrylovError, ValueError):
    """Input validation failed before any iteration took place."""


class DimensionError(ValidationError):
    """Matrix and vector shapes are inconsistent."""


class NumericalError(KrylovError):
    """Base class for failures arising from numerical issues."""


class BreakdownError(NumericalError):
    """A step-length denominator vanished or became non-finite.

    Attributes:
        iteration: zero-based index of the step that broke down.
        denominator: the offending denominator value.
        residual_norm: residual norm reached before the breakdown.
    """

    def __init__(
        self,
        message: str,
        iteration: int,
        denominator: Optional[float] = None,
        residual_norm: Optional[float] = None,
    ):
        super().__init__(message)
        self.iteration = iteration
        self.denominator = denominator
        self.residual_norm = residual_norm
