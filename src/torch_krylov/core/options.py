"""Numeric options for the iterative solvers.

IterOptions is an immutable configuration value built once by the caller
and passed to every solve. Two presets are provided, one per floating
point precision.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import torch
from torch import Tensor

from .exceptions import ValidationError


@dataclass(frozen=True)
class IterOptions:
    """Stopping criteria for the Krylov solvers.

    Args:
        sol_tol: tolerance on the residual norm. For CG type problems a
            good choice is ``tol * ||b||_2``, see :meth:`relative_to`.
        iter_limit: hard cap on the number of iterations. In exact
            arithmetic CG finishes within n steps for an n x n system.
        restart_iter: restart interval for restart-based methods. Unused
            by CG, CGNR, CGNE and PCG.
        raise_on_breakdown: raise BreakdownError instead of stopping
            quietly when a step-length denominator vanishes.
    """

    sol_tol: float
    iter_limit: int
    restart_iter: int = 25
    raise_on_breakdown: bool = False

    def __post_init__(self):
        if isinstance(self.sol_tol, bool) or not isinstance(self.sol_tol, (int, float)):
            raise ValidationError(
                f"sol_tol must be a real number, got {type(self.sol_tol).__name__}"
            )
        if not math.isfinite(self.sol_tol) or self.sol_tol < 0:
            raise ValidationError(f"sol_tol must be finite and >= 0, got {self.sol_tol}")
        for name in ("iter_limit", "restart_iter"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(
                    f"{name} must be an int, got {type(value).__name__}"
                )
            if value < 0:
                raise ValidationError(f"{name} must be >= 0, got {value}")

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def float32(cls) -> "IterOptions":
        """Default options for single precision systems."""
        return cls(sol_tol=1.0e-7, iter_limit=10000, restart_iter=25)

    @classmethod
    def float64(cls) -> "IterOptions":
        """Default options for double precision systems."""
        return cls(sol_tol=1.0e-16, iter_limit=10000, restart_iter=25)

    @classmethod
    def for_dtype(cls, dtype: torch.dtype) -> "IterOptions":
        """Pick the preset matching ``dtype``.

        Half precision types share the single precision preset.
        """
        if dtype == torch.float64:
            return cls.float64()
        if dtype in (torch.float32, torch.float16, torch.bfloat16):
            return cls.float32()
        raise ValidationError(f"no default options for dtype {dtype}")

    def relative_to(self, b: Tensor) -> "IterOptions":
        """Return a copy whose tolerance is scaled by ``||b||_2``."""
        scale = float(torch.linalg.vector_norm(b))
        return replace(self, sol_tol=self.sol_tol * scale)
