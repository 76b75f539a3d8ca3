"""
pytest configuration and shared fixtures.
"""

import pytest
import torch


@pytest.fixture
def gen():
    """Seeded generator for reproducible tests."""
    return torch.Generator().manual_seed(42)


@pytest.fixture
def spd_system(gen):
    """Well-conditioned 20x20 SPD system with a known solution."""
    n = 20
    M = torch.randn(n, n, generator=gen, dtype=torch.float64)
    A = M @ M.T + 4 * n * torch.eye(n, dtype=torch.float64)
    x_true = torch.randn(n, generator=gen, dtype=torch.float64)
    b = A @ x_true
    return A, b, x_true


@pytest.fixture
def nonsymmetric_system(gen):
    """Diagonally dominant, nonsymmetric 6x6 system with a known solution."""
    n = 6
    A = torch.randn(n, n, generator=gen, dtype=torch.float64) + 4 * n * torch.eye(
        n, dtype=torch.float64
    )
    x_true = torch.randn(n, generator=gen, dtype=torch.float64)
    b = A @ x_true
    return A, b, x_true
