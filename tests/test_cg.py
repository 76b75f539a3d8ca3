import logging

import pytest
import torch
from torch_sparse import SparseTensor

from torch_krylov.core import BreakdownError, IterOptions, cg_solve


def tight(iter_limit=10):
    return IterOptions(sol_tol=1e-10, iter_limit=iter_limit)


class TestCG:
    def test_two_by_two(self):
        A = torch.tensor([[4.0, 1.0], [1.0, 3.0]], dtype=torch.float64)
        b = torch.tensor([1.0, 2.0], dtype=torch.float64)
        x = torch.tensor([2.0, 1.0], dtype=torch.float64)

        err = cg_solve(A, x, b, tight())

        assert isinstance(err, float)
        assert err < 1e-10
        expected = torch.tensor([1.0 / 11.0, 7.0 / 11.0], dtype=torch.float64)
        torch.testing.assert_close(x, expected, atol=1e-10, rtol=0)

    def test_one_by_one_single_step(self):
        A = torch.tensor([[5.0]], dtype=torch.float64)
        b = torch.tensor([10.0], dtype=torch.float64)
        x = torch.zeros(1, dtype=torch.float64)

        err, info = cg_solve(A, x, b, tight(), return_info=True)

        assert err == 0.0
        assert info["iterations"] == 1
        assert info["converged"]
        torch.testing.assert_close(x, torch.tensor([2.0], dtype=torch.float64))

    def test_zero_iteration_limit_leaves_x(self):
        A = torch.tensor([[4.0, 1.0], [1.0, 3.0]], dtype=torch.float64)
        b = torch.tensor([1.0, 2.0], dtype=torch.float64)
        x = torch.tensor([2.0, 1.0], dtype=torch.float64)
        x0 = x.clone()

        err, info = cg_solve(A, x, b, tight(iter_limit=0), return_info=True)

        torch.testing.assert_close(x, x0, rtol=0, atol=0)
        assert err == pytest.approx(float(torch.linalg.vector_norm(A @ x0 - b)))
        assert info["iterations"] == 0
        assert not info["converged"]

    def test_converges_within_n_iterations(self, spd_system):
        A, b, x_true = spd_system
        x = torch.zeros_like(b)

        err, info = cg_solve(A, x, b, IterOptions(1e-8, A.shape[0]), return_info=True)

        assert err < 1e-8
        assert info["iterations"] <= A.shape[0]
        torch.testing.assert_close(x, x_true, atol=1e-8, rtol=1e-8)

    def test_converges_from_nonzero_start(self, spd_system, gen):
        A, b, x_true = spd_system
        x = 10.0 * torch.randn(b.shape[0], generator=gen, dtype=b.dtype)

        err, info = cg_solve(A, x, b, IterOptions(1e-8, A.shape[0]), return_info=True)

        assert info["converged"]
        assert err < 1e-8
        torch.testing.assert_close(x, x_true, atol=1e-8, rtol=1e-8)

    def test_returned_norm_is_true_residual(self, spd_system):
        A, b, _ = spd_system
        x = torch.zeros_like(b)
        err = cg_solve(A, x, b, IterOptions(1e-3, 5))
        assert err == pytest.approx(float(torch.linalg.vector_norm(A @ x - b)), rel=1e-6)

    def test_converged_call_is_idempotent(self, spd_system):
        A, b, _ = spd_system
        x = torch.zeros_like(b)
        options = IterOptions(1e-8, 100)

        first = cg_solve(A, x, b, options)
        second = cg_solve(A, x, b, options)

        assert first < 1e-8
        assert second <= first + 1e-12

    def test_default_options_from_dtype(self):
        A = torch.tensor([[4.0, 1.0], [1.0, 3.0]])
        b = torch.tensor([1.0, 2.0])
        x = torch.tensor([2.0, 1.0])

        err = cg_solve(A, x, b)

        assert err < 1e-5
        expected = torch.tensor([1.0 / 11.0, 7.0 / 11.0])
        torch.testing.assert_close(x, expected, atol=1e-5, rtol=1e-5)

    def test_sparse_matrix(self, spd_system):
        A, b, x_true = spd_system
        x = torch.zeros_like(b)
        err = cg_solve(SparseTensor.from_dense(A), x, b, IterOptions(1e-8, 100))
        assert err < 1e-8
        torch.testing.assert_close(x, x_true, atol=1e-8, rtol=1e-8)


class TestBreakdown:
    def indefinite(self):
        # p = r = [1, 1] is A-orthogonal to itself
        A = torch.tensor([[1.0, 0.0], [0.0, -1.0]], dtype=torch.float64)
        b = torch.tensor([1.0, 1.0], dtype=torch.float64)
        x = torch.zeros(2, dtype=torch.float64)
        return A, b, x

    def test_breakdown_stops_and_reports(self, caplog):
        A, b, x = self.indefinite()

        with caplog.at_level(logging.WARNING, logger="torch_krylov"):
            err, info = cg_solve(A, x, b, tight(), return_info=True)

        assert info["breakdown"]
        assert not info["converged"]
        assert info["iterations"] == 0
        assert err == pytest.approx(2.0 ** 0.5)
        torch.testing.assert_close(x, torch.zeros(2, dtype=torch.float64))
        assert "CG breakdown" in caplog.text

    def test_breakdown_raises_when_requested(self):
        A, b, x = self.indefinite()
        options = IterOptions(1e-10, 10, raise_on_breakdown=True)

        with pytest.raises(BreakdownError) as excinfo:
            cg_solve(A, x, b, options)

        assert excinfo.value.iteration == 0
        assert excinfo.value.denominator == 0.0
        assert excinfo.value.residual_norm == pytest.approx(2.0 ** 0.5)

    def test_near_zero_denominator_is_breakdown(self):
        A = torch.tensor([[1.0, 0.0], [0.0, -1.0]], dtype=torch.float64)
        b = torch.tensor([1.0, 1.0 + 1e-12], dtype=torch.float64)
        x = torch.zeros(2, dtype=torch.float64)

        err, info = cg_solve(A, x, b, IterOptions(1e-10, 1), return_info=True)

        assert info["breakdown"]
        assert info["iterations"] == 0
        assert err == pytest.approx(float(torch.linalg.vector_norm(b)))
        torch.testing.assert_close(x, torch.zeros(2, dtype=torch.float64), rtol=0, atol=0)

    def test_exact_solution_with_zero_tolerance_is_not_breakdown(self):
        A = torch.tensor([[5.0]], dtype=torch.float64)
        b = torch.tensor([10.0], dtype=torch.float64)
        x = torch.zeros(1, dtype=torch.float64)

        err, info = cg_solve(A, x, b, IterOptions(0.0, 10), return_info=True)

        assert err == 0.0
        assert info["converged"]
        assert not info["breakdown"]
