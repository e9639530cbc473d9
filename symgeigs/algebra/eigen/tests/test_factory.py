"""
Tests for the matrix-level interface (geigsh) and the three transform modes.
"""

import numpy as np
import scipy.linalg
import scipy.sparse as sp
import pytest

from symgeigs import geigsh
from symgeigs.algebra import SolverError, SolverErrorMsg, SymShiftInvert, DenseSymMatProd
from symgeigs.algebra.eigen import choose_geigs_solver, GEigsMode, SymGEigsShiftSolver, CompInfo, SortRule
from symgeigs.common import get_global_logger, Logger

# ----------------------------------
#! Helpers
# ----------------------------------

def create_spd(n, lo, hi, seed):
    """SPD matrix with spectrum evenly spread in [lo, hi]."""
    rng     = np.random.default_rng(seed)
    Q, _    = np.linalg.qr(rng.standard_normal((n, n)))
    M       = Q @ np.diag(np.linspace(lo, hi, n)) @ Q.T
    return 0.5 * (M + M.T)

def create_pencil(n, seed=7):
    rng     = np.random.default_rng(seed)
    Q, _    = np.linalg.qr(rng.standard_normal((n, n)))
    A       = Q @ np.diag(np.linspace(-10.0, 10.0, n)) @ Q.T
    A       = 0.5 * (A + A.T)
    C       = 0.1 * rng.standard_normal((n, n))
    B       = np.eye(n) + 0.5 * (C @ C.T)
    return A, B

def nearest(ref, sigma, k):
    return np.sort(ref[np.argsort(np.abs(ref - sigma))[:k]])

# ----------------------------------
#! geigsh
# ----------------------------------

class TestGeigsh:

    def test_shift_invert_dense(self):
        n       = 60
        A, B    = create_pencil(n)
        ref     = scipy.linalg.eigh(A, B, eigvals_only=True)
        sigma   = float(ref[20] + 0.3 * (ref[21] - ref[20]))
        result  = geigsh(A, B, k=3, sigma=sigma, sorting=SortRule.SMALLEST_ALGE)

        print(f"\ngeigsh shift-invert: {result.eigenvalues}, residuals {result.residual_norms}")

        assert result.converged
        assert result.info is CompInfo.SUCCESSFUL
        np.testing.assert_allclose(result.eigenvalues, nearest(ref, sigma, 3), rtol=1e-8, atol=1e-10)
        assert np.all(result.residual_norms < 1e-7)

    def test_sparse_b_none(self):
        n       = 120
        A       = sp.diags([-np.ones(n - 1), 2.0 * np.ones(n), -np.ones(n - 1)], [-1, 0, 1], format='csc')
        ref     = np.linalg.eigvalsh(A.toarray())
        sigma   = float(ref[40] + 0.3 * (ref[41] - ref[40]))
        result  = geigsh(A, k=4, sigma=sigma, sorting='SA')

        assert result.converged
        np.testing.assert_allclose(result.eigenvalues, nearest(ref, sigma, 4), rtol=1e-8, atol=1e-10)
        assert result.eigenvectors.shape == (n, 4)
        assert np.all(result.residual_norms < 1e-7)

    def test_buckling(self):
        n       = 40
        K       = create_spd(n, 1.0, 5.0, seed=1)
        KG      = create_spd(n, 0.5, 1.5, seed=2)
        ref     = scipy.linalg.eigh(K, KG, eigvals_only=True)
        sigma   = float(ref[20] + 0.3 * (ref[21] - ref[20]))
        result  = geigsh(K, KG, k=2, sigma=sigma, mode='buckling', sorting=SortRule.SMALLEST_ALGE)

        print(f"\nBuckling: {result.eigenvalues}, reference {nearest(ref, sigma, 2)}")

        assert result.converged
        np.testing.assert_allclose(result.eigenvalues, nearest(ref, sigma, 2), rtol=1e-8)
        assert np.all(result.residual_norms < 1e-7)

        # eigenvectors are K-orthonormal in buckling mode
        V = result.eigenvectors
        np.testing.assert_allclose(V.T @ K @ V, np.eye(2), atol=1e-8)

    def test_cayley_closest_to_shift(self):
        n       = 60
        A, B    = create_pencil(n, seed=4)
        ref     = scipy.linalg.eigh(A, B, eigvals_only=True)
        sigma   = float(ref[40] + 0.3 * (ref[41] - ref[40]))
        result  = geigsh(A, B, k=3, sigma=sigma, mode=GEigsMode.CAYLEY,
                        which=SortRule.CLOSEST_TO_SHIFT, sorting=SortRule.CLOSEST_TO_SHIFT)

        print(f"\nCayley: {result.eigenvalues}, reference {ref[np.argsort(np.abs(ref - sigma))[:3]]}")

        assert result.converged
        np.testing.assert_allclose(result.eigenvalues, ref[np.argsort(np.abs(ref - sigma))[:3]], rtol=1e-8, atol=1e-10)
        assert np.all(result.residual_norms < 1e-7)

    def test_cayley_largest_magnitude(self):
        """LM in Cayley mode picks the largest |nu| = |lambda + sigma| / |lambda - sigma|."""
        n       = 60
        A, B    = create_pencil(n, seed=4)
        ref     = scipy.linalg.eigh(A, B, eigvals_only=True)
        sigma   = float(ref[40] + 0.3 * (ref[41] - ref[40]))
        nu      = (ref + sigma) / (ref - sigma)
        expect  = np.sort(ref[np.argsort(-np.abs(nu))[:3]])
        result  = geigsh(A, B, k=3, sigma=sigma, mode='cayley', which='LM', sorting='SA')

        assert result.converged
        np.testing.assert_allclose(result.eigenvalues, expect, rtol=1e-8, atol=1e-10)

    def test_buckling_closest_to_shift(self):
        n       = 40
        K       = create_spd(n, 1.0, 5.0, seed=1)
        KG      = create_spd(n, 0.5, 1.5, seed=2)
        ref     = scipy.linalg.eigh(K, KG, eigvals_only=True)
        sigma   = float(ref[20] + 0.3 * (ref[21] - ref[20]))
        result  = geigsh(K, KG, k=3, sigma=sigma, mode='buckling',
                        which=SortRule.CLOSEST_TO_SHIFT, sorting=SortRule.CLOSEST_TO_SHIFT)

        assert result.converged
        np.testing.assert_allclose(result.eigenvalues, ref[np.argsort(np.abs(ref - sigma))[:3]], rtol=1e-8)
        assert np.all(result.residual_norms < 1e-7)

    @pytest.mark.parametrize("mode", ['buckling', 'cayley'])
    def test_zero_shift_rejected(self, mode):
        A, B = create_pencil(10)
        with pytest.raises(SolverError) as exc:
            geigsh(A, B, k=2, sigma=0.0, mode=mode)
        assert exc.value.code is SolverErrorMsg.INVALID_INPUT

    def test_singular_shift_reports_status(self):
        n       = 10
        A       = np.diag(np.arange(1.0, n + 1.0))
        result  = geigsh(A, k=2, sigma=5.0, ncv=6)
        assert not result.converged
        assert result.info is CompInfo.NUMERICAL_ISSUE
        assert result.eigenvalues.shape == (0,)
        assert result.residual_norms.shape == (0,)

# ----------------------------------
#! Factory
# ----------------------------------

class TestChooseSolver:

    @pytest.mark.parametrize("mode", ['shift_invert', 'buckling', 'cayley'])
    def test_modes(self, mode):
        A, B    = create_pencil(30)
        solver  = choose_geigs_solver(mode, SymShiftInvert(A, B), DenseSymMatProd(B), nev=3, sigma=0.5)
        assert isinstance(solver, SymGEigsShiftSolver)
        assert solver.mode is GEigsMode.resolve(mode)
        assert solver.sigma == 0.5
        assert solver.operator.dimension() == 30

    def test_default_ncv(self):
        A, B    = create_pencil(30)
        solver  = choose_geigs_solver('shift_invert', SymShiftInvert(A, B), DenseSymMatProd(B), nev=3, sigma=0.5)
        assert "ncv=20" in repr(solver)

# ----------------------------------
#! Logging
# ----------------------------------

class TestLogger:

    def test_global_logger_singleton(self):
        first   = get_global_logger()
        second  = get_global_logger()
        assert first is second
        assert isinstance(first, Logger)

    def test_logger_methods(self):
        logger = get_global_logger()
        logger.info("info message", lvl=1)
        logger.debug("debug message", lvl=2)
        logger.warning("warning message")
        logger.error("error message", lvl=1)

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
