r"""
Implicitly Restarted Lanczos Eigenvalue Engine

Finds a few eigenpairs of an operator that is self-adjoint with respect to the
inner product <x, y>_B = x^T B y, where B is symmetric positive definite. For
B = I this is the ordinary symmetric Lanczos method; for the spectral
transforms of the generalized problem A x = \lambda B x it is applied to the
transformed operator (e.g. (A - \sigma B)^{-1} B), which is B-self-adjoint.

Mathematical Background:
    1. A Lanczos factorization of length m = ncv is built,
        $$
        \mathrm{Op} V_m = V_m H_m + f_m e_m^T,
        \qquad V_m^T B V_m = I,
        $$
       with H_m symmetric tridiagonal and f_m B-orthogonal to V_m.
    2. Ritz pairs (\theta_i, V_m y_i) come from the eigenpairs of H_m; the
       residual of pair i is |f_m|_B |e_m^T y_i|.
    3. While fewer than nev pairs have converged, the factorization is
       compressed to length k with implicitly shifted QR steps on H_m, using the
       unwanted Ritz values as exact shifts, and extended back to length m.

The final interpretation and ordering of the converged values is a pluggable
step: the caller may inject a ``postprocess`` function that maps the Ritz values
to another spectrum (e.g. undoes a shift-and-invert transform) and returns the
ordering to expose.

References:
    - D. C. Sorensen, "Implicit application of polynomial filters in a k-step
      Arnoldi method", SIAM J. Matrix Anal. Appl. 13 (1992).
    - R. B. Lehoucq, D. C. Sorensen, C. Yang, "ARPACK Users' Guide" (1998).

File        : symgeigs/algebra/eigen/lanczos.py
Date        : 2026-10-19
"""

from typing import Optional, Callable, Tuple, Dict, Union
from numpy.typing import NDArray
import numpy as np
import scipy.linalg

from ..errors import SolverError, SolverErrorMsg
from ..matops import MatProdOp, IdentityMatProd
from ...common.flog import Logger, get_global_logger
from .result import EigenResult, EigenSolver, CompInfo
from .sort import SortRule, sort_indices

# ----------------------------------------------------------------------------------------
#! Type hints
# ----------------------------------------------------------------------------------------

RuleLike        = Union[SortRule, str]
PostProcessFunc = Callable[[NDArray, SortRule], Tuple[NDArray, NDArray]]
SelectFunc      = Callable[[NDArray, SortRule], NDArray]

# ----------------------------------------------------------------------------------------
#! Parameters
# ----------------------------------------------------------------------------------------

def get_lanczos_parameters(n            : int,
                        nev             : int,
                        ncv             : Optional[int]         = None,
                        maxit           : Optional[int]         = None,
                        tol             : Optional[float]       = None,
                        logger          : Optional[Logger]      = None
                        ) -> Dict[str, Union[int, float]]:
    """
    Default restart parameters for a problem of dimension n.

    Rules of thumb:
    - ncv >= 2 * nev converges markedly faster than ncv close to nev,
      and at least ~20 basis vectors pay off for small nev.
    - ncv can never exceed n.

    Args:
        n:
            Dimension of the problem
        nev:
            Number of requested eigenpairs
        ncv:
            User-requested subspace size (None for auto)
        maxit:
            User-requested maximum number of restarts (None for auto)
        tol:
            User-requested relative tolerance (None for auto)

    Returns:
        Dict with 'ncv', 'maxit', 'tol'
    """
    if ncv is None:
        ncv = min(n, max(2 * nev + 1, 20))
    params = {
        'ncv'   : int(ncv),
        'maxit' : int(maxit) if maxit is not None else 1000,
        'tol'   : float(tol) if tol is not None else 1e-10,
    }
    if logger:
        logger.debug(f"Lanczos parameters for n={n}, nev={nev}: ncv={params['ncv']}, "
                    f"maxit={params['maxit']}, tol={params['tol']:.0e}", lvl=1)
    return params

def _default_postprocess(values: NDArray, sorting: SortRule) -> Tuple[NDArray, NDArray]:
    return values, sort_indices(values, sorting)

# ----------------------------------------------------------------------------------------
#! Lanczos factorization
# ----------------------------------------------------------------------------------------

class LanczosFactorization:
    r"""
    B-orthonormal Lanczos factorization Op V_k = V_k H_k + f e_k^T.

    The basis is kept fully re-orthogonalized (classical Gram-Schmidt with one
    DGKS correction), so the tridiagonal H is accurate even after many restarts.
    """

    def __init__(self, op: MatProdOp, bop: MatProdOp, n: int, ncv: int):
        self._op        = op
        self._bop       = bop
        self._n         = n
        self._ncv       = ncv
        self._eps       = np.finfo(np.float64).eps
        self._rng       = np.random.default_rng(0)

        self.V          = np.zeros((n, ncv))
        self.H          = np.zeros((ncv, ncv))
        self.f          = np.zeros(n)
        self.f_norm     = 0.0
        self.k          = 0
        self.num_ops    = 0

    # ------------------------------------------------------------------------------------

    def _apply_op(self, v: NDArray) -> NDArray:
        self.num_ops   += 1
        w               = np.asarray(self._op.apply(v), dtype=np.float64)
        if w.shape != (self._n,):
            raise SolverError(SolverErrorMsg.DIM_MISMATCH,
                            f"Operator returned shape {w.shape}, expected ({self._n},)")
        if not np.all(np.isfinite(w)):
            raise SolverError(SolverErrorMsg.NUMERICAL_ISSUE, "Operator returned non-finite values")
        return w

    def _bnorm(self, x: NDArray) -> float:
        bx  = np.asarray(self._bop.apply(x), dtype=np.float64)
        xbx = float(x @ bx)
        if not np.isfinite(xbx):
            raise SolverError(SolverErrorMsg.NUMERICAL_ISSUE, "B operator returned non-finite values")
        # small negative values are rounding noise of a positive definite B
        if xbx < -self._eps * self._n * float(np.linalg.norm(x) * np.linalg.norm(bx)):
            raise SolverError(SolverErrorMsg.INVALID_INPUT, "B operator is not positive definite")
        return float(np.sqrt(max(xbx, 0.0)))

    def _project_out(self, x: NDArray, ncols: int) -> Tuple[NDArray, NDArray]:
        """x - V h with h = V^T B x, over the first ncols basis vectors."""
        Vk  = self.V[:, :ncols]
        h   = Vk.T @ np.asarray(self._bop.apply(x), dtype=np.float64)
        return x - Vk @ h, h

    # ------------------------------------------------------------------------------------

    def init(self, v0: NDArray, rng: np.random.Generator) -> None:
        """
        Reset to an empty factorization whose first basis vector is v0 / |v0|_B.
        The operator is not applied until factorize_from().
        """
        self._rng       = rng
        self.V[:]       = 0.0
        self.H[:]       = 0.0
        self.f[:]       = 0.0
        self.f_norm     = 0.0
        self.num_ops    = 0
        self.k          = 0

        v0_norm         = self._bnorm(v0)
        if v0_norm < np.finfo(np.float64).tiny:
            raise SolverError(SolverErrorMsg.ZERO_RESIDUAL, "Initial residual vector has zero B-norm")
        self.V[:, 0]    = v0 / v0_norm

    def _expand(self, i: int) -> None:
        """Apply Op to v_i and orthogonalize it, filling H[i, i], f and |f|_B."""
        w               = self._apply_op(self.V[:, i])
        w_norm          = self._bnorm(w)
        f, h            = self._project_out(w, i + 1)
        self.H[i, i]    = h[i]
        f_norm          = self._bnorm(f)

        # DGKS: one more pass when cancellation destroyed orthogonality
        if f_norm < 0.717 * w_norm:
            f, c            = self._project_out(f, i + 1)
            self.H[i, i]   += c[i]
            f_norm          = self._bnorm(f)

        self.f          = f
        self.f_norm     = f_norm

    def _random_orthogonal(self, ncols: int) -> NDArray:
        """Random unit vector B-orthogonal to the first ncols basis vectors."""
        for _ in range(5):
            r       = self._rng.uniform(-0.5, 0.5, self._n)
            r, _    = self._project_out(r, ncols)
            r, _    = self._project_out(r, ncols)
            r_norm  = self._bnorm(r)
            if r_norm > np.sqrt(self._eps):
                return r / r_norm
        raise SolverError(SolverErrorMsg.NUMERICAL_ISSUE, "Unable to extend the Krylov basis")

    def factorize_from(self, from_k: int, to_m: int) -> None:
        """
        Extend the factorization from length from_k to length to_m.
        """
        if to_m <= from_k:
            return

        for i in range(from_k, to_m):
            if i == 0:
                self._expand(0)
                continue

            beta        = self.f_norm
            h_scale     = max(1.0, float(np.abs(self.H[:i, :i]).max()))

            if beta <= self._eps * h_scale:
                # invariant subspace found, restart the recurrence
                v       = self._random_orthogonal(i)
                beta    = 0.0
            else:
                v       = self.f / beta

            self.V[:, i]        = v
            self.H[i, i - 1]    = beta
            self.H[i - 1, i]    = beta
            self._expand(i)

        self.k = to_m

    # ------------------------------------------------------------------------------------

    def compress(self, H_new: NDArray, Q: NDArray, k: int) -> None:
        r"""
        Keep the first k columns after the implicit QR steps:
            f_k = V Q e_{k+1} \hat\beta_k + f Q_{m,k},   V_k = V Q[:, :k].
        """
        m               = self._ncv
        beta_k          = H_new[k, k - 1]
        sigma_k         = Q[m - 1, k - 1]
        f_new           = (self.V @ Q[:, k]) * beta_k + self.f * sigma_k
        V_new           = self.V @ Q[:, :k]

        self.V[:]       = 0.0
        self.V[:, :k]   = V_new
        self.H[:]       = 0.0
        self.H[:k, :k]  = H_new[:k, :k]
        self.f          = f_new
        self.f_norm     = self._bnorm(f_new)
        self.k          = k

# ----------------------------------------------------------------------------------------
#! Implicitly restarted Lanczos
# ----------------------------------------------------------------------------------------

def _tridiagonal(H: NDArray) -> NDArray:
    """Symmetric tridiagonal part of H."""
    d   = np.diag(H).copy()
    e   = 0.5 * (np.diag(H, -1) + np.diag(H, 1))
    return np.diag(d) + np.diag(e, -1) + np.diag(e, 1)

class ImplicitlyRestartedLanczos(EigenSolver):
    r"""
    Implicitly restarted Lanczos method for operators that are self-adjoint in
    the B-inner product.

    Parameters:
    -----------
        op:
            Operator whose dominant eigenpairs are sought (``apply`` and ``dimension``)
        bop:
            Operator defining the inner product, y = B x
        nev:
            Number of eigenpairs requested, 1 <= nev <= n - 1
        ncv:
            Size of the Krylov subspace, nev < ncv <= n. ncv >= 2 nev is advised.
        postprocess:
            Function (values, sorting) -> (corrected values, order) applied once to
            the converged Ritz values. The default leaves the values unchanged and
            orders them by ``sorting``.
        select:
            Function (values, selection) -> order ranking the Ritz values during
            the iteration, wanted values first. Defaults to ``sort_indices``.
        seed:
            Seed of the random starting vector
        logger:
            Logger for progress messages (global logger if None)

    State machine: constructed -> init() -> compute() -> accessors; init() and
    compute() may be called again.

    Example:
        >>> op      = DenseSymMatProd(A)
        >>> engine  = ImplicitlyRestartedLanczos(op, IdentityMatProd(n), nev=4, ncv=12)
        >>> engine.init()
        >>> nconv   = engine.compute(SortRule.LARGEST_ALGE)
        >>> engine.eigenvalues()
    """

    def __init__(self,
                op              : MatProdOp,
                bop             : MatProdOp,
                nev             : int,
                ncv             : int,
                postprocess     : Optional[PostProcessFunc]     = None,
                select          : Optional[SelectFunc]          = None,
                seed            : int                           = 0,
                logger          : Optional[Logger]              = None):

        n = op.dimension()
        if bop.dimension() != n:
            raise SolverError(SolverErrorMsg.DIM_MISMATCH,
                            f"Operator dimension {n} does not match B operator dimension {bop.dimension()}")
        if nev < 1 or nev > n - 1:
            raise SolverError(SolverErrorMsg.NEV_OUT_OF_RANGE,
                            f"nev must satisfy 1 <= nev <= n - 1, n is the size of matrix (nev={nev}, n={n})")
        if ncv <= nev or ncv > n:
            raise SolverError(SolverErrorMsg.NCV_OUT_OF_RANGE,
                            f"ncv must satisfy nev < ncv <= n, n is the size of matrix (ncv={ncv}, nev={nev}, n={n})")

        self._op            = op
        self._bop           = bop
        self._n             = n
        self._nev           = int(nev)
        self._ncv           = int(ncv)
        self._postprocess   = postprocess if postprocess is not None else _default_postprocess
        self._select        = select if select is not None else sort_indices
        self._seed          = seed
        self._logger        = logger if logger is not None else get_global_logger()

        self._fac           = LanczosFactorization(op, bop, n, self._ncv)
        self._initialized   = False
        self._reset_results()

    @staticmethod
    def is_iterative_solver() -> bool:
        return True

    # ------------------------------------------------------------------------------------

    def _reset_results(self) -> None:
        self._ritz_val      = np.zeros(self._ncv)
        self._ritz_est      = np.zeros(self._ncv)
        self._ritz_vec      = np.zeros((self._ncv, self._nev))
        self._ritz_conv     = np.zeros(self._nev, dtype=bool)
        self._niter         = 0
        self._info          = CompInfo.NOT_COMPUTED

    def init(self, init_resid: Optional[NDArray] = None) -> None:
        """
        Reset the iteration state and start from init_resid (random if None).
        """
        rng = np.random.default_rng(self._seed)
        if init_resid is None:
            init_resid = rng.uniform(-0.5, 0.5, self._n)
        else:
            init_resid = np.asarray(init_resid, dtype=np.float64)
            if init_resid.shape != (self._n,):
                raise SolverError(SolverErrorMsg.DIM_MISMATCH,
                                f"Initial residual must have shape ({self._n},), got {init_resid.shape}")

        self._reset_results()
        self._fac.init(init_resid, rng)
        self._initialized = True

    # ------------------------------------------------------------------------------------
    #! Ritz pairs
    # ------------------------------------------------------------------------------------

    def _retrieve_ritzpair(self, selection: SortRule) -> None:
        H               = self._fac.H
        evals, evecs    = scipy.linalg.eigh_tridiagonal(np.diag(H).copy(), np.diag(H, -1).copy())
        ind             = np.asarray(self._select(evals, selection), dtype=int)

        self._ritz_val  = evals[ind]
        self._ritz_est  = evecs[self._ncv - 1, ind]
        self._ritz_vec  = evecs[:, ind[:self._nev]]

    def _num_converged(self, tol: float) -> int:
        eps23           = np.finfo(np.float64).eps ** (2.0 / 3.0)
        thresh          = tol * np.maximum(eps23, np.abs(self._ritz_val[:self._nev]))
        resid           = np.abs(self._ritz_est[:self._nev]) * self._fac.f_norm
        self._ritz_conv = resid < thresh
        return int(np.count_nonzero(self._ritz_conv))

    def _nev_adjusted(self, nconv: int) -> int:
        """Number of Ritz values kept at a restart (ARPACK heuristic)."""
        eps     = np.finfo(np.float64).eps
        nev_new = self._nev + int(np.count_nonzero(np.abs(self._ritz_est[self._nev:]) < eps))
        nev_new += min(nconv, (self._ncv - nev_new) // 2)
        if nev_new == 1 and self._ncv >= 6:
            nev_new = self._ncv // 2
        elif nev_new == 1 and self._ncv > 2:
            nev_new = 2
        return min(nev_new, self._ncv - 1)

    def _restart(self, k: int, selection: SortRule) -> None:
        if k >= self._ncv:
            return

        identity    = np.eye(self._ncv)
        H           = self._fac.H.copy()
        Q           = identity.copy()
        for mu in self._ritz_val[k:self._ncv]:
            Qi, Ri  = np.linalg.qr(H - mu * identity)
            H       = _tridiagonal(Ri @ Qi + mu * identity)
            Q       = Q @ Qi

        self._fac.compress(H, Q, k)
        self._fac.factorize_from(k, self._ncv)
        self._retrieve_ritzpair(selection)

    def _sort_ritzpair(self, sorting: SortRule) -> None:
        values, order                   = self._postprocess(self._ritz_val[:self._nev].copy(), sorting)
        values                          = np.asarray(values, dtype=np.float64)
        self._ritz_val[:self._nev]      = values[order]
        self._ritz_est[:self._nev]      = self._ritz_est[:self._nev][order]
        self._ritz_vec                  = self._ritz_vec[:, order]
        self._ritz_conv                 = self._ritz_conv[order]

    # ------------------------------------------------------------------------------------
    #! compute
    # ------------------------------------------------------------------------------------

    def compute(self,
                selection       : RuleLike              = SortRule.LARGEST_MAGN,
                maxit           : int                   = 1000,
                tol             : float                 = 1e-10,
                sorting         : Optional[RuleLike]    = None) -> int:
        """
        Run the restarted iteration.

        Parameters:
        -----------
            selection:
                Rule selecting the wanted Ritz values of the operator
            maxit:
                Maximum number of restarts
            tol:
                Relative tolerance of the Ritz residuals
            sorting:
                Rule ordering the returned values (same as selection if None)

        Returns:
            Number of converged eigenpairs, at most nev. ``info()`` tells
            whether the computation succeeded.
        """
        if not self._initialized:
            raise SolverError(SolverErrorMsg.NOT_INITIALIZED, "init() must be called before compute()")

        selection   = SortRule.resolve(selection)
        sorting     = selection if sorting is None else SortRule.resolve(sorting)
        nconv       = 0

        try:
            self._fac.factorize_from(self._fac.k, self._ncv)
            self._retrieve_ritzpair(selection)

            for i in range(maxit):
                nconv = self._num_converged(tol)
                if nconv >= self._nev:
                    break
                nev_adj = self._nev_adjusted(nconv)
                self._logger.debug(f"Restart {i + 1}: {nconv}/{self._nev} converged, keeping {nev_adj} Ritz values", lvl=2)
                self._restart(nev_adj, selection)
                self._niter += 1
            else:
                nconv = self._num_converged(tol)

            self._sort_ritzpair(sorting)

        except Exception as e:
            # any failure of an operator ends the run with a status, not an exception
            self._info          = CompInfo.NUMERICAL_ISSUE
            self._ritz_conv[:]  = False
            self._initialized   = False
            self._logger.error(f"Lanczos iteration aborted: {e}", lvl=1)
            return 0

        self._info       = CompInfo.SUCCESSFUL if nconv >= self._nev else CompInfo.NOT_CONVERGING

        if self._info is CompInfo.SUCCESSFUL:
            self._logger.info(f"Lanczos converged: {nconv} eigenpairs after {self._niter} restarts, "
                            f"{self._fac.num_ops} operations", lvl=1)
        else:
            self._logger.warning(f"Lanczos did not converge: {nconv}/{self._nev} eigenpairs after {self._niter} restarts", lvl=1)
        return min(self._nev, nconv)

    # ------------------------------------------------------------------------------------
    #! Accessors
    # ------------------------------------------------------------------------------------

    def info(self) -> CompInfo:
        return self._info

    def num_iterations(self) -> int:
        return self._niter

    def num_operations(self) -> int:
        return self._fac.num_ops

    def _has_results(self) -> bool:
        return self._info in (CompInfo.SUCCESSFUL, CompInfo.NOT_CONVERGING)

    def eigenvalues(self) -> NDArray:
        """
        Converged eigenvalues, ordered by the sorting rule of the last compute().
        Empty before a successful compute().
        """
        if not self._has_results():
            return np.zeros(0)
        return self._ritz_val[:self._nev][self._ritz_conv].copy()

    def eigenvectors(self, nvec: Optional[int] = None) -> NDArray:
        """
        Converged eigenvectors as columns (at most nvec of them), B-orthonormal.
        """
        if not self._has_results():
            return np.zeros((self._n, 0))
        Y = self._ritz_vec[:, self._ritz_conv]
        if nvec is not None:
            Y = Y[:, :max(0, int(nvec))]
        return self._fac.V @ Y

    def residual_estimates(self) -> NDArray:
        """Ritz residual estimates of the converged pairs, in the operator's space."""
        if not self._has_results():
            return np.zeros(0)
        return np.abs(self._ritz_est[:self._nev][self._ritz_conv]) * self._fac.f_norm

    def result(self) -> EigenResult:
        return EigenResult(
            eigenvalues     = self.eigenvalues(),
            eigenvectors    = self.eigenvectors(),
            iterations      = self._niter,
            converged       = self._info is CompInfo.SUCCESSFUL,
            residual_norms  = self.residual_estimates(),
            info            = self._info,
            num_operations  = self.num_operations(),
        )

    def solve(self,
            selection       : RuleLike              = SortRule.LARGEST_MAGN,
            maxit           : int                   = 1000,
            tol             : float                 = 1e-10,
            sorting         : Optional[RuleLike]    = None,
            v0              : Optional[NDArray]     = None) -> EigenResult:
        """
        init(v0) followed by compute(...), returned as an EigenResult.
        """
        self.init(v0)
        self.compute(selection, maxit, tol, sorting)
        return self.result()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n={self._n}, nev={self._nev}, ncv={self._ncv}, info={self._info})"

# ----------------------------------------------------------------------------------------
#! Standard symmetric problem
# ----------------------------------------------------------------------------------------

class SymEigsSolver(ImplicitlyRestartedLanczos):
    """
    Eigenpairs of a symmetric operator, A x = lambda x (regular mode, B = I).

    Example:
        >>> solver = SymEigsSolver(DenseSymMatProd(A), nev=5, ncv=15)
        >>> result = solver.solve(SortRule.SMALLEST_ALGE)
    """

    def __init__(self,
                op              : MatProdOp,
                nev             : int,
                ncv             : int,
                seed            : int                   = 0,
                logger          : Optional[Logger]      = None):
        super().__init__(op, IdentityMatProd(op.dimension()), nev, ncv, seed=seed, logger=logger)

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
