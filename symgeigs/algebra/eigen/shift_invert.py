r"""
Shift-and-Invert Generalized Symmetric Eigensolver

Solves A x = \lambda B x for symmetric A and symmetric positive definite B,
seeking the eigenvalues closest to a shift \sigma. The problem is handed to
the Lanczos engine in transformed form; the transform is one of:

    - shift-invert      (A - \sigma B)^{-1} B x  = \nu x,     \nu = 1 / (\lambda - \sigma)
    - buckling          (K - \sigma K_G)^{-1} K x = \nu x,    \nu = \lambda / (\lambda - \sigma)
    - Cayley            (A - \sigma B)^{-1} (A + \sigma B) x = \nu x,
                                                         \nu = (\lambda + \sigma) / (\lambda - \sigma)

In each case eigenvalues near \sigma are sent to the extremes of the \nu
spectrum, where Lanczos converges fastest. The
transformed operator is never formed: it is composed from a shifted solve and
a product with B. After the iteration the Ritz values are mapped back to the
\lambda spectrum and re-sorted under the caller's rule, since an ordering of
\nu does not carry over to \lambda.

Eigenvectors are shared by the transformed and original problems and come
out B-orthonormal.

Example:
    >>> op      = SymShiftInvert(A, B)          # y = (A - sigma B)^{-1} x
    >>> bop     = SparseSymMatProd(B)           # y = B x
    >>> geigs   = SymGEigsShiftSolver(op, bop, nev=3, ncv=6, sigma=0.0)
    >>> geigs.init()
    >>> nconv   = geigs.compute(SortRule.LARGEST_MAGN)
    >>> if geigs.info() is CompInfo.SUCCESSFUL:
    ...     evals, evecs = geigs.eigenvalues(), geigs.eigenvectors()

File        : symgeigs/algebra/eigen/shift_invert.py
Date        : 2026-10-19
"""

from abc import ABC, abstractmethod
from enum import Enum, unique
from typing import Optional, Tuple, Union
from numpy.typing import NDArray
import numpy as np

from ..errors import SolverError, SolverErrorMsg
from ..matops import MatOp, MatProdOp, ShiftSolveOp
from ...common.flog import Logger, get_global_logger
from .result import EigenResult, EigenSolver, CompInfo
from .sort import SortRule, sort_indices
from .lanczos import ImplicitlyRestartedLanczos, RuleLike

# ----------------------------------------------------------------------------------------
#! Composite operators
# ----------------------------------------------------------------------------------------

class ShiftInvertOperator(MatOp):
    r"""
    y = (A - \sigma B)^{-1} B x, composed as ``op.apply(bop.apply(x))``.

    For the built-in operators the intermediate product B x goes to a buffer
    owned by the operator. Caller-supplied operators only need ``apply(x)``.
    """

    def __init__(self, op: ShiftSolveOp, bop: MatProdOp):
        n = op.dimension()
        if bop.dimension() != n:
            raise SolverError(SolverErrorMsg.DIM_MISMATCH,
                            f"Solve operator has dimension {n}, B operator has dimension {bop.dimension()}")
        super().__init__(n)
        self._op    = op
        self._bop   = bop
        self._bx    = np.empty(n)

    def apply(self, x: NDArray, out: Optional[NDArray] = None) -> NDArray:
        if isinstance(self._bop, MatOp):
            bx = self._bop.apply(x, out=self._bx)
        else:
            bx = np.asarray(self._bop.apply(x), dtype=np.float64)

        if isinstance(self._op, MatOp):
            return self._op.apply(bx, out=out)
        y = np.asarray(self._op.apply(bx), dtype=np.float64)
        if out is None:
            return y
        out[:] = y
        return out

class CayleyOperator(MatOp):
    r"""
    y = (A - \sigma B)^{-1} (A + \sigma B) x = x + 2 \sigma (A - \sigma B)^{-1} B x.
    """

    def __init__(self, op: ShiftSolveOp, bop: MatProdOp, sigma: float):
        self._inner = ShiftInvertOperator(op, bop)
        super().__init__(self._inner.dimension())
        self._sigma = float(sigma)

    def apply(self, x: NDArray, out: Optional[NDArray] = None) -> NDArray:
        y = 2.0 * self._sigma * self._inner.apply(x) + x
        if out is None:
            return y
        out[:] = y
        return out

# ----------------------------------------------------------------------------------------
#! Transform modes
# ----------------------------------------------------------------------------------------

@unique
class GEigsMode(Enum):
    """
    Spectral transform used by SymGEigsShiftSolver.
    """
    SHIFT_INVERT    = 'shift_invert'
    BUCKLING        = 'buckling'
    CAYLEY          = 'cayley'

    @classmethod
    def resolve(cls, mode: Union['GEigsMode', str]) -> 'GEigsMode':
        if isinstance(mode, GEigsMode):
            return mode
        if isinstance(mode, str):
            key = mode.strip().lower().replace('-', '_').replace(' ', '_')
            for member in cls:
                if member.value == key:
                    return member
        raise ValueError(f"Unknown generalized eigensolver mode: {mode!r}")

class SpectralTransform(ABC):
    """
    One transform mode: how to build the operator and how to undo the map.
    """

    mode: GEigsMode

    def validate_shift(self, sigma: float) -> None:
        if not np.isfinite(sigma):
            raise SolverError(SolverErrorMsg.INVALID_INPUT, f"Shift must be finite, got {sigma}")

    @abstractmethod
    def operator(self, op: ShiftSolveOp, bop: MatProdOp, sigma: float) -> MatOp:
        ...

    @abstractmethod
    def _to_lambda(self, nu: NDArray, sigma: float) -> NDArray:
        ...

    def back_transform(self, nu: NDArray, sigma: float) -> NDArray:
        """lambda for each Ritz value nu; a nu without finite image is a numerical issue."""
        nu = np.asarray(nu, dtype=np.float64)
        with np.errstate(divide='ignore', invalid='ignore'):
            lam = self._to_lambda(nu, sigma)
        if not np.all(np.isfinite(lam)):
            raise SolverError(SolverErrorMsg.NUMERICAL_ISSUE,
                            f"Cannot back-transform Ritz values {nu[~np.isfinite(lam)]} ({self.mode.value})")
        return lam

    def distance_to_shift(self, nu: NDArray, sigma: float) -> NDArray:
        """|lambda - sigma| for each Ritz value nu, infinite where lambda is not finite."""
        nu = np.asarray(nu, dtype=np.float64)
        with np.errstate(divide='ignore', invalid='ignore'):
            dist = np.abs(self._to_lambda(nu, sigma) - sigma)
        dist[~np.isfinite(dist)] = np.inf
        return dist

class ShiftInvertTransform(SpectralTransform):
    mode = GEigsMode.SHIFT_INVERT

    def operator(self, op, bop, sigma):
        return ShiftInvertOperator(op, bop)

    def _to_lambda(self, nu, sigma):
        # nu = 1 / (lambda - sigma)  =>  lambda = 1 / nu + sigma
        return 1.0 / nu + sigma

class BucklingTransform(SpectralTransform):
    mode = GEigsMode.BUCKLING

    def validate_shift(self, sigma):
        super().validate_shift(sigma)
        if sigma == 0.0:
            raise SolverError(SolverErrorMsg.INVALID_INPUT, "Buckling mode requires a non-zero shift")

    def operator(self, op, bop, sigma):
        return ShiftInvertOperator(op, bop)

    def _to_lambda(self, nu, sigma):
        # nu = lambda / (lambda - sigma)  =>  lambda = sigma nu / (nu - 1)
        return sigma * nu / (nu - 1.0)

class CayleyTransform(SpectralTransform):
    mode = GEigsMode.CAYLEY

    def validate_shift(self, sigma):
        super().validate_shift(sigma)
        if sigma == 0.0:
            raise SolverError(SolverErrorMsg.INVALID_INPUT, "Cayley mode requires a non-zero shift")

    def operator(self, op, bop, sigma):
        return CayleyOperator(op, bop, sigma)

    def _to_lambda(self, nu, sigma):
        # nu = (lambda + sigma) / (lambda - sigma)  =>  lambda = sigma (1 + nu) / (nu - 1)
        return sigma * (1.0 + nu) / (nu - 1.0)

_TRANSFORMS = {
    GEigsMode.SHIFT_INVERT  : ShiftInvertTransform,
    GEigsMode.BUCKLING      : BucklingTransform,
    GEigsMode.CAYLEY        : CayleyTransform,
}

# ----------------------------------------------------------------------------------------
#! Solver
# ----------------------------------------------------------------------------------------

class SymGEigsShiftSolver(EigenSolver):
    r"""
    Generalized symmetric eigensolver with a spectral transform around \sigma.

    Parameters:
    -----------
        op:
            Shifted solve operator, y = (A - \sigma B)^{-1} x (K - \sigma K_G in
            buckling mode). Its shift is set once, here.
        bop:
            Product operator y = B x (y = K x in buckling mode). B must be
            positive definite.
        nev:
            Number of eigenvalues requested, 1 <= nev <= n - 1
        ncv:
            Krylov subspace size, nev < ncv <= n. ncv >= 2 nev is advised.
        sigma:
            The shift
        mode:
            'shift_invert' (default), 'buckling' or 'cayley'
        seed:
            Seed of the random starting vector
        logger:
            Logger for progress messages (global logger if None)
    """

    def __init__(self,
                op              : ShiftSolveOp,
                bop             : MatProdOp,
                nev             : int,
                ncv             : int,
                sigma           : float,
                mode            : Union[GEigsMode, str]     = GEigsMode.SHIFT_INVERT,
                seed            : int                       = 0,
                logger          : Optional[Logger]          = None):

        self._mode      = GEigsMode.resolve(mode)
        self._transform = _TRANSFORMS[self._mode]()
        self._sigma     = float(sigma)
        self._transform.validate_shift(self._sigma)
        self._logger    = logger if logger is not None else get_global_logger()

        self._op        = op
        self._bop       = bop
        self._tr_op     = self._transform.operator(op, bop, self._sigma)
        self._engine    = ImplicitlyRestartedLanczos(self._tr_op, bop, nev, ncv,
                                                    postprocess     = self._correct_and_sort,
                                                    select          = self._select,
                                                    seed            = seed,
                                                    logger          = self._logger)
        op.set_shift(self._sigma)
        self._logger.debug(f"{self._mode.value} solver: n={self._tr_op.dimension()}, nev={nev}, ncv={ncv}, sigma={self._sigma}", lvl=1)

    @staticmethod
    def is_iterative_solver() -> bool:
        return True

    # ------------------------------------------------------------------------------------

    @property
    def sigma(self) -> float:
        return self._sigma

    @property
    def mode(self) -> GEigsMode:
        return self._mode

    @property
    def operator(self) -> MatOp:
        """The transformed operator handed to the Lanczos engine."""
        return self._tr_op

    # ------------------------------------------------------------------------------------

    def _correct_and_sort(self, nu: NDArray, sorting: SortRule) -> Tuple[NDArray, NDArray]:
        lam = self._transform.back_transform(nu, self._sigma)
        return lam, sort_indices(lam, sorting, target=self._sigma)

    def _select(self, nu: NDArray, selection: SortRule) -> NDArray:
        # closest to sigma is measured on lambda, the nu ordering differs by mode
        if selection is SortRule.CLOSEST_TO_SHIFT:
            return np.argsort(self._transform.distance_to_shift(nu, self._sigma), kind='stable')
        return sort_indices(nu, selection)

    # ------------------------------------------------------------------------------------

    def init(self, init_resid: Optional[NDArray] = None) -> None:
        """
        Reset the iteration state. Must precede the first compute().
        """
        self._engine.init(init_resid)

    def compute(self,
                selection       : RuleLike              = SortRule.LARGEST_MAGN,
                maxit           : int                   = 1000,
                tol             : float                 = 1e-10,
                sorting         : Optional[RuleLike]    = None) -> int:
        """
        Run the iteration and map the converged values back to the original problem.

        Parameters:
        -----------
            selection:
                Rule selecting the wanted values of the transformed operator.
                CLOSEST_TO_SHIFT selects the eigenvalues closest to sigma in
                every mode. LARGEST_MAGN does the same only in shift-invert mode.
            maxit:
                Maximum number of restarts
            tol:
                Relative tolerance of the Ritz residuals
            sorting:
                Rule ordering the back-transformed eigenvalues. Defaults to
                ``selection`` applied to the lambda values; CLOSEST_TO_SHIFT
                measures the distance to sigma.

        Returns:
            Number of converged eigenvalues (<= nev)
        """
        selection   = SortRule.resolve(selection)
        sorting     = selection if sorting is None else SortRule.resolve(sorting)
        return self._engine.compute(selection, maxit, tol, sorting)

    # ------------------------------------------------------------------------------------

    def info(self) -> CompInfo:
        return self._engine.info()

    def eigenvalues(self) -> NDArray:
        """Converged eigenvalues lambda of the original problem."""
        return self._engine.eigenvalues()

    def eigenvectors(self, nvec: Optional[int] = None) -> NDArray:
        """Corresponding B-orthonormal eigenvectors, as columns."""
        return self._engine.eigenvectors(nvec)

    def num_iterations(self) -> int:
        return self._engine.num_iterations()

    def num_operations(self) -> int:
        return self._engine.num_operations()

    def result(self) -> EigenResult:
        return self._engine.result()

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
        return (f"SymGEigsShiftSolver(mode={self._mode.value}, sigma={self._sigma}, "
                f"engine={self._engine!r})")

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
