r"""
Unified Generalized Eigensolver Interface

Convenience layer over SymGEigsShiftSolver:

    - choose_geigs_solver:  construct the solver for a transform mode from operator objects
    - geigsh:               solve A x = \lambda B x near a shift directly from matrices

``geigsh`` mirrors ``scipy.sparse.linalg.eigsh(A, k, M=B, sigma=...)``: it builds
the shifted solve and product operators from dense or sparse matrices, runs the
solver and reports the true residuals ||A v - \lambda B v||.

----------------------------------------------
File        : symgeigs/algebra/eigen/factory.py
Date        : 2026-10-19
----------------------------------------------
"""

import numpy as np
from numpy.typing import NDArray
from typing import Optional, Union, Any

from ..matops import MatProdOp, ShiftSolveOp, SymShiftInvert, IdentityMatProd, make_matprod
from ...common.flog import Logger, get_global_logger
from .result import EigenResult, CompInfo
from .sort import SortRule
from .lanczos import get_lanczos_parameters, RuleLike
from .shift_invert import SymGEigsShiftSolver, GEigsMode

# ----------------------------------------------------------------------------------------
#! Factory
# ----------------------------------------------------------------------------------------

def choose_geigs_solver(
        mode            : Union[GEigsMode, str],
        op              : ShiftSolveOp,
        bop             : MatProdOp,
        nev             : int,
        ncv             : Optional[int]         = None,
        sigma           : float                 = 0.0,
        **kwargs) -> SymGEigsShiftSolver:
    """
    Construct a generalized solver for the given transform mode.

    Parameters:
    -----------
        mode:
            'shift_invert', 'buckling' or 'cayley' (or a GEigsMode)
        op, bop:
            Shifted solve operator and B product operator
        nev:
            Number of eigenvalues requested
        ncv:
            Krylov subspace size (default from get_lanczos_parameters)
        sigma:
            The shift
        **kwargs:
            seed, logger - forwarded to the solver
    """
    params = get_lanczos_parameters(op.dimension(), nev, ncv=ncv)
    return SymGEigsShiftSolver(op, bop, nev, params['ncv'], sigma,
                            mode    = GEigsMode.resolve(mode),
                            seed    = kwargs.get('seed', 0),
                            logger  = kwargs.get('logger', None))

# ----------------------------------------------------------------------------------------

def _residual_norms(A: Any, B: Optional[Any], evals: NDArray, evecs: NDArray) -> NDArray:
    if evecs.shape[1] == 0:
        return np.zeros(0)
    AV = A @ evecs
    BV = evecs if B is None else B @ evecs
    return np.linalg.norm(np.asarray(AV - BV * evals[None, :]), axis=0)

def geigsh(
        A               : Any,
        B               : Optional[Any]         = None,
        k               : int                   = 6,
        sigma           : float                 = 0.0,
        which           : RuleLike              = SortRule.LARGEST_MAGN,
        sorting         : Optional[RuleLike]    = None,
        ncv             : Optional[int]         = None,
        maxit           : Optional[int]         = None,
        tol             : Optional[float]       = None,
        mode            : Union[GEigsMode, str] = GEigsMode.SHIFT_INVERT,
        v0              : Optional[NDArray]     = None,
        seed            : int                   = 0,
        logger          : Optional[Logger]      = None) -> EigenResult:
    r"""
    k eigenpairs of A x = \lambda B x near sigma.

    Parameters:
    -----------
        A, B:
            Symmetric dense or sparse matrices; B positive definite (identity if None).
            In buckling mode A is the stiffness K (positive definite) and B the
            geometric matrix K_G.
        k:
            Number of eigenpairs
        sigma:
            The shift
        which:
            Selection rule in the transformed space ('CS' gives the eigenvalues
            nearest sigma in every mode, 'LM' only in shift-invert mode)
        sorting:
            Order of the returned eigenvalues (same rule as ``which`` if None)
        ncv, maxit, tol:
            Restart parameters (defaults from get_lanczos_parameters)
        mode:
            'shift_invert', 'buckling' or 'cayley'
        v0:
            Starting vector (random if None)

    Returns:
        EigenResult whose residual_norms are ||A v - \lambda B v||.

    Example:
        >>> B       = sp.diags([1.0, 2.0, 1.0], [-1, 0, 1], shape=(100, 100))
        >>> result  = geigsh(A, B, k=3, sigma=0.0)
        >>> result.eigenvalues
    """
    logger  = logger if logger is not None else get_global_logger()
    mode    = GEigsMode.resolve(mode)
    n       = A.shape[0]
    params  = get_lanczos_parameters(n, k, ncv=ncv, maxit=maxit, tol=tol, logger=logger)

    op      = SymShiftInvert(A, B)
    if mode is GEigsMode.BUCKLING:
        # K x = lambda K_G x, the inner product is the one of K
        bop = make_matprod(A)
    else:
        bop = IdentityMatProd(n) if B is None else make_matprod(B)

    solver  = SymGEigsShiftSolver(op, bop, k, params['ncv'], sigma, mode=mode, seed=seed, logger=logger)
    solver.init(v0)
    solver.compute(which, params['maxit'], params['tol'], sorting)

    evals   = solver.eigenvalues()
    evecs   = solver.eigenvectors()
    info    = solver.info()
    if info is not CompInfo.SUCCESSFUL:
        logger.warning(f"geigsh: {len(evals)}/{k} eigenpairs converged ({info})", lvl=1)

    return EigenResult(
        eigenvalues     = evals,
        eigenvectors    = evecs,
        iterations      = solver.num_iterations(),
        converged       = info is CompInfo.SUCCESSFUL,
        residual_norms  = _residual_norms(A, B, evals, evecs),
        info            = info,
        num_operations  = solver.num_operations(),
    )

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
