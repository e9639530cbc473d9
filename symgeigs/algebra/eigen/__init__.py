"""
Eigenvalue Solvers Module

Iterative eigensolvers for large, possibly sparse, symmetric problems,
in particular the generalized problem A x = lambda B x near a shift sigma.

Available Solvers:
    - ImplicitlyRestartedLanczos:   restarted Lanczos in the B-inner product (the engine)
    - SymEigsSolver:                standard problem A x = lambda x
    - SymGEigsShiftSolver:          generalized problem with a spectral transform
                                    (shift-invert, buckling, Cayley)

Factory Functions:
    - choose_geigs_solver:          build the generalized solver for a mode
    - geigsh:                       solve directly from dense/sparse matrices

Standard Result:
    - EigenResult:  eigenvalues, eigenvectors, iterations, converged, residual norms, status
    - CompInfo:     status of a computation

This module uses lazy imports to minimize startup overhead.

-----------------------------------------------------------
Date            : 2026-10-19
Version         : 1.0
-----------------------------------------------------------
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

_LAZY_IMPORTS = {
    # Result types
    'EigenResult'                   : ('.result', 'EigenResult'),
    'CompInfo'                      : ('.result', 'CompInfo'),
    # Sort rules
    'SortRule'                      : ('.sort', 'SortRule'),
    'sort_indices'                  : ('.sort', 'sort_indices'),
    # Lanczos engine
    'ImplicitlyRestartedLanczos'    : ('.lanczos', 'ImplicitlyRestartedLanczos'),
    'LanczosFactorization'          : ('.lanczos', 'LanczosFactorization'),
    'SymEigsSolver'                 : ('.lanczos', 'SymEigsSolver'),
    'get_lanczos_parameters'        : ('.lanczos', 'get_lanczos_parameters'),
    # Spectral transforms
    'ShiftInvertOperator'           : ('.shift_invert', 'ShiftInvertOperator'),
    'CayleyOperator'                : ('.shift_invert', 'CayleyOperator'),
    'GEigsMode'                     : ('.shift_invert', 'GEigsMode'),
    'SymGEigsShiftSolver'           : ('.shift_invert', 'SymGEigsShiftSolver'),
    # Factory interface
    'choose_geigs_solver'           : ('.factory', 'choose_geigs_solver'),
    'geigsh'                        : ('.factory', 'geigsh'),
}

_LAZY_CACHE = {}

# For type checking only
if TYPE_CHECKING:
    from .result        import EigenResult, CompInfo
    from .sort          import SortRule, sort_indices
    from .lanczos       import ImplicitlyRestartedLanczos, LanczosFactorization, SymEigsSolver, get_lanczos_parameters
    from .shift_invert  import ShiftInvertOperator, CayleyOperator, GEigsMode, SymGEigsShiftSolver
    from .factory       import choose_geigs_solver, geigsh

# -----------------------------------------------------------------------------------------------

def __getattr__(name: str):
    """
    Module-level __getattr__ for lazy imports.
    """
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name = _LAZY_IMPORTS[name]
    module  = importlib.import_module(module_path, package=__name__)
    result  = getattr(module, attr_name)

    _LAZY_CACHE[name] = result
    return result


__all__ = list(_LAZY_IMPORTS.keys())

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
