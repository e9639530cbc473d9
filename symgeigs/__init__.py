# symgeigs/__init__.py

"""
symgeigs - a few eigenpairs of large symmetric generalized eigenproblems.

Solves A x = lambda B x for symmetric A and positive definite B near a shift
sigma, by handing the shift-and-invert transformed operator
(A - sigma B)^{-1} B to an implicitly restarted Lanczos engine and mapping the
converged values back with lambda = 1 / nu + sigma.

Modules:
--------
- algebra       : Matrix operation objects (products, shifted solves) and error types
- algebra.eigen : Lanczos engine, shift-invert / buckling / Cayley solvers, results
- common        : Logging

Examples:
---------
>>> import numpy as np, scipy.sparse as sp
>>> from symgeigs import geigsh
>>> A       = sp.diags([-1.0, 2.0, -1.0], [-1, 0, 1], shape=(100, 100), format="csc")
>>> B       = sp.diags([1.0, 2.0, 1.0], [-1, 0, 1], shape=(100, 100), format="csc")
>>> result  = geigsh(A, B, k=3, sigma=0.0)

Version : 0.1.0
License : MIT
"""

import importlib

# Package metadata
__version__         = "0.1.0"
__license__         = "MIT"

__all__             = ["algebra", "common", "geigsh", "SymGEigsShiftSolver", "SortRule", "CompInfo"]

_TOP_LEVEL = {
    'geigsh'                : ('.algebra.eigen.factory', 'geigsh'),
    'SymGEigsShiftSolver'   : ('.algebra.eigen.shift_invert', 'SymGEigsShiftSolver'),
    'SortRule'              : ('.algebra.eigen.sort', 'SortRule'),
    'CompInfo'              : ('.algebra.eigen.result', 'CompInfo'),
}

def __getattr__(name: str):
    """
    Lazily import submodules and the most used entry points.
    """
    if name in ("algebra", "common"):
        return importlib.import_module(f".{name}", package=__name__)
    if name in _TOP_LEVEL:
        module_path, attr_name = _TOP_LEVEL[name]
        return getattr(importlib.import_module(module_path, package=__name__), attr_name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
