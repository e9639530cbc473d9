"""
Linear algebra for the eigensolvers: matrix operation objects, error types,
and the ``eigen`` subpackage with the Lanczos engine and spectral transforms.

Example:
    >>> from symgeigs.algebra import SymShiftInvert, SparseSymMatProd
    >>> from symgeigs.algebra.eigen import SymGEigsShiftSolver
"""

from .errors import SolverError, SolverErrorMsg
from .matops import (
    MatProdOp,
    ShiftSolveOp,
    MatOp,
    DenseSymMatProd,
    SparseSymMatProd,
    IdentityMatProd,
    SymShiftInvert,
    make_matprod,
)

__all__ = [
    "SolverError",
    "SolverErrorMsg",
    "MatProdOp",
    "ShiftSolveOp",
    "MatOp",
    "DenseSymMatProd",
    "SparseSymMatProd",
    "IdentityMatProd",
    "SymShiftInvert",
    "make_matprod",
]
