r'''
file:       symgeigs/algebra/matops.py

Matrix operation objects consumed by the eigensolvers.

The solvers never look at matrices directly. They only need two capabilities:

    - a product operator            y = B x                 (``MatProdOp``)
    - a shifted solve operator      y = (A - \sigma B)^{-1} x   (``ShiftSolveOp``)

Both report the matrix dimension and apply themselves to a vector. Users may
pass any object implementing the protocols below; the classes in this module
cover dense NumPy matrices and SciPy sparse matrices.

Example:
    >>> A   = np.diag(np.arange(1.0, 6.0))
    >>> op  = SymShiftInvert(A)
    >>> op.set_shift(0.5)
    >>> op.apply(np.ones(5))            # (A - 0.5 I)^{-1} 1
'''

import warnings
import numpy as np
import scipy.sparse as sp
import scipy.linalg as scipy_linalg
import scipy.sparse.linalg as scipy_sparse_linalg
from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable, Any
from numpy.typing import NDArray

from .errors import SolverError, SolverErrorMsg

# -----------------------------------------------------------------------------
#! Protocols
# -----------------------------------------------------------------------------

@runtime_checkable
class MatProdOp(Protocol):
    '''
    Capability y = M x for a square n x n matrix M. The built-in operators
    also accept an ``out`` buffer; callers only need ``apply(x)``.
    '''

    def dimension(self) -> int:
        ...

    def apply(self, x: NDArray) -> NDArray:
        ...

@runtime_checkable
class ShiftSolveOp(Protocol):
    r'''
    Capability y = (A - \sigma B)^{-1} x. The shift is set before the first apply.
    '''

    def dimension(self) -> int:
        ...

    def set_shift(self, sigma: float) -> None:
        ...

    def apply(self, x: NDArray) -> NDArray:
        ...

# -----------------------------------------------------------------------------
#! Helpers
# -----------------------------------------------------------------------------

def _check_square(mat: Any, name: str) -> int:
    shape = getattr(mat, 'shape', None)
    if shape is None or len(shape) != 2 or shape[0] != shape[1]:
        raise SolverError(SolverErrorMsg.DIM_MISMATCH, f"{name} must be a square matrix, got shape {shape}")
    return int(shape[0])

def _check_vector(x: NDArray, n: int) -> NDArray:
    x = np.asarray(x)
    if x.shape != (n,):
        raise SolverError(SolverErrorMsg.DIM_MISMATCH, f"Expected a vector of shape ({n},), got {x.shape}")
    return x

def _write_out(y: NDArray, out: Optional[NDArray]) -> NDArray:
    if out is None:
        return y
    out[:] = y
    return out

# -----------------------------------------------------------------------------
#! Base class
# -----------------------------------------------------------------------------

class MatOp(ABC):
    '''
    Common base for the built-in operators.
    '''

    def __init__(self, n: int):
        self._n = n

    def dimension(self) -> int:
        return self._n

    @property
    def shape(self):
        return (self._n, self._n)

    @abstractmethod
    def apply(self, x: NDArray, out: Optional[NDArray] = None) -> NDArray:
        raise NotImplementedError("This method should be implemented by subclasses.")

    def as_linear_operator(self) -> scipy_sparse_linalg.LinearOperator:
        '''
        SciPy LinearOperator view of this operator.
        '''
        return scipy_sparse_linalg.LinearOperator(self.shape, matvec=self.apply, dtype=np.float64)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n={self._n})"

# -----------------------------------------------------------------------------
#! Products
# -----------------------------------------------------------------------------

class DenseSymMatProd(MatOp):
    '''
    y = A x for a dense symmetric matrix A.
    '''

    def __init__(self, A: NDArray):
        super().__init__(_check_square(A, "A"))
        self._mat = np.asarray(A, dtype=np.float64)

    def apply(self, x: NDArray, out: Optional[NDArray] = None) -> NDArray:
        x = _check_vector(x, self._n)
        return np.matmul(self._mat, x, out=out)

class SparseSymMatProd(MatOp):
    '''
    y = A x for a symmetric SciPy sparse matrix A, stored as CSR.
    '''

    def __init__(self, A: sp.spmatrix):
        super().__init__(_check_square(A, "A"))
        self._mat = sp.csr_matrix(A, dtype=np.float64)

    def apply(self, x: NDArray, out: Optional[NDArray] = None) -> NDArray:
        x = _check_vector(x, self._n)
        return _write_out(self._mat @ x, out)

class IdentityMatProd(MatOp):
    '''
    y = x. The B operator of a standard (non-generalized) problem.
    '''

    def apply(self, x: NDArray, out: Optional[NDArray] = None) -> NDArray:
        x = _check_vector(x, self._n)
        return _write_out(np.array(x, dtype=np.float64), out)

# -----------------------------------------------------------------------------
#! Shifted solve
# -----------------------------------------------------------------------------

class SymShiftInvert(MatOp):
    r'''
    y = (A - \sigma B)^{-1} x for symmetric A and B (B = I when omitted).

    ``set_shift`` factorizes A - \sigma B once; each ``apply`` is then a pair of
    triangular solves. When both A and B are sparse the factorization is a
    sparse LU (SuperLU), otherwise a dense LU.

    A singular shifted matrix does not raise at ``set_shift``: the operator is
    marked singular and the failure surfaces on the first ``apply``, so that an
    iterative solver can report it as a numerical issue.
    '''

    def __init__(self, A: Any, B: Optional[Any] = None):
        n = _check_square(A, "A")
        if B is not None and _check_square(B, "B") != n:
            raise SolverError(SolverErrorMsg.DIM_MISMATCH, f"A is {A.shape} but B is {B.shape}")
        super().__init__(n)

        self._sparse    = sp.issparse(A) and (B is None or sp.issparse(B))
        if self._sparse:
            self._A     = sp.csc_matrix(A, dtype=np.float64)
            self._B     = sp.identity(n, dtype=np.float64, format='csc') if B is None else sp.csc_matrix(B, dtype=np.float64)
        else:
            self._A     = A.toarray() if sp.issparse(A) else np.asarray(A, dtype=np.float64)
            self._B     = np.eye(n) if B is None else (B.toarray() if sp.issparse(B) else np.asarray(B, dtype=np.float64))

        self._sigma     : Optional[float]   = None
        self._factor    : Any               = None
        self._singular  : bool              = False
        self._reason    : str               = ""

    @property
    def sigma(self) -> Optional[float]:
        return self._sigma

    @property
    def is_singular(self) -> bool:
        return self._singular

    # --------------------------------------------------------------

    def set_shift(self, sigma: float) -> None:
        r'''
        Factorize A - \sigma B.
        '''
        self._sigma     = float(sigma)
        self._factor    = None
        self._singular  = False
        self._reason    = ""

        shifted         = self._A - self._sigma * self._B
        if self._sparse:
            try:
                self._factor = scipy_sparse_linalg.splu(sp.csc_matrix(shifted))
            except RuntimeError as e:
                self._singular  = True
                self._reason    = str(e)
        else:
            with warnings.catch_warnings():
                # an exactly singular matrix is detected from the pivots below
                warnings.simplefilter("ignore", scipy_linalg.LinAlgWarning)
                lu, piv = scipy_linalg.lu_factor(shifted)
            if np.any(np.diag(lu) == 0.0):
                self._singular  = True
                self._reason    = "zero pivot in the LU factorization"
            else:
                self._factor    = (lu, piv)

    def apply(self, x: NDArray, out: Optional[NDArray] = None) -> NDArray:
        if self._sigma is None:
            raise SolverError(SolverErrorMsg.SHIFT_NOT_SET, "set_shift must be called before apply")
        if self._singular:
            raise SolverError(SolverErrorMsg.MAT_SINGULAR,
                            f"A - sigma B is singular for sigma = {self._sigma}: {self._reason}")
        x = _check_vector(x, self._n)

        if self._sparse:
            y = self._factor.solve(np.asarray(x, dtype=np.float64))
        else:
            y = scipy_linalg.lu_solve(self._factor, x, check_finite=False)

        if not np.all(np.isfinite(y)):
            raise SolverError(SolverErrorMsg.MAT_SINGULAR,
                            f"Non-finite solution of the shifted system for sigma = {self._sigma}")
        return _write_out(y, out)

    def __repr__(self) -> str:
        kind = "sparse" if self._sparse else "dense"
        return f"SymShiftInvert(n={self._n}, {kind}, sigma={self._sigma})"

# -----------------------------------------------------------------------------

def make_matprod(M: Any) -> MatOp:
    '''
    Wrap a dense or sparse matrix in the matching product operator.
    '''
    if sp.issparse(M):
        return SparseSymMatProd(M)
    return DenseSymMatProd(M)

# -----------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------
