"""
Eigenvalue Solver Result Types

Standardized result containers and status codes for eigenvalue computations.
"""

from enum import Enum, unique
from typing import Optional, NamedTuple
from numpy.typing import NDArray

# ---------------------------------------------------------------------------------

@unique
class CompInfo(Enum):
    """
    Outcome of an iterative eigenvalue computation.
    """
    SUCCESSFUL          = 0     # all requested eigenpairs converged
    NOT_COMPUTED        = 1     # compute() has not been called since init()
    NOT_CONVERGING      = 2     # iteration budget exhausted before nev pairs converged
    NUMERICAL_ISSUE     = 3     # an operator failed or a value could not be back-transformed

    def __str__(self):
        return self.name.replace('_', ' ').lower()

# ---------------------------------------------------------------------------------

class EigenSolver:
    """
    Marker class for eigenvalue solver types.
    """

    @staticmethod
    def is_iterative_solver() -> bool:
        """Indicate if the solver is iterative."""
        return False

    # ----------------------------------------------------------------------------

    def solve(self, *args, **kwargs) -> 'EigenResult':
        """
        Solve the eigenvalue problem.

        Returns:
            EigenResult: Standardized result container.
        """
        raise NotImplementedError("This method should be implemented by subclasses.")

# ---------------------------------------------------------------------------------

class EigenResult(NamedTuple):
    r"""
    Standardized result from eigenvalue solvers.

    Attributes:
        eigenvalues:
            Converged eigenvalues of the original problem, in the requested order
        eigenvectors:
            Corresponding eigenvectors as columns
        iterations:
            Number of restarts performed
        converged:
            Whether all requested eigenpairs converged
        residual_norms:
            Residual norms ||A v - \lambda B v|| for each eigenpair (optional)
        info:
            Status of the computation
        num_operations:
            Number of applications of the (transformed) operator
    """
    eigenvalues     : NDArray
    eigenvectors    : NDArray
    iterations      : Optional[int]         = None
    converged       : bool                  = True
    residual_norms  : Optional[NDArray]     = None
    info            : CompInfo              = CompInfo.SUCCESSFUL
    num_operations  : Optional[int]         = None

    def __repr__(self):
        n_eigs      = len(self.eigenvalues) if self.eigenvalues is not None else 0
        iter_str    = f"{self.iterations}" if self.iterations is not None else "N/A"
        return (f"EigenResult(n_eigenvalues={n_eigs}, "
                f"converged={self.converged}, iterations={iter_str}, info={self.info})")

    def __str__(self):
        return f'converged={self.converged}, iterations={self.iterations}, info={self.info}'

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
