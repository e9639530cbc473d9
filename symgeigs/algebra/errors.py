'''
file:       symgeigs/algebra/errors.py

Error codes and the exception type raised by the matrix operators and the
eigensolvers. Every failure carries an enumerated code so that callers can
tell a precondition violation (bad nev/ncv, mismatched operators) from a
numerical failure inside an operator (singular shifted matrix).
'''

from typing import Optional
from enum import Enum, unique

# -----------------------------------------------------------------------------
#! Errors
# -----------------------------------------------------------------------------

@unique
class SolverErrorMsg(Enum):
    '''
    Enumeration class for solver error messages.
    '''
    DIM_MISMATCH        = 101
    INVALID_INPUT       = 102
    NEV_OUT_OF_RANGE    = 103
    NCV_OUT_OF_RANGE    = 104
    MAT_SINGULAR        = 105
    SHIFT_NOT_SET       = 106
    NUMERICAL_ISSUE     = 107
    ZERO_RESIDUAL       = 108
    NOT_INITIALIZED     = 109

    def __str__(self):
        return self.name.replace('_', ' ').title()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}: '{str(self)}'>"

class SolverError(Exception):
    '''
    Base class for exceptions in the eigensolver module.
    '''
    def __init__(self, code: SolverErrorMsg, message: Optional[str] = None):
        self.code       = code
        self.message    = message if message else str(code)
        super().__init__(self.message)

    def __str__(self):
        return f"[SolverError {self.code.name} ({self.code.value})]: {self.message}"

    def __repr__(self):
        return self.__str__()

# -----------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------
