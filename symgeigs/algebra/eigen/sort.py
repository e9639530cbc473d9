"""
Sort Rules for Ritz Values

Selection and ordering rules shared by the Lanczos engine and the
shift solvers. A rule turns a vector of eigenvalue estimates into a
permutation, wanted values first.

Rules can be given as enum members or as strings; the short forms follow
the ``which`` codes of ``scipy.sparse.linalg.eigsh``:

    'LM'  largest magnitude         'SM'  smallest magnitude
    'LA'  largest algebraic         'SA'  smallest algebraic
    'BE'  both ends                 'CS'  closest to the shift
"""

import numpy as np
from numpy.typing import NDArray
from enum import Enum, unique
from typing import Union

# ----------------------------------------------------------------------------------------
#! Sort rules
# ----------------------------------------------------------------------------------------

@unique
class SortRule(Enum):
    """
    Ordering of eigenvalues, wanted values first.
    """
    LARGEST_MAGN        = 'LM'
    LARGEST_ALGE        = 'LA'
    SMALLEST_MAGN       = 'SM'
    SMALLEST_ALGE       = 'SA'
    BOTH_ENDS           = 'BE'
    CLOSEST_TO_SHIFT    = 'CS'

    @classmethod
    def resolve(cls, rule: Union['SortRule', str]) -> 'SortRule':
        """
        Accept an enum member, its name ('largest_magn') or its code ('LM').
        """
        if isinstance(rule, SortRule):
            return rule
        if isinstance(rule, str):
            key = rule.strip().replace('-', '_').replace(' ', '_').upper()
            if key in cls.__members__:
                return cls[key]
            for member in cls:
                if member.value == key:
                    return member
        raise ValueError(f"Unknown sort rule: {rule!r}")

# ----------------------------------------------------------------------------------------

def _both_ends(values: NDArray) -> NDArray:
    # largest, smallest, second largest, second smallest, ...
    order       = np.argsort(-values, kind='stable')
    n           = len(order)
    out         = np.empty(n, dtype=int)
    lo, hi      = 0, n - 1
    for i in range(n):
        if i % 2 == 0:
            out[i]  = order[lo]
            lo     += 1
        else:
            out[i]  = order[hi]
            hi     -= 1
    return out

def sort_indices(values: NDArray, rule: Union[SortRule, str], target: float = 0.0) -> NDArray:
    """
    Permutation ordering ``values`` by ``rule``, wanted values first.

    Parameters
    ----------
    values: NDArray
        Real eigenvalue estimates.
    rule: SortRule or str
        Ordering rule.
    target: float
        Reference point of ``CLOSEST_TO_SHIFT`` (the shift of the solver).

    Returns
    -------
    NDArray
        Integer indices, ``values[idx]`` is sorted. Ties keep their input order.
    """
    rule    = SortRule.resolve(rule)
    values  = np.asarray(values, dtype=np.float64)

    if rule is SortRule.LARGEST_MAGN:
        return np.argsort(-np.abs(values), kind='stable')
    if rule is SortRule.LARGEST_ALGE:
        return np.argsort(-values, kind='stable')
    if rule is SortRule.SMALLEST_MAGN:
        return np.argsort(np.abs(values), kind='stable')
    if rule is SortRule.SMALLEST_ALGE:
        return np.argsort(values, kind='stable')
    if rule is SortRule.BOTH_ENDS:
        return _both_ends(values)
    return np.argsort(np.abs(values - target), kind='stable')

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
