"""
Miscellaneous things not depending on anything else from sklearn_drsa.
"""

import math
import warnings
from enum import IntEnum

import numpy as np


class PreferenceType(IntEnum):
    """Preference direction of an attribute.

    The integer value is the sign applied to a difference of two values, so
    that `sign * (x - y) >= 0` reads "x is at least as good as y" for ordered
    attributes. NONE marks nominal attributes, which are only tested for
    equality.
    """
    COST = -1
    NONE = 0
    GAIN = 1


class MissingValueType(IntEnum):
    """Semantics of a missing evaluation in dominance tests.

    - MV2: a missing value is at least as good as, at most as good as, and
      equal to any other value, in both directions of comparison.
    - MV15: a missing value compared *to* anything yields TRUE, while a known
      value compared to a missing one yields FALSE.
    """
    MV2 = 0
    MV15 = 1


class ZeroDenominatorWarning(RuntimeWarning):
    """A rule measure divided by zero. The result follows IEEE-754 (`±inf` or
    `nan`) and is still returned.
    """


def divide(numerator: float, denominator: float, what: str = 'value'
           ) -> float:
    """:return: `numerator / denominator` with IEEE-754 semantics for a zero
    denominator (`0/0 = nan`, `x/0 = copysign(inf, x)`), issuing a
    `ZeroDenominatorWarning` in that case.

    :param what: Name of the computed quantity, used in the warning.
    """
    if denominator == 0:
        warnings.warn("zero denominator while computing %s (%r / %r)"
                      % (what, numerator, denominator),
                      ZeroDenominatorWarning, stacklevel=2)
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def log(x: float) -> float:
    """Natural logarithm, `-inf` for 0 and `nan` for negative or nan `x`."""
    if x > 0:
        return math.log(x)
    return -math.inf if x == 0 else math.nan


def _build_codes(which, n_attributes: int, enum_class, default
                 ) -> np.ndarray or None:
    codes = np.full(n_attributes, int(default), dtype=np.int8)
    if which is None:
        return codes
    if isinstance(which, bool):
        return None
    if isinstance(which, str):
        try:
            codes[:] = enum_class[which.upper()]
        except KeyError:
            return None
        return codes
    if isinstance(which, (int, np.integer)):
        # a single member or its code, e.g. PreferenceType.COST or -1
        try:
            codes[:] = enum_class(int(which))
        except ValueError:
            return None
        return codes
    which = list(which)
    if len(which) != n_attributes:
        return None
    for index, value in enumerate(which):
        try:
            codes[index] = (enum_class[value.upper()]
                            if isinstance(value, str)
                            else enum_class(int(value)))
        except (KeyError, ValueError):
            return None
    return codes


def build_preference_types(which, n_attributes: int) -> np.ndarray or None:
    """:return: An int8 array of length `n_attributes` holding a
        `PreferenceType` per attribute, based on `which`.
        Returns None if `which` cannot be recognized.

    `which` may be None (all GAIN), one of the names 'gain', 'cost', 'none'
    or a single `PreferenceType` (applied to all attributes), or a sequence
    of length `n_attributes` of such names or `PreferenceType` members /
    their integer values.
    """
    return _build_codes(which, n_attributes, PreferenceType,
                        PreferenceType.GAIN)


def build_missing_value_types(which, n_attributes: int
                              ) -> np.ndarray or None:
    """:return: An int8 array of length `n_attributes` holding a
        `MissingValueType` per attribute, based on `which`.
        Returns None if `which` cannot be recognized.

    Accepted forms are the same as for `build_preference_types`, with the
    names 'mv2' and 'mv15'; None means MV2 everywhere.
    """
    return _build_codes(which, n_attributes, MissingValueType,
                        MissingValueType.MV2)
