"""
Dominance-based rough set approach:
Decision tables, the dominance relation between their objects, and dominance
cones.
"""

import logging
import warnings
from functools import partial
from typing import List, Optional, Sequence, Union

import numpy as np
from sklearn.utils import check_array, check_consistent_length

from sklearn_drsa.common import \
    Decision, DecisionDistribution, KnownField, SimpleDecision, \
    CompositeDecision, Ternary, EvaluationField, unknown_field
from sklearn_drsa.util import \
    PreferenceType, MissingValueType, build_preference_types, \
    build_missing_value_types

try:
    HAVE_NUMBA = True
    from numba import jit
    jit = partial(jit, cache=True, nopython=True)
except ImportError as e:
    warnings.warn("Could not import numba, plain python implementation will be "
                  "slower. " + str(e))
    def jit(function):
        return function
    HAVE_NUMBA = False

logger = logging.getLogger(__name__)


class DecisionTable:
    """Objects described by condition attributes and a decision.

    Attributes
    -----
    X : array of dtype float, shape `(n_objects, n_attributes)`
        Evaluations of the objects on the active condition attributes.
        `np.nan` marks a missing evaluation.

    preference_types : array of dtype int8, shape `(n_attributes,)`
        One `PreferenceType` per condition attribute.

    missing_value_types : array of dtype int8, shape `(n_attributes,)`
        One `MissingValueType` per condition attribute.

    decisions : list of `Decision`, length `n_objects`
        The decision of each object.

    :param preference_types: None, str, `PreferenceType`, or sequence, see
        `util.build_preference_types`.
    :param missing_value_types: None, str, `MissingValueType`, or sequence,
        see `util.build_missing_value_types`.
    """

    def __init__(self,
                 X,
                 decisions: Sequence[Decision],
                 preference_types=None,
                 missing_value_types=None):
        X = check_array(X, dtype=np.float64, ensure_all_finite='allow-nan',
                        ensure_min_samples=0, ensure_min_features=0)
        decisions = list(decisions)
        check_consistent_length(X, decisions)
        if any(decision is None for decision in decisions):
            raise TypeError("Decision of an object is None.")
        n_attributes = X.shape[1]
        self.preference_types = build_preference_types(preference_types,
                                                       n_attributes)
        if self.preference_types is None:
            raise ValueError("preference_types must be one of: None, 'gain', "
                             "'cost', 'none', a PreferenceType, or a sequence "
                             "of length {}, but got {}."
                             .format(n_attributes, preference_types))
        self.missing_value_types = build_missing_value_types(
            missing_value_types, n_attributes)
        if self.missing_value_types is None:
            raise ValueError("missing_value_types must be one of: None, "
                             "'mv2', 'mv15', or a sequence of length {}, but "
                             "got {}.".format(n_attributes,
                                              missing_value_types))
        self.X = X
        self.decisions: List[Decision] = decisions

    @classmethod
    def from_arrays(cls, X, y,
                    preference_types=None,
                    missing_value_types=None,
                    decision_preference_types=PreferenceType.GAIN,
                    decision_missing_value_type=MissingValueType.MV2
                    ) -> 'DecisionTable':
        """Build a table from a condition matrix `X` and decision values `y`.

        :param y: array of shape `(n_objects,)` for a `SimpleDecision` per
            object, or `(n_objects, n_decision_attributes)` for a
            `CompositeDecision` per object. `np.nan` (or None) marks a missing
            decision evaluation.
        :param decision_preference_types: One `PreferenceType` (or its name)
            for all decision attributes, or a sequence with one per decision
            attribute.

        Decision attributes are indexed after the condition attributes, i.e.
        starting at `X.shape[1]`.
        """
        X = check_array(X, dtype=np.float64, ensure_all_finite='allow-nan',
                        ensure_min_samples=0, ensure_min_features=0)
        y = np.asarray(y, dtype=object)
        check_consistent_length(X, y)
        if y.ndim == 1:
            y = y.reshape(-1, 1)
        elif y.ndim != 2:
            raise ValueError("y must have 1 or 2 dimensions, got {}"
                             .format(y.ndim))
        n_decision_attributes = y.shape[1]
        preferences = build_preference_types(
            decision_preference_types
            if isinstance(decision_preference_types, str)
            or np.ndim(decision_preference_types) == 1
            else [decision_preference_types] * n_decision_attributes,
            n_decision_attributes)
        if preferences is None:
            raise ValueError("invalid decision_preference_types: {}"
                             .format(decision_preference_types))
        missing = unknown_field(decision_missing_value_type)
        first_index = X.shape[1]

        def field(value, preference) -> EvaluationField:
            if value is None or (isinstance(value, float) and np.isnan(value)):
                return missing
            return KnownField(value, PreferenceType(preference))

        decisions = []
        for row in y:
            fields = [field(value, preference)
                      for value, preference in zip(row, preferences)]
            if n_decision_attributes == 1:
                decisions.append(SimpleDecision(fields[0], first_index))
            else:
                decisions.append(CompositeDecision(
                    fields, range(first_index,
                                  first_index + n_decision_attributes)))
        return cls(X, decisions,
                   preference_types=preference_types,
                   missing_value_types=missing_value_types)

    @property
    def n_objects(self) -> int:
        return self.X.shape[0]

    @property
    def n_attributes(self) -> int:
        return self.X.shape[1]

    def get_decision(self, object_index: int) -> Decision:
        return self.decisions[object_index]

    def get_fields(self, object_index: int) -> List[EvaluationField]:
        """:return: The condition evaluations of an object as
            `EvaluationField`s.
        """
        return [unknown_field(self.missing_value_types[attribute])
                if np.isnan(value)
                else KnownField(value,
                                PreferenceType(
                                    self.preference_types[attribute]))
                for attribute, value in enumerate(self.X[object_index])]

    def decision_distribution(self) -> DecisionDistribution:
        """:return: The decision class sizes of the whole table."""
        return DecisionDistribution.from_decisions(self.decisions)

    def __len__(self):
        return self.n_objects

    def __repr__(self):
        return 'DecisionTable(n_objects={}, n_attributes={})'.format(
            self.n_objects, self.n_attributes)


# dominance relation


def dominates(x: int, y: int, table: DecisionTable) -> bool:
    """:return: True iff object `x` is at least as good as object `y` on all
    condition attributes of `table`, evaluated with `EvaluationField`
    comparisons. Slow, use `dominance_matrix` for many objects.
    """
    return Ternary.conjunction(
        fx.is_at_least_as_good_as(fy)
        for fx, fy in zip(table.get_fields(x), table.get_fields(y))
    ) is Ternary.TRUE


def is_dominated_by(x: int, y: int, table: DecisionTable) -> bool:
    """:return: True iff object `x` is at most as good as object `y` on all
    condition attributes of `table` (the inverse dominance relation).
    """
    return Ternary.conjunction(
        fx.is_at_most_as_good_as(fy)
        for fx, fy in zip(table.get_fields(x), table.get_fields(y))
    ) is Ternary.TRUE


def _dominance_matrix_numpy(X: np.ndarray,
                            preference_types: np.ndarray,
                            missing_value_types: np.ndarray,
                            at_least: bool) -> np.ndarray:
    """Version of `dominance_matrix` using numpy broadcasting.

    :return: bool array `R` of shape `(n_objects, n_objects)` where `R[i, j]`
        tells whether object i is at least (`at_least=True`) resp. at most
        (`at_least=False`) as good as object j on all attributes.
    """
    n_objects, n_attributes = X.shape
    relation = np.ones((n_objects, n_objects), dtype=np.bool_)
    sign = 1 if at_least else -1
    for attribute in range(n_attributes):
        own = X[:, attribute, np.newaxis]
        other = X[np.newaxis, :, attribute]
        own_missing = np.isnan(own)
        other_missing = np.isnan(other)
        preference = preference_types[attribute]
        with np.errstate(invalid='ignore'):
            if preference == PreferenceType.NONE:
                known = np.equal(own, other)
            else:
                known = sign * preference * (own - other) >= 0
        if missing_value_types[attribute] == MissingValueType.MV2:
            # a missing value on either side satisfies the relation
            holds = own_missing | other_missing | known
        else:
            # missing compared to anything holds, known compared to missing
            # does not
            holds = own_missing | (~other_missing & known)
        relation &= holds
    return relation


@jit
def _dominance_matrix_numba(X: np.ndarray,
                            preference_types: np.ndarray,
                            missing_value_types: np.ndarray,
                            at_least: bool) -> np.ndarray:
    """Version of `dominance_matrix` to be used optimized by `numba.njit`."""
    n_objects, n_attributes = X.shape
    sign = 1 if at_least else -1
    relation = np.ones((n_objects, n_objects), dtype=np.bool_)
    for i in range(n_objects):
        for j in range(n_objects):
            for attribute in range(n_attributes):
                own = X[i, attribute]
                other = X[j, attribute]
                if np.isnan(own):
                    continue
                if np.isnan(other):
                    if missing_value_types[attribute] == 0:  # MV2
                        continue
                    relation[i, j] = False
                    break
                preference = preference_types[attribute]
                if preference == 0:
                    holds = own == other
                else:
                    holds = sign * preference * (own - other) >= 0
                if not holds:
                    relation[i, j] = False
                    break
    return relation


def dominance_matrix(table: DecisionTable,
                     inverse: bool = False,
                     implementation=None) -> np.ndarray:
    """Compute the dominance relation between all objects of `table`.

    :param inverse: If False, return `D` with `D[i, j]` True iff object i
        dominates object j (`i D j`, i is at least as good as j on all
        condition attributes). If True, return `I` with `I[i, j]` True iff
        `i InvD j` (i is at most as good as j on all condition attributes).
    :param implementation: None (numba if available, numpy otherwise), or one
        of `_dominance_matrix_numpy`, `_dominance_matrix_numba`.
    :return: bool array of shape `(n_objects, n_objects)`.
    """
    if implementation is None:
        implementation = _dominance_matrix_numba if HAVE_NUMBA \
            else _dominance_matrix_numpy
    return implementation(table.X,
                          table.preference_types.astype(np.int64),
                          table.missing_value_types.astype(np.int64),
                          not inverse)


# dominance cones


class DominanceCones:
    """The four dominance cones of every object of a table, as sorted arrays
    of object indices.

    For object `x`:
    - positive D-cone: `{y : y D x}`
    - negative D-cone: `{y : x D y}`
    - positive inverse D-cone: `{y : x InvD y}`
    - negative inverse D-cone: `{y : y InvD x}`

    Use `calculate_dominance_cones` to construct.
    """

    def __init__(self, dominance: np.ndarray, inverse_dominance: np.ndarray):
        self.n_objects = len(dominance)
        self._dominance = dominance
        self._inverse_dominance = inverse_dominance

    def positive_d_cone(self, object_index: int) -> np.ndarray:
        return np.flatnonzero(self._dominance[:, object_index])

    def negative_d_cone(self, object_index: int) -> np.ndarray:
        return np.flatnonzero(self._dominance[object_index, :])

    def positive_inv_d_cone(self, object_index: int) -> np.ndarray:
        return np.flatnonzero(self._inverse_dominance[object_index, :])

    def negative_inv_d_cone(self, object_index: int) -> np.ndarray:
        return np.flatnonzero(self._inverse_dominance[:, object_index])


def calculate_dominance_cones(table: DecisionTable,
                              implementation=None) -> DominanceCones:
    """:return: The `DominanceCones` of all objects of `table`."""
    if table is None:
        raise TypeError("Decision table for calculation of dominance cones "
                        "is None.")
    return DominanceCones(dominance_matrix(table, False, implementation),
                          dominance_matrix(table, True, implementation))


class DominanceConesDecisionDistributions:
    """For every object, the distribution of decisions in each of its four
    dominance cones (see `DominanceCones`).

    If built with `only_necessary=True`, only the distributions needed for
    rough set approximations are present: positive inverse D-cones (upward
    unions) and negative D-cones (downward unions). Asking for the others
    raises `ValueError`.

    Use `calculate_dominance_cones_decision_distributions` to construct.
    """

    def __init__(self,
                 n_objects: int,
                 positive_d_cones: Optional[List[DecisionDistribution]],
                 negative_d_cones: List[DecisionDistribution],
                 positive_inv_d_cones: List[DecisionDistribution],
                 negative_inv_d_cones: Optional[List[DecisionDistribution]]):
        self.n_objects = n_objects
        self._positive_d_cones = positive_d_cones
        self._negative_d_cones = negative_d_cones
        self._positive_inv_d_cones = positive_inv_d_cones
        self._negative_inv_d_cones = negative_inv_d_cones

    @staticmethod
    def _get(distributions: Optional[List[DecisionDistribution]],
             object_index: int, name: str) -> DecisionDistribution:
        if distributions is None:
            raise ValueError("Decision distributions of {} were not "
                             "calculated (only_necessary=True).".format(name))
        return distributions[object_index]

    def positive_d_cone(self, object_index: int) -> DecisionDistribution:
        return self._get(self._positive_d_cones, object_index,
                         'positive D-cones')

    def negative_d_cone(self, object_index: int) -> DecisionDistribution:
        return self._get(self._negative_d_cones, object_index,
                         'negative D-cones')

    def positive_inv_d_cone(self, object_index: int) -> DecisionDistribution:
        return self._get(self._positive_inv_d_cones, object_index,
                         'positive inverse D-cones')

    def negative_inv_d_cone(self, object_index: int) -> DecisionDistribution:
        return self._get(self._negative_inv_d_cones, object_index,
                         'negative inverse D-cones')


def _distributions(relation: np.ndarray, decisions: Sequence[Decision]
                   ) -> List[DecisionDistribution]:
    """:return: For each row of `relation`, the distribution of decisions of
        the objects marked True in that row.
    """
    return [DecisionDistribution.from_decisions(
                decisions[member] for member in np.flatnonzero(row))
            for row in relation]


def calculate_dominance_cones_decision_distributions(
        table: DecisionTable,
        only_necessary: bool = False,
        implementation=None) -> DominanceConesDecisionDistributions:
    """Compute the decision distributions of all dominance cones of all
    objects in `table`. A pure function of the table; to reflect changes of
    the table, call it again.
    """
    if table is None:
        raise TypeError("Decision table for calculation of dominance cones "
                        "is None.")
    logger.debug("calculating dominance cone decision distributions for %r "
                 "(only_necessary=%s)", table, only_necessary)
    dominance = dominance_matrix(table, False, implementation)
    inverse_dominance = dominance_matrix(table, True, implementation)
    decisions = table.decisions
    # negative D-cone of x: row x of `dominance`, positive: column x
    negative_d_cones = _distributions(dominance, decisions)
    positive_inv_d_cones = _distributions(inverse_dominance, decisions)
    positive_d_cones: Union[None, List[DecisionDistribution]] = None
    negative_inv_d_cones: Union[None, List[DecisionDistribution]] = None
    if not only_necessary:
        positive_d_cones = _distributions(dominance.T, decisions)
        negative_inv_d_cones = _distributions(inverse_dominance.T, decisions)
    return DominanceConesDecisionDistributions(table.n_objects,
                                               positive_d_cones,
                                               negative_d_cones,
                                               positive_inv_d_cones,
                                               negative_inv_d_cones)
