"""
Dominance-based rough set approach:
Unions of ordered decision classes and their (variable-consistency) rough
approximations.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from sklearn_drsa.common import Decision, Ternary
from sklearn_drsa.dominance import \
    DecisionTable, DominanceConesDecisionDistributions, \
    calculate_dominance_cones_decision_distributions

logger = logging.getLogger(__name__)


class UnionType(Enum):
    AT_LEAST = 'at least'
    AT_MOST = 'at most'


class Union:
    """Union of ordered decision classes: all objects of `table` whose
    decision is not worse (`AT_LEAST`) resp. not better (`AT_MOST`) than
    `limiting_decision`.

    Every object of the table is classified by its decision:
    - *positive*: belongs to the union,
    - *negative*: its decision is strictly worse (`AT_LEAST`) resp. strictly
      better (`AT_MOST`) than the limiting decision,
    - *neutral*: its decision is uncomparable with the limiting decision.

    Attributes
    -----
    objects : sorted array of int
        Indices of the positive objects.

    negative_objects : sorted array of int

    neutral_objects : sorted array of int

    complementary_union : Union or None
        Set by `Unions`, needed for the upper approximation.

    :param dominance_cones: `DominanceConesDecisionDistributions` of `table`,
        shared among unions. Computed if not given.
    """

    def __init__(self,
                 union_type: UnionType,
                 limiting_decision: Decision,
                 table: DecisionTable,
                 dominance_cones: DominanceConesDecisionDistributions = None):
        if limiting_decision is None or table is None:
            raise TypeError("Limiting decision or table of a union is None.")
        self.union_type = UnionType(union_type)
        self.limiting_decision = limiting_decision
        self.table = table
        self._dominance_cones = dominance_cones
        self.complementary_union: Optional[Union] = None

        concordance = [self.is_concordant_with_decision(decision)
                       for decision in table.decisions]
        self.objects = np.array(
            [i for i, c in enumerate(concordance) if c is Ternary.TRUE],
            dtype=int)
        self.negative_objects = np.array(
            [i for i, c in enumerate(concordance) if c is Ternary.FALSE],
            dtype=int)
        self.neutral_objects = np.array(
            [i for i, c in enumerate(concordance)
             if c is Ternary.UNCOMPARABLE], dtype=int)

    @property
    def dominance_cones(self) -> DominanceConesDecisionDistributions:
        if self._dominance_cones is None:
            self._dominance_cones = \
                calculate_dominance_cones_decision_distributions(
                    self.table, only_necessary=True)
        return self._dominance_cones

    def is_concordant_with_decision(self, decision: Decision) -> Ternary:
        """:return: TRUE if `decision` belongs to this union, FALSE if it lies
            on the other side of the limiting decision, UNCOMPARABLE
            otherwise.
        """
        if decision is None:
            raise TypeError("Decision tested for concordance with union is "
                            "None.")
        if self.union_type is UnionType.AT_LEAST:
            inside, outside = (self.limiting_decision.is_at_most_as_good_as,
                               self.limiting_decision.is_at_least_as_good_as)
        else:
            inside, outside = (self.limiting_decision.is_at_least_as_good_as,
                               self.limiting_decision.is_at_most_as_good_as)
        if inside(decision) is Ternary.TRUE:
            return Ternary.TRUE
        if outside(decision) is Ternary.TRUE:
            return Ternary.FALSE
        return Ternary.UNCOMPARABLE

    def is_decision_positive(self, decision: Decision) -> bool:
        return self.is_concordant_with_decision(decision) is Ternary.TRUE

    def is_decision_negative(self, decision: Decision) -> bool:
        return self.is_concordant_with_decision(decision) is Ternary.FALSE

    def is_decision_neutral(self, decision: Decision) -> bool:
        return (self.is_concordant_with_decision(decision)
                is Ternary.UNCOMPARABLE)

    def contains(self, decision: Decision) -> bool:
        return self.is_decision_positive(decision)

    @property
    def complementary_set_size(self) -> int:
        """Number of negative objects."""
        return len(self.negative_objects)

    def __len__(self):
        return len(self.objects)

    def __repr__(self):
        return 'Union({} {!s}, {} objects)'.format(self.union_type.value,
                                                  self.limiting_decision,
                                                  len(self.objects))


class Unions:
    """All upward and downward unions of a table whose decisions are simple
    (single evaluation) and known.

    For classes `Cl_1 < ... < Cl_n` (ordered by `is_at_most_as_good_as`),
    `upward[t]` is `Cl>=t+1` and `downward[t]` is `Cl<=t`, for t in
    `[0..n-1)`; `upward[t]` and `downward[t]` are complementary.

    Attributes
    -----
    ordered_decisions : list of Decision
        The distinct decisions of the table, from worst to best.

    upward : list of Union

    downward : list of Union
    """

    def __init__(self, table: DecisionTable,
                 dominance_cones: DominanceConesDecisionDistributions = None):
        if table is None:
            raise TypeError("Decision table for unions is None.")
        for decision in table.decisions:
            if decision.number_of_evaluations != 1 \
                    or not decision.has_no_missing_evaluation():
                raise ValueError("Unions require simple, known decisions, "
                                 "got {!s}".format(decision))
        if dominance_cones is None:
            dominance_cones = calculate_dominance_cones_decision_distributions(
                table, only_necessary=True)
        self.table = table
        distinct = list(set(table.decisions))
        self.ordered_decisions: List[Decision] = sorted(
            distinct, key=lambda decision: _sort_key(decision, distinct))
        self.upward: List[Union] = []
        self.downward: List[Union] = []
        for worse, better in zip(self.ordered_decisions,
                                 self.ordered_decisions[1:]):
            at_least = Union(UnionType.AT_LEAST, better, table,
                             dominance_cones)
            at_most = Union(UnionType.AT_MOST, worse, table, dominance_cones)
            at_least.complementary_union = at_most
            at_most.complementary_union = at_least
            self.upward.append(at_least)
            self.downward.append(at_most)
        logger.debug("built %d upward and %d downward unions",
                     len(self.upward), len(self.downward))

    def __iter__(self):
        yield from self.upward
        yield from self.downward


def _sort_key(decision: Decision, all_decisions: Sequence[Decision]) -> int:
    """:return: The number of decisions in `all_decisions` not better than
        `decision`, which orders simple decisions from worst to best.
    """
    return sum(1 for other in all_decisions
               if other.is_at_most_as_good_as(decision) is Ternary.TRUE)


class EpsilonConsistencyMeasure:
    """Epsilon consistency of an object with respect to a union: the share of
    the union's negative objects found in the object's relevant dominance
    cone. 0 is best, 1 worst.

    For an upward union the positive inverse D-cone is used, for a downward
    union the negative D-cone. A union without negative objects is perfectly
    consistent (0).
    """

    BEST_VALUE = 0.0
    WORST_VALUE = 1.0

    @staticmethod
    def calculate_consistency(object_index: int, union: Union) -> float:
        cones = union.dominance_cones
        if union.union_type is UnionType.AT_LEAST:
            cone = cones.positive_inv_d_cone(object_index)
        else:
            cone = cones.negative_d_cone(object_index)
        negative_count = sum(count for decision, count in cone.items()
                             if union.is_decision_negative(decision))
        if union.complementary_set_size == 0:
            return EpsilonConsistencyMeasure.BEST_VALUE
        return negative_count / union.complementary_set_size

    @classmethod
    def is_consistency_threshold_reached(cls, object_index: int, union: Union,
                                         threshold: float) -> bool:
        return cls.calculate_consistency(object_index, union) <= threshold


class VCDominanceBasedRoughSetCalculator:
    """Variable-consistency rough approximations (VC-DRSA).

    :param consistency_threshold: float in [0, 1]. Objects of a union whose
        epsilon consistency does not exceed it form the lower approximation.
    """

    consistency_measure = EpsilonConsistencyMeasure

    def __init__(self, consistency_threshold: float = 0.0):
        if not 0 <= consistency_threshold <= 1:
            raise ValueError("consistency_threshold must be in [0, 1], got {}"
                             .format(consistency_threshold))
        self.consistency_threshold = consistency_threshold
        self._lower_cache: Dict[Union, np.ndarray] = {}

    def lower_approximation(self, union: Union) -> np.ndarray:
        """:return: sorted object indices of the lower approximation."""
        if union not in self._lower_cache:
            reached = self.consistency_measure.is_consistency_threshold_reached
            self._lower_cache[union] = np.array(
                [x for x in union.objects
                 if reached(x, union, self.consistency_threshold)],
                dtype=int)
        return self._lower_cache[union]

    def upper_approximation(self, union: Union) -> np.ndarray:
        """:return: sorted object indices of the upper approximation, i.e. all
            objects not in the lower approximation of the complementary union.
        """
        if union.limiting_decision.number_of_evaluations != 1:
            raise ValueError("Upper approximation is only defined for unions "
                             "of simple decisions, got {!r}".format(union))
        if union.complementary_union is None:
            raise ValueError("Complementary union of {!r} is not set, build "
                             "unions with `Unions`.".format(union))
        complementary_lower = self.lower_approximation(
            union.complementary_union)
        return np.setdiff1d(np.arange(union.table.n_objects),
                            complementary_lower)

    def boundary(self, union: Union) -> np.ndarray:
        """:return: upper approximation minus lower approximation."""
        return np.setdiff1d(self.upper_approximation(union),
                            self.lower_approximation(union))


class ClassicalDominanceBasedRoughSetCalculator(
        VCDominanceBasedRoughSetCalculator):
    """Classical DRSA approximations, i.e. VC-DRSA without inconsistency."""

    def __init__(self):
        super().__init__(consistency_threshold=0.0)
