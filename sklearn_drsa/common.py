"""
Dominance-based rough set approach:
Three-valued logic, evaluation fields, decisions and their distributions.
"""

from abc import ABC, abstractmethod
from collections import Counter
from enum import Enum
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, \
    Optional, Sequence, Tuple

from sklearn_drsa.util import PreferenceType, MissingValueType

__all__ = ['Ternary', 'PreferenceType', 'MissingValueType',
           'EvaluationField', 'KnownField', 'UnknownField',
           'UnknownFieldMV2', 'UnknownFieldMV15', 'UNKNOWN_MV2',
           'UNKNOWN_MV15', 'unknown_field', 'Decision', 'SimpleDecision',
           'CompositeDecision', 'DecisionDistribution']


class Ternary(Enum):
    """A logic value of three-valued logic.

    UNCOMPARABLE is neither true nor false, therefore a `Ternary` has no truth
    value: `bool(Ternary.TRUE)` raises `TypeError`. Test for a member
    explicitly, e.g. `result is Ternary.TRUE`.

    `a & b` is the three-valued conjunction: FALSE if any operand is FALSE,
    otherwise UNCOMPARABLE if any operand is UNCOMPARABLE, otherwise TRUE.
    """
    TRUE = 'true'
    FALSE = 'false'
    UNCOMPARABLE = 'uncomparable'

    def __bool__(self):
        raise TypeError("The truth value of a Ternary is ambiguous, "
                        "compare with Ternary.TRUE explicitly")

    def __and__(self, other: 'Ternary') -> 'Ternary':
        if not isinstance(other, Ternary):
            return NotImplemented
        if Ternary.FALSE in (self, other):
            return Ternary.FALSE
        if Ternary.UNCOMPARABLE in (self, other):
            return Ternary.UNCOMPARABLE
        return Ternary.TRUE

    @staticmethod
    def of(flag: bool) -> 'Ternary':
        """:return: TRUE or FALSE, according to `flag`."""
        return Ternary.TRUE if flag else Ternary.FALSE

    @staticmethod
    def conjunction(values: Iterable['Ternary']) -> 'Ternary':
        """:return: The conjunction of all `values`, TRUE if there are none.

        All values are consumed, there is no short-circuiting.
        """
        result = Ternary.TRUE
        for value in values:
            result = result & value
        return result


# Evaluation fields


class EvaluationField(ABC):
    """A single evaluation of an object on an attribute."""

    @abstractmethod
    def is_at_least_as_good_as(self, other: 'EvaluationField') -> Ternary:
        raise NotImplementedError

    @abstractmethod
    def is_at_most_as_good_as(self, other: 'EvaluationField') -> Ternary:
        raise NotImplementedError

    @abstractmethod
    def is_equal_to(self, other: 'EvaluationField') -> Ternary:
        raise NotImplementedError

    @property
    def is_missing(self) -> bool:
        return False


def _check_field(other) -> 'EvaluationField':
    if other is None:
        raise TypeError("Cannot compare an evaluation with None.")
    return other


class KnownField(EvaluationField):
    """A known evaluation `value` on an attribute with given `preference`.

    Values of GAIN and COST attributes are compared with `<=` and `>=`, so
    must be mutually orderable (numbers, usually). Values of NONE attributes
    only need equality; such values are UNCOMPARABLE in the order relations
    unless they are equal.
    """

    __slots__ = ('value', 'preference')

    def __init__(self, value: Any,
                 preference: PreferenceType = PreferenceType.GAIN):
        if value is None:
            raise TypeError("Value of a known evaluation is None.")
        self.value = value
        self.preference = PreferenceType(preference)

    def _compare(self, other: EvaluationField, at_least: bool) -> Ternary:
        _check_field(other)
        if isinstance(other, UnknownField):
            return other.reverse_compare(self)
        if not isinstance(other, KnownField) \
                or other.preference != self.preference:
            return Ternary.UNCOMPARABLE
        if self.preference == PreferenceType.NONE:
            return (Ternary.TRUE if self.value == other.value
                    else Ternary.UNCOMPARABLE)
        if (self.preference == PreferenceType.GAIN) == at_least:
            return Ternary.of(self.value >= other.value)
        return Ternary.of(self.value <= other.value)

    def is_at_least_as_good_as(self, other: EvaluationField) -> Ternary:
        return self._compare(other, at_least=True)

    def is_at_most_as_good_as(self, other: EvaluationField) -> Ternary:
        return self._compare(other, at_least=False)

    def is_equal_to(self, other: EvaluationField) -> Ternary:
        _check_field(other)
        if isinstance(other, UnknownField):
            return other.reverse_compare(self)
        if not isinstance(other, KnownField) \
                or other.preference != self.preference:
            return Ternary.UNCOMPARABLE
        return Ternary.of(self.value == other.value)

    def __eq__(self, other):
        if isinstance(other, KnownField):
            return (self.value == other.value
                    and self.preference == other.preference)
        return NotImplemented

    def __hash__(self):
        return hash((KnownField, self.value, self.preference))

    def __repr__(self):
        return 'KnownField({!r}, {!s})'.format(self.value,
                                               self.preference.name)

    def __str__(self):
        return str(self.value)


class UnknownField(EvaluationField):
    """A missing evaluation. Use the singletons `UNKNOWN_MV2` and
    `UNKNOWN_MV15`, or `unknown_field`.

    Any missing value compared *to* another field is TRUE; a known field
    compared to a missing value gets `reverse_compare`.
    """

    missing_value_type: MissingValueType

    def is_at_least_as_good_as(self, other: EvaluationField) -> Ternary:
        _check_field(other)
        return Ternary.TRUE

    def is_at_most_as_good_as(self, other: EvaluationField) -> Ternary:
        _check_field(other)
        return Ternary.TRUE

    def is_equal_to(self, other: EvaluationField) -> Ternary:
        _check_field(other)
        return Ternary.TRUE

    @abstractmethod
    def reverse_compare(self, known: KnownField) -> Ternary:
        """:return: Result of any relation `known R self`."""
        raise NotImplementedError

    @property
    def is_missing(self) -> bool:
        return True

    def __eq__(self, other):
        return type(other) is type(self)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return '?'


class UnknownFieldMV2(UnknownField):
    missing_value_type = MissingValueType.MV2

    def reverse_compare(self, known: KnownField) -> Ternary:
        return Ternary.TRUE


class UnknownFieldMV15(UnknownField):
    missing_value_type = MissingValueType.MV15

    def reverse_compare(self, known: KnownField) -> Ternary:
        return Ternary.FALSE


UNKNOWN_MV2 = UnknownFieldMV2()
UNKNOWN_MV15 = UnknownFieldMV15()


def unknown_field(missing_value_type: MissingValueType) -> UnknownField:
    """:return: The missing value singleton for `missing_value_type`."""
    if MissingValueType(missing_value_type) == MissingValueType.MV15:
        return UNKNOWN_MV15
    return UNKNOWN_MV2


# Decisions


class Decision(ABC):
    """Immutable summary of the evaluations of one object on the active
    decision attribute(s).

    All three relations return UNCOMPARABLE if `other` is not the same kind
    of decision or does not use the same set of attribute indices. Otherwise
    the relation is the conjunction (see `Ternary`) of the per-attribute
    relations of the evaluations.
    """

    @property
    @abstractmethod
    def attribute_indices(self) -> FrozenSet[int]:
        raise NotImplementedError

    @abstractmethod
    def get_evaluation(self, attribute_index: int
                       ) -> Optional[EvaluationField]:
        """:return: The evaluation on given attribute, None if not present."""
        raise NotImplementedError

    @abstractmethod
    def evaluations(self) -> Sequence[Tuple[int, EvaluationField]]:
        """:return: pairs `(attribute_index, evaluation)`, in insertion
            order.
        """
        raise NotImplementedError

    @property
    def number_of_evaluations(self) -> int:
        return len(self.attribute_indices)

    def _is_in_relation_with(self, other: 'Decision', relation: str
                             ) -> Ternary:
        if other is None:
            raise TypeError("Cannot compare a decision with None.")
        if type(other) is not type(self) \
                or other.attribute_indices != self.attribute_indices:
            return Ternary.UNCOMPARABLE
        return Ternary.conjunction(
            getattr(evaluation, relation)(other.get_evaluation(index))
            for index, evaluation in self.evaluations())

    def is_at_least_as_good_as(self, other: 'Decision') -> Ternary:
        return self._is_in_relation_with(other, 'is_at_least_as_good_as')

    def is_at_most_as_good_as(self, other: 'Decision') -> Ternary:
        return self._is_in_relation_with(other, 'is_at_most_as_good_as')

    def is_equal_to(self, other: 'Decision') -> Ternary:
        return self._is_in_relation_with(other, 'is_equal_to')

    def has_no_missing_evaluation(self) -> bool:
        return not any(evaluation.is_missing
                       for _, evaluation in self.evaluations())

    def has_all_missing_evaluations(self) -> bool:
        return all(evaluation.is_missing
                   for _, evaluation in self.evaluations())

    def _mapping(self) -> Dict[int, EvaluationField]:
        return dict(self.evaluations())

    def __eq__(self, other):
        if isinstance(other, Decision):
            return (type(other) is type(self)
                    and other._mapping() == self._mapping())
        return NotImplemented

    def __hash__(self):
        return hash((type(self), frozenset(self.evaluations())))

    def __str__(self):
        return ', '.join('{}={!s}'.format(index, evaluation)
                         for index, evaluation in self.evaluations())


class SimpleDecision(Decision):
    """Decision on a single attribute."""

    __slots__ = ('evaluation', 'attribute_index')

    def __init__(self, evaluation: EvaluationField, attribute_index: int):
        if evaluation is None:
            raise TypeError("Evaluation of a simple decision is None.")
        self.evaluation = evaluation
        self.attribute_index = int(attribute_index)

    @property
    def attribute_indices(self) -> FrozenSet[int]:
        return frozenset((self.attribute_index,))

    def get_evaluation(self, attribute_index: int
                       ) -> Optional[EvaluationField]:
        if attribute_index == self.attribute_index:
            return self.evaluation
        return None

    def evaluations(self) -> Sequence[Tuple[int, EvaluationField]]:
        return ((self.attribute_index, self.evaluation),)

    def __repr__(self):
        return 'SimpleDecision({!r}, {!r})'.format(self.evaluation,
                                                   self.attribute_index)


class CompositeDecision(Decision):
    """Decision on two or more distinct attributes.

    :param evaluations: Sequence of `EvaluationField`, none of them None.
    :param attribute_indices: Sequence of distinct ints, same length as
        `evaluations`.
    """

    __slots__ = ('_evaluations', '_attribute_indices')

    def __init__(self, evaluations: Sequence[EvaluationField],
                 attribute_indices: Sequence[int]):
        if evaluations is None or attribute_indices is None:
            raise TypeError("Evaluations or attribute indices of a composite "
                            "decision are None.")
        evaluations = list(evaluations)
        attribute_indices = [int(index) for index in attribute_indices]
        if len(evaluations) != len(attribute_indices):
            raise ValueError("Different number of evaluations ({}) and "
                             "attribute indices ({}) for a composite decision."
                             .format(len(evaluations), len(attribute_indices)))
        if len(evaluations) < 2:
            raise ValueError("A composite decision needs at least two "
                             "evaluations, got {}.".format(len(evaluations)))
        if any(evaluation is None for evaluation in evaluations):
            raise TypeError("Evaluation contributing to a composite decision "
                            "is None.")
        if len(set(attribute_indices)) != len(attribute_indices):
            raise ValueError("Attribute indices of a composite decision are "
                             "not unique: {}".format(attribute_indices))
        self._evaluations: Tuple[Tuple[int, EvaluationField], ...] = \
            tuple(zip(attribute_indices, evaluations))
        self._attribute_indices = frozenset(attribute_indices)

    @property
    def attribute_indices(self) -> FrozenSet[int]:
        return self._attribute_indices

    def get_evaluation(self, attribute_index: int
                       ) -> Optional[EvaluationField]:
        for index, evaluation in self._evaluations:
            if index == attribute_index:
                return evaluation
        return None

    def evaluations(self) -> Sequence[Tuple[int, EvaluationField]]:
        return self._evaluations

    def __repr__(self):
        indices, evaluations = zip(*self._evaluations)
        return 'CompositeDecision({!r}, {!r})'.format(list(evaluations),
                                                      list(indices))


# Distributions


class DecisionDistribution:
    """Multiset of decisions, i.e. a mapping `Decision => count`.

    Used for the class sizes of a whole table and for the decisions found in
    a dominance cone.
    """

    def __init__(self):
        self._counts: Counter = Counter()

    @classmethod
    def from_decisions(cls, decisions: Iterable[Decision]
                       ) -> 'DecisionDistribution':
        distribution = cls()
        for decision in decisions:
            distribution.increase_count(decision)
        return distribution

    def increase_count(self, decision: Decision, by: int = 1) -> None:
        if decision is None:
            raise TypeError("Cannot increase count of a None decision.")
        if by < 1:
            raise ValueError("Count must be increased by at least 1, got {}"
                             .format(by))
        self._counts[decision] += by

    def get_count(self, decision: Hashable) -> int:
        """:return: number of occurrences of `decision`, 0 if absent."""
        return self._counts.get(decision, 0)

    @property
    def decisions(self) -> List[Decision]:
        return list(self._counts)

    @property
    def different_decisions_count(self) -> int:
        return len(self._counts)

    def items(self) -> Iterable[Tuple[Decision, int]]:
        return self._counts.items()

    def total(self) -> int:
        """:return: sum of all counts."""
        return sum(self._counts.values())

    def mode(self) -> Optional[List[Decision]]:
        """:return: The most frequent decisions (ties included), or None if
            the distribution is empty.
        """
        if not self._counts:
            return None
        max_count = max(self._counts.values())
        return [decision for decision, count in self._counts.items()
                if count == max_count]

    def median(self, ordered_decisions: Sequence[Decision]
               ) -> Optional[Decision]:
        """:return: The median decision, given all decisions present in this
            distribution ordered from worst to best.

        The position `round(total / 2)` (halves rounded up) of the cumulative
        counts selects the median.
        """
        if ordered_decisions is None:
            raise TypeError("Ordered decisions are None.")
        if len(ordered_decisions) != self.different_decisions_count \
                or set(ordered_decisions) != set(self._counts):
            raise ValueError("Ordered decisions do not match the decisions "
                             "of the distribution.")
        half = int(self.total() / 2 + 0.5)
        cumulative = 0
        for decision in ordered_decisions:
            cumulative += self.get_count(decision)
            if cumulative >= half:
                return decision
        return None

    def __contains__(self, decision):
        return decision in self._counts

    def __len__(self):
        return len(self._counts)

    def __iter__(self):
        return iter(self._counts)

    def __eq__(self, other):
        if isinstance(other, DecisionDistribution):
            return self._counts == other._counts
        return NotImplemented

    def __repr__(self):
        return 'DecisionDistribution({})'.format(
            ', '.join('{!s}: {}'.format(decision, count)
                      for decision, count in self._counts.items()))
