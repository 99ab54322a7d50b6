"""
Characteristics (quality and consistency measures) of decision rules.

A rule is described here only by its `RuleCoverageInformation`: which objects
of a decision table it covers, and which of them belong to the approximated
union (positive) or are uncomparable with it (neutral). The four cells of the
contingency table are then

    a = |covered & positive|        (support)
    b = |positive| - a              (positive objects not covered)
    c = |covered - positive - neutral|  (negative coverage)
    d = (N - |positive| - |neutral|) - c  (negative objects not covered)

from which `ComputableRuleCharacteristics` derives all measures lazily.
"""

import logging
import math
import operator
import threading
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from sklearn_drsa.util import divide, log

__all__ = ['UnknownValueError', 'RuleCoverageInformation',
           'RuleCharacteristics', 'ComputableRuleCharacteristics',
           'MEASURES', 'RuleCharacteristicsFilter',
           'CompositeRuleCharacteristicsFilter']

logger = logging.getLogger(__name__)


class UnknownValueError(ValueError):
    """Raised when reading a rule characteristic which is not set."""


def _as_indices(indices) -> Optional[np.ndarray]:
    if indices is None:
        return None
    return np.unique(np.asarray(indices, dtype=int))


class RuleCoverageInformation:
    """Coverage of a rule on a decision table of `all_objects_count` objects.

    :param indices_of_covered_objects: Indices of the objects covered by the
        rule. Required.
    :param indices_of_positive_objects: Indices of the objects belonging to
        the union approximated by the rule, or None if unknown.
    :param indices_of_neutral_objects: Indices of the objects neither positive
        nor negative w.r.t. that union, or None if unknown.
    """

    def __init__(self,
                 indices_of_covered_objects: Sequence[int],
                 all_objects_count: int,
                 indices_of_positive_objects: Sequence[int] = None,
                 indices_of_neutral_objects: Sequence[int] = None):
        if indices_of_covered_objects is None or all_objects_count is None:
            raise TypeError("Covered objects or number of all objects of rule "
                            "coverage information is None.")
        if all_objects_count < 0:
            raise ValueError("Number of all objects must not be negative, "
                             "got {}".format(all_objects_count))
        self._covered = _as_indices(indices_of_covered_objects)
        self._all_objects_count = int(all_objects_count)
        self._positive = _as_indices(indices_of_positive_objects)
        self._neutral = _as_indices(indices_of_neutral_objects)

    @classmethod
    def from_union(cls, union, covered) -> 'RuleCoverageInformation':
        """Coverage information of a rule approximating `union`.

        :param union: `approximations.Union`, defines the positive and
            neutral objects.
        :param covered: bool mask over the objects of `union.table`, or the
            indices of the covered objects.
        """
        covered = np.asarray(covered)
        if covered.dtype == np.bool_:
            if covered.shape != (union.table.n_objects,):
                raise ValueError("Coverage mask has shape {}, expected ({},)"
                                 .format(covered.shape,
                                         union.table.n_objects))
            covered = np.flatnonzero(covered)
        return cls(covered, union.table.n_objects,
                   union.objects, union.neutral_objects)

    @property
    def indices_of_covered_objects(self) -> np.ndarray:
        return self._covered

    @property
    def all_objects_count(self) -> int:
        return self._all_objects_count

    @property
    def indices_of_positive_objects(self) -> Optional[np.ndarray]:
        return self._positive

    @property
    def indices_of_neutral_objects(self) -> Optional[np.ndarray]:
        return self._neutral

    def __repr__(self):
        return ('RuleCoverageInformation(covered={}, all={}, positive={}, '
                'neutral={})').format(
            len(self._covered), self._all_objects_count,
            None if self._positive is None else len(self._positive),
            None if self._neutral is None else len(self._neutral))


class _Characteristic:
    """Descriptor of a single rule characteristic, stored in the `_values`
    dict of its `RuleCharacteristics` instance.

    :param ruleml_name: Name of the measure in RuleML `<evaluation>` elements.
    :param text_name: Name used in textual filters.
    :param dtype: `int` or `float`, values are converted on assignment. A
        non-integral value of an `int` characteristic raises `ValueError`.
    """

    def __init__(self, ruleml_name: str, text_name: str, dtype=float):
        self.ruleml_name = ruleml_name
        self.text_name = text_name
        self.dtype = dtype
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance._get_characteristic(self.name)

    def convert(self, value):
        if self.dtype is int and not float(value).is_integer():
            raise ValueError("Rule characteristic {} must be integral, "
                             "got {!r}".format(self.name, value))
        return self.dtype(value)

    def __set__(self, instance, value):
        instance._values[self.name] = \
            None if value is None else self.convert(value)


class RuleCharacteristics:
    """Named characteristics of a rule, each either unset or holding a value.

    Reading an unset characteristic raises `UnknownValueError`, use `is_set`
    to test first. `support`, `coverage` and `negative_coverage` are `int`,
    all others `float`.
    """

    support = _Characteristic('Support', 'support', int)
    strength = _Characteristic('Strength', 'strength')
    confidence = _Characteristic('Confidence', 'confidence')
    coverage_factor = _Characteristic('CoverageFactor', 'coverage-factor')
    coverage = _Characteristic('Coverage', 'coverage', int)
    negative_coverage = _Characteristic('NegativeCoverage',
                                        'negative-coverage', int)
    epsilon = _Characteristic('EpsilonMeasure', 'epsilon')
    epsilon_prime = _Characteristic('EpsilonPrimeMeasure', "epsilon'")
    f_confirmation = _Characteristic('f-ConfirmationMeasure', 'F')
    a_confirmation = _Characteristic('A-ConfirmationMeasure', 'A')
    z_confirmation = _Characteristic('Z-ConfirmationMeasure', 'Z')
    l_confirmation = _Characteristic('l-ConfirmationMeasure', 'L')
    c1_confirmation = _Characteristic('c1-ConfirmationMeasure', 'c1')
    s_confirmation = _Characteristic('s-ConfirmationMeasure', 'S')

    def __init__(self, **values):
        self._values: Dict[str, object] = {}
        for name, value in values.items():
            self._check_name(name)
            setattr(self, name, value)

    @staticmethod
    def _check_name(name: str) -> None:
        if name not in MEASURES:
            raise ValueError("Unknown rule characteristic {!r}, expected one "
                             "of {}".format(name, MEASURES))

    @staticmethod
    def characteristic(name: str) -> _Characteristic:
        """:return: the descriptor of measure `name`."""
        RuleCharacteristics._check_name(name)
        return vars(RuleCharacteristics)[name]

    def _get_characteristic(self, name: str):
        value = self._values.get(name)
        if value is None:
            raise UnknownValueError("Rule characteristic {} is not set."
                                    .format(name))
        return value

    def is_set(self, name: str) -> bool:
        self._check_name(name)
        return self._values.get(name) is not None

    def items(self) -> Iterator[Tuple[str, object]]:
        """:return: `(name, value)` of all set characteristics, in the order
            of `MEASURES`. Does not compute anything.
        """
        for name in MEASURES:
            value = self._values.get(name)
            if value is not None:
                yield name, value

    def __eq__(self, other):
        if isinstance(other, RuleCharacteristics):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    def __repr__(self):
        return '{}({})'.format(type(self).__name__,
                               ', '.join('{}={!r}'.format(name, value)
                                         for name, value in self.items()))


MEASURES: Tuple[str, ...] = tuple(
    name for name, attribute in vars(RuleCharacteristics).items()
    if isinstance(attribute, _Characteristic))


class ComputableRuleCharacteristics(RuleCharacteristics):
    """Rule characteristics computed from a fixed `RuleCoverageInformation`.

    Each characteristic is computed on first read and cached; a value
    assigned before is returned as is. If the coverage information lacks the
    positive or neutral objects, the characteristics depending on them stay
    unset and read as None. Zero denominators yield `inf`/`nan` and a
    `ZeroDenominatorWarning`.

    Reading and computing is guarded by a re-entrant lock, so concurrent
    readers compute each characteristic once.

    :param c1_confirmation_alpha: float, weight of the c1 measure, see
        `set_c1_confirmation_parameters`.
    :param c1_confirmation_beta: float
    """

    def __init__(self, rule_coverage_information: RuleCoverageInformation,
                 c1_confirmation_alpha: float = 0.5,
                 c1_confirmation_beta: float = 0.5):
        if rule_coverage_information is None:
            raise TypeError("Rule coverage information is None.")
        super().__init__()
        self._rule_coverage_information = rule_coverage_information
        self._lock = threading.RLock()
        self._c1_confirmation_alpha = c1_confirmation_alpha
        self._c1_confirmation_beta = c1_confirmation_beta
        self._positive_not_covered_objects_count: Optional[int] = None
        self._negative_not_covered_objects_count: Optional[int] = None

    @property
    def rule_coverage_information(self) -> RuleCoverageInformation:
        return self._rule_coverage_information

    @rule_coverage_information.setter
    def rule_coverage_information(self, value):
        raise AttributeError("Rule coverage information of computable rule "
                             "characteristics cannot be replaced.")

    @property
    def c1_confirmation_alpha(self) -> float:
        return self._c1_confirmation_alpha

    @property
    def c1_confirmation_beta(self) -> float:
        return self._c1_confirmation_beta

    def set_c1_confirmation_parameters(self, alpha: float, beta: float
                                       ) -> bool:
        """Change the parameters of the c1 confirmation measure.

        :return: True if changed, False if `c1_confirmation` is already set
            (the parameters are left unchanged in that case).
        """
        with self._lock:
            if self.is_set('c1_confirmation'):
                return False
            self._c1_confirmation_alpha = alpha
            self._c1_confirmation_beta = beta
            return True

    def _get_characteristic(self, name: str):
        with self._lock:
            value = self._values.get(name)
            if value is None:
                value = getattr(self, '_calculate_' + name)()
                if value is not None:
                    value = self.characteristic(name).convert(value)
                    self._values[name] = value
                    logger.debug("computed %s = %r", name, value)
            return value

    def calculate_all_characteristics(self) -> None:
        """Compute all characteristics not set yet."""
        for name in MEASURES:
            getattr(self, name)

    # counts derived from the coverage information

    @property
    def _n(self) -> int:
        return self._rule_coverage_information.all_objects_count

    @property
    def _positive_count(self) -> Optional[int]:
        positive = self._rule_coverage_information.indices_of_positive_objects
        return None if positive is None else len(positive)

    @property
    def _neutral_count(self) -> Optional[int]:
        neutral = self._rule_coverage_information.indices_of_neutral_objects
        return None if neutral is None else len(neutral)

    @property
    def positive_not_covered_objects_count(self) -> Optional[int]:
        """`b`: positive objects not covered by the rule."""
        with self._lock:
            if self._positive_not_covered_objects_count is None:
                support, positive_count = self.support, self._positive_count
                if support is not None and positive_count is not None:
                    self._positive_not_covered_objects_count = \
                        positive_count - support
            return self._positive_not_covered_objects_count

    @property
    def negative_not_covered_objects_count(self) -> Optional[int]:
        """`d`: negative objects not covered by the rule."""
        with self._lock:
            if self._negative_not_covered_objects_count is None:
                negative_coverage = self.negative_coverage
                negative_count = self._negative_count()
                if negative_coverage is not None \
                        and negative_count is not None:
                    self._negative_not_covered_objects_count = \
                        negative_count - negative_coverage
            return self._negative_not_covered_objects_count

    def _negative_count(self) -> Optional[int]:
        positive_count, neutral_count = \
            self._positive_count, self._neutral_count
        if positive_count is None or neutral_count is None:
            return None
        return self._n - positive_count - neutral_count

    def _cells(self) -> Optional[Tuple[int, int, int, int]]:
        """:return: `(a, b, c, d)` or None if not available."""
        cells = (self.support, self.positive_not_covered_objects_count,
                 self.negative_coverage,
                 self.negative_not_covered_objects_count)
        if any(cell is None for cell in cells):
            return None
        return cells

    # measures

    def _calculate_support(self) -> Optional[int]:
        info = self._rule_coverage_information
        if info.indices_of_positive_objects is None:
            return None
        return len(np.intersect1d(info.indices_of_covered_objects,
                                  info.indices_of_positive_objects,
                                  assume_unique=True))

    def _calculate_strength(self) -> Optional[float]:
        support = self.support
        if support is None:
            return None
        return divide(support, self._n, 'strength')

    def _calculate_confidence(self) -> Optional[float]:
        support, negative_coverage = self.support, self.negative_coverage
        if support is None or negative_coverage is None:
            return None
        return divide(support, support + negative_coverage, 'confidence')

    def _calculate_coverage_factor(self) -> Optional[float]:
        support, positive_count = self.support, self._positive_count
        if support is None or positive_count is None:
            return None
        return divide(support, positive_count, 'coverage factor')

    def _calculate_coverage(self) -> int:
        return len(self._rule_coverage_information.indices_of_covered_objects)

    def _calculate_negative_coverage(self) -> Optional[int]:
        info = self._rule_coverage_information
        if info.indices_of_positive_objects is None \
                or info.indices_of_neutral_objects is None:
            return None
        not_negative = np.union1d(info.indices_of_positive_objects,
                                  info.indices_of_neutral_objects)
        return len(np.setdiff1d(info.indices_of_covered_objects,
                                not_negative, assume_unique=True))

    def _calculate_epsilon(self) -> Optional[float]:
        negative_coverage = self.negative_coverage
        negative_count = self._negative_count()
        if negative_coverage is None or negative_count is None:
            return None
        return divide(negative_coverage, negative_count, 'epsilon')

    def _calculate_epsilon_prime(self) -> Optional[float]:
        negative_coverage = self.negative_coverage
        positive_count = self._positive_count
        if negative_coverage is None or positive_count is None:
            return None
        return divide(negative_coverage, positive_count, 'epsilon prime')

    def _calculate_f_confirmation(self) -> Optional[float]:
        cells = self._cells()
        if cells is None:
            return None
        a, b, c, d = cells
        return divide(a * d - b * c, a * d + b * c + 2 * a * c,
                      'f confirmation')

    def _confidence_not_below_prior(self, a, b, c, d) -> bool:
        """Whether `a / (a + c) >= (a + b) / (a + b + c + d)`."""
        return (divide(a, a + c, 'confidence')
                >= divide(a + b, a + b + c + d, 'class prior'))

    def _calculate_a_confirmation(self) -> Optional[float]:
        cells = self._cells()
        if cells is None:
            return None
        a, b, c, d = cells
        if self._confidence_not_below_prior(a, b, c, d):
            return divide(a * d - b * c, (a + b) * (b + d), 'A confirmation')
        return divide(a * d - b * c, (b + d) * (c + d), 'A confirmation')

    def _calculate_z_confirmation(self) -> Optional[float]:
        cells = self._cells()
        if cells is None:
            return None
        a, b, c, d = cells
        if self._confidence_not_below_prior(a, b, c, d):
            return divide(a * d - b * c, (a + c) * (c + d), 'Z confirmation')
        return divide(a * d - b * c, (a + c) * (a + b), 'Z confirmation')

    def _calculate_l_confirmation(self) -> Optional[float]:
        cells = self._cells()
        if cells is None:
            return None
        a, b, c, d = cells
        if c != 0:
            return log(divide(divide(a, a + b, 'l confirmation'),
                              divide(c, c + d, 'l confirmation'),
                              'l confirmation'))
        if a == 0:
            return math.nan
        return math.inf

    def _calculate_c1_confirmation(self) -> Optional[float]:
        cells = self._cells()
        if cells is None:
            return None
        a, b, c, d = cells
        alpha = self._c1_confirmation_alpha
        beta = self._c1_confirmation_beta
        if self._confidence_not_below_prior(a, b, c, d):
            if c == 0:
                return alpha + beta * divide(a * d - b * c, (a + b) * (b + d),
                                             'c1 confirmation')
            return alpha * divide(a * d - b * c, (a + c) * (c + d),
                                  'c1 confirmation')
        if a == 0:
            return -alpha + beta * divide(a * d - b * c, (b + d) * (c + d),
                                          'c1 confirmation')
        return alpha * divide(a * d - b * c, (a + b) * (a + c),
                              'c1 confirmation')

    def _calculate_s_confirmation(self) -> Optional[float]:
        cells = self._cells()
        if cells is None:
            return None
        a, b, c, d = cells
        return (divide(a, a + c, 's confirmation')
                - divide(b, b + d, 's confirmation'))


# filters

_RELATIONS: Dict[str, Callable[[float, float], bool]] = {
    '>=': operator.ge,
    '<=': operator.le,
    '>': operator.gt,
    '<': operator.lt,
    '=': operator.eq,
}


def _measure_of_text(text: str) -> str:
    text = text.strip()
    if text in MEASURES:
        return text
    for name in MEASURES:
        if RuleCharacteristics.characteristic(name).text_name == text:
            return name
    raise ValueError("Unknown rule characteristic {!r}".format(text))


class RuleCharacteristicsFilter:
    """Accepts rule characteristics whose `measure` is in `relation` with
    `threshold`, e.g. `confidence > 0.5`.

    An unset characteristic, or one which cannot be computed, is rejected.

    :param relation: One of '<', '<=', '=', '>=', '>'.
    """

    def __init__(self, measure: str, relation: str, threshold: float):
        if measure is None or relation is None or threshold is None:
            raise TypeError("Measure, relation or threshold of a rule "
                            "characteristics filter is None.")
        RuleCharacteristics._check_name(measure)
        if relation not in _RELATIONS:
            raise ValueError("Unknown relation {!r}, expected one of {}"
                             .format(relation, list(_RELATIONS)))
        self.measure = measure
        self.relation = relation
        self.threshold = threshold

    @classmethod
    def of(cls, text: str) -> 'RuleCharacteristicsFilter':
        """Parse a filter like `"confidence>0.5"` or `"coverage-factor>=0.1"`.

        The measure may be given by attribute name or by its textual name
        (`support`, `strength`, `confidence`, `coverage-factor`, `coverage`,
        `negative-coverage`, `epsilon`, `epsilon'`, `F`, `A`, `Z`, `L`,
        `c1`, `S`).
        """
        if text is None:
            raise TypeError("Textual representation of rule characteristics "
                            "filter is None.")
        # two-character relations first, '>=' contains '>'
        for relation in _RELATIONS:
            if relation in text:
                measure, _, threshold = text.partition(relation)
                number = float(threshold)
                if number.is_integer():
                    number = int(number)
                return cls(_measure_of_text(measure), relation, number)
        raise ValueError("No relation in rule characteristics filter {!r}"
                         .format(text))

    def accepts(self, characteristics: RuleCharacteristics) -> bool:
        try:
            value = getattr(characteristics, self.measure)
        except UnknownValueError:
            return False
        if value is None:
            return False
        return _RELATIONS[self.relation](value, self.threshold)

    def __str__(self):
        return '{}{}{}'.format(
            RuleCharacteristics.characteristic(self.measure).text_name,
            self.relation, self.threshold)

    def __repr__(self):
        return 'RuleCharacteristicsFilter({!r}, {!r}, {!r})'.format(
            self.measure, self.relation, self.threshold)


class CompositeRuleCharacteristicsFilter:
    """Conjunction of `RuleCharacteristicsFilter`s. Accepts everything if
    empty.
    """

    SEPARATOR = '&'

    def __init__(self, filters: Sequence[RuleCharacteristicsFilter]):
        if filters is None:
            raise TypeError("Filters of a composite rule characteristics "
                            "filter are None.")
        self.filters: List[RuleCharacteristicsFilter] = list(filters)

    @classmethod
    def of(cls, text: str) -> 'CompositeRuleCharacteristicsFilter':
        """Parse filters joined by '&', e.g. `"support>=2&confidence>0.5"`."""
        if text is None:
            raise TypeError("Textual representation of composite rule "
                            "characteristics filter is None.")
        if not text.strip():
            return cls([])
        return cls([RuleCharacteristicsFilter.of(part)
                    for part in text.split(cls.SEPARATOR)])

    def accepts(self, characteristics: RuleCharacteristics) -> bool:
        return all(rule_filter.accepts(characteristics)
                   for rule_filter in self.filters)

    def __str__(self):
        return self.SEPARATOR.join(str(f) for f in self.filters)
