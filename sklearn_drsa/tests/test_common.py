"""Tests for `sklearn_drsa.common`."""

import itertools

import pytest

from sklearn_drsa.common import \
    Ternary, KnownField, UNKNOWN_MV2, UNKNOWN_MV15, unknown_field, \
    SimpleDecision, CompositeDecision, DecisionDistribution
from sklearn_drsa.util import PreferenceType, MissingValueType

T, F, U = Ternary.TRUE, Ternary.FALSE, Ternary.UNCOMPARABLE


def gain(value):
    return KnownField(value, PreferenceType.GAIN)


def cost(value):
    return KnownField(value, PreferenceType.COST)


def nominal(value):
    return KnownField(value, PreferenceType.NONE)


@pytest.mark.fast
def test_ternary():
    with pytest.raises(TypeError):
        bool(T)
    with pytest.raises(TypeError):
        if U:
            pass
    assert T & T is T
    assert T & U is U
    assert U & F is F
    assert F & T is F
    assert Ternary.conjunction([]) is T
    assert Ternary.conjunction([T, U, T]) is U
    assert Ternary.conjunction([U, F, U]) is F
    assert Ternary.of(True) is T and Ternary.of(False) is F


def test_known_fields():
    assert gain(3).is_at_least_as_good_as(gain(2)) is T
    assert gain(3).is_at_most_as_good_as(gain(2)) is F
    assert gain(3).is_at_least_as_good_as(gain(3)) is T
    assert cost(3).is_at_least_as_good_as(cost(2)) is F
    assert cost(3).is_at_most_as_good_as(cost(2)) is T
    assert gain(3).is_at_least_as_good_as(cost(2)) is U, \
        "different preference types compared"
    assert nominal('a').is_at_least_as_good_as(nominal('a')) is T
    assert nominal('a').is_at_most_as_good_as(nominal('b')) is U
    assert nominal('a').is_equal_to(nominal('b')) is F
    assert gain(2).is_equal_to(gain(2)) is T
    assert gain(2) == gain(2.0) and hash(gain(2)) == hash(gain(2.0))
    assert gain(2) != cost(2)
    with pytest.raises(TypeError):
        KnownField(None)
    with pytest.raises(TypeError):
        gain(1).is_at_least_as_good_as(None)


def test_missing_fields():
    assert unknown_field(MissingValueType.MV2) is UNKNOWN_MV2
    assert unknown_field(MissingValueType.MV15) is UNKNOWN_MV15
    for missing in (UNKNOWN_MV2, UNKNOWN_MV15):
        assert missing.is_missing
        assert missing.is_at_least_as_good_as(gain(1)) is T
        assert missing.is_at_most_as_good_as(gain(1)) is T
        assert missing.is_equal_to(UNKNOWN_MV15) is T
    # known compared to missing
    assert gain(1).is_at_least_as_good_as(UNKNOWN_MV2) is T
    assert gain(1).is_at_most_as_good_as(UNKNOWN_MV2) is T
    assert gain(1).is_equal_to(UNKNOWN_MV2) is T
    assert gain(1).is_at_least_as_good_as(UNKNOWN_MV15) is F
    assert gain(1).is_at_most_as_good_as(UNKNOWN_MV15) is F
    assert gain(1).is_equal_to(UNKNOWN_MV15) is F


def test_simple_decisions():
    d1 = SimpleDecision(gain(1), 4)
    d2 = SimpleDecision(gain(2), 4)
    assert d2.is_at_least_as_good_as(d1) is T
    assert d1.is_at_most_as_good_as(d2) is T
    assert d1.is_at_least_as_good_as(d2) is F
    assert d1.is_equal_to(SimpleDecision(gain(1), 4)) is T
    assert d1 == SimpleDecision(gain(1), 4)
    assert len({d1, SimpleDecision(gain(1), 4), d2}) == 2
    other_attribute = SimpleDecision(gain(1), 5)
    for relation in ('is_at_least_as_good_as', 'is_at_most_as_good_as',
                     'is_equal_to'):
        assert getattr(d1, relation)(other_attribute) is U
    assert d1.attribute_indices == frozenset({4})
    assert d1.get_evaluation(4) == gain(1) and d1.get_evaluation(5) is None
    assert d1.number_of_evaluations == 1
    with pytest.raises(TypeError):
        d1.is_at_least_as_good_as(None)
    with pytest.raises(TypeError):
        SimpleDecision(None, 0)


def test_composite_decisions():
    c = CompositeDecision([gain(1), cost(5)], [2, 3])
    better = CompositeDecision([gain(2), cost(4)], [2, 3])
    mixed = CompositeDecision([gain(2), cost(6)], [2, 3])
    assert better.is_at_least_as_good_as(c) is T
    assert c.is_at_most_as_good_as(better) is T
    assert mixed.is_at_least_as_good_as(c) is F
    assert mixed.is_at_most_as_good_as(c) is F
    # attribute order does not matter
    reordered = CompositeDecision([cost(5), gain(1)], [3, 2])
    assert c.is_equal_to(reordered) is T
    assert c == reordered and hash(c) == hash(reordered)
    # different kinds and attribute sets
    assert c.is_at_least_as_good_as(SimpleDecision(gain(1), 2)) is U
    assert c.is_equal_to(CompositeDecision([gain(1), cost(5)], [2, 4])) is U
    # uncomparable nominal part does not collapse to FALSE
    n1 = CompositeDecision([gain(2), nominal('x')], [0, 1])
    n2 = CompositeDecision([gain(1), nominal('y')], [0, 1])
    assert n1.is_at_least_as_good_as(n2) is U
    assert n1.is_at_most_as_good_as(n2) is F

    partly_missing = CompositeDecision([gain(1), UNKNOWN_MV2], [0, 1])
    assert not partly_missing.has_no_missing_evaluation()
    assert not partly_missing.has_all_missing_evaluations()
    assert CompositeDecision([UNKNOWN_MV2, UNKNOWN_MV15], [0, 1]) \
        .has_all_missing_evaluations()


@pytest.mark.parametrize('evaluations, indices, error', [
    ([gain(1), gain(2)], [0], ValueError),
    ([gain(1)], [0], ValueError),
    ([gain(1), gain(2)], [3, 3], ValueError),
    ([gain(1), None], [0, 1], TypeError),
    (None, [0, 1], TypeError),
    ([gain(1), gain(2)], None, TypeError),
])
def test_composite_decision_construction(evaluations, indices, error):
    with pytest.raises(error):
        CompositeDecision(evaluations, indices)


def test_decision_relations_symmetric():
    decisions = [CompositeDecision([v1, v2], [0, 1])
                 for v1 in (gain(1), gain(2), gain(3))
                 for v2 in (cost(1), cost(2), nominal('a'), nominal('b'))]
    for d1, d2 in itertools.product(decisions, repeat=2):
        assert (d1.is_at_least_as_good_as(d2) is T) \
            == (d2.is_at_most_as_good_as(d1) is T)
        if d1.is_equal_to(d2) is T:
            assert d1.is_at_least_as_good_as(d2) is T
            assert d1.is_at_most_as_good_as(d2) is T


def test_decision_distribution():
    low, mid, high = (SimpleDecision(gain(v), 0) for v in (1, 2, 3))
    distribution = DecisionDistribution.from_decisions(
        [low, mid, mid, high, high, high, SimpleDecision(gain(2), 0)])
    assert distribution.get_count(mid) == 3
    assert distribution.get_count(SimpleDecision(gain(9), 0)) == 0
    assert distribution.different_decisions_count == 3
    assert len(distribution) == 3
    assert high in distribution
    assert distribution.total() == 7
    assert sorted(distribution.mode(), key=str) == [mid, high]
    assert distribution.median([low, mid, high]) == mid
    distribution.increase_count(low, 2)
    assert distribution.get_count(low) == 3
    assert distribution == DecisionDistribution.from_decisions(
        [high, mid] * 3 + [low] * 3)
    with pytest.raises(ValueError):
        distribution.median([low, high])
    with pytest.raises(TypeError):
        distribution.increase_count(None)
    for by in (0, -1):
        with pytest.raises(ValueError):
            distribution.increase_count(low, by)
    assert distribution.get_count(low) == 3
    assert DecisionDistribution().mode() is None
