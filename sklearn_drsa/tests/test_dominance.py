"""Tests for `sklearn_drsa.dominance`."""

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from sklearn_drsa.common import CompositeDecision, KnownField, \
    SimpleDecision, Ternary, UNKNOWN_MV15
from sklearn_drsa.dominance import \
    DecisionTable, dominance_matrix, dominates, is_dominated_by, \
    _dominance_matrix_numpy, calculate_dominance_cones, \
    calculate_dominance_cones_decision_distributions
from sklearn_drsa.util import PreferenceType, MissingValueType

from .datasets import mixed_with_missing, one_attribute_inconsistent


def test_table_validation():
    X = np.array([[1., 2.], [3., 4.], [5., 6.]])
    decisions = [SimpleDecision(KnownField(c), 2) for c in (1, 2, 3)]
    table = DecisionTable(X, decisions, preference_types=['gain', 'cost'])
    assert table.n_objects == len(table) == 3
    assert table.n_attributes == 2
    assert_array_equal(table.preference_types, [1, -1])
    assert table.get_fields(1) == [KnownField(3., PreferenceType.GAIN),
                                   KnownField(4., PreferenceType.COST)]
    with pytest.raises(ValueError):
        DecisionTable(X, decisions[:2])
    with pytest.raises(ValueError):
        DecisionTable(X, decisions, preference_types=['gain'])
    with pytest.raises(ValueError):
        DecisionTable(X, decisions, missing_value_types='mv1')
    cost = DecisionTable(X, decisions, preference_types=PreferenceType.COST,
                         missing_value_types=MissingValueType.MV15)
    assert_array_equal(cost.preference_types, [-1, -1])
    assert_array_equal(cost.missing_value_types, [1, 1])
    with pytest.raises(TypeError):
        DecisionTable(X, decisions[:2] + [None])


def test_from_arrays():
    X = np.array([[1., np.nan], [2., 3.]])
    simple = DecisionTable.from_arrays(X, [1, np.nan],
                                       missing_value_types='mv15',
                                       decision_missing_value_type=1)
    assert simple.get_decision(0) == SimpleDecision(KnownField(1), 2)
    assert simple.get_decision(1) == SimpleDecision(UNKNOWN_MV15, 2)
    assert simple.get_fields(0)[1] is UNKNOWN_MV15

    composite = DecisionTable.from_arrays(
        X, [[1, 5], [2, 4]], decision_preference_types=['gain', 'cost'])
    assert composite.get_decision(1) == CompositeDecision(
        [KnownField(2), KnownField(4, PreferenceType.COST)], [2, 3])
    assert composite.get_decision(1).is_at_least_as_good_as(
        composite.get_decision(0)) is Ternary.TRUE
    with pytest.raises(ValueError):
        DecisionTable.from_arrays(X, [1, 2, 3])


def test_dominance_matrix(dominance_implementation):
    dataset = one_attribute_inconsistent()
    table = dataset.to_table()
    expected = dataset.X >= dataset.X.T
    assert_array_equal(dominance_matrix(table,
                                        implementation=dominance_implementation),
                       expected)
    assert_array_equal(dominance_matrix(table, inverse=True,
                                        implementation=dominance_implementation),
                       expected.T)


def test_dominance_matrix_matches_fields(dominance_implementation,
                                         any_dataset):
    """Matrix implementations agree with pairwise field comparisons,
    including cost, nominal and both kinds of missing values."""
    table = any_dataset.to_table()
    dominance = dominance_matrix(table,
                                 implementation=dominance_implementation)
    inverse = dominance_matrix(table, inverse=True,
                               implementation=dominance_implementation)
    assert dominance.shape == (table.n_objects, table.n_objects)
    for i in range(table.n_objects):
        for j in range(table.n_objects):
            assert dominance[i, j] == dominates(i, j, table), (i, j)
            assert inverse[i, j] == is_dominated_by(i, j, table), (i, j)
    assert_array_equal(dominance, dominance_matrix(
        table, implementation=_dominance_matrix_numpy))


def test_missing_value_semantics():
    X = np.array([[np.nan, np.nan], [1., 1.]])
    table = DecisionTable(X, [SimpleDecision(KnownField(0), 2)] * 2,
                          missing_value_types=['mv2', 'mv15'])
    # missing compared to anything holds on both attributes
    assert dominates(0, 1, table)
    # known compared to missing holds for MV2 only
    assert not dominates(1, 0, table)
    X[1, 1] = np.nan
    table = DecisionTable(X, table.decisions,
                          missing_value_types=['mv2', 'mv15'])
    assert dominates(1, 0, table)


def test_cones(any_dataset):
    table = any_dataset.to_table()
    cones = calculate_dominance_cones(table)
    distributions = calculate_dominance_cones_decision_distributions(table)
    for x in range(table.n_objects):
        decision = table.get_decision(x)
        # reflexivity
        assert x in cones.positive_d_cone(x)
        assert x in cones.negative_d_cone(x)
        assert distributions.positive_d_cone(x).get_count(decision) >= 1
        assert distributions.negative_d_cone(x).get_count(decision) >= 1
        for y in cones.positive_d_cone(x):
            assert dominates(y, x, table)
            assert x in cones.negative_d_cone(y)
        for y in cones.positive_inv_d_cone(x):
            assert x in cones.negative_inv_d_cone(y)
        assert distributions.positive_inv_d_cone(x).total() \
            == len(cones.positive_inv_d_cone(x))
        assert distributions.negative_inv_d_cone(x).total() \
            == len(cones.negative_inv_d_cone(x))


@pytest.mark.fast
def test_cones_of_example():
    table = one_attribute_inconsistent().to_table()
    cones = calculate_dominance_cones(table)
    assert_array_equal(cones.positive_d_cone(2), [2, 3, 4, 5])
    assert_array_equal(cones.negative_d_cone(2), [0, 1, 2, 3])
    assert_array_equal(cones.positive_inv_d_cone(2), [2, 3, 4, 5])
    assert_array_equal(cones.negative_inv_d_cone(2), [0, 1, 2, 3])
    distributions = calculate_dominance_cones_decision_distributions(table)
    class_1, class_2 = table.get_decision(0), table.get_decision(2)
    assert distributions.positive_d_cone(2).get_count(class_1) == 1
    assert distributions.positive_d_cone(2).get_count(class_2) == 3


def test_only_necessary_distributions():
    table = mixed_with_missing().to_table()
    full = calculate_dominance_cones_decision_distributions(table)
    necessary = calculate_dominance_cones_decision_distributions(
        table, only_necessary=True)
    for x in range(table.n_objects):
        assert necessary.positive_inv_d_cone(x) == full.positive_inv_d_cone(x)
        assert necessary.negative_d_cone(x) == full.negative_d_cone(x)
    with pytest.raises(ValueError):
        necessary.positive_d_cone(0)
    with pytest.raises(ValueError):
        necessary.negative_inv_d_cone(0)
    with pytest.raises(TypeError):
        calculate_dominance_cones_decision_distributions(None)
