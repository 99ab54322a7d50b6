"""Artificial decision tables (generator functions) for the sklearn_drsa
unittests."""

from typing import Union

import numpy as np
from sklearn.utils import check_random_state, Bunch

from sklearn_drsa.dominance import DecisionTable


class Dataset(Bunch):
    def __init__(self,
                 X: np.ndarray,
                 y: np.ndarray,
                 preference_types: Union[None, str, list] = None,
                 missing_value_types: Union[None, str, list] = None,
                 **kwargs):
        super().__init__(X=X, y=y,
                         preference_types=preference_types,
                         missing_value_types=missing_value_types,
                         **kwargs)

    def to_table(self) -> DecisionTable:
        return DecisionTable.from_arrays(
            self.X, self.y,
            preference_types=self.preference_types,
            missing_value_types=self.missing_value_types)


def one_attribute_inconsistent():
    """Six objects on one gain attribute, classes 1 < 2. Objects 2 and 3
    have equal evaluations but different classes.
    """
    X = np.array([[1.], [2.], [3.], [3.], [4.], [5.]])
    y = np.array([1, 1, 2, 1, 2, 2])
    return Dataset(X, y)


def monotone_consistent(n_objects=60, n_attributes=3, n_classes=4,
                        random=None):
    """Class assignment monotone in the sum of the evaluations, i.e. without
    any inconsistency w.r.t. dominance.
    """
    random = check_random_state(random if random is not None else 7)
    X = random.randint(0, 5, size=(n_objects, n_attributes)).astype(float)
    score = X.sum(axis=1)
    bins = np.quantile(score, np.linspace(0, 1, n_classes + 1)[1:-1])
    y = np.digitize(score, bins) + 1
    return Dataset(X, y)


def mixed_with_missing(n_objects=40, missing_rate=0.15, random=None):
    """Gain, cost and nominal attributes with missing values of both
    semantics, and noisy classes.
    """
    random = check_random_state(random if random is not None else 3)
    X = random.randint(0, 4, size=(n_objects, 4)).astype(float)
    X[random.random_sample(X.shape) < missing_rate] = np.nan
    y = random.randint(1, 4, size=n_objects)
    return Dataset(X, y,
                   preference_types=['gain', 'cost', 'none', 'gain'],
                   missing_value_types=['mv2', 'mv15', 'mv2', 'mv15'])


def empty():
    return Dataset(np.empty((0, 3)), np.empty(0))
