"""pytest fixtures for the test cases in this directory."""

import pytest

from sklearn_drsa.characteristics import RuleCoverageInformation
from sklearn_drsa.dominance import \
    HAVE_NUMBA, _dominance_matrix_numpy, _dominance_matrix_numba

from .datasets import \
    Dataset, one_attribute_inconsistent, monotone_consistent, \
    mixed_with_missing, empty


def pytest_configure(config):
    config.addinivalue_line("markers", "fast: quick tests on tiny inputs")


@pytest.fixture(params=[
    pytest.param(_dominance_matrix_numpy, id="numpy"),
    pytest.param(_dominance_matrix_numba, id="numba",
                 marks=pytest.mark.skipif(not HAVE_NUMBA,
                                          reason="numba not installed"))])
def dominance_implementation(request):
    """Fixture running for each implementation of the dominance matrix."""
    return request.param


@pytest.fixture(params=[one_attribute_inconsistent,
                        monotone_consistent,
                        mixed_with_missing,
                        empty])
def any_dataset(request) -> Dataset:
    return request.param()


@pytest.fixture
def worked_coverage() -> RuleCoverageInformation:
    """Coverage of a rule on 10 objects with a=4, b=2, c=1, d=3.

    Positive objects 0..5, covered 0..3 and 6, no neutral objects.
    """
    return RuleCoverageInformation(indices_of_covered_objects=[0, 1, 2, 3, 6],
                                   all_objects_count=10,
                                   indices_of_positive_objects=range(6),
                                   indices_of_neutral_objects=[])
