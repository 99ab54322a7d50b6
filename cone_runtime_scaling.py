"""
Measure & plot runtime of the dominance cone construction with various object
and attribute counts.
"""

import logging
import sys
import timeit
from itertools import chain
from typing import Iterable, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger("cone_runtime_scaling")


def time_cones(implementation: str, table_args: str
               ) -> Optional[Sequence[float]]:
    setup = ';\n'.join((
        "import numpy as np",
        "from sklearn.utils import check_random_state",
        "from sklearn_drsa import dominance",
        "random = check_random_state(1)",
        "n_objects, n_attributes = %s" % table_args,
        "X = random.randint(0, 10, size=(n_objects, n_attributes))"
            ".astype(float)",
        "table = dominance.DecisionTable.from_arrays("
            "X, random.randint(1, 4, size=n_objects))"))
    stmt = "dominance.calculate_dominance_cones_decision_distributions(" \
           "  table, implementation=dominance.%s)" % implementation
    timer = timeit.Timer(stmt, setup)
    try:
        ti_number, raw_autorange_timing = timer.autorange()
        raw_timings = timer.repeat(number=ti_number) + [raw_autorange_timing]
    except ValueError:
        return None
    return sorted(timing / ti_number for timing in raw_timings)


def n_objects_gen(max=np.inf) -> Iterable[int]:
    mg = 1
    while mg * 50 < max:
        for t in (10, 20, 50):
            yield t * mg
        mg *= 10


def timing_for_param(implementation: str,
                     max_objects: int = 5_000) -> Iterable:
    for n_objects in n_objects_gen(max_objects):
        for n_attributes in chain(range(2, 16, 4), range(20, 70, 16)):
            argstr = "%d, %d" % (n_objects, n_attributes)
            timings = time_cones(implementation, argstr)
            if timings:
                yield n_objects, n_attributes, timings


def plot_timings(timings, title=None, figure=None):
    from matplotlib.ticker import LogLocator, LogFormatter
    if figure is None:
        figure: plt.Figure = plt.figure()
    axes = figure.add_subplot(xlabel='n_attributes', ylabel='time[s]')
    if title is not None:
        axes.set_title(title)
    n_objects = timings.T[0]
    n_attributes = timings.T[1]
    tm_min = timings.T[2]
    for n in np.unique(n_objects):
        mask = n_objects == n
        axes.loglog(n_attributes[mask], tm_min[mask], '.-', label=str(n))
    axes.legend(title='n_objects')
    axes.grid(True)
    figure.tight_layout()
    # show more ticks
    axes.xaxis.set_major_locator(LogLocator(subs='all'))
    axes.xaxis.set_major_formatter(LogFormatter(minor_thresholds=(100, 99)))
    axes.yaxis.set_major_locator(LogLocator(subs='all'))
    return figure


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(levelname)s %(message)s')
    implementation = '_dominance_matrix_numpy' if 'numpy' in sys.argv[1:] \
        else '_dominance_matrix_numba'

    logger.info("start timing of %s", implementation)
    print("n_objects, n_attributes, timings...")
    all_timings = []
    try:
        for n_objects, n_attributes, timings in timing_for_param(
                implementation):
            onelist = [n_objects, n_attributes] + timings
            all_timings.append(onelist)
            print('[' + ",".join([str(x) for x in onelist]) + '],')
    except KeyboardInterrupt:
        pass
    logger.info("stop timing of %s, got %d timings", implementation,
                len(all_timings))
    if all_timings:
        logger.info("plotting")
        plot_timings(np.array(all_timings),
                     'runtime of %s' % implementation).show()

    input('Press any key to exit.')
