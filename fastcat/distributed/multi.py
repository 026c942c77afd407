"""Run independent I/O tasks in parallel on the current machine.
"""
import joblib

from fastcat.log import logger


def run_parallel(fn, items, cores=1, name=None):
    """Apply `fn` to each item with at most `cores` concurrent workers.

    Returns results in the order of `items`. The first exception raised by a
    task stops dispatching of the remaining items and is re-raised; results
    of tasks already in flight are discarded.
    """
    items = list(items)
    if len(items) == 0:
        return []
    num_jobs = max(1, min(int(cores), len(items)))
    logger.debug("parallel %s: %s items on %s workers" %
                 (name or fn.__name__, len(items), num_jobs))
    if num_jobs == 1:
        return [fn(x) for x in items]
    return list(joblib.Parallel(n_jobs=num_jobs, backend="threading", batch_size=1)(
        joblib.delayed(fn)(x) for x in items))
