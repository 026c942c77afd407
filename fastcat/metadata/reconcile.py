"""Reconcile per job worker results into one ordered record per sample.

Every job deposits a `{sample}_{end}.fastq.stats` file holding the checksum
and read count of the concatenated FASTQ it produced. Results are fetched in
parallel, grouped by sample, cross-checked between the two ends and put back
into the order the samples were first reported in.

Reconciliation is all or nothing: any inconsistency raises and no records are
returned.
"""
import collections
import csv
import io
import os

from fastcat import utils
from fastcat.distributed import multi
from fastcat.distributed.objectstore import Location
from fastcat.log import logger
from fastcat.metadata import jobs
from fastcat.metadata.errors import (DuplicateDirection, IncompleteSample, MissingResult,
                                     ReadCountMismatch)
from fastcat.metadata.jobs import Direction

ResultStats = collections.namedtuple("ResultStats", ["checksum", "observed_read_count"])
ReconciledRecord = collections.namedtuple("ReconciledRecord", ["sample", "order_key", "forward_checksum",
                                                               "reverse_checksum", "read_count"])

STATS_TEMPLATE = "{sample}_{end}.fastq.stats"

def stats_location(stats_dir, key, template=None):
    """Location of the worker result for a job.
    """
    name = (template or STATS_TEMPLATE).format(sample=key.sample, end=int(key.direction))
    return Location.parse(stats_dir).join(name)

def fetch_stats(stats_dir, key, template=None):
    """Read the checksum and read count reported by the worker for one job.
    """
    fname = str(stats_location(stats_dir, key, template))
    if not os.path.exists(fname):
        raise MissingResult(key.sample, key.direction, fname)
    with io.open(fname, newline="") as in_handle:
        row = next((r for r in csv.reader(in_handle, delimiter="\t") if r), None)
    if row is None:
        raise MissingResult(key.sample, key.direction, fname, "empty stats file")
    if len(row) < 2 or not row[0].strip():
        raise MissingResult(key.sample, key.direction, fname, "expected checksum and read count")
    try:
        count = int(row[1])
    except ValueError:
        raise MissingResult(key.sample, key.direction, fname,
                            "read count is not an integer: %r" % row[1])
    if count < 0:
        raise MissingResult(key.sample, key.direction, fname, "negative read count %s" % count)
    logger.debug("%s end %s: %s %s" % (key.sample, int(key.direction), row[0], count))
    return ResultStats(row[0].strip(), count)

def compile_inputs(keys, stats_dir, config=None):
    """Fetch results for all jobs and reconcile them into ordered per sample records.
    """
    config = config or {}
    template = utils.get_in(config, ("stats", "template"), STATS_TEMPLATE)
    cores = utils.get_in(config, ("algorithm", "num_cores"), 4)
    keys = list(keys)
    stats = multi.run_parallel(lambda k: fetch_stats(stats_dir, k, template), keys, cores,
                               name="fetch_stats")
    return reconcile(zip(keys, stats))

def reconcile(keyed_stats):
    """Group (job key, result) pairs by sample and validate both ends agree.
    """
    by_sample = collections.OrderedDict()
    for key, stats in keyed_stats:
        entry = by_sample.setdefault(key.sample, {})
        if key.direction in entry:
            raise DuplicateDirection(key.sample, key.direction,
                                     entry[key.direction][0].sequence_index, key.sequence_index)
        entry[key.direction] = (key, stats)
    out = []
    for sample, entry in by_sample.items():
        for direction in (Direction.FORWARD, Direction.REVERSE):
            if direction not in entry:
                raise IncompleteSample(sample, direction)
        fkey, fstats = entry[Direction.FORWARD]
        _, rstats = entry[Direction.REVERSE]
        if fstats.observed_read_count != rstats.observed_read_count:
            raise ReadCountMismatch(sample, fstats.observed_read_count, rstats.observed_read_count)
        out.append(ReconciledRecord(sample, fkey.sequence_index, fstats.checksum,
                                    rstats.checksum, fstats.observed_read_count))
    out.sort(key=lambda x: x.order_key)
    logger.info("Reconciled %s samples" % len(out))
    return out

def load_job_keys(job_source):
    """Job keys from a directory of persisted jobs or from a JSON manifest.
    """
    if os.path.isdir(job_source):
        return jobs.list_descriptor_keys(job_source)
    _, descriptors = jobs.read_manifest(job_source)
    return [x.key for x in descriptors]
