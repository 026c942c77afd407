"""Join demultiplexing stats with FASTQ locations into per sample aggregates.

The demultiplexing stats are authoritative for which samples exist and in
which order they are reported. Each sample must have one fastq list row per
demultiplexing row, lane for lane.
"""
import collections

from fastcat import utils
from fastcat.distributed import multi
from fastcat.illumina import tables
from fastcat.log import logger
from fastcat.metadata.errors import LaneMismatch, MissingField, StructuralMismatch

LaneEntry = collections.namedtuple("LaneEntry", ["lane", "read_count", "read1_path", "read2_path"])
SampleAggregate = collections.namedtuple("SampleAggregate", ["sample", "discovery_order", "per_lane"])

def fetch_tables(demux_file, fastq_list_file, config=None):
    """Read both input tables concurrently, returning once both are complete.
    """
    columns = utils.get_in(config or {}, ("columns",), {})
    readers = [(tables.read_demux_stats, demux_file, columns.get("demux")),
               (tables.read_fastq_list, fastq_list_file, columns.get("fastq_list"))]
    demux, fqlist = multi.run_parallel(lambda x: x[0](x[1], x[2]), readers, cores=2,
                                       name="fetch_tables")
    logger.info("Read %s demultiplex rows from %s and %s fastq rows from %s" %
                (len(demux), demux_file, len(fqlist), fastq_list_file))
    return demux, fqlist

def group_by_sample(demux, fqlist):
    """Correlate demultiplex and fastq rows, producing one aggregate per sample.

    Samples keep the order in which they first appear in `demux`. Every sample
    is validated before anything is returned.
    """
    samples = utils.first_seen(x.sample for x in demux)
    dm_by_sample = collections.defaultdict(list)
    for x in demux:
        dm_by_sample[x.sample].append(x)
    fq_by_sample = collections.defaultdict(list)
    for x in fqlist:
        fq_by_sample[x.sample].append(x)
    out = []
    for i, sample in enumerate(samples):
        per_lane = _group_by_lane(sample, dm_by_sample[sample], fq_by_sample[sample])
        out.append(SampleAggregate(sample, i, tuple(per_lane)))
    return out

def _group_by_lane(sample, dm, fq):
    """Pair lane sorted rows for a single sample.
    """
    if len(dm) != len(fq):
        raise StructuralMismatch(sample, len(dm), len(fq))
    dm = sorted(dm, key=lambda x: x.lane)
    fq = sorted(fq, key=lambda x: x.lane)
    out = []
    for d, f in zip(dm, fq):
        if d.lane != f.lane:
            raise LaneMismatch(sample, d.lane, f.lane)
        if not f.read1_path:
            raise MissingField(sample, "Read1File", d.lane)
        if not f.read2_path:
            raise MissingField(sample, "Read2File", d.lane)
        out.append(LaneEntry(d.lane, d.read_count or 0, f.read1_path, f.read2_path))
    return out

def log_summary(by_sample):
    logger.info("number of samples: %s" % len(by_sample))
    for x in by_sample:
        logger.info("  %s: %s files" % (x.sample, len(x.per_lane)))
