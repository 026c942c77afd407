"""Split per sample aggregates into per read direction jobs and persist them.

Each job covers one sample and one end of the pair. Jobs are numbered in
emission order, forward before reverse, and that number is the key a batch
array worker uses to find its job (`job.{seq}.data` and `job.{seq}.files`)
and the key the reconciler uses to restore the original sample order.
"""
import collections
import enum
import glob
import json
import math
import os

from fastcat import utils
from fastcat.distributed.transaction import file_transaction
from fastcat.log import logger
from fastcat.metadata.errors import CorruptDescriptor, MissingField, UnevenReadCount


class Direction(enum.IntEnum):
    FORWARD = 1
    REVERSE = 2


JobKey = collections.namedtuple("JobKey", ["sequence_index", "sample", "direction"])
FileEntry = collections.namedtuple("FileEntry", ["path", "expected_read_count"])
JobDescriptor = collections.namedtuple("JobDescriptor", ["key", "file_list"])

DATA_FILE = "job.{seq}.data"
FILES_FILE = "job.{seq}.files"

def split_by_pairend(by_sample):
    """Create forward and reverse jobs for each sample, numbered in emission order.
    """
    out = []
    for agg in by_sample:
        for direction in (Direction.FORWARD, Direction.REVERSE):
            attr = "read1_path" if direction == Direction.FORWARD else "read2_path"
            files = tuple(FileEntry(getattr(x, attr), x.read_count) for x in agg.per_lane)
            out.append(JobDescriptor(JobKey(len(out), agg.sample, direction), files))
    return out

def descriptors_from_metadata(rows):
    """Re-create jobs from the rows of an existing metadata table.

    Rows are grouped by library id in first-seen order. `number_of_reads`
    counts both ends, so each direction gets half of it.
    """
    sample_col = "case_seq_lib_ID"
    by_sample = collections.OrderedDict()
    for row in rows:
        sample = row.get(sample_col)
        if not sample:
            raise MissingField("<unknown>", sample_col)
        by_sample.setdefault(sample, []).append(row)
    out = []
    for sample, sample_rows in by_sample.items():
        fwd, rev = [], []
        for row in sample_rows:
            for field in ("fastq_forward_path", "fastq_reverse_path"):
                if not row.get(field):
                    raise MissingField(sample, field)
            count = _half_read_count(sample, row.get("number_of_reads"))
            fwd.append(FileEntry(row["fastq_forward_path"], count))
            rev.append(FileEntry(row["fastq_reverse_path"], count))
        out.append(JobDescriptor(JobKey(len(out), sample, Direction.FORWARD), tuple(fwd)))
        out.append(JobDescriptor(JobKey(len(out), sample, Direction.REVERSE), tuple(rev)))
    return out

def _half_read_count(sample, val):
    try:
        n = float(val)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(n):
        return 0
    if n != int(n) or int(n) % 2 != 0:
        raise UnevenReadCount(sample, val)
    return int(n) // 2

# ## Persist jobs for batch workers

def write_descriptors(descriptors, out_dir, config=None):
    """Write the key/value `.data` and file list `.files` artifacts for each job.

    Returns the written (data, files) artifact pairs in emission order.
    """
    utils.safe_makedir(out_dir)
    out = []
    for desc in descriptors:
        key = desc.key
        data_file = os.path.join(out_dir, DATA_FILE.format(seq=key.sequence_index))
        files_file = os.path.join(out_dir, FILES_FILE.format(seq=key.sequence_index))
        with file_transaction(config, data_file, files_file) as (tx_data_file, tx_files_file):
            with open(tx_data_file, "w") as out_handle:
                out_handle.write("seq\t%s\n" % key.sequence_index)
                out_handle.write("libid\t%s\n" % key.sample)
                out_handle.write("end\t%s\n" % int(key.direction))
            with open(tx_files_file, "w") as out_handle:
                for x in desc.file_list:
                    out_handle.write("%s\t%s\n" % (x.expected_read_count, x.path))
        out.append((data_file, files_file))
    _remove_stale_jobs(out_dir, set(x for pair in out for x in pair))
    logger.info("Wrote %s jobs to %s" % (len(out), out_dir))
    return out

def _remove_stale_jobs(out_dir, keep):
    """Remove job artifacts left in `out_dir` by an earlier run.
    """
    for pattern in (DATA_FILE, FILES_FILE):
        for fname in glob.glob(os.path.join(out_dir, pattern.format(seq="*"))):
            if fname not in keep:
                logger.debug("Removing stale job artifact %s" % fname)
                utils.remove_safe(fname)

def read_descriptor_key(data_file):
    """Parse the identifying fields of a persisted job.
    """
    fields = {}
    with open(data_file) as in_handle:
        for line in in_handle:
            parts = line.rstrip("\r\n").split("\t")
            if len(parts) >= 2:
                fields[parts[0]] = parts[1]
    return _to_key(data_file, fields.get("seq"), fields.get("libid"), fields.get("end"))

def _to_key(source, seq, sample, end):
    if seq is None or sample is None or end is None or sample == "":
        raise CorruptDescriptor(source, "missing one of seq, libid or end")
    try:
        seq = int(seq)
    except (TypeError, ValueError):
        raise CorruptDescriptor(source, "sequence index is not an integer: %r" % seq)
    if seq < 0:
        raise CorruptDescriptor(source, "negative sequence index: %s" % seq)
    try:
        direction = Direction(int(end))
    except (TypeError, ValueError):
        raise CorruptDescriptor(source, "end must be 1 or 2, got %r" % end)
    return JobKey(seq, sample, direction)

def list_descriptor_keys(job_dir):
    """Identify all jobs persisted in `job_dir`, ordered by sequence index.
    """
    seen = {}
    for data_file in glob.glob(os.path.join(job_dir, DATA_FILE.format(seq="*"))):
        key = read_descriptor_key(data_file)
        if key.sequence_index in seen:
            raise CorruptDescriptor(data_file, "sequence index %s already used by %s"
                                    % (key.sequence_index, seen[key.sequence_index][0]))
        seen[key.sequence_index] = (data_file, key)
    logger.debug("Found %s jobs in %s" % (len(seen), job_dir))
    return [key for _, key in sorted(seen.values(), key=lambda x: x[1].sequence_index)]

# ## Single file manifest of all jobs

def write_manifest(out_file, descriptors, job_info=None, config=None):
    """Write all jobs, with run identifiers from `job_info`, as one JSON document.
    """
    manifest = dict(job_info or {})
    manifest["jobs"] = [{"seq": d.key.sequence_index,
                         "sample": d.key.sample,
                         "end": int(d.key.direction),
                         "counts": [x.expected_read_count for x in d.file_list],
                         "files": [x.path for x in d.file_list]}
                        for d in descriptors]
    with file_transaction(config, out_file) as tx_out_file:
        with open(tx_out_file, "w") as out_handle:
            json.dump(manifest, out_handle, indent=2)
    return out_file

def read_manifest(in_file):
    """Read jobs back from a JSON manifest, returning (job_info, descriptors).
    """
    with open(in_file) as in_handle:
        try:
            manifest = json.load(in_handle)
        except ValueError as e:
            raise CorruptDescriptor(in_file, "invalid JSON: %s" % e)
    if not isinstance(manifest, dict) or not isinstance(manifest.get("jobs"), list):
        raise CorruptDescriptor(in_file, "no list of jobs")
    out = []
    seen = set()
    for i, job in enumerate(manifest.pop("jobs")):
        source = "%s#%s" % (in_file, i)
        if not isinstance(job, dict):
            raise CorruptDescriptor(source, "job is not a mapping")
        key = _to_key(source, job.get("seq", i), job.get("sample"), job.get("end"))
        if key.sequence_index in seen:
            raise CorruptDescriptor(source, "sequence index %s already used" % key.sequence_index)
        seen.add(key.sequence_index)
        counts, files = job.get("counts") or [], job.get("files") or []
        if len(counts) != len(files):
            raise CorruptDescriptor(source, "%s read counts for %s files" % (len(counts), len(files)))
        out.append(JobDescriptor(key, tuple(FileEntry(f, c) for f, c in zip(files, counts))))
    return manifest, out
