"""Decode the delimited tables describing a demultiplexed sequencing run.

Handles the two CSV outputs of Illumina demultiplexing (bcl2fastq/BCL Convert
and DRAGEN): `Demultiplex_Stats.csv` with per sample and lane read counts and
`fastq_list.csv` with the FASTQ files written per sample and lane. Also reads
back the tab-delimited metadata tables produced at the end of the pipeline.
"""
import collections
import csv
import io
import math
import re

from fastcat.log import logger
from fastcat.metadata.errors import MalformedTable

DemuxRow = collections.namedtuple("DemuxRow", ["sample", "lane", "read_count"])
FastqRow = collections.namedtuple("FastqRow", ["sample", "lane", "read1_path", "read2_path"])

DEMUX_COLUMNS = {"sample": "SampleID", "lane": "Lane", "read_count": "# Reads"}
FASTQ_LIST_COLUMNS = {"sample": "RGSM", "lane": "Lane",
                      "read1": "Read1File", "read2": "Read2File"}

def read_demux_stats(in_file, columns=None):
    """Parse per sample and lane read counts from a demultiplexing stats CSV.
    """
    columns = dict(DEMUX_COLUMNS, **(columns or {}))
    out = []
    for line_num, rec in _read_csv(in_file, columns.values()):
        sample = _get_sample(in_file, line_num, rec[columns["sample"]])
        out.append(DemuxRow(sample, _get_lane(in_file, line_num, rec[columns["lane"]]),
                            to_read_count(rec[columns["read_count"]], sample)))
    return out

def read_fastq_list(in_file, columns=None):
    """Parse FASTQ file locations per sample and lane from a fastq list CSV.

    Empty file cells are kept as None; the join decides whether that is fatal.
    """
    columns = dict(FASTQ_LIST_COLUMNS, **(columns or {}))
    out = []
    for line_num, rec in _read_csv(in_file, columns.values()):
        out.append(FastqRow(_get_sample(in_file, line_num, rec[columns["sample"]]),
                            _get_lane(in_file, line_num, rec[columns["lane"]]),
                            rec[columns["read1"]] or None,
                            rec[columns["read2"]] or None))
    return out

def _read_csv(in_file, required):
    with io.open(in_file, newline="") as in_handle:
        reader = csv.DictReader(in_handle)
        missing = [c for c in required if c not in (reader.fieldnames or [])]
        if missing:
            raise MalformedTable(in_file, "missing required columns: %s" % ", ".join(missing))
        for rec in reader:
            if not any(v for v in rec.values() if v):  # empty lines
                continue
            yield reader.line_num, rec

def _get_sample(in_file, line_num, val):
    if not val or not val.strip():
        raise MalformedTable(in_file, "line %s: missing sample id" % line_num)
    return val.strip()

def _get_lane(in_file, line_num, val):
    try:
        return int(val)
    except (TypeError, ValueError):
        raise MalformedTable(in_file, "line %s: lane is not an integer: %r" % (line_num, val))

def to_read_count(val, sample=None):
    """Leniently coerce a read count, treating missing or unparseable values as zero.
    """
    try:
        count = float(val)
    except (TypeError, ValueError):
        count = float("nan")
    if not math.isfinite(count):
        logger.warning("Read count %r for sample %s is not a number, using 0" % (val, sample))
        return 0
    if count < 0:
        logger.warning("Read count %r for sample %s is negative, using 0" % (val, sample))
        return 0
    if count != int(count):
        logger.warning("Read count %r for sample %s is not a whole number, using %s"
                       % (val, sample, int(count)))
    return int(count)

# ## Final metadata tables

METADATA_SAMPLE_COLUMN = "case_seq_lib_ID"

def read_metadata_table(in_file):
    """Read a tab-delimited metadata table into dictionaries keyed by column.

    `#` lines are comments. The first other line is the header when it names
    the sample column; otherwise column names come from the `## name - text`
    comment header written by `fastcat.metadata.table`.
    """
    comment_cols = []
    lines = []
    with io.open(in_file, newline="") as in_handle:
        for line in in_handle:
            if line.startswith("#"):
                m = re.match(r"^##\s*(\S+)\s+-\s", line)
                if m:
                    comment_cols.append(m.group(1))
            elif line.strip():
                lines.append(line)
    rows = list(csv.reader(lines, delimiter="\t"))
    if rows and METADATA_SAMPLE_COLUMN in rows[0]:
        header, rows = rows[0], rows[1:]
    elif comment_cols:
        header = comment_cols
    else:
        raise MalformedTable(in_file, "no header line or column description comments")
    out = []
    for row in rows:
        row = row + [None] * (len(header) - len(row))
        out.append(collections.OrderedDict((k, v if v != "" else None)
                                           for k, v in zip(header, row)))
    return out
