import os

import pytest


DEMUX_HEADER = "Lane,SampleID,Index,# Reads,# Perfect Index Reads\n"
FASTQ_LIST_HEADER = "RGID,RGSM,RGLB,Lane,Read1File,Read2File\n"


@pytest.fixture
def write_file(tmpdir):
    """Write `content` to `name` inside the test directory, returning the path."""
    def _write(name, content):
        fname = os.path.join(str(tmpdir), name)
        if not os.path.exists(os.path.dirname(fname)):
            os.makedirs(os.path.dirname(fname))
        with open(fname, "w") as out_handle:
            out_handle.write(content)
        return fname
    return _write


@pytest.fixture
def demux_csv(write_file):
    """Demultiplex_Stats.csv with rows given as (lane, sample, reads)."""
    def _make(rows, name="Demultiplex_Stats.csv"):
        lines = ["%s,%s,ACGT,%s,0\n" % (lane, sample, reads) for lane, sample, reads in rows]
        return write_file(name, DEMUX_HEADER + "".join(lines))
    return _make


@pytest.fixture
def fastq_list_csv(write_file):
    """fastq_list.csv with rows given as (sample, lane, read1, read2)."""
    def _make(rows, name="fastq_list.csv"):
        lines = ["ACGT.%s,%s,UnknownLibrary,%s,%s,%s\n" % (lane, sample, lane, r1, r2)
                 for sample, lane, r1, r2 in rows]
        return write_file(name, FASTQ_LIST_HEADER + "".join(lines))
    return _make


@pytest.fixture
def write_stats(tmpdir):
    """Simulate batch workers depositing `{sample}_{end}.fastq.stats` results."""
    stats_dir = os.path.join(str(tmpdir), "stats")
    os.makedirs(stats_dir)

    def _write(sample, end, checksum, count):
        fname = os.path.join(stats_dir, "%s_%s.fastq.stats" % (sample, end))
        with open(fname, "w") as out_handle:
            out_handle.write("%s\t%s\n" % (checksum, count))
        return fname
    _write.stats_dir = stats_dir
    return _write
