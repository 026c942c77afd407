import json
import os

import pytest

from fastcat.metadata import jobs
from fastcat.metadata.errors import CorruptDescriptor, MissingField, UnevenReadCount
from fastcat.metadata.jobs import Direction, FileEntry, JobDescriptor, JobKey
from fastcat.metadata.join import LaneEntry, SampleAggregate


def _aggregate(sample, order, lanes):
    return SampleAggregate(sample, order, tuple(LaneEntry(lane, n, "%s_%s_1.fq" % (sample, lane),
                                                          "%s_%s_2.fq" % (sample, lane))
                                                for lane, n in lanes))


def test_splits_sample_into_forward_then_reverse():
    agg = SampleAggregate("S1", 0, (LaneEntry(1, 100, "a_1.fq", "a_2.fq"),
                                    LaneEntry(2, 50, "b_1.fq", "b_2.fq")))
    assert jobs.split_by_pairend([agg]) == [
        JobDescriptor(JobKey(0, "S1", Direction.FORWARD),
                      (FileEntry("a_1.fq", 100), FileEntry("b_1.fq", 50))),
        JobDescriptor(JobKey(1, "S1", Direction.REVERSE),
                      (FileEntry("a_2.fq", 100), FileEntry("b_2.fq", 50))),
    ]


def test_sequence_indices_pair_up_per_sample():
    by_sample = [_aggregate("S%s" % i, i, [(1, 10), (2, 20)]) for i in range(5)]
    descriptors = jobs.split_by_pairend(by_sample)
    assert len(descriptors) == 2 * len(by_sample)
    assert [d.key.sequence_index for d in descriptors] == list(range(10))
    for i, agg in enumerate(by_sample):
        fwd, rev = descriptors[2 * i], descriptors[2 * i + 1]
        assert fwd.key.sample == rev.key.sample == agg.sample
        assert fwd.key.direction == Direction.FORWARD
        assert rev.key.direction == Direction.REVERSE
        assert rev.key.sequence_index == fwd.key.sequence_index + 1


def test_emission_is_deterministic():
    by_sample = [_aggregate("B", 0, [(1, 1)]), _aggregate("A", 1, [(2, 2)])]
    assert jobs.split_by_pairend(by_sample) == jobs.split_by_pairend(by_sample)


def test_writes_data_and_file_list_artifacts(tmpdir):
    job_dir = str(tmpdir.join("jobs"))
    agg = SampleAggregate("S1", 0, (LaneEntry(1, 100, "a_1.fq", "a_2.fq"),
                                    LaneEntry(2, 50, "b_1.fq", "b_2.fq")))
    written = jobs.write_descriptors(jobs.split_by_pairend([agg]), job_dir)
    assert written == [(os.path.join(job_dir, "job.0.data"), os.path.join(job_dir, "job.0.files")),
                       (os.path.join(job_dir, "job.1.data"), os.path.join(job_dir, "job.1.files"))]
    with open(os.path.join(job_dir, "job.1.data")) as in_handle:
        assert in_handle.read() == "seq\t1\nlibid\tS1\nend\t2\n"
    with open(os.path.join(job_dir, "job.0.files")) as in_handle:
        assert in_handle.read() == "100\ta_1.fq\n50\tb_1.fq\n"
    assert sorted(os.listdir(job_dir)) == ["job.0.data", "job.0.files", "job.1.data", "job.1.files"]


def test_lists_written_keys_in_sequence_order(tmpdir):
    job_dir = str(tmpdir)
    by_sample = [_aggregate("S%s" % i, i, [(1, 10)]) for i in range(6)]
    descriptors = jobs.split_by_pairend(by_sample)
    jobs.write_descriptors(descriptors, job_dir)
    assert jobs.list_descriptor_keys(job_dir) == [d.key for d in descriptors]


def test_rewriting_job_dir_removes_earlier_jobs(tmpdir):
    job_dir = str(tmpdir.join("jobs"))
    jobs.write_descriptors(jobs.split_by_pairend([_aggregate("S1", 0, [(1, 10)]),
                                                  _aggregate("S2", 1, [(1, 20)])]), job_dir)
    rerun = jobs.split_by_pairend([_aggregate("S9", 0, [(1, 30)])])
    jobs.write_descriptors(rerun, job_dir)
    assert jobs.list_descriptor_keys(job_dir) == [d.key for d in rerun]
    assert sorted(os.listdir(job_dir)) == ["job.0.data", "job.0.files", "job.1.data", "job.1.files"]


def test_key_comes_from_content_not_file_name(write_file):
    fname = write_file("job.7.data", "seq\t3\nlibid\tS1\nend\t1\n")
    assert jobs.read_descriptor_key(fname) == JobKey(3, "S1", Direction.FORWARD)


@pytest.mark.parametrize("content", [
    "libid\tS1\nend\t1\n",
    "seq\t0\nend\t1\n",
    "seq\t0\nlibid\tS1\n",
    "seq\t0\nlibid\tS1\nend\t3\n",
    "seq\tzero\nlibid\tS1\nend\t1\n",
    "seq\t-1\nlibid\tS1\nend\t1\n",
])
def test_corrupt_descriptor(write_file, content):
    with pytest.raises(CorruptDescriptor):
        jobs.read_descriptor_key(write_file("job.0.data", content))


def test_duplicate_sequence_index_is_corrupt(write_file, tmpdir):
    write_file("job.0.data", "seq\t0\nlibid\tS1\nend\t1\n")
    write_file("job.1.data", "seq\t0\nlibid\tS2\nend\t1\n")
    with pytest.raises(CorruptDescriptor):
        jobs.list_descriptor_keys(str(tmpdir))


def test_manifest_round_trip(tmpdir):
    out_file = str(tmpdir.join("jobs.json"))
    descriptors = jobs.split_by_pairend([_aggregate("S1", 0, [(1, 10), (2, 20)])])
    info = {"input_url_prefix": "s3://in/run1", "job_id": "j1", "batch_id": "b1"}
    jobs.write_manifest(out_file, descriptors, info)
    with open(out_file) as in_handle:
        raw = json.load(in_handle)
    assert raw["batch_id"] == "b1"
    assert raw["jobs"][1] == {"seq": 1, "sample": "S1", "end": 2, "counts": [10, 20],
                              "files": ["S1_1_2.fq", "S1_2_2.fq"]}
    job_info, loaded = jobs.read_manifest(out_file)
    assert job_info == info
    assert loaded == descriptors


def test_manifest_with_unknown_end_is_corrupt(write_file):
    fname = write_file("jobs.json", json.dumps({"jobs": [{"seq": 0, "sample": "S1", "end": 5,
                                                          "counts": [], "files": []}]}))
    with pytest.raises(CorruptDescriptor):
        jobs.read_manifest(fname)


def test_descriptors_from_metadata_halves_pair_read_counts():
    rows = [{"case_seq_lib_ID": "L2", "fastq_forward_path": "x_1", "fastq_reverse_path": "x_2",
             "number_of_reads": "300"},
            {"case_seq_lib_ID": "L1", "fastq_forward_path": "y_1", "fastq_reverse_path": "y_2",
             "number_of_reads": None},
            {"case_seq_lib_ID": "L2", "fastq_forward_path": "z_1", "fastq_reverse_path": "z_2",
             "number_of_reads": "40"}]
    assert jobs.descriptors_from_metadata(rows) == [
        JobDescriptor(JobKey(0, "L2", Direction.FORWARD), (FileEntry("x_1", 150), FileEntry("z_1", 20))),
        JobDescriptor(JobKey(1, "L2", Direction.REVERSE), (FileEntry("x_2", 150), FileEntry("z_2", 20))),
        JobDescriptor(JobKey(2, "L1", Direction.FORWARD), (FileEntry("y_1", 0),)),
        JobDescriptor(JobKey(3, "L1", Direction.REVERSE), (FileEntry("y_2", 0),)),
    ]


def test_descriptors_from_metadata_rejects_odd_read_counts():
    rows = [{"case_seq_lib_ID": "L1", "fastq_forward_path": "a", "fastq_reverse_path": "b",
             "number_of_reads": "301"}]
    with pytest.raises(UnevenReadCount):
        jobs.descriptors_from_metadata(rows)


def test_descriptors_from_metadata_requires_both_paths():
    rows = [{"case_seq_lib_ID": "L1", "fastq_forward_path": "a", "fastq_reverse_path": None}]
    with pytest.raises(MissingField) as excinfo:
        jobs.descriptors_from_metadata(rows)
    assert excinfo.value.field == "fastq_reverse_path"


@pytest.mark.parametrize("reads", ["inf", "-Infinity", "NaN"])
def test_descriptors_from_metadata_non_finite_read_counts_are_zero(reads):
    rows = [{"case_seq_lib_ID": "L1", "fastq_forward_path": "a", "fastq_reverse_path": "b",
             "number_of_reads": reads}]
    assert [d.file_list for d in jobs.descriptors_from_metadata(rows)] == [(FileEntry("a", 0),),
                                                                           (FileEntry("b", 0),)]
