"""Errors raised while joining, emitting and reconciling run metadata.

All of them are fatal for the run: they describe malformed inputs or missing
worker outputs, never transient faults, so nothing here is retried.
"""


class FastcatError(Exception):
    """Base class for all pipeline failures."""


class MalformedTable(FastcatError, ValueError):
    def __init__(self, filename, message):
        self.filename = filename
        super(MalformedTable, self).__init__("%s: %s" % (filename, message))

# ## Join stage

class JoinError(FastcatError):
    pass


class StructuralMismatch(JoinError):
    def __init__(self, sample, demux_count, fastq_count):
        self.sample = sample
        self.demux_count = demux_count
        self.fastq_count = fastq_count
        super(StructuralMismatch, self).__init__(
            "inconsistent number of rows (%s != %s) for sample %s in demultiplex stats "
            "and fastq list" % (demux_count, fastq_count, sample))


class LaneMismatch(JoinError):
    def __init__(self, sample, demux_lane, fastq_lane):
        self.sample = sample
        self.demux_lane = demux_lane
        self.fastq_lane = fastq_lane
        super(LaneMismatch, self).__init__(
            "unmatched lanes (%s != %s) for sample %s in demultiplex stats and fastq list"
            % (demux_lane, fastq_lane, sample))


class MissingField(JoinError):
    def __init__(self, sample, field, lane=None):
        self.sample = sample
        self.field = field
        self.lane = lane
        where = "sample %s" % sample if lane is None else "sample %s lane %s" % (sample, lane)
        super(MissingField, self).__init__("%s is undefined for %s" % (field, where))


class UnevenReadCount(JoinError):
    def __init__(self, sample, read_count):
        self.sample = sample
        self.read_count = read_count
        super(UnevenReadCount, self).__init__(
            "expecting an even number of reads for paired sample %s, got %s"
            % (sample, read_count))

# ## Reconcile stage

class ReconcileError(FastcatError):
    pass


class CorruptDescriptor(ReconcileError):
    def __init__(self, source, message):
        self.source = source
        super(CorruptDescriptor, self).__init__("Corrupt job descriptor %s: %s" % (source, message))


class MissingResult(ReconcileError):
    def __init__(self, sample, direction, location, reason="not found"):
        self.sample = sample
        self.direction = direction
        self.location = location
        super(MissingResult, self).__init__(
            "No usable stats for %s end %s at %s: %s" % (sample, int(direction), location, reason))


class DuplicateDirection(ReconcileError):
    def __init__(self, sample, direction, first_index, second_index):
        self.sample = sample
        self.direction = direction
        self.indices = (first_index, second_index)
        super(DuplicateDirection, self).__init__(
            "Doubly defined end%s for %s: jobs %s and %s"
            % (int(direction), sample, first_index, second_index))


class IncompleteSample(ReconcileError):
    def __init__(self, sample, missing):
        self.sample = sample
        self.missing = missing
        super(IncompleteSample, self).__init__(
            "No end%s for %s" % (int(missing), sample))


class ReadCountMismatch(ReconcileError):
    def __init__(self, sample, forward_count, reverse_count):
        self.sample = sample
        self.forward_count = forward_count
        self.reverse_count = reverse_count
        super(ReadCountMismatch, self).__init__(
            "Disagreeing read counts for %s: end1=>%s vs. end2=>%s"
            % (sample, forward_count, reverse_count))
