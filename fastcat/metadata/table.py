"""Write the final per sample metadata table for a sequencing batch.
"""
from fastcat.distributed.objectstore import Location
from fastcat.distributed.transaction import file_transaction

HEADER = """\
## Metadata for HKGI Sequencing
## case_seq_lib_ID - Name of the sample (Ex - Barcode)
## fastq_forward_path - Forward fastq file path (Ex - Barcode_1.fastq.gz)
## fastq_reverse_path - Reverse fastq file path (Ex - Barcode_2.fastq.gz)
## fastq_forward_md5sum - Forward fastq file md5sum
## fastq_reverse_md5sum - Reverse fastq file md5sum
## number_of_reads - Total number of Reads
## read_length - Each read length
## instrument_platform - Platform used (Ex - ILLUMINA)
## instrument_model - Which Platform model used (Ex - Illumina HiSeq 2000)
## library_layout - Library Layout (Ex - Paired/Single)
## library_strategy - Library strategy used (Ex - WGS/WES)
## library_source - Library source (Ex - DNA/RNA)
## centre_name - Sequencing Centre name
## date - Sequencing upload date
"""

# read_length, instrument_platform, instrument_model, library_layout,
# library_strategy, library_source, centre_name, date
NUM_EMPTY_COLUMNS = 8

def format_row(record, fastq_prefix):
    prefix = fastq_prefix if isinstance(fastq_prefix, Location) else Location.parse(fastq_prefix)
    columns = [record.sample,
               str(prefix.join("%s_1.fastq.gz" % record.sample)),
               str(prefix.join("%s_2.fastq.gz" % record.sample)),
               record.forward_checksum,
               record.reverse_checksum,
               str(2 * record.read_count)]
    return "\t".join(columns + [""] * NUM_EMPTY_COLUMNS) + "\n"

def format_metadata(records, fastq_prefix, out_file, config=None):
    """Write the commented header and one line per record, replacing `out_file` only on success.
    """
    with file_transaction(config, out_file) as tx_out_file:
        with open(tx_out_file, "w", newline="") as out_handle:
            out_handle.write(HEADER)
            for record in records:
                out_handle.write(format_row(record, fastq_prefix))
    return out_file
