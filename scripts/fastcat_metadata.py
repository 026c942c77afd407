#!/usr/bin/env python -Es
"""Fan out and fan in sequencing run metadata for batch FASTQ processing.

Usage:
  fastcat_metadata.py process-metadata <Demultiplex_Stats.csv> <fastq_list.csv> <job_dir>
  fastcat_metadata.py relist-metadata <metadata.tsv> <job_dir>
  fastcat_metadata.py consolidate-metadata <job_dir|manifest.json> <stats_dir> <out_file>
     --fastq-prefix location of output FASTQ files, defaults to $FASTCAT_S3URL_OUTPUT_PREFIX
     -c optional YAML configuration file
     -n number of parallel workers for reading job results
"""
import sys

from fastcat.pipeline.main import main

if __name__ == "__main__":
    sys.exit(main())
