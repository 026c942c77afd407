"""High level code for driving the metadata pipeline.

This structures processing into the following stages:

  - process-metadata: join demultiplexing stats with FASTQ locations and
    write one job per sample and read direction for batch workers.
  - relist-metadata: write jobs for the samples of an existing metadata table.
  - consolidate-metadata: reconcile worker results into the final table.
"""
