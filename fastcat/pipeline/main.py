"""Main entry points for the fastcat metadata pipeline stages.
"""
import argparse
import sys

from fastcat.illumina import tables
from fastcat.log import logger, setup_local_logging
from fastcat.metadata import jobs, join, reconcile, table
from fastcat.metadata.errors import FastcatError
from fastcat.pipeline import config_utils
from fastcat.pipeline.version import __version__

def process_metadata(demux_file, fastq_list_file, job_dir, config, manifest=None, job_info=None):
    """Fan out a demultiplexed run into per sample, per read direction jobs.
    """
    demux, fqlist = join.fetch_tables(demux_file, fastq_list_file, config)
    by_sample = join.group_by_sample(demux, fqlist)
    join.log_summary(by_sample)
    descriptors = jobs.split_by_pairend(by_sample)
    jobs.write_descriptors(descriptors, job_dir, config)
    if manifest:
        jobs.write_manifest(manifest, descriptors, job_info, config)
    return descriptors

def relist_metadata(metadata_file, job_dir, config):
    """Fan out the samples listed in an existing metadata table.
    """
    descriptors = jobs.descriptors_from_metadata(tables.read_metadata_table(metadata_file))
    logger.info("number of samples: %s" % (len(descriptors) // 2))
    jobs.write_descriptors(descriptors, job_dir, config)
    return descriptors

def consolidate_metadata(job_source, stats_dir, out_file, fastq_prefix, config):
    """Fan in worker results and write the final metadata table.
    """
    keys = reconcile.load_job_keys(job_source)
    logger.info("Reconciling %s jobs from %s with stats in %s" % (len(keys), job_source, stats_dir))
    records = reconcile.compile_inputs(keys, stats_dir, config)
    table.format_metadata(records, fastq_prefix, out_file, config)
    logger.info("Wrote metadata for %s samples to %s" % (len(records), out_file))
    return out_file

# ## Command line

def _add_common_args(parser):
    parser.add_argument("-c", "--config", help="YAML configuration file (optional)")
    parser.add_argument("-n", "--numcores", type=int, default=0,
                        help="Number of parallel workers for file access")
    parser.add_argument("--verbose", action="store_true", default=False,
                        help="Log debugging details")
    return parser

def add_process_subparser(subparsers):
    parser = subparsers.add_parser("process-metadata",
                                   help="Create per sample and read direction jobs from demultiplexing output.")
    parser.add_argument("demux_file", help="Demultiplex_Stats.csv from the demultiplexing run")
    parser.add_argument("fastq_list_file", help="fastq_list.csv from the demultiplexing run")
    parser.add_argument("job_dir", help="Output directory for job files")
    parser.add_argument("--manifest", help="Also write all jobs to this JSON file")
    parser.add_argument("--input-prefix", help="Location of the input FASTQ files, recorded in the manifest")
    parser.add_argument("--job-id", help="Identifier of this job, recorded in the manifest")
    parser.add_argument("--batch-id", help="Identifier of the sequencing batch, recorded in the manifest")
    parser.set_defaults(func=_run_process)
    return _add_common_args(parser)

def add_relist_subparser(subparsers):
    parser = subparsers.add_parser("relist-metadata",
                                   help="Create per sample and read direction jobs from a metadata table.")
    parser.add_argument("metadata_file", help="Tab-delimited metadata table")
    parser.add_argument("job_dir", help="Output directory for job files")
    parser.set_defaults(func=_run_relist)
    return _add_common_args(parser)

def add_consolidate_subparser(subparsers):
    parser = subparsers.add_parser("consolidate-metadata",
                                   help="Combine job results into the final metadata table.")
    parser.add_argument("job_source", help="Directory of job files or JSON job manifest")
    parser.add_argument("stats_dir", help="Directory of per job stats files")
    parser.add_argument("out_file", help="Output metadata table")
    parser.add_argument("--fastq-prefix",
                        help="Location of the output FASTQ files (default: $%s)"
                        % config_utils.OUTPUT_PREFIX_ENV)
    parser.set_defaults(func=_run_consolidate)
    return _add_common_args(parser)

def _run_process(args, config):
    job_info = {"input_url_prefix": args.input_prefix, "job_id": args.job_id,
                "batch_id": args.batch_id}
    process_metadata(args.demux_file, args.fastq_list_file, args.job_dir, config,
                     manifest=args.manifest, job_info=job_info)

def _run_relist(args, config):
    relist_metadata(args.metadata_file, args.job_dir, config)

def _run_consolidate(args, config):
    prefix = config_utils.get_output_prefix(args.fastq_prefix)
    consolidate_metadata(args.job_source, args.stats_dir, args.out_file, prefix, config)

def parse_cl_args(in_args):
    description = "Fan out and fan in sequencing run metadata for batch FASTQ processing."
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("-v", "--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True
    for add_subparser in [add_process_subparser, add_relist_subparser, add_consolidate_subparser]:
        add_subparser(subparsers)
    return parser.parse_args(in_args)

def main(in_args=None):
    args = parse_cl_args(sys.argv[1:] if in_args is None else in_args)
    config = config_utils.load_system_config(args.config)
    config = config_utils.add_cores_to_config(config, args.numcores)
    config["verbose"] = args.verbose
    handler = setup_local_logging(config)
    try:
        args.func(args, config)
    except (FastcatError, ValueError, IOError) as e:
        logger.error(str(e))
        return 1
    finally:
        handler.pop_application()
        handler.close()
    return 0
