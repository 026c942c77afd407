"""Loads configurations from .yaml files and expands environment variables.
"""
import copy
import os

import toolz as tz
import yaml

DEFAULTS = {
    "log_dir": None,
    "algorithm": {"num_cores": 4},
    "columns": {"demux": {"sample": "SampleID", "lane": "Lane", "read_count": "# Reads"},
                "fastq_list": {"sample": "RGSM", "lane": "Lane",
                               "read1": "Read1File", "read2": "Read2File"}},
    "stats": {"template": "{sample}_{end}.fastq.stats"},
}

# Location of output FASTQs when not given on the command line
OUTPUT_PREFIX_ENV = "FASTCAT_S3URL_OUTPUT_PREFIX"

def load_system_config(config_file=None):
    """Load the optional fastcat YAML configuration, merged over defaults.
    """
    config = load_config(config_file) if config_file else {}
    return tz.merge_with(_merge_values, copy.deepcopy(DEFAULTS), config)

def _merge_values(vals):
    if all(isinstance(v, dict) for v in vals):
        return tz.merge_with(_merge_values, *vals)
    return vals[-1]

def load_config(config_file):
    """Load YAML config file, replacing environmental variables.
    """
    with open(config_file) as in_handle:
        config = yaml.safe_load(in_handle) or {}
    if not isinstance(config, dict):
        raise ValueError("Expected a mapping at the top level of %s" % config_file)
    return _expand_paths(config)

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(config[field], dict):
            config[field] = _expand_paths(config[field])
        else:
            config[field] = expand_path(setting)
    return config

def expand_path(path):
    """ Combines os.path.expandvars with replacing ~ with $HOME.
    """
    try:
        return os.path.expandvars(path.replace("~", "$HOME"))
    except AttributeError:
        return path

def add_cores_to_config(config, cores):
    """Override the number of parallel workers, when specified.
    """
    if not cores:
        return config
    config = copy.deepcopy(config)
    config["algorithm"]["num_cores"] = int(cores)
    return config

def get_output_prefix(fastq_prefix=None):
    prefix = fastq_prefix or os.environ.get(OUTPUT_PREFIX_ENV)
    if not prefix:
        raise ValueError("FASTQ location prefix required: use --fastq-prefix or set %s"
                         % OUTPUT_PREFIX_ENV)
    return prefix
