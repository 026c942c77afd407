"""Utility functionality for logging.
"""
import os
import sys

import logbook

from fastcat import utils

LOG_NAME = "fastcat"

def get_log_dir(config):
    d = config.get("log_dir")
    return d

logger = logbook.Logger(LOG_NAME)

class CloseableNestedSetup(logbook.NestedSetup):
    def close(self):
        for obj in self.objects:
            if hasattr(obj, "close"):
                obj.close()

def _create_log_handler(config):
    logbook.set_datetime_format("utc")
    handlers = [logbook.NullHandler()]
    format_str = "".join(["[{record.time:%Y-%m-%dT%H:%MZ}] " if config.get("include_time", True) else "",
                          "{record.level_name}: {record.message}"])

    log_dir = get_log_dir(config)
    if log_dir:
        utils.safe_makedir(log_dir)
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s.log" % LOG_NAME),
                                            format_string=format_str, level="INFO"))
        handlers.append(logbook.FileHandler(os.path.join(log_dir, "%s-debug.log" % LOG_NAME),
                                            format_string=format_str, level="DEBUG", bubble=True))
    level = "DEBUG" if config.get("verbose") else "INFO"
    handlers.append(logbook.StreamHandler(sys.stderr, format_string=format_str, level=level,
                                          bubble=True))
    return CloseableNestedSetup(handlers)

def setup_local_logging(config=None):
    """Setup logging for a single pipeline run, directing messages to stderr and `log_dir`.

    Returns the handler stack, already pushed for the current thread and any
    worker threads started from it. Call `pop_application` and `close` when
    the run finishes.
    """
    if config is None: config = {}
    handler = _create_log_handler(config)
    handler.push_application()
    return handler
