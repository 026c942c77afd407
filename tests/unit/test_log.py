import os

from fastcat.log import logger, setup_local_logging


def test_logs_to_configured_directory(tmpdir):
    log_dir = str(tmpdir.join("log"))
    handler = setup_local_logging({"log_dir": log_dir})
    try:
        logger.info("number of samples: 3")
        logger.debug("parallel fetch_stats: 6 items on 4 workers")
    finally:
        handler.pop_application()
        handler.close()
    with open(os.path.join(log_dir, "fastcat.log")) as in_handle:
        info = in_handle.read()
    with open(os.path.join(log_dir, "fastcat-debug.log")) as in_handle:
        debug = in_handle.read()
    assert "number of samples: 3" in info
    assert "parallel fetch_stats" not in info
    assert "parallel fetch_stats" in debug
