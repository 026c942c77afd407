"""Handle file based transactions so no artifact is ever left half written.

Output files are written to temporary locations during processing and moved
to the final location when finished. A failure anywhere inside the
transaction removes the temporary files and leaves any previous output
untouched.
"""
import contextlib
import os
import shutil
import tempfile

import toolz as tz

from fastcat import utils


DEFAULT_TMP = 'fastcattx'


@contextlib.contextmanager
def tx_tmpdir(config=None, base_dir=None, remove=True):
    """Context manager to create and remove a transactional temporary directory.

    Uses the configured `resources: tmp: dir` when present, otherwise a
    hidden `.fastcattx-*` directory inside `base_dir` (the current directory
    by default).
    """
    base_dir = base_dir or os.getcwd()
    tmpdir_base = utils.get_abspath(_get_base_tmpdir(config, base_dir))
    utils.safe_makedir(tmpdir_base)
    tmp_dir = tempfile.mkdtemp(prefix=".%s-" % DEFAULT_TMP, dir=tmpdir_base)
    try:
        yield tmp_dir
    finally:
        if remove:
            utils.remove_safe(tmp_dir)


def _get_base_tmpdir(config, fallback_base_dir):
    config_tmpdir = tz.get_in(("resources", "tmp", "dir"), config or {})
    return config_tmpdir or fallback_base_dir


@contextlib.contextmanager
def file_transaction(*config_and_files):
    """Wrap file generation in a transaction, moving to output if finishes.

    The initial argument can be a `config` dictionary, used to identify
    global settings for temporary directories.
    """
    with _flatten_plus_safe(config_and_files) as (safe_names, orig_names):
        # remove any half-finished transactions
        for safe in safe_names:
            utils.remove_safe(safe)
        if len(safe_names) == 1:
            yield safe_names[0]
        else:
            yield tuple(safe_names)

        for safe, orig in zip(safe_names, orig_names):
            if os.path.exists(safe):
                _move_tmp_files(safe, orig)


def _move_tmp_files(safe, orig):
    utils.safe_makedir(os.path.dirname(orig))
    # If we are rolling back a directory and it already exists
    # this will avoid making a nested set of directories
    if os.path.isdir(orig) and os.path.isdir(safe):
        utils.remove_safe(orig)
    _move_file_with_sizecheck(safe, orig)


def _move_file_with_sizecheck(tx_file, final_file):
    """Move transaction file to final location,
       with size checks avoiding failed transfers.

       Creates an empty file with '.fastcattmp' extension in the destination
       location, which serves as a flag. If a file like that is present,
       it means that transaction didn't finish successfully.
    """
    tmp_file = final_file + ".fastcattmp"
    open(tmp_file, 'wb').close()

    want_size = utils.get_size(tx_file)
    shutil.move(tx_file, final_file)
    transfer_size = utils.get_size(final_file)

    if want_size != transfer_size:
        raise IOError(
            'File copy error: file or directory on temporary storage ({}) '
            'size {} bytes does not equal size after transfer to final '
            'location ({}) size {} bytes'.format(
                tx_file, want_size, final_file, transfer_size))
    utils.remove_safe(tmp_file)


@contextlib.contextmanager
def _flatten_plus_safe(config_and_files):
    """Flatten names of files and create temporary file names.

    Temporary files live next to the first output so the final move stays on
    one filesystem.
    """
    config, rollback_files = _normalize_args(config_and_files)
    base_dir = os.path.dirname(os.path.abspath(rollback_files[0]))
    utils.safe_makedir(base_dir)
    with tx_tmpdir(config, base_dir) as tmpdir:
        tx_files = [os.path.join(tmpdir, os.path.basename(f))
                    for f in rollback_files]
        yield tx_files, rollback_files


def _normalize_args(config_and_files):
    config, files = _get_args(config_and_files)
    rollback_files = [f for f in _flatten(files) if f]
    return (config, rollback_files)


def _get_args(config_and_files):
    if isinstance(config_and_files[0], dict):
        return config_and_files[0], config_and_files[1:]
    return None, config_and_files


def _flatten(iterable):
    for elem in iterable:
        if isinstance(elem, (tuple, list)):
            for i in elem:
                yield i
        else:
            yield elem
