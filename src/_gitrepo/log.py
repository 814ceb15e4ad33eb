"""Logging setup for the gitrepo CLI.

Library code only obtains loggers with ``daiquiri.getLogger``; configuring
handlers is left to applications, such as the CLI, which call
:py:func:`setup_logging`.

.. module:: log
    :synopsis: Logging setup and filtering of secure tokens from log output.
"""
import logging
import os
import pathlib
import sys

import daiquiri  # type: ignore

import _gitrepo
from _gitrepo import constants
from _gitrepo import exception

_token_filter_installed = False


def setup_logging(
    terminal_level: int = logging.WARNING,
    log_dir: pathlib.Path = constants.LOG_DIR,
) -> None:
    """Setup logging by creating the required log directory and setting up
    the logger.

    Args:
        terminal_level: The logging level to use for printing to stderr.
        log_dir: Directory to put the log file in.
    """
    logfile = log_dir / f"{_gitrepo._external_package_name}.log"
    try:
        os.makedirs(str(log_dir), exist_ok=True)
    except OSError as exc:
        raise exception.FileError(
            f"can't create log directory at {log_dir}"
        ) from exc
    _ensure_size_less(logfile, max_size=constants.MAX_LOGFILE_SIZE)

    daiquiri.setup(
        level=logging.DEBUG,
        outputs=(
            daiquiri.output.Stream(
                sys.stderr,
                formatter=daiquiri.formatter.ColorFormatter(
                    fmt="%(color)s[%(levelname)s] %(message)s%(color_stop)s"
                ),
                level=terminal_level,
            ),
            daiquiri.output.File(
                filename=str(logfile),
                formatter=daiquiri.formatter.ColorFormatter(
                    fmt="%(asctime)s [PID %(process)d] [%(levelname)s] "
                    "%(name)s -> %(message)s"
                ),
                level=logging.DEBUG,
            ),
        ),
    )
    filter_tokens()


def filter_tokens() -> None:
    """Filter out any secure tokens from log output."""
    global _token_filter_installed
    if _token_filter_installed:
        return

    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        if isinstance(record.msg, str):
            # from URLs (e.g. git error messages)
            record.msg = exception.sanitize(record.msg)
        return record

    logging.setLogRecordFactory(record_factory)
    _token_filter_installed = True


def _ensure_size_less(path: pathlib.Path, max_size: int) -> None:
    """Drop the oldest lines of the file so that it is at most about half of
    ``max_size``, if it has grown to ``max_size`` or beyond.
    """
    if not path.exists():
        return
    file_size = path.stat().st_size
    if file_size >= max_size:
        target = file_size - max_size // 2
        with open(path, mode="rb") as f:
            cur = target
            f.seek(cur)
            while f.read(1) != b"\n" and cur < file_size:
                cur += 1
                f.seek(cur)

            with open(
                path.parent / (path.name + ".tmp"), mode="wb"
            ) as tmp_file:
                for line in f.readlines():
                    tmp_file.write(line)

        path.unlink()
        pathlib.Path(tmp_file.name).rename(path)
