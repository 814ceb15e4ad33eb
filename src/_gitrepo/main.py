"""Main entrypoint for the gitrepo CLI application.

.. module:: main
    :synopsis: Main entrypoint for the gitrepo CLI application.
"""
import contextlib
import logging
import pathlib
import sys
from typing import List, Optional, Union

import daiquiri  # type: ignore

from _gitrepo import cli
from _gitrepo import config
from _gitrepo import exception
from _gitrepo import log

LOGGER = daiquiri.getLogger(__name__)


def run(
    cmd: List[str], config_file: Optional[Union[str, pathlib.Path]] = None
) -> int:
    """Run gitrepo with the provided options. This function is mostly
    intended to be used for testing.

    Running this function is almost equivalent to running gitrepo from the
    CLI, except that there is no error handling at the top level, so
    exceptions are raised instead of just logged, and logging is not set up.

    Args:
        cmd: The command to run, e.g. ``["parse", "git@host:owner/repo"]``.
        config_file: Path to the configuration file. Takes precedence over
            any ``--config-file`` option in ``cmd``.
    Returns:
        The exit status of the command.
    """
    parsed_args = cli.parse_args(cmd)
    conf = config.read_config(config_file or parsed_args.config_file)
    return cli.dispatch_command(parsed_args, conf)


def main(sys_args: List[str]) -> None:
    """Start the gitrepo CLI. Always exits the process.

    Args:
        sys_args: Arguments from the command line.
    """
    show_traceback = "--traceback" in sys_args
    with _main_error_handler(show_traceback):
        sys.exit(_run_cli(sys_args))


def _run_cli(sys_args: List[str]) -> int:
    args = sys_args[1:]  # drop the name of the program
    verbose = "-v" in args or "--verbose" in args
    log.setup_logging(
        terminal_level=logging.INFO if verbose else logging.WARNING
    )
    return run(args)


@contextlib.contextmanager
def _main_error_handler(traceback: bool):
    try:
        yield
    except exception.GitRepoException as exc:
        LOGGER.error(f"{exc.__class__.__name__}: {exc}")
        if traceback:
            LOGGER.exception("Critical exception")
        sys.exit(1)
    except Exception as exc:
        LOGGER.error(
            f"gitrepo exited unexpectedly: {exc.__class__.__name__}: {exc}"
        )
        if traceback:
            LOGGER.exception("Critical exception")
        sys.exit(1)
