"""Utility functions that are shared by wrappers defined for git commands.

.. module:: git
    :synopsis: Utility functions that are shared by wrappers defined for git
        commands.
"""

import asyncio
import functools
import logging
import pathlib
import subprocess
import sys
from typing import Any, Callable, Iterable, List, Optional, Union

import daiquiri  # type: ignore
import more_itertools

from _gitrepo import exception

GIT_COMMAND = "git"

_LOGGER = daiquiri.getLogger(__name__)


class GitRunner:
    """Runs git commands and logs their output.

    Args:
        executable: The git executable to run.
        timeout: Timeout in seconds for a single command, or None to wait
            indefinitely.
        logger: The logger that command output is written to.
    """

    def __init__(
        self,
        executable: str = GIT_COMMAND,
        timeout: Optional[float] = None,
        logger: Optional[logging.LoggerAdapter] = None,
    ):
        self.executable = executable
        self.timeout = timeout
        self.logger = logger or _LOGGER

    def run(
        self, *args: str, cwd: Optional[Union[str, pathlib.Path]] = None
    ) -> subprocess.CompletedProcess:
        """Run a git command and capture its output.

        Args:
            args: Arguments to git.
            cwd: Working directory of the command.
        Returns:
            The completed process, regardless of exit status.
        Raises:
            :py:class:`exception.CommandError` if the command could not be
            run to completion.
        """
        command = [self.executable, *args]
        try:
            proc = subprocess.run(
                command,
                cwd=str(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise exception.CommandError(
                f"'{_command_str(command)}' timed out", command, exc
            ) from exc
        except OSError as exc:
            raise exception.CommandError(
                f"failed to run '{_command_str(command)}'", command, exc
            ) from exc

        log_output(proc, self.logger)
        return proc

    def output(
        self, *args: str, cwd: Optional[Union[str, pathlib.Path]] = None
    ) -> Optional[str]:
        """Run a git command and return its trimmed standard output.

        Returns:
            The output, or None if there was none.
        """
        proc = self.run(*args, cwd=cwd)
        return decode_output(proc.stdout, [self.executable, *args])

    def __repr__(self):
        return (
            f"{type(self).__name__}(executable={self.executable!r}, "
            f"timeout={self.timeout!r})"
        )


def decode_output(output: bytes, command: List[str]) -> Optional[str]:
    """Decode and trim command output.

    Args:
        output: Raw output of a command.
        command: The command that produced the output.
    Returns:
        The trimmed output, or None if it is empty.
    """
    try:
        decoded = output.decode("utf8").strip()
    except UnicodeDecodeError as exc:
        raise exception.OutputDecodeError(
            f"output of '{_command_str(command)}' is not valid UTF-8",
            command,
            exc,
        ) from exc
    return decoded or None


def log_output(
    proc: subprocess.CompletedProcess, logger: logging.LoggerAdapter
) -> None:
    """Log the output of a finished command. Standard output of successful
    commands goes to INFO, otherwise standard error goes to WARNING.
    """
    if proc.returncode == 0 and proc.stdout:
        logger.info(proc.stdout.decode("utf8", errors="replace").strip())
    elif proc.stderr:
        logger.warning(proc.stderr.decode("utf8", errors="replace").strip())


def get_runner(runner: Optional[GitRunner]) -> GitRunner:
    return runner if runner is not None else GitRunner()


def batch_execution(
    func: Callable[..., Any],
    arg_list: Iterable[Any],
    concurrent_tasks: int,
    *func_args,
    show_progress: bool = False,
    **func_kwargs,
) -> List[Any]:
    """Call a blocking function once per argument in ``arg_list``, with at
    most ``concurrent_tasks`` calls running at the same time. The
    func_args and func_kwargs are provided on each call.

    Results are returned in the order of ``arg_list``, regardless of the
    order in which the calls finish. The function is expected to not raise;
    any exception it raises is propagated after the current batch.

    Args:
        func: A blocking function whose first argument is taken from
            ``arg_list``.
        arg_list: A list of objects that are of the same type as the
            func's first argument.
        concurrent_tasks: Maximum amount of calls to run concurrently.
        show_progress: Whether to show a progress bar for each batch.
    Returns:
        A list of the return values of the calls.
    """
    if concurrent_tasks < 1:
        raise ValueError("concurrent_tasks must be larger than 0")

    # must not be called from within a running event loop
    return asyncio.run(
        batch_execution_async(
            func,
            arg_list,
            concurrent_tasks,
            *func_args,
            show_progress=show_progress,
            **func_kwargs,
        )
    )


async def batch_execution_async(
    func: Callable[..., Any],
    arg_list: Iterable[Any],
    concurrent_tasks: int,
    *func_args,
    show_progress: bool = False,
    **func_kwargs,
) -> List[Any]:
    import tqdm.asyncio  # type: ignore

    results = []
    loop = asyncio.get_running_loop()
    for batch, args_chunk in enumerate(
        more_itertools.ichunked(arg_list, concurrent_tasks), start=1
    ):
        futures = [
            loop.run_in_executor(
                None, functools.partial(func, arg, *func_args, **func_kwargs)
            )
            for arg in args_chunk
        ]
        results.extend(
            await tqdm.asyncio.tqdm_asyncio.gather(
                *futures,
                desc=f"Progress batch {batch}",
                file=sys.stdout,
                disable=not show_progress,
            )
        )

    return results


def _command_str(command: List[str]) -> str:
    return exception.sanitize(" ".join(command))
