"""Wrapper functions for git commands that perform local git operations.

.. module:: git
    :synopsis: Wrapper functions for git commands that perform local git
        operations, such as initializing a git repository, reading remotes,
        etc.
"""

import pathlib
from typing import Optional, Union

from _gitrepo import exception
from _gitrepo.git._util import GitRunner, get_runner

PathLike = Union[str, pathlib.Path]


def git_init(dirpath: PathLike, runner: Optional[GitRunner] = None) -> None:
    """Initialize a directory as a git repository."""
    _check_call(get_runner(runner), "init", cwd=dirpath)


def add_remote(
    remote_name: str,
    remote_url: str,
    repo_path: PathLike,
    runner: Optional[GitRunner] = None,
) -> None:
    """Add a remote to a repository.

    Args:
        remote_name: Name of the remote, e.g. ``origin``.
        remote_url: URL of the remote.
        repo_path: Path to the repository.
        runner: The runner to execute git with.
    """
    _check_call(
        get_runner(runner),
        "remote",
        "add",
        remote_name,
        remote_url,
        cwd=repo_path,
    )


def get_remote_url(
    remote_name: str, repo_path: PathLike, runner: Optional[GitRunner] = None
) -> Optional[str]:
    """Get the URL of a remote.

    Args:
        remote_name: Name of the remote, e.g. ``origin``.
        repo_path: Path to the repository.
        runner: The runner to execute git with.
    Returns:
        The URL of the remote, or None if there is no such remote.
    """
    return get_runner(runner).output(
        "remote", "get-url", remote_name, cwd=repo_path
    )


def is_inside_work_tree(
    path: PathLike, runner: Optional[GitRunner] = None
) -> bool:
    """Check if a directory is inside a git working tree.

    Any failure to run the check counts as not being inside a working tree.

    Args:
        path: Path to a local directory.
        runner: The runner to execute git with.
    Returns:
        True if the directory is inside a git working tree.
    """
    runner = get_runner(runner)
    try:
        output = runner.output(
            "rev-parse", "--is-inside-work-tree", cwd=path
        )
    except exception.CommandError as exc:
        runner.logger.debug(
            f"could not check if {path} is a work tree: {exc}"
        )
        return False
    return output == "true"


def status(
    repo_path: PathLike, runner: Optional[GitRunner] = None
) -> Optional[str]:
    return get_runner(runner).output("status", cwd=repo_path)


def log(
    repo_path: PathLike, runner: Optional[GitRunner] = None
) -> Optional[str]:
    return get_runner(runner).output("log", cwd=repo_path)


def _check_call(runner: GitRunner, *args: str, cwd: PathLike) -> None:
    proc = runner.run(*args, cwd=cwd)
    if proc.returncode != 0:
        raise exception.GitError(
            f"'git {' '.join(args)}' failed in {cwd}",
            proc.returncode,
            proc.stderr,
        )
