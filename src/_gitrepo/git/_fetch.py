"""Wrapper functions for git commands that fetch from remote repository.

.. module:: git
    :synopsis: Wrapper functions for git commands that fetch from remote
        repository.
"""

import pathlib
from typing import Optional, Union

from _gitrepo import exception
from _gitrepo.git._util import GitRunner, get_runner


def clone(
    repo_url: str,
    dest: Union[str, pathlib.Path],
    runner: Optional[GitRunner] = None,
) -> None:
    """Clone a git repository with ``git clone``.

    Note that any secure tokens in the repo URL are stored in the cloned
    repository's configuration.

    Args:
        repo_url: Any remote reference git can clone from.
        dest: Directory to clone into. Must be empty or not exist.
        runner: The runner to execute git with.
    Raises:
        :py:class:`exception.GitError` if git exits with a non-zero status.
    """
    runner = get_runner(runner)
    proc = runner.run("clone", "--", repo_url, str(dest))
    if proc.returncode != 0:
        raise exception.GitError(
            f"Failed to clone {repo_url}", proc.returncode, proc.stderr
        )
    runner.logger.info(f"Cloned {exception.sanitize(repo_url)} into {dest}")
