"""Public API of gitrepo.

.. code-block:: python

    import gitrepo

    parsed = gitrepo.parse("git@github.com:acme/widgets.git")
    results = gitrepo.clone_repos(
        ["https://github.com/acme/widgets.git"], "/tmp/repos"
    )
"""
import sys

from _gitrepo import __version__
from _gitrepo.config import Config, read_config
from _gitrepo.exception import (
    AlreadyExistsError,
    CloneError,
    CommandError,
    FileError,
    GitError,
    GitRepoException,
    InvalidRemoteUrlError,
    NotARepositoryError,
    OutputDecodeError,
    ParseError,
    RepoError,
    RepoPathExpansionError,
)
from _gitrepo.git import GitRunner
from _gitrepo.giturl import GIT_TRANSPORT_SCHEMES, GitUrl, Scheme, parse
from _gitrepo.main import run
from _gitrepo.repo import (
    GitRepo,
    clone_repo,
    clone_repos,
    force_clone_repo,
    inspect_repo,
)

__all__ = [
    "__version__",
    "AlreadyExistsError",
    "CloneError",
    "CommandError",
    "Config",
    "FileError",
    "GIT_TRANSPORT_SCHEMES",
    "GitError",
    "GitRepo",
    "GitRepoException",
    "GitRunner",
    "GitUrl",
    "InvalidRemoteUrlError",
    "NotARepositoryError",
    "OutputDecodeError",
    "ParseError",
    "RepoError",
    "RepoPathExpansionError",
    "Scheme",
    "clone_repo",
    "clone_repos",
    "force_clone_repo",
    "inspect_repo",
    "parse",
    "read_config",
    "run",
]


def main():
    import _gitrepo.main

    _gitrepo.main.main(sys.argv)


if __name__ == "__main__":
    main()
