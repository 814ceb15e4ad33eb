"""Modules for all custom gitrepo exceptions.

All exceptions extend the :py:class:`GitRepoException` base class, which
itself extends :py:class:`Exception`. In other words, exceptions raised within
``gitrepo`` can all be caught by catching :py:class:`GitRepoException`.

Exceptions that wrap another failure keep the original on an attribute
(``cause`` or ``source``), and are also raised with ``raise ... from`` so
that the original traceback is chained.

.. module:: exception
    :synopsis: Custom exceptions for _gitrepo.
"""
import os
import pathlib
import re
import sys
from typing import Optional, Sequence, Union

_CREDENTIALS_PATTERN = re.compile(r"([a-zA-Z][a-zA-Z0-9+.-]*://)[^/\s@]*@")


def sanitize(text: str) -> str:
    """Remove user names and tokens embedded in URLs.

    Args:
        text: Any text that may contain URLs.
    Returns:
        The text with the userinfo part of all URLs removed.
    """
    return _CREDENTIALS_PATTERN.sub(r"\1", text)


class GitRepoException(Exception):
    """Base exception for all gitrepo exceptions."""

    def __init__(self, msg="", *args):
        super().__init__(msg, *args)
        self.msg = msg

    def __str__(self):
        return self.msg

    def __repr__(self):
        return "<{}(msg='{}')>".format(type(self).__name__, str(self.msg))


class ParseError(GitRepoException):
    """Raise when a remote reference can't be parsed."""

    def __init__(self, msg: str, url: str):
        super().__init__(msg)
        self.url = url


class FileError(GitRepoException):
    """Raise when reading or writing to a file errors out."""


class CommandError(GitRepoException):
    """Raise when a command can't be run to completion, e.g. because the
    executable is missing or the command timed out.
    """

    def __init__(
        self, msg: str, command: Sequence[str], cause: Optional[Exception]
    ):
        super().__init__(sanitize(f"{msg}: {cause}" if cause else msg))
        self.command = list(command)
        self.cause = cause


class OutputDecodeError(CommandError):
    """Raise when the output of a command is not valid UTF-8."""


class GitError(GitRepoException):
    """A generic error to raise when a git command exits with a non-zero exit
    status.
    """

    def __init__(self, msg: str, returncode: int, stderr: bytes):
        stderr_decoded = (
            stderr.decode(encoding=sys.getdefaultencoding(), errors="replace")
            or ""
        )
        fatal = re.findall("fatal:.*", stderr_decoded)
        # either fatal reason or first line of error message
        err = fatal[0] if fatal else stderr_decoded.split(os.linesep)[0]

        msg_ = ("{}{}return code: {}{}{}").format(
            sanitize(msg), os.linesep, returncode, os.linesep, sanitize(err)
        )
        super().__init__(msg_)
        self.returncode = returncode
        self.stderr = stderr


class RepoError(GitRepoException):
    """Base class for errors raised when cloning or inspecting a
    repository.
    """


class InvalidRemoteUrlError(RepoError):
    """Raise when a remote in a batch can't be parsed, or does not use a
    scheme that git can clone from.
    """

    def __init__(self, url: str, reason: str = ""):
        msg = f"invalid remote url: {sanitize(url)}"
        super().__init__(f"{msg} ({reason})" if reason else msg)
        self.url = url


class AlreadyExistsError(RepoError):
    """Raise when the clone destination is already inside a git repo."""

    def __init__(self, path: Union[str, pathlib.Path]):
        super().__init__(
            f"failed to clone git repo into {path}, "
            "this path is already a git repo"
        )
        self.path = pathlib.Path(path)


class CloneError(RepoError):
    """Raise when git fails to clone a remote."""

    def __init__(
        self,
        remote_url: str,
        repo_path: Union[str, pathlib.Path],
        source: GitRepoException,
    ):
        super().__init__(
            f"there was an error while cloning {sanitize(remote_url)} "
            f"to {repo_path}: {source}"
        )
        self.remote_url = remote_url
        self.repo_path = pathlib.Path(repo_path)
        self.source = source


class RepoPathExpansionError(RepoError):
    """Raise when a repo path can't be created or canonicalized."""

    def __init__(self, path: Union[str, pathlib.Path], cause: Exception):
        super().__init__(
            f"failed to expand provided repo path {path}: {cause}"
        )
        self.path = pathlib.Path(path)
        self.cause = cause


class NotARepositoryError(RepoError):
    """Raise when an inspected path is not inside a git working tree."""

    def __init__(self, path: Union[str, pathlib.Path]):
        super().__init__(f"{path} is not inside a git working tree")
        self.path = pathlib.Path(path)
