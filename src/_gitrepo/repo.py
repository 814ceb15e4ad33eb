"""Cloning and inspection of local repositories.

.. module:: repo
    :synopsis: Clone remotes into local directories, alone or in batches, and
        inspect existing working trees.
"""
import dataclasses
import pathlib
import shutil
from typing import Iterable, List, Optional, Tuple, Union

import daiquiri  # type: ignore

from _gitrepo import exception
from _gitrepo import git
from _gitrepo import giturl

LOGGER = daiquiri.getLogger(__name__)

ORIGIN = "origin"

PathLike = Union[str, pathlib.Path]
CloneResult = Union["GitRepo", exception.GitRepoException]


@dataclasses.dataclass(frozen=True)
class GitRepo:
    """Local representation of a git repository.

    Attributes:
        root_path: Absolute and canonical path to the repository.
        remote_url: URL of the ``origin`` remote, as reported by git, or None
            if the repository has no ``origin``.
    """

    root_path: pathlib.Path
    remote_url: Optional[str] = None


def clone_repo(
    remote_url: str, dest: PathLike, runner: Optional[git.GitRunner] = None
) -> GitRepo:
    """Clone a remote into ``dest``, creating the directory if it does not
    exist.

    Args:
        remote_url: Any remote reference git can clone from.
        dest: The directory to clone into. Must not contain ``~``.
        runner: The runner to execute git with.
    Returns:
        The cloned repository.
    Raises:
        :py:class:`exception.AlreadyExistsError` if ``dest`` is inside a git
        working tree, :py:class:`exception.CloneError` if git fails to clone
        and :py:class:`exception.RepoPathExpansionError` if ``dest`` can't be
        created.
    """
    dest = pathlib.Path(dest)
    _assert_no_home_shorthand(dest)
    if not dest.exists():
        _create_dir(dest)
    expanded_path = _expand(dest)

    if git.is_inside_work_tree(expanded_path, runner=runner):
        raise exception.AlreadyExistsError(expanded_path)

    _clone(remote_url, expanded_path, runner)
    return inspect_repo(expanded_path, runner=runner)


def force_clone_repo(
    remote_url: str, dest: PathLike, runner: Optional[git.GitRunner] = None
) -> GitRepo:
    """Like :py:func:`clone_repo`, but removes all contents of ``dest``
    before cloning.

    .. warning::

        Everything in ``dest`` is permanently deleted.

    Args:
        remote_url: Any remote reference git can clone from.
        dest: The directory to clone into. Must not contain ``~``.
        runner: The runner to execute git with.
    Returns:
        The cloned repository.
    """
    dest = pathlib.Path(dest)
    _assert_no_home_shorthand(dest)
    if dest.exists():
        LOGGER.warning(f"Removing {dest} before cloning")
        try:
            shutil.rmtree(dest)
        except OSError as exc:
            raise exception.RepoPathExpansionError(dest, exc) from exc
    _create_dir(dest)
    expanded_path = _expand(dest)

    _clone(remote_url, expanded_path, runner)
    return inspect_repo(expanded_path, runner=runner)


def clone_repos(
    remote_urls: Iterable[str],
    root: PathLike,
    runner: Optional[git.GitRunner] = None,
    concurrent_tasks: int = 1,
    show_progress: bool = False,
) -> List[CloneResult]:
    """Clone each remote into a directory named after the repository, in the
    ``root`` directory.

    A failure to clone one remote does not affect any other. The returned
    list has one entry per remote, in the same order as ``remote_urls``.
    Each entry is either the cloned :py:class:`GitRepo`, or the exception
    that was raised for that remote. Remotes that can't be parsed, or that
    use a scheme git can't clone from, get an
    :py:class:`exception.InvalidRemoteUrlError` and are never cloned. If
    several remotes have the same name, only the first one is cloned and the
    others get an :py:class:`exception.AlreadyExistsError`.

    Args:
        remote_urls: Remote references to clone.
        root: Directory to clone into. Must not contain ``~``.
        runner: The runner to execute git with.
        concurrent_tasks: The amount of clones to run at the same time.
        show_progress: Whether to show a progress bar.
    Returns:
        A list of cloned repositories and exceptions.
    """
    root = pathlib.Path(root)
    _assert_no_home_shorthand(root)
    remote_urls = list(remote_urls)

    planned = _plan_destinations(remote_urls, root)
    to_clone = [
        (url, dest)
        for url, dest in zip(remote_urls, planned)
        if isinstance(dest, pathlib.Path)
    ]

    if concurrent_tasks == 1 and not show_progress:
        cloned = [_clone_into(item, runner) for item in to_clone]
    else:
        cloned = git.batch_execution(
            _clone_into,
            to_clone,
            concurrent_tasks,
            runner,
            show_progress=show_progress,
        )

    cloned_iter = iter(cloned)
    results = [
        next(cloned_iter) if isinstance(dest, pathlib.Path) else dest
        for dest in planned
    ]

    for result in results:
        if isinstance(result, exception.GitRepoException):
            LOGGER.error(str(result))
    return results


def inspect_repo(
    repo_path: PathLike, runner: Optional[git.GitRunner] = None
) -> GitRepo:
    """Create a representation of an existing repository. The remote URL is
    set to the URL of ``origin``.

    Args:
        repo_path: Path to a directory inside a git working tree. Must not
            contain ``~``.
        runner: The runner to execute git with.
    Returns:
        The repository at the given path.
    Raises:
        :py:class:`exception.RepoPathExpansionError` if the path can't be
        canonicalized and :py:class:`exception.NotARepositoryError` if it is
        not inside a git working tree.
    """
    repo_path = pathlib.Path(repo_path)
    _assert_no_home_shorthand(repo_path)
    expanded_path = _expand(repo_path)

    if not git.is_inside_work_tree(expanded_path, runner=runner):
        raise exception.NotARepositoryError(expanded_path)

    return GitRepo(
        root_path=expanded_path,
        remote_url=git.get_remote_url(ORIGIN, expanded_path, runner=runner),
    )


def _plan_destinations(
    remote_urls: List[str], root: pathlib.Path
) -> List[Union[pathlib.Path, exception.RepoError]]:
    """Pick the destination directory of each remote. Each directory is
    directly inside ``root`` and claimed by at most one remote; remotes that
    don't get one are given the error instead.
    """
    planned: List[Union[pathlib.Path, exception.RepoError]] = []
    claimed = set()
    for remote_url in remote_urls:
        try:
            dest = _destination(remote_url, root)
        except exception.RepoError as exc:
            planned.append(exc)
            continue

        if dest in claimed:
            planned.append(exception.AlreadyExistsError(dest))
        else:
            claimed.add(dest)
            planned.append(dest)
    return planned


def _destination(remote_url: str, root: pathlib.Path) -> pathlib.Path:
    try:
        parsed_url = giturl.parse(remote_url)
    except exception.ParseError as exc:
        raise exception.InvalidRemoteUrlError(
            remote_url, reason=str(exc)
        ) from exc

    if parsed_url.scheme not in giturl.GIT_TRANSPORT_SCHEMES:
        raise exception.InvalidRemoteUrlError(
            remote_url,
            reason=f"unsupported scheme: {parsed_url.scheme.value}",
        )
    if parsed_url.name.startswith("~"):
        raise exception.InvalidRemoteUrlError(
            remote_url,
            reason=f"can't clone into a directory named {parsed_url.name}",
        )

    return root / parsed_url.name


def _clone_into(
    item: Tuple[str, pathlib.Path], runner: Optional[git.GitRunner]
) -> CloneResult:
    remote_url, dest = item
    try:
        return clone_repo(remote_url, dest, runner=runner)
    except exception.GitRepoException as exc:
        return exc


def _clone(
    remote_url: str,
    expanded_path: pathlib.Path,
    runner: Optional[git.GitRunner],
) -> None:
    try:
        git.clone(remote_url, expanded_path, runner=runner)
    except (exception.GitError, exception.CommandError) as exc:
        raise exception.CloneError(
            remote_url=remote_url, repo_path=expanded_path, source=exc
        ) from exc


def _create_dir(path: pathlib.Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise exception.RepoPathExpansionError(path, exc) from exc


def _expand(path: pathlib.Path) -> pathlib.Path:
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise exception.RepoPathExpansionError(path, exc) from exc


def _assert_no_home_shorthand(path: pathlib.Path) -> None:
    assert not any(
        part.startswith("~") for part in path.parts
    ), f"repo path must be absolute or relative, ~ is not supported: {path}"
