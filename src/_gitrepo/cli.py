"""CLI parser and command dispatch for gitrepo.

.. module:: cli
    :synopsis: Parsing of command line arguments and dispatch to the
        corresponding library functions.
"""
import argparse
import json
import pathlib
from typing import List, Optional

import _gitrepo
from _gitrepo import config
from _gitrepo import exception
from _gitrepo import giturl
from _gitrepo import repo

PARSE_PARSER = "parse"
CLONE_PARSER = "clone"
CLONE_TO_PARSER = "clone-to"
INSPECT_PARSER = "inspect"

# Any new subparser must be added to the PARSER_NAMES tuple!
PARSER_NAMES = (PARSE_PARSER, CLONE_PARSER, CLONE_TO_PARSER, INSPECT_PARSER)


def create_parser() -> argparse.ArgumentParser:
    """Create the parser for all gitrepo commands."""
    parser = argparse.ArgumentParser(
        prog=_gitrepo._external_package_name,
        description="Clone and inspect git repositories.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{_gitrepo._external_package_name} {_gitrepo.__version__}",
    )
    parser.add_argument(
        "-c",
        "--config-file",
        help="path to a config file (default: %(default)s)",
        type=_expanded_path,
        default=None,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        help="print informational log messages",
        action="store_true",
    )
    parser.add_argument(
        "--traceback",
        help="show the full traceback of critical exceptions",
        action="store_true",
    )

    subparsers = parser.add_subparsers(dest="subparser")
    subparsers.required = True

    parse_parser = subparsers.add_parser(
        PARSE_PARSER, help="parse a remote url and print its parts"
    )
    parse_parser.add_argument("url", help="a remote url")
    parse_parser.add_argument(
        "--json", help="print as JSON", action="store_true"
    )

    clone_parser = subparsers.add_parser(
        CLONE_PARSER,
        help="clone remotes into directories named after each repository",
    )
    clone_parser.add_argument(
        "urls", help="remote urls to clone", nargs="+", metavar="URL"
    )
    clone_parser.add_argument(
        "-d",
        "--dir",
        help="directory to clone into (default: current directory)",
        type=_expanded_path,
        default=pathlib.Path("."),
    )
    clone_parser.add_argument(
        "--tasks",
        help="amount of clones to run at the same time "
        "(default: as configured, or 1)",
        type=int,
        default=None,
    )
    clone_parser.add_argument(
        "--progress", help="show a progress bar", action="store_true"
    )

    clone_to_parser = subparsers.add_parser(
        CLONE_TO_PARSER, help="clone a single remote into a given directory"
    )
    clone_to_parser.add_argument("url", help="the remote url to clone")
    clone_to_parser.add_argument(
        "path", help="directory to clone into", type=_expanded_path
    )
    clone_to_parser.add_argument(
        "-f",
        "--force",
        help="delete everything in the directory before cloning",
        action="store_true",
    )

    inspect_parser = subparsers.add_parser(
        INSPECT_PARSER, help="show the root path and origin of a repository"
    )
    inspect_parser.add_argument(
        "path", help="path to a repository", type=_expanded_path
    )

    return parser


def parse_args(sys_args: List[str]) -> argparse.Namespace:
    """Parse the command line arguments.

    Args:
        sys_args: Arguments, without the program name.
    Returns:
        The parsed arguments.
    """
    args = create_parser().parse_args(sys_args)
    if getattr(args, "tasks", None) is not None and args.tasks < 1:
        raise exception.GitRepoException("--tasks must be larger than 0")
    return args


def dispatch_command(
    args: argparse.Namespace, conf: Optional[config.Config] = None
) -> int:
    """Handle parsed CLI arguments and dispatch commands to the appropriate
    functions.

    Args:
        args: A namespace of parsed command line arguments.
        conf: The configuration to run with.
    Returns:
        The exit status of the command.
    """
    conf = conf or config.Config()
    if args.subparser == PARSE_PARSER:
        return _parse(args)
    elif args.subparser == CLONE_PARSER:
        return _clone(args, conf)
    elif args.subparser == CLONE_TO_PARSER:
        return _clone_to(args, conf)
    elif args.subparser == INSPECT_PARSER:
        return _inspect(args, conf)

    raise exception.GitRepoException(
        f"Illegal value for subparser: {args.subparser}. "
        "This is a bug, please open an issue."
    )


def _parse(args: argparse.Namespace) -> int:
    parsed = giturl.parse(args.url).to_dict()
    if parsed["token"]:
        parsed["token"] = "*" * 8

    if args.json:
        print(json.dumps(parsed, indent=4))
    else:
        for key, value in parsed.items():
            print(f"{key}: {value if value is not None else ''}")
    return 0


def _clone(args: argparse.Namespace, conf: config.Config) -> int:
    results = repo.clone_repos(
        args.urls,
        args.dir,
        runner=conf.runner(),
        concurrent_tasks=args.tasks or conf.concurrent_tasks,
        show_progress=args.progress,
    )

    num_failed = 0
    for url, result in zip(args.urls, results):
        if isinstance(result, repo.GitRepo):
            print(f"[CLONED] {exception.sanitize(url)} -> {result.root_path}")
        else:
            num_failed += 1
            print(f"[FAILED] {exception.sanitize(url)}: {result}")

    return 1 if num_failed else 0


def _clone_to(args: argparse.Namespace, conf: config.Config) -> int:
    clone_func = repo.force_clone_repo if args.force else repo.clone_repo
    cloned = clone_func(args.url, args.path, runner=conf.runner())
    print(f"[CLONED] {exception.sanitize(args.url)} -> {cloned.root_path}")
    return 0


def _inspect(args: argparse.Namespace, conf: config.Config) -> int:
    inspected = repo.inspect_repo(args.path, runner=conf.runner())
    print(f"root_path: {inspected.root_path}")
    print(f"remote_url: {exception.sanitize(inspected.remote_url or '')}")
    return 0


def _expanded_path(arg: str) -> pathlib.Path:
    # the library refuses paths with ~, so expand them here
    return pathlib.Path(arg).expanduser()
