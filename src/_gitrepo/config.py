"""config module.

Contains the code for reading gitrepo's configuration file. The file is an
INI file with a single ``[gitrepo]`` section, for example:

.. code-block:: ini

    [gitrepo]
    git_executable = /usr/local/bin/git
    timeout = 300
    concurrent_tasks = 4

.. module:: config
    :synopsis: Configuration functions and constants for gitrepo.
"""
import configparser
import dataclasses
import logging
import os
import pathlib
from typing import Mapping, Optional, Union

import daiquiri  # type: ignore

from _gitrepo import constants
from _gitrepo import exception
from _gitrepo import git

LOGGER = daiquiri.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Config:
    """Settings for running git.

    Attributes:
        git_executable: The git executable to run.
        timeout: Timeout in seconds for a single git command, or None for no
            timeout.
        concurrent_tasks: Amount of clones to run at the same time.
    """

    git_executable: str = git.GIT_COMMAND
    timeout: Optional[float] = None
    concurrent_tasks: int = 1

    def runner(
        self, logger: Optional[logging.LoggerAdapter] = None
    ) -> git.GitRunner:
        """Create a runner that executes git with these settings."""
        return git.GitRunner(
            executable=self.git_executable,
            timeout=self.timeout,
            logger=logger,
        )


def get_config_file(
    config_file: Optional[Union[str, pathlib.Path]] = None
) -> pathlib.Path:
    """Resolve which config file to use. An explicitly given file takes
    precedence over the environment variable, which in turn takes precedence
    over the default location.
    """
    if config_file:
        return pathlib.Path(config_file)
    from_env = os.getenv(constants.CONFIG_FILE_ENV)
    if from_env:
        return pathlib.Path(from_env)
    return constants.DEFAULT_CONFIG_FILE


def read_config(
    config_file: Optional[Union[str, pathlib.Path]] = None
) -> Config:
    """Read the configuration from a config file. Defaults are used for
    anything that is not configured, including when the file does not exist.

    Args:
        config_file: Path to the config file. See :py:func:`get_config_file`.
    Returns:
        The configuration.
    """
    path = get_config_file(config_file)
    if not path.is_file():
        LOGGER.debug(f"no config file at {path}, using defaults")
        return Config()

    check_config_integrity(path)
    defaults = _read_defaults(path)
    return Config(
        git_executable=defaults.get("git_executable", git.GIT_COMMAND),
        timeout=_parse_positive(defaults, "timeout", float, path),
        concurrent_tasks=_parse_positive(
            defaults, "concurrent_tasks", int, path
        )
        or 1,
    )


def check_config_integrity(config_file: Union[str, pathlib.Path]) -> None:
    """Raise an exception if the configuration file contains syntactical
    errors, or if the defaults are misconfigured.

    Args:
        config_file: path to the config file.
    """
    config_file = pathlib.Path(config_file)
    if not config_file.is_file():
        raise exception.FileError(
            "no config file found, expected location: " + str(config_file)
        )

    try:
        defaults = _read_defaults(config_file)
    except configparser.ParsingError as exc:
        errors = ", ".join(
            f"(line {line_nr}: {line})" for line_nr, line in exc.errors
        )
        raise exception.FileError(
            f"config file at {config_file} contains syntax errors: {errors}"
        ) from exc
    except configparser.Error as exc:
        raise exception.FileError(
            f"config file at {config_file} is invalid: {exc}"
        ) from exc
    _check_defaults(defaults, config_file)


def _check_defaults(
    defaults: Mapping[str, str], config_file: Union[str, pathlib.Path]
):
    """Raise an exception if defaults contain keys that are not configurable
    arguments.
    """
    configured = defaults.keys()
    if configured - constants.CONFIGURABLE_ARGS:  # there are surplus keys
        raise exception.FileError(
            f"config file at {config_file} contains invalid default keys: "
            f"{', '.join(sorted(configured - constants.CONFIGURABLE_ARGS))}"
        )


def _parse_positive(defaults, key, type_, config_file):
    raw = defaults.get(key)
    if raw is None or raw == "":
        return None
    try:
        value = type_(raw)
    except ValueError as exc:
        raise exception.FileError(
            f"config file at {config_file} has invalid value for {key}: "
            f"'{raw}'"
        ) from exc
    if value <= 0:
        raise exception.FileError(
            f"config file at {config_file} has invalid value for {key}: "
            f"'{raw}', must be positive"
        )
    return value


def _read_defaults(config_file: pathlib.Path) -> dict:
    return dict(_read_config(config_file)[constants.CORE_SECTION_NAME])


def _read_config(config_file: pathlib.Path) -> configparser.ConfigParser:
    config_parser = configparser.ConfigParser()
    try:
        config_parser.read(str(config_file))
    except configparser.MissingSectionHeaderError:
        pass  # handled by the next check

    if constants.CORE_SECTION_NAME not in config_parser:
        raise exception.FileError(
            f"config file at '{str(config_file)}' does not contain the "
            f"required [{constants.CORE_SECTION_NAME}] header"
        )

    return config_parser
