"""Module for constants used throughout gitrepo.

.. module:: constants
    :synopsis: Constants used throughout gitrepo.
"""
import pathlib

import appdirs  # type: ignore

import _gitrepo

CONFIG_DIR = pathlib.Path(
    appdirs.user_config_dir(
        appname=_gitrepo._external_package_name, appauthor=_gitrepo.__author__
    )
)
LOG_DIR = pathlib.Path(
    appdirs.user_log_dir(
        appname=_gitrepo._external_package_name, appauthor=_gitrepo.__author__
    )
)
MAX_LOGFILE_SIZE = 1024 * 1024 * 10  # 10 MiB
DEFAULT_CONFIG_FILE = CONFIG_DIR / "config.ini"
assert DEFAULT_CONFIG_FILE.is_absolute()

CORE_SECTION_NAME = "gitrepo"

# keys that can be configured via config file
ORDERED_CONFIGURABLE_ARGS = ("git_executable", "timeout", "concurrent_tasks")
CONFIGURABLE_ARGS = set(ORDERED_CONFIGURABLE_ARGS)

CONFIG_FILE_ENV = "GITREPO_CONFIG_FILE"
