"""Test setup."""
import pytest

from _gitrepo import constants


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Point the config file at a file that does not exist, so that no user
    configuration leaks into the tests.
    """
    config_file = tmp_path_factory.mktemp("config") / "config.ini"
    monkeypatch.setenv(constants.CONFIG_FILE_ENV, str(config_file))
    return config_file
