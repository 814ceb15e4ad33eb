import asyncio
import pathlib
import subprocess
import time
from collections import namedtuple
from unittest import mock

import pytest

from _gitrepo import exception
from _gitrepo import git

import constants

RunTuple = namedtuple("RunTuple", ("returncode", "stdout", "stderr"))

REPO_PATH = pathlib.Path("/some/repo")


@pytest.fixture
def run_mock(mocker):
    return mocker.patch(
        "subprocess.run", autospec=True, return_value=RunTuple(0, b"", b"")
    )


@pytest.fixture
def logger():
    return mock.MagicMock()


@pytest.fixture
def runner(logger):
    return git.GitRunner(logger=logger)


def _expected_call(*args, cwd=None, executable="git", timeout=None):
    return mock.call(
        [executable, *args],
        cwd=str(cwd) if cwd is not None else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        timeout=timeout,
    )


class TestGitRunner:
    """Tests for GitRunner."""

    def test_uses_configured_executable_and_timeout(self, run_mock):
        runner = git.GitRunner(executable="/opt/git/bin/git", timeout=30)

        runner.run("status", cwd=REPO_PATH)

        assert run_mock.call_args == _expected_call(
            "status", cwd=REPO_PATH, executable="/opt/git/bin/git", timeout=30
        )

    def test_wraps_os_error_in_command_error(self, run_mock, runner):
        cause = FileNotFoundError("git not found")
        run_mock.side_effect = cause

        with pytest.raises(exception.CommandError) as exc_info:
            runner.run("status", cwd=REPO_PATH)

        assert exc_info.value.cause is cause
        assert exc_info.value.command == ["git", "status"]

    def test_wraps_timeout_in_command_error(self, run_mock, runner):
        run_mock.side_effect = subprocess.TimeoutExpired(
            cmd=["git", "clone"], timeout=1
        )

        with pytest.raises(exception.CommandError) as exc_info:
            runner.run("clone", constants.HTTPS_URL, "dest")

        assert "timed out" in str(exc_info.value)

    def test_command_error_does_not_leak_token(self, run_mock, runner):
        run_mock.side_effect = OSError("boom")

        with pytest.raises(exception.CommandError) as exc_info:
            runner.run("clone", constants.HTTPS_URL_WITH_TOKEN, "dest")

        assert constants.TOKEN not in str(exc_info.value)

    def test_output_is_trimmed(self, run_mock, runner):
        run_mock.return_value = RunTuple(0, b"  some output\n\n", b"")

        assert runner.output("status") == "some output"

    def test_empty_output_is_none(self, run_mock, runner):
        run_mock.return_value = RunTuple(0, b"\n", b"")

        assert runner.output("status") is None

    def test_invalid_utf8_output_raises(self, run_mock, runner):
        run_mock.return_value = RunTuple(0, b"\xff\xfe", b"")

        with pytest.raises(exception.OutputDecodeError) as exc_info:
            runner.output("log")

        assert isinstance(exc_info.value.cause, UnicodeDecodeError)


class TestLogOutput:
    """Tests for logging of command output."""

    def test_stdout_of_successful_command_is_info(
        self, run_mock, runner, logger
    ):
        run_mock.return_value = RunTuple(0, b"output\n", b"progress")

        runner.run("status")

        logger.info.assert_called_once_with("output")
        logger.warning.assert_not_called()

    def test_stderr_of_failed_command_is_warning(
        self, run_mock, runner, logger
    ):
        run_mock.return_value = RunTuple(1, b"output", b"fatal: bad\n")

        runner.run("status")

        logger.warning.assert_called_once_with("fatal: bad")
        logger.info.assert_not_called()

    def test_stderr_of_silent_successful_command_is_warning(
        self, run_mock, runner, logger
    ):
        run_mock.return_value = RunTuple(0, b"", b"Cloning into 'repo'...")

        runner.run("clone", "url")

        logger.warning.assert_called_once_with("Cloning into 'repo'...")

    def test_nothing_is_logged_without_output(self, run_mock, runner, logger):
        runner.run("status")

        logger.info.assert_not_called()
        logger.warning.assert_not_called()


class TestClone:
    """Tests for clone."""

    def test_issues_correct_command(self, run_mock, runner):
        dest = pathlib.Path("/tmp/repos/widgets")

        git.clone(constants.HTTPS_URL, dest, runner=runner)

        run_mock.assert_called_once_with(
            ["git", "clone", "--", constants.HTTPS_URL, str(dest)],
            cwd=None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=None,
        )

    def test_raises_on_non_zero_exit(self, run_mock, runner):
        stderr = b"Cloning into 'widgets'...\nfatal: repository not found"
        run_mock.return_value = RunTuple(128, b"", stderr)

        with pytest.raises(exception.GitError) as exc_info:
            git.clone(constants.HTTPS_URL, "widgets", runner=runner)

        assert exc_info.value.returncode == 128
        assert "Failed to clone" in str(exc_info.value)
        assert "fatal: repository not found" in str(exc_info.value)

    def test_uses_default_runner(self, run_mock):
        git.clone(constants.HTTPS_URL, "widgets")

        assert run_mock.call_args == _expected_call(
            "clone", "--", constants.HTTPS_URL, "widgets"
        )

    def test_remote_starting_with_dash_is_not_an_option(
        self, run_mock, runner
    ):
        git.clone("--upload-pack=touch pwned", "widgets", runner=runner)

        args = run_mock.call_args.args[0]
        assert args.index("--") < args.index("--upload-pack=touch pwned")


class TestIsInsideWorkTree:
    """Tests for is_inside_work_tree."""

    def test_true_output(self, run_mock, runner):
        run_mock.return_value = RunTuple(0, b"true\n", b"")

        assert git.is_inside_work_tree(REPO_PATH, runner=runner)
        assert run_mock.call_args == _expected_call(
            "rev-parse", "--is-inside-work-tree", cwd=REPO_PATH
        )

    @pytest.mark.parametrize(
        "output", [b"false\n", b"", b"True", b"yes", b"\xff\xfe"]
    )
    def test_anything_but_true_is_false(self, run_mock, runner, output):
        run_mock.return_value = RunTuple(0, output, b"")

        assert not git.is_inside_work_tree(REPO_PATH, runner=runner)

    def test_not_a_repository(self, run_mock, runner):
        run_mock.return_value = RunTuple(
            128, b"", b"fatal: not a git repository"
        )

        assert not git.is_inside_work_tree(REPO_PATH, runner=runner)

    def test_command_failure_is_false(self, run_mock, runner):
        run_mock.side_effect = FileNotFoundError(str(REPO_PATH))

        assert not git.is_inside_work_tree(REPO_PATH, runner=runner)


class TestRemotes:
    """Tests for add_remote and get_remote_url."""

    def test_get_remote_url(self, run_mock, runner):
        run_mock.return_value = RunTuple(
            0, f"{constants.SSH_SHORTHAND_URL}\n".encode("utf8"), b""
        )

        url = git.get_remote_url("origin", REPO_PATH, runner=runner)

        assert url == constants.SSH_SHORTHAND_URL
        assert run_mock.call_args == _expected_call(
            "remote", "get-url", "origin", cwd=REPO_PATH
        )

    def test_get_missing_remote_url_is_none(self, run_mock, runner):
        run_mock.return_value = RunTuple(
            2, b"", b"error: No such remote 'origin'"
        )

        assert git.get_remote_url("origin", REPO_PATH, runner=runner) is None

    def test_add_remote(self, run_mock, runner):
        git.add_remote(
            "origin", constants.SSH_SHORTHAND_URL, REPO_PATH, runner=runner
        )

        assert run_mock.call_args == _expected_call(
            "remote",
            "add",
            "origin",
            constants.SSH_SHORTHAND_URL,
            cwd=REPO_PATH,
        )

    def test_add_existing_remote_raises(self, run_mock, runner):
        run_mock.return_value = RunTuple(
            3, b"", b"error: remote origin already exists."
        )

        with pytest.raises(exception.GitError):
            git.add_remote(
                "origin", constants.HTTPS_URL, REPO_PATH, runner=runner
            )


class TestPassThrough:
    """Tests for init, status and log."""

    def test_git_init(self, run_mock, runner):
        git.git_init(REPO_PATH, runner=runner)

        assert run_mock.call_args == _expected_call("init", cwd=REPO_PATH)

    def test_git_init_raises_on_failure(self, run_mock, runner):
        run_mock.return_value = RunTuple(1, b"", b"fatal: cannot mkdir")

        with pytest.raises(exception.GitError):
            git.git_init(REPO_PATH, runner=runner)

    @pytest.mark.parametrize(
        "func, command", [(git.status, "status"), (git.log, "log")]
    )
    def test_returns_output(self, run_mock, runner, func, command):
        run_mock.return_value = RunTuple(0, b"some output\n", b"")

        assert func(REPO_PATH, runner=runner) == "some output"
        assert run_mock.call_args == _expected_call(command, cwd=REPO_PATH)

    @pytest.mark.parametrize("func", [git.status, git.log])
    def test_returns_none_without_output(self, run_mock, runner, func):
        assert func(REPO_PATH, runner=runner) is None


class TestBatchExecution:
    """Tests for batch_execution."""

    def test_results_are_in_input_order(self):
        def slow_square(x):
            # later arguments finish first
            time.sleep(0.01 * (5 - x))
            return x * x

        results = git.batch_execution(slow_square, range(5), 5)

        assert results == [0, 1, 4, 9, 16]

    def test_runs_all_batches(self):
        calls = []

        def record(x, offset):
            calls.append(x)
            return x + offset

        results = git.batch_execution(record, range(7), 3, 10)

        assert results == list(range(10, 17))
        assert sorted(calls) == list(range(7))

    @pytest.mark.parametrize("concurrent_tasks", [0, -1])
    def test_raises_when_concurrent_tasks_less_than_one(
        self, concurrent_tasks
    ):
        with pytest.raises(ValueError) as exc_info:
            git.batch_execution(lambda x: x, [1], concurrent_tasks)

        assert "concurrent_tasks must be larger than 0" in str(exc_info.value)

    def test_event_loop_is_closed(self, mocker):
        close_spy = mocker.spy(asyncio.BaseEventLoop, "close")

        git.batch_execution(lambda x: x, range(3), 2)

        close_spy.assert_called()

    def test_can_be_called_repeatedly(self):
        for _ in range(3):
            assert git.batch_execution(lambda x: x + 1, [1, 2], 2) == [2, 3]
