import sys

import pytest

from n8ninstaller.errors import CommandNotFoundError, DatabaseBootstrapError, ProvisionerError
from n8ninstaller.services.command_runner import CommandRunner


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


def test_command_runner_raises_with_stderr():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(ProvisionerError, match="boom") as error:
        runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"],
            check=True,
            capture_output=True,
        )

    assert error.value.returncode == 3
    assert error.value.command[0] == sys.executable


def test_command_runner_uses_requested_error_class():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(DatabaseBootstrapError):
        runner.run(
            [sys.executable, "-c", "import sys; sys.exit(1)"],
            capture_output=True,
            error_cls=DatabaseBootstrapError,
        )


def test_command_runner_returns_when_check_disabled():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run(
        [sys.executable, "-c", "import sys; sys.exit(1)"],
        check=False,
        capture_output=True,
    )

    assert result.returncode == 1


def test_command_runner_feeds_stdin():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run(
        [sys.executable, "-c", "import sys; sys.stdout.write(sys.stdin.read().upper())"],
        capture_output=True,
        input_text="select 1;",
    )

    assert result.stdout == "SELECT 1;"


def test_command_runner_reports_missing_executable():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(CommandNotFoundError, match="Required command not found"):
        runner.run(["definitely-not-a-real-command-n8n"], capture_output=True)


def test_command_runner_timeout_raises_error():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(ProvisionerError, match="timed out"):
        runner.run(
            [sys.executable, "-c", "import time; time.sleep(2)"],
            check=True,
            capture_output=True,
            timeout=0.1,
        )
