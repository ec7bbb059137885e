import subprocess

from n8ninstaller.errors import DatabaseBootstrapError
from n8ninstaller.models import ProvisioningConfig
from n8ninstaller.services.database import DatabaseService


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class RecordingInstaller:
    def __init__(self):
        self.calls = []

    def install(self, packages, _run_cmd):
        self.calls.append(("install", tuple(packages)))

    def enable(self, unit, _run_cmd):
        self.calls.append(("enable", unit))

    def start(self, unit, _run_cmd):
        self.calls.append(("start", unit))


def _service(recorder=None):
    recorder = recorder or RecordingInstaller()
    return DatabaseService(
        logger=None,
        console=DummyConsole(),
        package_service=recorder,
        service_manager=recorder,
    )


def _config():
    return ProvisioningConfig(domain_name="n8n.example.com", database_password="it's")


def test_bootstrap_statements_quote_identifiers_and_password():
    statements = _service().bootstrap_statements(_config())

    assert statements == [
        'CREATE DATABASE "n8n";',
        "CREATE USER \"n8nuser\" WITH PASSWORD 'it''s';",
        'GRANT ALL PRIVILEGES ON DATABASE "n8n" TO "n8nuser";',
    ]


def test_bootstrap_runs_each_statement_through_psql_stdin():
    calls = []

    def fake_run_cmd(cmd, check=True, capture_output=False, **kwargs):
        calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    _service().bootstrap(_config(), fake_run_cmd)

    assert len(calls) == 3
    for cmd, kwargs in calls:
        assert cmd[:5] == ["sudo", "-i", "-u", "postgres", "psql"]
        assert "ON_ERROR_STOP=1" in cmd
        assert kwargs["error_cls"] is DatabaseBootstrapError
    assert calls[0][1]["input_text"] == 'CREATE DATABASE "n8n";\n'


def test_install_starts_postgresql_after_packages():
    recorder = RecordingInstaller()

    _service(recorder).install(run_cmd=None)

    assert recorder.calls == [
        ("install", ("postgresql", "postgresql-contrib")),
        ("enable", "postgresql"),
        ("start", "postgresql"),
    ]
