import os

from click.testing import CliRunner

import n8ninstaller.cli as cli_module


class FakeProvisioner:
    captured = {}

    def __init__(self, config, **_kwargs):
        FakeProvisioner.captured["config"] = config

    def run(self):
        return 0


def _as_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 0)


def test_cli_prompts_for_password_and_domain(monkeypatch):
    _as_root(monkeypatch)
    monkeypatch.setattr(cli_module, "Provisioner", FakeProvisioner)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, [], input="pw-1\npw-1\nn8n.example.com\n")

    assert result.exit_code == 0, result.output
    config = FakeProvisioner.captured["config"]
    assert config.domain_name == "n8n.example.com"
    assert config.database_password == "pw-1"
    assert config.service_port == 6789
    assert config.target_user == "n8nuser"
    assert config.database_name == "n8n"


def test_cli_uses_config_and_allows_cli_override(tmp_path, monkeypatch):
    _as_root(monkeypatch)
    monkeypatch.setattr(cli_module, "Provisioner", FakeProvisioner)
    config_file = tmp_path / ".n8ninstaller.yml"
    config_file.write_text(
        "domain: config.example.com\n" "port: 5678\n" "grant_temporary_sudo: false\n",
        encoding="utf-8",
    )

    runner = CliRunner()
    result = runner.invoke(
        cli_module.main,
        ["--config", str(config_file), "--domain", "cli.example.com"],
        input="pw\npw\n",
    )

    assert result.exit_code == 0, result.output
    config = FakeProvisioner.captured["config"]
    assert config.domain_name == "cli.example.com"
    assert config.service_port == 5678
    assert config.grant_temporary_sudo is False


def test_cli_uses_default_config_file_when_present(tmp_path, monkeypatch):
    _as_root(monkeypatch)
    monkeypatch.setattr(cli_module, "Provisioner", FakeProvisioner)
    (tmp_path / ".n8ninstaller.yml").write_text(
        "domain: default.example.com\n" "certbot_email: ops@example.com\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, [], input="pw\npw\n")

    assert result.exit_code == 0, result.output
    config = FakeProvisioner.captured["config"]
    assert config.domain_name == "default.example.com"
    assert config.certbot_email == "ops@example.com"


def test_cli_refuses_to_run_without_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 1000)

    def fail_if_built(*_args, **_kwargs):
        raise AssertionError("Provisioner must not be built without root")

    monkeypatch.setattr(cli_module, "Provisioner", fail_if_built)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, [])

    assert result.exit_code == 1
    assert "must run as root" in result.output


def test_cli_dry_run_prints_plan_without_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 1000)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, ["--dry-run"])

    assert result.exit_code == 0
    assert "bootstrap_database" in result.output
    assert "revoke_temporary_privileges" in result.output


def test_cli_reports_invalid_domain(monkeypatch):
    _as_root(monkeypatch)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, ["--domain", "not a domain"], input="pw\npw\n")

    assert result.exit_code == 1
    assert "Invalid domain name" in result.output


def test_cli_reports_mistyped_config_value(tmp_path, monkeypatch):
    _as_root(monkeypatch)
    monkeypatch.setattr(cli_module, "Provisioner", FakeProvisioner)
    config_file = tmp_path / ".n8ninstaller.yml"
    config_file.write_text('grant_temporary_sudo: "false"\n', encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli_module.main, ["--config", str(config_file)], input="pw\npw\n")

    assert result.exit_code == 1
    assert "must be true or false" in result.output
    assert "Traceback" not in result.output
