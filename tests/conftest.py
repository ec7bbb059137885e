import os
import re
import subprocess

import pytest

from n8ninstaller.errors import ProvisionerError
from n8ninstaller.models import HostLayout, ProvisioningConfig
from n8ninstaller.provisioner import Provisioner


class FakeHost:
    """Simulates the commands the provisioner issues against a Debian host."""

    def __init__(self, layout: HostLayout):
        self.layout = layout
        self.calls = []
        self.inputs = []
        self.users = set()
        self.sudo_members = set()
        self.packages = set()
        self.node_installed = False
        self.node_version = "v20.11.1"
        self.n8n_installed = False
        self.enabled = set()
        self.active = set()
        self.databases = set()
        self.roles = set()
        self.grants = set()
        self.ufw_status = "Status: inactive\n"
        self.ufw_rules = []
        self.failures = []

    def fail_on(self, *prefix):
        self.failures.append(list(prefix))

    def which(self, name):
        if name == "node" and self.node_installed:
            return "/usr/bin/node"
        if name == "n8n" and self.n8n_installed:
            return "/usr/bin/n8n"
        return None

    def commands_starting_with(self, *prefix):
        return [cmd for cmd in self.calls if cmd[: len(prefix)] == list(prefix)]

    def run(
        self,
        cmd,
        check=True,
        capture_output=False,
        timeout=None,
        input_text=None,
        env=None,
        error_cls=ProvisionerError,
    ):
        self.calls.append(list(cmd))
        if input_text is not None:
            self.inputs.append(input_text)

        if any(cmd[: len(prefix)] == prefix for prefix in self.failures):
            returncode, stdout, stderr = 1, "", "simulated failure"
        else:
            returncode, stdout, stderr = self._execute(list(cmd), input_text)

        result = subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)
        if returncode != 0 and check:
            raise error_cls(
                f"Command failed ({returncode}): {' '.join(cmd)}\n{stderr}",
                command=list(cmd),
                returncode=returncode,
            )
        return result

    def _execute(self, cmd, input_text):
        program = cmd[0]
        if program == "apt-get":
            if cmd[1] == "install":
                packages = [arg for arg in cmd[2:] if not arg.startswith("-")]
                self.packages.update(packages)
                if "nodejs" in packages:
                    self.node_installed = True
            return 0, "", ""
        if program == "id":
            user = cmd[-1]
            if user not in self.users:
                return 1, "", "no such user"
            if cmd[1] == "-nG":
                groups = [user] + (["sudo"] if user in self.sudo_members else [])
                return 0, " ".join(groups) + "\n", ""
            return 0, "uid=1001", ""
        if program == "adduser":
            self.users.add(cmd[-1])
            return 0, "", ""
        if program == "usermod":
            self.sudo_members.add(cmd[-1])
            return 0, "", ""
        if program == "gpasswd":
            self.sudo_members.discard(cmd[2])
            return 0, "", ""
        if program == "node":
            return 0, f"{self.node_version}\n", ""
        if program == "npm":
            self.n8n_installed = True
            return 0, "", ""
        if program == "systemctl":
            action = cmd[1]
            if action == "enable":
                self.enabled.add(cmd[2])
            elif action in ("start", "restart"):
                self.active.add(cmd[2])
            return 0, "", ""
        if program == "sudo" and "psql" in cmd:
            return self._psql(input_text or "")
        if program == "certbot":
            if cmd[1] == "install":
                domain = cmd[cmd.index("--cert-name") + 1]
            else:
                domain = cmd[cmd.index("-d") + 1]
                cert_path = self.layout.certificate_file(domain)
                os.makedirs(os.path.dirname(cert_path), exist_ok=True)
                with open(cert_path, "w", encoding="utf-8") as file_obj:
                    file_obj.write("CERTIFICATE")
            with open(self.layout.site_file(domain), "a", encoding="utf-8") as file_obj:
                file_obj.write("    listen 443 ssl; # managed by Certbot\n")
            return 0, "", ""
        if program == "ufw":
            if cmd[1] == "status":
                return 0, self.ufw_status, ""
            self.ufw_rules.append(cmd[2])
            return 0, "", ""
        return 0, "", ""

    def _psql(self, statement):
        names = re.findall(r'"([^"]+)"', statement)
        if statement.startswith("CREATE DATABASE"):
            if names[0] in self.databases:
                return 1, "", f'ERROR:  database "{names[0]}" already exists'
            self.databases.add(names[0])
        elif statement.startswith("CREATE USER"):
            if names[0] in self.roles:
                return 1, "", f'ERROR:  role "{names[0]}" already exists'
            self.roles.add(names[0])
        elif statement.startswith("GRANT"):
            self.grants.add((names[0], names[1]))
        return 0, "", ""


class FakeResponse:
    text = "#!/bin/bash\necho nodesource\n"

    def raise_for_status(self):
        return None


class FakeRequestsModule:
    class RequestException(Exception):
        pass

    def __init__(self):
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        return FakeResponse()


@pytest.fixture
def layout(tmp_path):
    return HostLayout(
        home_root=str(tmp_path / "home"),
        systemd_dir=str(tmp_path / "etc" / "systemd" / "system"),
        nginx_sites_available=str(tmp_path / "etc" / "nginx" / "sites-available"),
        nginx_sites_enabled=str(tmp_path / "etc" / "nginx" / "sites-enabled"),
        letsencrypt_live_dir=str(tmp_path / "etc" / "letsencrypt" / "live"),
    )


@pytest.fixture
def fake_host(layout):
    return FakeHost(layout)


@pytest.fixture
def config():
    return ProvisioningConfig(domain_name="demo.example.com", database_password="s3cr3t-'pw'")


@pytest.fixture
def build_provisioner(layout, fake_host):
    def _build(provisioning_config, requests_module=None):
        return Provisioner(
            provisioning_config,
            layout=layout,
            command_runner=fake_host,
            which=fake_host.which,
            requests_module=requests_module or FakeRequestsModule(),
            geteuid=lambda: 0,
        )

    return _build
