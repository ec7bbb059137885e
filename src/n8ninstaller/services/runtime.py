"""Node.js runtime installation for n8ninstaller."""

import os
import shutil
import tempfile
from typing import Callable, Optional

import requests
from packaging import version

from n8ninstaller.constants import NODESOURCE_SETUP_URL
from n8ninstaller.errors import PackageManagerError


class RuntimeService:
    """Detects and installs Node.js from the NodeSource repository."""

    DOWNLOAD_TIMEOUT = 60

    def __init__(
        self,
        logger,
        console,
        package_service,
        which=shutil.which,
        requests_module=requests,
    ):
        self.logger = logger
        self.console = console
        self.package_service = package_service
        self.which = which
        self.requests = requests_module

    def find_node(self) -> Optional[str]:
        return self.which("node")

    def find_n8n(self) -> Optional[str]:
        return self.which("n8n")

    def installed_version(self, run_cmd: Callable) -> Optional[version.Version]:
        result = run_cmd(["node", "--version"], check=False, capture_output=True)
        if result.returncode != 0:
            return None
        raw = (result.stdout or "").strip().lstrip("v")
        try:
            return version.parse(raw)
        except version.InvalidVersion:
            self.logger.warning("Could not parse Node.js version output: %r", result.stdout)
            return None

    def check_installed_version(self, required_major: int, run_cmd: Callable) -> Optional[str]:
        current = self.installed_version(run_cmd)
        if current is None:
            return None
        if current.major < required_major:
            self.logger.warning(
                "Node.js %s is installed but n8n expects %s.x or newer. "
                "Upgrade it manually if n8n fails to start.",
                current,
                required_major,
            )
        return str(current)

    def download_setup_script(self, major: int, dest_path: str):
        url = NODESOURCE_SETUP_URL.format(major=major)
        self.logger.info("Downloading NodeSource setup script from %s", url)
        try:
            response = self.requests.get(url, timeout=self.DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except self.requests.RequestException as exc:
            raise PackageManagerError(f"Failed to download NodeSource setup script: {exc}") from exc

        try:
            with open(dest_path, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(response.text)
        except OSError as exc:
            raise PackageManagerError(f"Could not save NodeSource setup script: {exc}") from exc

    def install(self, major: int, run_cmd: Callable):
        self.console.print(f"[blue]Installing Node.js {major}.x from NodeSource...[/blue]")
        try:
            fd, script_path = tempfile.mkstemp(prefix="nodesource-", suffix=".sh")
            os.close(fd)
        except OSError as exc:
            raise PackageManagerError(f"Could not create a temporary setup script: {exc}") from exc
        try:
            self.download_setup_script(major, script_path)
            run_cmd(["bash", script_path], error_cls=PackageManagerError)
        finally:
            if os.path.exists(script_path):
                os.remove(script_path)

        self.package_service.install(["nodejs"], run_cmd)
