"""Package manager operations (apt and npm) for n8ninstaller."""

import os
from typing import Callable, Dict, List

from n8ninstaller.errors import PackageManagerError


class PackageService:
    """Wraps apt-get and npm invocations."""

    APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

    def __init__(self, logger, console):
        self.logger = logger
        self.console = console

    def _apt_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.APT_ENV)
        return env

    def sync(self, run_cmd: Callable):
        self.console.print("[blue]Refreshing package index...[/blue]")
        run_cmd(["apt-get", "update"], env=self._apt_env(), error_cls=PackageManagerError)
        self.console.print("[blue]Upgrading installed packages...[/blue]")
        run_cmd(["apt-get", "upgrade", "-y"], env=self._apt_env(), error_cls=PackageManagerError)

    def install(self, packages: List[str], run_cmd: Callable):
        self.logger.info("Installing packages: %s", ", ".join(packages))
        run_cmd(
            ["apt-get", "install", "-y"] + list(packages),
            env=self._apt_env(),
            error_cls=PackageManagerError,
        )

    def npm_install_global(self, package: str, run_cmd: Callable):
        self.logger.info("Installing %s globally with npm", package)
        run_cmd(["npm", "install", "-g", package], error_cls=PackageManagerError)
