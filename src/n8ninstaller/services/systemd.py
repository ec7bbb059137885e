"""systemd service control for n8ninstaller."""

from typing import Callable

from n8ninstaller.errors import ServiceControlError


class ServiceManager:
    """Thin wrapper over systemctl."""

    def __init__(self, logger):
        self.logger = logger

    def _systemctl(self, args, run_cmd: Callable):
        return run_cmd(["systemctl"] + list(args), capture_output=True, error_cls=ServiceControlError)

    def daemon_reload(self, run_cmd: Callable):
        self._systemctl(["daemon-reload"], run_cmd)

    def enable(self, unit: str, run_cmd: Callable):
        self.logger.debug("Enabling %s", unit)
        self._systemctl(["enable", unit], run_cmd)

    def start(self, unit: str, run_cmd: Callable):
        self.logger.debug("Starting %s", unit)
        self._systemctl(["start", unit], run_cmd)

    def restart(self, unit: str, run_cmd: Callable):
        self.logger.debug("Restarting %s", unit)
        self._systemctl(["restart", unit], run_cmd)
