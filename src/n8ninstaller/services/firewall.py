"""ufw firewall adjustments for n8ninstaller."""

from typing import Callable, Optional

from n8ninstaller.constants import FIREWALL_PROFILE
from n8ninstaller.errors import CommandNotFoundError, ProvisionerError


class FirewallService:
    """Opens the nginx profile in ufw when the firewall is active."""

    def __init__(self, logger, console):
        self.logger = logger
        self.console = console

    def status(self, run_cmd: Callable) -> Optional[str]:
        """Returns the raw ``ufw status`` output, or None when ufw is not installed."""
        try:
            result = run_cmd(["ufw", "status"], check=False, capture_output=True)
        except CommandNotFoundError:
            return None
        return result.stdout or ""

    @staticmethod
    def is_inactive(status_output: str) -> bool:
        return "inactive" in status_output.lower()

    def allow_profile(self, run_cmd: Callable, profile: str = FIREWALL_PROFILE):
        run_cmd(["ufw", "allow", profile], capture_output=True, error_cls=ProvisionerError)
        self.console.print(f"[green]ufw now allows '{profile}'.[/green]")
