"""System account management for n8ninstaller."""

from typing import Callable, List

from n8ninstaller.errors import CommandNotFoundError, ExistenceCheckError, PackageManagerError


class AccountService:
    """Creates the unprivileged account that runs n8n."""

    def __init__(self, logger):
        self.logger = logger

    def exists(self, user: str, run_cmd: Callable) -> bool:
        try:
            result = run_cmd(["id", user], check=False, capture_output=True)
        except CommandNotFoundError as exc:
            raise ExistenceCheckError(f"Could not check whether user '{user}' exists: {exc}") from exc
        return result.returncode == 0

    def create(self, user: str, run_cmd: Callable):
        self.logger.info("Creating system user '%s'", user)
        run_cmd(
            ["adduser", "--disabled-password", "--gecos", "", user],
            capture_output=True,
            error_cls=PackageManagerError,
        )

    def groups(self, user: str, run_cmd: Callable) -> List[str]:
        result = run_cmd(["id", "-nG", user], check=False, capture_output=True)
        if result.returncode != 0:
            raise ExistenceCheckError(f"Could not list groups of user '{user}'.")
        return (result.stdout or "").split()
