"""Privilege checks and temporary sudo grants for n8ninstaller."""

import os
from typing import Callable, Optional

from n8ninstaller.constants import SUDO_GROUP
from n8ninstaller.errors import PrivilegeError
from n8ninstaller.errors_catalog import actionable_error


class PrivilegeService:
    """Verifies root access and manages the temporary sudo membership."""

    def __init__(self, logger, geteuid: Optional[Callable[[], int]] = None):
        self.logger = logger
        self.geteuid = geteuid or os.geteuid

    def ensure_elevated(self):
        if self.geteuid() != 0:
            raise PrivilegeError(actionable_error("not_elevated"))

    def grant_temporary_sudo(self, user: str, run_cmd: Callable):
        self.logger.info("Granting temporary '%s' membership to '%s'", SUDO_GROUP, user)
        run_cmd(
            ["usermod", "-aG", SUDO_GROUP, user],
            capture_output=True,
            error_cls=PrivilegeError,
        )

    def revoke_temporary_sudo(self, user: str, run_cmd: Callable):
        self.logger.info("Removing temporary '%s' membership from '%s'", SUDO_GROUP, user)
        run_cmd(
            ["gpasswd", "-d", user, SUDO_GROUP],
            capture_output=True,
            error_cls=PrivilegeError,
        )
