"""Shared domain models for n8ninstaller."""

import enum
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import (
    CONFIG_DIR_NAME,
    DEFAULT_DATABASE_NAME,
    DEFAULT_DATABASE_USER,
    DEFAULT_N8N_PACKAGE,
    DEFAULT_NODE_MAJOR,
    DEFAULT_SERVICE_PORT,
    DEFAULT_TARGET_USER,
    ENV_FILE_NAME,
    SERVICE_NAME,
)


@dataclass(frozen=True)
class ProvisioningConfig:
    """Operator inputs for a single provisioning run."""

    domain_name: str
    database_password: str = field(repr=False)
    target_user: str = DEFAULT_TARGET_USER
    service_port: int = DEFAULT_SERVICE_PORT
    database_name: str = DEFAULT_DATABASE_NAME
    database_user: str = DEFAULT_DATABASE_USER
    certbot_email: Optional[str] = None
    grant_temporary_sudo: bool = True
    node_major: int = DEFAULT_NODE_MAJOR
    n8n_package: str = DEFAULT_N8N_PACKAGE

    @property
    def public_url(self) -> str:
        return f"https://{self.domain_name}/"


@dataclass(frozen=True)
class HostLayout:
    """Filesystem locations touched on the target host."""

    home_root: str = "/home"
    systemd_dir: str = "/etc/systemd/system"
    nginx_sites_available: str = "/etc/nginx/sites-available"
    nginx_sites_enabled: str = "/etc/nginx/sites-enabled"
    letsencrypt_live_dir: str = "/etc/letsencrypt/live"

    def config_dir(self, user: str) -> str:
        return os.path.join(self.home_root, user, CONFIG_DIR_NAME)

    def env_file(self, user: str) -> str:
        return os.path.join(self.config_dir(user), ENV_FILE_NAME)

    def unit_file(self) -> str:
        return os.path.join(self.systemd_dir, f"{SERVICE_NAME}.service")

    def site_file(self, domain: str) -> str:
        return os.path.join(self.nginx_sites_available, domain)

    def site_link(self, domain: str) -> str:
        return os.path.join(self.nginx_sites_enabled, domain)

    def certificate_file(self, domain: str) -> str:
        return os.path.join(self.letsencrypt_live_dir, domain, "fullchain.pem")


class StepStatus(str, enum.Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one provisioning step, kept in memory for the run only."""

    step_id: str
    status: StepStatus
    reason: Optional[str] = None
    cause: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, step_id: str, **details: Any) -> "StepResult":
        return cls(step_id=step_id, status=StepStatus.SUCCESS, details=details)

    @classmethod
    def skipped(cls, step_id: str, reason: str, **details: Any) -> "StepResult":
        return cls(step_id=step_id, status=StepStatus.SKIPPED, reason=reason, details=details)

    @classmethod
    def failed(cls, step_id: str, cause: str) -> "StepResult":
        return cls(step_id=step_id, status=StepStatus.FAILED, cause=cause)

    @property
    def is_failed(self) -> bool:
        return self.status is StepStatus.FAILED
