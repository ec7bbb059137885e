"""Let's Encrypt certificate acquisition through certbot."""

import os
from typing import Callable, List

from n8ninstaller.errors import CertificateAcquisitionError
from n8ninstaller.models import HostLayout, ProvisioningConfig


class CertificateService:
    """Obtains a TLS certificate with the certbot nginx plugin."""

    PACKAGES = ["certbot", "python3-certbot-nginx"]

    def __init__(self, logger, console, package_service, layout: HostLayout):
        self.logger = logger
        self.console = console
        self.package_service = package_service
        self.layout = layout

    def has_certificate(self, domain: str) -> bool:
        return os.path.isfile(self.layout.certificate_file(domain))

    def build_certbot_cmd(self, config: ProvisioningConfig) -> List[str]:
        cmd = ["certbot", "--nginx", "-d", config.domain_name]
        if config.certbot_email:
            cmd += [
                "--non-interactive",
                "--agree-tos",
                "-m",
                config.certbot_email,
                "--redirect",
            ]
        return cmd

    def obtain(self, config: ProvisioningConfig, run_cmd: Callable):
        self.package_service.install(self.PACKAGES, run_cmd)
        if not config.certbot_email:
            self.console.print(
                "[yellow]Running certbot interactively. Follow its prompts to obtain "
                "the certificate.[/yellow]"
            )
        # Interactive mode needs the terminal, so output is only captured when unattended.
        run_cmd(
            self.build_certbot_cmd(config),
            capture_output=bool(config.certbot_email),
            error_cls=CertificateAcquisitionError,
        )

    def build_install_cmd(self, config: ProvisioningConfig) -> List[str]:
        cmd = ["certbot", "install", "--nginx", "--cert-name", config.domain_name]
        if config.certbot_email:
            cmd += ["--non-interactive", "--redirect"]
        return cmd

    def reinstall(self, config: ProvisioningConfig, run_cmd: Callable):
        """Re-applies an existing certificate to a freshly rewritten nginx site."""
        self.package_service.install(self.PACKAGES, run_cmd)
        self.logger.info(
            "Certificate for %s already exists; installing it into the nginx site.",
            config.domain_name,
        )
        run_cmd(
            self.build_install_cmd(config),
            capture_output=bool(config.certbot_email),
            error_cls=CertificateAcquisitionError,
        )
