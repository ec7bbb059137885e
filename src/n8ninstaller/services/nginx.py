"""nginx reverse proxy configuration for n8ninstaller."""

from typing import Callable

from n8ninstaller.constants import SITE_FILE_MODE
from n8ninstaller.errors import ProxyValidationError
from n8ninstaller.models import HostLayout, ProvisioningConfig


class ReverseProxyService:
    """Publishes n8n through an nginx virtual host."""

    PACKAGES = ["nginx"]
    UNIT_NAME = "nginx"

    def __init__(
        self,
        logger,
        console,
        package_service,
        service_manager,
        filesystem_service,
        template_service,
        layout: HostLayout,
    ):
        self.logger = logger
        self.console = console
        self.package_service = package_service
        self.service_manager = service_manager
        self.filesystem_service = filesystem_service
        self.template_service = template_service
        self.layout = layout

    def write_site(self, config: ProvisioningConfig) -> str:
        site_path = self.layout.site_file(config.domain_name)
        content = self.template_service.build_nginx_site(config)
        self.filesystem_service.write_file(site_path, content, SITE_FILE_MODE)
        return site_path

    def enable_site(self, config: ProvisioningConfig):
        site_path = self.layout.site_file(config.domain_name)
        link_path = self.layout.site_link(config.domain_name)
        if not self.filesystem_service.ensure_symlink(site_path, link_path):
            self.logger.info("Site %s is already enabled.", config.domain_name)

    def validate(self, run_cmd: Callable):
        run_cmd(["nginx", "-t"], capture_output=True, error_cls=ProxyValidationError)

    def configure(self, config: ProvisioningConfig, run_cmd: Callable):
        self.package_service.install(self.PACKAGES, run_cmd)
        site_path = self.write_site(config)
        self.console.print(f"[blue]nginx site written to {site_path}[/blue]")
        self.enable_site(config)
        self.validate(run_cmd)
        self.service_manager.restart(self.UNIT_NAME, run_cmd)
