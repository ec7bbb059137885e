import logging
import shutil
from dataclasses import dataclass
from typing import Callable, List, Optional

import requests
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .constants import (
    CONFIG_DIR_MODE,
    DEFAULT_N8N_BINARY,
    ENV_FILE_MODE,
    SERVICE_NAME,
    SUDO_GROUP,
    UNIT_FILE_MODE,
)
from .errors import ExistenceCheckError, ProvisionerError
from .errors_catalog import actionable_error, has_actionable_error
from .models import HostLayout, ProvisioningConfig, StepResult, StepStatus
from .services.accounts import AccountService
from .services.certificates import CertificateService
from .services.command_runner import CommandRunner
from .services.database import DatabaseService
from .services.filesystem import FileSystemService
from .services.firewall import FirewallService
from .services.nginx import ReverseProxyService
from .services.packages import PackageService
from .services.privileges import PrivilegeService
from .services.runtime import RuntimeService
from .services.systemd import ServiceManager
from .services.templates import TemplateService
from .services.validation import ValidationService

console = Console()
logger = logging.getLogger("n8ninstaller")

StepAction = Callable[[ProvisioningConfig, List[StepResult]], StepResult]


@dataclass(frozen=True)
class Step:
    step_id: str
    description: str
    action: StepAction


class Provisioner:
    PLAN = (
        ("sync_packages", "Update system packages"),
        ("ensure_service_account", "Create the n8n system user"),
        ("ensure_nodejs", "Install Node.js and npm"),
        ("install_n8n", "Install n8n globally"),
        ("install_postgresql", "Install and start PostgreSQL"),
        ("bootstrap_database", "Create the n8n database and role"),
        ("write_environment_file", "Write the n8n environment file"),
        ("install_service_unit", "Install and start the n8n systemd service"),
        ("configure_nginx", "Install and configure nginx"),
        ("obtain_certificate", "Obtain a TLS certificate with certbot"),
        ("configure_firewall", "Allow nginx through ufw"),
        ("revoke_temporary_privileges", "Remove temporary sudo privileges"),
    )

    def __init__(
        self,
        config: ProvisioningConfig,
        layout: Optional[HostLayout] = None,
        command_runner: Optional[CommandRunner] = None,
        which=shutil.which,
        requests_module=requests,
        geteuid=None,
    ):
        self.validation_service = ValidationService()
        self.validation_service.validate_config(config)

        self.config = config
        self.layout = layout or HostLayout()
        self.command_runner = command_runner or CommandRunner(logger=logger)

        self.privilege_service = PrivilegeService(logger=logger, geteuid=geteuid)
        self.filesystem_service = FileSystemService(logger=logger)
        self.template_service = TemplateService()
        self.package_service = PackageService(logger=logger, console=console)
        self.service_manager = ServiceManager(logger=logger)
        self.account_service = AccountService(logger=logger)
        self.runtime_service = RuntimeService(
            logger=logger,
            console=console,
            package_service=self.package_service,
            which=which,
            requests_module=requests_module,
        )
        self.database_service = DatabaseService(
            logger=logger,
            console=console,
            package_service=self.package_service,
            service_manager=self.service_manager,
        )
        self.reverse_proxy_service = ReverseProxyService(
            logger=logger,
            console=console,
            package_service=self.package_service,
            service_manager=self.service_manager,
            filesystem_service=self.filesystem_service,
            template_service=self.template_service,
            layout=self.layout,
        )
        self.certificate_service = CertificateService(
            logger=logger,
            console=console,
            package_service=self.package_service,
            layout=self.layout,
        )
        self.firewall_service = FirewallService(logger=logger, console=console)

        self.steps = [
            Step(step_id, description, getattr(self, step_id))
            for step_id, description in self.PLAN
        ]
        self.results: List[StepResult] = []
        self.current_step_name: Optional[str] = None

    @classmethod
    def print_plan(cls, output: Console = console):
        table = Table(title="n8n provisioning plan")
        table.add_column("#", justify="right")
        table.add_column("Step", no_wrap=True)
        table.add_column("Description")
        for index, (step_id, description) in enumerate(cls.PLAN, start=1):
            table.add_row(str(index), step_id, description)
        output.print(table)

    def _run_cmd(self, cmd: List[str], check: bool = True, capture_output: bool = False, **kwargs):
        return self.command_runner.run(cmd, check=check, capture_output=capture_output, **kwargs)

    @staticmethod
    def _prior(results: List[StepResult], step_id: str) -> Optional[StepResult]:
        for result in results:
            if result.step_id == step_id:
                return result
        return None

    # Steps. Each one reads only the config and the results of earlier steps.

    def sync_packages(self, config: ProvisioningConfig, results: List[StepResult]) -> StepResult:
        self.package_service.sync(self._run_cmd)
        return StepResult.success("sync_packages")

    def ensure_service_account(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        step_id = "ensure_service_account"
        try:
            exists = self.account_service.exists(config.target_user, self._run_cmd)
        except ExistenceCheckError as exc:
            logger.warning("%s Assuming the user does not exist.", exc)
            exists = False

        if exists:
            # A failed earlier run may have left its temporary grant behind.
            privilege_granted = False
            if config.grant_temporary_sudo:
                try:
                    groups = self.account_service.groups(config.target_user, self._run_cmd)
                except ExistenceCheckError as exc:
                    logger.warning("%s", exc)
                    groups = []
                privilege_granted = SUDO_GROUP in groups
            return StepResult.skipped(
                step_id,
                f"User '{config.target_user}' already exists",
                privilege_granted=privilege_granted,
            )

        self.account_service.create(config.target_user, self._run_cmd)
        if config.grant_temporary_sudo:
            self.privilege_service.grant_temporary_sudo(config.target_user, self._run_cmd)
        return StepResult.success(step_id, privilege_granted=config.grant_temporary_sudo)

    def ensure_nodejs(self, config: ProvisioningConfig, results: List[StepResult]) -> StepResult:
        step_id = "ensure_nodejs"
        node_path = self.runtime_service.find_node()
        if node_path:
            installed = self.runtime_service.check_installed_version(config.node_major, self._run_cmd)
            label = f"Node.js {installed}" if installed else "Node.js"
            return StepResult.skipped(step_id, f"{label} already installed at {node_path}")

        self.runtime_service.install(config.node_major, self._run_cmd)
        return StepResult.success(step_id)

    def install_n8n(self, config: ProvisioningConfig, results: List[StepResult]) -> StepResult:
        self.package_service.npm_install_global(config.n8n_package, self._run_cmd)
        binary_path = self.runtime_service.find_n8n() or DEFAULT_N8N_BINARY
        return StepResult.success("install_n8n", binary_path=binary_path)

    def install_postgresql(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        self.database_service.install(self._run_cmd)
        return StepResult.success("install_postgresql")

    def bootstrap_database(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        self.database_service.bootstrap(config, self._run_cmd)
        return StepResult.success("bootstrap_database")

    def write_environment_file(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        config_dir = self.layout.config_dir(config.target_user)
        env_file = self.layout.env_file(config.target_user)

        self.filesystem_service.ensure_dir(config_dir, CONFIG_DIR_MODE)
        self.filesystem_service.write_file(
            env_file,
            self.template_service.build_environment_file(config),
            ENV_FILE_MODE,
        )
        self.filesystem_service.chown_tree(config_dir, config.target_user, self._run_cmd)
        console.print(f"[green]n8n environment file created at {env_file}[/green]")
        return StepResult.success("write_environment_file", config_dir=config_dir, env_file=env_file)

    def install_service_unit(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        environment = self._prior(results, "write_environment_file")
        installed = self._prior(results, "install_n8n")
        if environment is None or installed is None:
            raise ProvisionerError("The service unit requires the environment file and n8n binary.")

        unit_path = self.layout.unit_file()
        content = self.template_service.build_service_unit(
            config,
            config_dir=environment.details["config_dir"],
            env_file=environment.details["env_file"],
            binary_path=installed.details["binary_path"],
        )
        self.filesystem_service.write_file(unit_path, content, UNIT_FILE_MODE)

        self.service_manager.daemon_reload(self._run_cmd)
        self.service_manager.enable(SERVICE_NAME, self._run_cmd)
        self.service_manager.start(SERVICE_NAME, self._run_cmd)
        console.print(
            "[green]n8n service created and started. "
            f"Check status with 'systemctl status {SERVICE_NAME}'.[/green]"
        )
        return StepResult.success("install_service_unit", unit_path=unit_path)

    def configure_nginx(self, config: ProvisioningConfig, results: List[StepResult]) -> StepResult:
        self.reverse_proxy_service.configure(config, self._run_cmd)
        return StepResult.success(
            "configure_nginx", site_path=self.layout.site_file(config.domain_name)
        )

    def obtain_certificate(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        step_id = "obtain_certificate"
        # configure_nginx rewrites the site without TLS, so an existing certificate is installed again.
        if self.certificate_service.has_certificate(config.domain_name):
            self.certificate_service.reinstall(config, self._run_cmd)
            return StepResult.success(step_id, reinstalled=True)

        self.certificate_service.obtain(config, self._run_cmd)
        return StepResult.success(step_id, reinstalled=False)

    def configure_firewall(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        step_id = "configure_firewall"
        status = self.firewall_service.status(self._run_cmd)
        if status is None:
            logger.warning("ufw is not installed. Configure the host firewall manually.")
            return StepResult.skipped(step_id, "ufw is not installed")

        if self.firewall_service.is_inactive(status):
            logger.warning("UFW is inactive. You might want to enable it manually after this run.")
            return StepResult.skipped(step_id, "ufw is inactive")

        self.firewall_service.allow_profile(self._run_cmd)
        return StepResult.success(step_id)

    def revoke_temporary_privileges(
        self, config: ProvisioningConfig, results: List[StepResult]
    ) -> StepResult:
        step_id = "revoke_temporary_privileges"
        account = self._prior(results, "ensure_service_account")
        if account is None or not account.details.get("privilege_granted"):
            return StepResult.skipped(step_id, "No temporary privileges were granted")

        self.privilege_service.revoke_temporary_sudo(config.target_user, self._run_cmd)
        return StepResult.success(step_id)

    # Runner

    def run_step(self, step: Step, results: List[StepResult]) -> StepResult:
        try:
            return step.action(self.config, list(results))
        except ProvisionerError as exc:
            return StepResult.failed(step.step_id, str(exc))

    def _hint(self, step_id: str) -> Optional[str]:
        if not has_actionable_error(step_id):
            return None
        return actionable_error(
            step_id,
            target_user=self.config.target_user,
            domain_name=self.config.domain_name,
            database_name=self.config.database_name,
            database_user=self.config.database_user,
            node_major=str(self.config.node_major),
        )

    def print_summary(self):
        table = Table(title="Provisioning summary")
        table.add_column("Step", no_wrap=True)
        table.add_column("Status")
        table.add_column("Notes")
        colors = {
            StepStatus.SUCCESS: "green",
            StepStatus.SKIPPED: "yellow",
            StepStatus.FAILED: "red",
        }
        for result in self.results:
            color = colors[result.status]
            note = result.reason or result.cause or ""
            table.add_row(result.step_id, f"[{color}]{result.status.value}[/{color}]", escape(note))
        console.print(table)

    def run(self) -> int:
        self.results = []
        self.current_step_name = None
        total = len(self.steps)

        try:
            logger.info("Starting n8n production installation...")

            for index, step in enumerate(self.steps, start=1):
                self.current_step_name = step.step_id
                console.print(f"[bold blue][{index}/{total}] {step.description}...[/bold blue]")
                logger.debug("Running step %s", step.step_id)

                result = self.run_step(step, self.results)
                self.results.append(result)

                if result.status is StepStatus.SKIPPED:
                    console.print(f"[yellow]Skipped:[/yellow] {escape(result.reason or '')}")
                    logger.info("Step %s skipped: %s", step.step_id, result.reason)
                    continue

                if result.is_failed:
                    cause = escape(result.cause or "")
                    console.print(f"[bold red]Error:[/bold red] step {step.step_id} failed: {cause}")
                    logger.error("Step %s failed: %s", step.step_id, result.cause)
                    hint = self._hint(step.step_id)
                    if hint:
                        console.print(escape(hint))
                    return 1

                logger.info("Step %s completed.", step.step_id)

            self.print_summary()
            console.print("[bold green]--- Installation Complete! ---[/bold green]")
            console.print(f"You should now be able to access n8n at: https://{self.config.domain_name}")
            console.print("On your first visit, you'll be prompted to create an admin user.")
            console.print("Remember to secure your server and back up your data regularly!")
            return 0

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return 1
        except Exception as exc:
            step_name = self.current_step_name or "startup"
            console.print(
                f"[bold red]Unexpected error in step {step_name}:[/bold red] {escape(str(exc))}"
            )
            logger.exception("Unexpected error in step %s", step_name)
            return 1
