"""PostgreSQL installation and bootstrap for n8ninstaller."""

from typing import Callable, List

from n8ninstaller.errors import DatabaseBootstrapError
from n8ninstaller.models import ProvisioningConfig


class DatabaseService:
    """Installs PostgreSQL and creates the n8n database and role."""

    PACKAGES = ["postgresql", "postgresql-contrib"]
    UNIT_NAME = "postgresql"
    PSQL_CMD = ["sudo", "-i", "-u", "postgres", "psql", "-X", "-q", "-v", "ON_ERROR_STOP=1"]

    def __init__(self, logger, console, package_service, service_manager):
        self.logger = logger
        self.console = console
        self.package_service = package_service
        self.service_manager = service_manager

    @staticmethod
    def quote_identifier(value: str) -> str:
        return '"' + value.replace('"', '""') + '"'

    @staticmethod
    def quote_literal(value: str) -> str:
        return "'" + value.replace("'", "''") + "'"

    def bootstrap_statements(self, config: ProvisioningConfig) -> List[str]:
        database = self.quote_identifier(config.database_name)
        role = self.quote_identifier(config.database_user)
        password = self.quote_literal(config.database_password)
        return [
            f"CREATE DATABASE {database};",
            f"CREATE USER {role} WITH PASSWORD {password};",
            f"GRANT ALL PRIVILEGES ON DATABASE {database} TO {role};",
        ]

    def install(self, run_cmd: Callable):
        self.package_service.install(self.PACKAGES, run_cmd)
        self.service_manager.enable(self.UNIT_NAME, run_cmd)
        self.service_manager.start(self.UNIT_NAME, run_cmd)

    def bootstrap(self, config: ProvisioningConfig, run_cmd: Callable):
        """Runs every statement unconditionally; a repeated run fails on CREATE DATABASE."""
        self.console.print(
            f"[blue]Creating database '{config.database_name}' "
            f"and role '{config.database_user}'...[/blue]"
        )
        for statement in self.bootstrap_statements(config):
            # Statements go through stdin so the password never shows up in the process list.
            run_cmd(
                self.PSQL_CMD,
                capture_output=True,
                input_text=statement + "\n",
                error_cls=DatabaseBootstrapError,
            )
