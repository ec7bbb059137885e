"""Operator input validation for n8ninstaller."""

import re

from n8ninstaller.errors import ConfigurationError
from n8ninstaller.models import ProvisioningConfig


class ValidationService:
    """Rejects values that could break out of generated files or commands."""

    DOMAIN_PATTERN = re.compile(
        r"^(?=.{1,253}$)(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}$"
    )
    SYSTEM_USER_PATTERN = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")
    SQL_IDENTIFIER_PATTERN = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")
    EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
    NPM_PACKAGE_PATTERN = re.compile(r"^[A-Za-z0-9@][A-Za-z0-9@/._~^=<>*-]*$")

    def validate_domain(self, domain: str):
        if not domain or not self.DOMAIN_PATTERN.match(domain):
            raise ConfigurationError(f"Invalid domain name: {domain!r}")

    def validate_system_user(self, user: str):
        if not self.SYSTEM_USER_PATTERN.match(user or ""):
            raise ConfigurationError(
                f"Invalid system user name: {user!r}. Use lowercase letters, digits, '_' or '-'."
            )

    def validate_sql_identifier(self, value: str, label: str):
        if not self.SQL_IDENTIFIER_PATTERN.match(value or ""):
            raise ConfigurationError(
                f"Invalid {label}: {value!r}. Use lowercase letters, digits and '_' only."
            )

    def validate_port(self, port: int):
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ConfigurationError(f"Invalid service port: {port!r}")

    def validate_password(self, password: str):
        if not password:
            raise ConfigurationError("The database password must not be empty.")
        if any(ord(char) < 32 or ord(char) == 127 for char in password):
            raise ConfigurationError("The database password must not contain control characters.")

    def validate_email(self, email: str):
        if not self.EMAIL_PATTERN.match(email):
            raise ConfigurationError(f"Invalid certbot e-mail address: {email!r}")

    def validate_config(self, config: ProvisioningConfig):
        self.validate_domain(config.domain_name)
        self.validate_system_user(config.target_user)
        self.validate_sql_identifier(config.database_name, "database name")
        self.validate_sql_identifier(config.database_user, "database user")
        self.validate_port(config.service_port)
        self.validate_password(config.database_password)
        if config.certbot_email is not None:
            self.validate_email(config.certbot_email)
        node_major = config.node_major
        if isinstance(node_major, bool) or not isinstance(node_major, int) or node_major < 1:
            raise ConfigurationError(f"Invalid Node.js major version: {config.node_major!r}")
        if not self.NPM_PACKAGE_PATTERN.match(config.n8n_package or ""):
            raise ConfigurationError(f"Invalid n8n package spec: {config.n8n_package!r}")
