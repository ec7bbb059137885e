"""Renders the environment file, systemd unit and nginx site for n8n."""

import re
from typing import List, Tuple

from n8ninstaller.errors import ConfigurationError
from n8ninstaller.models import ProvisioningConfig


class TemplateService:
    """Builds file contents from validated config fields only."""

    SAFE_ENV_VALUE = re.compile(r"^[A-Za-z0-9._:/@+-]*$")

    @staticmethod
    def _quote_env_value(value: str) -> str:
        if "\n" in value or "\r" in value:
            raise ConfigurationError("Environment values must not contain line breaks.")
        if TemplateService.SAFE_ENV_VALUE.match(value):
            return value
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    def environment_entries(self, config: ProvisioningConfig) -> List[Tuple[str, str]]:
        return [
            ("WEBHOOK_URL", config.public_url),
            ("WEBHOOK_TUNNEL_URL", config.public_url),
            ("N8N_HOST", "0.0.0.0"),
            ("N8N_PORT", str(config.service_port)),
            ("N8N_PROTOCOL", "https"),
            ("NODE_ENV", "production"),
            ("", ""),
            ("DB_TYPE", "postgresdb"),
            ("DB_POSTGRESDB_HOST", "localhost"),
            ("DB_POSTGRESDB_DATABASE", config.database_name),
            ("DB_POSTGRESDB_USER", config.database_user),
            ("DB_POSTGRESDB_PASSWORD", config.database_password),
        ]

    def build_environment_file(self, config: ProvisioningConfig) -> str:
        lines = []
        for key, value in self.environment_entries(config):
            if not key:
                lines.append("")
                continue
            lines.append(f"{key}={self._quote_env_value(value)}")
        return "\n".join(lines) + "\n"

    def build_service_unit(
        self,
        config: ProvisioningConfig,
        config_dir: str,
        env_file: str,
        binary_path: str,
    ) -> str:
        return f"""
[Unit]
Description=n8n workflow automation
After=network.target postgresql.service

[Service]
Type=simple
User={config.target_user}
WorkingDirectory={config_dir}
EnvironmentFile={env_file}
ExecStart={binary_path} start
Restart=on-failure
RestartSec=10
TimeoutStartSec=60
TimeoutStopSec=60

[Install]
WantedBy=multi-user.target
""".lstrip()

    def build_nginx_site(self, config: ProvisioningConfig) -> str:
        return f"""
server {{
    listen 80;
    server_name {config.domain_name};

    location / {{
        proxy_pass http://localhost:{config.service_port};
        proxy_http_version 1.1;
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection 'upgrade';
        proxy_set_header Host $host;
        proxy_cache_bypass $http_upgrade;
        proxy_set_header X-Forwarded-Proto $scheme;
    }}
}}
""".lstrip()
