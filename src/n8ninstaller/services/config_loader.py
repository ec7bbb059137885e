"""Configuration loader for n8ninstaller."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from n8ninstaller.errors import ConfigurationError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "domain",
        "port",
        "user",
        "database_name",
        "database_user",
        "certbot_email",
        "grant_temporary_sudo",
        "node_major",
        "n8n_package",
        "verbose",
        "log_file",
        "dry_run",
    }
    SECRET_KEYS = {"database_password", "password"}
    BOOL_KEYS = {"grant_temporary_sudo", "verbose", "dry_run"}
    INT_KEYS = {"port", "node_major"}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigurationError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigurationError("Config file must contain a YAML mapping at the root.")

        secrets_found = sorted(set(parsed.keys()) & self.SECRET_KEYS)
        if secrets_found:
            raise ConfigurationError(
                "The database password cannot be stored in the config file; "
                "it is always prompted for."
            )

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise ConfigurationError(f"Unknown configuration keys: {unknown_list}")

        self.check_types(parsed)
        return parsed

    def check_types(self, values: Dict[str, Any]):
        for key in sorted(self.BOOL_KEYS & set(values)):
            if not isinstance(values[key], bool):
                raise ConfigurationError(
                    f"Configuration key '{key}' must be true or false, got {values[key]!r}."
                )
        for key in sorted(self.INT_KEYS & set(values)):
            value = values[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"Configuration key '{key}' must be an integer, got {value!r}."
                )
