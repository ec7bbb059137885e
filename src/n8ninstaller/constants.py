"""Fixed locations and defaults used when provisioning a host."""

DEFAULT_TARGET_USER = "n8nuser"
DEFAULT_SERVICE_PORT = 6789
DEFAULT_DATABASE_NAME = "n8n"
DEFAULT_DATABASE_USER = "n8nuser"
DEFAULT_NODE_MAJOR = 20
DEFAULT_N8N_PACKAGE = "n8n"
DEFAULT_N8N_BINARY = "/usr/bin/n8n"

SERVICE_NAME = "n8n"
CONFIG_DIR_NAME = ".n8n"
ENV_FILE_NAME = ".env"
SUDO_GROUP = "sudo"
FIREWALL_PROFILE = "Nginx Full"

NODESOURCE_SETUP_URL = "https://deb.nodesource.com/setup_{major}.x"

ENV_FILE_MODE = 0o600
CONFIG_DIR_MODE = 0o700
UNIT_FILE_MODE = 0o644
SITE_FILE_MODE = 0o644
