import logging
import os

import click
from rich.logging import RichHandler

from .constants import (
    DEFAULT_DATABASE_NAME,
    DEFAULT_DATABASE_USER,
    DEFAULT_N8N_PACKAGE,
    DEFAULT_NODE_MAJOR,
    DEFAULT_SERVICE_PORT,
    DEFAULT_TARGET_USER,
)
from .errors import ProvisionerError
from .models import ProvisioningConfig
from .provisioner import Provisioner
from .services.config_loader import ConfigLoader
from .services.privileges import PrivilegeService

DEFAULT_CONFIG_FILE = ".n8ninstaller.yml"


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--domain", required=False, help="Public domain name for n8n (prompted if omitted).")
@click.option("--port", required=False, type=int, help="Local port n8n listens on (default: 6789).")
@click.option("--user", required=False, help="System user that runs n8n (default: n8nuser).")
@click.option("--database-name", required=False, help="PostgreSQL database name (default: n8n).")
@click.option("--database-user", required=False, help="PostgreSQL role name (default: n8nuser).")
@click.option(
    "--certbot-email",
    required=False,
    help="Contact e-mail for Let's Encrypt. Enables non-interactive certbot.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Print the provisioning plan without touching the host.",
)
def main(
    config,
    domain,
    port,
    user,
    database_name,
    database_user,
    certbot_email,
    verbose,
    log_file,
    dry_run,
):
    """Install n8n with PostgreSQL, nginx and Let's Encrypt on this host."""
    logger = logging.getLogger("n8ninstaller")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    domain = _resolve_option(domain, config_values, "domain")
    port = int(_resolve_option(port, config_values, "port", default=DEFAULT_SERVICE_PORT))
    user = _resolve_option(user, config_values, "user", default=DEFAULT_TARGET_USER)
    database_name = _resolve_option(
        database_name, config_values, "database_name", default=DEFAULT_DATABASE_NAME
    )
    database_user = _resolve_option(
        database_user, config_values, "database_user", default=DEFAULT_DATABASE_USER
    )
    certbot_email = _resolve_option(certbot_email, config_values, "certbot_email")
    grant_temporary_sudo = bool(config_values.get("grant_temporary_sudo", True))
    node_major = int(config_values.get("node_major", DEFAULT_NODE_MAJOR))
    n8n_package = str(config_values.get("n8n_package", DEFAULT_N8N_PACKAGE))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    if dry_run:
        Provisioner.print_plan()
        raise SystemExit(0)

    try:
        PrivilegeService(logger=logger).ensure_elevated()
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    password = click.prompt(
        f"Enter a STRONG password for the PostgreSQL user '{database_user}'",
        hide_input=True,
        confirmation_prompt=True,
    )
    if not domain:
        domain = click.prompt("Enter your n8n domain (e.g., n8n.yourdomain.com)").strip()

    try:
        provisioner = Provisioner(
            ProvisioningConfig(
                domain_name=domain,
                database_password=password,
                target_user=user,
                service_port=port,
                database_name=database_name,
                database_user=database_user,
                certbot_email=certbot_email,
                grant_temporary_sudo=grant_temporary_sudo,
                node_major=node_major,
                n8n_package=n8n_package,
            )
        )
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(provisioner.run())


if __name__ == "__main__":
    main()
