"""Actionable error catalog for n8ninstaller."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "not_elevated": {
        "what": "n8ninstaller must run as root.",
        "next": "Re-run the command with `sudo`.",
    },
    "sync_packages": {
        "what": "Updating system packages failed.",
        "next": "Check `/etc/apt/sources.list` and network access, then run `apt-get update` manually.",
    },
    "ensure_service_account": {
        "what": "Creating the system user '{target_user}' failed.",
        "next": "Inspect `adduser` output and `/etc/passwd`, then re-run.",
    },
    "ensure_nodejs": {
        "what": "Installing Node.js failed.",
        "next": "Check access to deb.nodesource.com or install Node.js {node_major}.x manually.",
    },
    "install_n8n": {
        "what": "Installing n8n globally with npm failed.",
        "next": "Run `npm install -g n8n` manually to see the full npm log.",
    },
    "install_postgresql": {
        "what": "Installing or starting PostgreSQL failed.",
        "next": "Inspect `systemctl status postgresql` and `journalctl -u postgresql`.",
    },
    "bootstrap_database": {
        "what": "Bootstrapping database '{database_name}' for role '{database_user}' failed.",
        "next": (
            "If a previous run already created them, drop the database and role with "
            "`sudo -u postgres psql` before re-running."
        ),
    },
    "write_environment_file": {
        "what": "Writing the n8n environment file failed.",
        "next": "Check that /home/{target_user} exists and is writable by root.",
    },
    "install_service_unit": {
        "what": "Installing or starting the n8n systemd service failed.",
        "next": "Inspect `systemctl status n8n` and `journalctl -u n8n`.",
    },
    "configure_nginx": {
        "what": "Configuring nginx for {domain_name} failed.",
        "next": "Run `nginx -t` and review /etc/nginx/sites-available/{domain_name}.",
    },
    "obtain_certificate": {
        "what": "Certbot could not obtain a certificate for {domain_name}.",
        "next": "Make sure the DNS record points to this host and port 80 is reachable.",
    },
    "configure_firewall": {
        "what": "Updating the ufw firewall failed.",
        "next": "Run `ufw allow 'Nginx Full'` manually.",
    },
    "revoke_temporary_privileges": {
        "what": "Removing temporary sudo privileges from '{target_user}' failed.",
        "next": "Run `gpasswd -d {target_user} sudo` manually.",
    },
}


def has_actionable_error(code: str) -> bool:
    return code in _ERROR_MESSAGES


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
