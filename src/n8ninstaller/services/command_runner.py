"""Subprocess execution service for n8ninstaller."""

import subprocess
from typing import Dict, List, Optional, Type

from n8ninstaller.errors import CommandNotFoundError, ProvisionerError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, default_timeout: Optional[float] = None):
        self.logger = logger
        self.default_timeout = default_timeout

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        timeout: Optional[float] = None,
        input_text: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        error_cls: Type[ProvisionerError] = ProvisionerError,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        effective_timeout = timeout if timeout is not None else self.default_timeout

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                timeout=effective_timeout,
                input=input_text,
                env=env,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(
                f"Required command not found: {cmd[0]}. Please install it and try again.",
                command=cmd,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise error_cls(
                f"Command timed out after {effective_timeout}s: {cmd_str}",
                command=cmd,
            ) from exc
        except OSError as exc:
            raise error_cls(f"Failed to execute command: {cmd_str}. {exc}", command=cmd) from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise error_cls(message, command=cmd, returncode=result.returncode)

        self.logger.debug(message)
        return result
