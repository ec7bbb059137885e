"""Domain errors for n8ninstaller."""

from typing import List, Optional


class ProvisionerError(RuntimeError):
    """Raised when provisioning cannot continue safely."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class ConfigurationError(ProvisionerError):
    """Invalid operator input or configuration file."""


class CommandNotFoundError(ProvisionerError):
    """An external executable is not installed on the host."""


class PrivilegeError(ProvisionerError):
    """Not running with elevated privileges, or a privilege change failed."""


class PackageManagerError(ProvisionerError):
    pass


class ExistenceCheckError(ProvisionerError):
    """An existence check could not decide whether an effect exists. Never fatal."""


class DatabaseBootstrapError(ProvisionerError):
    pass


class FileWriteError(ProvisionerError):
    pass


class ServiceControlError(ProvisionerError):
    pass


class ProxyValidationError(ProvisionerError):
    pass


class CertificateAcquisitionError(ProvisionerError):
    pass
