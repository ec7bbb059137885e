"""
n8ninstaller - Production provisioning for n8n on Debian/Ubuntu hosts
"""

__version__ = "0.3.0"

from .errors import ProvisionerError
from .provisioner import Provisioner

__all__ = ["Provisioner", "ProvisionerError"]
