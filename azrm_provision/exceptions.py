"""Error hierarchy for provisioning operations"""

from typing import Iterable, Optional


class AzrmError(Exception):
    """Base class for every error raised by azrm_provision"""


class ValidationError(AzrmError):
    """Input rejected before any resource was touched"""


class InvalidLocationError(ValidationError):
    """Requested region is not offered by the subscription"""

    def __init__(self, location: str, valid: Optional[Iterable[str]] = None):
        self.location = location
        self.valid = sorted(valid or [])
        message = f"Invalid location '{location}'"
        if self.valid:
            message += f". Valid choices: {', '.join(self.valid)}"
        super().__init__(message)


class ProvisioningError(AzrmError):
    """A provider call failed while creating resources"""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"{step} failed: {message}")


class ResourceGroupError(ProvisioningError):
    """Resource group could not be created"""


class LookupFailedError(AzrmError):
    """An existing resource could not be found or resolved"""
