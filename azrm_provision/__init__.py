"""
Azure VM provisioning helpers

Thin orchestration over the Azure Resource Manager SDK:
- Resolve and validate regions
- Ensure resource groups, storage accounts and network plumbing
- Validate VM size and image publisher, then create the VM
- Open an RDP session to a running VM
"""

from .clients import AzureClients
from .exceptions import (
    AzrmError, InvalidLocationError, LookupFailedError,
    ProvisioningError, ResourceGroupError, ValidationError
)
from .locations import list_locations, validate_location
from .lookups import VMSize, list_publishers, list_vm_sizes
from .network import AllocationMethod, NetworkResult, create_network
from .rdp import launch_rdp, resolve_public_ip
from .resource_groups import ensure_resource_group
from .storage import Redundancy, create_storage_account
from .vm import DiskCreateMode, OSPlatform, VMSpec, create_vm, os_disk_uri

__version__ = '0.1.0'

__all__ = [
    'AzureClients',
    'AzrmError', 'InvalidLocationError', 'LookupFailedError',
    'ProvisioningError', 'ResourceGroupError', 'ValidationError',
    'list_locations', 'validate_location',
    'VMSize', 'list_publishers', 'list_vm_sizes',
    'AllocationMethod', 'NetworkResult', 'create_network',
    'launch_rdp', 'resolve_public_ip',
    'ensure_resource_group',
    'Redundancy', 'create_storage_account',
    'DiskCreateMode', 'OSPlatform', 'VMSpec', 'create_vm', 'os_disk_uri',
]
