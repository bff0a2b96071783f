"""Virtual machine validation and creation"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.mgmt.compute.models import (
    CachingTypes, HardwareProfile, ImageReference, LinuxConfiguration,
    NetworkInterfaceReference, NetworkProfile, OSDisk, OSProfile,
    StorageProfile, VirtualHardDisk, VirtualMachine, WindowsConfiguration
)

from .choices import parse_choice
from .clients import AzureClients
from .exceptions import LookupFailedError, ProvisioningError, ValidationError
from .locations import validate_location
from .lookups import query_publishers, query_vm_sizes
from .resource_groups import create_if_missing
from .storage import Redundancy, provision_storage_account, validate_storage_name

logger = logging.getLogger(__name__)

# Windows NetBIOS limit
WINDOWS_COMPUTER_NAME_MAX = 15


class OSPlatform(str, Enum):
    WINDOWS = 'Windows'
    LINUX = 'Linux'


class DiskCreateMode(str, Enum):
    FROM_IMAGE = 'FromImage'
    ATTACH = 'Attach'
    EMPTY = 'Empty'


@dataclass(frozen=True)
class VMSpec:
    """Everything needed to create one VM; assembled into a VirtualMachine in one go"""
    resource_group: str
    vm_name: str
    location: str
    size: str
    admin_username: str
    admin_password: str
    computer_name: str
    publisher: str
    offer: str
    sku: str
    nic_name: str
    storage_account: str
    platform: OSPlatform = OSPlatform.WINDOWS
    version: str = 'latest'
    redundancy: Redundancy = Redundancy.STANDARD_LRS
    disk_create_mode: DiskCreateMode = DiskCreateMode.FROM_IMAGE
    provision_vm_agent: bool = True
    enable_auto_update: bool = True
    tags: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Accept plain strings from config files and the command line
        object.__setattr__(self, 'platform', parse_choice(OSPlatform, self.platform, 'OS platform'))
        object.__setattr__(self, 'disk_create_mode',
                           parse_choice(DiskCreateMode, self.disk_create_mode, 'disk create mode'))
        object.__setattr__(self, 'redundancy',
                           parse_choice(Redundancy, self.redundancy, 'redundancy class'))


def os_disk_uri(blob_endpoint: str, vm_name: str) -> str:
    """VHD location of the OS disk inside the storage account"""
    if not blob_endpoint.endswith('/'):
        blob_endpoint += '/'
    return f"{blob_endpoint}vhds/{vm_name}_OSDisk.vhd"


def validate_vm_spec(clients: AzureClients, spec: VMSpec) -> str:
    """
    Read-only checks run before anything is created.

    Returns:
        The canonical size name as reported by the region
    """
    if not spec.admin_username or not spec.admin_password:
        raise ValidationError("Missing admin credentials")
    validate_storage_name(spec.storage_account)

    sizes = {s.name.lower(): s.name for s in query_vm_sizes(clients, spec.location)}
    size_name = sizes.get(spec.size.lower())
    if size_name is None:
        logger.error(f"❌ VM size {spec.size} is not available in {spec.location}")
        raise ValidationError(f"VM size '{spec.size}' is not available in {spec.location}")

    matches = query_publishers(clients, spec.location, spec.publisher)
    if spec.publisher.lower() not in (m.lower() for m in matches):
        logger.error(f"❌ Image publisher {spec.publisher} is not available in {spec.location}")
        raise ValidationError(f"Image publisher '{spec.publisher}' is not available in {spec.location}")

    logger.info("✅ VM configuration validation passed")
    return size_name


def build_vm_definition(spec: VMSpec, size_name: str, disk_uri: str, nic_id: str) -> VirtualMachine:
    """Assemble the complete VM model from validated inputs"""
    attach = spec.disk_create_mode is DiskCreateMode.ATTACH

    os_disk = OSDisk(
        name=f"{spec.vm_name}_OSDisk",
        vhd=VirtualHardDisk(uri=disk_uri),
        create_option=spec.disk_create_mode.value,
        caching=CachingTypes.read_write
    )
    if attach:
        # Required when attaching an existing disk
        os_disk.os_type = spec.platform.value

    storage_profile = StorageProfile(os_disk=os_disk)
    os_profile = None
    if not attach:
        storage_profile.image_reference = ImageReference(
            publisher=spec.publisher,
            offer=spec.offer,
            sku=spec.sku,
            version=spec.version
        )
        os_profile = _build_os_profile(spec)

    return VirtualMachine(
        location=spec.location,
        hardware_profile=HardwareProfile(vm_size=size_name),
        storage_profile=storage_profile,
        os_profile=os_profile,
        network_profile=NetworkProfile(
            network_interfaces=[NetworkInterfaceReference(id=nic_id, primary=True)]
        ),
        tags=spec.tags or None
    )


def _build_os_profile(spec: VMSpec) -> OSProfile:
    computer_name = spec.computer_name
    if spec.platform is OSPlatform.WINDOWS:
        if len(computer_name) > WINDOWS_COMPUTER_NAME_MAX:
            logger.warning(f"⚠️  Computer name {computer_name} truncated to "
                           f"{WINDOWS_COMPUTER_NAME_MAX} characters")
            computer_name = computer_name[:WINDOWS_COMPUTER_NAME_MAX]
        return OSProfile(
            computer_name=computer_name,
            admin_username=spec.admin_username,
            admin_password=spec.admin_password,
            windows_configuration=WindowsConfiguration(
                provision_vm_agent=spec.provision_vm_agent,
                enable_automatic_updates=spec.enable_auto_update
            )
        )
    return OSProfile(
        computer_name=computer_name,
        admin_username=spec.admin_username,
        admin_password=spec.admin_password,
        linux_configuration=LinuxConfiguration(
            disable_password_authentication=False,
            provision_vm_agent=spec.provision_vm_agent
        )
    )


def _get_nic_id(clients: AzureClients, resource_group: str, nic_name: str) -> str:
    try:
        nic = clients.network.network_interfaces.get(resource_group, nic_name)
    except ResourceNotFoundError as e:
        raise LookupFailedError(
            f"Network interface '{nic_name}' not found in resource group {resource_group}"
        ) from e
    except HttpResponseError as e:
        logger.error(f"❌ Could not read network interface {nic_name}: {e}")
        raise ProvisioningError(f"Network interface '{nic_name}' lookup", str(e)) from e
    logger.info(f"Using existing network interface: {nic.id}")
    return nic.id


def create_vm(clients: AzureClients, spec: VMSpec):
    """
    Validate and create a virtual machine.

    The region, size and image publisher are checked first; if any check
    fails no resource is touched. Then, in order: resource group, storage
    account for the OS disk VHD, NIC lookup, VM submission. Any failure
    aborts the remaining steps; resources already created are kept.

    The NIC must already exist (see create_network).

    Returns:
        The VirtualMachine returned by Azure
    """
    location = validate_location(clients, spec.location)
    if location != spec.location:
        spec = replace(spec, location=location)
    size_name = validate_vm_spec(clients, spec)

    logger.info(f"Creating VM {spec.vm_name} ({size_name}) in {location}")
    create_if_missing(clients, spec.resource_group, location, spec.tags or None)

    blob_endpoint = provision_storage_account(
        clients, spec.resource_group, spec.storage_account,
        spec.redundancy, location, spec.tags or None
    )
    disk_uri = os_disk_uri(blob_endpoint, spec.vm_name)
    logger.info(f"OS disk VHD: {disk_uri}")

    nic_id = _get_nic_id(clients, spec.resource_group, spec.nic_name)

    vm_params = build_vm_definition(spec, size_name, disk_uri, nic_id)

    logger.info("🖥️ Submitting VM creation request...")
    try:
        vm_operation = clients.compute.virtual_machines.begin_create_or_update(
            spec.resource_group, spec.vm_name, vm_params
        )
        logger.info("⏳ Waiting for VM provisioning to complete...")
        vm_result = vm_operation.result()
    except HttpResponseError as e:
        logger.error(f"❌ VM {spec.vm_name} creation failed: {e}")
        raise ProvisioningError(f"Virtual machine '{spec.vm_name}'", str(e)) from e

    logger.info(f"✅ VM {spec.vm_name} created in resource group {spec.resource_group}")
    return vm_result
