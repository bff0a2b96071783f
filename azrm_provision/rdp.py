"""Resolve a VM's public address and open a remote desktop session"""

import logging
import platform
import subprocess
from typing import List, Optional

from azure.core.exceptions import ResourceNotFoundError

from .clients import AzureClients
from .exceptions import AzrmError, LookupFailedError

logger = logging.getLogger(__name__)


def _resource_name(resource_id: str) -> str:
    return resource_id.rstrip('/').split('/')[-1]


def resolve_public_ip(clients: AzureClients, resource_group: str, vm_name: str) -> str:
    """
    Find the public IP address of a VM.

    The VM's primary NIC reference is matched against every NIC in the
    resource group; the public IP named by that NIC's first IP configuration
    is then looked up for its address.

    Raises:
        LookupFailedError: the VM, NIC, public IP or address is missing
    """
    try:
        vm = clients.compute.virtual_machines.get(resource_group, vm_name)
    except ResourceNotFoundError as e:
        raise LookupFailedError(f"VM '{vm_name}' not found in resource group {resource_group}") from e

    nic_refs = vm.network_profile.network_interfaces if vm.network_profile else None
    if not nic_refs:
        raise LookupFailedError(f"VM '{vm_name}' has no network interface")
    nic_ref = next((ref for ref in nic_refs if ref.primary), nic_refs[0])

    nic = next(
        (n for n in clients.network.network_interfaces.list(resource_group)
         if n.id.lower() == nic_ref.id.lower()),
        None
    )
    if nic is None:
        raise LookupFailedError(f"Network interface {_resource_name(nic_ref.id)} not found "
                                f"in resource group {resource_group}")

    ip_config = nic.ip_configurations[0] if nic.ip_configurations else None
    if ip_config is None or ip_config.public_ip_address is None:
        raise LookupFailedError(f"Network interface {nic.name} has no public IP")
    pip_name = _resource_name(ip_config.public_ip_address.id)

    try:
        pip = clients.network.public_ip_addresses.get(resource_group, pip_name)
    except ResourceNotFoundError as e:
        raise LookupFailedError(f"Public IP {pip_name} not found") from e

    if not pip.ip_address:
        raise LookupFailedError(f"Public IP {pip_name} has no address assigned yet")

    logger.info(f"🌐 {vm_name} is reachable at {pip.ip_address}")
    return pip.ip_address


def rdp_command(address: str, client: Optional[str] = None) -> List[str]:
    """Command line that opens an RDP session to address"""
    if client is None:
        client = 'mstsc' if platform.system() == 'Windows' else 'xfreerdp'
    return [client, f"/v:{address}"]


def launch_rdp(clients: AzureClients, resource_group: str, vm_name: str,
               client: Optional[str] = None) -> str:
    """Resolve the VM's public IP and start an RDP client against it; returns the address"""
    address = resolve_public_ip(clients, resource_group, vm_name)
    command = rdp_command(address, client)
    logger.info(f"🖥️ Starting remote desktop: {' '.join(command)}")
    try:
        subprocess.Popen(command)
    except FileNotFoundError as e:
        raise AzrmError(f"RDP client '{command[0]}' is not installed") from e
    return address
