"""Public IP, security group, virtual network and NIC provisioning"""

import ipaddress
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from azure.core.exceptions import HttpResponseError
from azure.mgmt.network.models import (
    NetworkInterface, NetworkInterfaceIPConfiguration,
    NetworkSecurityGroup, PublicIPAddress, SecurityRule,
    Subnet, VirtualNetwork
)

from .choices import parse_choice
from .clients import AzureClients
from .exceptions import ProvisioningError, ValidationError
from .locations import validate_location
from .resource_groups import create_if_missing

logger = logging.getLogger(__name__)

DEFAULT_VNET_NAME = 'azrm-vnet'
DEFAULT_SUBNET_NAME = 'default'
DEFAULT_SUBNET_PREFIX = '10.0.0.0/24'
DEFAULT_VNET_PREFIX = '10.0.0.0/16'


class AllocationMethod(str, Enum):
    DYNAMIC = 'Dynamic'
    STATIC = 'Static'


@dataclass(frozen=True)
class NetworkResult:
    """Identifiers of everything create_network made"""
    nic_id: str
    nic_name: str
    public_ip_id: str
    public_ip_name: str
    nsg_id: str
    vnet_id: str
    subnet_id: str


def inbound_rules() -> List[SecurityRule]:
    """Inbound rules attached to every new security group: RDP and HTTP"""
    return [
        SecurityRule(
            name='AllowRDP',
            protocol='Tcp',
            source_address_prefix='*',
            source_port_range='*',
            destination_address_prefix='*',
            destination_port_range='3389',
            access='Allow',
            direction='Inbound',
            priority=1000
        ),
        SecurityRule(
            name='AllowHTTP',
            protocol='Tcp',
            source_address_prefix='*',
            source_port_range='*',
            destination_address_prefix='*',
            destination_port_range='80',
            access='Allow',
            direction='Inbound',
            priority=1001
        )
    ]


def _check_prefix(prefix: str, label: str) -> str:
    try:
        ipaddress.ip_network(prefix)
    except ValueError as e:
        raise ValidationError(f"Invalid {label} '{prefix}': {e}") from e
    return prefix


def _create(step: str, begin: Callable, *args):
    """Submit one long-running create and wait for it, wrapping provider errors"""
    logger.info(f"Creating {step}")
    try:
        return begin(*args).result()
    except HttpResponseError as e:
        logger.error(f"❌ {step} creation failed: {e}")
        raise ProvisioningError(step, str(e)) from e


def provision_network(clients: AzureClients, resource_group: str, nic_name: str,
                      allocation: Union[str, AllocationMethod], location: str,
                      vnet_name: str = DEFAULT_VNET_NAME,
                      subnet_name: str = DEFAULT_SUBNET_NAME,
                      subnet_prefix: str = DEFAULT_SUBNET_PREFIX,
                      vnet_prefix: str = DEFAULT_VNET_PREFIX,
                      tags: Optional[Dict[str, str]] = None) -> NetworkResult:
    """Network chain without region validation; see create_network"""
    allocation = parse_choice(AllocationMethod, allocation, 'IP allocation method')
    _check_prefix(subnet_prefix, 'subnet prefix')
    _check_prefix(vnet_prefix, 'virtual network prefix')

    create_if_missing(clients, resource_group, location, tags)

    network = clients.network
    pip_name = f"{nic_name}-pip"
    nsg_name = f"{nic_name}-nsg"

    pip_params = PublicIPAddress(
        location=location,
        public_ip_allocation_method=allocation.value,
        tags=tags
    )
    pip_result = _create(f"Public IP '{pip_name}'",
                         network.public_ip_addresses.begin_create_or_update,
                         resource_group, pip_name, pip_params)

    nsg_params = NetworkSecurityGroup(
        location=location,
        security_rules=inbound_rules(),
        tags=tags
    )
    nsg_result = _create(f"Network security group '{nsg_name}'",
                         network.network_security_groups.begin_create_or_update,
                         resource_group, nsg_name, nsg_params)

    subnet_config = Subnet(
        name=subnet_name,
        address_prefix=subnet_prefix,
        network_security_group=NetworkSecurityGroup(id=nsg_result.id)
    )
    vnet_params = VirtualNetwork(
        location=location,
        address_space={'address_prefixes': [vnet_prefix]},
        subnets=[subnet_config],
        tags=tags
    )
    vnet_result = _create(f"Virtual network '{vnet_name}'",
                          network.virtual_networks.begin_create_or_update,
                          resource_group, vnet_name, vnet_params)

    subnet_id = vnet_result.subnets[0].id
    nic_params = NetworkInterface(
        location=location,
        ip_configurations=[
            NetworkInterfaceIPConfiguration(
                name='ipconfig1',
                subnet={'id': subnet_id},
                public_ip_address={'id': pip_result.id}
            )
        ],
        tags=tags
    )
    nic_result = _create(f"Network interface '{nic_name}'",
                         network.network_interfaces.begin_create_or_update,
                         resource_group, nic_name, nic_params)

    logger.info("Network infrastructure created successfully")
    return NetworkResult(
        nic_id=nic_result.id,
        nic_name=nic_name,
        public_ip_id=pip_result.id,
        public_ip_name=pip_name,
        nsg_id=nsg_result.id,
        vnet_id=vnet_result.id,
        subnet_id=subnet_id,
    )


def create_network(clients: AzureClients, resource_group: str, nic_name: str,
                   allocation: Union[str, AllocationMethod], location: str,
                   vnet_name: str = DEFAULT_VNET_NAME,
                   subnet_name: str = DEFAULT_SUBNET_NAME,
                   subnet_prefix: str = DEFAULT_SUBNET_PREFIX,
                   vnet_prefix: str = DEFAULT_VNET_PREFIX,
                   tags: Optional[Dict[str, str]] = None) -> NetworkResult:
    """
    Create the network plumbing for one VM.

    Order is fixed: resource group, public IP, security group (RDP 3389 and
    HTTP 80 inbound), virtual network with one subnet bound to the security
    group, then the NIC on that subnet with the public IP. The first failing
    step raises ProvisioningError and nothing after it runs. Resources made
    by earlier steps are left in place.
    """
    location = validate_location(clients, location)
    return provision_network(clients, resource_group, nic_name, allocation, location,
                             vnet_name=vnet_name, subnet_name=subnet_name,
                             subnet_prefix=subnet_prefix, vnet_prefix=vnet_prefix,
                             tags=tags)
