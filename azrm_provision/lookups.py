"""Read-only lookups of VM sizes and image publishers for a region"""

import logging
from dataclasses import dataclass
from typing import List

from .clients import AzureClients
from .locations import validate_location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VMSize:
    name: str
    cores: int
    memory_mb: int
    max_data_disks: int


def query_vm_sizes(clients: AzureClients, location: str) -> List[VMSize]:
    """Size lookup for an already validated region"""
    sizes = [
        VMSize(
            name=size.name,
            cores=size.number_of_cores,
            memory_mb=size.memory_in_mb,
            max_data_disks=size.max_data_disk_count,
        )
        for size in clients.compute.virtual_machine_sizes.list(location=location)
    ]
    logger.debug(f"{len(sizes)} VM sizes available in {location}")
    return sorted(sizes, key=lambda s: s.name)


def query_publishers(clients: AzureClients, location: str, pattern: str = '') -> List[str]:
    """Publisher lookup for an already validated region"""
    needle = pattern.strip('*').lower()
    publishers = clients.compute.virtual_machine_images.list_publishers(location)
    names = [p.name for p in publishers if needle in p.name.lower()]
    logger.debug(f"{len(names)} publishers in {location} match '{pattern}'")
    return sorted(names)


def list_vm_sizes(clients: AzureClients, location: str) -> List[VMSize]:
    """Return the VM sizes offered in a region, sorted by name"""
    return query_vm_sizes(clients, validate_location(clients, location))


def list_publishers(clients: AzureClients, location: str, pattern: str = '') -> List[str]:
    """
    Return image publishers in a region whose name contains pattern.

    Matching is case-insensitive. Leading and trailing '*' are ignored, so
    '*Microsoft*' and 'Microsoft' select the same publishers; an empty
    pattern (or '*') selects all of them.

    Raises:
        InvalidLocationError: region is not offered by the subscription
    """
    return query_publishers(clients, validate_location(clients, location), pattern)
