"""Storage account provisioning"""

import logging
import re
from enum import Enum
from typing import Dict, Optional, Union

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError
from azure.mgmt.storage.models import Kind, Sku, StorageAccountCreateParameters

from .choices import parse_choice
from .clients import AzureClients
from .exceptions import ProvisioningError, ValidationError
from .locations import validate_location
from .resource_groups import create_if_missing

logger = logging.getLogger(__name__)

STORAGE_NAME_PATTERN = re.compile(r'^[a-z0-9]{3,24}$')


class Redundancy(str, Enum):
    """Storage replication classes accepted for new accounts"""
    PREMIUM_LRS = 'Premium_LRS'
    STANDARD_GRS = 'Standard_GRS'
    STANDARD_LRS = 'Standard_LRS'
    STANDARD_RAGRS = 'Standard_RAGRS'
    STANDARD_ZRS = 'Standard_ZRS'


def validate_storage_name(name: str) -> str:
    """Storage account names are 3-24 lower-case letters and digits"""
    if not name or not STORAGE_NAME_PATTERN.match(name):
        raise ValidationError(
            f"Invalid storage account name '{name}': use 3-24 lower-case letters and digits"
        )
    return name


def provision_storage_account(clients: AzureClients, resource_group: str, name: str,
                              redundancy: Union[str, Redundancy], location: str,
                              tags: Optional[Dict[str, str]] = None) -> str:
    """Ensure the group, then create (or reuse) the account and return its blob endpoint"""
    redundancy = parse_choice(Redundancy, redundancy, 'redundancy class')
    validate_storage_name(name)

    create_if_missing(clients, resource_group, location, tags)

    try:
        account = clients.storage.storage_accounts.get_properties(resource_group, name)
        logger.info(f"Using existing storage account: {name}")
        return account.primary_endpoints.blob
    except ResourceNotFoundError:
        pass
    except HttpResponseError as e:
        logger.error(f"❌ Could not read storage account {name}: {e}")
        raise ProvisioningError(f"Storage account '{name}'", str(e)) from e

    logger.info(f"Creating storage account: {name} ({redundancy.value})")
    storage_params = StorageAccountCreateParameters(
        sku=Sku(name=redundancy.value),
        kind=Kind.storage_v2,
        location=location,
        tags=tags
    )

    try:
        operation = clients.storage.storage_accounts.begin_create(
            resource_group, name, storage_params
        )
        result = operation.result()
    except HttpResponseError as e:
        logger.error(f"❌ Failed to create storage account {name}: {e}")
        raise ProvisioningError(f"Storage account '{name}'", str(e)) from e

    logger.info(f"Storage account created successfully: {name}")
    logger.debug(f"Storage account provisioning state: {result.provisioning_state}")
    return result.primary_endpoints.blob


def create_storage_account(clients: AzureClients, resource_group: str, name: str,
                           redundancy: Union[str, Redundancy], location: str,
                           tags: Optional[Dict[str, str]] = None) -> str:
    """
    Create a storage account, creating its resource group first if needed.

    Calling it again with the same inputs reuses the existing account.

    Returns:
        The account's primary blob endpoint, e.g. https://name.blob.core.windows.net/
    """
    location = validate_location(clients, location)
    return provision_storage_account(clients, resource_group, name, redundancy, location, tags)
