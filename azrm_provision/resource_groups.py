"""Idempotent resource group creation"""

import logging
from typing import Dict, Optional

from azure.core.exceptions import HttpResponseError

from .clients import AzureClients
from .exceptions import ResourceGroupError
from .locations import validate_location

logger = logging.getLogger(__name__)


def create_if_missing(clients: AzureClients, name: str, location: str,
                      tags: Optional[Dict[str, str]] = None) -> bool:
    """Create the group unless it already exists; location is trusted as given"""
    try:
        exists = clients.resource.resource_groups.check_existence(name)
    except HttpResponseError as e:
        logger.error(f"❌ Could not check resource group {name}: {e}")
        raise ResourceGroupError(f"Resource group '{name}'", str(e)) from e
    if exists:
        logger.info(f"Resource group {name} already exists")
        return False

    logger.info(f"Creating resource group {name} in {location}")
    rg_params = {'location': location}
    if tags:
        rg_params['tags'] = tags
    try:
        clients.resource.resource_groups.create_or_update(name, rg_params)
    except HttpResponseError as e:
        logger.error(f"❌ Could not create resource group {name}: {e}")
        raise ResourceGroupError(f"Resource group '{name}'", str(e)) from e

    logger.info(f"Resource group {name} created")
    return True


def ensure_resource_group(clients: AzureClients, name: str, location: str,
                          tags: Optional[Dict[str, str]] = None) -> bool:
    """
    Make sure a resource group exists in the given region.

    Returns True when the group was created by this call and False when it
    was already there. A creation failure raises ResourceGroupError, so a
    normal return always means the group exists.
    """
    location = validate_location(clients, location)
    return create_if_missing(clients, name, location, tags)
