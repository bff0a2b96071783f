"""Region lookup and validation"""

import logging
from typing import List

from .clients import AzureClients
from .exceptions import InvalidLocationError

logger = logging.getLogger(__name__)


def list_locations(clients: AzureClients) -> List[str]:
    """Return the region names available to the subscription, sorted"""
    locations = clients.subscription.subscriptions.list_locations(clients.subscription_id)
    return sorted(loc.name for loc in locations)


def validate_location(clients: AzureClients, location: str) -> str:
    """
    Check a region against the live list offered by the subscription.

    The list is fetched on every call; nothing is cached.

    Returns:
        The normalised (lower-case) region name

    Raises:
        InvalidLocationError: region is empty or not offered
    """
    normalised = (location or '').strip().lower()
    valid = list_locations(clients)
    if normalised not in valid:
        logger.error(f"❌ Location '{location}' is not available in this subscription")
        raise InvalidLocationError(location, valid)
    logger.debug(f"Location {normalised} validated")
    return normalised
