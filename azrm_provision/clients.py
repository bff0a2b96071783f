"""Azure management client bundle shared by every operation"""

import logging
from dataclasses import dataclass
from typing import Any

from azure.identity import DefaultAzureCredential
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient, SubscriptionClient
from azure.mgmt.storage import StorageManagementClient

logger = logging.getLogger(__name__)


@dataclass
class AzureClients:
    """Management clients bound to one subscription"""
    subscription_id: str
    compute: Any
    network: Any
    resource: Any
    storage: Any
    subscription: Any

    @classmethod
    def connect(cls, subscription_id: str, credential=None) -> 'AzureClients':
        """Build all clients from a single credential"""
        credential = credential or DefaultAzureCredential()
        logger.debug(f"Initializing Azure clients for subscription {subscription_id}")
        return cls(
            subscription_id=subscription_id,
            compute=ComputeManagementClient(credential, subscription_id),
            network=NetworkManagementClient(credential, subscription_id),
            resource=ResourceManagementClient(credential, subscription_id),
            storage=StorageManagementClient(credential, subscription_id),
            subscription=SubscriptionClient(credential),
        )
