"""Defaults from config.yaml, secrets from .env.secret"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import AzrmError

logger = logging.getLogger(__name__)

CONFIG_FILE = 'config.yaml'
SECRET_FILE = '.env.secret'


def load_secrets(secret_file: str = SECRET_FILE) -> Dict[str, Optional[str]]:
    """Load admin credentials and subscription from .env.secret and the environment"""
    if os.path.exists(secret_file):
        load_dotenv(secret_file)
    else:
        logger.debug(f"{secret_file} not found, reading credentials from the environment")
    return {
        'admin_username': os.getenv('ADMIN_USERNAME'),
        'admin_password': os.getenv('ADMIN_PASSWORD'),
        'subscription_id': os.getenv('AZURE_SUBSCRIPTION_ID'),
    }


def load_config(config_file: str = CONFIG_FILE) -> Dict[str, Any]:
    """Load configuration from a YAML file; missing file means built-in defaults"""
    if not os.path.exists(config_file):
        logger.warning(f"⚠️  {config_file} not found, using default configuration")
        return {}
    with open(config_file, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise AzrmError(f"{config_file} must contain a mapping at the top level")
    return data


@dataclass
class Settings:
    """Defaults applied to command-line arguments that were not given"""
    location: str = None
    resource_group: str = None
    vm_size: str = None
    vnet_name: str = None
    subnet_name: str = None
    subnet_prefix: str = None
    vnet_prefix: str = None
    publisher: str = None
    offer: str = None
    sku: str = None
    version: str = None
    admin_username: str = None
    admin_password: str = None
    subscription_id: str = None
    tags: Dict[str, str] = field(default=None)

    @classmethod
    def load(cls, config_file: str = CONFIG_FILE, secret_file: str = SECRET_FILE) -> 'Settings':
        config_data = load_config(config_file)
        secrets_data = load_secrets(secret_file)

        known = {k: v for k, v in config_data.items() if k in cls.__dataclass_fields__}
        unknown = sorted(set(config_data) - set(known))
        if unknown:
            logger.warning(f"⚠️  Ignoring unknown configuration keys: {', '.join(unknown)}")

        settings = cls(**known)
        # Secrets never come from config.yaml when .env.secret provides them
        settings.admin_username = secrets_data['admin_username'] or settings.admin_username
        settings.admin_password = secrets_data['admin_password'] or settings.admin_password
        settings.subscription_id = secrets_data['subscription_id'] or settings.subscription_id
        return settings

    def __post_init__(self):
        self.vnet_name = self.vnet_name or 'azrm-vnet'
        self.subnet_name = self.subnet_name or 'default'
        self.subnet_prefix = self.subnet_prefix or '10.0.0.0/24'
        self.vnet_prefix = self.vnet_prefix or '10.0.0.0/16'
        self.version = self.version or 'latest'
        if self.tags is None:
            self.tags = {}


def get_subscription_id(explicit: Optional[str] = None) -> str:
    """Subscription from the argument, then the environment, then the Azure CLI default"""
    if explicit:
        return explicit
    try:
        result = subprocess.run(['az', 'account', 'show', '--query', 'id', '-o', 'tsv'],
                                capture_output=True, text=True, check=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise AzrmError(
            "Could not get subscription ID from Azure CLI. "
            "Run 'az login' or provide --subscription-id"
        ) from e
    return result.stdout.strip()
