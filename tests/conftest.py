"""
Shared test fixtures.

FakeAzure stands in for the management clients: reads come from in-memory
catalogues and every mutating call is appended to ``calls`` so tests can
assert on ordering and on what was (or was not) created.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from azrm_provision.clients import AzureClients

SUB = '/subscriptions/00000000-0000-0000-0000-000000000000'

SIZES = {
    'uksouth': [
        ('Standard_D2s_v3', 2, 8192, 4),
        ('Standard_B2s', 2, 4096, 4),
        ('Standard_A1_v2', 1, 2048, 2),
    ],
    'eastus': [
        ('Standard_NC6', 6, 57344, 24),
    ],
}

PUBLISHERS = {
    'uksouth': ['MicrosoftWindowsServer', 'MicrosoftWindowsDesktop', 'Canonical', 'RedHat'],
    'eastus': ['Canonical', 'OpenLogic'],
}


def _poller(result):
    poller = MagicMock()
    poller.result.return_value = result
    return poller


def _rid(rg, provider, kind, name):
    return f"{SUB}/resourceGroups/{rg}/providers/{provider}/{kind}/{name}"


class FakeAzure:
    def __init__(self):
        self.calls = []
        self.groups = set()
        self.accounts = {}
        self.nics = {}
        self.public_ips = {}
        self.vms = {}
        self.fail_on = None

        self.clients = AzureClients(
            subscription_id='00000000-0000-0000-0000-000000000000',
            compute=MagicMock(),
            network=MagicMock(),
            resource=MagicMock(),
            storage=MagicMock(),
            subscription=MagicMock(),
        )
        c = self.clients

        c.subscription.subscriptions.list_locations.side_effect = lambda sub_id: [
            SimpleNamespace(name=name) for name in SIZES
        ]

        c.resource.resource_groups.check_existence.side_effect = lambda name: name in self.groups
        c.resource.resource_groups.create_or_update.side_effect = self._create_group

        c.storage.storage_accounts.get_properties.side_effect = self._get_account
        c.storage.storage_accounts.begin_create.side_effect = self._create_account

        c.network.public_ip_addresses.begin_create_or_update.side_effect = self._create_pip
        c.network.public_ip_addresses.get.side_effect = self._get_pip
        c.network.network_security_groups.begin_create_or_update.side_effect = self._create_nsg
        c.network.virtual_networks.begin_create_or_update.side_effect = self._create_vnet
        c.network.network_interfaces.begin_create_or_update.side_effect = self._create_nic
        c.network.network_interfaces.get.side_effect = self._get_nic
        c.network.network_interfaces.list.side_effect = lambda rg: [
            nic for (group, _), nic in self.nics.items() if group == rg
        ]

        c.compute.virtual_machine_sizes.list.side_effect = lambda location: [
            SimpleNamespace(name=n, number_of_cores=cores, memory_in_mb=mem, max_data_disk_count=disks)
            for n, cores, mem, disks in SIZES.get(location, [])
        ]
        c.compute.virtual_machine_images.list_publishers.side_effect = lambda location: [
            SimpleNamespace(name=n) for n in PUBLISHERS.get(location, [])
        ]
        c.compute.virtual_machines.begin_create_or_update.side_effect = self._create_vm
        c.compute.virtual_machines.get.side_effect = self._get_vm

    def _record(self, step, *args):
        self.calls.append((step,) + args)
        if self.fail_on == step:
            raise HttpResponseError(message=f"{step} rejected")

    @property
    def steps(self):
        return [call[0] for call in self.calls]

    def _create_group(self, name, params):
        self._record('create_group', name, params)
        self.groups.add(name)
        return SimpleNamespace(name=name, location=params['location'])

    def _get_account(self, rg, name):
        if (rg, name) not in self.accounts:
            raise ResourceNotFoundError(message=f"Storage account {name} not found")
        return self.accounts[(rg, name)]

    def _create_account(self, rg, name, params):
        self._record('create_storage', rg, name, params)
        account = SimpleNamespace(
            name=name,
            location=params.location,
            provisioning_state='Succeeded',
            primary_endpoints=SimpleNamespace(blob=f"https://{name}.blob.core.windows.net/"),
        )
        self.accounts[(rg, name)] = account
        return _poller(account)

    def _create_pip(self, rg, name, params):
        self._record('create_public_ip', rg, name, params)
        pip = SimpleNamespace(id=_rid(rg, 'Microsoft.Network', 'publicIPAddresses', name),
                              name=name, ip_address='20.0.0.4')
        self.public_ips[(rg, name)] = pip
        return _poller(pip)

    def _get_pip(self, rg, name):
        if (rg, name) not in self.public_ips:
            raise ResourceNotFoundError(message=f"Public IP {name} not found")
        return self.public_ips[(rg, name)]

    def _create_nsg(self, rg, name, params):
        self._record('create_nsg', rg, name, params)
        return _poller(SimpleNamespace(id=_rid(rg, 'Microsoft.Network', 'networkSecurityGroups', name)))

    def _create_vnet(self, rg, name, params):
        self._record('create_vnet', rg, name, params)
        vnet_id = _rid(rg, 'Microsoft.Network', 'virtualNetworks', name)
        subnets = [SimpleNamespace(id=f"{vnet_id}/subnets/{s.name}", name=s.name) for s in params.subnets]
        return _poller(SimpleNamespace(id=vnet_id, subnets=subnets))

    def _create_nic(self, rg, name, params):
        self._record('create_nic', rg, name, params)
        nic = self.add_nic(rg, name, params.ip_configurations[0].public_ip_address['id'])
        return _poller(nic)

    def add_nic(self, rg, name, public_ip_id=None):
        ip_config = SimpleNamespace(
            public_ip_address=SimpleNamespace(id=public_ip_id) if public_ip_id else None
        )
        nic = SimpleNamespace(id=_rid(rg, 'Microsoft.Network', 'networkInterfaces', name),
                              name=name, ip_configurations=[ip_config])
        self.nics[(rg, name)] = nic
        return nic

    def add_public_ip(self, rg, name, address='20.0.0.4'):
        pip = SimpleNamespace(id=_rid(rg, 'Microsoft.Network', 'publicIPAddresses', name),
                              name=name, ip_address=address)
        self.public_ips[(rg, name)] = pip
        return pip

    def _get_nic(self, rg, name):
        if (rg, name) not in self.nics:
            raise ResourceNotFoundError(message=f"Network interface {name} not found")
        return self.nics[(rg, name)]

    def _create_vm(self, rg, name, params):
        self._record('create_vm', rg, name, params)
        vm = SimpleNamespace(name=name, network_profile=params.network_profile)
        self.vms[(rg, name)] = vm
        return _poller(vm)

    def add_vm(self, rg, name, nic_id):
        self.vms[(rg, name)] = SimpleNamespace(
            name=name,
            network_profile=SimpleNamespace(
                network_interfaces=[SimpleNamespace(id=nic_id, primary=True)]
            ),
        )

    def _get_vm(self, rg, name):
        if (rg, name) not in self.vms:
            raise ResourceNotFoundError(message=f"VM {name} not found")
        return self.vms[(rg, name)]


@pytest.fixture
def azure():
    """In-memory stand-in for the Azure management clients"""
    return FakeAzure()


@pytest.fixture
def clients(azure):
    return azure.clients
