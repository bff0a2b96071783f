"""Tests for VM validation and creation"""

import pytest
from azure.core.exceptions import HttpResponseError

from azrm_provision.exceptions import LookupFailedError, ProvisioningError, ValidationError
from azrm_provision.vm import DiskCreateMode, OSPlatform, VMSpec, create_vm, os_disk_uri


def make_spec(**overrides):
    values = dict(
        resource_group='Test',
        vm_name='vm1',
        location='uksouth',
        size='Standard_D2s_v3',
        admin_username='azureuser',
        admin_password='S3cret!pass',
        computer_name='vm1',
        publisher='MicrosoftWindowsServer',
        offer='WindowsServer',
        sku='2019-Datacenter',
        nic_name='vm1-nic',
        storage_account='storageacc1',
    )
    values.update(overrides)
    return VMSpec(**values)


@pytest.fixture
def nic(azure):
    return azure.add_nic('Test', 'vm1-nic')


class TestValidation:
    def test_invalid_size_aborts_before_group(self, azure, clients, nic):
        with pytest.raises(ValidationError, match='Standard_Z99'):
            create_vm(clients, make_spec(size='Standard_Z99'))
        assert azure.calls == []

    def test_size_from_other_region_rejected(self, azure, clients, nic):
        with pytest.raises(ValidationError):
            create_vm(clients, make_spec(size='Standard_NC6'))
        assert azure.calls == []

    def test_invalid_publisher_aborts(self, azure, clients, nic):
        with pytest.raises(ValidationError, match='Contoso'):
            create_vm(clients, make_spec(publisher='Contoso'))
        assert azure.calls == []

    def test_partial_publisher_name_rejected(self, azure, clients, nic):
        with pytest.raises(ValidationError):
            create_vm(clients, make_spec(publisher='Windows'))
        assert azure.calls == []

    def test_both_lookups_before_mutation(self, azure, clients, nic):
        create_vm(clients, make_spec())
        clients.compute.virtual_machine_sizes.list.assert_called_once_with(location='uksouth')
        clients.compute.virtual_machine_images.list_publishers.assert_called_once_with('uksouth')

    def test_missing_credentials(self, azure, clients, nic):
        with pytest.raises(ValidationError, match='credentials'):
            create_vm(clients, make_spec(admin_password=''))
        assert azure.calls == []

    def test_unknown_enum_value(self):
        with pytest.raises(ValidationError):
            make_spec(platform='Plan9')


class TestCreateVM:
    def test_mutation_order(self, azure, clients, nic):
        create_vm(clients, make_spec())
        assert azure.steps == ['create_group', 'create_storage', 'create_vm']

    def test_vm_definition(self, azure, clients, nic):
        create_vm(clients, make_spec(size='standard_d2s_v3', version='17763.1.1'))

        _, rg, name, params = azure.calls[-1]
        assert (rg, name) == ('Test', 'vm1')
        assert params.location == 'uksouth'
        assert params.hardware_profile.vm_size == 'Standard_D2s_v3'

        image = params.storage_profile.image_reference
        assert (image.publisher, image.offer, image.sku, image.version) == (
            'MicrosoftWindowsServer', 'WindowsServer', '2019-Datacenter', '17763.1.1'
        )

        os_disk = params.storage_profile.os_disk
        assert os_disk.vhd.uri == 'https://storageacc1.blob.core.windows.net/vhds/vm1_OSDisk.vhd'
        assert os_disk.create_option == 'FromImage'

        assert params.network_profile.network_interfaces[0].id == nic.id

    def test_windows_os_profile(self, azure, clients, nic):
        create_vm(clients, make_spec(provision_vm_agent=False, enable_auto_update=False))
        profile = azure.calls[-1][3].os_profile
        assert profile.admin_username == 'azureuser'
        assert profile.windows_configuration.provision_vm_agent is False
        assert profile.windows_configuration.enable_automatic_updates is False
        assert profile.linux_configuration is None

    def test_linux_os_profile(self, azure, clients, nic):
        create_vm(clients, make_spec(platform=OSPlatform.LINUX, publisher='Canonical',
                                     offer='UbuntuServer', sku='18.04-LTS'))
        profile = azure.calls[-1][3].os_profile
        assert profile.linux_configuration.provision_vm_agent is True
        assert profile.windows_configuration is None

    def test_windows_computer_name_truncated(self, azure, clients, nic):
        create_vm(clients, make_spec(computer_name='a-very-long-computer-name'))
        assert azure.calls[-1][3].os_profile.computer_name == 'a-very-long-com'

    def test_attach_mode(self, azure, clients, nic):
        create_vm(clients, make_spec(disk_create_mode='Attach'))
        params = azure.calls[-1][3]
        assert params.storage_profile.os_disk.create_option == DiskCreateMode.ATTACH.value
        assert params.storage_profile.os_disk.os_type == 'Windows'
        assert params.storage_profile.image_reference is None
        assert params.os_profile is None

    def test_storage_uses_requested_redundancy(self, azure, clients, nic):
        create_vm(clients, make_spec(redundancy='Premium_LRS'))
        assert azure.calls[1][3].sku.name == 'Premium_LRS'

    def test_missing_nic_stops_before_vm(self, azure, clients):
        with pytest.raises(LookupFailedError, match='vm1-nic'):
            create_vm(clients, make_spec())
        assert 'create_vm' not in azure.steps

    def test_nic_read_failure_is_wrapped(self, azure, clients, nic):
        clients.network.network_interfaces.get.side_effect = HttpResponseError(
            message='AuthorizationFailed'
        )
        with pytest.raises(ProvisioningError, match='vm1-nic'):
            create_vm(clients, make_spec())
        assert 'create_vm' not in azure.steps

    def test_storage_failure_stops_chain(self, azure, clients, nic):
        azure.fail_on = 'create_storage'
        with pytest.raises(ProvisioningError):
            create_vm(clients, make_spec())
        assert azure.steps == ['create_group', 'create_storage']

    def test_vm_failure_wrapped(self, azure, clients, nic):
        azure.fail_on = 'create_vm'
        with pytest.raises(ProvisioningError, match='vm1'):
            create_vm(clients, make_spec())


class TestOSDiskURI:
    def test_format(self):
        assert os_disk_uri('https://acct.blob.core.windows.net/', 'web01') == \
            'https://acct.blob.core.windows.net/vhds/web01_OSDisk.vhd'

    def test_missing_trailing_slash(self):
        assert os_disk_uri('https://acct.blob.core.windows.net', 'web01') == \
            'https://acct.blob.core.windows.net/vhds/web01_OSDisk.vhd'
