"""Command line interface"""

import argparse
import sys
from typing import List, Optional

from azure.core.exceptions import AzureError

from .clients import AzureClients
from .config import CONFIG_FILE, SECRET_FILE, Settings, get_subscription_id
from .exceptions import AzrmError, ValidationError
from .locations import list_locations
from .log import setup_logging
from .lookups import list_publishers, list_vm_sizes
from .network import AllocationMethod, create_network
from .rdp import launch_rdp
from .resource_groups import ensure_resource_group
from .storage import Redundancy, create_storage_account
from .vm import DiskCreateMode, OSPlatform, VMSpec, create_vm


def _add_location(parser: argparse.ArgumentParser):
    parser.add_argument('location', nargs='?',
                        help='Azure region (required unless config.yaml sets location)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='azrm-provision',
                                     description='Provision Azure VMs and their supporting resources')
    parser.add_argument('--subscription-id',
                        help='Azure subscription ID (will use az cli default if not provided)')
    parser.add_argument('--config', default=CONFIG_FILE,
                        help=f'YAML file with default values (default: {CONFIG_FILE})')
    parser.add_argument('--secrets', default=SECRET_FILE,
                        help=f'dotenv file with ADMIN_USERNAME/ADMIN_PASSWORD (default: {SECRET_FILE})')
    parser.add_argument('--log-file', help='Also write logs to this file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('locations', help='List regions available to the subscription')

    p = sub.add_parser('sizes', help='List VM sizes in a region')
    _add_location(p)

    p = sub.add_parser('publishers', help='List image publishers in a region')
    _add_location(p)
    p.add_argument('--pattern', default='', help='Substring the publisher name must contain')

    p = sub.add_parser('ensure-group', help='Create a resource group if it does not exist')
    p.add_argument('--resource-group', '-g', help='Resource group name')
    _add_location(p)

    p = sub.add_parser('storage', help='Create a storage account')
    p.add_argument('--resource-group', '-g', help='Resource group name')
    p.add_argument('--name', required=True, help='Storage account name')
    p.add_argument('--type', dest='redundancy', default=Redundancy.STANDARD_LRS.value,
                   choices=[r.value for r in Redundancy], help='Redundancy class')
    _add_location(p)

    p = sub.add_parser('network', help='Create public IP, security group, vnet and NIC')
    p.add_argument('--resource-group', '-g', help='Resource group name')
    p.add_argument('--nic-name', required=True, help='Network interface name')
    p.add_argument('--allocation', default=AllocationMethod.DYNAMIC.value,
                   choices=[a.value for a in AllocationMethod], help='Public IP allocation method')
    p.add_argument('--vnet-name', help='Virtual network name')
    p.add_argument('--subnet-name', help='Subnet name')
    p.add_argument('--subnet-prefix', help='Subnet CIDR')
    p.add_argument('--vnet-prefix', help='Virtual network CIDR')
    _add_location(p)

    p = sub.add_parser('vm', help='Validate and create a virtual machine')
    p.add_argument('--resource-group', '-g', help='Resource group name')
    p.add_argument('--name', required=True, help='VM name')
    p.add_argument('--size', help='VM size, e.g. Standard_D2s_v3')
    p.add_argument('--platform', default=OSPlatform.WINDOWS.value,
                   choices=[o.value for o in OSPlatform], help='OS platform')
    p.add_argument('--computer-name', help='Guest computer name (default: VM name)')
    p.add_argument('--publisher', help='Image publisher')
    p.add_argument('--offer', help='Image offer')
    p.add_argument('--sku', help='Image SKU')
    p.add_argument('--version', help='Image version (default: latest)')
    p.add_argument('--nic-name', required=True, help='Existing network interface name')
    p.add_argument('--storage-account', required=True, help='Storage account for the OS disk VHD')
    p.add_argument('--storage-type', default=Redundancy.STANDARD_LRS.value,
                   choices=[r.value for r in Redundancy], help='Storage redundancy class')
    p.add_argument('--disk-create-mode', default=DiskCreateMode.FROM_IMAGE.value,
                   choices=[d.value for d in DiskCreateMode], help='OS disk create option')
    p.add_argument('--no-vm-agent', action='store_true', help='Do not install the VM agent')
    p.add_argument('--no-auto-update', action='store_true', help='Disable automatic updates')
    p.add_argument('--admin-username', help='Admin username (overrides .env.secret)')
    p.add_argument('--admin-password', help='Admin password (overrides .env.secret)')
    _add_location(p)

    p = sub.add_parser('rdp', help='Open a remote desktop session to a VM')
    p.add_argument('--resource-group', '-g', help='Resource group name')
    p.add_argument('--name', required=True, help='VM name')
    p.add_argument('--client', help='RDP client executable (default: mstsc on Windows, xfreerdp elsewhere)')

    return parser


def _require(value, option: str):
    if not value:
        raise ValidationError(f"{option} is required (on the command line or in config.yaml)")
    return value


def run(args: argparse.Namespace, settings: Settings, clients: AzureClients) -> int:
    """Dispatch one parsed command"""
    location = getattr(args, 'location', None) or settings.location
    if args.command not in ('locations', 'rdp'):
        _require(location, 'location')
    resource_group = getattr(args, 'resource_group', None) or settings.resource_group
    tags = settings.tags or None

    if args.command == 'locations':
        for name in list_locations(clients):
            print(name)

    elif args.command == 'sizes':
        sizes = list_vm_sizes(clients, location)
        print(f"{'Name':<32} {'Cores':>5} {'MemoryMB':>9} {'MaxDisks':>8}")
        for size in sizes:
            print(f"{size.name:<32} {size.cores:>5} {size.memory_mb:>9} {size.max_data_disks:>8}")

    elif args.command == 'publishers':
        for name in list_publishers(clients, location, args.pattern):
            print(name)

    elif args.command == 'ensure-group':
        _require(resource_group, '--resource-group')
        created = ensure_resource_group(clients, resource_group, location, tags)
        print(f"✅ Resource group {resource_group} {'created' if created else 'already exists'}")

    elif args.command == 'storage':
        _require(resource_group, '--resource-group')
        endpoint = create_storage_account(clients, resource_group, args.name,
                                          args.redundancy, location, tags)
        print(f"✅ Storage account {args.name} ready")
        print(f"Blob endpoint: {endpoint}")

    elif args.command == 'network':
        _require(resource_group, '--resource-group')
        result = create_network(
            clients, resource_group, args.nic_name, args.allocation, location,
            vnet_name=args.vnet_name or settings.vnet_name,
            subnet_name=args.subnet_name or settings.subnet_name,
            subnet_prefix=args.subnet_prefix or settings.subnet_prefix,
            vnet_prefix=args.vnet_prefix or settings.vnet_prefix,
            tags=tags
        )
        print(f"✅ Network interface {result.nic_name} created")
        print(f"Public IP: {result.public_ip_name}")

    elif args.command == 'vm':
        spec = VMSpec(
            resource_group=_require(resource_group, '--resource-group'),
            vm_name=args.name,
            location=location,
            size=_require(args.size or settings.vm_size, '--size'),
            admin_username=args.admin_username or settings.admin_username,
            admin_password=args.admin_password or settings.admin_password,
            computer_name=args.computer_name or args.name,
            publisher=_require(args.publisher or settings.publisher, '--publisher'),
            offer=_require(args.offer or settings.offer, '--offer'),
            sku=_require(args.sku or settings.sku, '--sku'),
            version=args.version or settings.version,
            nic_name=args.nic_name,
            storage_account=args.storage_account,
            platform=args.platform,
            redundancy=args.storage_type,
            disk_create_mode=args.disk_create_mode,
            provision_vm_agent=not args.no_vm_agent,
            enable_auto_update=not args.no_auto_update,
            tags=settings.tags,
        )
        vm = create_vm(clients, spec)
        print(f"✅ VM created successfully!")
        print(f"VM Name: {vm.name}")
        print(f"Resource Group: {spec.resource_group}")

    elif args.command == 'rdp':
        _require(resource_group, '--resource-group')
        address = launch_rdp(clients, resource_group, args.name, args.client)
        print(f"RDP: {address}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI interface"""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        settings = Settings.load(args.config, args.secrets)
        subscription_id = get_subscription_id(args.subscription_id or settings.subscription_id)
        clients = AzureClients.connect(subscription_id)
        return run(args, settings, clients)
    except (AzrmError, AzureError) as e:
        print(f"❌ Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
