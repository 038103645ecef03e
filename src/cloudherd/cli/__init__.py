"""
CLI commands for cloudherd.
"""

from cloudherd.cli.dns import (
    dns_delete_command,
    dns_get_command,
    dns_upsert_command,
    route_domain_command,
)
from cloudherd.cli.instances import (
    clone_command,
    hard_reboot_command,
    list_instances_command,
    resize_command,
    show_tags_command,
    terminate_command,
)
from cloudherd.cli.load_balancing import (
    lb_deregister_command,
    lb_health_command,
    lb_register_command,
)
from cloudherd.cli.vpcs import list_vpcs_command

__all__ = [
    "clone_command",
    "dns_delete_command",
    "dns_get_command",
    "dns_upsert_command",
    "hard_reboot_command",
    "lb_deregister_command",
    "lb_health_command",
    "lb_register_command",
    "list_instances_command",
    "list_vpcs_command",
    "resize_command",
    "route_domain_command",
    "show_tags_command",
    "terminate_command",
]
