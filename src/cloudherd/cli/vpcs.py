"""
CLI commands for networking.

Commands:
    cloudherd vpcs                            - List VPCs
"""

from __future__ import annotations

from cloudherd.cli.ux import info, print_table
from cloudherd.core.errors import main_with_error_handling
from cloudherd.orchestration.fleet import Fleet


@main_with_error_handling()
def list_vpcs_command(*, fleet: Fleet | None = None) -> int:
    vpcs = (fleet or Fleet.from_settings()).get_vpcs()
    if not vpcs:
        info("No VPCs found")
        return 0

    print_table(
        "VPCs",
        ["ID", "Name", "CIDR", "Default"],
        [
            [vpc.id, vpc.name or "-", vpc.cidr_block or "-", "yes" if vpc.is_default else ""]
            for vpc in vpcs
        ],
    )
    return 0
