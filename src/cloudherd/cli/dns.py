"""
CLI commands for DNS records.

Commands:
    cloudherd dns get <name>                  - Show a record
    cloudherd dns upsert <name> <value>       - Create or replace a record
    cloudherd dns delete <name>               - Delete a record
    cloudherd route-domain <domain> <id>      - Point a domain at an instance
"""

from __future__ import annotations

from cloudherd.cli.ux import error, print_key_value, spinner, success
from cloudherd.core.errors import ExitCode, main_with_error_handling
from cloudherd.orchestration.fleet import Fleet


def _fleet(fleet: Fleet | None) -> Fleet:
    return fleet or Fleet.from_settings()


@main_with_error_handling()
def dns_get_command(name: str, *, fleet: Fleet | None = None) -> int:
    record = _fleet(fleet).dns.get_record(name)
    if record is None:
        error(f"No record named {name}")
        return ExitCode.PRECONDITION_FAILED
    print_key_value(
        {
            "type": str(getattr(record.type, "value", record.type)),
            "value": record.value,
            "ttl": str(record.ttl) if record.ttl is not None else "-",
            "zone": record.zone_id or "-",
        },
        title=record.name,
    )
    return 0


@main_with_error_handling()
def dns_upsert_command(
    name: str, value: str, *, wait: bool = False, fleet: Fleet | None = None
) -> int:
    with spinner(f"Pointing {name} at {value}..."):
        change = _fleet(fleet).dns.upsert_record(name, value, wait_for_sync=wait)
    success(f"{name} -> {value} ({change.status.value})")
    return 0


@main_with_error_handling()
def dns_delete_command(name: str, *, wait: bool = False, fleet: Fleet | None = None) -> int:
    with spinner(f"Deleting {name}..."):
        change = _fleet(fleet).dns.delete_record(name, wait_for_sync=wait)
    success(f"Deleted {name} ({change.status.value})")
    return 0


@main_with_error_handling()
def route_domain_command(
    domain: str, instance_id: str, *, wait: bool = False, fleet: Fleet | None = None
) -> int:
    with spinner(f"Routing {domain} to {instance_id}..."):
        change = _fleet(fleet).route_domain_to_instance(domain, instance_id, wait_for_sync=wait)
    success(f"{domain} routed to {instance_id} ({change.status.value})")
    return 0
