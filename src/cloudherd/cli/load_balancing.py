"""
CLI commands for load balancer target groups.

Commands:
    cloudherd lb register <group-arn> <instance-id>     - Register a target
    cloudherd lb deregister <group-arn> <instance-id>   - Drain and deregister
    cloudherd lb health <group-arn>                     - Show target health
"""

from __future__ import annotations

from cloudherd.cli.ux import info, print_table, spinner, success
from cloudherd.core.errors import main_with_error_handling
from cloudherd.orchestration.fleet import Fleet


def _fleet(fleet: Fleet | None) -> Fleet:
    return fleet or Fleet.from_settings()


@main_with_error_handling()
def lb_register_command(
    target_group_arn: str, instance_id: str, *, wait: bool = False, fleet: Fleet | None = None
) -> int:
    with spinner(f"Registering {instance_id}..."):
        _fleet(fleet).load_balancing.register_target(
            target_group_arn, instance_id, await_healthy=wait
        )
    success(f"Registered {instance_id}" + (" (healthy)" if wait else ""))
    return 0


@main_with_error_handling()
def lb_deregister_command(
    target_group_arn: str, instance_id: str, *, wait: bool = False, fleet: Fleet | None = None
) -> int:
    with spinner(f"Deregistering {instance_id}..."):
        _fleet(fleet).load_balancing.deregister_target(
            target_group_arn, instance_id, await_drained=wait
        )
    success(f"Deregistered {instance_id}" + (" (drained)" if wait else ""))
    return 0


@main_with_error_handling()
def lb_health_command(target_group_arn: str, *, fleet: Fleet | None = None) -> int:
    health = _fleet(fleet).load_balancing.target_health(target_group_arn)
    if not health:
        info("No registered targets")
        return 0
    print_table(
        "Target health",
        ["Target", "State"],
        [[target, state.value] for target, state in sorted(health.items())],
    )
    return 0
