"""
CLI commands for instance workflows.

Commands:
    cloudherd instances                       - List live instances
    cloudherd tags <instance-id>              - Show an instance's tags
    cloudherd hard-reboot <instance-id>       - Stop, start and await address
    cloudherd resize <instance-id> <type>     - Change instance type
    cloudherd clone <instance-id>             - Clone via an image snapshot
    cloudherd terminate <instance-id>         - Terminate an instance
"""

from __future__ import annotations

from cloudherd.cli.ux import confirm, info, print_key_value, print_table, spinner, success, warning
from cloudherd.core.errors import main_with_error_handling
from cloudherd.orchestration.fleet import Fleet


def _fleet(fleet: Fleet | None) -> Fleet:
    return fleet or Fleet.from_settings()


@main_with_error_handling()
def list_instances_command(*, include_terminated: bool = False, fleet: Fleet | None = None) -> int:
    instances = _fleet(fleet).get_instances(include_terminated=include_terminated)
    if not instances:
        info("No instances found")
        return 0

    rows = [
        [
            instance.id,
            instance.name or "-",
            instance.state.value,
            instance.instance_type,
            instance.public_ip or "-",
            instance.private_ip or "-",
        ]
        for instance in sorted(instances, key=lambda i: (i.name or "", i.id))
    ]
    print_table(
        "Instances",
        ["ID", "Name", "State", "Type", "Public IP", "Private IP"],
        rows,
    )
    return 0


@main_with_error_handling()
def show_tags_command(instance_id: str, *, fleet: Fleet | None = None) -> int:
    instance = _fleet(fleet).get_instance(instance_id)
    tags = instance.tags
    if not tags:
        info(f"{instance} has no tags")
        return 0
    print_key_value(dict(sorted(tags.items())), title=str(instance))
    return 0


@main_with_error_handling()
def hard_reboot_command(instance_id: str, *, fleet: Fleet | None = None) -> int:
    with spinner(f"Hard rebooting {instance_id}..."):
        instance = _fleet(fleet).hard_reboot(instance_id)
    success(f"{instance} is back up at {instance.public_ip}")
    return 0


@main_with_error_handling()
def resize_command(instance_id: str, instance_type: str, *, fleet: Fleet | None = None) -> int:
    with spinner(f"Resizing {instance_id} to {instance_type}..."):
        instance = _fleet(fleet).resize(instance_id, instance_type)
    success(f"{instance} is {instance.instance_type} at {instance.public_ip}")
    return 0


@main_with_error_handling()
def clone_command(
    instance_id: str,
    *,
    name: str | None = None,
    reuse_image: bool = False,
    no_reboot: bool = False,
    copy_tags: bool = False,
    fleet: Fleet | None = None,
) -> int:
    if no_reboot:
        warning("Snapshotting without reboot: the image's filesystem may be inconsistent")
    with spinner(f"Cloning {instance_id}..."):
        clone = _fleet(fleet).clone(
            instance_id,
            name=name,
            reuse_image=reuse_image,
            no_reboot=no_reboot,
            copy_tags=copy_tags,
        )
    success(f"Cloned {instance_id} to {clone.id} at {clone.public_ip}")
    return 0


@main_with_error_handling()
def terminate_command(
    instance_id: str,
    *,
    wait: bool = False,
    yes: bool = False,
    fleet: Fleet | None = None,
) -> int:
    if not yes and not confirm(f"Terminate {instance_id}?"):
        info("Aborted")
        return 0
    with spinner(f"Terminating {instance_id}..."):
        _fleet(fleet).instances.terminate(instance_id, wait=wait)
    success(f"Terminated {instance_id}")
    return 0
