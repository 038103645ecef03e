"""
cloudherd command-line entry point.

Usage:
    cloudherd [--verbose] <command> [args]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from cloudherd import __version__
from cloudherd.config.settings import get_settings
from cloudherd.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudherd", description="Convergent AWS lifecycle workflows"
    )
    parser.add_argument("--version", action="version", version=f"cloudherd {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log poll iterations")
    subparsers = parser.add_subparsers(dest="command")

    instances_parser = subparsers.add_parser("instances", help="List instances")
    instances_parser.add_argument(
        "--all", action="store_true", dest="include_terminated", help="Include terminated"
    )

    tags_parser = subparsers.add_parser("tags", help="Show an instance's tags")
    tags_parser.add_argument("instance_id")

    reboot_parser = subparsers.add_parser(
        "hard-reboot", help="Stop (escalating to force), start and await a public IP"
    )
    reboot_parser.add_argument("instance_id")

    resize_parser = subparsers.add_parser("resize", help="Change an instance's type")
    resize_parser.add_argument("instance_id")
    resize_parser.add_argument("instance_type", help="e.g. t3.large")

    clone_parser = subparsers.add_parser("clone", help="Clone an instance through an image")
    clone_parser.add_argument("instance_id")
    clone_parser.add_argument("--name", help="Name tag for the clone")
    clone_parser.add_argument(
        "--reuse-image", action="store_true", help="Reuse an image named after the source id"
    )
    clone_parser.add_argument(
        "--no-reboot", action="store_true", help="Snapshot without rebooting the source"
    )
    clone_parser.add_argument("--copy-tags", action="store_true", help="Copy the source's tags")

    terminate_parser = subparsers.add_parser("terminate", help="Terminate an instance")
    terminate_parser.add_argument("instance_id")
    terminate_parser.add_argument("--wait", action="store_true")
    terminate_parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    subparsers.add_parser("vpcs", help="List VPCs")

    route_parser = subparsers.add_parser(
        "route-domain", help="Point a domain at an instance's public IP"
    )
    route_parser.add_argument("domain")
    route_parser.add_argument("instance_id")
    route_parser.add_argument("--wait", action="store_true", help="Await DNS propagation")

    dns_parser = subparsers.add_parser("dns", help="DNS records")
    dns_subparsers = dns_parser.add_subparsers(dest="dns_command")
    dns_get = dns_subparsers.add_parser("get", help="Show a record")
    dns_get.add_argument("name")
    dns_upsert = dns_subparsers.add_parser("upsert", help="Create or replace a record")
    dns_upsert.add_argument("name")
    dns_upsert.add_argument("value", help="IPv4 address (A) or hostname (CNAME)")
    dns_upsert.add_argument("--wait", action="store_true", help="Await DNS propagation")
    dns_delete = dns_subparsers.add_parser("delete", help="Delete a record")
    dns_delete.add_argument("name")
    dns_delete.add_argument("--wait", action="store_true", help="Await DNS propagation")

    lb_parser = subparsers.add_parser("lb", help="Load balancer target groups")
    lb_subparsers = lb_parser.add_subparsers(dest="lb_command")
    lb_register = lb_subparsers.add_parser("register", help="Register a target")
    lb_register.add_argument("target_group_arn")
    lb_register.add_argument("instance_id")
    lb_register.add_argument("--wait", action="store_true", help="Await healthy")
    lb_deregister = lb_subparsers.add_parser("deregister", help="Deregister a target")
    lb_deregister.add_argument("target_group_arn")
    lb_deregister.add_argument("instance_id")
    lb_deregister.add_argument("--wait", action="store_true", help="Await fully drained")
    lb_health = lb_subparsers.add_parser("health", help="Show target health")
    lb_health.add_argument("target_group_arn")

    return parser


def run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.command == "instances":
        from cloudherd.cli.instances import list_instances_command

        return list_instances_command(include_terminated=args.include_terminated)

    if args.command == "tags":
        from cloudherd.cli.instances import show_tags_command

        return show_tags_command(args.instance_id)

    if args.command == "hard-reboot":
        from cloudherd.cli.instances import hard_reboot_command

        return hard_reboot_command(args.instance_id)

    if args.command == "resize":
        from cloudherd.cli.instances import resize_command

        return resize_command(args.instance_id, args.instance_type)

    if args.command == "clone":
        from cloudherd.cli.instances import clone_command

        return clone_command(
            args.instance_id,
            name=args.name,
            reuse_image=args.reuse_image,
            no_reboot=args.no_reboot,
            copy_tags=args.copy_tags,
        )

    if args.command == "terminate":
        from cloudherd.cli.instances import terminate_command

        return terminate_command(args.instance_id, wait=args.wait, yes=args.yes)

    if args.command == "vpcs":
        from cloudherd.cli.vpcs import list_vpcs_command

        return list_vpcs_command()

    if args.command == "route-domain":
        from cloudherd.cli.dns import route_domain_command

        return route_domain_command(args.domain, args.instance_id, wait=args.wait)

    if args.command == "dns":
        from cloudherd.cli import dns

        if args.dns_command == "get":
            return dns.dns_get_command(args.name)
        if args.dns_command == "upsert":
            return dns.dns_upsert_command(args.name, args.value, wait=args.wait)
        if args.dns_command == "delete":
            return dns.dns_delete_command(args.name, wait=args.wait)

    if args.command == "lb":
        from cloudherd.cli import load_balancing

        if args.lb_command == "register":
            return load_balancing.lb_register_command(
                args.target_group_arn, args.instance_id, wait=args.wait
            )
        if args.lb_command == "deregister":
            return load_balancing.lb_deregister_command(
                args.target_group_arn, args.instance_id, wait=args.wait
            )
        if args.lb_command == "health":
            return load_balancing.lb_health_command(args.target_group_arn)

    parser.print_help()
    return 2


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else get_settings().log_level.upper()
    configure_logging(level)

    sys.exit(run(args, parser))


if __name__ == "__main__":
    main()
