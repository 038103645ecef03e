"""Tests for the cloudherd CLI parser and commands."""

from unittest.mock import MagicMock, patch

import pytest
from cloudherd.cli import dns as dns_cli
from cloudherd.cli import instances as instances_cli
from cloudherd.cli import load_balancing as lb_cli
from cloudherd.cli import vpcs as vpcs_cli
from cloudherd.cli.main import build_parser, run
from cloudherd.core.errors import ConvergenceTimeout, ExitCode, PreconditionViolation
from cloudherd.resources.dns import ChangeStatus, DnsRecord, RecordType
from cloudherd.resources.load_balancer import TargetHealthState
from cloudherd.resources.vpc import Vpc
from factories import client_error


def dispatch(argv):
    parser = build_parser()
    return run(parser.parse_args(argv), parser)


@pytest.fixture
def fleet():
    return MagicMock()


class TestParser:
    def test_clone_flags(self):
        args = build_parser().parse_args(
            ["clone", "i-1", "--reuse-image", "--no-reboot", "--copy-tags", "--name", "web-2"]
        )

        assert args.instance_id == "i-1"
        assert args.reuse_image and args.no_reboot and args.copy_tags
        assert args.name == "web-2"

    def test_instances_all(self):
        assert build_parser().parse_args(["instances", "--all"]).include_terminated

    def test_version_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "cloudherd" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert dispatch([]) == 2
        assert "usage" in capsys.readouterr().out

    def test_dns_without_subcommand_prints_help(self):
        assert dispatch(["dns"]) == 2


class TestDispatch:
    def test_resize(self):
        with patch("cloudherd.cli.instances.resize_command", return_value=0) as command:
            assert dispatch(["resize", "i-1", "t3.large"]) == 0

        command.assert_called_once_with("i-1", "t3.large")

    def test_clone(self):
        with patch("cloudherd.cli.instances.clone_command", return_value=0) as command:
            dispatch(["clone", "i-1", "--copy-tags"])

        command.assert_called_once_with(
            "i-1", name=None, reuse_image=False, no_reboot=False, copy_tags=True
        )

    def test_dns_upsert(self):
        with patch("cloudherd.cli.dns.dns_upsert_command", return_value=0) as command:
            dispatch(["dns", "upsert", "www.example.com", "1.2.3.4", "--wait"])

        command.assert_called_once_with("www.example.com", "1.2.3.4", wait=True)

    def test_lb_deregister(self):
        with patch("cloudherd.cli.load_balancing.lb_deregister_command", return_value=0) as command:
            dispatch(["lb", "deregister", "arn:tg/web", "i-1"])

        command.assert_called_once_with("arn:tg/web", "i-1", wait=False)

    def test_exit_code_passes_through(self):
        with patch("cloudherd.cli.instances.hard_reboot_command", return_value=13):
            assert dispatch(["hard-reboot", "i-1"]) == 13


class TestInstanceCommands:
    def test_hard_reboot(self, fleet):
        fleet.hard_reboot.return_value = MagicMock(public_ip="1.2.3.4")

        assert instances_cli.hard_reboot_command("i-1", fleet=fleet) == 0
        fleet.hard_reboot.assert_called_once_with("i-1")

    def test_timeout_maps_to_exit_code(self, fleet):
        fleet.hard_reboot.side_effect = ConvergenceTimeout("could not stop", timeout=540)

        assert instances_cli.hard_reboot_command("i-1", fleet=fleet) == ExitCode.TIMEOUT

    def test_provider_error_maps_to_exit_code(self, fleet):
        fleet.resize.side_effect = client_error("UnauthorizedOperation")

        assert instances_cli.resize_command("i-1", "t3.large", fleet=fleet) == ExitCode.PROVIDER_ERROR

    def test_clone_passes_options(self, fleet):
        fleet.clone.return_value = MagicMock(id="i-2", public_ip="5.5.5.5")

        assert instances_cli.clone_command("i-1", no_reboot=True, fleet=fleet) == 0
        fleet.clone.assert_called_once_with(
            "i-1", name=None, reuse_image=False, no_reboot=True, copy_tags=False
        )

    def test_terminate_needs_confirmation(self, fleet):
        with patch("cloudherd.cli.instances.confirm", return_value=False):
            assert instances_cli.terminate_command("i-1", fleet=fleet) == 0

        fleet.instances.terminate.assert_not_called()

    def test_terminate_with_yes(self, fleet):
        assert instances_cli.terminate_command("i-1", yes=True, wait=True, fleet=fleet) == 0

        fleet.instances.terminate.assert_called_once_with("i-1", wait=True)

    def test_list_instances(self, fleet):
        fleet.get_instances.return_value = []

        assert instances_cli.list_instances_command(fleet=fleet) == 0
        fleet.get_instances.assert_called_once_with(include_terminated=False)


class TestDnsCommands:
    def test_get_missing_record(self, fleet):
        fleet.dns.get_record.return_value = None

        assert (
            dns_cli.dns_get_command("www.example.com", fleet=fleet)
            == ExitCode.PRECONDITION_FAILED
        )

    def test_get_record(self, fleet):
        fleet.dns.get_record.return_value = DnsRecord(
            name="www.example.com", type=RecordType.A, value="1.2.3.4", ttl=300
        )

        assert dns_cli.dns_get_command("www.example.com", fleet=fleet) == 0

    def test_upsert(self, fleet):
        fleet.dns.upsert_record.return_value = MagicMock(status=ChangeStatus.INSYNC)

        assert dns_cli.dns_upsert_command("www.example.com", "1.2.3.4", wait=True, fleet=fleet) == 0
        fleet.dns.upsert_record.assert_called_once_with(
            "www.example.com", "1.2.3.4", wait_for_sync=True
        )

    def test_route_domain_without_address(self, fleet):
        fleet.route_domain_to_instance.side_effect = PreconditionViolation("no public address")

        assert (
            dns_cli.route_domain_command("www.example.com", "i-1", fleet=fleet)
            == ExitCode.PRECONDITION_FAILED
        )


class TestLoadBalancingCommands:
    def test_register_waits_when_asked(self, fleet):
        assert lb_cli.lb_register_command("arn:tg/web", "i-1", wait=True, fleet=fleet) == 0

        fleet.load_balancing.register_target.assert_called_once_with(
            "arn:tg/web", "i-1", await_healthy=True
        )

    def test_deregister(self, fleet):
        assert lb_cli.lb_deregister_command("arn:tg/web", "i-1", fleet=fleet) == 0

        fleet.load_balancing.deregister_target.assert_called_once_with(
            "arn:tg/web", "i-1", await_drained=False
        )

    def test_health(self, fleet):
        fleet.load_balancing.target_health.return_value = {"i-1": TargetHealthState.HEALTHY}

        assert lb_cli.lb_health_command("arn:tg/web", fleet=fleet) == 0


class TestVpcCommands:
    def test_lists_vpcs(self, fleet):
        fleet.get_vpcs.return_value = [
            Vpc({"VpcId": "vpc-1", "CidrBlock": "10.0.0.0/16", "IsDefault": True}),
        ]

        with patch("cloudherd.cli.vpcs.print_table") as table:
            assert vpcs_cli.list_vpcs_command(fleet=fleet) == 0

        assert table.call_args.args[2] == [["vpc-1", "-", "10.0.0.0/16", "yes"]]

    def test_dispatch(self):
        with patch("cloudherd.cli.vpcs.list_vpcs_command", return_value=0) as command:
            assert dispatch(["vpcs"]) == 0

        command.assert_called_once_with()
