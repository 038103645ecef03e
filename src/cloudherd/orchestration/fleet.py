"""
Fleet facade.

Single entry point over the instance, image, clone, DNS and load-balancing
workflows, sharing one set of provider clients and settings.
"""

from __future__ import annotations

from typing import Any

from cloudherd.config.settings import Settings, get_settings
from cloudherd.core.errors import PreconditionViolation
from cloudherd.orchestration.clone import CloneWorkflow
from cloudherd.orchestration.dns import DnsWorkflows
from cloudherd.orchestration.images import ImageWorkflows
from cloudherd.orchestration.instances import InstanceRef, InstanceWorkflows
from cloudherd.orchestration.load_balancing import LoadBalancingWorkflows
from cloudherd.providers.aws import build_clients
from cloudherd.providers.base import ProviderClients
from cloudherd.resources.dns import DnsChange
from cloudherd.resources.instance import ComputeInstance
from cloudherd.resources.vpc import Vpc


class Fleet:
    """All workflows for one AWS account and region."""

    def __init__(self, clients: ProviderClients, settings: Settings | None = None) -> None:
        self.clients = clients
        self.settings = settings or get_settings()
        self.instances = InstanceWorkflows(clients.ec2, self.settings)
        self.images = ImageWorkflows(clients.ec2, self.settings)
        self.dns = DnsWorkflows(clients.route53, self.settings)
        self.load_balancing = LoadBalancingWorkflows(clients.elbv2, self.settings)
        self._clone = CloneWorkflow(self.instances, self.images)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Fleet:
        settings = settings or get_settings()
        return cls(build_clients(settings), settings)

    # -- instances ---------------------------------------------------------

    def get_instances(self, **kwargs: Any) -> list[ComputeInstance]:
        return self.instances.list_instances(**kwargs)

    def get_instance(self, instance_id: str) -> ComputeInstance:
        return self.instances.get_instance(instance_id)

    def get_instance_optional(self, instance_id: str) -> ComputeInstance | None:
        return self.instances.get_instance_optional(instance_id)

    def hard_reboot(self, instance: InstanceRef) -> ComputeInstance:
        return self.instances.hard_reboot(instance)

    def resize(self, instance: InstanceRef, instance_type: str) -> ComputeInstance:
        return self.instances.resize(instance, instance_type)

    def clone(self, source: InstanceRef, **kwargs: Any) -> ComputeInstance:
        return self._clone.run(source, **kwargs)

    # -- DNS ---------------------------------------------------------------

    def route_domain_to_instance(
        self, domain: str, instance: InstanceRef, *, wait_for_sync: bool = False
    ) -> DnsChange:
        """Point an A record for ``domain`` at the instance's public address."""
        instance = self.instances.resolve(instance)
        if instance.public_ip is None:
            raise PreconditionViolation(
                f"instance {instance.id} has no public address",
                {"instance_id": instance.id},
            )
        return self.dns.upsert_record(domain, instance.public_ip, wait_for_sync=wait_for_sync)

    # -- networking --------------------------------------------------------

    def get_vpcs(self) -> list[Vpc]:
        response = self.clients.ec2.describe_vpcs()
        return [Vpc(description) for description in response.get("Vpcs", [])]
