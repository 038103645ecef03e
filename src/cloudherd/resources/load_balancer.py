"""ELBv2 load balancer and target group handles."""

from __future__ import annotations

from enum import Enum
from typing import Any

import structlog

from cloudherd.core.errors import require
from cloudherd.utils import exactly_one, normalize

logger = structlog.get_logger()


class TargetHealthState(str, Enum):
    INITIAL = "initial"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNHEALTHY_DRAINING = "unhealthy.draining"
    UNUSED = "unused"
    DRAINING = "draining"
    UNAVAILABLE = "unavailable"

    @property
    def is_draining(self) -> bool:
        return self in (TargetHealthState.DRAINING, TargetHealthState.UNHEALTHY_DRAINING)


class TargetGroup:
    def __init__(self, elbv2: Any, arn: str, description: dict[str, Any] | None = None) -> None:
        self._elbv2 = elbv2
        self._arn = require(arn, "target group arn")
        self._description = description or {}

    @property
    def arn(self) -> str:
        return self._arn

    @property
    def name(self) -> str | None:
        return normalize(self._description.get("TargetGroupName"))

    def targets_with_health(self) -> dict[str, TargetHealthState]:
        """Fresh health report: target id -> health state."""
        response = self._elbv2.describe_target_health(TargetGroupArn=self.arn)
        return {
            item["Target"]["Id"]: TargetHealthState(item["TargetHealth"]["State"])
            for item in response.get("TargetHealthDescriptions", [])
        }

    def targets(self) -> list[str]:
        return list(self.targets_with_health())

    def target_health(self, target_id: str) -> TargetHealthState | None:
        """Health of one target; None when the group no longer reports it."""
        return self.targets_with_health().get(target_id)

    @staticmethod
    def _target(target_id: str, port: int | None) -> dict[str, Any]:
        target: dict[str, Any] = {"Id": require(target_id, "target id")}
        if port is not None:
            target["Port"] = port
        return target

    def register(self, target_id: str, *, port: int | None = None) -> None:
        logger.info("target_register_requested", target_group=self.arn, target_id=target_id)
        self._elbv2.register_targets(
            TargetGroupArn=self.arn,
            Targets=[self._target(target_id, port)],
        )

    def deregister(self, target_id: str, *, port: int | None = None) -> None:
        logger.info("target_deregister_requested", target_group=self.arn, target_id=target_id)
        self._elbv2.deregister_targets(
            TargetGroupArn=self.arn,
            Targets=[self._target(target_id, port)],
        )

    def __str__(self) -> str:
        return self.name or self.arn


class LoadBalancer:
    def __init__(self, elbv2: Any, description: dict[str, Any]) -> None:
        self._elbv2 = elbv2
        self._description = description
        self._target_group: TargetGroup | None = None

    @property
    def arn(self) -> str:
        return self._description["LoadBalancerArn"]

    @property
    def name(self) -> str:
        return self._description["LoadBalancerName"]

    @property
    def dns_name(self) -> str | None:
        return normalize(self._description.get("DNSName"))

    def target_groups(self) -> list[TargetGroup]:
        response = self._elbv2.describe_target_groups(LoadBalancerArn=self.arn)
        return [
            TargetGroup(self._elbv2, group["TargetGroupArn"], group)
            for group in response.get("TargetGroups", [])
        ]

    @property
    def target_group(self) -> TargetGroup:
        """The load balancer's only target group, looked up once per handle."""
        if self._target_group is None:
            self._target_group = exactly_one(
                self.target_groups(), f"target group for load balancer {self.name}"
            )
        return self._target_group

    def __str__(self) -> str:
        return self.name
