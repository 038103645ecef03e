"""Target group registration and drain workflows."""

from __future__ import annotations

from typing import Any, Callable

from botocore.exceptions import ClientError

from cloudherd.config.settings import Settings, get_settings
from cloudherd.core.errors import require
from cloudherd.logging import bind_context
from cloudherd.poller import await_condition
from cloudherd.resources.load_balancer import LoadBalancer, TargetGroup, TargetHealthState
from cloudherd.utils import exactly_one

TargetGroupRef = TargetGroup | str


def is_drained(state: TargetHealthState | None) -> bool:
    """A deregistered target has converged once it neither drains nor serves."""
    return state is None or not (state.is_draining or state is TargetHealthState.HEALTHY)


def is_healthy(state: TargetHealthState | None) -> bool:
    return state is TargetHealthState.HEALTHY


class LoadBalancingWorkflows:
    def __init__(self, elbv2: Any, settings: Settings | None = None) -> None:
        self._elbv2 = elbv2
        self._settings = settings or get_settings()

    def list_load_balancers(self, names: list[str] | None = None) -> list[LoadBalancer]:
        request: dict[str, Any] = {}
        if names:
            request["Names"] = names
        found: list[LoadBalancer] = []
        while True:
            response = self._elbv2.describe_load_balancers(**request)
            found.extend(
                LoadBalancer(self._elbv2, description)
                for description in response.get("LoadBalancers", [])
            )
            marker = response.get("NextMarker")
            if not marker:
                return found
            request["Marker"] = marker

    def get_load_balancer(self, name: str) -> LoadBalancer:
        name = require(name, "load balancer name")
        try:
            found = self.list_load_balancers(names=[name])
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "LoadBalancerNotFound":
                raise
            found = []
        return exactly_one(found, f"load balancer {name}")

    def target_group(self, target_group: TargetGroupRef) -> TargetGroup:
        if isinstance(target_group, TargetGroup):
            return target_group
        return TargetGroup(self._elbv2, require(target_group, "target group arn"))

    def await_target(
        self,
        group: TargetGroup,
        target_id: str,
        converged: Callable[[TargetHealthState | None], bool],
        *,
        label: str,
        timeout: float | None = None,
    ) -> None:
        await_condition(
            lambda: converged(group.target_health(target_id)),
            interval=self._settings.target_health_poll_interval,
            timeout=self._settings.target_health_timeout if timeout is None else timeout,
            label=label,
        )

    def register_target(
        self,
        target_group: TargetGroupRef,
        target_id: str,
        *,
        await_healthy: bool = False,
        port: int | None = None,
    ) -> None:
        """Register a target; with ``await_healthy`` block until it is strictly healthy."""
        target_id = require(target_id, "target id")
        group = self.target_group(target_group)
        log = bind_context(workflow="register_target", target_group=group.arn, target_id=target_id)

        group.register(target_id, port=port)
        if await_healthy:
            self.await_target(
                group, target_id, is_healthy, label=f"target {target_id} healthy"
            )
            log.info("target_healthy")

    def deregister_target(
        self,
        target_group: TargetGroupRef,
        target_id: str,
        *,
        await_drained: bool = False,
        port: int | None = None,
    ) -> None:
        """Deregister a target; with ``await_drained`` block until it stops draining."""
        target_id = require(target_id, "target id")
        group = self.target_group(target_group)
        log = bind_context(
            workflow="deregister_target", target_group=group.arn, target_id=target_id
        )

        group.deregister(target_id, port=port)
        if await_drained:
            self.await_target(
                group, target_id, is_drained, label=f"target {target_id} deregistered"
            )
            log.info("target_drained")

    def register(
        self, load_balancer: LoadBalancer, instance_id: str, *, await_healthy: bool = False
    ) -> None:
        """Register an instance with the load balancer's only target group."""
        instance_id = require(instance_id, "instance id")
        self.register_target(load_balancer.target_group, instance_id, await_healthy=await_healthy)

    def deregister(
        self, load_balancer: LoadBalancer, instance_id: str, *, await_drained: bool = False
    ) -> None:
        instance_id = require(instance_id, "instance id")
        self.deregister_target(
            load_balancer.target_group, instance_id, await_drained=await_drained
        )

    def target_health(self, target_group: TargetGroupRef) -> dict[str, TargetHealthState]:
        return self.target_group(target_group).targets_with_health()
