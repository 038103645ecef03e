"""
Instance lifecycle workflows.

Each workflow blocks until its documented steps have converged, or raises.
Steps already completed are never rolled back: a resize that fails after the
stop succeeded leaves the instance stopped.
"""

from __future__ import annotations

from typing import Any

from cloudherd.config.settings import Settings, get_settings
from cloudherd.core.errors import ConvergenceTimeout, PreconditionViolation, require
from cloudherd.logging import bind_context
from cloudherd.poller import await_condition, pause
from cloudherd.resources.instance import ComputeInstance, InstanceState, describe_instances
from cloudherd.resources.tags import NAME_TAG, TagRetryPolicy

InstanceRef = ComputeInstance | str


class InstanceWorkflows:
    """Stop, start, reboot, resize, launch and terminate EC2 instances."""

    def __init__(self, ec2: Any, settings: Settings | None = None) -> None:
        self._ec2 = ec2
        self._settings = settings or get_settings()
        self._tag_policy = TagRetryPolicy(
            attempts=self._settings.tag_retry_attempts,
            delay=self._settings.tag_retry_delay,
        )

    # -- lookups -----------------------------------------------------------

    def list_instances(
        self,
        *,
        instance_ids: list[str] | None = None,
        filters: list[dict[str, Any]] | None = None,
        include_terminated: bool = False,
    ) -> list[ComputeInstance]:
        """Describe instances, optionally by id or declarative filters."""
        instances = [
            ComputeInstance(self._ec2, description, tag_policy=self._tag_policy)
            for description in describe_instances(
                self._ec2, instance_ids=instance_ids, filters=filters
            )
        ]
        if include_terminated:
            return instances
        return [instance for instance in instances if not instance.is_terminated]

    def get_instance_optional(self, instance_id: str) -> ComputeInstance | None:
        return ComputeInstance.fetch(self._ec2, instance_id, tag_policy=self._tag_policy)

    def get_instance(self, instance_id: str) -> ComputeInstance:
        instance = self.get_instance_optional(instance_id)
        if instance is None:
            raise PreconditionViolation(
                f"instance {instance_id} not found", {"instance_id": instance_id}
            )
        return instance

    def resolve(self, instance: InstanceRef) -> ComputeInstance:
        """Accept a handle or an instance id; ids are validated, then fetched."""
        if isinstance(instance, ComputeInstance):
            return instance
        return self.get_instance(require(instance, "instance id"))

    # -- awaits ------------------------------------------------------------

    def await_state(
        self,
        instance: ComputeInstance,
        state: InstanceState,
        *,
        timeout: float | None = None,
    ) -> None:
        """Poll a freshly described instance until it reaches ``state``."""

        def reached() -> bool:
            current = instance.reload()
            return current is not None and current.state is state

        await_condition(
            reached,
            interval=self._settings.state_poll_interval,
            timeout=self._settings.state_timeout if timeout is None else timeout,
            label=f"instance {instance.id} {state.value}",
        )

    def await_address(
        self,
        instance: ComputeInstance,
        *,
        settle_delay: float = 0.0,
        timeout: float | None = None,
    ) -> ComputeInstance:
        """Wait until the instance has a public IP and return the fresh handle.

        ``settle_delay`` pauses before the first poll. It works around the
        provider's read-after-write lag on new instances; it guarantees
        nothing.
        """
        pause(settle_delay, reason=f"instance {instance.id} settling")
        latest: list[ComputeInstance] = []

        def has_address() -> bool:
            current = instance.reload()
            if current is None or current.public_ip is None:
                return False
            latest[:] = [current]
            return True

        await_condition(
            has_address,
            interval=self._settings.address_poll_interval,
            timeout=self._settings.address_timeout if timeout is None else timeout,
            label=f"instance {instance.id} address",
        )
        return latest[-1]

    # -- workflows ---------------------------------------------------------

    def stop(self, instance: InstanceRef) -> ComputeInstance:
        """
        Stop gracefully, escalating to a forced stop.

        If the instance is not stopped within the grace timeout, exactly one
        forced stop is issued and awaited with the long timeout. Forced stop
        risks filesystem inconsistency, so it is never the first attempt.

        Raises:
            ConvergenceTimeout: The instance did not stop even when forced
        """
        instance = self.resolve(instance)
        log = bind_context(workflow="stop", instance_id=instance.id)

        instance.stop()
        try:
            self.await_state(
                instance, InstanceState.STOPPED, timeout=self._settings.stop_grace_timeout
            )
        except ConvergenceTimeout:
            log.warning("stopping_with_force", grace_timeout=self._settings.stop_grace_timeout)
            instance.stop(force=True)
            try:
                self.await_state(
                    instance, InstanceState.STOPPED, timeout=self._settings.forced_stop_timeout
                )
            except ConvergenceTimeout as exc:
                raise ConvergenceTimeout(
                    f"could not stop instance {instance.id}",
                    timeout=self._settings.forced_stop_timeout,
                    label=exc.label,
                    details={"instance_id": instance.id},
                ) from exc

        log.info("instance_stopped")
        return instance

    def start(self, instance: InstanceRef, *, wait: bool = False) -> ComputeInstance:
        instance = self.resolve(instance)
        instance.start()
        if wait:
            self.await_state(instance, InstanceState.RUNNING)
        return instance

    def hard_reboot(self, instance: InstanceRef) -> ComputeInstance:
        """Stop (with escalation), start again and wait for a public address."""
        instance = self.resolve(instance)
        log = bind_context(workflow="hard_reboot", instance_id=instance.id)
        log.info("hard_reboot_started")

        self.stop(instance)
        instance.start()
        current = self.await_address(instance)

        log.info("hard_reboot_finished", public_ip=current.public_ip)
        return current

    def reboot(self, instance: InstanceRef, *, confirm_shutdown: bool = False) -> None:
        """Request an in-place reboot.

        With ``confirm_shutdown`` the instance must be seen leaving ``running``
        within the reboot confirmation timeout.
        """
        instance = self.resolve(instance)
        instance.reboot()
        if not confirm_shutdown:
            return

        def left_running() -> bool:
            current = instance.reload()
            return current is None or not current.is_running

        try:
            await_condition(
                left_running,
                interval=self._settings.state_poll_interval,
                timeout=self._settings.reboot_confirm_timeout,
                label=f"instance {instance.id} shutting down",
            )
        except ConvergenceTimeout as exc:
            raise ConvergenceTimeout(
                f"problem shutting instance {instance.id} down",
                timeout=exc.timeout,
                label=exc.label,
                details={"instance_id": instance.id},
            ) from exc

    def resize(self, instance: InstanceRef, instance_type: str) -> ComputeInstance:
        """Change the instance class: stop, modify, start, await address.

        A no-op when the instance already has ``instance_type``.
        """
        instance_type = require(instance_type, "instance type")
        instance = self.resolve(instance)
        log = bind_context(workflow="resize", instance_id=instance.id)

        if instance.instance_type == instance_type:
            log.info("resize_skipped", instance_type=instance_type)
            return instance

        log.info("resize_started", current=instance.instance_type, target=instance_type)
        self.stop(instance)
        instance.modify_instance_type(instance_type)
        instance.start()
        current = self.await_address(instance)
        log.info("resize_finished", instance_type=current.instance_type)
        return current

    def terminate(self, instance: InstanceRef, *, wait: bool = False) -> None:
        instance = self.resolve(instance)
        instance.terminate()
        if wait:
            self.await_state(instance, InstanceState.TERMINATED)

    def launch(
        self,
        image_id: str,
        instance_type: str,
        *,
        name: str | None = None,
        key_name: str | None = None,
        security_group_ids: list[str] | None = None,
        subnet_id: str | None = None,
        iam_instance_profile: str | None = None,
        tags: dict[str, str] | None = None,
        await_address: bool = True,
    ) -> ComputeInstance:
        """
        Launch one instance from an image and tag it.

        Tags are written after launch through the tag retry policy, since the
        new instance may not be indexed yet. ``iam_instance_profile`` accepts
        either a profile ARN or a profile name.
        """
        image_id = require(image_id, "image id")
        instance_type = require(instance_type, "instance type")

        request: dict[str, Any] = {
            "ImageId": image_id,
            "InstanceType": instance_type,
            "MinCount": 1,
            "MaxCount": 1,
        }
        if key_name:
            request["KeyName"] = key_name
        if security_group_ids:
            request["SecurityGroupIds"] = security_group_ids
        if subnet_id:
            request["SubnetId"] = subnet_id
        if iam_instance_profile:
            key = "Arn" if iam_instance_profile.startswith("arn:") else "Name"
            request["IamInstanceProfile"] = {key: iam_instance_profile}

        response = self._ec2.run_instances(**request)
        instance = ComputeInstance(
            self._ec2, response["Instances"][0], tag_policy=self._tag_policy
        )
        log = bind_context(workflow="launch", instance_id=instance.id)
        log.info("instance_launched", image_id=image_id, instance_type=instance_type)

        if name:
            instance.set_tag(NAME_TAG, name)
        for key, value in (tags or {}).items():
            instance.set_tag(key, value)

        if await_address:
            instance = self.await_address(
                instance, settle_delay=self._settings.launch_settle_delay
            )
            log.info("instance_addressed", public_ip=instance.public_ip)
        return instance
