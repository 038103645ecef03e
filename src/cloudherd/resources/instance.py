"""Compute instance handle over an EC2 ``describe_instances`` entry."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from botocore.exceptions import ClientError

from cloudherd.core.errors import PreconditionViolation, require
from cloudherd.resources.tags import (
    DEFAULT_TAG_POLICY,
    NAME_TAG,
    TagRetryPolicy,
    call_with_retry,
    tags_to_dict,
)
from cloudherd.utils import normalize

logger = structlog.get_logger()


class InstanceState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    STOPPING = "stopping"
    STOPPED = "stopped"


def describe_instances(
    ec2: Any,
    *,
    instance_ids: list[str] | None = None,
    filters: list[dict[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """Return raw instance descriptions across all reservations and pages."""
    request: dict[str, Any] = {}
    if instance_ids:
        request["InstanceIds"] = instance_ids
    if filters:
        request["Filters"] = filters

    found: list[dict[str, Any]] = []
    while True:
        response = ec2.describe_instances(**request)
        for reservation in response.get("Reservations", []):
            found.extend(reservation.get("Instances", []))
        token = response.get("NextToken")
        if not token:
            return found
        request["NextToken"] = token


def _is_not_found(exc: ClientError) -> bool:
    code = exc.response.get("Error", {}).get("Code", "")
    return code.startswith("InvalidInstanceID")


class ComputeInstance:
    """A read-through view of one EC2 instance.

    Attribute accessors answer from the last fetched description; ``reload``
    fetches a fresh one. Transition requests are single provider calls that
    return without waiting for the instance to converge.
    """

    def __init__(
        self,
        ec2: Any,
        description: dict[str, Any],
        *,
        tag_policy: TagRetryPolicy = DEFAULT_TAG_POLICY,
    ) -> None:
        self._ec2 = ec2
        self._description = description
        self._tags = tags_to_dict(description.get("Tags"))
        self._tag_policy = tag_policy

    @classmethod
    def fetch(
        cls,
        ec2: Any,
        instance_id: str,
        *,
        tag_policy: TagRetryPolicy = DEFAULT_TAG_POLICY,
    ) -> ComputeInstance | None:
        """Describe ``instance_id``; None when the provider does not know it."""
        instance_id = require(instance_id, "instance id")
        try:
            found = describe_instances(ec2, instance_ids=[instance_id])
        except ClientError as exc:
            if _is_not_found(exc):
                return None
            raise
        if not found:
            return None
        return cls(ec2, found[0], tag_policy=tag_policy)

    def reload(self) -> ComputeInstance | None:
        return ComputeInstance.fetch(self._ec2, self.id, tag_policy=self._tag_policy)

    # -- attributes --------------------------------------------------------

    @property
    def id(self) -> str:
        return self._description["InstanceId"]

    @property
    def state(self) -> InstanceState:
        return InstanceState(self._description["State"]["Name"])

    @property
    def public_ip(self) -> str | None:
        return normalize(self._description.get("PublicIpAddress"))

    @property
    def private_ip(self) -> str | None:
        return normalize(self._description.get("PrivateIpAddress"))

    @property
    def instance_type(self) -> str:
        return self._description["InstanceType"]

    @property
    def image_id(self) -> str | None:
        return normalize(self._description.get("ImageId"))

    @property
    def key_name(self) -> str | None:
        return normalize(self._description.get("KeyName"))

    @property
    def subnet_id(self) -> str | None:
        return normalize(self._description.get("SubnetId"))

    @property
    def vpc_id(self) -> str | None:
        return normalize(self._description.get("VpcId"))

    @property
    def security_group_ids(self) -> list[str]:
        return [group["GroupId"] for group in self._description.get("SecurityGroups", [])]

    @property
    def iam_instance_profile_arn(self) -> str | None:
        profile = self._description.get("IamInstanceProfile") or {}
        return normalize(profile.get("Arn"))

    @property
    def launch_time(self) -> datetime | None:
        return self._description.get("LaunchTime")

    @property
    def tags(self) -> dict[str, str]:
        return dict(self._tags)

    def tag(self, key: str) -> str | None:
        return normalize(self._tags.get(key))

    @property
    def name(self) -> str | None:
        return self.tag(NAME_TAG)

    # -- state queries -----------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.state is InstanceState.RUNNING

    @property
    def is_stopped(self) -> bool:
        return self.state is InstanceState.STOPPED

    @property
    def is_terminated(self) -> bool:
        return self.state is InstanceState.TERMINATED

    # -- transition requests -----------------------------------------------

    def _ensure_live(self, action: str) -> None:
        if self.is_terminated:
            raise PreconditionViolation(
                f"cannot {action} terminated instance {self.id}",
                {"instance_id": self.id, "action": action},
            )

    def start(self) -> None:
        self._ensure_live("start")
        logger.info("instance_start_requested", instance_id=self.id)
        self._ec2.start_instances(InstanceIds=[self.id])

    def stop(self, *, force: bool = False) -> None:
        self._ensure_live("stop")
        logger.info("instance_stop_requested", instance_id=self.id, force=force)
        self._ec2.stop_instances(InstanceIds=[self.id], Force=force)

    def reboot(self) -> None:
        self._ensure_live("reboot")
        logger.info("instance_reboot_requested", instance_id=self.id)
        self._ec2.reboot_instances(InstanceIds=[self.id])

    def terminate(self) -> None:
        self._ensure_live("terminate")
        logger.info("instance_terminate_requested", instance_id=self.id)
        self._ec2.terminate_instances(InstanceIds=[self.id])

    def modify_instance_type(self, instance_type: str) -> None:
        instance_type = require(instance_type, "instance type")
        self._ensure_live("modify")
        logger.info("instance_type_change_requested", instance_id=self.id, instance_type=instance_type)
        self._ec2.modify_instance_attribute(
            InstanceId=self.id,
            InstanceType={"Value": instance_type},
        )

    def create_image(
        self,
        name: str,
        *,
        no_reboot: bool = False,
        description: str | None = None,
    ) -> str:
        """Request an AMI snapshot of this instance and return the new image id.

        With ``no_reboot`` the instance stays up while the snapshot is taken,
        and the image's filesystem consistency is not guaranteed.
        """
        name = require(name, "image name")
        self._ensure_live("snapshot")
        request: dict[str, Any] = {"InstanceId": self.id, "Name": name, "NoReboot": no_reboot}
        if description:
            request["Description"] = description
        response = self._ec2.create_image(**request)
        logger.info(
            "image_create_requested",
            instance_id=self.id,
            image_id=response["ImageId"],
            no_reboot=no_reboot,
        )
        return response["ImageId"]

    def set_tag(self, key: str, value: object | None) -> ComputeInstance:
        """Create or overwrite a tag. A blank or None value removes it instead."""
        key = require(key, "tag key")
        self._ensure_live("tag")
        text = normalize(value)
        if text is None:
            return self.remove_tag(key)

        call_with_retry(
            self._tag_policy,
            lambda: self._ec2.create_tags(
                Resources=[self.id],
                Tags=[{"Key": key, "Value": text}],
            ),
            resource_id=self.id,
        )
        self._tags[key] = text
        return self

    def remove_tag(self, key: str) -> ComputeInstance:
        key = require(key, "tag key")
        self._ensure_live("tag")
        call_with_retry(
            self._tag_policy,
            lambda: self._ec2.delete_tags(Resources=[self.id], Tags=[{"Key": key}]),
            resource_id=self.id,
        )
        self._tags.pop(key, None)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComputeInstance):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.name or self.id

    def __repr__(self) -> str:
        return f"ComputeInstance(id={self.id!r}, state={self.state.value!r})"
