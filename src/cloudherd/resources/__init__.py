"""Typed handles over provider-side resources."""

from cloudherd.resources.dns import (
    ChangeStatus,
    DnsChange,
    DnsRecord,
    HostedZone,
    RecordType,
    classify,
)
from cloudherd.resources.image import ImageState, MachineImage
from cloudherd.resources.instance import ComputeInstance, InstanceState
from cloudherd.resources.load_balancer import LoadBalancer, TargetGroup, TargetHealthState
from cloudherd.resources.tags import DEFAULT_TAG_POLICY, TagRetryPolicy
from cloudherd.resources.vpc import Vpc

__all__ = [
    "ChangeStatus",
    "ComputeInstance",
    "DEFAULT_TAG_POLICY",
    "DnsChange",
    "DnsRecord",
    "HostedZone",
    "ImageState",
    "InstanceState",
    "LoadBalancer",
    "MachineImage",
    "RecordType",
    "TagRetryPolicy",
    "TargetGroup",
    "TargetHealthState",
    "Vpc",
    "classify",
]
