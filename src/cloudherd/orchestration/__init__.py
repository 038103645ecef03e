"""Orchestration package: convergent workflows over resource handles."""

from cloudherd.orchestration.clone import CloneWorkflow
from cloudherd.orchestration.dns import DnsWorkflows
from cloudherd.orchestration.fleet import Fleet
from cloudherd.orchestration.images import ImageWorkflows
from cloudherd.orchestration.instances import InstanceWorkflows
from cloudherd.orchestration.load_balancing import LoadBalancingWorkflows

__all__ = [
    "CloneWorkflow",
    "DnsWorkflows",
    "Fleet",
    "ImageWorkflows",
    "InstanceWorkflows",
    "LoadBalancingWorkflows",
]
