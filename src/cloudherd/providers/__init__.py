"""Provider collaborators: boto3 clients for EC2, Route 53 and ELBv2."""

from cloudherd.providers.aws import build_clients, build_session
from cloudherd.providers.base import ProviderClients

__all__ = ["ProviderClients", "build_clients", "build_session"]
