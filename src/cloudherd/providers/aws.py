"""boto3 session and client construction."""

from __future__ import annotations

import boto3
import structlog
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError

from cloudherd.config.settings import Settings
from cloudherd.core.errors import ConfigurationError
from cloudherd.providers.base import ProviderClients

logger = structlog.get_logger()

# Adaptive retries absorb provider throttling; they are separate from the
# workflow-level tag retry policy.
_BOTO_CONFIG = BotoConfig(retries={"max_attempts": 5, "mode": "adaptive"})


def build_session(settings: Settings) -> boto3.Session:
    """Build a boto3 session from static keys, a named profile or the default chain."""
    kwargs: dict[str, str] = {"region_name": settings.aws_region}
    if settings.aws_access_key_id or settings.aws_secret_access_key:
        if not (settings.aws_access_key_id and settings.aws_secret_access_key):
            raise ConfigurationError(
                "both aws_access_key_id and aws_secret_access_key must be set",
            )
        kwargs["aws_access_key_id"] = settings.aws_access_key_id
        kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
    elif settings.aws_profile:
        kwargs["profile_name"] = settings.aws_profile

    try:
        return boto3.Session(**kwargs)
    except BotoCoreError as exc:
        raise ConfigurationError(f"could not create AWS session: {exc}") from exc


def build_clients(settings: Settings) -> ProviderClients:
    """Create the EC2, Route 53 and ELBv2 clients used by the workflows."""
    session = build_session(settings)
    logger.debug("aws_clients_created", region=settings.aws_region, profile=settings.aws_profile)
    return ProviderClients(
        ec2=session.client("ec2", config=_BOTO_CONFIG),
        route53=session.client("route53", config=_BOTO_CONFIG),
        elbv2=session.client("elbv2", config=_BOTO_CONFIG),
        region=settings.aws_region,
    )
