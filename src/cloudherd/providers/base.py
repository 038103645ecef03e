from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ProviderClients:
    """The provider API surface the workflows talk to.

    Each attribute is a boto3 low-level client (or any object exposing the
    same methods, as in tests).
    """

    ec2: Any
    route53: Any
    elbv2: Any
    region: str | None = None
