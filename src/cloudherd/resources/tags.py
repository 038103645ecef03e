"""Tag helpers and the bounded retry policy around tag writes.

Tag writes against a freshly created resource can fail until the provider
has indexed it, so they are retried a fixed number of times with a fixed
delay. No other provider call is retried here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, TypeVar

import structlog
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from cloudherd.core.errors import TransientProviderError

logger = structlog.get_logger()

T = TypeVar("T")

NAME_TAG = "Name"
# Keys under this prefix are reserved by AWS and reject user writes.
RESERVED_TAG_PREFIX = "aws:"


@dataclass(frozen=True)
class TagRetryPolicy:
    attempts: int = 10
    delay: float = 1.0


DEFAULT_TAG_POLICY = TagRetryPolicy()


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "tag_write_retry",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


def call_with_retry(policy: TagRetryPolicy, func: Callable[[], T], *, resource_id: str) -> T:
    """Run ``func`` under ``policy``; raise TransientProviderError once attempts run out."""
    retrying = Retrying(
        retry=retry_if_exception_type((ClientError, BotoCoreError)),
        stop=stop_after_attempt(policy.attempts),
        wait=wait_fixed(policy.delay),
        before_sleep=_log_retry,
        reraise=True,
    )
    try:
        return retrying(func)
    except (ClientError, BotoCoreError) as exc:
        raise TransientProviderError(
            f"tag write on {resource_id} failed after {policy.attempts} attempts",
            {"resource_id": resource_id, "attempts": policy.attempts},
        ) from exc


def tags_to_dict(tags: Iterable[dict[str, Any]] | None) -> dict[str, str]:
    """Convert the provider's ``[{"Key": k, "Value": v}]`` list into a mapping."""
    return {tag["Key"]: tag.get("Value", "") for tag in tags or []}

