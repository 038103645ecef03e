"""
Convergence poller.

Repeatedly evaluates a predicate at a fixed interval until it holds or a
deadline passes. Every suspension point of a workflow goes through this
module, either ``await_condition`` or ``pause``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

import structlog

from cloudherd.core.errors import ConvergenceTimeout, InvalidInput

logger = structlog.get_logger()

Predicate = Callable[[], bool]


@dataclass(frozen=True)
class PollTask:
    """A single await: what to check, how often and for how long."""

    predicate: Predicate
    interval: float
    timeout: float | None = None
    label: str | None = None

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise InvalidInput("poll interval must be positive", {"interval": self.interval})
        if self.timeout is not None and self.timeout < 0:
            raise InvalidInput("poll timeout must not be negative", {"timeout": self.timeout})

    def run(self) -> None:
        """Block until the predicate holds, or raise ConvergenceTimeout."""
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        while True:
            if self.predicate():
                return
            if deadline is not None and time.monotonic() >= deadline:
                description = self.label or "condition"
                raise ConvergenceTimeout(
                    f"timed out after {self.timeout}s awaiting {description}",
                    timeout=self.timeout,
                    label=self.label,
                )
            if self.label:
                logger.debug("awaiting_condition", condition=self.label)
            time.sleep(self.interval)


def await_condition(
    predicate: Predicate,
    interval: float,
    timeout: float | None = None,
    label: str | None = None,
) -> None:
    """
    Block until ``predicate()`` returns True.

    The predicate is evaluated immediately and the call returns as soon as it
    holds. Otherwise it sleeps ``interval`` seconds between evaluations. The
    deadline is checked after each failed evaluation, before sleeping.

    Args:
        predicate: Zero-argument callable re-reading provider state
        interval: Seconds between evaluations, must be positive
        timeout: Seconds before giving up; None polls forever
        label: Name of the awaited condition, logged at debug on each miss

    Raises:
        ConvergenceTimeout: The deadline passed first
        InvalidInput: Non-positive interval or negative timeout
    """
    PollTask(predicate, interval, timeout, (label or "").strip() or None).run()


def pause(seconds: float, reason: str | None = None) -> None:
    """Sleep for a settle delay, compensating for provider read-after-write lag."""
    if seconds <= 0:
        return
    if reason:
        logger.debug("settling", reason=reason, seconds=seconds)
    time.sleep(seconds)
