"""Root test configuration."""

import logging
from unittest.mock import MagicMock

import pytest
import structlog
from cloudherd import poller
from cloudherd.config.settings import Settings
from cloudherd.providers.base import ProviderClients
from factories import FakeEC2


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    @property
    def elapsed(self) -> float:
        return sum(self.sleeps)


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(poller, "time", fake)
    return fake


@pytest.fixture
def settings():
    return Settings(_env_file=None, tag_retry_delay=0)


@pytest.fixture
def ec2():
    return FakeEC2()


@pytest.fixture
def clients(ec2):
    return ProviderClients(ec2=ec2, route53=MagicMock(), elbv2=MagicMock(), region="us-east-2")
