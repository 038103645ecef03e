import pytest
from cloudherd.config.settings import Settings, get_settings
from pydantic import ValidationError


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.aws_region == "us-east-2"
    assert settings.stop_grace_timeout == 60.0
    assert settings.forced_stop_timeout == 540.0
    assert settings.address_poll_interval == 2.0
    assert settings.address_timeout == 1200.0
    assert settings.image_timeout == 900.0
    assert settings.dns_ttl == 300
    assert settings.dns_sync_timeout == 1200.0
    assert settings.target_health_poll_interval == 2.0
    assert settings.target_health_timeout == 3600.0
    assert settings.tag_retry_attempts == 10


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CLOUDHERD_AWS_REGION", "eu-west-1")
    monkeypatch.setenv("CLOUDHERD_STOP_GRACE_TIMEOUT", "30")

    settings = Settings(_env_file=None)

    assert settings.aws_region == "eu-west-1"
    assert settings.stop_grace_timeout == 30.0


@pytest.mark.parametrize("field", ["state_poll_interval", "address_poll_interval"])
def test_intervals_must_be_positive(field):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_tag_retry_attempts_at_least_one():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, tag_retry_attempts=0)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
