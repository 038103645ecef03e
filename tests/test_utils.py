import pytest
from cloudherd.core.errors import PreconditionViolation
from cloudherd.utils import (
    at_most_one,
    exactly_one,
    is_address_literal,
    normalize,
    normalize_fqdn,
    zone_domain,
)


class TestExactlyOne:
    def test_single_element(self):
        assert exactly_one(["tg-1"], "target group") == "tg-1"

    def test_accepts_generators(self):
        assert exactly_one((x for x in [3]), "number") == 3

    @pytest.mark.parametrize("items", [[], ["a", "b"]])
    def test_zero_or_many_is_precondition_violation(self, items):
        with pytest.raises(PreconditionViolation) as exc_info:
            exactly_one(items, "hosted zone for example.com")

        assert exc_info.value.details["matches"] == len(items)
        assert "hosted zone for example.com" in exc_info.value.message

    def test_at_most_one(self):
        assert at_most_one([], "image") is None
        assert at_most_one(["ami-1"], "image") == "ami-1"
        with pytest.raises(PreconditionViolation):
            at_most_one(["ami-1", "ami-2"], "image")


@pytest.mark.parametrize(
    "value,expected",
    [(None, None), ("", None), ("   ", None), (" 1.2.3.4 ", "1.2.3.4"), (42, "42")],
)
def test_normalize(value, expected):
    assert normalize(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("192.168.0.55", True),
        ("10.0.0.1", True),
        ("lb-1234.example-provider.net", False),
        ("app.example.com", False),
        ("2001:db8::1", False),
    ],
)
def test_is_address_literal(value, expected):
    assert is_address_literal(value) is expected


def test_normalize_fqdn_drops_trailing_dot():
    assert normalize_fqdn("App.Example.com.") == "app.example.com"


@pytest.mark.parametrize(
    "name,domain",
    [
        ("api.staging.example.com", "example.com"),
        ("example.com.", "example.com"),
        ("www.example.co", "example.co"),
    ],
)
def test_zone_domain_uses_last_two_labels(name, domain):
    assert zone_domain(name) == domain
