"""Small helpers shared by resource handles and workflows."""

from __future__ import annotations

import re
from typing import Iterable, TypeVar

from cloudherd.core.errors import PreconditionViolation

T = TypeVar("T")

_ADDRESS_LITERAL = re.compile(r"^[0-9.]+$")


def exactly_one(items: Iterable[T], what: str) -> T:
    """
    Return the single element of ``items``.

    Raises:
        PreconditionViolation: When there are zero or several elements
    """
    found = list(items)
    if len(found) != 1:
        raise PreconditionViolation(
            f"expected exactly one {what}, found {len(found)}",
            {"resource": what, "matches": len(found)},
        )
    return found[0]


def at_most_one(items: Iterable[T], what: str) -> T | None:
    """Return the single element of ``items``, None when empty."""
    found = list(items)
    if not found:
        return None
    return exactly_one(found, what)


def normalize(value: object | None) -> str | None:
    """Map blank provider values (None, "", whitespace) to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_fqdn(name: str) -> str:
    """Lower-case a DNS name and drop its trailing dot."""
    return name.strip().rstrip(".").lower()


def is_address_literal(value: str) -> bool:
    """True when ``value`` is made only of digits and dots, e.g. an IPv4 address."""
    return bool(_ADDRESS_LITERAL.match(value.strip()))


def zone_domain(name: str) -> str:
    """Return the last two labels of a DNS name: ``a.b.example.com`` -> ``example.com``."""
    labels = [label for label in normalize_fqdn(name).split(".") if label]
    return ".".join(labels[-2:])
