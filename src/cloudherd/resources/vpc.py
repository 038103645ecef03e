from __future__ import annotations

from typing import Any

from cloudherd.resources.tags import NAME_TAG
from cloudherd.utils import normalize


class Vpc:
    """Read-only view of a VPC description."""

    def __init__(self, description: dict[str, Any]) -> None:
        self._description = description

    @property
    def id(self) -> str:
        return self._description["VpcId"]

    @property
    def cidr_block(self) -> str | None:
        return normalize(self._description.get("CidrBlock"))

    @property
    def is_default(self) -> bool:
        return bool(self._description.get("IsDefault", False))

    def tag(self, key: str) -> str | None:
        """Look up a tag value, ignoring the key's case."""
        wanted = key.lower()
        for tag in self._description.get("Tags", []):
            if tag["Key"].lower() == wanted:
                return normalize(tag.get("Value"))
        return None

    @property
    def name(self) -> str | None:
        return self.tag(NAME_TAG)

    def __str__(self) -> str:
        return self.name or self.id
