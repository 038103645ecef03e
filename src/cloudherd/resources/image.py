"""Machine image (AMI) handle."""

from __future__ import annotations

from enum import Enum
from typing import Any

from botocore.exceptions import ClientError

from cloudherd.core.errors import require
from cloudherd.utils import normalize


class ImageState(str, Enum):
    PENDING = "pending"
    AVAILABLE = "available"
    INVALID = "invalid"
    DEREGISTERED = "deregistered"
    TRANSIENT = "transient"
    FAILED = "failed"
    ERROR = "error"
    DISABLED = "disabled"


_FAILED_STATES = frozenset(
    {ImageState.INVALID, ImageState.DEREGISTERED, ImageState.FAILED, ImageState.ERROR}
)


def describe_images(
    ec2: Any,
    *,
    image_ids: list[str] | None = None,
    name: str | None = None,
    owners: list[str] | None = None,
) -> list[dict[str, Any]]:
    request: dict[str, Any] = {"Owners": owners or ["self"]}
    if image_ids:
        request["ImageIds"] = image_ids
    if name:
        request["Filters"] = [{"Name": "name", "Values": [name]}]
    return ec2.describe_images(**request).get("Images", [])


def _is_not_found(exc: ClientError) -> bool:
    code = exc.response.get("Error", {}).get("Code", "")
    return code.startswith("InvalidAMIID")


class MachineImage:
    def __init__(self, ec2: Any, description: dict[str, Any]) -> None:
        self._ec2 = ec2
        self._description = description

    @classmethod
    def fetch(cls, ec2: Any, image_id: str) -> MachineImage | None:
        """Describe ``image_id``; None when the provider does not know it (yet)."""
        image_id = require(image_id, "image id")
        try:
            found = describe_images(ec2, image_ids=[image_id])
        except ClientError as exc:
            if _is_not_found(exc):
                return None
            raise
        return cls(ec2, found[0]) if found else None

    def reload(self) -> MachineImage | None:
        return MachineImage.fetch(self._ec2, self.id)

    @property
    def id(self) -> str:
        return self._description["ImageId"]

    @property
    def name(self) -> str | None:
        return normalize(self._description.get("Name"))

    @property
    def state(self) -> ImageState:
        return ImageState(self._description["State"])

    @property
    def is_available(self) -> bool:
        return self.state is ImageState.AVAILABLE

    @property
    def is_failed(self) -> bool:
        """True once the image can no longer become available."""
        return self.state in _FAILED_STATES

    def __str__(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"MachineImage(id={self.id!r}, state={self.state.value!r})"
