"""Machine image workflows: lookups, snapshot and await-available."""

from __future__ import annotations

from typing import Any

from cloudherd.config.settings import Settings, get_settings
from cloudherd.core.errors import PreconditionViolation, require
from cloudherd.logging import bind_context
from cloudherd.poller import await_condition
from cloudherd.resources.image import MachineImage, describe_images
from cloudherd.resources.instance import ComputeInstance
from cloudherd.utils import at_most_one


class ImageWorkflows:
    def __init__(self, ec2: Any, settings: Settings | None = None) -> None:
        self._ec2 = ec2
        self._settings = settings or get_settings()

    def get_image(self, image_id: str) -> MachineImage:
        image = MachineImage.fetch(self._ec2, image_id)
        if image is None:
            raise PreconditionViolation(f"image {image_id} not found", {"image_id": image_id})
        return image

    def find_image_by_name(self, name: str) -> MachineImage | None:
        """The account's own image registered under ``name``, if any."""
        name = require(name, "image name")
        found = describe_images(self._ec2, name=name)
        description = at_most_one(found, f"image named {name}")
        return None if description is None else MachineImage(self._ec2, description)

    def await_available(self, image_id: str, *, timeout: float | None = None) -> MachineImage:
        """
        Poll until the image is available and return its fresh handle.

        Raises:
            PreconditionViolation: The image entered a failed state
            ConvergenceTimeout: The image was still pending at the deadline
        """
        image_id = require(image_id, "image id")
        latest: list[MachineImage] = []

        def available() -> bool:
            image = MachineImage.fetch(self._ec2, image_id)
            if image is None:
                return False
            if image.is_failed:
                raise PreconditionViolation(
                    f"image {image_id} is {image.state.value}",
                    {"image_id": image_id, "state": image.state.value},
                )
            latest[:] = [image]
            return image.is_available

        await_condition(
            available,
            interval=self._settings.image_poll_interval,
            timeout=self._settings.image_timeout if timeout is None else timeout,
            label=f"image {image_id} available",
        )
        return latest[-1]

    def create_image(
        self,
        instance: ComputeInstance,
        name: str,
        *,
        no_reboot: bool = False,
        wait: bool = True,
    ) -> MachineImage:
        """Snapshot ``instance`` into a new image, by default waiting until available."""
        log = bind_context(workflow="create_image", instance_id=instance.id)
        image_id = instance.create_image(name, no_reboot=no_reboot)
        if not wait:
            return MachineImage(self._ec2, {"ImageId": image_id, "Name": name, "State": "pending"})

        image = self.await_available(image_id)
        log.info("image_available", image_id=image.id)
        return image
