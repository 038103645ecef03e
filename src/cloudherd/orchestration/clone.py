"""Clone an instance through an image snapshot."""

from __future__ import annotations

from cloudherd.logging import bind_context
from cloudherd.orchestration.images import ImageWorkflows
from cloudherd.orchestration.instances import InstanceRef, InstanceWorkflows
from cloudherd.resources.image import MachineImage
from cloudherd.resources.instance import ComputeInstance
from cloudherd.resources.tags import NAME_TAG, RESERVED_TAG_PREFIX

CLONE_SUFFIX = " (cloned)"


def clone_name(source: ComputeInstance) -> str:
    return f"{source.name or source.id}{CLONE_SUFFIX}"


class CloneWorkflow:
    """
    Copy an instance onto a new one launched from its image.

    The image is named after the source instance id. With ``reuse_image`` an
    existing image of that name is used instead of taking a new snapshot.
    """

    def __init__(self, instances: InstanceWorkflows, images: ImageWorkflows) -> None:
        self._instances = instances
        self._images = images

    def _source_image(
        self, source: ComputeInstance, *, reuse_image: bool, no_reboot: bool
    ) -> MachineImage:
        log = bind_context(workflow="clone", instance_id=source.id)
        if reuse_image:
            existing = self._images.find_image_by_name(source.id)
            if existing is not None:
                log.info("clone_reusing_image", image_id=existing.id)
                if existing.is_available:
                    return existing
                return self._images.await_available(existing.id)

        log.info("clone_snapshot_started", no_reboot=no_reboot)
        return self._images.create_image(source, source.id, no_reboot=no_reboot)

    def run(
        self,
        source: InstanceRef,
        *,
        reuse_image: bool = False,
        no_reboot: bool = False,
        copy_tags: bool = False,
        name: str | None = None,
    ) -> ComputeInstance:
        """
        Clone ``source`` and return the new, addressed instance.

        Args:
            source: Instance handle or id to clone
            reuse_image: Use an image already named after the source id
            no_reboot: Snapshot without rebooting the source; the image's
                filesystem consistency is then not guaranteed
            copy_tags: Copy the source tags onto the clone, except Name and
                AWS-reserved "aws:" keys
            name: Name tag for the clone, defaults to "<source name> (cloned)"
        """
        source = self._instances.resolve(source)
        log = bind_context(workflow="clone", instance_id=source.id)

        image = self._source_image(source, reuse_image=reuse_image, no_reboot=no_reboot)
        clone = self._instances.launch(
            image.id,
            source.instance_type,
            name=name or clone_name(source),
            key_name=source.key_name,
            security_group_ids=source.security_group_ids,
            subnet_id=source.subnet_id,
            iam_instance_profile=source.iam_instance_profile_arn,
            await_address=True,
        )

        if copy_tags:
            for key, value in source.tags.items():
                if key != NAME_TAG and not key.startswith(RESERVED_TAG_PREFIX):
                    clone.set_tag(key, value)

        log.info("clone_finished", clone_id=clone.id, public_ip=clone.public_ip)
        return clone
