"""Role tags steering CodeDeploy instance selection."""
import logging
from concurrent.futures import ThreadPoolExecutor

from bluegreen.aws.services.compute import ComputeService

logger = logging.getLogger(__name__)


class TagManager:
    """Marks an instance as the deployment target, then as active."""

    def __init__(self, compute_service: ComputeService, target_tag: str, active_tag: str):
        self.compute_service = compute_service
        self.target_tag = target_tag
        self.active_tag = active_tag

    def mark_as_target(self, instance_id: str) -> None:
        logger.info(f"Adding {self.target_tag} tag to {instance_id}")
        self.compute_service.create_tags([instance_id], {self.target_tag: ""})

    def mark_as_active(self, instance_id: str) -> None:
        """Swap the target tag for the active tag.

        Both requests are issued concurrently with no joint atomicity: a crash
        between them can leave both tags on the instance.
        """
        logger.info(f"Replacing {self.target_tag} with {self.active_tag} on {instance_id}")

        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = [
                executor.submit(self.compute_service.delete_tags, [instance_id], [self.target_tag]),
                executor.submit(self.compute_service.create_tags, [instance_id], {self.active_tag: ""}),
            ]
            # result() re-raises the first failure after both requests finish
            for future in futures:
                future.result()
