"""Wait for an instance to pass its status checks."""
import logging
import time
from typing import Callable

from bluegreen.aws.services.compute import ComputeService
from bluegreen.aws.utils.polling import poll_until
from bluegreen.errors import ReadinessTimeout, ResourceNotFound
from bluegreen.models import InstanceStatus

logger = logging.getLogger(__name__)


class ReadinessPoller:
    """Polls an instance's status at a fixed cadence until it reports 'ok'."""

    def __init__(self, compute_service: ComputeService, interval: float = 10.0, timeout: float = 300.0,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.compute_service = compute_service
        self.interval = interval
        self.timeout = timeout
        self.sleep = sleep
        self.clock = clock

    def _current_status(self, instance_id: str) -> InstanceStatus:
        try:
            entries = self.compute_service.describe_instance_status([instance_id])
        except ResourceNotFound:
            # A just-launched instance can be briefly invisible to EC2
            logger.debug(f"Instance {instance_id} not visible yet")
            return InstanceStatus.UNKNOWN
        # Instances that are not running yet are absent from the listing
        status = entries[0].status if entries else InstanceStatus.UNKNOWN
        logger.debug(f"Instance {instance_id} status: {status.value}")
        return status

    def wait_for_ready(self, instance_id: str) -> None:
        """Return once ``instance_id`` is 'ok'; raise ReadinessTimeout otherwise."""
        poll_until(
            fetch=lambda: self._current_status(instance_id),
            predicate=lambda status: status is InstanceStatus.OK,
            interval=self.interval,
            timeout=self.timeout,
            sleep=self.sleep,
            clock=self.clock,
            error_cls=ReadinessTimeout,
            description=f"instance {instance_id} to be ready",
        )
        logger.info(f"✅ Instance {instance_id} is ready")
