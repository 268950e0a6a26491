"""
Auto Scaling capacity control for blue/green runs.

A run moves the group's desired capacity 1 -> 2 to create the green
instance and 2 -> 1 to release the old one. No other transition is issued.
"""
import logging
import time
from enum import Enum
from typing import Callable, List, Optional, Set

from bluegreen.aws.services.compute import ComputeService
from bluegreen.aws.services.scaling_group import ScalingGroupService
from bluegreen.aws.utils.polling import poll_until
from bluegreen.errors import ConfigurationError, DiscoveryTimeout, ResourceNotFound
from bluegreen.models import Instance, InstanceStatus, InstanceStatusEntry, ScalingGroup

logger = logging.getLogger(__name__)


class ScaleDirection(str, Enum):
    """Scale direction and the desired capacity it sets."""
    UP = "UP"
    DOWN = "DOWN"

    @property
    def capacity(self) -> int:
        return 2 if self is ScaleDirection.UP else 1


class CapacityController:
    """Scales a group by one instance and finds the instance a scale-up created."""

    def __init__(self, scaling_service: ScalingGroupService, compute_service: ComputeService,
                 discovery_interval: float = 15.0, discovery_timeout: float = 180.0,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.scaling_service = scaling_service
        self.compute_service = compute_service
        self.discovery_interval = discovery_interval
        self.discovery_timeout = discovery_timeout
        self.sleep = sleep
        self.clock = clock
        self._issued: Set[ScaleDirection] = set()

    @property
    def scaled_up(self) -> bool:
        return ScaleDirection.UP in self._issued and ScaleDirection.DOWN not in self._issued

    def find_scaling_group(self, name: str) -> ScalingGroup:
        """Exact name match first, then the first group whose name contains ``name``."""
        if not name:
            raise ResourceNotFound("No scaling group name configured")

        groups = self.scaling_service.describe_groups()
        for group in groups:
            if group.name == name:
                return group

        fragment = name.lower()
        for group in groups:
            if fragment in group.name.lower():
                logger.info(f"Matched scaling group {group.name} for '{name}'")
                return group

        raise ResourceNotFound(f"Autoscaling group not found: {name}")

    def scale(self, direction: ScaleDirection, group: ScalingGroup) -> Optional[Instance]:
        """Set the desired capacity for ``direction``.

        Scaling up returns the newly initializing instance. Scaling down
        returns None and does not wait for termination.

        Raises:
            ConfigurationError: UP on a group not at capacity 1, or DOWN
                before UP was issued in this run
        """
        direction = ScaleDirection(direction)
        if direction in self._issued:
            raise RuntimeError(f"Scale {direction.value} already issued for {group.name} in this run")

        # Only 1 -> 2 and 2 -> 1 are ever issued
        if direction is ScaleDirection.UP and group.desired_capacity != 1:
            raise ConfigurationError(
                f"Refusing to scale up {group.name}: desired capacity is "
                f"{group.desired_capacity}, expected 1"
            )
        if direction is ScaleDirection.DOWN and ScaleDirection.UP not in self._issued:
            raise ConfigurationError(f"Refusing to scale down {group.name}: no scale-up was issued in this run")

        existing = set(group.instance_ids)
        self.scaling_service.set_desired_capacity(group.name, direction.capacity)
        self._issued.add(direction)
        group.desired_capacity = direction.capacity

        if direction is ScaleDirection.DOWN:
            return None

        logger.info(f"ASG {group.name} scaled up, looking for an initializing instance")
        return self._discover_new_instance(existing)

    def _discover_new_instance(self, existing: Set[str]) -> Instance:
        def candidates(entries: List[InstanceStatusEntry]) -> List[InstanceStatusEntry]:
            return [e for e in entries if e.is_initializing and e.instance_id not in existing]

        entries = poll_until(
            fetch=self.compute_service.describe_instance_status,
            predicate=lambda entries: bool(candidates(entries)),
            interval=self.discovery_interval,
            timeout=self.discovery_timeout,
            sleep=self.sleep,
            clock=self.clock,
            error_cls=DiscoveryTimeout,
            description="an initializing instance",
        )

        # Scale-up adds one instance; if several are initializing, listing order decides
        entry = candidates(entries)[0]
        logger.info(f"Discovered new instance {entry.instance_id}")
        return Instance(instance_id=entry.instance_id, status=InstanceStatus.INITIALIZING)
