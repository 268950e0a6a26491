"""Submit a CodeDeploy deployment and poll it to a terminal status."""
import logging
import time
from typing import Callable

from bluegreen.aws.services.codedeploy import DeploymentService
from bluegreen.aws.utils.polling import poll_until
from bluegreen.errors import DeploymentFailed
from bluegreen.models import DeploymentInfo, DeploymentRequest

logger = logging.getLogger(__name__)


class DeploymentSubmitter:
    """Creates a deployment and waits for it with a linearly growing delay.

    The wait starts at ``wait`` seconds and grows by ``backoff`` after each
    ongoing status. There is no cap and no attempt limit: a stuck deployment
    is polled until CodeDeploy reports a terminal status.
    """

    def __init__(self, deployment_service: DeploymentService, wait: float = 30.0, backoff: float = 15.0,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.deployment_service = deployment_service
        self.wait = wait
        self.backoff = backoff
        self.sleep = sleep
        self.clock = clock

    def deploy(self, request: DeploymentRequest) -> DeploymentInfo:
        deployment_id = self.deployment_service.create_deployment(request)
        return self.wait_for_completion(deployment_id)

    def _fetch(self, deployment_id: str) -> DeploymentInfo:
        info = self.deployment_service.get_deployment(deployment_id)
        logger.info(f"[{info.status.value}] : {info.overview}")
        return info

    def wait_for_completion(self, deployment_id: str) -> DeploymentInfo:
        """Poll ``deployment_id`` until terminal; raise DeploymentFailed unless it succeeded."""
        info = poll_until(
            fetch=lambda: self._fetch(deployment_id),
            predicate=lambda i: i.status.is_terminal,
            interval=self.wait,
            backoff=self.backoff,
            timeout=None,
            sleep=self.sleep,
            clock=self.clock,
            description=f"deployment {deployment_id}",
        )

        if info.status.is_success:
            logger.info(f"✅ Deployment {deployment_id} succeeded")
            return info

        logger.error(f"❌ Deployment {deployment_id} ended with status {info.status.value}")
        raise DeploymentFailed(
            info.error_message or f"Deployment ended with status {info.status.value}",
            code=info.error_code or info.status.value,
            deployment_id=deployment_id,
        )
