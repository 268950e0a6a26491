"""Deployment group instance-selection filter."""
import logging
from typing import List

from bluegreen.aws.services.codedeploy import DeploymentService

logger = logging.getLogger(__name__)


class DeploymentGroupReconfigurator:
    """Detaches and reattaches the scaling group around a blue/green deployment.

    While detached, CodeDeploy cannot pick the tagged but not yet deployed
    instance as a scaling-group replacement target.
    """

    def __init__(self, deployment_service: DeploymentService, application_name: str,
                 deployment_group_name: str, active_tag: str):
        self.deployment_service = deployment_service
        self.application_name = application_name
        self.deployment_group_name = deployment_group_name
        self.active_tag = active_tag

    def set_deployment_group_scaling_groups(self, scaling_group_names: List[str]) -> None:
        """Rewrite the filter to ``scaling_group_names`` plus the active-tag filter."""
        self.deployment_service.update_deployment_group(
            self.application_name,
            self.deployment_group_name,
            scaling_group_names,
            [self.active_tag],
        )
        logger.info(
            f"Deployment group {self.deployment_group_name} scaling groups set to {scaling_group_names}"
        )

    def detach(self) -> None:
        self.set_deployment_group_scaling_groups([])

    def reattach(self, scaling_group_name: str) -> None:
        self.set_deployment_group_scaling_groups([scaling_group_name])
