"""CodeDeploy adapter."""
import logging
from typing import Iterable, List, Optional

from botocore.exceptions import ClientError

from bluegreen.aws.utils.aws_clients import get_codedeploy_client, translate_client_error
from bluegreen.models import DeploymentInfo, DeploymentRequest, DeploymentStatus

logger = logging.getLogger(__name__)


class DeploymentService:
    """Creates, inspects and targets CodeDeploy deployments."""

    def __init__(self, client=None):
        self.client = client or get_codedeploy_client()

    def create_deployment(self, request: DeploymentRequest) -> str:
        """Submit a deployment and return its id."""
        try:
            response = self.client.create_deployment(**request.to_create_deployment_params())
        except ClientError as e:
            raise translate_client_error(
                e, f"Deployment group {request.application_name}/{request.deployment_group_name}"
            )

        deployment_id = response['deploymentId']
        logger.info(f"Created deployment {deployment_id}")
        return deployment_id

    def get_deployment(self, deployment_id: str) -> DeploymentInfo:
        try:
            response = self.client.get_deployment(deploymentId=deployment_id)
        except ClientError as e:
            raise translate_client_error(e, f"Deployment {deployment_id}")

        info = response['deploymentInfo']
        error = info.get('errorInformation') or {}
        return DeploymentInfo(
            deployment_id=deployment_id,
            status=DeploymentStatus(info['status']),
            overview=info.get('deploymentOverview', {}),
            error_code=error.get('code'),
            error_message=error.get('message'),
        )

    def update_deployment_group(self, application_name: str, deployment_group_name: str,
                                scaling_groups: List[str], tag_filters: Iterable[str]) -> None:
        """Replace the group's instance selection with ``scaling_groups`` plus KEY_ONLY tag filters."""
        try:
            self.client.update_deployment_group(
                applicationName=application_name,
                currentDeploymentGroupName=deployment_group_name,
                autoScalingGroups=list(scaling_groups),
                ec2TagFilters=[
                    {'Key': key, 'Value': '', 'Type': 'KEY_ONLY'} for key in tag_filters
                ],
            )
        except ClientError as e:
            raise translate_client_error(e, f"Deployment group {application_name}/{deployment_group_name}")

        logger.debug(f"Deployment group {deployment_group_name} now targets scaling groups {scaling_groups}")

    def list_deployments(self, application_name: str, deployment_group_name: str,
                         statuses: Optional[Iterable[DeploymentStatus]] = None) -> List[str]:
        kwargs = {
            'applicationName': application_name,
            'deploymentGroupName': deployment_group_name,
        }
        if statuses:
            kwargs['includeOnlyStatuses'] = [DeploymentStatus(s).value for s in statuses]

        deployment_ids = []
        try:
            paginator = self.client.get_paginator('list_deployments')
            for page in paginator.paginate(**kwargs):
                deployment_ids.extend(page.get('deployments', []))
        except ClientError as e:
            raise translate_client_error(e, f"Deployment group {application_name}/{deployment_group_name}")

        return deployment_ids
