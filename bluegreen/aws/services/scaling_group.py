"""Auto Scaling group adapter."""
import logging
from typing import List

from botocore.exceptions import ClientError

from bluegreen.aws.utils.aws_clients import get_asg_client, translate_client_error
from bluegreen.models import ScalingGroup

logger = logging.getLogger(__name__)


class ScalingGroupService:
    """Reads Auto Scaling groups and changes their desired capacity."""

    def __init__(self, client=None):
        self.client = client or get_asg_client()

    def describe_groups(self) -> List[ScalingGroup]:
        """List every Auto Scaling group in the region."""
        groups = []
        paginator = self.client.get_paginator('describe_auto_scaling_groups')
        for page in paginator.paginate():
            for group in page.get('AutoScalingGroups', []):
                groups.append(ScalingGroup(
                    name=group['AutoScalingGroupName'],
                    desired_capacity=group['DesiredCapacity'],
                    instance_ids=[i['InstanceId'] for i in group.get('Instances', [])],
                ))

        logger.debug(f"Found {len(groups)} Auto Scaling groups")
        return groups

    def set_desired_capacity(self, name: str, capacity: int) -> None:
        try:
            self.client.update_auto_scaling_group(
                AutoScalingGroupName=name,
                DesiredCapacity=capacity
            )
        except ClientError as e:
            raise translate_client_error(e, f"Auto Scaling group {name}")

        logger.info(f"Set desired capacity of {name} to {capacity}")

    def attach_instance(self, group_name: str, instance_id: str) -> None:
        try:
            self.client.attach_instances(
                AutoScalingGroupName=group_name,
                InstanceIds=[instance_id]
            )
        except ClientError as e:
            raise translate_client_error(e, f"Auto Scaling group {group_name}")

        logger.info(f"Attached {instance_id} to {group_name}")
