"""EC2 adapter: instance launch, status listing and tags."""
import logging
from typing import Any, Dict, Iterable, List, Optional

from botocore.exceptions import ClientError

from bluegreen.aws.utils.aws_clients import get_ec2_client, translate_client_error
from bluegreen.models import Instance, InstanceStatus, InstanceStatusEntry

logger = logging.getLogger(__name__)


class ComputeService:
    """Thin wrapper over the EC2 calls the workflow needs."""

    def __init__(self, client=None):
        self.client = client or get_ec2_client()

    def launch_instance(self, template: Dict[str, Any]) -> Instance:
        """Launch one instance from ``run_instances`` parameters."""
        params = {**template, 'MinCount': 1, 'MaxCount': 1}
        response = self.client.run_instances(**params)
        data = response['Instances'][0]

        instance = Instance(
            instance_id=data['InstanceId'],
            status=InstanceStatus.PENDING,
            tags={(t['Key'], t.get('Value', '')) for t in data.get('Tags', [])},
        )
        logger.info(f"Launched instance {instance.instance_id}")
        return instance

    def describe_instance_status(self, instance_ids: Optional[List[str]] = None) -> List[InstanceStatusEntry]:
        """Status rows in listing order, optionally restricted to ``instance_ids``."""
        kwargs = {}
        if instance_ids:
            kwargs['InstanceIds'] = list(instance_ids)

        entries = []
        try:
            paginator = self.client.get_paginator('describe_instance_status')
            for page in paginator.paginate(**kwargs):
                for row in page.get('InstanceStatuses', []):
                    summary = row.get('InstanceStatus', {})
                    entries.append(InstanceStatusEntry(
                        instance_id=row['InstanceId'],
                        status=InstanceStatus.from_aws(summary.get('Status')),
                        details=tuple(d.get('Status', '') for d in summary.get('Details', [])),
                    ))
        except ClientError as e:
            raise translate_client_error(e, f"Instance(s) {instance_ids}")

        return entries

    def create_tags(self, instance_ids: Iterable[str], tags: Dict[str, str]) -> None:
        ids = list(instance_ids)
        try:
            self.client.create_tags(
                Resources=ids,
                Tags=[{'Key': key, 'Value': value} for key, value in tags.items()]
            )
        except ClientError as e:
            raise translate_client_error(e, f"Instance(s) {ids}")

    def delete_tags(self, instance_ids: Iterable[str], tag_keys: Iterable[str]) -> None:
        ids = list(instance_ids)
        try:
            self.client.delete_tags(
                Resources=ids,
                Tags=[{'Key': key} for key in tag_keys]
            )
        except ClientError as e:
            raise translate_client_error(e, f"Instance(s) {ids}")
