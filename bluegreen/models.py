"""
Data model for a single deployment run.

Requests, selectors and revisions are immutable once built. Instance and
scaling group records are snapshots of external state.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any, List, Optional, Set, Tuple


class DeploymentType(str, Enum):
    """How the revision reaches the fleet."""
    IN_PLACE = "in-place"
    BLUE_GREEN = "blue-green"


class DeploymentStatus(str, Enum):
    """CodeDeploy deployment statuses."""
    CREATED = "Created"
    QUEUED = "Queued"
    IN_PROGRESS = "InProgress"
    READY = "Ready"
    BAKING = "Baking"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    STOPPED = "Stopped"

    @classmethod
    def ongoing(cls) -> Tuple["DeploymentStatus", ...]:
        return (cls.CREATED, cls.QUEUED, cls.IN_PROGRESS, cls.READY, cls.BAKING)

    @property
    def is_ongoing(self) -> bool:
        return self in DeploymentStatus.ongoing()

    @property
    def is_success(self) -> bool:
        return self is DeploymentStatus.SUCCEEDED

    @property
    def is_terminal(self) -> bool:
        return not self.is_ongoing


class InstanceStatus(str, Enum):
    """Instance health as reported by the status listing."""
    PENDING = "pending"
    INITIALIZING = "initializing"
    OK = "ok"
    UNKNOWN = "unknown"

    @classmethod
    def from_aws(cls, value: Optional[str]) -> "InstanceStatus":
        """Map an EC2 status string, folding anything unrecognised into UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class InstanceStatusEntry:
    """One row of the instance-status listing."""
    instance_id: str
    status: InstanceStatus
    details: Tuple[str, ...] = ()

    @property
    def is_initializing(self) -> bool:
        # Reachability checks report "initializing" in details before the summary does
        return self.status is InstanceStatus.INITIALIZING or "initializing" in self.details


@dataclass
class Instance:
    """A compute instance and its role tags."""
    instance_id: str
    status: InstanceStatus = InstanceStatus.PENDING
    tags: Set[Tuple[str, str]] = field(default_factory=set)

    def tag_keys(self) -> Set[str]:
        return {key for key, _ in self.tags}


@dataclass
class ScalingGroup:
    """An Auto Scaling group; only desired capacity is ever changed."""
    name: str
    desired_capacity: int
    instance_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RevisionLocation:
    """S3 location of the application bundle."""
    bucket: str
    key: str
    bundle_type: str = "zip"


@dataclass(frozen=True)
class RollbackPolicy:
    """Automatic rollback configuration passed to CodeDeploy."""
    enabled: bool = True
    events: Tuple[str, ...] = ("DEPLOYMENT_FAILURE", "DEPLOYMENT_STOP_ON_REQUEST")


@dataclass(frozen=True)
class TargetSelector:
    """Either the deployment group's scaling group, or a tag-filtered instance set."""
    kind: DeploymentType
    tag_key: Optional[str] = None

    def __post_init__(self):
        if self.kind is DeploymentType.BLUE_GREEN and not self.tag_key:
            raise ValueError("blue-green target selector requires a tag key")
        if self.kind is DeploymentType.IN_PLACE and self.tag_key:
            raise ValueError("in-place target selector takes no tag key")

    @classmethod
    def in_place(cls) -> "TargetSelector":
        return cls(DeploymentType.IN_PLACE)

    @classmethod
    def blue_green(cls, tag_key: str) -> "TargetSelector":
        return cls(DeploymentType.BLUE_GREEN, tag_key)


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything needed to create one CodeDeploy deployment."""
    application_name: str
    deployment_group_name: str
    deployment_config_name: str
    revision: RevisionLocation
    target_selector: TargetSelector
    file_exists_behavior: str = "DISALLOW"
    rollback_policy: RollbackPolicy = field(default_factory=RollbackPolicy)

    @property
    def deployment_type(self) -> DeploymentType:
        return self.target_selector.kind

    def to_create_deployment_params(self) -> Dict[str, Any]:
        """Render the CreateDeployment payload."""
        params = {
            "applicationName": self.application_name,
            "deploymentGroupName": self.deployment_group_name,
            "deploymentConfigName": self.deployment_config_name,
            "fileExistsBehavior": self.file_exists_behavior,
            "autoRollbackConfiguration": {
                "enabled": self.rollback_policy.enabled,
                "events": list(self.rollback_policy.events),
            },
            "revision": {
                "revisionType": "S3",
                "s3Location": {
                    "bucket": self.revision.bucket,
                    "key": self.revision.key,
                    "bundleType": self.revision.bundle_type,
                },
            },
        }

        if self.target_selector.kind is DeploymentType.BLUE_GREEN:
            params["targetInstances"] = {
                "ec2TagSet": {
                    "ec2TagSetList": [[
                        {"Key": self.target_selector.tag_key, "Value": "", "Type": "KEY_ONLY"}
                    ]]
                }
            }

        return params


@dataclass
class DeploymentInfo:
    """Snapshot returned by a deployment status fetch."""
    deployment_id: str
    status: DeploymentStatus
    overview: Dict[str, int] = field(default_factory=dict)
    error_code: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class DeploymentResult:
    """Outcome of a deployment run."""
    status: DeploymentStatus
    deployment_id: str
    overview: Dict[str, int] = field(default_factory=dict)
    deployment_type: DeploymentType = DeploymentType.IN_PLACE
    instance_id: Optional[str] = None
    states: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["deployment_type"] = self.deployment_type.value
        return data
