"""Build the immutable DeploymentRequest from settings and the selected profile."""
import logging

from bluegreen.config.profiles import DeploymentProfile
from bluegreen.config.settings import Settings
from bluegreen.errors import ConfigurationError
from bluegreen.models import (
    DeploymentRequest, DeploymentType, RevisionLocation, RollbackPolicy, TargetSelector
)

logger = logging.getLogger(__name__)


def build_request(settings: Settings, profile: DeploymentProfile) -> DeploymentRequest:
    """Validate the inputs and assemble a DeploymentRequest.

    Explicit application / deployment group settings override the profile.

    Raises:
        ConfigurationError: A required input is missing
    """
    application_name = settings.application_name or profile.application_name
    deployment_group_name = settings.deployment_group_name or profile.deployment_group_name

    required = {
        "application-name": application_name,
        "deployment-group-name": deployment_group_name,
        "deployment-config-name": settings.deployment_config_name,
        "s3-bucket": settings.s3_bucket,
        "s3-key": settings.s3_key,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing required input(s): {', '.join(missing)}")

    if settings.deployment_type is DeploymentType.BLUE_GREEN:
        if not profile.scaling_group_name:
            raise ConfigurationError("Missing required input(s): scaling-group-name (blue-green)")
        target_selector = TargetSelector.blue_green(profile.target_tag)
    else:
        target_selector = TargetSelector.in_place()

    request = DeploymentRequest(
        application_name=application_name,
        deployment_group_name=deployment_group_name,
        deployment_config_name=settings.deployment_config_name,
        file_exists_behavior=settings.file_exists_behavior,
        revision=RevisionLocation(
            bucket=settings.s3_bucket,
            key=settings.s3_key,
            bundle_type=settings.bundle_type,
        ),
        rollback_policy=RollbackPolicy(
            enabled=settings.auto_rollback_enabled,
            events=tuple(settings.auto_rollback_events),
        ),
        target_selector=target_selector,
    )
    logger.debug(f"Built deployment request: {request}")
    return request
