"""Named environment profiles and their resolution."""
import logging
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bluegreen.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_KEY = "default"


class DeploymentProfile(BaseModel):
    """Per-environment names used by one deployment run."""

    model_config = ConfigDict(frozen=True)

    application_name: Optional[str] = Field(default=None, description="CodeDeploy application")
    deployment_group_name: Optional[str] = Field(default=None, description="CodeDeploy deployment group")
    scaling_group_name: Optional[str] = Field(
        default=None,
        description="Auto Scaling group name, or a case-insensitive fragment of it"
    )
    target_tag: str = Field(default="CODEDEPLOY_TARGET", description="Tag marking the new deployment target")
    active_tag: str = Field(default="ACTIVE_API_INSTANCE", description="Tag marking deployed instances")

    @model_validator(mode="after")
    def tags_must_differ(self):
        if self.target_tag == self.active_tag:
            raise ValueError("target_tag and active_tag must be different tag keys")
        return self


def resolve_profile(environment: Optional[str],
                    profiles: Dict[str, DeploymentProfile]) -> DeploymentProfile:
    """Return the profile for an environment key.

    An empty key selects the default profile. An unknown key raises
    ConfigurationError instead of falling back to the default.
    """
    key = environment or DEFAULT_PROFILE_KEY

    if key not in profiles:
        raise ConfigurationError(
            f"Unknown target environment '{key}'. Available: {sorted(profiles)}"
        )

    logger.info(f"Using deployment profile: {key}")
    return profiles[key]
