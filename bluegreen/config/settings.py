# bluegreen/config/settings.py
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bluegreen.errors import ConfigurationError
from bluegreen.models import DeploymentType
from .profiles import DeploymentProfile, DEFAULT_PROFILE_KEY

FILE_EXISTS_BEHAVIORS = ("DISALLOW", "OVERWRITE", "RETAIN")
BUNDLE_TYPES = ("tar", "tgz", "zip", "YAML", "JSON")


class Settings(BaseSettings):
    """
    Single source of truth for deployment settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from bluegreen.config import get_settings
        settings = get_settings()
        group = settings.deployment_group_name
    """

    # Application Settings
    app_name: str = Field(
        default="codedeploy-bluegreen",
        description="Name reported in logs"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="eu-west-3",
        alias="AWS_DEFAULT_REGION"
    )

    aws_profile: Optional[str] = Field(
        default=None,
        alias="AWS_PROFILE",
        description="Shared-credentials profile used to build the boto3 session"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    user_agent_extra: str = Field(
        default="aws-actions/aws-codedeploy-run-build",
        description="Appended to the user agent of every AWS client"
    )

    # CodeDeploy inputs
    application_name: Optional[str] = Field(default=None, description="CodeDeploy application name")
    deployment_group_name: Optional[str] = Field(default=None, description="CodeDeploy deployment group")
    deployment_config_name: Optional[str] = Field(default=None, description="CodeDeploy deployment config")
    file_exists_behavior: str = Field(
        default="DISALLOW",
        description="What CodeDeploy does with files already on the instance"
    )

    # Revision
    s3_bucket: Optional[str] = Field(default=None, description="Bucket holding the revision bundle")
    s3_key: Optional[str] = Field(default=None, description="Key of the revision bundle")
    bundle_type: str = Field(default="zip", description="Revision bundle type")

    # Deployment strategy
    deployment_type: DeploymentType = Field(
        default=DeploymentType.IN_PLACE,
        description="in-place or blue-green"
    )
    target_environment: Optional[str] = Field(
        default=None,
        description="Profile key selecting application, group and tag names"
    )
    scaling_group_name: Optional[str] = Field(
        default=None,
        description="Auto Scaling group (or name fragment) for the default profile"
    )
    target_tag: str = Field(default="CODEDEPLOY_TARGET")
    active_tag: str = Field(default="ACTIVE_API_INSTANCE")
    profiles: Dict[str, DeploymentProfile] = Field(
        default_factory=dict,
        description="Environment profiles, JSON-encoded when set through the environment"
    )

    # Rollback
    auto_rollback_enabled: bool = Field(default=True)
    auto_rollback_events: List[str] = Field(
        default_factory=lambda: ["DEPLOYMENT_FAILURE", "DEPLOYMENT_STOP_ON_REQUEST"]
    )
    check_ongoing_deployments: bool = Field(
        default=True,
        description="Refuse to start while another deployment is ongoing in the group"
    )

    # Timing (seconds)
    discovery_interval_s: float = Field(default=15.0)
    discovery_timeout_s: float = Field(default=180.0)
    readiness_interval_s: float = Field(default=10.0)
    readiness_timeout_s: float = Field(default=300.0)
    deployment_wait_s: float = Field(default=30.0, description="First wait between status polls")
    deployment_backoff_s: float = Field(default=15.0, description="Added to the wait after each poll")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_type', mode='before')
    @classmethod
    def normalize_deployment_type(cls, v):
        """Accept in_place / IN-PLACE style spellings."""
        if isinstance(v, str):
            return v.strip().lower().replace("_", "-")
        return v

    @field_validator('file_exists_behavior', mode='before')
    @classmethod
    def validate_file_exists_behavior(cls, v):
        v = (v or "DISALLOW").upper()
        if v not in FILE_EXISTS_BEHAVIORS:
            raise ValueError(f"Invalid file_exists_behavior: {v}. Must be one of {list(FILE_EXISTS_BEHAVIORS)}")
        return v

    @field_validator('bundle_type', mode='before')
    @classmethod
    def validate_bundle_type(cls, v):
        v = v or "zip"
        if v not in BUNDLE_TYPES:
            raise ValueError(f"Invalid bundle_type: {v}. Must be one of {list(BUNDLE_TYPES)}")
        return v

    @field_validator('deployment_wait_s', 'deployment_backoff_s', 'readiness_interval_s', 'discovery_interval_s')
    @classmethod
    def must_not_be_negative(cls, v):
        if v < 0:
            raise ValueError("poll intervals cannot be negative")
        return v

    def deployment_profiles(self) -> Dict[str, DeploymentProfile]:
        """Configured profiles plus the built-in default profile.

        The default profile is assembled from the top-level fields unless a
        profile named 'default' is configured explicitly.
        """
        default = DeploymentProfile(
            application_name=self.application_name,
            deployment_group_name=self.deployment_group_name,
            scaling_group_name=self.scaling_group_name,
            target_tag=self.target_tag,
            active_tag=self.active_tag,
        )
        return {DEFAULT_PROFILE_KEY: default, **self.profiles}

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()


def load_settings(**overrides) -> Settings:
    """Build settings with explicit overrides on top of environment and .env values.

    None values are ignored so unset command-line flags do not mask the
    environment.

    Raises:
        ConfigurationError: A value fails validation
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
