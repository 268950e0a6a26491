"""
Configuration management for blue/green deployments.

Contains the Pydantic settings and the environment-profile resolution that
maps a target environment key to application, deployment group, scaling
group and tag names.
"""
from .settings import Settings, get_settings, load_settings
from .profiles import DeploymentProfile, DEFAULT_PROFILE_KEY, resolve_profile

__all__ = [
    "Settings", "get_settings", "load_settings",
    "DeploymentProfile", "DEFAULT_PROFILE_KEY", "resolve_profile",
]
