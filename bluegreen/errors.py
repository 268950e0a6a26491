"""Error kinds raised by the deployment workflow."""
from typing import Optional


class BlueGreenError(Exception):
    """Base error carrying the fields reported to the caller."""

    default_code = "BlueGreenError"

    def __init__(self, message: str, code: Optional[str] = None,
                 deployment_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.deployment_id = deployment_id

    def report(self) -> str:
        """Consolidated single-line failure message."""
        return f"Message : {self.message}. Code {self.code}. DeploymentId {self.deployment_id}"


class ConfigurationError(BlueGreenError):
    """A required input is missing or invalid."""
    default_code = "ConfigurationError"


class ResourceNotFound(BlueGreenError):
    """Scaling group, deployment or deployment group is absent."""
    default_code = "ResourceNotFound"


class PollTimeout(BlueGreenError):
    """A poll loop exhausted its wall-clock budget."""
    default_code = "PollTimeout"


class DiscoveryTimeout(PollTimeout):
    """No initializing instance appeared after a scale-up."""
    default_code = "DiscoveryTimeout"


class ReadinessTimeout(PollTimeout):
    """The instance never reported an 'ok' status."""
    default_code = "ReadinessTimeout"


class DeploymentFailed(BlueGreenError):
    """The deployment reached a failure terminal status."""
    default_code = "DeploymentFailed"


class DeploymentInProgress(BlueGreenError):
    """Another deployment is still ongoing in the deployment group."""
    default_code = "DeploymentInProgress"
