"""AWS client management."""
import boto3
import logging
from typing import Any

from botocore.config import Config
from botocore.exceptions import ClientError

from bluegreen.config.settings import get_settings
from bluegreen.errors import ConfigurationError, ResourceNotFound

logger = logging.getLogger(__name__)


class AWSClientManager:
    """Singleton manager for AWS service clients."""
    _instance = None
    _clients = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(AWSClientManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize the client manager with settings."""
        self.settings = get_settings()
        self.region = self.settings.aws_region
        self.endpoint_url = self.settings.aws_endpoint_url

        logger.info(f"Initializing AWSClientManager")
        logger.info(f"  Region: {self.region}")
        if self.endpoint_url:
            logger.info(f"  Endpoint: {self.endpoint_url}")

        self.session = self._create_session()

    def _create_session(self) -> boto3.Session:
        if self.settings.aws_profile:
            logger.debug(f"Using AWS profile: {self.settings.aws_profile}")
            return boto3.Session(profile_name=self.settings.aws_profile, region_name=self.region)

        return boto3.Session(
            aws_access_key_id=self.settings.aws_access_key_id,
            aws_secret_access_key=self.settings.aws_secret_access_key,
            region_name=self.region,
        )

    def get_client(self, service_name: str) -> Any:
        """Get or create an AWS service client."""
        if service_name in self._clients:
            return self._clients[service_name]

        client_kwargs = {
            'region_name': self.region,
            'config': Config(user_agent_extra=self.settings.user_agent_extra),
        }
        if self.endpoint_url:
            client_kwargs['endpoint_url'] = self.endpoint_url

        try:
            client = self.session.client(service_name, **client_kwargs)
            self._clients[service_name] = client
            logger.debug(f"Created {service_name} client")
            return client
        except Exception as e:
            logger.error(f"Error creating {service_name} client: {str(e)}")
            raise

    def verify_credentials(self) -> None:
        """Fail early when boto3 cannot resolve any credentials."""
        if self.session.get_credentials() is None:
            raise ConfigurationError(
                "No credentials. Configure AWS credentials (environment, profile "
                "or instance role) before running a deployment."
            )

    @classmethod
    def reset(cls):
        """Drop the singleton and its cached clients."""
        cls._clients.clear()
        cls._instance = None
        logger.debug("Cleared all AWS clients")


NOT_FOUND_CODES = (
    'ApplicationDoesNotExistException',
    'DeploymentGroupDoesNotExistException',
    'DeploymentDoesNotExistException',
    'InvalidInstanceID.NotFound',
    'ValidationError',
)


def translate_client_error(error: ClientError, resource: str) -> Exception:
    """Map a botocore ClientError naming a missing resource to ResourceNotFound.

    Any other error is returned unchanged so callers can re-raise it.
    """
    code = error.response.get('Error', {}).get('Code', '')
    message = error.response.get('Error', {}).get('Message', str(error))

    if code in NOT_FOUND_CODES:
        if code == 'ValidationError' and 'not found' not in message.lower():
            return error
        return ResourceNotFound(f"{resource} not found: {message}", code=code)

    return error


# Convenience functions for common operations

def get_asg_client():
    """Get the Auto Scaling Group client."""
    return AWSClientManager().get_client('autoscaling')

def get_ec2_client():
    """Get the EC2 client."""
    return AWSClientManager().get_client('ec2')

def get_codedeploy_client():
    """Get the CodeDeploy client."""
    return AWSClientManager().get_client('codedeploy')
