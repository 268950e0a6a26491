"""
Blue/green deployment orchestration.

Sequences the capacity, readiness, tag, deployment-group and deployment
components for one run:

    Idle -> ScalingUp -> AwaitingReady -> Tagging -> Detaching -> Deploying
         -> Reattaching -> Tagging(Active) -> ScalingDown -> Done

In-place runs go straight from Idle to Deploying. Any failure moves the run
to Failed and propagates; completed side effects are not unwound, so a
failure after scale-up leaves the new instance running and tagged.
"""
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from bluegreen.aws.infrastructure.capacity import CapacityController, ScaleDirection
from bluegreen.aws.infrastructure.deployment_group import DeploymentGroupReconfigurator
from bluegreen.aws.infrastructure.readiness import ReadinessPoller
from bluegreen.aws.infrastructure.tags import TagManager
from bluegreen.aws.orchestration.deployer import DeploymentSubmitter
from bluegreen.aws.orchestration.request_builder import build_request
from bluegreen.aws.services.codedeploy import DeploymentService
from bluegreen.aws.services.compute import ComputeService
from bluegreen.aws.services.scaling_group import ScalingGroupService
from bluegreen.aws.utils.decorators import log_operation
from bluegreen.config.profiles import DeploymentProfile, resolve_profile
from bluegreen.config.settings import Settings
from bluegreen.errors import ConfigurationError, DeploymentInProgress
from bluegreen.models import (
    DeploymentInfo, DeploymentRequest, DeploymentResult, DeploymentStatus, DeploymentType,
    Instance, ScalingGroup
)

logger = logging.getLogger(__name__)


class OrchestratorState(str, Enum):
    """States of one deployment run."""
    IDLE = "Idle"
    SCALING_UP = "ScalingUp"
    AWAITING_READY = "AwaitingReady"
    TAGGING = "Tagging"
    DETACHING = "Detaching"
    DEPLOYING = "Deploying"
    REATTACHING = "Reattaching"
    TAGGING_ACTIVE = "Tagging(Active)"
    SCALING_DOWN = "ScalingDown"
    DONE = "Done"
    FAILED = "Failed"


class DeploymentOrchestrator:
    """Runs exactly one deployment lifecycle; state lives only in memory."""

    def __init__(self, profile: DeploymentProfile, settings: Settings,
                 scaling_service: ScalingGroupService,
                 compute_service: ComputeService,
                 deployment_service: DeploymentService,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.profile = profile
        self.settings = settings
        self.deployment_service = deployment_service

        self.capacity = CapacityController(
            scaling_service, compute_service,
            discovery_interval=settings.discovery_interval_s,
            discovery_timeout=settings.discovery_timeout_s,
            sleep=sleep, clock=clock,
        )
        self.readiness = ReadinessPoller(
            compute_service,
            interval=settings.readiness_interval_s,
            timeout=settings.readiness_timeout_s,
            sleep=sleep, clock=clock,
        )
        self.tags = TagManager(compute_service, profile.target_tag, profile.active_tag)
        self.submitter = DeploymentSubmitter(
            deployment_service,
            wait=settings.deployment_wait_s,
            backoff=settings.deployment_backoff_s,
            sleep=sleep, clock=clock,
        )

        self.state = OrchestratorState.IDLE
        self.states: List[OrchestratorState] = [OrchestratorState.IDLE]
        self.instance: Optional[Instance] = None
        self.scaling_group: Optional[ScalingGroup] = None

    def _transition(self, state: OrchestratorState) -> None:
        logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state
        self.states.append(state)

    def _ensure_no_ongoing_deployment(self, request: DeploymentRequest) -> None:
        ongoing = self.deployment_service.list_deployments(
            request.application_name,
            request.deployment_group_name,
            DeploymentStatus.ongoing(),
        )
        if ongoing:
            raise DeploymentInProgress(
                f"Deployment group {request.deployment_group_name} already has "
                f"{len(ongoing)} ongoing deployment(s)",
                deployment_id=ongoing[0],
            )

    def run(self, request: DeploymentRequest) -> DeploymentResult:
        """Execute the run for ``request`` and return its terminal result."""
        if self.state is not OrchestratorState.IDLE:
            raise RuntimeError("An orchestrator runs a single deployment lifecycle")

        logger.info(f"Deployment type is {request.deployment_type.value}")

        try:
            if self.settings.check_ongoing_deployments:
                self._ensure_no_ongoing_deployment(request)

            if request.deployment_type is DeploymentType.IN_PLACE:
                info = self._run_in_place(request)
            else:
                info = self._run_blue_green(request)
        except Exception:
            failed_in = self.state
            self._transition(OrchestratorState.FAILED)
            self._report_leftovers(failed_in)
            raise

        self._transition(OrchestratorState.DONE)
        return DeploymentResult(
            status=info.status,
            deployment_id=info.deployment_id,
            overview=info.overview,
            deployment_type=request.deployment_type,
            instance_id=self.instance.instance_id if self.instance else None,
            states=[s.value for s in self.states],
        )

    def _run_in_place(self, request: DeploymentRequest) -> DeploymentInfo:
        self._transition(OrchestratorState.DEPLOYING)
        return self._deploy(request)

    def _run_blue_green(self, request: DeploymentRequest) -> DeploymentInfo:
        if request.target_selector.tag_key != self.profile.target_tag:
            raise ConfigurationError(
                f"Request targets tag {request.target_selector.tag_key} but the profile "
                f"marks targets with {self.profile.target_tag}"
            )

        self._transition(OrchestratorState.SCALING_UP)
        self.scaling_group = self.capacity.find_scaling_group(self.profile.scaling_group_name)
        self.instance = self._scale_up()

        self._transition(OrchestratorState.AWAITING_READY)
        self._await_ready()

        self._transition(OrchestratorState.TAGGING)
        self.tags.mark_as_target(self.instance.instance_id)

        reconfigurator = DeploymentGroupReconfigurator(
            self.deployment_service,
            request.application_name,
            request.deployment_group_name,
            self.profile.active_tag,
        )

        self._transition(OrchestratorState.DETACHING)
        reconfigurator.detach()

        self._transition(OrchestratorState.DEPLOYING)
        info = self._deploy(request)

        self._transition(OrchestratorState.REATTACHING)
        reconfigurator.reattach(self.scaling_group.name)

        self._transition(OrchestratorState.TAGGING_ACTIVE)
        self.tags.mark_as_active(self.instance.instance_id)

        self._transition(OrchestratorState.SCALING_DOWN)
        self.capacity.scale(ScaleDirection.DOWN, self.scaling_group)

        return info

    @log_operation("Scale up and discover the new instance")
    def _scale_up(self) -> Instance:
        return self.capacity.scale(ScaleDirection.UP, self.scaling_group)

    @log_operation("Wait for the new instance to be ready")
    def _await_ready(self) -> None:
        self.readiness.wait_for_ready(self.instance.instance_id)

    @log_operation("CodeDeploy deployment")
    def _deploy(self, request: DeploymentRequest) -> DeploymentInfo:
        return self.submitter.deploy(request)

    def _report_leftovers(self, failed_in: OrchestratorState) -> None:
        logger.error(f"❌ Deployment run failed in state {failed_in.value}")
        if self.scaling_group and self.capacity.scaled_up:
            logger.warning(
                f"Manual cleanup required: {self.scaling_group.name} is left at desired capacity "
                f"{self.scaling_group.desired_capacity}"
            )
        if self.instance:
            logger.warning(
                f"Manual cleanup required: instance {self.instance.instance_id} may still carry "
                f"the {self.profile.target_tag} tag"
            )
        if failed_in in (OrchestratorState.DEPLOYING, OrchestratorState.REATTACHING):
            logger.warning("Manual cleanup required: deployment group may still be detached from its scaling group")


def run_deployment(settings: Settings,
                   scaling_service: Optional[ScalingGroupService] = None,
                   compute_service: Optional[ComputeService] = None,
                   deployment_service: Optional[DeploymentService] = None) -> DeploymentResult:
    """Resolve the profile, build the request and run one deployment."""
    profile = resolve_profile(settings.target_environment, settings.deployment_profiles())
    request = build_request(settings, profile)

    orchestrator = DeploymentOrchestrator(
        profile,
        settings,
        scaling_service=scaling_service or ScalingGroupService(),
        compute_service=compute_service or ComputeService(),
        deployment_service=deployment_service or DeploymentService(),
    )
    return orchestrator.run(request)
