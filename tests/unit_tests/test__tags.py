import pytest

from bluegreen.aws.infrastructure.deployment_group import DeploymentGroupReconfigurator
from bluegreen.aws.infrastructure.tags import TagManager
from bluegreen.errors import ResourceNotFound
from tests.consts import ACTIVE_TAG, TARGET_TAG, TEST_APPLICATION, TEST_DEPLOYMENT_GROUP


@pytest.fixture
def tags(fake_compute):
    return TagManager(fake_compute, TARGET_TAG, ACTIVE_TAG)


class TestTagManager:

    def test_mark_as_target_adds_empty_marker(self, tags, fake_compute):
        tags.mark_as_target("i-new")
        assert fake_compute.tags["i-new"] == {TARGET_TAG: ""}

    def test_target_then_active_leaves_only_active(self, tags, fake_compute):
        tags.mark_as_target("i-new")
        tags.mark_as_active("i-new")

        assert set(fake_compute.tags["i-new"]) == {ACTIVE_TAG}

    def test_operations_are_idempotent(self, tags, fake_compute):
        tags.mark_as_target("i-new")
        tags.mark_as_target("i-new")
        tags.mark_as_active("i-new")
        tags.mark_as_active("i-new")

        assert fake_compute.tags["i-new"] == {ACTIVE_TAG: ""}

    def test_mark_as_active_issues_both_requests(self, tags, call_log):
        tags.mark_as_active("i-new")

        names = sorted(call_log.names())
        assert names == ["compute.create_tags", "compute.delete_tags"]

    def test_failed_tag_request_propagates(self, tags, fake_compute, call_log):
        fake_compute.fail_on["delete_tags"] = ResourceNotFound("Instance(s) ['i-new'] not found")

        with pytest.raises(ResourceNotFound):
            tags.mark_as_active("i-new")

        # The add is not rolled back when the remove fails
        assert "compute.create_tags" in call_log.names()

    def test_distinct_tag_namespaces(self, fake_compute):
        staging = TagManager(fake_compute, "STAGING_TARGET", "STAGING_ACTIVE")
        staging.mark_as_target("i-a")
        staging.mark_as_active("i-a")

        assert fake_compute.tags["i-a"] == {"STAGING_ACTIVE": ""}


class TestDeploymentGroupReconfigurator:

    @pytest.fixture
    def reconfigurator(self, fake_deployment):
        return DeploymentGroupReconfigurator(
            fake_deployment, TEST_APPLICATION, TEST_DEPLOYMENT_GROUP, ACTIVE_TAG
        )

    def test_detach_clears_scaling_groups_and_keeps_active_filter(self, reconfigurator, fake_deployment):
        reconfigurator.detach()
        assert fake_deployment.group_updates == [
            (TEST_APPLICATION, TEST_DEPLOYMENT_GROUP, [], [ACTIVE_TAG])
        ]

    def test_reattach_restores_scaling_group(self, reconfigurator, fake_deployment):
        reconfigurator.reattach("academy-api-asg")
        assert fake_deployment.group_updates[-1][2] == ["academy-api-asg"]
        assert fake_deployment.group_updates[-1][3] == [ACTIVE_TAG]
