import json

import pytest
from pydantic import ValidationError

from bluegreen.aws.orchestration.request_builder import build_request
from bluegreen.config import DEFAULT_PROFILE_KEY, DeploymentProfile, Settings, load_settings, resolve_profile
from bluegreen.errors import ConfigurationError
from bluegreen.models import DeploymentStatus, DeploymentType, InstanceStatus, TargetSelector
from tests.consts import (
    ACTIVE_TAG, TARGET_TAG, TEST_APPLICATION, TEST_BUCKET_NAME, TEST_DEPLOYMENT_CONFIG,
    TEST_DEPLOYMENT_GROUP, TEST_S3_KEY
)


def make_settings(**overrides):
    values = dict(
        application_name=TEST_APPLICATION,
        deployment_group_name=TEST_DEPLOYMENT_GROUP,
        deployment_config_name=TEST_DEPLOYMENT_CONFIG,
        s3_bucket=TEST_BUCKET_NAME,
        s3_key=TEST_S3_KEY,
        _env_file=None,
    )
    values.update(overrides)
    return Settings(**values)


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        settings = Settings(_env_file=None)

        assert settings.aws_region == "eu-west-3"
        assert settings.deployment_type is DeploymentType.IN_PLACE
        assert settings.file_exists_behavior == "DISALLOW"
        assert settings.bundle_type == "zip"
        assert settings.deployment_wait_s == 30
        assert settings.deployment_backoff_s == 15
        assert settings.auto_rollback_events == ["DEPLOYMENT_FAILURE", "DEPLOYMENT_STOP_ON_REQUEST"]

    @pytest.mark.parametrize("raw", ["blue-green", "BLUE_GREEN", " Blue-Green "])
    def test_deployment_type_spellings(self, raw):
        assert make_settings(deployment_type=raw).deployment_type is DeploymentType.BLUE_GREEN

    def test_file_exists_behavior_is_upper_cased(self):
        assert make_settings(file_exists_behavior="overwrite").file_exists_behavior == "OVERWRITE"

    def test_invalid_file_exists_behavior(self):
        with pytest.raises(ValidationError):
            make_settings(file_exists_behavior="MERGE")

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("APPLICATION_NAME", "FromEnv")
        monkeypatch.setenv("DEPLOYMENT_TYPE", "blue-green")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "us-west-2")

        settings = Settings(_env_file=None)

        assert settings.application_name == "FromEnv"
        assert settings.deployment_type is DeploymentType.BLUE_GREEN
        assert settings.aws_region == "us-west-2"

    def test_profiles_from_environment_json(self, monkeypatch):
        monkeypatch.setenv("PROFILES", json.dumps({
            "staging": {
                "application_name": "StagingApp",
                "deployment_group_name": "StagingGroup",
                "scaling_group_name": "staging-asg",
                "target_tag": "STAGING_TARGET",
                "active_tag": "STAGING_ACTIVE",
            }
        }))

        profiles = Settings(_env_file=None).deployment_profiles()

        assert set(profiles) == {DEFAULT_PROFILE_KEY, "staging"}
        assert profiles["staging"].scaling_group_name == "staging-asg"

    def test_default_profile_follows_top_level_fields(self):
        profile = make_settings(scaling_group_name="academy").deployment_profiles()[DEFAULT_PROFILE_KEY]

        assert profile.application_name == TEST_APPLICATION
        assert profile.scaling_group_name == "academy"
        assert (profile.target_tag, profile.active_tag) == (TARGET_TAG, ACTIVE_TAG)

    def test_load_settings_ignores_none_overrides(self, monkeypatch):
        monkeypatch.setenv("S3_BUCKET", "env-bucket")

        settings = load_settings(s3_bucket=None, s3_key="override.zip", _env_file=None)

        assert settings.s3_bucket == "env-bucket"
        assert settings.s3_key == "override.zip"

    def test_validators_use_pydantic_v2_api(self):
        decorators = Settings.__pydantic_decorators__

        assert not decorators.validators
        assert {"normalize_deployment_type", "validate_file_exists_behavior",
                "validate_bundle_type", "must_not_be_negative"} <= set(decorators.field_validators)

    def test_load_settings_wraps_validation_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(deployment_wait_s=-1, _env_file=None)

        assert exc_info.value.code == "ConfigurationError"


class TestProfiles:

    def test_empty_key_selects_default(self):
        profiles = make_settings().deployment_profiles()
        assert resolve_profile(None, profiles) is profiles[DEFAULT_PROFILE_KEY]
        assert resolve_profile("", profiles) is profiles[DEFAULT_PROFILE_KEY]

    def test_unknown_key_is_an_error(self):
        with pytest.raises(ConfigurationError, match="prod"):
            resolve_profile("prod", make_settings().deployment_profiles())

    def test_tags_must_differ(self):
        with pytest.raises(ValidationError):
            DeploymentProfile(target_tag="SAME", active_tag="SAME")


class TestBuildRequest:

    def test_missing_inputs_are_listed(self):
        settings = make_settings(s3_bucket=None, deployment_config_name=None)
        profile = DeploymentProfile()

        with pytest.raises(ConfigurationError) as exc_info:
            build_request(settings, profile)

        assert "deployment-config-name" in exc_info.value.message
        assert "s3-bucket" in exc_info.value.message
        assert "s3-key" not in exc_info.value.message

    def test_in_place_params(self):
        settings = make_settings()
        request = build_request(settings, settings.deployment_profiles()[DEFAULT_PROFILE_KEY])

        params = request.to_create_deployment_params()

        assert request.deployment_type is DeploymentType.IN_PLACE
        assert params["applicationName"] == TEST_APPLICATION
        assert params["revision"] == {
            "revisionType": "S3",
            "s3Location": {"bucket": TEST_BUCKET_NAME, "key": TEST_S3_KEY, "bundleType": "zip"},
        }
        assert params["autoRollbackConfiguration"]["enabled"] is True
        assert "targetInstances" not in params

    def test_blue_green_params_select_target_tag(self):
        settings = make_settings(deployment_type="blue-green", scaling_group_name="academy")
        request = build_request(settings, settings.deployment_profiles()[DEFAULT_PROFILE_KEY])

        params = request.to_create_deployment_params()

        assert params["targetInstances"]["ec2TagSet"]["ec2TagSetList"] == [
            [{"Key": TARGET_TAG, "Value": "", "Type": "KEY_ONLY"}]
        ]

    def test_blue_green_requires_scaling_group(self):
        settings = make_settings(deployment_type="blue-green")

        with pytest.raises(ConfigurationError, match="scaling-group-name"):
            build_request(settings, settings.deployment_profiles()[DEFAULT_PROFILE_KEY])

    def test_profile_supplies_names_when_settings_do_not(self):
        settings = make_settings(application_name=None, deployment_group_name=None)
        profile = DeploymentProfile(application_name="ProfileApp", deployment_group_name="ProfileGroup")

        request = build_request(settings, profile)

        assert (request.application_name, request.deployment_group_name) == ("ProfileApp", "ProfileGroup")


class TestModels:

    def test_ongoing_and_terminal_statuses(self):
        assert {s for s in DeploymentStatus if s.is_terminal} == {
            DeploymentStatus.SUCCEEDED, DeploymentStatus.FAILED, DeploymentStatus.STOPPED
        }
        assert DeploymentStatus.BAKING.is_ongoing

    def test_unknown_instance_status(self):
        assert InstanceStatus.from_aws("impaired") is InstanceStatus.UNKNOWN
        assert InstanceStatus.from_aws("ok") is InstanceStatus.OK

    def test_target_selector_validation(self):
        with pytest.raises(ValueError):
            TargetSelector(DeploymentType.BLUE_GREEN)
        with pytest.raises(ValueError):
            TargetSelector(DeploymentType.IN_PLACE, "TAG")
