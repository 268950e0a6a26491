#!/usr/bin/env python3
"""
CLI tool for running a CodeDeploy deployment, in-place or blue/green.

Flags override the matching environment / .env settings.
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from bluegreen.aws.orchestration.orchestrator import run_deployment
from bluegreen.aws.utils.aws_clients import AWSClientManager
from bluegreen.config.settings import load_settings
from bluegreen.errors import BlueGreenError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a CodeDeploy deployment")
    parser.add_argument("-p", "--application-name", help="CodeDeploy application name")
    parser.add_argument("-g", "--deployment-group-name", help="CodeDeploy deployment group name")
    parser.add_argument("-c", "--deployment-config-name", help="CodeDeploy deployment config name")
    parser.add_argument("-f", "--file-exists-behavior", help="DISALLOW, OVERWRITE or RETAIN")
    parser.add_argument("-s", "--s3-bucket", help="Bucket holding the revision")
    parser.add_argument("-k", "--s3-key", help="Key of the revision bundle")
    parser.add_argument("-b", "--bundle-type", help="Revision bundle type (default zip)")
    parser.add_argument("-t", "--deployment-type", choices=["in-place", "blue-green"],
                        help="Deployment strategy")
    parser.add_argument("-e", "--target-environment", help="Profile key for names and tags")
    parser.add_argument("--scaling-group-name", help="Auto Scaling group for blue-green runs")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            application_name=args.application_name,
            deployment_group_name=args.deployment_group_name,
            deployment_config_name=args.deployment_config_name,
            file_exists_behavior=args.file_exists_behavior,
            s3_bucket=args.s3_bucket,
            s3_key=args.s3_key,
            bundle_type=args.bundle_type,
            deployment_type=args.deployment_type,
            target_environment=args.target_environment,
            scaling_group_name=args.scaling_group_name,
        )
    except BlueGreenError as e:
        print(e.report(), file=sys.stderr)
        return 1

    log_level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger.info("*****STARTING DEPLOYMENT*****")
    try:
        AWSClientManager().verify_credentials()
        result = run_deployment(settings)
    except BlueGreenError as e:
        print(e.report(), file=sys.stderr)
        return 1
    except ClientError as e:
        error = e.response.get('Error', {})
        print(f"Message : {error.get('Message', str(e))}. Code {error.get('Code')}. DeploymentId None",
              file=sys.stderr)
        return 1
    except BotoCoreError as e:
        print(f"Message : {e}. Code {type(e).__name__}. DeploymentId None", file=sys.stderr)
        return 1
    finally:
        logger.info("*****DEPLOYMENT COMPLETE*****")

    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0 if result.status.is_success else 1


if __name__ == "__main__":
    sys.exit(main())
