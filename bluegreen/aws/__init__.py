"""
AWS side of the blue/green workflow.

- services: boto3 adapters for Auto Scaling, EC2 and CodeDeploy
- infrastructure: capacity, readiness, tags and deployment group filters
- orchestration: deployment submission and the run state machine
"""
