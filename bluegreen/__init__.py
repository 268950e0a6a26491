"""
Blue/green deployment orchestration for CodeDeploy applications.

This package coordinates three AWS control planes into one workflow:
- Auto Scaling groups (capacity up/down)
- EC2 instances (readiness polling, role tags)
- CodeDeploy (deployment group filters, deployment submission and polling)
"""
