"""boto3 adapters for the Auto Scaling, EC2 and CodeDeploy control planes."""
