"""
EC2 Module

Launches and terminates the instances that host the self-hosted runners.
"""

import logging
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ProvisioningError

USER_DATA_TEMPLATE = """#!/bin/bash
set -e
IMDS_TOKEN=$(curl -s -X PUT "http://169.254.169.254/latest/api/token" -H "X-aws-ec2-metadata-token-ttl-seconds: 300")
INSTANCE_ID=$(curl -s -H "X-aws-ec2-metadata-token: $IMDS_TOKEN" http://169.254.169.254/latest/meta-data/instance-id)
case $(uname -m) in
  aarch64|arm64) RUNNER_ARCH="arm64" ;;
  *) RUNNER_ARCH="x64" ;;
esac
mkdir -p actions-runner && cd actions-runner
curl -sSL -o runner.tar.gz "https://github.com/actions/runner/releases/download/v{version}/actions-runner-linux-$RUNNER_ARCH-{version}.tar.gz"
tar xzf runner.tar.gz && rm runner.tar.gz
export RUNNER_ALLOW_RUNASROOT=1
./config.sh --url https://github.com/{repository} --token {token} --labels {label} --name "{label}-$INSTANCE_ID" --unattended
./run.sh
"""


def build_user_data(repository: str, token: str, label: str, runner_version: str) -> str:
    """
    Build the bootstrap script that registers the instance as a runner

    The runner is named "<label>-<instance id>" so teardown can find it
    again from the instance ids alone.

    Args:
        repository: GitHub repository in owner/repo form
        token: Registration token
        label: Unique label of this provisioning attempt
        runner_version: actions/runner release to install

    Returns:
        User data script
    """
    return USER_DATA_TEMPLATE.format(
        repository=repository,
        token=token,
        label=label,
        version=runner_version,
    )


class EC2Client:
    """Thin wrapper around the boto3 EC2 client"""

    def __init__(self, region: Optional[str] = None, logger: Optional[logging.Logger] = None, client=None):
        """
        Initialize EC2 client

        Args:
            region: AWS region, boto3 default chain if omitted
            logger: Logger instance
            client: Pre-built boto3 EC2 client
        """
        self.logger = logger or logging.getLogger(__name__)
        if client is None:
            session = boto3.Session(region_name=region) if region else boto3.Session()
            client = session.client('ec2')
        self.client = client

    def launch_instances(self, image_id: str, instance_type: str, subnet_id: str,
                         security_group_id: str, key_name: str, count: int,
                         tag_specifications: Optional[List[Dict]], user_data: str,
                         iam_role_name: Optional[str] = None, wait: bool = False) -> List[str]:
        """
        Launch count identical instances

        Returns:
            Instance ids

        Raises:
            ProvisioningError: If EC2 rejected the request
        """
        params = {
            'ImageId': image_id,
            'InstanceType': instance_type,
            'MinCount': count,
            'MaxCount': count,
            'UserData': user_data,
            'SubnetId': subnet_id,
            'SecurityGroupIds': [security_group_id],
            'KeyName': key_name,
        }
        if iam_role_name:
            params['IamInstanceProfile'] = {'Name': iam_role_name}
        if tag_specifications:
            params['TagSpecifications'] = tag_specifications

        try:
            response = self.client.run_instances(**params)
            instance_ids = [instance['InstanceId'] for instance in response['Instances']]
            self.logger.info(f"AWS EC2 instance(s) {', '.join(instance_ids)} started")

            if wait:
                waiter = self.client.get_waiter('instance_running')
                waiter.wait(InstanceIds=instance_ids)
                self.logger.info(f"AWS EC2 instance(s) {', '.join(instance_ids)} running")
        except (ClientError, BotoCoreError) as e:
            self.logger.error("AWS EC2 instance starting error")
            raise ProvisioningError(f"Failed to start AWS EC2 instances: {e}") from e

        return instance_ids

    def terminate_instances(self, instance_ids: List[str]) -> None:
        """
        Terminate the given instances

        Raises:
            ProvisioningError: If EC2 rejected the request
        """
        try:
            self.client.terminate_instances(InstanceIds=instance_ids)
        except (ClientError, BotoCoreError) as e:
            self.logger.error("AWS EC2 instance termination error")
            raise ProvisioningError(f"Failed to terminate AWS EC2 instances: {e}") from e

        self.logger.info(f"AWS EC2 instance(s) {', '.join(instance_ids)} terminated")
