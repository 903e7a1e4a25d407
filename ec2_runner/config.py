"""
Runner Configuration Module

Handles configuration loading from environment variables and .env files.
"""

import os
import random
import string
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .errors import ConfigurationError

RETRY_INTERVAL_MS = 10 * 1000


class RunnerConfig:
    """Configuration manager for provisioning settings"""

    def __init__(self, env_file: Path = Path('.env')):
        """Initialize configuration from environment and .env file"""
        self.load_env_file(env_file)

        # GitHub configuration
        self.mode = os.getenv('RUNNER_MODE', '')
        self.repository = os.getenv('GITHUB_REPOSITORY', '')
        self.api_url = os.getenv('GITHUB_API_URL', 'https://api.github.com')
        self.token = os.getenv('GITHUB_TOKEN', '')
        self.api_timeout = self._int_env('GITHUB_API_TIMEOUT', '30')

        # Start mode
        self.ec2_image_id = os.getenv('EC2_IMAGE_ID', '')
        self.ec2_instance_type = os.getenv('EC2_INSTANCE_TYPE', '')
        self.subnet_id = os.getenv('SUBNET_ID', '')
        self.security_group_id = os.getenv('SECURITY_GROUP_ID', '')
        self.key_name = os.getenv('KEY_NAME', '')
        self.iam_role_name = os.getenv('IAM_ROLE_NAME', '')
        self.aws_region = os.getenv('AWS_REGION', '')
        self.count = self._int_env('RUNNER_COUNT', '1')
        self.runner_version = os.getenv('RUNNER_VERSION', '2.319.0')
        self.wait_for_running = os.getenv('EC2_WAIT_FOR_RUNNING', 'true').lower() == 'true'

        # Registration timing
        self.timeout_ms = self._int_env('TIMEOUT_MS', '30000')
        self.max_timeout_ms = self._int_env('MAX_TIMEOUT_MS', '300000')
        self.retry_interval_ms = RETRY_INTERVAL_MS

        # Stop mode
        instance_ids = os.getenv('EC2_INSTANCE_ID', '')
        self.ec2_instance_ids = [i.strip() for i in instance_ids.split(',') if i.strip()]
        self.label = os.getenv('RUNNER_LABEL', '')
        self.spawned_count = self._int_env('SPAWNED_COUNT', '0')

        # Tags applied to instances and volumes
        self.resource_tags = self._parse_resource_tags(os.getenv('AWS_RESOURCE_TAGS', '[]'))

        # Logging
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        log_file = os.getenv('LOG_FILE', '')
        self.log_file = Path(log_file) if log_file else None

    def load_env_file(self, env_file: Path):
        """Load environment variables from .env file if it exists"""
        if env_file.exists():
            with open(env_file) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        key = key.strip()
                        value = value.strip()
                        # Real environment variables take precedence
                        if key and value and key not in os.environ:
                            os.environ[key] = value

    @staticmethod
    def _int_env(name: str, default: str) -> int:
        raw = os.getenv(name, '') or default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"Invalid {name}: {raw!r} (must be an integer)")

    @staticmethod
    def _parse_resource_tags(raw: str) -> List[Dict[str, str]]:
        """
        Parse resource tags given as a JSON or YAML list

        Args:
            raw: e.g. '[{"Key": "Team", "Value": "ci"}]'

        Returns:
            List of {'Key': ..., 'Value': ...} dictionaries
        """
        try:
            tags = yaml.safe_load(raw) if raw.strip() else []
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid AWS_RESOURCE_TAGS: {e}")

        if tags is None:
            return []
        if not isinstance(tags, list):
            raise ConfigurationError("Invalid AWS_RESOURCE_TAGS: expected a list of {Key, Value} objects")
        for tag in tags:
            if not isinstance(tag, dict) or 'Key' not in tag or 'Value' not in tag:
                raise ConfigurationError(f"Invalid AWS_RESOURCE_TAGS entry: {tag!r}")
        return [{'Key': str(tag['Key']), 'Value': str(tag['Value'])} for tag in tags]

    @property
    def tag_specifications(self) -> Optional[List[Dict]]:
        """EC2 TagSpecifications for instances and volumes, None without tags"""
        if not self.resource_tags:
            return None
        return [
            {'ResourceType': 'instance', 'Tags': self.resource_tags},
            {'ResourceType': 'volume', 'Tags': self.resource_tags},
        ]

    def generate_unique_label(self) -> str:
        """Random label joining a launched instance to its runner"""
        return 'AWS-' + ''.join(random.choices(string.digits, k=16))

    def runner_names(self, label: str, instance_ids: List[str]) -> List[str]:
        """Names the instances of one provisioning attempt register under"""
        return [f"{label}-{instance_id}" for instance_id in instance_ids]

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if not self.mode:
            errors.append("The 'mode' input is not specified")

        if not self.token:
            errors.append("The 'github-token' input is not specified")

        if not self.repository:
            errors.append("GITHUB_REPOSITORY is required")

        if self.count <= 0:
            errors.append("The 'count' can't be 0 or negative!")

        if self.mode == 'start':
            required = (self.ec2_image_id, self.ec2_instance_type, self.subnet_id,
                        self.security_group_id, self.key_name)
            if not all(required):
                errors.append("Not all the required inputs are provided for the 'start' mode")
            if self.timeout_ms < 0 or self.max_timeout_ms < 0:
                errors.append("TIMEOUT_MS and MAX_TIMEOUT_MS can't be negative")
        elif self.mode == 'stop':
            if not self.label or not self.ec2_instance_ids or self.spawned_count <= 0:
                errors.append("Not all the required inputs are provided for the 'stop' mode")
        elif self.mode:
            errors.append("Wrong mode. Allowed values: start, stop.")

        return errors
