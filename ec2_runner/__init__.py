"""
EC2 Runner Package

On-demand EC2 instances as GitHub Actions self-hosted runners.
"""

__version__ = '1.0.0'

from .clock import SystemClock
from .config import RunnerConfig
from .deregistration import DeregistrationCoordinator
from .ec2 import EC2Client, build_user_data
from .errors import (
    APIError,
    ConfigurationError,
    FatalAPIError,
    OperationCancelledError,
    ProvisioningError,
    RegistrationTimeoutError,
    RunnerProvisionerError,
    RunnerRemovalError,
    TransientAPIError,
)
from .github_api import GitHubAPI, RemoteRunner
from .lookup import RunnerLookup, by_label, by_name
from .manager import RunnerManager
from .registration import RegistrationCoordinator, RegistrationState

__all__ = [
    'SystemClock',
    'RunnerConfig',
    'DeregistrationCoordinator',
    'EC2Client',
    'build_user_data',
    'APIError',
    'ConfigurationError',
    'FatalAPIError',
    'OperationCancelledError',
    'ProvisioningError',
    'RegistrationTimeoutError',
    'RunnerProvisionerError',
    'RunnerRemovalError',
    'TransientAPIError',
    'GitHubAPI',
    'RemoteRunner',
    'RunnerLookup',
    'by_label',
    'by_name',
    'RunnerManager',
    'RegistrationCoordinator',
    'RegistrationState',
]
