"""
Errors Module

Exception hierarchy for runner provisioning and teardown.
"""

from typing import Optional


class RunnerProvisionerError(Exception):
    """Base class for all errors raised by this package"""


class ConfigurationError(RunnerProvisionerError):
    """Missing or invalid input for the selected mode"""


class APIError(RunnerProvisionerError):
    """GitHub API call failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FatalAPIError(APIError):
    """Authentication, authorization or malformed request. Never retried."""


class TransientAPIError(APIError):
    """Network failure, timeout or server-side error"""


class RegistrationTimeoutError(RunnerProvisionerError):
    """Runner did not come online within the maximum wait"""

    def __init__(self, timeout_ms: int):
        super().__init__(
            f"A timeout of {timeout_ms}ms is exceeded. Your AWS EC2 instance was not able "
            f"to register itself in GitHub as a new self-hosted runner."
        )
        self.timeout_ms = timeout_ms


class RunnerRemovalError(RunnerProvisionerError):
    """Deleting a runner that was confirmed to exist failed"""

    def __init__(self, name: str, reason: str = ''):
        message = f"Failed to remove GitHub self-hosted runner {name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.name = name


class ProvisioningError(RunnerProvisionerError):
    """EC2 instance launch or termination failed"""


class OperationCancelledError(RunnerProvisionerError):
    """The caller cancelled a pending wait"""
