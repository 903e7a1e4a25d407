"""
Registration Module

Obtains the registration token handed to a new instance and waits for the
instance to show up in GitHub as an online self-hosted runner.
"""

import enum
import logging
import threading
from typing import Optional

from .clock import SystemClock
from .errors import OperationCancelledError, RegistrationTimeoutError
from .github_api import RemoteRunner
from .lookup import RunnerLookup


class RegistrationState(enum.Enum):
    IDLE = 'idle'
    TOKEN_ISSUED = 'token_issued'
    WAITING = 'waiting'
    POLLING = 'polling'
    REGISTERED = 'registered'
    TIMED_OUT = 'timed_out'
    CANCELLED = 'cancelled'


TERMINAL_STATES = (
    RegistrationState.REGISTERED,
    RegistrationState.TIMED_OUT,
    RegistrationState.CANCELLED,
)


class RegistrationCoordinator:
    """Drive one provisioning attempt from token request to online runner"""

    def __init__(self, github_api, lookup: Optional[RunnerLookup] = None, clock=None,
                 cancel_event: Optional[threading.Event] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize registration coordinator

        Args:
            github_api: GitHubAPI instance
            lookup: RunnerLookup instance (built from github_api if omitted)
            clock: Time source with now() and sleep() (SystemClock if omitted)
            cancel_event: Event that aborts a pending wait when set
            logger: Logger instance
        """
        self.github = github_api
        self.logger = logger or logging.getLogger(__name__)
        self.lookup = lookup or RunnerLookup(github_api, self.logger)
        self.clock = clock or SystemClock()
        self.cancel_event = cancel_event
        self.state = RegistrationState.IDLE

    def acquire_token(self) -> str:
        """
        Request a one-time registration token

        Returns:
            Registration token string

        Raises:
            FatalAPIError: If GitHub did not issue a token
        """
        token = self.github.create_registration_token()
        self.state = RegistrationState.TOKEN_ISSUED
        return token

    def _sleep(self, milliseconds: int):
        if not self.clock.sleep(milliseconds / 1000.0, self.cancel_event):
            self.state = RegistrationState.CANCELLED
            self.logger.warning("Waiting for the GitHub self-hosted runner was cancelled")
            raise OperationCancelledError("Waiting for runner registration was cancelled")

    def await_online(self, label: str, quiet_period_ms: int, retry_interval_ms: int,
                     max_wait_ms: int) -> RemoteRunner:
        """
        Wait until a runner carrying label is online

        The quiet period is always waited out in full before the first
        lookup. After that GitHub is polled every retry_interval_ms. The
        timeout is checked at the start of each tick against the time elapsed
        since polling began, and a tick that times out does not poll.

        Args:
            label: Unique label attached to the launched instance
            quiet_period_ms: Wait before the first lookup
            retry_interval_ms: Wait between lookups
            max_wait_ms: Polling budget after the quiet period

        Returns:
            The online runner

        Raises:
            RegistrationTimeoutError: If no online runner was seen in time
            OperationCancelledError: If cancel_event was set during a wait
        """
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Registration wait already finished ({self.state.value})")

        self.state = RegistrationState.WAITING
        self.logger.info(
            f"Waiting {quiet_period_ms}ms for the AWS EC2 instance to be registered in GitHub "
            f"as a new self-hosted runner"
        )
        self._sleep(quiet_period_ms)

        self.state = RegistrationState.POLLING
        self.logger.info(f"Checking every {retry_interval_ms}ms if the GitHub self-hosted runner is registered")
        polling_started = self.clock.now()
        max_wait = max_wait_ms / 1000.0

        while True:
            self._sleep(retry_interval_ms)

            if self.clock.now() - polling_started > max_wait:
                self.state = RegistrationState.TIMED_OUT
                self.logger.error("GitHub self-hosted runner registration error")
                raise RegistrationTimeoutError(max_wait_ms)

            runner = self.lookup.find_by_label(label)
            if runner is not None and runner.is_online:
                self.state = RegistrationState.REGISTERED
                self.logger.info(f"GitHub self-hosted runner {runner.name} is registered and ready to use")
                return runner

            self.logger.info("Checking...")
