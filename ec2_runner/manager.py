"""
Runner Manager Module

Orchestrates the start and stop modes: EC2 instances on one side, GitHub
runner registration on the other.
"""

import logging
import signal
import threading
from typing import Dict, List, Optional

from .deregistration import DeregistrationCoordinator
from .ec2 import EC2Client, build_user_data
from .errors import ProvisioningError, RunnerRemovalError
from .outputs import ActionOutputs
from .registration import RegistrationCoordinator


class RunnerManager:
    """Start or stop the runners of one workflow"""

    def __init__(self, config, github_api, ec2_client: Optional[EC2Client] = None,
                 outputs: Optional[ActionOutputs] = None, clock=None):
        """
        Initialize runner manager

        Args:
            config: RunnerConfig instance
            github_api: GitHubAPI instance
            ec2_client: EC2Client instance (built from config if omitted)
            outputs: ActionOutputs instance
            clock: Time source for the registration wait
        """
        self.config = config
        self.logger = self._setup_logger()
        self.github = github_api
        self.github.logger = self.logger  # Update GitHub API logger
        self.ec2 = ec2_client or EC2Client(region=config.aws_region or None, logger=self.logger)
        self.outputs = outputs or ActionOutputs(logger=self.logger)
        self.clock = clock
        self.cancel_event = threading.Event()

    def _setup_logger(self) -> logging.Logger:
        """
        Setup logging configuration

        Returns:
            Configured logger instance
        """
        logger = logging.getLogger('ec2_runner')
        logger.setLevel(getattr(logging, self.config.log_level, logging.INFO))

        if logger.handlers:
            return logger

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        # File handler
        if self.config.log_file:
            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setLevel(getattr(logging, self.config.log_level, logging.INFO))
            file_formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s - %(message)s')
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        return logger

    def install_signal_handlers(self):
        """Cancel a pending registration wait on SIGINT/SIGTERM"""
        signal.signal(signal.SIGINT, self._handle_shutdown)
        signal.signal(signal.SIGTERM, self._handle_shutdown)

    def _handle_shutdown(self, signum, frame):
        """Handle shutdown signals"""
        self.logger.info(f"Received signal {signum}, initiating shutdown...")
        self.cancel_event.set()

    def start(self) -> Dict[str, str]:
        """
        Launch instances and wait for their runner to come online

        The label and instance ids are published before the wait starts so
        that a later stop step can clean up even if registration fails.

        Returns:
            Published outputs
        """
        label = self.config.generate_unique_label()
        registration = RegistrationCoordinator(
            self.github,
            clock=self.clock,
            cancel_event=self.cancel_event,
            logger=self.logger,
        )

        token = registration.acquire_token()
        user_data = build_user_data(self.config.repository, token, label, self.config.runner_version)

        instance_ids = self.ec2.launch_instances(
            image_id=self.config.ec2_image_id,
            instance_type=self.config.ec2_instance_type,
            subnet_id=self.config.subnet_id,
            security_group_id=self.config.security_group_id,
            key_name=self.config.key_name,
            count=self.config.count,
            tag_specifications=self.config.tag_specifications,
            user_data=user_data,
            iam_role_name=self.config.iam_role_name or None,
            wait=self.config.wait_for_running,
        )

        self.outputs.set_output('label', label)
        self.outputs.set_output('ec2-instance-id', ','.join(instance_ids))

        registration.await_online(
            label,
            quiet_period_ms=self.config.timeout_ms,
            retry_interval_ms=self.config.retry_interval_ms,
            max_wait_ms=self.config.max_timeout_ms,
        )
        return dict(self.outputs.values)

    def stop(self) -> List[str]:
        """
        Remove the runners and terminate their instances

        Every runner removal is attempted and the instances are terminated
        even when some removals fail. The first removal failure is raised
        afterwards, chained to the termination failure if there was one.

        Returns:
            Names of runners that were actually deleted

        Raises:
            RunnerRemovalError: If any runner could not be removed
            ProvisioningError: If termination failed and all removals succeeded
        """
        instance_ids = self.config.ec2_instance_ids
        if self.config.spawned_count != len(instance_ids):
            self.logger.warning(
                f"Spawned count {self.config.spawned_count} does not match "
                f"{len(instance_ids)} instance id(s), removing runners by instance id"
            )

        deregistration = DeregistrationCoordinator(self.github, logger=self.logger)
        removed = []
        failures: List[RunnerRemovalError] = []
        for name in self.config.runner_names(self.config.label, instance_ids):
            try:
                if deregistration.remove(name):
                    removed.append(name)
            except RunnerRemovalError as e:
                self.logger.error(str(e))
                failures.append(e)

        try:
            self.ec2.terminate_instances(instance_ids)
        except ProvisioningError as e:
            if failures:
                raise failures[0] from e
            raise

        if failures:
            raise failures[0]
        return removed
