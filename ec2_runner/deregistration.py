"""
Deregistration Module

Removes a self-hosted runner from GitHub by name.
"""

import logging
from typing import Optional

from .errors import APIError, RunnerRemovalError
from .lookup import RunnerLookup


class DeregistrationCoordinator:
    """Idempotent runner removal"""

    def __init__(self, github_api, lookup: Optional[RunnerLookup] = None,
                 logger: Optional[logging.Logger] = None):
        self.github = github_api
        self.logger = logger or logging.getLogger(__name__)
        self.lookup = lookup or RunnerLookup(github_api, self.logger)

    def remove(self, name: str) -> bool:
        """
        Remove the runner with the given name

        A runner that cannot be found is treated as already removed, so
        teardown can be re-run after a crash.

        Args:
            name: Runner name

        Returns:
            True if a runner was deleted, False if the removal was skipped

        Raises:
            RunnerRemovalError: If deleting an existing runner failed
        """
        runner = self.lookup.find_by_name(name)

        if runner is None:
            self.logger.info(f"GitHub self-hosted runner with name {name} is not found, so the removal is skipped")
            return False

        try:
            self.github.delete_runner(runner.id)
        except APIError as e:
            self.logger.error("GitHub self-hosted runner removal error")
            raise RunnerRemovalError(name, str(e)) from e

        self.logger.info(f"GitHub self-hosted runner {runner.name} is removed")
        return True
