"""
Runner Lookup Module

Finds runners by attribute. GitHub assigns the runner id only after the
instance registers itself, so name or label is the only way to locate it.
"""

import logging
from typing import Callable, Optional

from .errors import APIError
from .github_api import RemoteRunner

RunnerPredicate = Callable[[RemoteRunner], bool]


def by_name(name: str) -> RunnerPredicate:
    """Match a runner by exact name"""
    return lambda runner: runner.name == name


def by_label(label: str) -> RunnerPredicate:
    """Match a runner carrying the given label"""
    return lambda runner: label in runner.labels


class RunnerLookup:
    """Scan the repository's runners for the first match"""

    def __init__(self, github_api, logger: Optional[logging.Logger] = None):
        self.github = github_api
        self.logger = logger or logging.getLogger(__name__)

    def find(self, predicate: RunnerPredicate) -> Optional[RemoteRunner]:
        """
        Return the first runner matching predicate

        A failed list call is reported as not found so that a polling caller
        treats it as "not registered yet" and keeps going.

        Args:
            predicate: Callable applied to each runner in list order

        Returns:
            Matching runner, or None
        """
        try:
            runners = self.github.list_runners()
        except APIError as e:
            self.logger.debug(f"Listing runners failed, treating as not found: {e}")
            return None

        for runner in runners:
            if predicate(runner):
                return runner
        return None

    def find_by_name(self, name: str) -> Optional[RemoteRunner]:
        return self.find(by_name(name))

    def find_by_label(self, label: str) -> Optional[RemoteRunner]:
        return self.find(by_label(label))
