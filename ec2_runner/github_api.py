"""
GitHub API Module

Handles communication with GitHub API for runner management.
"""

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .errors import APIError, FatalAPIError, TransientAPIError


@dataclass
class RemoteRunner:
    """Self-hosted runner as reported by GitHub"""

    id: int
    name: str
    status: str
    labels: Set[str] = field(default_factory=set)
    busy: bool = False

    @classmethod
    def from_api(cls, data: Dict) -> 'RemoteRunner':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            status=data.get('status', 'offline'),
            labels={label.get('name') for label in data.get('labels', [])},
            busy=data.get('busy', False),
        )

    @property
    def is_online(self) -> bool:
        return self.status == 'online'


class GitHubAPI:
    """GitHub API client for runner management"""

    PAGE_SIZE = 100

    def __init__(self, config, logger: Optional[logging.Logger] = None):
        """
        Initialize GitHub API client

        Args:
            config: RunnerConfig instance
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def _make_request(self, endpoint: str, method: str = 'GET', data: Optional[Dict] = None) -> Dict:
        """
        Make an authenticated request to GitHub API

        Args:
            endpoint: API endpoint (e.g., 'actions/runners/registration-token')
            method: HTTP method (GET, POST, etc.)
            data: Optional request data

        Returns:
            Response data as dictionary, empty for bodiless responses

        Raises:
            FatalAPIError: On client errors (bad credentials, forbidden, not found)
            TransientAPIError: On network errors, timeouts and server errors
        """
        url = f"{self.config.api_url}/repos/{self.config.repository}/{endpoint}"

        headers = {
            'Authorization': f'Bearer {self.config.token}',
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'ec2-runner-provisioner'
        }

        body = None
        if data:
            body = json.dumps(data).encode('utf-8')
            headers['Content-Type'] = 'application/json'

        req = urllib.request.Request(url, data=body, headers=headers, method=method)

        try:
            with urllib.request.urlopen(req, timeout=self.config.api_timeout) as response:
                payload = response.read().decode('utf-8')
                return json.loads(payload) if payload else {}
        except urllib.error.HTTPError as e:
            error_msg = e.read().decode('utf-8') if e.fp else str(e)
            self.logger.debug(f"GitHub API error: {e.code} - {error_msg}")
            message = f"{method} {endpoint} failed with HTTP {e.code}: {error_msg}"
            if e.code >= 500 or e.code == 429:
                raise TransientAPIError(message, status_code=e.code) from e
            raise FatalAPIError(message, status_code=e.code) from e
        except OSError as e:  # URLError, timeouts, connection resets
            self.logger.debug(f"Request failed: {e}")
            raise TransientAPIError(f"{method} {endpoint} failed: {e}") from e
        except ValueError as e:
            raise TransientAPIError(f"{method} {endpoint} returned invalid JSON: {e}") from e

    def create_registration_token(self) -> str:
        """
        Get a short-lived registration token from GitHub

        Returns:
            Registration token string

        Raises:
            FatalAPIError: If the token could not be obtained
        """
        try:
            response = self._make_request('actions/runners/registration-token', method='POST')
        except APIError as e:
            self.logger.error("GitHub Registration Token receiving error")
            if isinstance(e, FatalAPIError):
                raise
            raise FatalAPIError(str(e), status_code=e.status_code) from e

        token = response.get('token')
        if not token:
            self.logger.error("GitHub Registration Token receiving error")
            raise FatalAPIError("GitHub returned no registration token")

        self.logger.info("GitHub Registration Token is received")
        self.logger.debug(f"Registration token expires at {response.get('expires_at')}")
        return token

    def list_runners(self) -> List[RemoteRunner]:
        """
        List all runners for the repository, following pagination

        Returns:
            List of runners in the order GitHub returns them

        Raises:
            TransientAPIError: Also when a page cannot be parsed
        """
        runners: List[RemoteRunner] = []
        page = 1
        while True:
            endpoint = f'actions/runners?per_page={self.PAGE_SIZE}&page={page}'
            response = self._make_request(endpoint)
            try:
                batch = response.get('runners', [])
                runners.extend(RemoteRunner.from_api(item) for item in batch)
                total_count = response.get('total_count')
            except (AttributeError, KeyError, TypeError) as e:
                raise TransientAPIError(f"GET {endpoint} returned an unexpected payload: {e!r}") from e

            if len(batch) < self.PAGE_SIZE:
                break
            if total_count is not None and len(runners) >= total_count:
                break
            page += 1
        return runners

    def delete_runner(self, runner_id: int) -> None:
        """
        Delete a runner by its GitHub id

        Args:
            runner_id: Id of a runner returned by list_runners

        Raises:
            FatalAPIError: If GitHub refused or failed the deletion
        """
        try:
            self._make_request(f'actions/runners/{runner_id}', method='DELETE')
        except APIError as e:
            if isinstance(e, FatalAPIError):
                raise
            raise FatalAPIError(str(e), status_code=e.status_code) from e
