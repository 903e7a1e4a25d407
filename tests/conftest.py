from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import ec2_runner` works when running `pytest` from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from ec2_runner.github_api import RemoteRunner  # noqa: E402

CONFIG_ENV_VARS = [
    'RUNNER_MODE', 'GITHUB_REPOSITORY', 'GITHUB_API_URL', 'GITHUB_TOKEN', 'GITHUB_API_TIMEOUT',
    'EC2_IMAGE_ID', 'EC2_INSTANCE_TYPE', 'SUBNET_ID', 'SECURITY_GROUP_ID', 'KEY_NAME',
    'IAM_ROLE_NAME', 'AWS_REGION', 'RUNNER_COUNT', 'RUNNER_VERSION', 'TIMEOUT_MS',
    'MAX_TIMEOUT_MS', 'EC2_INSTANCE_ID', 'RUNNER_LABEL', 'SPAWNED_COUNT', 'AWS_RESOURCE_TAGS',
    'LOG_LEVEL', 'LOG_FILE', 'GITHUB_OUTPUT', 'EC2_WAIT_FOR_RUNNING',
]


class FakeClock:
    """Virtual time: sleep() advances now() instantly"""

    def __init__(self, start: float = 0.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds, cancel_event=None) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return False
        self.sleeps.append(seconds)
        self.current += seconds
        return True


class FakeGitHubAPI:
    """In-memory stand-in for GitHubAPI that records every call"""

    def __init__(self, runners=None, clock: FakeClock | None = None) -> None:
        self.runners: list[RemoteRunner] = list(runners or [])
        self.clock = clock
        self.schedule = None
        self.list_error = None
        self.token_error = None
        self.delete_error = None
        self.list_calls: list = []
        self.token_calls = 0
        self.deleted: list[int] = []
        self.delete_attempts: list[int] = []
        self.failing_ids: set[int] = set()
        self.logger = None

    def list_runners(self):
        self.list_calls.append(self.clock.now() if self.clock else None)
        if self.list_error is not None:
            raise self.list_error
        if self.schedule is not None:
            return self.schedule(self.clock.now())
        return list(self.runners)

    def create_registration_token(self) -> str:
        self.token_calls += 1
        if self.token_error is not None:
            raise self.token_error
        return 'AABBCC-registration-token'

    def delete_runner(self, runner_id: int) -> None:
        self.delete_attempts.append(runner_id)
        if self.delete_error is not None and (not self.failing_ids or runner_id in self.failing_ids):
            raise self.delete_error
        self.deleted.append(runner_id)
        self.runners = [r for r in self.runners if r.id != runner_id]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def github(clock: FakeClock) -> FakeGitHubAPI:
    return FakeGitHubAPI(clock=clock)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    # setenv before delenv so that values written by .env loading are undone too
    for name in CONFIG_ENV_VARS:
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def start_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    clean_env.setenv('RUNNER_MODE', 'start')
    clean_env.setenv('GITHUB_TOKEN', 'ghp_test')
    clean_env.setenv('GITHUB_REPOSITORY', 'octo/repo')
    clean_env.setenv('EC2_IMAGE_ID', 'ami-123')
    clean_env.setenv('EC2_INSTANCE_TYPE', 't3.medium')
    clean_env.setenv('SUBNET_ID', 'subnet-1')
    clean_env.setenv('SECURITY_GROUP_ID', 'sg-1')
    clean_env.setenv('KEY_NAME', 'ci-key')
    return clean_env


@pytest.fixture
def stop_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    clean_env.setenv('RUNNER_MODE', 'stop')
    clean_env.setenv('GITHUB_TOKEN', 'ghp_test')
    clean_env.setenv('GITHUB_REPOSITORY', 'octo/repo')
    clean_env.setenv('RUNNER_LABEL', 'AWS-1')
    clean_env.setenv('EC2_INSTANCE_ID', 'i-1,i-2')
    clean_env.setenv('SPAWNED_COUNT', '2')
    return clean_env
