from __future__ import annotations

import pytest

from ec2_runner.deregistration import DeregistrationCoordinator
from ec2_runner.errors import FatalAPIError, RunnerRemovalError, TransientAPIError
from ec2_runner.github_api import RemoteRunner
from ec2_runner.lookup import RunnerLookup, by_label, by_name

RUNNERS = [
    RemoteRunner(id=1, name='runner-a', status='offline', labels={'self-hosted', 'AWS-1'}),
    RemoteRunner(id=2, name='runner-b', status='online', labels={'self-hosted', 'AWS-2'}),
    RemoteRunner(id=3, name='runner-c', status='online', labels={'self-hosted', 'AWS-2'}),
]


def test_find_returns_first_match_in_fetch_order(github) -> None:
    github.runners = RUNNERS
    lookup = RunnerLookup(github)

    assert lookup.find(by_label('AWS-2')).id == 2
    assert lookup.find(by_label('self-hosted')).id == 1
    assert lookup.find_by_name('runner-c').id == 3


def test_find_returns_none_without_match(github) -> None:
    github.runners = RUNNERS
    lookup = RunnerLookup(github)

    assert lookup.find(by_name('runner-x')) is None
    assert lookup.find_by_label('AWS-9') is None


@pytest.mark.parametrize('error', [
    TransientAPIError('connection reset'),
    FatalAPIError('Bad credentials', status_code=401),
])
def test_find_returns_none_when_listing_fails(github, error) -> None:
    github.runners = RUNNERS
    github.list_error = error

    assert RunnerLookup(github).find(by_name('runner-a')) is None


def test_remove_missing_runner_is_skipped(github, caplog) -> None:
    caplog.set_level('INFO')
    coordinator = DeregistrationCoordinator(github)

    assert coordinator.remove('runner-x') is False
    assert github.deleted == []
    assert 'removal is skipped' in caplog.text


def test_remove_is_idempotent(github) -> None:
    github.runners = list(RUNNERS)
    coordinator = DeregistrationCoordinator(github)

    assert coordinator.remove('runner-b') is True
    assert coordinator.remove('runner-b') is False
    assert github.deleted == [2]


def test_remove_wraps_delete_failure(github) -> None:
    github.runners = list(RUNNERS)
    github.delete_error = FatalAPIError('Forbidden', status_code=403)
    coordinator = DeregistrationCoordinator(github)

    with pytest.raises(RunnerRemovalError) as e:
        coordinator.remove('runner-a')
    assert e.value.name == 'runner-a'
    assert isinstance(e.value.__cause__, FatalAPIError)
