"""Pytest configuration and fixtures."""

# pylint: disable=redefined-outer-name

import pytest
from fakes import ANSWER_OUTPUT, FakeExecutor, fake_which

from dig_runner.core.config import Settings
from dig_runner.core.process import SupervisedTimeout
from dig_runner.core.runner import QueryRunner


@pytest.fixture
def test_settings():
    """Create test settings without reading from env."""
    return Settings(
        dig_binary="dig",
        default_server="8.8.8.8",
        default_timeout=10,
        sentry_dsn=None,
        _env_file=None,
    )


@pytest.fixture
def fake_executor():
    """Create a fake executor returning a two-record answer."""
    return FakeExecutor(stdout=ANSWER_OUTPUT)


@pytest.fixture
def runner(test_settings, fake_executor):
    """Create a runner wired to the fake executor."""
    return QueryRunner(
        settings=test_settings,
        strategy=SupervisedTimeout(),
        executor=fake_executor,
        which=fake_which,
    )
