"""Test configuration for pytest."""

from __future__ import annotations

import logging

import pytest

from boxpublish.core.dependencies import EXPORT_COMMAND_ENV_VAR, LOG_LEVEL_ENV_VAR, WORK_DIR_ENV_VAR
from fakes import FakeRunner


@pytest.fixture
def silent_logger() -> logging.Logger:
    """A logger that swallows everything, for tests that only check behavior."""
    log = logging.getLogger("boxpublish.tests.silent")
    log.handlers = [logging.NullHandler()]
    log.propagate = False
    return log


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for var in (WORK_DIR_ENV_VAR, EXPORT_COMMAND_ENV_VAR, LOG_LEVEL_ENV_VAR):
        monkeypatch.delenv(var, raising=False)
