"""Shared pytest fixtures for servicewire tests."""

import pytest

from servicewire.container import ServiceContainer
from servicewire.lock_mode import LockMode

pytest_plugins = ["servicewire.integrations.pytest_plugin"]


@pytest.fixture()
def container(service_container: ServiceContainer) -> ServiceContainer:
    """Empty container without locking."""
    return service_container


@pytest.fixture()
def thread_container() -> ServiceContainer:
    """Empty container guarding registration and first resolution with a lock."""
    return ServiceContainer(lock_mode=LockMode.THREAD)
