from __future__ import annotations

import pytest

from servicewire.container import ServiceContainer
from servicewire.providers import ProviderArguments


@pytest.fixture()
def service_provider_arguments() -> ProviderArguments:
    """Provide the shared arguments object for ``service_container``.

    Override this fixture in a ``conftest.py`` or test module to hand settings
    to every provider registered on the per-test container.

    Returns:
        ``None`` by default.

    """
    return None


@pytest.fixture()
def service_container(service_provider_arguments: ProviderArguments) -> ServiceContainer:
    """Create a per-test service container.

    The fixture is function-scoped, so registrations and enabled services are
    isolated between tests unless users override fixture scope explicitly.

    Returns:
        A new, empty ``ServiceContainer`` bound to ``service_provider_arguments``.

    """
    return ServiceContainer(provider_arguments=service_provider_arguments)
