from servicewire.integrations.pytest_plugin.plugin import (
    service_container,
    service_provider_arguments,
)

__all__ = ["service_container", "service_provider_arguments"]
