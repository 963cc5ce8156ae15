from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeAlias, TypeVar

if TYPE_CHECKING:
    from servicewire.container import ServiceContainer

T = TypeVar("T")

ProviderArguments: TypeAlias = Any
"""Opaque configuration object shared by every provider of a container.

Typically a ``pydantic_settings.BaseSettings`` instance, or ``None``.
"""


class ServiceProvider(ABC, Generic[T]):
    """Declare how one service is identified, typed, and produced.

    A provider is instantiated once, when it is added to a container, with the
    container itself and the container's shared provider arguments. The
    container calls ``get_service`` at most once per id and caches the result,
    so production logic may be as expensive as needed.

    ``get_service_id`` and ``get_service_type`` must return the same values on
    every call. The instance returned by ``get_service`` must be exactly of
    the declared service type; subclasses are rejected by the container.

    Examples:
        .. code-block:: python

            class LoggerProvider(ServiceProvider[Logger]):
                def get_service_id(self) -> str:
                    return "logger"

                def get_service_type(self) -> type[Logger]:
                    return Logger

                def get_service(self) -> Logger:
                    return Logger(level=self.provider_arguments.log_level)


            container = ServiceContainer([LoggerProvider], provider_arguments=settings)

    """

    def __init__(
        self,
        service_container: ServiceContainer,
        provider_arguments: ProviderArguments = None,
    ) -> None:
        """Bind the provider to its owning container.

        Args:
            service_container: Container that owns this provider. Use it to
                resolve the service's own dependencies inside ``get_service``.
            provider_arguments: Shared configuration object of the container.

        """
        self._service_container = service_container
        self._provider_arguments = provider_arguments

    @property
    def service_container(self) -> ServiceContainer:
        """Container that owns this provider."""
        return self._service_container

    @property
    def provider_arguments(self) -> ProviderArguments:
        """Shared configuration object the container was created with."""
        return self._provider_arguments

    @abstractmethod
    def get_service(self) -> T:
        """Produce the service instance."""

    @abstractmethod
    def get_service_id(self) -> str:
        """Return the default id the service is registered under."""

    @abstractmethod
    def get_service_type(self) -> type[T] | str:
        """Return the exact runtime type of the produced service.

        A dotted import path naming the class is accepted as well; the
        container resolves it once at registration.
        """

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(service_id={self.get_service_id()!r})"


__all__ = ["ProviderArguments", "ServiceProvider"]
