from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager, nullcontext
from typing import TYPE_CHECKING, Any, TypeVar, overload

from servicewire._internal.signatures import ConstructorSignatureExtractor
from servicewire._internal.type_tokens import (
    TypeToken,
    UnresolvedTypeTokenError,
    resolve_type_token,
    type_name,
)
from servicewire.builder import (
    ConstructionPlan,
    ConstructorBacked,
    ControllerBuilder,
    FactoryBacked,
)
from servicewire.exceptions import (
    AliasNotFoundError,
    InvalidBuildPlanError,
    ProviderNotFoundError,
    ServiceTypeMismatchError,
    UnknownAliasTypeError,
    UnknownProviderTypeError,
    UnknownTargetTypeError,
)
from servicewire.lock_mode import LockMode
from servicewire.providers import ProviderArguments, ServiceProvider

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Register service providers and resolve their services lazily.

    Every provider is registered under a string id and usually under a type
    alias as well. The first ``get`` for an id asks its provider for the
    service, checks that the service is exactly of the provider's declared
    type, and caches it; later calls return the cached instance without
    touching the provider again.

    ``build`` constructs arbitrary classes by autowiring their constructor
    parameters from explicit arguments first and aliased services second.

    The container is an explicit value: pass it to the code that needs it.
    It is not safe for concurrent writers unless created with
    ``lock_mode=LockMode.THREAD``.
    """

    def __init__(
        self,
        providers: Iterable[TypeToken] = (),
        aliases: Mapping[TypeToken, str] | None = None,
        provider_arguments: ProviderArguments = None,
        *,
        lock_mode: LockMode = LockMode.NONE,
    ) -> None:
        """Initialize a container and register the given providers.

        Providers are added in order, then each alias of ``aliases`` is bound,
        so explicit aliases override the default aliases declared by providers.

        Args:
            providers: Provider classes, or dotted import paths naming them.
            aliases: Extra alias-to-id bindings validated like ``add`` aliases.
            provider_arguments: Opaque configuration object handed to every
                provider constructor.
            lock_mode: ``LockMode.THREAD`` to serialize registration and first
                resolution across threads.

        Raises:
            UnknownProviderTypeError: If a provider token cannot be instantiated.
            UnknownAliasTypeError: If an alias does not resolve to a class.

        Examples:
            .. code-block:: python

                container = ServiceContainer(
                    providers=[LoggerProvider, "app.providers.DatabaseProvider"],
                    aliases={LoggerProtocol: "logger"},
                    provider_arguments=AppSettings(),
                )

        """
        self._provider_arguments = provider_arguments
        self._lock_mode = lock_mode
        self._lock = threading.RLock()

        self._providers: dict[str, ServiceProvider[Any]] = {}
        self._service_types: dict[str, type[Any]] = {}
        self._aliases: dict[type[Any], str] = {}
        self._enabled_services: dict[str, Any] = {}
        self._build_plans: dict[type[Any], ConstructionPlan] = {}
        self._signature_extractor = ConstructorSignatureExtractor()

        for provider in providers:
            self.add(provider)
        for alias, service_id in (aliases or {}).items():
            with self._locked():
                self._aliases[self._resolve_alias(alias)] = service_id

    @property
    def provider_arguments(self) -> ProviderArguments:
        """Shared configuration object handed to every provider."""
        return self._provider_arguments

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    # region Registration Methods
    def add(
        self,
        provider: type[ServiceProvider[Any]] | str,
        alias: TypeToken | None = None,
        service_id: str | None = None,
    ) -> Self:
        """Instantiate a provider and register it.

        Registering a provider for an existing id replaces the previous
        provider. Registration is validated before anything is stored, so a
        failing call leaves the container unchanged.

        Args:
            provider: ``ServiceProvider`` subclass, or a dotted import path
                naming one. It is instantiated with
                ``(container, provider_arguments)``.
            alias: Type token to bind to the service id. Defaults to the
                provider's ``get_service_type()``.
            service_id: Id to register under. Defaults to the provider's
                ``get_service_id()``.

        Returns:
            The container itself, to chain registrations.

        Raises:
            UnknownProviderTypeError: If ``provider`` cannot be resolved or
                instantiated, or its declared service type is not a class.
            UnknownAliasTypeError: If ``alias`` does not resolve to a class.

        Examples:
            .. code-block:: python

                container.add(LoggerProvider).add(CacheProvider, alias=CacheProtocol)

        """
        provider_type = self._resolve_provider_type(provider)
        provider_instance = provider_type(self, self._provider_arguments)

        resolved_id = service_id if service_id is not None else provider_instance.get_service_id()
        service_type = self._resolve_service_type(provider, provider_instance)
        resolved_alias = service_type if alias is None else self._resolve_alias(alias)

        with self._locked():
            self._providers[resolved_id] = provider_instance
            self._service_types[resolved_id] = service_type
            self._aliases[resolved_alias] = resolved_id

        logger.debug(
            "Registered provider %s as '%s' with alias %s",
            type_name(provider_type),
            resolved_id,
            type_name(resolved_alias),
        )
        return self

    @overload
    def add_build_plan(
        self,
        target: TypeToken,
        *,
        factory: Callable[[ServiceContainer], Any],
    ) -> Self: ...

    @overload
    def add_build_plan(
        self,
        target: TypeToken,
        *,
        dependencies: Sequence[TypeToken],
    ) -> Self: ...

    def add_build_plan(
        self,
        target: TypeToken,
        *,
        factory: Callable[[ServiceContainer], Any] | None = None,
        dependencies: Sequence[TypeToken] | None = None,
    ) -> Self:
        """Declare how ``build`` constructs ``target``.

        Use ``factory`` to take over construction entirely, or
        ``dependencies`` to state the constructor parameter types explicitly
        instead of reading them from annotations. The declaration is checked
        against the constructor signature immediately.

        Args:
            target: Class, or a dotted import path naming it.
            factory: Callable receiving the container and returning the instance.
            dependencies: Ordered dependency types mapped onto the leading
                constructor parameters. Trailing parameters must have defaults.

        Returns:
            The container itself, to chain registrations.

        Raises:
            UnknownTargetTypeError: If ``target`` does not resolve to a class.
            InvalidBuildPlanError: If not exactly one of ``factory`` and
                ``dependencies`` is given, or dependencies do not fit the
                constructor.

        Examples:
            .. code-block:: python

                container.add_build_plan(Controller, dependencies=[Logger, "app.db.Database"])
                container.add_build_plan(Clock, factory=lambda _container: Clock.utc())

        """
        try:
            resolved_target = resolve_type_token(target)
        except UnresolvedTypeTokenError as error:
            raise UnknownTargetTypeError(target) from error

        if (factory is None) == (dependencies is None):
            raise InvalidBuildPlanError(
                resolved_target,
                "pass exactly one of 'factory' or 'dependencies'",
            )

        plan: ConstructionPlan
        if factory is not None:
            if not callable(factory):
                raise InvalidBuildPlanError(resolved_target, "factory is not callable")
            plan = FactoryBacked(factory=factory)
        else:
            plan = self._build_constructor_plan(resolved_target, dependencies or ())

        with self._locked():
            self._build_plans[resolved_target] = plan

        logger.debug(
            "Declared %s build plan for %s",
            type(plan).__name__,
            type_name(resolved_target),
        )
        return self

    def _build_constructor_plan(
        self,
        target: type[Any],
        dependencies: Sequence[TypeToken],
    ) -> ConstructorBacked:
        resolved_dependencies: list[Any] = []
        for dependency in dependencies:
            if not isinstance(dependency, str):
                resolved_dependencies.append(dependency)
                continue
            try:
                resolved_dependencies.append(resolve_type_token(dependency))
            except UnresolvedTypeTokenError as error:
                raise InvalidBuildPlanError(
                    target,
                    f"dependency '{dependency}' does not exist",
                ) from error

        try:
            parameters = self._signature_extractor.bind_declared(target, resolved_dependencies)
        except ValueError as error:
            raise InvalidBuildPlanError(target, str(error)) from error
        return ConstructorBacked(parameters=parameters)

    def _resolve_provider_type(
        self,
        provider: type[ServiceProvider[Any]] | str,
    ) -> type[ServiceProvider[Any]]:
        try:
            provider_type = resolve_type_token(provider)
        except UnresolvedTypeTokenError as error:
            raise UnknownProviderTypeError(provider, "does not exist") from error

        if not issubclass(provider_type, ServiceProvider):
            raise UnknownProviderTypeError(provider, "is not a ServiceProvider subclass")
        if inspect.isabstract(provider_type):
            raise UnknownProviderTypeError(provider, "is abstract")

        try:
            inspect.signature(provider_type).bind(self, self._provider_arguments)
        except TypeError as error:
            raise UnknownProviderTypeError(
                provider,
                "does not accept (container, provider_arguments)",
            ) from error
        except ValueError:
            # Signature not introspectable; instantiation reports real mismatches.
            pass
        return provider_type

    def _resolve_service_type(
        self,
        provider: type[ServiceProvider[Any]] | str,
        provider_instance: ServiceProvider[Any],
    ) -> type[Any]:
        try:
            return resolve_type_token(provider_instance.get_service_type())
        except UnresolvedTypeTokenError as error:
            raise UnknownProviderTypeError(
                provider,
                "declares a service type that is not a class",
            ) from error

    def _resolve_alias(self, alias: object) -> type[Any]:
        try:
            return resolve_type_token(alias)
        except UnresolvedTypeTokenError as error:
            raise UnknownAliasTypeError(alias) from error

    # endregion Registration Methods

    # region Resolution
    def get(self, service_id: str) -> Any:
        """Return the service registered under ``service_id``.

        The first call builds the service through its provider and caches it;
        later calls return the same instance.

        Args:
            service_id: Id the provider was registered under.

        Raises:
            ProviderNotFoundError: If no provider is registered under the id.
            ServiceTypeMismatchError: If the provider produced an instance
                whose type is not exactly its declared service type. Nothing
                is cached in that case.

        Examples:
            .. code-block:: python

                logger = container.get("logger")
                assert container.get("logger") is logger

        """
        if service_id in self._enabled_services:
            return self._enabled_services[service_id]

        with self._locked():
            if service_id in self._enabled_services:
                return self._enabled_services[service_id]
            return self._enable_service(service_id)

    def _enable_service(self, service_id: str) -> Any:
        provider = self.get_provider(service_id)
        service_type = self._service_types[service_id]
        service = provider.get_service()

        if type(service) is not service_type:
            raise ServiceTypeMismatchError(service_id, service_type, type(service))

        self._enabled_services[service_id] = service
        logger.debug("Enabled service '%s' (%s)", service_id, type_name(service_type))
        return service

    @overload
    def get_by_alias(self, alias: type[T]) -> T: ...

    @overload
    def get_by_alias(self, alias: Any) -> Any: ...

    def get_by_alias(self, alias: Any) -> Any:
        """Return the service whose id is bound to ``alias``.

        Args:
            alias: Class, or a dotted import path naming it.

        Raises:
            AliasNotFoundError: If the alias is not bound to any id.
            ProviderNotFoundError: If the bound id has no provider.
            ServiceTypeMismatchError: As for ``get``.

        """
        service_id = self._find_alias_id(alias)
        if service_id is None:
            raise AliasNotFoundError(alias)
        return self.get(service_id)

    def has_alias(self, alias: Any) -> bool:
        """Return whether ``alias`` is bound to a service id."""
        return self._find_alias_id(alias) is not None

    def _find_alias_id(self, alias: Any) -> str | None:
        try:
            service_id = self._aliases.get(alias)
            if service_id is not None:
                return service_id
            return self._aliases.get(resolve_type_token(alias))
        except (UnresolvedTypeTokenError, TypeError):
            # Unhashable or non-class annotations are never aliases.
            return None

    def get_provider(self, service_id: str) -> ServiceProvider[Any]:
        """Return the provider registered under ``service_id``.

        Raises:
            ProviderNotFoundError: If no provider is registered under the id.

        """
        try:
            return self._providers[service_id]
        except KeyError:
            raise ProviderNotFoundError(service_id) from None

    def has(self, service_id: str) -> bool:
        """Return whether ``service_id`` has a provider or an enabled service."""
        return service_id in self._providers or service_id in self._enabled_services

    def __contains__(self, service_id: object) -> bool:
        return isinstance(service_id, str) and self.has(service_id)

    def find_build_plan(self, target: type[Any]) -> ConstructionPlan | None:
        """Return the build plan declared for ``target``, if any."""
        return self._build_plans.get(target)

    def build(self, target: TypeToken, *args: Any) -> Any:
        """Construct ``target`` by autowiring its constructor.

        Each constructor parameter takes the first of ``args`` matching its
        type, falling back to the service aliased to that type. Nothing is
        cached: every call constructs a new instance.

        Args:
            target: Class to construct, or a dotted import path naming it.
            *args: Explicit candidate arguments, matched by type.

        Raises:
            UnknownTargetTypeError: If ``target`` does not resolve to a class.
            UnresolvableParameterTypeError: If a required parameter has no type.
            AutowireParameterUnresolvedError: If a parameter type is neither
                among ``args`` nor aliased in the container.

        Examples:
            .. code-block:: python

                controller = container.build(Controller)
                controller_with_double = container.build(Controller, FakeLogger())

        """
        return ControllerBuilder(self, target, args).build()

    # endregion Resolution

    @contextmanager
    def _locked(self) -> Iterator[None]:
        lock = self._lock if self._lock_mode is LockMode.THREAD else nullcontext()
        with lock:
            yield

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(providers={len(self._providers)}, "
            f"aliases={len(self._aliases)}, enabled={len(self._enabled_services)})"
        )


__all__ = ["ServiceContainer"]
