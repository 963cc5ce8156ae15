from __future__ import annotations

from typing import Any


def _type_name(value: Any) -> str:
    if isinstance(value, str):
        return value
    return getattr(value, "__qualname__", None) or repr(value)


class ServiceWireError(Exception):
    """Represent a base class for all servicewire failures.

    Catch this type when you want to handle any container or builder error
    without matching each concrete exception class individually.
    """


class ServiceNotFoundError(ServiceWireError, LookupError):
    """Signal that a lookup by id or alias found nothing.

    Catch this type to treat missing providers and missing aliases alike.
    """


class UnknownProviderTypeError(ServiceWireError):
    """Signal a provider token that cannot be resolved or instantiated.

    Raised by ``ServiceContainer.add`` when the token is not importable, is not
    a ``ServiceProvider`` subclass, or its constructor does not accept
    ``(container, provider_arguments)``.
    """

    def __init__(self, provider: Any, reason: str) -> None:
        self.provider = provider
        super().__init__(f"Service provider '{_type_name(provider)}' {reason}.")


class UnknownAliasTypeError(ServiceWireError):
    """Signal an alias that does not resolve to an existing class.

    Raised at registration time by ``ServiceContainer.add`` and by the
    container constructor for entries of its ``aliases`` mapping.
    """

    def __init__(self, alias: Any) -> None:
        self.alias = alias
        super().__init__(f"Alias type '{_type_name(alias)}' does not exist.")


class ProviderNotFoundError(ServiceNotFoundError):
    """Signal that no provider is registered under a service id."""

    def __init__(self, service_id: str) -> None:
        self.service_id = service_id
        super().__init__(f"Service provider '{service_id}' does not exist.")


class AliasNotFoundError(ServiceNotFoundError):
    """Signal that an alias has no service id mapped to it."""

    def __init__(self, alias: Any) -> None:
        self.alias = alias
        super().__init__(f"Alias '{_type_name(alias)}' does not exist.")


class ServiceTypeMismatchError(ServiceWireError):
    """Signal a provider that produced an instance of the wrong type.

    The runtime type must equal the declared service type exactly; subclasses
    are rejected too. The offending instance is discarded and never cached, so
    a later ``get`` calls the provider again.
    """

    def __init__(self, service_id: str, expected_type: Any, actual_type: type[Any]) -> None:
        self.service_id = service_id
        self.expected_type = expected_type
        self.actual_type = actual_type
        super().__init__(
            f"Service '{service_id}' produced '{_type_name(actual_type)}' "
            f"but its provider declares '{_type_name(expected_type)}'.",
        )


class UnknownTargetTypeError(ServiceWireError):
    """Signal a build target that cannot be resolved or inspected."""

    def __init__(self, target: Any, reason: str = "does not exist") -> None:
        self.target = target
        super().__init__(f"Build target '{_type_name(target)}' {reason}.")


class UnresolvableParameterTypeError(ServiceWireError):
    """Signal a required constructor parameter without a usable type annotation.

    Typical fixes are annotating the parameter, giving it a default value, or
    declaring ``dependencies=...`` with ``ServiceContainer.add_build_plan``.
    """

    def __init__(self, target: Any, parameter_name: str, detail: str | None = None) -> None:
        self.target = target
        self.parameter_name = parameter_name
        msg = (
            f"Unable to infer the type of required parameter '{parameter_name}' "
            f"of '{_type_name(target)}'. Add a type annotation or declare a build plan."
        )
        if detail is not None:
            msg = f"{msg} Original annotation error: {detail}"
        super().__init__(msg)


class AutowireParameterUnresolvedError(ServiceWireError):
    """Signal a constructor parameter satisfied neither by arguments nor by the container."""

    def __init__(self, target: Any, parameter_name: str, parameter_type: Any) -> None:
        self.target = target
        self.parameter_name = parameter_name
        self.parameter_type = parameter_type
        super().__init__(
            f"Type '{_type_name(parameter_type)}' is not available for parameter "
            f"'{parameter_name}' of '{_type_name(target)}'.",
        )


class InvalidBuildPlanError(ServiceWireError):
    """Signal a malformed ``ServiceContainer.add_build_plan`` declaration."""

    def __init__(self, target: Any, reason: str) -> None:
        self.target = target
        super().__init__(f"Invalid build plan for '{_type_name(target)}': {reason}.")
