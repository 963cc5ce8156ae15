from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from inspect import Parameter
from typing import TYPE_CHECKING, Any, Generic, TypeAlias, TypeVar

from servicewire._internal.signatures import ConstructorParameter, ConstructorSignatureExtractor
from servicewire._internal.type_tokens import (
    TypeToken,
    UnresolvedTypeTokenError,
    is_instance_of,
    resolve_type_token,
    type_name,
)
from servicewire.exceptions import (
    AliasNotFoundError,
    AutowireParameterUnresolvedError,
    UnknownTargetTypeError,
)

if TYPE_CHECKING:
    from typing_extensions import Self

    from servicewire.container import ServiceContainer

T = TypeVar("T")

logger = logging.getLogger(__name__)
_USE_DEFAULT: Any = object()


class SelfCreating(ABC):
    """Opt a class out of constructor autowiring.

    ``ServiceContainer.build`` calls ``create`` with the container as the only
    argument and returns its result. Explicit build arguments are ignored.

    Examples:
        .. code-block:: python

            class ReportController(SelfCreating):
                def __init__(self, repository: Repository, page_size: int) -> None: ...

                @classmethod
                def create(cls, container: ServiceContainer) -> Self:
                    return cls(container.get("repository"), page_size=50)

    """

    @classmethod
    @abstractmethod
    def create(cls, container: ServiceContainer) -> Self:
        """Build an instance from the container."""


@dataclass(frozen=True, slots=True)
class FactoryBacked(Generic[T]):
    """Build plan that delegates construction to ``factory(container)``."""

    factory: Callable[[ServiceContainer], T]


@dataclass(frozen=True, slots=True)
class ConstructorBacked:
    """Build plan that autowires constructor parameters in declaration order."""

    parameters: tuple[ConstructorParameter, ...]


ConstructionPlan: TypeAlias = FactoryBacked[Any] | ConstructorBacked


@dataclass(slots=True)
class ConstructionPlanner:
    """Choose how a build target is constructed.

    A plan declared on the container wins. Otherwise ``SelfCreating``
    subclasses are factory-backed and every other class is constructor-backed
    with parameter types taken from its signature.
    """

    signature_extractor: ConstructorSignatureExtractor

    def plan_for(self, target: type[Any], container: ServiceContainer) -> ConstructionPlan:
        """Return the construction plan for ``target``.

        Args:
            target: Class to construct.
            container: Container holding declared build plans.

        Raises:
            UnknownTargetTypeError: If ``target`` subclasses ``SelfCreating``
                without implementing ``create``.

        """
        declared_plan = container.find_build_plan(target)
        if declared_plan is not None:
            return declared_plan
        if issubclass(target, SelfCreating):
            if "create" in getattr(target, "__abstractmethods__", ()):
                raise UnknownTargetTypeError(target, "does not implement SelfCreating.create")
            return FactoryBacked(factory=target.create)
        return ConstructorBacked(parameters=self.signature_extractor.extract(target))


class ControllerBuilder:
    """Construct one class by resolving its constructor parameter types.

    Each parameter is satisfied by the first explicit argument that is of the
    parameter type (or an instance of a subtype), and otherwise by the service
    the container has aliased to that type. Explicit arguments are never
    consumed, so one argument may satisfy several parameters.

    Builders are one-shot and keep no cache: every ``build`` re-resolves all
    parameters, so explicit arguments can override registered services per
    call (for example with test doubles).
    """

    def __init__(
        self,
        container: ServiceContainer,
        target: TypeToken,
        args: Iterable[Any] = (),
    ) -> None:
        """Prepare a builder for ``target``.

        Args:
            container: Container consulted for parameters without explicit arguments.
            target: Class to construct, or a dotted import path naming it.
            args: Explicit candidate arguments, in priority order.

        Raises:
            UnknownTargetTypeError: If ``target`` does not resolve to a class.

        """
        try:
            self._target = resolve_type_token(target)
        except UnresolvedTypeTokenError as error:
            raise UnknownTargetTypeError(target) from error
        self._container = container
        self._args = tuple(args)
        self._planner = ConstructionPlanner(signature_extractor=ConstructorSignatureExtractor())

    @property
    def target(self) -> type[Any]:
        return self._target

    def get_constructor_parameters(self) -> tuple[ConstructorParameter, ...]:
        """Return the constructor parameters with their resolved types.

        Declared dependency types take precedence over signature annotations.
        """
        plan = self._container.find_build_plan(self._target)
        if isinstance(plan, ConstructorBacked):
            return plan.parameters
        return self._planner.signature_extractor.extract(self._target)

    def build(self) -> Any:
        """Construct the target.

        Construction is all-or-nothing: the target is only instantiated once
        every parameter is resolved.

        Raises:
            UnresolvableParameterTypeError: If a required parameter has no type.
            AutowireParameterUnresolvedError: If a parameter type is neither
                among the explicit arguments nor aliased in the container.

        """
        plan = self._planner.plan_for(self._target, self._container)
        if isinstance(plan, FactoryBacked):
            logger.debug("Building %s through its factory", type_name(self._target))
            return plan.factory(self._container)

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in plan.parameters:
            value = self._resolve_parameter(parameter)
            if value is _USE_DEFAULT:
                if parameter.kind is Parameter.POSITIONAL_ONLY:
                    args.append(parameter.default)
                continue
            if parameter.kind is Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        logger.debug(
            "Building %s with %d autowired parameters",
            type_name(self._target),
            len(args) + len(kwargs),
        )
        return self._target(*args, **kwargs)

    def _resolve_parameter(self, parameter: ConstructorParameter) -> Any:
        if not parameter.is_typed:
            return _USE_DEFAULT

        for arg in self._args:
            if is_instance_of(arg, parameter.annotation):
                return arg

        try:
            return self._container.get_by_alias(parameter.annotation)
        except AliasNotFoundError as error:
            if parameter.has_default:
                return _USE_DEFAULT
            raise AutowireParameterUnresolvedError(
                self._target,
                parameter.name,
                parameter.annotation,
            ) from error

    def __repr__(self) -> str:
        return f"ControllerBuilder(target={type_name(self._target)})"


__all__ = [
    "ConstructionPlan",
    "ConstructionPlanner",
    "ConstructorBacked",
    "ControllerBuilder",
    "FactoryBacked",
    "SelfCreating",
]
