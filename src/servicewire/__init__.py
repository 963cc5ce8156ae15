from servicewire.builder import (
    ConstructionPlan,
    ConstructorBacked,
    ControllerBuilder,
    FactoryBacked,
    SelfCreating,
)
from servicewire.container import ServiceContainer
from servicewire.exceptions import (
    AliasNotFoundError,
    AutowireParameterUnresolvedError,
    InvalidBuildPlanError,
    ProviderNotFoundError,
    ServiceNotFoundError,
    ServiceTypeMismatchError,
    ServiceWireError,
    UnknownAliasTypeError,
    UnknownProviderTypeError,
    UnknownTargetTypeError,
    UnresolvableParameterTypeError,
)
from servicewire.lock_mode import LockMode
from servicewire.providers import ProviderArguments, ServiceProvider

__all__ = [
    "AliasNotFoundError",
    "AutowireParameterUnresolvedError",
    "ConstructionPlan",
    "ConstructorBacked",
    "ControllerBuilder",
    "FactoryBacked",
    "InvalidBuildPlanError",
    "LockMode",
    "ProviderArguments",
    "ProviderNotFoundError",
    "SelfCreating",
    "ServiceContainer",
    "ServiceNotFoundError",
    "ServiceProvider",
    "ServiceTypeMismatchError",
    "ServiceWireError",
    "UnknownAliasTypeError",
    "UnknownProviderTypeError",
    "UnknownTargetTypeError",
    "UnresolvableParameterTypeError",
]
