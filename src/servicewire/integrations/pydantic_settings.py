from __future__ import annotations

import functools
import importlib
import re
import warnings
from typing import Any, ClassVar, Generic, TypeVar

from servicewire._internal.type_tokens import is_runtime_class
from servicewire.providers import ServiceProvider

S = TypeVar("S")

# Each group yields at most one base: the first module that exposes it.
_SETTINGS_MODULE_GROUPS: tuple[tuple[str, ...], ...] = (
    ("pydantic_settings",),
    ("pydantic.v1", "pydantic"),
)
_PYDANTIC_V1_PYTHON_WARNING = r"Core Pydantic V1 functionality isn't compatible with Python"
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def _import_settings_base(module_name: str) -> type[Any] | None:
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=_PYDANTIC_V1_PYTHON_WARNING)
        try:
            module = importlib.import_module(module_name)
            # pydantic 2 raises an ImportError subclass for the moved BaseSettings.
            settings_base = getattr(module, "BaseSettings", None)
        except ImportError:
            return None
    return settings_base if is_runtime_class(settings_base) else None


@functools.cache
def settings_bases() -> tuple[type[Any], ...]:
    """Return the importable ``BaseSettings`` classes, discovered on first use."""
    bases: list[type[Any]] = []
    for module_names in _SETTINGS_MODULE_GROUPS:
        for module_name in module_names:
            settings_base = _import_settings_base(module_name)
            if settings_base is None:
                continue
            if settings_base not in bases:
                bases.append(settings_base)
            break
    return tuple(bases)


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether ``candidate`` is a Pydantic settings model class.

    ``pydantic_settings.BaseSettings`` and the legacy v1 ``BaseSettings`` are
    both recognized. Without Pydantic installed every candidate is rejected.
    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in settings_bases())
    except TypeError:
        return False


def settings_service_id(settings_type: type[Any]) -> str:
    """Derive a snake_case service id from a settings class name."""
    return _CAMEL_BOUNDARY.sub("_", settings_type.__name__).lower()


class SettingsProvider(ServiceProvider[S], Generic[S]):
    """Serve a Pydantic settings class as a container service.

    Subclasses set ``settings_type``; the settings model is instantiated with
    no arguments on first resolution, so values come from the environment and
    the model defaults. The service id defaults to the snake_case class name
    (``AppSettings`` becomes ``app_settings``) unless ``service_id`` is set.

    Examples:
        .. code-block:: python

            class AppSettings(BaseSettings):
                database_url: str = "sqlite://"


            class AppSettingsProvider(SettingsProvider[AppSettings]):
                settings_type = AppSettings


            container = ServiceContainer([AppSettingsProvider])
            settings = container.get_by_alias(AppSettings)

    """

    settings_type: ClassVar[type[Any]]
    service_id: ClassVar[str | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        settings_type = cls.__dict__.get("settings_type")
        if settings_type is None:
            return
        if not is_pydantic_settings_subclass(settings_type):
            msg = (
                f"{cls.__qualname__}.settings_type must be a Pydantic BaseSettings "
                f"subclass, got {settings_type!r}."
            )
            raise TypeError(msg)

    def get_service(self) -> S:
        return self.settings_type()

    def get_service_id(self) -> str:
        if self.service_id is not None:
            return self.service_id
        return settings_service_id(self.settings_type)

    def get_service_type(self) -> type[S]:
        return self.settings_type


__all__ = [
    "SettingsProvider",
    "is_pydantic_settings_subclass",
    "settings_bases",
    "settings_service_id",
]
