from __future__ import annotations

import inspect

import pytest

import servicewire
import servicewire.exceptions as servicewire_exceptions
import servicewire.integrations.pytest_plugin as servicewire_pytest_plugin


def test_all_is_sorted_and_unique() -> None:
    assert list(servicewire.__all__) == sorted(set(servicewire.__all__))


@pytest.mark.parametrize("name", servicewire.__all__)
def test_exported_names_resolve(name: str) -> None:
    assert getattr(servicewire, name) is not None


def test_every_exception_is_exported() -> None:
    exception_names = {
        name
        for name, value in vars(servicewire_exceptions).items()
        if inspect.isclass(value)
        and issubclass(value, Exception)
        and value.__module__ == servicewire_exceptions.__name__
    }

    assert exception_names <= set(servicewire.__all__)


def test_pytest_plugin_exports_fixtures() -> None:
    assert servicewire_pytest_plugin.__all__ == [
        "service_container",
        "service_provider_arguments",
    ]


def test_container_public_methods() -> None:
    public_methods = {
        name
        for name, value in vars(servicewire.ServiceContainer).items()
        if callable(value) and not name.startswith("_")
    }

    assert public_methods == {
        "add",
        "add_build_plan",
        "build",
        "find_build_plan",
        "get",
        "get_by_alias",
        "get_provider",
        "has",
        "has_alias",
    }
