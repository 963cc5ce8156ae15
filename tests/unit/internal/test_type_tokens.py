from __future__ import annotations

import collections
import logging
from collections.abc import Mapping
from typing import Annotated, Optional, Protocol, Union, runtime_checkable

import pytest

from servicewire._internal.type_tokens import (
    UnresolvedTypeTokenError,
    is_instance_of,
    is_runtime_class,
    resolve_type_token,
    type_name,
    unwrap_annotated,
    unwrap_optional,
)


class Outer:
    class Inner:
        pass


class Closeable(Protocol):
    def close(self) -> None: ...


@runtime_checkable
class Flushable(Protocol):
    def flush(self) -> None: ...


class Buffer:
    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class TestResolveTypeToken:
    def test_class_is_returned_as_is(self) -> None:
        assert resolve_type_token(Buffer) is Buffer

    @pytest.mark.parametrize(
        "token",
        [
            "collections.OrderedDict",
            "collections:OrderedDict",
            " collections.OrderedDict ",
        ],
    )
    def test_import_paths(self, token: str) -> None:
        assert resolve_type_token(token) is collections.OrderedDict

    def test_nested_class_path(self) -> None:
        assert resolve_type_token(f"{__name__}.Outer.Inner") is Outer.Inner
        assert resolve_type_token(f"{__name__}:Outer.Inner") is Outer.Inner

    def test_package_submodule_path(self) -> None:
        assert resolve_type_token("logging.handlers.RotatingFileHandler").__name__ == (
            "RotatingFileHandler"
        )

    @pytest.mark.parametrize(
        "token",
        [
            "NoSuchType",
            "no.such.module.Type",
            "collections.NoSuchType",
            "collections:NoSuchType",
            "no_such_module:Type",
            "logging.getLogger",
            "",
            42,
            None,
            list[int],
        ],
    )
    def test_unresolvable_tokens(self, token: object) -> None:
        with pytest.raises(UnresolvedTypeTokenError) as exc_info:
            resolve_type_token(token)

        assert exc_info.value.token == token


class TestIsInstanceOf:
    def test_exact_type(self) -> None:
        assert is_instance_of(Buffer(), Buffer)

    def test_subtype(self) -> None:
        assert is_instance_of(collections.OrderedDict(), dict)
        assert is_instance_of({}, Mapping)

    def test_runtime_checkable_protocol(self) -> None:
        assert is_instance_of(Buffer(), Flushable)

    def test_plain_protocol_never_matches(self) -> None:
        assert not is_instance_of(Buffer(), Closeable)

    def test_annotated_is_unwrapped(self) -> None:
        assert is_instance_of(Buffer(), Annotated[Buffer, "meta"])

    def test_non_class_annotations(self) -> None:
        assert not is_instance_of([1], list[int])
        assert not is_instance_of(1, Union[int, str])


class TestUnwrap:
    def test_unwrap_nested_annotated(self) -> None:
        assert unwrap_annotated(Annotated[Annotated[Buffer, "a"], "b"]) is Buffer

    def test_unwrap_plain(self) -> None:
        assert unwrap_annotated(Buffer) is Buffer

    @pytest.mark.parametrize(
        "annotation",
        [Optional[Buffer], Union[Buffer, None], Optional[Annotated[Buffer, "meta"]]],
    )
    def test_unwrap_optional(self, annotation: object) -> None:
        assert unwrap_optional(annotation) is Buffer

    def test_unwrap_optional_keeps_wider_unions(self) -> None:
        annotation = Union[Buffer, Outer, None]

        assert unwrap_optional(annotation) is annotation

    def test_unwrap_optional_pep604(self) -> None:
        assert unwrap_optional(Buffer | None) is Buffer


def test_is_runtime_class() -> None:
    assert is_runtime_class(Buffer)
    assert not is_runtime_class(list[int])
    assert not is_runtime_class("Buffer")


def test_type_name() -> None:
    assert type_name(int) == "int"
    assert type_name(logging.Logger) == "logging.Logger"
    assert type_name("pkg.Type") == "pkg.Type"
    assert type_name(Outer.Inner) == f"{__name__}.Outer.Inner"
