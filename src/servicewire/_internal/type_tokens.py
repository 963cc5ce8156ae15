from __future__ import annotations

import importlib
import types
from typing import Annotated, Any, TypeAlias, TypeGuard, Union, get_args, get_origin

TypeToken: TypeAlias = type[Any] | str
"""A class, or a dotted import path (``pkg.module.Class`` / ``pkg.module:Class``) naming one."""

_NONE_TYPE = type(None)
_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


class UnresolvedTypeTokenError(LookupError):
    """Raised when a type token does not name an importable class."""

    def __init__(self, token: object, reason: str) -> None:
        self.token = token
        super().__init__(f"Type token {token!r} {reason}.")


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_instance_of(value: object, annotation: Any) -> bool:
    """Return whether ``value`` satisfies ``annotation`` by exact type or is-a relation.

    Annotations that are not runtime classes, and protocols that are not
    runtime checkable, never match.

    Args:
        value: Candidate object.
        annotation: Resolved parameter annotation.

    """
    annotation = unwrap_annotated(annotation)
    if type(value) is annotation:
        return True
    if not is_runtime_class(annotation):
        return False
    try:
        return isinstance(value, annotation)
    except TypeError:
        return False


def unwrap_annotated(annotation: Any) -> Any:
    """Recursively unwrap ``Annotated[T, ...]`` into ``T``."""
    if get_origin(annotation) is not Annotated:
        return annotation
    return unwrap_annotated(get_args(annotation)[0])


def unwrap_optional(annotation: Any) -> Any:
    """Unwrap ``T | None`` and ``Optional[T]`` into ``T``; other annotations are returned as is."""
    if get_origin(annotation) not in _UNION_ORIGINS:
        return annotation
    members = [member for member in get_args(annotation) if member is not _NONE_TYPE]
    if len(members) != 1:
        return annotation
    return unwrap_annotated(members[0])


def type_name(token: object) -> str:
    if isinstance(token, str):
        return token
    module = getattr(token, "__module__", None)
    qualname = getattr(token, "__qualname__", None)
    if qualname is None:
        return repr(token)
    if module in {None, "builtins"}:
        return qualname
    return f"{module}.{qualname}"


def resolve_type_token(token: object) -> type[Any]:
    """Resolve a type token into a runtime class.

    Args:
        token: A class or a dotted import path string.

    Raises:
        UnresolvedTypeTokenError: If the token is neither a class nor a path to one.

    """
    if is_runtime_class(token):
        return token
    if not isinstance(token, str) or not token.strip():
        raise UnresolvedTypeTokenError(token, "is not a class or an import path")

    resolved = _import_object(token.strip())
    if not is_runtime_class(resolved):
        raise UnresolvedTypeTokenError(token, "does not name a class")
    return resolved


def _import_object(path: str) -> Any:
    if ":" in path:
        module_name, _, qualname = path.partition(":")
        module = _import_module(path, module_name)
        return _get_qualified_attribute(path, module, qualname)

    parts = path.split(".")
    # Longest importable module prefix wins: "pkg.mod.Outer.Inner".
    for split_at in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split_at])
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as error:
            if error.name is not None and module_name.startswith(error.name):
                continue
            raise UnresolvedTypeTokenError(path, "failed to import") from error
        except ImportError as error:
            raise UnresolvedTypeTokenError(path, "failed to import") from error
        return _get_qualified_attribute(path, module, ".".join(parts[split_at:]))

    raise UnresolvedTypeTokenError(path, "is not an importable path")


def _import_module(path: str, module_name: str) -> types.ModuleType:
    try:
        return importlib.import_module(module_name)
    except ImportError as error:
        raise UnresolvedTypeTokenError(path, "failed to import") from error


def _get_qualified_attribute(path: str, owner: Any, qualname: str) -> Any:
    value = owner
    for attribute in qualname.split("."):
        try:
            value = getattr(value, attribute)
        except AttributeError as error:
            raise UnresolvedTypeTokenError(path, "does not exist") from error
    return value


__all__ = [
    "TypeToken",
    "UnresolvedTypeTokenError",
    "is_instance_of",
    "is_runtime_class",
    "resolve_type_token",
    "type_name",
    "unwrap_annotated",
    "unwrap_optional",
]
