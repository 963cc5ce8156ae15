from __future__ import annotations

import inspect
from collections.abc import Sequence
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, get_type_hints

from servicewire._internal.type_tokens import unwrap_annotated, unwrap_optional
from servicewire.exceptions import UnknownTargetTypeError, UnresolvableParameterTypeError

MISSING_ANNOTATION: Any = object()
"""Sentinel for an optional parameter without a usable annotation."""

_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class ConstructorParameter:
    """Represent one autowirable constructor parameter with its resolved type."""

    name: str
    annotation: Any
    kind: Any
    default: Any = Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not Parameter.empty

    @property
    def is_typed(self) -> bool:
        return self.annotation is not MISSING_ANNOTATION


@dataclass(slots=True)
class ConstructorSignatureExtractor:
    """Extracts typed constructor parameters from build targets."""

    def extract(self, target: type[Any]) -> tuple[ConstructorParameter, ...]:
        """Return the constructor parameters of ``target`` in declaration order.

        Variadic parameters are skipped. Optional parameters without a usable
        annotation are returned with ``MISSING_ANNOTATION``.

        Args:
            target: Class whose constructor is inspected.

        Raises:
            UnknownTargetTypeError: If the constructor signature cannot be read.
            UnresolvableParameterTypeError: If a required parameter has no usable annotation.

        """
        parameters = self.signature_parameters(target)
        annotations, annotation_error = self._resolved_type_hints(target)

        return tuple(
            ConstructorParameter(
                name=parameter.name,
                annotation=self._resolve_parameter_annotation(
                    target=target,
                    parameter=parameter,
                    annotations=annotations,
                    annotation_error=annotation_error,
                ),
                kind=parameter.kind,
                default=parameter.default,
            )
            for parameter in parameters
        )

    def bind_declared(
        self,
        target: type[Any],
        dependencies: Sequence[Any],
    ) -> tuple[ConstructorParameter, ...]:
        """Map declared dependency types positionally onto the constructor parameters.

        Args:
            target: Class whose constructor is inspected.
            dependencies: Ordered dependency types, one per leading parameter.

        Raises:
            ValueError: If the declaration has more entries than parameters or
                leaves a required parameter undeclared.

        """
        parameters = self.signature_parameters(target)
        if len(dependencies) > len(parameters):
            msg = (
                f"{len(dependencies)} dependencies declared but the constructor "
                f"accepts {len(parameters)} parameters"
            )
            raise ValueError(msg)

        undeclared = [
            parameter.name
            for parameter in parameters[len(dependencies) :]
            if parameter.default is Parameter.empty
        ]
        if undeclared:
            missing = ", ".join(f"'{name}'" for name in undeclared)
            msg = f"missing required parameters: {missing}"
            raise ValueError(msg)

        return tuple(
            ConstructorParameter(
                name=parameter.name,
                annotation=unwrap_annotated(dependency),
                kind=parameter.kind,
                default=parameter.default,
            )
            for parameter, dependency in zip(parameters, dependencies)
        )

    def signature_parameters(self, target: type[Any]) -> tuple[Parameter, ...]:
        try:
            signature = inspect.signature(target)
        except (TypeError, ValueError) as error:
            raise UnknownTargetTypeError(target, "has no inspectable constructor") from error
        return tuple(
            parameter
            for parameter in signature.parameters.values()
            if parameter.kind not in _VARIADIC_KINDS
        )

    def _resolve_parameter_annotation(
        self,
        *,
        target: type[Any],
        parameter: Parameter,
        annotations: dict[str, Any],
        annotation_error: Exception | None,
    ) -> Any:
        annotation = annotations.get(parameter.name, MISSING_ANNOTATION)
        if annotation is not MISSING_ANNOTATION:
            return unwrap_optional(unwrap_annotated(annotation))

        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return unwrap_optional(unwrap_annotated(raw_annotation))

        if parameter.default is not Parameter.empty:
            return MISSING_ANNOTATION

        if annotation_error is None:
            raise UnresolvableParameterTypeError(target, parameter.name)
        raise UnresolvableParameterTypeError(
            target,
            parameter.name,
            detail=str(annotation_error),
        ) from annotation_error

    def _resolved_type_hints(
        self,
        target: type[Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        annotations: dict[str, Any] = {}
        annotation_error: Exception | None = None

        # Constructor hints first; class-level hints fill gaps (dataclass-style models).
        for source in (
            getattr(target, "__init__", None),
            getattr(target, "__new__", None),
            target,
        ):
            if source is None:
                continue
            try:
                source_annotations = get_type_hints(source, include_extras=True)
            except (AttributeError, NameError, TypeError) as error:
                if annotation_error is None:
                    annotation_error = error
                continue
            for name, annotation in source_annotations.items():
                annotations.setdefault(name, annotation)

        annotations.pop("return", None)
        return annotations, annotation_error


__all__ = [
    "MISSING_ANNOTATION",
    "ConstructorParameter",
    "ConstructorSignatureExtractor",
]
