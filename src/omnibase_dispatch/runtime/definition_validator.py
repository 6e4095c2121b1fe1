# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Service Definition Validator.

Static checks over the declarations recorded for one service class. The
validator never raises for a questionable definition; it returns a list of
``ModelValidationSuggestion`` that the ``validate`` CLI command prints.

Codes:
    DISPATCH-VAL-SSE001 (warning): Stream endpoint with a body parameter
    DISPATCH-VAL-SCHEMA001 (warning): Schema declared, handler takes no parameters
    DISPATCH-VAL-SCHEMA002 (warning): Schema declared, no body/query/path parameter
    DISPATCH-VAL-HTTP001 (error): GET/DELETE endpoint with a body parameter

Usage:
    >>> suggestions = validate_service_definition(registry, GreeterService)
    >>> errors = [s for s in suggestions if s.severity is EnumSuggestionSeverity.ERROR]
"""

from __future__ import annotations

import inspect
import logging

from omnibase_dispatch.enums import (
    EnumParameterSource,
    EnumProtocolTag,
    EnumSuggestionSeverity,
)
from omnibase_dispatch.models import ModelValidationSuggestion
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.handler_compiler import handler_arity

logger = logging.getLogger(__name__)

_SCHEMA_SOURCES = frozenset(
    {EnumParameterSource.BODY, EnumParameterSource.QUERY, EnumParameterSource.PATH}
)
_BODYLESS_HTTP_METHODS = frozenset({"GET", "DELETE"})


def _declared_arity(service_type: type, method_name: str) -> int | None:
    """Return the parameter count excluding ``self``, or None if unknown."""
    raw = inspect.getattr_static(service_type, method_name, None)
    if raw is None:
        return None
    if isinstance(raw, staticmethod):
        arity, variadic = handler_arity(raw.__func__)
    elif isinstance(raw, classmethod):
        arity, variadic = handler_arity(raw.__func__, skip=1)
    elif callable(raw):
        arity, variadic = handler_arity(raw, skip=1)
    else:
        return None
    return None if variadic else arity


def validate_service_definition(
    registry: BindingRegistry, service_type: type
) -> list[ModelValidationSuggestion]:
    """Check the declarations of ``service_type`` for likely mistakes.

    Args:
        registry: Registry holding the service's declarations.
        service_type: Service class to check.

    Returns:
        Suggestions in method declaration order. Empty when nothing was
        found or the service has no declarations.
    """
    suggestions: list[ModelValidationSuggestion] = []

    for method_name in registry.list_methods(service_type):
        bindings = registry.get_method_bindings(service_type, method_name)
        parameters = registry.get_parameter_bindings(service_type, method_name)
        body_parameters = [
            p for p in parameters if p.source is EnumParameterSource.BODY
        ]

        if EnumProtocolTag.STREAM_ENDPOINT in bindings:
            for parameter in body_parameters:
                suggestions.append(
                    ModelValidationSuggestion(
                        severity=EnumSuggestionSeverity.WARNING,
                        code="DISPATCH-VAL-SSE001",
                        message=(
                            f"Stream endpoint '{method_name}' binds the request body; "
                            "streams are usually opened with query or path parameters"
                        ),
                        method_name=method_name,
                        parameter_index=parameter.index,
                    )
                )

        schema_tags = [tag for tag, binding in bindings.items() if binding.has_schema]
        if schema_tags:
            tag_label = schema_tags[0].value
            arity = _declared_arity(service_type, method_name)
            if arity == 0:
                suggestions.append(
                    ModelValidationSuggestion(
                        severity=EnumSuggestionSeverity.WARNING,
                        code="DISPATCH-VAL-SCHEMA001",
                        message=(
                            f"'{tag_label}' binding declares a schema but the handler "
                            "takes no parameters"
                        ),
                        method_name=method_name,
                    )
                )
            elif not any(p.source in _SCHEMA_SOURCES for p in parameters):
                suggestions.append(
                    ModelValidationSuggestion(
                        severity=EnumSuggestionSeverity.WARNING,
                        code="DISPATCH-VAL-SCHEMA002",
                        message=(
                            f"'{tag_label}' binding declares a schema but no parameter "
                            "is bound to body, query or path"
                        ),
                        method_name=method_name,
                    )
                )

        http_binding = bindings.get(EnumProtocolTag.HTTP_ENDPOINT)
        if http_binding is not None and http_binding.http_method in _BODYLESS_HTTP_METHODS:
            for parameter in body_parameters:
                suggestions.append(
                    ModelValidationSuggestion(
                        severity=EnumSuggestionSeverity.ERROR,
                        code="DISPATCH-VAL-HTTP001",
                        message=(
                            f"HTTP {http_binding.http_method} endpoint binds the "
                            "request body; these requests carry no body"
                        ),
                        method_name=method_name,
                        parameter_index=parameter.index,
                    )
                )

    logger.debug(
        "Validated service definition %s: %d suggestions",
        service_type.__name__,
        len(suggestions),
        extra={"service_type": service_type.__name__, "suggestion_count": len(suggestions)},
    )
    return suggestions


__all__ = ["validate_service_definition"]
