# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Handler Compiler.

Builds the transport-agnostic ``ModelRegistryEntry`` map for one service
instance from the declaration table a ``BindingRegistry`` holds for the
instance's type. Runs exactly once per service instance, during
orchestrator bootstrap.

Compilation Rules:
    - Declared methods without protocol bindings are not handlers and are
      skipped
    - A declared name that is not a callable attribute of the instance is
      skipped with a RegistrationWarning
    - Each handler is bound to the instance and wrapped into the uniform
      ``(context, *args)`` callable
    - Duplicate parameter indices, and indices at or beyond the arity of a
      non-variadic handler, raise BindingConfigurationError
    - A schema pydantic cannot build a validator for raises
      BindingConfigurationError
    - A schema that no body-bound parameter consumes is a RegistrationWarning
    - Compiling a name already present in ``entries`` replaces the entry
      (last wins) and logs a warning
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, MutableMapping, Sequence
from typing import Any

from pydantic import PydanticUserError

from omnibase_dispatch.enums import EnumParameterSource, EnumProtocolTag
from omnibase_dispatch.errors import BindingConfigurationError, warn_registration
from omnibase_dispatch.models import (
    ModelMethodBinding,
    ModelParameterBinding,
    ModelRegistryEntry,
)
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.schema_validator import SchemaValidator

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def handler_arity(func: Callable[..., Any], *, skip: int = 0) -> tuple[int, bool]:
    """Return ``(positional parameter count, accepts *args)`` of ``func``.

    Args:
        func: Callable to inspect.
        skip: Leading parameters to ignore (``self``, ``context``).
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return 0, True
    positional = [p for p in signature.parameters.values() if p.kind in _POSITIONAL_KINDS]
    variadic = any(
        p.kind is inspect.Parameter.VAR_POSITIONAL for p in signature.parameters.values()
    )
    return max(len(positional) - skip, 0), variadic


def check_parameter_indices(
    method_name: str,
    parameters: Sequence[ModelParameterBinding],
    arity: int,
    variadic: bool,
) -> tuple[ModelParameterBinding, ...]:
    """Validate parameter indices and return them ordered by index.

    Raises:
        BindingConfigurationError: On duplicate or out-of-range indices.
    """
    seen: set[int] = set()
    for parameter in parameters:
        if parameter.index in seen:
            raise BindingConfigurationError(
                f"Duplicate parameter binding index {parameter.index} on {method_name}",
                method_name=method_name,
                parameter_index=parameter.index,
            )
        seen.add(parameter.index)
        if not variadic and parameter.index >= arity:
            raise BindingConfigurationError(
                f"Parameter binding index {parameter.index} is out of range for "
                f"{method_name} (arity {arity})",
                method_name=method_name,
                parameter_index=parameter.index,
            )
    return tuple(sorted(parameters, key=lambda p: p.index))


def _warn_unconsumed_schema(
    method_name: str,
    bindings: dict[EnumProtocolTag, ModelMethodBinding],
    parameters: Sequence[ModelParameterBinding],
) -> None:
    if any(p.source is EnumParameterSource.BODY for p in parameters):
        return
    tags = [tag.value for tag, binding in bindings.items() if binding.has_schema]
    if tags:
        warn_registration(
            logger,
            f"Schema declared on {method_name} ({', '.join(tags)}) but no "
            "parameter is bound to the request body; the schema is never applied",
            stacklevel=4,
            method_name=method_name,
        )


def check_schemas(
    method_name: str,
    bindings: dict[EnumProtocolTag, ModelMethodBinding],
) -> None:
    """Build every binding schema once so unusable schemas fail at bootstrap.

    Raises:
        BindingConfigurationError: If pydantic cannot validate against a schema.
    """
    validator = SchemaValidator()
    for tag, binding in bindings.items():
        if not binding.has_schema:
            continue
        try:
            validator.prepare(binding.payload_schema)
        except (PydanticUserError, TypeError) as e:
            raise BindingConfigurationError(
                f"Schema of {method_name} ({tag.value}) is not a valid payload schema: "
                f"{type(e).__name__}",
                method_name=method_name,
                tag=tag.value,
            ) from e


def _wrap(bound: Callable[..., Any]) -> Callable[..., Any]:
    def handler(context: Any, *args: Any) -> Any:
        return bound(*args)

    handler.__name__ = getattr(bound, "__name__", "handler")
    handler.__qualname__ = getattr(bound, "__qualname__", handler.__name__)
    handler.__wrapped__ = bound  # type: ignore[attr-defined]
    return handler


def register_entry(
    entries: MutableMapping[str, ModelRegistryEntry],
    entry: ModelRegistryEntry,
) -> None:
    """Insert ``entry`` into ``entries``; an existing name is replaced with a warning."""
    if entry.name in entries:
        warn_registration(
            logger,
            f"Method {entry.name!r} is already registered; replacing it",
            stacklevel=4,
            method_name=entry.name,
        )
    entries[entry.name] = entry


def compile_handlers(
    instance: object,
    registry: BindingRegistry,
    entries: MutableMapping[str, ModelRegistryEntry] | None = None,
) -> MutableMapping[str, ModelRegistryEntry]:
    """Compile the registry entries of ``instance``.

    Args:
        instance: Service instance.
        registry: Registry holding the declarations of ``type(instance)``.
        entries: Existing entry map to compile into (created when None).

    Returns:
        The entry map, keyed by method name.

    Raises:
        BindingConfigurationError: On invalid parameter indices or schemas.
    """
    service_type = type(instance)
    result: MutableMapping[str, ModelRegistryEntry] = entries if entries is not None else {}

    for method_name in registry.list_methods(service_type):
        bindings = registry.get_method_bindings(service_type, method_name)
        if not bindings:
            continue

        bound = getattr(instance, method_name, None)
        if bound is None or not callable(bound):
            warn_registration(
                logger,
                f"{service_type.__name__}.{method_name} has bindings but is not a "
                "callable attribute; skipping",
                stacklevel=3,
                method_name=method_name,
            )
            continue

        arity, variadic = handler_arity(bound)
        parameters = check_parameter_indices(
            method_name,
            registry.get_parameter_bindings(service_type, method_name),
            arity,
            variadic,
        )
        check_schemas(method_name, bindings)
        _warn_unconsumed_schema(method_name, bindings, parameters)

        entry = ModelRegistryEntry(
            name=method_name,
            handler=_wrap(bound),
            bindings=dict(bindings),
            parameters=parameters,
            middleware=tuple(registry.get_method_middleware(service_type, method_name)),
            arity=arity,
            variadic=variadic,
        )
        register_entry(result, entry)
        logger.debug(
            "Compiled handler %s.%s (%s)",
            service_type.__name__,
            method_name,
            ", ".join(tag.value for tag in bindings),
            extra={"method_name": method_name, "arity": arity},
        )

    return result


def compile_plain_handler(name: str, handler: Callable[..., Any]) -> ModelRegistryEntry:
    """Build an entry for a handler registered with ``ServiceOrchestrator.method``.

    The handler already has the ``(context, *args)`` signature and is
    served over RPC under ``name``.
    """
    if not callable(handler):
        raise BindingConfigurationError(
            f"Handler for method {name!r} is not callable",
            method_name=name,
        )
    arity, variadic = handler_arity(handler, skip=1)
    return ModelRegistryEntry(
        name=name,
        handler=handler,
        bindings={
            EnumProtocolTag.RPC: ModelMethodBinding(tag=EnumProtocolTag.RPC, identifier=name)
        },
        arity=arity,
        variadic=variadic,
    )


__all__ = [
    "check_parameter_indices",
    "check_schemas",
    "compile_handlers",
    "compile_plain_handler",
    "handler_arity",
    "register_entry",
]
