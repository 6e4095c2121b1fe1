# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Binding Registry.

Declaration-time store mapping (service type, method name) to the class
bindings, protocol method bindings, parameter bindings and method-level
middleware declared for it. The handler compiler reads this table at
bootstrap to build ``ModelRegistryEntry`` objects.

Design Pattern:
    The registry follows the "freeze after init" pattern:
    1. Registration phase: record bindings during import/startup
    2. Freeze: the orchestrator calls freeze() at bootstrap
    3. Execution phase: lock-free reads

    The registry is an explicit object, never a module global; every
    orchestrator receives the registry it should compile from.

Merge Semantics:
    - Class bindings: shallow merge per transport key (keys present are
      replaced, absent keys untouched)
    - Method bindings: keyed by protocol tag; recording a tag replaces only
      that tag, other tags of the same method are untouched
    - Parameter bindings and middleware: appended, never deduplicated here
      (index rules are enforced by the handler compiler)

Thread Safety:
    - Write methods are protected by threading.Lock
    - After freeze(), any write raises BindingConfigurationError
    - Read accessors return the stored containers; callers must not mutate
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from omnibase_dispatch.enums import EnumParameterSource, EnumProtocolTag
from omnibase_dispatch.errors import BindingConfigurationError
from omnibase_dispatch.models import (
    ModelClassBinding,
    ModelMethodBinding,
    ModelParameterBinding,
)
from omnibase_dispatch.runtime.decorators import (
    CLASS_BINDINGS_ATTR,
    METHOD_BINDINGS_ATTR,
    MIDDLEWARE_ATTR,
    PARAMETER_BINDINGS_ATTR,
    PendingMethodBinding,
    PendingParameterBinding,
)

logger = logging.getLogger(__name__)


class MethodDeclaration:
    """
    Internal record of everything declared for one method.

    This is an implementation detail and not part of the public API.
    """

    __slots__ = ("bindings", "middleware", "parameters")

    def __init__(self) -> None:
        self.bindings: dict[EnumProtocolTag, ModelMethodBinding] = {}
        self.parameters: list[ModelParameterBinding] = []
        self.middleware: list[Any] = []


class BindingRegistry:
    """
    Thread-safe binding declaration store with freeze pattern.

    Example:
        .. code-block:: python

            registry = BindingRegistry()
            registry.record_method_binding(
                Calculator,
                "add",
                ModelMethodBinding(tag=EnumProtocolTag.RPC, identifier="add"),
            )
            registry.record_parameter_binding(
                Calculator, "add", 0, EnumParameterSource.BODY
            )
            registry.freeze()

    Attributes:
        _class_bindings: service type -> transport key -> ModelClassBinding
        _methods: service type -> method name -> MethodDeclaration
        _frozen: If True, writes are rejected
        _lock: Lock protecting write methods
    """

    def __init__(self) -> None:
        self._class_bindings: dict[type, dict[str, ModelClassBinding]] = {}
        self._methods: dict[type, dict[str, MethodDeclaration]] = {}
        self._frozen: bool = False
        self._lock: threading.Lock = threading.Lock()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _check_writable(self, service_type: type, operation: str) -> None:
        # Caller holds the lock.
        if self._frozen:
            raise BindingConfigurationError(
                f"Cannot {operation} on a frozen binding registry",
                service_type=service_type.__name__,
            )

    def _declaration(self, service_type: type, method_name: str) -> MethodDeclaration:
        methods = self._methods.setdefault(service_type, {})
        declaration = methods.get(method_name)
        if declaration is None:
            declaration = MethodDeclaration()
            methods[method_name] = declaration
        return declaration

    def record_class_binding(
        self,
        service_type: type,
        partial_config: Mapping[str, ModelClassBinding | Mapping[str, Any]],
    ) -> None:
        """Merge per-transport class configuration into the service type.

        Args:
            service_type: The service class.
            partial_config: transport key -> ModelClassBinding (or a mapping
                with ``enabled``/``options``). Keys present replace the
                stored binding for that transport; absent keys are untouched.

        Raises:
            BindingConfigurationError: If frozen or a value is malformed.
        """
        resolved: dict[str, ModelClassBinding] = {}
        for config_key, value in partial_config.items():
            if isinstance(value, ModelClassBinding):
                resolved[config_key] = value
                continue
            try:
                resolved[config_key] = ModelClassBinding.model_validate(value)
            except ValidationError as e:
                raise BindingConfigurationError(
                    f"Invalid class binding for transport {config_key!r}",
                    service_type=service_type.__name__,
                    error_count=e.error_count(),
                ) from e

        with self._lock:
            self._check_writable(service_type, "record class binding")
            self._class_bindings.setdefault(service_type, {}).update(resolved)

    def record_method_binding(
        self,
        service_type: type,
        method_name: str,
        binding: ModelMethodBinding,
    ) -> None:
        """Insert or replace the binding at ``binding.tag`` for a method."""
        with self._lock:
            self._check_writable(service_type, "record method binding")
            bindings = self._declaration(service_type, method_name).bindings
            if binding.tag in bindings:
                logger.debug(
                    "Replacing %s binding of %s.%s",
                    binding.tag.value,
                    service_type.__name__,
                    method_name,
                    extra={
                        "method_name": method_name,
                        "protocol_tag": binding.tag.value,
                    },
                )
            bindings[binding.tag] = binding

    def record_parameter_binding(
        self,
        service_type: type,
        method_name: str,
        index: int,
        source: EnumParameterSource | str,
        key: str | None = None,
    ) -> None:
        """Append a parameter binding. Indices are not checked here."""
        try:
            parameter = ModelParameterBinding(
                index=index, source=EnumParameterSource(source), key=key
            )
        except (ValueError, ValidationError) as e:
            raise BindingConfigurationError(
                f"Invalid parameter binding for {service_type.__name__}.{method_name}",
                service_type=service_type.__name__,
                method_name=method_name,
                parameter_index=index,
            ) from e

        with self._lock:
            self._check_writable(service_type, "record parameter binding")
            self._declaration(service_type, method_name).parameters.append(parameter)

    def record_method_middleware(
        self,
        service_type: type,
        method_name: str,
        *middleware: Any,
    ) -> None:
        """Append method-level middleware shared by all of the method's bindings."""
        with self._lock:
            self._check_writable(service_type, "record method middleware")
            self._declaration(service_type, method_name).middleware.extend(middleware)

    def register_service(self, cls: type) -> type:
        """Record the decorator-stamped bindings found on ``cls``.

        Only the class's own namespace is read; inherited attributes are
        ignored. Usable as a class decorator (applied last, i.e. topmost).

        Returns:
            ``cls`` unchanged.
        """
        class_bindings = cls.__dict__.get(CLASS_BINDINGS_ATTR)
        if class_bindings:
            self.record_class_binding(cls, class_bindings)

        recorded = 0
        for attr_name, attr in vars(cls).items():
            func = attr.__func__ if isinstance(attr, (staticmethod, classmethod)) else attr
            if not callable(func):
                continue
            own = getattr(func, "__dict__", {})
            pending_bindings: list[PendingMethodBinding] = own.get(METHOD_BINDINGS_ATTR, [])
            pending_parameters: list[PendingParameterBinding] = own.get(
                PARAMETER_BINDINGS_ATTR, []
            )
            middleware_groups: list[tuple[Any, ...]] = own.get(MIDDLEWARE_ATTR, [])

            # Decorators apply bottom-up; reverse to restore source order.
            for pending in reversed(pending_bindings):
                self.record_method_binding(
                    cls, attr_name, self._resolve_binding(cls, attr_name, pending)
                )
            for pending_parameter in reversed(pending_parameters):
                self.record_parameter_binding(
                    cls,
                    attr_name,
                    pending_parameter.index,
                    pending_parameter.source,
                    pending_parameter.key,
                )
            for group in reversed(middleware_groups):
                self.record_method_middleware(cls, attr_name, *group)
            if pending_bindings:
                recorded += 1

        logger.debug(
            "Registered service %s with %d bound methods",
            cls.__name__,
            recorded,
            extra={"service_type": cls.__name__, "method_count": recorded},
        )
        return cls

    @staticmethod
    def _resolve_binding(
        cls: type, method_name: str, pending: PendingMethodBinding
    ) -> ModelMethodBinding:
        try:
            return ModelMethodBinding(
                tag=pending.tag,
                identifier=pending.identifier or method_name,
                **pending.fields,
            )
        except ValidationError as e:
            raise BindingConfigurationError(
                f"Invalid {pending.tag.value} binding on {cls.__name__}.{method_name}",
                service_type=cls.__name__,
                method_name=method_name,
                error_count=e.error_count(),
            ) from e

    def freeze(self) -> None:
        """Reject all further writes. Idempotent."""
        with self._lock:
            self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_class_bindings(self, service_type: type) -> dict[str, ModelClassBinding]:
        return self._class_bindings.get(service_type, {})

    def get_method_bindings(
        self, service_type: type, method_name: str
    ) -> dict[EnumProtocolTag, ModelMethodBinding]:
        declaration = self._methods.get(service_type, {}).get(method_name)
        return declaration.bindings if declaration is not None else {}

    def get_parameter_bindings(
        self, service_type: type, method_name: str
    ) -> list[ModelParameterBinding]:
        declaration = self._methods.get(service_type, {}).get(method_name)
        return declaration.parameters if declaration is not None else []

    def get_method_middleware(self, service_type: type, method_name: str) -> list[Any]:
        declaration = self._methods.get(service_type, {}).get(method_name)
        return declaration.middleware if declaration is not None else []

    def list_methods(self, service_type: type) -> list[str]:
        """Return declared method names in declaration order."""
        return list(self._methods.get(service_type, {}))

    def list_services(self) -> list[type]:
        """Return every service type with at least one declaration."""
        seen = dict.fromkeys(self._class_bindings)
        seen.update(dict.fromkeys(self._methods))
        return list(seen)

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._methods or service_type in self._class_bindings


__all__ = ["BindingRegistry", "MethodDeclaration"]
