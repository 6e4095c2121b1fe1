# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Service Binding Builder.

Fluent, decorator-free way to declare bindings for a service type. Useful
for services whose classes cannot be decorated (third-party classes, or
bindings assembled from configuration).

Example:
    .. code-block:: python

        (
            ServiceBindingBuilder(registry, Calculator)
            .transport("rpc", port=8080)
            .method("add")
            .rpc()
            .command(schema=ModelAddArgs)
            .param(0, EnumParameterSource.BODY)
            .method("ping")
            .rpc()
        )
"""

from __future__ import annotations

from typing import Any

from omnibase_dispatch.enums import EnumParameterSource, EnumProtocolTag
from omnibase_dispatch.errors import BindingConfigurationError
from omnibase_dispatch.models import ModelClassBinding, ModelMethodBinding
from omnibase_dispatch.runtime.binding_registry import BindingRegistry


class ServiceBindingBuilder:
    """Records bindings for one service type into a registry."""

    def __init__(self, registry: BindingRegistry, service_type: type) -> None:
        self._registry = registry
        self._service_type = service_type
        self._method_name: str | None = None

    @property
    def service_type(self) -> type:
        return self._service_type

    def transport(
        self, config_key: str, enabled: bool = True, **options: Any
    ) -> ServiceBindingBuilder:
        self._registry.record_class_binding(
            self._service_type,
            {config_key: ModelClassBinding(enabled=enabled, options=options)},
        )
        return self

    def method(self, name: str) -> ServiceBindingBuilder:
        """Select the method subsequent binding calls apply to."""
        if not name:
            raise BindingConfigurationError(
                "Method name must not be empty",
                service_type=self._service_type.__name__,
            )
        self._method_name = name
        return self

    def _current(self) -> str:
        if self._method_name is None:
            raise BindingConfigurationError(
                "Call method() before declaring bindings",
                service_type=self._service_type.__name__,
            )
        return self._method_name

    def bind(
        self,
        tag: EnumProtocolTag,
        identifier: str | None = None,
        **fields: Any,
    ) -> ServiceBindingBuilder:
        """Record a binding for the selected method.

        ``fields`` are ``ModelMethodBinding`` fields (``http_method``,
        ``payload_schema``, ``description``, ...).
        """
        name = self._current()
        self._registry.record_method_binding(
            self._service_type,
            name,
            ModelMethodBinding(tag=tag, identifier=identifier or name, **fields),
        )
        return self

    def command(self, name: str | None = None, **fields: Any) -> ServiceBindingBuilder:
        return self.bind(EnumProtocolTag.COMMAND, name, **_schema_alias(fields))

    def tool_call(self, name: str | None = None, **fields: Any) -> ServiceBindingBuilder:
        return self.bind(EnumProtocolTag.TOOL_CALL, name, **_schema_alias(fields))

    def rpc(self, name: str | None = None, **fields: Any) -> ServiceBindingBuilder:
        return self.bind(EnumProtocolTag.RPC, name, **_schema_alias(fields))

    def socket_event(
        self, event: str | None = None, **fields: Any
    ) -> ServiceBindingBuilder:
        return self.bind(EnumProtocolTag.SOCKET_EVENT, event, **_schema_alias(fields))

    def http(self, method: str, path: str, **fields: Any) -> ServiceBindingBuilder:
        return self.bind(
            EnumProtocolTag.HTTP_ENDPOINT,
            path,
            http_method=method,
            **_schema_alias(fields),
        )

    def stream(self, path: str, method: str = "GET", **fields: Any) -> ServiceBindingBuilder:
        return self.bind(
            EnumProtocolTag.STREAM_ENDPOINT,
            path,
            http_method=method,
            **_schema_alias(fields),
        )

    def param(
        self,
        index: int,
        source: EnumParameterSource | str,
        key: str | None = None,
    ) -> ServiceBindingBuilder:
        self._registry.record_parameter_binding(
            self._service_type, self._current(), index, source, key
        )
        return self

    def middleware(self, *middleware: Any) -> ServiceBindingBuilder:
        self._registry.record_method_middleware(
            self._service_type, self._current(), *middleware
        )
        return self


def _schema_alias(fields: dict[str, Any]) -> dict[str, Any]:
    if "schema" in fields:
        fields = dict(fields)
        fields["payload_schema"] = fields.pop("schema")
    if "middleware" in fields:
        fields["middleware"] = tuple(fields["middleware"])
    return fields


__all__ = ["ServiceBindingBuilder"]
