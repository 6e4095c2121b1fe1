# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Unit tests for binding declaration decorators and ServiceBindingBuilder.

Tests that decorators only stamp data and that register_service() records
it in source order, plus the builder form of the same declarations.
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from omnibase_dispatch.enums import EnumParameterSource, EnumProtocolTag
from omnibase_dispatch.errors import BindingConfigurationError
from omnibase_dispatch.runtime.binding_builder import ServiceBindingBuilder
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.decorators import (
    METHOD_BINDINGS_ATTR,
    command,
    http_endpoint,
    param,
    post,
    rpc,
    rpc_service,
    socket_event,
    stdio,
    use_middleware,
    webservice,
)


class ModelCreateArgs(BaseModel):
    name: str


def mw_first(context: object, call_next: object) -> None: ...


def mw_second(context: object, call_next: object) -> None: ...


class TestDecoratorsStampOnly:
    """Decorators never write to a registry."""

    def test_decorated_method_carries_pending_binding(self) -> None:
        """A method decorator stamps a pending binding on the function."""

        @rpc("add")
        def add(self: object, a: int, b: int) -> int:
            return a + b

        pending = add.__dict__[METHOD_BINDINGS_ATTR]
        assert len(pending) == 1
        assert pending[0].tag is EnumProtocolTag.RPC
        assert pending[0].identifier == "add"

    def test_unregistered_class_is_absent_from_registry(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Decorating without register_service() records nothing."""

        @stdio()
        class Unregistered:
            @command()
            def run(self) -> None: ...

        assert Unregistered not in binding_registry
        assert binding_registry.list_services() == []

    def test_empty_identifier_raises(self) -> None:
        """An explicitly empty identifier is rejected at declaration."""
        with pytest.raises(BindingConfigurationError):
            rpc("")

    def test_unknown_param_source_raises(self) -> None:
        """param() rejects sources outside the closed set."""
        with pytest.raises(BindingConfigurationError, match="Unknown parameter source"):
            param(0, "payload")

    def test_key_on_keyless_source_raises(self) -> None:
        """Whole-object sources do not take a key."""
        with pytest.raises(BindingConfigurationError, match="does not accept a key"):
            param(0, "context", "user")


class TestRegisterService:
    """Tests for BindingRegistry.register_service()."""

    def test_bindings_recorded_with_defaults_and_fields(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Identifiers default to the method name; decorator fields are kept."""

        @binding_registry.register_service
        class Users:
            @post("/users", schema=ModelCreateArgs, description="Create a user")
            @socket_event()
            @param(0, "body")
            def create(self, args: ModelCreateArgs) -> dict:
                return {}

        bindings = binding_registry.get_method_bindings(Users, "create")

        http = bindings[EnumProtocolTag.HTTP_ENDPOINT]
        assert http.identifier == "/users"
        assert http.http_method == "POST"
        assert http.payload_schema is ModelCreateArgs
        assert http.description == "Create a user"
        assert bindings[EnumProtocolTag.SOCKET_EVENT].identifier == "create"

    def test_parameters_and_middleware_in_source_order(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Stacked decorators are recorded top-to-bottom as written."""

        @binding_registry.register_service
        class Orders:
            @rpc()
            @use_middleware(mw_first)
            @use_middleware(mw_second)
            @param(0, "body")
            @param(1, EnumParameterSource.HEADERS, "x-tenant")
            def place(self, body: dict, tenant: str) -> None: ...

        parameters = binding_registry.get_parameter_bindings(Orders, "place")
        assert [p.index for p in parameters] == [0, 1]
        assert parameters[1].key == "x-tenant"
        assert binding_registry.get_method_middleware(Orders, "place") == [
            mw_first,
            mw_second,
        ]

    def test_class_bindings_recorded(self, binding_registry: BindingRegistry) -> None:
        """Class decorators become class bindings keyed by transport."""

        @binding_registry.register_service
        @rpc_service(port=9000)
        @webservice(enabled=False)
        class Mixed:
            @rpc()
            def ping(self) -> str:
                return "pong"

        bindings = binding_registry.get_class_bindings(Mixed)

        assert bindings["rpc"].enabled is True
        assert bindings["rpc"].options == {"port": 9000}
        assert bindings["webservice"].enabled is False

    def test_inherited_handlers_are_ignored(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Only the class's own namespace is read."""

        class Base:
            @rpc()
            def inherited(self) -> None: ...

        @binding_registry.register_service
        class Child(Base):
            @rpc()
            def own(self) -> None: ...

        assert binding_registry.list_methods(Child) == ["own"]

    def test_static_methods_are_registered(
        self, binding_registry: BindingRegistry
    ) -> None:
        """staticmethod-wrapped handlers are unwrapped for reading."""

        @binding_registry.register_service
        class Tools:
            @staticmethod
            @rpc("version")
            def version() -> str:
                return "1"

        assert EnumProtocolTag.RPC in binding_registry.get_method_bindings(Tools, "version")

    def test_invalid_http_method_raises(self, binding_registry: BindingRegistry) -> None:
        """A verb outside the supported set fails at registration."""
        with pytest.raises(BindingConfigurationError):

            @binding_registry.register_service
            class Broken:
                @http_endpoint("/x", "FETCH")
                def fetch(self) -> None: ...

    def test_register_after_freeze_raises(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Registering a decorated service into a frozen registry fails."""
        binding_registry.freeze()

        with pytest.raises(BindingConfigurationError, match="frozen"):

            @binding_registry.register_service
            class Late:
                @rpc()
                def late(self) -> None: ...


class TestServiceBindingBuilder:
    """Tests for the fluent builder."""

    def test_builder_records_same_shape_as_decorators(
        self, binding_registry: BindingRegistry
    ) -> None:
        """The builder produces class, method and parameter bindings."""

        class Calculator:
            def add(self, args: ModelCreateArgs) -> int:
                return 0

        (
            ServiceBindingBuilder(binding_registry, Calculator)
            .transport("rpc", port=8080)
            .method("add")
            .rpc()
            .command("sum", schema=ModelCreateArgs)
            .http("post", "/add")
            .param(0, "body")
            .middleware(mw_first)
        )

        bindings = binding_registry.get_method_bindings(Calculator, "add")
        assert bindings[EnumProtocolTag.RPC].identifier == "add"
        assert bindings[EnumProtocolTag.COMMAND].identifier == "sum"
        assert bindings[EnumProtocolTag.COMMAND].payload_schema is ModelCreateArgs
        assert bindings[EnumProtocolTag.HTTP_ENDPOINT].http_method == "POST"
        assert binding_registry.get_class_bindings(Calculator)["rpc"].options == {
            "port": 8080
        }
        assert binding_registry.get_method_middleware(Calculator, "add") == [mw_first]

    def test_binding_before_method_raises(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Declaring a binding without selecting a method fails."""
        builder = ServiceBindingBuilder(binding_registry, object)

        with pytest.raises(BindingConfigurationError, match="method"):
            builder.rpc()
