# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Unit tests for the handler compiler.

Tests entry compilation from registry declarations, parameter index
checks, schema consumption warnings and plain handler registration.
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from omnibase_dispatch.enums import EnumProtocolTag
from omnibase_dispatch.errors import BindingConfigurationError, RegistrationWarning
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.decorators import command, param, rpc
from omnibase_dispatch.runtime.handler_compiler import (
    compile_handlers,
    compile_plain_handler,
    handler_arity,
)


class ModelArgs(BaseModel):
    value: int


class TestCompileHandlers:
    """Tests for compile_handlers()."""

    def test_entries_are_bound_to_instance(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Compiled handlers take (context, *args) and call the bound method."""

        @binding_registry.register_service
        class Counter:
            def __init__(self) -> None:
                self.total = 10

            @rpc()
            def add(self, amount: int) -> int:
                return self.total + amount

            def helper(self) -> None: ...

        entries = compile_handlers(Counter(), binding_registry)

        assert list(entries) == ["add"]
        entry = entries["add"]
        assert entry.arity == 1
        assert not entry.variadic
        assert entry.handler(None, 5) == 15

    def test_duplicate_parameter_index_raises(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Two bindings for the same index are a hard error."""

        @binding_registry.register_service
        class Dup:
            @rpc()
            @param(0, "body")
            @param(0, "query")
            def handle(self, value: object) -> None: ...

        with pytest.raises(BindingConfigurationError, match="Duplicate"):
            compile_handlers(Dup(), binding_registry)

    def test_index_beyond_arity_raises(self, binding_registry: BindingRegistry) -> None:
        """Indices past a fixed-arity handler's parameters are a hard error."""

        @binding_registry.register_service
        class OutOfRange:
            @rpc()
            @param(1, "body")
            def handle(self, value: object) -> None: ...

        with pytest.raises(BindingConfigurationError, match="out of range"):
            compile_handlers(OutOfRange(), binding_registry)

    def test_variadic_handler_accepts_any_index(
        self, binding_registry: BindingRegistry
    ) -> None:
        """*args handlers accept indices beyond their named parameters."""

        @binding_registry.register_service
        class Variadic:
            @rpc()
            @param(3, "body")
            def handle(self, *values: object) -> tuple[object, ...]:
                return values

        entry = compile_handlers(Variadic(), binding_registry)["handle"]

        assert entry.variadic
        assert [p.index for p in entry.parameters] == [3]

    def test_unconsumed_schema_warns(self, binding_registry: BindingRegistry) -> None:
        """A schema with no body-bound parameter issues a RegistrationWarning."""

        @binding_registry.register_service
        class NoBody:
            @command(schema=ModelArgs)
            @param(0, "query", "value")
            def run(self, value: object) -> None: ...

        with pytest.warns(RegistrationWarning, match="never applied"):
            compile_handlers(NoBody(), binding_registry)

    def test_unusable_schema_raises(self, binding_registry: BindingRegistry) -> None:
        """A schema pydantic cannot build a validator for fails at compile time."""

        class Opaque:
            pass

        @binding_registry.register_service
        class BadSchema:
            @rpc(schema=Opaque)
            @param(0, "body")
            def handle(self, value: object) -> None: ...

        with pytest.raises(
            BindingConfigurationError, match="not a valid payload schema"
        ) as exc_info:
            compile_handlers(BadSchema(), binding_registry)

        assert exc_info.value.extra_context["method_name"] == "handle"
        assert exc_info.value.__cause__ is not None

    def test_existing_entry_is_replaced_with_warning(
        self, binding_registry: BindingRegistry
    ) -> None:
        """Compiling a name already in the map replaces it."""

        @binding_registry.register_service
        class Svc:
            @rpc()
            def ping(self) -> str:
                return "new"

        entries = {"ping": compile_plain_handler("ping", lambda ctx: "old")}

        with pytest.warns(RegistrationWarning, match="already registered"):
            compile_handlers(Svc(), binding_registry, entries)

        assert entries["ping"].handler(None) == "new"


class TestPlainHandlers:
    """Tests for compile_plain_handler() and handler_arity()."""

    def test_plain_handler_is_served_over_rpc(self) -> None:
        """Plain handlers get an RPC binding named after the method."""

        def multiply(context: object, a: int, b: int) -> int:
            return a * b

        entry = compile_plain_handler("multiply", multiply)

        assert entry.get_binding(EnumProtocolTag.RPC).identifier == "multiply"
        assert entry.arity == 2
        assert entry.handler(None, 3, 4) == 12

    def test_non_callable_raises(self) -> None:
        with pytest.raises(BindingConfigurationError):
            compile_plain_handler("bad", "not callable")  # type: ignore[arg-type]

    def test_handler_arity_counts_positional(self) -> None:
        def fn(a: int, b: int, *rest: int, flag: bool = False) -> None: ...

        assert handler_arity(fn) == (2, True)
        assert handler_arity(fn, skip=1) == (1, True)
