# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Unit tests for DispatchPipeline.

Tests each dispatch status and the global/method/binding middleware order.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from pydantic import BaseModel

from omnibase_dispatch.enums import (
    EnumDispatchStatus,
    EnumParameterSource,
    EnumProtocolTag,
    EnumTransportKind,
)
from omnibase_dispatch.errors import HandlerExecutionError
from omnibase_dispatch.models import (
    ModelMethodBinding,
    ModelParameterBinding,
    ModelRegistryEntry,
    ModelRequestView,
)
from omnibase_dispatch.runtime.dispatch_pipeline import DispatchPipeline
from omnibase_dispatch.runtime.invocation_context import InvocationContext

CallNext = Callable[[], Awaitable[Any]]


class ModelGreeting(BaseModel):
    name: str


def make_context() -> InvocationContext:
    return InvocationContext(
        service_name="greeter",
        transport=EnumTransportKind.WEBSERVICE,
        methods={},
    )


def make_entry(
    handler: Callable[..., Any],
    *,
    middleware: tuple[Any, ...] = (),
) -> tuple[ModelRegistryEntry, ModelMethodBinding]:
    binding = ModelMethodBinding(
        tag=EnumProtocolTag.HTTP_ENDPOINT,
        identifier="/greet",
        http_method="POST",
        payload_schema=ModelGreeting,
    )
    entry = ModelRegistryEntry(
        name="greet",
        handler=handler,
        bindings={EnumProtocolTag.HTTP_ENDPOINT: binding},
        parameters=(ModelParameterBinding(index=0, source=EnumParameterSource.BODY),),
        middleware=middleware,
        arity=1,
    )
    return entry, binding


class TestDispatchStatuses:
    """Tests for the outcome of each dispatch path."""

    @pytest.mark.asyncio
    async def test_success_passes_validated_model(self) -> None:
        """The handler receives the schema instance, not the raw dict."""
        received: list[Any] = []

        def greet(context: InvocationContext, args: ModelGreeting) -> str:
            received.append(args)
            return f"hello {args.name}"

        entry, binding = make_entry(greet)
        outcome = await DispatchPipeline().dispatch(
            make_context(), entry, binding, ModelRequestView(body={"name": "ada"})
        )

        assert outcome.status is EnumDispatchStatus.SUCCESS
        assert outcome.result == "hello ada"
        assert outcome.handler_invoked
        assert isinstance(received[0], ModelGreeting)

    @pytest.mark.asyncio
    async def test_validation_failure_skips_handler(self) -> None:
        """Rejected payloads never reach the handler."""
        called = False

        def greet(context: InvocationContext, args: ModelGreeting) -> None:
            nonlocal called
            called = True

        entry, binding = make_entry(greet)
        outcome = await DispatchPipeline().dispatch(
            make_context(), entry, binding, ModelRequestView(body={})
        )

        assert outcome.status is EnumDispatchStatus.VALIDATION_FAILED
        assert outcome.field_errors == {"name": ["Field required"]}
        assert not outcome.handler_invoked
        assert not called

    @pytest.mark.asyncio
    async def test_handler_error_is_wrapped(self) -> None:
        """Handler exceptions become HANDLER_ERROR with the cause chained."""

        async def greet(context: InvocationContext, args: ModelGreeting) -> None:
            raise ValueError("name taken")

        entry, binding = make_entry(greet)
        outcome = await DispatchPipeline().dispatch(
            make_context(), entry, binding, ModelRequestView(body={"name": "ada"})
        )

        assert outcome.status is EnumDispatchStatus.HANDLER_ERROR
        assert isinstance(outcome.error, HandlerExecutionError)
        assert isinstance(outcome.error.__cause__, ValueError)
        assert outcome.error_message == "name taken"
        assert outcome.handler_invoked

    @pytest.mark.asyncio
    async def test_short_circuit_returns_context_response(self) -> None:
        """A middleware that does not continue ends the chain."""

        def deny(context: InvocationContext, call_next: CallNext) -> None:
            context.response = {"status": 401}

        entry, binding = make_entry(lambda context, args: "unreachable")
        pipeline = DispatchPipeline(global_middleware=[deny])

        outcome = await pipeline.dispatch(
            make_context(), entry, binding, ModelRequestView(body={"name": "ada"})
        )

        assert outcome.status is EnumDispatchStatus.SHORT_CIRCUITED
        assert outcome.result == {"status": 401}
        assert not outcome.handler_invoked

    @pytest.mark.asyncio
    async def test_passthrough_args_skip_binding_and_validation(self) -> None:
        """Explicit args are passed as-is."""
        entry = ModelRegistryEntry(
            name="add", handler=lambda context, a, b: a + b, arity=2
        )

        outcome = await DispatchPipeline().dispatch(
            make_context(), entry, None, ModelRequestView(), args=[2, 3]
        )

        assert outcome.result == 5

    @pytest.mark.asyncio
    async def test_context_is_populated(self) -> None:
        """The context carries the entry, binding and request view."""
        seen: dict[str, Any] = {}

        def greet(context: InvocationContext, args: ModelGreeting) -> None:
            seen["method"] = context.method_name
            seen["binding"] = context.binding
            seen["body"] = context.request.body

        entry, binding = make_entry(greet)
        await DispatchPipeline().dispatch(
            make_context(), entry, binding, ModelRequestView(body={"name": "ada"})
        )

        assert seen == {"method": "greet", "binding": binding, "body": {"name": "ada"}}


class TestMiddlewareOrder:
    """Tests for chain assembly."""

    @pytest.mark.asyncio
    async def test_global_then_method_then_binding(self) -> None:
        """Global middleware is outermost, binding middleware innermost."""
        log: list[str] = []

        def named(name: str) -> Callable[..., Any]:
            async def middleware(context: InvocationContext, call_next: CallNext) -> Any:
                log.append(name)
                return await call_next()

            return middleware

        binding = ModelMethodBinding(
            tag=EnumProtocolTag.RPC, identifier="ping", middleware=(named("binding"),)
        )
        entry = ModelRegistryEntry(
            name="ping",
            handler=lambda context: log.append("handler"),
            bindings={EnumProtocolTag.RPC: binding},
            middleware=(named("method"),),
        )
        pipeline = DispatchPipeline(global_middleware=[named("global")])

        await pipeline.dispatch(make_context(), entry, binding, ModelRequestView())

        assert log == ["global", "method", "binding", "handler"]


class ModelOrder(BaseModel):
    item: str
    quantity: int


class TestBodyValidation:
    """Tests for schema validation of body-bound parameters."""

    @pytest.mark.asyncio
    async def test_keyed_body_reads_validated_fields(self) -> None:
        """The whole body is validated; keyed parameters read the coerced fields."""
        binding = ModelMethodBinding(
            tag=EnumProtocolTag.COMMAND, identifier="order", payload_schema=ModelOrder
        )
        entry = ModelRegistryEntry(
            name="order",
            handler=lambda context, item, quantity: [item, quantity],
            bindings={EnumProtocolTag.COMMAND: binding},
            parameters=(
                ModelParameterBinding(index=0, source=EnumParameterSource.BODY, key="item"),
                ModelParameterBinding(
                    index=1, source=EnumParameterSource.BODY, key="quantity"
                ),
            ),
            arity=2,
        )

        outcome = await DispatchPipeline().dispatch(
            make_context(),
            entry,
            binding,
            ModelRequestView(body={"item": "pen", "quantity": "3"}),
        )

        assert outcome.status is EnumDispatchStatus.SUCCESS
        assert outcome.result == ["pen", 3]

    @pytest.mark.asyncio
    async def test_keyed_body_validation_failure_names_field(self) -> None:
        binding = ModelMethodBinding(
            tag=EnumProtocolTag.COMMAND, identifier="order", payload_schema=ModelOrder
        )
        entry = ModelRegistryEntry(
            name="order",
            handler=lambda context, item: item,
            bindings={EnumProtocolTag.COMMAND: binding},
            parameters=(
                ModelParameterBinding(index=0, source=EnumParameterSource.BODY, key="item"),
            ),
            arity=1,
        )

        outcome = await DispatchPipeline().dispatch(
            make_context(), entry, binding, ModelRequestView(body={"item": "pen"})
        )

        assert outcome.status is EnumDispatchStatus.VALIDATION_FAILED
        assert outcome.field_errors == {"quantity": ["Field required"]}
