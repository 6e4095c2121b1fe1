# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Sample services used as ``module:attr`` targets in kernel and CLI tests."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.decorators import (
    command,
    get,
    param,
    rpc,
    rpc_service,
    stdio,
    stream_endpoint,
)
from omnibase_dispatch.runtime.orchestrator import ServiceOrchestrator
from omnibase_dispatch.transports.rpc_adapter import RpcTransportAdapter
from omnibase_dispatch.transports.stdio_adapter import StdioTransportAdapter

registry = BindingRegistry()


class ModelEchoArgs(BaseModel):
    msg: str = Field(description="Message to echo")


@registry.register_service
@stdio()
class EchoService:
    """Command-line echo service."""

    @command("echo", schema=ModelEchoArgs, description="Echo a message")
    @param(0, "body")
    def echo(self, args: ModelEchoArgs) -> str:
        return args.msg


@registry.register_service
@rpc_service(port=0, host="127.0.0.1")
class CalculatorService:
    """RPC calculator without parameter bindings."""

    @rpc("add")
    def add(self, a: int, b: int) -> int:
        return a + b


@registry.register_service
class LintedService:
    """Service with definition mistakes for the validator."""

    @get("/items")
    @param(0, "body")
    def list_items(self, body: dict) -> list:
        return []

    @stream_endpoint("/feed", method="POST")
    @param(0, "body")
    def feed(self, body: dict) -> list:
        return []


def build_calculator() -> ServiceOrchestrator:
    """Factory target returning a ready orchestrator."""
    orchestrator = ServiceOrchestrator(
        CalculatorService(), registry=registry, name="calculator"
    )
    orchestrator.register_transport(RpcTransportAdapter(), {"host": "127.0.0.1", "port": 0})
    return orchestrator


def build_echo() -> ServiceOrchestrator:
    """Factory target whose stdio transport takes its arguments from the kernel."""
    orchestrator = ServiceOrchestrator(EchoService(), registry=registry, name="echo")
    orchestrator.register_transport(StdioTransportAdapter(stdin_isatty=lambda: False))
    return orchestrator


NOT_A_SERVICE = 42
