# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""ONEX Dispatch - annotation-driven handlers served over many transports.

One service class declares its methods once and is served over a command
line shell, HTTP endpoints, server-sent event streams, WebSocket events and
socket RPC, all through the same invocation pipeline.

Key Components:
    - runtime.decorators / runtime.binding_builder: Binding declaration
    - runtime.binding_registry.BindingRegistry: Declaration table, frozen at bootstrap
    - runtime.dispatch_pipeline.DispatchPipeline: Bind, validate, middleware, invoke
    - runtime.orchestrator.ServiceOrchestrator: Service and transport lifecycle
    - transports: Stdio, web service and RPC adapters plus the RPC client
    - runtime.kernel: Process entry point with signal handling
"""

__all__: list[str] = []
