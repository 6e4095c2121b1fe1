# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Runtime Module.

Binding declaration, handler compilation and the invocation pipeline.

Exports:
    BindingRegistry: Thread-safe store of class, method and parameter bindings
    ServiceBindingBuilder: Explicit registration API equivalent to the decorators
    DispatchPipeline: Bind, validate, run middleware and invoke one handler
    InvocationContext: Per-request context passed to middleware
    MiddlewareExecutor: Ordered middleware chain runner
    SchemaValidator: Payload validation against pydantic models or types
    ServiceOrchestrator: Service lifecycle and transport coordination

The kernel and configuration loader live in ``runtime.kernel`` and
``runtime.config_loader``; they depend on the transports package and are
not re-exported here.
"""

from omnibase_dispatch.runtime.argument_binder import bind_arguments, resolve_source
from omnibase_dispatch.runtime.binding_builder import ServiceBindingBuilder
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.decorators import (
    command,
    delete,
    get,
    http_endpoint,
    param,
    patch,
    post,
    put,
    rpc,
    rpc_service,
    socket_event,
    stdio,
    stream_endpoint,
    tool_call,
    transport,
    use_middleware,
    webservice,
)
from omnibase_dispatch.runtime.dispatch_pipeline import DispatchPipeline
from omnibase_dispatch.runtime.handler_compiler import (
    compile_handlers,
    compile_plain_handler,
    handler_arity,
)
from omnibase_dispatch.runtime.invocation_context import InvocationContext
from omnibase_dispatch.runtime.middleware_executor import (
    Middleware,
    MiddlewareExecutor,
    normalize_middleware,
)
from omnibase_dispatch.runtime.orchestrator import (
    ServiceOrchestrator,
    merge_transport_config,
)
from omnibase_dispatch.runtime.schema_validator import SchemaValidator

__all__: list[str] = [
    "BindingRegistry",
    "DispatchPipeline",
    "InvocationContext",
    "Middleware",
    "MiddlewareExecutor",
    "SchemaValidator",
    "ServiceBindingBuilder",
    "ServiceOrchestrator",
    "bind_arguments",
    "command",
    "compile_handlers",
    "compile_plain_handler",
    "delete",
    "get",
    "handler_arity",
    "http_endpoint",
    "merge_transport_config",
    "normalize_middleware",
    "param",
    "patch",
    "post",
    "put",
    "resolve_source",
    "rpc",
    "rpc_service",
    "socket_event",
    "stdio",
    "stream_endpoint",
    "tool_call",
    "transport",
    "use_middleware",
    "webservice",
]
