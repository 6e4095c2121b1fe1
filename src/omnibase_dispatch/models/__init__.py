# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Models Module.

Pydantic models for bindings, compiled registry entries, per-request views
and outcomes, wire frames and runtime configuration.
"""

from omnibase_dispatch.models.model_class_binding import ModelClassBinding
from omnibase_dispatch.models.model_cli_context import ModelCliContext
from omnibase_dispatch.models.model_dispatch_outcome import ModelDispatchOutcome
from omnibase_dispatch.models.model_dispatch_runtime_config import (
    ModelDispatchRuntimeConfig,
)
from omnibase_dispatch.models.model_http_context import ModelHttpContext
from omnibase_dispatch.models.model_method_binding import ModelMethodBinding
from omnibase_dispatch.models.model_parameter_binding import ModelParameterBinding
from omnibase_dispatch.models.model_registry_entry import ModelRegistryEntry
from omnibase_dispatch.models.model_request_view import ModelRequestView
from omnibase_dispatch.models.model_rpc_call_context import ModelRpcCallContext
from omnibase_dispatch.models.model_rpc_config import ModelRpcConfig
from omnibase_dispatch.models.model_rpc_request import ModelRpcRequest
from omnibase_dispatch.models.model_rpc_response import ModelRpcResponse
from omnibase_dispatch.models.model_schema_validation_result import (
    ModelSchemaValidationResult,
)
from omnibase_dispatch.models.model_socket_event_context import (
    ModelSocketEventContext,
)
from omnibase_dispatch.models.model_sse_event import ModelSseEvent
from omnibase_dispatch.models.model_stdio_config import ModelStdioConfig
from omnibase_dispatch.models.model_transport_config import ModelTransportConfig
from omnibase_dispatch.models.model_validation_suggestion import (
    ModelValidationSuggestion,
)
from omnibase_dispatch.models.model_webservice_config import ModelWebServiceConfig
from omnibase_dispatch.models.model_websocket_config import ModelWebSocketConfig

__all__: list[str] = [
    "ModelClassBinding",
    "ModelCliContext",
    "ModelDispatchOutcome",
    "ModelDispatchRuntimeConfig",
    "ModelHttpContext",
    "ModelMethodBinding",
    "ModelParameterBinding",
    "ModelRegistryEntry",
    "ModelRequestView",
    "ModelRpcCallContext",
    "ModelRpcConfig",
    "ModelRpcRequest",
    "ModelRpcResponse",
    "ModelSchemaValidationResult",
    "ModelSocketEventContext",
    "ModelSseEvent",
    "ModelStdioConfig",
    "ModelTransportConfig",
    "ModelValidationSuggestion",
    "ModelWebServiceConfig",
    "ModelWebSocketConfig",
]
