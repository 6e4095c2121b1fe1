# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Errors Module.

This module provides the error classes raised by the dispatch runtime and
the RegistrationWarning category for non-fatal registration problems.

Exports:
    ModelDispatchErrorContext: Bundled error context model
    DispatchError: Base dispatch error class
    PayloadValidationError: Schema rejected the request payload
    HandlerNotFoundError: No registry entry for an identifier
    HandlerExecutionError: Handler or middleware failed
    MiddlewareChainError: Middleware misused its continuation
    BindingConfigurationError: Invalid binding declarations
    DispatchConfigurationError: Invalid runtime configuration
    TransportStartupError: Listener failed to bind/initialize
    RpcCallError: Remote RPC error (client side)
    RpcTimeoutError: RPC response not received in time (client side)
    RegistrationWarning: Non-fatal registration warning category

Correlation ID Assignment:
    Adapters generate one correlation ID per inbound message (uuid4) and
    attach it to the invocation context and to every error raised while
    handling that message. RPC messages additionally carry the client's own
    request id, which is kept separately in the RPC call context.

Error Sanitization Guidelines:
    NEVER include in error messages or context:
        - Request payloads or field values
        - Header, cookie or session contents

    SAFE to include:
        - Transport, operation and identifier names
        - Correlation IDs
        - Field names and error counts
"""

from omnibase_dispatch.errors.dispatch_errors import (
    BindingConfigurationError,
    DispatchConfigurationError,
    DispatchError,
    HandlerExecutionError,
    HandlerNotFoundError,
    MiddlewareChainError,
    PayloadValidationError,
    RegistrationWarning,
    RpcCallError,
    RpcTimeoutError,
    TransportStartupError,
    warn_registration,
)
from omnibase_dispatch.errors.model_dispatch_error_context import (
    ModelDispatchErrorContext,
)

__all__: list[str] = [
    "BindingConfigurationError",
    "DispatchConfigurationError",
    "DispatchError",
    "HandlerExecutionError",
    "HandlerNotFoundError",
    "MiddlewareChainError",
    "ModelDispatchErrorContext",
    "PayloadValidationError",
    "RegistrationWarning",
    "RpcCallError",
    "RpcTimeoutError",
    "TransportStartupError",
    "warn_registration",
]
