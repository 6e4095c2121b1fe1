# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Error Classes.

Error Hierarchy:
    DispatchError (base dispatch error)
    ├── PayloadValidationError
    ├── HandlerNotFoundError
    ├── HandlerExecutionError
    │   └── MiddlewareChainError
    ├── BindingConfigurationError
    ├── DispatchConfigurationError
    ├── TransportStartupError
    ├── RpcCallError
    │   └── RpcTimeoutError

    RegistrationWarning (UserWarning, logged and issued, never raised)

Propagation:
    - PayloadValidationError and HandlerNotFoundError are resolved inside the
      dispatch pipeline / transport adapter and never escape to process level.
    - HandlerExecutionError escapes only as far as the owning transport adapter,
      which answers the request and emits ``on_error``.
    - BindingConfigurationError, DispatchConfigurationError and
      TransportStartupError abort bootstrap.

All errors:
    - Support error chaining with ``raise ... from e``
    - Accept a ModelDispatchErrorContext for transport/operation/target/correlation
    - Accept extra keyword context kept on ``error.extra_context``
    - Never carry payload contents, only identifiers and counts
"""

from __future__ import annotations

import logging
import warnings
from uuid import UUID

from omnibase_dispatch.errors.model_dispatch_error_context import (
    ModelDispatchErrorContext,
)


class DispatchError(Exception):
    """Base error class for the dispatch runtime.

    Example:
        >>> context = ModelDispatchErrorContext(
        ...     transport=EnumTransportKind.WEBSERVICE,
        ...     operation="listen",
        ...     target_name="0.0.0.0:3000",
        ... )
        >>> raise DispatchError("Operation failed", context=context, retry_count=0)
    """

    def __init__(
        self,
        message: str,
        context: ModelDispatchErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize DispatchError with structured fields.

        Args:
            message: Human-readable error message
            context: Bundled dispatch context (transport, operation, ...)
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message: str = message
        self.context: ModelDispatchErrorContext = (
            context or ModelDispatchErrorContext()
        )
        self.extra_context: dict[str, object] = dict(extra_context)

    @property
    def correlation_id(self) -> UUID | None:
        """Return the correlation ID carried by the error context."""
        return self.context.correlation_id

    def to_log_extra(self) -> dict[str, object]:
        """Return the structured fields as a logging ``extra`` mapping."""
        extra: dict[str, object] = {"error_type": type(self).__name__}
        if self.context.transport is not None:
            extra["transport"] = self.context.transport.value
        if self.context.operation is not None:
            extra["operation"] = self.context.operation
        if self.context.target_name is not None:
            extra["target_name"] = self.context.target_name
        if self.context.correlation_id is not None:
            extra["correlation_id"] = str(self.context.correlation_id)
        extra.update(self.extra_context)
        return extra

    def __str__(self) -> str:
        if self.correlation_id is not None:
            return f"{self.message} (correlation_id={self.correlation_id})"
        return self.message


class PayloadValidationError(DispatchError):
    """Raised when a binding schema rejects the request payload.

    The dispatch pipeline resolves this into a ``validation_failed``
    outcome; the handler is never invoked.

    Example:
        >>> raise PayloadValidationError(
        ...     "Validation failed",
        ...     field_errors={"msg": ["Field required"]},
        ... )
    """

    def __init__(
        self,
        message: str,
        field_errors: dict[str, list[str]] | None = None,
        context: ModelDispatchErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        self.field_errors: dict[str, list[str]] = dict(field_errors or {})
        super().__init__(
            message,
            context=context,
            error_count=len(self.field_errors),
            **extra_context,
        )


class HandlerNotFoundError(DispatchError):
    """Raised when no registry entry matches the requested identifier."""

    def __init__(
        self,
        identifier: str,
        context: ModelDispatchErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        self.identifier: str = identifier
        super().__init__(
            f"No handler registered for {identifier!r}",
            context=context,
            **extra_context,
        )


class HandlerExecutionError(DispatchError):
    """Raised when a handler or middleware fails during dispatch.

    The original exception is chained as ``__cause__``.
    """


class MiddlewareChainError(HandlerExecutionError):
    """Raised when a middleware misuses its continuation."""


class BindingConfigurationError(DispatchError):
    """Raised when binding declarations are invalid.

    Used for:
    - Duplicate parameter binding indices
    - Parameter binding indices beyond a handler's arity
    - Writes to a frozen binding registry
    - Malformed binding declarations
    - Payload schemas pydantic cannot build a validator for
    """


class DispatchConfigurationError(DispatchError):
    """Raised when runtime configuration cannot be loaded or validated."""


class TransportStartupError(DispatchError):
    """Raised when a transport listener fails to bind or initialize.

    This is the only error class allowed to abort the whole service.
    """


class RpcCallError(DispatchError):
    """Raised by the RPC client when the remote side reports an error."""

    def __init__(
        self,
        message: str,
        method: str | None = None,
        request_id: str | None = None,
        context: ModelDispatchErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        self.method: str | None = method
        self.request_id: str | None = request_id
        super().__init__(
            message,
            context=context,
            method=method,
            request_id=request_id,
            **extra_context,
        )


class RpcTimeoutError(RpcCallError):
    """Raised by the RPC client when no response arrives in time."""


class RegistrationWarning(UserWarning):
    """Warning category for non-fatal registration problems.

    Issued for duplicate handler registration, parameter bindings with no
    source on the current transport, and schemas no parameter consumes.
    Never fails a request.
    """


def warn_registration(
    logger: logging.Logger,
    message: str,
    *,
    stacklevel: int = 3,
    **extra: object,
) -> None:
    """Log a registration problem and issue it as a RegistrationWarning.

    Args:
        logger: Logger of the module reporting the problem.
        message: Human-readable warning text.
        stacklevel: Passed to ``warnings.warn``.
        **extra: Structured fields for the log record.
    """
    logger.warning(message, extra={"warning_type": "registration", **extra})
    warnings.warn(message, RegistrationWarning, stacklevel=stacklevel)


__all__ = [
    "BindingConfigurationError",
    "DispatchConfigurationError",
    "DispatchError",
    "HandlerExecutionError",
    "HandlerNotFoundError",
    "MiddlewareChainError",
    "PayloadValidationError",
    "RegistrationWarning",
    "RpcCallError",
    "RpcTimeoutError",
    "TransportStartupError",
    "warn_registration",
]
