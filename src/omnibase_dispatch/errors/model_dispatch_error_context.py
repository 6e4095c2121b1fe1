# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Error Context Model.

This module defines the context model for dispatch errors, bundling the
common structured fields so error constructors keep a short signature
while staying strongly typed.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.enums import EnumTransportKind


class ModelDispatchErrorContext(BaseModel):
    """Structured context attached to every dispatch error.

    Attributes:
        transport: Transport on which the failure happened
        operation: Operation being performed (dispatch, bootstrap, listen, ...)
        target_name: Identifier involved (command, event, path, method name)
        correlation_id: Request correlation ID for tracing

    Example:
        >>> context = ModelDispatchErrorContext(
        ...     transport=EnumTransportKind.RPC,
        ...     operation="dispatch",
        ...     target_name="add",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise HandlerExecutionError("Handler failed", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    transport: EnumTransportKind | None = Field(
        default=None,
        description="Transport on which the failure happened",
    )
    operation: str | None = Field(
        default=None,
        description="Operation being performed (dispatch, bootstrap, listen, ...)",
    )
    target_name: str | None = Field(
        default=None,
        description="Identifier involved (command, event, path, method name)",
    )
    correlation_id: UUID | None = Field(
        default=None,
        description="Request correlation ID for tracing",
    )


__all__ = ["ModelDispatchErrorContext"]
